"""
Error kinds shared by the HTTP routes and the callable handlers.
"""

from __future__ import annotations

from enum import Enum


class ErrorKind(str, Enum):
    INVALID_INPUT = "invalid-argument"
    NOT_FOUND = "not-found"
    UNAUTHENTICATED = "unauthenticated"
    INTERNAL = "internal"


HTTP_STATUS_BY_KIND = {
    ErrorKind.INVALID_INPUT: 400,
    ErrorKind.UNAUTHENTICATED: 401,
    ErrorKind.NOT_FOUND: 404,
    ErrorKind.INTERNAL: 500,
}


class ApiError(Exception):
    """Base class for failures surfaced to clients as `{"error": message}`."""

    kind: ErrorKind = ErrorKind.INTERNAL

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    @property
    def status_code(self) -> int:
        return HTTP_STATUS_BY_KIND[self.kind]


class InvalidInputError(ApiError):
    kind = ErrorKind.INVALID_INPUT


class NotFoundError(ApiError):
    kind = ErrorKind.NOT_FOUND


class InternalError(ApiError):
    kind = ErrorKind.INTERNAL


class DocumentNotFoundError(Exception):
    """Raised by a document store when an update targets a missing document."""

    def __init__(self, collection: str, doc_id: str):
        super().__init__(f"No document to update: {collection}/{doc_id}")
        self.collection = collection
        self.doc_id = doc_id
