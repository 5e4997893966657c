"""
Translation of failures into `{"error": message}` JSON responses.

Every route on the API router runs through `ErrorMappingRoute`, so an
exception escaping a platform client becomes an `InternalError` carrying the
client's own message. The handlers registered by `register_exception_handlers`
then render the error kinds with their status codes.
"""

from __future__ import annotations

import logging
from typing import Callable

from fastapi import FastAPI, Request, Response
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from fastapi.routing import APIRoute
from starlette.exceptions import HTTPException as StarletteHTTPException

from backend.errors import ApiError, InternalError

logger = logging.getLogger(__name__)


class ErrorMappingRoute(APIRoute):
    """Route class that turns unexpected handler exceptions into `InternalError`."""

    def get_route_handler(self) -> Callable:
        original_route_handler = super().get_route_handler()

        async def error_mapping_route_handler(request: Request) -> Response:
            try:
                return await original_route_handler(request)
            except (ApiError, RequestValidationError, StarletteHTTPException):
                raise
            except Exception as e:
                logger.exception(
                    "Unhandled error in %s %s", request.method, request.url.path
                )
                raise InternalError(str(e)) from e

        return error_mapping_route_handler


def _format_validation_errors(exc: RequestValidationError) -> str:
    messages = []
    for error in exc.errors():
        location = ".".join(str(part) for part in error.get("loc", ()))
        messages.append(f"{location}: {error.get('msg')}" if location else error.get("msg"))
    return "; ".join(messages) or "Invalid request body"


async def api_error_handler(request: Request, exc: ApiError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
    return JSONResponse(status_code=exc.status_code, content={"error": exc.message})


async def validation_error_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    message = _format_validation_errors(exc)
    logger.info("Rejected %s %s: %s", request.method, request.url.path, message)
    return JSONResponse(status_code=400, content={"error": message})


async def http_error_handler(
    request: Request, exc: StarletteHTTPException
) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": str(exc.detail)},
        headers=getattr(exc, "headers", None),
    )


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(ApiError, api_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)
    app.add_exception_handler(StarletteHTTPException, http_error_handler)
