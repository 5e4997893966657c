"""
HTTP routes for the users/todos API.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Optional

from fastapi import APIRouter, Depends, Request
from google.cloud.firestore_v1 import SERVER_TIMESTAMP

from backend.db import DocumentStore
from backend.dependencies import get_document_store
from backend.error_handlers import ErrorMappingRoute
from backend.errors import (
    DocumentNotFoundError,
    InternalError,
    InvalidInputError,
    NotFoundError,
)
from backend.schemas import (
    ErrorResponse,
    HealthResponse,
    MessageResponse,
    TodoCreateRequest,
    TodoListResponse,
    TodoUpdateRequest,
    UserCreateRequest,
    UserListResponse,
)
from shared.constants import LIST_LIMIT
from shared.firebase_constants import TODOS_COLLECTION, USERS_COLLECTION

logger = logging.getLogger(__name__)

router = APIRouter(
    route_class=ErrorMappingRoute,
    responses={500: {"model": ErrorResponse, "description": "Upstream failure"}},
)


def _with_id(doc_id: str, data: dict) -> dict:
    return {"id": doc_id, **data}


def _list_collection(store: DocumentStore, collection: str) -> list[dict]:
    return [
        _with_id(doc_id, data)
        for doc_id, data in store.list_documents(collection, limit=LIST_LIMIT)
    ]


def _read_back(store: DocumentStore, collection: str, doc_id: str) -> dict:
    """
    Re-read a document after a write so server timestamps come back resolved
    instead of as the SERVER_TIMESTAMP sentinel.
    """
    data = store.get_document(collection, doc_id)
    if data is None:
        raise InternalError(f"Document {collection}/{doc_id} not found after write")
    return _with_id(doc_id, data)


@router.get("/health", response_model=HealthResponse, tags=["health"])
def health_check(request: Request):
    now = datetime.now(timezone.utc)
    return HealthResponse(
        status="healthy",
        timestamp=now.isoformat(timespec="milliseconds").replace("+00:00", "Z"),
        service=request.app.state.settings.service_name,
    )


@router.get("/users", response_model=UserListResponse, tags=["users"])
def list_users(store: DocumentStore = Depends(get_document_store)):
    return UserListResponse(users=_list_collection(store, USERS_COLLECTION))


@router.post(
    "/users",
    status_code=201,
    tags=["users"],
    responses={400: {"model": ErrorResponse}},
)
def create_user(
    payload: Optional[UserCreateRequest] = None,
    store: DocumentStore = Depends(get_document_store),
) -> dict:
    # A request without a body is validated like an empty object.
    if payload is None:
        payload = UserCreateRequest()
    if not payload.name or not payload.email:
        raise InvalidInputError("Name and email are required")

    user_data = {
        "name": payload.name,
        "email": payload.email,
        "role": payload.role,
        "createdAt": SERVER_TIMESTAMP,
        "updatedAt": SERVER_TIMESTAMP,
    }
    doc_id = store.add_document(USERS_COLLECTION, user_data)
    logger.info("Created user %s", doc_id)
    return _read_back(store, USERS_COLLECTION, doc_id)


@router.get(
    "/users/{user_id}", tags=["users"], responses={404: {"model": ErrorResponse}}
)
def get_user(user_id: str, store: DocumentStore = Depends(get_document_store)) -> dict:
    data = store.get_document(USERS_COLLECTION, user_id)
    if data is None:
        raise NotFoundError("User not found")
    return _with_id(user_id, data)


@router.get("/todos", response_model=TodoListResponse, tags=["todos"])
def list_todos(store: DocumentStore = Depends(get_document_store)):
    return TodoListResponse(todos=_list_collection(store, TODOS_COLLECTION))


@router.post(
    "/todos",
    status_code=201,
    tags=["todos"],
    responses={400: {"model": ErrorResponse}},
)
def create_todo(
    payload: Optional[TodoCreateRequest] = None,
    store: DocumentStore = Depends(get_document_store),
) -> dict:
    if payload is None:
        payload = TodoCreateRequest()
    if not payload.title:
        raise InvalidInputError("Title is required")

    todo_data = {
        "title": payload.title,
        "completed": payload.completed,
        "createdAt": SERVER_TIMESTAMP,
        "updatedAt": SERVER_TIMESTAMP,
    }
    if payload.description is not None:
        todo_data["description"] = payload.description

    doc_id = store.add_document(TODOS_COLLECTION, todo_data)
    logger.info("Created todo %s", doc_id)
    return _read_back(store, TODOS_COLLECTION, doc_id)


@router.put(
    "/todos/{todo_id}",
    tags=["todos"],
    responses={400: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
)
def update_todo(
    todo_id: str,
    payload: Optional[TodoUpdateRequest] = None,
    store: DocumentStore = Depends(get_document_store),
) -> dict:
    if payload is None:
        payload = TodoUpdateRequest()
    update_data = payload.changes()
    update_data["updatedAt"] = SERVER_TIMESTAMP
    try:
        store.update_document(TODOS_COLLECTION, todo_id, update_data)
    except DocumentNotFoundError as e:
        raise NotFoundError("Todo not found") from e
    return _read_back(store, TODOS_COLLECTION, todo_id)


@router.delete("/todos/{todo_id}", response_model=MessageResponse, tags=["todos"])
def delete_todo(todo_id: str, store: DocumentStore = Depends(get_document_store)):
    store.delete_document(TODOS_COLLECTION, todo_id)
    logger.info("Deleted todo %s", todo_id)
    return MessageResponse(message="Todo deleted successfully")
