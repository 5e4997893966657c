"""
Pydantic schemas for the FastAPI backend.
"""

from __future__ import annotations

from typing import Literal, Optional

from pydantic import BaseModel, StrictBool, model_validator

from shared.constants import DEFAULT_USER_ROLE


class UserCreateRequest(BaseModel):
    # Presence of name/email is checked by the route so the client gets a
    # single combined message.
    name: Optional[str] = None
    email: Optional[str] = None
    role: str = DEFAULT_USER_ROLE


class TodoCreateRequest(BaseModel):
    title: Optional[str] = None
    description: Optional[str] = None
    completed: StrictBool = False


class TodoUpdateRequest(BaseModel):
    """Partial update. Only the fields present in the body are written."""

    title: Optional[str] = None
    description: Optional[str] = None
    completed: Optional[StrictBool] = None

    @model_validator(mode="after")
    def reject_null_fields(self) -> "TodoUpdateRequest":
        for name in sorted(self.model_fields_set):
            if getattr(self, name) is None:
                raise ValueError(f"{name} cannot be null")
        return self

    def changes(self) -> dict:
        return self.model_dump(exclude_unset=True)


class HealthResponse(BaseModel):
    status: Literal["healthy"]
    timestamp: str
    service: str


class UserListResponse(BaseModel):
    users: list[dict]


class TodoListResponse(BaseModel):
    todos: list[dict]


class MessageResponse(BaseModel):
    message: str


class ErrorResponse(BaseModel):
    error: str
