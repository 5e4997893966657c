"""
Handlers behind the `create_user` and `send_notification` callable functions.

Each handler takes the raw callable payload, the caller context and the
platform client it needs, and returns either a result dataclass or a
`CallableError`. Nothing here raises for an expected failure; `main.py`
converts a `CallableError` into an `https_fn.HttpsError`.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Optional, Type, TypeVar, Union

from dacite import Config, DaciteError, from_dict

from backend.errors import ErrorKind
from backend.identity import IdentityProvider
from backend.messaging import PushMessenger
from shared.api import (
    CreateUserRequest,
    CreateUserResult,
    SendNotificationRequest,
    SendNotificationResult,
)
from shared.json_utils import convert_keys

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass
class CallerContext:
    """Identity of the principal invoking a callable; `uid` is None when anonymous."""

    uid: Optional[str] = None
    token: dict = field(default_factory=dict)

    @classmethod
    def from_auth(cls, auth: Any) -> "CallerContext":
        """Build from a callable request's `auth` attribute (AuthData or None)."""
        if auth is None:
            return cls()
        return cls(uid=auth.uid, token=dict(auth.token or {}))

    @property
    def is_authenticated(self) -> bool:
        return bool(self.uid)


@dataclass
class CallableError:
    kind: ErrorKind
    message: str


def require_caller(context: Optional[CallerContext]) -> Optional[CallableError]:
    if context is None or not context.is_authenticated:
        return CallableError(ErrorKind.UNAUTHENTICATED, "User must be authenticated")
    return None


def _parse_payload(data_class: Type[T], data: Any) -> Union[T, CallableError]:
    if data is None:
        data = {}
    if not isinstance(data, dict):
        return CallableError(ErrorKind.INVALID_INPUT, "Payload must be an object.")
    try:
        return from_dict(
            data_class=data_class,
            data=convert_keys(data, "camel_to_snake"),
            config=Config(check_types=True),
        )
    except DaciteError as e:
        return CallableError(ErrorKind.INVALID_INPUT, str(e))


def handle_create_user(
    data: Any, context: Optional[CallerContext], identity: IdentityProvider
) -> Union[CreateUserResult, CallableError]:
    denied = require_caller(context)
    if denied:
        return denied

    request = _parse_payload(CreateUserRequest, data)
    if isinstance(request, CallableError):
        return request

    try:
        account = identity.create_account(request.email, request.display_name)
    except Exception as e:
        logger.error("Account creation failed for caller %s: %s", context.uid, e)
        return CallableError(ErrorKind.INTERNAL, str(e))

    logger.info("Caller %s created account %s", context.uid, account.uid)
    return CreateUserResult(uid=account.uid, email=account.email)


def handle_send_notification(
    data: Any, context: Optional[CallerContext], messenger: PushMessenger
) -> Union[SendNotificationResult, CallableError]:
    denied = require_caller(context)
    if denied:
        return denied

    request = _parse_payload(SendNotificationRequest, data)
    if isinstance(request, CallableError):
        return request

    try:
        message_id = messenger.send_notification(
            request.token, request.title, request.body
        )
    except Exception as e:
        logger.error("Notification send failed for caller %s: %s", context.uid, e)
        return CallableError(ErrorKind.INTERNAL, str(e))

    return SendNotificationResult(success=True, message_id=message_id)
