# Copyright 2025 Google LLC
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.
# ==============================================================================

# Cloud functions for the users/todos backend - callable account and messaging operations.
#
# This file containing Python cloud functions must be named main.py.
# See https://cloud.google.com/run/docs/write-functions#python for more info.
# The HTTP surface lives in backend.app and is served separately (python -m backend).

# Standard library imports
from dataclasses import asdict
from typing import Any, Optional

# Third-party library imports
from firebase_admin import initialize_app
from firebase_functions import https_fn, logger, options

# Local application imports
from backend.callables import (
    CallableError,
    CallerContext,
    handle_create_user,
    handle_send_notification,
)
from backend.dependencies import PlatformClients, build_platform_clients
from backend.errors import ErrorKind
from shared.json_utils import convert_keys

FUNCTIONS_ERROR_CODES = {
    ErrorKind.INVALID_INPUT: https_fn.FunctionsErrorCode.INVALID_ARGUMENT,
    ErrorKind.NOT_FOUND: https_fn.FunctionsErrorCode.NOT_FOUND,
    ErrorKind.UNAUTHENTICATED: https_fn.FunctionsErrorCode.UNAUTHENTICATED,
    ErrorKind.INTERNAL: https_fn.FunctionsErrorCode.INTERNAL,
}

initialize_app()

_platform_clients: Optional[PlatformClients] = None


def get_platform_clients() -> PlatformClients:
    """
    Returns the platform clients, built on first use and reused afterwards.

    The Firebase CLI imports this module to discover the exported functions, so
    Firestore client construction and credential lookup wait until the first
    invocation. The clients then live for the lifetime of the instance.
    """
    global _platform_clients
    if _platform_clients is None:
        _platform_clients = build_platform_clients()
    return _platform_clients


def _to_response(outcome: Any) -> dict:
    """
    Converts a handler outcome into the callable response.

    A CallableError is raised as an HttpsError carrying its message unchanged;
    any result dataclass is returned with camelCase keys.
    """
    if isinstance(outcome, CallableError):
        if outcome.kind == ErrorKind.INTERNAL:
            logger.error(f"Callable failed: {outcome.message}")
        else:
            logger.info(f"Callable rejected ({outcome.kind.value}): {outcome.message}")
        raise https_fn.HttpsError(FUNCTIONS_ERROR_CODES[outcome.kind], outcome.message)
    return convert_keys(asdict(outcome), "snake_to_camel")


@https_fn.on_call(memory=options.MemoryOption.MB_256)
def create_user(req: https_fn.CallableRequest) -> dict:
    """
    Creates a Firebase Auth account for an authenticated caller.

    Args:
        req (https_fn.CallableRequest): The request, containing email and displayName.

    Returns:
        A dictionary with the new account's uid and email.
    """
    outcome = handle_create_user(
        req.data,
        CallerContext.from_auth(req.auth),
        get_platform_clients().identity,
    )
    return _to_response(outcome)


@https_fn.on_call(memory=options.MemoryOption.MB_256)
def send_notification(req: https_fn.CallableRequest) -> dict:
    """
    Sends a push notification to a device token on behalf of an authenticated caller.

    Args:
        req (https_fn.CallableRequest): The request, containing token, title and body.

    Returns:
        A dictionary with success and the FCM messageId.
    """
    outcome = handle_send_notification(
        req.data,
        CallerContext.from_auth(req.auth),
        get_platform_clients().messaging,
    )
    return _to_response(outcome)
