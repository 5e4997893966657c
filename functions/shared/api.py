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

from dataclasses import dataclass
from typing import Optional


@dataclass
class CreateUserRequest:
    """Payload of the create_user callable."""

    email: Optional[str] = None
    display_name: Optional[str] = None


@dataclass
class CreateUserResult:
    """The account created by the identity provider."""

    uid: str
    email: Optional[str]


@dataclass
class SendNotificationRequest:
    """Payload of the send_notification callable."""

    token: Optional[str] = None
    title: Optional[str] = None
    body: Optional[str] = None


@dataclass
class SendNotificationResult:
    """Delivery receipt returned by the messaging service."""

    success: bool
    message_id: str
