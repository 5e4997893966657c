"""
Push messaging abstraction for Firebase Cloud Messaging and in-memory testing.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from typing import Any, Optional, Protocol

from firebase_admin import messaging


class PushMessenger(Protocol):
    """Delivers a notification to a single device token."""

    def send_notification(
        self, token: Optional[str], title: Optional[str], body: Optional[str]
    ) -> str:
        ...


@dataclass
class InMemoryPushMessenger:
    """Test double that records every message it is asked to send."""

    project_id: str = "demo-project"
    sent_messages: list = field(default_factory=list)

    def send_notification(
        self, token: Optional[str], title: Optional[str], body: Optional[str]
    ) -> str:
        if not token:
            raise ValueError("Exactly one of token, topic or condition must be specified.")
        message_id = f"projects/{self.project_id}/messages/{uuid.uuid4().hex}"
        self.sent_messages.append(
            {
                "token": token,
                "notification": {"title": title, "body": body},
                "message_id": message_id,
            }
        )
        return message_id


@dataclass
class FirebasePushMessenger:
    """FCM backed messenger. `app=None` uses the default Firebase app."""

    app: Any = None

    def send_notification(
        self, token: Optional[str], title: Optional[str], body: Optional[str]
    ) -> str:
        message = messaging.Message(
            token=token,
            notification=messaging.Notification(title=title, body=body),
        )
        return messaging.send(message, app=self.app)
