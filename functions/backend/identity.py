"""
Identity provider abstraction for Firebase Auth and in-memory testing.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from typing import Any, Optional, Protocol

from firebase_admin import auth


@dataclass
class AccountRecord:
    uid: str
    email: Optional[str]
    display_name: Optional[str] = None
    email_verified: bool = False


class IdentityProvider(Protocol):
    """Creates user accounts. New accounts are never marked as email-verified."""

    def create_account(
        self, email: Optional[str], display_name: Optional[str]
    ) -> AccountRecord:
        ...


@dataclass
class InMemoryIdentityProvider:
    """Test double for account creation."""

    accounts: dict = field(default_factory=dict)

    def create_account(
        self, email: Optional[str], display_name: Optional[str]
    ) -> AccountRecord:
        if not email:
            raise ValueError("The email address is required.")
        if any(a.email == email for a in self.accounts.values()):
            raise ValueError(
                "The user with the provided email already exists (EMAIL_EXISTS)."
            )
        record = AccountRecord(
            uid=uuid.uuid4().hex[:28],
            email=email,
            display_name=display_name,
            email_verified=False,
        )
        self.accounts[record.uid] = record
        return record


@dataclass
class FirebaseIdentityProvider:
    """Firebase Auth backed provider. `app=None` uses the default Firebase app."""

    app: Any = None

    def create_account(
        self, email: Optional[str], display_name: Optional[str]
    ) -> AccountRecord:
        user = auth.create_user(
            email=email,
            display_name=display_name,
            email_verified=False,
            app=self.app,
        )
        return AccountRecord(
            uid=user.uid,
            email=user.email,
            display_name=user.display_name,
            email_verified=user.email_verified,
        )
