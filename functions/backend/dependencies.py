"""
Dependency wiring for the FastAPI app and the callable functions.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

import firebase_admin
from fastapi import Request
from firebase_admin import firestore

from backend.config import Settings, get_settings
from backend.db import DocumentStore, FirestoreDocumentStore, InMemoryDocumentStore
from backend.identity import (
    FirebaseIdentityProvider,
    IdentityProvider,
    InMemoryIdentityProvider,
)
from backend.messaging import (
    FirebasePushMessenger,
    InMemoryPushMessenger,
    PushMessenger,
)

logger = logging.getLogger(__name__)


@dataclass
class PlatformClients:
    """The three external collaborators every handler may talk to."""

    document_store: DocumentStore
    identity: IdentityProvider
    messaging: PushMessenger


def get_firebase_app(settings: Settings | None = None) -> firebase_admin.App:
    """Return the default Firebase app, initializing it on first use."""
    try:
        return firebase_admin.get_app()
    except ValueError:
        settings = settings or get_settings()
        options = (
            {"projectId": settings.firebase_project_id}
            if settings.firebase_project_id
            else None
        )
        return firebase_admin.initialize_app(options=options)


def build_in_memory_clients() -> PlatformClients:
    return PlatformClients(
        document_store=InMemoryDocumentStore(),
        identity=InMemoryIdentityProvider(),
        messaging=InMemoryPushMessenger(),
    )


def build_platform_clients(settings: Settings | None = None) -> PlatformClients:
    """
    Construct the platform clients once at startup.

    In-memory backends are used when USE_IN_MEMORY_BACKENDS is set; otherwise
    the clients share the default Firebase app.
    """
    settings = settings or get_settings()
    if settings.use_in_memory_backends:
        logger.info("Using in-memory platform clients")
        return build_in_memory_clients()

    app = get_firebase_app(settings)
    logger.info("Using Firebase platform clients for project %s", app.project_id)
    return PlatformClients(
        document_store=FirestoreDocumentStore(firestore.client(app)),
        identity=FirebaseIdentityProvider(app=app),
        messaging=FirebasePushMessenger(app=app),
    )


def get_platform_clients(request: Request) -> PlatformClients:
    return request.app.state.clients


def get_document_store(request: Request) -> DocumentStore:
    return get_platform_clients(request).document_store
