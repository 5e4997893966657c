"""
Document store abstraction for Cloud Firestore and an in-memory test implementation.
"""

from __future__ import annotations

import copy
import uuid
from datetime import datetime, timezone
from typing import Any, Dict, Optional, Protocol

from google.api_core import exceptions
from google.cloud.firestore_v1 import SERVER_TIMESTAMP

from backend.errors import DocumentNotFoundError


class DocumentStore(Protocol):
    """Interface for collection-scoped document access."""

    def add_document(self, collection: str, data: dict) -> str:
        ...

    def get_document(self, collection: str, doc_id: str) -> Optional[dict]:
        ...

    def list_documents(self, collection: str, limit: int) -> list[tuple[str, dict]]:
        ...

    def update_document(self, collection: str, doc_id: str, data: dict) -> None:
        ...

    def delete_document(self, collection: str, doc_id: str) -> None:
        ...


def _resolve_sentinels(data: dict, now: datetime) -> dict:
    return {
        key: now if value is SERVER_TIMESTAMP else value for key, value in data.items()
    }


class InMemoryDocumentStore:
    """Simple in-memory document store for development and tests."""

    def __init__(self):
        self.collections: Dict[str, Dict[str, dict]] = {}

    def _now(self) -> datetime:
        return datetime.now(timezone.utc)

    def _collection(self, name: str) -> Dict[str, dict]:
        return self.collections.setdefault(name, {})

    def add_document(self, collection: str, data: dict) -> str:
        doc_id = uuid.uuid4().hex[:20]
        self._collection(collection)[doc_id] = _resolve_sentinels(data, self._now())
        return doc_id

    def get_document(self, collection: str, doc_id: str) -> Optional[dict]:
        doc = self._collection(collection).get(doc_id)
        return None if doc is None else copy.deepcopy(doc)

    def list_documents(self, collection: str, limit: int) -> list[tuple[str, dict]]:
        items: list[tuple[str, dict]] = []
        for doc_id, doc in self._collection(collection).items():
            if len(items) >= limit:
                break
            items.append((doc_id, copy.deepcopy(doc)))
        return items

    def update_document(self, collection: str, doc_id: str, data: dict) -> None:
        docs = self._collection(collection)
        if doc_id not in docs:
            raise DocumentNotFoundError(collection, doc_id)
        docs[doc_id].update(_resolve_sentinels(data, self._now()))

    def delete_document(self, collection: str, doc_id: str) -> None:
        self._collection(collection).pop(doc_id, None)

    def reset(self) -> None:
        """Clear all stored data (useful in tests)."""
        self.collections.clear()


class FirestoreDocumentStore:
    """
    Firestore-backed implementation. Accepts a `google.cloud.firestore.Client`,
    usually obtained from `firebase_admin.firestore.client()`.
    """

    def __init__(self, client: Any):
        self._client = client

    def add_document(self, collection: str, data: dict) -> str:
        _, doc_ref = self._client.collection(collection).add(data)
        return doc_ref.id

    def get_document(self, collection: str, doc_id: str) -> Optional[dict]:
        snapshot = self._client.collection(collection).document(doc_id).get()
        if not snapshot.exists:
            return None
        return snapshot.to_dict()

    def list_documents(self, collection: str, limit: int) -> list[tuple[str, dict]]:
        query = self._client.collection(collection).limit(limit)
        return [(snapshot.id, snapshot.to_dict()) for snapshot in query.stream()]

    def update_document(self, collection: str, doc_id: str, data: dict) -> None:
        doc_ref = self._client.collection(collection).document(doc_id)
        try:
            doc_ref.update(data)
        except exceptions.NotFound as e:
            raise DocumentNotFoundError(collection, doc_id) from e

    def delete_document(self, collection: str, doc_id: str) -> None:
        self._client.collection(collection).document(doc_id).delete()
