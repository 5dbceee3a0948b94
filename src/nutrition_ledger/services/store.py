"""Keyed document store abstractions."""

import copy
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Protocol

PROFILE_COLLECTION = "profile"
PROFILE_KEY = "current"
DAILY_LOGS_COLLECTION = "daily_logs"
FOOD_LOGS_COLLECTION = "food_logs"


@dataclass(frozen=True)
class DocumentKey:
    """Address of a single document owned by one user."""

    user_id: str
    collection: str
    key: str


class DocumentStore(Protocol):
    """Point reads and merge writes against per-user documents."""

    async def get(self, key: DocumentKey) -> dict[str, object] | None:
        """Return the document, or None when it does not exist."""

    async def set(
        self, key: DocumentKey, fields: Mapping[str, object], merge: bool = True
    ) -> None:
        """Write fields to a document, merging into any existing content."""

    async def list_range(
        self, user_id: str, collection: str, start_key: str, end_key: str
    ) -> list[dict[str, object]]:
        """Return documents with start_key <= key <= end_key, ascending by key."""

    async def list_matching(
        self, user_id: str, collection: str, field_name: str, value: str
    ) -> list[dict[str, object]]:
        """Return documents whose top-level field equals value, in no set order."""

    async def delete(self, key: DocumentKey) -> None:
        """Remove a document; missing documents are ignored."""


def merge_fields(
    existing: Mapping[str, object], fields: Mapping[str, object]
) -> dict[str, object]:
    """Recursively merge fields into a copy of an existing document."""
    merged = copy.deepcopy(dict(existing))
    for name, value in fields.items():
        current = merged.get(name)
        if isinstance(value, Mapping) and isinstance(current, Mapping):
            merged[name] = merge_fields(current, value)
        else:
            merged[name] = copy.deepcopy(value)
    return merged


@dataclass
class InMemoryDocumentStore(DocumentStore):
    """Dictionary-backed document store for local runs."""

    documents: dict[DocumentKey, dict[str, object]] = field(default_factory=dict)

    async def get(self, key: DocumentKey) -> dict[str, object] | None:
        """Return a copy of the stored document."""
        doc = self.documents.get(key)
        return copy.deepcopy(doc) if doc is not None else None

    async def set(
        self, key: DocumentKey, fields: Mapping[str, object], merge: bool = True
    ) -> None:
        """Store the document, merging when requested."""
        existing = self.documents.get(key) if merge else None
        self.documents[key] = merge_fields(existing or {}, fields)

    async def list_range(
        self, user_id: str, collection: str, start_key: str, end_key: str
    ) -> list[dict[str, object]]:
        """Return the documents in the key range, sorted by key."""
        matches = [
            (key.key, doc)
            for key, doc in self.documents.items()
            if key.user_id == user_id
            and key.collection == collection
            and start_key <= key.key <= end_key
        ]
        return [copy.deepcopy(doc) for _, doc in sorted(matches, key=lambda m: m[0])]

    async def list_matching(
        self, user_id: str, collection: str, field_name: str, value: str
    ) -> list[dict[str, object]]:
        """Return copies of the documents with a matching field."""
        return [
            copy.deepcopy(doc)
            for key, doc in self.documents.items()
            if key.user_id == user_id
            and key.collection == collection
            and doc.get(field_name) == value
        ]

    async def delete(self, key: DocumentKey) -> None:
        """Drop the document if present."""
        self.documents.pop(key, None)
