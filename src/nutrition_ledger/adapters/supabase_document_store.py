"""Supabase-backed document store."""

import asyncio
import logging
from collections.abc import Callable, Mapping
from dataclasses import dataclass
from typing import TypeVar

import httpx
from postgrest.exceptions import APIError
from supabase import Client

from nutrition_ledger.domain.errors import StoreUnavailable
from nutrition_ledger.services.store import DocumentKey, DocumentStore, merge_fields

_logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass
class SupabaseDocumentStore(DocumentStore):
    """Stores documents as jsonb rows keyed by (user_id, collection, doc_key)."""

    client: Client
    table: str = "user_documents"

    async def get(self, key: DocumentKey) -> dict[str, object] | None:
        """Return the document data for a key."""
        return await self._run(lambda: self._select_one(key))

    async def set(
        self, key: DocumentKey, fields: Mapping[str, object], merge: bool = True
    ) -> None:
        """Upsert the document, merging into the stored data when requested."""

        def write() -> None:
            existing = self._select_one(key) if merge else None
            data = merge_fields(existing or {}, fields)
            self.client.table(self.table).upsert(
                {
                    "user_id": key.user_id,
                    "collection": key.collection,
                    "doc_key": key.key,
                    "data": data,
                },
                on_conflict="user_id,collection,doc_key",
            ).execute()

        await self._run(write)

    async def list_range(
        self, user_id: str, collection: str, start_key: str, end_key: str
    ) -> list[dict[str, object]]:
        """Return documents in the inclusive key range, ascending by key."""

        def select() -> list[dict[str, object]]:
            response = (
                self.client.table(self.table)
                .select("doc_key, data")
                .eq("user_id", user_id)
                .eq("collection", collection)
                .gte("doc_key", start_key)
                .lte("doc_key", end_key)
                .order("doc_key", desc=False)
                .execute()
            )
            return [_row_data(row) for row in response.data or []]

        return await self._run(select)

    async def list_matching(
        self, user_id: str, collection: str, field_name: str, value: str
    ) -> list[dict[str, object]]:
        """Return documents whose jsonb field equals value."""

        def select() -> list[dict[str, object]]:
            response = (
                self.client.table(self.table)
                .select("doc_key, data")
                .eq("user_id", user_id)
                .eq("collection", collection)
                .eq(f"data->>{field_name}", value)
                .execute()
            )
            return [_row_data(row) for row in response.data or []]

        return await self._run(select)

    async def delete(self, key: DocumentKey) -> None:
        """Delete the row for a key."""

        def remove() -> None:
            (
                self.client.table(self.table)
                .delete()
                .eq("user_id", key.user_id)
                .eq("collection", key.collection)
                .eq("doc_key", key.key)
                .execute()
            )

        await self._run(remove)

    def _select_one(self, key: DocumentKey) -> dict[str, object] | None:
        response = (
            self.client.table(self.table)
            .select("data")
            .eq("user_id", key.user_id)
            .eq("collection", key.collection)
            .eq("doc_key", key.key)
            .limit(1)
            .execute()
        )
        if not response.data:
            return None
        return _row_data(response.data[0])

    async def _run(self, call: Callable[[], T]) -> T:
        try:
            return await asyncio.to_thread(call)
        except (APIError, httpx.HTTPError) as exc:
            _logger.warning("Supabase document store call failed: %s", exc)
            raise StoreUnavailable(str(exc)) from exc


def _row_data(row: dict[str, object]) -> dict[str, object]:
    data = row.get("data")
    return dict(data) if isinstance(data, dict) else {}
