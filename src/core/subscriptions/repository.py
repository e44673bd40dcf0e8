# src/core/subscriptions/repository.py
"""Persistence for subscription records.

Records are stored as whole documents keyed by node slug. `put` always
overwrites the full document; there is no field-level patch and no
transaction spanning several slugs.
SQLite calls run in worker threads so cascades can fan out concurrently.
"""

import asyncio
import json
import logging
import os
import sqlite3
from datetime import datetime
from typing import Any, Protocol

from src.core.subscriptions.errors import StoreReadError, StoreWriteError
from src.core.subscriptions.models import SubscriptionRecord

logger = logging.getLogger(__name__)


class SubscriptionStore(Protocol):
    """Key-value store of subscription records."""

    async def get(self, slug: str) -> SubscriptionRecord | None:
        """Return the record for the slug, or None if absent.

        Raises:
            StoreReadError: If the store cannot be read.
        """
        ...

    async def put(self, slug: str, record: SubscriptionRecord) -> None:
        """Create or fully overwrite the record for the slug.

        Raises:
            StoreWriteError: If the record cannot be written.
        """
        ...

    async def list_for_channel(self, channel_id: str) -> list[SubscriptionRecord]:
        """Return all records that contain the channel, ordered by slug."""
        ...


class InMemorySubscriptionStore:
    """Store that keeps serialized documents in a dict.

    Documents go through the same to_dict/from_dict round trip as the
    SQLite store so callers never share state with the store.
    """

    def __init__(self) -> None:
        self._documents: dict[str, dict[str, Any]] = {}

    async def get(self, slug: str) -> SubscriptionRecord | None:
        document = self._documents.get(slug)
        if document is None:
            return None
        return SubscriptionRecord.from_dict(document)

    async def put(self, slug: str, record: SubscriptionRecord) -> None:
        self._documents[slug] = record.to_dict()

    async def list_for_channel(self, channel_id: str) -> list[SubscriptionRecord]:
        records = [
            SubscriptionRecord.from_dict(self._documents[slug])
            for slug in sorted(self._documents)
        ]
        return [r for r in records if r.has_channel(channel_id)]

    def __contains__(self, slug: str) -> bool:
        return slug in self._documents


class SubscriptionRepository:
    """SQLite repository for subscription records.

    Each record is stored as its JSON document in the `subscriptions`
    table. Records left without channels are kept: an empty record
    behaves like an absent one for every engine operation.

    Attributes:
        db_path: Path to the SQLite database file.

    Example:
        >>> repo = SubscriptionRepository(db_path="data/okr_notifier.db")
        >>> record = await repo.get("oslo-origo")
    """

    def __init__(self, db_path: str = "data/okr_notifier.db") -> None:
        self.db_path = db_path

        db_dir = os.path.dirname(db_path)
        if db_dir:
            os.makedirs(db_dir, exist_ok=True)

        self._init_db()

    def _init_db(self) -> None:
        conn = sqlite3.connect(self.db_path)
        try:
            conn.execute("PRAGMA journal_mode=WAL")
            conn.execute("""
                CREATE TABLE IF NOT EXISTS subscriptions (
                    slug TEXT PRIMARY KEY,
                    document TEXT NOT NULL,
                    updated_at TEXT NOT NULL
                )
            """)
            conn.commit()
        finally:
            conn.close()

    async def get(self, slug: str) -> SubscriptionRecord | None:
        try:
            document = await asyncio.to_thread(self._select_document, slug)
        except sqlite3.Error as e:
            raise StoreReadError(slug, str(e)) from e

        if document is None:
            return None
        return SubscriptionRecord.from_dict(json.loads(document))

    async def put(self, slug: str, record: SubscriptionRecord) -> None:
        document = json.dumps(record.to_dict())
        try:
            await asyncio.to_thread(self._upsert_document, slug, document)
        except sqlite3.Error as e:
            raise StoreWriteError(slug, str(e)) from e

        logger.debug("Stored subscription record %s (%d channels)", slug, len(record.channels))

    async def list_for_channel(self, channel_id: str) -> list[SubscriptionRecord]:
        try:
            documents = await asyncio.to_thread(self._select_all_documents)
        except sqlite3.Error as e:
            raise StoreReadError("*", str(e)) from e

        records = [SubscriptionRecord.from_dict(json.loads(d)) for d in documents]
        return [r for r in records if r.has_channel(channel_id)]

    def _select_document(self, slug: str) -> str | None:
        conn = sqlite3.connect(self.db_path)
        try:
            cursor = conn.execute(
                "SELECT document FROM subscriptions WHERE slug = ?",
                (slug,),
            )
            row = cursor.fetchone()
            return row[0] if row else None
        finally:
            conn.close()

    def _select_all_documents(self) -> list[str]:
        conn = sqlite3.connect(self.db_path)
        try:
            cursor = conn.execute("SELECT document FROM subscriptions ORDER BY slug")
            return [row[0] for row in cursor.fetchall()]
        finally:
            conn.close()

    def _upsert_document(self, slug: str, document: str) -> None:
        conn = sqlite3.connect(self.db_path)
        try:
            conn.execute(
                """
                INSERT INTO subscriptions (slug, document, updated_at)
                VALUES (?, ?, ?)
                ON CONFLICT(slug) DO UPDATE SET
                    document = excluded.document,
                    updated_at = excluded.updated_at
                """,
                (slug, document, datetime.now().isoformat()),
            )
            conn.commit()
        finally:
            conn.close()
