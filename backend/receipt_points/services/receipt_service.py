"""Receipt processing pipeline.

``ReceiptService.process`` runs a submission through validation, the
duplicate check, scoring and storage, in that order.  The duplicate check
and the insert for a given logical receipt run under the same per-key
lock, so two concurrent submissions of one receipt cannot both be
accepted by this process.  The database backend additionally enforces
uniqueness with an index for writers in other processes.
"""

from __future__ import annotations

import asyncio
import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator, Dict, List

from receipt_points.core.errors import DuplicateError
from receipt_points.core.observability import sentry_breadcrumb
from receipt_points.models.schemas import Receipt, StoredReceipt
from receipt_points.services.duplicates import DedupeKey, is_duplicate
from receipt_points.services.receipt_store import ReceiptStore
from receipt_points.services.scoring import score_receipt
from receipt_points.services.validation import validate_receipt

logger = logging.getLogger(__name__)


class KeyedLock:
    """Hand out one ``asyncio.Lock`` per key, dropping it once unused."""

    def __init__(self) -> None:
        self._locks: Dict[str, asyncio.Lock] = {}
        self._waiters: Dict[str, int] = {}

    @asynccontextmanager
    async def hold(self, key: str) -> AsyncIterator[None]:
        lock = self._locks.setdefault(key, asyncio.Lock())
        self._waiters[key] = self._waiters.get(key, 0) + 1
        try:
            async with lock:
                yield
        finally:
            self._waiters[key] -= 1
            if self._waiters[key] == 0:
                del self._waiters[key]
                del self._locks[key]

    def __len__(self) -> int:
        return len(self._locks)


class ReceiptService:
    """Validate, score and store receipts."""

    def __init__(self, store: ReceiptStore) -> None:
        self.store = store
        self._locks = KeyedLock()

    async def process(self, receipt: Receipt) -> StoredReceipt:
        """Score and persist ``receipt``.

        :raises ValidationError: if a field is malformed.
        :raises DuplicateError: if the same receipt was already processed.
        :raises ScoringError: if a validated field still cannot be parsed.
        :raises StorageError: if the store fails.
        """
        validate_receipt(receipt)
        key = DedupeKey.for_receipt(receipt)
        async with self._locks.hold(key.digest):
            if await is_duplicate(receipt, self.store):
                logger.info("Rejected duplicate receipt from %s on %s", receipt.retailer, receipt.purchase_date)
                sentry_breadcrumb(
                    category="receipts",
                    message="process_receipt.duplicate",
                    data={"retailer": receipt.retailer, "purchase_date": receipt.purchase_date},
                )
                raise DuplicateError()
            points = score_receipt(receipt)
            stored = await self.store.create(receipt, points)
        logger.info("Processed receipt %s from %s: %d points", stored.id, stored.retailer, stored.points)
        return stored

    async def get(self, receipt_id: str) -> StoredReceipt:
        return await self.store.get(receipt_id)

    async def get_points(self, receipt_id: str) -> int:
        return (await self.store.get(receipt_id)).points

    async def list(self) -> List[StoredReceipt]:
        return await self.store.list()


__all__ = ["KeyedLock", "ReceiptService"]
