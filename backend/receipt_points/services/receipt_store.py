"""Receipt store abstraction.

Supports two backends selected via ``settings.STORE_BACKEND``:

1. **memory** (default): Receipts live in a process-local dict guarded by
   an ``asyncio.Lock``.  Everything is lost on restart.
2. **database**: Receipts and their items are persisted through the async
   SQLAlchemy engine from :mod:`receipt_points.core.database`.

Both backends assign a UUID and a UTC creation timestamp on ``create``,
return receipts newest first from ``list`` and refuse to store a second
copy of the same logical receipt (see
:class:`~receipt_points.services.duplicates.DedupeKey`).
"""

from __future__ import annotations

import asyncio
import datetime as dt
import logging
import uuid
from abc import ABC, abstractmethod
from typing import Dict, List

from sqlalchemy import exists, select, text
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncEngine

from receipt_points.core.database import create_session_factory
from receipt_points.core.errors import DuplicateError, NotFoundError, StorageError
from receipt_points.models.enums import StoreBackend
from receipt_points.models.schemas import Item, Receipt, StoredReceipt
from receipt_points.models.tables import ReceiptItemRecord, ReceiptRecord
from receipt_points.services.duplicates import DedupeKey

logger = logging.getLogger(__name__)


def _utcnow() -> dt.datetime:
    return dt.datetime.now(dt.timezone.utc)


class ReceiptStore(ABC):
    """Persistence contract shared by every backend."""

    backend: StoreBackend

    @abstractmethod
    async def create(self, receipt: Receipt, points: int) -> StoredReceipt:
        """Persist ``receipt`` with its score and return the stored copy."""

    @abstractmethod
    async def get(self, receipt_id: str) -> StoredReceipt:
        """Return the stored receipt or raise ``NotFoundError``."""

    @abstractmethod
    async def list(self) -> List[StoredReceipt]:
        """Return all stored receipts, most recently created first."""

    @abstractmethod
    async def find_duplicate(self, key: DedupeKey) -> bool:
        """Return ``True`` if a receipt with ``key`` is already stored."""

    async def ping(self) -> None:
        """Raise ``StorageError`` if the backend is unreachable."""

    async def close(self) -> None:
        """Release any resources held by the backend."""


class InMemoryReceiptStore(ReceiptStore):
    """Receipt store backed by a dict and an ``asyncio.Lock``."""

    backend = StoreBackend.MEMORY

    def __init__(self) -> None:
        self._receipts: Dict[str, StoredReceipt] = {}
        self._ids_by_key: Dict[str, str] = {}
        self._lock = asyncio.Lock()

    async def create(self, receipt: Receipt, points: int) -> StoredReceipt:
        digest = DedupeKey.for_receipt(receipt).digest
        async with self._lock:
            if digest in self._ids_by_key:
                raise DuplicateError()
            stored = StoredReceipt(
                id=str(uuid.uuid4()),
                retailer=receipt.retailer,
                purchase_date=receipt.purchase_date,
                purchase_time=receipt.purchase_time,
                items=list(receipt.items),
                total=receipt.total,
                points=points,
                created_at=_utcnow(),
            )
            self._receipts[stored.id] = stored
            self._ids_by_key[digest] = stored.id
        return stored.model_copy(deep=True)

    async def get(self, receipt_id: str) -> StoredReceipt:
        async with self._lock:
            stored = self._receipts.get(receipt_id)
        if stored is None:
            raise NotFoundError(receipt_id)
        # the items list is the only mutable part of a frozen StoredReceipt
        return stored.model_copy(deep=True)

    async def list(self) -> List[StoredReceipt]:
        async with self._lock:
            return [stored.model_copy(deep=True) for stored in reversed(self._receipts.values())]

    async def find_duplicate(self, key: DedupeKey) -> bool:
        async with self._lock:
            return key.digest in self._ids_by_key


class SqlReceiptStore(ReceiptStore):
    """Receipt store backed by the ``receipts`` and ``receipt_items`` tables."""

    backend = StoreBackend.DATABASE

    def __init__(self, engine: AsyncEngine) -> None:
        self._engine = engine
        self._session_factory = create_session_factory(engine)

    @staticmethod
    def _to_schema(record: ReceiptRecord) -> StoredReceipt:
        created_at = record.created_at
        # SQLite hands back naive datetimes; they were written as UTC.
        if created_at.tzinfo is None:
            created_at = created_at.replace(tzinfo=dt.timezone.utc)
        return StoredReceipt(
            id=record.id,
            retailer=record.retailer,
            purchase_date=record.purchase_date,
            purchase_time=record.purchase_time,
            items=[Item(short_description=i.short_description, price=i.price) for i in record.items],
            total=record.total,
            points=record.points,
            created_at=created_at,
        )

    async def create(self, receipt: Receipt, points: int) -> StoredReceipt:
        record = ReceiptRecord(
            id=str(uuid.uuid4()),
            retailer=receipt.retailer,
            purchase_date=receipt.purchase_date,
            purchase_time=receipt.purchase_time,
            total=receipt.total,
            points=points,
            dedupe_key=DedupeKey.for_receipt(receipt).digest,
            created_at=_utcnow(),
            items=[
                ReceiptItemRecord(position=position, short_description=item.short_description, price=item.price)
                for position, item in enumerate(receipt.items)
            ],
        )
        try:
            async with self._session_factory() as session:
                async with session.begin():
                    session.add(record)
        except IntegrityError as exc:
            logger.info("Rejected duplicate receipt from %s at insert", receipt.retailer)
            raise DuplicateError() from exc
        except SQLAlchemyError as exc:
            logger.exception("Error saving receipt")
            raise StorageError("Failed to save receipt") from exc
        return self._to_schema(record)

    async def get(self, receipt_id: str) -> StoredReceipt:
        try:
            async with self._session_factory() as session:
                result = await session.execute(select(ReceiptRecord).where(ReceiptRecord.id == receipt_id))
                record = result.scalar_one_or_none()
                stored = self._to_schema(record) if record is not None else None
        except SQLAlchemyError as exc:
            logger.exception("Error getting receipt %s", receipt_id)
            raise StorageError("Failed to get receipt") from exc
        if stored is None:
            raise NotFoundError(receipt_id)
        return stored

    async def list(self) -> List[StoredReceipt]:
        query = select(ReceiptRecord).order_by(ReceiptRecord.created_at.desc(), ReceiptRecord.id.desc())
        try:
            async with self._session_factory() as session:
                result = await session.execute(query)
                return [self._to_schema(record) for record in result.scalars().all()]
        except SQLAlchemyError as exc:
            logger.exception("Error listing receipts")
            raise StorageError("Failed to list receipts") from exc

    async def find_duplicate(self, key: DedupeKey) -> bool:
        query = select(exists().where(ReceiptRecord.dedupe_key == key.digest))
        try:
            async with self._session_factory() as session:
                return bool((await session.execute(query)).scalar())
        except SQLAlchemyError as exc:
            logger.exception("Error checking for duplicate receipt")
            raise StorageError("Failed to check for duplicate receipt") from exc

    async def ping(self) -> None:
        try:
            async with self._engine.connect() as conn:
                await conn.execute(text("SELECT 1"))
        except SQLAlchemyError as exc:
            raise StorageError(f"database unreachable: {exc}") from exc

    async def close(self) -> None:
        await self._engine.dispose()


def build_store(backend: StoreBackend | str, engine: AsyncEngine | None = None) -> ReceiptStore:
    """Construct the store for ``backend``.

    The database backend uses ``engine`` when given, otherwise the
    application engine from :mod:`receipt_points.core.database`.
    """
    if StoreBackend(backend) is StoreBackend.DATABASE:
        if engine is None:
            from receipt_points.core.database import engine as default_engine
            engine = default_engine
        return SqlReceiptStore(engine)
    return InMemoryReceiptStore()


__all__ = ["ReceiptStore", "InMemoryReceiptStore", "SqlReceiptStore", "build_store"]
