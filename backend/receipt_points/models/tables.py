"""SQLAlchemy ORM models for the relational receipt store.

A receipt row holds the submitted header fields, its score and a
``dedupe_key`` digest that identifies the logical receipt.  The unique
index on ``dedupe_key`` lets the database reject a second copy of the
same receipt even when two processes race each other.  Items are kept in
their own table and carry their submission position so they can be read
back in order.

If you extend or modify these models remember to call the ``init_db``
helper during development to recreate the tables.
"""

from __future__ import annotations

import datetime as dt

from sqlalchemy import (
    Column,
    Integer,
    String,
    DateTime,
    ForeignKey,
)
from sqlalchemy.orm import relationship

from receipt_points.core.database import Base


def _utcnow() -> dt.datetime:
    return dt.datetime.now(dt.timezone.utc)


class ReceiptRecord(Base):
    """Processed receipt and its awarded points."""

    __tablename__ = "receipts"

    id = Column(String(36), primary_key=True)
    retailer = Column(String, nullable=False)
    purchase_date = Column(String(10), nullable=False)
    purchase_time = Column(String(5), nullable=False)
    total = Column(String, nullable=False)
    points = Column(Integer, nullable=False)
    dedupe_key = Column(String(64), unique=True, nullable=False, index=True)
    created_at = Column(DateTime(timezone=True), default=_utcnow, nullable=False, index=True)

    items = relationship(
        "ReceiptItemRecord",
        back_populates="receipt",
        cascade="all, delete-orphan",
        order_by="ReceiptItemRecord.position",
        lazy="selectin",
    )


class ReceiptItemRecord(Base):
    """Line item belonging to a processed receipt."""

    __tablename__ = "receipt_items"

    id = Column(Integer, primary_key=True, autoincrement=True)
    receipt_id = Column(String(36), ForeignKey("receipts.id"), nullable=False, index=True)
    position = Column(Integer, nullable=False)
    short_description = Column(String, nullable=False)
    price = Column(String, nullable=False)

    receipt = relationship("ReceiptRecord", back_populates="items")
