"""Duplicate detection for submitted receipts.

Two receipts are the same logical receipt when retailer, purchase date,
purchase time and total are identical strings and they carry the same
multiset of ``(description, price)`` items.  The order items were
submitted in does not matter: items are sorted by description (then
price) and serialised as ``description:price`` joined by commas.

The resulting :class:`DedupeKey` is what stores index and compare.
"""

from __future__ import annotations

import hashlib
from dataclasses import dataclass
from typing import Iterable, TYPE_CHECKING

from receipt_points.models.schemas import Item, Receipt

if TYPE_CHECKING:  # pragma: no cover
    from receipt_points.services.receipt_store import ReceiptStore


def item_signature(items: Iterable[Item]) -> str:
    """Serialise ``items`` into an order-independent signature."""
    ordered = sorted(items, key=lambda item: (item.short_description, item.price))
    return ",".join(f"{item.short_description}:{item.price}" for item in ordered)


@dataclass(frozen=True)
class DedupeKey:
    """Identity of a logical receipt, independent of item order."""

    retailer: str
    purchase_date: str
    purchase_time: str
    total: str
    items: str

    @classmethod
    def for_receipt(cls, receipt: Receipt) -> "DedupeKey":
        return cls(
            retailer=receipt.retailer,
            purchase_date=receipt.purchase_date,
            purchase_time=receipt.purchase_time,
            total=receipt.total,
            items=item_signature(receipt.items),
        )

    @property
    def digest(self) -> str:
        """SHA-256 hex digest used as the indexed column value."""
        # Unit separators keep field boundaries unambiguous.
        raw = "\x1f".join((self.retailer, self.purchase_date, self.purchase_time, self.total, self.items))
        return hashlib.sha256(raw.encode("utf-8")).hexdigest()


async def is_duplicate(candidate: Receipt, store: "ReceiptStore") -> bool:
    """Return ``True`` if ``store`` already holds the same logical receipt."""
    return await store.find_duplicate(DedupeKey.for_receipt(candidate))


__all__ = ["DedupeKey", "item_signature", "is_duplicate"]
