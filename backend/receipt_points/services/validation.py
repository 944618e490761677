"""Structural validation for submitted receipts.

Checks are an explicit, ordered list of ``(field, predicate, reason)``
entries.  ``validate_receipt`` runs them in order and raises
:class:`~receipt_points.core.errors.ValidationError` with the reason of the
first check that fails, so the reported error is deterministic for a
given input.

Patterns use ASCII semantics (``\\w`` is ``[A-Za-z0-9_]``) and must match
the whole value.  Whitespace is spelled out as tab, newline, form feed,
carriage return and space; vertical tab is not accepted.
"""

from __future__ import annotations

import datetime as dt
import re
from typing import Callable, List, Tuple

from receipt_points.core.errors import ValidationError
from receipt_points.models.schemas import Item, Receipt

_WHITESPACE = r"\t\n\f\r "

RETAILER_PATTERN = re.compile(rf"[\w{_WHITESPACE}\-&]+", re.ASCII)
DESCRIPTION_PATTERN = re.compile(rf"[\w{_WHITESPACE}\-]+", re.ASCII)
AMOUNT_PATTERN = re.compile(r"\d+\.\d{2}", re.ASCII)
DATE_PATTERN = re.compile(r"\d{4}-\d{2}-\d{2}", re.ASCII)
TIME_PATTERN = re.compile(r"\d{1,2}:\d{2}", re.ASCII)


def is_valid_amount(value: str) -> bool:
    return AMOUNT_PATTERN.fullmatch(value) is not None


def parse_purchase_date(value: str) -> dt.date | None:
    """Parse a ``YYYY-MM-DD`` calendar date, returning ``None`` if invalid."""
    if DATE_PATTERN.fullmatch(value) is None:
        return None
    try:
        return dt.datetime.strptime(value, "%Y-%m-%d").date()
    except ValueError:
        return None


def parse_purchase_time(value: str) -> dt.time | None:
    """Parse a 24-hour ``H:MM`` or ``HH:MM`` time, returning ``None`` if invalid."""
    if TIME_PATTERN.fullmatch(value) is None:
        return None
    try:
        return dt.datetime.strptime(value, "%H:%M").time()
    except ValueError:
        return None


ReceiptCheck = Tuple[str, Callable[[Receipt], bool], str]
ItemCheck = Tuple[str, Callable[[Item], bool], str]

RECEIPT_CHECKS: List[ReceiptCheck] = [
    ("retailer", lambda r: RETAILER_PATTERN.fullmatch(r.retailer) is not None, "invalid retailer format"),
    ("purchaseDate", lambda r: parse_purchase_date(r.purchase_date) is not None, "invalid purchase date format"),
    ("purchaseTime", lambda r: parse_purchase_time(r.purchase_time) is not None, "invalid purchase time format"),
    ("total", lambda r: is_valid_amount(r.total), "invalid total format"),
    ("items", lambda r: len(r.items) >= 1, "at least one item is required"),
]

ITEM_CHECKS: List[ItemCheck] = [
    (
        "shortDescription",
        lambda i: DESCRIPTION_PATTERN.fullmatch(i.short_description) is not None,
        "invalid item description format",
    ),
    ("price", lambda i: is_valid_amount(i.price), "invalid item price format"),
]


def validate_receipt(receipt: Receipt) -> None:
    """Raise ``ValidationError`` for the first failing check, else return."""
    for _field, predicate, reason in RECEIPT_CHECKS:
        if not predicate(receipt):
            raise ValidationError(reason)
    for item in receipt.items:
        for _field, predicate, reason in ITEM_CHECKS:
            if not predicate(item):
                raise ValidationError(reason)


__all__ = [
    "validate_receipt",
    "parse_purchase_date",
    "parse_purchase_time",
    "is_valid_amount",
    "RECEIPT_CHECKS",
    "ITEM_CHECKS",
]
