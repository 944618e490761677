"""Rule engine that awards reward points to a receipt.

Each rule is a small function that inspects a validated
:class:`~receipt_points.models.schemas.Receipt` and returns the integer
number of points it contributes.  Rules are registered in ``HANDLERS``
keyed by :class:`~receipt_points.models.enums.ScoringRule` and are all
evaluated independently; the receipt's score is the sum of their
contributions.

Supported rules:

* ``retailer_name`` – one point for every ASCII letter or digit in the
  retailer name.
* ``round_dollar`` – 50 points if the total has no cents.
* ``quarter_multiple`` – 25 points if the total is a multiple of 0.25.
* ``item_pairs`` – 5 points for every two items on the receipt.
* ``description_length`` – if the trimmed length of an item description
  is a multiple of 3, the item's price multiplied by 0.2 and rounded up.
* ``odd_day`` – 6 points if the day in the purchase date is odd.
* ``afternoon_window`` – 10 points if the purchase time is after 14:00
  and before 16:00.  14:00 itself earns nothing, 15:59 does.

Amounts are converted to integer cents straight from their digits, so
rule arithmetic is exact for totals and prices of any length.  A receipt
whose date, time or amounts cannot be parsed raises
:class:`~receipt_points.core.errors.ScoringError`; callers are expected
to validate first, so this only surfaces on an internal inconsistency.
"""

from __future__ import annotations

import datetime as dt
import logging
import re
from typing import Callable, Dict

from receipt_points.core.errors import ScoringError
from receipt_points.models.enums import ScoringRule
from receipt_points.models.schemas import Receipt
from receipt_points.services.validation import (
    is_valid_amount,
    parse_purchase_date,
    parse_purchase_time,
)

logger = logging.getLogger(__name__)

_ALPHANUMERIC = re.compile(r"[A-Za-z0-9]")


def _parse_cents(value: str, field: str) -> int:
    """Convert a two-decimal amount string into whole cents."""
    if not is_valid_amount(value):
        raise ScoringError(f"unparseable {field}: {value!r}")
    whole, frac = value.split(".")
    try:
        return int(whole) * 100 + int(frac)
    except ValueError as exc:
        # past the interpreter's integer string conversion limit
        raise ScoringError(f"unparseable {field}: too many digits") from exc


def _total_in_cents(receipt: Receipt) -> int:
    return _parse_cents(receipt.total, "total")


def _score_retailer_name(receipt: Receipt) -> int:
    return len(_ALPHANUMERIC.findall(receipt.retailer))


def _score_round_dollar(receipt: Receipt) -> int:
    return 50 if _total_in_cents(receipt) % 100 == 0 else 0


def _score_quarter_multiple(receipt: Receipt) -> int:
    return 25 if _total_in_cents(receipt) % 25 == 0 else 0


def _score_item_pairs(receipt: Receipt) -> int:
    return len(receipt.items) // 2 * 5


def _score_description_length(receipt: Receipt) -> int:
    points = 0
    for item in receipt.items:
        if len(item.short_description.strip()) % 3 == 0:
            cents = _parse_cents(item.price, "item price")
            # ceil(price * 0.2) == ceil(cents / 500)
            points += -(-cents // 500)
    return points


def _score_odd_day(receipt: Receipt) -> int:
    purchase_date = parse_purchase_date(receipt.purchase_date)
    if purchase_date is None:
        raise ScoringError(f"unparseable purchase date: {receipt.purchase_date!r}")
    return 6 if purchase_date.day % 2 == 1 else 0


def _in_afternoon_window(purchase_time: dt.time) -> bool:
    return (purchase_time.hour == 14 and purchase_time.minute > 0) or purchase_time.hour == 15


def _score_afternoon_window(receipt: Receipt) -> int:
    purchase_time = parse_purchase_time(receipt.purchase_time)
    if purchase_time is None:
        raise ScoringError(f"unparseable purchase time: {receipt.purchase_time!r}")
    return 10 if _in_afternoon_window(purchase_time) else 0


HANDLERS: Dict[ScoringRule, Callable[[Receipt], int]] = {
    ScoringRule.RETAILER_NAME: _score_retailer_name,
    ScoringRule.ROUND_DOLLAR: _score_round_dollar,
    ScoringRule.QUARTER_MULTIPLE: _score_quarter_multiple,
    ScoringRule.ITEM_PAIRS: _score_item_pairs,
    ScoringRule.DESCRIPTION_LENGTH: _score_description_length,
    ScoringRule.ODD_DAY: _score_odd_day,
    ScoringRule.AFTERNOON_WINDOW: _score_afternoon_window,
}


def score_breakdown(receipt: Receipt) -> Dict[ScoringRule, int]:
    """Return the points contributed by each rule.

    :param receipt: A receipt that has passed validation.
    :returns: A mapping of every rule in ``HANDLERS`` to its contribution.
    :raises ScoringError: if a date, time or amount cannot be parsed.
    """
    return {rule: handler(receipt) for rule, handler in HANDLERS.items()}


def score_receipt(receipt: Receipt) -> int:
    """Return the total number of points awarded to ``receipt``."""
    breakdown = score_breakdown(receipt)
    total = sum(breakdown.values())
    logger.debug(
        "scored receipt from %s: %d (%s)",
        receipt.retailer,
        total,
        ", ".join(f"{rule.value}={points}" for rule, points in breakdown.items()),
    )
    return total


__all__ = ["HANDLERS", "score_breakdown", "score_receipt"]
