"""Error types raised while processing receipts.

Every error is scoped to a single submission.  The API layer maps each
type to an HTTP status in ``receipt_points.api.error_handlers``.
"""

from __future__ import annotations


class ReceiptError(Exception):
    """Base class for receipt processing failures."""

    status_code: int = 500

    def __init__(self, reason: str) -> None:
        super().__init__(reason)
        self.reason = reason


class ValidationError(ReceiptError):
    """A submitted field is malformed or the receipt is incomplete."""

    status_code = 400


class DuplicateError(ReceiptError):
    """An identical receipt has already been processed."""

    status_code = 409

    def __init__(self, reason: str = "This receipt has already been processed") -> None:
        super().__init__(reason)


class ScoringError(ReceiptError):
    """A receipt that passed validation still could not be scored."""

    status_code = 500


class StorageError(ReceiptError):
    """The receipt store failed to read or write."""

    status_code = 500


class NotFoundError(ReceiptError):
    """No receipt is stored under the requested id."""

    status_code = 404

    def __init__(self, receipt_id: str) -> None:
        super().__init__(f"receipt not found: {receipt_id}")
        self.receipt_id = receipt_id


__all__ = [
    "ReceiptError",
    "ValidationError",
    "DuplicateError",
    "ScoringError",
    "StorageError",
    "NotFoundError",
]
