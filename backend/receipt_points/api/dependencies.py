"""Common dependencies for FastAPI routes."""

from __future__ import annotations

from fastapi import Request

from receipt_points.services.receipt_service import ReceiptService


def get_receipt_service(request: Request) -> ReceiptService:
    """Return the service created for this app in the lifespan handler."""
    return request.app.state.receipt_service
