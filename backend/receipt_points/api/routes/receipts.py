"""API routes for receipt processing and retrieval."""

from __future__ import annotations

from typing import List

from fastapi import APIRouter, Depends

from receipt_points.api.dependencies import get_receipt_service
from receipt_points.models.schemas import (
    ErrorResponse,
    PointsResponse,
    ProcessResponse,
    Receipt,
    StoredReceipt,
)
from receipt_points.services.receipt_service import ReceiptService

router = APIRouter(prefix="/receipts", tags=["receipts"])


@router.post(
    "/process",
    response_model=ProcessResponse,
    responses={400: {"model": ErrorResponse}, 409: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
)
async def process_receipt(
    receipt: Receipt,
    service: ReceiptService = Depends(get_receipt_service),
) -> ProcessResponse:
    """Validate, score and store a receipt; return its id and points."""
    stored = await service.process(receipt)
    return ProcessResponse(id=stored.id, points=stored.points)


@router.get(
    "/{receipt_id}/points",
    response_model=PointsResponse,
    responses={404: {"model": ErrorResponse}},
)
async def get_points(
    receipt_id: str,
    service: ReceiptService = Depends(get_receipt_service),
) -> PointsResponse:
    """Return the points awarded to a receipt."""
    return PointsResponse(points=await service.get_points(receipt_id))


@router.get(
    "/{receipt_id}",
    response_model=StoredReceipt,
    responses={404: {"model": ErrorResponse}},
)
async def get_receipt(
    receipt_id: str,
    service: ReceiptService = Depends(get_receipt_service),
) -> StoredReceipt:
    """Return a single stored receipt."""
    return await service.get(receipt_id)


@router.get("", response_model=List[StoredReceipt])
async def list_receipts(
    service: ReceiptService = Depends(get_receipt_service),
) -> List[StoredReceipt]:
    """List every processed receipt, most recent first."""
    return await service.list()
