"""Health check endpoints for monitoring."""
from typing import Dict, Any
from fastapi import APIRouter, Depends

from receipt_points.api.dependencies import get_receipt_service
from receipt_points.core.config import settings
from receipt_points.core.errors import StorageError
from receipt_points.services.receipt_service import ReceiptService

router = APIRouter()

@router.api_route("/health", methods=["GET", "HEAD"])
async def health_check() -> Dict[str, Any]:
    """Basic health check endpoint (supports GET & HEAD)."""
    return {
        "status": "healthy",
        "environment": settings.ENVIRONMENT,
        "version": "1.0.0"
    }

@router.get("/health/detailed")
async def detailed_health_check(service: ReceiptService = Depends(get_receipt_service)) -> Dict[str, Any]:
    """Detailed health check with store status."""
    health_status: Dict[str, Any] = {
        "status": "healthy",
        "services": {}
    }

    # Check the receipt store
    try:
        await service.store.ping()
        health_status["services"]["store"] = f"healthy ({service.store.backend.value})"
    except StorageError as e:
        health_status["services"]["store"] = f"unhealthy: {e.reason}"
        health_status["status"] = "degraded"

    return health_status
