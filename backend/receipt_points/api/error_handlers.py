"""
Custom exception handlers for FastAPI.
Every error response has the shape ``{"error": "<reason>"}``.
"""

import logging

from fastapi import Request
from fastapi.responses import JSONResponse
from fastapi.exceptions import RequestValidationError
from starlette.status import HTTP_400_BAD_REQUEST, HTTP_500_INTERNAL_SERVER_ERROR

from receipt_points.core.errors import NotFoundError, ReceiptError, ScoringError, StorageError
from receipt_points.core.observability import sentry_capture

logger = logging.getLogger(__name__)


def request_validation_exception_handler(request: Request, exc: RequestValidationError):
    # Body did not decode into a receipt (bad JSON, missing keys, wrong types)
    logger.info("Rejected malformed request body on %s: %s", request.url.path, exc.errors())
    return JSONResponse(
        status_code=HTTP_400_BAD_REQUEST,
        content={"error": "Invalid receipt format"},
    )


def receipt_exception_handler(request: Request, exc: ReceiptError):
    if isinstance(exc, ScoringError):
        logger.error("Scoring failed for a validated receipt: %s", exc.reason)
        sentry_capture(exc)
        message = "Failed to calculate points"
    elif isinstance(exc, StorageError):
        logger.error("Receipt store failure: %s", exc.reason)
        sentry_capture(exc)
        message = exc.reason
    elif isinstance(exc, NotFoundError):
        message = "Receipt not found"
    else:
        message = exc.reason
    return JSONResponse(status_code=exc.status_code, content={"error": message})


def generic_exception_handler(request: Request, exc: Exception):
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    sentry_capture(exc)
    return JSONResponse(
        status_code=HTTP_500_INTERNAL_SERVER_ERROR,
        content={"error": "Internal server error"},
    )
