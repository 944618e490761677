"""Entry point for the FastAPI application.

This module constructs the FastAPI app, includes all routers and sets up
the startup and shutdown lifecycle.  When run with uvicorn it builds the
receipt store selected by ``settings.STORE_BACKEND`` (creating the
database tables first when the database backend is active).

Run locally with::

    uvicorn receipt_points.api.main:app --reload

or through the ``receipt-points`` console script.
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware

from receipt_points.api.endpoints.health import router as health_router
from receipt_points.api.error_handlers import (
    generic_exception_handler,
    receipt_exception_handler,
    request_validation_exception_handler,
)
from receipt_points.api.routes.receipts import router as receipts_router
from receipt_points.core.config import get_store_backend, settings
from receipt_points.core.database import init_db
from receipt_points.core.errors import ReceiptError
from receipt_points.core.observability import configure_logging, init_sentry
from receipt_points.models.enums import StoreBackend
from receipt_points.services.receipt_service import ReceiptService
from receipt_points.services.receipt_store import ReceiptStore, build_store

# Configure logging
configure_logging()
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Manage application lifecycle."""
    # Startup
    logger.info("Starting up...")
    if init_sentry("api"):
        logger.info("Sentry SDK initialized (api)")
    store: Optional[ReceiptStore] = getattr(app.state, "receipt_store", None)
    if store is None:
        backend = StoreBackend(get_store_backend())
        if backend is StoreBackend.DATABASE:
            await init_db()
        store = build_store(backend)
        app.state.receipt_store = store
    app.state.receipt_service = ReceiptService(store)
    logger.info("Receipt store ready (%s)", store.backend.value)
    yield
    # Shutdown
    logger.info("Shutting down...")
    await store.close()


def create_app(store: Optional[ReceiptStore] = None) -> FastAPI:
    """Build the FastAPI app, optionally around an existing ``store``."""
    app = FastAPI(
        title=settings.PROJECT_NAME,
        version="1.0.0",
        lifespan=lifespan,
    )
    if store is not None:
        app.state.receipt_store = store

    app.add_middleware(
        CORSMiddleware,
        allow_origins=list(settings.BACKEND_CORS_ORIGINS or ["*"]),
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=["Content-Type"],
    )

    # Register custom exception handlers
    app.add_exception_handler(RequestValidationError, request_validation_exception_handler)
    app.add_exception_handler(ReceiptError, receipt_exception_handler)
    app.add_exception_handler(Exception, generic_exception_handler)

    # Include routers
    app.include_router(receipts_router)
    app.include_router(health_router)
    return app


app = create_app()


def run() -> None:
    """Serve the app with uvicorn on ``settings.HOST:settings.PORT``."""
    import uvicorn

    uvicorn.run(app, host=settings.HOST, port=settings.PORT, log_level=settings.LOG_LEVEL.lower())
