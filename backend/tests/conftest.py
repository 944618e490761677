from __future__ import annotations

import sys
from pathlib import Path

import pytest

# Add backend folder to sys.path so `import receipt_points...` works in tests when running from backend root
BACKEND_DIR = Path(__file__).resolve().parents[1]
if str(BACKEND_DIR) not in sys.path:
    sys.path.insert(0, str(BACKEND_DIR))

from fastapi.testclient import TestClient  # noqa: E402

from receipt_points.api.main import create_app  # noqa: E402
from receipt_points.models.schemas import Receipt  # noqa: E402
from receipt_points.services.receipt_store import InMemoryReceiptStore  # noqa: E402

from receipt_fixtures import CORNER_MARKET_RECEIPT, TARGET_RECEIPT, copy_payload  # noqa: E402


@pytest.fixture
def target_payload() -> dict:
    return copy_payload(TARGET_RECEIPT)


@pytest.fixture
def corner_market_payload() -> dict:
    return copy_payload(CORNER_MARKET_RECEIPT)


@pytest.fixture
def target_receipt(target_payload) -> Receipt:
    return Receipt.model_validate(target_payload)


@pytest.fixture
def client():
    app = create_app(store=InMemoryReceiptStore())
    with TestClient(app) as test_client:
        yield test_client
