from __future__ import annotations

import asyncio

import pytest

from receipt_points.core.errors import DuplicateError, NotFoundError, ScoringError, ValidationError
from receipt_points.models.schemas import Receipt
from receipt_points.services import receipt_service as service_module
from receipt_points.services.receipt_service import KeyedLock, ReceiptService
from receipt_points.services.receipt_store import InMemoryReceiptStore

from receipt_fixtures import make_receipt


def test_process_scores_and_stores(target_receipt):
    service = ReceiptService(InMemoryReceiptStore())

    async def scenario():
        stored = await service.process(target_receipt)
        return stored, await service.get_points(stored.id), await service.list()

    stored, points, listed = asyncio.run(scenario())
    assert stored.points == 28
    assert points == 28
    assert [r.id for r in listed] == [stored.id]


def test_second_submission_is_duplicate_regardless_of_item_order(target_payload):
    service = ReceiptService(InMemoryReceiptStore())
    reordered = Receipt.model_validate(dict(target_payload, items=list(reversed(target_payload["items"]))))

    async def scenario():
        await service.process(Receipt.model_validate(target_payload))
        await service.process(reordered)

    with pytest.raises(DuplicateError):
        asyncio.run(scenario())


def test_invalid_receipt_leaves_store_untouched():
    store = InMemoryReceiptStore()
    service = ReceiptService(store)

    with pytest.raises(ValidationError):
        asyncio.run(service.process(make_receipt(total="35.3")))
    assert asyncio.run(store.list()) == []


def test_duplicate_check_runs_before_scoring(monkeypatch, target_receipt):
    service = ReceiptService(InMemoryReceiptStore())
    asyncio.run(service.process(target_receipt))

    def fail(receipt):
        raise AssertionError("duplicate receipts must not be scored")

    monkeypatch.setattr(service_module, "score_receipt", fail)
    with pytest.raises(DuplicateError):
        asyncio.run(service.process(target_receipt))


def test_scoring_error_is_surfaced_and_nothing_stored(monkeypatch, target_receipt):
    store = InMemoryReceiptStore()
    service = ReceiptService(store)

    def broken(receipt):
        raise ScoringError("unparseable total")

    monkeypatch.setattr(service_module, "score_receipt", broken)
    with pytest.raises(ScoringError):
        asyncio.run(service.process(target_receipt))
    assert asyncio.run(store.list()) == []


class YieldingStore(InMemoryReceiptStore):
    """Suspends inside the duplicate check and counts inserts."""

    def __init__(self):
        super().__init__()
        self.create_calls = 0

    async def find_duplicate(self, key):
        await asyncio.sleep(0)
        return await super().find_duplicate(key)

    async def create(self, receipt, points):
        self.create_calls += 1
        await asyncio.sleep(0)
        return await super().create(receipt, points)


def test_concurrent_submissions_of_same_receipt_accept_exactly_one(target_payload):
    store = YieldingStore()
    service = ReceiptService(store)

    async def scenario():
        submissions = []
        for i in range(10):
            items = target_payload["items"] if i % 2 else list(reversed(target_payload["items"]))
            submissions.append(service.process(Receipt.model_validate(dict(target_payload, items=items))))
        return await asyncio.gather(*submissions, return_exceptions=True)

    results = asyncio.run(scenario())
    accepted = [r for r in results if not isinstance(r, Exception)]
    rejected = [r for r in results if isinstance(r, DuplicateError)]
    assert len(accepted) == 1
    assert len(rejected) == 9
    # later submissions see the first insert before reaching the store
    assert store.create_calls == 1
    assert len(service._locks) == 0


def test_get_points_unknown_id():
    service = ReceiptService(InMemoryReceiptStore())
    with pytest.raises(NotFoundError):
        asyncio.run(service.get_points("missing"))


def test_keyed_lock_serialises_same_key_only():
    locks = KeyedLock()
    events = []

    async def worker(key, name):
        async with locks.hold(key):
            events.append(f"{name}:start")
            await asyncio.sleep(0)
            events.append(f"{name}:end")

    async def scenario():
        await asyncio.gather(worker("k", "a"), worker("k", "b"), worker("other", "c"))

    asyncio.run(scenario())
    assert events.index("a:end") < events.index("b:start")
    # Different keys do not wait for each other
    assert events.index("c:start") < events.index("b:start")
    assert len(locks) == 0
