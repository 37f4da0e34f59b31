"""Testes dos stores em memória."""

from __future__ import annotations

import json

import pytest

import app.infra.stores.memory_stores as memory_stores
from app.infra.stores import (
    MemoryBillingRecordStore,
    MemoryCache,
    MemoryDedupeStore,
    MemoryOperatorStore,
    MemoryWebhookRetryStore,
)
from app.operators import OperatorRegistration
from app.webhooks import DeliveryStatus, WebhookDeliveryAttempt


@pytest.mark.asyncio
async def test_cache_ttl_expiry(monkeypatch: pytest.MonkeyPatch) -> None:
    cache = MemoryCache()
    await cache.set_with_ttl("k", "v", 10)
    assert await cache.get("k") == "v"

    real_time = memory_stores.time.time
    monkeypatch.setattr(memory_stores.time, "time", lambda: real_time() + 11)
    assert await cache.get("k") is None


@pytest.mark.asyncio
async def test_dedupe_seen_and_forget() -> None:
    store = MemoryDedupeStore()
    assert await store.seen("hash-1", 60) is False
    assert await store.seen("hash-1", 60) is True
    await store.forget("hash-1")
    assert await store.seen("hash-1", 60) is False


class TestOperatorStore:
    @pytest.mark.asyncio
    async def test_active_excludes_inactive_status(self) -> None:
        store = MemoryOperatorStore(
            [
                OperatorRegistration(code="a", enabled=False),
                OperatorRegistration(code="b", status="maintenance"),
                OperatorRegistration(code="c", status="inactive"),
            ]
        )
        codes = sorted(r.code for r in await store.find_active_registrations())
        assert codes == ["a", "b"]

    @pytest.mark.asyncio
    async def test_update_returns_new_record(self) -> None:
        store = MemoryOperatorStore([OperatorRegistration(code="a")])
        updated = await store.update_registration("a", {"enabled": False, "disable_reason": "x"})

        assert updated is not None
        assert updated.enabled is False
        assert (await store.load_registration("a")) == updated
        assert await store.update_registration("missing", {"enabled": True}) is None

    @pytest.mark.asyncio
    async def test_audit_log_bounded(self) -> None:
        store = MemoryOperatorStore(max_audit_records=2)
        for n in range(3):
            await store.append_audit_record({"n": n})
        assert [entry["n"] for entry in store.get_audit_records()] == [1, 2]


class TestWebhookRetryStore:
    @pytest.mark.asyncio
    async def test_roundtrip_through_json(self) -> None:
        store = MemoryWebhookRetryStore()
        attempt = WebhookDeliveryAttempt(
            delivery_id="wh_1",
            url="https://m.test",
            payload={"a": 1},
            attempt=2,
            status=DeliveryStatus.RETRYING,
            next_attempt_at=100.0,
            first_failed_at=50.0,
            headers={"X-Merchant": "m"},
        )
        await store.save(attempt, 60)

        assert await store.load_pending() == [attempt]
        await store.delete("wh_1")
        assert await store.load_pending() == []

    @pytest.mark.asyncio
    async def test_unserializable_payload_fails(self) -> None:
        store = MemoryWebhookRetryStore()
        attempt = WebhookDeliveryAttempt(delivery_id="wh_2", url="u", payload={"at": object()})
        with pytest.raises(TypeError):
            await store.save(attempt, 60)

    @pytest.mark.asyncio
    async def test_expired_records_skipped(self) -> None:
        store = MemoryWebhookRetryStore()
        await store.save(WebhookDeliveryAttempt(delivery_id="wh_3", url="u", payload={}), -10)
        assert await store.load_pending() == []


class TestBillingRecordStore:
    @pytest.mark.asyncio
    async def test_update_and_upsert(self) -> None:
        store = MemoryBillingRecordStore({"sub-1": {"status": "pending"}})

        assert await store.update_subscription("sub-1", {"status": "active"}) is True
        assert await store.update_subscription("sub-2", {"status": "active"}) is False

        await store.upsert_transaction({"uuid": "tx-1", "status": "PENDING"})
        await store.upsert_transaction({"uuid": "tx-1", "status": "CHARGED"})
        assert store.transactions == {"tx-1": {"uuid": "tx-1", "status": "CHARGED"}}
        assert json.dumps(store.subscriptions) == '{"sub-1": {"status": "active"}}'
