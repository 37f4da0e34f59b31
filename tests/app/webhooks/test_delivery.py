"""Testes da entrega outbound de webhooks (retry cumulativo e retomada)."""

from __future__ import annotations

from typing import Any

import pytest

from app.infra.http import TIMEOUT, HttpError
from app.infra.stores import MemoryWebhookRetryStore
from app.webhooks import (
    DeliveryStatus,
    RetryScheduler,
    WebhookDeliveryAttempt,
    WebhookDeliveryService,
)
from config.settings import WebhookSettings
from tests.fakes.fake_transport import FakeTransport
from tests.fakes.manual_clock import ManualClock
from utils.errors import DeliveryFailureError, ErrorCategory

HOUR = 3600
MERCHANT_URL = "https://merchant.test/hooks"
PAYLOAD = {"event": "subscription.created", "subscription_id": "sub-1"}


class RecordingStore(MemoryWebhookRetryStore):
    """Store em memória que registra cada gravação."""

    def __init__(self, fail_saves: bool = False) -> None:
        super().__init__()
        self.fail_saves = fail_saves
        self.saved: list[tuple[WebhookDeliveryAttempt, int]] = []
        self.deleted: list[str] = []

    async def save(self, attempt: WebhookDeliveryAttempt, ttl_seconds: int) -> None:
        if self.fail_saves:
            raise ConnectionError("store fora")
        self.saved.append((attempt, ttl_seconds))
        await super().save(attempt, ttl_seconds)

    async def delete(self, delivery_id: str) -> None:
        self.deleted.append(delivery_id)
        await super().delete(delivery_id)


def _service(
    transport: FakeTransport,
    store: RecordingStore,
    clock: ManualClock,
    settings: WebhookSettings | None = None,
) -> WebhookDeliveryService:
    return WebhookDeliveryService(
        transport,
        store,
        settings=settings or WebhookSettings(),
        scheduler=RetryScheduler(clock=clock, sleep=clock.sleep),
        clock=clock,
    )


class TestFirstAttempt:
    @pytest.mark.asyncio
    async def test_success_on_200(self) -> None:
        transport = FakeTransport(200)
        store = RecordingStore()
        service = _service(transport, store, ManualClock())

        result = await service.send(MERCHANT_URL, PAYLOAD, headers={"X-Merchant": "m-1"})

        assert result.success is True
        assert result.attempt == 1
        assert result.delivery_id.startswith("wh_")
        call = transport.calls[0]
        assert call.url == MERCHANT_URL
        assert call.json == PAYLOAD
        assert call.timeout == 30.0
        assert call.headers["X-Webhook-ID"] == result.delivery_id
        assert call.headers["X-Attempt"] == "1"
        assert call.headers["User-Agent"] == "Unified-Billing-Platform/1.0"
        assert call.headers["Content-Type"] == "application/json"
        assert call.headers["X-Merchant"] == "m-1"
        assert store.saved == []

    @pytest.mark.asyncio
    async def test_201_counts_as_success(self) -> None:
        service = _service(FakeTransport(201), RecordingStore(), ManualClock())
        result = await service.send(MERCHANT_URL, PAYLOAD)
        assert result.status is DeliveryStatus.DELIVERED
        assert result.status_code == 201

    @pytest.mark.parametrize("status_code", [202, 204, 301, 404, 500])
    @pytest.mark.asyncio
    async def test_other_statuses_schedule_retry(self, status_code: int) -> None:
        clock = ManualClock()
        service = _service(FakeTransport(status_code), RecordingStore(), clock)

        result = await service.send(MERCHANT_URL, PAYLOAD, delivery_id="wh_fixed")

        assert result.status is DeliveryStatus.RETRYING
        assert result.status_code == status_code
        assert result.next_attempt_at == clock.now + 4 * HOUR
        assert service.scheduler.is_scheduled("wh_fixed")
        service.cleanup()

    @pytest.mark.asyncio
    async def test_transport_error_is_delivery_failure(self) -> None:
        store = RecordingStore()
        service = _service(FakeTransport(HttpError("timeout", code=TIMEOUT)), store, ManualClock())

        result = await service.send(MERCHANT_URL, PAYLOAD)

        assert result.status is DeliveryStatus.RETRYING
        assert result.status_code is None
        saved, _ = store.saved[0]
        assert saved.last_error == TIMEOUT
        assert saved.attempt == 2
        service.cleanup()


class TestRetrySchedule:
    @pytest.mark.asyncio
    async def test_seven_attempts_then_permanent_failure(self) -> None:
        clock = ManualClock()
        transport = FakeTransport(default_status=503)
        store = RecordingStore()
        service = _service(transport, store, clock)

        await service.send(MERCHANT_URL, PAYLOAD, delivery_id="wh_1")
        await service.scheduler.join()

        assert [c.headers["X-Attempt"] for c in transport.calls] == [str(n) for n in range(1, 8)]
        stats = service.get_statistics()
        assert stats["max_attempts"] == 7
        assert stats["retries_scheduled"] == 6
        assert stats["failed_permanently"] == 1
        assert stats["delivered"] == 0
        assert stats["pending_retries"] == 0
        assert await store.load_pending() == []
        assert store.deleted == ["wh_1"]

    @pytest.mark.asyncio
    async def test_offsets_are_cumulative_from_first_failure(self) -> None:
        clock = ManualClock(start=10_000.0)
        store = RecordingStore()
        settings = WebhookSettings(retry_offsets_hours=(1.0, 3.0, 6.0))
        service = _service(FakeTransport(default_status=500), store, clock, settings)

        await service.send(MERCHANT_URL, PAYLOAD)
        await service.scheduler.join()

        due_times = [attempt.next_attempt_at for attempt, _ in store.saved]
        assert due_times == [10_000.0 + 1 * HOUR, 10_000.0 + 3 * HOUR, 10_000.0 + 6 * HOUR]
        assert all(attempt.first_failed_at == 10_000.0 for attempt, _ in store.saved)
        assert clock.sleeps == [1 * HOUR, 2 * HOUR, 3 * HOUR]

    @pytest.mark.asyncio
    async def test_record_ttl_covers_due_time(self) -> None:
        store = RecordingStore()
        service = _service(FakeTransport(500), store, ManualClock())

        await service.send(MERCHANT_URL, PAYLOAD)

        _, ttl = store.saved[0]
        assert ttl == 4 * HOUR + 3600
        service.cleanup()

    @pytest.mark.asyncio
    async def test_retry_success_removes_record(self) -> None:
        transport = FakeTransport(500, 200)
        store = RecordingStore()
        service = _service(transport, store, ManualClock())

        first = await service.send(MERCHANT_URL, PAYLOAD, delivery_id="wh_2")
        await service.scheduler.join()

        assert first.status is DeliveryStatus.RETRYING
        assert transport.calls[1].headers["X-Attempt"] == "2"
        assert service.get_statistics()["delivered"] == 1
        assert await store.load_pending() == []

    @pytest.mark.asyncio
    async def test_success_on_last_attempt_stops_retries(self) -> None:
        clock = ManualClock()
        transport = FakeTransport(500, 500, 500, 500, 500, 500, 200)
        store = RecordingStore()
        service = _service(transport, store, clock)

        await service.send(MERCHANT_URL, PAYLOAD, delivery_id="wh_11")
        await service.scheduler.join()

        assert len(transport.calls) == 7
        assert transport.calls[-1].headers["X-Attempt"] == "7"
        assert clock.sleeps == [4 * HOUR] * 6
        stats = service.get_statistics()
        assert stats["delivered"] == 1
        assert stats["failed_permanently"] == 0
        assert stats["pending_retries"] == 0
        assert await store.load_pending() == []
        assert store.deleted == ["wh_11"]

    @pytest.mark.asyncio
    async def test_permanent_failure_carries_delivery_error(self) -> None:
        settings = WebhookSettings(retry_offsets_hours=())
        service = _service(FakeTransport(503), RecordingStore(), ManualClock(), settings)

        result = await service.send(MERCHANT_URL, PAYLOAD, delivery_id="wh_12")

        assert result.status is DeliveryStatus.FAILED_PERMANENTLY
        assert isinstance(result.error, DeliveryFailureError)
        assert result.error.code == "DELIVERY_FAILED"
        assert result.error.category is ErrorCategory.DELIVERY_FAILURE
        assert result.error.original_code == "HTTP_503"
        assert not result.error.is_local

    @pytest.mark.asyncio
    async def test_retrying_result_has_no_error(self) -> None:
        service = _service(FakeTransport(500), RecordingStore(), ManualClock())
        result = await service.send(MERCHANT_URL, PAYLOAD)

        assert result.status is DeliveryStatus.RETRYING
        assert result.error is None
        service.cleanup()

    @pytest.mark.asyncio
    async def test_persist_failure_keeps_timer(self) -> None:
        service = _service(FakeTransport(500), RecordingStore(fail_saves=True), ManualClock())
        result = await service.send(MERCHANT_URL, PAYLOAD, delivery_id="wh_3")

        assert result.status is DeliveryStatus.RETRYING
        assert service.scheduler.is_scheduled("wh_3")
        service.cleanup()


class TestSupersedeAndRestart:
    @pytest.mark.asyncio
    async def test_resend_supersedes_pending_retry(self) -> None:
        transport = FakeTransport(500, 200)
        store = RecordingStore()
        # relógio real: o retry de +4h nunca vence durante o teste
        service = WebhookDeliveryService(transport, store)

        await service.send(MERCHANT_URL, PAYLOAD, delivery_id="wh_4")
        assert service.scheduler.is_scheduled("wh_4")

        result = await service.send(MERCHANT_URL, {"event": "v2"}, delivery_id="wh_4")

        assert result.success is True
        assert result.attempt == 1
        assert transport.calls[1].headers["X-Attempt"] == "1"
        assert not service.scheduler.is_scheduled("wh_4")
        assert await store.load_pending() == []
        assert service.get_statistics()["superseded"] == 1

    @pytest.mark.asyncio
    async def test_restore_pending_resumes_with_attempt_number(self) -> None:
        clock = ManualClock()
        store = RecordingStore()
        overdue = WebhookDeliveryAttempt(
            delivery_id="wh_5",
            url=MERCHANT_URL,
            payload=PAYLOAD,
            attempt=3,
            status=DeliveryStatus.RETRYING,
            next_attempt_at=clock.now - 60,
            first_failed_at=clock.now - 8 * HOUR,
        )
        future = overdue.advance(delivery_id="wh_6", next_attempt_at=clock.now + HOUR)
        finished = overdue.advance(delivery_id="wh_7", status=DeliveryStatus.DELIVERED)
        for attempt in (overdue, future, finished):
            await MemoryWebhookRetryStore.save(store, attempt, 86400)

        transport = FakeTransport(default_status=200)
        service = _service(transport, store, clock)

        restored = await service.restore_pending()
        await service.scheduler.join()

        assert restored == 2
        assert sorted(c.headers["X-Webhook-ID"] for c in transport.calls) == ["wh_5", "wh_6"]
        assert {c.headers["X-Attempt"] for c in transport.calls} == {"3"}
        assert clock.sleeps == [HOUR]
        assert await store.load_pending() == []

    @pytest.mark.asyncio
    async def test_restored_attempt_keeps_original_schedule(self) -> None:
        clock = ManualClock(start=50_000.0)
        store = RecordingStore()
        pending = WebhookDeliveryAttempt(
            delivery_id="wh_8",
            url=MERCHANT_URL,
            payload=PAYLOAD,
            attempt=2,
            status=DeliveryStatus.RETRYING,
            next_attempt_at=clock.now,
            first_failed_at=clock.now - 4 * HOUR,
        )
        await MemoryWebhookRetryStore.save(store, pending, 86400)
        service = _service(FakeTransport(500, 200), store, clock)

        await service.restore_pending()
        await service.scheduler.join()

        rescheduled, _ = store.saved[0]
        assert rescheduled.attempt == 3
        assert rescheduled.next_attempt_at == pending.first_failed_at + 8 * HOUR

    @pytest.mark.asyncio
    async def test_restore_after_window_makes_one_final_attempt(self) -> None:
        clock = ManualClock()
        store = RecordingStore()
        stale = WebhookDeliveryAttempt(
            delivery_id="wh_13",
            url=MERCHANT_URL,
            payload=PAYLOAD,
            attempt=3,
            status=DeliveryStatus.RETRYING,
            next_attempt_at=clock.now - 22 * HOUR,
            first_failed_at=clock.now - 30 * HOUR,
        )
        await MemoryWebhookRetryStore.save(store, stale, 86400)
        transport = FakeTransport(default_status=500)
        service = _service(transport, store, clock)

        await service.restore_pending()
        await service.scheduler.join()

        assert [c.headers["X-Attempt"] for c in transport.calls] == ["3"]
        stats = service.get_statistics()
        assert stats["failed_permanently"] == 1
        assert stats["retries_scheduled"] == 0
        assert store.saved == []
        assert await store.load_pending() == []

    @pytest.mark.asyncio
    async def test_cleanup_keeps_records(self) -> None:
        store = RecordingStore()
        service = WebhookDeliveryService(FakeTransport(default_status=500), store)

        await service.send(MERCHANT_URL, PAYLOAD, delivery_id="wh_9")
        await service.send(MERCHANT_URL, PAYLOAD, delivery_id="wh_10")

        assert service.cleanup() == 2
        assert service.get_statistics()["pending_retries"] == 0
        assert len(await store.load_pending()) == 2


def test_statistics_shape() -> None:
    service = WebhookDeliveryService(FakeTransport(), MemoryWebhookRetryStore())
    stats: dict[str, Any] = service.get_statistics()
    assert stats["retry_offsets_hours"] == [4.0, 8.0, 12.0, 16.0, 20.0, 24.0]
    assert stats["sent"] == 0
