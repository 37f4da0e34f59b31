"""Testes do endpoint de notificações inbound de billing."""

from __future__ import annotations

import json
from types import SimpleNamespace

import pytest
from starlette.requests import Request

from api.normalizers.operators import normalize_status
from api.routes.webhooks.router import receive_billing_notification
from app.infra.stores import MemoryBillingRecordStore
from app.observability import get_correlation_id
from app.webhooks import InboundWebhookProcessor, NotificationHandlers


def _build_request(
    state: SimpleNamespace,
    *,
    body: bytes = b"",
    headers: dict[str, str] | None = None,
) -> Request:
    header_items = headers or {}
    raw_headers = [(k.lower().encode("utf-8"), v.encode("utf-8")) for k, v in header_items.items()]
    scope = {
        "type": "http",
        "asgi": {"version": "3.0"},
        "http_version": "1.1",
        "method": "POST",
        "path": "/webhooks/billing",
        "raw_path": b"/webhooks/billing",
        "query_string": b"",
        "headers": raw_headers,
        "app": SimpleNamespace(state=state),
    }
    sent = False

    async def _receive() -> dict[str, object]:
        nonlocal sent
        if sent:
            return {"type": "http.request", "body": b"", "more_body": False}
        sent = True
        return {"type": "http.request", "body": body, "more_body": False}

    return Request(scope, _receive)


@pytest.mark.asyncio
async def test_returns_ack_and_processes_in_background() -> None:
    store = MemoryBillingRecordStore({"sub-1": {"status": "pending"}})
    processor = InboundWebhookProcessor(NotificationHandlers(store, status_mapper=normalize_status))
    body = json.dumps(
        {"success": {"uuid": "sub-1", "transaction": {"uuid": "tx-1", "status": "CHARGED"}}}
    ).encode("utf-8")
    request = _build_request(
        SimpleNamespace(core=SimpleNamespace(inbound=processor)),
        body=body,
        headers={"X-Correlation-ID": "corr-123"},
    )

    response = await receive_billing_notification(request)
    payload = json.loads(response.body.decode("utf-8"))

    assert response.status_code == 200
    assert payload == {"status": "received", "correlation_id": "corr-123"}
    assert get_correlation_id() == ""

    await processor.drain(timeout_seconds=1.0)
    assert store.subscriptions["sub-1"]["status"] == "active"


@pytest.mark.asyncio
async def test_ack_generated_correlation_id() -> None:
    processor = InboundWebhookProcessor(
        NotificationHandlers(MemoryBillingRecordStore(), status_mapper=normalize_status)
    )
    request = _build_request(SimpleNamespace(core=SimpleNamespace(inbound=processor)), body=b"{}")

    response = await receive_billing_notification(request)
    payload = json.loads(response.body.decode("utf-8"))

    assert payload["status"] == "received"
    assert payload["correlation_id"]
    await processor.drain()


@pytest.mark.asyncio
async def test_unavailable_without_core() -> None:
    response = await receive_billing_notification(_build_request(SimpleNamespace(), body=b"{}"))
    assert response.status_code == 503
