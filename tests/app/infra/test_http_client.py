"""Testes do transporte HTTP (httpx.MockTransport)."""

from __future__ import annotations

import httpx
import pytest

from app.infra.http import NETWORK_ERROR, TIMEOUT, HttpClient, HttpClientConfig, HttpError


def _client(handler, **config: object) -> HttpClient:
    async_client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return HttpClient(HttpClientConfig(backoff_base_seconds=0.0, **config), async_client)


@pytest.mark.asyncio
async def test_post_forwards_params_auth_and_headers() -> None:
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json={"success": {}})

    client = _client(handler, default_headers={"X-Default": "1"})
    response = await client.post(
        "https://billing.test/v2.2/pin",
        params={"msisdn": "123"},
        headers={"Accept": "application/json"},
        timeout=5.0,
        auth=("user", "pass"),
    )

    assert response.status_code == 200
    request = seen[0]
    assert request.url.params["msisdn"] == "123"
    assert request.headers["X-Default"] == "1"
    assert request.headers["Authorization"].startswith("Basic ")
    await client.aclose()


@pytest.mark.asyncio
async def test_error_status_returned_to_caller() -> None:
    client = _client(lambda request: httpx.Response(503))
    response = await client.post("https://merchant.test", json={"a": 1})
    assert response.status_code == 503


@pytest.mark.asyncio
async def test_timeout_becomes_http_error() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ReadTimeout("slow", request=request)

    with pytest.raises(HttpError) as exc_info:
        await _client(handler).post("https://merchant.test", json={})
    assert exc_info.value.code == TIMEOUT
    assert exc_info.value.is_retryable is True


@pytest.mark.asyncio
async def test_connection_error_retried_then_raised() -> None:
    calls: list[int] = []

    def handler(request: httpx.Request) -> httpx.Response:
        calls.append(1)
        raise httpx.ConnectError("refused", request=request)

    with pytest.raises(HttpError) as exc_info:
        await _client(handler, max_retries=2).post("https://merchant.test", json={})

    assert exc_info.value.code == NETWORK_ERROR
    assert len(calls) == 3


@pytest.mark.asyncio
async def test_retry_recovers() -> None:
    outcomes = iter([httpx.ConnectError("refused"), httpx.Response(201)])

    def handler(request: httpx.Request) -> httpx.Response:
        outcome = next(outcomes)
        if isinstance(outcome, Exception):
            raise outcome
        return outcome

    response = await _client(handler, max_retries=1).post("https://merchant.test", json={})
    assert response.status_code == 201
