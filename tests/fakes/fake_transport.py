"""Transporte HTTP fake para testes (implementa HttpTransportProtocol)."""

from __future__ import annotations

from collections import deque
from dataclasses import dataclass, field
from typing import Any

import httpx


@dataclass
class RecordedPost:
    url: str
    json: Any = None
    params: dict[str, str] | None = None
    headers: dict[str, str] = field(default_factory=dict)
    timeout: float | None = None
    auth: tuple[str, str] | None = None


class FakeTransport:
    """Devolve respostas enfileiradas e registra cada POST.

    Cada item da fila é um `httpx.Response`, um status int (corpo `{}`)
    ou uma exceção a levantar. Fila vazia responde `default_status`.
    """

    def __init__(self, *outcomes: Any, default_status: int = 200) -> None:
        self._outcomes: deque[Any] = deque(outcomes)
        self.default_status = default_status
        self.calls: list[RecordedPost] = []

    def queue(self, *outcomes: Any) -> None:
        self._outcomes.extend(outcomes)

    async def post(
        self,
        url: str,
        *,
        json: Any | None = None,
        params: dict[str, str] | None = None,
        headers: dict[str, str] | None = None,
        timeout: float | None = None,
        auth: tuple[str, str] | None = None,
    ) -> httpx.Response:
        self.calls.append(
            RecordedPost(url, json, params, dict(headers or {}), timeout, auth)
        )
        outcome = self._outcomes.popleft() if self._outcomes else self.default_status
        if isinstance(outcome, BaseException):
            raise outcome
        if isinstance(outcome, int):
            return httpx.Response(outcome, json={})
        return outcome

    async def aclose(self) -> None:
        return None


def json_response(body: Any, status_code: int = 200) -> httpx.Response:
    return httpx.Response(status_code, json=body)
