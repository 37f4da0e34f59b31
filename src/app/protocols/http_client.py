"""Protocolo do transporte HTTP.

Usado tanto para chamadas às APIs de operadora quanto para entrega
de webhooks. Todo POST carrega timeout explícito.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol

if TYPE_CHECKING:
    import httpx


class HttpTransportProtocol(Protocol):
    """Contrato mínimo de POST com timeout e headers."""

    async def post(
        self,
        url: str,
        *,
        json: Any | None = None,
        params: dict[str, str] | None = None,
        headers: dict[str, str] | None = None,
        timeout: float | None = None,
        auth: tuple[str, str] | None = None,
    ) -> httpx.Response: ...
