"""Cliente HTTP assíncrono (httpx) para APIs de operadora e webhooks.

Todo POST carrega timeout explícito. Timeout e falha de conexão viram
HttpError com `code` distinto, e são tratados igualmente para retry.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Any

import httpx

logger = logging.getLogger(__name__)

# Códigos de HttpError
TIMEOUT = "TIMEOUT"
NETWORK_ERROR = "NETWORK_ERROR"
HTTP_STATUS = "HTTP_STATUS"


@dataclass
class HttpClientConfig:
    """Configuração do cliente HTTP."""

    timeout_seconds: float = 30.0
    max_retries: int = 0
    backoff_base_seconds: float = 2.0
    backoff_max_seconds: float = 30.0
    default_headers: dict[str, str] = field(default_factory=dict)
    verify_ssl: bool = True


class HttpError(Exception):
    """Erro de requisição HTTP sem dados sensíveis."""

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        is_retryable: bool = False,
        code: str = HTTP_STATUS,
    ) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.is_retryable = is_retryable
        self.code = code


class HttpClient:
    """Transporte HTTP assíncrono (implementa HttpTransportProtocol).

    Args:
        config: Timeouts, retries de conexão e headers padrão
        client: AsyncClient compartilhado (opcional; sem ele, um por chamada)
    """

    def __init__(
        self,
        config: HttpClientConfig | None = None,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self._config = config or HttpClientConfig()
        self._client = client

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
        """POST com timeout; retenta apenas falhas de conexão.

        Respostas HTTP (inclusive 4xx/5xx) são devolvidas ao chamador,
        que decide o que é sucesso.

        Raises:
            HttpError: timeout (code=TIMEOUT) ou conexão (code=NETWORK_ERROR)
        """
        merged_headers = {**self._config.default_headers, **(headers or {})}
        effective_timeout = timeout if timeout is not None else self._config.timeout_seconds
        for attempt in range(self._config.max_retries + 1):
            try:
                return await self._send(
                    url,
                    json=json,
                    params=params,
                    headers=merged_headers,
                    timeout=effective_timeout,
                    auth=auth,
                )
            except httpx.TimeoutException as exc:
                if attempt >= self._config.max_retries:
                    raise HttpError("http_timeout", is_retryable=True, code=TIMEOUT) from exc
            except httpx.TransportError as exc:
                if attempt >= self._config.max_retries:
                    raise HttpError(
                        "http_connection_error", is_retryable=True, code=NETWORK_ERROR
                    ) from exc
            await _backoff_sleep(
                attempt,
                self._config.backoff_base_seconds,
                self._config.backoff_max_seconds,
            )
        raise HttpError("http_retry_exhausted", is_retryable=True, code=NETWORK_ERROR)

    async def _send(self, url: str, **kwargs: Any) -> httpx.Response:
        if self._client is not None:
            return await self._client.post(url, **kwargs)
        async with httpx.AsyncClient(verify=self._config.verify_ssl) as client:
            return await client.post(url, **kwargs)

    async def aclose(self) -> None:
        """Fecha o AsyncClient compartilhado (quando houver)."""
        if self._client is not None:
            await self._client.aclose()


async def _backoff_sleep(attempt: int, base: float, max_seconds: float) -> None:
    backoff = min((2**attempt) * base, max_seconds)
    logger.info("http_backoff", extra={"backoff_seconds": backoff})
    await asyncio.sleep(backoff)
