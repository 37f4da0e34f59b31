"""Transporte HTTP (httpx) para APIs de operadora e entrega de webhooks."""

from app.infra.http.client import (
    HTTP_STATUS,
    NETWORK_ERROR,
    TIMEOUT,
    HttpClient,
    HttpClientConfig,
    HttpError,
)

__all__ = [
    "HTTP_STATUS",
    "NETWORK_ERROR",
    "TIMEOUT",
    "HttpClient",
    "HttpClientConfig",
    "HttpError",
]
