"""Factories de clientes externos — Redis e httpx."""

from __future__ import annotations

import logging
from functools import lru_cache
from typing import TYPE_CHECKING

import httpx

from config.settings import get_base_settings

if TYPE_CHECKING:
    from redis.asyncio import Redis as AsyncRedis

logger = logging.getLogger(__name__)


# ──────────────────────────────────────────────────────────────────────────────
# Redis Client Factory
# ──────────────────────────────────────────────────────────────────────────────


@lru_cache(maxsize=1)
def create_async_redis_client() -> AsyncRedis[bytes]:
    """Cria cliente Redis assíncrono (singleton).

    Returns:
        Cliente Redis assíncrono

    Raises:
        ValueError: Se REDIS_URL não configurado
    """
    from redis.asyncio import Redis as AsyncRedis

    redis_url = get_base_settings().redis_url
    if not redis_url:
        msg = "REDIS_URL não configurado"
        raise ValueError(msg)

    client: AsyncRedis[bytes] = AsyncRedis.from_url(
        redis_url,
        decode_responses=False,
        socket_timeout=5.0,
        socket_connect_timeout=5.0,
    )

    logger.info("async_redis_client_created")
    return client


async def close_async_redis_client() -> None:
    """Fecha o cliente Redis (se criado) e limpa o singleton."""
    if create_async_redis_client.cache_info().currsize == 0:
        return
    client = create_async_redis_client()
    create_async_redis_client.cache_clear()
    await client.aclose()
    logger.info("async_redis_client_closed")


# ──────────────────────────────────────────────────────────────────────────────
# HTTP Client Factory
# ──────────────────────────────────────────────────────────────────────────────


def create_httpx_client(timeout_seconds: float) -> httpx.AsyncClient:
    """Cria AsyncClient compartilhado (pool de conexões do processo)."""
    return httpx.AsyncClient(
        timeout=httpx.Timeout(timeout_seconds),
        limits=httpx.Limits(max_connections=100, max_keepalive_connections=20),
    )
