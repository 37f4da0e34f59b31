"""Redis Cache — cache best-effort de flags de operadora.

Erros do cliente viram RedisConnectionError; o registry trata como
miss e segue para a próxima fonte.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from app.protocols.cache import CacheProtocol
from utils.errors import RedisConnectionError

if TYPE_CHECKING:
    from redis.asyncio import Redis as AsyncRedis


class RedisCache(CacheProtocol):
    """Cache chave/valor com TTL em Redis.

    Args:
        redis_client: Cliente Redis assíncrono
    """

    def __init__(self, redis_client: AsyncRedis[bytes]) -> None:
        self._redis = redis_client

    async def get(self, key: str) -> str | None:
        try:
            value = await self._redis.get(key)
        except Exception as exc:
            raise RedisConnectionError("Falha ao ler cache no Redis", operation="cache_get") from exc
        if value is None:
            return None
        return value.decode("utf-8") if isinstance(value, bytes) else str(value)

    async def set_with_ttl(self, key: str, value: str, ttl_seconds: int) -> None:
        try:
            await self._redis.setex(key, ttl_seconds, value)
        except Exception as exc:
            raise RedisConnectionError("Falha ao gravar cache no Redis", operation="cache_set") from exc
