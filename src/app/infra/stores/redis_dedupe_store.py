"""Redis Dedupe Store — deduplicação de webhooks inbound.

Usa SET NX (set if not exists) para operação atômica.

Contrato de Keys:
    As keys devem ser hashes opacos (SHA-256 do corpo bruto).
    NUNCA passar dados sensíveis (MSISDN, ACR) como key.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from app.protocols.dedupe import AsyncDedupeProtocol
from utils.errors import RedisConnectionError

if TYPE_CHECKING:
    from redis.asyncio import Redis as AsyncRedis

logger = logging.getLogger(__name__)

# Prefixo para namespace de dedupe
DEDUPE_PREFIX = "webhook:inbound:"


class RedisDedupeStore(AsyncDedupeProtocol):
    """Store de dedupe usando Redis assíncrono.

    Args:
        redis_client: Cliente Redis assíncrono
    """

    def __init__(self, redis_client: AsyncRedis[bytes]) -> None:
        self._redis = redis_client

    def _key(self, key: str) -> str:
        """Gera chave Redis com namespace."""
        return f"{DEDUPE_PREFIX}{key}"

    async def seen(self, key: str, ttl: int) -> bool:
        """Verifica e marca chave atomicamente (SET NX EX).

        Args:
            key: Hash do corpo do webhook
            ttl: TTL em segundos

        Returns:
            True se duplicado, False se novo
        """
        try:
            was_set = await self._redis.set(self._key(key), "1", nx=True, ex=ttl)
        except Exception as exc:
            raise RedisConnectionError(
                "Falha ao consultar dedupe no Redis", operation="dedupe_seen"
            ) from exc
        is_duplicate = not was_set
        if is_duplicate:
            logger.debug("dedupe_duplicate_detected", extra={"dedupe_hash": key[:8] + "..."})
        return is_duplicate

    async def forget(self, key: str) -> None:
        try:
            await self._redis.delete(self._key(key))
        except Exception as exc:
            raise RedisConnectionError(
                "Falha ao remover dedupe no Redis", operation="dedupe_forget"
            ) from exc
