"""Redis Webhook Retry Store — retries pendentes sobrevivem a restart.

Chave: `webhook:retry:{delivery_id}` com JSON da tentativa e TTL igual
ao atraso restante mais uma folga. No startup, SCAN encontra todas as
chaves e o subsistema de entrega reagenda cada uma.
"""

from __future__ import annotations

import json
import logging
from typing import TYPE_CHECKING

from app.protocols.webhook_store import WebhookRetryStoreProtocol
from app.webhooks.models import WebhookDeliveryAttempt
from utils.errors import RedisConnectionError

if TYPE_CHECKING:
    from redis.asyncio import Redis as AsyncRedis

logger = logging.getLogger(__name__)

RETRY_PREFIX = "webhook:retry:"


class RedisWebhookRetryStore(WebhookRetryStoreProtocol):
    """Persistência de tentativas pendentes em Redis.

    Args:
        redis_client: Cliente Redis assíncrono
        scan_batch_size: COUNT usado no SCAN
    """

    def __init__(self, redis_client: AsyncRedis[bytes], scan_batch_size: int = 200) -> None:
        self._redis = redis_client
        self._scan_batch_size = scan_batch_size

    def _key(self, delivery_id: str) -> str:
        return f"{RETRY_PREFIX}{delivery_id}"

    async def save(self, attempt: WebhookDeliveryAttempt, ttl_seconds: int) -> None:
        try:
            await self._redis.setex(
                self._key(attempt.delivery_id),
                max(1, int(ttl_seconds)),
                json.dumps(attempt.to_dict()),
            )
        except Exception as exc:
            raise RedisConnectionError(
                "Falha ao persistir retry de webhook no Redis", operation="retry_save"
            ) from exc

    async def delete(self, delivery_id: str) -> None:
        try:
            await self._redis.delete(self._key(delivery_id))
        except Exception as exc:
            raise RedisConnectionError(
                "Falha ao remover retry de webhook no Redis", operation="retry_delete"
            ) from exc

    async def load_pending(self) -> list[WebhookDeliveryAttempt]:
        try:
            keys = [
                key
                async for key in self._redis.scan_iter(
                    match=f"{RETRY_PREFIX}*", count=self._scan_batch_size
                )
            ]
            values = await self._redis.mget(keys) if keys else []
        except Exception as exc:
            raise RedisConnectionError(
                "Falha ao listar retries de webhook no Redis", operation="retry_scan"
            ) from exc

        attempts: list[WebhookDeliveryAttempt] = []
        for key, raw in zip(keys, values, strict=False):
            if raw is None:
                continue  # expirou entre SCAN e MGET
            try:
                attempts.append(WebhookDeliveryAttempt.from_dict(json.loads(raw)))
            except (ValueError, KeyError, TypeError):
                logger.warning(
                    "webhook_retry_record_invalid",
                    extra={"redis_entry": key.decode() if isinstance(key, bytes) else str(key)},
                )
        return attempts
