"""Stores — implementações concretas de persistência e cache.

Módulos disponíveis:
    - memory_stores: Stores em memória para desenvolvimento/testes
    - redis_cache: Cache best-effort usando Redis
    - redis_dedupe_store: Dedupe de webhooks inbound usando Redis
    - redis_webhook_store: Retries de webhook persistidos em Redis
    - operator_seed: Catálogo YAML de operadoras para o store em memória
"""

from __future__ import annotations

from app.infra.stores.memory_stores import (
    MemoryBillingRecordStore,
    MemoryCache,
    MemoryDedupeStore,
    MemoryOperatorStore,
    MemoryWebhookRetryStore,
)
from app.infra.stores.operator_seed import (
    DEFAULT_SEED_PATH,
    OperatorSeedError,
    load_operator_seed,
)
from app.infra.stores.redis_cache import RedisCache
from app.infra.stores.redis_dedupe_store import RedisDedupeStore
from app.infra.stores.redis_webhook_store import RedisWebhookRetryStore

__all__ = [
    "DEFAULT_SEED_PATH",
    # Memory (dev/test)
    "MemoryBillingRecordStore",
    "MemoryCache",
    "MemoryDedupeStore",
    "MemoryOperatorStore",
    "MemoryWebhookRetryStore",
    # Seed
    "OperatorSeedError",
    # Redis
    "RedisCache",
    "RedisDedupeStore",
    "RedisWebhookRetryStore",
    "load_operator_seed",
]
