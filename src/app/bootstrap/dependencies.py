"""Factories de stores e transporte — criação de implementações concretas.

Este módulo centraliza a criação de stores baseadas nas
configurações de ambiente.
"""

from __future__ import annotations

import logging

from app.bootstrap.clients import create_async_redis_client, create_httpx_client
from app.infra.http import HttpClient, HttpClientConfig
from app.infra.stores import (
    MemoryBillingRecordStore,
    MemoryCache,
    MemoryDedupeStore,
    MemoryOperatorStore,
    MemoryWebhookRetryStore,
    RedisCache,
    RedisDedupeStore,
    RedisWebhookRetryStore,
    load_operator_seed,
)
from app.protocols import (
    AsyncDedupeProtocol,
    BillingRecordStoreProtocol,
    CacheProtocol,
    OperatorStoreProtocol,
    WebhookRetryStoreProtocol,
)
from config.settings import (
    BaseSettings,
    CacheSettings,
    DedupeSettings,
    OperatorSettings,
    WebhookSettings,
)

logger = logging.getLogger(__name__)


# ──────────────────────────────────────────────────────────────────────────────
# Cache Factory
# ──────────────────────────────────────────────────────────────────────────────


def create_cache(settings: CacheSettings) -> CacheProtocol | None:
    """Cria cache best-effort do registry.

    - "none": sem cache (registry consulta binding/store)
    - "memory": MemoryCache (dev/test)
    - "redis": RedisCache (staging/production)
    """
    if settings.backend == "none":
        logger.info("cache_created", extra={"backend": "none"})
        return None

    if settings.backend == "redis":
        cache = RedisCache(create_async_redis_client())
        logger.info("cache_created", extra={"backend": "redis"})
        return cache

    if settings.backend == "memory":
        logger.info("cache_created", extra={"backend": "memory"})
        return MemoryCache()

    msg = f"CACHE_BACKEND inválido: {settings.backend}"
    raise ValueError(msg)


# ──────────────────────────────────────────────────────────────────────────────
# Dedupe Store Factory
# ──────────────────────────────────────────────────────────────────────────────


def create_dedupe_store(
    settings: DedupeSettings,
    base: BaseSettings,
) -> AsyncDedupeProtocol:
    """Cria store de dedupe de webhooks inbound.

    - "memory": MemoryDedupeStore (dev only)
    - "redis": RedisDedupeStore (staging/production)
    """
    if settings.backend == "redis":
        store = RedisDedupeStore(create_async_redis_client())
        logger.info("dedupe_store_created", extra={"backend": "redis"})
        return store

    if settings.backend == "memory":
        if base.requires_durable_state:
            logger.warning(
                "memory_dedupe_in_non_dev",
                extra={"backend": "memory", "environment": base.environment},
            )
        logger.info("dedupe_store_created", extra={"backend": "memory"})
        return MemoryDedupeStore()

    msg = f"DEDUPE_BACKEND inválido: {settings.backend}"
    raise ValueError(msg)


# ──────────────────────────────────────────────────────────────────────────────
# Operator / Billing Store Factories
# ──────────────────────────────────────────────────────────────────────────────


def create_operator_store(settings: OperatorSettings) -> OperatorStoreProtocol:
    """Cria store de operadoras.

    Apenas o backend "memory" é provido pelo core, semeado pelo catálogo
    YAML (`OPERATOR_SEED_PATH` ou o catálogo padrão do pacote).
    """
    if settings.store_backend == "memory":
        registrations = load_operator_seed(settings.seed_path or None)
        logger.info(
            "operator_store_created",
            extra={"backend": "memory", "operator_count": len(registrations)},
        )
        return MemoryOperatorStore(registrations)

    msg = f"OPERATOR_STORE_BACKEND inválido: {settings.store_backend}"
    raise ValueError(msg)


def create_billing_record_store() -> BillingRecordStoreProtocol:
    """Cria store de assinaturas/transações usado pelos handlers inbound."""
    logger.info("billing_record_store_created", extra={"backend": "memory"})
    return MemoryBillingRecordStore()


def create_webhook_retry_store(
    settings: WebhookSettings,
    base: BaseSettings,
) -> WebhookRetryStoreProtocol:
    """Cria store de retries de webhook outbound.

    - "memory": MemoryWebhookRetryStore (retries não sobrevivem a restart)
    - "redis": RedisWebhookRetryStore (staging/production)
    """
    if settings.retry_store_backend == "redis":
        store = RedisWebhookRetryStore(create_async_redis_client())
        logger.info("webhook_retry_store_created", extra={"backend": "redis"})
        return store

    if settings.retry_store_backend == "memory":
        if base.requires_durable_state:
            logger.warning(
                "memory_webhook_store_in_non_dev",
                extra={"backend": "memory", "environment": base.environment},
            )
        logger.info("webhook_retry_store_created", extra={"backend": "memory"})
        return MemoryWebhookRetryStore()

    msg = f"WEBHOOK_RETRY_STORE_BACKEND inválido: {settings.retry_store_backend}"
    raise ValueError(msg)


# ──────────────────────────────────────────────────────────────────────────────
# HTTP Transport Factory
# ──────────────────────────────────────────────────────────────────────────────


def create_http_transport(settings: OperatorSettings) -> HttpClient:
    """Cria transporte HTTP compartilhado (API upstream e webhooks outbound)."""
    config = HttpClientConfig(
        timeout_seconds=settings.request_timeout_seconds,
        max_retries=settings.max_retries,
    )
    return HttpClient(config, create_httpx_client(settings.request_timeout_seconds))
