"""Settings de webhooks (entrega outbound e recepção inbound)."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from functools import lru_cache
from typing import Literal

RetryStoreBackend = Literal["memory", "redis"]

DEFAULT_RETRY_OFFSETS_HOURS: tuple[float, ...] = (4.0, 8.0, 12.0, 16.0, 20.0, 24.0)


@dataclass(frozen=True)
class WebhookSettings:
    """Configurações de webhooks.

    Attributes:
        inbound_secret: Secret HMAC de webhooks inbound (vazio = sem validação)
        signature_header: Header com assinatura inbound
        timestamp_header: Header com timestamp inbound
        delivery_timeout_seconds: Timeout de cada entrega outbound
        retry_offsets_hours: Offsets cumulativos a partir da primeira falha
        user_agent: User-Agent das entregas outbound
        retry_store_backend: Backend de persistência de retries (memory|redis)
        record_ttl_buffer_seconds: Folga de TTL sobre o atraso do retry
        max_concurrent_handlers: Limite de handlers inbound simultâneos
    """

    inbound_secret: str = field(default="", repr=False)
    signature_header: str = "x-sla-signature"
    timestamp_header: str = "x-sla-timestamp"

    delivery_timeout_seconds: float = 30.0
    retry_offsets_hours: tuple[float, ...] = DEFAULT_RETRY_OFFSETS_HOURS
    user_agent: str = "Unified-Billing-Platform/1.0"

    retry_store_backend: RetryStoreBackend = "memory"
    record_ttl_buffer_seconds: int = 3600
    max_concurrent_handlers: int = 100

    @property
    def max_attempts(self) -> int:
        """Tentativas totais (primeira + retries)."""
        return len(self.retry_offsets_hours) + 1

    def validate(self, redis_url: str = "") -> list[str]:
        """Valida configurações de webhooks.

        Args:
            redis_url: URL Redis configurada (para backend redis)

        Returns:
            Lista de erros de validação.
        """
        errors: list[str] = []

        if self.delivery_timeout_seconds <= 0:
            errors.append("WEBHOOK_DELIVERY_TIMEOUT_SECONDS deve ser > 0")

        offsets = list(self.retry_offsets_hours)
        if not offsets or offsets != sorted(offsets) or offsets[0] <= 0:
            errors.append("WEBHOOK_RETRY_OFFSETS_HOURS deve ser crescente e positivo")

        if self.retry_store_backend not in ("memory", "redis"):
            errors.append(f"WEBHOOK_RETRY_STORE_BACKEND inválido: {self.retry_store_backend}")

        if self.retry_store_backend == "redis" and not redis_url:
            errors.append("WEBHOOK_RETRY_STORE_BACKEND=redis requer REDIS_URL configurado")

        if self.max_concurrent_handlers <= 0:
            errors.append("WEBHOOK_MAX_CONCURRENT_HANDLERS deve ser > 0")

        return errors


def _load_from_env() -> WebhookSettings:
    """Carrega WebhookSettings a partir de variáveis de ambiente."""
    raw_offsets = os.getenv("WEBHOOK_RETRY_OFFSETS_HOURS", "")
    offsets = (
        tuple(float(part) for part in raw_offsets.split(",") if part.strip())
        if raw_offsets
        else DEFAULT_RETRY_OFFSETS_HOURS
    )
    backend_str = os.getenv("WEBHOOK_RETRY_STORE_BACKEND", "memory").lower()
    backend: RetryStoreBackend = backend_str if backend_str in ("memory", "redis") else "memory"
    return WebhookSettings(
        inbound_secret=os.getenv("BILLING_WEBHOOK_SECRET", ""),
        signature_header=os.getenv("BILLING_WEBHOOK_SIGNATURE_HEADER", "x-sla-signature").lower(),
        timestamp_header=os.getenv("BILLING_WEBHOOK_TIMESTAMP_HEADER", "x-sla-timestamp").lower(),
        delivery_timeout_seconds=float(os.getenv("WEBHOOK_DELIVERY_TIMEOUT_SECONDS", "30")),
        retry_offsets_hours=offsets,
        user_agent=os.getenv("WEBHOOK_USER_AGENT", "Unified-Billing-Platform/1.0"),
        retry_store_backend=backend,
        record_ttl_buffer_seconds=int(os.getenv("WEBHOOK_RECORD_TTL_BUFFER_SECONDS", "3600")),
        max_concurrent_handlers=int(os.getenv("WEBHOOK_MAX_CONCURRENT_HANDLERS", "100")),
    )


@lru_cache(maxsize=1)
def get_webhook_settings() -> WebhookSettings:
    """Retorna instância cacheada de WebhookSettings."""
    return _load_from_env()
