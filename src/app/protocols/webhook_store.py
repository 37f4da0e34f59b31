"""Protocolo de persistência de retries de webhook.

Cada retry agendado é persistido com seu horário devido para que
um restart do processo reencontre e reagende todas as entregas pendentes.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from app.webhooks.models import WebhookDeliveryAttempt


class WebhookRetryStoreProtocol(ABC):
    """Contrato assíncrono de persistência de tentativas pendentes."""

    @abstractmethod
    async def save(self, attempt: WebhookDeliveryAttempt, ttl_seconds: int) -> None:
        """Persiste (ou substitui) a tentativa pelo delivery_id."""

    @abstractmethod
    async def delete(self, delivery_id: str) -> None:
        """Remove a tentativa persistida (idempotente)."""

    @abstractmethod
    async def load_pending(self) -> list[WebhookDeliveryAttempt]:
        """Retorna todas as tentativas persistidas."""
