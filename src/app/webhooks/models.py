"""Modelos do subsistema de webhooks.

- WebhookDeliveryAttempt: entrega outbound em voo (persistida por delivery_id)
- DeliveryResult: desfecho devolvido por `send`
- SuccessNotification / ErrorNotification: formatos inbound disjuntos
"""

from __future__ import annotations

import secrets
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from utils.errors import DeliveryFailureError

DELIVERY_ID_PREFIX = "wh_"


class DeliveryStatus(str, Enum):
    """Ciclo de vida: pending → retrying → {delivered | failed_permanently}."""

    PENDING = "pending"
    RETRYING = "retrying"
    DELIVERED = "delivered"
    FAILED_PERMANENTLY = "failed_permanently"

    @property
    def is_terminal(self) -> bool:
        return self in (DeliveryStatus.DELIVERED, DeliveryStatus.FAILED_PERMANENTLY)


def generate_delivery_id() -> str:
    """Gera delivery_id no formato `wh_` + 32 hex."""
    return f"{DELIVERY_ID_PREFIX}{secrets.token_hex(16)}"


@dataclass(frozen=True, slots=True)
class WebhookDeliveryAttempt:
    """Notificação outbound em voo.

    Atributos:
        delivery_id: ID gerado (chave de persistência)
        url: Endpoint do merchant
        payload: Corpo JSON serializável
        attempt: Número da próxima tentativa (1-based, monotônico)
        status: Estado no ciclo de vida
        next_attempt_at: Epoch (s) da próxima tentativa, se agendada
        first_failed_at: Epoch (s) da primeira falha; base dos offsets cumulativos
        last_error: Última falha observada (sem payload bruto)
    """

    delivery_id: str
    url: str
    payload: dict[str, Any]
    attempt: int = 1
    status: DeliveryStatus = DeliveryStatus.PENDING
    next_attempt_at: float | None = None
    first_failed_at: float | None = None
    last_error: str | None = None
    headers: dict[str, str] = field(default_factory=dict)

    def advance(self, **changes: Any) -> WebhookDeliveryAttempt:
        return replace(self, **changes)

    def to_dict(self) -> dict[str, Any]:
        return {
            "delivery_id": self.delivery_id,
            "url": self.url,
            "payload": self.payload,
            "attempt": self.attempt,
            "status": self.status.value,
            "next_attempt_at": self.next_attempt_at,
            "first_failed_at": self.first_failed_at,
            "last_error": self.last_error,
            "headers": self.headers,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> WebhookDeliveryAttempt:
        return cls(
            delivery_id=data["delivery_id"],
            url=data["url"],
            payload=data.get("payload") or {},
            attempt=int(data.get("attempt", 1)),
            status=DeliveryStatus(data.get("status", DeliveryStatus.PENDING.value)),
            next_attempt_at=data.get("next_attempt_at"),
            first_failed_at=data.get("first_failed_at"),
            last_error=data.get("last_error"),
            headers=dict(data.get("headers") or {}),
        )


@dataclass(frozen=True, slots=True)
class DeliveryResult:
    """Desfecho de uma tentativa de entrega.

    `error` só é preenchido em failed_permanently.
    """

    delivery_id: str
    status: DeliveryStatus
    attempt: int
    status_code: int | None = None
    next_attempt_at: float | None = None
    error: DeliveryFailureError | None = None

    @property
    def success(self) -> bool:
        return self.status is DeliveryStatus.DELIVERED


# ──────────────────────────────────────────────────────────────────────────────
# Inbound (provedor → core)
# ──────────────────────────────────────────────────────────────────────────────


class TransactionPayload(BaseModel):
    """Transação reportada pelo provedor."""

    model_config = ConfigDict(extra="allow")

    uuid: str | None = None
    status: str | None = None
    amount: float | str | None = None
    currency: str | None = None
    operator_code: str | None = None
    transaction_id: str | None = None


class SubscriptionPayload(BaseModel):
    """Estado de assinatura reportado pelo provedor."""

    model_config = ConfigDict(extra="allow")

    status: str | None = None


class SuccessBody(BaseModel):
    model_config = ConfigDict(extra="allow")

    uuid: str | None = None
    mode: str | None = None
    transaction: TransactionPayload | None = None
    subscription: SubscriptionPayload | None = None


class ErrorBody(BaseModel):
    model_config = ConfigDict(extra="allow")

    uuid: str | None = None
    error_code: str = Field(default="UNKNOWN")
    message: str | None = None
    correlation_id: str | None = None


class SuccessNotification(BaseModel):
    """Envelope `{"success": {...}}`."""

    success: SuccessBody


class ErrorNotification(BaseModel):
    """Envelope `{"error": {...}}`."""

    error: ErrorBody
