"""Vocabulário unificado de billing.

Define o formato único devolvido para toda operação de adapter,
independente do vocabulário da operadora de origem.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import Enum
from typing import Any

from utils.errors import UnifiedError


class UnifiedStatus(str, Enum):
    """Status unificado de assinatura (vocabulário fechado)."""

    ACTIVE = "active"
    SUSPENDED = "suspended"
    CANCELLED = "cancelled"
    TRIAL = "trial"
    GRACE = "grace"
    EXPIRED = "expired"
    PENDING = "pending"
    UNKNOWN = "unknown"


UNIFIED_STATUSES = frozenset(status.value for status in UnifiedStatus)


class BillingOperation(str, Enum):
    """Operações do contrato de adapter."""

    CREATE_SUBSCRIPTION = "create_subscription"
    CANCEL_SUBSCRIPTION = "cancel_subscription"
    GET_SUBSCRIPTION_STATUS = "get_subscription_status"
    GENERATE_PIN = "generate_pin"
    CHARGE = "charge"
    REFUND = "refund"
    CHECK_ELIGIBILITY = "check_eligibility"


ALL_OPERATIONS = frozenset(BillingOperation)


@dataclass(frozen=True, slots=True)
class ResultMetadata:
    """Metadados de um UnifiedResult."""

    operator_code: str
    environment: str = "sandbox"
    timestamp: datetime = field(default_factory=lambda: datetime.now(UTC))
    mapping_version: str | None = None
    mapped: bool = True

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "operator_code": self.operator_code,
            "timestamp": self.timestamp.isoformat(),
            "environment": self.environment,
        }
        if self.mapping_version is not None:
            data["mapping_version"] = self.mapping_version
        if not self.mapped:
            data["mapped"] = False
        return data


@dataclass(frozen=True, slots=True)
class UnifiedResult:
    """Resultado normalizado de uma operação de adapter.

    Invariante: `data` e `error` são mutuamente exclusivos;
    `data["status"]`, quando presente, pertence a UNIFIED_STATUSES.

    Atributos:
        success: True quando a operação concluiu sem erro
        metadata: Operadora, timestamp e ambiente
        data: Campos unificados (subscription_id, status, amount, ...)
        error: Erro unificado (code, message, original_code, original_message)
    """

    success: bool
    metadata: ResultMetadata
    data: dict[str, Any] | None = None
    error: dict[str, Any] | None = None

    def __post_init__(self) -> None:
        if self.data is not None and self.error is not None:
            raise ValueError("UnifiedResult não pode ter data e error simultaneamente")
        if self.success and self.error is not None:
            raise ValueError("UnifiedResult de sucesso não pode carregar error")
        status = (self.data or {}).get("status")
        if status is not None and status not in UNIFIED_STATUSES:
            raise ValueError(f"Status fora do vocabulário unificado: {status}")

    @classmethod
    def ok(cls, data: dict[str, Any], metadata: ResultMetadata) -> UnifiedResult:
        """Cria resultado de sucesso."""
        return cls(success=True, data=data, metadata=metadata)

    @classmethod
    def failure(cls, error: UnifiedError, metadata: ResultMetadata) -> UnifiedResult:
        """Cria resultado de falha a partir de um erro unificado."""
        payload = error.to_dict()
        payload.pop("category", None)
        return cls(success=False, error=payload, metadata=metadata)

    @property
    def status(self) -> str | None:
        """Status unificado (quando presente)."""
        return (self.data or {}).get("status")

    def to_dict(self) -> dict[str, Any]:
        """Serializa para resposta ao chamador."""
        body: dict[str, Any] = {
            "success": self.success,
            "metadata": self.metadata.to_dict(),
        }
        if self.data is not None:
            body["data"] = dict(self.data)
        if self.error is not None:
            body["error"] = dict(self.error)
        return body
