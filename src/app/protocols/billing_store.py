"""Protocolo de persistência de assinaturas e transações.

Usado pelos handlers de webhook inbound. Atualizações são idempotentes
por subscription_uuid / transaction_uuid: entregas duplicadas ou fora
de ordem não corrompem o estado.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any


class BillingRecordStoreProtocol(ABC):
    """Contrato assíncrono para registros de billing."""

    @abstractmethod
    async def update_subscription(self, subscription_uuid: str, fields: dict[str, Any]) -> bool:
        """Atualiza assinatura; False se não existir."""

    @abstractmethod
    async def upsert_transaction(self, record: dict[str, Any]) -> None:
        """Cria ou atualiza transação pela chave `uuid`."""

    @abstractmethod
    async def append_error_log(self, entry: dict[str, Any]) -> None:
        """Anexa registro de erro reportado pela operadora."""
