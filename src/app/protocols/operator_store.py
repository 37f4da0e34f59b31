"""Protocolo da camada de persistência de operadoras.

O core nunca emite queries: usa apenas estes verbos.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from app.operators.models import OperatorRegistration


class OperatorStoreProtocol(ABC):
    """Contrato assíncrono de persistência de registros de operadora."""

    @abstractmethod
    async def find_active_registrations(self) -> list[OperatorRegistration]:
        """Retorna registros provisionados (habilitados ou não)."""

    @abstractmethod
    async def load_registration(self, code: str) -> OperatorRegistration | None:
        """Carrega registro por código (None se inexistente)."""

    @abstractmethod
    async def update_registration(
        self,
        code: str,
        fields: dict[str, Any],
    ) -> OperatorRegistration | None:
        """Atualiza campos do registro e retorna a versão persistida."""

    @abstractmethod
    async def append_audit_record(self, entry: dict[str, Any]) -> None:
        """Anexa registro de auditoria (append-only)."""
