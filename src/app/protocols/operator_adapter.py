"""Contrato polimórfico de adapters de operadora.

Toda operadora expõe as mesmas sete operações e três hooks de mapeamento.
O scaffolding compartilhado (validação, regras de negócio, logging,
tradução de erros) vive em api/connectors/operators/base.py.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from app.domain.billing import UnifiedResult
    from utils.errors import UnifiedError


class OperatorAdapterProtocol(ABC):
    """Superfície uniforme de uma operadora.

    Todas as operações recebem params no vocabulário unificado
    (msisdn, acr, campaign, merchant, amount, subscription_id, ...)
    e devolvem UnifiedResult, ou levantam UnifiedError.
    """

    operator_code: str

    @abstractmethod
    async def create_subscription(self, params: dict[str, Any]) -> UnifiedResult:
        """Cria assinatura recorrente."""

    @abstractmethod
    async def cancel_subscription(self, params: dict[str, Any]) -> UnifiedResult:
        """Cancela assinatura existente."""

    @abstractmethod
    async def get_subscription_status(self, params: dict[str, Any]) -> UnifiedResult:
        """Consulta status de assinatura."""

    @abstractmethod
    async def generate_pin(self, params: dict[str, Any]) -> UnifiedResult:
        """Solicita envio de PIN ao assinante."""

    @abstractmethod
    async def charge(self, params: dict[str, Any]) -> UnifiedResult:
        """Cobrança avulsa."""

    @abstractmethod
    async def refund(self, params: dict[str, Any]) -> UnifiedResult:
        """Estorno de transação."""

    @abstractmethod
    async def check_eligibility(self, params: dict[str, Any]) -> UnifiedResult:
        """Verifica elegibilidade do assinante."""

    @abstractmethod
    def map_response_data(self, raw: dict[str, Any]) -> dict[str, Any]:
        """Traduz resposta bruta para campos unificados."""

    @abstractmethod
    def map_error(self, error: Exception) -> UnifiedError:
        """Traduz erro não unificado para o vocabulário unificado."""

    @abstractmethod
    def map_status(self, raw_status: str | None) -> str:
        """Traduz status da operadora para o vocabulário unificado."""
