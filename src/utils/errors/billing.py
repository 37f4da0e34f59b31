"""Taxonomia unificada de erros de billing.

Todo erro visto pelos chamadores do core tem o mesmo formato:
    {code, message, original_code, original_message, operator_code}

Categorias:
    - VALIDATION: entrada ausente/malformada (local, nunca reprocessada)
    - BUSINESS_RULE: limite de negócio violado (local)
    - OPERATOR_NOT_FOUND / OPERATOR_DISABLED: falha de despacho (local)
    - OPERATOR_ERROR: falha upstream traduzida via map_error
    - DELIVERY_FAILURE: falha de entrega de webhook
"""

from __future__ import annotations

from enum import Enum
from typing import Any


class ErrorCategory(str, Enum):
    """Categoria do erro unificado."""

    VALIDATION = "VALIDATION"
    BUSINESS_RULE = "BUSINESS_RULE"
    OPERATOR_NOT_FOUND = "OPERATOR_NOT_FOUND"
    OPERATOR_DISABLED = "OPERATOR_DISABLED"
    OPERATOR_ERROR = "OPERATOR_ERROR"
    DELIVERY_FAILURE = "DELIVERY_FAILURE"


# Categorias resolvidas localmente (sem rede); não são logadas como erro
LOCAL_CATEGORIES = frozenset(
    {
        ErrorCategory.VALIDATION,
        ErrorCategory.BUSINESS_RULE,
        ErrorCategory.OPERATOR_NOT_FOUND,
        ErrorCategory.OPERATOR_DISABLED,
    }
)


class UnifiedError(Exception):
    """Erro no vocabulário unificado do core.

    Args:
        code: Código unificado (ex.: INVALID_MSISDN)
        message: Mensagem legível
        category: Categoria da taxonomia
        original_code: Código devolvido pela operadora (quando houver)
        original_message: Mensagem devolvida pela operadora (quando houver)
        operator_code: Operadora envolvida
        details: Dados extras seguros para o chamador
    """

    default_category = ErrorCategory.OPERATOR_ERROR

    def __init__(
        self,
        code: str,
        message: str,
        *,
        category: ErrorCategory | None = None,
        original_code: str | None = None,
        original_message: str | None = None,
        operator_code: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message)
        self.code = code
        self.message = message
        self.category = category or self.default_category
        self.original_code = original_code
        self.original_message = original_message
        self.operator_code = operator_code
        self.details = details or {}

    @property
    def is_local(self) -> bool:
        """True quando o erro não envolveu chamada de rede."""
        return self.category in LOCAL_CATEGORIES

    def to_dict(self) -> dict[str, Any]:
        """Formato exposto aos chamadores (sem payload bruto upstream)."""
        return {
            "code": self.code,
            "message": self.message,
            "category": self.category.value,
            "original_code": self.original_code,
            "original_message": self.original_message,
            "operator_code": self.operator_code,
        }

    def __repr__(self) -> str:
        return f"{type(self).__name__}(code={self.code!r}, operator_code={self.operator_code!r})"


class ValidationError(UnifiedError):
    """Parâmetros ausentes ou malformados."""

    default_category = ErrorCategory.VALIDATION


class BusinessRuleError(UnifiedError):
    """Regra de negócio da operadora violada antes da chamada."""

    default_category = ErrorCategory.BUSINESS_RULE


class OperatorNotFoundError(UnifiedError):
    """Nenhum binding registrado para o código."""

    default_category = ErrorCategory.OPERATOR_NOT_FOUND

    def __init__(self, operator_code: str) -> None:
        super().__init__(
            "OPERATOR_NOT_FOUND",
            f"Operadora não encontrada: {operator_code}",
            operator_code=operator_code,
        )


class OperatorDisabledError(UnifiedError):
    """Operadora registrada porém desabilitada."""

    default_category = ErrorCategory.OPERATOR_DISABLED

    def __init__(self, operator_code: str, reason: str | None = None) -> None:
        super().__init__(
            "OPERATOR_DISABLED",
            f"Operadora desabilitada: {operator_code}",
            operator_code=operator_code,
            details={"reason": reason} if reason else None,
        )


class OperatorError(UnifiedError):
    """Falha upstream traduzida para o vocabulário unificado."""

    default_category = ErrorCategory.OPERATOR_ERROR


class DeliveryFailureError(UnifiedError):
    """Falha de entrega de webhook outbound."""

    default_category = ErrorCategory.DELIVERY_FAILURE
