"""Tradução de erros upstream para o vocabulário unificado.

Tabela genérica compartilhada; famílias podem sobrescrever entradas.
"""

from __future__ import annotations

from collections.abc import Mapping
from types import MappingProxyType

from api.connectors.operators.billing_api import OperatorApiError
from app.infra.http import HttpError
from utils.errors import OperatorError, UnifiedError

UNMAPPED_ERROR = "UNMAPPED_ERROR"

# código upstream → (código unificado, mensagem)
GENERIC_ERROR_MAP: Mapping[str, tuple[str, str]] = MappingProxyType(
    {
        "1001": ("UNAUTHORIZED", "Requisição não autorizada"),
        "1002": ("FORBIDDEN", "Acesso negado"),
        "1003": ("RATE_LIMIT_EXCEEDED", "Limite de requisições excedido"),
        "2001": ("INVALID_MSISDN", "Número de telefone inválido"),
        "2002": ("INVALID_CAMPAIGN", "Campanha inválida"),
        "2003": ("INVALID_MERCHANT", "Merchant inválido"),
        "2015": ("INSUFFICIENT_FUNDS", "Saldo insuficiente"),
        "4001": ("INVALID_PIN", "PIN inválido"),
        "4002": ("PIN_EXPIRED", "PIN expirado"),
        "4003": ("PIN_ATTEMPTS_EXCEEDED", "Tentativas de PIN excedidas"),
        "SUB_EXISTS": ("SUBSCRIPTION_EXISTS", "Assinatura ativa já existe"),
        "SUB_NOT_FOUND": ("SUBSCRIPTION_NOT_FOUND", "Assinatura não encontrada"),
        "INELIGIBLE": ("CUSTOMER_INELIGIBLE", "Cliente não elegível"),
        "BLACKLISTED": ("CUSTOMER_BLACKLISTED", "Cliente bloqueado"),
        "SERVICE_UNAVAILABLE": ("SERVICE_UNAVAILABLE", "Serviço da operadora indisponível"),
        "NETWORK_ERROR": ("NETWORK_ERROR", "Falha de conexão com a operadora"),
        "TIMEOUT": ("REQUEST_TIMEOUT", "Tempo limite da operadora excedido"),
        "INVALID_CREDENTIALS": ("INVALID_CREDENTIALS", "Credenciais da operadora ausentes"),
        "INVALID_RESPONSE": ("INVALID_RESPONSE", "Resposta inválida da operadora"),
    }
)


def translate_error(
    error: Exception,
    operator_code: str,
    overrides: Mapping[str, tuple[str, str]] | None = None,
) -> UnifiedError:
    """Converte qualquer exceção em UnifiedError.

    UnifiedError é devolvido como está. Códigos sem entrada na tabela
    viram UNMAPPED_ERROR preservando código e mensagem originais.
    """
    if isinstance(error, UnifiedError):
        return error

    if isinstance(error, OperatorApiError):
        original_code, original_message = error.code, error.message
    elif isinstance(error, HttpError):
        original_code, original_message = error.code, str(error)
    else:
        original_code, original_message = type(error).__name__, str(error)

    mapping = (overrides or {}).get(original_code) or GENERIC_ERROR_MAP.get(original_code)
    if mapping is None:
        code, message = UNMAPPED_ERROR, original_message or f"Erro desconhecido em {operator_code}"
    else:
        code, message = mapping

    return OperatorError(
        code,
        message,
        original_code=original_code,
        original_message=original_message,
        operator_code=operator_code,
    )
