"""Adapter da família Telenor.

Aceita ACR (identificador anônimo de 48 caracteres) além de MSISDN.
Transações com ACR exigem correlator. A maioria dos países é só-checkout.
"""

from __future__ import annotations

from types import MappingProxyType
from typing import TYPE_CHECKING

from api.connectors.operators.base import BaseOperatorAdapter

if TYPE_CHECKING:
    from api.normalizers.operators.catalog import OperatorProfile


class TelenorAdapter(BaseOperatorAdapter):
    family = "telenor"
    acr_supported_by_default = True
    requires_correlator = True
    pin_pattern = r"^\d{4,6}$"
    checkout_base_url = "https://checkout.sla-alacrity.com/telenor"
    error_overrides = MappingProxyType(
        {
            "DAILY_LIMIT": ("DAILY_LIMIT_EXCEEDED", "Limite diário de gastos excedido"),
            "MONTHLY_LIMIT": ("MONTHLY_LIMIT_EXCEEDED", "Limite mensal de gastos excedido"),
            "WEEKLY_LIMIT": ("WEEKLY_SUBSCRIPTION_LIMIT", "Limite semanal de assinaturas atingido"),
            "AUTH_FAILED": ("AUTHENTICATION_FAILED", "Falha de autenticação"),
            "INVALID_ACR": ("INVALID_ACR", "ACR em formato inválido"),
            "MISSING_CORRELATOR": ("MISSING_CORRELATOR", "Correlator obrigatório para ACR"),
            "ACR_NOT_SUPPORTED": ("ACR_NOT_SUPPORTED", "ACR não suportado por esta operadora"),
        }
    )

    def default_checkout_only(self, profile: OperatorProfile | None) -> bool:
        # Apenas Digi Malaysia opera com PIN e cobrança avulsa
        return profile.checkout_required if profile else True
