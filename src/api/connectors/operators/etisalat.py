"""Adapter Etisalat (Emirados Árabes).

Códigos de erro próprios (E001..E009) e fraud token opcional no pedido de PIN.
"""

from __future__ import annotations

from collections.abc import Mapping
from types import MappingProxyType
from typing import Any

from api.connectors.operators.base import BaseOperatorAdapter
from api.connectors.operators.scaffolding import is_missing
from utils.errors import ValidationError


class EtisalatAdapter(BaseOperatorAdapter):
    family = "etisalat"
    pin_pattern = r"^\d{4}$"
    checkout_base_url = "https://checkout.sla-alacrity.com"
    error_overrides = MappingProxyType(
        {
            "E001": ("INVALID_MSISDN", "Número UAE inválido"),
            "E002": ("INSUFFICIENT_FUNDS", "Crédito insuficiente"),
            "E003": ("INVALID_PIN", "PIN de 4 dígitos inválido ou expirado"),
            "E004": ("SUBSCRIPTION_EXISTS", "Assinatura ativa já existe"),
            "E005": ("CUSTOMER_INELIGIBLE", "Cliente não elegível"),
            "E006": ("MONTHLY_LIMIT_EXCEEDED", "Limite mensal de gastos excedido"),
            "E007": ("POSTPAID_ONLY", "Serviço disponível apenas para pós-pago"),
            "E008": ("FRAUD_TOKEN_INVALID", "Fraud token inválido ou expirado"),
            "E009": ("FRAUD_TOKEN_MISSING", "Fraud token obrigatório para gerar PIN"),
            "AUTH_FAIL": ("AUTHENTICATION_FAILED", "Falha de autenticação"),
            "RATE_LIMIT": ("RATE_LIMIT_EXCEEDED", "Limite de requisições excedido"),
        }
    )

    def extra_pin_fields(self, params: Mapping[str, Any]) -> dict[str, Any]:
        fraud_token = params.get("fraud_token")
        if is_missing(fraud_token):
            if self.config.get("require_fraud_token"):
                raise ValidationError(
                    "MISSING_PARAMETERS",
                    "Parâmetros obrigatórios ausentes: fraud_token",
                    operator_code=self.operator_code,
                    details={"missing": ["fraud_token"]},
                )
            return {}
        return {"fraud_token": fraud_token}
