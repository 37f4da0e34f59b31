"""Adapter da família Zain (Kuwait, Arábia Saudita, Bahrein, Iraque, Jordânia, Sudão)."""

from __future__ import annotations

from types import MappingProxyType

from api.connectors.operators.base import BaseOperatorAdapter


class ZainAdapter(BaseOperatorAdapter):
    """Zain: PIN de 4 dígitos obrigatório na criação, idioma padrão árabe."""

    family = "zain"
    default_language = "ar"
    pin_required_on_create = True
    pin_pattern = r"^\d{4}$"
    checkout_base_url = "https://msisdn.sla-alacrity.com"
    error_overrides = MappingProxyType(
        {
            "2032": ("WEEKLY_SUBSCRIPTION_LIMIT", "Cliente só pode assinar uma vez por semana"),
            "4001": ("INVALID_PIN", "PIN de 4 dígitos inválido ou expirado"),
            "4002": ("PIN_EXPIRED", "PIN expirado, solicite um novo PIN de 4 dígitos"),
        }
    )
