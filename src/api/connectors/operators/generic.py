"""Adapter genérico dirigido por configuração.

Cobre operadoras sem adapter de família dedicado e códigos desconhecidos:
features, regras de MSISDN, limites e endpoints vêm todos da config.
"""

from __future__ import annotations

from api.connectors.operators.base import BaseOperatorAdapter


class GenericOperatorAdapter(BaseOperatorAdapter):
    """Comportamento padrão do scaffolding, sem ajustes de família."""

    family = "generic"
