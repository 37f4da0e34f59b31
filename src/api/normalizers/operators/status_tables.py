"""Tabelas de status por família de operadora.

O mesmo literal significa estados diferentes em famílias diferentes
(ex.: SUCCESS é `active` para Zain e desconhecido para Etisalat).
Por isso a tradução é sempre por tabela, nunca heurística.
Qualquer literal fora da tabela vira `unknown`.
"""

from __future__ import annotations

from types import MappingProxyType
from typing import TYPE_CHECKING, Any

from api.normalizers.operators.catalog import get_profile
from app.domain.billing import UnifiedStatus

if TYPE_CHECKING:
    from collections.abc import Mapping

    from api.normalizers.operators.catalog import StatusFamily

_S = UnifiedStatus

ZAIN_STATUS_MAP: Mapping[str, UnifiedStatus] = MappingProxyType(
    {
        "ACTIVE": _S.ACTIVE,
        "SUSPENDED": _S.SUSPENDED,
        "TRIAL": _S.TRIAL,
        "DELETED": _S.CANCELLED,
        "REMOVED": _S.CANCELLED,
        "GRACE": _S.GRACE,
        "EXPIRED": _S.EXPIRED,
        "SUCCESS": _S.ACTIVE,  # Zain KSA
    }
)

ETISALAT_STATUS_MAP: Mapping[str, UnifiedStatus] = MappingProxyType(
    {
        "ACTIVE": _S.ACTIVE,
        "PAUSED": _S.SUSPENDED,
        "SUSPENDED": _S.SUSPENDED,
        "TERMINATED": _S.CANCELLED,
        "CANCELLED": _S.CANCELLED,
        "TRIAL": _S.TRIAL,
        "EXPIRED": _S.EXPIRED,
    }
)

GENERIC_STATUS_MAP: Mapping[str, UnifiedStatus] = MappingProxyType(
    {
        "ACTIVE": _S.ACTIVE,
        "SUSPENDED": _S.SUSPENDED,
        "PAUSED": _S.SUSPENDED,
        "TRIAL": _S.TRIAL,
        "DELETED": _S.CANCELLED,
        "REMOVED": _S.CANCELLED,
        "CANCELLED": _S.CANCELLED,
        "GRACE": _S.GRACE,
        "EXPIRED": _S.EXPIRED,
        "PENDING": _S.PENDING,
        "PROCESSING": _S.PENDING,
        "SUCCESS": _S.ACTIVE,
        "CHARGED": _S.ACTIVE,
    }
)

STATUS_TABLES: Mapping[str, Mapping[str, UnifiedStatus]] = MappingProxyType(
    {
        "zain": ZAIN_STATUS_MAP,
        "etisalat": ETISALAT_STATUS_MAP,
        "generic": GENERIC_STATUS_MAP,
    }
)


def status_family_for(operator_code: str) -> StatusFamily:
    """Família de status da operadora (desconhecida = generic)."""
    profile = get_profile(operator_code)
    return profile.status_family if profile else "generic"


def map_family_status(family: str, raw_status: Any) -> str:
    """Traduz literal de status usando a tabela da família."""
    if raw_status is None or raw_status == "":
        return _S.UNKNOWN.value
    table = STATUS_TABLES.get(family, GENERIC_STATUS_MAP)
    return table.get(str(raw_status).strip().upper(), _S.UNKNOWN).value


def normalize_status(operator_code: str, raw_status: Any) -> str:
    """Traduz status da operadora para o vocabulário unificado.

    Nunca levanta exceção: literais não mapeados viram `unknown`.
    """
    return map_family_status(status_family_for(operator_code), raw_status)
