"""Catálogo de operadoras conhecidas.

Nome, país, moeda e família de status por código, mais aliases legados.
Dados, não algoritmo: novas operadoras entram aqui sem tocar no despacho.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Literal

StatusFamily = Literal["zain", "etisalat", "generic"]


@dataclass(frozen=True, slots=True)
class OperatorProfile:
    """Perfil estático de uma operadora."""

    code: str
    name: str
    country: str
    currency: str
    status_family: StatusFamily = "generic"
    checkout_required: bool = False
    reports_transaction_id: bool = True


def _profile(
    code: str,
    name: str,
    country: str,
    currency: str,
    status_family: StatusFamily = "generic",
    *,
    checkout: bool = False,
    transaction_id: bool = True,
) -> OperatorProfile:
    return OperatorProfile(code, name, country, currency, status_family, checkout, transaction_id)


OPERATOR_PROFILES: dict[str, OperatorProfile] = {
    profile.code: profile
    for profile in (
        # Zain
        _profile("zain-kw", "Zain Kuwait", "Kuwait", "KWD", "zain"),
        _profile("zain-sa", "Zain Saudi Arabia", "Saudi Arabia", "SAR", "zain"),
        _profile("zain-bh", "Zain Bahrain", "Bahrain", "BHD", "zain"),
        _profile("zain-iq", "Zain Iraq", "Iraq", "IQD", "zain", checkout=True, transaction_id=False),
        _profile("zain-jo", "Zain Jordan", "Jordan", "JOD", "zain"),
        _profile("zain-sd", "Zain Sudan", "Sudan", "SDG", "zain", checkout=True, transaction_id=False),
        # Golfo
        _profile("etisalat-ae", "Etisalat UAE", "UAE", "AED", "etisalat", checkout=True),
        _profile("ooredoo-kw", "Ooredoo Kuwait", "Kuwait", "KWD"),
        _profile("stc-kw", "STC Kuwait", "Kuwait", "KWD", checkout=True),
        _profile("mobily-sa", "Mobily Saudi Arabia", "Saudi Arabia", "SAR"),
        # Telenor
        _profile("telenor-dk", "Telenor Denmark", "Denmark", "DKK", checkout=True, transaction_id=False),
        _profile("telenor-digi", "Telenor Digi Malaysia", "Malaysia", "MYR"),
        _profile("telenor-mm", "Telenor Myanmar", "Myanmar", "MMK", checkout=True, transaction_id=False),
        _profile("telenor-no", "Telenor Norway", "Norway", "NOK", checkout=True, transaction_id=False),
        _profile("telenor-se", "Telenor Sweden", "Sweden", "SEK", checkout=True, transaction_id=False),
        _profile("telenor-rs", "Yettel Serbia", "Serbia", "RSD", checkout=True, transaction_id=False),
        # Europa
        _profile("voda-uk", "Vodafone UK", "United Kingdom", "GBP", checkout=True),
        _profile("vf-ie", "Vodafone Ireland", "Ireland", "EUR"),
        _profile("three-uk", "Three UK", "United Kingdom", "GBP", checkout=True, transaction_id=False),
        _profile("three-ie", "Three Ireland", "Ireland", "EUR", checkout=True, transaction_id=False),
        _profile("o2-uk", "O2 UK", "United Kingdom", "GBP", checkout=True, transaction_id=False),
        _profile("ee-uk", "EE UK", "United Kingdom", "GBP", checkout=True, transaction_id=False),
        # Outros
        _profile("mobile-ng", "9mobile Nigeria", "Nigeria", "NGN", checkout=True, transaction_id=False),
        _profile("axiata-lk", "Axiata Dialog Sri Lanka", "Sri Lanka", "LKR", checkout=True, transaction_id=False),
        _profile("viettel-mz", "Movitel Mozambique", "Mozambique", "MZN", checkout=True, transaction_id=False),
        _profile("umobile-my", "U Mobile Malaysia", "Malaysia", "MYR"),
    )
}

# Código legado/comercial → código canônico
OPERATOR_ALIASES: dict[str, str] = {
    "zain-ksa": "zain-sa",
    "mobily-ksa": "mobily-sa",
    "9mobile-ng": "mobile-ng",
    "dialog-lk": "axiata-lk",
    "movitel-mz": "viettel-mz",
}


def canonical_code(operator_code: str) -> str:
    """Resolve alias para o código canônico (ou devolve o próprio código)."""
    return OPERATOR_ALIASES.get(operator_code, operator_code)


def get_profile(operator_code: str) -> OperatorProfile | None:
    """Retorna perfil da operadora (aliases resolvidos) ou None."""
    return OPERATOR_PROFILES.get(canonical_code(operator_code))


def get_operator_name(operator_code: str) -> str:
    profile = get_profile(operator_code)
    return profile.name if profile else operator_code


def get_operator_country(operator_code: str) -> str:
    profile = get_profile(operator_code)
    return profile.country if profile else "Unknown"
