"""Mapas de campos por operadora.

Cada entrada do mapa é um de três tipos:
- `str`: caminho (com pontos) lido da resposta bruta;
- `Constant`: valor fixo;
- callable: pequena transformação `(raw) -> valor`.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping
from dataclasses import dataclass
from typing import Any, Union

from api.normalizers.operators.catalog import OPERATOR_PROFILES, OperatorProfile
from api.normalizers.operators.status_tables import map_family_status


@dataclass(frozen=True, slots=True)
class Constant:
    """Valor fixo no mapa de campos."""

    value: Any


FieldSpec = Union[str, Constant, Callable[[Mapping[str, Any]], Any]]
FieldMap = Mapping[str, FieldSpec]

ACR_CUSTOMER_ID_LENGTH = 30


def status_from(family: str, *fields: str) -> Callable[[Mapping[str, Any]], str]:
    """Transformação de status: primeiro campo não vazio, traduzido pela família."""

    def _transform(raw: Mapping[str, Any]) -> str:
        for field in fields:
            value = raw.get(field)
            if value:
                return map_family_status(family, value)
        return map_family_status(family, None)

    return _transform


def customer_id_from_acr(raw: Mapping[str, Any]) -> str | None:
    """ID do cliente = 30 primeiros caracteres do ACR."""
    acr = raw.get("acr")
    if not isinstance(acr, str) or not acr:
        return None
    return acr[:ACR_CUSTOMER_ID_LENGTH]


def _standard_map(profile: OperatorProfile) -> dict[str, FieldSpec]:
    field_map: dict[str, FieldSpec] = {
        "subscription_id": "uuid",
        "operator_subscription_id": "operator_subscription_id",
        "status": status_from(profile.status_family, "status"),
        "amount": "amount",
        "currency": Constant(profile.currency),
        "frequency": "frequency",
        "next_billing_date": "next_payment_timestamp",
        "msisdn": "msisdn",
        "campaign": "campaign",
        "merchant": "merchant",
        "eligible": "eligible",
    }
    if profile.reports_transaction_id:
        field_map["transaction_id"] = "transaction_id"
    if profile.checkout_required:
        field_map["checkout_url"] = "checkout_url"
        field_map["checkout_required"] = Constant(True)
    return field_map


def _build_field_maps() -> dict[str, FieldMap]:
    maps: dict[str, dict[str, FieldSpec]] = {
        code: _standard_map(profile) for code, profile in OPERATOR_PROFILES.items()
    }

    # Zain KSA usa nomenclatura própria
    maps["zain-sa"].update(
        {
            "subscription_id": "subscription_uuid",
            "amount": "charge_amount",
            "frequency": "billing_frequency",
            "next_billing_date": "next_charge_date",
            "transaction_id": "transaction_ref",
        }
    )

    # Etisalat: estado pode vir em `state` ou `status`
    maps["etisalat-ae"].update(
        {
            "subscription_id": "sub_id",
            "status": status_from("etisalat", "state", "status"),
            "amount": "price",
            "frequency": "cycle",
            "next_billing_date": "next_bill_date",
        }
    )

    # Telenor identifica o cliente por ACR
    for code in maps:
        if code.startswith("telenor-"):
            maps[code]["acr"] = "acr"
            maps[code]["customer_id"] = customer_id_from_acr

    maps["mobile-ng"]["auto_renewal"] = "auto_renewal"
    return maps


FIELD_MAPS: Mapping[str, FieldMap] = _build_field_maps()
