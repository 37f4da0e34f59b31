"""Normalizador de respostas de operadoras.

Converte o payload bruto (já desembrulhado do envelope `success`) para
o vocabulário unificado, usando o mapa de campos da operadora.

Operadora sem mapa: passthrough genérico marcado com `mapping_type`
e `mapped=False`; o status, se existir, ainda passa pela tabela genérica.
"""

from __future__ import annotations

import logging
from collections import Counter
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

from api.normalizers.operators.catalog import (
    canonical_code,
    get_operator_country,
    get_operator_name,
)
from api.normalizers.operators.field_maps import FIELD_MAPS, Constant, FieldMap
from api.normalizers.operators.status_tables import map_family_status

logger = logging.getLogger(__name__)

MAPPING_VERSION = "2.0"
GENERIC_MAPPING_VERSION = "generic"


@dataclass(frozen=True, slots=True)
class NormalizedResponse:
    """Resultado da normalização."""

    data: dict[str, Any]
    mapped: bool
    mapping_version: str


def get_nested_value(obj: Any, path: str) -> Any:
    """Lê valor por caminho com pontos (`a.b.c`). Ausente = None."""
    current = obj
    for part in path.split("."):
        if not isinstance(current, Mapping):
            return None
        current = current.get(part)
        if current is None:
            return None
    return current


def apply_field_map(raw: Mapping[str, Any], field_map: FieldMap) -> dict[str, Any]:
    """Aplica o mapa de campos; valores None são descartados."""
    result: dict[str, Any] = {}
    for target, spec in field_map.items():
        if isinstance(spec, Constant):
            value = spec.value
        elif isinstance(spec, str):
            value = get_nested_value(raw, spec)
        else:
            try:
                value = spec(raw)
            except (TypeError, ValueError, KeyError, AttributeError) as exc:
                logger.debug(
                    "field_transform_failed",
                    extra={"field": target, "error_type": type(exc).__name__},
                )
                value = None
        if value is not None:
            result[target] = value
    return result


def get_field_map(operator_code: str) -> FieldMap | None:
    return FIELD_MAPS.get(operator_code) or FIELD_MAPS.get(canonical_code(operator_code))


def normalize_response(operator_code: str, raw: Mapping[str, Any] | None) -> NormalizedResponse:
    """Normaliza resposta bruta de uma operadora."""
    raw = raw or {}
    field_map = get_field_map(operator_code)

    if field_map is None:
        logger.warning("response_mapping_missing", extra={"operator_code": operator_code})
        data = {**raw, "operator_code": operator_code, "mapping_type": "generic"}
        if "status" in data:
            data["status"] = map_family_status("generic", data["status"])
        return NormalizedResponse(
            data=data,
            mapped=False,
            mapping_version=GENERIC_MAPPING_VERSION,
        )

    data = apply_field_map(raw, field_map)
    data["operator_code"] = operator_code
    data["country"] = get_operator_country(operator_code)
    data["operator_name"] = get_operator_name(operator_code)
    return NormalizedResponse(data=data, mapped=True, mapping_version=MAPPING_VERSION)


def available_operators() -> list[str]:
    """Códigos com mapa de campos dedicado."""
    return sorted(FIELD_MAPS)


def _mapping_group(operator_code: str) -> str:
    if operator_code.startswith("zain-"):
        return "zain"
    if operator_code.startswith("telenor-"):
        return "telenor"
    if operator_code.startswith(("voda-", "vf-")):
        return "vodafone"
    if operator_code.startswith("three-"):
        return "three"
    return "other"


def mapping_statistics() -> dict[str, Any]:
    """Contagem de mapas por grupo comercial."""
    groups = Counter(_mapping_group(code) for code in FIELD_MAPS)
    return {
        "total_operators": len(FIELD_MAPS),
        "by_group": {group: groups.get(group, 0) for group in ("zain", "telenor", "vodafone", "three", "other")},
        "mapping_version": MAPPING_VERSION,
    }
