"""Normalização de respostas e status das operadoras."""

from api.normalizers.operators.catalog import (
    OPERATOR_ALIASES,
    OPERATOR_PROFILES,
    OperatorProfile,
    canonical_code,
    get_operator_country,
    get_operator_name,
    get_profile,
)
from api.normalizers.operators.field_maps import FIELD_MAPS, Constant
from api.normalizers.operators.normalizer import (
    MAPPING_VERSION,
    NormalizedResponse,
    available_operators,
    get_nested_value,
    mapping_statistics,
    normalize_response,
)
from api.normalizers.operators.sanitizer import sanitize_payload
from api.normalizers.operators.status_tables import normalize_status

__all__ = [
    "FIELD_MAPS",
    "MAPPING_VERSION",
    "OPERATOR_ALIASES",
    "OPERATOR_PROFILES",
    "Constant",
    "NormalizedResponse",
    "OperatorProfile",
    "available_operators",
    "canonical_code",
    "get_nested_value",
    "get_operator_country",
    "get_operator_name",
    "get_profile",
    "mapping_statistics",
    "normalize_response",
    "normalize_status",
    "sanitize_payload",
]
