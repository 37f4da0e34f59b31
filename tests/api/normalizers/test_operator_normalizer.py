"""Testes do normalizador de respostas, catálogo e sanitização."""

from __future__ import annotations

import pytest

from api.normalizers.operators import (
    FIELD_MAPS,
    MAPPING_VERSION,
    OPERATOR_PROFILES,
    available_operators,
    canonical_code,
    get_nested_value,
    get_operator_country,
    get_operator_name,
    mapping_statistics,
    normalize_response,
    sanitize_payload,
)
from config.logging import REDACTED

ACR = "A" * 30 + "B" * 18


class TestCatalog:
    """Catálogo e aliases."""

    @pytest.mark.parametrize(
        ("alias", "canonical"),
        [
            ("zain-ksa", "zain-sa"),
            ("mobily-ksa", "mobily-sa"),
            ("9mobile-ng", "mobile-ng"),
            ("dialog-lk", "axiata-lk"),
            ("movitel-mz", "viettel-mz"),
        ],
    )
    def test_aliases(self, alias: str, canonical: str) -> None:
        assert canonical_code(alias) == canonical
        assert canonical in OPERATOR_PROFILES

    def test_name_and_country_fallbacks(self) -> None:
        assert get_operator_name("zain-kw") == "Zain Kuwait"
        assert get_operator_name("nope-xx") == "nope-xx"
        assert get_operator_country("nope-xx") == "Unknown"


class TestNormalizeResponse:
    """normalize_response por operadora."""

    def test_standard_mapping(self) -> None:
        raw = {
            "uuid": "sub-1",
            "status": "ACTIVE",
            "amount": 1.5,
            "frequency": "weekly",
            "next_payment_timestamp": "2026-05-01T00:00:00Z",
            "msisdn": "96550000000",
            "transaction_id": "tx-9",
            "ignored": "x",
        }
        result = normalize_response("zain-kw", raw)

        assert result.mapped is True
        assert result.mapping_version == MAPPING_VERSION
        assert result.data["subscription_id"] == "sub-1"
        assert result.data["status"] == "active"
        assert result.data["currency"] == "KWD"
        assert result.data["next_billing_date"] == "2026-05-01T00:00:00Z"
        assert result.data["transaction_id"] == "tx-9"
        assert result.data["operator_code"] == "zain-kw"
        assert result.data["operator_name"] == "Zain Kuwait"
        assert result.data["country"] == "Kuwait"
        assert "ignored" not in result.data

    def test_nulls_dropped(self) -> None:
        result = normalize_response("zain-kw", {"uuid": "sub-1", "amount": None})
        assert "amount" not in result.data
        assert "campaign" not in result.data

    def test_zain_sa_field_names(self) -> None:
        raw = {"subscription_uuid": "s-1", "charge_amount": 10, "status": "SUCCESS"}
        result = normalize_response("zain-sa", raw)
        assert result.data["subscription_id"] == "s-1"
        assert result.data["amount"] == 10
        assert result.data["status"] == "active"

    def test_etisalat_state_field_preferred(self) -> None:
        raw = {"sub_id": "e-1", "state": "PAUSED", "status": "ACTIVE", "price": 3}
        result = normalize_response("etisalat-ae", raw)
        assert result.data["subscription_id"] == "e-1"
        assert result.data["status"] == "suspended"
        assert result.data["amount"] == 3
        assert result.data["checkout_required"] is True

    def test_telenor_customer_id_from_acr(self) -> None:
        result = normalize_response("telenor-dk", {"acr": ACR, "status": "ACTIVE"})
        assert result.data["acr"] == ACR
        assert result.data["customer_id"] == "A" * 30
        assert "transaction_id" not in FIELD_MAPS["telenor-dk"]

    def test_alias_uses_canonical_map_keeps_requested_code(self) -> None:
        result = normalize_response("zain-ksa", {"subscription_uuid": "s-2"})
        assert result.mapped is True
        assert result.data["subscription_id"] == "s-2"
        assert result.data["operator_code"] == "zain-ksa"

    def test_unknown_operator_passthrough(self) -> None:
        result = normalize_response("nope-xx", {"foo": "bar", "status": "ACTIVE"})
        assert result.mapped is False
        assert result.data["foo"] == "bar"
        assert result.data["status"] == "active"
        assert result.data["mapping_type"] == "generic"
        assert result.data["operator_code"] == "nope-xx"

    def test_unknown_operator_unmapped_status(self) -> None:
        result = normalize_response("nope-xx", {"status": "EXOTIC"})
        assert result.data["status"] == "unknown"

    def test_none_raw_payload(self) -> None:
        result = normalize_response("zain-kw", None)
        assert result.data["operator_code"] == "zain-kw"
        assert "status" in result.data  # status ausente vira unknown
        assert result.data["status"] == "unknown"


class TestHelpers:
    def test_get_nested_value(self) -> None:
        assert get_nested_value({"a": {"b": {"c": 1}}}, "a.b.c") == 1
        assert get_nested_value({"a": 1}, "a.b") is None
        assert get_nested_value({}, "x") is None

    def test_available_operators_sorted(self) -> None:
        operators = available_operators()
        assert operators == sorted(operators)
        assert "zain-kw" in operators

    def test_mapping_statistics(self) -> None:
        stats = mapping_statistics()
        assert stats["total_operators"] == len(FIELD_MAPS)
        assert stats["by_group"]["zain"] == 6
        assert stats["by_group"]["telenor"] == 6
        assert stats["by_group"]["vodafone"] == 2
        assert sum(stats["by_group"].values()) == stats["total_operators"]


class TestSanitizePayload:
    """Mascaramento de campos sensíveis."""

    def test_recursive_redaction_without_mutation(self) -> None:
        payload = {
            "msisdn": "96550000000",
            "pin": "1234",
            "nested": {"api_password": "x", "items": [{"fraud_token": "t"}]},
        }
        sanitized = sanitize_payload(payload)

        assert sanitized["pin"] == REDACTED
        assert sanitized["nested"]["api_password"] == REDACTED
        assert sanitized["nested"]["items"][0]["fraud_token"] == REDACTED
        assert sanitized["msisdn"] == "96550000000"
        assert payload["pin"] == "1234"
