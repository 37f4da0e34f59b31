"""Testes das tabelas de status por família."""

from __future__ import annotations

import pytest

from api.normalizers.operators.status_tables import (
    ETISALAT_STATUS_MAP,
    STATUS_TABLES,
    map_family_status,
    normalize_status,
    status_family_for,
)
from app.domain.billing import UNIFIED_STATUSES


class TestStatusTables:
    """Tradução de status por tabela."""

    @pytest.mark.parametrize(
        ("operator_code", "raw", "expected"),
        [
            ("zain-kw", "ACTIVE", "active"),
            ("zain-kw", "DELETED", "cancelled"),
            ("zain-sa", "SUCCESS", "active"),
            ("etisalat-ae", "PAUSED", "suspended"),
            ("etisalat-ae", "TERMINATED", "cancelled"),
            ("mobily-sa", "PROCESSING", "pending"),
            ("voda-uk", "CHARGED", "active"),
        ],
    )
    def test_known_literals(self, operator_code: str, raw: str, expected: str) -> None:
        assert normalize_status(operator_code, raw) == expected

    def test_same_literal_differs_by_family(self) -> None:
        """SUCCESS é active na Zain e desconhecido na Etisalat."""
        assert normalize_status("zain-kw", "SUCCESS") == "active"
        assert normalize_status("etisalat-ae", "SUCCESS") == "unknown"

    @pytest.mark.parametrize("raw", [None, "", "FAILED", "weird-status", 42])
    def test_unmapped_literals_become_unknown(self, raw: object) -> None:
        assert normalize_status("zain-kw", raw) == "unknown"

    def test_case_and_whitespace_insensitive(self) -> None:
        assert normalize_status("zain-kw", "  active ") == "active"

    def test_unknown_operator_uses_generic_family(self) -> None:
        assert status_family_for("nope-xx") == "generic"
        assert normalize_status("nope-xx", "PENDING") == "pending"

    def test_alias_resolves_family(self) -> None:
        assert status_family_for("zain-ksa") == "zain"

    def test_unknown_family_falls_back_to_generic(self) -> None:
        assert map_family_status("martian", "ACTIVE") == "active"

    def test_every_table_maps_into_vocabulary(self) -> None:
        for table in STATUS_TABLES.values():
            assert {status.value for status in table.values()} <= UNIFIED_STATUSES

    def test_tables_are_read_only(self) -> None:
        with pytest.raises(TypeError):
            ETISALAT_STATUS_MAP["NEW"] = "active"  # type: ignore[index]
