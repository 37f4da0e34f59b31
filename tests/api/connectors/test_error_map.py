"""Testes da tradução de erros upstream."""

from __future__ import annotations

from api.connectors.operators.billing_api import OperatorApiError
from api.connectors.operators.error_map import UNMAPPED_ERROR, translate_error
from app.infra.http import TIMEOUT, HttpError
from utils.errors import ErrorCategory, ValidationError


class TestTranslateError:
    """translate_error."""

    def test_numeric_code(self) -> None:
        error = translate_error(OperatorApiError("2015", "Balance too low"), "zain-kw")
        assert error.code == "INSUFFICIENT_FUNDS"
        assert error.original_code == "2015"
        assert error.original_message == "Balance too low"
        assert error.operator_code == "zain-kw"
        assert error.category is ErrorCategory.OPERATOR_ERROR

    def test_symbolic_code(self) -> None:
        error = translate_error(OperatorApiError("SUB_EXISTS", "exists"), "voda-uk")
        assert error.code == "SUBSCRIPTION_EXISTS"

    def test_unknown_code_keeps_original(self) -> None:
        error = translate_error(OperatorApiError("Z999", "Weird failure"), "zain-kw")
        assert error.code == UNMAPPED_ERROR
        assert error.message == "Weird failure"
        assert error.original_code == "Z999"

    def test_override_wins_over_generic(self) -> None:
        overrides = {"4001": ("WRONG_PIN", "PIN incorreto")}
        error = translate_error(OperatorApiError("4001", "bad pin"), "zain-kw", overrides)
        assert error.code == "WRONG_PIN"

    def test_transport_timeout(self) -> None:
        error = translate_error(HttpError("t", code=TIMEOUT), "zain-kw")
        assert error.code == "REQUEST_TIMEOUT"

    def test_unexpected_exception(self) -> None:
        error = translate_error(RuntimeError("kaput"), "zain-kw")
        assert error.code == UNMAPPED_ERROR
        assert error.original_code == "RuntimeError"

    def test_unified_error_passthrough(self) -> None:
        original = ValidationError("MISSING_PARAMETERS", "x")
        assert translate_error(original, "zain-kw") is original
