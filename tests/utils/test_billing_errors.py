"""Testes da taxonomia unificada de erros."""

from __future__ import annotations

from utils.errors import (
    BusinessRuleError,
    DeliveryFailureError,
    ErrorCategory,
    InfrastructureError,
    OperatorDisabledError,
    OperatorError,
    OperatorNotFoundError,
    RedisConnectionError,
    UnifiedError,
    ValidationError,
    failure_reason,
)


class TestUnifiedError:
    """Formato e categorias do erro unificado."""

    def test_to_dict_shape(self) -> None:
        error = OperatorError(
            "INSUFFICIENT_FUNDS",
            "Saldo insuficiente",
            original_code="2015",
            original_message="Balance too low",
            operator_code="zain-kw",
        )
        assert error.to_dict() == {
            "code": "INSUFFICIENT_FUNDS",
            "message": "Saldo insuficiente",
            "category": "OPERATOR_ERROR",
            "original_code": "2015",
            "original_message": "Balance too low",
            "operator_code": "zain-kw",
        }

    def test_local_categories(self) -> None:
        assert ValidationError("MISSING_PARAMETERS", "x").is_local
        assert BusinessRuleError("AMOUNT_TOO_LOW", "x").is_local
        assert OperatorNotFoundError("xx").is_local
        assert OperatorDisabledError("xx").is_local
        assert not OperatorError("UNMAPPED_ERROR", "x").is_local
        assert not DeliveryFailureError("DELIVERY_FAILED", "x").is_local

    def test_explicit_category_overrides_default(self) -> None:
        error = UnifiedError("X", "y", category=ErrorCategory.VALIDATION)
        assert error.category is ErrorCategory.VALIDATION

    def test_not_found_and_disabled_codes(self) -> None:
        assert OperatorNotFoundError("nope").code == "OPERATOR_NOT_FOUND"
        disabled = OperatorDisabledError("zain-kw", reason="maintenance")
        assert disabled.code == "OPERATOR_DISABLED"
        assert disabled.details == {"reason": "maintenance"}
        assert OperatorDisabledError("zain-kw").details == {}

    def test_details_not_exposed_in_to_dict(self) -> None:
        error = ValidationError("MISSING_PARAMETERS", "x", details={"missing": ["msisdn"]})
        assert "details" not in error.to_dict()


class TestInfrastructureErrors:
    def test_redis_error_is_infrastructure_error(self) -> None:
        assert issubclass(RedisConnectionError, InfrastructureError)
        assert issubclass(InfrastructureError, RuntimeError)

    def test_carries_backend_and_operation(self) -> None:
        exc = RedisConnectionError("Falha ao ler cache no Redis", operation="cache_get")
        assert exc.backend == "redis"
        assert exc.operation == "cache_get"
        assert str(exc) == "Falha ao ler cache no Redis"
        assert InfrastructureError("x").operation == ""

    def test_failure_reason(self) -> None:
        assert failure_reason(RedisConnectionError("x", operation="dedupe_seen")) == (
            "RedisConnectionError:dedupe_seen"
        )
        assert failure_reason(ConnectionError("down")) == "ConnectionError"
