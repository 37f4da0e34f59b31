"""Exceções utilitárias compartilhadas."""

from .billing import (
    BusinessRuleError,
    DeliveryFailureError,
    ErrorCategory,
    OperatorDisabledError,
    OperatorError,
    OperatorNotFoundError,
    UnifiedError,
    ValidationError,
)
from .exceptions import (
    InfrastructureError,
    RedisConnectionError,
    failure_reason,
)

__all__ = [
    "BusinessRuleError",
    "DeliveryFailureError",
    "ErrorCategory",
    "InfrastructureError",
    "OperatorDisabledError",
    "OperatorError",
    "OperatorNotFoundError",
    "RedisConnectionError",
    "UnifiedError",
    "ValidationError",
    "failure_reason",
]
