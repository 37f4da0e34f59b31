"""Logging estruturado JSON do core de billing.

Todo log sai com correlation_id, service, level, logger, message e
asctime; nomes de evento em snake_case (`webhook_retry_scheduled`) e
contexto em `extra`. Campos com PIN/segredos são redigidos no handler.
"""

from config.logging.config import (
    configure_logging,
    get_logger,
    log_fallback,
    parse_logger_levels,
)
from config.logging.filters import (
    REDACTED,
    CorrelationIdFilter,
    SensitiveFieldFilter,
    is_sensitive_field,
)
from config.logging.formatters import (
    FIELD_RENAME_MAP,
    REQUIRED_LOG_FIELDS,
    create_json_formatter,
)

__all__ = [
    "FIELD_RENAME_MAP",
    "REDACTED",
    "REQUIRED_LOG_FIELDS",
    "CorrelationIdFilter",
    "SensitiveFieldFilter",
    "configure_logging",
    "create_json_formatter",
    "get_logger",
    "is_sensitive_field",
    "log_fallback",
    "parse_logger_levels",
]
