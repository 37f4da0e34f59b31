"""Instalação do logging JSON do core de billing.

Um único handler no root logger, com correlation_id/service injetados e
redação de campos sensíveis. Níveis por logger podem ser ajustados via
`LOG_LEVEL_OVERRIDES` (ex: "app.operators.health=DEBUG,httpx=INFO").

Uso:
    from config.logging import configure_logging, get_logger

    configure_logging(level="INFO", service_name="unified_billing")
    logger = get_logger(__name__)
    logger.info("operator_enabled", extra={"operator_code": "zain-kw"})
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from config.logging.filters import CorrelationIdFilter, SensitiveFieldFilter
from config.logging.formatters import create_json_formatter

if TYPE_CHECKING:
    from collections.abc import Callable, Mapping

VALID_LOG_LEVELS = frozenset({"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"})

DEFAULT_SERVICE_NAME = "unified_billing"

# httpx loga a URL completa em INFO; a query string upstream carrega MSISDN/PIN
NOISY_LOGGERS = ("httpx", "httpcore")


def _normalize_level(level: str) -> str:
    level_upper = level.strip().upper()
    if level_upper not in VALID_LOG_LEVELS:
        raise ValueError(
            f"Nível de log inválido: {level}. "
            f"Válidos: {', '.join(sorted(VALID_LOG_LEVELS))}"
        )
    return level_upper


def parse_logger_levels(raw: str | None) -> dict[str, str]:
    """Converte "logger=NIVEL,outro=NIVEL" em dict validado.

    Raises:
        ValueError: Entrada sem "=" ou com nível inválido.
    """
    levels: dict[str, str] = {}
    for chunk in (raw or "").split(","):
        if not chunk.strip():
            continue
        name, sep, level = chunk.partition("=")
        if not sep or not name.strip():
            raise ValueError(f"Override de log inválido: {chunk.strip()!r}")
        levels[name.strip()] = _normalize_level(level)
    return levels


def build_handler(
    level: str,
    service_name: str,
    correlation_id_getter: Callable[[], str] | None = None,
) -> logging.Handler:
    """Handler stdout JSON com filtros de contexto e redação."""
    handler = logging.StreamHandler()
    handler.setLevel(level)
    handler.setFormatter(create_json_formatter())
    handler.addFilter(CorrelationIdFilter(service_name, correlation_id_getter))
    handler.addFilter(SensitiveFieldFilter())
    return handler


def configure_logging(
    level: str = "INFO",
    service_name: str = DEFAULT_SERVICE_NAME,
    correlation_id_getter: Callable[[], str] | None = None,
    logger_levels: Mapping[str, str] | None = None,
) -> None:
    """Configura logging JSON estruturado para o serviço.

    Deve ser chamada uma vez no bootstrap; chamadas repetidas substituem o
    handler anterior em vez de duplicá-lo.

    Args:
        level: Nível do root logger.
        service_name: Valor do campo `service` em todo log.
        correlation_id_getter: Fonte do correlation_id corrente (ContextVar).
        logger_levels: Níveis por logger, aplicados depois de NOISY_LOGGERS.

    Raises:
        ValueError: Nível inválido no root ou em algum override.
    """
    root_level = _normalize_level(level)
    overrides = {name: _normalize_level(value) for name, value in (logger_levels or {}).items()}

    root = logging.getLogger()
    root.setLevel(root_level)
    root.handlers = [build_handler(root_level, service_name, correlation_id_getter)]

    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
    for name, value in overrides.items():
        logging.getLogger(name).setLevel(value)


def get_logger(name: str) -> logging.Logger:
    """Atalho para `logging.getLogger`; o handler do root faz o resto."""
    return logging.getLogger(name)


def log_fallback(
    logger: logging.Logger,
    component: str,
    reason: str | None = None,
    elapsed_ms: float | None = None,
) -> None:
    """Registra que uma fonte secundária substituiu a primária.

    Ex: cache de flags indisponível e leitura direta do binding/store,
    ou dedupe inbound indisponível e processamento sem dedupe.
    `reason` nunca deve carregar PII.
    """
    extra: dict[str, object] = {"fallback_used": True, "component": component}
    if reason:
        extra["reason"] = reason
    if elapsed_ms is not None:
        extra["elapsed_ms"] = elapsed_ms
    logger.info("Fallback applied for %s", component, extra=extra)
