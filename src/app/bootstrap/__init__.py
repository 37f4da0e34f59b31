"""Bootstrap da aplicação — inicialização e wiring.

Este módulo é o composition root: configura logging, valida settings
e conecta implementações concretas aos protocolos.

Uso:
    from app.bootstrap import initialize_app, validate_runtime_settings
    from app.bootstrap.core_factory import create_billing_core

    # Na inicialização do serviço
    initialize_app()
    validate_runtime_settings()
    core = create_billing_core()
"""

from __future__ import annotations

import logging
import os

from app.observability import get_correlation_id
from config.logging import configure_logging, parse_logger_levels
from config.settings import (
    get_base_settings,
    get_cache_settings,
    get_dedupe_settings,
    get_operator_settings,
    get_webhook_settings,
)

# Nome do serviço para logs e métricas
SERVICE_NAME = "unified_billing"

# Nível de log padrão (pode ser sobrescrito por env)
DEFAULT_LOG_LEVEL = "INFO"
STRICT_VALIDATION_ENVS = {"staging", "production"}

logger = logging.getLogger(__name__)


def initialize_app() -> None:
    """Inicializa logging estruturado JSON com correlation_id.

    Deve ser chamada uma vez no início do serviço.
    """
    configure_logging(
        level=os.getenv("LOG_LEVEL", DEFAULT_LOG_LEVEL),
        service_name=SERVICE_NAME,
        correlation_id_getter=get_correlation_id,
        logger_levels=parse_logger_levels(os.getenv("LOG_LEVEL_OVERRIDES")),
    )


def collect_settings_errors() -> list[str]:
    """Agrega erros de validação de todas as settings, prefixados por domínio."""
    base = get_base_settings()
    errors: list[str] = [f"base: {error}" for error in base.validate()]
    errors.extend(f"cache: {error}" for error in get_cache_settings().validate(base))
    errors.extend(f"dedupe: {error}" for error in get_dedupe_settings().validate(base))
    errors.extend(f"operators: {error}" for error in get_operator_settings().validate())
    errors.extend(
        f"webhooks: {error}" for error in get_webhook_settings().validate(base.redis_url)
    )
    return errors


def validate_runtime_settings() -> None:
    """Valida settings obrigatórias no startup.

    Em `staging`/`production` falha rápido para impedir boot inválido.
    Em `development` mantém alerta sem bloquear execução local.

    Raises:
        RuntimeError: Configuração inválida em ambiente estrito
    """
    environment = get_base_settings().environment
    strict_mode = environment in STRICT_VALIDATION_ENVS
    errors = collect_settings_errors()

    if not errors:
        logger.info(
            "settings_validated",
            extra={"component": "bootstrap", "result": "ok", "environment": environment},
        )
        return

    logger.warning(
        "settings_validation_failed",
        extra={
            "component": "bootstrap",
            "result": "failed",
            "environment": environment,
            "error_count": len(errors),
            "errors": errors,
        },
    )
    if strict_mode:
        details = "\n".join(f"- {error}" for error in errors)
        raise RuntimeError(f"Configuração inválida para {environment}:\n{details}")


__all__ = [
    "SERVICE_NAME",
    "collect_settings_errors",
    "initialize_app",
    "validate_runtime_settings",
]
