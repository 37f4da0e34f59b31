"""Registro de métricas via structured logging.

As métricas são registradas como logs estruturados e agregadas
posteriormente pelo backend de logs.

Métricas suportadas:
- Latência: tempo de chamadas a operadoras por operação
- Health score: gauge por operadora após cada probe
- Entrega de webhook: counter por desfecho (delivered/retrying/failed_permanently)
"""

from __future__ import annotations

import logging

logger = logging.getLogger(__name__)


def record_latency(
    component: str,
    operation: str,
    latency_ms: float,
    correlation_id: str | None = None,
    *,
    success: bool = True,
) -> None:
    """Registra latência de operação.

    Args:
        component: Nome do componente (ex: "operator_adapter")
        operation: Nome da operação (ex: "zain-kw.charge")
        latency_ms: Latência em milissegundos
        correlation_id: ID de correlação para rastreamento
        success: Se a operação concluiu sem erro
    """
    logger.info(
        "metric_latency",
        extra={
            "metric_type": "latency",
            "component": component,
            "operation": operation,
            "latency_ms": round(latency_ms, 2),
            "success": success,
            "correlation_id": correlation_id,
        },
    )


def record_health_score(
    operator_code: str,
    health_score: float,
    latency_ms: float | None,
) -> None:
    """Registra health score calculado para uma operadora."""
    logger.info(
        "metric_health_score",
        extra={
            "metric_type": "health_score",
            "component": "health_monitor",
            "operator_code": operator_code,
            "health_score": round(health_score, 3),
            "latency_ms": round(latency_ms, 2) if latency_ms is not None else None,
        },
    )


def record_delivery_outcome(
    outcome: str,
    attempt: int,
    status_code: int | None = None,
) -> None:
    """Registra desfecho de uma tentativa de entrega de webhook.

    Args:
        outcome: delivered | retrying | failed_permanently
        attempt: Número da tentativa (1-based)
        status_code: Status HTTP recebido (quando houve resposta)
    """
    logger.info(
        "metric_webhook_delivery",
        extra={
            "metric_type": "webhook_delivery",
            "component": "webhook_delivery",
            "outcome": outcome,
            "attempt": attempt,
            "status_code": status_code,
        },
    )
