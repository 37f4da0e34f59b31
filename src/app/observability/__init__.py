"""Observabilidade — correlation_id e métricas via logs estruturados.

Uso:
    from app.observability import get_correlation_id, correlation_scope
    from app.observability import record_latency, record_health_score
"""

from app.observability.correlation import (
    correlation_scope,
    generate_correlation_id,
    generate_upstream_correlator,
    get_correlation_id,
    reset_correlation_id,
    set_correlation_id,
)
from app.observability.metrics import (
    record_delivery_outcome,
    record_health_score,
    record_latency,
)

__all__ = [
    "correlation_scope",
    "generate_correlation_id",
    "generate_upstream_correlator",
    "get_correlation_id",
    "record_delivery_outcome",
    "record_health_score",
    "record_latency",
    "reset_correlation_id",
    "set_correlation_id",
]
