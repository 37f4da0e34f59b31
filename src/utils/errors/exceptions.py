"""Falhas transitórias de backend (cache, dedupe, store de retries).

Nunca chegam ao chamador como erro de billing: o registry e o inbound
as tratam como best-effort, o delivery mantém o timer em memória.
"""

from __future__ import annotations


class InfrastructureError(RuntimeError):
    """Base para falhas de infraestrutura transitórias."""

    backend = "unknown"

    def __init__(self, message: str, *, operation: str = "") -> None:
        super().__init__(message)
        self.operation = operation


class RedisConnectionError(InfrastructureError):
    """Falha de conexão/timeout ao acessar Redis."""

    backend = "redis"


def failure_reason(exc: BaseException) -> str:
    """Motivo curto para logs: tipo da exceção e operação, quando houver."""
    operation = getattr(exc, "operation", "")
    name = type(exc).__name__
    return f"{name}:{operation}" if operation else name
