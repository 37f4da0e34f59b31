"""Endpoints de liveness e readiness do core de billing.

Readiness bloqueia apenas em dependências críticas: Redis (quando
configurado) e registry inicializado. Operadoras sem saúde suficiente
aparecem como `degraded`, sem tirar a réplica do balanceador.
"""

from __future__ import annotations

import asyncio
import logging
import time
from dataclasses import dataclass
from datetime import UTC, datetime
from typing import Any, Literal

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from config.settings import get_base_settings

logger = logging.getLogger(__name__)

router = APIRouter()

SERVICE_VERSION = "1.0.0"
REDIS_PING_TIMEOUT_SECONDS = 2.0

CheckStatus = Literal["ok", "degraded", "failed"]


class HealthResponse(BaseModel):
    """Resposta do liveness probe."""

    status: str
    service: str
    timestamp: str
    version: str = SERVICE_VERSION


@dataclass(frozen=True, slots=True)
class DependencyCheck:
    status: CheckStatus
    latency_ms: float | None = None
    error: str | None = None

    @property
    def blocks_readiness(self) -> bool:
        return self.status == "failed"

    def as_dict(self) -> dict[str, Any]:
        return {"status": self.status, "latency_ms": self.latency_ms, "error": self.error}


@router.get("/health", response_model=HealthResponse)
async def health_check() -> HealthResponse:
    """Liveness: o processo responde."""
    return HealthResponse(
        status="healthy",
        service=get_base_settings().service_name,
        timestamp=datetime.now(UTC).isoformat(),
    )


@router.get("/ready")
async def readiness_check(request: Request) -> JSONResponse:
    """Readiness: Redis, registry e operadoras operacionais."""
    state = request.app.state
    core = getattr(state, "core", None)
    statistics = core.get_statistics() if core is not None else None

    checks = {
        "redis": await _check_redis(getattr(state, "redis_client", None)),
        "registry": _check_registry(core),
        "operators": _check_operators(statistics),
    }
    ready = not any(check.blocks_readiness for check in checks.values())

    payload: dict[str, Any] = {
        "status": "ready" if ready else "not_ready",
        "checks": {name: check.as_dict() for name, check in checks.items()},
        "timestamp": datetime.now(UTC).isoformat(),
    }
    if statistics is not None:
        payload["statistics"] = statistics
    if not ready:
        logger.warning(
            "readiness_check_failed",
            extra={"failed_checks": sorted(n for n, c in checks.items() if c.blocks_readiness)},
        )
    return JSONResponse(content=payload, status_code=200 if ready else 503)


async def _check_redis(redis_client: Any | None) -> DependencyCheck:
    # Sem REDIS_URL o core roda só com backends em memória (dev)
    if redis_client is None:
        return DependencyCheck(status="degraded", error="not_configured")
    started_at = time.perf_counter()
    try:
        await asyncio.wait_for(redis_client.ping(), timeout=REDIS_PING_TIMEOUT_SECONDS)
    except TimeoutError:
        return DependencyCheck(status="failed", error="timeout")
    except Exception as exc:
        logger.warning("readiness_redis_check_failed", extra={"error_type": type(exc).__name__})
        return DependencyCheck(status="failed", error=type(exc).__name__)
    latency_ms = (time.perf_counter() - started_at) * 1000
    return DependencyCheck(status="ok", latency_ms=round(latency_ms, 2))


def _check_registry(core: Any | None) -> DependencyCheck:
    if core is None:
        return DependencyCheck(status="failed", error="not_configured")
    if not core.registry.is_initialized:
        return DependencyCheck(status="failed", error="not_initialized")
    return DependencyCheck(status="ok")


def _check_operators(statistics: dict[str, Any] | None) -> DependencyCheck:
    operators = (statistics or {}).get("operators") or {}
    if operators.get("operational_operators", 0) > 0:
        return DependencyCheck(status="ok")
    return DependencyCheck(status="degraded", error="no_operational_operators")
