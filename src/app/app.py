"""Entrypoint do core de billing unificado.

Inicializa o bootstrap e expõe a aplicação ASGI (FastAPI).

Uso (produção):
    uvicorn app.app:app --host 0.0.0.0 --port 8080

Uso (desenvolvimento):
    uvicorn app.app:app --reload --host 0.0.0.0 --port 8080
"""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import TYPE_CHECKING

from fastapi import FastAPI

from api.routes import create_api_router
from app.bootstrap import SERVICE_NAME, initialize_app, validate_runtime_settings
from app.bootstrap.clients import create_async_redis_client
from app.bootstrap.core_factory import BillingCore, create_billing_core
from config.logging import get_logger
from config.settings import get_base_settings

if TYPE_CHECKING:
    from collections.abc import AsyncGenerator

# Inicializar logging ANTES de qualquer import que use logger
initialize_app()

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Gerencia ciclo de vida da aplicação.

    Startup:
    - Valida configurações
    - Monta o core (se não injetado), inicializa registry e retoma retries

    Shutdown:
    - Para health checks, cancela timers, drena tasks inbound
    - Fecha transporte HTTP e Redis
    """
    logger.info("app_starting", extra={"service": SERVICE_NAME})
    core: BillingCore | None = getattr(app.state, "core", None)
    if core is None:
        validate_runtime_settings()
        core = create_billing_core()
        app.state.core = core

    app.state.redis_client = None
    if get_base_settings().redis_url:
        try:
            app.state.redis_client = create_async_redis_client()
        except ValueError as exc:
            logger.warning("redis_client_not_ready", extra={"error_type": type(exc).__name__})

    await core.start()

    yield

    logger.info("app_shutting_down", extra={"service": SERVICE_NAME})
    await core.stop(drain_timeout_seconds=30.0)


def create_app(core: BillingCore | None = None) -> FastAPI:
    """Cria e configura a aplicação FastAPI.

    Args:
        core: Core pré-montado (testes); sem ele, montado no startup.

    Returns:
        Aplicação FastAPI configurada.
    """
    fastapi_app = FastAPI(
        title="Unified Billing Core",
        description="Agregação de billing de operadoras móveis",
        version="1.0.0",
        lifespan=lifespan,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
    )
    if core is not None:
        fastapi_app.state.core = core

    fastapi_app.include_router(create_api_router())

    logger.info("app_configured", extra={"service": SERVICE_NAME})

    return fastapi_app


# Aplicação ASGI exposta para uvicorn
app = create_app()


def main() -> None:
    """Entrypoint para execução direta (desenvolvimento)."""
    import uvicorn

    logger.info("Starting unified billing core in development mode")
    uvicorn.run(
        "app.app:app",
        host="0.0.0.0",
        port=8080,
        reload=True,
    )


if __name__ == "__main__":
    main()
