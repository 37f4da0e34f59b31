"""Router raiz da API HTTP do core de billing."""

from __future__ import annotations

from fastapi import APIRouter

from api.routes.health.router import router as health_router
from api.routes.webhooks.router import router as webhooks_router

# Notificações da plataforma de billing chegam em POST /webhooks/billing
WEBHOOKS_PREFIX = "/webhooks"


def create_api_router() -> APIRouter:
    """Monta o router com probes na raiz e webhooks sob WEBHOOKS_PREFIX."""
    api_router = APIRouter()
    api_router.include_router(health_router, tags=["health"])
    api_router.include_router(webhooks_router, prefix=WEBHOOKS_PREFIX, tags=["webhooks"])
    return api_router
