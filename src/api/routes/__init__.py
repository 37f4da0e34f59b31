"""Superfície HTTP: probes (`/health`, `/ready`) e webhook inbound de billing.

As rotas só traduzem HTTP; o trabalho é delegado ao core em `app.state.core`.
"""

from __future__ import annotations

from api.routes.router import create_api_router

__all__ = ["create_api_router"]
