"""Gerenciamento de correlation_id para rastreamento de requisições.

O correlation_id é propagado entre serviços e injetado em logs.
Usa ContextVar para ser async-safe: cada task de background
(probe de health, retry de webhook, handler inbound) herda o valor
vigente no momento em que foi criada.

Uso:
    from app.observability import correlation_scope, get_correlation_id

    with correlation_scope(request.headers.get("x-correlation-id")):
        ...
"""

from __future__ import annotations

import secrets
import time
import uuid
from contextlib import contextmanager
from contextvars import ContextVar, Token
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Iterator

_correlation_id: ContextVar[str] = ContextVar("correlation_id", default="")

# Prefixo do correlator enviado à API upstream de billing
UPSTREAM_CORRELATOR_PREFIX = "unified"


def get_correlation_id() -> str:
    """Retorna o correlation_id do contexto atual (ou string vazia)."""
    return _correlation_id.get()


def set_correlation_id(correlation_id: str | None = None) -> Token[str]:
    """Define o correlation_id no contexto atual.

    Args:
        correlation_id: ID a definir. Se None, gera um novo UUID.

    Returns:
        Token para reset posterior via reset_correlation_id().
    """
    value = correlation_id or str(uuid.uuid4())
    return _correlation_id.set(value)


def reset_correlation_id(token: Token[str]) -> None:
    """Restaura o correlation_id ao valor anterior."""
    _correlation_id.reset(token)


@contextmanager
def correlation_scope(correlation_id: str | None = None) -> Iterator[str]:
    """Define correlation_id durante o bloco e restaura ao sair."""
    token = set_correlation_id(correlation_id)
    try:
        yield _correlation_id.get()
    finally:
        reset_correlation_id(token)


def generate_correlation_id() -> str:
    """Gera um novo correlation_id (UUID v4)."""
    return str(uuid.uuid4())


def generate_upstream_correlator() -> str:
    """Gera correlator da API upstream: `unified-{epoch_ms}-{8 hex}`."""
    return f"{UPSTREAM_CORRELATOR_PREFIX}-{int(time.time() * 1000)}-{secrets.token_hex(4)}"
