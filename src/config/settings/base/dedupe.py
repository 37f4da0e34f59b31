"""Settings de dedupe das notificações inbound de billing.

Notificações são identificadas pelo SHA-256 do corpo bruto; a mesma
notificação reentregue pelo upstream dentro do TTL é descartada.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache
from typing import TYPE_CHECKING, Literal, get_args

if TYPE_CHECKING:
    from config.settings.base.core import BaseSettings

DedupeBackend = Literal["memory", "redis"]

# Janela em que o upstream ainda reentrega a mesma notificação
DEFAULT_DEDUPE_TTL_SECONDS = 24 * 3600


@dataclass(frozen=True)
class DedupeSettings:
    """Backend e janela de dedupe inbound.

    O backend memory perde o histórico em restart e não é compartilhado
    entre réplicas; só é aceito em development.
    """

    backend: DedupeBackend = "memory"
    ttl_seconds: int = DEFAULT_DEDUPE_TTL_SECONDS

    def validate(self, base: BaseSettings) -> list[str]:
        errors: list[str] = []
        if self.backend not in get_args(DedupeBackend):
            errors.append(f"DEDUPE_BACKEND inválido: {self.backend}")
        elif self.backend == "memory" and base.requires_durable_state:
            errors.append("DEDUPE_BACKEND=memory proibido em staging/production. Use Redis.")
        elif self.backend == "redis" and not base.redis_url:
            errors.append("DEDUPE_BACKEND=redis requer REDIS_URL configurado")
        if self.ttl_seconds <= 0:
            errors.append("DEDUPE_TTL_SECONDS deve ser > 0")
        return errors


def _load_dedupe_from_env() -> DedupeSettings:
    backend_str = os.getenv("DEDUPE_BACKEND", "memory").lower()
    backend: DedupeBackend = backend_str if backend_str in get_args(DedupeBackend) else "memory"
    return DedupeSettings(
        backend=backend,
        ttl_seconds=int(os.getenv("DEDUPE_TTL_SECONDS", str(DEFAULT_DEDUPE_TTL_SECONDS))),
    )


@lru_cache(maxsize=1)
def get_dedupe_settings() -> DedupeSettings:
    """Retorna instância cacheada de DedupeSettings."""
    return _load_dedupe_from_env()
