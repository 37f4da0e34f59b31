"""Settings do cache de lookup rápido de operadoras."""

from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache
from typing import TYPE_CHECKING, Literal

if TYPE_CHECKING:
    from config.settings.base.core import BaseSettings

CacheBackend = Literal["none", "memory", "redis"]


@dataclass(frozen=True)
class CacheSettings:
    """Configurações do cache (best-effort).

    Attributes:
        backend: Backend do cache (none|memory|redis)
        operator_ttl_seconds: TTL da flag `operator:{code}:enabled`
    """

    backend: CacheBackend = "memory"
    operator_ttl_seconds: int = 300

    def validate(self, base: BaseSettings) -> list[str]:
        """Valida configurações de cache."""
        errors: list[str] = []

        if self.backend not in ("none", "memory", "redis"):
            errors.append(f"CACHE_BACKEND inválido: {self.backend}")

        if self.backend == "redis" and not base.redis_url:
            errors.append("CACHE_BACKEND=redis requer REDIS_URL configurado")

        if self.operator_ttl_seconds <= 0:
            errors.append("OPERATOR_CACHE_TTL_SECONDS deve ser > 0")

        return errors


def _load_cache_from_env() -> CacheSettings:
    """Carrega CacheSettings de variáveis de ambiente."""
    backend_str = os.getenv("CACHE_BACKEND", "memory").lower()
    backend: CacheBackend = (
        backend_str if backend_str in ("none", "memory", "redis") else "memory"
    )
    return CacheSettings(
        backend=backend,
        operator_ttl_seconds=int(os.getenv("OPERATOR_CACHE_TTL_SECONDS", "300")),
    )


@lru_cache(maxsize=1)
def get_cache_settings() -> CacheSettings:
    """Retorna instância cacheada de CacheSettings."""
    return _load_cache_from_env()
