"""Protocolo de cache best-effort.

Chamadores devem tolerar o cache totalmente ausente:
falhas chegam como InfrastructureError.
"""

from __future__ import annotations

from abc import ABC, abstractmethod


class CacheProtocol(ABC):
    """Contrato mínimo de cache chave/valor com TTL."""

    @abstractmethod
    async def get(self, key: str) -> str | None:
        """Retorna valor ou None se ausente/expirado."""

    @abstractmethod
    async def set_with_ttl(self, key: str, value: str, ttl_seconds: int) -> None:
        """Grava valor com TTL em segundos."""
