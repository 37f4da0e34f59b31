"""Protocolo de dedupe para webhooks inbound.

Interface leve (ABC) dependida pelo processador inbound.
"""

from __future__ import annotations

from abc import ABC, abstractmethod


class AsyncDedupeProtocol(ABC):
    """Contrato mínimo assíncrono para stores de deduplicação.

    Método canônico:
    - seen(key: str, ttl: int) -> bool
      Retorna True se a chave já foi vista (duplicado). Se não vista,
      marca-a com TTL e retorna False, de forma atômica.
    """

    @abstractmethod
    async def seen(self, key: str, ttl: int) -> bool:
        """Verifica e marca a chave de forma atômica.

        Args:
            key: Chave única (hash do corpo)
            ttl: TTL em segundos

        Returns:
            True se já foi vista (duplicado); False se foi marcada agora (novo).
        """

    @abstractmethod
    async def forget(self, key: str) -> None:
        """Remove a marca (ex.: processamento falhou e deve ser aceito de novo)."""
