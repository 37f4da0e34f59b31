"""Notificações locais do registry (lista explícita de observers).

Observers podem ser síncronos ou assíncronos. Falha de um observer é
logada e não interrompe os demais nem a operação que publicou.
"""

from __future__ import annotations

import inspect
import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Literal

from app.operators.models import utc_now

logger = logging.getLogger(__name__)

OperatorEventType = Literal["operator_enabled", "operator_disabled", "operator_refreshed"]


@dataclass(frozen=True, slots=True)
class OperatorEvent:
    """Evento publicado após mudança de estado de uma operadora."""

    event_type: OperatorEventType
    operator_code: str
    actor_id: str | None = None
    reason: str | None = None
    occurred_at: datetime = field(default_factory=utc_now)

    def to_dict(self) -> dict[str, Any]:
        return {
            "event_type": self.event_type,
            "operator_code": self.operator_code,
            "actor_id": self.actor_id,
            "reason": self.reason,
            "occurred_at": self.occurred_at.isoformat(),
        }


OperatorObserver = Callable[[OperatorEvent], Any]


class OperatorEventBus:
    """Lista de observers com subscribe/unsubscribe explícitos."""

    def __init__(self) -> None:
        self._observers: list[OperatorObserver] = []

    def subscribe(self, observer: OperatorObserver) -> Callable[[], None]:
        """Registra observer e retorna função para cancelar a inscrição."""
        self._observers.append(observer)

        def unsubscribe() -> None:
            if observer in self._observers:
                self._observers.remove(observer)

        return unsubscribe

    @property
    def observer_count(self) -> int:
        return len(self._observers)

    async def publish(self, event: OperatorEvent) -> None:
        for observer in list(self._observers):
            try:
                outcome = observer(event)
                if inspect.isawaitable(outcome):
                    await outcome
            except Exception as exc:
                logger.error(
                    "operator_observer_failed",
                    extra={
                        "event_type": event.event_type,
                        "operator_code": event.operator_code,
                        "error_type": type(exc).__name__,
                    },
                )
