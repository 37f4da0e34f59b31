"""Agendador de tarefas por horário devido (epoch).

Um timer em memória por chave. O horário devido vem do registro
persistido, então após um restart basta reagendar cada registro:
horário já vencido dispara imediatamente.
"""

from __future__ import annotations

import asyncio
import contextlib
import logging
import time
from collections.abc import Awaitable, Callable
from functools import partial
from typing import Any

logger = logging.getLogger(__name__)

ScheduledAction = Callable[[], Awaitable[Any]]


def _current_task() -> asyncio.Task[Any] | None:
    with contextlib.suppress(RuntimeError):
        return asyncio.current_task()
    return None


class RetryScheduler:
    """Tabela de timers de posse exclusiva do subsistema de webhooks.

    Args:
        clock: Fonte de epoch em segundos (default: time.time)
        sleep: Função de espera (injetável em testes)
    """

    def __init__(
        self,
        clock: Callable[[], float] = time.time,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
    ) -> None:
        self._clock = clock
        self._sleep = sleep
        self._tasks: dict[str, asyncio.Task[Any]] = {}

    @property
    def pending_count(self) -> int:
        return len(self._tasks)

    def is_scheduled(self, key: str) -> bool:
        return key in self._tasks

    def schedule(self, key: str, due_at: float, action: ScheduledAction) -> asyncio.Task[Any]:
        """Agenda `action` para `due_at`, substituindo timer anterior da chave."""
        self.cancel(key)
        task = asyncio.create_task(self._run(due_at, action))
        self._tasks[key] = task
        task.add_done_callback(partial(self._on_done, key))
        return task

    async def _run(self, due_at: float, action: ScheduledAction) -> None:
        delay = due_at - self._clock()
        if delay > 0:
            await self._sleep(delay)
        await action()

    def _on_done(self, key: str, task: asyncio.Task[Any]) -> None:
        if self._tasks.get(key) is task:
            del self._tasks[key]
        with contextlib.suppress(asyncio.CancelledError):
            exc = task.exception()
            if exc is not None:
                logger.error(
                    "scheduled_task_failed",
                    extra={"schedule_id": key, "error_type": type(exc).__name__},
                )

    def cancel(self, key: str) -> bool:
        """Cancela o timer da chave. A task em execução nunca cancela a si mesma."""
        task = self._tasks.pop(key, None)
        if task is None:
            return False
        if task is not _current_task():
            task.cancel()
        return True

    def cancel_all(self) -> int:
        keys = list(self._tasks)
        for key in keys:
            self.cancel(key)
        return len(keys)

    async def join(self) -> None:
        """Aguarda até não restar timer (inclusive os reagendados)."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks.values()), return_exceptions=True)
