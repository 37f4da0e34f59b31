"""Monitor de saúde das operadoras.

A cada rodada dispara um probe concorrente (fire-and-forget) por operadora
habilitada: uma verificação de elegibilidade contra o identificador de
teste. O score vem da latência, em faixas configuráveis.

Um probe lento ou com falha nunca atrasa os demais nem a próxima rodada.
"""

from __future__ import annotations

import asyncio
import contextlib
import logging
import time
from collections.abc import Awaitable, Callable
from typing import TYPE_CHECKING, Any

from app.observability import record_health_score
from utils.errors import UnifiedError

if TYPE_CHECKING:
    from app.operators.models import AdapterBinding
    from config.settings import HealthScoreBands

logger = logging.getLogger(__name__)

BindingsProvider = Callable[[], list["AdapterBinding"]]
HealthRecorder = Callable[[str, float, "float | None"], Awaitable[None]]


class HealthMonitor:
    """Timer recorrente de probes de health.

    Args:
        bindings_provider: Retorna os bindings habilitados no momento da rodada
        record_result: Callback do registry (code, score, latency_ms)
        bands: Faixas de score por latência
        interval_seconds: Intervalo entre rodadas
        probe_timeout_seconds: Timeout explícito de cada probe
        default_test_msisdn: Identificador de teste quando a config não define
    """

    def __init__(
        self,
        bindings_provider: BindingsProvider,
        record_result: HealthRecorder,
        *,
        bands: HealthScoreBands,
        interval_seconds: float = 300.0,
        probe_timeout_seconds: float = 15.0,
        default_test_msisdn: str = "1234567890",
    ) -> None:
        self._bindings_provider = bindings_provider
        self._record_result = record_result
        self._bands = bands
        self._interval_seconds = interval_seconds
        self._probe_timeout_seconds = probe_timeout_seconds
        self._default_test_msisdn = default_test_msisdn
        self._timer_task: asyncio.Task[None] | None = None
        self._probes: set[asyncio.Task[Any]] = set()
        self.rounds_started = 0

    @property
    def is_running(self) -> bool:
        return self._timer_task is not None and not self._timer_task.done()

    @property
    def in_flight_probes(self) -> int:
        return len(self._probes)

    def start(self) -> bool:
        """Arma o timer. Idempotente: retorna False se já estava ativo."""
        if self.is_running:
            return False
        self._timer_task = asyncio.create_task(self._run_loop())
        logger.info(
            "health_monitor_started",
            extra={"interval_seconds": self._interval_seconds},
        )
        return True

    async def _run_loop(self) -> None:
        while True:
            await asyncio.sleep(self._interval_seconds)
            self.run_round()

    def run_round(self) -> list[asyncio.Task[Any]]:
        """Dispara um probe por operadora habilitada, sem aguardar."""
        self.rounds_started += 1
        tasks = []
        for binding in self._bindings_provider():
            task = asyncio.create_task(self.probe(binding))
            self._probes.add(task)
            task.add_done_callback(self._on_probe_done)
            tasks.append(task)
        logger.debug(
            "health_round_started",
            extra={"round": self.rounds_started, "probe_count": len(tasks)},
        )
        return tasks

    def _on_probe_done(self, task: asyncio.Task[Any]) -> None:
        self._probes.discard(task)
        with contextlib.suppress(asyncio.CancelledError):
            exc = task.exception()
            if exc is not None:
                logger.error(
                    "health_probe_task_failed",
                    extra={"error_type": type(exc).__name__},
                )

    def _probe_params(self, binding: AdapterBinding) -> dict[str, Any]:
        config = binding.registration.config
        return {"msisdn": config.get("test_msisdn") or self._default_test_msisdn}

    async def probe(self, binding: AdapterBinding) -> float:
        """Executa um probe e registra o score resultante.

        Rejeição local (validação do identificador de teste) não vira score:
        o probe nem chegou à operadora. Retorna o score atual inalterado.
        """
        code = binding.code
        started = time.perf_counter()
        latency_ms: float | None = None
        try:
            await asyncio.wait_for(
                binding.adapter.check_eligibility(self._probe_params(binding)),
                timeout=self._probe_timeout_seconds,
            )
            latency_ms = (time.perf_counter() - started) * 1000
            score = self._bands.score_for(latency_ms)
        except TimeoutError:
            score = self._bands.failure_score
            logger.warning(
                "operator_health_probe_failed",
                extra={"operator_code": code, "reason": "timeout"},
            )
        except UnifiedError as exc:
            if exc.is_local:
                # Rejeitado antes da rede: config de probe inválida, não indisponibilidade
                logger.error(
                    "operator_health_probe_misconfigured",
                    extra={"operator_code": code, "error_code": exc.code},
                )
                return binding.registration.health_score
            score = self._bands.failure_score
            logger.warning(
                "operator_health_probe_failed",
                extra={"operator_code": code, "reason": exc.code},
            )
        except Exception as exc:
            score = self._bands.failure_score
            logger.warning(
                "operator_health_probe_failed",
                extra={
                    "operator_code": code,
                    "reason": getattr(exc, "code", type(exc).__name__),
                },
            )

        record_health_score(code, score, latency_ms)
        await self._record_result(code, score, latency_ms)
        return score

    async def stop(self, timeout_seconds: float = 5.0) -> None:
        """Desarma o timer e drena probes em andamento."""
        if self._timer_task is not None:
            self._timer_task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await self._timer_task
            self._timer_task = None

        if not self._probes:
            return
        pending_now = list(self._probes)
        _, pending = await asyncio.wait(pending_now, timeout=timeout_seconds)
        for task in pending:
            task.cancel()
        if pending:
            await asyncio.gather(*pending, return_exceptions=True)
            logger.warning(
                "health_probes_cancelled",
                extra={"cancelled_probes": len(pending)},
            )
        logger.info("health_monitor_stopped")
