"""Testes do HealthMonitor (probes concorrentes e faixas de score)."""

from __future__ import annotations

import asyncio

import pytest

from api.connectors.operators import make_adapter_factory
from app.infra.secrets import OperatorCredentialResolver
from app.infra.stores.operator_seed import load_operator_seed
from app.operators import AdapterBinding, HealthMonitor, OperatorRegistration
from config.settings import HealthScoreBands, OperatorSettings
from tests.fakes.fake_adapter import FakeAdapter
from tests.fakes.fake_transport import FakeTransport
from utils.errors import OperatorError, ValidationError

def _binding(code: str, config: dict | None = None, **adapter_kwargs: object) -> AdapterBinding:
    registration = OperatorRegistration(code=code, config=config or {})
    return AdapterBinding(registration=registration, adapter=FakeAdapter(registration, **adapter_kwargs))

class Recorder:
    def __init__(self) -> None:
        self.results: dict[str, tuple[float, float | None]] = {}

    async def __call__(self, code: str, score: float, latency_ms: float | None) -> None:
        self.results[code] = (score, latency_ms)

def _monitor(
    bindings: list[AdapterBinding],
    recorder: Recorder,
    **kwargs: object,
) -> HealthMonitor:
    return HealthMonitor(
        lambda: bindings,
        recorder,
        bands=HealthScoreBands(),
        default_test_msisdn="96550000000",
        **kwargs,
    )

class TestProbe:
    @pytest.mark.asyncio
    async def test_fast_probe_scores_top_band(self) -> None:
        recorder = Recorder()
        binding = _binding("zain-kw")
        score = await _monitor([binding], recorder).probe(binding)

        assert score == 1.0
        assert recorder.results["zain-kw"][0] == 1.0
        assert recorder.results["zain-kw"][1] is not None

    @pytest.mark.asyncio
    async def test_uses_configured_test_msisdn(self) -> None:
        binding = _binding("zain-kw", {"test_msisdn": "96551111111"})
        default_binding = _binding("etisalat-ae")
        monitor = _monitor([binding, default_binding], Recorder())

        await monitor.probe(binding)
        await monitor.probe(default_binding)

        assert binding.adapter.eligibility_calls == [{"msisdn": "96551111111"}]
        assert default_binding.adapter.eligibility_calls == [{"msisdn": "96550000000"}]

    @pytest.mark.asyncio
    async def test_error_scores_failure(self) -> None:
        recorder = Recorder()
        binding = _binding("zain-kw", error=OperatorError("SERVICE_UNAVAILABLE", "fora"))
        score = await _monitor([binding], recorder).probe(binding)

        assert score == 0.1
        assert recorder.results["zain-kw"] == (0.1, None)

    @pytest.mark.asyncio
    async def test_timeout_scores_failure(self) -> None:
        recorder = Recorder()
        binding = _binding("zain-kw", delay_seconds=1.0)
        monitor = _monitor([binding], recorder, probe_timeout_seconds=0.01)

        assert await monitor.probe(binding) == 0.1
        assert recorder.results["zain-kw"] == (0.1, None)

    @pytest.mark.asyncio
    async def test_local_rejection_keeps_current_score(self) -> None:
        recorder = Recorder()
        registration = OperatorRegistration(code="etisalat-ae", health_score=0.9)
        adapter = FakeAdapter(
            registration, error=ValidationError("INVALID_MSISDN", "formato inválido")
        )
        binding = AdapterBinding(registration=registration, adapter=adapter)

        score = await _monitor([binding], recorder).probe(binding)

        assert score == 0.9
        assert recorder.results == {}

class TestSeededCatalogue:
    """Probes sobre o catálogo de desenvolvimento com adapters reais."""

    @pytest.mark.asyncio
    async def test_every_enabled_operator_scores_top_band(self) -> None:
        transport = FakeTransport(default_status=200)
        build = make_adapter_factory(
            transport,
            OperatorSettings(api_base_url="https://billing.test"),
            OperatorCredentialResolver(default_username="svc", default_password="secret"),
        )
        bindings = [
            AdapterBinding(registration=registration, adapter=build(registration))
            for registration in load_operator_seed()
            if registration.enabled
        ]
        recorder = Recorder()
        monitor = HealthMonitor(lambda: bindings, recorder, bands=HealthScoreBands())

        for binding in bindings:
            assert await monitor.probe(binding) == 1.0

        assert {code for code, (score, _) in recorder.results.items() if score == 1.0} == {
            binding.code for binding in bindings
        }
        assert len(transport.calls) == len(bindings)

class TestRounds:
    @pytest.mark.asyncio
    async def test_slow_probe_does_not_block_others(self) -> None:
        recorder = Recorder()
        slow = _binding("slow-xx", delay_seconds=0.5)
        fast = _binding("fast-xx")
        monitor = _monitor([slow, fast], recorder, probe_timeout_seconds=5.0)

        monitor.run_round()
        assert monitor.in_flight_probes == 2
        await asyncio.sleep(0.05)

        assert "fast-xx" in recorder.results
        assert "slow-xx" not in recorder.results
        await monitor.stop(timeout_seconds=0.01)
        assert monitor.in_flight_probes == 0

    @pytest.mark.asyncio
    async def test_timer_runs_rounds(self) -> None:
        recorder = Recorder()
        monitor = _monitor([_binding("zain-kw")], recorder, interval_seconds=0.01)

        assert monitor.start() is True
        assert monitor.start() is False
        await asyncio.sleep(0.05)
        await monitor.stop()

        assert monitor.rounds_started >= 1
        assert "zain-kw" in recorder.results
        assert monitor.is_running is False

    @pytest.mark.asyncio
    async def test_no_round_before_first_interval(self) -> None:
        monitor = _monitor([_binding("zain-kw")], Recorder(), interval_seconds=60.0)
        monitor.start()
        await asyncio.sleep(0)
        assert monitor.rounds_started == 0
        await monitor.stop()
