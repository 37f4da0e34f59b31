"""Settings do registry de operadoras e da API upstream de billing.

Inclui as faixas de health score: os cortes de latência são política
operacional e por isso ficam configuráveis por ambiente.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from functools import lru_cache
from typing import Literal

BILLING_API_BASE_URL: str = "https://api.sla-alacrity.com"
BILLING_API_VERSION: str = "v2.2"

ApiEnvironment = Literal["sandbox", "production"]
OperatorStoreBackend = Literal["memory"]


@dataclass(frozen=True)
class HealthScoreBands:
    """Faixas de score por latência de probe.

    `scores[i]` vale enquanto a latência não ultrapassa `thresholds_ms[i]`;
    acima do último corte vale `scores[-1]`. Falha/timeout vale `failure_score`.

    Attributes:
        thresholds_ms: Cortes crescentes de latência em ms
        scores: Score por faixa (len(thresholds_ms) + 1 valores)
        failure_score: Score fixo para probe com falha
    """

    thresholds_ms: tuple[float, ...] = (2000.0, 5000.0, 10000.0)
    scores: tuple[float, ...] = (1.0, 0.9, 0.7, 0.3)
    failure_score: float = 0.1

    def score_for(self, latency_ms: float) -> float:
        """Retorna score da faixa correspondente à latência."""
        for threshold, score in zip(self.thresholds_ms, self.scores, strict=False):
            if latency_ms <= threshold:
                return score
        return self.scores[-1]

    def validate(self) -> list[str]:
        """Valida coerência das faixas."""
        errors: list[str] = []
        if len(self.thresholds_ms) < 2:
            errors.append("HEALTH_BAND_THRESHOLDS_MS requer ao menos 2 cortes (3 faixas)")
        if len(self.scores) != len(self.thresholds_ms) + 1:
            errors.append("HEALTH_BAND_SCORES deve ter len(HEALTH_BAND_THRESHOLDS_MS) + 1 valores")
        if list(self.thresholds_ms) != sorted(self.thresholds_ms):
            errors.append("HEALTH_BAND_THRESHOLDS_MS deve ser crescente")
        if any(not 0.0 <= score <= 1.0 for score in (*self.scores, self.failure_score)):
            errors.append("Scores de health devem estar em [0, 1]")
        return errors


@dataclass(frozen=True)
class OperatorSettings:
    """Configurações de operadoras.

    Attributes:
        api_base_url: URL base da API upstream
        api_username: Usuário Basic auth da API upstream
        api_password: Senha Basic auth da API upstream
        api_environment: Ambiente upstream (sandbox|production)
        request_timeout_seconds: Timeout por chamada upstream
        max_retries: Retentativas de transporte em falha de conexão
        health_check_interval_seconds: Intervalo entre rodadas de probe
        health_probe_timeout_seconds: Timeout de cada probe
        health_bands: Faixas de score por latência
        operational_threshold: Score mínimo (exclusivo) para is_operational
        healthy_threshold: Score mínimo (exclusivo) para estatística "healthy"
        health_check_msisdn: Identificador de teste padrão dos probes
        store_backend: Backend de persistência de registros
        seed_path: Catálogo YAML para o store em memória
    """

    api_base_url: str = BILLING_API_BASE_URL
    api_username: str = ""
    api_password: str = field(default="", repr=False)
    api_environment: ApiEnvironment = "sandbox"
    request_timeout_seconds: float = 30.0
    max_retries: int = 0

    health_check_interval_seconds: float = 300.0
    health_probe_timeout_seconds: float = 15.0
    health_bands: HealthScoreBands = field(default_factory=HealthScoreBands)
    operational_threshold: float = 0.5
    healthy_threshold: float = 0.7
    health_check_msisdn: str = "1234567890"

    store_backend: OperatorStoreBackend = "memory"
    seed_path: str = ""

    def validate(self) -> list[str]:
        """Valida configurações de operadoras.

        Returns:
            Lista de erros de validação (vazia = tudo OK).
        """
        errors: list[str] = []

        if not self.api_base_url.startswith(("http://", "https://")):
            errors.append("BILLING_API_BASE_URL deve ser URL http(s)")

        if not self.api_username or not self.api_password:
            errors.append("BILLING_API_USERNAME/BILLING_API_PASSWORD não configurados")

        if self.request_timeout_seconds <= 0:
            errors.append("BILLING_API_TIMEOUT_SECONDS deve ser > 0")

        if self.max_retries < 0:
            errors.append("BILLING_API_MAX_RETRIES deve ser >= 0")

        if self.health_check_interval_seconds <= 0:
            errors.append("HEALTH_CHECK_INTERVAL_SECONDS deve ser > 0")

        if self.health_probe_timeout_seconds <= 0:
            errors.append("HEALTH_PROBE_TIMEOUT_SECONDS deve ser > 0")

        errors.extend(self.health_bands.validate())
        return errors


def _parse_floats(raw: str | None, default: tuple[float, ...]) -> tuple[float, ...]:
    """Converte lista CSV em tupla de floats (vazio = default)."""
    if not raw:
        return default
    return tuple(float(part) for part in raw.split(",") if part.strip())


def _load_from_env() -> OperatorSettings:
    """Carrega OperatorSettings a partir de variáveis de ambiente."""
    api_env = os.getenv("BILLING_API_ENVIRONMENT", "sandbox").lower()
    defaults = HealthScoreBands()
    return OperatorSettings(
        api_base_url=os.getenv("BILLING_API_BASE_URL", BILLING_API_BASE_URL),
        api_username=os.getenv("BILLING_API_USERNAME", ""),
        api_password=os.getenv("BILLING_API_PASSWORD", ""),
        api_environment="production" if api_env in ("production", "live") else "sandbox",
        request_timeout_seconds=float(os.getenv("BILLING_API_TIMEOUT_SECONDS", "30")),
        max_retries=int(os.getenv("BILLING_API_MAX_RETRIES", "0")),
        health_check_interval_seconds=float(os.getenv("HEALTH_CHECK_INTERVAL_SECONDS", "300")),
        health_probe_timeout_seconds=float(os.getenv("HEALTH_PROBE_TIMEOUT_SECONDS", "15")),
        health_bands=HealthScoreBands(
            thresholds_ms=_parse_floats(
                os.getenv("HEALTH_BAND_THRESHOLDS_MS"), defaults.thresholds_ms
            ),
            scores=_parse_floats(os.getenv("HEALTH_BAND_SCORES"), defaults.scores),
            failure_score=float(os.getenv("HEALTH_FAILURE_SCORE", str(defaults.failure_score))),
        ),
        operational_threshold=float(os.getenv("OPERATIONAL_HEALTH_THRESHOLD", "0.5")),
        healthy_threshold=float(os.getenv("HEALTHY_SCORE_THRESHOLD", "0.7")),
        health_check_msisdn=os.getenv("HEALTH_CHECK_MSISDN", "1234567890"),
        store_backend="memory",
        seed_path=os.getenv("OPERATOR_SEED_PATH", ""),
    )


@lru_cache(maxsize=1)
def get_operator_settings() -> OperatorSettings:
    """Retorna instância cacheada de OperatorSettings."""
    return _load_from_env()
