"""Configuração do pytest para o core de billing unificado."""

import sys
from collections.abc import Iterator
from pathlib import Path

import pytest

# Adiciona src/ ao PYTHONPATH para permitir imports absolutos
src_path = Path(__file__).parent.parent / "src"
if str(src_path) not in sys.path:
    sys.path.insert(0, str(src_path))

from config.settings import (  # noqa: E402
    get_base_settings,
    get_cache_settings,
    get_dedupe_settings,
    get_operator_settings,
    get_webhook_settings,
)


def clear_settings_cache() -> None:
    """Descarta settings memoizadas para reler o ambiente."""
    for getter in (
        get_base_settings,
        get_cache_settings,
        get_dedupe_settings,
        get_operator_settings,
        get_webhook_settings,
    ):
        getter.cache_clear()


@pytest.fixture
def billing_env(monkeypatch: pytest.MonkeyPatch) -> Iterator[pytest.MonkeyPatch]:
    """Ambiente de desenvolvimento válido, com backends em memória."""
    for name in ("REDIS_URL", "OPERATOR_SEED_PATH", "BILLING_WEBHOOK_SECRET"):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setenv("ENVIRONMENT", "development")
    monkeypatch.setenv("BILLING_API_USERNAME", "api-user")
    monkeypatch.setenv("BILLING_API_PASSWORD", "api-pass")
    monkeypatch.setenv("CACHE_BACKEND", "memory")
    monkeypatch.setenv("DEDUPE_BACKEND", "memory")
    monkeypatch.setenv("WEBHOOK_RETRY_STORE_BACKEND", "memory")
    monkeypatch.setenv("HEALTH_CHECK_INTERVAL_SECONDS", "3600")
    clear_settings_cache()
    yield monkeypatch
    clear_settings_cache()
