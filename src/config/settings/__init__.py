"""Agregador de settings do core de billing.

Re-exporta todas as settings e funções de cada módulo.
Organização por domínio para isolamento de mudanças.
"""

from __future__ import annotations

# Base settings
from config.settings.base import (
    BaseSettings,
    CacheBackend,
    CacheSettings,
    DedupeBackend,
    DedupeSettings,
    Environment,
    get_base_settings,
    get_cache_settings,
    get_dedupe_settings,
)

# Operator settings
from config.settings.operators import (
    BILLING_API_BASE_URL,
    BILLING_API_VERSION,
    HealthScoreBands,
    OperatorSettings,
    get_operator_settings,
)

# Webhook settings
from config.settings.webhooks import (
    DEFAULT_RETRY_OFFSETS_HOURS,
    WebhookSettings,
    get_webhook_settings,
)

__all__ = [
    # Constants
    "BILLING_API_BASE_URL",
    "BILLING_API_VERSION",
    "DEFAULT_RETRY_OFFSETS_HOURS",
    # Base
    "BaseSettings",
    "CacheBackend",
    "CacheSettings",
    "DedupeBackend",
    "DedupeSettings",
    "Environment",
    # Operators
    "HealthScoreBands",
    "OperatorSettings",
    # Webhooks
    "WebhookSettings",
    "get_base_settings",
    "get_cache_settings",
    "get_dedupe_settings",
    "get_operator_settings",
    "get_webhook_settings",
]
