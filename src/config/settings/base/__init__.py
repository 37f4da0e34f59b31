"""Settings compartilhadas: ambiente, cache de flags e dedupe inbound."""

from __future__ import annotations

from config.settings.base.cache import CacheBackend, CacheSettings, get_cache_settings
from config.settings.base.core import BaseSettings, Environment, get_base_settings
from config.settings.base.dedupe import DedupeBackend, DedupeSettings, get_dedupe_settings

__all__ = [
    "BaseSettings",
    "CacheBackend",
    "CacheSettings",
    "DedupeBackend",
    "DedupeSettings",
    "Environment",
    "get_base_settings",
    "get_cache_settings",
    "get_dedupe_settings",
]
