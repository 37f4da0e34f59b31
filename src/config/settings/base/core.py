"""Settings comuns do processo: ambiente, identidade do serviço e Redis."""

from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache
from typing import Literal, get_args

Environment = Literal["development", "staging", "production"]

# Aliases aceitos em ENVIRONMENT; qualquer outro valor cai em development
ENVIRONMENT_ALIASES: dict[str, Environment] = {
    "production": "production",
    "prod": "production",
    "live": "production",
    "staging": "staging",
    "stage": "staging",
}

REDIS_URL_SCHEMES = ("redis://", "rediss://", "unix://")


@dataclass(frozen=True)
class BaseSettings:
    """Ambiente e conexões compartilhadas por registry, dedupe e retries.

    Attributes:
        environment: development|staging|production
        service_name: Valor de `service` nos logs
        debug: Modo debug
        redis_url: Conexão única usada por cache, dedupe e store de retries
    """

    environment: Environment = "development"
    service_name: str = "unified-billing"
    debug: bool = False
    redis_url: str = ""

    @property
    def is_development(self) -> bool:
        return self.environment == "development"

    @property
    def requires_durable_state(self) -> bool:
        """Fora de dev, dedupe e retries precisam sobreviver a restart."""
        return not self.is_development

    def validate(self) -> list[str]:
        errors: list[str] = []
        if self.environment not in get_args(Environment):
            errors.append(f"ENVIRONMENT inválido: {self.environment}")
        if not self.service_name.strip():
            errors.append("SERVICE_NAME não pode ser vazio")
        if self.redis_url and not self.redis_url.startswith(REDIS_URL_SCHEMES):
            errors.append("REDIS_URL deve usar redis://, rediss:// ou unix://")
        return errors


def _parse_environment(raw: str) -> Environment:
    return ENVIRONMENT_ALIASES.get(raw.strip().lower(), "development")


def _load_base_from_env() -> BaseSettings:
    """Carrega BaseSettings de variáveis de ambiente."""
    return BaseSettings(
        environment=_parse_environment(os.getenv("ENVIRONMENT", "development")),
        service_name=os.getenv("SERVICE_NAME", "unified-billing"),
        debug=os.getenv("DEBUG", "").lower() in ("true", "1", "yes"),
        redis_url=os.getenv("REDIS_URL", "").strip(),
    )


@lru_cache(maxsize=1)
def get_base_settings() -> BaseSettings:
    """Retorna instância cacheada de BaseSettings."""
    return _load_base_from_env()
