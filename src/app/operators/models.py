"""Modelos do registry de operadoras.

OperatorRegistration é o registro persistido (uma por código);
AdapterBinding é o par em memória registro + instância de adapter,
de posse exclusiva do registry.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import UTC, datetime
from typing import TYPE_CHECKING, Any, Literal

if TYPE_CHECKING:
    from app.protocols.operator_adapter import OperatorAdapterProtocol

OperatorLifecycleStatus = Literal["active", "maintenance", "inactive"]


@dataclass(frozen=True, slots=True)
class OperatorCredentials:
    """Credenciais da API upstream de uma operadora.

    Nunca aparecem em repr, logs ou respostas.
    """

    username: str = field(repr=False)
    password: str = field(repr=False)

    @property
    def is_complete(self) -> bool:
        return bool(self.username and self.password)


@dataclass(frozen=True, slots=True)
class OperatorRegistration:
    """Registro persistido de uma operadora.

    Atributos:
        code: Código estável (ex.: zain-kw)
        name: Nome comercial
        country: País de operação
        enabled: Flag de habilitação (disable nunca apaga o registro)
        status: Status de ciclo de vida provisionado
        health_score: Sinal contínuo em [0, 1]
        last_health_check: Momento do último probe
        config: Blob opaco (limites, regras de MSISDN, moeda, features)
        credentials_ref: Referência das credenciais (resolvida no bootstrap)
        disable_reason: Motivo do último disable
        last_modified_by: Ator da última alteração
        last_modified_at: Momento da última alteração
    """

    code: str
    name: str = ""
    country: str = ""
    enabled: bool = True
    status: OperatorLifecycleStatus = "active"
    health_score: float = 1.0
    last_health_check: datetime | None = None
    config: dict[str, Any] = field(default_factory=dict)
    credentials_ref: str = field(default="", repr=False)
    disable_reason: str | None = None
    last_modified_by: str | None = None
    last_modified_at: datetime | None = None

    @property
    def currency(self) -> str | None:
        return self.config.get("currency")

    def with_changes(self, **changes: Any) -> OperatorRegistration:
        """Retorna cópia com campos alterados."""
        return replace(self, **changes)

    def to_public_dict(self) -> dict[str, Any]:
        """Serializa sem credenciais (seguro para clientes e logs)."""
        return {
            "code": self.code,
            "name": self.name,
            "country": self.country,
            "enabled": self.enabled,
            "status": self.status,
            "health_score": self.health_score,
            "last_health_check": (
                self.last_health_check.isoformat() if self.last_health_check else None
            ),
            "disable_reason": self.disable_reason,
            "last_modified_by": self.last_modified_by,
            "last_modified_at": (
                self.last_modified_at.isoformat() if self.last_modified_at else None
            ),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> OperatorRegistration:
        """Deserializa registro de persistência."""
        return cls(
            code=str(data["code"]),
            name=data.get("name", ""),
            country=data.get("country", ""),
            enabled=bool(data.get("enabled", True)),
            status=data.get("status", "active"),
            health_score=float(data.get("health_score", 1.0)),
            last_health_check=_parse_datetime(data.get("last_health_check")),
            config=dict(data.get("config") or {}),
            credentials_ref=data.get("credentials_ref", ""),
            disable_reason=data.get("disable_reason"),
            last_modified_by=data.get("last_modified_by"),
            last_modified_at=_parse_datetime(data.get("last_modified_at")),
        )


@dataclass(slots=True)
class AdapterBinding:
    """Par em memória registro + adapter construído a partir dele."""

    registration: OperatorRegistration
    adapter: OperatorAdapterProtocol

    @property
    def code(self) -> str:
        return self.registration.code

    @property
    def enabled(self) -> bool:
        return self.registration.enabled

    def is_operational(self, threshold: float = 0.5) -> bool:
        """enabled AND status == active AND health > threshold."""
        registration = self.registration
        return (
            registration.enabled
            and registration.status == "active"
            and registration.health_score > threshold
        )


def utc_now() -> datetime:
    return datetime.now(UTC)


def _parse_datetime(value: Any) -> datetime | None:
    if value is None or isinstance(value, datetime):
        return value
    return datetime.fromisoformat(str(value))
