"""Stores em memória — apenas para desenvolvimento e testes.

ATENÇÃO: Não usar em staging/production. Sem persistência entre reinícios.
"""

from __future__ import annotations

import json
import time
from typing import TYPE_CHECKING, Any

from app.operators.models import OperatorRegistration
from app.protocols.billing_store import BillingRecordStoreProtocol
from app.protocols.cache import CacheProtocol
from app.protocols.dedupe import AsyncDedupeProtocol
from app.protocols.operator_store import OperatorStoreProtocol
from app.protocols.webhook_store import WebhookRetryStoreProtocol
from app.webhooks.models import WebhookDeliveryAttempt

if TYPE_CHECKING:
    from collections.abc import Iterable


class MemoryCache(CacheProtocol):
    """Cache em memória com TTL — apenas para dev/test."""

    def __init__(self) -> None:
        self._store: dict[str, tuple[str, float]] = {}  # key -> (value, expires_at)

    async def get(self, key: str) -> str | None:
        entry = self._store.get(key)
        if entry is None:
            return None
        value, expires_at = entry
        if time.time() > expires_at:
            del self._store[key]
            return None
        return value

    async def set_with_ttl(self, key: str, value: str, ttl_seconds: int) -> None:
        self._store[key] = (value, time.time() + ttl_seconds)


class MemoryDedupeStore(AsyncDedupeProtocol):
    """Store de dedupe em memória — apenas para dev/test."""

    def __init__(self) -> None:
        self._store: dict[str, float] = {}  # key -> expires_at

    def _cleanup_expired(self) -> None:
        """Remove entradas expiradas."""
        now = time.time()
        expired = [k for k, v in self._store.items() if v < now]
        for k in expired:
            del self._store[k]

    async def seen(self, key: str, ttl: int) -> bool:
        """Verifica e marca chave (sem await entre check e mark)."""
        self._cleanup_expired()
        if key in self._store:
            return True  # Duplicado
        self._store[key] = time.time() + ttl
        return False  # Novo

    async def forget(self, key: str) -> None:
        self._store.pop(key, None)


class MemoryOperatorStore(OperatorStoreProtocol):
    """Persistência de operadoras em memória — apenas para dev/test.

    Args:
        registrations: Registros iniciais (ex.: do catálogo YAML)
        max_audit_records: Limite do log de auditoria em memória
    """

    def __init__(
        self,
        registrations: Iterable[OperatorRegistration] = (),
        max_audit_records: int = 10000,
    ) -> None:
        self._registrations: dict[str, OperatorRegistration] = {
            registration.code: registration for registration in registrations
        }
        self._audit: list[dict[str, Any]] = []
        self._max_audit_records = max_audit_records

    async def find_active_registrations(self) -> list[OperatorRegistration]:
        return [
            registration
            for registration in self._registrations.values()
            if registration.status != "inactive"
        ]

    async def load_registration(self, code: str) -> OperatorRegistration | None:
        return self._registrations.get(code)

    async def update_registration(
        self,
        code: str,
        fields: dict[str, Any],
    ) -> OperatorRegistration | None:
        current = self._registrations.get(code)
        if current is None:
            return None
        updated = current.with_changes(**fields)
        self._registrations[code] = updated
        return updated

    async def append_audit_record(self, entry: dict[str, Any]) -> None:
        self._audit.append(dict(entry))
        # Limita tamanho para evitar memory leak em dev
        if len(self._audit) > self._max_audit_records:
            self._audit = self._audit[-self._max_audit_records:]

    def add(self, registration: OperatorRegistration) -> None:
        """Provisiona registro (fora do core; usado por seed e testes)."""
        self._registrations[registration.code] = registration

    def get_audit_records(self) -> list[dict[str, Any]]:
        """Retorna todos os registros de auditoria (apenas para testes)."""
        return list(self._audit)


class MemoryWebhookRetryStore(WebhookRetryStoreProtocol):
    """Retries de webhook em memória — apenas para dev/test.

    Serializa em JSON como o store Redis, para que payloads não
    serializáveis falhem igualmente em dev.
    """

    def __init__(self) -> None:
        self._store: dict[str, tuple[str, float]] = {}  # delivery_id -> (json, expires_at)

    async def save(self, attempt: WebhookDeliveryAttempt, ttl_seconds: int) -> None:
        self._store[attempt.delivery_id] = (
            json.dumps(attempt.to_dict()),
            time.time() + ttl_seconds,
        )

    async def delete(self, delivery_id: str) -> None:
        self._store.pop(delivery_id, None)

    async def load_pending(self) -> list[WebhookDeliveryAttempt]:
        now = time.time()
        return [
            WebhookDeliveryAttempt.from_dict(json.loads(data))
            for data, expires_at in self._store.values()
            if expires_at >= now
        ]


class MemoryBillingRecordStore(BillingRecordStoreProtocol):
    """Assinaturas/transações em memória — apenas para dev/test."""

    def __init__(self, subscriptions: dict[str, dict[str, Any]] | None = None) -> None:
        self.subscriptions: dict[str, dict[str, Any]] = dict(subscriptions or {})
        self.transactions: dict[str, dict[str, Any]] = {}
        self.error_logs: list[dict[str, Any]] = []

    async def update_subscription(self, subscription_uuid: str, fields: dict[str, Any]) -> bool:
        current = self.subscriptions.get(subscription_uuid)
        if current is None:
            return False
        current.update(fields)
        return True

    async def upsert_transaction(self, record: dict[str, Any]) -> None:
        key = str(record.get("uuid"))
        self.transactions[key] = {**self.transactions.get(key, {}), **record}

    async def append_error_log(self, entry: dict[str, Any]) -> None:
        self.error_logs.append(dict(entry))
