"""Registry e dispatcher de operadoras.

Autoridade única do processo para "a operadora X pode ser usada agora,
e qual adapter a serve". Criado uma vez no bootstrap e injetado onde
for necessário (sem singleton de módulo).

Fluxo de is_enabled:
1. Cache de TTL curto (best-effort; falha do cache nunca é fatal)
2. Binding em memória
3. Registro persistido (repopula o cache)
"""

from __future__ import annotations

import asyncio
import logging
from collections import Counter
from collections.abc import Callable
from typing import TYPE_CHECKING, Any

from app.operators.events import OperatorEvent, OperatorEventBus
from app.operators.health import HealthMonitor
from app.operators.models import AdapterBinding, OperatorRegistration, utc_now
from config.logging import log_fallback
from config.settings import OperatorSettings
from utils.errors import (
    OperatorDisabledError,
    OperatorNotFoundError,
    ValidationError,
    failure_reason,
)

if TYPE_CHECKING:
    from app.protocols.cache import CacheProtocol
    from app.protocols.operator_adapter import OperatorAdapterProtocol
    from app.protocols.operator_store import OperatorStoreProtocol

logger = logging.getLogger(__name__)

ENABLED_CACHE_KEY = "operator:{code}:enabled"

AdapterFactory = Callable[[OperatorRegistration], "OperatorAdapterProtocol"]


class OperatorRegistry:
    """Mantém um AdapterBinding por operadora provisionada.

    Args:
        store: Camada de persistência de registros
        adapter_factory: Constrói adapter a partir do registro
        cache: Cache best-effort (opcional)
        settings: Configurações de operadoras (health, thresholds)
        events: Barramento de observers (default: novo)
        cache_ttl_seconds: TTL da flag de habilitação em cache
    """

    def __init__(
        self,
        store: OperatorStoreProtocol,
        adapter_factory: AdapterFactory,
        *,
        cache: CacheProtocol | None = None,
        settings: OperatorSettings | None = None,
        events: OperatorEventBus | None = None,
        cache_ttl_seconds: int = 300,
    ) -> None:
        self._store = store
        self._adapter_factory = adapter_factory
        self._cache = cache
        self._settings = settings or OperatorSettings()
        self._cache_ttl_seconds = cache_ttl_seconds
        self._bindings: dict[str, AdapterBinding] = {}
        self._init_task: asyncio.Task[None] | None = None
        self._initialized = False
        self.events = events or OperatorEventBus()
        self.health_monitor = HealthMonitor(
            self._enabled_bindings,
            self._record_health,
            bands=self._settings.health_bands,
            interval_seconds=self._settings.health_check_interval_seconds,
            probe_timeout_seconds=self._settings.health_probe_timeout_seconds,
            default_test_msisdn=self._settings.health_check_msisdn,
        )

    @property
    def is_initialized(self) -> bool:
        return self._initialized

    # ──────────────────────────────────────────────────────────────
    # Ciclo de vida
    # ──────────────────────────────────────────────────────────────

    async def initialize(self) -> None:
        """Carrega registros e constrói bindings (idempotente).

        Chamadas concorrentes aguardam a mesma inicialização em andamento;
        após sucesso, novas chamadas não fazem nada. Em falha, a próxima
        chamada tenta de novo.
        """
        if self._initialized:
            return
        if self._init_task is None:
            self._init_task = asyncio.create_task(self._do_initialize())
        task = self._init_task
        try:
            await asyncio.shield(task)
        except Exception:
            if self._init_task is task:
                self._init_task = None
            raise

    async def _do_initialize(self) -> None:
        registrations = await self._store.find_active_registrations()
        bindings: dict[str, AdapterBinding] = {}
        for registration in registrations:
            binding = self._build_binding(registration)
            if binding is not None:
                bindings[registration.code] = binding

        self._bindings = bindings
        self._initialized = True
        self.health_monitor.start()
        logger.info(
            "operator_registry_initialized",
            extra={
                "operator_count": len(bindings),
                "enabled_count": sum(1 for b in bindings.values() if b.enabled),
            },
        )

    def _build_binding(self, registration: OperatorRegistration) -> AdapterBinding | None:
        try:
            adapter = self._adapter_factory(registration)
        except Exception as exc:
            # Config inválida de uma operadora não derruba as demais
            logger.error(
                "operator_adapter_build_failed",
                extra={"operator_code": registration.code, "error_type": type(exc).__name__},
            )
            return None
        return AdapterBinding(registration=registration, adapter=adapter)

    async def shutdown(self) -> None:
        """Para o monitor de health e drena probes em andamento."""
        await self.health_monitor.stop()
        logger.info("operator_registry_shutdown")

    # ──────────────────────────────────────────────────────────────
    # Despacho
    # ──────────────────────────────────────────────────────────────

    def get_adapter(self, code: str) -> OperatorAdapterProtocol:
        """Retorna o adapter da operadora.

        Raises:
            OperatorNotFoundError: Código sem binding
            OperatorDisabledError: Binding desabilitado
        """
        binding = self._bindings.get(code)
        if binding is None:
            raise OperatorNotFoundError(code)
        if not binding.enabled:
            raise OperatorDisabledError(code, binding.registration.disable_reason)
        return binding.adapter

    async def is_enabled(self, code: str) -> bool:
        cached = await self._cache_get(code)
        if cached is not None:
            return cached == "true"

        binding = self._bindings.get(code)
        if binding is not None:
            enabled = binding.enabled
        else:
            registration = await self._store.load_registration(code)
            if registration is None:
                return False
            enabled = registration.enabled

        await self._cache_set(code, enabled)
        return enabled

    def is_operational(self, code: str) -> bool:
        """enabled AND status == active AND health > threshold operacional."""
        binding = self._bindings.get(code)
        if binding is None:
            return False
        return binding.is_operational(self._settings.operational_threshold)

    # ──────────────────────────────────────────────────────────────
    # Mutação
    # ──────────────────────────────────────────────────────────────

    async def enable(
        self,
        code: str,
        actor_id: str | None,
        reason: str | None = None,
    ) -> OperatorRegistration:
        return await self._set_enabled(code, True, actor_id, reason)

    async def disable(self, code: str, actor_id: str | None, reason: str) -> OperatorRegistration:
        """Desabilita operadora. Motivo é obrigatório.

        Raises:
            ValidationError: Motivo vazio
            OperatorNotFoundError: Registro inexistente
        """
        if not reason or not reason.strip():
            raise ValidationError(
                "MISSING_PARAMETERS",
                "Motivo é obrigatório para desabilitar operadora",
                operator_code=code,
                details={"missing": ["reason"]},
            )
        return await self._set_enabled(code, False, actor_id, reason.strip())

    async def _set_enabled(
        self,
        code: str,
        enabled: bool,
        actor_id: str | None,
        reason: str | None,
    ) -> OperatorRegistration:
        now = utc_now()
        fields: dict[str, Any] = {
            "enabled": enabled,
            "disable_reason": None if enabled else reason,
            "last_modified_by": actor_id,
            "last_modified_at": now,
        }
        updated = await self._store.update_registration(code, fields)
        if updated is None:
            raise OperatorNotFoundError(code)

        await self._cache_set(code, enabled)

        binding = self._bindings.get(code)
        if binding is not None:
            binding.registration = binding.registration.with_changes(**fields)
        elif self._initialized:
            new_binding = self._build_binding(updated)
            if new_binding is not None:
                self._bindings[code] = new_binding

        event_type = "operator_enabled" if enabled else "operator_disabled"
        await self._store.append_audit_record(
            {
                "action": event_type,
                "operator_code": code,
                "actor_id": actor_id,
                "reason": reason,
                "timestamp": now.isoformat(),
            }
        )
        await self.events.publish(
            OperatorEvent(
                event_type=event_type,
                operator_code=code,
                actor_id=actor_id,
                reason=reason,
                occurred_at=now,
            )
        )
        logger.info(
            event_type,
            extra={"operator_code": code, "actor_id": actor_id},
        )
        return updated

    async def refresh(self, code: str) -> AdapterBinding | None:
        """Reconstrói o binding após mudança de configuração.

        Registro removido da persistência remove o binding.
        """
        registration = await self._store.load_registration(code)
        if registration is None:
            self._bindings.pop(code, None)
            logger.info("operator_binding_removed", extra={"operator_code": code})
            return None

        previous = self._bindings.get(code)
        if previous is not None:
            registration = registration.with_changes(
                health_score=previous.registration.health_score,
                last_health_check=previous.registration.last_health_check,
            )
        binding = self._build_binding(registration)
        if binding is None:
            return None
        self._bindings[code] = binding
        await self.events.publish(OperatorEvent(event_type="operator_refreshed", operator_code=code))
        logger.info("operator_binding_refreshed", extra={"operator_code": code})
        return binding

    # ──────────────────────────────────────────────────────────────
    # Health
    # ──────────────────────────────────────────────────────────────

    def _enabled_bindings(self) -> list[AdapterBinding]:
        return [binding for binding in self._bindings.values() if binding.enabled]

    async def _record_health(self, code: str, score: float, latency_ms: float | None) -> None:
        binding = self._bindings.get(code)
        if binding is None:
            return
        now = utc_now()
        binding.registration = binding.registration.with_changes(
            health_score=score,
            last_health_check=now,
        )
        try:
            await self._store.update_registration(
                code,
                {"health_score": score, "last_health_check": now},
            )
        except Exception as exc:
            logger.warning(
                "operator_health_persist_failed",
                extra={"operator_code": code, "error_type": type(exc).__name__},
            )

    # ──────────────────────────────────────────────────────────────
    # Visões agregadas (somente leitura)
    # ──────────────────────────────────────────────────────────────

    def get_statistics(self) -> dict[str, Any]:
        bindings = list(self._bindings.values())
        enabled = [b for b in bindings if b.enabled]
        threshold = self._settings.operational_threshold
        healthy_threshold = self._settings.healthy_threshold
        scores = [b.registration.health_score for b in bindings]
        return {
            "initialized": self._initialized,
            "total_operators": len(bindings),
            "enabled_operators": len(enabled),
            "disabled_operators": len(bindings) - len(enabled),
            "healthy_operators": sum(
                1 for b in enabled if b.registration.health_score > healthy_threshold
            ),
            "operational_operators": sum(1 for b in bindings if b.is_operational(threshold)),
            "average_health_score": round(sum(scores) / len(scores), 3) if scores else None,
            "by_family": dict(Counter(_adapter_family(b) for b in bindings)),
            "by_country": dict(Counter(b.registration.country or "Unknown" for b in bindings)),
            "by_currency": dict(Counter(_currency(b) for b in bindings)),
            "health_monitor_running": self.health_monitor.is_running,
        }

    def get_all_statuses(self) -> list[dict[str, Any]]:
        threshold = self._settings.operational_threshold
        statuses = []
        for code in sorted(self._bindings):
            binding = self._bindings[code]
            status = binding.registration.to_public_dict()
            status["currency"] = _currency(binding)
            status["adapter_family"] = _adapter_family(binding)
            status["is_operational"] = binding.is_operational(threshold)
            statuses.append(status)
        return statuses

    # ──────────────────────────────────────────────────────────────
    # Cache best-effort
    # ──────────────────────────────────────────────────────────────

    async def _cache_get(self, code: str) -> str | None:
        if self._cache is None:
            return None
        try:
            return await self._cache.get(ENABLED_CACHE_KEY.format(code=code))
        except Exception as exc:
            log_fallback(logger, "operator_enabled_cache", reason=failure_reason(exc))
            return None

    async def _cache_set(self, code: str, enabled: bool) -> None:
        if self._cache is None:
            return
        try:
            await self._cache.set_with_ttl(
                ENABLED_CACHE_KEY.format(code=code),
                "true" if enabled else "false",
                self._cache_ttl_seconds,
            )
        except Exception as exc:
            log_fallback(logger, "operator_enabled_cache", reason=failure_reason(exc))


def _adapter_family(binding: AdapterBinding) -> str:
    return getattr(binding.adapter, "family", "generic")


def _currency(binding: AdapterBinding) -> str:
    return (
        binding.registration.currency
        or getattr(binding.adapter, "currency", None)
        or "Unknown"
    )
