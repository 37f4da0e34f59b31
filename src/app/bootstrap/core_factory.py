"""Container do core de billing — conecta registry, webhooks e transporte.

O container é construído explicitamente e passado adiante (app.state,
testes); não há instância global do registry.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from api.connectors.operators import make_adapter_factory
from api.normalizers.operators import normalize_status
from app.bootstrap.clients import close_async_redis_client
from app.bootstrap.dependencies import (
    create_billing_record_store,
    create_cache,
    create_dedupe_store,
    create_http_transport,
    create_operator_store,
    create_webhook_retry_store,
)
from app.infra.secrets import OperatorCredentialResolver
from app.operators import OperatorEventBus, OperatorRegistry
from app.webhooks import InboundWebhookProcessor, NotificationHandlers, WebhookDeliveryService
from config.settings import (
    get_base_settings,
    get_cache_settings,
    get_dedupe_settings,
    get_operator_settings,
    get_webhook_settings,
)

if TYPE_CHECKING:
    from app.infra.http import HttpClient

logger = logging.getLogger(__name__)


@dataclass
class BillingCore:
    """Componentes de longa duração de um processo."""

    registry: OperatorRegistry
    delivery: WebhookDeliveryService
    inbound: InboundWebhookProcessor
    events: OperatorEventBus
    transport: HttpClient

    async def start(self) -> None:
        """Inicializa o registry e retoma retries pendentes."""
        await self.registry.initialize()
        restored = await self.delivery.restore_pending()
        logger.info(
            "billing_core_started",
            extra={
                "operators": len(self.registry.get_all_statuses()),
                "restored_deliveries": restored,
            },
        )

    async def stop(self, drain_timeout_seconds: float = 30.0) -> None:
        """Encerra monitoramento, timers, tasks inbound e conexões."""
        await self.registry.shutdown()
        cancelled = self.delivery.cleanup()
        await self.inbound.drain(timeout_seconds=drain_timeout_seconds)
        await self.transport.aclose()
        await close_async_redis_client()
        logger.info("billing_core_stopped", extra={"cancelled_retries": cancelled})

    def get_statistics(self) -> dict[str, Any]:
        return {
            "operators": self.registry.get_statistics(),
            "webhooks": self.delivery.get_statistics(),
            "inbound": self.inbound.get_statistics(),
        }


def create_billing_core() -> BillingCore:
    """Monta o core a partir das settings de ambiente."""
    base = get_base_settings()
    operator_settings = get_operator_settings()
    webhook_settings = get_webhook_settings()
    cache_settings = get_cache_settings()
    dedupe_settings = get_dedupe_settings()

    transport = create_http_transport(operator_settings)
    resolver = OperatorCredentialResolver(
        default_username=operator_settings.api_username,
        default_password=operator_settings.api_password,
    )
    events = OperatorEventBus()
    registry = OperatorRegistry(
        create_operator_store(operator_settings),
        make_adapter_factory(transport, operator_settings, resolver),
        cache=create_cache(cache_settings),
        settings=operator_settings,
        events=events,
        cache_ttl_seconds=cache_settings.operator_ttl_seconds,
    )
    delivery = WebhookDeliveryService(
        transport,
        create_webhook_retry_store(webhook_settings, base),
        settings=webhook_settings,
    )
    handlers = NotificationHandlers(create_billing_record_store(), status_mapper=normalize_status)
    inbound = InboundWebhookProcessor(
        handlers,
        settings=webhook_settings,
        dedupe=create_dedupe_store(dedupe_settings, base),
        dedupe_ttl_seconds=dedupe_settings.ttl_seconds,
    )
    logger.info(
        "billing_core_created",
        extra={"environment": base.environment, "api_environment": operator_settings.api_environment},
    )
    return BillingCore(
        registry=registry,
        delivery=delivery,
        inbound=inbound,
        events=events,
        transport=transport,
    )
