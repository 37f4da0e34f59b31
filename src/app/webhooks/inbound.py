"""Processamento de webhooks inbound do provedor de billing.

O ack (sucesso) é devolvido antes de qualquer processamento, para que o
retry do remetente não reenvie enquanto o processamento ainda corre.
Assinatura inválida, duplicata ou payload malformado são logados e
descartados na task de fundo; o ack já enviado não muda.
"""

from __future__ import annotations

import asyncio
import contextlib
import hashlib
import json
import logging
from collections import Counter
from collections.abc import Mapping
from typing import TYPE_CHECKING, Any

from pydantic import ValidationError as PydanticValidationError

from app.infra.crypto import validate_timestamped_signature
from app.observability import generate_correlation_id, get_correlation_id
from app.webhooks.models import ErrorNotification, SuccessNotification
from config.logging import log_fallback
from config.settings import WebhookSettings
from utils.errors import failure_reason

if TYPE_CHECKING:
    from app.protocols.dedupe import AsyncDedupeProtocol
    from app.webhooks.handlers import NotificationHandlers

logger = logging.getLogger(__name__)

INBOUND_ACK: dict[str, str] = {"status": "received"}


class InboundWebhookProcessor:
    """Recebe notificações, responde na hora e processa em background.

    Args:
        handlers: Handlers de sucesso/erro
        settings: Secret, nomes de headers e limite de concorrência
        dedupe: Store de deduplicação por hash do corpo (opcional)
        dedupe_ttl_seconds: TTL da marca de dedupe
    """

    def __init__(
        self,
        handlers: NotificationHandlers,
        *,
        settings: WebhookSettings | None = None,
        dedupe: AsyncDedupeProtocol | None = None,
        dedupe_ttl_seconds: int = 86400,
    ) -> None:
        self._handlers = handlers
        self._settings = settings or WebhookSettings()
        self._dedupe = dedupe
        self._dedupe_ttl_seconds = dedupe_ttl_seconds
        self._semaphore = asyncio.Semaphore(self._settings.max_concurrent_handlers)
        self._tasks: set[asyncio.Task[Any]] = set()
        self._counters: Counter[str] = Counter()

    @property
    def active_tasks(self) -> int:
        return len(self._tasks)

    async def process_incoming(self, raw_body: bytes, headers: Mapping[str, str]) -> dict[str, str]:
        """Agenda o processamento e devolve o ack imediatamente."""
        correlation_id = get_correlation_id() or generate_correlation_id()
        normalized_headers = {name.lower(): value for name, value in headers.items()}
        self._counters["received"] += 1

        task = asyncio.create_task(self._run_with_limit(raw_body, normalized_headers))
        self._tasks.add(task)
        task.add_done_callback(self._on_task_done)
        logger.info(
            "inbound_webhook_scheduled",
            extra={"correlation_id": correlation_id, "active_tasks": len(self._tasks)},
        )
        return dict(INBOUND_ACK)

    async def _run_with_limit(self, raw_body: bytes, headers: dict[str, str]) -> None:
        async with self._semaphore:
            await self.handle(raw_body, headers)

    def _on_task_done(self, task: asyncio.Task[Any]) -> None:
        self._tasks.discard(task)
        with contextlib.suppress(asyncio.CancelledError):
            exc = task.exception()
            if exc is not None:
                self._counters["failed"] += 1
                logger.error(
                    "inbound_webhook_processing_failed",
                    extra={"error_type": type(exc).__name__, "active_tasks": len(self._tasks)},
                )

    async def handle(self, raw_body: bytes, headers: Mapping[str, str]) -> bool:
        """Valida, deduplica e despacha. Retorna True se algum handler rodou."""
        if not self._signature_ok(raw_body, headers):
            self._counters["rejected_signature"] += 1
            logger.warning("inbound_webhook_signature_invalid")
            return False

        dedupe_hash = hashlib.sha256(raw_body).hexdigest()
        if await self._is_duplicate(dedupe_hash):
            self._counters["duplicates"] += 1
            logger.info("inbound_webhook_duplicate", extra={"dedupe_hash": dedupe_hash})
            return False

        try:
            body = json.loads(raw_body)
        except ValueError:
            self._counters["invalid_payload"] += 1
            logger.warning("inbound_webhook_invalid_json")
            return False

        try:
            handled = await self._dispatch(body)
        except Exception:
            # Libera o hash para que a reentrega do remetente seja aceita
            await self._forget(dedupe_hash)
            raise
        if handled:
            self._counters["processed"] += 1
        return handled

    def _signature_ok(self, raw_body: bytes, headers: Mapping[str, str]) -> bool:
        secret = self._settings.inbound_secret
        if not secret:
            return True
        return validate_timestamped_signature(
            raw_body,
            headers.get(self._settings.signature_header.lower()),
            headers.get(self._settings.timestamp_header.lower()),
            secret.encode("utf-8"),
        )

    async def _dispatch(self, body: Any) -> bool:
        if not isinstance(body, dict):
            self._counters["invalid_payload"] += 1
            logger.warning("inbound_webhook_unknown_shape")
            return False

        try:
            if "success" in body:
                notification = SuccessNotification.model_validate(body)
                await self._handlers.handle_success(notification.success)
                return True
            if "error" in body:
                error_notification = ErrorNotification.model_validate(body)
                await self._handlers.handle_error(error_notification.error)
                return True
        except PydanticValidationError as exc:
            self._counters["invalid_payload"] += 1
            logger.warning(
                "inbound_webhook_invalid_payload",
                extra={"error_count": exc.error_count()},
            )
            return False

        self._counters["invalid_payload"] += 1
        logger.warning("inbound_webhook_unknown_shape", extra={"body_fields": sorted(body)[:10]})
        return False

    async def _is_duplicate(self, dedupe_hash: str) -> bool:
        if self._dedupe is None:
            return False
        try:
            return await self._dedupe.seen(dedupe_hash, self._dedupe_ttl_seconds)
        except Exception as exc:
            # Handlers são idempotentes; sem dedupe ainda é seguro processar
            log_fallback(logger, "inbound_dedupe", reason=failure_reason(exc))
            return False

    async def _forget(self, dedupe_hash: str) -> None:
        if self._dedupe is None:
            return
        try:
            await self._dedupe.forget(dedupe_hash)
        except Exception as exc:
            log_fallback(logger, "inbound_dedupe_forget", reason=failure_reason(exc))

    async def drain(self, timeout_seconds: float = 30.0) -> None:
        """Aguarda tasks pendentes durante shutdown."""
        if not self._tasks:
            return
        pending_now = list(self._tasks)
        logger.info(
            "inbound_webhook_shutdown_wait",
            extra={"pending_tasks": len(pending_now), "timeout_seconds": timeout_seconds},
        )
        _, pending = await asyncio.wait(pending_now, timeout=timeout_seconds)
        if not pending:
            return
        for task in pending:
            task.cancel()
        await asyncio.gather(*pending, return_exceptions=True)
        logger.warning(
            "inbound_webhook_shutdown_cancelled",
            extra={"cancelled_tasks": len(pending)},
        )

    def get_statistics(self) -> dict[str, int]:
        return {
            "received": self._counters["received"],
            "processed": self._counters["processed"],
            "duplicates": self._counters["duplicates"],
            "rejected_signature": self._counters["rejected_signature"],
            "invalid_payload": self._counters["invalid_payload"],
            "failed": self._counters["failed"],
            "active_tasks": len(self._tasks),
        }
