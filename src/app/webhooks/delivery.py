"""Entrega outbound de webhooks com retry persistido.

Algoritmo:
1. Tentativa 1 é síncrona (dentro de `send`)
2. Sucesso apenas em HTTP 200/201; qualquer outro desfecho agenda retry
3. Retries em offsets cumulativos a partir da primeira falha
   (padrão +4h, +8h, +12h, +16h, +20h, +24h; até 7 tentativas)
4. Cada retry é persistido logo após agendado; no startup
   `restore_pending` reagenda tudo (vencido dispara imediatamente)
5. Esgotado o orçamento (tentativas ou janela a partir da primeira falha):
   failed_permanently, log de erro, sem novo retry
"""

from __future__ import annotations

import logging
import time
from collections import Counter
from collections.abc import Callable
from functools import partial
from typing import TYPE_CHECKING, Any

from app.observability import record_delivery_outcome
from app.webhooks.models import (
    DeliveryResult,
    DeliveryStatus,
    WebhookDeliveryAttempt,
    generate_delivery_id,
)
from app.webhooks.scheduler import RetryScheduler
from config.settings import WebhookSettings
from utils.errors import DeliveryFailureError

if TYPE_CHECKING:
    from app.protocols.http_client import HttpTransportProtocol
    from app.protocols.webhook_store import WebhookRetryStoreProtocol

logger = logging.getLogger(__name__)

SUCCESS_STATUS_CODES = frozenset({200, 201})
SECONDS_PER_HOUR = 3600


class WebhookDeliveryService:
    """Entrega at-least-once para endpoints de merchants.

    Args:
        transport: Transporte HTTP (POST com timeout)
        retry_store: Persistência das tentativas pendentes
        settings: Offsets de retry, timeout, user agent
        scheduler: Tabela de timers (default: nova)
        clock: Epoch em segundos (default: time.time)
    """

    def __init__(
        self,
        transport: HttpTransportProtocol,
        retry_store: WebhookRetryStoreProtocol,
        *,
        settings: WebhookSettings | None = None,
        scheduler: RetryScheduler | None = None,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._transport = transport
        self._retry_store = retry_store
        self._settings = settings or WebhookSettings()
        self._clock = clock
        self._scheduler = scheduler or RetryScheduler(clock=clock)
        self._counters: Counter[str] = Counter()

    @property
    def scheduler(self) -> RetryScheduler:
        return self._scheduler

    async def send(
        self,
        url: str,
        payload: dict[str, Any],
        *,
        delivery_id: str | None = None,
        headers: dict[str, str] | None = None,
    ) -> DeliveryResult:
        """Entrega notificação; falha agenda retry em vez de repetir na hora.

        Reenviar um `delivery_id` com retry pendente substitui a tentativa
        pendente e recomeça o ciclo.
        """
        delivery_id = delivery_id or generate_delivery_id()
        if self._scheduler.cancel(delivery_id):
            await self._delete_record(delivery_id)
            self._counters["superseded"] += 1
            logger.info("webhook_delivery_superseded", extra={"delivery_id": delivery_id})

        self._counters["sent"] += 1
        attempt = WebhookDeliveryAttempt(
            delivery_id=delivery_id,
            url=url,
            payload=payload,
            headers=dict(headers or {}),
        )
        return await self._attempt(attempt)

    async def _attempt(self, attempt: WebhookDeliveryAttempt) -> DeliveryResult:
        status_code, error = await self._post(attempt)
        if status_code in SUCCESS_STATUS_CODES:
            return await self._on_success(attempt, status_code)
        return await self._on_failure(attempt, status_code, error)

    async def _post(self, attempt: WebhookDeliveryAttempt) -> tuple[int | None, str | None]:
        headers = {
            "Content-Type": "application/json",
            "User-Agent": self._settings.user_agent,
            "X-Webhook-ID": attempt.delivery_id,
            "X-Attempt": str(attempt.attempt),
            **attempt.headers,
        }
        try:
            response = await self._transport.post(
                attempt.url,
                json=attempt.payload,
                headers=headers,
                timeout=self._settings.delivery_timeout_seconds,
            )
        except Exception as exc:
            # Timeout e falha de conexão contam como falha de entrega
            return None, str(getattr(exc, "code", None) or type(exc).__name__)

        if response.status_code in SUCCESS_STATUS_CODES:
            return response.status_code, None
        return response.status_code, f"HTTP_{response.status_code}"

    async def _on_success(self, attempt: WebhookDeliveryAttempt, status_code: int) -> DeliveryResult:
        self._scheduler.cancel(attempt.delivery_id)
        if attempt.attempt > 1:
            await self._delete_record(attempt.delivery_id)
        self._counters["delivered"] += 1
        record_delivery_outcome(DeliveryStatus.DELIVERED.value, attempt.attempt, status_code)
        logger.info(
            "webhook_delivered",
            extra={
                "delivery_id": attempt.delivery_id,
                "attempt": attempt.attempt,
                "status_code": status_code,
            },
        )
        return DeliveryResult(
            delivery_id=attempt.delivery_id,
            status=DeliveryStatus.DELIVERED,
            attempt=attempt.attempt,
            status_code=status_code,
        )

    async def _on_failure(
        self,
        attempt: WebhookDeliveryAttempt,
        status_code: int | None,
        error: str | None,
    ) -> DeliveryResult:
        now = self._clock()
        first_failed_at = attempt.first_failed_at if attempt.first_failed_at is not None else now
        offsets = self._settings.retry_offsets_hours
        retry_index = attempt.attempt - 1

        if retry_index >= len(offsets):
            return await self._fail_permanently(attempt, status_code, error)
        window_ends_at = first_failed_at + offsets[-1] * SECONDS_PER_HOUR
        if attempt.first_failed_at is not None and now >= window_ends_at:
            # Retomada após a janela: uma última tentativa, sem novos retries
            return await self._fail_permanently(attempt, status_code, error)

        next_attempt_at = first_failed_at + offsets[retry_index] * SECONDS_PER_HOUR
        scheduled = attempt.advance(
            attempt=attempt.attempt + 1,
            status=DeliveryStatus.RETRYING,
            next_attempt_at=next_attempt_at,
            first_failed_at=first_failed_at,
            last_error=error,
        )
        await self._persist(scheduled, now)
        self._arm(scheduled)

        self._counters["retries_scheduled"] += 1
        record_delivery_outcome(DeliveryStatus.RETRYING.value, attempt.attempt, status_code)
        logger.warning(
            "webhook_retry_scheduled",
            extra={
                "delivery_id": attempt.delivery_id,
                "failed_attempt": attempt.attempt,
                "next_attempt": scheduled.attempt,
                "next_attempt_at": next_attempt_at,
                "status_code": status_code,
                "error_code": error,
            },
        )
        return DeliveryResult(
            delivery_id=attempt.delivery_id,
            status=DeliveryStatus.RETRYING,
            attempt=attempt.attempt,
            status_code=status_code,
            next_attempt_at=next_attempt_at,
        )

    async def _fail_permanently(
        self,
        attempt: WebhookDeliveryAttempt,
        status_code: int | None,
        error: str | None,
    ) -> DeliveryResult:
        self._scheduler.cancel(attempt.delivery_id)
        await self._delete_record(attempt.delivery_id)
        self._counters["failed_permanently"] += 1
        failure = DeliveryFailureError(
            "DELIVERY_FAILED",
            f"Entrega não confirmada após {attempt.attempt} tentativas",
            original_code=error,
            details={"delivery_id": attempt.delivery_id, "status_code": status_code},
        )
        record_delivery_outcome(DeliveryStatus.FAILED_PERMANENTLY.value, attempt.attempt, status_code)
        logger.error(
            "webhook_delivery_failed_permanently",
            extra={
                "delivery_id": attempt.delivery_id,
                "attempts": attempt.attempt,
                "status_code": status_code,
                "error_code": error,
                "first_failed_at": attempt.first_failed_at,
            },
        )
        return DeliveryResult(
            delivery_id=attempt.delivery_id,
            status=DeliveryStatus.FAILED_PERMANENTLY,
            attempt=attempt.attempt,
            status_code=status_code,
            error=failure,
        )

    def _arm(self, attempt: WebhookDeliveryAttempt) -> None:
        due_at = attempt.next_attempt_at if attempt.next_attempt_at is not None else self._clock()
        self._scheduler.schedule(attempt.delivery_id, due_at, partial(self._run_retry, attempt))

    async def _run_retry(self, attempt: WebhookDeliveryAttempt) -> None:
        logger.info(
            "webhook_retry_attempt",
            extra={"delivery_id": attempt.delivery_id, "attempt": attempt.attempt},
        )
        await self._attempt(attempt)

    async def _persist(self, attempt: WebhookDeliveryAttempt, now: float) -> None:
        remaining = max(0, int((attempt.next_attempt_at or now) - now))
        ttl_seconds = remaining + self._settings.record_ttl_buffer_seconds
        try:
            await self._retry_store.save(attempt, ttl_seconds)
        except Exception as exc:
            # Timer em memória continua armado; só a retomada após restart é perdida
            logger.error(
                "webhook_retry_persist_failed",
                extra={"delivery_id": attempt.delivery_id, "error_type": type(exc).__name__},
            )

    async def _delete_record(self, delivery_id: str) -> None:
        try:
            await self._retry_store.delete(delivery_id)
        except Exception as exc:
            logger.warning(
                "webhook_retry_delete_failed",
                extra={"delivery_id": delivery_id, "error_type": type(exc).__name__},
            )

    # ──────────────────────────────────────────────────────────────
    # Ciclo de vida
    # ──────────────────────────────────────────────────────────────

    async def restore_pending(self) -> int:
        """Reagenda toda tentativa persistida (startup).

        Returns:
            Quantidade de tentativas reagendadas
        """
        now = self._clock()
        restored = 0
        overdue = 0
        for attempt in await self._retry_store.load_pending():
            if attempt.status.is_terminal:
                await self._delete_record(attempt.delivery_id)
                continue
            if attempt.next_attempt_at is None or attempt.next_attempt_at <= now:
                overdue += 1
            self._arm(attempt)
            restored += 1

        logger.info(
            "webhook_retries_restored",
            extra={"restored_count": restored, "overdue_count": overdue},
        )
        return restored

    def cleanup(self) -> int:
        """Cancela timers em memória (shutdown). Registros persistidos ficam."""
        cancelled = self._scheduler.cancel_all()
        logger.info("webhook_timers_cleared", extra={"cancelled_count": cancelled})
        return cancelled

    def get_statistics(self) -> dict[str, Any]:
        return {
            "pending_retries": self._scheduler.pending_count,
            "sent": self._counters["sent"],
            "delivered": self._counters["delivered"],
            "retries_scheduled": self._counters["retries_scheduled"],
            "failed_permanently": self._counters["failed_permanently"],
            "superseded": self._counters["superseded"],
            "retry_offsets_hours": list(self._settings.retry_offsets_hours),
            "max_attempts": self._settings.max_attempts,
        }
