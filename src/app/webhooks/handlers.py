"""Handlers de notificações inbound.

Transições de status são declarativas: uma tabela por status de
transação e outra por código de erro. Atualizações são idempotentes
por uuid, então duplicatas e entregas fora de ordem são toleradas.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Mapping
from dataclasses import dataclass
from datetime import datetime
from types import MappingProxyType
from typing import TYPE_CHECKING, Any

from app.domain.billing import UnifiedStatus
from app.operators.models import utc_now

if TYPE_CHECKING:
    from app.protocols.billing_store import BillingRecordStoreProtocol
    from app.webhooks.models import ErrorBody, SuccessBody

logger = logging.getLogger(__name__)

# (operator_code, status bruto) -> status unificado
StatusMapper = Callable[[str, Any], str]


@dataclass(frozen=True, slots=True)
class TransactionAction:
    """Efeito de um status de transação sobre a assinatura."""

    subscription_status: UnifiedStatus
    billed: bool = False


TRANSACTION_STATUS_ACTIONS: Mapping[str, TransactionAction] = MappingProxyType(
    {
        "CHARGED": TransactionAction(UnifiedStatus.ACTIVE, billed=True),
        "INSUFFICIENT_FUNDS": TransactionAction(UnifiedStatus.SUSPENDED),
        "GRACE": TransactionAction(UnifiedStatus.GRACE),
    }
)

ERROR_CODE_ACTIONS: Mapping[str, UnifiedStatus] = MappingProxyType(
    {
        "INSUFFICIENT_FUNDS": UnifiedStatus.SUSPENDED,
        "CUSTOMER_INELIGIBLE": UnifiedStatus.CANCELLED,
    }
)


class NotificationHandlers:
    """Aplica efeitos colaterais das notificações no store de billing.

    Args:
        store: Persistência de assinaturas/transações
        status_mapper: Tradutor de status bruto para o vocabulário unificado
        clock: Fonte de datetime UTC
    """

    def __init__(
        self,
        store: BillingRecordStoreProtocol,
        status_mapper: StatusMapper,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self._store = store
        self._status_mapper = status_mapper
        self._clock = clock

    async def handle_success(self, body: SuccessBody) -> None:
        now = self._clock().isoformat()
        subscription_uuid = body.uuid
        transaction = body.transaction
        operator_code = (transaction.operator_code if transaction else None) or ""

        if subscription_uuid and body.subscription and body.subscription.status:
            raw_status = body.subscription.status
            await self._update_subscription(
                subscription_uuid,
                {
                    "status": self._status_mapper(operator_code, raw_status),
                    "operator_status": raw_status,
                    "updated_at": now,
                },
            )

        if transaction is None:
            return

        transaction_uuid = transaction.uuid or transaction.transaction_id
        if transaction_uuid:
            await self._store.upsert_transaction(
                {
                    "uuid": transaction_uuid,
                    "subscription_uuid": subscription_uuid,
                    "status": transaction.status,
                    "amount": transaction.amount,
                    "currency": transaction.currency,
                    "operator_code": transaction.operator_code,
                    "mode": body.mode,
                    "received_at": now,
                }
            )
        else:
            # Sem identificador não há chave de upsert
            logger.warning(
                "inbound_transaction_without_id",
                extra={"operator_code": operator_code, "has_subscription": bool(subscription_uuid)},
            )

        action = TRANSACTION_STATUS_ACTIONS.get((transaction.status or "").upper())
        if action is None or not subscription_uuid:
            return
        fields: dict[str, Any] = {"status": action.subscription_status.value, "updated_at": now}
        if action.billed:
            fields["last_billed_at"] = now
        await self._update_subscription(subscription_uuid, fields)

    async def handle_error(self, body: ErrorBody) -> None:
        now = self._clock().isoformat()
        await self._store.append_error_log(
            {
                "subscription_uuid": body.uuid,
                "error_code": body.error_code,
                "message": body.message,
                "correlation_id": body.correlation_id,
                "received_at": now,
            }
        )
        logger.info(
            "inbound_error_notification",
            extra={"error_code": body.error_code, "has_subscription": bool(body.uuid)},
        )

        target = ERROR_CODE_ACTIONS.get(body.error_code)
        if target is None or not body.uuid:
            return
        await self._update_subscription(
            body.uuid,
            {"status": target.value, "status_reason": body.error_code, "updated_at": now},
        )

    async def _update_subscription(self, subscription_uuid: str, fields: dict[str, Any]) -> None:
        updated = await self._store.update_subscription(subscription_uuid, fields)
        if not updated:
            logger.info(
                "inbound_subscription_not_found",
                extra={"subscription_uuid": subscription_uuid},
            )
            return
        logger.info(
            "subscription_status_updated",
            extra={"subscription_uuid": subscription_uuid, "status": fields.get("status")},
        )
