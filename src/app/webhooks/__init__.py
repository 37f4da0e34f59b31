"""Subsistema de webhooks: entrega outbound com retry e inbound idempotente."""

from app.webhooks.delivery import SUCCESS_STATUS_CODES, WebhookDeliveryService
from app.webhooks.handlers import (
    ERROR_CODE_ACTIONS,
    TRANSACTION_STATUS_ACTIONS,
    NotificationHandlers,
    TransactionAction,
)
from app.webhooks.inbound import INBOUND_ACK, InboundWebhookProcessor
from app.webhooks.models import (
    DeliveryResult,
    DeliveryStatus,
    WebhookDeliveryAttempt,
    generate_delivery_id,
)
from app.webhooks.scheduler import RetryScheduler

__all__ = [
    "ERROR_CODE_ACTIONS",
    "INBOUND_ACK",
    "SUCCESS_STATUS_CODES",
    "TRANSACTION_STATUS_ACTIONS",
    "DeliveryResult",
    "DeliveryStatus",
    "InboundWebhookProcessor",
    "NotificationHandlers",
    "RetryScheduler",
    "TransactionAction",
    "WebhookDeliveryAttempt",
    "WebhookDeliveryService",
    "generate_delivery_id",
]
