"""Protocolos e contratos do core da aplicação."""

from .billing_store import BillingRecordStoreProtocol
from .cache import CacheProtocol
from .dedupe import AsyncDedupeProtocol
from .http_client import HttpTransportProtocol
from .operator_adapter import OperatorAdapterProtocol
from .operator_store import OperatorStoreProtocol
from .webhook_store import WebhookRetryStoreProtocol

__all__ = [
    "AsyncDedupeProtocol",
    "BillingRecordStoreProtocol",
    "CacheProtocol",
    "HttpTransportProtocol",
    "OperatorAdapterProtocol",
    "OperatorStoreProtocol",
    "WebhookRetryStoreProtocol",
]
