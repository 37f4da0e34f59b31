"""Connectors de operadora — cliente upstream, adapters e resolução."""

from api.connectors.operators.base import CHECKOUT_ONLY_FEATURES, BaseOperatorAdapter
from api.connectors.operators.billing_api import ENDPOINTS, BillingApiClient, OperatorApiError
from api.connectors.operators.error_map import GENERIC_ERROR_MAP, UNMAPPED_ERROR, translate_error
from api.connectors.operators.etisalat import EtisalatAdapter
from api.connectors.operators.generic import GenericOperatorAdapter
from api.connectors.operators.resolution import (
    ADAPTER_CLASSES,
    AdapterFactory,
    make_adapter_factory,
    resolve_adapter_class,
)
from api.connectors.operators.telenor import TelenorAdapter
from api.connectors.operators.zain import ZainAdapter

__all__ = [
    "ADAPTER_CLASSES",
    "CHECKOUT_ONLY_FEATURES",
    "ENDPOINTS",
    "GENERIC_ERROR_MAP",
    "UNMAPPED_ERROR",
    "AdapterFactory",
    "BaseOperatorAdapter",
    "BillingApiClient",
    "EtisalatAdapter",
    "GenericOperatorAdapter",
    "OperatorApiError",
    "TelenorAdapter",
    "ZainAdapter",
    "make_adapter_factory",
    "resolve_adapter_class",
    "translate_error",
]
