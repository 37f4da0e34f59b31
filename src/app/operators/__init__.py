"""Registry de operadoras: bindings, despacho, health e notificações."""

from app.operators.events import OperatorEvent, OperatorEventBus
from app.operators.health import HealthMonitor
from app.operators.models import (
    AdapterBinding,
    OperatorCredentials,
    OperatorRegistration,
)
from app.operators.registry import ENABLED_CACHE_KEY, OperatorRegistry

__all__ = [
    "ENABLED_CACHE_KEY",
    "AdapterBinding",
    "HealthMonitor",
    "OperatorCredentials",
    "OperatorEvent",
    "OperatorEventBus",
    "OperatorRegistration",
    "OperatorRegistry",
]
