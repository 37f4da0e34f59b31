"""Tabela estática de resolução código → classe de adapter.

Inclui aliases legados. Código desconhecido cai no adapter genérico,
de modo que uma operadora declarada porém sem entrada aqui ainda funciona.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Mapping
from types import MappingProxyType
from typing import TYPE_CHECKING

from api.connectors.operators.base import BaseOperatorAdapter
from api.connectors.operators.billing_api import BillingApiClient
from api.connectors.operators.etisalat import EtisalatAdapter
from api.connectors.operators.generic import GenericOperatorAdapter
from api.connectors.operators.telenor import TelenorAdapter
from api.connectors.operators.zain import ZainAdapter
from api.normalizers.operators.catalog import canonical_code

if TYPE_CHECKING:
    from app.infra.secrets import OperatorCredentialResolver
    from app.operators.models import OperatorRegistration
    from app.protocols.http_client import HttpTransportProtocol
    from config.settings import OperatorSettings

logger = logging.getLogger(__name__)

AdapterFactory = Callable[["OperatorRegistration"], BaseOperatorAdapter]

ADAPTER_CLASSES: Mapping[str, type[BaseOperatorAdapter]] = MappingProxyType(
    {
        "zain-kw": ZainAdapter,
        "zain-sa": ZainAdapter,
        "zain-bh": ZainAdapter,
        "zain-iq": ZainAdapter,
        "zain-jo": ZainAdapter,
        "zain-sd": ZainAdapter,
        "zain-ksa": ZainAdapter,
        "etisalat-ae": EtisalatAdapter,
        "telenor-dk": TelenorAdapter,
        "telenor-digi": TelenorAdapter,
        "telenor-mm": TelenorAdapter,
        "telenor-no": TelenorAdapter,
        "telenor-se": TelenorAdapter,
        "telenor-rs": TelenorAdapter,
    }
)


def resolve_adapter_class(operator_code: str) -> type[BaseOperatorAdapter]:
    """Classe do adapter para o código (aliases resolvidos; fallback genérico)."""
    adapter_class = ADAPTER_CLASSES.get(operator_code) or ADAPTER_CLASSES.get(
        canonical_code(operator_code)
    )
    if adapter_class is None:
        logger.debug("adapter_generic_fallback", extra={"operator_code": operator_code})
        return GenericOperatorAdapter
    return adapter_class


def make_adapter_factory(
    transport: HttpTransportProtocol,
    settings: OperatorSettings,
    credential_resolver: OperatorCredentialResolver,
) -> AdapterFactory:
    """Cria a factory injetada no registry.

    Cada chamada constrói uma instância nova (aliases nunca compartilham
    instância), com cliente upstream autenticado pelas credenciais do registro.
    """

    def build_adapter(registration: OperatorRegistration) -> BaseOperatorAdapter:
        credentials = credential_resolver.resolve(registration.credentials_ref or registration.code)
        client = BillingApiClient(
            transport,
            credentials,
            base_url=settings.api_base_url,
            environment=settings.api_environment,
            timeout_seconds=settings.request_timeout_seconds,
        )
        adapter_class = resolve_adapter_class(registration.code)
        return adapter_class(registration, client)

    return build_adapter
