"""Cliente da API upstream de billing (v2.2).

Regras do protocolo upstream:
- Todo request é POST com corpo vazio e parâmetros na query string
- Autenticação HTTP Basic
- `correlator` por request (idempotência do lado upstream)
- Erros podem vir com HTTP 200 dentro do envelope `error`
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from api.normalizers.operators.sanitizer import sanitize_payload
from app.domain.billing import BillingOperation
from app.infra.http import HttpError
from app.observability import generate_upstream_correlator
from config.settings.operators import BILLING_API_BASE_URL, BILLING_API_VERSION

if TYPE_CHECKING:
    import httpx

    from app.operators.models import OperatorCredentials
    from app.protocols.http_client import HttpTransportProtocol

logger = logging.getLogger(__name__)

ENDPOINTS: dict[BillingOperation, str] = {
    BillingOperation.CREATE_SUBSCRIPTION: f"/{BILLING_API_VERSION}/subscription/create",
    BillingOperation.CANCEL_SUBSCRIPTION: f"/{BILLING_API_VERSION}/subscription/delete",
    BillingOperation.GET_SUBSCRIPTION_STATUS: f"/{BILLING_API_VERSION}/subscription/status",
    BillingOperation.GENERATE_PIN: f"/{BILLING_API_VERSION}/pin",
    BillingOperation.CHARGE: f"/{BILLING_API_VERSION}/charge",
    BillingOperation.REFUND: f"/{BILLING_API_VERSION}/refund",
    BillingOperation.CHECK_ELIGIBILITY: f"/{BILLING_API_VERSION}/eligibility",
}


class OperatorApiError(Exception):
    """Erro bruto da API upstream.

    Nunca chega ao chamador: é traduzido por `map_error` do adapter.
    `payload` guarda o envelope original apenas para logs internos.
    """

    def __init__(
        self,
        code: str,
        message: str,
        *,
        status_code: int | None = None,
        payload: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message)
        self.code = code
        self.message = message
        self.status_code = status_code
        self.payload = payload or {}


def clean_params(params: dict[str, Any]) -> dict[str, str]:
    """Remove valores None e converte o restante para string de query."""
    cleaned: dict[str, str] = {}
    for name, value in params.items():
        if value is None:
            continue
        if isinstance(value, bool):
            cleaned[name] = "true" if value else "false"
        else:
            cleaned[name] = str(value)
    return cleaned


class BillingApiClient:
    """Cliente autenticado da API upstream, um por binding de operadora.

    Args:
        transport: Transporte HTTP (HttpTransportProtocol)
        credentials: Usuário/senha HTTP Basic da operadora
        base_url: URL base da API
        environment: sandbox | production
        timeout_seconds: Timeout explícito de cada chamada
    """

    def __init__(
        self,
        transport: HttpTransportProtocol,
        credentials: OperatorCredentials,
        *,
        base_url: str = BILLING_API_BASE_URL,
        environment: str = "sandbox",
        timeout_seconds: float = 30.0,
    ) -> None:
        self._transport = transport
        self._credentials = credentials
        self._base_url = base_url.rstrip("/")
        self.environment = environment
        self._timeout_seconds = timeout_seconds
        self.request_count = 0

    async def call(self, operation: BillingOperation, params: dict[str, Any]) -> dict[str, Any]:
        """Executa uma operação upstream pelo endpoint padrão."""
        return await self.post(ENDPOINTS[operation], params)

    async def post(self, endpoint: str, params: dict[str, Any]) -> dict[str, Any]:
        """POST com parâmetros na query string e corpo vazio.

        Returns:
            Conteúdo do envelope `success` (ou o corpo, se não houver envelope)

        Raises:
            OperatorApiError: Envelope `error`, HTTP de erro, resposta inválida,
                timeout ou falha de conexão
        """
        if not self._credentials.is_complete:
            raise OperatorApiError("INVALID_CREDENTIALS", "Credenciais da API upstream ausentes")

        query = clean_params(params)
        query.setdefault("correlator", generate_upstream_correlator())
        self.request_count += 1

        logger.debug(
            "billing_api_request",
            extra={
                "endpoint": endpoint,
                "query": sanitize_payload(query),
                "environment": self.environment,
                "request_number": self.request_count,
            },
        )

        try:
            response = await self._transport.post(
                f"{self._base_url}{endpoint}",
                params=query,
                headers={"Accept": "application/json"},
                timeout=self._timeout_seconds,
                auth=(self._credentials.username, self._credentials.password),
            )
        except HttpError as exc:
            raise OperatorApiError(exc.code, str(exc)) from exc

        return self._unwrap(endpoint, response)

    def _unwrap(self, endpoint: str, response: httpx.Response) -> dict[str, Any]:
        status_code = response.status_code
        try:
            body = response.json()
        except ValueError as exc:
            raise OperatorApiError(
                "INVALID_RESPONSE",
                "Resposta upstream não é JSON",
                status_code=status_code,
            ) from exc

        if not isinstance(body, dict):
            raise OperatorApiError(
                "INVALID_RESPONSE",
                "Resposta upstream em formato inesperado",
                status_code=status_code,
            )

        error = body.get("error")
        if isinstance(error, dict):
            code = str(error.get("code") or error.get("category") or "UPSTREAM_ERROR")
            logger.warning(
                "billing_api_error",
                extra={
                    "endpoint": endpoint,
                    "status_code": status_code,
                    "upstream_code": code,
                    "environment": self.environment,
                },
            )
            raise OperatorApiError(
                code,
                str(error.get("message") or "Erro upstream desconhecido"),
                status_code=status_code,
                payload=body,
            )

        if status_code >= 400:
            code = "SERVICE_UNAVAILABLE" if status_code in (502, 503, 504) else f"HTTP_{status_code}"
            raise OperatorApiError(code, f"HTTP {status_code}", status_code=status_code, payload=body)

        logger.debug(
            "billing_api_response",
            extra={"endpoint": endpoint, "status_code": status_code},
        )
        success = body.get("success")
        return dict(success) if isinstance(success, dict) else body
