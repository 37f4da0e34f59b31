"""Adapter base de operadora.

Concentra o scaffolding que toda operadora reutiliza:
- validação de parâmetros e regras de negócio (locais, antes da rede)
- normalização de MSISDN/ACR
- wrapper de execução com logging sanitizado, timing e tradução de erros
- gating de operações por operadora

Subclasses de família ajustam atributos de classe e hooks; o fluxo das
sete operações é o mesmo para todas.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Awaitable, Callable, Mapping
from types import MappingProxyType
from typing import TYPE_CHECKING, Any, ClassVar

from api.connectors.operators.billing_api import ENDPOINTS
from api.connectors.operators.error_map import translate_error
from api.connectors.operators.scaffolding import (
    MsisdnRules,
    apply_business_rules,
    is_missing,
    normalize_msisdn,
    validate_acr,
    validate_params,
    validate_pin_format,
)
from api.normalizers.operators import get_profile, normalize_response, sanitize_payload
from api.normalizers.operators.normalizer import NormalizedResponse
from api.normalizers.operators.status_tables import map_family_status, status_family_for
from app.domain.billing import (
    ALL_OPERATIONS,
    BillingOperation,
    ResultMetadata,
    UnifiedResult,
)
from app.observability import get_correlation_id, record_latency
from app.protocols.operator_adapter import OperatorAdapterProtocol
from utils.errors import UnifiedError, ValidationError

if TYPE_CHECKING:
    from api.connectors.operators.billing_api import BillingApiClient
    from api.normalizers.operators.catalog import OperatorProfile
    from app.operators.models import OperatorRegistration

logger = logging.getLogger(__name__)

RawCall = Callable[[dict[str, Any]], Awaitable[dict[str, Any]]]

_Op = BillingOperation

# Operadoras só-checkout: assinatura é confirmada pelo usuário na página
# da operadora, sem PIN nem cobrança avulsa.
CHECKOUT_ONLY_FEATURES = frozenset(
    {
        _Op.CREATE_SUBSCRIPTION,
        _Op.CANCEL_SUBSCRIPTION,
        _Op.GET_SUBSCRIPTION_STATUS,
        _Op.CHECK_ELIGIBILITY,
    }
)


class BaseOperatorAdapter(OperatorAdapterProtocol):
    """Implementação base do contrato de adapter.

    Args:
        registration: Registro da operadora (config opaca incluída)
        client: Cliente da API upstream já autenticado
    """

    family: ClassVar[str] = "generic"
    default_language: ClassVar[str] = "en"
    acr_supported_by_default: ClassVar[bool] = False
    requires_correlator: ClassVar[bool] = True
    pin_required_on_create: ClassVar[bool] = False
    pin_pattern: ClassVar[str | None] = None
    checkout_base_url: ClassVar[str | None] = None
    default_features: ClassVar[frozenset[BillingOperation]] = frozenset(ALL_OPERATIONS)
    error_overrides: ClassVar[Mapping[str, tuple[str, str]]] = MappingProxyType({})

    def __init__(self, registration: OperatorRegistration, client: BillingApiClient) -> None:
        config = dict(registration.config)
        profile = get_profile(registration.code)

        self.registration = registration
        self.operator_code = registration.code
        self.config = config
        self.client = client
        self.environment = client.environment

        self.currency: str | None = config.get("currency") or (profile.currency if profile else None)
        self.status_family: str = config.get("status_family") or status_family_for(registration.code)
        self.language: str = config.get("language") or self.default_language
        self.merchant: str | None = config.get("merchant")
        self.msisdn_rules = MsisdnRules.from_config(config.get("msisdn"))
        self.business_rules: Mapping[str, Any] = config.get("business_rules") or {}
        self.acr_supported = bool(config.get("acr_supported", self.acr_supported_by_default))
        self.pin_format: str | None = config.get("pin_pattern") or self.pin_pattern
        self.checkout_only = bool(
            config.get("checkout_only", self.default_checkout_only(profile))
        )
        self.requires_pin = bool(
            config.get("requires_pin", self.pin_required_on_create and not self.checkout_only)
        )
        self.endpoints = {
            _Op(name): path for name, path in (config.get("endpoints") or {}).items()
        }
        self.supported_features = self._resolve_features()

        logger.debug(
            "operator_adapter_initialized",
            extra={
                "operator_code": self.operator_code,
                "adapter_family": self.family,
                "environment": self.environment,
            },
        )

    def default_checkout_only(self, profile: OperatorProfile | None) -> bool:
        """Se a operadora é só-checkout quando a config não diz."""
        return False

    def _resolve_features(self) -> frozenset[BillingOperation]:
        configured = self.config.get("supported_features")
        if configured:
            return frozenset(_Op(name) for name in configured)
        if self.checkout_only:
            return self.default_features & CHECKOUT_ONLY_FEATURES
        return self.default_features

    def supports(self, operation: BillingOperation) -> bool:
        return operation in self.supported_features

    def ensure_supported(self, operation: BillingOperation) -> None:
        """Raises ValidationError(FEATURE_NOT_SUPPORTED) para operação não oferecida."""
        if not self.supports(operation):
            raise ValidationError(
                "FEATURE_NOT_SUPPORTED",
                f"Operação {operation.value} não disponível para {self.operator_code}",
                operator_code=self.operator_code,
            )

    # ──────────────────────────────────────────────────────────────
    # Operações do contrato
    # ──────────────────────────────────────────────────────────────

    async def create_subscription(self, params: dict[str, Any]) -> UnifiedResult:
        return await self.execute_with_logging(_Op.CREATE_SUBSCRIPTION, params, self._create_subscription)

    async def cancel_subscription(self, params: dict[str, Any]) -> UnifiedResult:
        return await self.execute_with_logging(_Op.CANCEL_SUBSCRIPTION, params, self._cancel_subscription)

    async def get_subscription_status(self, params: dict[str, Any]) -> UnifiedResult:
        return await self.execute_with_logging(
            _Op.GET_SUBSCRIPTION_STATUS, params, self._get_subscription_status
        )

    async def generate_pin(self, params: dict[str, Any]) -> UnifiedResult:
        return await self.execute_with_logging(_Op.GENERATE_PIN, params, self._generate_pin)

    async def charge(self, params: dict[str, Any]) -> UnifiedResult:
        return await self.execute_with_logging(_Op.CHARGE, params, self._charge)

    async def refund(self, params: dict[str, Any]) -> UnifiedResult:
        return await self.execute_with_logging(_Op.REFUND, params, self._refund)

    async def check_eligibility(self, params: dict[str, Any]) -> UnifiedResult:
        return await self.execute_with_logging(_Op.CHECK_ELIGIBILITY, params, self._check_eligibility)

    # ──────────────────────────────────────────────────────────────
    # Wrapper de execução
    # ──────────────────────────────────────────────────────────────

    async def execute_with_logging(
        self,
        operation: BillingOperation,
        params: Mapping[str, Any],
        call: RawCall,
    ) -> UnifiedResult:
        """Executa operação com logging, timing e tradução de erros.

        Erros locais (validação, regra de negócio) sobem sem log de erro.
        Qualquer outra exceção passa por `map_error` e sobe como UnifiedError.
        """
        operation_name = f"{self.operator_code}.{operation.value}"
        logger.info(
            "operator_operation_started",
            extra={
                "operator_code": self.operator_code,
                "operation": operation.value,
                "request_params": sanitize_payload(dict(params)),
            },
        )
        started = time.perf_counter()
        success = False
        try:
            self.ensure_supported(operation)
            raw = await call(dict(params))
            normalized = self.normalize(raw)
            success = True
        except UnifiedError as exc:
            self._log_unified_failure(operation, exc)
            raise
        except Exception as exc:
            unified = self.map_error(exc)
            logger.warning(
                "operator_operation_failed",
                extra={
                    "operator_code": self.operator_code,
                    "operation": operation.value,
                    "error_code": unified.code,
                    "original_code": unified.original_code,
                    "error_type": type(exc).__name__,
                    "upstream_payload": sanitize_payload(getattr(exc, "payload", None)),
                },
            )
            raise unified from exc
        finally:
            latency_ms = (time.perf_counter() - started) * 1000
            record_latency(
                "operator_adapter",
                operation_name,
                latency_ms,
                get_correlation_id() or None,
                success=success,
            )

        logger.info(
            "operator_operation_completed",
            extra={
                "operator_code": self.operator_code,
                "operation": operation.value,
                "latency_ms": round(latency_ms, 2),
                "mapped": normalized.mapped,
            },
        )
        metadata = ResultMetadata(
            operator_code=self.operator_code,
            environment=self.environment,
            mapping_version=normalized.mapping_version,
            mapped=normalized.mapped,
        )
        return UnifiedResult.ok(normalized.data, metadata)

    def _log_unified_failure(self, operation: BillingOperation, exc: UnifiedError) -> None:
        extra = {
            "operator_code": self.operator_code,
            "operation": operation.value,
            "error_code": exc.code,
            "error_category": exc.category.value,
        }
        if exc.is_local:
            logger.info("operator_operation_rejected", extra=extra)
        else:
            logger.warning("operator_operation_failed", extra=extra)

    # ──────────────────────────────────────────────────────────────
    # Hooks de mapeamento
    # ──────────────────────────────────────────────────────────────

    def normalize(self, raw: dict[str, Any]) -> NormalizedResponse:
        return normalize_response(self.operator_code, raw)

    def map_response_data(self, raw: dict[str, Any]) -> dict[str, Any]:
        return self.normalize(raw).data

    def map_error(self, error: Exception) -> UnifiedError:
        return translate_error(error, self.operator_code, self.error_overrides)

    def map_status(self, raw_status: str | None) -> str:
        return map_family_status(self.status_family, raw_status)

    # ──────────────────────────────────────────────────────────────
    # Helpers de identificador e payload
    # ──────────────────────────────────────────────────────────────

    @staticmethod
    def identity_field(params: Mapping[str, Any]) -> str:
        return "acr" if not is_missing(params.get("acr")) else "msisdn"

    def resolve_identity(self, params: Mapping[str, Any]) -> dict[str, Any]:
        """Retorna `{"msisdn": ...}` normalizado ou `{"acr": ..., "correlator": ...}`.

        Raises:
            ValidationError: ACR_NOT_SUPPORTED, INVALID_ACR_LENGTH,
                MISSING_CORRELATOR ou INVALID_MSISDN
        """
        acr = params.get("acr")
        if is_missing(acr):
            return {"msisdn": normalize_msisdn(params.get("msisdn"), self.msisdn_rules, self.operator_code)}

        if not self.acr_supported:
            raise ValidationError(
                "ACR_NOT_SUPPORTED",
                f"ACR não suportado por {self.operator_code}",
                operator_code=self.operator_code,
            )
        validate_acr(
            acr,
            correlator=params.get("correlator"),
            require_correlator=self.requires_correlator,
            operator_code=self.operator_code,
        )
        identity: dict[str, Any] = {"acr": acr}
        if not is_missing(params.get("correlator")):
            identity["correlator"] = params["correlator"]
        return identity

    def with_defaults(self, params: dict[str, Any]) -> dict[str, Any]:
        """Completa merchant/language a partir da config da operadora."""
        merged = dict(params)
        if is_missing(merged.get("merchant")) and self.merchant:
            merged["merchant"] = self.merchant
        if is_missing(merged.get("language")):
            merged["language"] = self.language
        return merged

    def checkout_url_for(self, subscription_uuid: str) -> str | None:
        base = self.config.get("checkout_url") or self.checkout_base_url
        if not base:
            return None
        return f"{base.rstrip('/')}/{self.operator_code}/{subscription_uuid}"

    async def _post(self, operation: BillingOperation, payload: dict[str, Any]) -> dict[str, Any]:
        payload.setdefault("operator_code", self.operator_code)
        endpoint = self.endpoints.get(operation) or ENDPOINTS[operation]
        return await self.client.post(endpoint, payload)

    def extra_pin_fields(self, params: Mapping[str, Any]) -> dict[str, Any]:
        """Campos adicionais do pedido de PIN (hook de família)."""
        return {}

    # ──────────────────────────────────────────────────────────────
    # Chamadas brutas
    # ──────────────────────────────────────────────────────────────

    async def _create_subscription(self, params: dict[str, Any]) -> dict[str, Any]:
        params = self.with_defaults(params)
        required = [self.identity_field(params), "campaign", "merchant"]
        if self.requires_pin:
            required.append("pin")
        validate_params(params, required, self.operator_code)
        apply_business_rules(_Op.CREATE_SUBSCRIPTION.value, params, self.business_rules, self.operator_code)

        payload: dict[str, Any] = {
            **self.resolve_identity(params),
            "campaign": params["campaign"],
            "merchant": params["merchant"],
            "language": params["language"],
        }
        if not is_missing(params.get("pin")):
            pin = params["pin"]
            payload["pin"] = (
                validate_pin_format(pin, self.pin_format, self.operator_code) if self.pin_format else str(pin)
            )
        if params.get("trial_days"):
            payload["trial"] = params["trial_days"]
        if params.get("skip_initial_charge"):
            payload["charge"] = False
        if params.get("amount") is not None:
            payload["amount"] = params["amount"]

        raw = await self._post(_Op.CREATE_SUBSCRIPTION, payload)
        return self.after_create(raw)

    def after_create(self, raw: dict[str, Any]) -> dict[str, Any]:
        """Anexa URL de checkout quando a assinatura exige confirmação."""
        subscription_uuid = raw.get("uuid") or raw.get("subscription_uuid") or raw.get("sub_id")
        needs_checkout = bool(raw.get("checkout_required")) or self.checkout_only
        if not needs_checkout or not subscription_uuid or raw.get("checkout_url"):
            return raw
        checkout_url = self.checkout_url_for(str(subscription_uuid))
        if checkout_url is None:
            return raw
        return {**raw, "checkout_url": checkout_url, "checkout_required": True}

    async def _cancel_subscription(self, params: dict[str, Any]) -> dict[str, Any]:
        validate_params(params, ["subscription_id"], self.operator_code)
        return await self._post(_Op.CANCEL_SUBSCRIPTION, {"uuid": params["subscription_id"]})

    async def _get_subscription_status(self, params: dict[str, Any]) -> dict[str, Any]:
        validate_params(params, ["subscription_id"], self.operator_code)
        return await self._post(_Op.GET_SUBSCRIPTION_STATUS, {"uuid": params["subscription_id"]})

    async def _generate_pin(self, params: dict[str, Any]) -> dict[str, Any]:
        params = self.with_defaults(params)
        validate_params(params, [self.identity_field(params), "campaign"], self.operator_code)
        payload: dict[str, Any] = {
            **self.resolve_identity(params),
            "campaign": params["campaign"],
            "merchant": params.get("merchant"),
            "template": params.get("template") or "subscription",
            "language": params["language"],
            **self.extra_pin_fields(params),
        }
        return await self._post(_Op.GENERATE_PIN, payload)

    async def _charge(self, params: dict[str, Any]) -> dict[str, Any]:
        validate_params(params, ["subscription_id", "amount"], self.operator_code)
        apply_business_rules(_Op.CHARGE.value, params, self.business_rules, self.operator_code)
        return await self._post(
            _Op.CHARGE,
            {
                "uuid": params["subscription_id"],
                "amount": params["amount"],
                "currency": params.get("currency") or self.currency,
            },
        )

    async def _refund(self, params: dict[str, Any]) -> dict[str, Any]:
        validate_params(params, ["transaction_id", "amount"], self.operator_code)
        apply_business_rules(_Op.REFUND.value, params, self.business_rules, self.operator_code)
        return await self._post(
            _Op.REFUND,
            {
                "transaction_id": params["transaction_id"],
                "amount": params["amount"],
                "currency": params.get("currency") or self.currency,
            },
        )

    async def _check_eligibility(self, params: dict[str, Any]) -> dict[str, Any]:
        validate_params(params, [self.identity_field(params)], self.operator_code)
        return await self._post(_Op.CHECK_ELIGIBILITY, self.resolve_identity(params))
