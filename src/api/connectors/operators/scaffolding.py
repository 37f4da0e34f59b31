"""Scaffolding compartilhado pelos adapters de operadora.

Validação de parâmetros, regras de negócio e normalização de
identificadores. Tudo aqui é local: nenhuma falha chega à rede.
"""

from __future__ import annotations

import re
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from typing import Any

from utils.errors import BusinessRuleError, ValidationError

DEFAULT_MSISDN_PATTERN = r"^\+?[1-9]\d{1,14}$"
DEFAULT_MSISDN_FORMAT_HINT = "E.164, até 15 dígitos"

ACR_LENGTH = 48


def is_missing(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def validate_params(
    params: Mapping[str, Any],
    required: Iterable[str],
    operator_code: str | None = None,
) -> None:
    """Falha com MISSING_PARAMETERS listando todos os campos ausentes."""
    missing = [name for name in required if is_missing(params.get(name))]
    if missing:
        raise ValidationError(
            "MISSING_PARAMETERS",
            f"Parâmetros obrigatórios ausentes: {', '.join(missing)}",
            operator_code=operator_code,
            details={"missing": missing},
        )


def apply_business_rules(
    operation: str,
    params: Mapping[str, Any],
    business_rules: Mapping[str, Any],
    operator_code: str | None = None,
) -> Mapping[str, Any]:
    """Aplica limites de valor declarados para a operação.

    `max_subscriptions_per_identifier` exige contadores duráveis e é
    obrigação da camada de persistência; aqui é apenas ignorado.

    Raises:
        BusinessRuleError: AMOUNT_LIMIT_EXCEEDED ou AMOUNT_TOO_LOW
        ValidationError: INVALID_AMOUNT se o valor não for numérico
    """
    rules = business_rules.get(operation) or {}
    raw_amount = params.get("amount")
    if raw_amount is None or not rules:
        return params

    try:
        amount = float(raw_amount)
    except (TypeError, ValueError) as exc:
        raise ValidationError(
            "INVALID_AMOUNT",
            f"Valor inválido: {raw_amount}",
            operator_code=operator_code,
        ) from exc

    max_amount = rules.get("max_amount")
    if max_amount is not None and amount > float(max_amount):
        raise BusinessRuleError(
            "AMOUNT_LIMIT_EXCEEDED",
            f"Valor {amount} excede o máximo de {max_amount}",
            operator_code=operator_code,
            details={"max_amount": max_amount},
        )

    min_amount = rules.get("min_amount")
    if min_amount is not None and amount < float(min_amount):
        raise BusinessRuleError(
            "AMOUNT_TOO_LOW",
            f"Valor {amount} abaixo do mínimo de {min_amount}",
            operator_code=operator_code,
            details={"min_amount": min_amount},
        )
    return params


@dataclass(frozen=True, slots=True)
class MsisdnRules:
    """Regras de normalização de MSISDN de uma operadora.

    Attributes:
        country_code: Código do país removido do início (com ou sem +)
        prefix: Prefixo adicionado quando ausente
        pattern: Regex que o número final deve casar
        format_hint: Formato esperado, exibido no erro
    """

    country_code: str = ""
    prefix: str = ""
    pattern: str = DEFAULT_MSISDN_PATTERN
    format_hint: str = DEFAULT_MSISDN_FORMAT_HINT

    @classmethod
    def from_config(cls, config: Mapping[str, Any] | None) -> MsisdnRules:
        if not config:
            return cls()
        return cls(
            country_code=str(config.get("country_code") or "").lstrip("+"),
            prefix=str(config.get("prefix") or ""),
            pattern=str(config.get("pattern") or DEFAULT_MSISDN_PATTERN),
            format_hint=str(config.get("format_hint") or DEFAULT_MSISDN_FORMAT_HINT),
        )


def normalize_msisdn(
    msisdn: Any,
    rules: MsisdnRules,
    operator_code: str | None = None,
) -> str:
    """Normaliza MSISDN para o formato da operadora.

    1. Remove tudo exceto dígitos e `+`
    2. Remove código do país (`+cc` ou `cc`) quando configurado
    3. Adiciona prefixo quando configurado e ausente
    4. Valida contra o padrão da operadora

    Raises:
        ValidationError: INVALID_MSISDN com o formato esperado
    """
    normalized = re.sub(r"[^\d+]", "", str(msisdn or ""))

    if rules.country_code:
        if normalized.startswith(f"+{rules.country_code}"):
            normalized = normalized[len(rules.country_code) + 1 :]
        elif normalized.startswith(rules.country_code):
            normalized = normalized[len(rules.country_code) :]

    if rules.prefix and not normalized.startswith(rules.prefix):
        normalized = f"{rules.prefix}{normalized}"

    if not re.fullmatch(rules.pattern, normalized):
        raise ValidationError(
            "INVALID_MSISDN",
            f"MSISDN inválido. Formato esperado: {rules.format_hint}",
            operator_code=operator_code,
            details={"expected_format": rules.format_hint},
        )
    return normalized


def validate_acr(
    acr: Any,
    *,
    correlator: Any = None,
    require_correlator: bool = True,
    operator_code: str | None = None,
) -> str:
    """Valida identificador ACR (48 caracteres).

    Raises:
        ValidationError: INVALID_ACR_LENGTH ou MISSING_CORRELATOR
    """
    if not isinstance(acr, str) or len(acr) != ACR_LENGTH:
        received = len(acr) if isinstance(acr, str) else 0
        raise ValidationError(
            "INVALID_ACR_LENGTH",
            f"ACR deve ter exatamente {ACR_LENGTH} caracteres (recebido: {received})",
            operator_code=operator_code,
        )
    if require_correlator and is_missing(correlator):
        raise ValidationError(
            "MISSING_CORRELATOR",
            "Correlator é obrigatório em transações com ACR",
            operator_code=operator_code,
        )
    return acr


def validate_pin_format(pin: Any, pattern: str, operator_code: str | None = None) -> str:
    """Valida formato do PIN exigido pela operadora."""
    value = str(pin or "")
    if not re.fullmatch(pattern, value):
        raise ValidationError(
            "INVALID_PIN_FORMAT",
            "Formato de PIN inválido para esta operadora",
            operator_code=operator_code,
        )
    return value
