"""Sanitização de payloads antes de log/auditoria."""

from __future__ import annotations

from typing import Any

from config.logging import REDACTED

SENSITIVE_FIELD_MARKERS = ("pin", "password", "token", "secret", "key", "credential")


def is_sensitive_key(name: str) -> bool:
    lowered = name.lower()
    return any(marker in lowered for marker in SENSITIVE_FIELD_MARKERS)


def sanitize_payload(payload: Any) -> Any:
    """Retorna cópia com campos sensíveis mascarados (recursivo).

    Não altera o objeto original.
    """
    if isinstance(payload, dict):
        return {
            key: REDACTED if is_sensitive_key(str(key)) else sanitize_payload(value)
            for key, value in payload.items()
        }
    if isinstance(payload, list | tuple):
        return [sanitize_payload(item) for item in payload]
    return payload
