"""Assinatura HMAC-SHA256 de webhooks inbound do provedor de billing.

Assinatura = hex(HMAC-SHA256(secret, timestamp + body)).
"""

from __future__ import annotations

import hashlib
import hmac


def compute_timestamped_signature(payload: bytes, timestamp: str, secret: bytes) -> str:
    """Calcula assinatura hex sobre timestamp concatenado ao corpo.

    Args:
        payload: Corpo bruto da requisição
        timestamp: Valor do header de timestamp
        secret: Secret compartilhado em bytes

    Returns:
        Digest hex (minúsculo)
    """
    message = timestamp.encode("utf-8") + payload
    return hmac.new(secret, message, hashlib.sha256).hexdigest()


def validate_timestamped_signature(
    payload: bytes,
    signature: str | None,
    timestamp: str | None,
    secret: bytes,
) -> bool:
    """Valida assinatura HMAC-SHA256 de webhook inbound.

    Aceita o digest com ou sem prefixo `sha256=`.

    Args:
        payload: Corpo bruto da requisição
        signature: Header de assinatura
        timestamp: Header de timestamp
        secret: Secret compartilhado em bytes

    Returns:
        True se assinatura válida
    """
    if not signature or not timestamp:
        return False

    expected = signature.removeprefix("sha256=").strip().lower()
    computed = compute_timestamped_signature(payload, timestamp, secret)
    return hmac.compare_digest(computed, expected)
