"""Criptografia de webhooks (HMAC-SHA256).

Localizado em app/infra/ para manter boundaries corretas:
- app/ não importa de api/ (exceto via bootstrap)
"""

from .signature import compute_timestamped_signature, validate_timestamped_signature

__all__ = [
    "compute_timestamped_signature",
    "validate_timestamped_signature",
]
