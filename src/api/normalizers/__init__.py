"""Normalizers — conversão de payloads de operadoras para o modelo unificado.

Estrutura:
- operators/: catálogo, tabelas de status e mapas de campos por operadora
"""

from .operators import normalize_response, normalize_status, sanitize_payload

__all__ = [
    "normalize_response",
    "normalize_status",
    "sanitize_payload",
]
