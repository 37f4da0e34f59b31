"""Secrets — resolução de credenciais de operadora.

Módulos disponíveis:
    - env_secrets: Credenciais via variáveis de ambiente
"""

from __future__ import annotations

from app.infra.secrets.env_secrets import EnvSecretProvider, OperatorCredentialResolver

__all__ = [
    "EnvSecretProvider",
    "OperatorCredentialResolver",
]
