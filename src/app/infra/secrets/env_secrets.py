"""Environment Secrets — credenciais de operadora via variáveis de ambiente.

Cada registro de operadora carrega apenas uma referência (`credentials_ref`);
o valor real é resolvido aqui no bootstrap, nunca persistido nem logado.

    credentials_ref "zain-kw" → OPERATOR_ZAIN_KW_USERNAME / OPERATOR_ZAIN_KW_PASSWORD

Sem variáveis específicas, usa as credenciais globais da API upstream.
"""

from __future__ import annotations

import logging
import os

from app.operators.models import OperatorCredentials

logger = logging.getLogger(__name__)


class EnvSecretProvider:
    """Provedor de secrets usando variáveis de ambiente.

    Args:
        prefix: Prefixo para variáveis de ambiente (default: "")
    """

    def __init__(self, prefix: str = "") -> None:
        self._prefix = prefix.upper().rstrip("_") + "_" if prefix else ""

    def _env_name(self, name: str) -> str:
        """Converte nome de secret para variável de ambiente."""
        # zain-kw-username -> ZAIN_KW_USERNAME
        env_name = name.upper().replace("-", "_")
        return f"{self._prefix}{env_name}"

    def get(self, name: str, default: str | None = None) -> str | None:
        """Obtém secret de variável de ambiente (ou default)."""
        env_name = self._env_name(name)
        value = os.getenv(env_name)
        if value is None:
            logger.debug("env_secret_not_found", extra={"lookup_name": name})
            return default
        return value

    def require(self, name: str) -> str:
        """Obtém secret obrigatório.

        Raises:
            ValueError: Se variável não definida
        """
        value = self.get(name)
        if value is None:
            msg = f"Variável de ambiente obrigatória não definida: {self._env_name(name)}"
            raise ValueError(msg)
        return value


class OperatorCredentialResolver:
    """Resolve `credentials_ref` em OperatorCredentials.

    Args:
        provider: Fonte dos secrets (default: prefixo OPERATOR_)
        default_username: Usuário global da API upstream
        default_password: Senha global da API upstream
    """

    def __init__(
        self,
        provider: EnvSecretProvider | None = None,
        default_username: str = "",
        default_password: str = "",
    ) -> None:
        self._provider = provider or EnvSecretProvider(prefix="OPERATOR")
        self._default = OperatorCredentials(default_username, default_password)

    def resolve(self, credentials_ref: str) -> OperatorCredentials:
        if not credentials_ref:
            return self._default
        username = self._provider.get(f"{credentials_ref}-username")
        password = self._provider.get(f"{credentials_ref}-password")
        if username is None or password is None:
            return self._default
        return OperatorCredentials(username, password)
