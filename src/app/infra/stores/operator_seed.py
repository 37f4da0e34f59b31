"""Loader do catálogo YAML de operadoras para o store em memória.

Provisionamento real é externo ao core; o catálogo serve para
desenvolvimento local e testes de integração.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

import yaml

from app.operators.models import OperatorRegistration

logger = logging.getLogger(__name__)

DEFAULT_SEED_PATH = Path(__file__).resolve().parents[3] / "config" / "operators" / "seed.yaml"


class OperatorSeedError(Exception):
    """Catálogo de operadoras ausente ou inválido."""


def load_operator_seed(path: str | Path | None = None) -> list[OperatorRegistration]:
    """Carrega registros de operadora de um arquivo YAML.

    Formato:
        operators:
          - code: zain-kw
            name: Zain Kuwait
            config: {currency: KWD, ...}

    Args:
        path: Caminho do YAML (default: config/operators/seed.yaml)

    Returns:
        Lista de OperatorRegistration

    Raises:
        OperatorSeedError: Se arquivo não existir, YAML inválido ou
            códigos duplicados
    """
    seed_path = Path(path) if path else DEFAULT_SEED_PATH
    if not seed_path.exists():
        raise OperatorSeedError(f"Catálogo de operadoras não encontrado: {seed_path}")

    try:
        with seed_path.open("r", encoding="utf-8") as f:
            document = yaml.safe_load(f) or {}
    except yaml.YAMLError as exc:
        raise OperatorSeedError(f"YAML inválido em {seed_path}") from exc

    entries = document.get("operators") if isinstance(document, dict) else None
    if not isinstance(entries, list):
        raise OperatorSeedError("Catálogo deve conter a lista 'operators'")

    registrations = [_parse_entry(entry) for entry in entries]
    codes = [registration.code for registration in registrations]
    duplicated = sorted({code for code in codes if codes.count(code) > 1})
    if duplicated:
        raise OperatorSeedError(f"Códigos duplicados no catálogo: {', '.join(duplicated)}")

    logger.info(
        "operator_seed_loaded",
        extra={"path": str(seed_path), "operator_count": len(registrations)},
    )
    return registrations


def _parse_entry(entry: Any) -> OperatorRegistration:
    if not isinstance(entry, dict) or not entry.get("code"):
        raise OperatorSeedError("Entrada de operadora sem 'code'")
    data = dict(entry)
    data.setdefault("credentials_ref", data["code"])
    return OperatorRegistration.from_dict(data)
