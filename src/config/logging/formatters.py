"""Formatters de logging estruturado.

Define formatter JSON com campos obrigatórios:
- correlation_id
- service
- timestamp (asctime)
- level
- logger (name)
- message

Campos `extra` do core carregam Enums (status unificado, categoria de erro)
e datetimes (próxima tentativa de webhook); `_json_default` os serializa.
"""

from __future__ import annotations

from datetime import date, datetime
from enum import Enum
from typing import Any

from pythonjsonlogger.json import JsonFormatter

# Campos obrigatórios em todo log estruturado
REQUIRED_LOG_FIELDS = (
    "asctime",
    "levelname",
    "name",
    "message",
    "correlation_id",
    "service",
)

# Mapeamento de nomes de campos para formato padrão
FIELD_RENAME_MAP = {
    "levelname": "level",
    "name": "logger",
}


def _json_default(value: Any) -> Any:
    """Serializa tipos não nativos do JSON presentes em `extra`."""
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    if isinstance(value, (set, frozenset, tuple)):
        return list(value)
    return repr(value)


def create_json_formatter() -> JsonFormatter:
    """Cria formatter JSON com campos padronizados.

    Returns:
        JsonFormatter configurado para logs estruturados.

    Exemplo de output:
        {
            "asctime": "2026-02-02T10:30:00",
            "level": "INFO",
            "logger": "app.operators.registry",
            "message": "operator_disabled",
            "correlation_id": "abc-123",
            "service": "unified_billing",
            "operator_code": "zain-kw"
        }
    """
    format_string = " ".join(f"%({field})s" for field in REQUIRED_LOG_FIELDS)

    return JsonFormatter(
        format_string,
        rename_fields=FIELD_RENAME_MAP,
        json_default=_json_default,
    )
