"""
===============================================================================
TARJETA CRC — staffdesk/context.py (Contexto por operación)
===============================================================================

Responsabilidades:
  - Mantener contexto "operation-scoped" usando ContextVars (async-safe).
  - Permitir correlación de logs sin pasar parámetros por todo el stack.
  - Proveer helpers mínimos: set_*(), get_context_dict(), clear_context().

Colaboradores:
  - infrastructure/http/api_client.py: setea operation_id/method/path por request.
  - crosscutting/logger.py: enriquece logs leyendo get_context_dict().

Restricciones:
  - Solo tipos primitivos (str) para serialización segura.
  - Defaults vacíos ("") para evitar None y simplificar JSON.
===============================================================================
"""

from __future__ import annotations

from contextvars import ContextVar
from typing import Final

# Identificador de la operación en curso (un request al backend, por ejemplo).
operation_id_var: ContextVar[str] = ContextVar("operation_id", default="")

# Metadatos HTTP básicos para logs (método y endpoint).
http_method_var: ContextVar[str] = ContextVar("http_method", default="")
http_path_var: ContextVar[str] = ContextVar("http_path", default="")

_CTX_OPERATION_ID: Final[str] = "operation_id"
_CTX_METHOD: Final[str] = "method"
_CTX_PATH: Final[str] = "path"


def set_operation_context(
    *, operation_id: str = "", method: str = "", path: str = ""
) -> None:
    """
    Setea el contexto mínimo de la operación.

    Regla:
      - Strings vacíos significan "no disponible".
    """
    operation_id_var.set(operation_id or "")
    http_method_var.set(method or "")
    http_path_var.set(path or "")


def get_context_dict() -> dict[str, str]:
    """Devuelve solo las claves con valor (para no ensuciar los logs)."""
    values = {
        _CTX_OPERATION_ID: operation_id_var.get(),
        _CTX_METHOD: http_method_var.get(),
        _CTX_PATH: http_path_var.get(),
    }
    return {k: v for k, v in values.items() if v}


def clear_context() -> None:
    """Limpia el contexto (al terminar la operación)."""
    operation_id_var.set("")
    http_method_var.set("")
    http_path_var.set("")
