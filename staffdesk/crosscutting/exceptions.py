# staffdesk/crosscutting/exceptions.py
"""
===============================================================================
MÓDULO: Excepciones tipadas (taxonomía de errores del cliente)
===============================================================================

Objetivo
--------
Tener excepciones internas coherentes, con:
- error_code estable (para la UI y para tests)
- error_id para correlación con logs
- message "humana" (sin filtrar tokens ni passwords)

-------------------------------------------------------------------------------
CRC (Component Card)
-------------------------------------------------------------------------------
Componente:
  StaffDeskError + subclases

Responsabilidades:
  - Estandarizar errores de sesión, storage, red y validación
  - Generar error_id para rastreo

Colaboradores:
  - application/session_manager.py (sesión)
  - infrastructure/storage/* (storage)
  - infrastructure/http/* (red / API)
  - application/validation.py (formularios)
===============================================================================
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any
from uuid import uuid4


@dataclass(frozen=True)
class ErrorResponse:
    """Estructura mínima para mostrar errores en la UI de forma consistente."""

    error_code: str
    message: str
    error_id: str

    def to_dict(self) -> dict:
        return {
            "error_code": self.error_code,
            "message": self.message,
            "error_id": self.error_id,
        }


class StaffDeskError(Exception):
    """
    ----------------------------------------------------------------------------
    CRC (Class Card)
    ----------------------------------------------------------------------------
    Clase:
      StaffDeskError

    Responsabilidades:
      - Base para errores internos del cliente
      - Proveer error_code + error_id + message
    ----------------------------------------------------------------------------
    """

    error_code: str = "STAFFDESK_ERROR"

    def __init__(
        self,
        message: str,
        error_id: str | None = None,
        original_error: Exception | None = None,
    ):
        self.message = message
        self.error_id = error_id or str(uuid4())
        self.original_error = original_error
        super().__init__(message)

    def to_response(self) -> ErrorResponse:
        return ErrorResponse(
            error_code=self.error_code, message=self.message, error_id=self.error_id
        )


# -----------------------------------------------------------------------------
# Sesión
# -----------------------------------------------------------------------------


class InvalidCredentialsError(StaffDeskError):
    """El backend rechazó email/password."""

    error_code: str = "INVALID_CREDENTIALS"


class SessionExpiredError(StaffDeskError):
    """La sesión expiró, se cerró o no pudo refrescarse."""

    error_code: str = "SESSION_EXPIRED"


class AccessDeniedError(SessionExpiredError):
    """403 del backend: se fuerza logout inmediato."""

    error_code: str = "ACCESS_DENIED"


# -----------------------------------------------------------------------------
# Storage local
# -----------------------------------------------------------------------------


class StorageUnavailableError(StaffDeskError):
    """El storage durable no se puede abrir/leer/escribir."""

    error_code: str = "STORAGE_UNAVAILABLE"


class DuplicateKeyError(StaffDeskError):
    """Clave única repetida (id o email)."""

    error_code: str = "DUPLICATE_KEY"

    def __init__(self, field: str, value: Any, **kwargs: Any):
        self.field = field
        self.value = value
        super().__init__(f"Duplicate {field}: {value!r}", **kwargs)


class RecordNotFoundError(StaffDeskError):
    """No existe un registro con ese id (soft: remove() no lo usa)."""

    error_code: str = "NOT_FOUND"

    def __init__(self, record_id: Any, **kwargs: Any):
        self.record_id = record_id
        super().__init__(f"Record {record_id!r} not found", **kwargs)


# -----------------------------------------------------------------------------
# Red / API
# -----------------------------------------------------------------------------


class NetworkError(StaffDeskError):
    """Falla de transporte (timeout, DNS, conexión rechazada)."""

    error_code: str = "NETWORK_ERROR"


class ApiError(StaffDeskError):
    """Respuesta HTTP de error que no tiene tratamiento especial."""

    error_code: str = "API_ERROR"

    def __init__(self, message: str, *, status_code: int, **kwargs: Any):
        self.status_code = status_code
        super().__init__(message, **kwargs)


# -----------------------------------------------------------------------------
# Validación
# -----------------------------------------------------------------------------


class RecordValidationError(StaffDeskError):
    """Campos requeridos / rangos inválidos, detectados antes de mutar."""

    error_code: str = "VALIDATION_ERROR"

    def __init__(self, errors: dict[str, str], **kwargs: Any):
        self.errors = dict(errors)
        fields = ", ".join(sorted(self.errors))
        super().__init__(f"Invalid fields: {fields}", **kwargs)
