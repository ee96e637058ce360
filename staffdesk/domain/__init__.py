"""
===============================================================================
TARJETA CRC — domain/__init__.py
===============================================================================

Módulo:
    Exportaciones de la Capa de Dominio

Responsabilidades:
    - Centralizar exports para imports limpios en application/infrastructure.
    - No importar infraestructura aquí.
===============================================================================
"""

from .currency import USD_TO_INR, convert, format_currency
from .records import (
    EMPLOYEE_SCHEMA,
    PROJECT_SCHEMA,
    Currency,
    Employee,
    EmployeeStatus,
    Project,
    ProjectStatus,
    Record,
    RecordKind,
    RecordSchema,
    WorkAuthorization,
)
from .repositories import KeyValueStorage, RecordRepository
from .services import AuthGateway, SessionControl, SessionNotifier
from .session import (
    Session,
    SessionEndReason,
    SessionInfo,
    SessionState,
    SessionUser,
    TokenGrant,
    UserRole,
    UserStatus,
)

__all__ = [
    # Records
    "Employee",
    "Project",
    "Record",
    "RecordKind",
    "RecordSchema",
    "EMPLOYEE_SCHEMA",
    "PROJECT_SCHEMA",
    "Currency",
    "EmployeeStatus",
    "ProjectStatus",
    "WorkAuthorization",
    # Currency
    "USD_TO_INR",
    "convert",
    "format_currency",
    # Session
    "Session",
    "SessionUser",
    "SessionInfo",
    "SessionState",
    "SessionEndReason",
    "TokenGrant",
    "UserRole",
    "UserStatus",
    # Ports
    "RecordRepository",
    "KeyValueStorage",
    "AuthGateway",
    "SessionNotifier",
    "SessionControl",
]
