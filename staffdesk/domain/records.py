"""
===============================================================================
TARJETA CRC — domain/records.py (Entidades de registro: Employee / Project)
===============================================================================

Responsabilidades:
  - Modelar los dos tipos de registro del dashboard como variantes explícitas.
  - Serializar a/desde el JSON camelCase que usan la UI y el backend.
  - Describir cada colección con un RecordSchema (tabla, búsqueda, CSV).

Colaboradores:
  - application/record_store.py: usa RecordSchema.search_text() para buscar.
  - application/csv_export.py: usa csv_columns / money_field / export_prefix.
  - infrastructure/storage/*: usa table_name y to_dict/from_dict.

Reglas:
  - `id` es único dentro de la colección.
  - `email` es índice único solo cuando no está vacío (trim + lower).
  - Sin IO ni dependencias de infraestructura.
===============================================================================
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from enum import Enum
from typing import Any, Generic, Optional, Tuple, Type, TypeVar, Union


class Currency(str, Enum):
    USD = "USD"
    INR = "INR"


class EmployeeStatus(str, Enum):
    ACTIVE = "Active"
    INACTIVE = "Inactive"
    ON_LEAVE = "On Leave"
    TERMINATED = "Terminated"


class ProjectStatus(str, Enum):
    ACTIVE = "Active"
    INACTIVE = "Inactive"
    ON_BENCH = "On Bench"
    PROJECT_COMPLETED = "Project Completed"
    TERMINATED = "Terminated"


class WorkAuthorization(str, Enum):
    H1B = "H1B"
    GREEN_CARD = "Green Card"
    US_CITIZEN = "US Citizen"
    OPT = "OPT"
    CPT = "CPT"
    OTHER = "Other"


class RecordKind(str, Enum):
    EMPLOYEE = "employee"
    PROJECT = "project"


# R: Helpers de parseo tolerante (el JSON viene de formularios y de localStorage).
def _parse_date(value: Any) -> Optional[date]:
    if value in (None, ""):
        return None
    if isinstance(value, date):
        return value
    # R: "2024-01-15" o "2024-01-15T00:00:00.000Z" -> solo la parte de fecha.
    return date.fromisoformat(str(value)[:10])


def _parse_float(value: Any) -> Optional[float]:
    if value in (None, ""):
        return None
    return float(value)


def _format_date(value: Optional[date]) -> Optional[str]:
    return value.isoformat() if value else None


def normalize_email(email: Optional[str]) -> Optional[str]:
    """R: Clave del índice único de email (None si vacío)."""
    key = (email or "").strip().lower()
    return key or None


@dataclass
class Employee:
    """
    Empleado del directorio local.

    Notas:
      - salary se guarda en la moneda indicada por `currency`.
      - joined es opcional (registros viejos pueden no tenerlo).
    """

    id: int
    name: str
    position: str = ""
    department: str = ""
    email: str = ""
    phone: str = ""
    status: EmployeeStatus = EmployeeStatus.ACTIVE
    joined: Optional[date] = None
    salary: Optional[float] = None
    currency: Currency = Currency.USD

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "position": self.position,
            "department": self.department,
            "email": self.email,
            "phone": self.phone,
            "status": self.status.value,
            "joined": _format_date(self.joined),
            "salary": self.salary,
            "currency": self.currency.value,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Employee":
        return cls(
            id=int(data["id"]),
            name=str(data.get("name") or ""),
            position=str(data.get("position") or ""),
            department=str(data.get("department") or ""),
            email=str(data.get("email") or ""),
            phone=str(data.get("phone") or ""),
            status=EmployeeStatus(data.get("status") or EmployeeStatus.ACTIVE.value),
            joined=_parse_date(data.get("joined")),
            salary=_parse_float(data.get("salary")),
            currency=Currency(data.get("currency") or Currency.USD.value),
        )


@dataclass
class Project:
    """Colocación de un consultor en un cliente final."""

    id: int
    consultant_name: str
    email: str = ""
    contact_no: str = ""
    rate: Optional[float] = None
    margin: Optional[float] = None
    work_authorization: Optional[WorkAuthorization] = None
    date_of_joining: Optional[date] = None
    status: ProjectStatus = ProjectStatus.ACTIVE
    end_client: str = ""
    project_completed: bool = False
    account_manager: str = ""
    recruiter: str = ""
    currency: Currency = Currency.USD

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "consultantName": self.consultant_name,
            "email": self.email,
            "contactNo": self.contact_no,
            "rate": self.rate,
            "margin": self.margin,
            "workAuthorization": (
                self.work_authorization.value if self.work_authorization else None
            ),
            "dateOfJoining": _format_date(self.date_of_joining),
            "status": self.status.value,
            "endClient": self.end_client,
            "projectCompleted": self.project_completed,
            "accountManager": self.account_manager,
            "recruiter": self.recruiter,
            "currency": self.currency.value,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Project":
        work_auth = data.get("workAuthorization")
        return cls(
            id=int(data["id"]),
            consultant_name=str(data.get("consultantName") or ""),
            email=str(data.get("email") or ""),
            contact_no=str(data.get("contactNo") or ""),
            rate=_parse_float(data.get("rate")),
            margin=_parse_float(data.get("margin")),
            work_authorization=WorkAuthorization(work_auth) if work_auth else None,
            date_of_joining=_parse_date(data.get("dateOfJoining")),
            status=ProjectStatus(data.get("status") or ProjectStatus.ACTIVE.value),
            end_client=str(data.get("endClient") or ""),
            project_completed=bool(data.get("projectCompleted", False)),
            account_manager=str(data.get("accountManager") or ""),
            recruiter=str(data.get("recruiter") or ""),
            currency=Currency(data.get("currency") or Currency.USD.value),
        )


Record = Union[Employee, Project]
R = TypeVar("R", Employee, Project)


@dataclass(frozen=True)
class RecordSchema(Generic[R]):
    """
    Descriptor de una colección de registros.

    Atributos:
        kind: tipo de registro (employee / project)
        record_type: clase del registro (para from_dict)
        table_name: tabla en el storage durable
        search_fields: atributos que entran en la búsqueda por substring
        unique_field: atributo con índice único (además de id)
        money_field: atributo monetario (se convierte al exportar)
        csv_columns: pares (header, atributo) en orden de exportación
        export_prefix: prefijo del archivo CSV
    """

    kind: RecordKind
    record_type: Type[R]
    table_name: str
    search_fields: Tuple[str, ...]
    money_field: str
    csv_columns: Tuple[Tuple[str, str], ...]
    export_prefix: str
    unique_field: str = "email"
    legacy_export_name: Optional[str] = None

    def from_dict(self, data: dict[str, Any]) -> R:
        return self.record_type.from_dict(data)

    def search_text(self, record: R) -> str:
        """R: Campos buscables unidos por espacio, en minúsculas."""
        parts = []
        for name in self.search_fields:
            value = getattr(record, name, None)
            if value is None:
                continue
            parts.append(value.value if isinstance(value, Enum) else str(value))
        return " ".join(parts).lower()

    def unique_key(self, record: R) -> Optional[str]:
        return normalize_email(getattr(record, self.unique_field, None))


EMPLOYEE_SCHEMA: RecordSchema[Employee] = RecordSchema(
    kind=RecordKind.EMPLOYEE,
    record_type=Employee,
    table_name="employees",
    search_fields=("name", "position", "department", "email", "phone"),
    money_field="salary",
    csv_columns=(
        ("id", "id"),
        ("name", "name"),
        ("position", "position"),
        ("department", "department"),
        ("email", "email"),
        ("phone", "phone"),
        ("joined", "joined"),
        ("salary", "salary"),
        ("currency", "currency"),
        ("status", "status"),
    ),
    export_prefix="employees",
    legacy_export_name="employeeData.csv",
)

PROJECT_SCHEMA: RecordSchema[Project] = RecordSchema(
    kind=RecordKind.PROJECT,
    record_type=Project,
    table_name="projects",
    search_fields=(
        "consultant_name",
        "email",
        "contact_no",
        "work_authorization",
        "end_client",
        "account_manager",
        "recruiter",
        "status",
    ),
    money_field="rate",
    csv_columns=(
        ("id", "id"),
        ("consultantName", "consultant_name"),
        ("email", "email"),
        ("contactNo", "contact_no"),
        ("rate", "rate"),
        ("margin", "margin"),
        ("workAuthorization", "work_authorization"),
        ("dateOfJoining", "date_of_joining"),
        ("status", "status"),
        ("endClient", "end_client"),
        ("projectCompleted", "project_completed"),
        ("accountManager", "account_manager"),
        ("recruiter", "recruiter"),
        ("currency", "currency"),
    ),
    export_prefix="projects",
    legacy_export_name="projectData.csv",
)


def schema_for(kind: RecordKind) -> RecordSchema:
    return EMPLOYEE_SCHEMA if kind == RecordKind.EMPLOYEE else PROJECT_SCHEMA
