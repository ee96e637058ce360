"""
===============================================================================
TARJETA CRC — application/validation.py (Validación de formularios)
===============================================================================

Responsabilidades:
  - Validar registros antes de cualquier mutación (local o remota).
  - Devolver TODOS los errores juntos (campo -> mensaje) en RecordValidationError.
  - Normalizar el payload del formulario remoto de empleados (skills).
  - Credenciales de login y alta de usuario completas antes del request.

Colaboradores:
  - application/record_store.py (add / update / upsert)
  - application/session_manager.py (login), application/user_admin.py (register)
  - crosscutting.exceptions.RecordValidationError

Reglas:
  - Email con formato mínimo: algo@algo.algo
  - Rate del proyecto en [0, 150], margin en [0, 25]
===============================================================================
"""

from __future__ import annotations

import re
from typing import Any, Callable, Mapping

from ..crosscutting.exceptions import RecordValidationError
from ..domain.records import Employee, Project, Record

EMAIL_RE = re.compile(r"\S+@\S+\.\S+")

DEPARTMENTS = (
    "HR",
    "Engineering",
    "Sales",
    "Marketing",
    "Finance",
    "Operations",
    "IT",
    "Management",
)

RATE_RANGE = (0.0, 150.0)
MARGIN_RANGE = (0.0, 25.0)

RecordValidator = Callable[[Record], None]


def _blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def is_valid_email(email: str) -> bool:
    return bool(EMAIL_RE.search(email or ""))


def _raise_if_errors(errors: dict[str, str]) -> None:
    if errors:
        raise RecordValidationError(errors)


def validate_employee(employee: Employee) -> None:
    errors: dict[str, str] = {}

    if _blank(employee.name):
        errors["name"] = "Name is required"
    if employee.email and not is_valid_email(employee.email):
        errors["email"] = "Email is invalid"
    if employee.salary is not None and employee.salary < 0:
        errors["salary"] = "Salary must not be negative"

    _raise_if_errors(errors)


def _in_range(value: Any, bounds: tuple[float, float]) -> bool:
    if value is None:
        return False
    low, high = bounds
    return low <= float(value) <= high


def validate_project(project: Project) -> None:
    errors: dict[str, str] = {}

    if _blank(project.consultant_name):
        errors["consultantName"] = "Consultant name is required"
    if _blank(project.email):
        errors["email"] = "Email is required"
    elif not is_valid_email(project.email):
        errors["email"] = "Email is invalid"
    if _blank(project.contact_no):
        errors["contactNo"] = "Contact number is required"
    if not _in_range(project.rate, RATE_RANGE):
        errors["rate"] = "Rate must be between 0 and 150"
    if not _in_range(project.margin, MARGIN_RANGE):
        errors["margin"] = "Margin must be between 0 and 25"
    if project.work_authorization is None:
        errors["workAuthorization"] = "Work authorization is required"
    if project.date_of_joining is None:
        errors["dateOfJoining"] = "Date of joining is required"
    if _blank(project.end_client):
        errors["endClient"] = "End client is required"
    if _blank(project.account_manager):
        errors["accountManager"] = "Account manager is required"
    if _blank(project.recruiter):
        errors["recruiter"] = "Recruiter is required"

    _raise_if_errors(errors)


def validate_record(record: Record) -> None:
    if isinstance(record, Project):
        validate_project(record)
    else:
        validate_employee(record)


def validate_employee_payload(payload: Mapping[str, Any]) -> dict[str, Any]:
    """
    Valida el formulario de empleado del backend y devuelve el payload normalizado.

    - skills como "a, b, ,c" -> ["a", "b", "c"]
    - salary numérico (float)
    """
    errors: dict[str, str] = {}
    data = dict(payload)

    if _blank(data.get("firstName")):
        errors["firstName"] = "First name is required"
    if _blank(data.get("lastName")):
        errors["lastName"] = "Last name is required"

    email = data.get("email")
    if _blank(email):
        errors["email"] = "Email is required"
    elif not is_valid_email(str(email)):
        errors["email"] = "Email is invalid"

    if _blank(data.get("phone")):
        errors["phone"] = "Phone is required"

    department = data.get("department")
    if _blank(department):
        errors["department"] = "Department is required"
    elif department not in DEPARTMENTS:
        errors["department"] = "Department is invalid"

    if _blank(data.get("position")):
        errors["position"] = "Position is required"

    try:
        salary = float(data.get("salary"))
    except (TypeError, ValueError):
        salary = None
    if salary is None or salary <= 0:
        errors["salary"] = "Valid salary is required"

    if _blank(data.get("startDate")):
        errors["startDate"] = "Start date is required"
    if _blank(data.get("dateOfBirth")):
        errors["dateOfBirth"] = "Date of birth is required"

    _raise_if_errors(errors)

    skills = data.get("skills") or []
    if isinstance(skills, str):
        skills = skills.split(",")
    data["skills"] = [str(s).strip() for s in skills if str(s).strip()]
    data["salary"] = salary
    return data


def validate_login(email: str, password: str) -> None:
    errors: dict[str, str] = {}

    if _blank(email):
        errors["email"] = "Email is required"
    if _blank(password):
        errors["password"] = "Password is required"

    _raise_if_errors(errors)


REGISTRATION_FIELDS = (
    ("email", "Email"),
    ("password", "Password"),
    ("firstName", "First name"),
    ("lastName", "Last name"),
    ("department", "Department"),
    ("position", "Position"),
    ("phone", "Phone"),
)


def validate_registration(payload: Mapping[str, Any]) -> dict[str, Any]:
    """Todos los campos del alta son obligatorios; el email además con formato."""
    data = dict(payload)
    errors = {
        key: f"{label} is required"
        for key, label in REGISTRATION_FIELDS
        if _blank(data.get(key))
    }
    if "email" not in errors and not is_valid_email(str(data["email"])):
        errors["email"] = "Email is invalid"

    _raise_if_errors(errors)
    return data
