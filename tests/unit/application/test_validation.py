"""Tests de validación de registros y del formulario remoto de empleados."""

from dataclasses import replace

import pytest

from staffdesk.application.validation import (
    is_valid_email,
    validate_employee,
    validate_employee_payload,
    validate_login,
    validate_project,
    validate_record,
    validate_registration,
)
from staffdesk.crosscutting.exceptions import RecordValidationError
from staffdesk.domain.records import Project

pytestmark = pytest.mark.unit


def _valid_payload(**overrides):
    payload = {
        "firstName": "Jane",
        "lastName": "Doe",
        "email": "jane@example.com",
        "phone": "555-0101",
        "department": "Engineering",
        "position": "Engineer",
        "salary": "85000",
        "startDate": "2024-01-15",
        "dateOfBirth": "1990-05-01",
        "skills": "python, sql, ,go",
    }
    payload.update(overrides)
    return payload


class TestEmail:
    @pytest.mark.parametrize(
        "email,expected",
        [
            ("a@b.co", True),
            ("first.last@corp.example.com", True),
            ("no-at-sign.com", False),
            ("a@b", False),
            ("", False),
        ],
    )
    def test_is_valid_email(self, email, expected):
        assert is_valid_email(email) is expected


class TestEmployee:
    def test_valid(self, sample_employee):
        validate_employee(sample_employee)

    def test_email_is_optional(self, sample_employee):
        validate_employee(replace(sample_employee, email=""))

    def test_bad_email(self, sample_employee):
        with pytest.raises(RecordValidationError) as exc_info:
            validate_employee(replace(sample_employee, email="nope"))
        assert exc_info.value.errors == {"email": "Email is invalid"}


class TestProject:
    def test_valid(self, sample_project):
        validate_project(sample_project)

    def test_reports_every_error_at_once(self):
        with pytest.raises(RecordValidationError) as exc_info:
            validate_project(Project(id=1, consultant_name=""))

        assert set(exc_info.value.errors) == {
            "consultantName",
            "email",
            "contactNo",
            "rate",
            "margin",
            "workAuthorization",
            "dateOfJoining",
            "endClient",
            "accountManager",
            "recruiter",
        }

    @pytest.mark.parametrize("rate", [-0.01, 150.01])
    def test_rate_out_of_range(self, sample_project, rate):
        with pytest.raises(RecordValidationError) as exc_info:
            validate_project(replace(sample_project, rate=rate))
        assert set(exc_info.value.errors) == {"rate"}

    def test_range_bounds_are_inclusive(self, sample_project):
        validate_project(replace(sample_project, rate=150, margin=25))
        validate_project(replace(sample_project, rate=0, margin=0))

    def test_margin_out_of_range(self, sample_project):
        with pytest.raises(RecordValidationError) as exc_info:
            validate_project(replace(sample_project, margin=26))
        assert set(exc_info.value.errors) == {"margin"}

    def test_dispatch(self, sample_project):
        with pytest.raises(RecordValidationError):
            validate_record(replace(sample_project, email="bad"))


class TestEmployeePayload:
    def test_normalizes_skills_and_salary(self):
        data = validate_employee_payload(_valid_payload())

        assert data["skills"] == ["python", "sql", "go"]
        assert data["salary"] == 85000.0

    def test_skills_list_is_trimmed(self):
        data = validate_employee_payload(_valid_payload(skills=[" a ", ""]))

        assert data["skills"] == ["a"]

    def test_unknown_department(self):
        with pytest.raises(RecordValidationError) as exc_info:
            validate_employee_payload(_valid_payload(department="Legal"))
        assert exc_info.value.errors == {"department": "Department is invalid"}

    def test_missing_fields(self):
        with pytest.raises(RecordValidationError) as exc_info:
            validate_employee_payload({"salary": "abc"})

        assert "salary" in exc_info.value.errors
        assert "firstName" in exc_info.value.errors
        assert "dateOfBirth" in exc_info.value.errors


def _registration(**overrides):
    payload = {
        "email": "new.hire@example.com",
        "password": "s3cret",
        "firstName": "New",
        "lastName": "Hire",
        "department": "Engineering",
        "position": "Analyst",
        "phone": "555-0199",
    }
    payload.update(overrides)
    return payload


class TestLogin:
    def test_valid(self):
        validate_login("ada@example.com", "secret")

    def test_missing_credentials(self):
        with pytest.raises(RecordValidationError) as exc_info:
            validate_login("", "   ")

        assert set(exc_info.value.errors) == {"email", "password"}


class TestRegistration:
    def test_valid_payload_is_returned(self):
        assert validate_registration(_registration()) == _registration()

    def test_every_missing_field_is_reported(self):
        with pytest.raises(RecordValidationError) as exc_info:
            validate_registration({"email": "", "phone": " "})

        assert set(exc_info.value.errors) == {
            "email",
            "password",
            "firstName",
            "lastName",
            "department",
            "position",
            "phone",
        }
        assert exc_info.value.errors["firstName"] == "First name is required"

    def test_bad_email(self):
        with pytest.raises(RecordValidationError) as exc_info:
            validate_registration(_registration(email="not-an-email"))

        assert exc_info.value.errors == {"email": "Email is invalid"}
