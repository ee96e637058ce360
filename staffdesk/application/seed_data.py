"""Default employee dataset written to the local store on first run."""

from __future__ import annotations

from datetime import date
from typing import List

from ..domain.records import Currency, Employee, EmployeeStatus

_DEFAULT_EMPLOYEES = (
    ("Ava Thompson", "Engineering Manager", "Engineering", "ava.thompson@example.com", "+1 (555) 201-1001", EmployeeStatus.ACTIVE, date(2019, 3, 11), 145000),
    ("Liam Patel", "Senior Software Engineer", "Engineering", "liam.patel@example.com", "+1 (555) 201-1002", EmployeeStatus.ACTIVE, date(2020, 7, 1), 128000),
    ("Sofia Martinez", "HR Generalist", "HR", "sofia.martinez@example.com", "+1 (555) 201-1003", EmployeeStatus.ON_LEAVE, date(2021, 1, 18), 72000),
    ("Noah Kim", "Account Executive", "Sales", "noah.kim@example.com", "+1 (555) 201-1004", EmployeeStatus.ACTIVE, date(2018, 10, 22), 88000),
    ("Isabella Rossi", "Marketing Specialist", "Marketing", "isabella.rossi@example.com", "+1 (555) 201-1005", EmployeeStatus.ACTIVE, date(2022, 5, 9), 69000),
    ("Ethan Brooks", "Financial Analyst", "Finance", "ethan.brooks@example.com", "+1 (555) 201-1006", EmployeeStatus.INACTIVE, date(2017, 2, 27), 81000),
    ("Mia Chen", "Operations Coordinator", "Operations", "mia.chen@example.com", "+1 (555) 201-1007", EmployeeStatus.ACTIVE, date(2023, 4, 3), 61000),
    ("Lucas Silva", "IT Support Engineer", "IT", "lucas.silva@example.com", "+1 (555) 201-1008", EmployeeStatus.ACTIVE, date(2021, 9, 13), 66000),
    ("Amelia Wright", "Director of Operations", "Management", "amelia.wright@example.com", "+1 (555) 201-1009", EmployeeStatus.ACTIVE, date(2016, 6, 6), 172000),
    ("Arjun Mehta", "Data Engineer", "Engineering", "arjun.mehta@example.com", "+1 (555) 201-1010", EmployeeStatus.TERMINATED, date(2020, 11, 30), 118000),
)


def default_employees() -> List[Employee]:
    """Fresh instances on every call (callers may mutate them)."""
    return [
        Employee(
            id=index,
            name=name,
            position=position,
            department=department,
            email=email,
            phone=phone,
            status=status,
            joined=joined,
            salary=float(salary),
            currency=Currency.USD,
        )
        for index, (name, position, department, email, phone, status, joined, salary) in enumerate(
            _DEFAULT_EMPLOYEES, start=1
        )
    ]
