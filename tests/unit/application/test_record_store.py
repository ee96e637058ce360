"""
===============================================================================
CRC — tests/unit/application/test_record_store.py

Responsibilities:
    - CRUD con validación previa y unicidad (id, email).
    - Búsqueda por substring case-insensitive.
    - Paginación local sobre el resultado de la búsqueda.

Collaborators:
    - LocalRecordStore (SUT)
    - InMemoryRecordRepository
===============================================================================
"""

from dataclasses import replace

import pytest

from staffdesk.application.record_store import LocalRecordStore
from staffdesk.application.seed_data import default_employees
from staffdesk.crosscutting.exceptions import (
    DuplicateKeyError,
    RecordNotFoundError,
    RecordValidationError,
)
from staffdesk.domain.records import EMPLOYEE_SCHEMA, PROJECT_SCHEMA
from staffdesk.infrastructure.repositories import InMemoryRecordRepository

pytestmark = pytest.mark.unit


@pytest.fixture
def employees() -> LocalRecordStore:
    store = LocalRecordStore(InMemoryRecordRepository(EMPLOYEE_SCHEMA), EMPLOYEE_SCHEMA)
    store.initialize()
    return store


@pytest.fixture
def seeded(employees) -> LocalRecordStore:
    for employee in default_employees():
        employees.add(employee)
    return employees


class TestMutations:
    def test_add_and_get(self, employees, sample_employee):
        employees.add(sample_employee)

        assert employees.get(1) == sample_employee
        assert employees.get_all() == [sample_employee]

    def test_duplicate_id_is_rejected(self, employees, sample_employee):
        employees.add(sample_employee)
        other = replace(sample_employee, email="other@example.com")

        with pytest.raises(DuplicateKeyError) as exc_info:
            employees.add(other)
        assert exc_info.value.field == "id"

    def test_duplicate_email_is_case_insensitive(self, employees, sample_employee):
        employees.add(sample_employee)
        clash = replace(sample_employee, id=2, email="JANE.DOE@example.com ")

        with pytest.raises(DuplicateKeyError) as exc_info:
            employees.add(clash)
        assert exc_info.value.field == "email"
        assert len(employees.get_all()) == 1

    def test_blank_emails_do_not_collide(self, employees, sample_employee):
        employees.add(replace(sample_employee, email=""))
        employees.add(replace(sample_employee, id=2, email=""))

        assert len(employees.get_all()) == 2

    def test_invalid_record_writes_nothing(self, employees, sample_employee):
        with pytest.raises(RecordValidationError) as exc_info:
            employees.add(replace(sample_employee, name=" ", salary=-1))

        assert set(exc_info.value.errors) == {"name", "salary"}
        assert employees.get_all() == []

    def test_update_replaces_in_place(self, seeded):
        target = seeded.get(3)
        target.position = "HR Lead"

        seeded.update(target)

        assert seeded.get(3).position == "HR Lead"
        assert [e.id for e in seeded.get_all()] == list(range(1, 11))

    def test_update_missing_record(self, employees, sample_employee):
        with pytest.raises(RecordNotFoundError):
            employees.update(sample_employee)

    def test_upsert_inserts_or_replaces(self, employees, sample_employee):
        employees.upsert(sample_employee)
        employees.upsert(replace(sample_employee, salary=2000.0))

        assert employees.get(1).salary == 2000.0
        assert len(employees.get_all()) == 1

    def test_remove(self, seeded):
        assert seeded.remove(5) is True
        assert seeded.remove(5) is False
        assert seeded.get(5) is None

    def test_next_id(self, employees, seeded):
        assert seeded.next_id() == 11
        assert LocalRecordStore(
            InMemoryRecordRepository(EMPLOYEE_SCHEMA), EMPLOYEE_SCHEMA
        ).next_id() == 1

    def test_returned_records_are_copies(self, employees, sample_employee):
        employees.add(sample_employee)

        employees.get(1).name = "Mutated"

        assert employees.get(1).name == "Jane Doe"


class TestSearch:
    def test_empty_term_returns_everything(self, seeded):
        assert len(seeded.search("")) == 10
        assert len(seeded.search(None)) == 10
        assert len(seeded.search("   ")) == 10

    def test_empty_term_keeps_store_order(self, seeded):
        everything = seeded.get_all()

        assert seeded.search("") == everything
        assert seeded.search(None) == everything
        assert seeded.search("   ") == everything

    def test_matches_any_search_field(self, seeded):
        assert [e.name for e in seeded.search("ENGINEERING")] == [
            "Ava Thompson",
            "Liam Patel",
            "Arjun Mehta",
        ]
        assert [e.id for e in seeded.search("201-1004")] == [4]
        assert [e.id for e in seeded.search("mia.chen@")] == [7]

    def test_status_is_not_searchable_for_employees(self, seeded):
        assert seeded.search("terminated") == []

    def test_no_match(self, seeded):
        assert seeded.search("zzz") == []

    def test_project_search(self, sample_project):
        projects = LocalRecordStore(
            InMemoryRecordRepository(PROJECT_SCHEMA), PROJECT_SCHEMA
        )
        projects.add(sample_project)

        assert projects.search("globex") == [sample_project]
        assert projects.search("kim park") == [sample_project]


class TestPaging:
    def test_second_page(self, seeded):
        page = seeded.page(None, 2, 4)

        assert [e.id for e in page.items] == [5, 6, 7, 8]
        assert page.page_info.total_pages == 3
        assert page.page_info.has_prev is True
        assert page.page_info.has_next is True
        assert (page.page_info.start_index, page.page_info.end_index) == (5, 8)

    def test_page_is_clamped_to_filtered_results(self, seeded):
        page = seeded.page("engineering", 9, 2)

        assert page.page_info.page == 2
        assert [e.name for e in page.items] == ["Arjun Mehta"]
        assert page.page_info.has_next is False

    def test_default_page_size(self):
        store = LocalRecordStore(
            InMemoryRecordRepository(EMPLOYEE_SCHEMA), EMPLOYEE_SCHEMA, page_size=4
        )
        for employee in default_employees():
            store.add(employee)

        page = store.page("", 1)

        assert page.page_info.page_size == 4
        assert page.page_info.total_pages == 3
