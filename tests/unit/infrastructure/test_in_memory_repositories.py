"""Tests de los repositorios en memoria (fallback y tests)."""

from dataclasses import replace

import pytest

from staffdesk.crosscutting.exceptions import DuplicateKeyError
from staffdesk.domain.records import EMPLOYEE_SCHEMA
from staffdesk.infrastructure.repositories import (
    InMemoryKeyValueStorage,
    InMemoryRecordRepository,
)

pytestmark = pytest.mark.unit


class TestInMemoryRecordRepository:
    def test_insert_order_and_max_id(self, sample_employee):
        repo = InMemoryRecordRepository(EMPLOYEE_SCHEMA)
        repo.insert(replace(sample_employee, id=5, email="five@example.com"))
        repo.insert(sample_employee)

        assert [e.id for e in repo.list_all()] == [5, 1]
        assert repo.max_id() == 5

    def test_upsert_rejects_email_of_another_record(self, sample_employee):
        repo = InMemoryRecordRepository(EMPLOYEE_SCHEMA)
        repo.insert(sample_employee)

        with pytest.raises(DuplicateKeyError):
            repo.upsert(replace(sample_employee, id=2))

    def test_stored_copy_is_isolated(self, sample_employee):
        repo = InMemoryRecordRepository(EMPLOYEE_SCHEMA)
        repo.insert(sample_employee)

        sample_employee.name = "Changed outside"

        assert repo.get(1).name == "Jane Doe"


class TestInMemoryKeyValueStorage:
    def test_roundtrip(self):
        storage = InMemoryKeyValueStorage({"user": "{}"})
        storage.set_many({"token": "t"})

        assert storage.get("token") == "t"
        storage.remove_many(["token"])
        assert storage.snapshot() == {"user": "{}"}
