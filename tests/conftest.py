"""
Name: Pytest Configuration and Shared Fixtures

Responsibilities:
  - Configure the test environment (no .env, APP_ENV=test)
  - Provide fakes for the session collaborators (auth gateway, notifier, clock)
  - Provide sample records

Collaborators:
  - pytest: Test framework
  - staffdesk.domain: records, session types

Notes:
  - Fixtures are auto-discovered by pytest
  - Async tests use explicit @pytest.mark.asyncio
"""

import asyncio
import os
import sys
from datetime import date
from pathlib import Path
from typing import List, Optional

import pytest

ROOT_DIR = Path(__file__).resolve().parents[1]
if str(ROOT_DIR) not in sys.path:
    sys.path.insert(0, str(ROOT_DIR))

os.environ.setdefault("APP_ENV", "test")

from staffdesk.crosscutting import config as app_config  # noqa: E402

app_config.Settings.model_config["env_file"] = None

from staffdesk.domain.records import (  # noqa: E402
    Currency,
    Employee,
    EmployeeStatus,
    Project,
    ProjectStatus,
    WorkAuthorization,
)
from staffdesk.domain.session import (  # noqa: E402
    SessionEndReason,
    SessionUser,
    TokenGrant,
)
from staffdesk.infrastructure.repositories import InMemoryKeyValueStorage  # noqa: E402


def pytest_configure(config) -> None:
    config.addinivalue_line(
        "markers", "unit: Unit tests (fast, no external dependencies)"
    )


# ============================================================================
# Session fakes
# ============================================================================


class FakeClock:
    """R: Reloj manual en epoch seconds."""

    def __init__(self, start: float = 1_700_000_000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class FakeAuthGateway:
    """R: AuthGateway en memoria con tokens secuenciales (token-1, token-2, ...)."""

    def __init__(self, user: SessionUser):
        self.user = user
        self.login_error: Optional[Exception] = None
        self.login_expires_in: Optional[float] = 3600
        self.refresh_error: Optional[Exception] = None
        self.refresh_expires_in: Optional[float] = 3600
        self.refresh_gate: Optional[asyncio.Event] = None
        self.logout_error: Optional[Exception] = None
        self.login_calls: List[str] = []
        self.refresh_calls: List[str] = []
        self.logout_calls: List[str] = []
        self._counter = 0

    def _next_token(self) -> str:
        self._counter += 1
        return f"token-{self._counter}"

    async def login(self, email: str, password: str) -> TokenGrant:
        self.login_calls.append(email)
        if self.login_error is not None:
            raise self.login_error
        return TokenGrant(
            token=self._next_token(), expires_in=self.login_expires_in, user=self.user
        )

    async def refresh(self, token: str) -> TokenGrant:
        self.refresh_calls.append(token)
        if self.refresh_gate is not None:
            await self.refresh_gate.wait()
        if self.refresh_error is not None:
            raise self.refresh_error
        return TokenGrant(token=self._next_token(), expires_in=self.refresh_expires_in)

    async def logout(self, token: str) -> None:
        self.logout_calls.append(token)
        if self.logout_error is not None:
            raise self.logout_error


class RecordingNotifier:
    def __init__(self):
        self.warnings: List[float] = []
        self.expired = 0
        self.login_required: List[SessionEndReason] = []

    def on_session_warning(self, seconds_left: float) -> None:
        self.warnings.append(seconds_left)

    def on_session_expired(self) -> None:
        self.expired += 1

    def on_login_required(self, reason: SessionEndReason) -> None:
        self.login_required.append(reason)


@pytest.fixture
def admin_user() -> SessionUser:
    return SessionUser(
        id="u-1",
        name="Ada Admin",
        email="ada@example.com",
        role="admin",
        status="approved",
    )


@pytest.fixture
def fake_clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def fake_gateway(admin_user: SessionUser) -> FakeAuthGateway:
    return FakeAuthGateway(admin_user)


@pytest.fixture
def notifier() -> RecordingNotifier:
    return RecordingNotifier()


@pytest.fixture
def session_storage() -> InMemoryKeyValueStorage:
    return InMemoryKeyValueStorage()


# ============================================================================
# Record fixtures
# ============================================================================


@pytest.fixture
def sample_employee() -> Employee:
    return Employee(
        id=1,
        name="Jane Doe",
        position="Backend Engineer",
        department="Engineering",
        email="jane.doe@example.com",
        phone="+1 (555) 000-0001",
        status=EmployeeStatus.ACTIVE,
        joined=date(2022, 1, 10),
        salary=1000.0,
        currency=Currency.USD,
    )


@pytest.fixture
def sample_project() -> Project:
    return Project(
        id=1,
        consultant_name="John Roe",
        email="john.roe@example.com",
        contact_no="+1 (555) 123-4567",
        rate=75.5,
        margin=12.0,
        work_authorization=WorkAuthorization.H1B,
        date_of_joining=date(2023, 6, 1),
        status=ProjectStatus.ACTIVE,
        end_client="Globex",
        project_completed=False,
        account_manager="Sam Lee",
        recruiter="Kim Park",
        currency=Currency.USD,
    )
