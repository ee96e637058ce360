"""
===============================================================================
TARJETA CRC — staffdesk/container.py (Composition Root / DI manual)
===============================================================================

Responsabilidades:
  - Componer storage, transporte HTTP, sesión, stores y administración.
  - Decidir storage durable vs. fallback in-memory (si SQLite no abre).
  - Sembrar empleados por defecto en el primer uso.
  - Rehidratar la sesión guardada al arrancar.

Colaboradores:
  - crosscutting.config.get_settings
  - infrastructure.storage (LocalDatabase, Sql*)
  - infrastructure.repositories.in_memory (fallback)
  - infrastructure.http (HttpTransport, HttpAuthGateway, ApiClient)
  - application (SessionManager, LocalRecordStore, UserAdministration)

Notas:
  - Este archivo NO contiene lógica de negocio.
  - No hay singleton global de sesión: la UI construye un AppContext y lo inyecta.
===============================================================================
"""

from __future__ import annotations

import time
from dataclasses import dataclass
from typing import Callable, Optional

import httpx

from .application.record_store import LocalRecordStore
from .application.seed_data import default_employees
from .application.session_manager import SessionManager
from .application.user_admin import UserAdministration
from .crosscutting.config import Settings, get_settings
from .crosscutting.exceptions import StorageUnavailableError
from .crosscutting.logger import logger
from .domain.records import EMPLOYEE_SCHEMA, PROJECT_SCHEMA
from .domain.services import SessionNotifier
from .infrastructure.http import ApiClient, HttpAuthGateway, HttpTransport
from .infrastructure.repositories import (
    InMemoryKeyValueStorage,
    InMemoryRecordRepository,
)
from .infrastructure.storage import (
    LocalDatabase,
    SqlKeyValueStorage,
    SqlRecordRepository,
)


@dataclass
class AppContext:
    settings: Settings
    database: Optional[LocalDatabase]
    transport: HttpTransport
    session: SessionManager
    api: ApiClient
    employees: LocalRecordStore
    projects: LocalRecordStore
    users: UserAdministration
    storage_fallback: bool = False

    async def aclose(self) -> None:
        await self.session.close()
        await self.transport.aclose()
        if self.database is not None:
            self.database.close()


def _seed_employees(store: LocalRecordStore) -> None:
    for employee in default_employees():
        store.upsert(employee)
    logger.info("Seeded default employees", extra={"count": len(default_employees())})


def build_app_context(
    settings: Optional[Settings] = None,
    *,
    http_client: Optional[httpx.AsyncClient] = None,
    notifier: Optional[SessionNotifier] = None,
    clock: Optional[Callable[[], float]] = None,
) -> AppContext:
    """
    Construye el grafo de dependencias.

    Llamarlo dentro de un event loop para que la sesión restaurada
    reprograme sus timers.
    """
    settings = settings or get_settings()

    database: Optional[LocalDatabase] = LocalDatabase(settings.local_database_url)
    try:
        database.open()
        employee_repo = SqlRecordRepository(database, EMPLOYEE_SCHEMA)
        project_repo = SqlRecordRepository(database, PROJECT_SCHEMA)
        kv_storage = SqlKeyValueStorage(database)
        fallback = False
        should_seed = database.created_schema and settings.seed_default_records
    except StorageUnavailableError as exc:
        logger.warning(
            "Local storage unavailable, using in-memory fallback",
            extra={"error": exc.message, "error_id": exc.error_id},
        )
        database = None
        employee_repo = InMemoryRecordRepository(EMPLOYEE_SCHEMA)
        project_repo = InMemoryRecordRepository(PROJECT_SCHEMA)
        kv_storage = InMemoryKeyValueStorage()
        fallback = True
        should_seed = True

    employees = LocalRecordStore(
        employee_repo, EMPLOYEE_SCHEMA, page_size=settings.local_page_size
    )
    projects = LocalRecordStore(
        project_repo, PROJECT_SCHEMA, page_size=settings.local_page_size
    )
    employees.initialize()
    projects.initialize()
    if should_seed:
        _seed_employees(employees)

    transport = HttpTransport(
        settings.api_base_url,
        timeout_s=settings.http_timeout_seconds,
        client=http_client,
        retry_max_attempts=settings.retry_max_attempts,
        retry_base_delay_s=settings.retry_base_delay_seconds,
        retry_max_delay_s=settings.retry_max_delay_seconds,
    )
    session = SessionManager(
        HttpAuthGateway(transport),
        kv_storage,
        notifier=notifier,
        clock=clock or time.time,
        warning_lead_seconds=settings.session_warning_lead_seconds,
        default_ttl_seconds=settings.session_default_ttl_seconds,
        expiring_soon_seconds=settings.session_expiring_soon_seconds,
    )
    session.restore()

    api = ApiClient(transport, session, page_size=settings.remote_page_size)

    return AppContext(
        settings=settings,
        database=database,
        transport=transport,
        session=session,
        api=api,
        employees=employees,
        projects=projects,
        users=UserAdministration(api),
        storage_fallback=fallback,
    )
