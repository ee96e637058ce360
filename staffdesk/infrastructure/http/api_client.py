"""
============================================================
TARJETA CRC — infrastructure/http/api_client.py
============================================================
Class: ApiClient

Responsibilities:
  - Requests autenticados al backend (headers de sesión en cada llamada).
  - 401 (fuera de login/register/refresh): un refresh transparente + un reintento.
    Si cualquiera falla => force_logout(REFRESH_FAILED) + SessionExpiredError.
  - 403 (fuera de login/register): force_logout(ACCESS_DENIED) + AccessDeniedError.
  - Resto de errores => ApiError(status, message).
  - Setear el contexto de operación (operation_id / method / path) para logs.
  - Exponer los endpoints de auth/admin, employees y projects.

Collaborators:
  - infrastructure/http/transport.HttpTransport
  - domain.services.SessionControl (SessionManager)
  - crosscutting.pagination.RemotePage
  - staffdesk/context.py
============================================================
"""

from __future__ import annotations

from typing import Any, Mapping, Optional
from uuid import uuid4

import httpx

from ...context import clear_context, set_operation_context
from ...crosscutting.exceptions import (
    AccessDeniedError,
    SessionExpiredError,
    StaffDeskError,
)
from ...crosscutting.logger import logger
from ...crosscutting.pagination import RemotePage
from ...domain.services import SessionControl
from ...domain.session import SessionEndReason
from .transport import HttpTransport, api_error_from_response, read_json

# R: Endpoints donde un 401/403 es una respuesta "normal" del flujo de auth.
_NO_REFRESH_ENDPOINTS = ("/auth/login", "/auth/register", "/auth/refresh-token")
_NO_FORCED_LOGOUT_ENDPOINTS = ("/auth/login", "/auth/register")

SESSION_EXPIRED_MESSAGE = "Session expired. Please login again."
ACCESS_DENIED_MESSAGE = "Access denied. Please login again."


def _matches(endpoint: str, prefixes: tuple[str, ...]) -> bool:
    return any(p in endpoint for p in prefixes)


class ApiClient:
    def __init__(
        self, transport: HttpTransport, session: SessionControl, *, page_size: int = 10
    ):
        self._transport = transport
        self._session = session
        self._page_size = page_size

    # =========================================================
    # Core request
    # =========================================================
    async def _send(
        self,
        method: str,
        endpoint: str,
        json: Any,
        params: Optional[Mapping[str, Any]],
    ) -> httpx.Response:
        return await self._transport.send(
            method,
            endpoint,
            json=json,
            params=params,
            headers=self._session.get_auth_headers(),
        )

    async def request(
        self,
        method: str,
        endpoint: str,
        *,
        json: Any = None,
        params: Optional[Mapping[str, Any]] = None,
    ) -> Any:
        set_operation_context(
            operation_id=str(uuid4()), method=method.upper(), path=endpoint
        )
        try:
            response = await self._send(method, endpoint, json, params)

            if response.status_code == 401 and not _matches(
                endpoint, _NO_REFRESH_ENDPOINTS
            ):
                return await self._refresh_and_retry(method, endpoint, json, params)

            if response.status_code == 403 and not _matches(
                endpoint, _NO_FORCED_LOGOUT_ENDPOINTS
            ):
                logger.warning("Access denied by backend, forcing logout")
                await self._session.force_logout(SessionEndReason.ACCESS_DENIED)
                raise AccessDeniedError(ACCESS_DENIED_MESSAGE)

            if response.is_error:
                raise api_error_from_response(response)

            return read_json(response)
        except StaffDeskError as exc:
            logger.error(
                "API request failed",
                extra={
                    "error_code": exc.error_code,
                    "error_id": exc.error_id,
                    "error": exc.message,
                },
            )
            raise
        finally:
            clear_context()

    async def _refresh_and_retry(
        self,
        method: str,
        endpoint: str,
        json: Any,
        params: Optional[Mapping[str, Any]],
    ) -> Any:
        try:
            await self._session.refresh_token()
            retry_response = await self._send(method, endpoint, json, params)
            if retry_response.is_error:
                raise api_error_from_response(retry_response)
            return read_json(retry_response)
        except StaffDeskError as exc:
            logger.warning(
                "Refresh after 401 failed, forcing logout",
                extra={"error_code": exc.error_code, "error": exc.message},
            )
            await self._session.force_logout(SessionEndReason.REFRESH_FAILED)
            raise SessionExpiredError(SESSION_EXPIRED_MESSAGE, original_error=exc) from exc

    def _list_params(self, params: Optional[Mapping[str, Any]]) -> dict[str, Any]:
        # R: `limit` por defecto = tamaño de página remoto.
        return {"limit": self._page_size, **dict(params or {})}

    # =========================================================
    # Auth / admin
    # =========================================================
    async def register(self, user_data: Mapping[str, Any]) -> Any:
        return await self.request("POST", "/auth/register", json=dict(user_data))

    async def get_current_user(self) -> Any:
        return await self.request("GET", "/auth/current-user")

    async def get_pending_users(self) -> Any:
        return await self.request("GET", "/auth/pending-users")

    async def approve_user(self, user_id: str) -> Any:
        return await self.request("PUT", f"/auth/approve-user/{user_id}")

    async def reject_user(self, user_id: str) -> Any:
        return await self.request("PUT", f"/auth/reject-user/{user_id}")

    async def get_all_users(self) -> Any:
        return await self.request("GET", "/auth/users")

    async def update_user_session(
        self, user_id: str, session_data: Mapping[str, Any]
    ) -> Any:
        return await self.request(
            "PUT", f"/auth/users/{user_id}/session", json=dict(session_data)
        )

    async def update_user_status(self, user_id: str, status: str) -> Any:
        return await self.request(
            "PUT", f"/auth/users/{user_id}/status", json={"status": status}
        )

    async def delete_user(self, user_id: str) -> Any:
        return await self.request("DELETE", f"/auth/users/{user_id}")

    # =========================================================
    # Employees
    # =========================================================
    async def get_employees(self, params: Optional[Mapping[str, Any]] = None) -> RemotePage:
        body = await self.request(
            "GET", "/employees", params=self._list_params(params)
        )
        return RemotePage.model_validate(body)

    async def get_employee_by_id(self, employee_id: str) -> Any:
        return await self.request("GET", f"/employees/{employee_id}")

    async def create_employee(self, employee_data: Mapping[str, Any]) -> Any:
        return await self.request("POST", "/employees", json=dict(employee_data))

    async def update_employee(
        self, employee_id: str, employee_data: Mapping[str, Any]
    ) -> Any:
        return await self.request(
            "PUT", f"/employees/{employee_id}", json=dict(employee_data)
        )

    async def delete_employee(self, employee_id: str) -> Any:
        return await self.request("DELETE", f"/employees/{employee_id}")

    async def get_employee_stats(self) -> Any:
        return await self.request("GET", "/employees/stats")

    async def search_employees(
        self, term: str, filters: Optional[Mapping[str, Any]] = None
    ) -> RemotePage:
        return await self.get_employees({"search": term, **dict(filters or {})})

    # =========================================================
    # Projects
    # =========================================================
    async def get_projects(self, params: Optional[Mapping[str, Any]] = None) -> RemotePage:
        body = await self.request(
            "GET", "/projects", params=self._list_params(params)
        )
        return RemotePage.model_validate(body)

    async def get_project_by_id(self, project_id: str) -> Any:
        return await self.request("GET", f"/projects/{project_id}")

    async def create_project(self, project_data: Mapping[str, Any]) -> Any:
        return await self.request("POST", "/projects", json=dict(project_data))

    async def update_project(
        self, project_id: str, project_data: Mapping[str, Any]
    ) -> Any:
        return await self.request(
            "PUT", f"/projects/{project_id}", json=dict(project_data)
        )

    async def delete_project(self, project_id: str) -> Any:
        return await self.request("DELETE", f"/projects/{project_id}")

    async def get_project_stats(self) -> Any:
        return await self.request("GET", "/projects/stats")

    async def search_projects(
        self, term: str, filters: Optional[Mapping[str, Any]] = None
    ) -> RemotePage:
        return await self.get_projects({"search": term, **dict(filters or {})})
