"""
===============================================================================
CRC — tests/unit/infrastructure/test_api_client.py

Responsibilities:
    - Headers de auth en cada request.
    - 401 -> refresh + reintento; refresh fallido -> logout forzado.
    - 403 -> logout forzado (salvo login/register).
    - Mensajes de error del backend y parseo de páginas remotas.
    - Contexto por operación visible durante el request y limpio después.

Collaborators:
    - ApiClient (SUT)
    - FakeSessionControl (implementa SessionControl)
    - httpx.MockTransport
===============================================================================
"""

import json

import httpx
import pytest

from staffdesk.context import get_context_dict
from staffdesk.crosscutting.exceptions import (
    AccessDeniedError,
    ApiError,
    SessionExpiredError,
)
from staffdesk.domain.session import SessionEndReason
from staffdesk.infrastructure.http import ApiClient, HttpTransport

pytestmark = pytest.mark.unit


class FakeSessionControl:
    def __init__(self, token="t-1"):
        self.token = token
        self.refresh_error = None
        self.refresh_calls = 0
        self.forced = []

    def get_auth_headers(self):
        return {"Authorization": f"Bearer {self.token}"} if self.token else {}

    async def refresh_token(self):
        self.refresh_calls += 1
        if self.refresh_error is not None:
            raise self.refresh_error
        self.token = f"t-{self.refresh_calls + 1}"
        return self.token

    async def force_logout(self, reason):
        self.forced.append(reason)
        self.token = None


@pytest.fixture
def session():
    return FakeSessionControl()


def make_client(handler, session):
    http_client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    transport = HttpTransport(
        "http://backend.test/api",
        client=http_client,
        retry_max_attempts=3,
        retry_base_delay_s=0,
        retry_max_delay_s=0.01,
    )
    return ApiClient(transport, session), http_client


class TestAuthHeaders:
    @pytest.mark.asyncio
    async def test_bearer_is_attached(self, session):
        seen = []

        def handler(request):
            seen.append(request)
            return httpx.Response(200, json={"data": {"id": "1"}})

        api, http_client = make_client(handler, session)
        body = await api.get_employee_by_id("1")
        await http_client.aclose()

        assert body == {"data": {"id": "1"}}
        assert seen[0].headers["Authorization"] == "Bearer t-1"
        assert seen[0].url.path == "/api/employees/1"


class TestUnauthorized:
    @pytest.mark.asyncio
    async def test_refresh_then_retry(self, session):
        seen = []

        def handler(request):
            seen.append(request.headers.get("Authorization"))
            if request.headers.get("Authorization") == "Bearer t-1":
                return httpx.Response(401, json={"message": "jwt expired"})
            return httpx.Response(200, json={"data": []})

        api, http_client = make_client(handler, session)
        body = await api.get_pending_users()
        await http_client.aclose()

        assert body == {"data": []}
        assert session.refresh_calls == 1
        assert seen == ["Bearer t-1", "Bearer t-2"]
        assert session.forced == []

    @pytest.mark.asyncio
    async def test_refresh_failure_forces_logout(self, session):
        session.refresh_error = SessionExpiredError("refresh rejected")
        api, http_client = make_client(
            lambda request: httpx.Response(401), session
        )

        with pytest.raises(SessionExpiredError) as exc_info:
            await api.get_all_users()
        await http_client.aclose()

        assert exc_info.value.message == "Session expired. Please login again."
        assert session.forced == [SessionEndReason.REFRESH_FAILED]

    @pytest.mark.asyncio
    async def test_retry_still_unauthorized(self, session):
        api, http_client = make_client(lambda request: httpx.Response(401), session)

        with pytest.raises(SessionExpiredError):
            await api.get_current_user()
        await http_client.aclose()

        assert session.refresh_calls == 1
        assert session.forced == [SessionEndReason.REFRESH_FAILED]

    @pytest.mark.asyncio
    async def test_login_401_is_not_refreshed(self, session):
        api, http_client = make_client(
            lambda request: httpx.Response(401, json={"message": "Invalid credentials"}),
            session,
        )

        with pytest.raises(ApiError) as exc_info:
            await api.request("POST", "/auth/login", json={})
        await http_client.aclose()

        assert exc_info.value.status_code == 401
        assert session.refresh_calls == 0
        assert session.forced == []


class TestForbidden:
    @pytest.mark.asyncio
    async def test_forces_logout(self, session):
        api, http_client = make_client(lambda request: httpx.Response(403), session)

        with pytest.raises(AccessDeniedError) as exc_info:
            await api.delete_user("9")
        await http_client.aclose()

        assert exc_info.value.message == "Access denied. Please login again."
        assert session.forced == [SessionEndReason.ACCESS_DENIED]

    @pytest.mark.asyncio
    async def test_register_403_is_plain_error(self, session):
        api, http_client = make_client(
            lambda request: httpx.Response(403, json={"message": "Registration closed"}),
            session,
        )

        with pytest.raises(ApiError) as exc_info:
            await api.register({"email": "x@y.io"})
        await http_client.aclose()

        assert exc_info.value.message == "Registration closed"
        assert session.forced == []


class TestErrors:
    @pytest.mark.asyncio
    async def test_backend_message_is_used(self, session):
        api, http_client = make_client(
            lambda request: httpx.Response(404, json={"message": "Employee not found"}),
            session,
        )

        with pytest.raises(ApiError) as exc_info:
            await api.get_employee_by_id("404")
        await http_client.aclose()

        assert exc_info.value.message == "Employee not found"
        assert exc_info.value.status_code == 404

    @pytest.mark.asyncio
    async def test_generic_message_without_body(self, session):
        api, http_client = make_client(lambda request: httpx.Response(500), session)

        with pytest.raises(ApiError) as exc_info:
            await api.create_project({"consultantName": "x"})
        await http_client.aclose()

        assert exc_info.value.message == "HTTP error! status: 500"


class TestEndpoints:
    @pytest.mark.asyncio
    async def test_search_employees_drops_empty_filters(self, session):
        seen = []

        def handler(request):
            seen.append(request)
            return httpx.Response(
                200,
                json={
                    "success": True,
                    "data": [{"_id": "1", "firstName": "Ada"}],
                    "pagination": {
                        "currentPage": 2,
                        "totalPages": 5,
                        "totalItems": 48,
                        "itemsPerPage": 10,
                        "hasNextPage": True,
                        "hasPrevPage": True,
                    },
                },
            )

        api, http_client = make_client(handler, session)
        page = await api.search_employees("ada", {"department": "", "page": 2})
        await http_client.aclose()

        assert dict(seen[0].url.params) == {"limit": "10", "search": "ada", "page": "2"}
        assert page.data == [{"_id": "1", "firstName": "Ada"}]
        assert page.pagination.current_page == 2
        assert page.pagination.total_pages == 5
        assert page.pagination.total_items == 48
        assert page.pagination.has_next_page is True

    @pytest.mark.asyncio
    async def test_page_without_pagination_block(self, session):
        api, http_client = make_client(
            lambda request: httpx.Response(200, json={"data": []}), session
        )
        page = await api.get_projects()
        await http_client.aclose()

        assert page.data == []
        assert page.pagination.current_page == 1
        assert page.pagination.total_pages == 1

    @pytest.mark.asyncio
    async def test_user_admin_endpoints(self, session):
        seen = []

        def handler(request):
            seen.append((request.method, request.url.path, request.content))
            return httpx.Response(200, json={"success": True})

        api, http_client = make_client(handler, session)
        await api.approve_user("7")
        await api.update_user_session("7", {"sessionActive": False})
        await api.update_user_status("7", "pending")
        await http_client.aclose()

        assert [(m, p) for m, p, _ in seen] == [
            ("PUT", "/api/auth/approve-user/7"),
            ("PUT", "/api/auth/users/7/session"),
            ("PUT", "/api/auth/users/7/status"),
        ]
        assert json.loads(seen[1][2]) == {"sessionActive": False}
        assert json.loads(seen[2][2]) == {"status": "pending"}

    @pytest.mark.asyncio
    async def test_delete_project(self, session):
        seen = []

        def handler(request):
            seen.append((request.method, request.url.path))
            return httpx.Response(200, json={"success": True})

        api, http_client = make_client(handler, session)
        await api.delete_project("3")
        await api.get_project_stats()
        await http_client.aclose()

        assert seen == [("DELETE", "/api/projects/3"), ("GET", "/api/projects/stats")]


class TestOperationContext:
    @pytest.mark.asyncio
    async def test_context_is_set_during_request_and_cleared_after(self, session):
        captured = []

        def handler(request):
            captured.append(get_context_dict())
            return httpx.Response(200, json={})

        api, http_client = make_client(handler, session)
        await api.get_employee_stats()
        await http_client.aclose()

        assert captured[0]["method"] == "GET"
        assert captured[0]["path"] == "/employees/stats"
        assert captured[0]["operation_id"]
        assert get_context_dict() == {}


class TestListParams:
    @pytest.mark.asyncio
    async def test_explicit_limit_overrides_default(self, session):
        seen = []

        def handler(request):
            seen.append(request)
            return httpx.Response(200, json={"data": []})

        api, http_client = make_client(handler, session)
        await api.get_projects({"limit": 25, "status": "Active"})
        await http_client.aclose()

        assert dict(seen[0].url.params) == {"limit": "25", "status": "Active"}
