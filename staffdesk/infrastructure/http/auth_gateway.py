"""
============================================================
TARJETA CRC — infrastructure/http/auth_gateway.py
============================================================
Class: HttpAuthGateway

Responsibilities:
  - Implementar domain.services.AuthGateway sobre el backend REST.
  - POST /auth/login         -> TokenGrant (400/401 => InvalidCredentialsError)
  - POST /auth/refresh-token -> TokenGrant (401/403 => SessionExpiredError)
  - POST /auth/logout        -> None

Collaborators:
  - infrastructure/http/transport.HttpTransport
  - domain.session (TokenGrant, SessionUser)

Notes:
  - Este gateway NO pasa por ApiClient: login/refresh no deben disparar
    el refresh automático ante 401.
============================================================
"""

from __future__ import annotations

from typing import Any, Optional

from ...crosscutting.exceptions import (
    ApiError,
    InvalidCredentialsError,
    SessionExpiredError,
)
from ...domain.session import SessionUser, TokenGrant
from .transport import (
    HttpTransport,
    api_error_from_response,
    error_message,
    read_json,
    unwrap_data,
)


def bearer_headers(token: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {token}"}


def _parse_expires_in(value: Any) -> Optional[float]:
    if value in (None, ""):
        return None
    try:
        seconds = float(value)
    except (TypeError, ValueError):
        return None
    return seconds if seconds > 0 else None


class HttpAuthGateway:
    def __init__(self, transport: HttpTransport):
        self._transport = transport

    async def login(self, email: str, password: str) -> TokenGrant:
        response = await self._transport.send(
            "POST", "/auth/login", json={"email": email, "password": password}
        )
        if response.status_code in (400, 401):
            raise InvalidCredentialsError(error_message(response))
        if response.is_error:
            raise api_error_from_response(response)

        data = unwrap_data(read_json(response))
        if not isinstance(data, dict) or not data.get("token") or not data.get("user"):
            raise ApiError(
                "Login response is missing token or user",
                status_code=response.status_code,
            )

        return TokenGrant(
            token=str(data["token"]),
            expires_in=_parse_expires_in(data.get("expiresIn")),
            user=SessionUser.from_dict(data["user"]),
        )

    async def refresh(self, token: str) -> TokenGrant:
        response = await self._transport.send(
            "POST", "/auth/refresh-token", headers=bearer_headers(token)
        )
        if response.status_code in (401, 403):
            raise SessionExpiredError(error_message(response))
        if response.is_error:
            raise api_error_from_response(response)

        data = unwrap_data(read_json(response))
        if not isinstance(data, dict) or not data.get("token"):
            raise ApiError(
                "Refresh response is missing token", status_code=response.status_code
            )

        user = data.get("user")
        return TokenGrant(
            token=str(data["token"]),
            expires_in=_parse_expires_in(data.get("expiresIn")),
            user=SessionUser.from_dict(user) if isinstance(user, dict) else None,
        )

    async def logout(self, token: str) -> None:
        response = await self._transport.send(
            "POST", "/auth/logout", headers=bearer_headers(token)
        )
        if response.is_error:
            raise api_error_from_response(response)
