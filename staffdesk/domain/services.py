"""
===============================================================================
TARJETA CRC — domain/services.py (Puertos de servicios externos)
===============================================================================

Responsabilidades:
  - Definir el contrato del colaborador de autenticación (login/refresh/logout).
  - Definir el contrato de notificaciones de sesión hacia la UI.

Colaboradores:
  - application/session_manager.py: consume ambos puertos.
  - infrastructure/http/auth_gateway.py: implementa AuthGateway sobre HTTP.

Reglas:
  - Solo Protocols, sin IO.
===============================================================================
"""

from __future__ import annotations

from typing import Any, Protocol

from .session import SessionEndReason, TokenGrant


class AuthGateway(Protocol):
    """R: Colaborador de auth del backend."""

    async def login(self, email: str, password: str) -> TokenGrant:
        """R: Raises InvalidCredentialsError on rejection."""
        ...

    async def refresh(self, token: str) -> TokenGrant:
        """R: Raises SessionExpiredError when the token can't be refreshed."""
        ...

    async def logout(self, token: str) -> None:
        ...


class SessionNotifier(Protocol):
    """R: Señales de sesión hacia la capa de presentación."""

    def on_session_warning(self, seconds_left: float) -> None:
        ...

    def on_session_expired(self) -> None:
        ...

    def on_login_required(self, reason: SessionEndReason) -> None:
        ...


class SessionControl(Protocol):
    """R: Lo que un cliente HTTP autenticado necesita de la sesión."""

    def get_auth_headers(self) -> dict[str, str]:
        ...

    async def refresh_token(self) -> Any:
        ...

    async def force_logout(self, reason: SessionEndReason) -> None:
        ...
