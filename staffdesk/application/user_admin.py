"""
===============================================================================
TARJETA CRC — application/user_admin.py (Administración de usuarios)
===============================================================================

Responsabilidades:
  - Alta de usuarios (validada antes del request).
  - Flujo de aprobación: usuarios pendientes, aprobar, rechazar.
  - Gestión de sesiones de usuarios (start/stop, volver a pending, borrar).
  - Estadísticas de sesiones para el panel de admin.

Colaboradores:
  - infrastructure/http/api_client.ApiClient (endpoints /auth/*)

Reglas:
  - Las respuestas del backend pueden venir envueltas en {"data": ...}.
  - compute_user_stats / filter_users son puras.
===============================================================================
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, List, Mapping, Optional, Sequence

from ..crosscutting.logger import logger
from ..domain.session import UserStatus
from .validation import validate_registration

if TYPE_CHECKING:
    from ..infrastructure.http.api_client import ApiClient


@dataclass(frozen=True)
class UserSessionStats:
    total_users: int
    active_sessions: int
    pending_users: int
    approved_users: int


def compute_user_stats(users: Sequence[Mapping[str, Any]]) -> UserSessionStats:
    return UserSessionStats(
        total_users=len(users),
        active_sessions=sum(1 for u in users if u.get("sessionActive")),
        pending_users=sum(
            1 for u in users if u.get("status") == UserStatus.PENDING.value
        ),
        approved_users=sum(
            1 for u in users if u.get("status") == UserStatus.APPROVED.value
        ),
    )


def filter_users(
    users: Sequence[Mapping[str, Any]], term: Optional[str]
) -> List[Mapping[str, Any]]:
    """Filtro por firstName / lastName / email (substring, sin mayúsculas)."""
    needle = (term or "").lower()
    if not needle:
        return list(users)
    return [
        u
        for u in users
        if any(
            needle in str(u.get(key) or "").lower()
            for key in ("firstName", "lastName", "email")
        )
    ]


def _as_list(body: Any) -> List[dict[str, Any]]:
    data = body.get("data") if isinstance(body, dict) else body
    return list(data) if isinstance(data, list) else []


class UserAdministration:
    def __init__(self, api: "ApiClient"):
        self._api = api

    async def pending_users(self) -> List[dict[str, Any]]:
        return _as_list(await self._api.get_pending_users())

    async def register(self, payload: Mapping[str, Any]) -> Any:
        data = validate_registration(payload)
        response = await self._api.register(data)
        logger.info("User registered")
        return response

    async def approve(self, user_id: str) -> None:
        await self._api.approve_user(user_id)
        logger.info("User approved", extra={"user_id": user_id})

    async def reject(self, user_id: str) -> None:
        await self._api.reject_user(user_id)
        logger.info("User rejected", extra={"user_id": user_id})

    async def list_users(self) -> tuple[List[dict[str, Any]], UserSessionStats]:
        users = _as_list(await self._api.get_all_users())
        return users, compute_user_stats(users)

    async def stop_session(self, user_id: str) -> None:
        await self._api.update_user_session(user_id, {"sessionActive": False})
        logger.info("User session stopped", extra={"user_id": user_id})

    async def start_session(self, user_id: str) -> None:
        await self._api.update_user_session(user_id, {"sessionActive": True})
        logger.info("User session started", extra={"user_id": user_id})

    async def reset_to_pending(self, user_id: str) -> None:
        await self._api.update_user_status(user_id, UserStatus.PENDING.value)
        logger.info("User reset to pending", extra={"user_id": user_id})

    async def delete_user(self, user_id: str) -> None:
        await self._api.delete_user(user_id)
        logger.info("User deleted", extra={"user_id": user_id})
