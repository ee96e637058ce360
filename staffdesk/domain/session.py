"""
===============================================================================
TARJETA CRC — domain/session.py (Sesión autenticada)
===============================================================================

Responsabilidades:
  - Representar la sesión viva (token + usuario + expiración absoluta).
  - Definir estados y motivos de cierre del ciclo de vida.
  - Proveer un read-model (SessionInfo) para la UI.

Colaboradores:
  - application/session_manager.py: crea/reemplaza/destruye Session.
  - domain/services.AuthGateway: devuelve TokenGrant.

Reglas:
  - Activa sii hay token, usuario y now < expires_at.
  - expires_at=None significa "sin expiración".
===============================================================================
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Any, Optional


class UserRole(str, Enum):
    ADMIN = "admin"
    USER = "user"


class UserStatus(str, Enum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


class SessionState(str, Enum):
    LOGGED_OUT = "logged_out"
    LOGGING_IN = "logging_in"
    ACTIVE = "active"
    EXPIRING_SOON = "expiring_soon"


class SessionEndReason(str, Enum):
    LOGOUT = "logout"
    EXPIRED = "expired"
    REFRESH_FAILED = "refresh_failed"
    ACCESS_DENIED = "access_denied"


@dataclass(frozen=True)
class SessionUser:
    id: str
    name: str
    email: str
    role: str = UserRole.USER.value
    status: str = UserStatus.APPROVED.value

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN.value

    @property
    def is_approved(self) -> bool:
        return self.status == UserStatus.APPROVED.value

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "email": self.email,
            "role": self.role,
            "status": self.status,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "SessionUser":
        """
        Acepta el payload del backend (`_id`, firstName/lastName) o el propio
        formato serializado (`id`, `name`).
        """
        user_id = data.get("id") or data.get("_id") or ""
        name = data.get("name")
        if not name:
            first = (data.get("firstName") or "").strip()
            last = (data.get("lastName") or "").strip()
            name = f"{first} {last}".strip()
        return cls(
            id=str(user_id),
            name=str(name or ""),
            email=str(data.get("email") or ""),
            role=str(data.get("role") or UserRole.USER.value),
            status=str(data.get("status") or UserStatus.APPROVED.value),
        )


@dataclass(frozen=True)
class Session:
    token: str
    user: SessionUser
    expires_at: Optional[float] = None

    def is_expired(self, now: float) -> bool:
        return self.expires_at is not None and now >= self.expires_at

    def time_until_expiry(self, now: float) -> Optional[float]:
        if self.expires_at is None:
            return None
        return max(0.0, self.expires_at - now)


@dataclass(frozen=True)
class TokenGrant:
    """Respuesta del colaborador de auth (login o refresh)."""

    token: str
    expires_in: Optional[float] = None
    user: Optional[SessionUser] = None


@dataclass(frozen=True)
class SessionInfo:
    is_authenticated: bool
    is_admin: bool
    is_approved: bool
    user: Optional[SessionUser]
    token_expiry: Optional[datetime]
    time_until_expiry: Optional[float]
    state: SessionState

    @classmethod
    def logged_out(cls) -> "SessionInfo":
        return cls(
            is_authenticated=False,
            is_admin=False,
            is_approved=False,
            user=None,
            token_expiry=None,
            time_until_expiry=None,
            state=SessionState.LOGGED_OUT,
        )
