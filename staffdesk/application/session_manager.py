"""
===============================================================================
TARJETA CRC — application/session_manager.py (Ciclo de vida de la sesión)
===============================================================================

Responsabilidades:
  - Login / logout / refresh contra el colaborador de auth.
  - Persistir token + user + tokenExpiry en storage durable (escritura atómica).
  - Programar el timer de aviso (expiry - lead) y el de expiración (expiry).
  - Expiración perezosa: get_token() cierra la sesión si el token venció.
  - Descartar resultados async "viejos" con un contador de generación.
  - Exponer el read-model SessionInfo y los headers de auth.

Colaboradores:
  - domain.services.AuthGateway (login/refresh/logout HTTP)
  - domain.repositories.KeyValueStorage (storage durable de sesión)
  - domain.services.SessionNotifier (avisos hacia la UI)
  - asyncio (timers con loop.call_later, refresh single-flight)

Máquina de estados:
  LOGGED_OUT -> LOGGING_IN -> ACTIVE -> EXPIRING_SOON -> ACTIVE (refresh)
                                                     +-> LOGGED_OUT (expired)

Reglas:
  - Cada transición que cambia la sesión incrementa `generation`.
  - Un login/refresh que termina con otra generación no revive la sesión.
  - Errores del logout en el servidor se loguean y se tragan.
===============================================================================
"""

from __future__ import annotations

import asyncio
import json
import time
from datetime import datetime, timezone
from typing import Callable, Optional, Set

from ..crosscutting.exceptions import (
    ApiError,
    SessionExpiredError,
    StorageUnavailableError,
)
from ..crosscutting.logger import logger
from ..domain.repositories import KeyValueStorage
from ..domain.services import AuthGateway, SessionNotifier
from ..domain.session import (
    Session,
    SessionEndReason,
    SessionInfo,
    SessionState,
    SessionUser,
)
from .session_status import (
    EXPIRING_SOON_SECONDS,
    format_time_remaining,
    is_expiring_soon as _is_expiring_soon,
)
from .validation import validate_login

# Claves del storage durable (mismos nombres que usa la UI web).
TOKEN_KEY = "token"
USER_KEY = "user"
EXPIRY_KEY = "tokenExpiry"
SESSION_KEYS = (TOKEN_KEY, USER_KEY, EXPIRY_KEY)


class LoggingSessionNotifier:
    """Notifier por defecto: solo deja rastro en los logs."""

    def on_session_warning(self, seconds_left: float) -> None:
        logger.warning(
            "Your session will expire soon. Please save your work.",
            extra={"time_remaining": format_time_remaining(seconds_left)},
        )

    def on_session_expired(self) -> None:
        logger.warning("Your session has expired. Please login again.")

    def on_login_required(self, reason: SessionEndReason) -> None:
        logger.info("Login required", extra={"reason": reason.value})


class SessionManager:
    """
    ----------------------------------------------------------------------------
    CRC (Class Card)
    ----------------------------------------------------------------------------
    Clase:
      SessionManager

    Responsabilidades:
      - Ser la única fuente de verdad de la sesión del proceso
      - Mantener storage, memoria y timers consistentes entre sí

    Notas:
      - `clock` devuelve epoch seconds; se inyecta para tests.
      - Sin loop corriendo no se programan timers; la expiración perezosa
        de get_token() sigue aplicando.
    ----------------------------------------------------------------------------
    """

    def __init__(
        self,
        gateway: AuthGateway,
        storage: KeyValueStorage,
        *,
        notifier: Optional[SessionNotifier] = None,
        clock: Callable[[], float] = time.time,
        warning_lead_seconds: float = 300,
        default_ttl_seconds: float = 3600,
        expiring_soon_seconds: float = EXPIRING_SOON_SECONDS,
    ):
        self._gateway = gateway
        self._storage = storage
        self._notifier = notifier or LoggingSessionNotifier()
        self._clock = clock
        self._warning_lead = float(warning_lead_seconds)
        self._default_ttl = float(default_ttl_seconds)
        self._expiring_soon = float(expiring_soon_seconds)

        self._session: Optional[Session] = None
        self._state = SessionState.LOGGED_OUT
        self._generation = 0
        self.end_reason: Optional[SessionEndReason] = None

        self._warning_handle: Optional[asyncio.TimerHandle] = None
        self._expiry_handle: Optional[asyncio.TimerHandle] = None
        self._refresh_task: Optional[asyncio.Future] = None
        self._background: Set[asyncio.Task] = set()

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def generation(self) -> int:
        return self._generation

    # =========================================================
    # Operaciones públicas
    # =========================================================
    async def login(self, email: str, password: str) -> Session:
        validate_login(email, password)
        previous_state = self._state
        generation = self._generation
        self._state = SessionState.LOGGING_IN
        try:
            grant = await self._gateway.login(email, password)
        except BaseException:
            if self._generation == generation:
                self._state = previous_state
            raise

        if self._generation != generation:
            raise SessionExpiredError("Session changed while logging in")
        if grant.user is None:
            self._state = previous_state
            raise ApiError("Login response is missing the user", status_code=200)

        try:
            session = self._apply_grant(grant.token, grant.user, grant.expires_in)
        except StorageUnavailableError:
            self._state = previous_state
            raise
        logger.info(
            "Session started",
            extra={"user_id": session.user.id, "role": session.user.role},
        )
        return session

    async def logout(self) -> None:
        token = self._end_session(SessionEndReason.LOGOUT)
        logger.info("Session closed", extra={"reason": SessionEndReason.LOGOUT.value})
        if token:
            await self._notify_server_logout(token)

    async def force_logout(
        self, reason: SessionEndReason = SessionEndReason.LOGOUT
    ) -> None:
        token = self._end_session(reason)
        logger.info("Session force-closed", extra={"reason": reason.value})
        if token:
            await self._notify_server_logout(token)
        self._notify("on_login_required", reason)

    def get_token(self) -> Optional[str]:
        session = self._session
        if session is None:
            return None
        if session.is_expired(self._clock()):
            self._expire()
            return None
        return session.token

    async def refresh_token(self) -> Session:
        """
        Pide un token nuevo. Llamadas concurrentes comparten el mismo refresh.

        - Éxito: reemplaza token/expiry y reprograma ambos timers.
        - Falla: cierra la sesión (si nadie la cambió antes) y re-lanza.
        """
        if self._refresh_task is None or self._refresh_task.done():
            self._refresh_task = asyncio.ensure_future(self._do_refresh())
        return await asyncio.shield(self._refresh_task)

    def is_authenticated(self) -> bool:
        session = self._session
        return session is not None and not session.is_expired(self._clock())

    def is_admin(self) -> bool:
        return self.is_authenticated() and self._session.user.is_admin

    def is_approved(self) -> bool:
        return self.is_authenticated() and self._session.user.is_approved

    def current_user(self) -> Optional[SessionUser]:
        return self._session.user if self.is_authenticated() else None

    def current_session(self) -> Optional[Session]:
        return self._session

    def time_until_expiry(self) -> Optional[float]:
        if self._session is None:
            return None
        return self._session.time_until_expiry(self._clock())

    def get_session_info(self) -> SessionInfo:
        session = self._session
        now = self._clock()
        if session is None or session.is_expired(now):
            return SessionInfo.logged_out()

        token_expiry = (
            datetime.fromtimestamp(session.expires_at, tz=timezone.utc)
            if session.expires_at is not None
            else None
        )
        return SessionInfo(
            is_authenticated=True,
            is_admin=session.user.is_admin,
            is_approved=session.user.is_approved,
            user=session.user,
            token_expiry=token_expiry,
            time_until_expiry=session.time_until_expiry(now),
            state=self._state,
        )

    def is_expiring_soon(self) -> bool:
        """Umbral del badge de estado (distinto del lead del timer de aviso)."""
        return _is_expiring_soon(self.get_session_info(), self._expiring_soon)

    def get_auth_headers(self) -> dict[str, str]:
        token = self.get_token()
        if not token:
            return {}
        return {"Authorization": f"Bearer {token}", "X-Session-Valid": "true"}

    def restore(self) -> Optional[Session]:
        """
        Rehidrata la sesión guardada (arranque de la app).

        - Sin token: limpia claves sueltas y no hay sesión.
        - Token sin user legible: sesión parcial, se limpia.
        - Token vencido: se cierra (EXPIRED).
        - Token vivo: se reprograman los timers.
        """
        try:
            token = self._storage.get(TOKEN_KEY)
            raw_user = self._storage.get(USER_KEY)
            raw_expiry = self._storage.get(EXPIRY_KEY)
        except StorageUnavailableError as exc:
            logger.warning("Cannot read stored session", extra={"error": exc.message})
            return None

        if not token:
            if raw_user or raw_expiry:
                self._clear_storage()
            return None

        user = self._parse_user(raw_user)
        expires_at = self._parse_expiry(raw_expiry)
        if user is None or (raw_expiry and expires_at is None):
            logger.warning("Discarding partial stored session")
            self._clear_storage()
            return None

        session = Session(token=token, user=user, expires_at=expires_at)
        if session.is_expired(self._clock()):
            logger.info("Stored session already expired")
            self._clear_storage()
            self.end_reason = SessionEndReason.EXPIRED
            self._spawn_server_logout(token)
            return None

        self._session = session
        self._generation += 1
        self._state = SessionState.ACTIVE
        self._schedule_timers(session)
        logger.info("Session restored", extra={"user_id": user.id})
        return session

    async def close(self) -> None:
        self._cancel_timers()
        if self._background:
            await asyncio.gather(*list(self._background), return_exceptions=True)

    # =========================================================
    # Internos: transiciones
    # =========================================================
    async def _do_refresh(self) -> Session:
        session = self._session
        if session is None:
            raise SessionExpiredError("No active session to refresh")

        generation = self._generation
        try:
            grant = await self._gateway.refresh(session.token)
        except Exception as exc:
            if self._generation == generation:
                await self._fail_refresh(exc)
            raise

        if self._generation != generation:
            raise SessionExpiredError("Session ended while refreshing")

        try:
            refreshed = self._apply_grant(
                grant.token, grant.user or session.user, grant.expires_in
            )
        except StorageUnavailableError as exc:
            # R: El token rotado nunca quedó en storage; se revoca también.
            await self._fail_refresh(exc, rotated_token=grant.token)
            raise
        logger.info("Session refreshed")
        return refreshed

    async def _fail_refresh(
        self, exc: Exception, rotated_token: Optional[str] = None
    ) -> None:
        logger.warning(
            "Token refresh failed",
            extra={"error": str(exc), "error_type": type(exc).__name__},
        )
        token = self._end_session(SessionEndReason.REFRESH_FAILED)
        for stale in (rotated_token, token):
            if stale:
                await self._notify_server_logout(stale)

    def _apply_grant(
        self, token: str, user: SessionUser, expires_in: Optional[float]
    ) -> Session:
        ttl = float(expires_in) if expires_in else self._default_ttl
        session = Session(token=token, user=user, expires_at=self._clock() + ttl)

        # R: Primero storage (atómico); si falla, la memoria no cambia.
        self._storage.set_many(
            {
                TOKEN_KEY: token,
                USER_KEY: json.dumps(user.to_dict()),
                EXPIRY_KEY: str(int(session.expires_at * 1000)),
            }
        )

        self._session = session
        self._generation += 1
        self._state = SessionState.ACTIVE
        self.end_reason = None
        self._schedule_timers(session)
        return session

    def _end_session(self, reason: SessionEndReason) -> Optional[str]:
        """R: Teardown local (timers, memoria, storage). Devuelve el token que había."""
        self._cancel_timers()
        token = self._session.token if self._session else None
        self._session = None
        self._generation += 1
        self._state = SessionState.LOGGED_OUT
        self.end_reason = reason
        self._clear_storage()
        return token

    def _expire(self) -> None:
        logger.info("Session expired")
        token = self._end_session(SessionEndReason.EXPIRED)
        self._spawn_server_logout(token)
        self._notify("on_session_expired")

    def _clear_storage(self) -> None:
        try:
            self._storage.remove_many(SESSION_KEYS)
        except StorageUnavailableError as exc:
            logger.warning(
                "Failed to clear stored session", extra={"error": exc.message}
            )

    @staticmethod
    def _parse_user(raw: Optional[str]) -> Optional[SessionUser]:
        if not raw:
            return None
        try:
            data = json.loads(raw)
        except ValueError:
            return None
        return SessionUser.from_dict(data) if isinstance(data, dict) else None

    @staticmethod
    def _parse_expiry(raw: Optional[str]) -> Optional[float]:
        # R: tokenExpiry se guarda en epoch milisegundos.
        if not raw:
            return None
        try:
            return float(raw) / 1000.0
        except ValueError:
            return None

    # =========================================================
    # Internos: timers y notificaciones
    # =========================================================
    def _schedule_timers(self, session: Session) -> None:
        self._cancel_timers()
        if session.expires_at is None:
            return
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            logger.debug("No running event loop; session timers not scheduled")
            return

        remaining = session.time_until_expiry(self._clock()) or 0.0
        generation = self._generation
        self._warning_handle = loop.call_later(
            max(0.0, remaining - self._warning_lead), self._on_warning_timer, generation
        )
        self._expiry_handle = loop.call_later(
            remaining, self._on_expiry_timer, generation
        )

    def _cancel_timers(self) -> None:
        for handle in (self._warning_handle, self._expiry_handle):
            if handle is not None:
                handle.cancel()
        self._warning_handle = None
        self._expiry_handle = None

    def _on_warning_timer(self, generation: int) -> None:
        if generation != self._generation or self._session is None:
            return
        self._state = SessionState.EXPIRING_SOON
        seconds_left = self._session.time_until_expiry(self._clock()) or 0.0
        self._notify("on_session_warning", seconds_left)

    def _on_expiry_timer(self, generation: int) -> None:
        if generation != self._generation or self._session is None:
            return
        self._expire()

    def _notify(self, callback: str, *args) -> None:
        try:
            getattr(self._notifier, callback)(*args)
        except Exception:
            logger.exception("Session notifier failed", extra={"callback": callback})

    # =========================================================
    # Internos: logout en el servidor (best-effort)
    # =========================================================
    async def _notify_server_logout(self, token: str) -> None:
        try:
            await self._gateway.logout(token)
        except Exception as exc:
            logger.warning(
                "Server logout failed",
                extra={"error": str(exc), "error_type": type(exc).__name__},
            )

    def _spawn_server_logout(self, token: Optional[str]) -> None:
        if not token:
            return
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            logger.debug("No running event loop; server logout skipped")
            return
        task = loop.create_task(self._notify_server_logout(token))
        self._background.add(task)
        task.add_done_callback(self._background.discard)
