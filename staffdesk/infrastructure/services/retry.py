"""staffdesk.infrastructure.services.retry

Name: Retry Helper with Exponential Backoff + Jitter

Qué es
------
Utilidad de **resiliencia** para llamadas al backend REST.
Implementa:
  - Clasificación de errores: **transient** (reintentar) vs **permanent** (fail-fast)
  - Reintento por **respuesta** (408/429/5xx) además de por excepción
  - Decorator de `tenacity` con **exponential backoff + jitter**
  - Logging estructurado de cada intento (incluye operation_id del contexto)

CRC (Component Card)
--------------------
Component: retry helper
Responsibilities:
  - Decidir qué errores/respuestas son reintentables
  - Proveer un decorator estándar (tenacity) con backoff+jitter
  - Loguear intentos para debugging
Collaborators:
  - tenacity (motor de retry)
  - crosscutting.config.get_settings (attempts/delays)
  - crosscutting.logger (logging estructurado)
Constraints:
  - Reintentar SOLO fallas transitorias (408, 429, 5xx, NetworkError, timeouts)
  - No reintentar errores permanentes (400, 401, 403, 404)
  - Solo se aplica a requests idempotentes (GET); lo decide el transport
"""

from __future__ import annotations

from typing import Any, Callable, TypeVar

from tenacity import (
    RetryCallState,
    retry,
    retry_if_exception,
    retry_if_result,
    stop_after_attempt,
    wait_exponential_jitter,
)

from ...crosscutting.config import get_settings
from ...crosscutting.exceptions import NetworkError
from ...crosscutting.logger import logger

T = TypeVar("T")


# ---------------------------------------------------------------------------
# HTTP code policies
# ---------------------------------------------------------------------------

# R: HTTP status codes que indican fallas transitorias (reintentables)
TRANSIENT_HTTP_CODES: frozenset[int] = frozenset(
    {
        408,  # Request Timeout
        429,  # Too Many Requests (rate limit)
        500,  # Internal Server Error
        502,  # Bad Gateway
        503,  # Service Unavailable
        504,  # Gateway Timeout
    }
)

# R: HTTP status codes que indican fallas permanentes (no reintentar)
PERMANENT_HTTP_CODES: frozenset[int] = frozenset(
    {
        400,  # Bad Request
        401,  # Unauthorized
        403,  # Forbidden
        404,  # Not Found
    }
)


def get_http_status_code(obj: Any) -> int | None:
    """R: Extrae un status code HTTP de una exception o de una respuesta.

    Soporta:
      - httpx.Response (`status_code`)
      - httpx.HTTPStatusError (`response.status_code`)
      - ApiError (`status_code`)
    """
    status_code = getattr(obj, "status_code", None)
    if isinstance(status_code, int):
        return status_code

    resp = getattr(obj, "response", None)
    if resp is not None:
        status_code = getattr(resp, "status_code", None)
        if isinstance(status_code, int):
            return status_code

    return None


def is_transient_error(exception: BaseException) -> bool:
    """R: Decide si un error es transitorio (reintentar) o permanente (fail-fast).

    Reglas (en orden):
      1) Si hay status code HTTP: permanent → False, transient → True.
      2) NetworkError (timeouts / conexión) → True.
      3) Tipos built-in de red/timeout → True.
      4) Default: fail-fast (False).
    """
    status_code = get_http_status_code(exception)
    if status_code is not None:
        if status_code in PERMANENT_HTTP_CODES:
            return False
        if status_code in TRANSIENT_HTTP_CODES:
            return True

    if isinstance(exception, NetworkError):
        return True

    if isinstance(exception, (TimeoutError, ConnectionError)):
        return True

    return False


def is_transient_response(response: Any) -> bool:
    """R: Una respuesta 408/429/5xx se reintenta igual que una exception."""
    status_code = get_http_status_code(response)
    return status_code is not None and status_code in TRANSIENT_HTTP_CODES


def _log_retry(retry_state: RetryCallState) -> None:
    """R: Loguea cada intento antes de dormir (before_sleep)."""
    fn = getattr(retry_state, "fn", None)
    fn_name = getattr(fn, "__name__", "unknown")
    attempt = getattr(retry_state, "attempt_number", 0)
    wait_time = (
        retry_state.next_action.sleep
        if getattr(retry_state, "next_action", None) is not None
        else 0
    )

    exc: BaseException | None = None
    status_code: int | None = None
    outcome = getattr(retry_state, "outcome", None)
    if outcome is not None:
        if outcome.failed:
            exc = outcome.exception()
        else:
            status_code = get_http_status_code(outcome.result())

    logger.warning(
        "Retrying backend call",
        extra={
            "function": fn_name,
            "attempt": attempt,
            "wait_seconds": round(float(wait_time), 2),
            "status_code": status_code,
            "error": str(exc) if exc else None,
            "error_type": type(exc).__name__ if exc else None,
        },
    )


def _return_last_outcome(retry_state: RetryCallState) -> Any:
    """R: Al agotar intentos, devolvemos la última respuesta (o re-lanzamos su error)."""
    return retry_state.outcome.result()


def create_retry_decorator(
    max_attempts: int | None = None,
    base_delay: float | None = None,
    max_delay: float | None = None,
) -> Callable[[Callable[..., T]], Callable[..., T]]:
    """R: Crea un decorator `tenacity` con exponential backoff + jitter.

    Config:
      - stop: `stop_after_attempt(max_attempts)`
      - wait: `wait_exponential_jitter(initial=base_delay, max=max_delay)`
      - retry: exception transitoria O respuesta transitoria
      - before_sleep: `_log_retry`
      - al agotar: devuelve la última respuesta / propaga la última exception

    Funciona igual sobre funciones sync y async (tenacity detecta corutinas).
    """
    settings = get_settings()

    _max_attempts = (
        settings.retry_max_attempts if max_attempts is None else max_attempts
    )
    _base_delay = (
        settings.retry_base_delay_seconds if base_delay is None else float(base_delay)
    )
    _max_delay = (
        settings.retry_max_delay_seconds if max_delay is None else float(max_delay)
    )

    if _max_attempts <= 0:
        raise ValueError("max_attempts must be > 0")
    if _base_delay < 0:
        raise ValueError("base_delay must be >= 0")
    if _max_delay <= 0:
        raise ValueError("max_delay must be > 0")

    return retry(
        stop=stop_after_attempt(_max_attempts),
        wait=wait_exponential_jitter(
            initial=_base_delay,
            max=_max_delay,
            jitter=_base_delay,
        ),
        retry=(
            retry_if_exception(is_transient_error)
            | retry_if_result(is_transient_response)
        ),
        before_sleep=_log_retry,
        retry_error_callback=_return_last_outcome,
    )
