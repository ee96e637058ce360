"""
============================================================
TARJETA CRC — infrastructure/http/transport.py
============================================================
Class: HttpTransport

Responsibilities:
  - Envolver un httpx.AsyncClient con base URL + timeout.
  - Traducir fallas de transporte (timeout, conexión) a NetworkError.
  - Descartar query params vacíos (None / "").
  - Reintentar SOLO GETs ante fallas transitorias (tenacity).
  - Helpers para leer el body JSON (desnudo o envuelto en {"data": ...}).

Collaborators:
  - httpx (HTTP client)
  - infrastructure/services/retry.create_retry_decorator
  - crosscutting.exceptions (NetworkError, ApiError)
============================================================
"""

from __future__ import annotations

from typing import Any, Mapping, Optional

import httpx

from ...crosscutting.exceptions import ApiError, NetworkError
from ...crosscutting.logger import logger
from ..services.retry import create_retry_decorator

_DEFAULT_HEADERS = {"Content-Type": "application/json"}


def clean_params(params: Optional[Mapping[str, Any]]) -> dict[str, Any]:
    """R: Filtros vacíos no viajan (el backend los interpretaría como "match vacío")."""
    if not params:
        return {}
    return {k: v for k, v in params.items() if v is not None and v != ""}


def read_json(response: httpx.Response) -> Any:
    """R: Body JSON o {} si no hay body parseable."""
    try:
        return response.json()
    except ValueError:
        return {}


def unwrap_data(body: Any) -> Any:
    """R: {"data": X, ...} -> X; cualquier otra forma se devuelve tal cual."""
    if isinstance(body, dict) and "data" in body:
        return body["data"]
    return body


def error_message(response: httpx.Response) -> str:
    body = read_json(response)
    message = body.get("message") if isinstance(body, dict) else None
    return str(message) if message else f"HTTP error! status: {response.status_code}"


def api_error_from_response(response: httpx.Response) -> ApiError:
    return ApiError(error_message(response), status_code=response.status_code)


class HttpTransport:
    """
    Transporte async hacia el backend REST.

    Notas:
      - Si se inyecta `client`, el transport NO lo cierra (dueño externo).
      - `send()` devuelve la respuesta aunque sea 4xx/5xx; la interpretación
        del status la hacen los clientes (auth gateway / api client).
    """

    def __init__(
        self,
        base_url: str,
        *,
        timeout_s: float = 10.0,
        client: Optional[httpx.AsyncClient] = None,
        retry_max_attempts: Optional[int] = None,
        retry_base_delay_s: Optional[float] = None,
        retry_max_delay_s: Optional[float] = None,
    ):
        self._base_url = base_url.rstrip("/")
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(timeout=timeout_s)
        self._timeout = timeout_s
        retrying = create_retry_decorator(
            max_attempts=retry_max_attempts,
            base_delay=retry_base_delay_s,
            max_delay=retry_max_delay_s,
        )
        self._send_idempotent = retrying(self._send_once)

    @property
    def base_url(self) -> str:
        return self._base_url

    def url_for(self, endpoint: str) -> str:
        return f"{self._base_url}/{endpoint.lstrip('/')}"

    async def send(
        self,
        method: str,
        endpoint: str,
        *,
        json: Any = None,
        params: Optional[Mapping[str, Any]] = None,
        headers: Optional[Mapping[str, str]] = None,
    ) -> httpx.Response:
        method = method.upper()
        sender = self._send_idempotent if method == "GET" else self._send_once
        return await sender(
            method,
            endpoint,
            json=json,
            params=clean_params(params),
            headers=dict(headers or {}),
        )

    async def _send_once(
        self,
        method: str,
        endpoint: str,
        *,
        json: Any,
        params: dict[str, Any],
        headers: dict[str, str],
    ) -> httpx.Response:
        url = self.url_for(endpoint)
        try:
            response = await self._client.request(
                method,
                url,
                json=json,
                params=params or None,
                headers={**_DEFAULT_HEADERS, **headers},
                timeout=self._timeout,
            )
        except httpx.TimeoutException as exc:
            raise NetworkError(
                f"Request to {endpoint} timed out", original_error=exc
            ) from exc
        except httpx.TransportError as exc:
            raise NetworkError(
                f"Request to {endpoint} failed: {exc}", original_error=exc
            ) from exc

        logger.debug(
            "Backend response",
            extra={"status_code": response.status_code, "endpoint": endpoint},
        )
        return response

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()
