"""Cliente HTTP de la plataforma remota (wrapper de httpx).

Responsabilidad:
- Estandarizar timeouts, headers y autenticación Bearer de cada request.
- Convertir statuses no exitosos en `HttpError` y fallos de red en
  `TransportError`, para que quien llama pueda distinguirlos.

No reintenta nada: solo quien llama sabe si repetir una operación es seguro.
"""

from __future__ import annotations

import logging
import posixpath
from types import TracebackType
from typing import Any

import httpx

from core.config import AppSettings
from core.domain.errors import HttpError, TransportError
from core.domain.models import Instance, InstanceState, TokenIdentity, VersionedState

logger = logging.getLogger(__name__)

INSTALLATIONS_PATH = "/app/installations"
TOKEN_PATH = "/app/token"

# Sobrescribe sin importar la versión actual.
IF_MATCH_ANY = "*"


def build_async_client(
    settings: AppSettings,
    *,
    extra_headers: dict[str, str] | None = None,
    transport: httpx.AsyncBaseTransport | None = None,
) -> httpx.AsyncClient:
    """Crea un `httpx.AsyncClient` con los defaults del bridge."""

    headers: dict[str, str] = {
        "User-Agent": settings.user_agent,
        "Accept": "application/json",
    }
    if extra_headers:
        headers.update(extra_headers)
    return httpx.AsyncClient(
        timeout=httpx.Timeout(settings.http_timeout_seconds),
        follow_redirects=True,
        headers=headers,
        transport=transport,
    )


def resolve_api_url(base_url: str, api_path: str) -> httpx.URL:
    """Resuelve `api_path` debajo del path de `base_url`.

    `https://host/api` + `/app/installations` -> `https://host/api/app/installations`.
    """

    base = httpx.URL(base_url)
    path = posixpath.normpath(posixpath.join(base.path or "/", "./" + api_path))
    if path.startswith("//"):
        path = "/" + path.lstrip("/")
    return base.copy_with(path=path)


def instance_path(instance_id: str) -> str:
    return f"{INSTALLATIONS_PATH}/{instance_id}"


class PlatformClient:
    """Acceso autenticado a la API REST de la plataforma.

    Se usa como context manager async; si recibe un `httpx.AsyncClient`
    externo no lo cierra.
    """

    def __init__(
        self,
        settings: AppSettings,
        *,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self._settings = settings
        self._owns_client = client is None
        self._client = client or build_async_client(settings)

    async def __aenter__(self) -> "PlatformClient":
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    async def request(
        self,
        api_path: str,
        *,
        method: str = "GET",
        json: Any = None,
        headers: dict[str, str] | None = None,
        token: str | None = None,
    ) -> httpx.Response:
        url = resolve_api_url(self._settings.api_url, api_path)
        merged = {"Authorization": f"Bearer {token or self._settings.api_token}"}
        if headers:
            merged.update(headers)

        try:
            response = await self._client.request(method, url, json=json, headers=merged)
        except httpx.TransportError as exc:
            raise TransportError(f"{method} {url}: {exc!r}") from exc

        logger.debug("%s %s -> %s", method, url, response.status_code)
        if response.is_error:
            raise HttpError(response.status_code, response.reason_phrase)
        return response

    async def list_instances(self) -> list[Instance]:
        response = await self.request(INSTALLATIONS_PATH, method="GET")
        payload = response.json()
        if not isinstance(payload, list):
            raise ValueError(f"expected a list of installations, got {type(payload).__name__}")
        return [Instance.model_validate(item) for item in payload]

    async def get_instance_state(self, instance_id: str) -> VersionedState:
        response = await self.request(instance_path(instance_id), method="GET")
        payload = response.json()
        raw_state = payload.get("state") if isinstance(payload, dict) else None
        return VersionedState(
            state=InstanceState.from_remote(raw_state),
            etag=response.headers.get("etag"),
        )

    async def patch_instance(
        self,
        instance_id: str,
        body: dict[str, Any],
        *,
        if_match: str,
    ) -> httpx.Response:
        return await self.request(
            instance_path(instance_id),
            method="PATCH",
            json=body,
            headers={"If-Match": if_match},
        )

    async def delete_instance(self, instance_id: str) -> None:
        await self.request(instance_path(instance_id), method="DELETE")

    async def exchange_token(self, token: str) -> TokenIdentity:
        """Canjea el bearer token de una petición entrante por su instalación."""

        response = await self.request(TOKEN_PATH, method="POST", json={"token": token})
        return TokenIdentity.model_validate(response.json())
