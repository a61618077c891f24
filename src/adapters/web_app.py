"""Superficie HTTP entrante (FastAPI).

- `POST /app/ui`: acción de usuario (add/delete de dominio) + árbol de UI.
- `/app/static`: ficheros estáticos, si el directorio existe.

Toda petición a `/app/ui` trae `Authorization: Bearer <token>`; el token se
canjea contra la plataforma para obtener la instalación del llamante.
"""

from __future__ import annotations

import logging
import re
from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import APIRouter, Depends, FastAPI, Header, HTTPException, Request
from fastapi.staticfiles import StaticFiles

from adapters.http_client import PlatformClient
from adapters.ui_renderer import UiNode, render_state
from core.config import AppSettings
from core.domain.models import TokenIdentity, UiRequest
from core.services.domain_actions import apply_action
from core.services.state_store import StateStore

logger = logging.getLogger(__name__)

BEARER_RE = re.compile(r"^Bearer\s+([a-z0-9-._~+/]+=*)$", re.IGNORECASE)


def parse_bearer(authorization: str | None) -> str | None:
    match = BEARER_RE.match(authorization or "")
    return match.group(1) if match else None


def get_platform(request: Request) -> PlatformClient:
    return request.app.state.platform


def get_store(request: Request) -> StateStore:
    return request.app.state.store


async def require_identity(
    authorization: str | None = Header(default=None),
    platform: PlatformClient = Depends(get_platform),
) -> TokenIdentity:
    token = parse_bearer(authorization)
    if token is None:
        raise HTTPException(status_code=401, detail="Unauthorized")
    return await platform.exchange_token(token)


router = APIRouter()


@router.post("/ui")
async def ui(
    body: UiRequest,
    identity: TokenIdentity = Depends(require_identity),
    store: StateStore = Depends(get_store),
) -> list[UiNode]:
    state = await apply_action(
        store,
        identity.installation_id,
        body.payload.action,
        body.payload.client_state,
    )
    return render_state(state)


def create_app(settings: AppSettings, *, platform: PlatformClient | None = None) -> FastAPI:
    """Construye la app; si no recibe `platform` crea (y cierra) la suya."""

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        if platform is not None:
            yield
            return
        async with PlatformClient(settings) as owned:
            app.state.platform = owned
            app.state.store = StateStore(owned, max_conflict_retries=settings.max_conflict_retries)
            yield

    app = FastAPI(title="ipbridge", lifespan=lifespan)
    if platform is not None:
        app.state.platform = platform
        app.state.store = StateStore(platform, max_conflict_retries=settings.max_conflict_retries)

    app.include_router(router, prefix="/app")

    if settings.static_dir.is_dir():
        app.mount("/app/static", StaticFiles(directory=settings.static_dir), name="static")
    else:
        logger.debug("static dir %s not found, /app/static disabled", settings.static_dir)
    return app
