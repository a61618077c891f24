"""Configuración de logging del proceso (stdlib logging + Rich)."""

from __future__ import annotations

import logging

from rich.console import Console
from rich.logging import RichHandler

from core.config import AppSettings


def setup_logging(settings: AppSettings, *, console: Console | None = None) -> None:
    handler = RichHandler(
        console=console or Console(stderr=True),
        show_path=False,
        rich_tracebacks=True,
    )
    logging.basicConfig(
        level=getattr(logging, settings.log_level.upper(), logging.INFO),
        format="%(name)s: %(message)s",
        datefmt="[%X]",
        handlers=[handler],
        force=True,
    )
    # El log de peticiones lo emite el access logger de uvicorn.
    logging.getLogger("httpx").setLevel(logging.WARNING)
