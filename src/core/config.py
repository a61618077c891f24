"""Configuración del Core.

Centraliza variables de entorno (pydantic-settings) sin contaminar la CLI, y
permite que adaptadores (HTTP/DNS/web) lean config de forma consistente.

`API_URL` y `API_TOKEN` son obligatorias; sin ellas el proceso termina con
código 2 antes de arrancar nada.
"""

from __future__ import annotations

import sys
from pathlib import Path

from pydantic import AliasChoices, Field, ValidationError
from pydantic_settings import BaseSettings, SettingsConfigDict

MISSING_CONFIG_EXIT_CODE = 2

_REQUIRED_ENV = {
    "api_url": "API_URL",
    "api_token": "API_TOKEN",
}


def _project_root() -> Path:
    # core/config.py -> core -> src -> <project_root>
    return Path(__file__).resolve().parents[2]


class AppSettings(BaseSettings):
    """Configuración central de la aplicación."""

    model_config = SettingsConfigDict(
        env_prefix="IPBRIDGE_",
        extra="ignore",
        case_sensitive=False,
        populate_by_name=True,
        env_file=".env",
        env_file_encoding="utf-8",
    )

    api_url: str = Field(
        ...,
        min_length=1,
        validation_alias=AliasChoices("API_URL", "IPBRIDGE_API_URL"),
        description="Base URL de la API de la plataforma (p.ej. https://staging.badrap.io/api).",
    )
    api_token: str = Field(
        ...,
        min_length=1,
        validation_alias=AliasChoices("API_TOKEN", "IPBRIDGE_API_TOKEN"),
        description="Credencial de la integración para autenticarse contra API_URL.",
    )

    host: str = Field(
        default="0.0.0.0",
        validation_alias=AliasChoices("HOST", "IPBRIDGE_HOST"),
        description="Interfaz en la que escucha el servidor HTTP.",
    )
    port: int = Field(
        default=4005,
        ge=1,
        le=65535,
        validation_alias=AliasChoices("PORT", "IPBRIDGE_PORT"),
        description="Puerto del servidor HTTP.",
    )

    poll_interval_seconds: float = Field(
        default=10.0,
        gt=0,
        description="Pausa entre pasadas de reconciliación (segundos).",
    )
    http_timeout_seconds: float = Field(
        default=20.0,
        gt=0,
        description="Timeout por request contra la plataforma (segundos).",
    )
    user_agent: str = Field(
        default="ipbridge/0.1",
        min_length=1,
        description="User-Agent para peticiones a la plataforma.",
    )
    max_conflict_retries: int | None = Field(
        default=None,
        ge=0,
        description="Reintentos máximos ante 412 en actualizaciones condicionales (None = sin límite).",
    )

    discovery_max_concurrency: int = Field(
        default=1,
        ge=1,
        le=256,
        description="Resoluciones DNS simultáneas por instalación (1 = secuencial).",
    )
    dns_timeout_seconds: float = Field(
        default=5.0,
        gt=0,
        description="Timeout total por resolución DNS (segundos).",
    )

    static_dir: Path = Field(
        default_factory=lambda: _project_root() / "static",
        description="Directorio servido bajo /app/static.",
    )
    log_level: str = Field(
        default="INFO",
        min_length=1,
        description="Nivel de logging (DEBUG, INFO, WARNING...).",
    )


def _missing_required(exc: ValidationError) -> list[str]:
    missing: list[str] = []
    for error in exc.errors():
        if error.get("type") not in ("missing", "string_too_short"):
            continue
        loc = error.get("loc") or ()
        field = str(loc[0]) if loc else ""
        for name, env_key in _REQUIRED_ENV.items():
            if field in (name, env_key, f"IPBRIDGE_{env_key}"):
                missing.append(env_key)
    return missing


def load_settings(**overrides: object) -> AppSettings:
    """Carga `AppSettings` o termina el proceso si falta configuración obligatoria."""

    try:
        return AppSettings(**overrides)  # type: ignore[arg-type]
    except ValidationError as exc:
        missing = _missing_required(exc)
        if not missing:
            raise
        for key in missing:
            print(f"ERROR: environment variable {key} not set", file=sys.stderr)
        raise SystemExit(MISSING_CONFIG_EXIT_CODE) from exc
