"""Modelos del dominio (Pydantic v2).

Estos modelos describen *qué* intercambia el bridge con la plataforma remota
(instalaciones, estado por instalación, assets), no *cómo* se obtiene.

Nota:
- `InstanceState` conserva claves desconocidas: el documento de estado es
  compartido con la plataforma y reescribirlo no debe perder campos ajenos.
"""

from __future__ import annotations

from enum import Enum
from typing import Any, Literal

from pydantic import BaseModel, Field
from pydantic.config import ConfigDict


class Instance(BaseModel):
    """Una instalación (tenant/cuenta) gestionada por la plataforma remota."""

    model_config = ConfigDict(extra="ignore", coerce_numbers_to_str=True)

    id: str = Field(
        ...,
        min_length=1,
        description="Identificador opaco y estable de la instalación.",
    )
    removed: bool = Field(
        default=False,
        description="La plataforma marcó la instalación como dada de baja.",
    )


class InstanceState(BaseModel):
    """Documento de estado por instalación.

    `domains` mantiene orden de inserción; quien escribe evita duplicados.
    """

    model_config = ConfigDict(extra="allow")

    domains: list[str] = Field(
        default_factory=list,
        description="Dominios a resolver para esta instalación.",
    )

    @classmethod
    def from_remote(cls, raw: object) -> "InstanceState":
        # La plataforma devuelve `null` si la instalación nunca guardó estado.
        if not isinstance(raw, dict):
            return cls()
        data = dict(raw)
        if data.get("domains") is None:
            data.pop("domains", None)
        return cls.model_validate(data)

    def to_remote(self) -> dict[str, Any]:
        return self.model_dump(mode="json")


class VersionedState(BaseModel):
    """Estado leído junto con su token de concurrencia (ETag)."""

    state: InstanceState
    etag: str | None = None


class AssetData(BaseModel):
    location: str


class Asset(BaseModel):
    """Asset de red derivado de un dominio; se regenera en cada pasada."""

    type: Literal["ip"] = "ip"
    ip: str = Field(..., min_length=1, description="Dirección resuelta.")
    key: str = Field(
        ...,
        min_length=1,
        description="Dominio origen; clave estable entre pasadas aunque cambie la IP.",
    )
    data: AssetData


class TokenIdentity(BaseModel):
    """Identidad resultante de canjear el bearer token de una petición de UI."""

    model_config = ConfigDict(extra="ignore", populate_by_name=True, coerce_numbers_to_str=True)

    installation_id: str = Field(..., alias="installationId", min_length=1)


class UiAction(BaseModel):
    model_config = ConfigDict(extra="ignore")

    type: str | None = None
    domain: str | None = None


class ClientState(BaseModel):
    model_config = ConfigDict(extra="ignore")

    domain: str | None = None


class UiPayload(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    action: UiAction = Field(default_factory=UiAction)
    client_state: ClientState = Field(default_factory=ClientState, alias="clientState")


class UiRequest(BaseModel):
    model_config = ConfigDict(extra="ignore")

    payload: UiPayload = Field(default_factory=UiPayload)


class InstanceOutcomeStatus(str, Enum):
    SYNCED = "synced"
    DELETED = "deleted"
    FAILED = "failed"


class InstanceOutcome(BaseModel):
    instance_id: str
    status: InstanceOutcomeStatus
    asset_count: int = 0
    error: str | None = None


class PassReport(BaseModel):
    """Resumen de una pasada de reconciliación."""

    outcomes: list[InstanceOutcome] = Field(default_factory=list)

    def count(self, status: InstanceOutcomeStatus) -> int:
        return sum(1 for outcome in self.outcomes if outcome.status is status)

    @property
    def failed(self) -> list[InstanceOutcome]:
        return [o for o in self.outcomes if o.status is InstanceOutcomeStatus.FAILED]
