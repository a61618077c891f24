"""Bucle de reconciliación de assets.

Una pasada (`poll_once`) recorre todas las instalaciones:

- instalación dada de baja -> DELETE y nada más;
- resto -> GET del estado, resolución de `domains` y PATCH de `assets`
  con `If-Match: *` (los assets solo los escribe este bridge).

Los fallos HTTP/de red de una instalación se registran y la pasada sigue con
la siguiente. Un fallo al listar instalaciones aborta la pasada. Cualquier
otra excepción es un bug y se propaga.

`run` repite pasadas cada `poll_interval_seconds` hasta que se activa el
`stop_event` (o se alcanza `max_passes`).
"""

from __future__ import annotations

import asyncio
import logging

from adapters.http_client import IF_MATCH_ANY, PlatformClient
from core.config import AppSettings
from core.domain.errors import RemoteError
from core.domain.models import (
    Instance,
    InstanceOutcome,
    InstanceOutcomeStatus,
    PassReport,
)
from core.interfaces.resolver import AddressResolver
from core.services.asset_discovery import discover_assets

logger = logging.getLogger(__name__)


class Reconciler:
    def __init__(
        self,
        *,
        settings: AppSettings,
        client: PlatformClient,
        resolver: AddressResolver,
    ) -> None:
        self._settings = settings
        self._client = client
        self._resolver = resolver

    async def sync_instance(self, instance: Instance) -> InstanceOutcome:
        if instance.removed:
            await self._client.delete_instance(instance.id)
            logger.info("instance %s removed upstream, deleted", instance.id)
            return InstanceOutcome(instance_id=instance.id, status=InstanceOutcomeStatus.DELETED)

        versioned = await self._client.get_instance_state(instance.id)
        assets = await discover_assets(
            versioned.state.domains,
            resolver=self._resolver,
            max_concurrency=self._settings.discovery_max_concurrency,
        )
        await self._client.patch_instance(
            instance.id,
            {"assets": [asset.model_dump(mode="json") for asset in assets]},
            if_match=IF_MATCH_ANY,
        )
        return InstanceOutcome(
            instance_id=instance.id,
            status=InstanceOutcomeStatus.SYNCED,
            asset_count=len(assets),
        )

    async def poll_once(self) -> PassReport:
        report = PassReport()
        for instance in await self._client.list_instances():
            try:
                outcome = await self.sync_instance(instance)
            except RemoteError as exc:
                logger.warning("instance %s failed to sync: %s", instance.id, exc)
                outcome = InstanceOutcome(
                    instance_id=instance.id,
                    status=InstanceOutcomeStatus.FAILED,
                    error=str(exc),
                )
            report.outcomes.append(outcome)

        logger.info(
            "pass done: %d synced, %d deleted, %d failed",
            report.count(InstanceOutcomeStatus.SYNCED),
            report.count(InstanceOutcomeStatus.DELETED),
            report.count(InstanceOutcomeStatus.FAILED),
        )
        return report

    async def run(
        self,
        stop_event: asyncio.Event | None = None,
        *,
        max_passes: int | None = None,
    ) -> int:
        """Ejecuta pasadas hasta `stop_event` o `max_passes`; devuelve las pasadas hechas."""

        stop_event = stop_event or asyncio.Event()
        passes = 0
        while not stop_event.is_set():
            try:
                await self.poll_once()
            except RemoteError as exc:
                logger.warning("poll pass failed: %s", exc)
            passes += 1
            if max_passes is not None and passes >= max_passes:
                break
            try:
                await asyncio.wait_for(stop_event.wait(), timeout=self._settings.poll_interval_seconds)
            except asyncio.TimeoutError:
                pass
        return passes
