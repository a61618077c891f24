"""Acceso optimista al estado remoto de cada instalación.

Protocolo de `set_state` (read-modify-write condicional):

1. GET de la instalación; se guarda el ETag y el estado.
2. Se invoca el mutador (sync o async). Puede modificar el estado in-place y
   devolverlo para pedir escritura, o devolver un valor falsy para no escribir.
3. Sin escritura: se devuelve el estado leído y no hay PATCH.
4. PATCH de `state` con `If-Match: <etag>`.
5. 412: alguien escribió entre 1 y 4; se descarta todo y se vuelve a 1,
   sin espera.
6. Éxito: se devuelve el estado escrito.

Cualquier otro error HTTP o de transporte se propaga tal cual. Una lectura
sin ETag no se escribe nunca: lanza `MissingConcurrencyToken`. No hay locks
locales: la consistencia depende únicamente de la escritura condicional del
servidor.
"""

from __future__ import annotations

import inspect
import logging
from typing import Awaitable, Callable, Union

from adapters.http_client import PlatformClient
from core.domain.errors import ConflictRetriesExhausted, HttpError, MissingConcurrencyToken
from core.domain.models import InstanceState

logger = logging.getLogger(__name__)

MutationResult = Union[InstanceState, None]
StateMutator = Callable[[InstanceState], Union[MutationResult, Awaitable[MutationResult]]]


class StateStore:
    """Lecturas y escrituras condicionales del estado de cada instalación."""

    def __init__(
        self,
        client: PlatformClient,
        *,
        max_conflict_retries: int | None = None,
    ) -> None:
        self._client = client
        self._max_conflict_retries = max_conflict_retries

    async def get_state(self, instance_id: str) -> InstanceState:
        """Lectura incondicional, sin ETag (para renderizar)."""

        versioned = await self._client.get_instance_state(instance_id)
        return versioned.state

    async def set_state(self, instance_id: str, mutate: StateMutator) -> InstanceState:
        conflicts = 0
        while True:
            versioned = await self._client.get_instance_state(instance_id)
            state = versioned.state

            new_state = mutate(state)
            if inspect.isawaitable(new_state):
                new_state = await new_state
            if not new_state:
                return state

            etag = versioned.etag
            if etag is None:
                raise MissingConcurrencyToken(instance_id)

            try:
                await self._client.patch_instance(
                    instance_id,
                    {"state": new_state.to_remote()},
                    if_match=etag,
                )
            except HttpError as exc:
                if not exc.is_precondition_failed:
                    raise
                conflicts += 1
                logger.debug(
                    "state of instance %s changed since read (etag %s), retrying",
                    instance_id,
                    etag,
                )
                if self._max_conflict_retries is not None and conflicts > self._max_conflict_retries:
                    raise ConflictRetriesExhausted(instance_id, conflicts) from exc
                continue
            return new_state
