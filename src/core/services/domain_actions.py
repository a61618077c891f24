"""Acciones de usuario sobre los dominios de una instalación.

Los mutadores siguen el contrato de `StateStore.set_state`: devuelven el
estado para pedir escritura o `None` para no escribir (dominio ya presente,
ausente o vacío).
"""

from __future__ import annotations

import logging

from core.domain.models import ClientState, InstanceState, UiAction
from core.services.state_store import StateMutator, StateStore

logger = logging.getLogger(__name__)

ACTION_ADD = "add"
ACTION_DELETE = "delete"


def add_domain(domain: str | None) -> StateMutator:
    def mutate(state: InstanceState) -> InstanceState | None:
        if not domain:
            return None
        if domain in state.domains:
            return None
        state.domains.append(domain)
        return state

    return mutate


def remove_domain(domain: str | None) -> StateMutator:
    def mutate(state: InstanceState) -> InstanceState | None:
        if not domain or domain not in state.domains:
            return None
        state.domains.remove(domain)
        return state

    return mutate


async def apply_action(
    store: StateStore,
    installation_id: str,
    action: UiAction,
    client_state: ClientState,
) -> InstanceState:
    """Aplica `action` y devuelve el estado releído para renderizar."""

    if action.type == ACTION_ADD:
        await store.set_state(installation_id, add_domain(client_state.domain))
    elif action.type == ACTION_DELETE:
        await store.set_state(installation_id, remove_domain(action.domain))
    elif action.type:
        logger.debug("ignoring unknown action %r for %s", action.type, installation_id)

    return await store.get_state(installation_id)
