"""Contrato de resolución de direcciones.

`Protocol` estructural: el descubrimiento de assets depende de esta
abstracción y no de una librería DNS concreta, así los tests pueden
sustituirla por un resolver en memoria.
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable


@runtime_checkable
class AddressResolver(Protocol):
    """Contrato mínimo para resolver un dominio a direcciones IPv4.

    Reglas de diseño:
    - `resolve4` es asíncrono porque hace I/O de red.
    - Un dominio sin respuesta válida lanza `core.domain.errors.ResolutionError`.
    """

    async def resolve4(self, domain: str) -> list[str]:
        """Devuelve las direcciones A de `domain` (puede repetir entradas)."""

        ...
