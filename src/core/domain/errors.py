"""Errores del dominio.

Taxonomía cerrada para fallos al hablar con la plataforma remota:

- `TransportError`: no se pudo llegar al host (DNS, conexión, timeout).
- `HttpError`: la plataforma respondió con un status no exitoso.
- `MissingConcurrencyToken`: una lectura de estado llegó sin ETag.

412 es una condición esperada en el protocolo de actualización condicional,
no un fallo a mostrar: quien llama lo distingue con `is_precondition_failed`.
"""

from __future__ import annotations

PRECONDITION_FAILED = 412


class RemoteError(Exception):
    """Base de los errores recuperables de la plataforma remota."""


class TransportError(RemoteError):
    """Fallo de red alcanzando la plataforma (DNS, reset, timeout)."""


class HttpError(RemoteError):
    """Status HTTP no exitoso devuelto por la plataforma."""

    def __init__(self, status: int, status_text: str = "") -> None:
        super().__init__(f"HTTP status {status}: {status_text}")
        self.status = status
        self.status_text = status_text

    @property
    def is_precondition_failed(self) -> bool:
        return self.status == PRECONDITION_FAILED


class ConflictRetriesExhausted(HttpError):
    """La actualización condicional siguió recibiendo 412 más allá del límite configurado."""

    def __init__(self, instance_id: str, attempts: int) -> None:
        super().__init__(PRECONDITION_FAILED, "Precondition Failed")
        self.instance_id = instance_id
        self.attempts = attempts

    def __str__(self) -> str:
        return (
            f"state update for instance {self.instance_id!r} "
            f"still conflicting after {self.attempts} attempts"
        )


class MissingConcurrencyToken(RemoteError):
    """La lectura del estado no trajo ETag; no se puede escribir de forma condicional."""

    def __init__(self, instance_id: str) -> None:
        super().__init__(f"state read for instance {instance_id!r} returned no ETag")
        self.instance_id = instance_id


class ResolutionError(Exception):
    """Falló la resolución directa de un único dominio."""

    def __init__(self, domain: str, reason: str = "") -> None:
        super().__init__(f"could not resolve {domain}: {reason}" if reason else f"could not resolve {domain}")
        self.domain = domain
        self.reason = reason
