"""Resolver DNS (dnspython, asíncrono).

Implementa `core.interfaces.resolver.AddressResolver` con `dns.asyncresolver`.
Cualquier `DNSException` (NXDOMAIN, NoAnswer, timeout, sin nameservers) se
convierte en `ResolutionError`; el descubrimiento decide qué hacer con ella.
"""

from __future__ import annotations

import dns.asyncresolver
import dns.exception
import dns.rdatatype

from core.config import AppSettings
from core.domain.errors import ResolutionError
from core.interfaces.resolver import AddressResolver


class DnsPythonResolver(AddressResolver):
    """Consulta registros A con la configuración DNS del sistema."""

    def __init__(
        self,
        settings: AppSettings | None = None,
        *,
        resolver: dns.asyncresolver.Resolver | None = None,
    ) -> None:
        self._resolver = resolver or dns.asyncresolver.Resolver()
        if settings is not None:
            self._resolver.lifetime = settings.dns_timeout_seconds

    async def resolve4(self, domain: str) -> list[str]:
        try:
            answer = await self._resolver.resolve(domain, dns.rdatatype.A)
        except dns.exception.DNSException as exc:
            raise ResolutionError(domain, exc.__class__.__name__) from exc
        return [rdata.address for rdata in answer]
