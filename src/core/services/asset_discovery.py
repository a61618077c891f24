"""Descubrimiento de assets a partir de dominios.

Cada pasada resuelve desde cero (sin caché ni memoización de negativos) y
produce un asset por cada par `(dominio, ip)`. Un dominio que no resuelve
aporta cero assets y no corta el lote.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Iterable

from core.domain.errors import ResolutionError
from core.domain.models import Asset, AssetData
from core.interfaces.resolver import AddressResolver

logger = logging.getLogger(__name__)


def build_asset(domain: str, ip: str) -> Asset:
    return Asset(type="ip", ip=ip, key=domain, data=AssetData(location=domain))


async def resolve_domain(resolver: AddressResolver, domain: str) -> list[Asset]:
    """Assets de un único dominio; vacío si la resolución falla."""

    try:
        ips = await resolver.resolve4(domain)
    except ResolutionError as exc:
        logger.debug("no addresses for %s: %s", domain, exc)
        return []
    # Se conservan duplicados; deduplicar es cosa de la plataforma.
    return [build_asset(domain, ip) for ip in ips or []]


async def discover_assets(
    domains: Iterable[str],
    *,
    resolver: AddressResolver,
    max_concurrency: int = 1,
) -> list[Asset]:
    """Resuelve `domains` y devuelve la lista completa de assets.

    Con `max_concurrency > 1` las resoluciones corren en paralelo acotado;
    el resultado sigue agrupado en el orden de entrada.
    """

    domain_list = list(domains)
    if max_concurrency <= 1:
        assets: list[Asset] = []
        for domain in domain_list:
            assets.extend(await resolve_domain(resolver, domain))
        return assets

    sem = asyncio.Semaphore(max_concurrency)

    async def resolve_one(domain: str) -> list[Asset]:
        async with sem:
            return await resolve_domain(resolver, domain)

    results = await asyncio.gather(*(resolve_one(d) for d in domain_list))
    return [asset for batch in results for asset in batch]
