"""Doctor command for environment diagnostics."""

from __future__ import annotations

import asyncio

import typer
from rich.console import Console
from rich.table import Table

from adapters.dns_resolver import DnsPythonResolver
from adapters.http_client import PlatformClient
from core.config import AppSettings, load_settings
from core.domain.errors import RemoteError, ResolutionError

app = typer.Typer(no_args_is_help=True, help="Environment diagnostics and configuration checks.")

_console = Console()


def _mask(secret: str) -> str:
    if len(secret) <= 8:
        return "*" * len(secret)
    return f"{secret[:4]}…{secret[-2:]}"


async def _check_platform(settings: AppSettings) -> tuple[bool, str]:
    try:
        async with PlatformClient(settings) as client:
            instances = await client.list_instances()
    except RemoteError as exc:
        return False, str(exc)
    removed = sum(1 for instance in instances if instance.removed)
    return True, f"{len(instances)} installations ({removed} removed)"


async def _check_dns(settings: AppSettings, domain: str) -> tuple[bool, str]:
    try:
        ips = await DnsPythonResolver(settings).resolve4(domain)
    except ResolutionError as exc:
        return False, str(exc)
    return True, f"{domain} -> {', '.join(ips)}"


@app.command()
def run(
    probe_domain: str = typer.Option(
        "example.com",
        "--probe-domain",
        help="Domain resolved to check DNS.",
    ),
) -> None:
    """Run baseline diagnostics against the platform and DNS."""

    settings = load_settings()

    table = Table(title="ipbridge Doctor")
    table.add_column("Check", style="bright_green", no_wrap=True)
    table.add_column("Status", style="white")
    table.add_column("Details", style="dim")

    table.add_row("API URL", "OK", settings.api_url)
    table.add_row("API token", "OK", _mask(settings.api_token))
    if settings.max_conflict_retries is None:
        table.add_row("Conflict retries", "OK", "unbounded")
    else:
        table.add_row("Conflict retries", "OK", str(settings.max_conflict_retries))

    ok_api, detail_api = asyncio.run(_check_platform(settings))
    table.add_row("Platform API", "OK" if ok_api else "FAIL", detail_api)

    ok_dns, detail_dns = asyncio.run(_check_dns(settings, probe_domain))
    table.add_row("DNS resolution", "OK" if ok_dns else "FAIL", detail_dns)

    _console.print(table)

    if not ok_api:
        _console.print(
            "\n[yellow]Note:[/yellow] check API_URL and API_TOKEN; the bridge retries every pass but will not sync until the API answers."
        )
    if not (ok_api and ok_dns):
        raise typer.Exit(code=1)
