"""ipbridge CLI (Typer).

Commands:
- `serve`: HTTP endpoint plus the reconciliation loop in one event loop.
- `poll-once`: a single reconciliation pass, printed as a table.
- `doctor`: environment diagnostics.
"""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path

import typer
import uvicorn
from rich.console import Console

from adapters.dns_resolver import DnsPythonResolver
from adapters.http_client import PlatformClient
from adapters.json_exporter import export_pass_report_json
from adapters.web_app import create_app
from cli import doctor
from cli.ui_components import build_pass_table, print_banner
from core.config import AppSettings, load_settings
from core.domain.errors import RemoteError
from core.domain.models import PassReport
from core.logging_setup import setup_logging
from core.services.reconciler import Reconciler

logger = logging.getLogger(__name__)

app = typer.Typer(no_args_is_help=True, help="Sync DNS-discovered IP assets into the platform.")
app.add_typer(doctor.app, name="doctor")

_console = Console()

FATAL_EXIT_CODE = 1


async def _serve(settings: AppSettings) -> int:
    async with PlatformClient(settings) as platform:
        reconciler = Reconciler(
            settings=settings,
            client=platform,
            resolver=DnsPythonResolver(settings),
        )
        config = uvicorn.Config(
            create_app(settings, platform=platform),
            host=settings.host,
            port=settings.port,
            log_level=settings.log_level.lower(),
        )
        server = uvicorn.Server(config)
        stop = asyncio.Event()

        poller = asyncio.create_task(reconciler.run(stop), name="reconciler")
        serving = asyncio.create_task(server.serve(), name="http")
        logger.info("Listening on port %s...", config.port)

        await asyncio.wait({poller, serving}, return_when=asyncio.FIRST_COMPLETED)

        if not poller.done():
            stop.set()
        else:
            server.should_exit = True
        await serving

        try:
            await poller
        except Exception:
            logger.critical("reconciliation loop crashed", exc_info=True)
            return FATAL_EXIT_CODE
    return 0


async def _poll_once(settings: AppSettings) -> PassReport:
    async with PlatformClient(settings) as platform:
        reconciler = Reconciler(
            settings=settings,
            client=platform,
            resolver=DnsPythonResolver(settings),
        )
        return await reconciler.poll_once()


@app.command()
def serve(
    port: int | None = typer.Option(None, "--port", "-p", help="Override PORT."),
    host: str | None = typer.Option(None, "--host", help="Override HOST."),
    quiet: bool = typer.Option(False, "--quiet", "-q", help="Skip the banner."),
) -> None:
    """Run the UI endpoint and the reconciliation loop until stopped."""

    overrides: dict[str, object] = {}
    if port is not None:
        overrides["port"] = port
    if host is not None:
        overrides["host"] = host
    settings = load_settings(**overrides)
    setup_logging(settings)
    if not quiet:
        print_banner(_console)

    code = asyncio.run(_serve(settings))
    if code:
        raise typer.Exit(code=code)


@app.command(name="poll-once")
def poll_once(
    output: Path | None = typer.Option(None, "--output", "-o", help="Also write the pass report as JSON."),
) -> None:
    """Run a single reconciliation pass and print the result."""

    settings = load_settings()
    setup_logging(settings)
    try:
        report = asyncio.run(_poll_once(settings))
    except RemoteError as exc:
        _console.print(f"[red]Pass failed:[/red] {exc}")
        raise typer.Exit(code=1) from exc

    _console.print(build_pass_table(report))
    if output is not None:
        path = export_pass_report_json(report=report, output_path=output)
        _console.print(f"[green]Report saved to:[/green] {path}")
    if report.failed:
        raise typer.Exit(code=1)


def run() -> None:
    app()


if __name__ == "__main__":
    run()
