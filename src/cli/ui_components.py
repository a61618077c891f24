"""Componentes de UI para CLI (Rich).

Separa los detalles visuales de la lógica de comandos para reutilizar
tablas/paneles en varios comandos.
"""

from __future__ import annotations

from rich.align import Align
from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from core.domain.models import InstanceOutcomeStatus, PassReport

_STATUS_STYLE = {
    InstanceOutcomeStatus.SYNCED: "green",
    InstanceOutcomeStatus.DELETED: "yellow",
    InstanceOutcomeStatus.FAILED: "red",
}


def print_banner(console: Console) -> None:
    title = Text("ipbridge", style="bold cyan")
    subtitle = Text("Domains -> IP assets • Platform sync", style="dim")
    body = Align.center(Text.assemble(title, "\n", subtitle), vertical="middle")
    console.print(Panel(body, border_style="cyan", padding=(1, 4)))


def build_pass_table(report: PassReport) -> Table:
    """Tabla con el resultado por instalación de una pasada."""

    table = Table(title="Reconciliation pass")
    table.add_column("Instance", style="cyan", no_wrap=True)
    table.add_column("Status")
    table.add_column("Assets", justify="right")
    table.add_column("Error", style="red")
    for outcome in report.outcomes:
        style = _STATUS_STYLE.get(outcome.status, "white")
        table.add_row(
            outcome.instance_id,
            Text(outcome.status.value, style=style),
            str(outcome.asset_count) if outcome.status is InstanceOutcomeStatus.SYNCED else "-",
            outcome.error or "",
        )
    if not report.outcomes:
        table.caption = "No installations."
    return table
