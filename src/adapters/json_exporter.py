"""Exportación JSON del resultado de una pasada.

Permite guardar el `PassReport` de `poll-once` para otras herramientas o
para comparar pasadas sin volver a consultar la plataforma.
"""

from __future__ import annotations

import json
from pathlib import Path

from core.domain.models import PassReport


def export_pass_report_json(*, report: PassReport, output_path: Path) -> Path:
    """Exporta `PassReport` a JSON UTF-8 con formato estable."""

    output_path.parent.mkdir(parents=True, exist_ok=True)
    payload = report.model_dump(mode="json")
    output_path.write_text(
        json.dumps(payload, ensure_ascii=False, indent=2, sort_keys=True) + "\n",
        encoding="utf-8",
    )
    return output_path
