"""Validate command - check a spreadsheet without touching the database."""

from __future__ import annotations

from pathlib import Path

import click
from rich.console import Console

from ...application.models import PreviewRequest
from ...domain.services.error_reporter import format_report_as_text
from ..helpers import build_container, get_state, pipeline_errors, system_option

console = Console()


@click.command()
@click.argument("file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@system_option
@click.pass_context
def validate_command(ctx: click.Context, file: Path, system_id: str | None) -> None:
    """Map, transform and validate FILE, then print the validation report.

    Exits with status 1 when any row has a blocking error.

    Examples:

    \b
        caregap validate exports/hill_2026_q3.csv
        caregap validate exports/hill_2026_q3.xlsx --system hill
    """
    container = build_container(get_state(ctx), console)
    use_case = container.create_preview_use_case()
    try:
        with pipeline_errors():
            response = use_case.execute(
                PreviewRequest(system_id=system_id, file_path=file, validate_only=True)
            )
    finally:
        container.close()

    if response.report is not None:
        console.print(format_report_as_text(response.report), markup=False, highlight=False)
    if not response.success:
        raise click.ClickException("Validation failed")
