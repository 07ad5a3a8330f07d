"""Preview command - show what an import would change."""

from __future__ import annotations

from pathlib import Path

import click
from rich.console import Console

from ...application.models import PreviewRequest
from ...domain.entities.diff import ImportMode
from ..helpers import (
    build_container,
    get_state,
    mode_option,
    owner_option,
    pipeline_errors,
    system_option,
)
from ..presenters.summary import SummaryPresenter

console = Console()


@click.command()
@click.argument("file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@system_option
@mode_option
@owner_option
@click.option(
    "--changes/--no-changes",
    "show_changes",
    default=False,
    show_default=True,
    help="List every change, not only the per-action totals",
)
@click.pass_context
def preview_command(
    ctx: click.Context,
    file: Path,
    system_id: str | None,
    mode: str,
    owner_id: int | None,
    show_changes: bool,
) -> None:
    """Compute the diff between FILE and the database without writing."""
    container = build_container(get_state(ctx), console)
    use_case = container.create_preview_use_case()
    try:
        with pipeline_errors():
            response = use_case.execute(
                PreviewRequest(
                    system_id=system_id,
                    mode=ImportMode(mode),
                    file_path=file,
                    target_owner_id=owner_id,
                )
            )
    finally:
        container.close()

    if response.diff is not None:
        SummaryPresenter(console).present_diff(
            response.diff, response.reassignments, show_changes=show_changes
        )
    if not response.success:
        raise click.ClickException(
            "File has validation errors; run `caregap validate` for details"
        )
