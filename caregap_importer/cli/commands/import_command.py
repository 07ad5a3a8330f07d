"""Import command - preview, confirm and apply a spreadsheet.

Preview entries live in process memory, so this command runs the preview
and the execution back to back in a single invocation.
"""

from __future__ import annotations

from pathlib import Path

import click
from rich.console import Console

from ...application.models import PreviewRequest
from ...domain.entities.diff import ImportMode
from ...domain.services.error_reporter import format_report_as_text
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
@click.option("--yes", "-y", "assume_yes", is_flag=True, help="Skip the confirmation prompt")
@click.pass_context
def import_command(
    ctx: click.Context,
    file: Path,
    system_id: str | None,
    mode: str,
    owner_id: int | None,
    assume_yes: bool,
) -> None:
    """Import FILE into the database.

    \b
    merge    keeps stored measures and applies the status merge rules
    replace  deletes every stored measure, then inserts the file's rows

    Examples:

    \b
        caregap import exports/hill_2026_q3.csv --owner-id 7
        caregap --database prod.db import q3.xlsx --mode replace --yes
    """
    container = build_container(get_state(ctx), console)
    presenter = SummaryPresenter(console)
    try:
        with pipeline_errors():
            response = container.create_preview_use_case().execute(
                PreviewRequest(
                    system_id=system_id,
                    mode=ImportMode(mode),
                    file_path=file,
                    target_owner_id=owner_id,
                )
            )
            if not response.success or response.diff is None or response.preview_id is None:
                if response.report is not None:
                    console.print(
                        format_report_as_text(response.report),
                        markup=False,
                        highlight=False,
                    )
                raise click.ClickException("Validation failed; nothing was imported")

            presenter.present_diff(response.diff, response.reassignments)
            if not assume_yes and not click.confirm("Apply these changes?", default=False):
                raise click.Abort()

            result = container.create_import_executor().execute(response.preview_id)
    finally:
        container.close()

    presenter.present_execution(result)
    if not result.success:
        raise click.ClickException("Import rolled back")
