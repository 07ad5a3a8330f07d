from __future__ import annotations

from pathlib import Path

import click

from .commands.import_command import import_command
from .commands.preview import preview_command
from .commands.systems import systems_command
from .commands.validate import validate_command
from .helpers import CliState


@click.group()
@click.option(
    "-v", "--verbose", count=True, help="Increase verbosity level (e.g., -v, -vv)"
)
@click.option(
    "--database",
    type=click.Path(dir_okay=False, path_type=Path),
    help="SQLite database file (default: caregap.db or $CAREGAP_DATABASE)",
)
@click.option(
    "--config",
    "config_file",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help="Path to a caregap_importer.toml config file",
)
@click.pass_context
def app(
    ctx: click.Context, verbose: int, database: Path | None, config_file: Path | None
) -> None:
    """Import care-gap spreadsheets into the patient measure store."""
    ctx.obj = CliState(verbose=verbose, database=database, config_file=config_file)


app.add_command(systems_command, name="systems")
app.add_command(validate_command, name="validate")
app.add_command(preview_command, name="preview")
app.add_command(import_command, name="import")
__all__ = ["app"]
