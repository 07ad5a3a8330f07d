import click
from rich.console import Console

from ..helpers import build_container, get_state, pipeline_errors
from ..presenters.summary import SummaryPresenter

console = Console()


@click.command()
@click.pass_context
def systems_command(ctx: click.Context) -> None:
    """List the healthcare systems whose spreadsheets can be imported."""
    container = build_container(get_state(ctx), console)
    with pipeline_errors():
        systems = container.create_system_config_repository().list_systems()
    SummaryPresenter(console).present_systems(systems)
