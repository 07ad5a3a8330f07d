"""Shared plumbing between the click group and its commands."""

from __future__ import annotations

from contextlib import contextmanager
from dataclasses import dataclass, replace
from typing import TYPE_CHECKING, Any

import click

from ..config import ConfigLoader
from ..domain.entities.diff import ImportMode
from ..domain.services.errors import ImportPipelineError
from ..infrastructure.container import DependencyContainer
from ..infrastructure.io.exceptions import ImporterInfrastructureError

if TYPE_CHECKING:
    from collections.abc import Callable, Iterator
    from pathlib import Path

    from rich.console import Console


@dataclass(frozen=True, slots=True)
class CliState:
    verbose: int = 0
    database: Path | None = None
    config_file: Path | None = None


def get_state(ctx: click.Context) -> CliState:
    state = ctx.find_object(CliState)
    return state if state is not None else CliState()


def build_container(state: CliState, console: Console) -> DependencyContainer:
    config = ConfigLoader.load(config_file=state.config_file)
    if state.database is not None:
        config = replace(config, database_path=state.database)
    return DependencyContainer(config=config, verbose=state.verbose, console=console)


def system_option(func: Callable[..., Any]) -> Callable[..., Any]:
    return click.option(
        "--system",
        "system_id",
        help="Healthcare system whose column layout the file follows "
        "(default: the registry default)",
    )(func)


def mode_option(func: Callable[..., Any]) -> Callable[..., Any]:
    return click.option(
        "--mode",
        type=click.Choice([mode.value for mode in ImportMode]),
        default=ImportMode.MERGE.value,
        show_default=True,
        help="replace deletes every stored measure first, merge reconciles",
    )(func)


def owner_option(func: Callable[..., Any]) -> Callable[..., Any]:
    return click.option(
        "--owner-id",
        type=int,
        help="Provider that should own newly created patients",
    )(func)


@contextmanager
def pipeline_errors() -> Iterator[None]:
    """Report pipeline and adapter failures as click errors."""
    try:
        yield
    except (ImportPipelineError, ImporterInfrastructureError) as exc:
        raise click.ClickException(str(exc)) from exc
