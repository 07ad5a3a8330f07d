from __future__ import annotations

from typing import TYPE_CHECKING

from rich.table import Table

from ...domain.entities.diff import DiffAction

if TYPE_CHECKING:
    from collections.abc import Sequence

    from rich.console import Console

    from ...application.models import ExecutionResult
    from ...domain.entities.diff import DiffResult, PatientReassignment
    from ...domain.entities.system_config import SystemInfo

_ACTION_STYLES = {
    DiffAction.INSERT: "green",
    DiffAction.UPDATE: "yellow",
    DiffAction.SKIP: "dim",
    DiffAction.BOTH: "magenta",
    DiffAction.DELETE: "red",
}


class SummaryPresenter:
    pass

    def __init__(self, console: Console, *, max_changes: int = 50) -> None:
        super().__init__()
        self.console = console
        self.max_changes = max_changes

    def present_systems(self, systems: Sequence[SystemInfo]) -> None:
        table = self._table("Registered Systems")
        table.add_column("ID", style="cyan", no_wrap=True)
        table.add_column("Name")
        table.add_column("Default", justify="center", style="green")
        for system in systems:
            table.add_row(system.id, system.name, "✓" if system.is_default else "")
        self.console.print(table)

    def present_diff(
        self,
        diff: DiffResult,
        reassignments: Sequence[PatientReassignment] = (),
        *,
        show_changes: bool = False,
    ) -> None:
        self.console.print()
        self.console.print(self._build_diff_table(diff))
        self.console.print(
            f"Patients: [bold]{diff.new_patients}[/bold] new, "
            f"[bold]{diff.existing_patients}[/bold] existing"
        )
        if show_changes and diff.changes:
            self.console.print(self._build_changes_table(diff))
        if reassignments:
            self._print_reassignments(reassignments)

    def present_execution(self, result: ExecutionResult) -> None:
        table = self._table("Import Result")
        table.add_column("Outcome", style="cyan", no_wrap=True)
        table.add_column("Count", justify="right", style="yellow")
        stats = result.stats
        table.add_row("Inserted", f"{stats.inserted:,}")
        table.add_row("Updated", f"{stats.updated:,}")
        table.add_row("Deleted", f"{stats.deleted:,}")
        table.add_row("Skipped", f"{stats.skipped:,}")
        table.add_row("Kept both", f"{stats.both_kept:,}")
        table.add_section()
        table.add_row("[bold]Duration[/bold]", f"{result.duration_ms:.0f} ms")
        self.console.print()
        self.console.print(table)
        if result.errors:
            self.console.print(f"[red]{len(result.errors)} change(s) failed:[/red]")
            for error in result.errors:
                where = ""
                if error.source_row_index is not None:
                    where = f"Row {error.source_row_index + 1}: "
                self.console.print(f"  [red]•[/red] {where}{error.message}")

    def _build_diff_table(self, diff: DiffResult) -> Table:
        table = self._table(f"Import Preview ({diff.mode.value})")
        table.add_column("Action", style="cyan", no_wrap=True)
        table.add_column("Changes", justify="right", style="yellow")
        summary = diff.summary
        for action, count in (
            (DiffAction.INSERT, summary.inserts),
            (DiffAction.UPDATE, summary.updates),
            (DiffAction.SKIP, summary.skips),
            (DiffAction.BOTH, summary.duplicates),
            (DiffAction.DELETE, summary.deletes),
        ):
            style = _ACTION_STYLES[action]
            table.add_row(f"[{style}]{action.value}[/{style}]", f"{count:,}")
        table.add_section()
        table.add_row("[bold]Total[/bold]", f"[bold yellow]{summary.total:,}[/bold yellow]")
        return table

    def _build_changes_table(self, diff: DiffResult) -> Table:
        table = self._table("Changes")
        table.add_column("Action", no_wrap=True)
        table.add_column("Patient", style="white")
        table.add_column("Measure", overflow="fold")
        table.add_column("Old", style="dim", overflow="fold")
        table.add_column("New", overflow="fold")
        table.add_column("Reason", style="dim", overflow="fold", ratio=2)
        for change in diff.changes[: self.max_changes]:
            style = _ACTION_STYLES[change.action]
            table.add_row(
                f"[{style}]{change.action.value}[/{style}]",
                change.member_name,
                change.quality_measure,
                change.old_status or "",
                change.new_status or "",
                change.reason,
            )
        hidden = len(diff.changes) - self.max_changes
        if hidden > 0:
            table.add_section()
            table.add_row("", f"[dim]... {hidden:,} more[/dim]", "", "", "", "")
        return table

    def _print_reassignments(self, reassignments: Sequence[PatientReassignment]) -> None:
        self.console.print(
            f"[yellow]⚠[/yellow] {len(reassignments)} existing patient(s) "
            "belong to another owner:"
        )
        for item in reassignments:
            self.console.print(
                f"  • {item.member_name} ({item.member_dob}): "
                f"owner {item.current_owner_id} → {item.target_owner_id}"
            )

    @staticmethod
    def _table(title: str) -> Table:
        return Table(
            title=title,
            show_header=True,
            header_style="bold cyan",
            border_style="bright_blue",
            title_style="bold magenta",
        )
