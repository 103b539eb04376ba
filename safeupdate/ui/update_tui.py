"""Terminal output for safeupdate.

This module provides the UpdateTUI class, a Rich-based display layer for
update plans, merge results, diff reports and version detection. It never
prompts; every decision is left to the user after reading the report.

Example:
    from safeupdate.ui import UpdateTUI

    tui = UpdateTUI()
    tui.display_plan(plan, project_root, upstream_root)
    tui.display_version_match(match)
"""

from pathlib import Path
from typing import List, Optional, Sequence, Tuple

from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from safeupdate.merging import render_diff_report
from safeupdate.models import (
    Confidence,
    DiffReport,
    FileState,
    MergeOutcomeKind,
    MergeProposal,
    ReviewStrategy,
    SemanticMergeResult,
    UpdateAction,
    UpdatePlan,
    VersionMatch,
)

# Rich style per action, most attention-worthy last
ACTION_STYLES = {
    UpdateAction.SKIP: "dim",
    UpdateAction.ADD: "green",
    UpdateAction.UPDATE: "cyan",
    UpdateAction.REMOVE: "magenta",
    UpdateAction.PRESERVE: "blue",
    UpdateAction.MERGE: "bold red",
}


class UpdateTUI:
    """Rich-based display for update planning results.

    Args:
        console: Optional Rich Console instance for output. If None, creates
            a new Console. Pass a custom Console for testing (e.g., with
            StringIO file for output capture).

    Attributes:
        console: The Rich Console instance used for all output.
    """

    def __init__(self, console: Optional[Console] = None) -> None:
        self.console = console or Console()

    def display_plan(self, plan: UpdatePlan, project_root: Path, upstream_root: Path) -> None:
        """Display per-action counts and the files needing attention.

        Args:
            plan: The UpdatePlan to show.
            project_root: The project that was classified.
            upstream_root: The upstream release directory.
        """
        header_text = (
            f"Project: {escape(str(project_root))}\n"
            f"Upstream: {escape(str(upstream_root))}\n"
            f"Files considered: {len(plan.states):,}"
        )
        self.console.print(Panel(header_text, title="Update Plan", border_style="blue"))

        if not plan.states:
            self.console.print("[yellow]No files to consider.[/yellow]")
            return

        counts = Table(show_header=True, header_style="bold")
        counts.add_column("Action", style="cyan")
        counts.add_column("Files", justify="right")
        for action in UpdateAction:
            counts.add_row(self._format_action(action), f"{plan.count(action):,}")
        self.console.print(counts)

        actionable = [s for s in plan.states if s.action is not UpdateAction.SKIP]
        if actionable:
            table = Table(title="Files")
            table.add_column("Path", style="white")
            table.add_column("Action", justify="center")
            table.add_column("Customized", justify="center")
            table.add_column("Upstream changed", justify="center")
            table.add_column("Review", style="magenta")
            for state in actionable:
                proposal = plan.proposals.get(state.path)
                table.add_row(
                    escape(self._truncate_name(state.path)),
                    self._format_action(state.action),
                    self._format_flag(state.is_customized),
                    self._format_flag(state.has_upstream_changes),
                    proposal.strategy.value if proposal is not None else "",
                )
            self.console.print(table)

        for proposal in plan.proposals.values():
            self.display_proposal(proposal)

        if plan.errors:
            self._display_errors(plan.errors)

    def display_classification(self, state: FileState) -> None:
        """Display the classification of a single file."""
        table = Table(show_header=True, header_style="bold")
        table.add_column("Field", style="cyan")
        table.add_column("Value")

        table.add_row("Path", escape(state.path))
        table.add_row("Original hash", state.original_hash or "[dim]none[/dim]")
        table.add_row("Current hash", state.current_hash or "[dim]absent[/dim]")
        table.add_row("Upstream hash", state.upstream_hash or "[dim]absent[/dim]")
        table.add_row("Customized", self._format_flag(state.is_customized))
        table.add_row("Upstream changed", self._format_flag(state.has_upstream_changes))
        table.add_row("Action", self._format_action(state.action))

        self.console.print(Panel(table, title="Classification", border_style="blue"))

    def display_hashes(self, rows: Sequence[Tuple[str, str]]) -> None:
        """Display normalized hashes, one "<hash>  <file>" line per file."""
        for name, hash_value in rows:
            self.console.print(
                f"{hash_value}  {name}", markup=False, highlight=False, soft_wrap=True
            )

    def display_proposal(self, proposal: MergeProposal) -> None:
        """Display the review material of one file needing a merge."""
        if proposal.strategy is ReviewStrategy.SEMANTIC and proposal.merge_result is not None:
            self.display_merge_result(proposal.merge_result, proposal.path)
            return

        if proposal.fallback_reason:
            self.console.print(
                f"[dim]{escape(proposal.path)}: {escape(proposal.fallback_reason)}[/dim]"
            )
        if proposal.strategy is ReviewStrategy.SECTIONED_DIFF and proposal.diff_report is not None:
            self.display_diff_report(proposal.diff_report, proposal.path)
        elif proposal.conflict_text is not None:
            self.console.print(
                Panel(
                    escape(proposal.conflict_text.rstrip("\n")),
                    title=f"Conflict: {escape(proposal.path)}",
                    border_style="red",
                )
            )

    def display_merge_result(self, result: SemanticMergeResult, path: str = "") -> None:
        """Display semantic merge statistics and the sections needing review.

        Args:
            result: SemanticMergeResult to summarize.
            path: Optional file name for the title.
        """
        title = "Semantic Merge" + (f": {escape(path)}" if path else "")
        border_style = "red" if result.has_conflicts else "green"

        table = Table(show_header=True, header_style="bold")
        table.add_column("Metric", style="cyan")
        table.add_column("Value", justify="right")
        table.add_row("Sections", f"{len(result.outcomes):,}")
        table.add_row("Conflicts", f"{result.conflict_count:,}")
        table.add_row("New sections", f"{result.new_count:,}")
        table.add_row("Removed (respected)", f"{len(result.removed_sections):,}")
        table.add_row("Auto-merged", f"{result.auto_merged_count:,}")
        self.console.print(Panel(table, title=title, border_style=border_style))

        conflicts = [o for o in result.outcomes if o.kind is MergeOutcomeKind.CONFLICT]
        for outcome in conflicts:
            self.console.print(f"[red]Conflict:[/red] {escape(outcome.header_text)}")
        for header in result.removed_sections:
            self.console.print(f"[dim]Removed locally, kept removed: {escape(header)}[/dim]")
        for note in result.notes:
            self.console.print(f"[yellow]Note:[/yellow] {escape(note)}")

    def display_document(self, text: str) -> None:
        """Print document text verbatim, without markup or highlighting."""
        self.console.print(text, markup=False, highlight=False, end="")

    def display_diff_report(self, report: DiffReport, path: str = "") -> None:
        """Display a sectioned diff report.

        Args:
            report: DiffReport to show.
            path: Optional file name for the title.
        """
        if not report.has_changes:
            self.console.print("[green]No differences.[/green]")
            return

        self.console.print(
            Panel(
                escape(render_diff_report(report, path).rstrip("\n")),
                title=f"Diff: {escape(path)}" if path else "Diff",
                border_style="yellow",
            )
        )

    def display_version_match(self, match: Optional[VersionMatch]) -> None:
        """Display the result of installed-version detection."""
        if match is None:
            self.console.print(
                "[yellow]No known version matched; the project looks unversioned.[/yellow]"
            )
            return

        table = Table(show_header=True, header_style="bold")
        table.add_column("Field", style="cyan")
        table.add_column("Value")
        table.add_row("Version", escape(match.version_id))
        table.add_row("Confidence", self._format_confidence(match.confidence))
        table.add_row("Method", match.detection_method.value)
        table.add_row(
            "Matched files",
            f"{match.matched_files}/{match.total_files} ({match.match_percentage:.1f}%)",
        )
        self.console.print(Panel(table, title="Detected Version", border_style="blue"))

    def _display_errors(self, errors: List[str]) -> None:
        """Display error messages in a separate panel.

        Args:
            errors: List of error messages to display.
        """
        max_display = 10
        displayed_errors = errors[:max_display]
        remaining = len(errors) - max_display

        error_text = "\n".join(f"- {escape(e)}" for e in displayed_errors)
        if remaining > 0:
            error_text += f"\n\n... and {remaining} more errors"

        self.console.print(
            Panel(error_text, title=f"Errors ({len(errors)})", border_style="red")
        )

    def _format_confidence(self, confidence: Confidence) -> str:
        if confidence is Confidence.HIGH:
            return "[green]high[/green]"
        elif confidence is Confidence.MEDIUM:
            return "[yellow]medium[/yellow]"
        else:
            return "[red]low[/red]"

    def _format_action(self, action: UpdateAction) -> str:
        style = ACTION_STYLES[action]
        return f"[{style}]{action.value}[/{style}]"

    def _format_flag(self, value: bool) -> str:
        return "[yellow]yes[/yellow]" if value else "[dim]no[/dim]"

    def _truncate_name(self, name: str, max_length: int = 60) -> str:
        """Truncate long paths with ellipsis.

        Args:
            name: The name to potentially truncate.
            max_length: Maximum length before truncation.

        Returns:
            Original name or truncated name with "..." suffix.
        """
        if len(name) > max_length:
            return name[: max_length - 3] + "..."
        return name
