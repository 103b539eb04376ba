"""Tests for the UpdateTUI class."""

import re
from pathlib import Path

import pytest

from safeupdate.merging import DiffSectioner, SemanticMerger
from safeupdate.models import (
    Confidence,
    DetectionMethod,
    FileState,
    MergeProposal,
    ReviewStrategy,
    UpdateAction,
    UpdatePlan,
    VersionMatch,
)
from safeupdate.ui import UpdateTUI

ANSI_ESCAPE = re.compile(r"\x1b\[[0-9;]*m")


def captured(tui: UpdateTUI) -> str:
    return ANSI_ESCAPE.sub("", tui.console.file.getvalue())


def state(path: str, action: UpdateAction) -> FileState:
    return FileState(path, "sha256:c", "sha256:o", "sha256:u", True, True, False, action)


class TestUpdateTUIDisplay:
    """Tests for display methods with captured console output."""

    def test_display_plan(self, tui_with_captured_output: UpdateTUI):
        tui = tui_with_captured_output
        plan = UpdatePlan(
            states=[
                state("CLAUDE.md", UpdateAction.MERGE),
                state("commands/new.md", UpdateAction.ADD),
                state("commands/same.md", UpdateAction.SKIP),
            ],
            proposals={
                "CLAUDE.md": MergeProposal(
                    "CLAUDE.md",
                    ReviewStrategy.CONFLICT_BLOCK,
                    conflict_text="<<<<<<< Current (yours)\na\n>>>>>>> Incoming (upstream)\n",
                    fallback_reason="no baseline content available",
                )
            },
        )

        tui.display_plan(plan, Path("/project"), Path("/release"))

        output = captured(tui)
        assert "Update Plan" in output
        assert "Files considered: 3" in output
        assert "CLAUDE.md" in output
        assert "commands/new.md" in output
        assert "commands/same.md" not in output
        assert "conflict_block" in output
        assert "no baseline content available" in output
        assert "<<<<<<< Current (yours)" in output

    def test_display_plan_empty(self, tui_with_captured_output: UpdateTUI):
        tui = tui_with_captured_output
        tui.display_plan(UpdatePlan(), Path("/p"), Path("/u"))
        assert "No files to consider." in captured(tui)

    def test_display_plan_errors_truncated(self, tui_with_captured_output: UpdateTUI):
        tui = tui_with_captured_output
        plan = UpdatePlan(
            states=[state("a.md", UpdateAction.MERGE)],
            errors=[f"error {n}" for n in range(15)],
        )

        tui.display_plan(plan, Path("/p"), Path("/u"))

        output = captured(tui)
        assert "Errors (15)" in output
        assert "error 9" in output
        assert "error 10" not in output
        assert "and 5 more errors" in output

    def test_display_merge_result(self, tui_with_captured_output: UpdateTUI):
        tui = tui_with_captured_output
        result = SemanticMerger().merge(
            "## A\nfoo\n## Gone\nx", "## A\nfoo-edited", "## A\nfoo-new\n## Gone\nx"
        )

        tui.display_merge_result(result, "CLAUDE.md")

        output = captured(tui)
        assert "Semantic Merge: CLAUDE.md" in output
        assert "Conflict: A" in output
        assert "Removed locally, kept removed: Gone" in output

    def test_markup_in_content_is_escaped(self, tui_with_captured_output: UpdateTUI):
        tui = tui_with_captured_output
        proposal = MergeProposal(
            "[red]x[/red].md",
            ReviewStrategy.CONFLICT_BLOCK,
            conflict_text="[bold]literal[/bold]\n",
        )

        tui.display_proposal(proposal)

        assert "[bold]literal[/bold]" in captured(tui)

    def test_display_diff_report(self, tui_with_captured_output: UpdateTUI):
        tui = tui_with_captured_output
        report = DiffSectioner(context_lines=0).compare("a\nb\nc", "a\nB\nc")

        tui.display_diff_report(report, "notes.txt")

        output = captured(tui)
        assert "Diff: notes.txt" in output
        assert "1 changed section(s)" in output

    def test_display_diff_report_no_changes(self, tui_with_captured_output: UpdateTUI):
        tui = tui_with_captured_output
        tui.display_diff_report(DiffSectioner().compare("a", "a"))
        assert "No differences." in captured(tui)

    def test_display_version_match(self, tui_with_captured_output: UpdateTUI):
        tui = tui_with_captured_output
        match = VersionMatch("v5", Confidence.MEDIUM, 8, 10, 80.0, DetectionMethod.FULL)

        tui.display_version_match(match)

        output = captured(tui)
        assert "Detected Version" in output
        assert "v5" in output
        assert "medium" in output
        assert "full" in output
        assert "8/10 (80.0%)" in output

    def test_display_version_match_none(self, tui_with_captured_output: UpdateTUI):
        tui = tui_with_captured_output
        tui.display_version_match(None)
        assert "unversioned" in captured(tui)

    def test_display_hashes(self, tui_with_captured_output: UpdateTUI):
        tui = tui_with_captured_output
        tui.display_hashes([("CLAUDE.md", "sha256:" + "a" * 64)])
        assert captured(tui) == "sha256:" + "a" * 64 + "  CLAUDE.md\n"

    def test_display_document_is_verbatim(self, tui_with_captured_output: UpdateTUI):
        tui = tui_with_captured_output
        tui.display_document("# [Title]\nbody\n")
        assert captured(tui) == "# [Title]\nbody\n"

    def test_display_classification(self, tui_with_captured_output: UpdateTUI):
        tui = tui_with_captured_output
        tui.display_classification(state("CLAUDE.md", UpdateAction.MERGE))

        output = captured(tui)
        assert "Classification" in output
        assert "merge" in output


class TestUpdateTUIFormatting:
    """Tests for formatting helpers."""

    @pytest.fixture
    def tui(self, tui_with_captured_output: UpdateTUI) -> UpdateTUI:
        return tui_with_captured_output

    def test_format_confidence(self, tui: UpdateTUI) -> None:
        assert tui._format_confidence(Confidence.HIGH) == "[green]high[/green]"
        assert tui._format_confidence(Confidence.MEDIUM) == "[yellow]medium[/yellow]"
        assert tui._format_confidence(Confidence.LOW) == "[red]low[/red]"

    def test_format_action(self, tui: UpdateTUI) -> None:
        assert tui._format_action(UpdateAction.MERGE) == "[bold red]merge[/bold red]"

    def test_truncate_name(self, tui: UpdateTUI) -> None:
        assert tui._truncate_name("short.md") == "short.md"
        truncated = tui._truncate_name("x" * 100, max_length=20)
        assert len(truncated) == 20
        assert truncated.endswith("...")
