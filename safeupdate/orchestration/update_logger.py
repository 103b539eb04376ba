"""UpdateLogger for writing update session logs in a sectioned text format.

This module provides the UpdateLogger class that records an update pass:
header, plan phase (per-file actions), merge proposals, version detection,
and a closing summary.
"""

import logging
from collections import Counter
from datetime import datetime
from pathlib import Path
from typing import Optional, TextIO

from safeupdate.models import (
    MergeOutcomeKind,
    MergeProposal,
    ReviewStrategy,
    UpdateAction,
    UpdatePlan,
    VersionMatch,
)

logger = logging.getLogger(__name__)


class UpdateLogger:
    """Logger for update sessions with structured output format.

    Usage:
        with UpdateLogger(log_file_path) as update_log:
            update_log.log_header()
            update_log.log_plan_phase(project_root, upstream_root, plan)
            for proposal in plan.proposals.values():
                update_log.log_merge_proposal(proposal)
            update_log.log_summary(plan, duration)

    Attributes:
        SEPARATOR: The 65-character separator line used between sections.
    """

    SEPARATOR = "=" * 65

    def __init__(self, log_file_path: Optional[Path] = None, mode: str = "PLAN") -> None:
        """Initialize the UpdateLogger.

        Args:
            log_file_path: Optional path for the log file. If not provided,
                generates a timestamped filename in the current directory.
            mode: Mode shown in the header (e.g. PLAN, DETECT).

        Raises:
            OSError: If the log file path is not writable.
        """
        self._mode = mode
        self._start_timestamp = datetime.now()
        self._file_handle: Optional[TextIO] = None
        self._proposal_counter = 0

        if log_file_path is None:
            timestamp_str = self._start_timestamp.strftime("%Y-%m-%d_%H-%M-%S")
            self._log_file_path = Path.cwd() / f"update_log_{timestamp_str}.log"
        else:
            self._log_file_path = Path(log_file_path)

        self._validate_path()

    def _validate_path(self) -> None:
        """Validate that the log file's parent directory exists.

        Raises:
            OSError: If the parent directory doesn't exist or is not a directory.
        """
        parent = self._log_file_path.parent
        if not parent.exists():
            raise OSError(f"Parent directory does not exist: {parent}")
        if not parent.is_dir():
            raise OSError(f"Parent path is not a directory: {parent}")

    def __enter__(self) -> "UpdateLogger":
        """Open the log file.

        Raises:
            OSError: If the file cannot be opened for writing.
        """
        try:
            self._file_handle = open(self._log_file_path, "w", encoding="utf-8")
        except OSError as e:
            raise OSError(f"Cannot open log file for writing: {e}") from e
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        """Close the log file, even if an exception occurred."""
        if self._file_handle is not None:
            try:
                self._file_handle.close()
            except OSError as e:
                logger.warning("Error closing log file: %s", e)
            finally:
                self._file_handle = None

    def get_log_path(self) -> Path:
        """Get the path to the log file."""
        return self._log_file_path

    def log_header(self) -> None:
        """Write the title, timestamp, and mode."""
        self._write_separator()
        self._write_line("safeupdate - Update Log")
        self._write_separator()
        self._write_line(f"Timestamp: {self._format_timestamp(self._start_timestamp)}")
        self._write_line(f"Mode: {self._mode}")
        self._write_line("")

    def log_plan_phase(self, project_root: Path, upstream_root: Path, plan: UpdatePlan) -> None:
        """Write per-action counts and the files under each action.

        Args:
            project_root: The project being updated.
            upstream_root: Directory holding the new upstream files.
            plan: The classification result.
        """
        self._write_separator()
        self._write_line("PLAN PHASE")
        self._write_separator()
        self._write_line(f"Project: {project_root}")
        self._write_line(f"Upstream: {upstream_root}")
        self._write_line(f"Files considered: {len(plan.states)}")
        self._write_line("")

        for action in UpdateAction:
            paths = plan.files_for(action)
            self._write_line(f"{action.value.upper()}: {len(paths)}")
            for path in paths:
                self._write_line(f"- {path}", indent=2)

        if plan.errors:
            self._write_line("")
            self._write_line("Errors:")
            for error in plan.errors:
                self._write_line(f"- {error}", indent=2)
        self._write_line("")

    def log_merge_proposal(self, proposal: MergeProposal) -> None:
        """Write the review material summary for one file needing a merge."""
        if self._proposal_counter == 0:
            self._write_separator()
            self._write_line("MERGE PROPOSALS")
            self._write_separator()
            self._write_line("")

        self._proposal_counter += 1
        self._write_line(f"Proposal {self._proposal_counter}: {proposal.path}")
        self._write_line(f"Strategy: {proposal.strategy.value}", indent=2)
        if proposal.fallback_reason:
            self._write_line(f"Fallback reason: {proposal.fallback_reason}", indent=2)

        if proposal.strategy is ReviewStrategy.SEMANTIC and proposal.merge_result is not None:
            result = proposal.merge_result
            self._write_line(f"Conflicts: {result.conflict_count}", indent=2)
            self._write_line(f"New sections: {result.new_count}", indent=2)
            self._write_line(f"Auto-merged sections: {result.auto_merged_count}", indent=2)
            for header in result.removed_sections:
                self._write_line(f"- Removed (respected): {header}", indent=4)
            for outcome in result.outcomes:
                if outcome.kind is MergeOutcomeKind.CONFLICT:
                    self._write_line(f"! Conflict: {outcome.header_text}", indent=4)
            for note in result.notes:
                self._write_line(f"Note: {note}", indent=4)
        elif proposal.strategy is ReviewStrategy.SECTIONED_DIFF and proposal.diff_report is not None:
            self._write_line(
                f"Changed sections: {len(proposal.diff_report.sections)}", indent=2
            )
        self._write_line("")

    def log_version_detection(self, project_root: Path, match: Optional[VersionMatch]) -> None:
        """Write the result of installed-version detection."""
        self._write_separator()
        self._write_line("VERSION DETECTION")
        self._write_separator()
        self._write_line(f"Project: {project_root}")
        if match is None:
            self._write_line("Result: no matching version (unversioned project)")
        else:
            self._write_line(f"Version: {match.version_id}")
            self._write_line(f"Confidence: {match.confidence.value}")
            self._write_line(f"Method: {match.detection_method.value}")
            self._write_line(
                f"Matched files: {match.matched_files}/{match.total_files} "
                f"({match.match_percentage:.1f}%)"
            )
        self._write_line("")

    def log_summary(self, plan: UpdatePlan, duration_seconds: float) -> None:
        """Write the summary section."""
        strategies = Counter(p.strategy for p in plan.proposals.values())

        self._write_separator()
        self._write_line("SUMMARY")
        self._write_separator()
        self._write_line(f"Files considered: {len(plan.states)}")
        for action in UpdateAction:
            self._write_line(f"{action.value.capitalize()}: {plan.count(action)}")
        for strategy in ReviewStrategy:
            if strategies[strategy]:
                self._write_line(f"Proposals ({strategy.value}): {strategies[strategy]}")
        if plan.errors:
            self._write_line(f"Total errors: {len(plan.errors)}")
        self._write_line(f"Duration: {self._format_duration(duration_seconds)}")
        self._write_line("")
        self._write_line(f"Log file: {self._log_file_path}")
        self._write_separator()

    def _format_duration(self, seconds: float) -> str:
        """Format duration like "45s", "5m 23s" or "1h 5m 30s"."""
        total_seconds = int(seconds)

        if total_seconds < 60:
            return f"{total_seconds}s"

        hours = total_seconds // 3600
        minutes = (total_seconds % 3600) // 60
        secs = total_seconds % 60

        if hours > 0:
            return f"{hours}h {minutes}m {secs}s"
        return f"{minutes}m {secs}s"

    def _format_timestamp(self, dt: datetime) -> str:
        return dt.strftime("%Y-%m-%d %H:%M:%S")

    def _write_separator(self) -> None:
        self._write_line(self.SEPARATOR)

    def _write_line(self, text: str, indent: int = 0) -> None:
        """Write a line to the log file with optional indentation."""
        if self._file_handle is None:
            logger.warning("Attempted to write to closed log file: %s", text)
            return

        try:
            self._file_handle.write(" " * indent + text + "\n")
        except OSError as e:
            logger.warning("Error writing to log file: %s", e)
