"""Changed-range sectioning of large documents for review.

DiffSectioner does not merge anything. It walks two documents line by line,
position against position, and reports each run of differing positions as a
DiffSection padded with context lines, plus the ranges of the current
document that lie outside every section. Positional comparison means an
inserted line shows up as a change to every following line; this report is
meant for human review of files too large for a single conflict block.

Example:
    >>> report = DiffSectioner(context_lines=1).compare("a\\nb\\nc\\nd", "a\\nB\\nc\\nd")
    >>> [(s.current.start_line, s.current.end_line) for s in report.sections]
    [(1, 3)]
    >>> [(r.start_line, r.end_line) for r in report.unchanged]
    [(4, 4)]
"""

from typing import List, Tuple

from safeupdate.models import DiffReport, DiffSection, LineRange

DEFAULT_CONTEXT_LINES = 3


def split_lines(text: str) -> List[str]:
    """Split text into lines on LF only, the same line model as parse_sections.

    A trailing newline terminates the last line rather than opening an empty
    one; every other character, including a lone CR or a form feed, stays
    inside its line.
    """
    lines = text.split("\n")
    if lines[-1] == "":
        lines.pop()
    return lines


def _slice_range(lines: List[str], start: int, end: int) -> LineRange:
    """Build a 1-based LineRange for 0-based inclusive window [start, end].

    The window is clipped to the document; a window lying entirely past the
    end yields an empty range positioned just after the last line.
    """
    start_line = min(start, len(lines)) + 1
    end_line = min(end + 1, len(lines))
    if end_line < start_line:
        return LineRange(start_line=start_line, end_line=start_line - 1)
    return LineRange(
        start_line=start_line,
        end_line=end_line,
        content="\n".join(lines[start_line - 1:end_line]),
    )


class DiffSectioner:
    """Splits a document pair into changed sections and unchanged ranges.

    Attributes:
        context_lines: Lines of context added on each side of a changed run.
    """

    def __init__(self, context_lines: int = DEFAULT_CONTEXT_LINES) -> None:
        """Initialize the DiffSectioner.

        Raises:
            ValueError: If context_lines is negative.
        """
        if context_lines < 0:
            raise ValueError(f"context_lines must be >= 0, got {context_lines}")
        self.context_lines = context_lines

    def compare(self, current_text: str, incoming_text: str) -> DiffReport:
        """Compare two documents position by position.

        Args:
            current_text: The user's document.
            incoming_text: The upstream document.

        Returns:
            DiffReport whose sections are ordered and disjoint, and whose
            unchanged ranges are the complement of the sections over the
            current document.
        """
        current = split_lines(current_text)
        incoming = split_lines(incoming_text)

        windows = self._context_windows(self._changed_runs(current, incoming))

        sections = [
            DiffSection(
                current=_slice_range(current, start, end),
                incoming=_slice_range(incoming, start, end),
            )
            for start, end in windows
        ]

        return DiffReport(
            sections=sections,
            unchanged=self._unchanged_ranges(current, sections),
            current_line_count=len(current),
            incoming_line_count=len(incoming),
        )

    def _changed_runs(
        self, current: List[str], incoming: List[str]
    ) -> List[Tuple[int, int]]:
        """0-based inclusive runs of positions where the lines differ."""
        runs: List[Tuple[int, int]] = []
        run_start = None

        for i in range(max(len(current), len(incoming))):
            differs = (
                i >= len(current) or i >= len(incoming) or current[i] != incoming[i]
            )
            if differs and run_start is None:
                run_start = i
            elif not differs and run_start is not None:
                runs.append((run_start, i - 1))
                run_start = None

        if run_start is not None:
            runs.append((run_start, max(len(current), len(incoming)) - 1))
        return runs

    def _context_windows(self, runs: List[Tuple[int, int]]) -> List[Tuple[int, int]]:
        """Pad runs with context; windows that overlap are coalesced."""
        windows: List[Tuple[int, int]] = []
        for start, end in runs:
            start = max(0, start - self.context_lines)
            end = end + self.context_lines
            if windows and start <= windows[-1][1]:
                windows[-1] = (windows[-1][0], max(windows[-1][1], end))
            else:
                windows.append((start, end))
        return windows

    def _unchanged_ranges(
        self, current: List[str], sections: List[DiffSection]
    ) -> List[LineRange]:
        unchanged: List[LineRange] = []
        next_line = 1
        for section in sections:
            if section.current.is_empty:
                continue
            if section.current.start_line > next_line:
                unchanged.append(
                    _slice_range(current, next_line - 1, section.current.start_line - 2)
                )
            next_line = section.current.end_line + 1
        if next_line <= len(current):
            unchanged.append(_slice_range(current, next_line - 1, len(current) - 1))
        return unchanged


def render_diff_report(report: DiffReport, path: str = "") -> str:
    """Render a DiffReport as plain text for reviewers."""
    title = f"Diff report for {path}" if path else "Diff report"
    lines = [
        f"{title}: {len(report.sections)} changed section(s)",
        f"Current: {report.current_line_count} lines, "
        f"Incoming: {report.incoming_line_count} lines",
        "",
    ]

    for number, section in enumerate(report.sections, start=1):
        lines.append(
            f"--- Section {number}: current {_describe(section.current)}, "
            f"incoming {_describe(section.incoming)}"
        )
        lines.append("[Current]")
        if not section.current.is_empty:
            lines.append(section.current.content)
        lines.append("[Incoming]")
        if not section.incoming.is_empty:
            lines.append(section.incoming.content)
        lines.append("")

    lines.append("Unchanged ranges:")
    if not report.unchanged:
        lines.append("  (none)")
    for unchanged in report.unchanged:
        lines.append(f"  {_describe(unchanged)}")

    return "\n".join(lines) + "\n"


def _describe(line_range: LineRange) -> str:
    if line_range.is_empty:
        return f"(no lines, after line {line_range.start_line - 1})"
    return f"lines {line_range.start_line}-{line_range.end_line}"
