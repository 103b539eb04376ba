"""Three-way conflict marker blocks.

Emits the diff3-style marker syntax understood by common editors and merge
tools. Every marker starts at column 1:

    <<<<<<< Current (label)
    <current text>
    ||||||| Base (label)
    <base text>
    =======
    <incoming text>
    >>>>>>> Incoming (label)
"""

from typing import List, Optional

from safeupdate.config import ConflictLabels

CURRENT_MARKER = "<<<<<<<"
BASE_MARKER = "|||||||"
SEPARATOR_MARKER = "======="
INCOMING_MARKER = ">>>>>>>"


def _text_lines(text: str) -> List[str]:
    if not text:
        return []
    return text.split("\n")


def conflict_block_lines(
    current: str,
    base: str,
    incoming: str,
    labels: Optional[ConflictLabels] = None,
) -> List[str]:
    """Build the lines of one conflict region.

    Args:
        current: The user's text.
        base: The original baseline text.
        incoming: The new upstream text.
        labels: Labels printed after the markers.

    Returns:
        The marker block as a list of lines without line terminators.
    """
    labels = labels or ConflictLabels()
    lines = [f"{CURRENT_MARKER} Current ({labels.current})"]
    lines.extend(_text_lines(current))
    lines.append(f"{BASE_MARKER} Base ({labels.base})")
    lines.extend(_text_lines(base))
    lines.append(SEPARATOR_MARKER)
    lines.extend(_text_lines(incoming))
    lines.append(f"{INCOMING_MARKER} Incoming ({labels.incoming})")
    return lines


def format_conflict_block(
    current: str,
    base: str,
    incoming: str,
    labels: Optional[ConflictLabels] = None,
) -> str:
    """Render one conflict region as text ending with a newline."""
    return "\n".join(conflict_block_lines(current, base, incoming, labels)) + "\n"


def whole_file_conflict(
    current: str,
    base: str,
    incoming: str,
    labels: Optional[ConflictLabels] = None,
) -> str:
    """Wrap entire documents in a single conflict region.

    Trailing newlines of each side are dropped so the markers sit on their
    own lines.
    """
    return format_conflict_block(
        current.rstrip("\n"), base.rstrip("\n"), incoming.rstrip("\n"), labels
    )


def has_conflict_markers(text: str) -> bool:
    """Whether text still contains an unresolved conflict region."""
    return any(
        line.startswith(CURRENT_MARKER + " ") for line in text.split("\n")
    ) and any(line.startswith(INCOMING_MARKER + " ") for line in text.split("\n"))
