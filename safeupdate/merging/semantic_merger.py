"""Semantic three-way merge of header-delimited documents.

The merger parses the base (original), current (user's), and incoming
(upstream) documents into sections and walks the incoming sections in order;
the incoming structure is canonical. Each incoming section is fuzzy-matched
against the base sections and, separately, against the current sections:

    base  current
    ----  -------
    no    no       -> NEW_SECTION         incoming section appended
    yes   no       -> REMOVED_RESPECTED   user deleted it; stays deleted
    no    yes      -> CUSTOM_PRESERVED    user's section kept
    yes   yes      -> compare trimmed bodies:
                        current == base      -> CLEAN_UPDATE        take incoming
                        current == incoming  -> ALREADY_CURRENT     take incoming
                        base == incoming     -> CUSTOMIZATION_KEPT  keep current
                        otherwise            -> CONFLICT            marker block

Current sections that no incoming section claimed are appended afterwards,
so nothing the user wrote is ever silently dropped.

Example:
    >>> merger = SemanticMerger()
    >>> result = merger.merge("## A\\nfoo", "## A\\nfoo", "## A\\nbar")
    >>> result.merged_text, result.conflict_count
    ('## A\\nbar', 0)
"""

import logging
from typing import List, Optional, Tuple

from safeupdate.config import EngineSettings
from safeupdate.errors import MergeAbortError
from safeupdate.models import (
    MarkdownSection,
    MergeOutcomeKind,
    SectionMatch,
    SectionOutcome,
    SemanticMergeResult,
)
from safeupdate.sections import (
    SectionMatcher,
    SectionPool,
    parse_sections,
    render_sections,
)

from .conflict_markers import conflict_block_lines

logger = logging.getLogger(__name__)

# Outcomes counted as automatically merged changes
AUTO_MERGED_KINDS = (MergeOutcomeKind.CLEAN_UPDATE, MergeOutcomeKind.CUSTOMIZATION_KEPT)


def _trim_blank_lines(lines: List[str]) -> List[str]:
    """Drop leading and trailing whitespace-only lines."""
    start, end = 0, len(lines)
    while start < end and not lines[start].strip():
        start += 1
    while end > start and not lines[end - 1].strip():
        end -= 1
    return lines[start:end]


def _trailing_blank_count(lines: List[str]) -> int:
    count = 0
    for line in reversed(lines):
        if line.strip():
            break
        count += 1
    return count


class SemanticMerger:
    """Section-level three-way merger.

    A merger holds only configuration; all matching state is created inside
    each merge() call, so one instance can serve many files.

    Attributes:
        matcher: SectionMatcher used for all section pairing.
        labels: ConflictLabels for conflict marker blocks.
    """

    def __init__(
        self,
        settings: Optional[EngineSettings] = None,
        matcher: Optional[SectionMatcher] = None,
    ) -> None:
        settings = settings or EngineSettings()
        self.matcher = matcher or SectionMatcher(
            threshold=settings.match_threshold,
            header_weight=settings.header_weight,
            content_weight=settings.content_weight,
        )
        self.labels = settings.conflict_labels

    def merge(
        self, base_text: str, current_text: str, incoming_text: str
    ) -> SemanticMergeResult:
        """Merge the user's document with a new upstream version.

        Args:
            base_text: The original document the user started from.
            current_text: The user's current document.
            incoming_text: The new upstream document.

        Returns:
            SemanticMergeResult with the merged document and statistics.

        Raises:
            MergeAbortError: If an internal invariant is violated; no partial
                result is returned.
        """
        base_sections = self._parse(base_text, "base")
        current_sections = self._parse(current_text, "current")
        incoming_sections = self._parse(incoming_text, "incoming")

        base_pool = SectionPool(base_sections)
        current_pool = SectionPool(current_sections)

        result = SemanticMergeResult(merged_text="")
        merged_lines: List[str] = []

        for incoming in incoming_sections:
            base_match = self.matcher.claim_best(incoming, base_pool)
            current_match = self.matcher.claim_best(incoming, current_pool)

            outcome, lines = self._resolve(incoming, base_match, current_match)
            result.outcomes.append(outcome)
            merged_lines.extend(lines)

            if outcome.kind is MergeOutcomeKind.NEW_SECTION:
                result.new_count += 1
            elif outcome.kind is MergeOutcomeKind.REMOVED_RESPECTED:
                result.removed_sections.append(outcome.header_text)
            elif outcome.kind is MergeOutcomeKind.CONFLICT:
                result.conflict_count += 1
            elif outcome.kind in AUTO_MERGED_KINDS:
                result.auto_merged_count += 1

        if len(result.outcomes) != len(incoming_sections):
            raise MergeAbortError(
                f"Resolved {len(result.outcomes)} slots for "
                f"{len(incoming_sections)} incoming sections"
            )

        for index in current_pool.unclaimed():
            section = current_pool.sections[index]
            holdover = self.matcher.claim_best(section, base_pool)
            if holdover.matched:
                note = f"Kept '{section.label}': removed upstream but still present locally"
                logger.warning(note)
            else:
                note = f"Kept custom section '{section.label}'"
                logger.debug(note)
            result.notes.append(note)
            result.outcomes.append(
                SectionOutcome(MergeOutcomeKind.CUSTOM_PRESERVED, section.label)
            )
            merged_lines.extend(section.lines)

        conflict_outcomes = sum(
            1 for o in result.outcomes if o.kind is MergeOutcomeKind.CONFLICT
        )
        if conflict_outcomes != result.conflict_count:
            raise MergeAbortError(
                f"Conflict count {result.conflict_count} does not match "
                f"{conflict_outcomes} conflict outcomes"
            )

        merged_text = "\n".join(merged_lines)
        if incoming_text.endswith("\n") and not merged_text.endswith("\n"):
            merged_text += "\n"
        result.merged_text = merged_text

        logger.info(
            "Semantic merge: %d conflict(s), %d new, %d removed, %d auto-merged",
            result.conflict_count,
            result.new_count,
            len(result.removed_sections),
            result.auto_merged_count,
        )
        return result

    def _parse(self, text: str, side: str) -> List[MarkdownSection]:
        """Parse one side and verify the parse is lossless."""
        sections = parse_sections(text)
        if render_sections(sections) != text:
            raise MergeAbortError(f"Section parse of {side} document is not lossless")
        return sections

    def _resolve(
        self,
        incoming: MarkdownSection,
        base_match: SectionMatch,
        current_match: SectionMatch,
    ) -> Tuple[SectionOutcome, List[str]]:
        """Decide the outcome and output lines of one incoming section."""
        label = incoming.label

        if not base_match.matched and not current_match.matched:
            return SectionOutcome(MergeOutcomeKind.NEW_SECTION, label), incoming.lines

        if not current_match.matched:
            logger.debug("Respecting local removal of '%s'", label)
            return SectionOutcome(MergeOutcomeKind.REMOVED_RESPECTED, label), []

        current = current_match.section
        if not base_match.matched:
            return SectionOutcome(MergeOutcomeKind.CUSTOM_PRESERVED, label), current.lines

        base = base_match.section
        base_body = base.content.strip()
        current_body = current.content.strip()
        incoming_body = incoming.content.strip()

        if current_body == base_body:
            return SectionOutcome(MergeOutcomeKind.CLEAN_UPDATE, label), incoming.lines
        if current_body == incoming_body:
            return SectionOutcome(MergeOutcomeKind.ALREADY_CURRENT, label), incoming.lines
        if base_body == incoming_body:
            return SectionOutcome(MergeOutcomeKind.CUSTOMIZATION_KEPT, label), current.lines

        current_text = "\n".join(_trim_blank_lines(current.body_lines))
        base_text = "\n".join(_trim_blank_lines(base.body_lines))
        incoming_text = "\n".join(_trim_blank_lines(incoming.body_lines))

        lines: List[str] = []
        if incoming.header_line is not None:
            lines.append(incoming.header_line)
        lines.extend(conflict_block_lines(current_text, base_text, incoming_text, self.labels))
        lines.extend([""] * _trailing_blank_count(incoming.body_lines))

        logger.debug("Conflict in section '%s'", label)
        outcome = SectionOutcome(
            MergeOutcomeKind.CONFLICT,
            label,
            current_text=current_text,
            base_text=base_text,
            incoming_text=incoming_text,
        )
        return outcome, lines
