"""Fuzzy section matching for safeupdate.

This module pairs sections across document versions using weighted
edit-distance similarity, so renamed, lightly edited, or reordered sections
are still recognised as the same logical section.

Similarity between two strings is
    100 * (1 - levenshtein(a, b) / max(len(a), len(b)))
with case-sensitive, unit-cost Levenshtein distance. Two empty strings score
100; one empty and one non-empty string score 0.

The match score of a target section against a candidate is
    0.7 * header_similarity + 0.3 * content_similarity

Candidates with an identical header (same text and level) always match
their target whatever their bodies; among several, the best scoring wins.

Matching is greedy: a target claims the best unclaimed candidate in a pool if
its score reaches the threshold (80 by default), and a claimed candidate is
never offered again within that pool. Results therefore depend on the order
in which targets are matched.

Example:
    >>> from safeupdate.sections import SectionMatcher, SectionPool, parse_sections
    >>> pool = SectionPool(parse_sections("## Setup steps\\npip install x"))
    >>> target = parse_sections("## Setup step\\npip install x")[0]
    >>> SectionMatcher().claim_best(target, pool).matched
    True
"""

import logging
from typing import List, Optional, Set, Tuple

from rapidfuzz.distance import Levenshtein

from safeupdate.models import MarkdownSection, SectionMatch

logger = logging.getLogger(__name__)

DEFAULT_THRESHOLD = 80.0
HEADER_WEIGHT = 0.7
CONTENT_WEIGHT = 0.3


def similarity(a: str, b: str) -> float:
    """Edit-distance similarity of two strings on a 0-100 scale."""
    longest = max(len(a), len(b))
    if longest == 0:
        return 100.0
    distance = Levenshtein.distance(a, b)
    return 100.0 * (1.0 - distance / longest)


def match_score(
    target: MarkdownSection,
    candidate: MarkdownSection,
    header_weight: float = HEADER_WEIGHT,
    content_weight: float = CONTENT_WEIGHT,
) -> float:
    """Weighted header/content similarity of two sections."""
    header_similarity = similarity(target.header_text, candidate.header_text)
    content_similarity = similarity(target.content, candidate.content)
    return header_weight * header_similarity + content_weight * content_similarity


class SectionPool:
    """Candidate sections plus the set of indices already claimed.

    A pool is scratch state for one merge call; the sections themselves are
    never mutated.
    """

    def __init__(self, sections: List[MarkdownSection]) -> None:
        self.sections = list(sections)
        self._claimed: Set[int] = set()

    def __len__(self) -> int:
        return len(self.sections)

    def is_claimed(self, index: int) -> bool:
        return index in self._claimed

    def claim(self, index: int) -> None:
        self._claimed.add(index)

    def unclaimed(self) -> List[int]:
        """Indices of sections nobody has claimed yet, in document order."""
        return [i for i in range(len(self.sections)) if i not in self._claimed]


class SectionMatcher:
    """Greedy best-match finder over a SectionPool.

    Attributes:
        threshold: Minimum score (0-100) a candidate must reach.
        header_weight: Weight of header similarity.
        content_weight: Weight of content similarity.
    """

    def __init__(
        self,
        threshold: float = DEFAULT_THRESHOLD,
        header_weight: float = HEADER_WEIGHT,
        content_weight: float = CONTENT_WEIGHT,
    ) -> None:
        """Initialize the SectionMatcher.

        Raises:
            ValueError: If threshold is not between 0 and 100.
        """
        if not 0.0 <= threshold <= 100.0:
            raise ValueError(f"threshold must be between 0 and 100, got {threshold}")
        self.threshold = threshold
        self.header_weight = header_weight
        self.content_weight = content_weight

    def find_best(self, target: MarkdownSection, pool: SectionPool) -> SectionMatch:
        """Find the best unclaimed candidate without claiming it.

        Candidates with the same header text and level as the target are the
        same logical section however much their bodies changed: when any
        exist, the best scoring of them is returned whatever its score.
        Otherwise every candidate competes on the weighted score against the
        threshold. Ties keep the earliest candidate in document order.

        Returns:
            SectionMatch with the candidate and its weighted score if it
            qualifies, otherwise an empty SectionMatch carrying the best
            score seen.
        """
        unclaimed = pool.unclaimed()
        same_header = [
            index
            for index in unclaimed
            if pool.sections[index].level == target.level
            and pool.sections[index].header_text == target.header_text
        ]

        best_index, best_score = self._best_of(target, pool, same_header or unclaimed)

        if best_index is None:
            return SectionMatch()
        if not same_header and best_score < self.threshold:
            return SectionMatch(score=best_score)
        return SectionMatch(
            section=pool.sections[best_index], index=best_index, score=best_score
        )

    def _best_of(
        self, target: MarkdownSection, pool: SectionPool, indices: List[int]
    ) -> Tuple[Optional[int], float]:
        """Highest-scoring index among the given ones; the first maximum wins."""
        best_index: Optional[int] = None
        best_score = -1.0

        for index in indices:
            score = match_score(
                target, pool.sections[index], self.header_weight, self.content_weight
            )
            if score > best_score:
                best_index, best_score = index, score

        return best_index, best_score

    def claim_best(self, target: MarkdownSection, pool: SectionPool) -> SectionMatch:
        """Find the best unclaimed candidate and claim it if it qualifies."""
        result = self.find_best(target, pool)
        if result.index is not None:
            pool.claim(result.index)
            logger.debug(
                "Matched '%s' -> '%s' (%.1f)",
                target.label,
                result.section.label,
                result.score,
            )
        return result
