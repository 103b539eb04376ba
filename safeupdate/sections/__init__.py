"""Section parsing and matching package for safeupdate.

- parse_sections / render_sections: Lossless header-delimited sectioning.
- similarity / match_score: Weighted edit-distance similarity.
- SectionPool / SectionMatcher: Greedy, threshold-gated section pairing.
"""

from .section_matcher import (
    DEFAULT_THRESHOLD,
    SectionMatcher,
    SectionPool,
    match_score,
    similarity,
)
from .section_parser import parse_header, parse_sections, render_sections

__all__ = [
    "DEFAULT_THRESHOLD",
    "SectionMatcher",
    "SectionPool",
    "match_score",
    "similarity",
    "parse_header",
    "parse_sections",
    "render_sections",
]
