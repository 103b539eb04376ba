"""Engine settings for safeupdate.

All tunables live in a single EngineSettings dataclass that the CLI builds
from its options and hands to each component. There are no configuration
files.

Example:
    >>> from safeupdate.config import EngineSettings
    >>> settings = EngineSettings(match_threshold=85.0, context_lines=5)
    >>> settings.diff_line_threshold
    100
"""

from dataclasses import dataclass, field
from typing import Tuple

# Fingerprint database schema this build understands
SUPPORTED_SCHEMA_VERSION = "1.0"


@dataclass(frozen=True)
class ConflictLabels:
    """Labels printed after the conflict marker tokens."""
    current: str = "yours"
    base: str = "original"
    incoming: str = "upstream"


@dataclass(frozen=True)
class EngineSettings:
    """Tunable parameters shared by the engine components.

    Attributes:
        match_threshold: Minimum weighted similarity (0-100) for two
            sections to be considered the same logical section.
        header_weight: Weight of header similarity in the match score.
        content_weight: Weight of body similarity in the match score.
        context_lines: Lines of context around each changed run in a
            sectioned diff report.
        diff_line_threshold: Documents with at most this many lines get a
            whole-file conflict block instead of a sectioned diff report.
        schema_version: Fingerprint database schema version accepted.
        structured_suffixes: File suffixes eligible for semantic merge.
        conflict_labels: Labels used in conflict marker blocks.
    """
    match_threshold: float = 80.0
    header_weight: float = 0.7
    content_weight: float = 0.3
    context_lines: int = 3
    diff_line_threshold: int = 100
    schema_version: str = SUPPORTED_SCHEMA_VERSION
    structured_suffixes: Tuple[str, ...] = (".md", ".markdown")
    conflict_labels: ConflictLabels = field(default_factory=ConflictLabels)

    def __post_init__(self) -> None:
        """Validate ranges.

        Raises:
            ValueError: If any setting is outside its valid range.
        """
        if not 0.0 <= self.match_threshold <= 100.0:
            raise ValueError(
                f"match_threshold must be between 0 and 100, got {self.match_threshold}"
            )
        if self.header_weight < 0.0 or self.content_weight < 0.0:
            raise ValueError("Match weights must not be negative")
        if abs(self.header_weight + self.content_weight - 1.0) > 1e-9:
            raise ValueError(
                "header_weight and content_weight must sum to 1.0, got "
                f"{self.header_weight} + {self.content_weight}"
            )
        if self.context_lines < 0:
            raise ValueError(f"context_lines must be >= 0, got {self.context_lines}")
        if self.diff_line_threshold < 0:
            raise ValueError(
                f"diff_line_threshold must be >= 0, got {self.diff_line_threshold}"
            )

    def is_structured(self, path: str) -> bool:
        """Whether a path names a document eligible for semantic merge."""
        return path.lower().endswith(tuple(s.lower() for s in self.structured_suffixes))
