"""
Core data models for the safe-update engine.

This module contains the following dataclasses:
- TrackedFile: A file whose baseline hash and customization state are recorded
- FileState: Ephemeral classification result for one tracked file
- MarkdownSection: One header-delimited section of a document
- SectionMatch: Result of fuzzy-matching a section against a candidate list
- SectionOutcome: What happened to one section slot during a semantic merge
- SemanticMergeResult: Merged document plus merge statistics
- VersionRecord: Fingerprints of one historical release
- FingerprintDatabase: All known releases and their fingerprints
- VersionMatch: Result of installed-version detection
- LineRange: A 1-based inclusive line range with its content
- DiffSection: Paired current/incoming ranges of one changed region
- DiffReport: Changed sections and unchanged ranges of a document pair
- MergeProposal: Review material for one file that needs a merge
- UpdatePlan: Classification of every file in an update pass
"""

from dataclasses import dataclass, field
from typing import Dict, List, Mapping, Optional, Tuple

from .enums import (
    Confidence,
    DetectionMethod,
    MergeOutcomeKind,
    ReviewStrategy,
    UpdateAction,
)


@dataclass
class TrackedFile:
    """A file whose baseline hash and customization state are recorded."""
    path: str                             # Project-relative POSIX path
    original_hash: Optional[str] = None   # Normalized hash of the baseline content
    is_official: bool = True              # Shipped by upstream (vs. user-added)
    customized: bool = False              # Explicit customization override


@dataclass
class FileState:
    """Classification of a single file for one update pass."""
    path: str
    current_hash: Optional[str]
    original_hash: Optional[str]
    upstream_hash: Optional[str]
    is_customized: bool
    has_upstream_changes: bool
    is_conflict: bool
    action: UpdateAction


@dataclass
class MarkdownSection:
    """One header-delimited section of a document.

    Level 0 is the synthetic preamble holding everything before the first
    header; it has no header line.
    """
    header_text: str                  # Header text without the leading '#'s
    level: int                        # 0 for preamble, 1-6 for headers
    header_line: Optional[str]        # Raw header line, None for preamble
    body_lines: List[str] = field(default_factory=list)
    line_start: int = 1               # 1-based, inclusive
    line_end: int = 1                 # 1-based, inclusive

    @property
    def content(self) -> str:
        """Body lines joined with newlines."""
        return "\n".join(self.body_lines)

    @property
    def lines(self) -> List[str]:
        """Header line (if any) followed by the body lines."""
        if self.header_line is None:
            return list(self.body_lines)
        return [self.header_line] + list(self.body_lines)

    @property
    def is_preamble(self) -> bool:
        return self.level == 0

    @property
    def label(self) -> str:
        """Human-readable name used in logs and reports."""
        return self.header_text if not self.is_preamble else "(preamble)"


@dataclass
class SectionMatch:
    """Best candidate found for one target section."""
    section: Optional[MarkdownSection] = None   # None when nothing met the threshold
    index: Optional[int] = None                 # Index of the candidate in its pool
    score: float = 0.0                          # Weighted similarity, 0-100

    @property
    def matched(self) -> bool:
        return self.section is not None


@dataclass
class SectionOutcome:
    """Outcome for one section slot of a semantic merge."""
    kind: MergeOutcomeKind
    header_text: str
    current_text: Optional[str] = None    # Populated for conflicts
    base_text: Optional[str] = None       # Populated for conflicts
    incoming_text: Optional[str] = None   # Populated for conflicts


@dataclass
class SemanticMergeResult:
    """Merged document produced by SemanticMerger."""
    merged_text: str
    conflict_count: int = 0
    new_count: int = 0
    removed_sections: List[str] = field(default_factory=list)
    auto_merged_count: int = 0
    outcomes: List[SectionOutcome] = field(default_factory=list)
    notes: List[str] = field(default_factory=list)

    @property
    def has_conflicts(self) -> bool:
        return self.conflict_count > 0


@dataclass(frozen=True)
class VersionRecord:
    """Fingerprints of one historical release."""
    release_date: str
    release_url: str
    fingerprints: Mapping[str, str]       # path -> normalized content hash


@dataclass(frozen=True)
class FingerprintDatabase:
    """All known releases and their per-file fingerprints.

    Instances are never mutated after loading and may be shared between
    concurrent readers.
    """
    schema_version: str
    tracked_files: Tuple[str, ...]
    signature_files: Tuple[str, ...]
    versions: Mapping[str, VersionRecord]


@dataclass
class VersionMatch:
    """Release a project's files were identified as."""
    version_id: str
    confidence: Confidence
    matched_files: int
    total_files: int
    match_percentage: float
    detection_method: DetectionMethod


@dataclass
class LineRange:
    """A 1-based inclusive line range. Empty when end_line < start_line."""
    start_line: int
    end_line: int
    content: str = ""

    @property
    def line_count(self) -> int:
        return max(0, self.end_line - self.start_line + 1)

    @property
    def is_empty(self) -> bool:
        return self.end_line < self.start_line


@dataclass
class DiffSection:
    """One changed region with its current-side and incoming-side ranges."""
    current: LineRange
    incoming: LineRange


@dataclass
class DiffReport:
    """Changed sections and the unchanged ranges of the current document."""
    sections: List[DiffSection] = field(default_factory=list)
    unchanged: List[LineRange] = field(default_factory=list)
    current_line_count: int = 0
    incoming_line_count: int = 0

    @property
    def has_changes(self) -> bool:
        return bool(self.sections)


@dataclass
class MergeProposal:
    """Review material for one file whose action is MERGE."""
    path: str
    strategy: ReviewStrategy
    merge_result: Optional[SemanticMergeResult] = None   # SEMANTIC
    conflict_text: Optional[str] = None                  # CONFLICT_BLOCK
    diff_report: Optional[DiffReport] = None             # SECTIONED_DIFF
    fallback_reason: Optional[str] = None                # Why SEMANTIC was not used


@dataclass
class UpdatePlan:
    """Classification of every file considered in one update pass."""
    states: List[FileState] = field(default_factory=list)
    proposals: Dict[str, MergeProposal] = field(default_factory=dict)
    errors: List[str] = field(default_factory=list)

    def count(self, action: UpdateAction) -> int:
        """Number of files classified with the given action."""
        return sum(1 for state in self.states if state.action is action)

    def files_for(self, action: UpdateAction) -> List[str]:
        """Paths of the files classified with the given action."""
        return [state.path for state in self.states if state.action is action]
