"""
Models package for the safe-update engine.

This package provides convenient imports for all data models:
- UpdateAction, Confidence, DetectionMethod, MergeOutcomeKind, ReviewStrategy
- TrackedFile, FileState: File tracking and classification
- MarkdownSection, SectionMatch, SectionOutcome, SemanticMergeResult
- VersionRecord, FingerprintDatabase, VersionMatch
- LineRange, DiffSection, DiffReport
- MergeProposal, UpdatePlan
"""

from .enums import (
    Confidence,
    DetectionMethod,
    MergeOutcomeKind,
    ReviewStrategy,
    UpdateAction,
)
from .data_models import (
    DiffReport,
    DiffSection,
    FileState,
    FingerprintDatabase,
    LineRange,
    MarkdownSection,
    MergeProposal,
    SectionMatch,
    SectionOutcome,
    SemanticMergeResult,
    TrackedFile,
    UpdatePlan,
    VersionMatch,
    VersionRecord,
)

__all__ = [
    "Confidence",
    "DetectionMethod",
    "MergeOutcomeKind",
    "ReviewStrategy",
    "UpdateAction",
    "DiffReport",
    "DiffSection",
    "FileState",
    "FingerprintDatabase",
    "LineRange",
    "MarkdownSection",
    "MergeProposal",
    "SectionMatch",
    "SectionOutcome",
    "SemanticMergeResult",
    "TrackedFile",
    "UpdatePlan",
    "VersionMatch",
    "VersionRecord",
]
