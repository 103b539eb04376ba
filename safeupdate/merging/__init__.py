"""Merging and review package for safeupdate.

This package contains the components that reconcile a user's document with a
new upstream version:

- SemanticMerger: Section-level three-way merge with fuzzy section matching.
- DiffSectioner: Changed-range report for reviewing large files.
- conflict marker helpers: diff3-style marker blocks.

Example:
    >>> from safeupdate.merging import SemanticMerger
    >>> result = SemanticMerger().merge(base, current, incoming)
    >>> if result.has_conflicts:
    ...     print(f"{result.conflict_count} section(s) need review")
"""

from .conflict_markers import (
    conflict_block_lines,
    format_conflict_block,
    has_conflict_markers,
    whole_file_conflict,
)
from .diff_sectioner import DiffSectioner, render_diff_report, split_lines
from .semantic_merger import SemanticMerger

__all__ = [
    "DiffSectioner",
    "SemanticMerger",
    "conflict_block_lines",
    "format_conflict_block",
    "has_conflict_markers",
    "render_diff_report",
    "split_lines",
    "whole_file_conflict",
]
