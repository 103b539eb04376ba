"""File state classification package for safeupdate.

Example:
    >>> from safeupdate.classification import FileStateClassifier
    >>> from safeupdate.models import TrackedFile
    >>> classifier = FileStateClassifier()
    >>> state = classifier.evaluate(TrackedFile("CLAUDE.md", "sha256:a"), "sha256:a", "sha256:b")
    >>> state.action
    <UpdateAction.UPDATE: 'update'>
"""

from .file_state import (
    FileStateClassifier,
    classify,
    has_upstream_changes,
    is_customized,
)

__all__ = [
    "FileStateClassifier",
    "classify",
    "has_upstream_changes",
    "is_customized",
]
