"""Exception hierarchy for the safe-update engine.

Only genuine I/O, parse, and invariant failures are exceptions. "No match"
and "below threshold" are ordinary results carried by the data models.
"""

from pathlib import Path
from typing import Optional


class SafeUpdateError(Exception):
    """Base class for all engine errors."""


class ContentReadError(SafeUpdateError, OSError):
    """A file could not be read for hashing or parsing.

    Always fatal to the operation that raised it.
    """

    def __init__(self, path: Path, reason: str) -> None:
        self.path = Path(path)
        self.reason = reason
        super().__init__(f"Cannot read {path}: {reason}")


class DatabaseSchemaError(SafeUpdateError):
    """The fingerprint database is missing or does not match the schema."""

    def __init__(self, message: str, path: Optional[Path] = None) -> None:
        self.path = path
        if path is not None:
            message = f"{path}: {message}"
        super().__init__(message)


class MergeAbortError(SafeUpdateError):
    """A semantic merge hit a violated invariant and produced no result."""


class ManifestError(SafeUpdateError):
    """The tracking manifest is unreadable or malformed."""
