"""safeupdate - Safe template updates.

A Python application for updating template-managed project files to a new
upstream release without discarding local customizations, using normalized
content hashing, section-level three-way merging and release fingerprinting.
"""

__version__ = "1.0.0"

from .errors import (
    ContentReadError,
    DatabaseSchemaError,
    ManifestError,
    MergeAbortError,
    SafeUpdateError,
)
from .models import (
    FileState,
    MergeProposal,
    SemanticMergeResult,
    TrackedFile,
    UpdateAction,
    UpdatePlan,
    VersionMatch,
)

__all__ = [
    "__version__",
    "ContentReadError",
    "DatabaseSchemaError",
    "ManifestError",
    "MergeAbortError",
    "SafeUpdateError",
    "FileState",
    "MergeProposal",
    "SemanticMergeResult",
    "TrackedFile",
    "UpdateAction",
    "UpdatePlan",
    "VersionMatch",
]


def main() -> None:
    """Entry point for the safeupdate CLI application.

    This function is called when the `safeupdate` command is invoked after
    package installation via pip. It imports and runs the Typer app
    from the safeupdate.cli module.
    """
    from safeupdate.cli import app
    app()
