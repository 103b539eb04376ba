"""Project-relative path handling.

Manifest entries and fingerprint database keys are POSIX paths relative to
a root directory. Paths that are absolute or contain '..' would reach files
outside that root and are refused.
"""

from pathlib import Path, PurePosixPath

from safeupdate.errors import ContentReadError


def is_safe_relative_path(rel_path: str) -> bool:
    """Whether a path stays inside whatever root it is joined to."""
    if not rel_path:
        return False
    parts = PurePosixPath(rel_path.replace("\\", "/"))
    return not parts.is_absolute() and ".." not in parts.parts


def resolve_under(root: Path, rel_path: str) -> Path:
    """Join a project-relative POSIX path onto a root directory.

    Raises:
        ContentReadError: If the path is absolute or contains '..'.
    """
    if not is_safe_relative_path(rel_path):
        raise ContentReadError(Path(rel_path), "path escapes the root directory")
    return Path(root).joinpath(*PurePosixPath(rel_path).parts)
