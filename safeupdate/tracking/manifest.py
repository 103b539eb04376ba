"""Tracking manifest persistence.

The manifest records, per tracked file, the baseline hash it was installed
with and whether it is known to be customized:

    {
      "baseline_version": "v5",
      "files": [
        {"path": "CLAUDE.md", "original_hash": "sha256:...",
         "is_official": true, "customized": false}
      ]
    }
"""

import json
import logging
from dataclasses import asdict
from pathlib import Path
from typing import Dict, Iterator, List, Optional

from safeupdate.errors import ManifestError
from safeupdate.models import TrackedFile

from .paths import is_safe_relative_path

logger = logging.getLogger(__name__)


class TrackingManifest:
    """In-memory view of the tracking manifest.

    Attributes:
        baseline_version: Release the baseline hashes belong to, if known.
    """

    def __init__(
        self,
        files: Optional[List[TrackedFile]] = None,
        baseline_version: Optional[str] = None,
    ) -> None:
        self.baseline_version = baseline_version
        self._files: Dict[str, TrackedFile] = {}
        for tracked in files or []:
            self._files[tracked.path] = tracked

    def __iter__(self) -> Iterator[TrackedFile]:
        return iter(sorted(self._files.values(), key=lambda t: t.path))

    def __len__(self) -> int:
        return len(self._files)

    def __contains__(self, path: str) -> bool:
        return path in self._files

    def get(self, path: str) -> Optional[TrackedFile]:
        return self._files.get(path)

    def track(self, tracked: TrackedFile) -> None:
        """Add or replace the record for a file."""
        self._files[tracked.path] = tracked

    def untrack(self, path: str) -> bool:
        """Stop tracking a file. Returns whether it was tracked."""
        return self._files.pop(path, None) is not None

    def record_update(
        self, path: str, new_hash: Optional[str], customized: bool = False
    ) -> TrackedFile:
        """Record the outcome of an update pass for one file.

        The new hash becomes the baseline for the next pass. ``customized``
        is stored as an explicit override; pass False to let hash comparison
        decide again.
        """
        tracked = self._files.get(path)
        if tracked is None:
            tracked = TrackedFile(path=path)
            self._files[path] = tracked
        tracked.original_hash = new_hash
        tracked.customized = customized
        return tracked

    def to_dict(self) -> dict:
        return {
            "baseline_version": self.baseline_version,
            "files": [asdict(tracked) for tracked in self],
        }


def _parse_tracked_file(raw: object, source: Path) -> TrackedFile:
    if not isinstance(raw, dict) or not isinstance(raw.get("path"), str):
        raise ManifestError(f"{source}: every file entry needs a string 'path'")
    if not is_safe_relative_path(raw["path"]):
        raise ManifestError(
            f"{source}: path {raw['path']!r} must be relative and stay inside the project"
        )
    original_hash = raw.get("original_hash")
    if original_hash is not None and not isinstance(original_hash, str):
        raise ManifestError(f"{source}: 'original_hash' of {raw['path']} must be a string")
    return TrackedFile(
        path=raw["path"],
        original_hash=original_hash,
        is_official=bool(raw.get("is_official", True)),
        customized=bool(raw.get("customized", False)),
    )


def load_manifest(path: Path) -> TrackingManifest:
    """Read a manifest from disk.

    A missing file yields an empty manifest.

    Raises:
        ManifestError: If the file cannot be read or is malformed.
    """
    path = Path(path)
    if not path.exists():
        logger.info("No tracking manifest at %s; starting empty", path)
        return TrackingManifest()

    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except OSError as e:
        raise ManifestError(f"Cannot read manifest {path}: {e}") from e
    except json.JSONDecodeError as e:
        raise ManifestError(f"Invalid manifest {path}: {e}") from e

    if not isinstance(data, dict) or not isinstance(data.get("files", []), list):
        raise ManifestError(f"{path}: manifest must be an object with a 'files' list")

    files = [_parse_tracked_file(raw, path) for raw in data.get("files", [])]
    baseline_version = data.get("baseline_version")
    return TrackingManifest(
        files, baseline_version if isinstance(baseline_version, str) else None
    )


def save_manifest(manifest: TrackingManifest, path: Path) -> None:
    """Write a manifest to disk.

    Raises:
        ManifestError: If the file cannot be written.
    """
    try:
        Path(path).write_text(
            json.dumps(manifest.to_dict(), indent=2) + "\n", encoding="utf-8"
        )
    except OSError as e:
        raise ManifestError(f"Cannot write manifest {path}: {e}") from e
