"""Fingerprint database loading and validation.

The fingerprint database is a JSON document:

    {
      "schema_version": "1.0",
      "tracked_files": ["CLAUDE.md", "commands/review.md", ...],
      "signature_files": ["CLAUDE.md", ...],
      "versions": {
        "v5": {
          "release_date": "2025-03-01",
          "release_url": "https://...",
          "fingerprints": {"CLAUDE.md": "sha256:...", ...}
        }
      }
    }

FingerprintStore loads it once, on first access, behind a lock; afterwards
the FingerprintDatabase is only ever read, so concurrent lookups need no
further synchronization.
"""

import json
import logging
import re
import threading
from pathlib import Path
from types import MappingProxyType
from typing import Any, Iterable, List, Optional, Tuple

from safeupdate.config import SUPPORTED_SCHEMA_VERSION
from safeupdate.errors import DatabaseSchemaError
from safeupdate.models import FingerprintDatabase, VersionRecord
from safeupdate.tracking import is_safe_relative_path

logger = logging.getLogger(__name__)

_NATURAL_SPLIT = re.compile(r"\d+|\D+")


def _natural_key(version_id: str) -> List[Tuple[int, str]]:
    """Sort key that orders 'v10' after 'v9'."""
    return [
        (int(part), "") if part.isdigit() else (-1, part)
        for part in _NATURAL_SPLIT.findall(version_id)
    ]


def _check_paths(paths: Iterable[str], source: Optional[Path]) -> None:
    unsafe = [path for path in paths if not is_safe_relative_path(path)]
    if unsafe:
        raise DatabaseSchemaError(
            f"Paths must be relative and stay inside the project: {', '.join(unsafe)}",
            source,
        )


def _require_str_list(data: dict, key: str, source: Optional[Path]) -> Tuple[str, ...]:
    value = data.get(key)
    if not isinstance(value, list) or not all(isinstance(v, str) for v in value):
        raise DatabaseSchemaError(f"'{key}' must be a list of paths", source)
    _check_paths(value, source)
    return tuple(value)


def parse_database(
    data: Any,
    schema_version: str = SUPPORTED_SCHEMA_VERSION,
    source: Optional[Path] = None,
) -> FingerprintDatabase:
    """Validate decoded JSON and build a FingerprintDatabase.

    Args:
        data: Decoded JSON document.
        schema_version: The only schema version accepted.
        source: Path the data came from, used in error messages.

    Returns:
        The validated, read-only database.

    Raises:
        DatabaseSchemaError: If any part of the document is invalid.
    """
    if not isinstance(data, dict):
        raise DatabaseSchemaError("Database root must be an object", source)

    found_version = data.get("schema_version")
    if found_version != schema_version:
        raise DatabaseSchemaError(
            f"Unsupported schema version {found_version!r} (expected {schema_version!r})",
            source,
        )

    tracked_files = _require_str_list(data, "tracked_files", source)
    signature_files = _require_str_list(data, "signature_files", source)
    untracked = [path for path in signature_files if path not in tracked_files]
    if untracked:
        raise DatabaseSchemaError(
            f"Signature files not in tracked_files: {', '.join(untracked)}", source
        )

    raw_versions = data.get("versions")
    if not isinstance(raw_versions, dict):
        raise DatabaseSchemaError("'versions' must be an object", source)

    versions = {}
    for version_id, raw in raw_versions.items():
        if not isinstance(raw, dict):
            raise DatabaseSchemaError(f"Version {version_id!r} must be an object", source)
        fingerprints = raw.get("fingerprints")
        if not isinstance(fingerprints, dict) or not all(
            isinstance(k, str) and isinstance(v, str) for k, v in fingerprints.items()
        ):
            raise DatabaseSchemaError(
                f"Version {version_id!r} fingerprints must map paths to hashes", source
            )
        _check_paths(fingerprints, source)
        versions[version_id] = VersionRecord(
            release_date=str(raw.get("release_date", "")),
            release_url=str(raw.get("release_url", "")),
            fingerprints=MappingProxyType(dict(fingerprints)),
        )

    return FingerprintDatabase(
        schema_version=found_version,
        tracked_files=tracked_files,
        signature_files=signature_files,
        versions=MappingProxyType(versions),
    )


class FingerprintStore:
    """Lazily loaded, process-lifetime cache of one fingerprint database.

    Attributes:
        database_path: Location of the JSON database.
        schema_version: Schema version the store accepts.

    Example:
        >>> store = FingerprintStore(Path("fingerprints.json"))
        >>> for version_id, record in store.versions_newest_first():
        ...     print(version_id, record.release_date)
    """

    def __init__(
        self, database_path: Path, schema_version: str = SUPPORTED_SCHEMA_VERSION
    ) -> None:
        self.database_path = Path(database_path)
        self.schema_version = schema_version
        self._database: Optional[FingerprintDatabase] = None
        self._lock = threading.Lock()

    @classmethod
    def from_database(cls, database: FingerprintDatabase) -> "FingerprintStore":
        """Wrap an already loaded database."""
        store = cls(Path("<memory>"), database.schema_version)
        store._database = database
        return store

    @property
    def database(self) -> FingerprintDatabase:
        """The loaded database, reading it from disk on first access.

        Raises:
            DatabaseSchemaError: If the file is missing, unreadable, not JSON,
                or fails validation.
        """
        if self._database is None:
            with self._lock:
                if self._database is None:
                    self._database = self._load()
        return self._database

    @property
    def is_loaded(self) -> bool:
        return self._database is not None

    def versions_newest_first(self) -> List[Tuple[str, VersionRecord]]:
        """Versions ordered by release date, newest first.

        Versions sharing a release date are ordered by a natural sort of
        their ids, highest first.
        """
        versions = self.database.versions
        ordered = sorted(
            versions,
            key=lambda vid: (versions[vid].release_date, _natural_key(vid)),
            reverse=True,
        )
        return [(vid, versions[vid]) for vid in ordered]

    def _load(self) -> FingerprintDatabase:
        try:
            raw = self.database_path.read_text(encoding="utf-8")
        except FileNotFoundError:
            raise DatabaseSchemaError("Fingerprint database not found", self.database_path)
        except OSError as e:
            raise DatabaseSchemaError(f"Cannot read database: {e}", self.database_path) from e

        try:
            data = json.loads(raw)
        except json.JSONDecodeError as e:
            raise DatabaseSchemaError(f"Invalid JSON: {e}", self.database_path) from e

        database = parse_database(data, self.schema_version, self.database_path)
        logger.info(
            "Loaded fingerprint database %s: %d version(s), %d tracked file(s)",
            self.database_path,
            len(database.versions),
            len(database.tracked_files),
        )
        return database
