"""Installed-version detection.

Identifies which historical release a project's files correspond to:

1. Signature fast path: for each version, newest first, hash only the
   signature files; if every one matches, the answer is that version with
   HIGH confidence.
2. Full scan: for each version, newest first, count how many of its
   fingerprinted files exist locally with identical content. The best
   percentage wins; a 100% match stops the scan. Confidence is HIGH at
   >= 95%, MEDIUM at >= 70%, LOW otherwise.
3. If no version matched a single file, there is no result.

A missing or unreadable project file is a non-match for that file, never an
error.

Example:
    >>> detector = VersionDetector(FingerprintStore(Path("fingerprints.json")))
    >>> match = detector.detect(Path("~/project").expanduser())
    >>> if match:
    ...     print(match.version_id, match.confidence.value)
"""

import logging
from pathlib import Path
from typing import Callable, Dict, Optional

from safeupdate.errors import ContentReadError
from safeupdate.hashing import ContentHasher
from safeupdate.models import Confidence, DetectionMethod, VersionMatch
from safeupdate.tracking import resolve_under

from .fingerprint_store import FingerprintStore

logger = logging.getLogger(__name__)

HIGH_CONFIDENCE_PERCENT = 95.0
MEDIUM_CONFIDENCE_PERCENT = 70.0


def confidence_for(match_percentage: float) -> Confidence:
    """Map a match percentage to a confidence tier."""
    if match_percentage >= HIGH_CONFIDENCE_PERCENT:
        return Confidence.HIGH
    if match_percentage >= MEDIUM_CONFIDENCE_PERCENT:
        return Confidence.MEDIUM
    return Confidence.LOW


class VersionDetector:
    """Matches a project's files against a fingerprint database.

    Attributes:
        store: FingerprintStore providing the database.
        hasher: ContentHasher used for project files.
    """

    def __init__(
        self, store: FingerprintStore, hasher: Optional[ContentHasher] = None
    ) -> None:
        self.store = store
        self.hasher = hasher if hasher is not None else ContentHasher()

    def detect(
        self, project_root: Path, skip_signature: bool = False
    ) -> Optional[VersionMatch]:
        """Identify the release the project's files match.

        Args:
            project_root: Directory the database paths are relative to.
            skip_signature: Go straight to the full scan.

        Returns:
            The best VersionMatch, or None if nothing matched.

        Raises:
            DatabaseSchemaError: If the fingerprint database cannot be loaded.
        """
        project_hashes: Dict[str, Optional[str]] = {}

        def project_hash(rel_path: str) -> Optional[str]:
            if rel_path not in project_hashes:
                project_hashes[rel_path] = self._hash_project_file(project_root, rel_path)
            return project_hashes[rel_path]

        if not skip_signature:
            match = self._detect_by_signature(project_hash)
            if match is not None:
                return match

        return self._detect_by_full_scan(project_hash)

    def _detect_by_signature(
        self, project_hash: Callable[[str], Optional[str]]
    ) -> Optional[VersionMatch]:
        signature_files = self.store.database.signature_files
        if not signature_files:
            return None

        for version_id, record in self.store.versions_newest_first():
            if all(
                path in record.fingerprints
                and project_hash(path) == record.fingerprints[path]
                for path in signature_files
            ):
                logger.info("Signature match: %s", version_id)
                return VersionMatch(
                    version_id=version_id,
                    confidence=Confidence.HIGH,
                    matched_files=len(signature_files),
                    total_files=len(signature_files),
                    match_percentage=100.0,
                    detection_method=DetectionMethod.SIGNATURE,
                )
        logger.debug("No signature match; falling back to full scan")
        return None

    def _detect_by_full_scan(
        self, project_hash: Callable[[str], Optional[str]]
    ) -> Optional[VersionMatch]:
        best: Optional[VersionMatch] = None

        for version_id, record in self.store.versions_newest_first():
            total = len(record.fingerprints)
            if total == 0:
                continue

            matched = sum(
                1
                for path, expected in record.fingerprints.items()
                if project_hash(path) == expected
            )
            percentage = 100.0 * matched / total
            logger.debug("%s: %d/%d files match (%.1f%%)", version_id, matched, total, percentage)

            if matched and (best is None or percentage > best.match_percentage):
                best = VersionMatch(
                    version_id=version_id,
                    confidence=confidence_for(percentage),
                    matched_files=matched,
                    total_files=total,
                    match_percentage=percentage,
                    detection_method=DetectionMethod.FULL,
                )
            if matched == total:
                break

        if best is not None:
            logger.info(
                "Full scan match: %s (%.1f%%, %s)",
                best.version_id,
                best.match_percentage,
                best.confidence.value,
            )
        return best

    def _hash_project_file(self, project_root: Path, rel_path: str) -> Optional[str]:
        try:
            return self.hasher.hash_if_exists(resolve_under(project_root, rel_path))
        except ContentReadError as e:
            logger.warning("Treating %s as non-matching: %s", rel_path, e.reason)
            return None
