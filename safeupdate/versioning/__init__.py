"""Installed-version fingerprinting package for safeupdate.

- FingerprintStore: Loads and validates the fingerprint database once.
- VersionDetector: Signature fast path plus confidence-scored full scan.
"""

from .fingerprint_store import FingerprintStore, parse_database
from .version_detector import VersionDetector, confidence_for

__all__ = ["FingerprintStore", "VersionDetector", "confidence_for", "parse_database"]
