"""
Enumerations for the safe-update engine.

Every closed vocabulary the engine produces is an Enum so that consumers
handle each case explicitly:
- UpdateAction: What to do with a tracked file during an update pass
- Confidence: How sure a version detection result is
- DetectionMethod: Which scan produced a version detection result
- MergeOutcomeKind: What happened to one section slot during a semantic merge
- ReviewStrategy: How a file needing a merge is presented for review
"""

from enum import Enum


class UpdateAction(Enum):
    """Per-file update decision produced by the file state classifier."""
    ADD = "add"                # File missing locally, present upstream
    REMOVE = "remove"          # Removed upstream, never customized
    PRESERVE = "preserve"      # Customized, nothing new upstream (or removed upstream)
    UPDATE = "update"          # Untouched locally, changed upstream
    MERGE = "merge"            # Customized locally AND changed upstream
    SKIP = "skip"              # Nothing to do


class Confidence(Enum):
    """Confidence tier of a version detection result."""
    HIGH = "high"              # >= 95% of fingerprints matched
    MEDIUM = "medium"          # >= 70% of fingerprints matched
    LOW = "low"                # Anything above zero


class DetectionMethod(Enum):
    """Scan that produced a VersionMatch."""
    SIGNATURE = "signature"    # Fast path over the signature file subset
    FULL = "full"              # Confidence-scored scan of every fingerprint


class MergeOutcomeKind(Enum):
    """Outcome for one section slot of a semantic merge."""
    NEW_SECTION = "new_section"
    REMOVED_RESPECTED = "removed_respected"
    CUSTOM_PRESERVED = "custom_preserved"
    CLEAN_UPDATE = "clean_update"
    ALREADY_CURRENT = "already_current"
    CUSTOMIZATION_KEPT = "customization_kept"
    CONFLICT = "conflict"


class ReviewStrategy(Enum):
    """How a file needing a merge is presented to the caller."""
    SEMANTIC = "semantic"              # Section-level semantic merge
    CONFLICT_BLOCK = "conflict_block"  # Whole-file delimited conflict block
    SECTIONED_DIFF = "sectioned_diff"  # Changed-range report for large files
