"""File state classification for safe updates.

Decides, from three content hashes, what an update pass should do with a
tracked file. The decision table is evaluated top to bottom and the first
matching row wins:

    1. Current absent, upstream present          -> ADD
    2. Current absent, upstream absent           -> SKIP
    3. Upstream absent: customized               -> PRESERVE
                        not customized           -> REMOVE
    4. Customized and upstream changed           -> MERGE
    5. Customized, upstream unchanged            -> PRESERVE
    6. Not customized, upstream changed          -> UPDATE
    7. Otherwise                                 -> SKIP

"Customized" means the override is set, or both the current and the original
hash are known and differ. "Upstream changed" means the original and upstream
hashes differ, or there is no original hash while upstream has one.

Example:
    >>> from safeupdate.classification import classify
    >>> classify("sha256:a", "sha256:b", "sha256:c")
    <UpdateAction.MERGE: 'merge'>
"""

import logging
from typing import Optional

from safeupdate.models import FileState, TrackedFile, UpdateAction

logger = logging.getLogger(__name__)


def is_customized(
    original_hash: Optional[str],
    current_hash: Optional[str],
    assume_customized: bool = False,
) -> bool:
    """Whether the local copy differs from its recorded baseline."""
    if assume_customized:
        return True
    return (
        current_hash is not None
        and original_hash is not None
        and current_hash != original_hash
    )


def has_upstream_changes(
    original_hash: Optional[str], upstream_hash: Optional[str]
) -> bool:
    """Whether upstream content differs from the recorded baseline."""
    if upstream_hash is None:
        return False
    if original_hash is None:
        return True
    return original_hash != upstream_hash


def classify(
    original_hash: Optional[str],
    upstream_hash: Optional[str],
    current_hash: Optional[str],
    assume_customized: bool = False,
) -> UpdateAction:
    """Map a hash triple to exactly one update action.

    Pure and total: every combination of present/absent hashes and override
    yields one action, and identical inputs always yield the same action.

    Args:
        original_hash: Hash of the baseline content, if recorded.
        upstream_hash: Hash of the new upstream content, None if the file
            was removed upstream.
        current_hash: Hash of the local file, None if it does not exist.
        assume_customized: Treat the local copy as customized regardless of
            hashes.

    Returns:
        The UpdateAction for the file.
    """
    if current_hash is None:
        return UpdateAction.ADD if upstream_hash is not None else UpdateAction.SKIP

    customized = is_customized(original_hash, current_hash, assume_customized)

    if upstream_hash is None:
        return UpdateAction.PRESERVE if customized else UpdateAction.REMOVE

    upstream_changed = has_upstream_changes(original_hash, upstream_hash)

    if customized and upstream_changed:
        return UpdateAction.MERGE
    if customized:
        return UpdateAction.PRESERVE
    if upstream_changed:
        return UpdateAction.UPDATE
    return UpdateAction.SKIP


class FileStateClassifier:
    """Builds FileState records for tracked files.

    Stateless; a single instance may be shared freely, including across
    threads classifying different files.
    """

    def evaluate(
        self,
        tracked: TrackedFile,
        current_hash: Optional[str],
        upstream_hash: Optional[str],
        assume_customized: bool = False,
    ) -> FileState:
        """Classify one tracked file.

        The tracked record's own ``customized`` flag is honoured as an
        override in addition to ``assume_customized``. The flag is only ever
        set on request, through ``TrackingManifest.record_update``, and never
        derived from hashes; while it is set the file counts as customized
        even if its content matches the baseline again. Clearing the flag
        returns the file to plain hash comparison.

        Args:
            tracked: Tracking record holding the baseline hash.
            current_hash: Hash of the local file, None if absent.
            upstream_hash: Hash of the upstream file, None if absent.
            assume_customized: Manual override for this pass.

        Returns:
            The complete FileState for the file.
        """
        override = assume_customized or tracked.customized
        original_hash = tracked.original_hash

        action = classify(original_hash, upstream_hash, current_hash, override)
        customized = current_hash is not None and is_customized(
            original_hash, current_hash, override
        )
        upstream_changed = has_upstream_changes(original_hash, upstream_hash)

        logger.debug(
            "%s: customized=%s upstream_changed=%s -> %s",
            tracked.path,
            customized,
            upstream_changed,
            action.value,
        )

        return FileState(
            path=tracked.path,
            current_hash=current_hash,
            original_hash=original_hash,
            upstream_hash=upstream_hash,
            is_customized=customized,
            has_upstream_changes=upstream_changed,
            is_conflict=action is UpdateAction.MERGE,
            action=action,
        )
