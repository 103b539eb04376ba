"""
Unit tests for file state classification in safeupdate.classification.

Tests cover:
- Each row of the decision table
- Totality over every presence/override combination
- Determinism
- FileStateClassifier flags and overrides
"""

import itertools

import pytest

from safeupdate.classification import (
    FileStateClassifier,
    classify,
    has_upstream_changes,
    is_customized,
)
from safeupdate.models import TrackedFile, UpdateAction
from safeupdate.tracking import TrackingManifest

A = "sha256:aaaa"
B = "sha256:bbbb"
C = "sha256:cccc"


@pytest.mark.unit
class TestDecisionTable:
    """One test per row of the decision table."""

    def test_customized_and_upstream_changed_is_merge(self):
        assert classify(A, B, C) is UpdateAction.MERGE

    def test_untouched_and_upstream_changed_is_update(self):
        assert classify(A, B, A) is UpdateAction.UPDATE

    def test_customized_and_upstream_unchanged_is_preserve(self):
        assert classify(A, A, C) is UpdateAction.PRESERVE

    def test_everything_equal_is_skip(self):
        assert classify(A, A, A) is UpdateAction.SKIP

    def test_missing_locally_present_upstream_is_add(self):
        assert classify(A, B, None) is UpdateAction.ADD
        assert classify(None, B, None) is UpdateAction.ADD

    def test_missing_everywhere_is_skip(self):
        assert classify(A, None, None) is UpdateAction.SKIP

    def test_removed_upstream_untouched_is_remove(self):
        assert classify(A, None, A) is UpdateAction.REMOVE

    def test_removed_upstream_customized_is_preserve(self):
        assert classify(A, None, C) is UpdateAction.PRESERVE

    def test_no_original_hash_is_not_customized(self):
        # Without a baseline the local copy cannot be known to be customized
        assert classify(None, B, C) is UpdateAction.UPDATE

    def test_override_turns_update_into_merge(self):
        assert classify(A, B, A, assume_customized=True) is UpdateAction.MERGE

    def test_override_turns_skip_into_preserve(self):
        assert classify(A, A, A, assume_customized=True) is UpdateAction.PRESERVE

    def test_override_turns_remove_into_preserve(self):
        assert classify(A, None, A, assume_customized=True) is UpdateAction.PRESERVE

    def test_override_does_not_affect_absent_local_file(self):
        assert classify(A, B, None, assume_customized=True) is UpdateAction.ADD


@pytest.mark.unit
class TestTotality:
    """Every combination of present/absent hashes and override yields one action."""

    @pytest.mark.parametrize(
        "original,upstream,current,override",
        list(itertools.product([None, A], [None, A, B], [None, A, C], [False, True])),
    )
    def test_every_combination_yields_an_action(self, original, upstream, current, override):
        first = classify(original, upstream, current, override)
        second = classify(original, upstream, current, override)

        assert isinstance(first, UpdateAction)
        assert first is second


@pytest.mark.unit
class TestPredicates:
    """Tests for is_customized and has_upstream_changes."""

    def test_is_customized(self):
        assert is_customized(A, C)
        assert not is_customized(A, A)
        assert not is_customized(None, C)
        assert not is_customized(A, None)
        assert is_customized(A, A, assume_customized=True)

    def test_has_upstream_changes(self):
        assert has_upstream_changes(A, B)
        assert not has_upstream_changes(A, A)
        assert has_upstream_changes(None, B)
        assert not has_upstream_changes(A, None)
        assert not has_upstream_changes(None, None)


@pytest.mark.unit
class TestFileStateClassifier:
    """Tests for FileStateClassifier.evaluate."""

    def test_merge_state_is_conflict(self):
        state = FileStateClassifier().evaluate(TrackedFile("CLAUDE.md", A), C, B)

        assert state.action is UpdateAction.MERGE
        assert state.is_conflict
        assert state.is_customized
        assert state.has_upstream_changes
        assert (state.original_hash, state.current_hash, state.upstream_hash) == (A, C, B)

    def test_update_state_flags(self):
        state = FileStateClassifier().evaluate(TrackedFile("CLAUDE.md", A), A, B)

        assert state.action is UpdateAction.UPDATE
        assert not state.is_conflict
        assert not state.is_customized
        assert state.has_upstream_changes

    def test_tracked_customized_flag_is_honoured(self):
        tracked = TrackedFile("CLAUDE.md", A, customized=True)
        state = FileStateClassifier().evaluate(tracked, A, B)

        assert state.action is UpdateAction.MERGE
        assert state.is_customized

    def test_clearing_the_flag_restores_hash_comparison(self):
        manifest = TrackingManifest([TrackedFile("CLAUDE.md", A, customized=True)])
        classifier = FileStateClassifier()

        # Local edits reverted to the baseline, flag still set
        flagged = classifier.evaluate(manifest.get("CLAUDE.md"), A, B)
        manifest.record_update("CLAUDE.md", A, customized=False)
        cleared = classifier.evaluate(manifest.get("CLAUDE.md"), A, B)

        assert flagged.action is UpdateAction.MERGE
        assert cleared.action is UpdateAction.UPDATE
        assert not cleared.is_customized

    def test_absent_local_file_is_never_customized(self):
        state = FileStateClassifier().evaluate(
            TrackedFile("new.md"), None, B, assume_customized=True
        )

        assert state.action is UpdateAction.ADD
        assert not state.is_customized

    def test_path_is_carried(self):
        state = FileStateClassifier().evaluate(TrackedFile("commands/review.md", A), A, A)
        assert state.path == "commands/review.md"
        assert state.action is UpdateAction.SKIP
