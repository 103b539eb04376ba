"""UpdatePlanner for classifying a project against a new upstream release.

This module provides the UpdatePlanner class that coordinates ContentHasher,
FileStateClassifier, SemanticMerger and DiffSectioner to build an UpdatePlan:
one FileState per file plus review material for every file whose action is
MERGE. The planner only reads; applying the plan is left to the caller.

Review material is chosen per file:

1. Structured documents with baseline content get a semantic merge.
2. Anything else, or a semantic merge that aborts, gets a whole-file
   conflict block when both sides fit within the line threshold.
3. Larger files get a sectioned diff report.

Example:
    from safeupdate.orchestration import UpdatePlanner
    from safeupdate.tracking import load_manifest
    from pathlib import Path

    planner = UpdatePlanner(
        project_root=Path("~/project").expanduser(),
        upstream_root=Path("/tmp/release-v6"),
        baseline_root=Path("/tmp/release-v5"),
    )
    plan = planner.plan(load_manifest(Path("~/project/.safeupdate.json").expanduser()))
"""

import logging
from pathlib import Path
from typing import List, Optional, Set

from safeupdate.classification import FileStateClassifier
from safeupdate.config import EngineSettings
from safeupdate.errors import ContentReadError, MergeAbortError
from safeupdate.hashing import ContentHasher, read_normalized_text
from safeupdate.merging import (
    DiffSectioner,
    SemanticMerger,
    split_lines,
    whole_file_conflict,
)
from safeupdate.models import (
    FileState,
    MergeProposal,
    ReviewStrategy,
    TrackedFile,
    UpdateAction,
    UpdatePlan,
)
from safeupdate.tracking import TrackingManifest, resolve_under

logger = logging.getLogger(__name__)


def _validate_directory(path: Path, role: str) -> Path:
    """Resolve a directory argument.

    Raises:
        ValueError: If the path does not exist or is not a directory.
    """
    resolved_path = Path(path).resolve()
    if not resolved_path.exists():
        raise ValueError(f"{role} path does not exist: {path}")
    if not resolved_path.is_dir():
        raise ValueError(f"{role} path is not a directory: {path}")
    return resolved_path


class UpdatePlanner:
    """Builds update plans for one project and one upstream release.

    Attributes:
        project_root: The user's project.
        upstream_root: Directory holding the new upstream files.
        baseline_root: Directory holding the release the project was
            installed from, used as the merge base. Optional.
        settings: EngineSettings shared by the merge components.
    """

    def __init__(
        self,
        project_root: Path,
        upstream_root: Path,
        baseline_root: Optional[Path] = None,
        settings: Optional[EngineSettings] = None,
        hasher: Optional[ContentHasher] = None,
    ) -> None:
        """Initialize the UpdatePlanner.

        Raises:
            ValueError: If any given root does not exist or is not a directory.
        """
        self.project_root = _validate_directory(project_root, "Project")
        self.upstream_root = _validate_directory(upstream_root, "Upstream")
        self.baseline_root = (
            _validate_directory(baseline_root, "Baseline")
            if baseline_root is not None
            else None
        )
        self.settings = settings or EngineSettings()

        self._hasher = hasher if hasher is not None else ContentHasher()
        self._classifier = FileStateClassifier()
        self._merger = SemanticMerger(self.settings)
        self._sectioner = DiffSectioner(self.settings.context_lines)

    def plan(self, manifest: TrackingManifest) -> UpdatePlan:
        """Classify every tracked file and every upstream file.

        Files that cannot be read are recorded in ``plan.errors`` and
        classified as MERGE so they are always brought to the user's
        attention.

        Args:
            manifest: Tracking records for the project.

        Returns:
            UpdatePlan with states in path order and proposals for MERGE files.
        """
        plan = UpdatePlan()

        for rel_path in self._candidate_paths(manifest):
            tracked = manifest.get(rel_path)
            try:
                state = self._classify(rel_path, tracked)
            except ContentReadError as e:
                logger.warning("Cannot classify %s: %s", rel_path, e.reason)
                plan.errors.append(str(e))
                plan.states.append(self._conservative_state(rel_path, tracked))
                continue

            plan.states.append(state)
            if state.action is UpdateAction.MERGE:
                try:
                    plan.proposals[rel_path] = self.propose(rel_path)
                except ContentReadError as e:
                    logger.warning("Cannot prepare merge for %s: %s", rel_path, e.reason)
                    plan.errors.append(str(e))

        logger.info(
            "Planned %d file(s): %s",
            len(plan.states),
            ", ".join(
                f"{plan.count(action)} {action.value}"
                for action in UpdateAction
                if plan.count(action)
            )
            or "nothing to do",
        )
        return plan

    def propose(self, rel_path: str) -> MergeProposal:
        """Build review material for one file that needs a merge.

        Args:
            rel_path: Project-relative POSIX path.

        Returns:
            MergeProposal using the richest strategy that succeeded.

        Raises:
            ContentReadError: If the current or upstream file cannot be read.
        """
        current_text = read_normalized_text(self._resolve(self.project_root, rel_path))
        incoming_text = read_normalized_text(self._resolve(self.upstream_root, rel_path))
        base_text = self._read_baseline(rel_path)

        if not self.settings.is_structured(rel_path):
            reason = "not a structured document"
        elif base_text is None:
            reason = "no baseline content available"
        else:
            try:
                result = self._merger.merge(base_text, current_text, incoming_text)
                return MergeProposal(
                    path=rel_path, strategy=ReviewStrategy.SEMANTIC, merge_result=result
                )
            except MergeAbortError as e:
                logger.warning("Semantic merge of %s aborted: %s", rel_path, e)
                reason = f"semantic merge aborted: {e}"

        return self._fallback_proposal(
            rel_path, base_text or "", current_text, incoming_text, reason
        )

    def _fallback_proposal(
        self,
        rel_path: str,
        base_text: str,
        current_text: str,
        incoming_text: str,
        reason: str,
    ) -> MergeProposal:
        line_count = max(len(split_lines(current_text)), len(split_lines(incoming_text)))

        if line_count <= self.settings.diff_line_threshold:
            logger.debug("%s: whole-file conflict block (%s)", rel_path, reason)
            return MergeProposal(
                path=rel_path,
                strategy=ReviewStrategy.CONFLICT_BLOCK,
                conflict_text=whole_file_conflict(
                    current_text, base_text, incoming_text, self.settings.conflict_labels
                ),
                fallback_reason=reason,
            )

        logger.debug("%s: sectioned diff of %d lines (%s)", rel_path, line_count, reason)
        return MergeProposal(
            path=rel_path,
            strategy=ReviewStrategy.SECTIONED_DIFF,
            diff_report=self._sectioner.compare(current_text, incoming_text),
            fallback_reason=reason,
        )

    def _classify(self, rel_path: str, tracked: Optional[TrackedFile]) -> FileState:
        current_hash = self._hasher.hash_if_exists(self._resolve(self.project_root, rel_path))
        upstream_hash = self._hasher.hash_if_exists(self._resolve(self.upstream_root, rel_path))

        if tracked is not None:
            return self._classifier.evaluate(tracked, current_hash, upstream_hash)

        # Untracked: a local copy identical to upstream needs nothing, any
        # other local copy is the user's own.
        if current_hash is not None and current_hash == upstream_hash:
            return self._classifier.evaluate(
                TrackedFile(rel_path, original_hash=upstream_hash), current_hash, upstream_hash
            )
        return self._classifier.evaluate(
            TrackedFile(rel_path), current_hash, upstream_hash, assume_customized=True
        )

    def _conservative_state(self, rel_path: str, tracked: Optional[TrackedFile]) -> FileState:
        return FileState(
            path=rel_path,
            current_hash=None,
            original_hash=tracked.original_hash if tracked is not None else None,
            upstream_hash=None,
            is_customized=True,
            has_upstream_changes=True,
            is_conflict=True,
            action=UpdateAction.MERGE,
        )

    def _read_baseline(self, rel_path: str) -> Optional[str]:
        if self.baseline_root is None:
            return None
        base_path = self._resolve(self.baseline_root, rel_path)
        if not base_path.is_file():
            return None
        try:
            return read_normalized_text(base_path)
        except ContentReadError as e:
            logger.warning("Ignoring unreadable baseline %s: %s", rel_path, e.reason)
            return None

    def _candidate_paths(self, manifest: TrackingManifest) -> List[str]:
        paths: Set[str] = {tracked.path for tracked in manifest}
        for file_path in self.upstream_root.rglob("*"):
            if file_path.is_file():
                paths.add(file_path.relative_to(self.upstream_root).as_posix())
        return sorted(paths)

    @staticmethod
    def _resolve(root: Path, rel_path: str) -> Path:
        return resolve_under(root, rel_path)
