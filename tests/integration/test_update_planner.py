"""
Integration tests for UpdatePlanner.

Tests cover:
- A full update pass from a v5 project to v6
- Review strategy selection and fallbacks
- Untracked upstream files
- Unreadable files
- Read-only behavior
"""

import sys
from pathlib import Path
from typing import Dict

import pytest

from safeupdate.config import EngineSettings
from safeupdate.errors import ContentReadError, MergeAbortError
from safeupdate.hashing import ContentHasher, normalize_and_hash
from safeupdate.merging import SemanticMerger, has_conflict_markers
from safeupdate.models import ReviewStrategy, TrackedFile, UpdateAction
from safeupdate.orchestration import UpdatePlanner
from safeupdate.tracking import TrackingManifest

sys.path.insert(0, str(Path(__file__).parent.parent))
from conftest import RELEASE_V5, write_tree

CUSTOM_CLAUDE = (
    "# Project\n\n## Rules\nBe brief.\n\n## Testing\nRun pytest.\n\n## My Notes\nmine\n"
)


def manifest_for(files: Dict[str, str]) -> TrackingManifest:
    return TrackingManifest(
        [TrackedFile(path, normalize_and_hash(content)) for path, content in files.items()],
        baseline_version="v5",
    )


def snapshot(root: Path) -> Dict[str, bytes]:
    return {
        p.relative_to(root).as_posix(): p.read_bytes() for p in root.rglob("*") if p.is_file()
    }


def actions(plan) -> Dict[str, UpdateAction]:
    return {state.path: state.action for state in plan.states}


@pytest.fixture
def customized_project(temp_dir: Path) -> Path:
    """The v5 release with a local section added to CLAUDE.md."""
    return write_tree(temp_dir / "project", dict(RELEASE_V5, **{"CLAUDE.md": CUSTOM_CLAUDE}))


@pytest.mark.integration
class TestReleaseUpdate:
    """Planning the v5 -> v6 update of a customized project."""

    def test_actions(self, customized_project: Path, release_dirs):
        planner = UpdatePlanner(customized_project, release_dirs["v6"], release_dirs["v5"])

        plan = planner.plan(manifest_for(RELEASE_V5))

        assert actions(plan) == {
            "CLAUDE.md": UpdateAction.MERGE,
            "commands/deploy.md": UpdateAction.REMOVE,
            "commands/release.md": UpdateAction.ADD,
            "commands/review.md": UpdateAction.SKIP,
        }
        assert plan.errors == []

    def test_states_are_in_path_order(self, customized_project: Path, release_dirs):
        plan = UpdatePlanner(customized_project, release_dirs["v6"]).plan(
            manifest_for(RELEASE_V5)
        )
        paths = [state.path for state in plan.states]
        assert paths == sorted(paths)

    def test_semantic_merge_keeps_custom_section(self, customized_project: Path, release_dirs):
        planner = UpdatePlanner(customized_project, release_dirs["v6"], release_dirs["v5"])

        plan = planner.plan(manifest_for(RELEASE_V5))

        proposal = plan.proposals["CLAUDE.md"]
        assert proposal.strategy is ReviewStrategy.SEMANTIC
        assert proposal.fallback_reason is None
        assert proposal.merge_result.merged_text == (
            "# Project\n\n## Rules\nBe brief and precise.\n\n"
            "## Testing\nRun pytest.\n\n## My Notes\nmine\n"
        )
        assert proposal.merge_result.conflict_count == 0
        assert list(plan.proposals) == ["CLAUDE.md"]

    def test_project_is_never_modified(self, customized_project: Path, release_dirs):
        before = snapshot(customized_project)

        UpdatePlanner(customized_project, release_dirs["v6"], release_dirs["v5"]).plan(
            manifest_for(RELEASE_V5)
        )

        assert snapshot(customized_project) == before

    def test_without_baseline_falls_back_to_conflict_block(
        self, customized_project: Path, release_dirs
    ):
        plan = UpdatePlanner(customized_project, release_dirs["v6"]).plan(
            manifest_for(RELEASE_V5)
        )

        proposal = plan.proposals["CLAUDE.md"]
        assert proposal.strategy is ReviewStrategy.CONFLICT_BLOCK
        assert proposal.fallback_reason == "no baseline content available"
        assert has_conflict_markers(proposal.conflict_text)
        assert "## My Notes" in proposal.conflict_text

    def test_aborted_merge_falls_back(self, customized_project: Path, release_dirs, monkeypatch):
        def abort(self, base_text, current_text, incoming_text):
            raise MergeAbortError("invariant violated")

        monkeypatch.setattr(SemanticMerger, "merge", abort)

        plan = UpdatePlanner(customized_project, release_dirs["v6"], release_dirs["v5"]).plan(
            manifest_for(RELEASE_V5)
        )

        proposal = plan.proposals["CLAUDE.md"]
        assert proposal.strategy is ReviewStrategy.CONFLICT_BLOCK
        assert proposal.fallback_reason == "semantic merge aborted: invariant violated"


@pytest.mark.integration
class TestFallbackStrategies:
    """Non-structured and large files."""

    def test_small_non_structured_file_gets_conflict_block(self, temp_dir: Path):
        base = {"settings.json": '{"a": 1}\n'}
        project = write_tree(temp_dir / "project", {"settings.json": '{"a": 2}\n'})
        upstream = write_tree(temp_dir / "upstream", {"settings.json": '{"a": 3}\n'})
        baseline = write_tree(temp_dir / "baseline", base)

        plan = UpdatePlanner(project, upstream, baseline).plan(manifest_for(base))

        proposal = plan.proposals["settings.json"]
        assert proposal.strategy is ReviewStrategy.CONFLICT_BLOCK
        assert proposal.fallback_reason == "not a structured document"
        assert proposal.conflict_text == (
            "<<<<<<< Current (yours)\n"
            '{"a": 2}\n'
            "||||||| Base (original)\n"
            '{"a": 1}\n'
            "=======\n"
            '{"a": 3}\n'
            ">>>>>>> Incoming (upstream)\n"
        )

    def test_large_file_gets_sectioned_diff(self, temp_dir: Path):
        lines = [f"line {n}" for n in range(1, 201)]
        base_text = "\n".join(lines) + "\n"
        current_text = base_text + "local tail\n"
        incoming_lines = list(lines)
        incoming_lines[99] = "changed upstream"
        incoming_text = "\n".join(incoming_lines) + "\n"

        base = {"big.txt": base_text}
        project = write_tree(temp_dir / "project", {"big.txt": current_text})
        upstream = write_tree(temp_dir / "upstream", {"big.txt": incoming_text})

        plan = UpdatePlanner(project, upstream).plan(manifest_for(base))

        proposal = plan.proposals["big.txt"]
        assert proposal.strategy is ReviewStrategy.SECTIONED_DIFF
        spans = [(s.current.start_line, s.current.end_line) for s in proposal.diff_report.sections]
        assert spans == [(97, 103), (198, 201)]

    def test_line_threshold_counts_newline_terminated_lines(self, temp_dir: Path):
        # 60 lines, each with an embedded form feed
        base_text = "".join(f"page\x0cbreak {n}\n" for n in range(60))
        base = {"report.txt": base_text}
        project = write_tree(temp_dir / "project", {"report.txt": base_text + "mine\n"})
        upstream = write_tree(temp_dir / "upstream", {"report.txt": base_text + "theirs\n"})

        plan = UpdatePlanner(project, upstream).plan(manifest_for(base))

        assert plan.proposals["report.txt"].strategy is ReviewStrategy.CONFLICT_BLOCK

    def test_line_threshold_is_configurable(self, temp_dir: Path):
        base = {"notes.txt": "a\nb\nc\n"}
        project = write_tree(temp_dir / "project", {"notes.txt": "a\nB\nc\n"})
        upstream = write_tree(temp_dir / "upstream", {"notes.txt": "a\nb\nC\n"})

        planner = UpdatePlanner(
            project, upstream, settings=EngineSettings(diff_line_threshold=2)
        )
        plan = planner.plan(manifest_for(base))

        assert plan.proposals["notes.txt"].strategy is ReviewStrategy.SECTIONED_DIFF


@pytest.mark.integration
class TestUntrackedFiles:
    """Upstream files that the manifest does not know about."""

    def test_identical_local_copy_is_skipped(self, temp_dir: Path):
        project = write_tree(temp_dir / "project", {"extra.md": "# Extra\n"})
        upstream = write_tree(temp_dir / "upstream", {"extra.md": "# Extra\n"})

        plan = UpdatePlanner(project, upstream).plan(TrackingManifest())

        assert actions(plan) == {"extra.md": UpdateAction.SKIP}

    def test_differing_local_copy_is_merged(self, temp_dir: Path):
        project = write_tree(temp_dir / "project", {"extra.md": "# Extra\nmine\n"})
        upstream = write_tree(temp_dir / "upstream", {"extra.md": "# Extra\ntheirs\n"})

        plan = UpdatePlanner(project, upstream).plan(TrackingManifest())

        assert actions(plan) == {"extra.md": UpdateAction.MERGE}
        assert plan.states[0].is_customized
        assert plan.proposals["extra.md"].strategy is ReviewStrategy.CONFLICT_BLOCK

    def test_missing_local_copy_is_added(self, temp_dir: Path):
        project = write_tree(temp_dir / "project", {})
        upstream = write_tree(temp_dir / "upstream", {"docs/new.md": "# New\n"})

        plan = UpdatePlanner(project, upstream).plan(TrackingManifest())

        assert actions(plan) == {"docs/new.md": UpdateAction.ADD}

    def test_tracked_file_gone_everywhere_is_skipped(self, temp_dir: Path):
        project = write_tree(temp_dir / "project", {})
        upstream = write_tree(temp_dir / "upstream", {})

        plan = UpdatePlanner(project, upstream).plan(manifest_for({"old.md": "x"}))

        assert actions(plan) == {"old.md": UpdateAction.SKIP}


@pytest.mark.integration
class TestErrors:
    """Unreadable files and invalid roots."""

    def test_unreadable_file_is_flagged_for_review(self, customized_project: Path, release_dirs):
        class FailingHasher(ContentHasher):
            def hash_if_exists(self, file_path):
                if Path(file_path).name == "review.md":
                    raise ContentReadError(file_path, "permission denied")
                return super().hash_if_exists(file_path)

        planner = UpdatePlanner(
            customized_project, release_dirs["v6"], release_dirs["v5"], hasher=FailingHasher()
        )
        plan = planner.plan(manifest_for(RELEASE_V5))

        assert actions(plan)["commands/review.md"] is UpdateAction.MERGE
        assert "commands/review.md" not in plan.proposals
        assert len(plan.errors) == 1
        assert "permission denied" in plan.errors[0]
        # Other files are still planned
        assert actions(plan)["CLAUDE.md"] is UpdateAction.MERGE

    def test_path_outside_project_is_never_read(self, temp_dir: Path):
        (temp_dir / "outside.md").write_text("# Secret\n")
        project = write_tree(temp_dir / "project", {"a.md": "# A\n"})
        upstream = write_tree(temp_dir / "upstream", {"a.md": "# A\n"})
        seen = []

        class RecordingHasher(ContentHasher):
            def hash_if_exists(self, file_path):
                seen.append(Path(file_path))
                return super().hash_if_exists(file_path)

        manifest = TrackingManifest([TrackedFile("../outside.md", normalize_and_hash("# Secret\n"))])
        plan = UpdatePlanner(project, upstream, hasher=RecordingHasher()).plan(manifest)

        assert actions(plan) == {"../outside.md": UpdateAction.MERGE, "a.md": UpdateAction.SKIP}
        assert "../outside.md" not in plan.proposals
        assert len(plan.errors) == 1
        assert "escapes" in plan.errors[0]
        assert all(path.name == "a.md" for path in seen)

    def test_missing_project_root(self, temp_dir: Path, release_dirs):
        with pytest.raises(ValueError, match="Project path does not exist"):
            UpdatePlanner(temp_dir / "nope", release_dirs["v6"])

    def test_upstream_root_must_be_directory(self, temp_dir: Path):
        project = write_tree(temp_dir / "project", {"a.md": "x"})
        with pytest.raises(ValueError, match="Upstream path is not a directory"):
            UpdatePlanner(project, project / "a.md")
