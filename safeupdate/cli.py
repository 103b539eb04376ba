"""
safeupdate - CLI Interface.

A command-line interface for updating template-managed project files without
losing local customizations. Every command only reads project files and
reports; nothing in the project is modified.

Usage Examples:
    # Normalized content hashes
    safeupdate hash CLAUDE.md AGENTS.md

    # What would an update do with one file?
    safeupdate classify CLAUDE.md /tmp/v6/CLAUDE.md --original-hash sha256:...

    # Section-level three-way merge of one document
    safeupdate merge base.md CLAUDE.md /tmp/v6/CLAUDE.md --output merged.md

    # Changed ranges of a large file
    safeupdate diff settings.json /tmp/v6/settings.json --context 5

    # Which release is installed?
    safeupdate detect ~/project --database fingerprints.json

    # Plan a whole update with a session log
    safeupdate plan ~/project /tmp/v6 --manifest ~/project/.safeupdate.json \\
        --baseline /tmp/v5 --log-file update.log --verbose
"""

import logging
import time
from pathlib import Path
from typing import List, Optional

import typer
from rich.console import Console
from rich.logging import RichHandler

from safeupdate.classification import FileStateClassifier
from safeupdate.config import EngineSettings
from safeupdate.errors import (
    ContentReadError,
    DatabaseSchemaError,
    ManifestError,
    MergeAbortError,
)
from safeupdate.hashing import ContentHasher, read_normalized_text
from safeupdate.merging import DiffSectioner, SemanticMerger
from safeupdate.models import TrackedFile, UpdateAction
from safeupdate.orchestration import UpdateLogger, UpdatePlanner
from safeupdate.tracking import load_manifest
from safeupdate.ui import UpdateTUI
from safeupdate.versioning import FingerprintStore, VersionDetector

__version__ = "1.0.0"

# Initialize Typer app
app = typer.Typer(
    name="safeupdate",
    help="Safe template updates - merge upstream changes without losing customizations.",
    add_completion=False,
    no_args_is_help=True,
)

# Rich console for consistent output formatting
console = Console()


def version_callback(value: bool) -> None:
    """Display version information and exit."""
    if value:
        console.print(f"safeupdate v{__version__}")
        raise typer.Exit()


def configure_logging(verbose: bool) -> None:
    """Route library logging through rich on stderr."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
        force=True,
    )


def validate_directory(path: Path, role: str) -> None:
    """
    Validate that a directory argument exists.

    Raises:
        typer.Exit: If validation fails with descriptive error message.
    """
    if not path.exists():
        console.print(f"[red]Error:[/red] {role} path does not exist: {path}")
        raise typer.Exit(1)

    if not path.is_dir():
        console.print(f"[red]Error:[/red] {role} path is not a directory: {path}")
        raise typer.Exit(1)


def validate_threshold(value: float) -> float:
    """
    Validate match threshold is within valid range.

    Raises:
        typer.BadParameter: If value is out of range.
    """
    if not 0.0 <= value <= 100.0:
        raise typer.BadParameter("Threshold must be between 0 and 100")
    return value


def validate_context(value: int) -> int:
    if value < 0:
        raise typer.BadParameter("Context lines must not be negative")
    return value


@app.callback()
def main(
    version: Optional[bool] = typer.Option(
        None,
        "--version",
        "-v",
        callback=version_callback,
        is_eager=True,
        help="Show version and exit.",
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose",
        "-V",
        help="Enable debug logging.",
    ),
) -> None:
    """safeupdate - merge upstream template changes without losing customizations."""
    configure_logging(verbose)


@app.command("hash")
def hash_files(
    files: List[Path] = typer.Argument(..., help="Files to hash."),
) -> None:
    """
    Print normalized content hashes.

    Byte-order marks and CRLF line endings are ignored, so the same text
    saved on different platforms hashes identically.
    """
    hasher = ContentHasher()
    tui = UpdateTUI(console)
    try:
        rows = [(str(path), hasher.hash_file(path)) for path in files]
    except ContentReadError as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1)
    tui.display_hashes(rows)


@app.command()
def classify(
    current: Path = typer.Argument(..., help="The local file (may be absent)."),
    upstream: Path = typer.Argument(..., help="The upstream file (may be absent)."),
    original_hash: Optional[str] = typer.Option(
        None,
        "--original-hash",
        "-o",
        help="Recorded hash of the baseline content.",
    ),
    original: Optional[Path] = typer.Option(
        None,
        "--original",
        "-b",
        help="Baseline file to hash instead of --original-hash.",
    ),
    assume_customized: bool = typer.Option(
        False,
        "--assume-customized",
        "-a",
        help="Treat the local file as customized.",
    ),
) -> None:
    """
    Decide what an update should do with one file.

    Prints one of add, update, merge, preserve, remove or skip.
    """
    if original_hash and original is not None:
        console.print("[red]Error:[/red] Use either --original-hash or --original, not both.")
        raise typer.Exit(1)

    hasher = ContentHasher()
    try:
        if original is not None:
            original_hash = hasher.hash_file(original)
        state = FileStateClassifier().evaluate(
            TrackedFile(path=str(current), original_hash=original_hash),
            hasher.hash_if_exists(current),
            hasher.hash_if_exists(upstream),
            assume_customized=assume_customized,
        )
    except ContentReadError as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1)

    UpdateTUI(console).display_classification(state)


@app.command()
def merge(
    base: Path = typer.Argument(..., help="The original document the project started from."),
    current: Path = typer.Argument(..., help="The project's current document."),
    incoming: Path = typer.Argument(..., help="The new upstream document."),
    output: Optional[Path] = typer.Option(
        None,
        "--output",
        "-o",
        help="Write the merged document here instead of printing it.",
    ),
    threshold: float = typer.Option(
        80.0,
        "--threshold",
        "-t",
        help="Minimum section match score (0-100).",
        callback=validate_threshold,
    ),
) -> None:
    """
    Merge a document section by section.

    Sections changed only upstream are updated, sections changed only
    locally are kept, and sections changed on both sides become conflict
    marker blocks for review.
    """
    tui = UpdateTUI(console)
    try:
        merger = SemanticMerger(EngineSettings(match_threshold=threshold))
        result = merger.merge(
            read_normalized_text(base),
            read_normalized_text(current),
            read_normalized_text(incoming),
        )
    except ContentReadError as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1)
    except MergeAbortError as e:
        console.print(f"[red]Error:[/red] Merge aborted - {e}")
        raise typer.Exit(1)

    if output is None:
        tui.display_document(result.merged_text)
        return

    try:
        output.write_text(result.merged_text, encoding="utf-8")
    except OSError as e:
        console.print(f"[red]Error:[/red] Cannot write {output}: {e}")
        raise typer.Exit(1)

    tui.display_merge_result(result, str(current))
    console.print(f"[dim]Merged document written to: {output}[/dim]")


@app.command()
def diff(
    current: Path = typer.Argument(..., help="The project's current file."),
    incoming: Path = typer.Argument(..., help="The new upstream file."),
    context: int = typer.Option(
        3,
        "--context",
        "-c",
        help="Context lines around each changed region.",
        callback=validate_context,
    ),
) -> None:
    """
    Report changed regions of a file pair, position by position.
    """
    try:
        report = DiffSectioner(context).compare(
            read_normalized_text(current), read_normalized_text(incoming)
        )
    except ContentReadError as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1)

    UpdateTUI(console).display_diff_report(report, str(current))


@app.command()
def detect(
    project: Path = typer.Argument(..., help="Project directory to identify."),
    database: Path = typer.Option(
        ...,
        "--database",
        "-d",
        help="Fingerprint database (JSON).",
    ),
    skip_signature: bool = typer.Option(
        False,
        "--skip-signature",
        "-s",
        help="Skip the signature fast path and scan every file.",
    ),
    log_file: Optional[Path] = typer.Option(
        None,
        "--log-file",
        "-l",
        help="Path for log file output.",
    ),
) -> None:
    """
    Identify which release a project's files were installed from.
    """
    validate_directory(project, "Project")

    try:
        detector = VersionDetector(FingerprintStore(database))
        match = detector.detect(project, skip_signature=skip_signature)
    except DatabaseSchemaError as e:
        console.print(f"[red]Error:[/red] Invalid fingerprint database - {e}")
        raise typer.Exit(1)
    except KeyboardInterrupt:
        console.print("\n[yellow]Detection interrupted by user.[/yellow]")
        raise typer.Exit(130)

    UpdateTUI(console).display_version_match(match)

    if log_file:
        try:
            with UpdateLogger(log_file, mode="DETECT") as update_log:
                update_log.log_header()
                update_log.log_version_detection(project, match)
        except OSError as e:
            console.print(
                f"[yellow]Warning:[/yellow] Failed to create log file: {e}. "
                "Continuing without logging."
            )
        else:
            console.print(f"[dim]Log written to: {log_file}[/dim]")


@app.command()
def plan(
    project: Path = typer.Argument(..., help="Project directory to update."),
    upstream: Path = typer.Argument(..., help="Directory holding the new release."),
    manifest: Path = typer.Option(
        ...,
        "--manifest",
        "-m",
        help="Tracking manifest (JSON); a missing file means nothing is tracked yet.",
    ),
    baseline: Optional[Path] = typer.Option(
        None,
        "--baseline",
        "-b",
        help="Directory holding the release the project was installed from.",
    ),
    threshold: float = typer.Option(
        80.0,
        "--threshold",
        "-t",
        help="Minimum section match score (0-100).",
        callback=validate_threshold,
    ),
    context: int = typer.Option(
        3,
        "--context",
        "-c",
        help="Context lines around each changed region of large files.",
        callback=validate_context,
    ),
    log_file: Optional[Path] = typer.Option(
        None,
        "--log-file",
        "-l",
        help="Path for log file output.",
    ),
) -> None:
    """
    Classify every file for an update and prepare merges for review.

    Nothing in the project is modified. Files changed both locally and
    upstream get a semantic merge, a conflict block, or a sectioned diff
    report depending on their type and size.
    """
    validate_directory(project, "Project")
    validate_directory(upstream, "Upstream")
    if baseline is not None:
        validate_directory(baseline, "Baseline")

    start_time = time.time()
    try:
        planner = UpdatePlanner(
            project_root=project,
            upstream_root=upstream,
            baseline_root=baseline,
            settings=EngineSettings(match_threshold=threshold, context_lines=context),
        )
        update_plan = planner.plan(load_manifest(manifest))

    except KeyboardInterrupt:
        console.print("\n[yellow]Planning interrupted by user.[/yellow]")
        raise typer.Exit(130)

    except ManifestError as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1)

    except ValueError as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1)

    UpdateTUI(console).display_plan(update_plan, planner.project_root, planner.upstream_root)

    if log_file:
        try:
            with UpdateLogger(log_file, mode="PLAN") as update_log:
                update_log.log_header()
                update_log.log_plan_phase(planner.project_root, planner.upstream_root, update_plan)
                for proposal in update_plan.proposals.values():
                    update_log.log_merge_proposal(proposal)
                update_log.log_summary(update_plan, time.time() - start_time)
        except OSError as e:
            console.print(
                f"[yellow]Warning:[/yellow] Failed to create log file: {e}. "
                "Continuing without logging."
            )
        else:
            console.print(f"[dim]Log written to: {log_file}[/dim]")

    merges = update_plan.count(UpdateAction.MERGE)
    if merges:
        console.print(f"\n[yellow]{merges} file(s) need review before updating.[/yellow]")

    if update_plan.errors:
        console.print(
            f"\n[yellow]Completed with {len(update_plan.errors)} error(s).[/yellow]"
        )
        raise typer.Exit(1)


if __name__ == "__main__":
    app()
