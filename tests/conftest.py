"""Pytest fixtures for safeupdate tests."""

import io
import json
import tempfile
from pathlib import Path
from typing import Dict, Generator

import pytest
from rich.console import Console

from safeupdate.hashing import normalize_and_hash
from safeupdate.ui import UpdateTUI


def pytest_configure(config):
    config.addinivalue_line("markers", "unit: fast tests of a single component")
    config.addinivalue_line("markers", "integration: tests spanning several components")


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Create a temporary directory for isolated test environments.

    Yields:
        Path to the temporary directory.
    """
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


def write_tree(root: Path, files: Dict[str, str]) -> Path:
    """Create files under root from a {relative path: content} mapping."""
    root.mkdir(parents=True, exist_ok=True)
    for rel_path, content in files.items():
        path = root / rel_path
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content, encoding="utf-8")
    return root


# Contents of three releases of a small template project
RELEASE_V4 = {
    "CLAUDE.md": "# Project\n\n## Rules\nBe brief.\n",
    "commands/review.md": "# Review\nCheck the diff.\n",
}

RELEASE_V5 = {
    "CLAUDE.md": "# Project\n\n## Rules\nBe brief.\n\n## Testing\nRun pytest.\n",
    "commands/review.md": "# Review\nCheck the diff carefully.\n",
    "commands/deploy.md": "# Deploy\nShip it.\n",
}

RELEASE_V6 = {
    "CLAUDE.md": "# Project\n\n## Rules\nBe brief and precise.\n\n## Testing\nRun pytest.\n",
    "commands/review.md": "# Review\nCheck the diff carefully.\n",
    "commands/release.md": "# Release\nTag it.\n",
}


def fingerprints(files: Dict[str, str]) -> Dict[str, str]:
    return {path: normalize_and_hash(content) for path, content in files.items()}


@pytest.fixture
def fingerprint_data() -> dict:
    """Decoded fingerprint database covering releases v4 and v5."""
    return {
        "schema_version": "1.0",
        "tracked_files": sorted(set(RELEASE_V4) | set(RELEASE_V5)),
        "signature_files": ["CLAUDE.md"],
        "versions": {
            "v4": {
                "release_date": "2024-11-01",
                "release_url": "https://example.com/releases/v4",
                "fingerprints": fingerprints(RELEASE_V4),
            },
            "v5": {
                "release_date": "2025-03-01",
                "release_url": "https://example.com/releases/v5",
                "fingerprints": fingerprints(RELEASE_V5),
            },
        },
    }


@pytest.fixture
def fingerprint_db_path(temp_dir: Path, fingerprint_data: dict) -> Path:
    """Fingerprint database written to disk."""
    path = temp_dir / "fingerprints.json"
    path.write_text(json.dumps(fingerprint_data), encoding="utf-8")
    return path


@pytest.fixture
def release_dirs(temp_dir: Path) -> Dict[str, Path]:
    """Unpacked v5 (baseline) and v6 (upstream) releases."""
    return {
        "v5": write_tree(temp_dir / "release-v5", RELEASE_V5),
        "v6": write_tree(temp_dir / "release-v6", RELEASE_V6),
    }


@pytest.fixture
def tui_with_captured_output() -> UpdateTUI:
    """Create an UpdateTUI instance with Console output captured to StringIO.

    Access captured output via: tui.console.file.getvalue()
    """
    output = io.StringIO()
    console = Console(file=output, force_terminal=True, width=120)
    return UpdateTUI(console=console)
