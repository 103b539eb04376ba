"""Allow running as ``python -m safeupdate``."""

from safeupdate.cli import app

app()
