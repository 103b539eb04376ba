"""Terminal display package for safeupdate."""

from .update_tui import UpdateTUI

__all__ = ["UpdateTUI"]
