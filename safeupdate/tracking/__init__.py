"""Tracking manifest package for safeupdate."""

from .manifest import TrackingManifest, load_manifest, save_manifest
from .paths import is_safe_relative_path, resolve_under

__all__ = [
    "TrackingManifest",
    "is_safe_relative_path",
    "load_manifest",
    "resolve_under",
    "save_manifest",
]
