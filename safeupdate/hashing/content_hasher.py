"""Normalized content hashing with caching support.

This module provides normalize_and_hash() for in-memory buffers and the
ContentHasher class for files. Content is normalized before hashing so that
byte-order marks and Windows line endings never register as changes:

1. A leading UTF-8 byte-order mark is removed.
2. Every CRLF sequence becomes LF.

Nothing else is touched; interior whitespace is significant.

Example:
    >>> from safeupdate.hashing import ContentHasher, normalize_and_hash
    >>> normalize_and_hash(b"a\\r\\nb") == normalize_and_hash(b"a\\nb")
    True
    >>> hasher = ContentHasher()
    >>> hash_value = hasher.hash_file(Path("/path/to/AGENTS.md"))
"""

import hashlib
import logging
from pathlib import Path
from typing import Dict, Optional, Tuple, Union

from safeupdate.errors import ContentReadError

logger = logging.getLogger(__name__)

HASH_PREFIX = "sha256:"

UTF8_BOM = b"\xef\xbb\xbf"


def normalize_content(data: Union[bytes, str]) -> bytes:
    """Strip a leading BOM and convert CRLF line endings to LF.

    Args:
        data: Raw bytes, or text which is encoded as UTF-8 first.

    Returns:
        The normalized bytes.
    """
    if isinstance(data, str):
        data = data.encode("utf-8")
    if data.startswith(UTF8_BOM):
        data = data[len(UTF8_BOM):]
    return data.replace(b"\r\n", b"\n")


def normalize_and_hash(data: Union[bytes, str]) -> str:
    """Compute the normalized content hash of a buffer.

    Args:
        data: Raw bytes or text.

    Returns:
        A tag of the form "sha256:<hex>".
    """
    return HASH_PREFIX + hashlib.sha256(normalize_content(data)).hexdigest()


def read_normalized_text(file_path: Path) -> str:
    """Read a file as text with the same normalization used for hashing.

    Undecodable bytes are replaced rather than rejected.

    Raises:
        ContentReadError: If the file does not exist or cannot be read.
    """
    path = Path(file_path)
    try:
        data = path.read_bytes()
    except FileNotFoundError as e:
        raise ContentReadError(path, "file not found") from e
    except IsADirectoryError as e:
        raise ContentReadError(path, "not a file") from e
    except PermissionError as e:
        raise ContentReadError(path, "permission denied") from e
    except OSError as e:
        raise ContentReadError(path, str(e)) from e
    return normalize_content(data).decode("utf-8", errors="replace")


class ContentHasher:
    """Computes normalized hashes of files with caching support.

    Hashes are cached by (resolved path, modification time) so repeated
    lookups during a version scan or update plan do not re-read files, and
    modified files are re-hashed automatically.

    Unlike a plain digest helper, failures are never reported through a
    sentinel value: an unreadable file raises ContentReadError. Callers that
    treat a missing file as a valid "absent" state use hash_if_exists().

    Attributes:
        _cache: Dictionary mapping (path, mtime) tuples to content hashes.
        _cache_hits: Counter for cache hits.
        _cache_misses: Counter for cache misses.
    """

    def __init__(self) -> None:
        """Initialize the ContentHasher with an empty cache."""
        self._cache: Dict[Tuple[Path, float], str] = {}
        self._cache_hits: int = 0
        self._cache_misses: int = 0

    def hash_file(self, file_path: Path) -> str:
        """Compute the normalized hash of a file.

        Args:
            file_path: Path to the file to hash.

        Returns:
            The "sha256:<hex>" tag of the normalized content.

        Raises:
            ContentReadError: If the file does not exist, is not a regular
                file, or cannot be read.
        """
        try:
            resolved_path = Path(file_path).resolve()

            if not resolved_path.is_file():
                reason = "not a file" if resolved_path.exists() else "file not found"
                raise ContentReadError(file_path, reason)

            mtime = resolved_path.stat().st_mtime
            cache_key = (resolved_path, mtime)
            if cache_key in self._cache:
                self._cache_hits += 1
                return self._cache[cache_key]

            self._cache_misses += 1
            hash_value = normalize_and_hash(resolved_path.read_bytes())
            self._cache[cache_key] = hash_value
            logger.debug("Hashed %s -> %s", file_path, hash_value)
            return hash_value

        except ContentReadError:
            raise
        except PermissionError as e:
            raise ContentReadError(file_path, "permission denied") from e
        except OSError as e:
            raise ContentReadError(file_path, str(e)) from e

    def hash_if_exists(self, file_path: Path) -> Optional[str]:
        """Hash a file, treating absence as a valid result.

        Args:
            file_path: Path to the file to hash.

        Returns:
            The content hash, or None if nothing exists at the path.

        Raises:
            ContentReadError: If the file exists but cannot be read.
        """
        if not Path(file_path).exists():
            return None
        return self.hash_file(file_path)

    def clear_cache(self) -> None:
        """Clear the internal hash cache and reset the hit/miss counters."""
        self._cache.clear()
        self._cache_hits = 0
        self._cache_misses = 0

    def get_cache_stats(self) -> Dict[str, int]:
        """Get cache statistics for debugging and monitoring.

        Returns:
            Dictionary containing:
            - 'size': Number of entries in the cache
            - 'hits': Number of cache hits
            - 'misses': Number of cache misses
        """
        return {
            "size": len(self._cache),
            "hits": self._cache_hits,
            "misses": self._cache_misses,
        }
