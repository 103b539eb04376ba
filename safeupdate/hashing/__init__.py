"""Content hashing package for safeupdate.

Provides normalized content fingerprints that ignore byte-order marks and
line-ending style:

- normalize_content / normalize_and_hash: Pure functions over buffers.
- read_normalized_text: File text with the same normalization applied.
- ContentHasher: File hashing with an mtime-keyed cache.

Example:
    >>> from safeupdate.hashing import ContentHasher
    >>> hasher = ContentHasher()
    >>> hasher.hash_if_exists(Path("CLAUDE.md"))
    'sha256:...'
"""

from .content_hasher import (
    HASH_PREFIX,
    ContentHasher,
    normalize_and_hash,
    normalize_content,
    read_normalized_text,
)

__all__ = [
    "HASH_PREFIX",
    "ContentHasher",
    "normalize_and_hash",
    "normalize_content",
    "read_normalized_text",
]
