"""Checksum gate for WASM binaries.

The API records the MD5 of every uploaded binary. A deployment only uploads
a new binary when the local file hashes differently.
"""

import hashlib
import os
from pathlib import Path


def file_checksum(path: str | os.PathLike[str]) -> str:
    """Return the hex MD5 digest of the file at ``path``.

    Raises:
        OSError: If the file cannot be read.
    """
    content = Path(os.path.normpath(path)).read_bytes()
    return hashlib.md5(content, usedforsecurity=False).hexdigest()


def has_binary_changed(path: str | os.PathLike[str], known_checksum: str) -> bool:
    """Check whether the local binary differs from ``known_checksum``.

    The comparison is exact: no case or whitespace normalisation.
    """
    return file_checksum(path) != known_checksum
