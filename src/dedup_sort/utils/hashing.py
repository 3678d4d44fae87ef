"""Hashing utilities.

File fingerprints are raw 32-byte SHA-256 digests (not hex strings); hex is
only produced for log output.

Files are streamed in fixed-size chunks so arbitrarily large files hash in
constant memory.
"""

from __future__ import annotations
import hashlib

from ..errors import FileIOError

DEFAULT_CHUNK_SIZE = 64 * 1024


def file_fingerprint(path: str, chunk_size: int = DEFAULT_CHUNK_SIZE) -> bytes:
    hasher = hashlib.sha256()
    try:
        with open(path, "rb") as f:
            while chunk := f.read(chunk_size):
                hasher.update(chunk)
    except OSError as e:
        raise FileIOError(f"Cannot read {path}: {e}", "READ_FAILED", path) from e
    return hasher.digest()


def fingerprint_hex(path: str, chunk_size: int = DEFAULT_CHUNK_SIZE) -> str:
    return file_fingerprint(path, chunk_size).hex()
