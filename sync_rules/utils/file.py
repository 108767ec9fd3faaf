"""
File Utility Functions
======================

This module provides the hashing and copy helpers used by the scanner,
the executor and the merge resolver.
"""

import hashlib
import os
import shutil
import stat
import tempfile
from pathlib import Path

from loguru import logger

from sync_rules.errors import HashError

DEFAULT_MAX_FILE_SIZE = 100 * 1024 * 1024
HASH_CHUNK_SIZE = 65536


def compute_file_hash(file_path: str | Path, max_size: int = DEFAULT_MAX_FILE_SIZE) -> str:
    """
    Compute the SHA-1 digest of a file's raw bytes.

    Args:
        file_path: Path to the file to hash
        max_size: Largest file size in bytes that will be hashed

    Returns:
        str: Hexadecimal digest

    Raises:
        HashError: If the path is not a regular file, is larger than
            max_size, or cannot be read
    """
    path = Path(file_path)
    try:
        info = path.stat()
    except OSError as error:
        raise HashError(f"Cannot stat {path}: {error}", path) from error

    if not stat.S_ISREG(info.st_mode):
        raise HashError(f"Path is not a regular file: {path}", path)
    if info.st_size > max_size:
        raise HashError(f"File is too large to hash ({info.st_size} bytes > {max_size}): {path}", path)

    digest = hashlib.sha1()
    try:
        with path.open("rb") as handle:
            for chunk in iter(lambda: handle.read(HASH_CHUNK_SIZE), b""):
                digest.update(chunk)
    except OSError as error:
        raise HashError(f"Cannot read {path}: {error}", path) from error

    hex_digest = digest.hexdigest()
    logger.debug(f"SHA-1 for {path}: {hex_digest}")
    return hex_digest


def copy_file_bytes(source: str | Path, destination: str | Path) -> None:
    """
    Copy a file's bytes verbatim, creating parent directories as needed.

    Args:
        source: File to copy from
        destination: File to create or overwrite
    """
    destination = Path(destination)
    destination.parent.mkdir(parents=True, exist_ok=True)
    shutil.copyfile(source, destination)


def create_temporary_file(content: str = "", suffix: str | None = None) -> Path:
    """
    Create a temporary file holding content and return its path.

    The caller owns the file and must remove it.
    """
    handle, name = tempfile.mkstemp(prefix="sync-rules-", suffix=suffix or "")
    with os.fdopen(handle, "w", encoding="utf-8") as temp_file:
        temp_file.write(content)
    return Path(name)


def remove_file_quietly(file_path: str | Path) -> None:
    """Remove a scratch file, logging instead of raising if that fails."""
    try:
        Path(file_path).unlink(missing_ok=True)
    except OSError as error:
        logger.warning(f"Failed to clean up temporary file {file_path}: {error}")
