"""File handler module: encoding-aware reads and atomic writes.

Provides the file I/O used for the workspace document and folder settings
artifacts.  The sync functions only touch the filesystem; async wrappers
run them through ``run_sync()`` so the event loop is never blocked.
"""

import os
import shutil
import tempfile
from pathlib import Path

from charset_normalizer import from_bytes

from workspace_sync.core.async_utils import run_sync

# =============================================================================
# File Read/Write
# =============================================================================


def decode_bytes(raw: bytes) -> tuple[str, str]:
    """Decode raw file bytes, detecting the encoding when not UTF-8.

    UTF-8 (with or without BOM) is tried first since settings files are
    almost always UTF-8; charset-normalizer is used for anything else.

    Args:
        raw: File content as bytes.

    Returns:
        Tuple of (content_string, detected_encoding).
    """
    if not raw:
        return ("", "utf-8")

    try:
        return (raw.decode("utf-8-sig"), "utf-8")
    except UnicodeDecodeError:
        pass

    result = from_bytes(raw).best()
    if result is None:
        # Detection failed, fall back to utf-8
        return (raw.decode("utf-8", errors="replace"), "utf-8")
    encoding = result.encoding
    # Normalize ascii to utf-8 (ascii is a strict subset of utf-8)
    if encoding == "ascii":
        encoding = "utf-8"
    return (str(result), encoding)


def read_file_with_encoding(path: Path) -> tuple[str, str]:
    """Read a file with automatic encoding detection.

    Args:
        path: Path to the file to read.

    Returns:
        Tuple of (content_string, detected_encoding).
    """
    return decode_bytes(path.read_bytes())


def read_bytes_if_exists(path: Path) -> bytes | None:
    """Return the raw bytes of *path*, or ``None`` if it is not a file."""
    try:
        return path.read_bytes()
    except (FileNotFoundError, IsADirectoryError, NotADirectoryError):
        return None


def _read_umask() -> int:
    umask = os.umask(0)
    os.umask(umask)
    return umask


# The umask can only be read by setting it, so do that once at import.
_NEW_FILE_MODE = 0o666 & ~_read_umask()


def write_file(
    path: Path, content: str, encoding: str = "utf-8"
) -> int:
    """Atomically write content to a file, creating parent directories.

    Writes to a temporary file next to the real target then calls
    ``os.replace()`` so readers never see partial data.  Symlinks are
    followed, so the file they point to is the one updated, and an existing
    file keeps its permission bits.

    Args:
        path: Path to the output file.
        content: String content to write.
        encoding: Encoding to use (default: utf-8).

    Returns:
        Number of bytes written.
    """
    path = path.resolve()
    path.parent.mkdir(parents=True, exist_ok=True)
    encoded = content.encode(encoding)

    fd, tmp_path = tempfile.mkstemp(
        dir=str(path.parent), prefix=f".{path.name}.", suffix=".tmp"
    )
    try:
        with os.fdopen(fd, "wb") as fh:
            fh.write(encoded)
        if path.exists():
            shutil.copymode(path, tmp_path)
        else:
            os.chmod(tmp_path, _NEW_FILE_MODE)
        os.replace(tmp_path, path)
    except BaseException:
        # Clean up temp file on any failure.
        try:
            os.unlink(tmp_path)
        except OSError:
            pass
        raise
    return len(encoded)


# =============================================================================
# Async Wrappers
# =============================================================================


async def read_file_async(path: Path) -> tuple[str, str]:
    """Async wrapper around ``read_file_with_encoding``."""
    return await run_sync(read_file_with_encoding, path)


async def write_file_async(
    path: Path, content: str, encoding: str = "utf-8"
) -> int:
    """Async wrapper around ``write_file``.

    Returns:
        Number of bytes written.
    """
    return await run_sync(write_file, path, content, encoding)
