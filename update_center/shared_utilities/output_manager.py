"""
Output file utilities.

All generated documents and cache entries are written through
:func:`atomic_write_text` so that a reader (or a concurrently running
generator) sees either the previous complete file or the new complete file,
never a partially written one.
"""

import os
from pathlib import Path

from .logging_config import get_logger

logger = get_logger(__name__)

TMP_SUFFIX = ".tmp"


def atomic_write_text(path: str | Path, content: str, encoding: str = "utf-8") -> Path:
    """
    Write text to ``path`` through a temporary sibling file.

    The content goes to ``<path>.tmp`` first and is then moved over the
    target with :func:`os.replace`. If anything fails before the rename the
    temporary file is removed and the previous target is left untouched.

    Args:
        path: Destination file
        content: Text to write
        encoding: Text encoding

    Returns:
        The destination path
    """
    target = Path(path)
    target.parent.mkdir(parents=True, exist_ok=True)
    tmp = target.with_name(target.name + TMP_SUFFIX)

    try:
        with open(tmp, "w", encoding=encoding, newline="") as f:
            f.write(content)
            f.flush()
            os.fsync(f.fileno())
        os.replace(tmp, target)
    except BaseException:
        tmp.unlink(missing_ok=True)
        raise

    return target


def save_output(content: str, path: str | Path, description: str = "output") -> Path:
    """
    Save a generated document atomically and log where it went.

    Args:
        content: Document text
        path: Destination file
        description: Human readable name used in the log line

    Returns:
        Path to the saved file
    """
    output_path = atomic_write_text(path, content)
    logger.bind(path=str(output_path), size=len(content)).info(
        f"Saved {description} to {output_path}"
    )
    return output_path
