"""Filesystem helpers that report failures as FilesystemError."""

import logging
import os
import shutil
import tempfile
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator

from dotfiles_installer.errors import FilesystemError

logger = logging.getLogger(__name__)


def ensure_directory(path: Path | str) -> Path:
    path = Path(path)
    try:
        path.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        raise FilesystemError(f"failed to create directory {path}: {e}") from e
    return path


def remove_path(path: Path | str) -> None:
    """Remove a file or directory tree; a missing path is not an error."""
    path = Path(path)
    try:
        if path.is_dir() and not path.is_symlink():
            shutil.rmtree(path)
        elif path.exists() or path.is_symlink():
            path.unlink()
        else:
            return
    except OSError as e:
        raise FilesystemError(f"failed to remove {path}: {e}") from e
    logger.debug(f"Removed {path}")


def write_text(path: Path | str, content: str, mode: int | None = None) -> Path:
    path = Path(path)
    try:
        path.write_text(content, encoding="utf-8")
        if mode is not None:
            path.chmod(mode)
    except OSError as e:
        raise FilesystemError(f"failed to write {path}: {e}") from e
    return path


def read_text(path: Path | str) -> str:
    try:
        return Path(path).read_text(encoding="utf-8")
    except OSError as e:
        raise FilesystemError(f"failed to read {path}: {e}") from e


def is_executable(path: Path | str) -> bool:
    path = Path(path)
    return path.is_file() and os.access(path, os.X_OK)


@contextmanager
def temporary_file(prefix: str, suffix: str = "") -> Iterator[Path]:
    """Create a temporary file that is removed on every exit path."""
    try:
        fd, name = tempfile.mkstemp(prefix=prefix, suffix=suffix)
    except OSError as e:
        raise FilesystemError(f"failed to create temporary file: {e}") from e
    os.close(fd)
    path = Path(name)
    try:
        yield path
    finally:
        try:
            path.unlink()
        except FileNotFoundError:
            pass
        except OSError as e:
            logger.warning(f"Failed to remove temporary file {path}: {e}")
