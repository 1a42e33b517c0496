"""Disposable staging tree.

The staging tree is rebuilt from scratch at the start of every build
and removed again on every exit path, successful or not.
"""

import logging
import shutil
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path

from flipsd.core.errors import CleanupError

logger = logging.getLogger(__name__)


def reset_staging(path: Path) -> Path:
    """Remove any previous staging tree and create an empty one.

    Args:
        path: Staging directory.

    Returns:
        The freshly created staging directory.

    Raises:
        OSError: If the directory cannot be removed or created.
    """
    if path.exists() or path.is_symlink():
        logger.debug("Removing previous staging tree %s", path)
        _remove(path)
    path.mkdir(parents=True)
    return path


def remove_staging(path: Path) -> bool:
    """Remove the staging tree, logging instead of raising on failure.

    Args:
        path: Staging directory.

    Returns:
        True if the tree is gone afterwards.
    """
    if not path.exists() and not path.is_symlink():
        return True
    try:
        _remove(path)
    except OSError as e:
        error = CleanupError(f"Could not remove staging tree {path}: {e}")
        logger.error("%s", error)
        return False
    logger.debug("Removed staging tree %s", path)
    return True


@contextmanager
def staging_area(path: Path) -> Iterator[Path]:
    """Provide a fresh staging tree that is removed when the block exits.

    Removal failures are logged and never replace an exception raised
    inside the block.

    Args:
        path: Staging directory.

    Yields:
        The empty staging directory.
    """
    reset_staging(path)
    try:
        yield path
    finally:
        remove_staging(path)


def _remove(path: Path) -> None:
    if path.is_dir() and not path.is_symlink():
        shutil.rmtree(path)
    else:
        path.unlink()
