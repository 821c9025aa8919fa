"""File system primitives with bounded retries.

None of these raise for I/O problems. They log and report success as a bool
so a single locked or vanished file never aborts a whole operation.
"""

from __future__ import annotations

import shutil
from pathlib import Path

from loguru import logger

from save_manager.core.paths import same_path

DEFAULT_ATTEMPTS = 2


def has_files(path: Path) -> bool:
    """True if *path* is a directory with at least one regular file directly inside."""
    if not path.is_dir():
        return False
    try:
        return any(child.is_file() for child in path.iterdir())
    except OSError as e:
        logger.warning(f"Unable to scan {path}: {e}")
        return False


def safe_copy_file(source: Path, dest: Path, attempts: int = DEFAULT_ATTEMPTS) -> bool:
    """Copy *source* over *dest*. Missing sources fail without retrying."""
    error: OSError | None = None
    for _ in range(max(attempts, 1)):
        try:
            shutil.copy2(source, dest)
            return True
        except FileNotFoundError:
            logger.error(f"Copy target file {source.name} could not be found")
            return False
        except OSError as e:
            if error is None:
                error = e
    logger.error(f"Failed to copy {source.name} to {dest.parent}: {error}")
    return False


def safe_move_file(source: Path, dest: Path, attempts: int = DEFAULT_ATTEMPTS) -> bool:
    """Move *source* to *dest*, clearing any file already at *dest* first."""
    logger.debug(f"Moving {source.name} to {dest.parent}")
    if same_path(source, dest):
        return True

    error: OSError | None = None
    for _ in range(max(attempts, 1)):
        try:
            if dest.exists():
                dest.unlink()
            shutil.move(str(source), str(dest))
            return True
        except FileNotFoundError as e:
            if not source.exists():
                logger.error(f"Move target file {source.name} could not be found")
                return False
            if error is None:
                error = e
        except OSError as e:
            if error is None:
                error = e
    logger.error(f"Failed to move {source.name} to {dest.parent}: {error}")
    return False


def safe_delete_file(path: Path) -> bool:
    try:
        path.unlink(missing_ok=True)
        return True
    except OSError as e:
        logger.error(f"Unable to delete file {path}: {e}")
        return False


def safe_delete_directory(path: Path, only_if_empty: bool = False) -> bool:
    """Remove *path* recursively. With *only_if_empty*, keep it when it holds files."""
    if not path.is_dir():
        return True
    if only_if_empty and has_files(path):
        return False
    try:
        shutil.rmtree(path)
        return True
    except OSError as e:
        logger.error(f"Unable to delete directory {path}: {e}")
        return False


def move_directory(source: Path, dest: Path) -> bool:
    """Relocate *source* to *dest*, merging into *dest* when it already exists."""
    if same_path(source, dest):
        logger.info("No move necessary")
        return True
    try:
        dest.parent.mkdir(parents=True, exist_ok=True)
        if not dest.exists():
            shutil.move(str(source), str(dest))
            return True
        shutil.copytree(source, dest, dirs_exist_ok=True)
        shutil.rmtree(source)
        return True
    except OSError as e:
        logger.error(f"Unable to move directory {source}: {e}")
        return False
