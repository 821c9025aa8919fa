"""Backup path scheme — canonical version, staging and backup directory paths."""

from __future__ import annotations

import time
from datetime import datetime
from pathlib import Path, PurePosixPath

BACKUP_DIR_NAME = "backup"
OVERWRITE_DIR_NAME = "last-overwrite"
TEMP_DIR_NAME = "temp"
USER_BACKUP_SUFFIX = "USR"

RESERVED_DIR_NAMES = frozenset({OVERWRITE_DIR_NAME, TEMP_DIR_NAME})


def normalize_path(path: str | Path) -> str:
    """Return *path* with forward slashes and no trailing separator."""
    text = str(path).strip().replace("\\", "/")
    if len(text) > 1:
        text = text.rstrip("/")
    return str(PurePosixPath(text)) if text else text


def same_path(a: str | Path | None, b: str | Path | None) -> bool:
    """Compare two paths by their normalized string form."""
    if a is None or b is None:
        return False
    return normalize_path(a) == normalize_path(b)


def backup_root(data_dir: Path) -> Path:
    return data_dir / BACKUP_DIR_NAME


def version_dir(root: Path, version: str) -> Path:
    return Path(normalize_path(root / version))


def overwrite_dir(root: Path, version: str, per_version: bool) -> Path:
    """Staging area for displaced live files, scoped to *version* in per-version mode."""
    if per_version:
        return Path(normalize_path(root / version / OVERWRITE_DIR_NAME))
    return Path(normalize_path(root / OVERWRITE_DIR_NAME))


def temp_dir(root: Path) -> Path:
    return Path(normalize_path(root / TEMP_DIR_NAME))


def backup_dir_name(
    epoch: int | None = None,
    user_created: bool = False,
) -> str:
    """Build ``<epochSeconds>_<yyyy-MM-dd_HH-mm>[_USR]``."""
    if epoch is None:
        epoch = int(time.time())
    stamp = datetime.fromtimestamp(epoch).strftime("%Y-%m-%d_%H-%M")
    name = f"{epoch}_{stamp}"
    if user_created:
        name += f"_{USER_BACKUP_SUFFIX}"
    return name


def parse_backup_epoch(name: str) -> int | None:
    """Return the leading epoch seconds of a backup directory name, or None."""
    if name in RESERVED_DIR_NAMES:
        return None
    head, sep, _ = name.partition("_")
    if not sep or not (head.isascii() and head.isdigit()):
        return None
    return int(head)
