"""Backup store — timestamp-named backup directory catalog."""

from __future__ import annotations

import time
from pathlib import Path
from typing import TYPE_CHECKING, Callable, Collection

from loguru import logger

from save_manager.core import fs
from save_manager.core.paths import (
    RESERVED_DIR_NAMES,
    backup_dir_name,
    parse_backup_epoch,
    version_dir,
)
from save_manager.core.transfer import SaveFileTransfer
from save_manager.models.backup import BackupDirectory

if TYPE_CHECKING:
    from save_manager.context import SessionContext

# No version string observed so far comes close to this many characters
DEFAULT_STRAY_NAME_THRESHOLD = 25


def is_stray_name(name: str, threshold: int = DEFAULT_STRAY_NAME_THRESHOLD) -> bool:
    """Heuristic: a root-level directory name too long to be a version string."""
    return name not in RESERVED_DIR_NAMES and len(name) > threshold


class BackupStore:
    """Creates, finds and relocates timestamped backup directories."""

    def __init__(
        self,
        transfer: SaveFileTransfer,
        is_stray: Callable[[str], bool] = is_stray_name,
    ) -> None:
        self._transfer = transfer
        self._save_set = transfer.save_set
        self._is_stray = is_stray

    # ── Creation ──

    def backup_parent(self, ctx: SessionContext, per_version_enabled: bool) -> Path:
        """Directory new backups are created in.

        The per-version root is used only when the mode was on at startup or
        its directory already exists, so enabling the mode mid-session does
        not silently change the layout.
        """
        if per_version_enabled:
            per_version_root = version_dir(ctx.backup_root, ctx.current_version)
            if ctx.version_saving_enabled_on_startup or per_version_root.is_dir():
                return per_version_root
        return ctx.backup_root

    def _new_backup_path(self, parent: Path, epoch: int | None, user_created: bool) -> Path:
        epoch = int(time.time()) if epoch is None else epoch
        taken: set[int] = set()
        if parent.is_dir():
            for child in parent.iterdir():
                child_epoch = parse_backup_epoch(child.name)
                if child_epoch is not None:
                    taken.add(child_epoch)
        while epoch in taken:
            epoch += 1
        return parent / backup_dir_name(epoch, user_created)

    def create_timestamped_backup(
        self,
        source_dir: Path,
        parent_dir: Path,
        user_created: bool = False,
        epoch: int | None = None,
    ) -> Path | None:
        """Copy the tracked files of *source_dir* into a new backup directory."""
        if not self._save_set.any_present(source_dir):
            logger.info(f"No save files in {source_dir}, backup skipped")
            return None

        target = self._new_backup_path(parent_dir, epoch, user_created)
        result = self._transfer.copy_set(source_dir, target)
        if not result.copied:
            fs.safe_delete_directory(target)
            logger.warning(f"Backup {target.name} could not be created: {result.message}")
            return None

        logger.info(f"Created backup: {target.name}")
        return target

    def convert_to_backup(
        self,
        directory: Path,
        parent_dir: Path,
        epoch: int | None = None,
    ) -> Path | None:
        """Relocate *directory* (normally a staging area) as a new timestamped backup."""
        if not self._save_set.any_present(directory):
            return None
        target = self._new_backup_path(parent_dir, epoch, user_created=False)
        if not fs.move_directory(directory, target):
            return None
        logger.info(f"Converted {directory.name} into backup {target.name}")
        return target

    # ── Lookup ──

    def most_recent_in(self, root: Path) -> BackupDirectory | None:
        """Newest backup directly under *root* that holds tracked save files."""
        if not root.is_dir():
            return None

        best: BackupDirectory | None = None
        try:
            children = list(root.iterdir())
        except OSError as e:
            logger.warning(f"Unable to scan {root}: {e}")
            return None

        for child in children:
            if not child.is_dir():
                continue
            candidate = BackupDirectory.from_path(child)
            if candidate is None or not self._save_set.any_present(child):
                continue
            if best is None or candidate.sort_key > best.sort_key:
                best = candidate
        return best

    def most_recent_backup(self, ctx: SessionContext) -> Path | None:
        """
        Newest backup across the per-version root and the global root.

        Both roots are searched because per-version saving may have been
        toggled between sessions. The overwrite directory is returned only
        as a last resort, when user backups were made this session but none
        can be found any more.
        """
        per_version = self.most_recent_in(version_dir(ctx.backup_root, ctx.current_version))
        base = self.most_recent_in(ctx.backup_root)

        if per_version and base:
            return base.path if base.epoch > per_version.epoch else per_version.path
        if per_version:
            return per_version.path
        if base:
            return base.path

        if ctx.backups_created_this_session and self._save_set.any_present(ctx.overwrite_dir):
            return ctx.overwrite_dir
        return None

    # ── Stray migration ──

    def find_strays(self, root: Path) -> list[Path]:
        if not root.is_dir():
            return []
        return sorted(
            child
            for child in root.iterdir()
            if child.is_dir() and self._is_stray(child.name)
        )

    def migrate_strays(self, root: Path, target_version_dir: Path) -> list[Path]:
        """Move root-level backups that predate per-version saving under *target_version_dir*."""
        logger.info("Checking for stray backup directories")
        moved: list[Path] = []
        try:
            strays = self.find_strays(root)
        except OSError as e:
            logger.error(f"Unable to move backup directories: {e}")
            return moved

        for stray in strays:
            logger.info(f"Found {stray.name}")
            dest = target_version_dir / stray.name
            if fs.move_directory(stray, dest):
                moved.append(dest)
            else:
                logger.warning(f"Stray backup {stray.name} left in place")
        return moved

    # ── Retention ──

    def rotate_backups(
        self,
        parent_dir: Path,
        max_backups: int,
        keep: Collection[Path] = (),
    ) -> list[Path]:
        """Remove the oldest automatic backups beyond *max_backups*.

        User backups and anything in *keep* are neither counted nor removed.
        """
        if max_backups <= 0 or not parent_dir.is_dir():
            return []

        automatic: list[BackupDirectory] = []
        for child in parent_dir.iterdir():
            backup = BackupDirectory.from_path(child) if child.is_dir() else None
            if backup is not None and not backup.user_created and child not in keep:
                automatic.append(backup)
        automatic.sort(key=lambda b: b.sort_key, reverse=True)

        removed: list[Path] = []
        for oldest in automatic[max_backups:]:
            if fs.safe_delete_directory(oldest.path):
                logger.debug(f"Rotated old backup: {oldest.name}")
                removed.append(oldest.path)
        return removed
