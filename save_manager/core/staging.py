"""Overwrite staging — holding area for live files about to be replaced."""

from __future__ import annotations

from pathlib import Path

from loguru import logger

from save_manager.core import fs
from save_manager.core.errors import StagingError
from save_manager.core.paths import TEMP_DIR_NAME, same_path, temp_dir
from save_manager.models.save_set import SaveFileSet


class OverwriteStaging:
    """
    A directory that receives the previous content of every file a copy
    is about to overwrite.

    Files are moved in, never copied, so the displaced version always
    survives the copy that follows even if that copy fails or the process
    dies halfway through.
    """

    def __init__(self, path: Path) -> None:
        self._path = path

    @classmethod
    def for_target(cls, target: Path, overwrite_dir: Path, root: Path) -> OverwriteStaging:
        """Pick the staging area for a transfer touching *target*.

        The overwrite directory cannot stage its own files, so transfers that
        read from or write to it stage into ``temp`` instead.
        """
        if same_path(target, overwrite_dir):
            logger.info("Creating temp directory")
            return cls(temp_dir(root))
        return cls(overwrite_dir)

    @property
    def path(self) -> Path:
        return self._path

    @property
    def is_temp(self) -> bool:
        return self._path.name == TEMP_DIR_NAME

    def ensure(self) -> Path:
        self._path.mkdir(parents=True, exist_ok=True)
        return self._path

    def stage(self, file_path: Path) -> bool:
        """Move *file_path* into the staging area under its own name."""
        self.ensure()
        return fs.safe_move_file(file_path, self._path / file_path.name)

    def has_save_files(self, save_set: SaveFileSet) -> bool:
        return save_set.any_present(self._path)

    def discard(self) -> bool:
        return fs.safe_delete_directory(self._path)

    def replace_into(self, target: Path, save_set: SaveFileSet) -> bool:
        """Swap this (temp) area's files in as the contents of *target*.

        The old contents of *target* are removed first, then the staged
        files are moved over and the temp area is deleted.
        """
        if not self.is_temp:
            raise StagingError(f"Only the {TEMP_DIR_NAME} directory can replace {target}")

        target.mkdir(parents=True, exist_ok=True)
        for name in save_set:
            if not fs.safe_delete_file(target / name):
                return False

        moved_all = True
        for name in save_set.present_in(self._path):
            if not fs.safe_move_file(self._path / name, target / name):
                moved_all = False

        if moved_all:
            self.discard()
        return moved_all
