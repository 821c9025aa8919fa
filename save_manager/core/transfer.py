"""Save file transfer — copy the tracked save set between directories."""

from __future__ import annotations

from pathlib import Path

from loguru import logger

from save_manager.core import fs
from save_manager.core.staging import OverwriteStaging
from save_manager.models.save_set import SaveFileSet
from save_manager.models.transfer import TransferResult


class SaveFileTransfer:
    """Copies the fixed save file set, collecting per-file failures."""

    def __init__(self, save_set: SaveFileSet | None = None, attempts: int = fs.DEFAULT_ATTEMPTS) -> None:
        self._save_set = save_set or SaveFileSet()
        self._attempts = attempts

    @property
    def save_set(self) -> SaveFileSet:
        return self._save_set

    def copy_set(
        self,
        source_dir: Path,
        dest_dir: Path,
        staging: OverwriteStaging | None = None,
    ) -> TransferResult:
        """
        Copy every tracked file present in *source_dir* over *dest_dir*.

        When *staging* is given, every tracked file already in *dest_dir* is
        moved there first, including files the source does not have. A file
        that cannot be staged is left in place and not copied over.
        Missing source files are skipped. Nothing here raises for a single
        file; failures are folded into the returned result.
        """
        result = TransferResult()
        present = self._save_set.present_in(source_dir)

        if present:
            try:
                dest_dir.mkdir(parents=True, exist_ok=True)
            except OSError as e:
                logger.error(f"Unable to create {dest_dir}: {e}")
                result.copy_failures.extend(present)
                return result

        for name in self._save_set:
            source = source_dir / name
            dest = dest_dir / name

            if staging is not None and dest.is_file():
                if staging.stage(dest):
                    result.staged.append(name)
                else:
                    # Unstaged content must not be overwritten
                    result.stage_failures.append(name)
                    continue

            if not source.is_file():
                continue
            if fs.safe_copy_file(source, dest, self._attempts):
                result.copied.append(name)
            else:
                result.copy_failures.append(name)

        if not result.ok:
            logger.warning(result.message)
        logger.debug(
            f"Copied {len(result.copied)} save files from {source_dir} to {dest_dir}, "
            f"{len(result.staged)} staged"
        )
        return result

    def clear_set(self, directory: Path, staging: OverwriteStaging) -> TransferResult:
        """Move every tracked file out of *directory* into *staging*."""
        result = TransferResult()
        for name in self._save_set.present_in(directory):
            if staging.stage(directory / name):
                result.staged.append(name)
            else:
                result.stage_failures.append(name)
        if not result.ok:
            logger.warning(result.message)
        return result
