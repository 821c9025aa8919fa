"""Host integration contract.

The host application keeps its own "copy saves to backup" routine. These
hooks are what the host calls into instead of its built-in behavior: one
rewrites the backup path it was about to use, the other wraps its single
file copy primitive.
"""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING, Callable

from loguru import logger

from save_manager.core import fs
from save_manager.core.paths import version_dir

if TYPE_CHECKING:
    from save_manager.config import Config
    from save_manager.core.engine import BackupEngine
    from save_manager.models.save_set import SaveFileSet

# Host copy primitive: (save file name, destination directory)
HostCopy = Callable[[str, Path], None]


class HostBridge:
    """Adapts host save routines to per-version backup directories."""

    def __init__(self, config: Config, engine: BackupEngine, save_set: SaveFileSet) -> None:
        self._config = config
        self._engine = engine
        self._save_set = save_set

    def redirect_backup_path(self, requested: Path) -> Path:
        """Return the directory the host should really create its backup in."""
        session = self._engine.session
        if session is None or not self._config.per_version_saving:
            return requested
        return version_dir(requested, session.current_version)

    def copy_save_file(self, name: str, dest_dir: Path, original: HostCopy) -> None:
        """Wrap the host copy primitive.

        The host refuses to overwrite an existing destination, so that case
        is handled here. Copying a primary file also copies the auxiliary
        files the host would otherwise leave behind.
        """
        session = self._engine.session
        live_file = session.live_dir / name if session else None
        dest = dest_dir / name

        if live_file is not None and dest.exists() and live_file.exists():
            fs.safe_copy_file(live_file, dest)
        else:
            original(name, dest_dir)

        for aux in self._save_set.auxiliary.get(name, ()):
            logger.debug(f"Copying {aux} alongside {name}")
            self.copy_save_file(aux, dest_dir, original)
