"""Backup directory model."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from save_manager.core.paths import USER_BACKUP_SUFFIX, parse_backup_epoch


@dataclass(frozen=True)
class BackupDirectory:
    """A timestamp-named backup directory on disk.

    Name format (underscore separated):
      0 - seconds since 1970
      1 - local date ``yyyy-MM-dd``
      2 - local time ``HH-mm``
      3 - optional ``USR`` marker for user-created backups
    """

    path: Path
    epoch: int

    @property
    def name(self) -> str:
        return self.path.name

    @property
    def user_created(self) -> bool:
        return self.name.endswith(f"_{USER_BACKUP_SUFFIX}")

    @property
    def sort_key(self) -> tuple[int, str]:
        # Equal seconds fall back to the lexically greater name
        return (self.epoch, self.name)

    @classmethod
    def from_path(cls, path: Path) -> BackupDirectory | None:
        epoch = parse_backup_epoch(path.name)
        if epoch is None:
            return None
        return cls(path=path, epoch=epoch)
