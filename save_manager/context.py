"""Session state and service container."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import StrEnum
from pathlib import Path
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from save_manager.config import Config
    from save_manager.core.actions import ActionController
    from save_manager.core.backup_store import BackupStore
    from save_manager.core.engine import BackupEngine
    from save_manager.core.host import HostBridge
    from save_manager.core.transfer import SaveFileTransfer


class EngineState(StrEnum):
    IDLE = "idle"
    RESOLVING = "resolving"
    RECONCILING = "reconciling"
    SESSION_ACTIVE = "session_active"
    SHUTTING_DOWN = "shutting_down"


@dataclass
class SessionContext:
    """
    Everything the engine knows about one host session.

    Created when the host starts, discarded when it shuts down. Directory
    entities are referred to by path only.
    """

    live_dir: Path
    backup_root: Path
    current_version: str
    # Active staging area for displaced live files
    overwrite_dir: Path
    last_version: str = ""
    version_saving_enabled_on_startup: bool = False

    sentinel_path: Path | None = None

    backups_created_this_session: bool = False
    # Restores without a user backup swap live and staged data back and forth
    restore_handled_without_backup: bool = False
    # Backups moved or created at startup; rotation never removes these
    preserved_backups: set[Path] = field(default_factory=set)

    state: EngineState = EngineState.IDLE


@dataclass
class AppContext:
    """Central service container handed to the command-line front end."""

    config: Config
    transfer: SaveFileTransfer
    store: BackupStore
    engine: BackupEngine
    actions: ActionController
    host: HostBridge
