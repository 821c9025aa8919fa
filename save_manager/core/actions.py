"""User-triggered backup and restore requests with a per-action cooldown."""

from __future__ import annotations

from typing import TYPE_CHECKING, Callable

from loguru import logger

from save_manager.core.errors import SaveManagerError
from save_manager.i18n import t

if TYPE_CHECKING:
    from save_manager.config import Config
    from save_manager.core.engine import BackupEngine


class ActionController:
    """
    Front end for the two manual actions.

    Each action starts a cooldown counted in host ticks. A request made
    while its cooldown is running is rejected, not queued. Every request
    returns the status message to show the user.
    """

    def __init__(
        self,
        engine: BackupEngine,
        config: Config,
        on_restored: Callable[[], None] | None = None,
    ) -> None:
        self._engine = engine
        self._config = config
        self._on_restored = on_restored
        self._backup_cooldown = 0
        self._restore_cooldown = 0
        self._status = ""

    @property
    def status(self) -> str:
        return self._status

    @property
    def backup_cooldown(self) -> int:
        return self._backup_cooldown

    @property
    def restore_cooldown(self) -> int:
        return self._restore_cooldown

    def _show(self, message: str) -> str:
        self._status = message
        return message

    def tick(self) -> None:
        """Advance one host frame."""
        if self._backup_cooldown > 0:
            self._backup_cooldown -= 1
        if self._restore_cooldown > 0:
            self._restore_cooldown -= 1

    def request_backup(self) -> str:
        if self._backup_cooldown > 0:
            return self._show(t("status.cooldown_active"))
        self._backup_cooldown = self._config.cooldown_ticks

        logger.info("Creating backups")
        try:
            created = self._engine.create_manual_backup()
        except (OSError, SaveManagerError) as e:
            logger.error(f"Manual backup failed: {e}")
            return self._show(t("status.backup_failed"))

        if created is None:
            return self._show(t("status.nothing_to_back_up"))
        message = t("status.backup_created")
        logger.info(message)
        return self._show(message)

    def request_restore(self) -> str:
        if self._restore_cooldown > 0:
            return self._show(t("status.cooldown_active"))
        self._restore_cooldown = self._config.cooldown_ticks

        logger.info("Restoring latest backup...")
        try:
            source = self._engine.restore_recent_backup()
        except (OSError, SaveManagerError) as e:
            logger.error(f"Restore failed: {e}")
            return self._show(t("status.restore_failed"))

        if source is None:
            message = t("status.nothing_to_restore")
        else:
            if self._on_restored is not None:
                self._on_restored()
            message = t("status.restored")
        logger.info(message)
        return self._show(message)
