"""Backup engine — startup reconciliation, shutdown commit and manual backup/restore."""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING, Any, Callable, TypeVar

from loguru import logger

from save_manager.context import EngineState, SessionContext
from save_manager.core import fs, paths, version
from save_manager.core.backup_store import BackupStore, is_stray_name
from save_manager.core.compat import (
    DEFAULT_RULES,
    CompatibilityRules,
    is_problematic_change,
    shares_fragile_family,
)
from save_manager.core.errors import SaveManagerError
from save_manager.core.staging import OverwriteStaging
from save_manager.core.transfer import SaveFileTransfer
from save_manager.models.transfer import TransferResult
from save_manager.models.version import VersionRecord

if TYPE_CHECKING:
    from save_manager.config import Config

SENTINEL_NAME = "savemanager-check.txt"

T = TypeVar("T")


class BackupEngine:
    """
    Drives save backups across one host session.

    Lifecycle::

        IDLE → RESOLVING → RECONCILING → SESSION_ACTIVE → SHUTTING_DOWN → IDLE

    A sentinel file in the live directory marks a session whose bookkeeping
    has not been committed yet. Finding it at startup means the previous
    session ended abnormally. Deleting it is the last step of ``shutdown``.
    """

    def __init__(
        self,
        config: Config,
        transfer: SaveFileTransfer | None = None,
        store: BackupStore | None = None,
        rules: CompatibilityRules = DEFAULT_RULES,
    ) -> None:
        self._config = config
        self._transfer = transfer or SaveFileTransfer()
        self._save_set = self._transfer.save_set
        self._store = store or BackupStore(
            self._transfer,
            is_stray=lambda name: is_stray_name(name, config.stray_name_length_threshold),
        )
        self._rules = rules
        self._session: SessionContext | None = None
        config.subscribe(self._on_config_changed)

    @property
    def session(self) -> SessionContext | None:
        return self._session

    @property
    def state(self) -> EngineState:
        return self._session.state if self._session else EngineState.IDLE

    @property
    def store(self) -> BackupStore:
        return self._store

    def _require_session(self) -> SessionContext:
        if self._session is None:
            raise SaveManagerError("No active session")
        return self._session

    def _run_step(self, description: str, step: Callable[[], T]) -> T | None:
        """Run one orchestration step; a failure skips the step, never the session."""
        try:
            return step()
        except (OSError, SaveManagerError) as e:
            logger.error(f"{description} failed: {e}")
            return None

    # ── Startup ──

    def startup(
        self,
        live_dir: Path,
        current_version: str,
        backup_root: Path | None = None,
    ) -> SessionContext | None:
        """Handle the host startup event. Returns None if the live directory is missing."""
        if self._session is not None:
            logger.warning("Startup called twice, keeping the active session")
            return self._session

        if not live_dir.is_dir():
            logger.warning(f"Could not locate live data directory {live_dir}")
            return None

        root = backup_root or paths.backup_root(live_dir)
        current = version.normalize_version(current_version)
        per_version = self._config.per_version_saving

        ctx = SessionContext(
            live_dir=live_dir,
            backup_root=root,
            current_version=current,
            overwrite_dir=paths.overwrite_dir(root, current, per_version),
            last_version=current,
            version_saving_enabled_on_startup=per_version,
            state=EngineState.RESOLVING,
        )
        self._session = ctx

        try:
            root.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            logger.error(f"Unable to create backup directory {root}: {e}")
            ctx.state = EngineState.SESSION_ACTIVE
            return ctx

        if per_version:
            record = version.resolve(live_dir, root, current)
            ctx.last_version = record.last_version

            ctx.state = EngineState.RECONCILING
            self._reconcile(ctx, record)

            if version.needs_marker_write(live_dir, record):
                version.write_version_marker(live_dir, record.current_version)
        else:
            # A stale marker must not survive while per-version saving is off
            version.delete_version_marker(live_dir)

        ctx.state = EngineState.SESSION_ACTIVE
        return ctx

    def _reconcile(self, ctx: SessionContext, record: VersionRecord) -> None:
        sentinel = ctx.live_dir / SENTINEL_NAME

        if sentinel.exists():
            self._recover_unclean_shutdown(ctx, record, sentinel)
            return

        ctx.sentinel_path = sentinel
        self._run_step("Creating sentinel", sentinel.touch)

        self._preserve_leftover_staging(ctx, record.current_version_path)

        if not self._save_set.any_present(record.current_version_path):
            self._run_step("Seeding version directory", lambda: self._seed_version_directory(ctx, record))
        else:
            self._run_step("Restoring version saves", lambda: self.restore_from_backup(record.current_version_path))

        # On a version change, strays are presumed to belong to the previous version
        stray_target = record.last_version_path if record.version_changed else record.current_version_path
        migrated = self._run_step(
            "Stray backup migration",
            lambda: self._store.migrate_strays(ctx.backup_root, stray_target),
        )
        ctx.preserved_backups.update(migrated or ())

    def _recover_unclean_shutdown(self, ctx: SessionContext, record: VersionRecord, sentinel: Path) -> None:
        logger.warning("Save data backup was unsuccessful on last exit. Backing up current saves.")
        ctx.sentinel_path = sentinel

        changed = record.current_version != record.last_version
        if changed and not shares_fragile_family(record.current_version, record.last_version, self._rules):
            logger.warning(
                f"Live saves may not be valid for {record.last_version}, leaving its backups untouched"
            )
            return

        ctx.overwrite_dir = paths.overwrite_dir(ctx.backup_root, record.last_version, True)
        self._preserve_leftover_staging(ctx, record.last_version_path)
        self._run_step("Crash recovery backup", lambda: self.backup_saves(record.last_version_path))

    def _preserve_leftover_staging(self, ctx: SessionContext, parent: Path) -> None:
        """Turn staging areas left by an interrupted session into timestamped backups."""
        for area in (ctx.overwrite_dir, paths.temp_dir(ctx.backup_root)):
            if self._save_set.any_present(area):
                logger.info(f"Preserving staged saves left in {area.name}")
                preserved = self._run_step(
                    "Preserving staged saves",
                    lambda area=area: self._store.convert_to_backup(area, parent),
                )
                if preserved:
                    ctx.preserved_backups.add(preserved)

    def _seed_version_directory(self, ctx: SessionContext, record: VersionRecord) -> None:
        """Populate an empty version directory, either from live saves or by starting fresh."""
        inherit = self._config.inherit_version_saves and not is_problematic_change(
            record.current_version, record.last_version, self._rules
        )
        if not record.version_changed or inherit:
            self.backup_saves(record.current_version_path)
            return

        logger.info(f"Saves from {record.last_version} are not carried over to {record.current_version}")
        staging = OverwriteStaging(ctx.overwrite_dir)
        self._transfer.clear_set(ctx.live_dir, staging)
        quarantined = self._store.convert_to_backup(staging.path, record.last_version_path)
        if quarantined:
            ctx.preserved_backups.add(quarantined)
            logger.info(f"Previous saves kept in {quarantined}")

    # ── Transfers ──

    def backup_saves(self, target: Path) -> TransferResult:
        """Copy live saves into *target*, staging whatever they replace."""
        ctx = self._require_session()
        logger.info("Backing up save files")
        staging = OverwriteStaging.for_target(target, ctx.overwrite_dir, ctx.backup_root)
        return self._transfer.copy_set(ctx.live_dir, target, staging)

    def restore_from_backup(self, source: Path) -> TransferResult | None:
        """Copy saves from *source* into the live directory. None if there is nothing to restore."""
        ctx = self._require_session()
        logger.info(f"Checking for save data for version {ctx.current_version}")

        if not self._save_set.any_present(source):
            logger.info("No save data available to restore")
            return None

        logger.info("Restoring save files")
        staging = OverwriteStaging.for_target(source, ctx.overwrite_dir, ctx.backup_root)
        result = self._transfer.copy_set(source, ctx.live_dir, staging)

        if staging.is_temp:
            if not result.ok:
                logger.warning(f"Keeping {staging.path.name} directory, some saves were not restored")
            else:
                staging.replace_into(ctx.overwrite_dir, self._save_set)
        return result

    # ── Manual actions ──

    def create_manual_backup(self) -> Path | None:
        """User-requested backup of the live saves."""
        ctx = self._require_session()
        ctx.backups_created_this_session = True
        parent = self._store.backup_parent(ctx, self._config.per_version_saving)
        return self._store.create_timestamped_backup(ctx.live_dir, parent, user_created=True)

    def restore_recent_backup(self) -> Path | None:
        """User-requested restore of the most recent backup. Returns the source used."""
        ctx = self._require_session()
        staged_saves = self._save_set.any_present(ctx.overwrite_dir)

        # Without user backups, the staging area holds the state just replaced
        if not ctx.backups_created_this_session and staged_saves:
            source: Path | None = ctx.overwrite_dir
        else:
            source = self._store.most_recent_backup(ctx)

        if source is None:
            logger.info("Nothing to restore")
            return None
        logger.info(f"Backup found: {source}")

        parent = self._store.backup_parent(ctx, self._config.per_version_saving)
        if not ctx.backups_created_this_session:
            if staged_saves:
                logger.info("Creating safety backup")
                self._store.create_timestamped_backup(ctx.overwrite_dir, parent)
        elif ctx.restore_handled_without_backup and not paths.same_path(source, ctx.overwrite_dir):
            logger.info("Creating safety backup")
            ctx.restore_handled_without_backup = False
            self._store.convert_to_backup(ctx.overwrite_dir, parent)

        self.restore_from_backup(source)

        # Each restore without a user backup swaps live and staged saves
        if not ctx.backups_created_this_session:
            ctx.restore_handled_without_backup = not ctx.restore_handled_without_backup
        return source

    # ── Shutdown ──

    def shutdown(self) -> None:
        """Handle the host shutdown event. Always leaves the engine idle."""
        ctx = self._session
        if ctx is None:
            return
        ctx.state = EngineState.SHUTTING_DOWN

        enabled_mid_session = self._config.per_version_saving and not ctx.version_saving_enabled_on_startup
        if ctx.sentinel_path is not None or enabled_mid_session:
            # Apply progress made while the host was running to the version directory
            self._run_step(
                "Folding session saves",
                lambda: self.backup_saves(paths.version_dir(ctx.backup_root, ctx.current_version)),
            )

        self._run_step("Committing staged saves", lambda: self._commit_staging(ctx))

        if ctx.sentinel_path is not None:
            fs.safe_delete_file(ctx.sentinel_path)

        ctx.state = EngineState.IDLE
        self._session = None

    def _commit_staging(self, ctx: SessionContext) -> None:
        parent = self._store.backup_parent(ctx, self._config.per_version_saving)
        for area in (ctx.overwrite_dir, paths.temp_dir(ctx.backup_root)):
            if self._save_set.any_present(area):
                self._store.convert_to_backup(area, parent)
            else:
                fs.safe_delete_directory(area)
        self._store.rotate_backups(parent, self._config.max_backups, keep=ctx.preserved_backups)

    def _on_config_changed(self, key: str, value: Any) -> None:
        ctx = self._session
        if ctx is None:
            return
        if key == "per_version_saving" and value and not ctx.version_saving_enabled_on_startup:
            logger.info("Per-version saving enabled mid-session, saves will be stored per version on exit")
        elif key == "inherit_version_saves" and not self._config.per_version_saving:
            logger.info("The inherit option only applies when per-version saving is enabled")
