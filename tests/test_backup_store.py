"""Tests for the BackupStore."""

from __future__ import annotations

from pathlib import Path

import pytest

from save_manager.context import SessionContext
from save_manager.core.backup_store import BackupStore, is_stray_name
from save_manager.core.paths import overwrite_dir, parse_backup_epoch
from save_manager.core.transfer import SaveFileTransfer
from save_manager.models.save_set import SaveFileSet


def write_files(directory: Path, files: dict[str, str]) -> None:
    directory.mkdir(parents=True, exist_ok=True)
    for name, content in files.items():
        (directory / name).write_text(content)


def backup_dirs(parent: Path) -> list[Path]:
    return sorted(p for p in parent.iterdir() if p.is_dir() and parse_backup_epoch(p.name) is not None)


@pytest.fixture
def store() -> BackupStore:
    return BackupStore(SaveFileTransfer(SaveFileSet()))


@pytest.fixture
def ctx(tmp_path: Path) -> SessionContext:
    root = tmp_path / "backup"
    root.mkdir()
    live = tmp_path / "live"
    live.mkdir()
    return SessionContext(
        live_dir=live,
        backup_root=root,
        current_version="1.9.15",
        overwrite_dir=overwrite_dir(root, "1.9.15", True),
        version_saving_enabled_on_startup=True,
    )


class TestCreation:
    def test_refuses_empty_source(self, store: BackupStore, ctx: SessionContext) -> None:
        write_files(ctx.live_dir, {"notes.txt": "not a save"})
        assert store.create_timestamped_backup(ctx.live_dir, ctx.backup_root) is None
        assert backup_dirs(ctx.backup_root) == []

    def test_copies_tracked_files(self, store: BackupStore, ctx: SessionContext) -> None:
        write_files(ctx.live_dir, {"sav": "slot1", "expCore": "core"})
        path = store.create_timestamped_backup(ctx.live_dir, ctx.backup_root, epoch=1700000000)
        assert path is not None
        assert path.name.startswith("1700000000_")
        assert (path / "sav").read_text() == "slot1"
        assert (path / "expCore").read_text() == "core"
        assert (ctx.live_dir / "sav").exists()

    def test_user_backup_suffix(self, store: BackupStore, ctx: SessionContext) -> None:
        write_files(ctx.live_dir, {"sav": "slot1"})
        path = store.create_timestamped_backup(ctx.live_dir, ctx.backup_root, user_created=True)
        assert path is not None
        assert path.name.endswith("_USR")

    def test_back_to_back_backups_are_distinct(self, store: BackupStore, ctx: SessionContext) -> None:
        write_files(ctx.live_dir, {"sav": "slot1"})
        first = store.create_timestamped_backup(ctx.live_dir, ctx.backup_root)
        second = store.create_timestamped_backup(ctx.live_dir, ctx.backup_root)
        assert first is not None and second is not None
        assert first != second
        assert parse_backup_epoch(second.name) > parse_backup_epoch(first.name)
        assert (first / "sav").read_text() == (second / "sav").read_text() == "slot1"

    def test_convert_to_backup(self, store: BackupStore, ctx: SessionContext) -> None:
        write_files(ctx.overwrite_dir, {"sav": "staged"})
        path = store.convert_to_backup(ctx.overwrite_dir, ctx.backup_root / "1.9.15")
        assert path is not None
        assert not ctx.overwrite_dir.exists()
        assert (path / "sav").read_text() == "staged"

    def test_convert_skips_empty_directory(self, store: BackupStore, ctx: SessionContext) -> None:
        ctx.overwrite_dir.mkdir(parents=True)
        assert store.convert_to_backup(ctx.overwrite_dir, ctx.backup_root) is None
        assert ctx.overwrite_dir.exists()


class TestBackupParent:
    def test_per_version_enabled_on_startup(self, store: BackupStore, ctx: SessionContext) -> None:
        assert store.backup_parent(ctx, True) == ctx.backup_root / "1.9.15"

    def test_enabled_mid_session_without_directory(self, store: BackupStore, ctx: SessionContext) -> None:
        ctx.version_saving_enabled_on_startup = False
        assert store.backup_parent(ctx, True) == ctx.backup_root

    def test_enabled_mid_session_with_directory(self, store: BackupStore, ctx: SessionContext) -> None:
        ctx.version_saving_enabled_on_startup = False
        (ctx.backup_root / "1.9.15").mkdir()
        assert store.backup_parent(ctx, True) == ctx.backup_root / "1.9.15"

    def test_disabled(self, store: BackupStore, ctx: SessionContext) -> None:
        assert store.backup_parent(ctx, False) == ctx.backup_root


class TestMostRecent:
    def test_none_without_parseable_directories(self, store: BackupStore, ctx: SessionContext) -> None:
        write_files(ctx.backup_root / "1.9.15" / "notes", {"sav": "x"})
        write_files(ctx.backup_root / "last-overwrite", {"sav": "x"})
        assert store.most_recent_backup(ctx) is None

    def test_later_epoch_wins_across_roots(self, store: BackupStore, ctx: SessionContext) -> None:
        write_files(ctx.backup_root / "1000_2024-01-01_00-00", {"sav": "old"})
        newer = ctx.backup_root / "1.9.15" / "2000_2024-01-02_00-00"
        write_files(newer, {"sav": "new"})
        assert store.most_recent_backup(ctx) == newer

    def test_global_root_can_win(self, store: BackupStore, ctx: SessionContext) -> None:
        write_files(ctx.backup_root / "1.9.15" / "1000_2024-01-01_00-00", {"sav": "old"})
        newer = ctx.backup_root / "2000_2024-01-02_00-00"
        write_files(newer, {"sav": "new"})
        assert store.most_recent_backup(ctx) == newer

    def test_directories_without_saves_are_skipped(self, store: BackupStore, ctx: SessionContext) -> None:
        older = ctx.backup_root / "1000_2024-01-01_00-00"
        write_files(older, {"sav": "old"})
        write_files(ctx.backup_root / "3000_2024-01-03_00-00", {"readme.txt": "x"})
        assert store.most_recent_backup(ctx) == older

    def test_equal_epochs_use_name(self, store: BackupStore, ctx: SessionContext) -> None:
        write_files(ctx.backup_root / "1000_2024-01-01_00-00", {"sav": "a"})
        user = ctx.backup_root / "1000_2024-01-01_00-00_USR"
        write_files(user, {"sav": "b"})
        assert store.most_recent_backup(ctx) == user

    def test_overwrite_directory_last_resort(self, store: BackupStore, ctx: SessionContext) -> None:
        write_files(ctx.overwrite_dir, {"sav": "staged"})
        assert store.most_recent_backup(ctx) is None
        ctx.backups_created_this_session = True
        assert store.most_recent_backup(ctx) == ctx.overwrite_dir


class TestStrays:
    def test_is_stray_name(self) -> None:
        assert is_stray_name("1700000000_2023-11-14_22-13")
        assert not is_stray_name("1.9.15")
        assert not is_stray_name("last-overwrite")
        assert not is_stray_name("x" * 30, threshold=30)

    def test_migrates_long_names_only(self, store: BackupStore, ctx: SessionContext) -> None:
        stray = ctx.backup_root / "1700000000_2023-11-14_22-13"
        write_files(stray, {"sav": "old"})
        write_files(ctx.backup_root / "1.9.11", {"sav": "version"})
        write_files(ctx.backup_root / "last-overwrite", {"sav": "staged"})
        target = ctx.backup_root / "1.9.15"

        moved = store.migrate_strays(ctx.backup_root, target)

        assert moved == [target / stray.name]
        assert not stray.exists()
        assert (target / stray.name / "sav").read_text() == "old"
        assert (ctx.backup_root / "1.9.11" / "sav").exists()
        assert (ctx.backup_root / "last-overwrite" / "sav").exists()

    def test_custom_stray_rule(self, ctx: SessionContext) -> None:
        store = BackupStore(SaveFileTransfer(), is_stray=lambda name: name.startswith("old-"))
        write_files(ctx.backup_root / "old-saves", {"sav": "x"})
        moved = store.migrate_strays(ctx.backup_root, ctx.backup_root / "1.9.15")
        assert moved == [ctx.backup_root / "1.9.15" / "old-saves"]


class TestRotation:
    def test_keeps_user_backups(self, store: BackupStore, ctx: SessionContext) -> None:
        parent = ctx.backup_root / "1.9.15"
        for name in ("1000_a", "2000_b", "3000_c", "500_d_USR"):
            write_files(parent / name, {"sav": name})

        removed = store.rotate_backups(parent, 2)

        assert removed == [parent / "1000_a"]
        assert sorted(p.name for p in backup_dirs(parent)) == ["2000_b", "3000_c", "500_d_USR"]

    def test_zero_keeps_everything(self, store: BackupStore, ctx: SessionContext) -> None:
        write_files(ctx.backup_root / "1000_a", {"sav": "x"})
        assert store.rotate_backups(ctx.backup_root, 0) == []

    def test_kept_backups_are_not_counted(self, store: BackupStore, ctx: SessionContext) -> None:
        parent = ctx.backup_root / "1.9.15"
        for name in ("1000_a", "2000_b", "3000_c"):
            write_files(parent / name, {"sav": name})

        removed = store.rotate_backups(parent, 1, keep={parent / "1000_a", parent / "2000_b"})

        assert removed == []
        assert len(backup_dirs(parent)) == 3
