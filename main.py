"""Command-line entry point — wires services and simulates host startup/shutdown events."""

from __future__ import annotations

import argparse
import sys
from pathlib import Path

from save_manager.config import Config, get_config
from save_manager.context import AppContext
from save_manager.core.actions import ActionController
from save_manager.core.backup_store import BackupStore, is_stray_name
from save_manager.core.engine import BackupEngine
from save_manager.core.host import HostBridge
from save_manager.core.transfer import SaveFileTransfer
from save_manager.i18n import set_language, t
from save_manager.logger import setup_logger
from save_manager.models.save_set import SaveFileSet


def create_context(config: Config | None = None) -> AppContext:
    """Wire all services and return an AppContext."""
    config = config or get_config()

    transfer = SaveFileTransfer(SaveFileSet())
    store = BackupStore(
        transfer,
        is_stray=lambda name: is_stray_name(name, config.stray_name_length_threshold),
    )
    engine = BackupEngine(config, transfer=transfer, store=store)

    return AppContext(
        config=config,
        transfer=transfer,
        store=store,
        engine=engine,
        actions=ActionController(engine, config),
        host=HostBridge(config, engine, transfer.save_set),
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="save-manager",
        description="Per-version save file backups with crash-safe restore.",
    )
    parser.add_argument("command", choices=("run", "backup", "restore", "status"))
    parser.add_argument("--data-dir", type=Path, required=True, help="Host live data directory")
    parser.add_argument("--game-version", required=True, help="Version string reported by the host")
    parser.add_argument("--config-dir", type=Path, default=None, help="Directory holding config.json")
    parser.add_argument("--log-dir", type=Path, default=None)
    parser.add_argument("-v", "--verbose", action="store_true")
    return parser


def main(argv: list[str] | None = None) -> int:
    """Run one simulated host session: startup, optional manual action, shutdown."""
    args = build_parser().parse_args(argv)
    setup_logger(args.log_dir, verbose=args.verbose)

    config = Config(args.config_dir) if args.config_dir else get_config()
    set_language(config.language)
    ctx = create_context(config)

    session = ctx.engine.startup(args.data_dir, args.game_version)
    if session is None:
        print(t("cli.no_session", path=args.data_dir))
        return 1

    try:
        if args.command == "backup":
            print(ctx.actions.request_backup())
        elif args.command == "restore":
            print(ctx.actions.request_restore())
        elif args.command == "status":
            recent = ctx.store.most_recent_backup(session)
            print(t("cli.current_version", version=session.current_version))
            print(t("cli.last_version", version=session.last_version))
            print(t("cli.per_version", enabled=config.per_version_saving))
            print(t("cli.most_recent", path=recent or t("cli.none")))
    finally:
        ctx.engine.shutdown()
    return 0


def run() -> None:
    sys.exit(main())


if __name__ == "__main__":
    run()
