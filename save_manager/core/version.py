"""Version resolver — current vs. last recorded host version."""

from __future__ import annotations

from pathlib import Path

from loguru import logger

from save_manager.core import fs
from save_manager.core.paths import version_dir
from save_manager.models.version import VersionRecord

VERSION_MARKER_NAME = "LastGameVersion.txt"
MARKER_WRITE_ATTEMPTS = 2


def normalize_version(raw: str) -> str:
    """Strip whitespace and a leading ``v`` from a host version string."""
    return raw.strip().lstrip("vV")


def marker_path(live_dir: Path) -> Path:
    return live_dir / VERSION_MARKER_NAME


def read_version_marker(live_dir: Path) -> str | None:
    """Return the first line of the version marker, or None when absent or unreadable."""
    path = marker_path(live_dir)
    if not path.is_file():
        return None
    try:
        with open(path, encoding="utf-8") as f:
            first_line = f.readline()
    except (OSError, UnicodeDecodeError) as e:
        logger.warning(f"Unable to read {VERSION_MARKER_NAME}: {e}")
        return None
    version = normalize_version(first_line)
    return version or None


def resolve(live_dir: Path, backup_root: Path, current_version: str) -> VersionRecord:
    """Build the VersionRecord for this session. Never writes the marker."""
    current = normalize_version(current_version)
    current_path = version_dir(backup_root, current)

    last = read_version_marker(live_dir)
    if last is None or last == current:
        last, last_path = current, current_path
    else:
        last_path = version_dir(backup_root, last)

    logger.info(f"Current Version {current}")
    logger.info(f"Last Version {last}")

    return VersionRecord(
        current_version=current,
        last_version=last,
        current_version_path=current_path,
        last_version_path=last_path,
    )


def needs_marker_write(live_dir: Path, record: VersionRecord) -> bool:
    return record.version_changed or not marker_path(live_dir).is_file()


def write_version_marker(live_dir: Path, version: str) -> bool:
    """Write *version* to the marker file, retrying once. Failure is only a warning."""
    logger.info("Creating version file")
    path = marker_path(live_dir)
    first_error: OSError | None = None
    for _ in range(MARKER_WRITE_ATTEMPTS):
        try:
            path.write_text(version, encoding="utf-8")
        except OSError as e:
            if first_error is None:
                first_error = e
            continue
        if first_error is not None:
            logger.warning(f"{VERSION_MARKER_NAME} overwritten with errors: {first_error}")
        return True

    logger.warning(f"Failed to overwrite {VERSION_MARKER_NAME}: {first_error}")
    return False


def delete_version_marker(live_dir: Path) -> bool:
    """Remove the marker so a stale version cannot linger while per-version saving is off."""
    return fs.safe_delete_file(marker_path(live_dir))
