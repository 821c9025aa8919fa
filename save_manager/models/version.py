"""Version record model."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path


@dataclass(frozen=True)
class VersionRecord:
    """Current host version and the version recorded by the previous session."""

    current_version: str
    last_version: str
    current_version_path: Path
    last_version_path: Path

    @property
    def version_changed(self) -> bool:
        return self.current_version != self.last_version
