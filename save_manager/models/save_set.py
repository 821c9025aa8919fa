"""Tracked save file set."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterator

# Slot and expedition files written by the host, in copy order.
SAVE_FILES: tuple[str, ...] = (
    "sav",
    "sav2",
    "sav3",
    "expCore",
    "expCore1",
    "expCore2",
    "expCore3",
    "exp1",
    "exp2",
    "exp3",
)

# Primary file → auxiliary files the host forgets to copy alongside it.
AUXILIARY_FILES: dict[str, tuple[str, ...]] = {
    "exp1": ("exp2", "exp3"),
}


@dataclass(frozen=True)
class SaveFileSet:
    """Ordered, immutable list of logical save file names."""

    names: tuple[str, ...] = SAVE_FILES
    auxiliary: dict[str, tuple[str, ...]] = field(default_factory=lambda: dict(AUXILIARY_FILES))

    def __iter__(self) -> Iterator[str]:
        return iter(self.names)

    def __len__(self) -> int:
        return len(self.names)

    def __contains__(self, name: object) -> bool:
        return name in self.names

    def present_in(self, directory: Path) -> list[str]:
        """Names of tracked files that currently exist in *directory*."""
        if not directory.is_dir():
            return []
        return [name for name in self.names if (directory / name).is_file()]

    def any_present(self, directory: Path) -> bool:
        return bool(self.present_in(directory))
