"""Save file transfer result models."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import StrEnum


class TransferOutcome(StrEnum):
    """Aggregated classification of per-file transfer failures."""

    OK = "ok"
    COPY_FAILED = "copy_failed"
    STAGE_FAILED = "stage_failed"
    MIXED_FAILURE = "mixed_failure"


_OUTCOME_MESSAGES = {
    TransferOutcome.OK: "All save files transferred",
    TransferOutcome.COPY_FAILED: "One or more save files failed to copy",
    TransferOutcome.STAGE_FAILED: "One or more save files failed to move to the overwrite backup directory",
    TransferOutcome.MIXED_FAILURE: "Multiple issues occurred while copying save files",
}


@dataclass
class TransferResult:
    """Result of copying the save file set between two directories."""

    copied: list[str] = field(default_factory=list)
    staged: list[str] = field(default_factory=list)
    copy_failures: list[str] = field(default_factory=list)
    stage_failures: list[str] = field(default_factory=list)

    @property
    def outcome(self) -> TransferOutcome:
        if self.copy_failures and self.stage_failures:
            return TransferOutcome.MIXED_FAILURE
        if self.copy_failures:
            return TransferOutcome.COPY_FAILED
        if self.stage_failures:
            return TransferOutcome.STAGE_FAILED
        return TransferOutcome.OK

    @property
    def ok(self) -> bool:
        return self.outcome is TransferOutcome.OK

    @property
    def message(self) -> str:
        return _OUTCOME_MESSAGES[self.outcome]
