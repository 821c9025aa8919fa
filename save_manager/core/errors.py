"""Exception types."""

from __future__ import annotations


class SaveManagerError(Exception):
    """Base error for save manager operations."""


class StagingError(SaveManagerError):
    """Staging area used in a way that could overwrite the files it protects."""
