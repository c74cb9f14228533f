"""Summary: Exception hierarchy for FolderPilot.

Importance: Lets callers distinguish snapshot failures from programming errors.
Alternatives: Raise built-in exceptions and inspect messages.
"""

from __future__ import annotations


class FolderPilotError(Exception):
    """Base class for all FolderPilot errors."""


class SnapshotError(FolderPilotError):
    """Summary: Raised when the classifier snapshot cannot be used.

    Importance: Groups load, save, and format failures for one except clause.
    Alternatives: Catch OSError and ValueError separately at every call site.
    """


class SnapshotFormatError(SnapshotError):
    """Raised when snapshot data does not match the expected record layout."""


class SnapshotLoadError(SnapshotError):
    """Raised when a snapshot file cannot be read or decoded."""


class SnapshotSaveError(SnapshotError):
    """Raised when a snapshot file cannot be written."""
