"""
Shelfscan exception hierarchy.

Provides typed exceptions for probe, ordering and reconciliation failures.
Per-file errors are soft: the reconcilers build these, log them and collect
them on their results instead of raising past the reconciler boundary.

Exception Hierarchy:
    ShelfscanError (base)
    ├── ConfigurationError - Invalid settings
    ├── ScanError - A single file could not be turned into metadata
    │   ├── InvalidAudioFileError - Probe result has no audio stream
    │   ├── InvalidDurationOrSizeError - Probe result lacks duration/size
    │   └── ProbeFailureError - External probing tool failed
    ├── TrackOrderError - A file could not be given a track index
    │   ├── NoTrackNumberError - Neither metadata nor filename yields a number
    │   └── DuplicateTrackNumberError - Index already claimed
    └── ReconcileError - Rescan could not line up a file with its track
        ├── IdentityMismatchError - Track found by path, not by inode
        └── OrphanFileError - File has no matching track at all
"""

from __future__ import annotations

from pathlib import Path
from typing import Any


class ShelfscanError(Exception):
    """Base exception for all shelfscan errors."""

    def __init__(self, message: str, *, details: dict[str, Any] | None = None) -> None:
        """
        Initialize shelfscan exception.

        Args:
            message: Human-readable error message
            details: Optional structured error details for logging/debugging
        """
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self) -> str:
        return self.message


# =============================================================================
# Configuration Errors
# =============================================================================


class ConfigurationError(ShelfscanError):
    """Settings error."""

    def __init__(
        self,
        message: str,
        *,
        field: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        details = details or {}
        if field:
            details["field"] = field
        super().__init__(message, details=details)
        self.field = field


# =============================================================================
# Scan Errors
# =============================================================================


class ScanError(ShelfscanError):
    """A file could not be probed or normalized."""

    def __init__(
        self,
        message: str,
        *,
        path: Path | str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        details = details or {}
        if path:
            details["path"] = str(path)
        super().__init__(message, details=details)
        self.path = path


class InvalidAudioFileError(ScanError):
    """Probe result has no audio stream."""

    def __init__(self, message: str = "Invalid audio file", **kwargs: Any) -> None:
        super().__init__(message, **kwargs)


class InvalidDurationOrSizeError(ScanError):
    """Probe result is missing its duration or size."""

    def __init__(self, message: str = "Invalid duration or size", **kwargs: Any) -> None:
        super().__init__(message, **kwargs)


class ProbeFailureError(ScanError):
    """External probing tool failure."""

    def __init__(
        self,
        message: str,
        *,
        tool: str | None = None,
        command: str | None = None,
        return_code: int | None = None,
        stderr: str | None = None,
        **kwargs: Any,
    ) -> None:
        details = kwargs.get("details") or {}
        if tool:
            details["tool"] = tool
        if command:
            details["command"] = command
        if return_code is not None:
            details["return_code"] = return_code
        if stderr:
            details["stderr"] = stderr
        kwargs["details"] = details
        super().__init__(message, **kwargs)
        self.tool = tool
        self.command = command
        self.return_code = return_code
        self.stderr = stderr


# =============================================================================
# Track Ordering Errors
# =============================================================================


class TrackOrderError(ShelfscanError):
    """A file could not be assigned a track index."""

    def __init__(
        self,
        message: str,
        *,
        path: Path | str | None = None,
        index: int | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        details = details or {}
        if path:
            details["path"] = str(path)
        if index is not None:
            details["index"] = index
        super().__init__(message, details=details)
        self.path = path
        self.index = index


class NoTrackNumberError(TrackOrderError):
    """Neither the metadata nor the filename yields a track number."""

    def __init__(self, message: str = "no track number", **kwargs: Any) -> None:
        super().__init__(message, **kwargs)


class DuplicateTrackNumberError(TrackOrderError):
    """Track index is already claimed by another file."""

    def __init__(self, message: str = "duplicate track number", **kwargs: Any) -> None:
        super().__init__(message, **kwargs)


# =============================================================================
# Reconciliation Errors
# =============================================================================


class ReconcileError(ShelfscanError):
    """Rescan could not line up an audio file with its committed track."""

    def __init__(
        self,
        message: str,
        *,
        ino: str | None = None,
        path: Path | str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        details = details or {}
        if ino:
            details["ino"] = ino
        if path:
            details["path"] = str(path)
        super().__init__(message, details=details)
        self.ino = ino
        self.path = path


class IdentityMismatchError(ReconcileError):
    """Track matched by path but stores a different inode."""

    def __init__(self, message: str, *, previous_ino: str | None = None, **kwargs: Any) -> None:
        details = kwargs.get("details") or {}
        if previous_ino:
            details["previous_ino"] = previous_ino
        kwargs["details"] = details
        super().__init__(message, **kwargs)
        self.previous_ino = previous_ino


class OrphanFileError(ReconcileError):
    """Audio file expected to have a track has none."""

    pass


# =============================================================================
# Convenience Aliases
# =============================================================================

ConfigError = ConfigurationError
