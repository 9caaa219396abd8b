"""shelfscan - Audiobook track ordering from embedded tags and filenames."""

from shelfscan.exceptions import (
    ConfigurationError,
    DuplicateTrackNumberError,
    IdentityMismatchError,
    InvalidAudioFileError,
    InvalidDurationOrSizeError,
    NoTrackNumberError,
    OrphanFileError,
    ProbeFailureError,
    ReconcileError,
    ScanError,
    ShelfscanError,
    TrackOrderError,
)

__version__ = "0.1.0"

__all__ = [
    "__version__",
    # Base exception
    "ShelfscanError",
    # Configuration
    "ConfigurationError",
    # Scanning
    "ScanError",
    "InvalidAudioFileError",
    "InvalidDurationOrSizeError",
    "ProbeFailureError",
    # Ordering
    "TrackOrderError",
    "NoTrackNumberError",
    "DuplicateTrackNumberError",
    # Reconciliation
    "ReconcileError",
    "IdentityMismatchError",
    "OrphanFileError",
]
