"""Utility modules for shelfscan."""

from shelfscan.utils.retry import SUBPROCESS_EXCEPTIONS, retry_with_backoff

__all__ = [
    "SUBPROCESS_EXCEPTIONS",
    "retry_with_backoff",
]
