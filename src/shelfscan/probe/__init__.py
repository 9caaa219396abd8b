"""Probing collaborators.

The reconcilers only need something with ``probe(path, verbose)``; ffprobe is
the implementation used by default.
"""

from __future__ import annotations

from .ffprobe import FFProbe, Prober, parse_ffprobe_output

__all__ = [
    "FFProbe",
    "Prober",
    "parse_ffprobe_output",
]
