"""
ffprobe adapter.

Runs ffprobe on a single audio file and maps its JSON output onto
:class:`~shelfscan.schemas.probe.RawProbeResult`. This is the default probing
collaborator; anything implementing :class:`Prober` can replace it.

Key pieces:
    - Prober: protocol the reconcilers depend on
    - FFProbe: subprocess-backed implementation with retry on transient errors
    - parse_ffprobe_output(): pure mapping from ffprobe JSON to the raw schema
"""

from __future__ import annotations

import json
import logging
import subprocess
from pathlib import Path
from typing import Any, Protocol, runtime_checkable

from pydantic import ValidationError

from shelfscan.exceptions import ProbeFailureError
from shelfscan.schemas.probe import RawProbeResult
from shelfscan.settings import ScannerSettings, get_settings
from shelfscan.utils.retry import SUBPROCESS_EXCEPTIONS, retry_with_backoff

logger = logging.getLogger(__name__)


@runtime_checkable
class Prober(Protocol):
    """Something that can probe an audio file."""

    def probe(self, path: Path, verbose: bool = False) -> RawProbeResult:
        """Probe ``path``; raise on unreadable or corrupt input."""
        ...


# =============================================================================
# Output Parsing
# =============================================================================


def _to_int(value: Any) -> int | None:
    if value in (None, "", "N/A"):
        return None
    try:
        return int(float(value))
    except (TypeError, ValueError):
        return None


def _to_float(value: Any) -> float | None:
    if value in (None, "", "N/A"):
        return None
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


def _parse_audio_stream(stream: dict[str, Any]) -> dict[str, Any]:
    disposition = stream.get("disposition") or {}
    tags = stream.get("tags") or {}
    return {
        "is_default": bool(disposition.get("default")),
        "bit_rate": _to_int(stream.get("bit_rate")),
        "codec": stream.get("codec_name"),
        "time_base": stream.get("time_base"),
        "language": tags.get("language"),
        "channel_layout": stream.get("channel_layout"),
        "channels": _to_int(stream.get("channels")),
        "sample_rate": _to_int(stream.get("sample_rate")),
    }


def _parse_chapter(chapter: dict[str, Any]) -> dict[str, Any]:
    tags = chapter.get("tags") or {}
    return {
        "id": chapter.get("id"),
        "start": _to_float(chapter.get("start_time")) or 0.0,
        "end": _to_float(chapter.get("end_time")) or 0.0,
        "title": tags.get("title"),
    }


def parse_ffprobe_output(data: dict[str, Any], verbose: bool = False) -> RawProbeResult:
    """
    Map ffprobe's ``-show_format -show_streams -show_chapters`` JSON.

    Args:
        data: Parsed ffprobe JSON
        verbose: Keep the untouched container tags as ``raw_tags``

    Returns:
        RawProbeResult (possibly with no audio streams; the normalizer decides)

    Example ffprobe stream entry:
        {
            "index": 0,
            "codec_name": "aac",
            "codec_type": "audio",
            "sample_rate": "44100",
            "channels": 2,
            "channel_layout": "stereo",
            "time_base": "1/44100",
            "bit_rate": "62500",
            "disposition": {"default": 1},
            "tags": {"language": "eng"}
        }
    """
    fmt = data.get("format") or {}
    streams = data.get("streams") or []

    audio_streams = [_parse_audio_stream(s) for s in streams if s.get("codec_type") == "audio"]
    video = next((s for s in streams if s.get("codec_type") == "video"), None)
    format_tags: dict[str, Any] = fmt.get("tags") or {}

    result: dict[str, Any] = {
        "format": fmt.get("format_name"),
        "duration": _to_float(fmt.get("duration")),
        "size": _to_int(fmt.get("size")),
        "bit_rate": _to_int(fmt.get("bit_rate")),
        "audio_streams": audio_streams,
        "video_stream": {"codec": video.get("codec_name")} if video else None,
        "chapters": [_parse_chapter(c) for c in data.get("chapters") or []],
        "tags": format_tags,
    }
    if verbose:
        result["raw_tags"] = dict(format_tags)

    return RawProbeResult.model_validate(result)


# =============================================================================
# ffprobe Execution
# =============================================================================


class FFProbe:
    """Probe audio files with the ffprobe CLI."""

    def __init__(
        self,
        binary: str = "ffprobe",
        timeout: float = 60.0,
        retries: int = 2,
    ) -> None:
        self.binary = binary
        self.timeout = timeout
        self._run = retry_with_backoff(
            max_retries=retries,
            base_delay=0.5,
            max_delay=5.0,
            exceptions=SUBPROCESS_EXCEPTIONS,
            logger_instance=logger,
        )(self._run_once)

    @classmethod
    def from_settings(cls, settings: ScannerSettings | None = None) -> FFProbe:
        settings = settings or get_settings()
        return cls(
            binary=settings.ffprobe_bin,
            timeout=settings.probe_timeout,
            retries=settings.probe_retries,
        )

    def build_command(self, path: Path) -> list[str]:
        return [
            self.binary,
            "-v",
            "error",
            "-print_format",
            "json",
            "-show_format",
            "-show_streams",
            "-show_chapters",
            str(path),
        ]

    def _run_once(self, cmd: list[str]) -> subprocess.CompletedProcess[str]:
        return subprocess.run(
            cmd,
            capture_output=True,
            text=True,
            check=True,
            timeout=self.timeout,
        )

    def probe(self, path: Path, verbose: bool = False) -> RawProbeResult:
        """
        Run ffprobe on a file.

        Raises:
            ProbeFailureError: File missing, binary missing, non-zero exit,
                timeout after retries, or unusable output
        """
        path = Path(path)
        if not path.exists():
            raise ProbeFailureError(f"File not found: {path}", path=path, tool="ffprobe")

        cmd = self.build_command(path)
        logger.debug(f"Running ffprobe: {' '.join(cmd)}")

        try:
            completed = self._run(cmd)
        except FileNotFoundError as e:
            raise ProbeFailureError(
                f"ffprobe binary not found: {self.binary}", path=path, tool="ffprobe"
            ) from e
        except subprocess.CalledProcessError as e:
            raise ProbeFailureError(
                f"ffprobe failed for {path.name}",
                path=path,
                tool="ffprobe",
                command=" ".join(cmd),
                return_code=e.returncode,
                stderr=(e.stderr or "").strip() or None,
            ) from e
        except subprocess.TimeoutExpired as e:
            raise ProbeFailureError(
                f"ffprobe timed out for {path.name}", path=path, tool="ffprobe"
            ) from e
        except OSError as e:
            raise ProbeFailureError(
                f"ffprobe could not run: {e}", path=path, tool="ffprobe"
            ) from e

        try:
            data = json.loads(completed.stdout)
        except json.JSONDecodeError as e:
            raise ProbeFailureError(
                f"Invalid JSON from ffprobe: {e}", path=path, tool="ffprobe"
            ) from e

        try:
            return parse_ffprobe_output(data, verbose=verbose)
        except ValidationError as e:
            raise ProbeFailureError(
                f"Unexpected ffprobe output for {path.name}: {e.error_count()} errors",
                path=path,
                tool="ffprobe",
            ) from e
