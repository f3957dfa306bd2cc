import math
import re
from dataclasses import dataclass
from pathlib import Path
from pprint import pformat
from typing import Any, Optional

import ffmpeg
from loguru import logger

from .exceptions import ProbeError
from ..utils.external_tools import ExternalTools

# Container or codec names whose format carries no usable duration, so the
# frame-accurate pass is worth its full decode.
ANIMATED_IMAGE_FORMATS = {"gif", "apng"}


def parse_duration(duration_value: Any) -> Optional[float]:
    """
    Parses a duration value from ffprobe output into seconds.

    Handles both plain floating-point strings ("3.52") and timecodes in the
    'HH:MM:SS.sss' form. ffprobe reports unknown values as "N/A"; those, NaN and
    anything unparsable come back as None.

    Args:
        duration_value: The raw value, usually a string, possibly None.

    Returns:
        The duration in seconds, or None if no number could be read.
    """
    if duration_value is None:
        return None
    duration_str = str(duration_value).strip()
    if not duration_str or duration_str.upper() == "N/A":
        return None
    try:
        value = float(duration_str)
    except ValueError:
        match = re.fullmatch(r"(?:(\d{1,2}):)?(\d{1,2}):(\d{1,2}(?:\.\d+)?)", duration_str)
        if not match:
            logger.warning(f"Could not parse duration string: {duration_str}")
            return None
        hours_str, minutes_str, seconds_str = match.groups()
        hours = int(hours_str) if hours_str else 0
        value = hours * 3600 + int(minutes_str) * 60 + float(seconds_str)
    if math.isnan(value):
        return None
    return value


def parse_frame_rate(rate: Optional[str]) -> Optional[float]:
    """
    Parses an ffprobe rational frame rate such as "30000/1001".

    When the denominator is zero or missing, the numerator is taken as the rate
    directly. Returns None for absent or unparsable values.
    """
    if not rate or rate == "N/A":
        return None
    numerator_str, _, denominator_str = str(rate).partition("/")
    try:
        numerator = float(numerator_str)
        denominator = float(denominator_str) if denominator_str else 0.0
    except ValueError:
        logger.warning(f"Could not parse frame rate: {rate}")
        return None
    if denominator == 0:
        return numerator
    return numerator / denominator


def _parse_int(value: Any) -> Optional[int]:
    if value is None or value == "N/A":
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


@dataclass
class MediaAsset:
    """
    A local input file handed to the pipeline.

    The asset is owned by exactly one pipeline invocation and removed from
    disk when that invocation ends, whatever the outcome.
    """

    local_path: Path
    declared_mime_type: Optional[str] = None
    declared_file_name: Optional[str] = None
    size_bytes: int = 0

    @classmethod
    def from_path(
        cls,
        path: Path,
        mime_type: Optional[str] = None,
        file_name: Optional[str] = None,
    ) -> "MediaAsset":
        if not path.is_file():
            raise ProbeError(f"Input file not found: {path}")
        return cls(
            local_path=path,
            declared_mime_type=mime_type,
            declared_file_name=file_name or path.name,
            size_bytes=path.stat().st_size,
        )

    def remove(self):
        """Deletes the underlying file if it still exists."""
        try:
            self.local_path.unlink(missing_ok=True)
        except OSError as e:
            logger.error(f"Could not remove media asset {self.local_path}: {e}")


@dataclass(frozen=True)
class ProbeResult:
    """
    The parts of an ffprobe report the pipeline cares about.

    Every optional field is None when ffprobe did not report it or reported
    "N/A".
    """

    container_duration_seconds: Optional[float] = None
    is_animated_image_container: bool = False
    video_stream_present: bool = False
    frame_count: Optional[int] = None
    frame_rate: Optional[str] = None
    stream_duration_seconds: Optional[float] = None
    format_name: str = ""
    codec_name: str = ""

    @classmethod
    def from_probe(cls, probe: dict) -> "ProbeResult":
        format_info = probe.get("format") or {}
        streams = probe.get("streams") or []
        format_name = str(format_info.get("format_name", "")).lower()

        video_stream = next(
            (s for s in streams if s.get("codec_type") == "video"), None
        )
        first_codec = str(streams[0].get("codec_name", "")).lower() if streams else ""
        codec_name = (
            str(video_stream.get("codec_name", "")).lower() if video_stream else first_codec
        )
        is_animated_image = (
            bool(ANIMATED_IMAGE_FORMATS.intersection(format_name.split(",")))
            or first_codec in ANIMATED_IMAGE_FORMATS
        )

        return cls(
            container_duration_seconds=parse_duration(format_info.get("duration")),
            is_animated_image_container=is_animated_image,
            video_stream_present=video_stream is not None,
            frame_count=_parse_int(video_stream.get("nb_frames")) if video_stream else None,
            frame_rate=video_stream.get("r_frame_rate") if video_stream else None,
            stream_duration_seconds=(
                parse_duration(video_stream.get("duration")) if video_stream else None
            ),
            format_name=format_name,
            codec_name=codec_name,
        )


def probe_media(path: Path) -> ProbeResult:
    """
    Runs ffprobe on a file and condenses the report into a `ProbeResult`.

    Raises:
        ProbeError: If ffprobe cannot read the file at all.
    """
    if not path.exists():
        raise ProbeError(f"Cannot probe missing file: {path}")
    try:
        probe = ffmpeg.probe(str(path), cmd=ExternalTools.get_ffprobe_path())
    except ffmpeg.Error as e:
        stderr = e.stderr.decode("utf-8", errors="replace") if e.stderr else ""
        logger.error(f"ffprobe failed for {path}: {stderr}")
        raise ProbeError(f"Input could not be read: {path.name}") from e
    except FileNotFoundError as e:
        raise ProbeError("ffprobe executable not found.") from e

    logger.trace(f"Probe data for {path.name}:\n{pformat(probe)}")
    result = ProbeResult.from_probe(probe)
    logger.debug(f"Probe summary for {path.name}: {result}")
    return result


def probe_frame_accurate_duration(path: Path) -> Optional[float]:
    """
    Measures duration by decoding every frame of the first video stream.

    Animated image containers such as GIF do not store a duration, so ffprobe
    is asked to count frames (`-count_frames`), which forces a full decode.
    This is slow and reserved for those containers.

    Returns:
        `frames / fps` in seconds, or None if the pass fails or yields nothing.
    """
    try:
        probe = ffmpeg.probe(
            str(path),
            cmd=ExternalTools.get_ffprobe_path(),
            count_frames=None,
            select_streams="v:0",
        )
    except (ffmpeg.Error, FileNotFoundError) as e:
        logger.warning(f"Frame-accurate probe failed for {path.name}: {e}")
        return None

    streams = probe.get("streams") or []
    if not streams:
        return None
    frames = _parse_int(streams[0].get("nb_read_frames"))
    fps = parse_frame_rate(streams[0].get("r_frame_rate"))
    if not frames or not fps or fps <= 0:
        return None
    duration = frames / fps
    logger.debug(f"Actual duration of {path.name}: {frames} frames @ {fps:.2f} fps = {duration:.2f}s")
    return duration
