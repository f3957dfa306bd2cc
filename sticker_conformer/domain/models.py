"""
Value objects passed between the services and the pipeline.
"""
from dataclasses import dataclass
from pathlib import Path

STATIC_KIND = "static"
ANIMATED_KIND = "animated"


@dataclass(frozen=True)
class Classification:
    """Outcome of the format classifier."""

    supported: bool
    is_static_image: bool


@dataclass(frozen=True)
class EncodeParameters:
    """
    ffmpeg settings for a single escalation tier.

    A new instance is built for every tier; nothing mutates one in place.
    """

    tier: int
    bitrate_kbps: int
    crf: int
    speed: int
    trim: bool
    trim_to_seconds: float

    @property
    def bufsize_kbps(self) -> int:
        return self.bitrate_kbps * 2


@dataclass(frozen=True)
class RemoteAssetRef:
    """A Tenor post resolved to the URL of its best available media variant."""

    provider_id: str
    resolved_source_url: str
    display_title: str
    variant: str = ""


@dataclass(frozen=True)
class TranscodeResult:
    output_path: Path
    size_bytes: int
    tiers_used: int
    resolved_duration: float
    trimmed: bool
    within_budget: bool


@dataclass(frozen=True)
class ImageResult:
    output_path: Path
    size_bytes: int
    tiers_used: int
    quality: int
    within_budget: bool


@dataclass(frozen=True)
class ConversionResult:
    """What the pipeline hands back to the boundary for a finished request."""

    output_path: Path
    kind: str
    size_bytes: int
    tiers_used: int
    within_budget: bool
    source: str
