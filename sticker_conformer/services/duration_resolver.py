"""
Recovers a usable duration for inputs whose metadata is missing or wrong.

GIFs in particular carry no duration in their container, and some video
containers report none either. The resolver walks an ordered fallback chain
and always ends with a positive number, because bitrate planning cannot work
with zero or unknown durations.
"""
import math
from pathlib import Path
from typing import Callable, Optional

from loguru import logger

from ..config.policy import DEFAULT_POLICY, ConformancePolicy
from ..domain.media import MediaAsset, ProbeResult, parse_frame_rate, probe_frame_accurate_duration
from ..utils.fallback import first_match


def _usable(value: float) -> bool:
    return not math.isnan(value) and value > 0


class DurationResolver:
    """
    Resolves a strictly positive duration in seconds for a probed asset.

    Order of precedence:
    1. The container-reported duration.
    2. For animated image containers only, a frame-accurate decode pass.
    3. The video stream's frame count divided by its frame rate.
    4. The video stream's own duration field.
    5. The policy default (2.5 s).

    `resolve` never raises. The frame counter is injectable so callers can
    substitute the expensive ffprobe pass.
    """

    def __init__(
        self,
        policy: ConformancePolicy = DEFAULT_POLICY,
        frame_counter: Callable[[Path], Optional[float]] = probe_frame_accurate_duration,
    ):
        self.policy = policy
        self.frame_counter = frame_counter

    def resolve(self, asset: MediaAsset, probe_result: ProbeResult) -> float:
        name = asset.local_path.name

        def from_container() -> Optional[float]:
            return probe_result.container_duration_seconds

        def from_frame_count_pass() -> Optional[float]:
            if not probe_result.is_animated_image_container:
                return None
            logger.debug(f"{name} is an animated image container, counting frames.")
            try:
                return self.frame_counter(asset.local_path)
            except Exception as e:
                logger.warning(f"Frame counting failed for {name}: {e}")
                return None

        def from_stream_frames() -> Optional[float]:
            if not probe_result.frame_count:
                return None
            fps = parse_frame_rate(probe_result.frame_rate)
            if not fps or fps <= 0:
                return None
            return probe_result.frame_count / fps

        def from_stream_duration() -> Optional[float]:
            return probe_result.stream_duration_seconds

        duration = first_match(
            [from_container, from_frame_count_pass, from_stream_frames, from_stream_duration],
            accept=_usable,
        )
        if duration is not None:
            logger.debug(f"Resolved duration of {name}: {duration:.2f}s")
            return duration

        logger.info(
            f"No duration found for {name}, using default of {self.policy.default_duration_seconds}s"
        )
        return self.policy.default_duration_seconds
