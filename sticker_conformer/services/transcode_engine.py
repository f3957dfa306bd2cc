"""
This module defines the TranscodeEngine, which turns any animation or video
into a sticker-conformant VP9 WEBM with alpha.

The engine probes the input, resolves its duration, and then encodes in up to
three escalation tiers. Each tier targets a smaller size budget with a coarser
CRF and a faster speed setting. The loop stops at the first output within the
size ceiling; the last tier is accepted whatever its size, so the work is
always bounded.
"""

import shutil
import subprocess
from pathlib import Path
from typing import Callable, List, Optional

from loguru import logger

from ..config.common import ERROR_LOG_DIR
from ..config.policy import (
    DEFAULT_POLICY,
    PIXEL_FORMAT,
    QUALITY_PRESET,
    VIDEO_CODEC,
    ConformancePolicy,
)
from ..domain.exceptions import EncodeError
from ..domain.media import MediaAsset, ProbeResult, probe_media
from ..domain.models import EncodeParameters, TranscodeResult
from ..utils.external_tools import ExternalTools
from ..utils.ffmpeg_utils import display_command, run_cmd
from ..utils.format_utils import format_seconds, formatted_size
from .bitrate_planner import plan_bitrate
from .duration_resolver import DurationResolver

CommandRunner = Callable[..., Optional[subprocess.CompletedProcess]]


def scale_and_pad_filter(side: int) -> str:
    """Aspect-preserving fit onto a transparent `side` x `side` canvas."""
    return (
        f"scale={side}:{side}:force_original_aspect_ratio=decrease,"
        f"pad={side}:{side}:(ow-iw)/2:(oh-ih)/2:color=0x00000000"
    )


class TranscodeEngine:
    """
    Encodes animations and videos into the animated sticker profile.

    Collaborators are injectable: `runner` executes the ffmpeg command list,
    `prober` produces a `ProbeResult` and `duration_resolver` turns it into
    seconds. The defaults shell out to the real ffmpeg/ffprobe.
    """

    def __init__(
        self,
        policy: ConformancePolicy = DEFAULT_POLICY,
        runner: CommandRunner = run_cmd,
        prober: Callable[[Path], ProbeResult] = probe_media,
        duration_resolver: Optional[DurationResolver] = None,
        ffmpeg_path: Optional[str] = None,
    ):
        self.policy = policy
        self.runner = runner
        self.prober = prober
        self.duration_resolver = duration_resolver or DurationResolver(policy)
        self.ffmpeg_path = ffmpeg_path or ExternalTools.get_ffmpeg_path()

    def parameters_for_tier(self, tier_index: int, resolved_duration: float) -> EncodeParameters:
        """
        Builds the encode settings of one escalation tier (0-based index).

        The bitrate is planned against the effective duration, i.e. the source
        duration capped at the output ceiling. A trim is only requested when the
        source is longer than that ceiling; asking ffmpeg to trim content that is
        already short enough can round down to an empty output.
        """
        max_duration = self.policy.max_output_duration_seconds
        effective_duration = min(resolved_duration, max_duration)
        return EncodeParameters(
            tier=tier_index + 1,
            bitrate_kbps=plan_bitrate(self.policy.size_budget_tiers_kib[tier_index], effective_duration),
            crf=self.policy.crf_tiers[tier_index],
            speed=self.policy.speed_tiers[tier_index],
            trim=resolved_duration > max_duration,
            trim_to_seconds=max_duration,
        )

    def build_command(self, input_path: Path, output_path: Path, params: EncodeParameters) -> List[str]:
        """Assembles the ffmpeg argument list for one tier."""
        side = self.policy.output_side
        cmd_list = [self.ffmpeg_path, "-y", "-i", str(input_path)]
        cmd_list.extend(["-c:v", VIDEO_CODEC, "-pix_fmt", PIXEL_FORMAT])
        cmd_list.extend(["-vf", scale_and_pad_filter(side)])
        cmd_list.append("-an")
        if params.trim:
            cmd_list.extend(["-t", format_seconds(params.trim_to_seconds)])
        cmd_list.extend(
            [
                "-b:v", f"{params.bitrate_kbps}k",
                "-maxrate", f"{params.bitrate_kbps}k",
                "-bufsize", f"{params.bufsize_kbps}k",
                "-crf", str(params.crf),
                "-quality", QUALITY_PRESET,
                "-speed", str(params.speed),
                # Alt-ref frames break per-frame transparency.
                "-auto-alt-ref", "0",
                "-loop", "0",
            ]
        )
        cmd_list.append(str(output_path))
        return cmd_list

    @staticmethod
    def tier_output_path(output_path: Path, tier: int) -> Path:
        return output_path.with_name(f"{output_path.stem}_tier{tier}{output_path.suffix}")

    def encode_tier(self, asset: MediaAsset, tier_output: Path, params: EncodeParameters) -> int:
        """
        Runs ffmpeg for one tier and returns the size of the produced file.

        Raises:
            EncodeError: If ffmpeg cannot be started, exits non-zero, or leaves
                         no output. A partial output is removed first.
        """
        cmd_list = self.build_command(asset.local_path, tier_output, params)
        logger.info(
            f"Tier {params.tier}: {params.bitrate_kbps}k, CRF {params.crf}, speed {params.speed}"
            + (f", trim to {format_seconds(params.trim_to_seconds)}s" if params.trim else "")
        )
        res = self.runner(
            cmd_list,
            src_file_for_log=asset.local_path,
            error_log_dir=ERROR_LOG_DIR,
            show_cmd=True,
        )

        if res is None or res.returncode != 0:
            tier_output.unlink(missing_ok=True)
            stderr = res.stderr if res is not None else "ffmpeg could not be started"
            logger.error(f"ffmpeg failed at tier {params.tier} for {asset.local_path.name}:\n{stderr}")
            raise EncodeError(
                f"Encoding failed at tier {params.tier}",
                details=f"{display_command(cmd_list)}\n{stderr}",
            )
        if not tier_output.is_file():
            raise EncodeError(
                f"ffmpeg reported success at tier {params.tier} but produced no file",
                details=display_command(cmd_list),
            )
        return tier_output.stat().st_size

    def transcode(self, asset: MediaAsset, output_path: Path) -> TranscodeResult:
        """
        Converts `asset` into a conformant WEBM at `output_path`.

        Every tier writes a fresh file. Once a newer tier exists the previous
        one is deleted, and the surviving file is moved onto `output_path`. No
        tier file is left behind on any exit path.

        Raises:
            ProbeError: If the input cannot be probed.
            EncodeError: If ffmpeg fails at any tier. No further tiers are tried.
        """
        probe_result = self.prober(asset.local_path)
        resolved_duration = self.duration_resolver.resolve(asset, probe_result)
        max_bytes = self.policy.max_output_bytes
        if resolved_duration > self.policy.max_output_duration_seconds:
            logger.info(
                f"{asset.local_path.name} lasts {resolved_duration:.2f}s, trimming to "
                f"{format_seconds(self.policy.max_output_duration_seconds)}s"
            )

        current: Optional[Path] = None
        current_size = 0
        tiers_used = 0
        params: Optional[EncodeParameters] = None
        try:
            for tier_index in range(self.policy.transcode_tier_count):
                params = self.parameters_for_tier(tier_index, resolved_duration)
                tier_output = self.tier_output_path(output_path, params.tier)
                size = self.encode_tier(asset, tier_output, params)
                tiers_used = params.tier

                if current is not None:
                    current.unlink(missing_ok=True)
                current, current_size = tier_output, size

                logger.info(f"Tier {params.tier} output: {formatted_size(size)}")
                if size <= max_bytes:
                    break
                if tier_index + 1 < self.policy.transcode_tier_count:
                    logger.info(
                        f"Output over {formatted_size(max_bytes)}, escalating to tier {params.tier + 1}"
                    )
                else:
                    logger.warning(
                        f"Final tier output is {formatted_size(size)}, over the {formatted_size(max_bytes)} "
                        "ceiling. Accepting it as the best effort."
                    )

            output_path.unlink(missing_ok=True)
            shutil.move(str(current), str(output_path))
            current = None
        finally:
            if current is not None:
                current.unlink(missing_ok=True)

        return TranscodeResult(
            output_path=output_path,
            size_bytes=current_size,
            tiers_used=tiers_used,
            resolved_duration=resolved_duration,
            trimmed=bool(params and params.trim),
            within_budget=current_size <= max_bytes,
        )
