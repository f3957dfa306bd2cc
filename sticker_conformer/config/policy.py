"""
The conformance policy: output constraints of the sticker profiles.

These values are fixed for the process. The escalation tiers are parallel
tuples; tier N of the transcode path uses `SIZE_BUDGET_TIERS_KIB[N]`,
`CRF_TIERS[N]` and `SPEED_TIERS[N]`.
"""
from dataclasses import dataclass
from typing import Tuple

# --- Input Limits ---
MAX_INPUT_BYTES = 50 * 1024 * 1024

# --- Output Profile ---
OUTPUT_SIDE = 512
MAX_OUTPUT_DURATION_SECONDS = 3.0
MAX_OUTPUT_BYTES = 256 * 1024

# --- Transcode Escalation Tiers ---
# Budgets sit below the 256 KiB ceiling to absorb container overhead and VBR
# overshoot; each retry aims lower.
SIZE_BUDGET_TIERS_KIB = (250, 240, 220)
CRF_TIERS = (30, 35, 45)
# libvpx -speed, 0 is slowest/best.
SPEED_TIERS = (0, 1, 2)

# --- Image Escalation Tiers ---
IMAGE_QUALITY_TIERS = (90, 80, 70)

# Used when no duration can be recovered from the input at all.
DEFAULT_DURATION_SECONDS = 2.5

# --- Encoder Settings ---
VIDEO_CODEC = "libvpx-vp9"
PIXEL_FORMAT = "yuva420p"
QUALITY_PRESET = "good"
IMAGE_FORMAT = "WEBP"


@dataclass(frozen=True)
class ConformancePolicy:
    max_input_bytes: int = MAX_INPUT_BYTES
    output_side: int = OUTPUT_SIDE
    max_output_duration_seconds: float = MAX_OUTPUT_DURATION_SECONDS
    max_output_bytes: int = MAX_OUTPUT_BYTES
    size_budget_tiers_kib: Tuple[int, ...] = SIZE_BUDGET_TIERS_KIB
    crf_tiers: Tuple[int, ...] = CRF_TIERS
    speed_tiers: Tuple[int, ...] = SPEED_TIERS
    image_quality_tiers: Tuple[int, ...] = IMAGE_QUALITY_TIERS
    default_duration_seconds: float = DEFAULT_DURATION_SECONDS

    def __post_init__(self):
        tier_lengths = {
            len(self.size_budget_tiers_kib),
            len(self.crf_tiers),
            len(self.speed_tiers),
        }
        if len(tier_lengths) != 1 or 0 in tier_lengths:
            raise ValueError(
                "Size budget, CRF and speed tiers must be non-empty and of equal length."
            )
        if not self.image_quality_tiers:
            raise ValueError("At least one image quality tier is required.")
        if self.default_duration_seconds <= 0:
            raise ValueError("The default duration must be positive.")

    @property
    def transcode_tier_count(self) -> int:
        return len(self.size_budget_tiers_kib)


DEFAULT_POLICY = ConformancePolicy()
