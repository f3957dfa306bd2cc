"""
This module defines the ImageConformanceEngine, the static counterpart of the
transcode engine.

A still image is fitted onto a transparent square canvas and encoded at a high
quality. If the result is over the size ceiling, it is re-encoded at lower
qualities. The canvas never changes between attempts; quality is the only
lever.
"""

import io
from pathlib import Path

from loguru import logger
from PIL import Image, ImageOps, UnidentifiedImageError

from ..config.policy import DEFAULT_POLICY, IMAGE_FORMAT, ConformancePolicy
from ..domain.exceptions import EncodeError, ProbeError
from ..domain.media import MediaAsset
from ..domain.models import ImageResult
from ..utils.format_utils import formatted_size


class ImageConformanceEngine:
    """
    Converts PNG/JPEG inputs into the static sticker profile.
    """

    def __init__(self, policy: ConformancePolicy = DEFAULT_POLICY):
        self.policy = policy

    def render_canvas(self, path: Path) -> Image.Image:
        """
        Loads the first frame of an image and centers it on a transparent
        square canvas of the policy side, preserving aspect ratio.

        Raises:
            ProbeError: If Pillow cannot read the image, or its pixel count
                        trips Pillow's decompression bomb guard.
        """
        side = self.policy.output_side
        try:
            with Image.open(path) as img:
                img.seek(0)
                img = ImageOps.exif_transpose(img)
                frame = img.convert("RGBA")
        except Image.DecompressionBombError as e:
            raise ProbeError(f"Image dimensions are too large: {path.name}") from e
        except (UnidentifiedImageError, OSError) as e:
            raise ProbeError(f"Image could not be read: {path.name}") from e

        fitted = ImageOps.contain(frame, (side, side), Image.Resampling.LANCZOS)
        canvas = Image.new("RGBA", (side, side), (0, 0, 0, 0))
        offset = ((side - fitted.width) // 2, (side - fitted.height) // 2)
        canvas.paste(fitted, offset)
        return canvas

    @staticmethod
    def encode(canvas: Image.Image, quality: int) -> bytes:
        """Encodes the canvas in memory at the given quality."""
        buffer = io.BytesIO()
        try:
            canvas.save(buffer, format=IMAGE_FORMAT, quality=quality, method=6)
        except (OSError, ValueError) as e:
            raise EncodeError(f"Image encoding failed at quality {quality}", details=str(e)) from e
        return buffer.getvalue()

    def conform(self, asset: MediaAsset, output_path: Path) -> ImageResult:
        """
        Writes a conformant static sticker for `asset` to `output_path`.

        Tries each quality tier in order and keeps the first result within the
        size ceiling; the last tier is accepted unconditionally.

        Raises:
            ProbeError: If the input is not a readable image.
            EncodeError: If encoding or writing the output fails.
        """
        canvas = self.render_canvas(asset.local_path)
        max_bytes = self.policy.max_output_bytes
        tiers = self.policy.image_quality_tiers

        data = b""
        quality = tiers[0]
        tiers_used = 0
        for tiers_used, quality in enumerate(tiers, start=1):
            data = self.encode(canvas, quality)
            logger.info(f"Image tier {tiers_used} (quality {quality}): {formatted_size(len(data))}")
            if len(data) <= max_bytes:
                break
            if tiers_used == len(tiers):
                logger.warning(
                    f"Final image tier is {formatted_size(len(data))}, over the "
                    f"{formatted_size(max_bytes)} ceiling. Accepting it as the best effort."
                )

        try:
            output_path.write_bytes(data)
        except OSError as e:
            output_path.unlink(missing_ok=True)
            raise EncodeError(f"Could not write {output_path.name}", details=str(e)) from e

        return ImageResult(
            output_path=output_path,
            size_bytes=len(data),
            tiers_used=tiers_used,
            quality=quality,
            within_budget=len(data) <= max_bytes,
        )
