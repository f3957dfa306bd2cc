"""
The conformance pipeline: one request in, one sticker file out.

`StickerPipeline` classifies the input, stages a private copy of it, routes it
to the image or the transcode engine, and only moves the finished artifact to
its final name once the engine returned successfully. Everything staged for
the request is deleted when the request ends, successful or not.
"""
import os
import random
import shutil
import string
from pathlib import Path
from typing import Callable, Optional

from loguru import logger

from ..config.common import (
    ANIMATED_OUTPUT_SUFFIX,
    OUTPUT_DIR,
    RANDOM_TAG_LENGTH,
    STAGING_DIR,
    STATIC_OUTPUT_SUFFIX,
)
from ..config.policy import DEFAULT_POLICY, ConformancePolicy
from ..domain.exceptions import EncodeError, OversizeError, ProbeError, UnsupportedFormatError
from ..domain.media import MediaAsset
from ..domain.models import ANIMATED_KIND, STATIC_KIND, ConversionResult
from ..services.format_classifier import classify
from ..services.image_engine import ImageConformanceEngine
from ..services.logging_service import SuccessLog
from ..services.remote_resolver import TenorResolver
from ..services.staging_service import StagingSession
from ..services.transcode_engine import TranscodeEngine
from ..utils.format_utils import formatted_size


class StickerPipeline:
    """
    Orchestrates a single conversion from a local file or a Tenor link.

    The pipeline itself holds no per-request state, so one instance can serve
    concurrent requests from different callers.
    """

    def __init__(
        self,
        staging_dir: Path = STAGING_DIR,
        output_dir: Path = OUTPUT_DIR,
        policy: ConformancePolicy = DEFAULT_POLICY,
        transcode_engine: Optional[TranscodeEngine] = None,
        image_engine: Optional[ImageConformanceEngine] = None,
        resolver_factory: Callable[[], TenorResolver] = TenorResolver,
        success_log: Optional[SuccessLog] = None,
    ):
        self.staging_dir = staging_dir
        self.output_dir = output_dir
        self.policy = policy
        self.transcode_engine = transcode_engine or TranscodeEngine(policy)
        self.image_engine = image_engine or ImageConformanceEngine(policy)
        self.resolver_factory = resolver_factory
        self.success_log = success_log

    def default_output_path(self, name: str, is_static: bool) -> Path:
        suffix = STATIC_OUTPUT_SUFFIX if is_static else ANIMATED_OUTPUT_SUFFIX
        return self.output_dir / f"{Path(name).stem or 'sticker'}{suffix}"

    def convert_file(
        self,
        source_path: Path,
        output_path: Optional[Path] = None,
        mime_type: Optional[str] = None,
        file_name: Optional[str] = None,
        caller_id: str = "local",
    ) -> ConversionResult:
        """
        Converts a local file into a sticker.

        The source file itself is never modified; the pipeline works on a staged
        copy that is removed afterwards.

        Raises:
            UnsupportedFormatError: If the classifier rejects the input.
            OversizeError: If the input exceeds the input size ceiling.
            ProbeError: If the input is missing or unreadable.
            EncodeError: If the selected engine fails.
        """
        source_path = Path(source_path)
        name = file_name or source_path.name
        classification = classify(mime_type, name)
        if not classification.supported:
            raise UnsupportedFormatError(f"Unsupported format: {name} ({mime_type or 'no mime type'})")
        if not source_path.is_file():
            raise ProbeError(f"Input file not found: {source_path}")

        source_size = source_path.stat().st_size
        if source_size > self.policy.max_input_bytes:
            raise OversizeError(
                f"{name} is {formatted_size(source_size)}, the limit is "
                f"{formatted_size(self.policy.max_input_bytes)}"
            )

        destination = output_path or self.default_output_path(name, classification.is_static_image)
        logger.info(
            f"Converting {name} ({formatted_size(source_size)}) as "
            f"{STATIC_KIND if classification.is_static_image else ANIMATED_KIND}"
        )

        with StagingSession(self.staging_dir, caller_id) as session:
            staged_path = session.path_for(f"input{Path(name).suffix}")
            shutil.copy2(source_path, staged_path)
            asset = MediaAsset.from_path(staged_path, mime_type, name)
            try:
                return self._convert_asset(
                    asset, classification.is_static_image, session, destination, source=str(source_path)
                )
            finally:
                asset.remove()

    def convert_remote(
        self,
        share_url: str,
        output_path: Optional[Path] = None,
        caller_id: str = "local",
    ) -> ConversionResult:
        """
        Resolves a Tenor link, downloads the media and transcodes it.

        Raises:
            InvalidLinkError, AssetNotFoundError, ProviderError: From resolution.
            NetworkError, OversizeError: From the download.
            ProbeError, EncodeError: From the transcode engine.
        """
        with self.resolver_factory() as resolver:
            ref = resolver.resolve(share_url)
            destination = output_path or self.default_output_path(f"tenor_{ref.provider_id}", False)

            with StagingSession(self.staging_dir, caller_id) as session:
                suffix = Path(ref.resolved_source_url.split("?", 1)[0]).suffix or ".gif"
                download_path = session.path_for(f"tenor_{ref.provider_id}{suffix}")
                asset = resolver.fetch(ref, download_path, self.policy.max_input_bytes)
                try:
                    return self._convert_asset(asset, False, session, destination, source=share_url)
                finally:
                    asset.remove()

    def _convert_asset(
        self,
        asset: MediaAsset,
        is_static: bool,
        session: StagingSession,
        destination: Path,
        source: str,
    ) -> ConversionResult:
        suffix = STATIC_OUTPUT_SUFFIX if is_static else ANIMATED_OUTPUT_SUFFIX
        work_output = session.path_for(f"output{suffix}")

        if is_static:
            image_result = self.image_engine.conform(asset, work_output)
            tiers_used, within_budget = image_result.tiers_used, image_result.within_budget
        else:
            transcode_result = self.transcode_engine.transcode(asset, work_output)
            tiers_used, within_budget = transcode_result.tiers_used, transcode_result.within_budget

        final_path = self._materialize(work_output, destination)
        result = ConversionResult(
            output_path=final_path,
            kind=STATIC_KIND if is_static else ANIMATED_KIND,
            size_bytes=final_path.stat().st_size,
            tiers_used=tiers_used,
            within_budget=within_budget,
            source=source,
        )
        logger.success(
            f"Sticker ready: {final_path} ({formatted_size(result.size_bytes)}, {tiers_used} tier(s))"
        )
        if self.success_log:
            self.success_log.write(
                {
                    "source": source,
                    "output": str(final_path),
                    "kind": result.kind,
                    "size_bytes": result.size_bytes,
                    "size_formatted": formatted_size(result.size_bytes),
                    "tiers_used": tiers_used,
                    "within_budget": within_budget,
                }
            )
        return result

    @staticmethod
    def _materialize(work_output: Path, destination: Path) -> Path:
        """
        Moves a finished artifact to its final name, replacing any existing file.

        The artifact is first moved to a hidden name next to the destination,
        which may mean a full copy when staging lives on another filesystem,
        and then renamed over the destination in one step. A failed copy leaves
        the previous file at `destination` untouched.

        Raises:
            EncodeError: If the artifact cannot be written next to the destination.
        """
        destination = destination.resolve()
        destination.parent.mkdir(parents=True, exist_ok=True)
        tag = "".join(random.choices(string.ascii_lowercase + string.digits, k=RANDOM_TAG_LENGTH))
        part_path = destination.with_name(f".{destination.name}.{tag}.part")
        try:
            shutil.move(str(work_output), str(part_path))
            os.replace(part_path, destination)
        except OSError as e:
            logger.error(f"Could not write {destination}: {e}")
            raise EncodeError(f"Could not write {destination.name}", details=str(e)) from e
        finally:
            part_path.unlink(missing_ok=True)
        return destination
