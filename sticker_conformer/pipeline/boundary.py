"""
The boundary between callers and the conformance pipeline.

Requests arrive here from the CLI (or any other front end). `BoundaryRunner`
applies admission control per caller, picks the local or remote entry point of
the pipeline, and converts every failure into a `RequestOutcome` that carries a
human-readable message instead of an exception.
"""
import concurrent.futures
import sys
import traceback
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, List, Optional, Sequence, Type

from loguru import logger

from ..domain.exceptions import (
    AssetNotFoundError,
    CallerBusyError,
    EncodeError,
    InvalidLinkError,
    NetworkError,
    OversizeError,
    ProbeError,
    ProviderError,
    RemoteAssetError,
    StickerConformerException,
    UnsupportedFormatError,
)
from ..domain.models import ConversionResult
from ..services.admission_service import AdmissionRegistry
from ..services.remote_resolver import is_remote_link
from .sticker_pipeline import StickerPipeline

ERROR_MESSAGES: Dict[Type[StickerConformerException], str] = {
    UnsupportedFormatError: "This file type cannot be turned into a sticker. Send a GIF, video, PNG or JPEG.",
    OversizeError: "The file is too large. The maximum input size is 50 MB.",
    ProbeError: "The file could not be read. It may be corrupt or incomplete.",
    InvalidLinkError: "That does not look like a Tenor link. Expected something like tenor.com/view/name-gif-123456.",
    AssetNotFoundError: "The GIF could not be found on Tenor.",
    ProviderError: "Tenor is not answering correctly right now. Try again later.",
    NetworkError: "Downloading the GIF failed. Check the connection and try again.",
    RemoteAssetError: "The Tenor GIF could not be retrieved.",
    EncodeError: "Converting the file failed.",
    CallerBusyError: "A conversion is already running for you. Wait until it finishes.",
}
GENERIC_MESSAGE = "Something went wrong while converting the file."


def describe_error(exc: BaseException) -> str:
    """Returns the user-facing message for an exception, most specific kind first."""
    for cls in type(exc).__mro__:
        if cls in ERROR_MESSAGES:
            return ERROR_MESSAGES[cls]
    return GENERIC_MESSAGE


@dataclass(frozen=True)
class ConversionRequest:
    """One unit of work: a local path or a Tenor link, on behalf of a caller."""

    source: str
    caller_id: str = "local"
    output_path: Optional[Path] = None
    mime_type: Optional[str] = None

    @property
    def is_remote(self) -> bool:
        return is_remote_link(self.source) and not Path(self.source).exists()


@dataclass
class RequestOutcome:
    request: ConversionRequest
    result: Optional[ConversionResult] = None
    error: Optional[BaseException] = None
    message: str = ""

    @property
    def ok(self) -> bool:
        return self.result is not None and self.error is None


class BoundaryRunner:
    """
    Runs conversion requests against a shared pipeline.

    Requests from different callers run concurrently on a thread pool; a second
    request from a caller whose previous request is still running is rejected.
    """

    def __init__(self, pipeline: StickerPipeline, registry: Optional[AdmissionRegistry] = None):
        self.pipeline = pipeline
        self.registry = registry or AdmissionRegistry()

    def handle(self, request: ConversionRequest) -> RequestOutcome:
        """Processes one request and never raises for domain failures."""
        try:
            with self.registry.admit(request.caller_id):
                if request.is_remote:
                    result = self.pipeline.convert_remote(
                        request.source, request.output_path, caller_id=request.caller_id
                    )
                else:
                    result = self.pipeline.convert_file(
                        Path(request.source),
                        request.output_path,
                        mime_type=request.mime_type,
                        caller_id=request.caller_id,
                    )
        except StickerConformerException as e:
            message = describe_error(e)
            logger.error(f"{request.source}: {type(e).__name__}: {e}")
            if isinstance(e, EncodeError) and e.details:
                logger.debug(f"Encoder output for {request.source}:\n{e.details}")
            return RequestOutcome(request=request, error=e, message=message)

        return RequestOutcome(
            request=request,
            result=result,
            message=f"Sticker saved to {result.output_path}",
        )

    def run_all(self, requests: Sequence[ConversionRequest], max_workers: int = 4) -> List[RequestOutcome]:
        """
        Handles all requests on a thread pool.

        Returns:
            The outcomes in the order of `requests`.
        """
        if not requests:
            return []
        max_workers = max(1, min(max_workers, len(requests)))
        logger.info(f"Processing {len(requests)} request(s) with {max_workers} worker thread(s).")

        outcomes: List[Optional[RequestOutcome]] = [None] * len(requests)
        with concurrent.futures.ThreadPoolExecutor(max_workers=max_workers) as executor:
            futures = {executor.submit(self.handle, request): i for i, request in enumerate(requests)}
            for future in concurrent.futures.as_completed(futures):
                index = futures[future]
                request = requests[index]
                try:
                    outcomes[index] = future.result()
                except Exception as exc:
                    tb_str = traceback.format_exception(type(exc), exc, exc.__traceback__)
                    logger.error(
                        f"Unexpected error processing {request.source}:\n"
                        f"Exception type: {type(exc).__name__}\n"
                        f"Exception message: {exc}\n"
                        f"Traceback: {''.join(tb_str)}"
                    )
                    outcomes[index] = RequestOutcome(request=request, error=exc, message=describe_error(exc))
        return outcomes


def print_outcomes(outcomes: Sequence[RequestOutcome], stream=None):
    """Prints one status line per outcome."""
    stream = stream or sys.stdout
    for outcome in outcomes:
        status = "OK " if outcome.ok else "ERR"
        print(f"[{status}] {outcome.request.source}: {outcome.message}", file=stream)
