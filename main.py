"""
Main entry point for the Sticker Conformer application.

This script configures logging, parses command-line arguments, verifies the
external tools and runs every input through the conformance pipeline. The exit
code is 0 when all inputs were converted and 1 otherwise.
"""

import sys

from loguru import logger

from sticker_conformer.cli import get_args
from sticker_conformer.config.common import (
    OUTPUT_DIR,
    REPORT_DIR,
    STAGING_DIR,
    LOGGER_FORMAT,
)
from sticker_conformer.pipeline.boundary import (
    BoundaryRunner,
    ConversionRequest,
    print_outcomes,
)
from sticker_conformer.pipeline.sticker_pipeline import StickerPipeline
from sticker_conformer.services.logging_service import SuccessLog
from sticker_conformer.utils.external_tools import ExternalTools


# Configure the logger for initial setup.
# The level is overridden once the command-line arguments are known.
logger.remove()
logger.add(sys.stderr, level="INFO", format=LOGGER_FORMAT)


def build_requests(args) -> list:
    requests = []
    for i, source in enumerate(args.inputs, start=1):
        requests.append(
            ConversionRequest(
                source=source,
                caller_id=args.caller_id or f"cli-{i}",
                output_path=args.output,
                mime_type=args.mime_type,
            )
        )
    return requests


def main(argv=None) -> int:
    """
    Main function to start the conversion process.

    1. Parses command-line arguments and reconfigures the logger.
    2. Verifies ffmpeg and ffprobe unless told otherwise.
    3. Builds the pipeline and the boundary runner.
    4. Runs all inputs and prints one line per input.
    """
    args = get_args(argv)

    logger.remove()
    logger.add(sys.stderr, level=args.log_level, format=LOGGER_FORMAT)
    logger.debug(f"Parsed arguments: {args}")

    if not args.skip_tool_check and not ExternalTools.run_all():
        logger.error("ffmpeg/ffprobe are not available. Install them or set paths.ffmpeg_dir in config.user.yaml.")
        return 1

    report_dir = args.report_dir or REPORT_DIR
    pipeline = StickerPipeline(
        staging_dir=args.staging_dir or STAGING_DIR,
        output_dir=args.output_dir or OUTPUT_DIR,
        success_log=SuccessLog(report_dir) if report_dir else None,
    )
    runner = BoundaryRunner(pipeline)

    outcomes = runner.run_all(build_requests(args), max_workers=args.workers)
    print_outcomes(outcomes)

    failed = sum(1 for outcome in outcomes if not outcome.ok)
    if failed:
        logger.warning(f"{failed} of {len(outcomes)} input(s) failed.")
        return 1
    logger.success(f"All {len(outcomes)} input(s) converted.")
    return 0


if __name__ == "__main__":
    sys.exit(main())
