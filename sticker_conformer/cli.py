"""
Command-Line Interface (CLI) setup for the Sticker Conformer.

This module uses Python's `argparse` to define and parse the command-line
arguments that control the application's behavior.
"""
import argparse
from pathlib import Path
from typing import Optional, Sequence


def get_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    """
    Parses command-line arguments for the Sticker Conformer.

    Each positional input is either a local file or a Tenor share link.

    Returns:
        argparse.Namespace: An object containing the parsed command-line
                            arguments as attributes.
    """
    parser = argparse.ArgumentParser(
        description="Convert GIFs, videos, images and Tenor links into messaging-platform stickers."
    )
    parser.add_argument(
        "inputs", nargs="+", help="Local media files and/or Tenor share links."
    )
    parser.add_argument(
        "--output", type=str, default=None,
        help="Output path. Only valid with a single input.",
    )
    parser.add_argument(
        "--output-dir", type=str, default=None,
        help="Directory for finished stickers when --output is not given.",
    )
    parser.add_argument(
        "--mime-type", type=str, default=None,
        help="Declared MIME type of the inputs (e.g. image/gif). Defaults to guessing from the file name.",
    )
    parser.add_argument(
        "--caller-id", type=str, default=None,
        help="Caller identity shared by all inputs. Requests of one caller never run concurrently; "
             "by default every input gets its own identity.",
    )
    parser.add_argument(
        "--workers", type=int, default=4, help="Number of conversions to run in parallel."
    )
    parser.add_argument(
        "--staging-dir", type=str, default=None,
        help="Directory for temporary files. Useful for pointing to a RAM disk.",
    )
    parser.add_argument(
        "--report-dir", type=str, default=None,
        help="Write a YAML report of successful conversions into this directory.",
    )
    parser.add_argument(
        "--log-level", type=str, default="INFO",
        choices=["TRACE", "DEBUG", "INFO", "WARNING", "ERROR"],
        help="Set the logging level.",
    )
    parser.add_argument(
        "--skip-tool-check", action="store_true",
        help="Do not verify ffmpeg/ffprobe before starting.",
    )

    args = parser.parse_args(argv)

    if args.output and len(args.inputs) > 1:
        parser.error("--output can only be used with a single input.")
    if args.workers < 1:
        parser.error("--workers must be at least 1.")

    for attr in ("output", "output_dir", "staging_dir", "report_dir"):
        value = getattr(args, attr)
        if value:
            setattr(args, attr, Path(value).resolve())

    return args
