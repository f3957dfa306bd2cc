"""
Common configuration settings used throughout the application.

This module contains globally shared settings: logging format, the staging,
output and report directories, external tool paths and the Tenor API
parameters. User-specific values are loaded from a `config.user.yaml` file at
the project root, so paths and keys can be changed without touching the code.

Example `config.user.yaml`:

    paths:
      ffmpeg_dir: /opt/ffmpeg/bin
      staging_dir: /tmp/sticker_staging
      output_dir: ./stickers
      report_dir: ./reports
    tenor:
      api_key: your-key
      timeout_seconds: 30
"""
import os
from pathlib import Path

import yaml
from loguru import logger

PROJECT_ROOT = Path(__file__).resolve().parent.parent.parent
USER_CONFIG_PATH = PROJECT_ROOT / "config.user.yaml"

# --- Directory Defaults ---
# The shared staging directory for temporary files of all invocations.
STAGING_DIR: Path = PROJECT_ROOT / "temp"
# Where finished stickers go when no explicit output path is given.
OUTPUT_DIR: Path = Path("stickers").resolve()
# Where the YAML conversion report is written. None disables the report.
REPORT_DIR: Path | None = None
# Plain-text log of failed external commands.
ERROR_LOG_DIR: Path = Path("sticker_error").resolve()

# The directory containing the ffmpeg and ffprobe executables. If None, the
# executables are expected on the system PATH.
MODULE_PATH: Path | None = None

# --- Tenor API ---
TENOR_API_URL = "https://tenor.googleapis.com/v2/posts"
TENOR_API_KEY: str = ""
# Network timeout for both the metadata call and the media download.
TENOR_TIMEOUT_SECONDS: float = 30.0
# Media variants in the order they are tried, highest fidelity first.
TENOR_MEDIA_PRIORITY = ("gif", "mediumgif", "tinygif")

# --- Output Naming ---
ANIMATED_OUTPUT_SUFFIX = ".webm"
STATIC_OUTPUT_SUFFIX = ".webp"

if USER_CONFIG_PATH.is_file():
    try:
        with USER_CONFIG_PATH.open("r", encoding="utf-8") as f:
            user_config = yaml.safe_load(f) or {}
        paths_config = user_config.get("paths") or {}
        tenor_config = user_config.get("tenor") or {}

        if paths_config.get("ffmpeg_dir"):
            MODULE_PATH = Path(paths_config["ffmpeg_dir"])
        if paths_config.get("staging_dir"):
            STAGING_DIR = Path(paths_config["staging_dir"]).resolve()
        if paths_config.get("output_dir"):
            OUTPUT_DIR = Path(paths_config["output_dir"]).resolve()
        if paths_config.get("report_dir"):
            REPORT_DIR = Path(paths_config["report_dir"]).resolve()

        if tenor_config.get("api_key"):
            TENOR_API_KEY = str(tenor_config["api_key"])
        if tenor_config.get("timeout_seconds"):
            TENOR_TIMEOUT_SECONDS = float(tenor_config["timeout_seconds"])
    except Exception as e:
        logger.warning(f"Could not load or parse '{USER_CONFIG_PATH}': {e}")
else:
    logger.debug(f"User config '{USER_CONFIG_PATH}' not found. Using defaults.")

# The environment wins over the config file for secrets.
TENOR_API_KEY = os.getenv("TENOR_API_KEY", TENOR_API_KEY)


# --- Logging Configuration ---
LOGGER_FORMAT = (
    "<green>{time:MM-DD HH:mm:ss}</green> | "
    "<level>{level: <8}</level> | "
    "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> | "
    "{thread.name} - <level>{message}</level>"
)

# Length of the random part of staging prefixes and dated report names.
RANDOM_TAG_LENGTH = 8
