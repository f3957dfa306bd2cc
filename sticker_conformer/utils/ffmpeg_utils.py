"""
This module provides a robust function for running external command-line
processes (ffmpeg) with logging and error capture.
"""

import shlex
import subprocess
from pathlib import Path
from typing import List, Optional

from loguru import logger

from ..services.logging_service import ErrorLog


def display_command(cmd_list: List[str]) -> str:
    """Quotes and joins a command list for logging."""
    return shlex.join(cmd_list)


def run_cmd(
    cmd_list: List[str],
    src_file_for_log: Path = Path(),
    error_log_dir: Optional[Path] = None,
    show_cmd: bool = False,
) -> Optional[subprocess.CompletedProcess]:
    """
    Executes an external command and captures its output.

    A thin wrapper around `subprocess.run` that adds logging and turns a
    missing executable into a `None` result instead of an exception, so callers
    only have to deal with one failure shape.

    Args:
        cmd_list: The command to execute as a list of arguments.
        src_file_for_log: The source file being processed, for log context.
        error_log_dir: If given, failures to start the command are also
                       appended to an `ErrorLog` in this directory.
        show_cmd: If True, the command is logged at DEBUG level before execution.

    Returns:
        The `subprocess.CompletedProcess` (check `returncode`), or None if the
        command could not be started.
    """
    if not cmd_list:
        logger.error("run_cmd received an empty command list.")
        return None

    display_cmd_str = display_command(cmd_list)
    if show_cmd:
        logger.debug(f"Executing: {display_cmd_str}")

    try:
        result = subprocess.run(
            cmd_list,
            capture_output=True,
            text=True,
            encoding="utf-8",
            errors="replace",
            shell=False,
        )
    except (FileNotFoundError, PermissionError) as e:
        logger.error(
            f"Command could not be started ('{cmd_list[0]}'): {e}. Ensure it's installed and on PATH."
        )
        if error_log_dir:
            ErrorLog(error_log_dir).write(
                f"Command execution error for: {src_file_for_log.name}",
                f"Command: {display_cmd_str}",
                f"Error: {type(e).__name__} - {e}",
            )
        return None

    if result.stderr and result.returncode != 0:
        logger.debug(f"Command stderr (error, rc={result.returncode}): {result.stderr}")
    elif result.stderr:
        logger.trace(f"Command stderr (rc={result.returncode}): {result.stderr[-500:]}")

    return result
