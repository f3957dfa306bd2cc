"""
This module provides the ExternalTools class to locate and verify the
executables the application shells out to: ffmpeg and ffprobe.
"""
import subprocess
import sys

from loguru import logger

from ..config.common import MODULE_PATH


class ExternalTools:
    """
    Resolves ffmpeg/ffprobe locations and checks that they run.

    The directory configured as `paths.ffmpeg_dir` in `config.user.yaml` takes
    priority; otherwise the bare executable names are used and resolved through
    the system PATH.
    """

    @staticmethod
    def _get_tool_path(tool_name: str) -> str:
        """
        Determines the executable path for `tool_name`.

        Handles the platform-specific executable name ('.exe' on Windows).
        """
        exe_name = f"{tool_name}.exe" if sys.platform == "win32" else tool_name

        if MODULE_PATH and MODULE_PATH.is_dir():
            configured_path = MODULE_PATH / exe_name
            if configured_path.is_file():
                return str(configured_path)
            logger.warning(
                f"`ffmpeg_dir` is configured, but '{exe_name}' was not found there. Falling back to system PATH."
            )

        return tool_name

    @staticmethod
    def get_ffmpeg_path() -> str:
        return ExternalTools._get_tool_path("ffmpeg")

    @staticmethod
    def get_ffprobe_path() -> str:
        return ExternalTools._get_tool_path("ffprobe")

    @staticmethod
    def verify_tool(tool_path: str) -> bool:
        """
        Runs `<tool> -version` and logs the first line of its output.

        Returns:
            True if the tool ran successfully, False otherwise.
        """
        try:
            result = subprocess.run(
                [tool_path, "-version"],
                check=True,
                capture_output=True,
                text=True,
                encoding="utf-8",
            )
        except subprocess.CalledProcessError as e:
            logger.error(f"'{tool_path} -version' failed (return code {e.returncode}):\n{e.stderr}")
            return False
        except FileNotFoundError:
            logger.error(
                f"'{tool_path}' not found. Install FFmpeg and add it to PATH, "
                "or set 'paths.ffmpeg_dir' in 'config.user.yaml'."
            )
            return False

        version_lines = result.stdout.splitlines()
        logger.info(f"Found {version_lines[0] if version_lines else tool_path}")
        return True

    @staticmethod
    def run_all() -> bool:
        """Verifies both ffmpeg and ffprobe. Called once at startup."""
        ffmpeg_ok = ExternalTools.verify_tool(ExternalTools.get_ffmpeg_path())
        ffprobe_ok = ExternalTools.verify_tool(ExternalTools.get_ffprobe_path())
        return ffmpeg_ok and ffprobe_ok
