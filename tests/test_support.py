"""Tests for policy validation, file logs and the external tool wrappers."""

import subprocess
from pathlib import Path
from unittest.mock import patch

import pytest

from sticker_conformer.config.policy import DEFAULT_POLICY, ConformancePolicy
from sticker_conformer.services.logging_service import ErrorLog, SuccessLog
from sticker_conformer.utils.external_tools import ExternalTools
from sticker_conformer.utils.fallback import first_match
from sticker_conformer.utils.ffmpeg_utils import display_command, run_cmd
from sticker_conformer.utils.format_utils import format_seconds, formatted_size


class TestConformancePolicy:
    def test_defaults(self):
        assert DEFAULT_POLICY.output_side == 512
        assert DEFAULT_POLICY.max_output_bytes == 256 * 1024
        assert DEFAULT_POLICY.max_input_bytes == 50 * 1024 * 1024
        assert DEFAULT_POLICY.transcode_tier_count == 3

    def test_mismatched_tiers_are_rejected(self):
        with pytest.raises(ValueError):
            ConformancePolicy(crf_tiers=(30, 35))

    def test_empty_image_tiers_are_rejected(self):
        with pytest.raises(ValueError):
            ConformancePolicy(image_quality_tiers=())

    def test_non_positive_default_duration_is_rejected(self):
        with pytest.raises(ValueError):
            ConformancePolicy(default_duration_seconds=0)


class TestFileLogs:
    def test_error_log_appends(self, tmp_path: Path):
        log = ErrorLog(tmp_path)

        log.write("first")
        log.write("second", "details")

        content = log.log_file_path.read_text(encoding="utf-8")
        assert content.index("first") < content.index("second")
        assert content.count(ErrorLog.linesep_marker) == 2

    def test_success_log_is_a_yaml_list(self, tmp_path: Path):
        log = SuccessLog(tmp_path)

        log.write({"output": "a.webm"})
        log.write({"output": "b.webp"})

        entries = log.read_entries()
        assert [e["output"] for e in entries] == ["a.webm", "b.webp"]
        assert all("logged_at" in e for e in entries)


class TestRunCmd:
    def test_missing_executable_returns_none_and_logs(self, tmp_path: Path):
        result = run_cmd(
            ["definitely-not-an-installed-tool-x9", "-version"],
            src_file_for_log=Path("clip.gif"),
            error_log_dir=tmp_path,
        )

        assert result is None
        assert "clip.gif" in (tmp_path / ErrorLog.DEFAULT_ERROR_FILENAME).read_text(encoding="utf-8")

    def test_empty_command(self):
        assert run_cmd([]) is None

    def test_display_command_quotes(self):
        assert display_command(["ffmpeg", "-i", "my clip.gif"]) == "ffmpeg -i 'my clip.gif'"


class TestExternalTools:
    @patch("sticker_conformer.utils.external_tools.subprocess.run")
    def test_verify_tool_success(self, mock_run):
        mock_run.return_value = subprocess.CompletedProcess([], 0, stdout="ffmpeg version 7.0\n", stderr="")

        assert ExternalTools.verify_tool("ffmpeg")

    @patch("sticker_conformer.utils.external_tools.subprocess.run", side_effect=FileNotFoundError)
    def test_verify_tool_missing(self, mock_run):
        assert not ExternalTools.verify_tool("ffmpeg")

    @patch("sticker_conformer.utils.external_tools.MODULE_PATH", None)
    def test_defaults_to_path_lookup(self):
        assert ExternalTools.get_ffprobe_path() in ("ffprobe", "ffprobe.exe")


class TestHelpers:
    def test_first_match_stops_at_first_accepted(self):
        calls = []

        def make(value):
            def candidate():
                calls.append(value)
                return value

            return candidate

        assert first_match([make(None), make(0), make(5), make(7)], accept=lambda v: v > 0) == 5
        assert calls == [None, 0, 5]

    def test_first_match_nothing(self):
        assert first_match([lambda: None]) is None

    @pytest.mark.parametrize(
        "size, expected", [(0, "0 B"), (512, "512 B"), (1536, "1.50 KB"), (2 * 1024 * 1024, "2 MB")]
    )
    def test_formatted_size(self, size, expected):
        assert formatted_size(size) == expected

    def test_format_seconds(self):
        assert format_seconds(3.0) == "3"
        assert format_seconds(2.5) == "2.5"

