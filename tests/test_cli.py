"""Tests for argument parsing and the main entry point."""

from pathlib import Path
from unittest.mock import patch

import pytest

import main
from sticker_conformer.cli import get_args


class TestGetArgs:
    def test_defaults(self):
        args = get_args(["dance.gif"])

        assert args.inputs == ["dance.gif"]
        assert args.output is None
        assert args.caller_id is None
        assert args.workers == 4
        assert args.log_level == "INFO"
        assert not args.skip_tool_check

    def test_paths_are_resolved(self, tmp_path: Path):
        args = get_args(["a.gif", "--output", "out.webm", "--staging-dir", str(tmp_path / "s")])

        assert args.output == Path("out.webm").resolve()
        assert args.staging_dir == (tmp_path / "s").resolve()

    def test_output_needs_single_input(self):
        with pytest.raises(SystemExit):
            get_args(["a.gif", "b.gif", "--output", "out.webm"])

    def test_workers_must_be_positive(self):
        with pytest.raises(SystemExit):
            get_args(["a.gif", "--workers", "0"])

    def test_inputs_required(self):
        with pytest.raises(SystemExit):
            get_args([])


class TestBuildRequests:
    def test_each_input_gets_own_caller_by_default(self):
        requests = main.build_requests(get_args(["a.gif", "b.png"]))

        assert [r.caller_id for r in requests] == ["cli-1", "cli-2"]

    def test_shared_caller_id(self):
        requests = main.build_requests(get_args(["a.gif", "b.png", "--caller-id", "42"]))

        assert {r.caller_id for r in requests} == {"42"}


class TestMain:
    def test_unsupported_input_exits_with_failure(self, tmp_path: Path, capsys):
        notes = tmp_path / "notes.txt"
        notes.write_text("hello")

        code = main.main(
            [str(notes), "--skip-tool-check", "--staging-dir", str(tmp_path / "s"), "--output-dir", str(tmp_path / "o")]
        )

        assert code == 1
        assert "[ERR]" in capsys.readouterr().out

    @patch("main.ExternalTools.run_all", return_value=False)
    def test_missing_tools_abort(self, mock_run_all, tmp_path: Path):
        code = main.main([str(tmp_path / "a.gif")])

        assert code == 1
        mock_run_all.assert_called_once()

    def test_static_image_end_to_end(self, png_file: Path, tmp_path: Path, capsys):
        output_dir = tmp_path / "o"

        code = main.main(
            [str(png_file), "--skip-tool-check", "--staging-dir", str(tmp_path / "s"), "--output-dir", str(output_dir)]
        )

        assert code == 0
        assert (output_dir / "logo.webp").is_file()
        assert list((tmp_path / "s").iterdir()) == []
        assert "[OK ]" in capsys.readouterr().out
