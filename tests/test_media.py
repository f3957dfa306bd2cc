"""Unit tests for probe parsing and media assets."""

from pathlib import Path
from unittest.mock import patch

import ffmpeg
import pytest

from sticker_conformer.domain.exceptions import ProbeError
from sticker_conformer.domain.media import (
    MediaAsset,
    ProbeResult,
    parse_duration,
    parse_frame_rate,
    probe_frame_accurate_duration,
    probe_media,
)

GIF_PROBE = {
    "format": {"format_name": "gif", "duration": "N/A"},
    "streams": [
        {"codec_type": "video", "codec_name": "gif", "r_frame_rate": "10/1", "nb_frames": "N/A"}
    ],
}

MP4_PROBE = {
    "format": {"format_name": "mov,mp4,m4a,3gp,3g2,mj2", "duration": "4.000000"},
    "streams": [
        {"codec_type": "audio", "codec_name": "aac"},
        {
            "codec_type": "video",
            "codec_name": "h264",
            "r_frame_rate": "30/1",
            "nb_frames": "120",
            "duration": "4.000000",
        },
    ],
}


class TestParseDuration:
    @pytest.mark.parametrize(
        "value, expected",
        [
            ("3.52", 3.52),
            (2, 2.0),
            ("00:00:02.5", 2.5),
            ("01:02", 62.0),
            ("1:00:00", 3600.0),
        ],
    )
    def test_parses_numbers_and_timecodes(self, value, expected):
        assert parse_duration(value) == pytest.approx(expected)

    @pytest.mark.parametrize("value", [None, "", "N/A", "nan", "garbage"])
    def test_unknown_values_are_none(self, value):
        assert parse_duration(value) is None


class TestParseFrameRate:
    def test_rational(self):
        assert parse_frame_rate("30000/1001") == pytest.approx(29.97, rel=1e-3)

    @pytest.mark.parametrize("value, expected", [("25", 25.0), ("10/0", 10.0)])
    def test_missing_or_zero_denominator_uses_numerator(self, value, expected):
        assert parse_frame_rate(value) == expected

    @pytest.mark.parametrize("value", [None, "", "N/A", "abc/1"])
    def test_unparsable(self, value):
        assert parse_frame_rate(value) is None


class TestProbeResultFromProbe:
    def test_gif_is_animated_image_without_duration(self):
        result = ProbeResult.from_probe(GIF_PROBE)

        assert result.is_animated_image_container
        assert result.video_stream_present
        assert result.container_duration_seconds is None
        assert result.frame_count is None
        assert result.frame_rate == "10/1"
        assert result.codec_name == "gif"

    def test_mp4_picks_video_stream(self):
        result = ProbeResult.from_probe(MP4_PROBE)

        assert not result.is_animated_image_container
        assert result.container_duration_seconds == 4.0
        assert result.frame_count == 120
        assert result.stream_duration_seconds == 4.0
        assert result.codec_name == "h264"

    def test_empty_probe(self):
        result = ProbeResult.from_probe({})

        assert result == ProbeResult()


class TestProbeMedia:
    def test_missing_file(self, tmp_path: Path):
        with pytest.raises(ProbeError):
            probe_media(tmp_path / "missing.gif")

    @patch("sticker_conformer.domain.media.ffmpeg.probe")
    def test_wraps_ffprobe_error(self, mock_probe, gif_file: Path):
        mock_probe.side_effect = ffmpeg.Error("ffprobe", b"", b"Invalid data found when processing input")

        with pytest.raises(ProbeError):
            probe_media(gif_file)

    @patch("sticker_conformer.domain.media.ffmpeg.probe")
    def test_returns_probe_result(self, mock_probe, gif_file: Path):
        mock_probe.return_value = GIF_PROBE

        result = probe_media(gif_file)

        assert result.is_animated_image_container

    @patch("sticker_conformer.domain.media.ffmpeg.probe")
    def test_frame_accurate_duration(self, mock_probe, gif_file: Path):
        mock_probe.return_value = {"streams": [{"nb_read_frames": "25", "r_frame_rate": "10/1"}]}

        assert probe_frame_accurate_duration(gif_file) == 2.5
        assert mock_probe.call_args.kwargs["select_streams"] == "v:0"

    @patch("sticker_conformer.domain.media.ffmpeg.probe")
    def test_frame_accurate_duration_failure_is_none(self, mock_probe, gif_file: Path):
        mock_probe.side_effect = ffmpeg.Error("ffprobe", b"", b"boom")

        assert probe_frame_accurate_duration(gif_file) is None


class TestMediaAsset:
    def test_from_path(self, gif_file: Path):
        asset = MediaAsset.from_path(gif_file, "image/gif")

        assert asset.declared_file_name == "dance.gif"
        assert asset.size_bytes == gif_file.stat().st_size

    def test_from_missing_path(self, tmp_path: Path):
        with pytest.raises(ProbeError):
            MediaAsset.from_path(tmp_path / "nope.gif")

    def test_remove_is_idempotent(self, gif_asset: MediaAsset):
        gif_asset.remove()
        gif_asset.remove()

        assert not gif_asset.local_path.exists()
