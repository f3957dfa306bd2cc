"""Unit tests for the format classifier."""

import pytest

from sticker_conformer.services.format_classifier import classify, normalize_mime_type


class TestClassify:
    """Tests for classify()."""

    @pytest.mark.parametrize(
        "mime_type, file_name, supported, is_static",
        [
            ("image/gif", "a.gif", True, False),
            ("image/png", "a.png", True, True),
            ("image/jpeg", "a.jpg", True, True),
            ("video/webm", "a.webm", True, False),
            ("video/mp4", None, True, False),
            ("image/webp", "a.webp", True, False),
            ("text/plain", "notes.txt", False, False),
        ],
    )
    def test_known_mime_types(self, mime_type, file_name, supported, is_static):
        result = classify(mime_type, file_name)
        assert result.supported is supported
        assert result.is_static_image is is_static

    @pytest.mark.parametrize(
        "file_name, is_static",
        [
            ("clip.MP4", False),
            ("loop.gif", False),
            ("scan.JPEG", True),
            ("icon.png", True),
            ("movie.mkv", False),
        ],
    )
    def test_extension_fallback(self, file_name, is_static):
        result = classify(None, file_name)
        assert result.supported
        assert result.is_static_image is is_static

    def test_unknown_mime_falls_back_to_extension(self):
        result = classify("application/octet-stream", "sticker.png")
        assert result.supported
        assert result.is_static_image

    def test_mime_type_beats_extension(self):
        result = classify("image/gif", "misnamed.png")
        assert result.supported
        assert not result.is_static_image

    def test_video_mime_never_static(self):
        result = classify("video/x-something", "frame.png")
        assert result.supported
        assert not result.is_static_image

    @pytest.mark.parametrize("file_name", [None, "", "README", "archive.zip"])
    def test_no_usable_signal_is_unsupported(self, file_name):
        assert not classify(None, file_name).supported


class TestNormalizeMimeType:
    def test_strips_parameters_and_case(self):
        assert normalize_mime_type("Image/PNG; charset=binary") == "image/png"

    def test_empty(self):
        assert normalize_mime_type(None) == ""
