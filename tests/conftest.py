"""Shared fixtures: fake ffmpeg/ffprobe collaborators and generated media."""

import subprocess
from pathlib import Path
from typing import Callable, List, Optional

import pytest
from PIL import Image

from sticker_conformer.domain.media import MediaAsset, ProbeResult


class FakeRunner:
    """Stands in for `run_cmd`: records commands and writes outputs of given sizes.

    `sizes` lists the byte size written by each successive call. A size of
    None makes that call fail with return code 1.
    """

    def __init__(self, sizes: List[Optional[int]]):
        self.sizes = list(sizes)
        self.commands: List[List[str]] = []
        self.outputs: List[Path] = []

    def __call__(self, cmd_list, **kwargs) -> subprocess.CompletedProcess:
        self.commands.append(cmd_list)
        output = Path(cmd_list[-1])
        self.outputs.append(output)
        size = self.sizes[len(self.commands) - 1]
        if size is None:
            output.write_bytes(b"partial")
            return subprocess.CompletedProcess(cmd_list, 1, stdout="", stderr="Conversion failed!")
        output.write_bytes(b"\0" * size)
        return subprocess.CompletedProcess(cmd_list, 0, stdout="", stderr="")


@pytest.fixture
def fake_runner_factory() -> Callable[[List[Optional[int]]], FakeRunner]:
    return FakeRunner


@pytest.fixture
def prober_for() -> Callable[[ProbeResult], Callable[[Path], ProbeResult]]:
    """Returns a factory of probers that always report the given result."""

    def factory(result: ProbeResult):
        def prober(path: Path) -> ProbeResult:
            return result

        return prober

    return factory


@pytest.fixture
def gif_file(tmp_path: Path) -> Path:
    """A small two-frame animated GIF."""
    path = tmp_path / "dance.gif"
    frames = [Image.new("RGB", (40, 20), color) for color in ("red", "blue")]
    frames[0].save(path, save_all=True, append_images=frames[1:], duration=100, loop=0)
    return path


@pytest.fixture
def png_file(tmp_path: Path) -> Path:
    """A wide, partially transparent PNG."""
    path = tmp_path / "logo.png"
    img = Image.new("RGBA", (200, 100), (255, 0, 0, 128))
    img.save(path, format="PNG")
    return path


@pytest.fixture
def jpeg_file(tmp_path: Path) -> Path:
    """A tall JPEG."""
    path = tmp_path / "photo.jpg"
    Image.new("RGB", (300, 600), "green").save(path, format="JPEG")
    return path


@pytest.fixture
def gif_asset(gif_file: Path) -> MediaAsset:
    return MediaAsset.from_path(gif_file, "image/gif")
