import os
import subprocess

import cv2
import numpy as np
import pytest

FIXTURES_DIR = os.path.join(os.path.dirname(__file__), "fixtures")


@pytest.fixture
def probe_output():
    with open(os.path.join(FIXTURES_DIR, "ffmpeg_probe.txt")) as f:
        return f.read()


@pytest.fixture
def broken_probe_output():
    with open(os.path.join(FIXTURES_DIR, "ffmpeg_probe_no_stream.txt")) as f:
        return f.read()


@pytest.fixture
def write_jpeg():
    """Write a small solid-colour JPEG and return its path."""

    def _write(path, width=120, height=68, value=128):
        frame = np.full((height, width, 3), value, dtype=np.uint8)
        assert cv2.imwrite(path, frame)
        return path

    return _write


@pytest.fixture
def fake_ffmpeg(probe_output, write_jpeg):
    """Stand-in for subprocess.run that imitates the three ffmpeg invocations.

    Probe commands return `probe_output`; thumbnail commands write `frames`
    JPEGs through the %04d output pattern; poster commands write one JPEG.
    Every command is recorded in `calls`.
    """

    class FakeFfmpeg:
        def __init__(self):
            self.probe_output = probe_output
            self.frames = 12
            self.frame_size = (120, 68)
            self.calls = []

        def __call__(self, cmd, **kwargs):
            self.calls.append(cmd)
            if "-vf" in cmd:
                width, height = self.frame_size
                for i in range(1, self.frames + 1):
                    write_jpeg(cmd[-1] % i, width, height, value=(i * 20) % 256)
                return subprocess.CompletedProcess(cmd, 0, stdout="frame= 12 fps=0.0 q=5.0 Lsize=N/A\n")
            if "-vframes" in cmd:
                write_jpeg(cmd[-1], 640, 360)
                return subprocess.CompletedProcess(cmd, 0, stdout="")
            return subprocess.CompletedProcess(cmd, 1, stdout=self.probe_output)

    return FakeFfmpeg()
