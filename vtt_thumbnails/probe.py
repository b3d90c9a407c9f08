"""Read duration, start offset and frame rate from `ffmpeg -i` output."""

import re
from dataclasses import dataclass

from vtt_thumbnails.config import DEFAULT_PROBE_TIMEOUT
from vtt_thumbnails.errors import ProbeParseError, ProbeUnavailable
from vtt_thumbnails.utils import output_tail, run_ffmpeg

VERSION_RE = re.compile(r"^\s*ffmpeg version ([^\s,]*)", re.IGNORECASE)
DURATION_RE = re.compile(r"Duration: (\d+):(\d+):(\d+)\.\d+, start: ([^,]*)", re.IGNORECASE | re.DOTALL)
TBR_RE = re.compile(r"\b(\d+(?:\.\d+)?) tbr\b")


@dataclass(frozen=True)
class VideoMetadata:
    duration_seconds: int
    start_offset_seconds: float
    frame_rate: float
    version: str = ""


def _parse_start(value: str) -> float:
    value = value.strip()
    if value.upper() == "N/A":
        return 0.0
    try:
        return float(value)
    except ValueError as e:
        raise ProbeParseError(f"Unexpected start offset '{value}' in ffmpeg output") from e


def parse_probe_output(text: str) -> VideoMetadata:
    """
    Parse the diagnostic text `ffmpeg -i <file>` prints.

    The duration keeps whole seconds only. A start offset of "N/A" counts as
    zero. The frame rate is the first "<number> tbr" token.

    Raises ProbeUnavailable when the text does not start with the ffmpeg
    version banner, and ProbeParseError when duration or frame rate is missing.
    """
    version = VERSION_RE.match(text or "")
    if not version:
        raise ProbeUnavailable("ffmpeg did not print a version banner; check the --ffmpeg path")

    duration = DURATION_RE.search(text)
    tbr = TBR_RE.search(text)
    if not duration or not tbr:
        raise ProbeParseError(
            "Cannot determine the duration or video frame rate - both are required to create the thumbnails"
        )

    hours, minutes, seconds = (int(g) for g in duration.group(1, 2, 3))
    frame_rate = float(tbr.group(1))
    if frame_rate <= 0:
        raise ProbeParseError(f"ffmpeg reported a frame rate of {tbr.group(1)} tbr")

    return VideoMetadata(
        duration_seconds=hours * 3600 + minutes * 60 + seconds,
        start_offset_seconds=_parse_start(duration.group(4)),
        frame_rate=frame_rate,
        version=version.group(1),
    )


def run_probe(video_file: str, ffmpeg: str = "ffmpeg", timeout: float = DEFAULT_PROBE_TIMEOUT, logger=None) -> str:
    """Return the combined stdout/stderr of `ffmpeg -i video_file`.

    ffmpeg exits non-zero here because no output file is given; that is
    expected and ignored.
    """
    result = run_ffmpeg([ffmpeg, "-i", video_file], timeout, logger)
    return result.stdout or ""


def get_video_metadata(video_file: str, ffmpeg: str = "ffmpeg", timeout: float = DEFAULT_PROBE_TIMEOUT, logger=None):
    text = run_probe(video_file, ffmpeg, timeout, logger)
    try:
        metadata = parse_probe_output(text)
    except ProbeParseError as e:
        raise ProbeParseError(f"{e} (input '{video_file}'):\n{output_tail(text)}") from e
    if logger:
        logger.info(
            f"ffmpeg {metadata.version}: duration {metadata.duration_seconds}s, "
            f"start {metadata.start_offset_seconds:g}s, {metadata.frame_rate:g} tbr"
        )
    return metadata
