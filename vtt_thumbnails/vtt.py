"""WebVTT cues mapping playback time ranges to thumbnails."""

import os
import tempfile
from dataclasses import dataclass

from vtt_thumbnails.config import SPRITE_NAME, THUMB_SUBDIR
from vtt_thumbnails.errors import OutputNotWritable

HEADER = "WEBVTT\n\n"


@dataclass(frozen=True)
class SpriteRegion:
    image: str
    x: int
    y: int
    width: int
    height: int

    def __str__(self) -> str:
        return f"{self.image}#xywh={self.x},{self.y},{self.width},{self.height}"


@dataclass(frozen=True)
class Cue:
    start_seconds: int
    end_seconds: int
    target: str | SpriteRegion


def format_timestamp(seconds: int) -> str:
    """Format whole seconds as HH:MM:SS.000; sub-second precision is not kept."""
    seconds = int(seconds)
    hours, remainder = divmod(seconds, 3600)
    minutes, secs = divmod(remainder, 60)
    return f"{hours:02d}:{minutes:02d}:{secs:02d}.000"


def _time_ranges(count: int, interval: int):
    for i in range(count):
        start = i * interval
        yield start, start + interval


def build_file_cues(paths: list[str], interval: int, prefix: str = THUMB_SUBDIR) -> list[Cue]:
    """One cue per thumbnail file, pointing at prefix/<file name>."""
    return [
        Cue(start, end, f"{prefix}/{os.path.basename(path)}")
        for path, (start, end) in zip(paths, _time_ranges(len(paths), interval))
    ]


def build_sprite_cues(count: int, interval: int, layout, image: str = SPRITE_NAME) -> list[Cue]:
    """One cue per sprite tile, in the order the tiles were laid out."""
    cues = []
    for i, (start, end) in enumerate(_time_ranges(count, interval)):
        x, y = layout.tile_origin(i)
        cues.append(Cue(start, end, SpriteRegion(image, x, y, layout.tile_width, layout.tile_height)))
    return cues


def render_vtt(cues: list[Cue]) -> str:
    parts = [HEADER]
    for cue in cues:
        parts.append(f"{format_timestamp(cue.start_seconds)} --> {format_timestamp(cue.end_seconds)}\n{cue.target}\n\n")
    return "".join(parts)


def write_vtt(text: str, vtt_path: str) -> None:
    """Write the VTT document so that vtt_path either holds the whole text or is untouched."""
    directory = os.path.dirname(vtt_path) or "."
    try:
        fd, partial_path = tempfile.mkstemp(dir=directory, prefix=".thumbnails-", suffix=".vtt")
    except OSError as e:
        raise OutputNotWritable(f"Cannot write VTT file '{vtt_path}': {e}") from e
    try:
        with os.fdopen(fd, "w", encoding="utf-8", newline="\n") as f:
            f.write(text)
        os.replace(partial_path, vtt_path)
    except OSError as e:
        raise OutputNotWritable(f"Cannot write VTT file '{vtt_path}': {e}") from e
    finally:
        if os.path.exists(partial_path):
            os.unlink(partial_path)


def parse_vtt_cues(text: str) -> list[tuple[str, str, str]]:
    """
    Parse a thumbnails VTT document into (start, end, target) tuples.

    Cue identifiers and the header block are skipped. A cue with no
    payload line is ignored.
    """
    cues = []
    lines = text.splitlines()
    i = 0
    while i < len(lines):
        line = lines[i].strip()
        i += 1
        if "-->" not in line:
            continue
        start, _, rest = line.partition("-->")
        # cue settings may follow the end time
        end = rest.split()[0] if rest.split() else ""
        if i < len(lines) and lines[i].strip():
            cues.append((start.strip(), end, lines[i].strip()))
            i += 1
    return cues


def missing_cue_targets(text: str, base_dir: str) -> list[str]:
    """Targets in a VTT document whose image file does not exist under base_dir."""
    missing = []
    for _start, _end, target in parse_vtt_cues(text):
        image, fragment, _region = target.rpartition("#xywh=")
        if not fragment:
            image = target
        if not os.path.isfile(os.path.join(base_dir, image)):
            missing.append(target)
    return missing
