#!/usr/bin/env python3

import os
import re

from vtt_thumbnails.errors import NoFramesProduced
from vtt_thumbnails.utils import output_tail, run_ffmpeg

# ffmpeg mishandles seeking to exactly the stream's stated start
SEEK_EPSILON = 0.0001
JPEG_QSCALE = 5


def thumbnail_stem(video_file):
    """Lowercased file name of the video with its final extension removed."""
    name = os.path.basename(video_file)
    stem, _ext = os.path.splitext(name)
    return (stem or name).lower()


def thumbnail_pattern(stem):
    return re.compile(rf"^{re.escape(stem)}-\d{{4}}\.jpg$")


def natural_sort_key(name):
    """Sort key that orders embedded numbers by value, so name-2 comes before name-10."""
    return [int(part) if part.isdigit() else part for part in re.split(r"(\d+)", name)]


def list_thumbnails(thumb_dir, stem):
    """
    Return the thumbnails of a video in sequence order.

    Only regular files named "<stem>-NNNN.jpg" are included. The list holds
    full paths, naturally sorted by file name.
    """
    if not os.path.isdir(thumb_dir):
        return []
    pattern = thumbnail_pattern(stem)
    names = [
        f for f in os.listdir(thumb_dir)
        if pattern.match(f) and os.path.isfile(os.path.join(thumb_dir, f))
    ]
    return [os.path.join(thumb_dir, f) for f in sorted(names, key=natural_sort_key)]


def delete_previous_thumbnails(thumb_dir, stem, logger=None):
    """Remove thumbnails left by an earlier run on the same video. Returns the number removed."""
    removed = 0
    for path in list_thumbnails(thumb_dir, stem):
        os.unlink(path)
        removed += 1
    if logger and removed:
        logger.info(f"Deleted {removed} previous thumbnail(s) for '{stem}'")
    return removed


def build_thumbnail_command(ffmpeg, video_file, thumb_dir, stem, start_offset, thumb_width, frame_stride):
    """ffmpeg arguments that write every frame_stride-th frame as <stem>-%04d.jpg, scaled to thumb_width.

    A literal % in the path is doubled so the image2 muxer does not read it as a sequence directive.
    """
    output_pattern = os.path.join(thumb_dir, stem).replace("%", "%%") + "-%04d.jpg"
    video_filter = f"scale={thumb_width}:-1,select=not(mod(n\\,{frame_stride}))"
    return [
        ffmpeg,
        "-ss", f"{start_offset + SEEK_EPSILON:.4f}",
        "-i", video_file,
        "-y",
        "-an",
        "-sn",
        "-vsync", "0",
        "-q:v", str(JPEG_QSCALE),
        "-threads", "1",
        "-vf", video_filter,
        output_pattern,
    ]


def build_poster_command(ffmpeg, video_file, poster_path, seconds):
    return [ffmpeg, "-ss", str(int(seconds)), "-i", video_file, "-y", "-vframes", "1", poster_path]


def extract_thumbnails(video_file, thumb_dir, metadata, plan, config, logger):
    """
    Write one JPEG per sampled frame into thumb_dir and return their paths.

    Parameters:
    - video_file: Path to the input video.
    - thumb_dir: Existing directory the frames are written to.
    - metadata: VideoMetadata from the probe; its start offset is where sampling begins.
    - plan: SamplingPlan giving the frame stride and thumbnail width.
    - config: ThumbnailConfig (ffmpeg command, timeout, delete_previous flag).
    - logger: Logger for progress messages.

    Returns:
    - Paths of the extracted frames, naturally sorted by sequence number.

    Raises NoFramesProduced when nothing matching "<stem>-NNNN.jpg" was written.
    """
    stem = thumbnail_stem(video_file)
    if config.delete_previous:
        delete_previous_thumbnails(thumb_dir, stem, logger)
    else:
        stale = list_thumbnails(thumb_dir, stem)
        if stale:
            logger.warning(
                f"{len(stale)} thumbnail(s) from a previous run on '{stem}' are in {thumb_dir} "
                "and will be included; pass -d to delete them first"
            )

    cmd = build_thumbnail_command(
        config.ffmpeg,
        video_file,
        thumb_dir,
        stem,
        metadata.start_offset_seconds,
        plan.thumb_width,
        plan.frame_stride,
    )
    logger.info(f"Extracting one frame in every {plan.frame_stride} at {plan.thumb_width}px wide")
    result = run_ffmpeg(cmd, config.extract_timeout, logger)
    if result.returncode != 0:
        logger.warning(f"ffmpeg exited with status {result.returncode}:\n{output_tail(result.stdout)}")

    thumbnails = list_thumbnails(thumb_dir, stem)
    if not thumbnails:
        message = f"Could not find any thumbnails matching '{os.path.join(thumb_dir, stem)}-NNNN.jpg'"
        tail = output_tail(result.stdout)
        raise NoFramesProduced(f"{message}\n{tail}" if tail else message)

    logger.info(f"Extracted {len(thumbnails)} thumbnail(s) to {thumb_dir}")
    return thumbnails


def extract_poster(video_file, poster_path, seconds, config, logger):
    """Grab a single frame at `seconds` into poster_path. Returns the path written."""
    if os.path.exists(poster_path):
        os.unlink(poster_path)
    cmd = build_poster_command(config.ffmpeg, video_file, poster_path, seconds)
    result = run_ffmpeg(cmd, config.extract_timeout, logger)
    if not os.path.isfile(poster_path):
        raise NoFramesProduced(
            f"ffmpeg did not write a poster frame at {int(seconds)}s to '{poster_path}'\n{output_tail(result.stdout)}"
        )
    logger.info(f"Saved poster frame from {int(seconds)}s to {poster_path}")
    return poster_path
