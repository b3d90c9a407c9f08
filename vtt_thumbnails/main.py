#!/usr/bin/env python3

import argparse
import logging
import os
import sys
from dataclasses import dataclass

from vtt_thumbnails.config import (
    DEFAULT_EXTRACT_TIMEOUT,
    DEFAULT_INTERVAL,
    DEFAULT_PROBE_TIMEOUT,
    DEFAULT_SPRITE_COLUMNS,
    DEFAULT_THUMB_WIDTH,
    FFMPEG_ENV_VAR,
    ThumbnailConfig,
)
from vtt_thumbnails.errors import (
    DirectoryCreateFailed,
    InputNotReadable,
    NoFramesProduced,
    OutputNotWritable,
    ThumbnailError,
    UsageError,
)
from vtt_thumbnails.extract import extract_poster, extract_thumbnails
from vtt_thumbnails.probe import get_video_metadata
from vtt_thumbnails.schedule import pick_poster_time, plan_sampling
from vtt_thumbnails.sprite import build_sprite
from vtt_thumbnails.utils import setup_logger
from vtt_thumbnails.vtt import build_file_cues, build_sprite_cues, missing_cue_targets, render_vtt, write_vtt


@dataclass
class ThumbnailResult:
    vtt_path: str
    cue_count: int
    sprite_path: str | None = None
    poster_path: str | None = None


def check_paths(config: ThumbnailConfig) -> None:
    """Make sure the input can be read and the output directories exist and are writable."""
    if not os.path.isfile(config.input_file) or not os.access(config.input_file, os.R_OK):
        raise InputNotReadable(f"Cannot read the input file '{config.input_file}'")

    if not os.path.exists(config.output_dir):
        try:
            os.makedirs(config.output_dir)
        except OSError as e:
            raise DirectoryCreateFailed(f"Could not create output directory '{config.output_dir}': {e}") from e
    if not os.path.isdir(config.output_dir) or not os.access(config.output_dir, os.W_OK):
        raise OutputNotWritable(f"Cannot write to output directory '{config.output_dir}'")

    try:
        os.makedirs(config.thumb_dir, exist_ok=True)
    except OSError as e:
        raise DirectoryCreateFailed(f"Could not create thumbnail output directory '{config.thumb_dir}': {e}") from e


def generate_thumbnails(config: ThumbnailConfig, logger: logging.Logger, rng=None) -> ThumbnailResult:
    """
    Run the whole pipeline for one video.

    Probes the video, extracts a thumbnail every `config.interval` seconds,
    tiles them into a sprite unless `config.verbose` is set, and writes
    thumbnails.vtt last so a failed run never leaves a VTT behind.

    Concurrent runs against the same output directory are not supported.
    """
    check_paths(config)

    metadata = get_video_metadata(config.input_file, config.ffmpeg, config.probe_timeout, logger)
    plan = plan_sampling(metadata.duration_seconds, metadata.frame_rate, config.interval, config.thumb_width)

    poster_path = None
    if config.poster:
        seconds = pick_poster_time(metadata.duration_seconds, rng)
        poster_path = extract_poster(config.input_file, config.poster_path, seconds, config, logger)

    thumbnails = extract_thumbnails(config.input_file, config.thumb_dir, metadata, plan, config, logger)

    expected = plan.expected_count(metadata.duration_seconds)
    if abs(len(thumbnails) - expected) > 1:
        logger.warning(
            f"Expected about {expected} thumbnails for {metadata.duration_seconds}s "
            f"at {config.interval}s intervals, got {len(thumbnails)}"
        )

    sprite_path = None
    if config.verbose:
        cues = build_file_cues(thumbnails, config.interval)
    else:
        layout = build_sprite(thumbnails, config.sprite_path, config.sprite_columns, logger)
        cues = build_sprite_cues(len(thumbnails), config.interval, layout)
        sprite_path = config.sprite_path

    text = render_vtt(cues)
    missing = missing_cue_targets(text, config.output_dir)
    if missing:
        raise NoFramesProduced(
            f"{len(missing)} cue(s) point at images missing from '{config.output_dir}', first: {missing[0]}"
        )
    write_vtt(text, config.vtt_path)
    logger.info(f"Wrote {len(cues)} cue(s) to {config.vtt_path}")

    if sprite_path:
        removed = 0
        for path in thumbnails:
            try:
                os.unlink(path)
                removed += 1
            except OSError as e:
                logger.warning(f"Could not remove thumbnail '{path}' after building the sprite: {e}")
        logger.debug(f"Removed {removed} individual thumbnail(s) now in the sprite")

    return ThumbnailResult(
        vtt_path=config.vtt_path,
        cue_count=len(cues),
        sprite_path=sprite_path,
        poster_path=poster_path,
    )


class ThumbnailArgumentParser(argparse.ArgumentParser):
    def error(self, message):
        raise UsageError(message)


def positive_int(value):
    try:
        number = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"'{value}' is not a whole number")
    if number <= 0:
        raise argparse.ArgumentTypeError(f"'{value}' must be greater than zero")
    return number


def positive_float(value):
    try:
        number = float(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"'{value}' is not a number")
    if number <= 0:
        raise argparse.ArgumentTypeError(f"'{value}' must be greater than zero")
    return number


def build_parser():
    parser = ThumbnailArgumentParser(
        prog="thumbnails",
        description="Generate preview thumbnails and a WebVTT file for a video.",
        epilog=(
            "Requires ffmpeg. Do not point two runs at the same output directory at once; "
            "they share the thumbnails/ directory."
        ),
    )
    parser.add_argument("-i", "--input", required=True, help="The input video file.")
    parser.add_argument(
        "-o",
        "--output",
        help="Output directory for the thumbnails and VTT file (default: current directory).",
    )
    parser.add_argument(
        "-t",
        "--interval",
        type=positive_int,
        default=DEFAULT_INTERVAL,
        help=f"Seconds between each thumbnail (default: {DEFAULT_INTERVAL}).",
    )
    parser.add_argument(
        "-w",
        "--width",
        type=positive_int,
        default=DEFAULT_THUMB_WIDTH,
        help=f"Thumbnail width in pixels; height keeps the aspect ratio (default: {DEFAULT_THUMB_WIDTH}).",
    )
    parser.add_argument(
        "-v", "--verbose", action="store_true", help="Don't coalesce the thumbnails into one sprite image."
    )
    parser.add_argument(
        "-p", "--poster", action="store_true", help="Also save poster.jpg from a random frame of the video."
    )
    parser.add_argument(
        "-d", "--delete", action="store_true", help="Delete thumbnails from a previous run on this video first."
    )
    parser.add_argument(
        "--sprite-columns",
        type=positive_int,
        default=DEFAULT_SPRITE_COLUMNS,
        help=f"Thumbnails per row in the sprite (default: {DEFAULT_SPRITE_COLUMNS}).",
    )
    parser.add_argument("--ffmpeg", help=f"ffmpeg command or path (default: ${FFMPEG_ENV_VAR} or 'ffmpeg').")
    parser.add_argument(
        "--probe-timeout",
        type=positive_float,
        default=DEFAULT_PROBE_TIMEOUT,
        help=f"Seconds to wait for ffmpeg to read the video details (default: {DEFAULT_PROBE_TIMEOUT:g}).",
    )
    parser.add_argument(
        "--extract-timeout",
        type=positive_float,
        default=DEFAULT_EXTRACT_TIMEOUT,
        help=f"Seconds to wait for ffmpeg to extract frames (default: {DEFAULT_EXTRACT_TIMEOUT:g}).",
    )
    parser.add_argument("--log-file", help="Also write log messages to this file.")
    parser.add_argument("--debug", action="store_true", help="Log the ffmpeg commands being run.")
    return parser


def main(argv=None):
    parser = build_parser()
    try:
        args = parser.parse_args(argv)
    except UsageError as e:
        parser.print_usage(sys.stderr)
        print(f"{parser.prog}: error: {e}", file=sys.stderr)
        return e.exit_code

    config = ThumbnailConfig.from_args(args)
    try:
        logger = setup_logger(config.log_file, logging.DEBUG if config.debug else logging.INFO)
    except OSError as e:
        print(f"Error: cannot open log file '{config.log_file}': {e}", file=sys.stderr)
        return OutputNotWritable.exit_code

    try:
        result = generate_thumbnails(config, logger)
    except ThumbnailError as e:
        print(f"Error: {e}", file=sys.stderr)
        return e.exit_code

    print(
        f"Process completed. Check the output directory '{config.output_dir}' "
        f"for {os.path.basename(result.vtt_path)} ({result.cue_count} cues) and images"
    )
    return 0


if __name__ == "__main__":
    sys.exit(main())
