"""Run configuration, built once from the command line and passed to every step."""

import os
from dataclasses import dataclass

FFMPEG_ENV_VAR = "THUMBNAILS_FFMPEG"

DEFAULT_INTERVAL = 10
DEFAULT_THUMB_WIDTH = 120
DEFAULT_SPRITE_COLUMNS = 10
DEFAULT_PROBE_TIMEOUT = 60.0
DEFAULT_EXTRACT_TIMEOUT = 600.0

THUMB_SUBDIR = "thumbnails"
SPRITE_NAME = "thumbnails.jpg"
VTT_NAME = "thumbnails.vtt"
POSTER_NAME = "poster.jpg"


@dataclass(frozen=True)
class ThumbnailConfig:
    input_file: str
    output_dir: str
    interval: int = DEFAULT_INTERVAL
    thumb_width: int = DEFAULT_THUMB_WIDTH
    verbose: bool = False
    poster: bool = False
    delete_previous: bool = False
    sprite_columns: int = DEFAULT_SPRITE_COLUMNS
    ffmpeg: str = "ffmpeg"
    probe_timeout: float = DEFAULT_PROBE_TIMEOUT
    extract_timeout: float = DEFAULT_EXTRACT_TIMEOUT
    log_file: str | None = None
    debug: bool = False

    @property
    def thumb_dir(self) -> str:
        return os.path.join(self.output_dir, THUMB_SUBDIR)

    @property
    def sprite_path(self) -> str:
        return os.path.join(self.output_dir, SPRITE_NAME)

    @property
    def vtt_path(self) -> str:
        return os.path.join(self.output_dir, VTT_NAME)

    @property
    def poster_path(self) -> str:
        return os.path.join(self.output_dir, POSTER_NAME)

    @classmethod
    def from_args(cls, args) -> "ThumbnailConfig":
        """Build a config from an argparse namespace.

        The output directory defaults to the current directory. The ffmpeg
        command comes from --ffmpeg, then $THUMBNAILS_FFMPEG, then "ffmpeg".
        """
        output_dir = os.path.abspath(args.output or os.getcwd())
        ffmpeg = args.ffmpeg or os.environ.get(FFMPEG_ENV_VAR) or "ffmpeg"
        return cls(
            input_file=args.input,
            output_dir=output_dir,
            interval=args.interval,
            thumb_width=args.width,
            verbose=args.verbose,
            poster=args.poster,
            delete_previous=args.delete,
            sprite_columns=args.sprite_columns,
            ffmpeg=ffmpeg,
            probe_timeout=args.probe_timeout,
            extract_timeout=args.extract_timeout,
            log_file=args.log_file,
            debug=args.debug,
        )
