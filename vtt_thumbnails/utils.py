#!/usr/bin/env python3

import logging
import subprocess
import sys

from vtt_thumbnails.errors import ExternalProcessTimeout, ProbeUnavailable

LOGGER_NAME = "vtt_thumbnails"


def setup_logger(log_file=None, level=logging.INFO):
    """
    Configure the package logger.

    Messages go to stderr as "[HH:MM:SS] message". When log_file is given the
    same messages are also appended there, with the level name included.
    Calling this again replaces the previous handlers.
    """
    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(level)
    logger.propagate = False

    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    console = logging.StreamHandler(sys.stderr)
    console.setFormatter(logging.Formatter("[%(asctime)s] %(message)s", datefmt="%H:%M:%S"))
    logger.addHandler(console)

    if log_file:
        file_handler = logging.FileHandler(log_file)
        file_handler.setFormatter(logging.Formatter("%(asctime)s %(levelname)s %(message)s"))
        logger.addHandler(file_handler)

    return logger


def run_ffmpeg(cmd: list[str], timeout: float, logger: logging.Logger | None = None) -> subprocess.CompletedProcess:
    """Run an ffmpeg command, capturing stdout and stderr together as text.

    The exit status is not checked; callers decide from the output (or the
    files written) whether the run worked.
    """
    if logger:
        logger.debug(f"Running: {' '.join(cmd)}")
    try:
        return subprocess.run(
            cmd,
            stdout=subprocess.PIPE,
            stderr=subprocess.STDOUT,
            text=True,
            errors="replace",
            timeout=timeout,
        )
    except (FileNotFoundError, PermissionError) as e:
        raise ProbeUnavailable(f"Cannot run ffmpeg '{cmd[0]}': {e}") from e
    except subprocess.TimeoutExpired as e:
        raise ExternalProcessTimeout(f"'{cmd[0]}' did not finish within {timeout:g}s") from e


def output_tail(text: str | None, lines: int = 5) -> str:
    """Return the last few non-blank lines of process output."""
    if not text:
        return ""
    kept = [line for line in text.splitlines() if line.strip()]
    return "\n".join(kept[-lines:])
