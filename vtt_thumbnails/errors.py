"""Failures that end a thumbnail run, each mapped to a sysexits exit code."""

EX_USAGE = 64
EX_DATAERR = 65
EX_NOINPUT = 66
EX_UNAVAILABLE = 69
EX_CANTCREAT = 73
EX_TEMPFAIL = 75


class ThumbnailError(Exception):
    """Base class for every error that aborts a run."""

    exit_code = 1


class UsageError(ThumbnailError):
    exit_code = EX_USAGE


class InputNotReadable(ThumbnailError):
    exit_code = EX_NOINPUT


class OutputNotWritable(ThumbnailError):
    exit_code = EX_CANTCREAT


class DirectoryCreateFailed(ThumbnailError):
    exit_code = EX_CANTCREAT


class ProbeUnavailable(ThumbnailError):
    """ffmpeg could not be run, or did not print its version banner."""

    exit_code = EX_UNAVAILABLE


class ProbeParseError(ThumbnailError):
    """Duration or frame rate missing from the ffmpeg output."""

    exit_code = EX_UNAVAILABLE


class NoFramesProduced(ThumbnailError):
    exit_code = EX_NOINPUT


class InconsistentThumbnailSize(ThumbnailError):
    exit_code = EX_DATAERR


class UnreadableThumbnail(ThumbnailError):
    exit_code = EX_DATAERR


class ExternalProcessTimeout(ThumbnailError):
    exit_code = EX_TEMPFAIL
