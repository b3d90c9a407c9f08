import math
import random
from dataclasses import dataclass


@dataclass(frozen=True)
class SamplingPlan:
    interval_seconds: int
    frame_stride: int
    thumb_width: int

    def expected_count(self, duration) -> int:
        return expected_thumbnail_count(duration, self.interval_seconds)


def plan_sampling(duration, frame_rate, interval_seconds, thumb_width) -> SamplingPlan:
    """
    Work out how many decoded frames to skip between thumbnails.

    Parameters:
    - duration: Video length in seconds.
    - frame_rate: Nominal frame rate (tbr) of the video stream.
    - interval_seconds: Seconds of playback covered by each thumbnail.
    - thumb_width: Thumbnail width in pixels.

    Returns:
    - A SamplingPlan whose frame_stride is round(interval * frame_rate), never below 1.
    """
    if interval_seconds <= 0:
        raise ValueError(f"interval must be positive, got {interval_seconds}")
    if frame_rate <= 0:
        raise ValueError(f"frame rate must be positive, got {frame_rate}")
    if thumb_width <= 0:
        raise ValueError(f"thumbnail width must be positive, got {thumb_width}")
    if duration < 0:
        raise ValueError(f"duration cannot be negative, got {duration}")

    stride = max(1, round(interval_seconds * frame_rate))
    return SamplingPlan(interval_seconds=interval_seconds, frame_stride=stride, thumb_width=thumb_width)


def expected_thumbnail_count(duration, interval_seconds) -> int:
    """Thumbnails a video of this length should yield. The extracted set is authoritative."""
    return math.floor(duration / interval_seconds)


def pick_poster_time(duration, rng=None) -> int:
    """Pick a whole second in [1, duration - 1] for the poster frame; 0 for videos under 2s."""
    rng = rng or random
    if duration < 2:
        return 0
    return rng.randint(1, int(duration) - 1)
