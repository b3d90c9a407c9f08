"""Tile extracted thumbnails into a single sprite sheet."""

import math
import os
from dataclasses import dataclass

import cv2
import numpy as np

from vtt_thumbnails.errors import InconsistentThumbnailSize, OutputNotWritable, UnreadableThumbnail

SPRITE_JPEG_QUALITY = 90


@dataclass(frozen=True)
class SpriteLayout:
    columns: int
    rows: int
    tile_width: int
    tile_height: int

    @property
    def width(self) -> int:
        return self.columns * self.tile_width

    @property
    def height(self) -> int:
        return self.rows * self.tile_height

    def tile_origin(self, index: int) -> tuple[int, int]:
        """Top-left pixel of tile `index`, filling rows left to right."""
        return (index % self.columns) * self.tile_width, (index // self.columns) * self.tile_height


def compute_sprite_layout(total: int, tile_width: int, tile_height: int, max_columns: int) -> SpriteLayout:
    if total <= 0:
        raise ValueError("a sprite needs at least one thumbnail")
    if max_columns <= 0:
        raise ValueError(f"sprite columns must be positive, got {max_columns}")
    columns = min(total, max_columns)
    return SpriteLayout(
        columns=columns,
        rows=math.ceil(total / columns),
        tile_width=tile_width,
        tile_height=tile_height,
    )


def load_thumbnails(paths: list[str]) -> list[np.ndarray]:
    """Read every thumbnail as a BGR array, checking they all share the first one's size."""
    frames = []
    expected = None
    for path in paths:
        frame = cv2.imread(path, cv2.IMREAD_COLOR)
        if frame is None:
            raise UnreadableThumbnail(f"Cannot decode thumbnail '{path}'")
        size = (frame.shape[1], frame.shape[0])
        if expected is None:
            expected = size
        elif size != expected:
            raise InconsistentThumbnailSize(
                f"Thumbnail '{path}' is {size[0]}x{size[1]}, expected {expected[0]}x{expected[1]}"
            )
        frames.append(frame)
    return frames


def compose_sprite(frames: list[np.ndarray], layout: SpriteLayout) -> np.ndarray:
    """Copy frames onto a black canvas in order. Cells past the last frame stay black."""
    canvas = np.zeros((layout.height, layout.width, 3), dtype=np.uint8)
    for i, frame in enumerate(frames):
        x, y = layout.tile_origin(i)
        canvas[y : y + layout.tile_height, x : x + layout.tile_width] = frame
    return canvas


def write_sprite(canvas: np.ndarray, sprite_path: str) -> None:
    """Encode the sprite as a quality-90 JPEG, replacing sprite_path only once fully written."""
    directory, name = os.path.split(sprite_path)
    partial_path = os.path.join(directory, f".partial-{name}")
    try:
        ok = cv2.imwrite(partial_path, canvas, [cv2.IMWRITE_JPEG_QUALITY, SPRITE_JPEG_QUALITY])
        if not ok:
            raise OutputNotWritable(f"Could not write sprite image '{sprite_path}'")
        os.replace(partial_path, sprite_path)
    except (OSError, cv2.error) as e:
        raise OutputNotWritable(f"Could not write sprite image '{sprite_path}': {e}") from e
    finally:
        if os.path.exists(partial_path):
            os.unlink(partial_path)


def build_sprite(paths: list[str], sprite_path: str, max_columns: int, logger=None) -> SpriteLayout:
    """
    Tile the thumbnails at `paths` into one JPEG at sprite_path.

    Returns the layout used, which gives each thumbnail's region in the sprite.
    The individual thumbnails are left in place.
    """
    frames = load_thumbnails(paths)
    if not frames:
        raise ValueError("no thumbnails to tile")
    tile_height, tile_width = frames[0].shape[:2]
    layout = compute_sprite_layout(len(frames), tile_width, tile_height, max_columns)
    write_sprite(compose_sprite(frames, layout), sprite_path)
    if logger:
        logger.info(
            f"Wrote {layout.columns}x{layout.rows} sprite ({layout.width}x{layout.height}px) to {sprite_path}"
        )
    return layout
