"""
Copyright (C) 2012-2023, Leif Theden <leif.theden@gmail.com>

This file is part of tmxrender.

tmxrender is free software: you can redistribute it and/or modify
it under the terms of the GNU Lesser General Public License as
published by the Free Software Foundation, either version 3 of the
License, or (at your option) any later version.

tmxrender is distributed in the hope that it will be useful,
but WITHOUT ANY WARRANTY; without even the implied warranty of
MERCHANTABILITY or FITNESS FOR A PARTICULAR PURPOSE.  See the
GNU Lesser General Public License for more details.

You should have received a copy of the GNU Lesser General Public
License along with tmxrender.  If not, see <https://www.gnu.org/licenses/>.

"""
from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Dict, Iterable, Optional, Tuple

from .resolver import tile_source_rect

if TYPE_CHECKING:
    from .objects import Tile, Tileset
    from .renderdata import MapRenderData

__all__ = (
    "AnimationClock",
    "AnimationFrameInfo",
    "TileAnimationInfo",
    "build_frame_table",
    "flatten_animation",
)


@dataclass(frozen=True)
class AnimationFrameInfo:
    tile_id: int  # local to the tileset
    src_x: int
    src_y: int
    duration: int  # milliseconds


@dataclass(frozen=True)
class TileAnimationInfo:
    """Animation of one tile, flattened for constant time lookups.

    `time_to_frame_index` has one entry per millisecond of the cycle, each
    holding the index of the frame shown at that offset.

    """

    base_tile_id: int
    frames: Tuple[AnimationFrameInfo, ...]
    total_duration: int
    time_to_frame_index: Tuple[int, ...]

    def frame_index_at(self, time_in_cycle: int) -> int:
        """Return the frame index for a time inside the cycle, 0 if out of range."""
        if not self.time_to_frame_index or not 0 <= time_in_cycle < len(
            self.time_to_frame_index
        ):
            return 0
        return self.time_to_frame_index[time_in_cycle]

    def frame_at(self, elapsed: int) -> int:
        """Return the frame index after `elapsed` milliseconds, looping."""
        if self.total_duration <= 0:
            return 0
        return self.time_to_frame_index[elapsed % self.total_duration]

    def frame_info_at(self, elapsed: int) -> AnimationFrameInfo:
        return self.frames[self.frame_at(elapsed)]


def build_frame_table(durations: Iterable[int]) -> Tuple[int, ...]:
    """Return the time to frame index table for a list of frame durations.

    Frame 0 covers [0, d0), frame 1 covers [d0, d0 + d1) and so on.  Frames
    with no duration get no entries.

    """
    table = list()
    for index, duration in enumerate(durations):
        table.extend([index] * duration)
    return tuple(table)


def flatten_animation(tile: Tile, tileset: Tileset) -> TileAnimationInfo:
    """Precompute frame rectangles and the lookup table for an animated tile."""
    frames = list()
    for frame in tile.animation.frames:
        src_x, src_y, _, _ = tile_source_rect(frame.tileid, tileset)
        frames.append(AnimationFrameInfo(frame.tileid, src_x, src_y, frame.duration))

    table = build_frame_table(frame.duration for frame in frames)
    return TileAnimationInfo(
        base_tile_id=tile.id,
        frames=tuple(frames),
        total_duration=len(table),
        time_to_frame_index=table,
    )


class AnimationClock:
    """Tracks elapsed time of animations for a drawing loop.

    One clock-wide time is advanced with the frame delta, so every
    animation stays in step no matter when it is first queried.  Resetting
    a single (tileset index, animation index) key restarts that animation
    from the current time.

    """

    def __init__(self) -> None:
        self.time = 0
        self.started: Dict[Tuple[int, int], int] = dict()

    def update(self, delta_ms: int) -> None:
        self.time += delta_ms

    def reset(self, key: Optional[Tuple[int, int]] = None) -> None:
        if key is None:
            self.time = 0
            self.started.clear()
        else:
            self.started[key] = self.time

    def elapsed(self, key: Tuple[int, int]) -> int:
        """Return milliseconds since the animation started."""
        return self.time - self.started.get(key, 0)

    def frame_index(
        self,
        render_data: MapRenderData,
        tileset_index: int,
        animation_index: int,
    ) -> int:
        animation = render_data.tilesets[tileset_index].animations[animation_index]
        return animation.frame_at(self.elapsed((tileset_index, animation_index)))

    def source_rect(
        self,
        render_data: MapRenderData,
        tileset_index: int,
        animation_index: int,
    ) -> Tuple[int, int, int, int]:
        """Return the rectangle of the frame currently shown."""
        tileset = render_data.tilesets[tileset_index]
        index = self.frame_index(render_data, tileset_index, animation_index)
        frame = tileset.animations[animation_index].frames[index]
        return frame.src_x, frame.src_y, tileset.tile_width, tileset.tile_height
