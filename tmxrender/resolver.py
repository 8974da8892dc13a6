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

from typing import TYPE_CHECKING, Optional, Sequence, Tuple

if TYPE_CHECKING:
    from .objects import Tileset

__all__ = ("resolve_gid", "tileset_columns", "tile_source_rect")

Rect = Tuple[int, int, int, int]


def resolve_gid(gid: int, tilesets: Sequence[Tileset]) -> Optional[Tuple[int, int]]:
    """Return the tileset index and local tile id that own a gid.

    Tilesets must be ordered by ascending firstgid.  The last tileset owns
    every gid from its firstgid upwards.  Gid 0 means "no tile" and should
    be filtered out before calling this.

    Args:
        gid (int): GID with the flip flags already removed.
        tilesets (Sequence[Tileset]): The map's tilesets, in order.

    Returns:
        Optional[Tuple[int, int]]: (tileset index, local id), or None when
        no tileset owns the gid.

    """
    last = len(tilesets) - 1
    for index, tileset in enumerate(tilesets):
        if gid >= tileset.firstgid:
            if index == last or gid < tilesets[index + 1].firstgid:
                return index, gid - tileset.firstgid
    return None


def tileset_columns(tileset: Tileset) -> int:
    """Return tiles per row, deriving it from the image when not declared."""
    if tileset.columns > 0:
        return tileset.columns
    if tileset.image is None or tileset.tilewidth <= 0:
        return 0
    usable = tileset.image.width - 2 * tileset.margin + tileset.spacing
    return max(0, usable // (tileset.tilewidth + tileset.spacing))


def tile_source_rect(local_id: int, tileset: Tileset) -> Rect:
    """Return the (x, y, w, h) of a tile inside the tileset image."""
    columns = tileset_columns(tileset)
    tw = tileset.tilewidth
    th = tileset.tileheight
    if columns <= 0:
        return 0, 0, tw, th
    row, column = divmod(local_id, columns)
    x = tileset.margin + column * (tw + tileset.spacing)
    y = tileset.margin + row * (th + tileset.spacing)
    return x, y, tw, th
