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

import logging
import os
from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple

from .animation import TileAnimationInfo, flatten_animation
from .builder import load_tmxmap
from .decoder import TileFlags, decode_gid, empty_flags
from .objects import Map, ObjectGroup, Point, Shape, TileLayer, Tileset
from .resolver import Rect, resolve_gid, tile_source_rect, tileset_columns

__all__ = (
    "LayerRenderData",
    "MapRenderData",
    "ObjectGroupRenderData",
    "ObjectRenderInfo",
    "TileRenderInfo",
    "TilesetRenderInfo",
    "compile_map",
    "load_render_data",
    "resolve_image_path",
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TilesetRenderInfo:
    name: str
    image_path: str
    image_width: int
    image_height: int
    firstgid: int
    tile_width: int
    tile_height: int
    columns: int
    tile_count: int
    animations: Tuple[TileAnimationInfo, ...] = ()


@dataclass(frozen=True)
class TileRenderInfo:
    tile_id: int  # local to the tileset
    src_x: int
    src_y: int
    src_w: int
    src_h: int
    dest_x: int  # may be negative on infinite maps
    dest_y: int
    dest_w: int
    dest_h: int
    tileset_index: int
    opacity: float
    animation_index: Optional[int] = None
    flags: TileFlags = empty_flags

    @property
    def is_animated(self) -> bool:
        return self.animation_index is not None

    @property
    def src_rect(self) -> Rect:
        return self.src_x, self.src_y, self.src_w, self.src_h

    @property
    def dest_rect(self) -> Rect:
        return self.dest_x, self.dest_y, self.dest_w, self.dest_h


@dataclass(frozen=True)
class LayerRenderData:
    name: str
    visible: bool
    opacity: float
    tiles: Tuple[TileRenderInfo, ...] = ()

    def bounds(self) -> Optional[Rect]:
        """Return the pixel (x, y, w, h) covered by the tiles, None if empty."""
        if not self.tiles:
            return None
        left = min(t.dest_x for t in self.tiles)
        top = min(t.dest_y for t in self.tiles)
        right = max(t.dest_x + t.dest_w for t in self.tiles)
        bottom = max(t.dest_y + t.dest_h for t in self.tiles)
        return left, top, right - left, bottom - top


@dataclass(frozen=True)
class ObjectRenderInfo:
    id: int
    name: str
    type: str
    x: float
    y: float
    rotation: float
    visible: bool
    shape: Shape
    gid: int = 0  # without flip flags
    flags: TileFlags = empty_flags
    # only set for tile objects that resolve to a tileset
    tileset_index: Optional[int] = None
    src_rect: Optional[Rect] = None

    @property
    def width(self) -> float:
        return getattr(self.shape, "width", 0.0)

    @property
    def height(self) -> float:
        return getattr(self.shape, "height", 0.0)

    @property
    def points(self) -> Tuple[Point, ...]:
        return getattr(self.shape, "points", ())


@dataclass(frozen=True)
class ObjectGroupRenderData:
    name: str
    visible: bool
    opacity: float
    objects: Tuple[ObjectRenderInfo, ...] = ()


@dataclass(frozen=True)
class MapRenderData:
    """Everything needed to draw a map, with every gid already resolved.

    Layers, tiles and objects keep the order of the source map, which is
    the order they must be drawn in.

    """

    map_width: int  # in tiles
    map_height: int
    tile_width: int  # in pixels
    tile_height: int
    pixel_width: int
    pixel_height: int
    background_color: Optional[Tuple[int, int, int, int]] = None
    tilesets: Tuple[TilesetRenderInfo, ...] = ()
    layers: Tuple[LayerRenderData, ...] = ()
    object_groups: Tuple[ObjectGroupRenderData, ...] = ()

    @classmethod
    def from_map(cls, tmxmap: Map, asset_base_path: Optional[str] = None) -> MapRenderData:
        return compile_map(tmxmap, asset_base_path)

    def get_layer_by_name(self, name: str) -> LayerRenderData:
        for layer in self.layers:
            if layer.name == name:
                return layer
        raise ValueError('Layer "{0}" not found.'.format(name))


def resolve_image_path(source: str, asset_base_path: Optional[str] = None) -> str:
    """Join a tileset image path to the asset folder.

    Empty values and absolute paths are returned unchanged.

    """
    if not asset_base_path or not source:
        return source
    return os.path.join(asset_base_path, source)


class _GidLookup:
    """Memoised gid resolution over the tilesets of one map."""

    def __init__(self, tilesets: List[Tileset]) -> None:
        self.tilesets = tilesets
        self.cache: Dict[int, Optional[Tuple[int, int]]] = dict()

    def __call__(self, gid: int) -> Optional[Tuple[int, int]]:
        try:
            return self.cache[gid]
        except KeyError:
            resolved = resolve_gid(gid, self.tilesets)
            if resolved is None:
                logger.debug("gid %d does not belong to any tileset, skipped", gid)
            self.cache[gid] = resolved
            return resolved


def compile_tileset(
    tileset: Tileset,
    asset_base_path: Optional[str] = None,
) -> TilesetRenderInfo:
    image = tileset.image
    animations = tuple(
        flatten_animation(tile, tileset)
        for tile in tileset.tiles
        if tile.animation is not None and tile.animation.frames
    )
    return TilesetRenderInfo(
        name=tileset.name,
        image_path=resolve_image_path(tileset.image_source, asset_base_path),
        image_width=image.width if image else 0,
        image_height=image.height if image else 0,
        firstgid=tileset.firstgid,
        tile_width=tileset.tilewidth,
        tile_height=tileset.tileheight,
        columns=tileset_columns(tileset),
        tile_count=tileset.tilecount,
        animations=animations,
    )


def animation_lookup(info: TilesetRenderInfo) -> Dict[int, int]:
    """Map local tile ids to the index of their first animation."""
    lookup = dict()
    for index, animation in enumerate(info.animations):
        lookup.setdefault(animation.base_tile_id, index)
    return lookup


def compile_layer(
    layer: TileLayer,
    tmxmap: Map,
    lookup: _GidLookup,
    animations: List[Dict[int, int]],
) -> LayerRenderData:
    """Resolve every non-empty cell of a finite or chunked layer.

    Cells are emitted row-major, chunk by chunk for infinite layers.

    """
    tw = tmxmap.tilewidth
    th = tmxmap.tileheight
    tiles = list()
    for x, y, raw_gid in layer.iter_data():
        if not raw_gid:
            continue
        gid, flags = decode_gid(raw_gid)
        resolved = lookup(gid) if gid else None
        if resolved is None:
            continue

        index, tile_id = resolved
        src_x, src_y, src_w, src_h = tile_source_rect(tile_id, tmxmap.tilesets[index])
        tiles.append(
            TileRenderInfo(
                tile_id=tile_id,
                src_x=src_x,
                src_y=src_y,
                src_w=src_w,
                src_h=src_h,
                dest_x=x * tw,
                dest_y=y * th,
                dest_w=tw,
                dest_h=th,
                tileset_index=index,
                opacity=layer.opacity,
                animation_index=animations[index].get(tile_id),
                flags=flags,
            )
        )

    return LayerRenderData(layer.name, layer.visible, layer.opacity, tuple(tiles))


def compile_objectgroup(
    group: ObjectGroup,
    tmxmap: Map,
    lookup: _GidLookup,
) -> ObjectGroupRenderData:
    objects = list()
    for obj in group.objects:
        gid, flags = decode_gid(obj.gid)
        tileset_index = src_rect = None
        resolved = lookup(gid) if gid else None
        if resolved is not None:
            tileset_index, tile_id = resolved
            src_rect = tile_source_rect(tile_id, tmxmap.tilesets[tileset_index])

        objects.append(
            ObjectRenderInfo(
                id=obj.id,
                name=obj.name,
                type=obj.type,
                x=obj.x,
                y=obj.y,
                rotation=obj.rotation,
                visible=obj.visible,
                shape=obj.shape,
                gid=gid,
                flags=flags,
                tileset_index=tileset_index,
                src_rect=src_rect,
            )
        )

    return ObjectGroupRenderData(group.name, group.visible, group.opacity, tuple(objects))


def compile_map(tmxmap: Map, asset_base_path: Optional[str] = None) -> MapRenderData:
    """Compile a Map into render data.

    The map is not modified; compiling the same map twice gives equal results.

    Args:
        tmxmap (Map): The parsed map.
        asset_base_path (Optional[str]): Folder tileset images are relative to.

    Returns:
        MapRenderData: The compiled render data.

    """
    tilesets = tuple(compile_tileset(ts, asset_base_path) for ts in tmxmap.tilesets)
    animations = [animation_lookup(info) for info in tilesets]
    lookup = _GidLookup(tmxmap.tilesets)

    layers = tuple(
        compile_layer(layer, tmxmap, lookup, animations) for layer in tmxmap.layers
    )
    object_groups = tuple(
        compile_objectgroup(group, tmxmap, lookup) for group in tmxmap.objectgroups
    )

    background = tmxmap.background_color
    render_data = MapRenderData(
        map_width=tmxmap.width,
        map_height=tmxmap.height,
        tile_width=tmxmap.tilewidth,
        tile_height=tmxmap.tileheight,
        pixel_width=tmxmap.width * tmxmap.tilewidth,
        pixel_height=tmxmap.height * tmxmap.tileheight,
        background_color=background.as_tuple() if background else None,
        tilesets=tilesets,
        layers=layers,
        object_groups=object_groups,
    )
    logger.debug(
        "compiled %r: %d tiles in %d layers",
        tmxmap,
        sum(len(layer.tiles) for layer in layers),
        len(layers),
    )
    return render_data


def load_render_data(filename: str, asset_base_path: Optional[str] = None) -> MapRenderData:
    """Load a .tmx file and compile it in one step.

    When `asset_base_path` is not given, tileset images are resolved
    against the map's folder.

    """
    tmxmap = load_tmxmap(filename)
    if asset_base_path is None:
        asset_base_path = os.path.dirname(filename)
    return compile_map(tmxmap, asset_base_path)
