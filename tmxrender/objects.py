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
from collections import namedtuple
from dataclasses import dataclass, field
from enum import Enum
from itertools import chain
from string import hexdigits
from typing import ClassVar, Iterator, List, Optional, Tuple, Union

from .decoder import decode_gid
from .errors import InvalidColorFormat
from .reader import convert_to_bool
from .resolver import resolve_gid

__all__ = (
    "Animation",
    "Chunk",
    "Color",
    "Ellipse",
    "Frame",
    "Image",
    "Map",
    "MapObject",
    "ObjectGroup",
    "ObjectShape",
    "Orientation",
    "Point",
    "PointShape",
    "Polygon",
    "Polyline",
    "Properties",
    "Property",
    "Rectangle",
    "RenderOrder",
    "Text",
    "Tile",
    "TileLayer",
    "Tileset",
)

logger = logging.getLogger(__name__)

Point = namedtuple("Point", ["x", "y"])


class Orientation(Enum):
    ORTHOGONAL = "orthogonal"
    ISOMETRIC = "isometric"
    STAGGERED = "staggered"
    HEXAGONAL = "hexagonal"

    @classmethod
    def from_string(cls, value: str) -> Orientation:
        try:
            return cls(value)
        except ValueError:
            logger.info("unknown orientation %r, using orthogonal", value)
            return cls.ORTHOGONAL


class RenderOrder(Enum):
    RIGHT_DOWN = "right-down"
    RIGHT_UP = "right-up"
    LEFT_DOWN = "left-down"
    LEFT_UP = "left-up"

    @classmethod
    def from_string(cls, value: str) -> RenderOrder:
        try:
            return cls(value)
        except ValueError:
            logger.info("unknown render order %r, using right-down", value)
            return cls.RIGHT_DOWN


@dataclass(frozen=True)
class Color:
    r: int = 0
    g: int = 0
    b: int = 0
    a: int = 255

    @classmethod
    def from_string(cls, value: str) -> Color:
        """Parse a hex color, "RRGGBB" or "RRGGBBAA", with an optional "#".

        Empty strings give opaque white.

        Raises:
            InvalidColorFormat: if the value is not 6 or 8 hex digits.

        """
        if not value:
            return cls(255, 255, 255, 255)

        digits = value[1:] if value.startswith("#") else value
        if len(digits) not in (6, 8) or not all(c in hexdigits for c in digits):
            raise InvalidColorFormat(value)
        n = int(digits, 16)

        if len(digits) == 6:
            return cls((n >> 16) & 0xFF, (n >> 8) & 0xFF, n & 0xFF, 255)
        return cls((n >> 24) & 0xFF, (n >> 16) & 0xFF, (n >> 8) & 0xFF, n & 0xFF)

    def as_tuple(self) -> Tuple[int, int, int, int]:
        return self.r, self.g, self.b, self.a


@dataclass
class Property:
    name: str
    value: str
    type: str = "string"


# casting for properties type
prop_type = {
    "bool": convert_to_bool,
    "color": str,
    "file": str,
    "float": float,
    "int": int,
    "object": int,
    "string": str,
}


class Properties:
    """Ordered collection of Tiled properties.

    Lookups by name are first-match-wins, in document order.

    """

    def __init__(self, properties: Optional[List[Property]] = None) -> None:
        self.properties = list(properties or ())

    def __iter__(self) -> Iterator[Property]:
        return iter(self.properties)

    def __len__(self) -> int:
        return len(self.properties)

    def __contains__(self, name: str) -> bool:
        return self.find(name) is not None

    def __eq__(self, other) -> bool:
        if not isinstance(other, Properties):
            return NotImplemented
        return self.properties == other.properties

    def __repr__(self):
        return "<Properties: {0}>".format(self.as_dict())

    def append(self, prop: Property) -> None:
        self.properties.append(prop)

    def find(self, name: str) -> Optional[Property]:
        for prop in self.properties:
            if prop.name == name:
                return prop
        return None

    def get(self, name: str, default: str = "") -> str:
        prop = self.find(name)
        return default if prop is None else prop.value

    def get_int(self, name: str, default: int = 0) -> int:
        value = self.get(name)
        if not value:
            return default
        try:
            return int(value)
        except ValueError:
            return default

    def get_float(self, name: str, default: float = 0.0) -> float:
        value = self.get(name)
        if not value:
            return default
        try:
            return float(value)
        except ValueError:
            return default

    def get_bool(self, name: str, default: bool = False) -> bool:
        value = self.get(name)
        if not value:
            return default
        try:
            return convert_to_bool(value)
        except ValueError:
            return default

    def cast(self, name: str):
        """Return the value of a property converted by its declared type.

        Raises:
            KeyError: if there is no property with this name.
            ValueError: if the value does not match the declared type.

        """
        prop = self.find(name)
        if prop is None:
            raise KeyError(name)
        try:
            cls = prop_type[prop.type]
        except KeyError:
            logger.info(
                "Type {} Not a built-in type. Defaulting to string-cast.".format(prop.type)
            )
            cls = str
        return cls(prop.value)

    def as_dict(self) -> dict:
        d = dict()
        for prop in self.properties:
            d.setdefault(prop.name, prop.value)
        return d


@dataclass
class Frame:
    tileid: int  # local to the tileset
    duration: int  # milliseconds


@dataclass
class Animation:
    frames: List[Frame] = field(default_factory=list)

    @property
    def total_duration(self) -> int:
        return sum(frame.duration for frame in self.frames)


@dataclass
class Tile:
    id: int
    type: str = ""
    probability: float = 1.0
    properties: Properties = field(default_factory=Properties)
    animation: Optional[Animation] = None


@dataclass
class Image:
    source: str
    width: int = 0
    height: int = 0
    trans: Optional[str] = None


@dataclass
class Tileset:
    firstgid: int
    name: str = ""
    tilewidth: int = 0
    tileheight: int = 0
    tilecount: int = 0
    columns: int = 0
    spacing: int = 0
    margin: int = 0
    source: str = ""  # tsx file, for external tilesets
    image: Optional[Image] = None
    offset: Tuple[int, int] = (0, 0)
    properties: Properties = field(default_factory=Properties)
    tiles: List[Tile] = field(default_factory=list)

    @property
    def image_source(self) -> str:
        return self.image.source if self.image else ""

    def get_tile(self, tile_id: int) -> Optional[Tile]:
        for tile in self.tiles:
            if tile.id == tile_id:
                return tile
        return None


@dataclass
class Chunk:
    x: int  # may be negative
    y: int
    width: int
    height: int
    data: List[int] = field(default_factory=list)

    def iter_data(self) -> Iterator[Tuple[int, int, int]]:
        """Yields absolute X, Y, GID tuples for each cell of the chunk."""
        for index, gid in enumerate(self.data[: self.width * self.height]):
            cy, cx = divmod(index, self.width)
            yield self.x + cx, self.y + cy, gid


@dataclass
class TileLayer:
    name: str
    width: int
    height: int
    id: int = 0
    visible: bool = True
    opacity: float = 1.0
    offsetx: float = 0.0
    offsety: float = 0.0
    properties: Properties = field(default_factory=Properties)
    # only one of these is populated
    data: List[int] = field(default_factory=list)
    chunks: List[Chunk] = field(default_factory=list)

    @property
    def infinite(self) -> bool:
        return bool(self.chunks)

    def __iter__(self):
        return self.iter_data()

    def iter_data(self) -> Iterator[Tuple[int, int, int]]:
        """Yields X, Y, GID tuples for each tile in the layer.

        For chunked layers the coordinates are absolute and may be negative.

        """
        if self.chunks:
            for chunk in self.chunks:
                yield from chunk.iter_data()
        else:
            for index, gid in enumerate(self.data[: self.width * self.height]):
                y, x = divmod(index, self.width)
                yield x, y, gid

    def get_gid(self, x: int, y: int) -> int:
        """Return the raw gid at a tile coordinate, 0 when nothing is there."""
        if self.chunks:
            for chunk in self.chunks:
                cx = x - chunk.x
                cy = y - chunk.y
                if 0 <= cx < chunk.width and 0 <= cy < chunk.height:
                    index = cy * chunk.width + cx
                    if index < len(chunk.data):
                        return chunk.data[index]
            return 0

        if not (0 <= x < self.width and 0 <= y < self.height):
            raise ValueError(
                "Tile coordinates ({0},{1}) in layer {2} are invalid".format(x, y, self.name)
            )
        index = y * self.width + x
        return self.data[index] if index < len(self.data) else 0


class ObjectShape(Enum):
    RECTANGLE = "rectangle"
    ELLIPSE = "ellipse"
    POINT = "point"
    POLYGON = "polygon"
    POLYLINE = "polyline"
    TEXT = "text"


@dataclass(frozen=True)
class Rectangle:
    kind: ClassVar[ObjectShape] = ObjectShape.RECTANGLE
    width: float = 0.0
    height: float = 0.0


@dataclass(frozen=True)
class Ellipse:
    kind: ClassVar[ObjectShape] = ObjectShape.ELLIPSE
    width: float = 0.0
    height: float = 0.0


@dataclass(frozen=True)
class PointShape:
    kind: ClassVar[ObjectShape] = ObjectShape.POINT


@dataclass(frozen=True)
class Polygon:
    kind: ClassVar[ObjectShape] = ObjectShape.POLYGON
    points: Tuple[Point, ...] = ()


@dataclass(frozen=True)
class Polyline:
    kind: ClassVar[ObjectShape] = ObjectShape.POLYLINE
    points: Tuple[Point, ...] = ()


@dataclass(frozen=True)
class Text:
    kind: ClassVar[ObjectShape] = ObjectShape.TEXT
    text: str = ""
    width: float = 0.0
    height: float = 0.0
    fontfamily: str = "sans-serif"
    pixelsize: int = 16
    wrap: bool = False
    color: str = "#000000"
    bold: bool = False
    italic: bool = False
    underline: bool = False
    strikeout: bool = False
    kerning: bool = True
    halign: str = "left"
    valign: str = "top"


Shape = Union[Rectangle, Ellipse, PointShape, Polygon, Polyline, Text]


@dataclass
class MapObject:
    id: int
    name: str = ""
    type: str = ""
    x: float = 0.0
    y: float = 0.0
    rotation: float = 0.0  # degrees
    visible: bool = True
    shape: Shape = field(default_factory=Rectangle)
    gid: int = 0  # raw gid, with flip flags, for tile objects
    properties: Properties = field(default_factory=Properties)

    @property
    def width(self) -> float:
        return getattr(self.shape, "width", 0.0)

    @property
    def height(self) -> float:
        return getattr(self.shape, "height", 0.0)

    @property
    def points(self) -> Tuple[Point, ...]:
        return getattr(self.shape, "points", ())


@dataclass
class ObjectGroup:
    name: str
    id: int = 0
    visible: bool = True
    opacity: float = 1.0
    color: Optional[str] = None
    draworder: str = "topdown"
    offsetx: float = 0.0
    offsety: float = 0.0
    properties: Properties = field(default_factory=Properties)
    objects: List[MapObject] = field(default_factory=list)

    def __iter__(self):
        return iter(self.objects)


@dataclass
class Map:
    width: int  # in tiles
    height: int
    tilewidth: int  # in pixels
    tileheight: int
    version: str = "1.0"
    tiledversion: str = ""
    orientation: Orientation = Orientation.ORTHOGONAL
    renderorder: RenderOrder = RenderOrder.RIGHT_DOWN
    infinite: bool = False
    background_color: Optional[Color] = None
    nextlayerid: int = 1
    nextobjectid: int = 1
    filename: Optional[str] = None
    tilesets: List[Tileset] = field(default_factory=list)
    layers: List[TileLayer] = field(default_factory=list)
    objectgroups: List[ObjectGroup] = field(default_factory=list)
    properties: Properties = field(default_factory=Properties)

    def __repr__(self):
        return '<{0}: "{1}">'.format(self.__class__.__name__, self.filename)

    @property
    def objects(self) -> Iterator[MapObject]:
        """Returns iterator of all the objects associated with the map."""
        return chain(*self.objectgroups)

    def get_layer_by_name(self, name: str) -> TileLayer:
        """Return a tile layer by name.  Case-sensitive!

        Raises:
            ValueError: if layer by name does not exist

        """
        for layer in self.layers:
            if layer.name == name:
                return layer
        raise ValueError('Layer "{0}" not found.'.format(name))

    def get_objectgroup_by_name(self, name: str) -> ObjectGroup:
        for group in self.objectgroups:
            if group.name == name:
                return group
        raise ValueError('Object group "{0}" not found.'.format(name))

    def get_object_by_id(self, obj_id: int) -> MapObject:
        for obj in self.objects:
            if obj.id == obj_id:
                return obj
        raise ValueError("Object {0} not found.".format(obj_id))

    def get_object_by_name(self, name: str) -> MapObject:
        """Find an object by name, case-sensitive."""
        for obj in self.objects:
            if obj.name == name:
                return obj
        raise ValueError('Object "{0}" not found.'.format(name))

    def get_tile_gid(self, x: int, y: int, layer: int) -> int:
        """Return the raw gid for this location.

        Args:
            x (int): The x coordinate.
            y (int): The y coordinate.
            layer (int): The layer's number.

        Raises:
            ValueError: if the layer does not exist, or the coordinates are
                out of bounds of a finite layer.

        """
        try:
            tile_layer = self.layers[layer]
        except IndexError:
            raise ValueError("Layer not found: {0}".format(layer))
        return tile_layer.get_gid(x, y)

    def get_tileset_from_gid(self, gid: int) -> Tileset:
        """Return tileset that owns the gid.

        Raises:
            ValueError: if the tileset for gid is not found

        """
        gid, _ = decode_gid(gid)
        resolved = resolve_gid(gid, self.tilesets)
        if resolved is None:
            raise ValueError("Tileset not found for gid {0}".format(gid))
        return self.tilesets[resolved[0]]
