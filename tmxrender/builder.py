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
from typing import List, Optional, Sequence, Union
from xml.etree import ElementTree

from .decoder import unpack_gids
from .errors import DecodeError, ExternalTilesetError, TmxError
from .objects import (
    Animation,
    Chunk,
    Color,
    Ellipse,
    Frame,
    Image,
    Map,
    MapObject,
    ObjectGroup,
    Orientation,
    Point,
    PointShape,
    Polygon,
    Polyline,
    Properties,
    Property,
    Rectangle,
    RenderOrder,
    Shape,
    Text,
    Tile,
    TileLayer,
    Tileset,
)
from .reader import convert_to_bool, getdefault, parse_document, read_document, read_file

__all__ = (
    "load_tileset",
    "load_tmxmap",
    "parse_tmxmap",
)

logger = logging.getLogger(__name__)


def uint(value: str) -> int:
    """Cast an attribute to an unsigned int."""
    n = int(value)
    if n < 0:
        raise ValueError("{0} is negative".format(n))
    return n


def parse_points(text: str) -> List[Point]:
    """Return list of points from a Tiled "x,y x,y ..." string"""
    try:
        return [Point(*map(float, i.split(","))) for i in text.split()]
    except (TypeError, ValueError) as e:
        raise DecodeError("points", "{0!r}: {1}".format(text, e)) from e


# element construction


def new_properties(node: ElementTree.Element) -> Properties:
    """Collect the <property> children of the element's <properties> in document order."""
    properties = Properties()
    for child in node.findall("properties"):
        for subnode in child.findall("property"):
            get = getdefault(subnode.attrib)
            value = get("value")
            if value is None:
                # multi-line strings are stored as element text
                value = subnode.text or ""
            properties.append(
                Property(get("name", default=""), value, get("type", default="string"))
            )
    return properties


def new_animation(node: ElementTree.Element) -> Animation:
    frames = list()
    for frame in node.findall("frame"):
        get = getdefault(frame.attrib)
        frames.append(Frame(get("tileid", uint, 0), get("duration", uint, 0)))
    return Animation(frames)


def new_tile(node: ElementTree.Element) -> Tile:
    get = getdefault(node.attrib)
    anim = node.find("animation")
    if node.find("image") is not None:
        logger.debug("tile %s has its own image, which is not used", get("id"))
    return Tile(
        id=get("id", uint, 0),
        type=get("type") or get("class", default=""),
        probability=get("probability", float, 1.0),
        properties=new_properties(node),
        animation=None if anim is None else new_animation(anim),
    )


def new_image(node: ElementTree.Element) -> Image:
    get = getdefault(node.attrib)
    return Image(
        source=get("source", default=""),
        width=get("width", uint, 0),
        height=get("height", uint, 0),
        trans=get("trans"),
    )


def new_inline_tileset(node: ElementTree.Element, firstgid: int) -> Tileset:
    """Build a tileset from a <tileset> element that holds its own definition."""
    get = getdefault(node.attrib)
    tileset = Tileset(
        firstgid=firstgid,
        name=get("name", default=""),
        tilewidth=get("tilewidth", uint, 0),
        tileheight=get("tileheight", uint, 0),
        tilecount=get("tilecount", uint, 0),
        columns=get("columns", uint, 0),
        spacing=get("spacing", uint, 0),
        margin=get("margin", uint, 0),
        properties=new_properties(node),
    )

    image_node = node.find("image")
    if image_node is not None:
        tileset.image = new_image(image_node)

    offset_node = node.find("tileoffset")
    if offset_node is not None:
        offset = getdefault(offset_node.attrib)
        tileset.offset = (offset("x", int, 0), offset("y", int, 0))

    tileset.tiles = [new_tile(child) for child in node.findall("tile")]
    return tileset


def new_tileset(node: ElementTree.Element, base_path: Optional[str]) -> Tileset:
    """Build a tileset entry of a map, loading it from disk if it is external.

    Raises:
        ExternalTilesetError: if a referenced tileset file cannot be loaded.

    """
    get = getdefault(node.attrib)
    firstgid = get("firstgid", uint, 0)
    source = get("source")
    if not source:
        return new_inline_tileset(node, firstgid)

    # tiled stores paths relative to the map file
    path = os.path.join(base_path or "", source)
    try:
        tileset = load_tileset(path, firstgid)
    except TmxError as e:
        msg = "Error loading external tileset: {0}"
        logger.error(msg.format(path))
        raise ExternalTilesetError(source, path, e) from e

    tileset.source = source
    # images are listed as relative to the .tsx file, not the .tmx file
    if tileset.image is not None and tileset.image.source:
        tileset.image.source = os.path.join(
            os.path.dirname(source), tileset.image.source
        )
    return tileset


def new_chunk(
    node: ElementTree.Element,
    data_node: Optional[ElementTree.Element],
) -> Chunk:
    get = getdefault(node.attrib)
    inherited = getdefault({} if data_node is None else data_node.attrib)
    width = get("width", uint, 0)
    height = get("height", uint, 0)
    gids = unpack_gids(
        text=node.text,
        encoding=get("encoding", default=inherited("encoding")),
        compression=get("compression", default=inherited("compression")),
        width=width,
        height=height,
    )
    return Chunk(get("x", int, 0), get("y", int, 0), width, height, gids)


def new_tilelayer(node: ElementTree.Element) -> TileLayer:
    """Build a tile layer, decoding either its dense data or its chunks."""
    get = getdefault(node.attrib)
    layer = TileLayer(
        name=get("name", default=""),
        width=get("width", uint, 0),
        height=get("height", uint, 0),
        id=get("id", uint, 0),
        visible=get("visible", convert_to_bool, True),
        opacity=get("opacity", float, 1.0),
        offsetx=get("offsetx", float, 0.0),
        offsety=get("offsety", float, 0.0),
        properties=new_properties(node),
    )

    data_node = node.find("data")
    chunk_nodes = node.findall("chunk")
    if data_node is not None:
        chunk_nodes = data_node.findall("chunk") + chunk_nodes

    # chunks stay separate, infinite layers have no dense bounds
    if chunk_nodes:
        layer.chunks = [new_chunk(child, data_node) for child in chunk_nodes]
    elif data_node is not None:
        data = getdefault(data_node.attrib)
        layer.data = unpack_gids(
            text=data_node.text,
            encoding=data("encoding"),
            compression=data("compression"),
            width=layer.width,
            height=layer.height,
        )
    return layer


def new_text(node: ElementTree.Element, width: float, height: float) -> Text:
    get = getdefault(node.attrib)
    return Text(
        text=node.text or "",
        width=width,
        height=height,
        fontfamily=get("fontfamily", default="sans-serif"),
        pixelsize=get("pixelsize", int, 16),
        wrap=get("wrap", convert_to_bool, False),
        color=get("color", default="#000000"),
        bold=get("bold", convert_to_bool, False),
        italic=get("italic", convert_to_bool, False),
        underline=get("underline", convert_to_bool, False),
        strikeout=get("strikeout", convert_to_bool, False),
        kerning=get("kerning", convert_to_bool, True),
        halign=get("halign", default="left"),
        valign=get("valign", default="top"),
    )


def new_shape(node: ElementTree.Element) -> Shape:
    get = getdefault(node.attrib)
    width = get("width", float, 0.0)
    height = get("height", float, 0.0)

    if node.find("ellipse") is not None:
        return Ellipse(width, height)
    if node.find("point") is not None:
        return PointShape()

    polygon = node.find("polygon")
    if polygon is not None:
        return Polygon(tuple(parse_points(polygon.get("points", ""))))

    polyline = node.find("polyline")
    if polyline is not None:
        return Polyline(tuple(parse_points(polyline.get("points", ""))))

    text = node.find("text")
    if text is not None:
        return new_text(text, width, height)

    return Rectangle(width, height)


def new_object(node: ElementTree.Element) -> MapObject:
    get = getdefault(node.attrib)
    return MapObject(
        id=get("id", uint, 0),
        name=get("name", default=""),
        type=get("type") or get("class", default=""),
        x=get("x", float, 0.0),
        y=get("y", float, 0.0),
        rotation=get("rotation", float, 0.0),
        visible=get("visible", convert_to_bool, True),
        shape=new_shape(node),
        gid=get("gid", uint, 0),
        properties=new_properties(node),
    )


def new_objectgroup(node: ElementTree.Element) -> ObjectGroup:
    get = getdefault(node.attrib)
    return ObjectGroup(
        name=get("name", default=""),
        id=get("id", uint, 0),
        visible=get("visible", convert_to_bool, True),
        opacity=get("opacity", float, 1.0),
        color=get("color"),
        draworder=get("draworder", default="topdown"),
        offsetx=get("offsetx", float, 0.0),
        offsety=get("offsety", float, 0.0),
        properties=new_properties(node),
        objects=[new_object(child) for child in node.findall("object")],
    )


def add_layers(
    tmxmap: Map,
    node: ElementTree.Element,
    opacity: float = 1.0,
    visible: bool = True,
) -> None:
    """Append the layers and object groups under `node`, in document order.

    Group layers are flattened; their opacity and visibility are folded
    into every layer they contain.

    """
    for child in node:
        if child.tag == "layer":
            layer = new_tilelayer(child)
            layer.opacity *= opacity
            layer.visible = layer.visible and visible
            tmxmap.layers.append(layer)

        elif child.tag == "objectgroup":
            group = new_objectgroup(child)
            group.opacity *= opacity
            group.visible = group.visible and visible
            tmxmap.objectgroups.append(group)

        elif child.tag == "group":
            get = getdefault(child.attrib)
            add_layers(
                tmxmap,
                child,
                opacity * get("opacity", float, 1.0),
                visible and get("visible", convert_to_bool, True),
            )

        elif child.tag == "imagelayer":
            logger.debug('skipping image layer "%s"', child.get("name", ""))

        # properties and tilesets are read by their owners
        elif child.tag not in ("properties", "tileset"):
            logger.debug("skipping unknown element <%s>", child.tag)


def check_tileset_order(tilesets: Sequence[Tileset]) -> None:
    """Warn when tilesets are not ascending and disjoint; they are kept as-is."""
    for a, b in zip(tilesets, tilesets[1:]):
        if b.firstgid < a.firstgid + a.tilecount:
            logger.warning(
                'tileset "%s" (firstgid %d) overlaps or precedes "%s" (firstgid %d)',
                b.name,
                b.firstgid,
                a.name,
                a.firstgid,
            )


def new_map(
    node: ElementTree.Element,
    base_path: Optional[str] = None,
    filename: Optional[str] = None,
) -> Map:
    """Build a Map from a <map> element.

    Args:
        node (ElementTree.Element): The root element.
        base_path (Optional[str]): Folder external tilesets are relative to.
        filename (Optional[str]): The map's filename, if loaded from disk.

    """
    get = getdefault(node.attrib)
    background = get("backgroundcolor")
    tmxmap = Map(
        version=get("version", default="1.0"),
        tiledversion=get("tiledversion", default=""),
        orientation=Orientation.from_string(get("orientation", default="orthogonal")),
        renderorder=RenderOrder.from_string(get("renderorder", default="right-down")),
        width=get("width", uint, 0),
        height=get("height", uint, 0),
        tilewidth=get("tilewidth", uint, 0),
        tileheight=get("tileheight", uint, 0),
        infinite=get("infinite", convert_to_bool, False),
        background_color=None if background is None else Color.from_string(background),
        nextlayerid=get("nextlayerid", uint, 1),
        nextobjectid=get("nextobjectid", uint, 1),
        filename=filename,
        properties=new_properties(node),
    )

    # ***  tilesets first; a failure aborts the whole map  *** #
    for child in node.findall("tileset"):
        tmxmap.tilesets.append(new_tileset(child, base_path))
    check_tileset_order(tmxmap.tilesets)

    add_layers(tmxmap, node)
    return tmxmap


# entry points


def parse_tmxmap(
    text: Union[str, bytes],
    base_path: Optional[str] = None,
    filename: Optional[str] = None,
) -> Map:
    """Build a Map from xml text.

    Args:
        text (Union[str, bytes]): Contents of a .tmx file.
        base_path (Optional[str]): Folder external tilesets are relative to.
            Defaults to the current directory.
        filename (Optional[str]): Only used for error messages and Map.filename.

    Raises:
        TmxError: the first structural error found.  No partial map is returned.

    Returns:
        Map: The parsed map.

    """
    node = parse_document(text, "map", filename)
    return new_map(node, base_path, filename)


def load_tmxmap(filename: str) -> Map:
    """Load a Map from a .tmx file.

    External tilesets are resolved relative to the file's folder.

    Raises:
        TmxError: the first structural error found.  No partial map is returned.

    """
    text = read_file(filename)
    tmxmap = parse_tmxmap(text, os.path.dirname(filename), filename)
    logger.debug(
        "loaded %s: %d tilesets, %d layers, %d object groups",
        filename,
        len(tmxmap.tilesets),
        len(tmxmap.layers),
        len(tmxmap.objectgroups),
    )
    return tmxmap


def load_tileset(filename: str, firstgid: int = 0) -> Tileset:
    """Load a Tileset from a .tsx file.

    Args:
        filename (str): Path of the .tsx file.
        firstgid (int): First gid, as given by the map that references it.

    """
    node = read_document(filename, "tileset")
    return new_inline_tileset(node, firstgid)
