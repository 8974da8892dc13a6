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
from typing import Any, Callable, Dict, Optional, Union
from xml.etree import ElementTree

from .errors import MissingRootElement, TmxIOError, XmlSyntaxError

__all__ = (
    "convert_to_bool",
    "getdefault",
    "parse_document",
    "read_document",
    "read_file",
)

logger = logging.getLogger(__name__)


def convert_to_bool(value: Any) -> bool:
    """Convert a few common variations of "true" and "false" to boolean

    Args:
        value (Any): Value to test.

    Raises:
        ValueError: If `value` cannot be converted to a boolean.

    Returns:
        bool: The converted boolean.

    """
    value = str(value).strip()
    if value:
        value = value.lower()[0]
        if value in ("1", "y", "t"):
            return True
        if value in ("-", "0", "n", "f"):
            return False
    else:
        return False
    raise ValueError('cannot parse "{}" as bool'.format(value))


def getdefault(d: Dict[str, str]) -> Callable[..., Any]:
    """Return an accessor for the attributes of an element.

    The accessor is called as ``get(key, type=None, default=None)``.  Missing
    keys give the default unchanged; values that cannot be cast by ``type``
    also fall back to the default.

    """

    def get(key, type=None, default=None):
        try:
            value = d[key]
        except KeyError:
            return default
        if type is None:
            return value
        try:
            return type(value)
        except (TypeError, ValueError):
            logger.debug("cannot read attribute %s=%r, using %r", key, value, default)
            return default

    return get


def read_file(path: str) -> bytes:
    """Return the raw contents of a file, as bytes."""
    try:
        with open(path, "rb") as fp:
            return fp.read()
    except OSError as e:
        raise TmxIOError(path, e.strerror or str(e)) from e


def parse_document(
    text: Union[str, bytes],
    root: str = "map",
    path: Optional[str] = None,
) -> ElementTree.Element:
    """Parse xml text and return the root element.

    Args:
        text (Union[str, bytes]): The xml document.
        root (str): Tag the root element must have.
        path (Optional[str]): Filename, only used in error messages.

    Raises:
        XmlSyntaxError: if the text is not well-formed xml.
        MissingRootElement: if the root element is not `root`.

    Returns:
        ElementTree.Element: The root element.

    """
    try:
        node = ElementTree.fromstring(text)
    except ElementTree.ParseError as e:
        line, column = getattr(e, "position", (None, None))
        raise XmlSyntaxError(str(e), path, line, column) from e

    if node.tag != root:
        raise MissingRootElement(root, node.tag, path)
    return node


def read_document(path: str, root: str = "map") -> ElementTree.Element:
    """Read and parse a xml file, returning the root element."""
    return parse_document(read_file(path), root, path)
