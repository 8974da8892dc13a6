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

import binascii
import gzip
import logging
import struct
import zlib
from base64 import b64decode
from collections import namedtuple
from typing import List, Optional, Tuple

import zstandard

from .errors import (
    DecodeError,
    DecompressError,
    UnsupportedCompression,
    UnsupportedEncoding,
)

__all__ = (
    "TileFlags",
    "decode_gid",
    "decompress",
    "unpack_gids",
)

logger = logging.getLogger(__name__)

# Tiled gid flags
GID_TRANS_FLIPX = 1 << 31
GID_TRANS_FLIPY = 1 << 30
GID_TRANS_ROT = 1 << 29
GID_MASK = GID_TRANS_FLIPX | GID_TRANS_FLIPY | GID_TRANS_ROT

MAX_GID = 0xFFFFFFFF

flag_names = ("flipped_horizontally", "flipped_vertically", "flipped_diagonally")

TileFlags = namedtuple("TileFlags", flag_names)
empty_flags = TileFlags(False, False, False)


def decode_gid(raw_gid: int) -> Tuple[int, TileFlags]:
    """Decode a GID from TMX data.

    Args:
        raw_gid (int): GID, as reported by Tiled.

    Returns:
        Tuple[int, TileFlags]: Tuple of the GID without flip flags, and TileFlags object

    """
    if raw_gid < GID_TRANS_ROT:
        return raw_gid, empty_flags
    return (
        raw_gid & ~GID_MASK,
        TileFlags(
            raw_gid & GID_TRANS_FLIPX == GID_TRANS_FLIPX,
            raw_gid & GID_TRANS_FLIPY == GID_TRANS_FLIPY,
            raw_gid & GID_TRANS_ROT == GID_TRANS_ROT,
        ),
    )


def decompress(data: bytes, compression: Optional[str], expected_size: int = 0) -> bytes:
    """Decompress a decoded base64 payload.

    Args:
        data (bytes): Compressed bytes.
        compression (Optional[str]): One of "", "zlib", "gzip" or "zstd".
        expected_size (int): Output size to assume when a zstd frame does
            not declare its content size.

    Raises:
        UnsupportedCompression: for any other compression name.
        DecompressError: if the payload cannot be decompressed.

    Returns:
        bytes: The decompressed bytes.

    """
    if not compression:
        return data

    if compression == "zlib":
        try:
            return zlib.decompress(data)
        except zlib.error as e:
            raise DecompressError(compression, str(e)) from e

    elif compression == "gzip":
        try:
            return gzip.decompress(data)
        except (OSError, EOFError, zlib.error) as e:
            raise DecompressError(compression, str(e)) from e

    elif compression == "zstd":
        # max_output_size is only consulted when the frame has no content size
        dctx = zstandard.ZstdDecompressor()
        try:
            return dctx.decompress(data, max_output_size=expected_size)
        except zstandard.ZstdError as e:
            raise DecompressError(compression, str(e)) from e

    raise UnsupportedCompression(compression)


def _unpack_csv(text: str) -> List[int]:
    cells = text.split(",")
    # tolerate a trailing separator
    if not cells[-1].strip():
        cells.pop()

    gids = list()
    for cell in cells:
        cell = cell.strip()
        if not (cell.isascii() and cell.isdigit()):
            raise DecodeError("csv", "{0!r} is not an unsigned integer".format(cell))
        gid = int(cell)
        if gid > MAX_GID:
            raise DecodeError("csv", "{0} does not fit in 32 bits".format(gid))
        gids.append(gid)
    return gids


def _unpack_base64(
    text: str,
    compression: Optional[str],
    expected_size: int,
) -> List[int]:
    try:
        data = b64decode("".join(text.split()), validate=True)
    except (binascii.Error, ValueError) as e:
        raise DecodeError("base64", str(e)) from e

    data = decompress(data, compression, expected_size)

    # a trailing partial id is dropped
    count = len(data) // 4
    fmt = "<%dL" % count
    return list(struct.unpack(fmt, data[: count * 4]))


def unpack_gids(
    text: Optional[str],
    encoding: Optional[str] = None,
    compression: Optional[str] = None,
    width: int = 0,
    height: int = 0,
) -> List[int]:
    """Return all gids from encoded/compressed layer data

    Args:
        text (Optional[str]): Layer data in text format.
        encoding (Optional[str]): Encoding used, "csv" or "base64".
        compression (Optional[str]): Compression used, base64 only.
        width (int): Width of the layer or chunk, in tiles.
        height (int): Height of the layer or chunk, in tiles.

    Raises:
        UnsupportedEncoding: if the encoding is not csv or base64.
        UnsupportedCompression: if base64 data uses an unknown compression.
        DecodeError: if the text cannot be decoded.
        DecompressError: if the decoded bytes cannot be decompressed.

    Returns:
        List[int]: List of all the GIDs in the layer, row-major.

    """
    text = text or ""
    if encoding == "csv":
        return _unpack_csv(text)
    elif encoding == "base64":
        return _unpack_base64(text, compression, width * height * 4)
    raise UnsupportedEncoding(encoding)
