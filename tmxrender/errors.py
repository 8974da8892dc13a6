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

from typing import Optional

__all__ = (
    "TmxError",
    "TmxIOError",
    "XmlSyntaxError",
    "MissingRootElement",
    "UnsupportedEncoding",
    "UnsupportedCompression",
    "DecodeError",
    "DecompressError",
    "InvalidColorFormat",
    "ExternalTilesetError",
)


class TmxError(Exception):
    """Base class for all errors raised while loading a map.

    Subclasses keep their context as attributes; the message is only
    formatted when the error is turned into a string.

    """

    def __str__(self) -> str:
        return self.describe()

    def describe(self) -> str:
        return self.__class__.__name__


class TmxIOError(TmxError):
    def __init__(self, path: str, reason: str) -> None:
        super().__init__(path, reason)
        self.path = path
        self.reason = reason

    def describe(self) -> str:
        return f"Cannot open file: {self.path} ({self.reason})"


class XmlSyntaxError(TmxError):
    def __init__(
        self,
        reason: str,
        path: Optional[str] = None,
        line: Optional[int] = None,
        column: Optional[int] = None,
    ) -> None:
        super().__init__(reason, path, line, column)
        self.reason = reason
        self.path = path
        self.line = line
        self.column = column

    def describe(self) -> str:
        where = self.path or "<string>"
        if self.line is not None:
            where = "{0}:{1}:{2}".format(where, self.line, self.column or 0)
        return f"XML parsing error in {where}: {self.reason}"


class MissingRootElement(TmxError):
    def __init__(
        self,
        expected: str,
        found: Optional[str] = None,
        path: Optional[str] = None,
    ) -> None:
        super().__init__(expected, found, path)
        self.expected = expected
        self.found = found
        self.path = path

    def describe(self) -> str:
        msg = "No '{0}' element found".format(self.expected)
        if self.found:
            msg += " (root element is '{0}')".format(self.found)
        if self.path:
            msg += " in {0}".format(self.path)
        return msg


class UnsupportedEncoding(TmxError):
    def __init__(self, encoding: Optional[str]) -> None:
        super().__init__(encoding)
        self.encoding = encoding

    def describe(self) -> str:
        return f"Unsupported encoding: {self.encoding!r}"


class UnsupportedCompression(TmxError):
    def __init__(self, compression: str) -> None:
        super().__init__(compression)
        self.compression = compression

    def describe(self) -> str:
        return f"Unsupported compression: {self.compression!r}"


class DecodeError(TmxError):
    def __init__(self, encoding: str, reason: str) -> None:
        super().__init__(encoding, reason)
        self.encoding = encoding
        self.reason = reason

    def describe(self) -> str:
        return f"Failed to decode {self.encoding} data: {self.reason}"


class DecompressError(TmxError):
    def __init__(self, compression: str, reason: str) -> None:
        super().__init__(compression, reason)
        self.compression = compression
        self.reason = reason

    def describe(self) -> str:
        return f"Failed to decompress {self.compression} data: {self.reason}"


class InvalidColorFormat(TmxError):
    def __init__(self, value: str) -> None:
        super().__init__(value)
        self.value = value

    def describe(self) -> str:
        return f"Invalid hex color format: {self.value!r}"


class ExternalTilesetError(TmxError):
    """Raised when a tileset referenced by ``source`` cannot be loaded.

    The original error is kept on ``error`` and chained as ``__cause__``.

    """

    def __init__(self, source: str, path: str, error: TmxError) -> None:
        super().__init__(source, path, error)
        self.source = source
        self.path = path
        self.error = error

    def describe(self) -> str:
        return "Error loading external tileset {0} (resolved to {1}): {2}".format(
            self.source, self.path, self.error
        )
