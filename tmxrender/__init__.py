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
import logging

from .animation import *
from .builder import *
from .decoder import *
from .errors import *
from .objects import *
from .reader import *
from .renderdata import *
from .resolver import *

logger = logging.getLogger(__name__)

__version__ = (1, 0)
__author__ = "bitcraft"
__author_email__ = "leif.theden@gmail.com"
__description__ = "Loads Tiled TMX maps and compiles them into render-ready data"
