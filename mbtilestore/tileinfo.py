# This file is part of the MBTileStore project.
# Copyright (C) 2026 MBTileStore contributors
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#    http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

"""
Tile set description (`TileInfo`) and tile coordinate helpers.
"""

import copy
import math
from enum import Enum
from numbers import Real
from typing import Optional

from mbtilestore.exception import ValidationError


# deepest level with rows and columns that fit a 32-bit integer
MAX_ZOOM = 30


class TileFormat(Enum):
    PNG = 'png'
    JPG = 'jpg'
    WEBP = 'webp'
    PBF = 'pbf'


class TileScheme(Enum):
    TMS = 'tms'
    XYZ = 'xyz'


class LayerType(Enum):
    OVERLAY = 'overlay'
    BASELAYER = 'baselayer'


class TileInfo(object):
    """
    Description of a tile set.

    All tiles of a set share one `format` and one `scheme`. `bounds` is
    ``[west, south, east, north]`` and `center` is ``[lon, lat]``. `json` is
    an opaque JSON document (e.g. the ``vector_layers`` of vector tiles) that
    is stored as is.

    >>> info = TileInfo(format=TileFormat.PNG, bounds=[-180, -85, 180, 85])
    >>> info.is_valid()
    True
    >>> info.copy() == info
    True
    """
    fields = ('name', 'description', 'attribution', 'version', 'type',
              'format', 'scheme', 'min_zoom', 'max_zoom', 'bounds', 'center',
              'json')

    def __init__(self, name=None, description=None, format=None,
                 scheme=TileScheme.TMS, min_zoom=0, max_zoom=0, bounds=None,
                 center=None, json=None, attribution=None, version=None,
                 type=None):
        self.name: Optional[str] = name
        self.description: Optional[str] = description
        self.attribution: Optional[str] = attribution
        self.version: Optional[str] = version
        self.type: Optional[LayerType] = type
        self.format: Optional[TileFormat] = format
        self.scheme: TileScheme = scheme
        self.min_zoom: int = min_zoom
        self.max_zoom: int = max_zoom
        self.bounds: Optional[list[float]] = list(bounds) if bounds is not None else None
        self.center: Optional[list[float]] = list(center) if center is not None else None
        self.json: Optional[str] = json

    def validate(self) -> list[str]:
        """
        Return a list with all problems of this info. An empty list
        means the info is valid.

        >>> TileInfo(format=TileFormat.PNG, min_zoom=4, max_zoom=2,
        ...          bounds=[0, 0, 1, 1]).validate()
        ['min_zoom (4) is larger than max_zoom (2)']
        """
        errors = []
        if not isinstance(self.format, TileFormat):
            errors.append('format is required')
        if not isinstance(self.scheme, TileScheme):
            errors.append('scheme is required')
        if self.type is not None and not isinstance(self.type, LayerType):
            errors.append('type must be a LayerType, got %r' % (self.type, ))

        zoom_ok = True
        for attr in ('min_zoom', 'max_zoom'):
            value = getattr(self, attr)
            if not _is_int(value) or value < 0:
                errors.append('%s must be a non-negative integer, got %r' % (attr, value))
                zoom_ok = False
            elif value > MAX_ZOOM:
                errors.append('%s (%d) is larger than %d' % (attr, value, MAX_ZOOM))
                zoom_ok = False
        if zoom_ok and self.min_zoom > self.max_zoom:
            errors.append('min_zoom (%d) is larger than max_zoom (%d)' % (self.min_zoom, self.max_zoom))

        if self.bounds is None:
            errors.append('bounds are required')
        elif not _is_number_list(self.bounds, 4):
            errors.append('bounds must be four numbers [west, south, east, north], got %r' % (self.bounds, ))
        else:
            west, south, east, north = self.bounds
            if not west < east:
                errors.append('bounds: west (%r) must be smaller than east (%r)' % (west, east))
            if not south < north:
                errors.append('bounds: south (%r) must be smaller than north (%r)' % (south, north))

        if self.center is not None and not _is_number_list(self.center, 2):
            errors.append('center must be two numbers [lon, lat], got %r' % (self.center, ))

        for attr in ('name', 'description', 'attribution', 'version', 'json'):
            value = getattr(self, attr)
            if value is not None and not isinstance(value, str):
                errors.append('%s must be a string, got %r' % (attr, value))
        return errors

    def is_valid(self) -> bool:
        return not self.validate()

    def copy(self) -> 'TileInfo':
        return copy.deepcopy(self)

    def __eq__(self, other):
        if not isinstance(other, TileInfo):
            return NotImplemented
        return all(getattr(self, f) == getattr(other, f) for f in self.fields)

    def __ne__(self, other):
        equal = self.__eq__(other)
        if equal is NotImplemented:
            return equal
        return not equal

    __hash__ = None

    def __repr__(self):
        return '%s(%s)' % (self.__class__.__name__, ', '.join(
            '%s=%r' % (f, getattr(self, f)) for f in self.fields))


def _is_int(value):
    return isinstance(value, int) and not isinstance(value, bool)


def _is_number_list(value, length):
    if not isinstance(value, (list, tuple)) or len(value) != length:
        return False
    return all(isinstance(v, Real) and not isinstance(v, bool) and math.isfinite(v) for v in value)


def check_coord(z, x, y):
    """
    Raise `ValidationError` if ``(z, x, y)`` is not a tile of the quad-tree.

    >>> check_coord(2, 3, 0)
    >>> check_coord(2, 4, 0)
    Traceback (most recent call last):
    ...
    mbtilestore.exception.ValidationError: tile coordinate (2, 4, 0) outside of level 2
    """
    coord = (z, x, y)
    if not all(_is_int(v) for v in coord):
        raise ValidationError('tile coordinate %r must be integers' % (coord, ), coord=coord)
    if z < 0 or x < 0 or y < 0:
        raise ValidationError('tile coordinate %r must not be negative' % (coord, ), coord=coord)
    if z > MAX_ZOOM:
        raise ValidationError('tile coordinate %r above max zoom level %d' % (coord, MAX_ZOOM), coord=coord)
    size = 1 << z
    if x >= size or y >= size:
        raise ValidationError('tile coordinate %r outside of level %d' % (coord, z), coord=coord)


def flip_row(z, y):
    """
    Convert the row `y` between the TMS and XYZ (Google) convention.

    >>> flip_row(3, 0)
    7
    >>> flip_row(3, flip_row(3, 5))
    5
    """
    return (1 << z) - 1 - y
