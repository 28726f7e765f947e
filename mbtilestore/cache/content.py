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
Content-addressed tile storage.

Tile data is stored once per unique payload in ``images``, keyed by the MD5
of the data. ``map`` binds each tile coordinate to a payload (and optionally
to a UTFGrid in ``grid_utfgrid``). Identical tiles (water, empty tiles, etc.)
share one ``images`` row.
"""

import hashlib
from typing import Iterable, Optional

from mbtilestore.exception import ValidationError

import logging
log = logging.getLogger(__name__)


# SQLite allows at most 999 bound parameters in older versions
MAX_SQL_ARGS = 999


def content_id(data) -> str:
    """
    Return the content id (hex MD5) of `data`.

    >>> content_id(b'')
    'd41d8cd98f00b204e9800998ecf8427e'
    """
    return hashlib.new('md5', data, usedforsecurity=False).hexdigest()


def _tile_data(data, coord):
    if data is None:
        raise ValidationError('tile data for %r is None, use b"" for empty tiles' % (coord, ), coord=coord)
    if isinstance(data, (bytearray, memoryview)):
        return bytes(data)
    if not isinstance(data, bytes):
        raise ValidationError('tile data for %r must be bytes, got %s' % (coord, type(data).__name__),
                              coord=coord)
    return data


def _as_bytes(value):
    # other tools may store tiles as text
    if isinstance(value, str):
        return value.encode('utf-8')
    return bytes(value)


class StoreStats(object):
    def __init__(self, tiles, contents, grids):
        self.tiles = tiles
        self.contents = contents
        self.grids = grids

    def __eq__(self, other):
        if not isinstance(other, StoreStats):
            return NotImplemented
        return (self.tiles, self.contents, self.grids) == (other.tiles, other.contents, other.grids)

    __hash__ = None

    def __repr__(self):
        return 'StoreStats(tiles=%d, contents=%d, grids=%d)' % (self.tiles, self.contents, self.grids)


class ContentStore(object):
    """
    Reads and writes tiles by TMS coordinate ``(z, x, y)``.

    Coordinates are expected to be validated by the caller.
    """

    insert_image_stmt = 'INSERT OR IGNORE INTO images (tile_id, tile_data) VALUES (?, ?)'
    # keeps the grid_id of the replaced binding
    replace_map_stmt = (
        'INSERT OR REPLACE INTO map (zoom_level, tile_column, tile_row, tile_id, grid_id)'
        ' VALUES (?, ?, ?, ?,'
        ' (SELECT grid_id FROM map WHERE zoom_level = ? AND tile_column = ? AND tile_row = ?))'
    )

    def __init__(self, conn):
        self.conn = conn

    def get(self, z, x, y) -> Optional[bytes]:
        """
        Return the data of the tile, or ``None`` if there is no tile.
        An empty tile returns ``b''``.
        """
        rows = self.conn.query(
            'SELECT images.tile_data FROM map'
            ' JOIN images ON images.tile_id = map.tile_id'
            ' WHERE map.zoom_level = ? AND map.tile_column = ? AND map.tile_row = ?',
            (z, x, y), coord=(z, x, y))
        if not rows or rows[0][0] is None:
            return None
        return _as_bytes(rows[0][0])

    def put(self, z, x, y, data):
        coord = (z, x, y)
        data = _tile_data(data, coord)
        tile_id = content_id(data)
        with self.conn.transaction(coord=coord) as db:
            self._put(db, coord, tile_id, data)

    def _put(self, db, coord, tile_id, data):
        z, x, y = coord
        db.execute(self.insert_image_stmt, (tile_id, data))
        db.execute(self.replace_map_stmt, (z, x, y, tile_id, z, x, y))

    def put_many(self, tiles: Iterable):
        """
        Store all ``((z, x, y), data)`` pairs in one transaction.
        """
        # hash before the transaction, to keep the write lock short
        records = []
        for coord, data in tiles:
            coord = tuple(coord)
            data = _tile_data(data, coord)
            records.append((coord, content_id(data), data))

        if not records:
            return
        with self.conn.transaction() as db:
            for coord, tile_id, data in records:
                self._put(db, coord, tile_id, data)
        log.debug('stored %d tiles', len(records))

    def get_many(self, coords: Iterable) -> dict:
        """
        Return a dict with the data of all existing tiles in `coords`.
        Missing tiles are not included.
        """
        coords = [tuple(c) for c in coords]
        result = {}
        per_stmt = MAX_SQL_ARGS // 3
        for i in range(0, len(coords), per_stmt):
            chunk = coords[i:i + per_stmt]
            args = []
            for z, x, y in chunk:
                args.extend((z, x, y))
            stmt = (
                'SELECT map.zoom_level, map.tile_column, map.tile_row, images.tile_data FROM map'
                ' JOIN images ON images.tile_id = map.tile_id WHERE '
                + ' OR '.join(['(map.zoom_level = ? AND map.tile_column = ? AND map.tile_row = ?)'] * len(chunk))
            )
            for z, x, y, data in self.conn.query(stmt, args):
                if data is not None:
                    result[(z, x, y)] = _as_bytes(data)
        return result

    def put_grid(self, z, x, y, data):
        """
        Store UTFGrid `data` for the existing tile at ``(z, x, y)``.
        """
        coord = (z, x, y)
        data = _tile_data(data, coord)
        grid_id = content_id(data)
        with self.conn.transaction(coord=coord) as db:
            cur = db.execute(
                'SELECT 1 FROM map WHERE zoom_level = ? AND tile_column = ? AND tile_row = ?', coord)
            if cur.fetchone() is None:
                raise ValidationError('no tile at %r to attach grid to' % (coord, ), coord=coord)
            db.execute('INSERT OR IGNORE INTO grid_utfgrid (grid_id, grid_utfgrid) VALUES (?, ?)',
                       (grid_id, data))
            db.execute('UPDATE map SET grid_id = ? WHERE zoom_level = ? AND tile_column = ? AND tile_row = ?',
                       (grid_id, z, x, y))

    def get_grid(self, z, x, y) -> Optional[bytes]:
        rows = self.conn.query(
            'SELECT grid_utfgrid.grid_utfgrid FROM map'
            ' JOIN grid_utfgrid ON grid_utfgrid.grid_id = map.grid_id'
            ' WHERE map.zoom_level = ? AND map.tile_column = ? AND map.tile_row = ?',
            (z, x, y), coord=(z, x, y))
        if not rows or rows[0][0] is None:
            return None
        return _as_bytes(rows[0][0])

    def stats(self) -> StoreStats:
        rows = self.conn.query(
            'SELECT (SELECT count(*) FROM map), (SELECT count(*) FROM images),'
            ' (SELECT count(*) FROM grid_utfgrid)')
        return StoreStats(*rows[0])
