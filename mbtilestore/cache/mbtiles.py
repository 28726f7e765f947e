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
MBTiles tile store with deduplicated tile storage.

.. digraph:: Schematic Call Graph

    ranksep = 0.1;
    node [shape="box", height="0", width="0"]

    st  [label="MBTilesStore"];
    md  [label="MetadataStore"];
    cs  [label="ContentStore"];
    db  [label="LocalConnection"];

    {
        st -> md [label="load\\nsave"];
        st -> cs [label="get\\nput"];
        md -> db;
        cs -> db;
    }

"""

import os
import sqlite3
import threading

from mbtilestore.cache.content import ContentStore
from mbtilestore.cache.metadata import MetadataStore
from mbtilestore.cache.schema import ensure_schema
from mbtilestore.exception import StorageError
from mbtilestore.tileinfo import check_coord
from mbtilestore.util.fs import ensure_directory, parse_permissions
from mbtilestore.util.sqlite3 import LocalConnection

import logging
log = logging.getLogger(__name__)


class MBTilesStore(object):
    """
    A tile store backed by a single MBTiles file.

    All tile coordinates are TMS ``(z, x, y)`` with ``y`` counted from the
    south. Use `mbtilestore.tileinfo.flip_row` for XYZ rows.

    Opening the store creates the file and the schema if they are missing
    and loads the `TileInfo` from the metadata table. A malformed metadata
    value fails the open with `FormatError`.
    """

    def __init__(self, mbtile_file, timeout=30, wal=False,
                 directory_permissions=None, file_permissions=None):
        self.mbtile_file = mbtile_file
        self.timeout = timeout
        self.wal = wal
        self.directory_permissions = directory_permissions
        self.file_permissions = file_permissions
        self.conn = LocalConnection(mbtile_file, timeout=timeout)
        self.metadata = MetadataStore(self.conn)
        self.content = ContentStore(self.conn)
        self._info_lock = threading.Lock()
        try:
            self.ensure_mbtile()
            self._info = self.metadata.load()
        except BaseException:
            self.conn.close()
            raise

    def ensure_mbtile(self):
        if not os.path.exists(self.mbtile_file):
            self._initialize_mbtile()
        else:
            ensure_schema(self.conn)

    def _initialize_mbtile(self):
        log.info('initializing MBTiles file %s', self.mbtile_file)
        try:
            ensure_directory(self.mbtile_file, self.directory_permissions)
        except OSError as ex:
            raise StorageError('unable to create directory for %s: %s' % (self.mbtile_file, ex)) from ex

        if self.wal:
            try:
                self.conn.db.execute('PRAGMA journal_mode=wal')
            except sqlite3.Error as ex:
                raise StorageError('unable to enable WAL for %s: %s' % (self.mbtile_file, ex)) from ex
        ensure_schema(self.conn)

        permissions = parse_permissions(self.file_permissions)
        if permissions is not None:
            log.info('setting file permissions on MBTiles file %s: %o', self.mbtile_file, permissions)
            try:
                os.chmod(self.mbtile_file, permissions)
            except OSError as ex:
                raise StorageError('unable to set permissions of %s: %s' % (self.mbtile_file, ex)) from ex

    @property
    def closed(self):
        return self.conn.closed

    def cleanup(self):
        """
        Close the connection of the current thread. The store stays usable
        and reconnects on the next access.
        """
        self.conn.cleanup()

    def close(self):
        self.conn.close()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()

    def get_tile_info(self):
        """
        Return a copy of the `TileInfo` of this store.
        """
        if self.closed:
            raise StorageError('store %s is closed' % self.mbtile_file)
        with self._info_lock:
            return self._info.copy()

    def set_tile_info(self, info):
        """
        Validate and store `info`. Raises `ValidationError` for invalid infos
        or schemes other than TMS. The current info is only replaced if
        `info` was stored.
        """
        if self.closed:
            raise StorageError('store %s is closed' % self.mbtile_file)
        info = info.copy()
        with self._info_lock:
            self.metadata.save(info)
            self._info = info

    def get_tile(self, z, x, y):
        """
        Return the tile data, ``None`` for missing tiles or ``b''`` for
        empty tiles.
        """
        check_coord(z, x, y)
        return self.content.get(z, x, y)

    def put_tile(self, z, x, y, data):
        check_coord(z, x, y)
        self.content.put(z, x, y, data)

    def get_tiles(self, coords):
        coords = [tuple(c) for c in coords]
        for coord in coords:
            check_coord(*coord)
        return self.content.get_many(coords)

    def put_tiles(self, tiles):
        """
        Store all ``((z, x, y), data)`` pairs in one transaction.
        """
        tiles = [(tuple(coord), data) for coord, data in tiles]
        for coord, _ in tiles:
            check_coord(*coord)
        self.content.put_many(tiles)

    def get_grid(self, z, x, y):
        check_coord(z, x, y)
        return self.content.get_grid(z, x, y)

    def put_grid(self, z, x, y, data):
        check_coord(z, x, y)
        self.content.put_grid(z, x, y, data)

    def stats(self):
        return self.content.stats()

    def __repr__(self):
        return '%s(%r)' % (self.__class__.__name__, self.mbtile_file)


def open_store(resource, **options):
    """
    Open (or create) the MBTiles file `resource`.
    Keyword `options` are passed to `MBTilesStore`.
    """
    return MBTilesStore(resource, **options)
