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

import os.path
import sqlite3

from mbtilestore.exception import StorageError

import logging
log = logging.getLogger(__name__)


SCHEMA_VERSION = 1
# 'MPBX', see MBTiles 1.3
MBTILES_APPLICATION_ID = 0x4d504258

with open(os.path.join(os.path.dirname(__file__), 'schema.sql')) as schema_file:
    schema = schema_file.read()


def ensure_schema(conn):
    """
    Create all missing tables, indices and views of the MBTiles schema.
    Existing data is never touched.

    :param conn: `mbtilestore.util.sqlite3.LocalConnection`
    """
    db = conn.db
    try:
        log.debug('ensuring MBTiles schema v%d in %s', SCHEMA_VERSION, conn.filename)
        db.executescript(schema)
        (application_id, ) = db.execute('PRAGMA application_id').fetchone()
        if application_id == 0:
            db.execute('PRAGMA application_id = %d' % MBTILES_APPLICATION_ID)
        (user_version, ) = db.execute('PRAGMA user_version').fetchone()
        if user_version == 0:
            db.execute('PRAGMA user_version = %d' % SCHEMA_VERSION)
        elif user_version > SCHEMA_VERSION:
            log.warning('%s was created with a newer schema version (%d)', conn.filename, user_version)

        cur = db.execute("SELECT type FROM sqlite_master WHERE name = 'tiles'")
        row = cur.fetchone()
        if row and row[0] == 'table':
            log.warning('%s has a flat tiles table, existing tiles are not visible to this store',
                        conn.filename)
    except sqlite3.Error as ex:
        if db.in_transaction:
            db.execute('ROLLBACK')
        log.warning('unable to initialize schema of %s: %s', conn.filename, ex)
        raise StorageError('unable to initialize schema of %s: %s' % (conn.filename, ex)) from ex
