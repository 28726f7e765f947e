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
Thread-local SQLite connections with explicit transactions.
"""

import sqlite3
import threading
from contextlib import contextmanager

from mbtilestore.exception import StorageError

import logging
log = logging.getLogger(__name__)


class LocalConnection(object):
    """
    Opens one connection per thread for `filename`.

    Connections run in autocommit mode. All writes go through
    `transaction`, reads are single statements.
    """
    def __init__(self, filename, timeout=30):
        self.filename = filename
        self.timeout = timeout
        self.closed = False
        self._local = threading.local()

    @property
    def db(self):
        if self.closed:
            raise StorageError('store %s is closed' % self.filename)
        db = getattr(self._local, 'db', None)
        if db is None:
            try:
                db = sqlite3.connect(self.filename, timeout=self.timeout,
                                     isolation_level=None, check_same_thread=True)
            except sqlite3.Error as ex:
                log.warning('unable to open %s: %s', self.filename, ex)
                raise StorageError('unable to open %s: %s' % (self.filename, ex)) from ex
            self._local.db = db
        return db

    @contextmanager
    def transaction(self, coord=None):
        """
        Run the block in one ``BEGIN IMMEDIATE`` transaction. Commits on
        success, rolls back on any error. ``sqlite3`` errors are
        re-raised as `StorageError`.

        >>> conn = LocalConnection(':memory:')
        >>> with conn.transaction() as db:
        ...     _ = db.execute('CREATE TABLE t (v integer)')
        """
        db = self.db
        try:
            db.execute('BEGIN IMMEDIATE')
        except sqlite3.Error as ex:
            log.warning('unable to begin transaction on %s: %s', self.filename, ex)
            raise StorageError('unable to begin transaction: %s' % ex, coord=coord) from ex

        try:
            yield db
        except sqlite3.Error as ex:
            self._rollback(db)
            log.warning('transaction on %s failed: %s', self.filename, ex)
            raise StorageError('transaction failed: %s' % ex, coord=coord) from ex
        except BaseException:
            self._rollback(db)
            raise

        try:
            db.execute('COMMIT')
        except sqlite3.Error as ex:
            self._rollback(db)
            log.warning('unable to commit on %s: %s', self.filename, ex)
            raise StorageError('unable to commit: %s' % ex, coord=coord) from ex

    def _rollback(self, db):
        if db.in_transaction:
            try:
                db.execute('ROLLBACK')
            except sqlite3.Error as ex:
                # sqlite already rolled back (e.g. after SQLITE_FULL)
                log.debug('rollback failed: %s', ex)

    def query(self, stmt, args=(), coord=None):
        """
        Execute a single read statement and return all rows.
        """
        try:
            cur = self.db.execute(stmt, args)
            return cur.fetchall()
        except sqlite3.Error as ex:
            log.warning('query on %s failed: %s', self.filename, ex)
            raise StorageError('query failed: %s' % ex, coord=coord) from ex

    def cleanup(self):
        """
        Close the connection of the current thread.
        """
        db = getattr(self._local, 'db', None)
        if db is not None:
            db.close()
        self._local.db = None

    def close(self):
        self.cleanup()
        self.closed = True
