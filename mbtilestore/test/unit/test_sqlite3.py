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

import os
import shutil
import sqlite3
import tempfile
import threading

import pytest

from mbtilestore.exception import StorageError
from mbtilestore.util.sqlite3 import LocalConnection


class TestLocalConnection(object):
    def setup_method(self):
        self.tmp_dir = tempfile.mkdtemp()
        self.filename = os.path.join(self.tmp_dir, 'tmp.sqlite')
        self.conn = LocalConnection(self.filename, timeout=0.05)
        with self.conn.transaction() as db:
            db.execute('CREATE TABLE t (v integer)')

    def teardown_method(self):
        self.conn.close()
        shutil.rmtree(self.tmp_dir)

    def values(self):
        return [r[0] for r in self.conn.query('SELECT v FROM t ORDER BY v')]

    def test_commit(self):
        with self.conn.transaction() as db:
            db.execute('INSERT INTO t VALUES (1)')
            db.execute('INSERT INTO t VALUES (2)')
        assert self.values() == [1, 2]
        assert not self.conn.db.in_transaction

    def test_rollback_on_sql_error(self):
        with pytest.raises(StorageError) as excinfo:
            with self.conn.transaction(coord=(1, 2, 3)) as db:
                db.execute('INSERT INTO t VALUES (1)')
                db.execute('INSERT INTO missing VALUES (1)')
        assert excinfo.value.coord == (1, 2, 3)
        assert isinstance(excinfo.value.__cause__, sqlite3.OperationalError)
        assert self.values() == []

    def test_rollback_on_other_error(self):
        with pytest.raises(KeyError):
            with self.conn.transaction() as db:
                db.execute('INSERT INTO t VALUES (1)')
                raise KeyError('foo')
        assert self.values() == []
        assert not self.conn.db.in_transaction

    def test_query_error(self):
        with pytest.raises(StorageError):
            self.conn.query('SELECT * FROM missing')

    def test_locked(self):
        other = sqlite3.connect(self.filename, isolation_level=None)
        try:
            other.execute('BEGIN IMMEDIATE')
            with pytest.raises(StorageError) as excinfo:
                with self.conn.transaction() as db:
                    db.execute('INSERT INTO t VALUES (1)')
            assert 'locked' in str(excinfo.value)
        finally:
            other.execute('ROLLBACK')
            other.close()

    def test_connection_per_thread(self):
        connections = []

        def get_db():
            connections.append(self.conn.db)
            self.conn.cleanup()

        t = threading.Thread(target=get_db)
        t.start()
        t.join()
        assert connections[0] is not self.conn.db
        assert self.conn.db is self.conn.db

    def test_closed(self):
        self.conn.close()
        with pytest.raises(StorageError):
            self.conn.db
        with pytest.raises(StorageError):
            self.conn.query('SELECT 1')

    def test_open_error(self):
        conn = LocalConnection(os.path.join(self.tmp_dir, 'missing', 'dir', 'tmp.sqlite'))
        with pytest.raises(StorageError):
            conn.db
