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
Exceptions raised by the tile store.
"""


class TileStoreError(Exception):
    """
    Base class for all tile store errors.
    """
    def __init__(self, message):
        Exception.__init__(self, message)
        self.msg = message


class ValidationError(TileStoreError):
    """
    Rejected input (invalid `TileInfo`, wrong scheme, bad coordinate or
    payload). Raised before anything is written.

    :ivar errors: list with all validation messages
    :ivar key: the offending metadata key, if any
    :ivar coord: the offending ``(z, x, y)`` coordinate, if any
    """
    def __init__(self, message, errors=None, key=None, coord=None):
        TileStoreError.__init__(self, message)
        self.errors = list(errors) if errors else [message]
        self.key = key
        self.coord = coord

    def __str__(self):
        if len(self.errors) > 1:
            return '%s: %s' % (self.msg, '; '.join(self.errors))
        return self.msg


class FormatError(TileStoreError):
    """
    A persisted metadata value could not be parsed.
    """
    def __init__(self, key, value, message=None):
        if message is None:
            message = 'invalid value for metadata key %r: %r' % (key, value)
        TileStoreError.__init__(self, message)
        self.key = key
        self.value = value


class StorageError(TileStoreError):
    """
    Failure of the backing database (I/O, locking, constraints).
    The original ``sqlite3`` exception is available as ``__cause__``.
    """
    def __init__(self, message, coord=None):
        TileStoreError.__init__(self, message)
        self.coord = coord
