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
Reads and writes the `TileInfo` from/to the MBTiles ``metadata`` table.
"""

import re

from mbtilestore.exception import FormatError, ValidationError
from mbtilestore.tileinfo import TileInfo, TileFormat, TileScheme, LayerType

import logging
log = logging.getLogger(__name__)


_int_re = re.compile(r'^\s*[+-]?\d+\s*$')


def parse_int(value):
    """
    >>> parse_int(' 12')
    12
    >>> parse_int('1.5')
    Traceback (most recent call last):
    ...
    ValueError: not an integer: '1.5'
    """
    if not _int_re.match(value):
        raise ValueError('not an integer: %r' % value)
    return int(value)


def parse_float_list(value):
    """
    >>> parse_float_list('-180,-85.0511,180, 85.0511')
    [-180.0, -85.0511, 180.0, 85.0511]
    """
    return [float(v) for v in value.split(',')]


def format_float_list(values):
    """
    >>> format_float_list([-180, 0.1, 85.0511287798066])
    '-180,0.1,85.0511287798066'
    """
    return ','.join(format_number(v) for v in values)


def format_number(value):
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return repr(value)


def enum_parser(enum_cls):
    def parse(value):
        lookup = value.strip().lower()
        for member in enum_cls:
            if member.value == lookup or member.name.lower() == lookup:
                return member
        raise ValueError('unknown %s %r' % (enum_cls.__name__, value))
    return parse


def format_enum(member):
    return member.value


def _identity(value):
    return value


class MetadataField(object):
    """
    A known metadata key with the `TileInfo` attribute it maps to.
    """
    def __init__(self, key, attr, parse=_identity, serialize=_identity):
        self.key = key
        self.attr = attr
        self.parse = parse
        self.serialize = serialize


METADATA_FIELDS = [
    MetadataField('name', 'name'),
    MetadataField('description', 'description'),
    MetadataField('attribution', 'attribution'),
    MetadataField('version', 'version'),
    MetadataField('type', 'type', enum_parser(LayerType), format_enum),
    MetadataField('format', 'format', enum_parser(TileFormat), format_enum),
    MetadataField('minzoom', 'min_zoom', parse_int, str),
    MetadataField('maxzoom', 'max_zoom', parse_int, str),
    MetadataField('bounds', 'bounds', parse_float_list, format_float_list),
    MetadataField('center', 'center', parse_float_list, format_float_list),
    MetadataField('json', 'json'),
]

_fields_by_key = dict((f.key, f) for f in METADATA_FIELDS)


class MetadataStore(object):
    """
    Maps `TileInfo` to the key/value ``metadata`` table.

    Keys are matched case-insensitive. Unknown keys are ignored on `load`
    and left untouched on `save`.
    """
    def __init__(self, conn):
        self.conn = conn

    def load(self):
        info = TileInfo()
        rows = self.conn.query('SELECT name, value FROM metadata')
        for key, value in rows:
            if key is None:
                continue
            field = _fields_by_key.get(key.lower())
            if field is None:
                log.debug('ignoring unknown metadata key %r', key)
                continue
            if value is None:
                continue
            try:
                # other tools may store metadata values as blobs
                if isinstance(value, bytes):
                    value = value.decode('utf-8')
                setattr(info, field.attr, field.parse(str(value)))
            except ValueError as ex:
                raise FormatError(key, value, 'invalid value for metadata key %r: %s' % (key, ex)) from ex
        return info

    def save(self, info):
        errors = info.validate()
        if errors:
            raise ValidationError('invalid tile info', errors=errors)
        if info.scheme is not TileScheme.TMS:
            raise ValidationError('tile scheme must be TMS, got %s' % info.scheme.name, key='scheme')

        records = []
        unset = []
        for field in METADATA_FIELDS:
            value = getattr(info, field.attr)
            if value is None:
                unset.append(field.key)
            else:
                records.append((field.key, field.serialize(value)))

        with self.conn.transaction() as db:
            # remove stale rows, also with different case (e.g. 'MinZoom')
            for key in unset + [k for k, _ in records]:
                db.execute('DELETE FROM metadata WHERE lower(name) = ? AND name != ?', (key, key))
            for key in unset:
                db.execute('DELETE FROM metadata WHERE name = ?', (key, ))
            db.executemany('INSERT OR REPLACE INTO metadata (name, value) VALUES (?, ?)', records)
        log.debug('stored metadata keys %s', ', '.join(k for k, _ in records))
