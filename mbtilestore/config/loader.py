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
Loading and validation of store configurations.

A configuration is a YAML file like::

    filename: cache_data/osm.mbtiles
    sqlite_timeout: 30
    sqlite_wal: true
    tileinfo:
        name: OSM
        format: png
        minzoom: 0
        maxzoom: 14
        bounds: -180,-85.0511,180,85.0511
"""

import json
import os.path
from typing import Iterable

from jsonschema.exceptions import ValidationError as SchemaValidationError
from jsonschema.validators import Draft202012Validator

from mbtilestore.cache.mbtiles import open_store
from mbtilestore.cache.metadata import METADATA_FIELDS
from mbtilestore.config import defaults
from mbtilestore.tileinfo import TileInfo
from mbtilestore.util.yaml import load_yaml_file, YAMLError

import logging
log = logging.getLogger('mbtilestore.config')


with open(os.path.join(os.path.dirname(__file__), 'config-schema.json')) as schema_file:
    schema = json.load(schema_file)


class ConfigurationError(Exception):
    def __init__(self, message, errors=None):
        Exception.__init__(self, message)
        self.msg = message
        self.errors = list(errors) if errors else []

    def __str__(self):
        if self.errors:
            return '%s: %s' % (self.msg, '; '.join(self.errors))
        return self.msg


def get_error_messages(errors: Iterable[SchemaValidationError]) -> list[str]:
    msgs = []
    for error in errors:
        path = error.json_path.replace('$', 'root')
        msg = f'{error.message} in {path}'
        msgs.append(msg)
        if error.context is not None:
            msgs += get_error_messages(error.context)
    return msgs


def validate(conf_dict: dict) -> list[str]:
    validator = Draft202012Validator(schema=schema)
    errors = get_error_messages(validator.iter_errors(conf_dict))

    tileinfo = conf_dict.get('tileinfo')
    if isinstance(tileinfo, dict) and not errors:
        minzoom = tileinfo.get('minzoom', 0)
        maxzoom = tileinfo.get('maxzoom', 0)
        if minzoom > maxzoom:
            errors.append(f'minzoom ({minzoom}) is larger than maxzoom ({maxzoom}) in root.tileinfo')
    return errors


def load_configuration(conf_file) -> dict:
    """
    Load and validate the store configuration `conf_file`. Returns the
    configuration with all defaults. A relative ``filename`` is resolved
    against the directory of `conf_file`.
    """
    conf_base_dir = os.path.abspath(os.path.dirname(conf_file))
    try:
        conf_dict = load_yaml_file(conf_file)
    except YAMLError as ex:
        raise ConfigurationError(str(ex)) from ex
    except OSError as ex:
        raise ConfigurationError('unable to read configuration %s: %s' % (conf_file, ex)) from ex
    log.debug('Loaded configuration file: %s', json.dumps(conf_dict, indent=2, default=str))

    errors = validate(conf_dict)
    for error in errors:
        log.warning(error)
    if errors:
        raise ConfigurationError('invalid configuration', errors)

    conf = dict(defaults.store)
    conf.update(conf_dict)
    conf['filename'] = os.path.join(conf_base_dir, conf['filename'])
    return conf


def tileinfo_from_conf(tileinfo_conf: dict) -> TileInfo:
    """
    Create a `TileInfo` from the ``tileinfo`` section of a configuration.
    Values use the same encoding as the metadata table, but `bounds` and
    `center` may also be lists and `json` may be a mapping.
    """
    info = TileInfo()
    for field in METADATA_FIELDS:
        if field.key not in tileinfo_conf:
            continue
        value = tileinfo_conf[field.key]
        if field.key == 'json' and isinstance(value, dict):
            value = json.dumps(value)
        elif isinstance(value, list):
            value = [float(v) for v in value]
            setattr(info, field.attr, value)
            continue
        elif isinstance(value, (int, float)) and field.key in ('minzoom', 'maxzoom'):
            setattr(info, field.attr, value)
            continue
        try:
            setattr(info, field.attr, field.parse(str(value)))
        except ValueError as ex:
            raise ConfigurationError(f'invalid value for {field.key} in root.tileinfo: {ex}') from ex
    return info


def load_store(conf_file):
    """
    Open the store described by `conf_file` and apply its ``tileinfo``.
    """
    conf = load_configuration(conf_file)
    info = None
    if 'tileinfo' in conf:
        info = tileinfo_from_conf(conf['tileinfo'])

    store = open_store(
        conf['filename'],
        timeout=conf['sqlite_timeout'],
        wal=conf['sqlite_wal'],
        directory_permissions=conf['directory_permissions'],
        file_permissions=conf['file_permissions'],
    )
    if info is not None:
        try:
            store.set_tile_info(info)
        except Exception:
            store.close()
            raise
    return store
