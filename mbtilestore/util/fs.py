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
File system related utility functions.
"""
import errno
import os

import logging
log = logging.getLogger(__name__)


def parse_permissions(permissions):
    """
    Convert an octal permission string (``'755'``) to an int.

    >>> parse_permissions('644') == 0o644
    True
    >>> parse_permissions(None)
    """
    if permissions is None:
        return None
    if isinstance(permissions, int):
        return permissions
    return int(permissions, base=8)


def ensure_directory(file_name, directory_permissions=None):
    """
    Create directory of `file_name` if it does not exist, else do nothing.
    """
    dir_name = os.path.dirname(file_name)
    if not dir_name or os.path.exists(dir_name):
        return
    try:
        os.makedirs(dir_name)
    except OSError as e:
        if e.errno != errno.EEXIST:
            raise e
    else:
        permissions = parse_permissions(directory_permissions)
        if permissions is not None:
            log.info('setting directory permissions on %s: %o', dir_name, permissions)
            os.chmod(dir_name, permissions)
