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
import stat
from glob import glob as globfunc


def assert_permissions(file_path, permissions):
    actual_permissions = oct(stat.S_IMODE(os.stat(file_path).st_mode))[2:]
    assert actual_permissions == permissions, \
        'expected permissions %s for %s, got %s' % (permissions, file_path, actual_permissions)


def assert_files_in_dir(dir, expected, glob=None):
    if glob is not None:
        files = globfunc(os.path.join(dir, glob))
        files = [os.path.basename(f) for f in files]
    else:
        files = os.listdir(dir)
    files.sort()
    assert sorted(expected) == files
