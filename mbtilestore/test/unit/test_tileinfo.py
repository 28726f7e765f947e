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

import pytest

from mbtilestore.exception import ValidationError
from mbtilestore.tileinfo import (
    MAX_ZOOM,
    TileInfo,
    TileFormat,
    TileScheme,
    LayerType,
    check_coord,
    flip_row,
)


def valid_info(**kw):
    args = dict(name='osm', format=TileFormat.PNG, min_zoom=0, max_zoom=5,
                bounds=[-180, -85.0511, 180, 85.0511])
    args.update(kw)
    return TileInfo(**args)


class TestTileInfo(object):
    def test_defaults(self):
        info = TileInfo()
        assert info.scheme is TileScheme.TMS
        assert info.min_zoom == 0
        assert info.max_zoom == 0
        assert info.bounds is None
        assert info.center is None
        assert info.json is None
        assert not info.is_valid()

    def test_valid(self):
        info = valid_info(center=[10.5, 53.0], type=LayerType.BASELAYER)
        assert info.validate() == []
        assert info.is_valid()

    def test_missing_format(self):
        assert valid_info(format=None).validate() == ['format is required']

    def test_missing_bounds(self):
        assert valid_info(bounds=None).validate() == ['bounds are required']

    @pytest.mark.parametrize('bounds', [
        [0, 0, 1],
        [0, 0, 1, 1, 1],
        ['0', 0, 1, 1],
        [True, 0, 1, 1],
        'foo',
    ])
    def test_malformed_bounds(self, bounds):
        errors = valid_info(bounds=bounds).validate()
        assert len(errors) == 1
        assert errors[0].startswith('bounds must be four numbers')

    def test_bounds_order(self):
        errors = valid_info(bounds=[10, 50, 5, 40]).validate()
        assert errors == [
            'bounds: west (10) must be smaller than east (5)',
            'bounds: south (50) must be smaller than north (40)',
        ]

    def test_zoom_order(self):
        errors = valid_info(min_zoom=6, max_zoom=5).validate()
        assert errors == ['min_zoom (6) is larger than max_zoom (5)']

    def test_negative_zoom(self):
        errors = valid_info(min_zoom=-1).validate()
        assert errors == ['min_zoom must be a non-negative integer, got -1']

    def test_max_zoom(self):
        assert valid_info(max_zoom=MAX_ZOOM).is_valid()
        errors = valid_info(max_zoom=MAX_ZOOM + 1).validate()
        assert errors == ['max_zoom (31) is larger than 30']

    def test_center(self):
        assert valid_info(center=[1, 2]).is_valid()
        assert not valid_info(center=[1, 2, 3]).is_valid()
        assert not valid_info(center=['a', 'b']).is_valid()

    @pytest.mark.parametrize('attr,value', [
        ('center', [float('nan'), 0]),
        ('center', [0, float('inf')]),
        ('bounds', [float('-inf'), -85, 180, 85]),
        ('bounds', [-180, -85, 180, float('nan')]),
    ])
    def test_non_finite_numbers(self, attr, value):
        assert not valid_info(**{attr: value}).is_valid()

    def test_text_fields(self):
        assert not valid_info(name=42).is_valid()
        assert valid_info(name='').is_valid()

    def test_equal(self):
        assert valid_info() == valid_info()
        assert valid_info() != valid_info(name='other')
        assert valid_info(center=None) != valid_info(center=[0, 0])
        assert valid_info() != 'osm'

    def test_copy_is_independent(self):
        info = valid_info(center=[1.0, 2.0])
        info2 = info.copy()
        assert info2 == info
        info2.bounds[0] = -100
        info2.center.append(3)
        assert info.bounds[0] == -180
        assert info.center == [1.0, 2.0]

    def test_init_copies_lists(self):
        bounds = [0, 0, 1, 1]
        info = valid_info(bounds=bounds)
        bounds[0] = 5
        assert info.bounds == [0, 0, 1, 1]

    def test_repr(self):
        assert repr(TileInfo()).startswith("TileInfo(name=None, description=None")


class TestCheckCoord(object):
    @pytest.mark.parametrize('coord', [
        (0, 0, 0),
        (1, 1, 1),
        (12, 4095, 0),
        (20, 0, (1 << 20) - 1),
        (MAX_ZOOM, (1 << MAX_ZOOM) - 1, 0),
    ])
    def test_valid(self, coord):
        check_coord(*coord)

    @pytest.mark.parametrize('coord', [
        (-1, 0, 0),
        (0, -1, 0),
        (0, 0, -1),
        (0, 1, 0),
        (0, 0, 1),
        (12, 4096, 0),
        (1.0, 0, 0),
        (1, '0', 0),
        (True, 0, 0),
        (MAX_ZOOM + 1, 0, 0),
        (64, 2 ** 63, 0),
        (10 ** 9, 0, 0),
    ])
    def test_invalid(self, coord):
        with pytest.raises(ValidationError) as excinfo:
            check_coord(*coord)
        assert excinfo.value.coord == coord


def test_flip_row():
    assert flip_row(0, 0) == 0
    assert flip_row(1, 0) == 1
    assert flip_row(2, 1) == 2
    assert flip_row(10, flip_row(10, 123)) == 123
