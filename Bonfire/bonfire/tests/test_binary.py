# -*- coding: utf-8 -*-
#
# GPL License and Copyright Notice ============================================
#  This file is part of Bonfire.
#
#  Bonfire is free software: you can redistribute it and/or
#  modify it under the terms of the GNU General Public License
#  as published by the Free Software Foundation, either version 3
#  of the License, or (at your option) any later version.
#
#  Bonfire is distributed in the hope that it will be useful,
#  but WITHOUT ANY WARRANTY; without even the implied warranty of
#  MERCHANTABILITY or FITNESS FOR A PARTICULAR PURPOSE.  See the
#  GNU General Public License for more details.
#
#  You should have received a copy of the GNU General Public License
#  along with Bonfire.  If not, see <https://www.gnu.org/licenses/>.
#
#  Bonfire copyright (C) 2024-2026 Bonfire Team
#
# =============================================================================
import struct

import pytest

from ..binary import AFixedOffsetRecord
from ..exception import ArgumentError, TruncatedError

class _Sample(object):
    pass

class _SampleRecord(AFixedOffsetRecord):
    processors = {
        'small': ('B', 1),
        'medium': ('I', 4),
        'big': ('Q', 8),
        'label': ('utf16:8', 16),
    }

def _payload():
    payload = bytearray(range(32))
    struct.pack_into('<B', payload, 1, 7)
    struct.pack_into('<I', payload, 4, 0xDEADBEEF)
    struct.pack_into('<Q', payload, 8, 2 ** 40)
    payload[16:24] = 'Hi'.encode('utf-16-le') + bytes(4)
    return bytes(payload)

class TestFixedOffsetRecord(object):
    def test_min_payload_size(self):
        assert _SampleRecord.min_payload_size() == 24

    def test_load_data(self):
        sample = _Sample()
        _SampleRecord().load_data(sample, _payload())
        assert sample.small == 7
        assert sample.medium == 0xDEADBEEF
        assert sample.big == 2 ** 40
        assert sample.label == 'Hi'

    def test_dump_keeps_gaps(self):
        record = _SampleRecord()
        sample = _Sample()
        original = _payload()
        record.load_data(sample, original)
        sample.medium = 1
        sample.label = 'Abcdefgh' # truncated to four code units
        dumped = record.dump_data(sample, original)
        assert len(dumped) == len(original)
        assert struct.unpack_from('<I', dumped, 4)[0] == 1
        assert dumped[16:24] == 'Abcd'.encode('utf-16-le')
        # bytes no processor claims are untouched
        for gap in (0, 2, 3, 24, 31):
            assert dumped[gap] == original[gap]

    def test_short_payload(self):
        with pytest.raises(TruncatedError):
            _SampleRecord().load_data(_Sample(), bytes(23))

    def test_out_of_range_value(self):
        record = _SampleRecord()
        sample = _Sample()
        record.load_data(sample, _payload())
        sample.small = 256
        with pytest.raises(ArgumentError):
            record.dump_data(sample, _payload())
        sample.small = 1
        sample.label = 12
        with pytest.raises(ArgumentError):
            record.dump_data(sample, _payload())
