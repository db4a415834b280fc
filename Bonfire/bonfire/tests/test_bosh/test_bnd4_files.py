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
import io
import os

import pytest

from .. import make_bnd4
from ...bolt import LogFile
from ...bosh.bnd4_files import Bnd4Container
from ...exception import ArgumentError, BadEntryMagicError, BadMagicError, \
    EntrySizeError, SaveIOError, TruncatedError

_payloads = [b'first entry', b'x' * 40, b'']

@pytest.fixture()
def bnd4_bytes():
    return make_bnd4(_payloads, names=['USER_DATA000', 'USER_DATA001',
                                       'SLOT_DIRECTORY'])

class TestDecode(object):
    def test_entries(self, bnd4_bytes):
        container = Bnd4Container.decode(bnd4_bytes)
        assert container.entry_count == 3
        assert [e.index for e in container.entries] == [0, 1, 2]
        assert [e.name for e in container.entries] == [
            'USER_DATA000', 'USER_DATA001', 'SLOT_DIRECTORY']
        first = container.entry(0)
        assert first.data_offset == 64 + 32 * 3 + 24 * 3
        assert first.name_offset == 64 + 32 * 3
        assert first.footer_length == 0
        assert len(first.checksum) == 16
        assert len(first.iv) == 16
        assert first.checksum + first.iv + first.ciphertext == first.data
        assert len(first.data) == first.size
        second = container.entry(1)
        assert second.data_offset == first.data_offset + first.size

    def test_from_bytes_alias(self, bnd4_bytes):
        assert Bnd4Container.from_bytes(bnd4_bytes).entry_count == 3

    def test_bad_magic(self, bnd4_bytes):
        with pytest.raises(BadMagicError):
            Bnd4Container.decode(b'BND3' + bnd4_bytes[4:])

    def test_bad_entry_magic_aborts(self, bnd4_bytes):
        corrupted = bytearray(bnd4_bytes)
        # break entry 1 - entry 2 is fine but must never be reached
        corrupted[64 + 32] = 0x51
        with pytest.raises(BadEntryMagicError) as exc_info:
            Bnd4Container.decode(bytes(corrupted))
        assert exc_info.value.entry_index == 1

    def test_truncated(self, bnd4_bytes):
        with pytest.raises(TruncatedError):
            Bnd4Container.decode(bnd4_bytes[:-1])
        with pytest.raises(TruncatedError):
            Bnd4Container.decode(bnd4_bytes[:40])

    def test_entry_count_past_table(self):
        # the second "header" is really the name table
        with pytest.raises(BadEntryMagicError) as exc_info:
            Bnd4Container.decode(make_bnd4([b'a'], count_override=50))
        assert exc_info.value.entry_index == 1

    def test_entry_out_of_range(self, bnd4_bytes):
        container = Bnd4Container.decode(bnd4_bytes)
        with pytest.raises(ArgumentError):
            container.entry(3)

class TestWithEntryData(object):
    def test_new_container(self, bnd4_bytes):
        container = Bnd4Container.decode(bnd4_bytes)
        target = container.entry(1)
        new_ct = bytes(len(target.ciphertext))
        changed = container.with_entry_data(1, b'\x01' * 16, target.iv,
                                            new_ct)
        assert changed is not container
        assert changed.entry(1).checksum == b'\x01' * 16
        assert changed.entry(1).ciphertext == new_ct
        assert changed.entry(0).data == container.entry(0).data
        assert changed.entry(2).data == container.entry(2).data
        assert len(changed.buffer) == len(container.buffer)
        # the original is left alone
        assert container.buffer == bnd4_bytes

    def test_size_must_match(self, bnd4_bytes):
        container = Bnd4Container.decode(bnd4_bytes)
        target = container.entry(0)
        with pytest.raises(EntrySizeError):
            container.with_entry_data(0, target.checksum, target.iv,
                                      target.ciphertext + bytes(16))
        with pytest.raises(EntrySizeError):
            container.with_entry_data(0, target.checksum[:8], target.iv,
                                      target.ciphertext + bytes(8))

class TestFiles(object):
    def test_load_missing(self, tmp_path):
        with pytest.raises(SaveIOError):
            Bnd4Container.load(tmp_path / 'missing.sl2')

    def test_write_safe(self, tmp_path, bnd4_bytes):
        save_path = tmp_path / 'DRAKS0005.sl2'
        save_path.write_bytes(b'old contents')
        container = Bnd4Container.decode(bnd4_bytes)
        container.write_safe(save_path, backup=True)
        assert save_path.read_bytes() == bnd4_bytes
        assert (tmp_path / 'DRAKS0005.sl2.bak').read_bytes() == \
            b'old contents'
        # no temporary files left next to the save
        assert sorted(os.listdir(tmp_path)) == ['DRAKS0005.sl2',
                                                'DRAKS0005.sl2.bak']

    def test_write_safe_bad_dir(self, tmp_path, bnd4_bytes):
        container = Bnd4Container.decode(bnd4_bytes)
        with pytest.raises(SaveIOError):
            container.write_safe(tmp_path / 'missing' / 'out.sl2')

    def test_write_safe_needs_a_path(self, tmp_path, bnd4_bytes):
        # decoded from memory, so there is no path to fall back to
        container = Bnd4Container.decode(bnd4_bytes)
        with pytest.raises(ArgumentError):
            container.write_safe()
        with pytest.raises(ArgumentError):
            container.write_safe('')
        assert os.listdir(tmp_path) == []

def test_dump_to_log(bnd4_bytes):
    test_log = LogFile(io.StringIO())
    Bnd4Container.decode(bnd4_bytes).dump_to_log(test_log)
    dumped = test_log.out.getvalue()
    assert dumped.startswith('== BND4 container (3 entries)\n')
    assert 'SLOT_DIRECTORY' in dumped
    assert dumped.count('\n') == 4
