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
"""BND4 containers, the outer layer of .sl2 saves. A container is a fixed
header, a table of fixed size entry headers and the entries' data. Each entry
region is laid out as checksum (16 bytes), IV (16 bytes) and ciphertext."""
from __future__ import annotations

import os

from .. import bftemp
from ..bolt import check_bounds, decode_utf16_field, deprint, make_backup, \
    replace_with_temp, unpack_int_at, unpack_many_at
from ..crypto import BLOCK_SIZE, DIGEST_SIZE
from ..exception import ArgumentError, BadEntryMagicError, BadMagicError, \
    EntrySizeError, SaveIOError

__author__ = 'Bonfire Team'

class EntryHeader(object):
    """A single entry of a BND4 container, together with views of its raw
    data region."""
    entry_magic = b'\x50\x00\x00\x00\xff\xff\xff\xff'
    # magic, size, <unknown>, data offset, name offset, footer length,
    # <unknown>
    header_fmt = '<8sI4xIII4x'
    header_size = 32
    name_size = 24
    __slots__ = ('index', 'size', 'data_offset', 'name_offset',
                 'footer_length', 'name', '_buffer')

    def __init__(self, index, size, data_offset, name_offset, footer_length,
                 name, buffer):
        self.index = index
        self.size = size
        self.data_offset = data_offset
        self.name_offset = name_offset
        self.footer_length = footer_length
        self.name = name
        self._buffer = buffer

    @property
    def data(self) -> bytes:
        """The whole raw region of this entry."""
        return self._buffer[self.data_offset:self.data_offset + self.size]

    @property
    def checksum(self) -> bytes:
        return self._buffer[self.data_offset:self.data_offset + DIGEST_SIZE]

    @property
    def iv(self) -> bytes:
        iv_start = self.data_offset + DIGEST_SIZE
        return self._buffer[iv_start:iv_start + BLOCK_SIZE]

    @property
    def ciphertext(self) -> bytes:
        return self._buffer[self.data_offset + DIGEST_SIZE + BLOCK_SIZE:
                            self.data_offset + self.size]

    def __repr__(self):
        return f'EntryHeader({self.index}, {self.name!r}, size=' \
               f'{self.size}, data_offset={self.data_offset})'

class Bnd4Container(object):
    """An immutable, decoded BND4 container. Changing an entry produces a new
    container backed by a new buffer."""
    container_magic = b'BND4'
    header_size = 64
    _count_offset = 12
    __slots__ = ('buffer', 'entry_count', 'entries', 'in_name')

    def __init__(self, buffer: bytes, entry_count: int,
                 entries: tuple[EntryHeader, ...], in_name=None):
        self.buffer = buffer
        self.entry_count = entry_count
        self.entries = entries
        self.in_name = in_name

    @classmethod
    def decode(cls, buffer, in_name=None) -> Bnd4Container:
        """Parse buffer into a container. Fails on the first entry header
        that does not carry the fixed magic prefix."""
        buffer = bytes(buffer)
        buf_size = len(buffer)
        check_bounds(buf_size, 0, cls.header_size, 'BND4 header', in_name)
        magic = buffer[:len(cls.container_magic)]
        if magic != cls.container_magic:
            raise BadMagicError(in_name, magic, cls.container_magic)
        entry_count = unpack_int_at(buffer, cls._count_offset)
        entries = []
        for i in range(entry_count):
            hdr_offset = cls.header_size + EntryHeader.header_size * i
            check_bounds(buf_size, hdr_offset, EntryHeader.header_size,
                         f'Entry {i} header', in_name)
            (entry_magic, size, data_offset, name_offset,
             footer_length) = unpack_many_at(buffer, hdr_offset,
                                             EntryHeader.header_fmt)
            if entry_magic != EntryHeader.entry_magic:
                raise BadEntryMagicError(in_name, i, entry_magic)
            check_bounds(buf_size, name_offset, EntryHeader.name_size,
                         f'Entry {i} name', in_name)
            check_bounds(buf_size, data_offset, size, f'Entry {i} data',
                         in_name)
            name = decode_utf16_field(
                buffer[name_offset:name_offset + EntryHeader.name_size])
            entries.append(EntryHeader(i, size, data_offset, name_offset,
                                       footer_length, name, buffer))
        return cls(buffer, entry_count, tuple(entries), in_name)

    from_bytes = decode

    @classmethod
    def load(cls, save_path) -> Bnd4Container:
        """Read and decode the container stored at save_path."""
        try:
            with open(save_path, 'rb') as ins:
                buffer = ins.read()
        except OSError as e:
            err_msg = f'Failed to read {save_path}'
            deprint(err_msg, traceback=True)
            raise SaveIOError(save_path, f'Failed to read: {e}') from e
        return cls.decode(buffer, in_name=save_path)

    def entry(self, index: int) -> EntryHeader:
        if not 0 <= index < self.entry_count:
            raise ArgumentError(f'Entry index {index} out of range (container '
                                f'has {self.entry_count} entries)')
        return self.entries[index]

    def iter_entries(self):
        yield from self.entries

    def with_entry_data(self, index: int, checksum: bytes, iv: bytes,
                        ciphertext: bytes) -> Bnd4Container:
        """Return a new container in which entry index holds checksum, iv and
        ciphertext. The new data must fill the entry region exactly, growing
        or shrinking an entry would corrupt all entries after it."""
        target = self.entry(index)
        new_data = checksum + iv + ciphertext
        if len(checksum) != DIGEST_SIZE or len(new_data) != target.size:
            raise EntrySizeError(self.in_name, index, target.size,
                                 len(new_data))
        new_buffer = bytearray(self.buffer)
        new_buffer[target.data_offset:target.data_offset + target.size] = \
            new_data
        return self.decode(new_buffer, in_name=self.in_name)

    # Output ------------------------------------------------------------------
    def write(self, out_path):
        with open(out_path, 'wb') as out:
            out.write(self.buffer)

    def write_safe(self, out_path=None, backup=False):
        """Writes out this container to the specified path, going through a
        temporary file next to it so that nothing is written to out_path if
        something goes wrong.

        :param out_path: The path to write to. If empty or None, the path
            this container was loaded from is used instead.
        :param backup: If True, copy the current file at out_path to its
            backup path before replacing it."""
        out_path = out_path or self.in_name
        if not out_path:
            raise ArgumentError('No path to write the container to')
        out_path = os.fspath(out_path)
        out_dir = os.path.dirname(os.path.abspath(out_path))
        try:
            with bftemp.TempFile(temp_prefix='bonfire', temp_suffix='.sl2',
                                 base_dir=out_dir) as tmp_path:
                self.write(tmp_path)
                if backup:
                    make_backup(out_path)
                replace_with_temp(tmp_path, out_path)
        except OSError as e:
            deprint(f'Failed to write {out_path}', traceback=True)
            raise SaveIOError(out_path, f'Failed to write: {e}') from e

    def dump_to_log(self, log):
        log.setHeader(f'BND4 container ({self.entry_count} entries)')
        for ent in self.entries:
            log(f'  {ent.index:2d} {ent.name:<14} size={ent.size:<8} '
                f'offset=0x{ent.data_offset:08X}')
