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
"""Provides an abstract class for reading and writing records that are laid
over a larger binary payload at fixed absolute offsets, e.g. the character
stats inside a decrypted save entry. Bytes not claimed by any processor are
never touched."""
from __future__ import annotations

from .bolt import check_bounds, decode_utf16_field, encode_utf16_field, \
    struct_error, structs_cache
from .exception import ArgumentError

__author__ = 'Bonfire Team'

# Internal --------------------------------------------------------------------
_UTF16_PREFIX = 'utf16:'

def _fmt_size(fmt_str: str) -> int:
    if fmt_str.startswith(_UTF16_PREFIX):
        return int(fmt_str[len(_UTF16_PREFIX):])
    return structs_cache[fmt_str].size

# Public ----------------------------------------------------------------------
class AFixedOffsetRecord(object):
    """Abstract base class for fixed offset records. Specify a 'processors'
    class variable to use. Syntax: dict, mapping an attribute name for the
    record to a tuple of a format string (limited to format strings that
    resolve to a single attribute) and the absolute offset of the field
    inside the payload. 'utf16:N' is a special format string that instead
    reads an N byte UTF-16LE field terminated by the first zero code unit.

    All struct formats are little endian - the class variable 'format_prefix'
    is prepended to every format string.

    You can override load_data and dump_data to do other things after or
    before 'processors' has been evaluated, just be sure to call
    super(...).{dump,load}_data(...) when appropriate."""
    format_prefix = '<'
    processors: dict[str, tuple[str, int]] = {}

    @classmethod
    def _iter_fields(cls):
        for attr, (fmt_str, offset) in cls.processors.items():
            if not fmt_str.startswith(_UTF16_PREFIX):
                fmt_str = cls.format_prefix + fmt_str
            yield attr, fmt_str, offset

    @classmethod
    def min_payload_size(cls) -> int:
        """The smallest payload every processor fits into."""
        return max((offset + _fmt_size(fmt_str) for _attr, fmt_str, offset
                    in cls._iter_fields()), default=0)

    @classmethod
    def check_payload(cls, payload, in_name=None):
        check_bounds(len(payload), 0, cls.min_payload_size(),
                     cls.__name__, in_name)

    def load_data(self, component, payload, in_name=None):
        """Loads every processor's field from payload and attaches it to the
        specified component instance."""
        self.check_payload(payload, in_name)
        setter = component.__setattr__
        for attr, fmt_str, offset in self._iter_fields():
            if fmt_str.startswith(_UTF16_PREFIX):
                field_size = _fmt_size(fmt_str)
                read_val = decode_utf16_field(
                    bytes(payload[offset:offset + field_size]))
            else:
                read_val = structs_cache[fmt_str].unpack_from(payload,
                                                              offset)[0]
            setter(attr, read_val)

    def dump_data(self, component, payload, in_name=None) -> bytes:
        """Returns a copy of payload with every processor's field replaced by
        the specified component's value."""
        self.check_payload(payload, in_name)
        out_data = bytearray(payload)
        getter = component.__getattribute__
        for attr, fmt_str, offset in self._iter_fields():
            attr_val = getter(attr)
            if fmt_str.startswith(_UTF16_PREFIX):
                if not isinstance(attr_val, str):
                    raise ArgumentError(f'{attr}: expected a string, got '
                                        f'{attr_val!r}')
                field_size = _fmt_size(fmt_str)
                out_data[offset:offset + field_size] = encode_utf16_field(
                    attr_val, field_size)
                continue
            try:
                structs_cache[fmt_str].pack_into(out_data, offset, attr_val)
            except struct_error as e:
                raise ArgumentError(f'{attr}: cannot store {attr_val!r} as '
                                    f'{fmt_str!r} ({e})') from e
        return bytes(out_data)
