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
"""The slot directory - the reserved entry listing which character slots are
in use and the names of the characters in them."""
from __future__ import annotations

from ..bolt import check_bounds, decode_utf16_field
from ..exception import ArgumentError
from .bnd4_files import Bnd4Container
from .entry_cipher import decrypt_entry

DIRECTORY_INDEX = 10
SLOT_COUNT = 10
_BITMAP_OFFSET = 176
_NAMES_OFFSET = 192
_NAME_STRIDE = 400
_NAME_SIZE = 26

def read_slot_names(directory_payload: bytes, in_name=None) -> dict[int, str]:
    """Map each occupied slot index to its character name. Unoccupied slots
    are simply left out."""
    check_bounds(len(directory_payload), _BITMAP_OFFSET, SLOT_COUNT,
                 'Slot bitmap', in_name)
    bitmap = directory_payload[_BITMAP_OFFSET:_BITMAP_OFFSET + SLOT_COUNT]
    slot_names = {}
    for slot, occupied in enumerate(bitmap):
        if not occupied: continue
        name_start = _NAMES_OFFSET + _NAME_STRIDE * slot
        check_bounds(len(directory_payload), name_start, _NAME_SIZE,
                     f'Slot {slot} name', in_name)
        slot_names[slot] = decode_utf16_field(
            directory_payload[name_start:name_start + _NAME_SIZE])
    return slot_names

def read_occupancy(container: Bnd4Container,
                   verify_checksum=False) -> dict[int, str]:
    """Decrypt the directory entry of container and read its slot table."""
    if container.entry_count <= DIRECTORY_INDEX:
        raise ArgumentError(f'Container has no slot directory (only '
                            f'{container.entry_count} entries)')
    payload = decrypt_entry(container.entry(DIRECTORY_INDEX),
                            verify_checksum=verify_checksum,
                            in_name=container.in_name)
    return read_slot_names(payload, in_name=container.in_name)
