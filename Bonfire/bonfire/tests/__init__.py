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
"""Helpers for building synthetic saves, so that the tests do not need any
real save files."""
import struct

from ..bolt import encode_utf16_field
from ..bosh.entry_cipher import encrypt_payload

CHARACTER_PAYLOAD_SIZE = 0x20000
DIRECTORY_PAYLOAD_SIZE = 0x1000
ENTRY_MAGIC = b'\x50\x00\x00\x00\xff\xff\xff\xff'

def entry_iv(index):
    """A distinct, non-zero IV per entry."""
    return bytes((index * 16 + j) & 0xFF for j in range(16))

def filler_bytes(size, seed=0):
    """Deterministic non-zero-ish bytes, so that untouched gaps are easy to
    tell apart from zeroed ones."""
    return bytes((seed + i * 7) % 251 + 1 for i in range(size))

def make_character_payload(size=CHARACTER_PAYLOAD_SIZE, seed=0, **fields):
    """A slot payload of filler bytes with some fields written at their raw
    offsets - independent of the record code under test."""
    payload = bytearray(filler_bytes(size, seed))
    raw_fields = {
        'health_current': ('<I', 116), 'health_max1': ('<I', 120),
        'health_max2': ('<I', 124), 'stamina2': ('<I', 148),
        'vitality': ('<Q', 160), 'strength': ('<Q', 184),
        'humanity': ('<Q', 224), 'level': ('<I', 240),
        'souls': ('<I', 244), 'soul_state': ('<I', 260),
        'is_male': ('<B', 301), 'hair_color': ('<B', 374),
        'deaths': ('<I', 127448),
    }
    for key, value in fields.items():
        if key == 'name':
            payload[264:264 + 28] = encode_utf16_field(value, 28)
        else:
            fmt, offset = raw_fields[key]
            struct.pack_into(fmt, payload, offset, value)
    return bytes(payload)

def make_directory_payload(slot_names, size=DIRECTORY_PAYLOAD_SIZE):
    """A directory payload marking the slots in slot_names as occupied."""
    payload = bytearray(size)
    for slot, char_name in slot_names.items():
        payload[176 + slot] = 1
        name_start = 192 + 400 * slot
        payload[name_start:name_start + 26] = encode_utf16_field(char_name, 26)
    return bytes(payload)

def make_bnd4(payloads, names=None, ivs=None, count_override=None):
    """Build a BND4 buffer holding payloads, each encrypted the way the game
    stores them."""
    count = len(payloads)
    names = names or [f'USER_DATA{i:03d}' for i in range(count)]
    ivs = ivs or [entry_iv(i) for i in range(count)]
    names_start = 64 + 32 * count
    data_offset = names_start + 24 * count
    headers, name_table, data = [], [], []
    for i, payload in enumerate(payloads):
        enc = encrypt_payload(payload, ivs[i])
        entry_data = enc.checksum + enc.iv + enc.ciphertext
        headers.append(ENTRY_MAGIC + struct.pack('<I4xIII4x', len(entry_data),
            data_offset, names_start + 24 * i, 0))
        name_table.append(encode_utf16_field(names[i], 24))
        data.append(entry_data)
        data_offset += len(entry_data)
    file_header = b'BND4' + bytes(8) + struct.pack(
        '<I', count if count_override is None else count_override)
    file_header = file_header.ljust(64, b'\x00')
    return b''.join([file_header, *headers, *name_table, *data])

def make_sl2(slot_names, stats_by_slot=None):
    """A full save: ten character slots and the slot directory. Occupied
    slots get the fields from stats_by_slot (defaulting to their name)."""
    stats_by_slot = stats_by_slot or {}
    payloads = []
    for slot in range(10):
        fields = dict(stats_by_slot.get(slot, {}))
        if slot in slot_names:
            fields.setdefault('name', slot_names[slot])
        payloads.append(make_character_payload(seed=slot, **fields))
    payloads.append(make_directory_payload(slot_names))
    return make_bnd4(payloads)
