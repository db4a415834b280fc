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
"""Monolithic saves - a fixed size file holding a fixed array of encrypted
slots. Each slot is a 16 byte IV followed by block aligned ciphertext, with no
length prefix, no padding and no checksum. This has nothing in common with the
BND4 layout except for the cipher."""
from __future__ import annotations

import os

from .. import bftemp
from ..bolt import deprint, make_backup, move_staged_files, \
    replace_with_temp
from ..crypto import BLOCK_SIZE, aes_cbc_decrypt, aes_cbc_encrypt
from ..exception import FormatError, MissingArtifactError, SaveIOError

__author__ = 'Bonfire Team'

class MonolithicSaveCodec(object):
    """Splits and joins monolithic saves. The layout constants are class
    variables, override them in a subclass for a different fixed layout."""
    slot_count = 11
    base_offset = 0x40
    plaintext_size = 0x60010
    slot_size = BLOCK_SIZE + plaintext_size # the stride between slots
    artifact_fmt = 'USER_DATA{:03d}'

    @classmethod
    def total_size(cls) -> int:
        return cls.base_offset + cls.slot_count * cls.slot_size

    @classmethod
    def _slot_offset(cls, slot: int) -> int:
        return cls.base_offset + cls.slot_size * slot

    @classmethod
    def unpack(cls, buffer, in_name=None) -> list[bytes]:
        """Decrypt every slot of buffer, which must be exactly total_size()
        bytes long."""
        if len(buffer) != cls.total_size():
            raise FormatError(in_name, f'Expected a monolithic save of '
                f'{cls.total_size()} bytes, got {len(buffer)}')
        slots = []
        for slot in range(cls.slot_count):
            slot_start = cls._slot_offset(slot)
            iv = bytes(buffer[slot_start:slot_start + BLOCK_SIZE])
            ciphertext = bytes(buffer[slot_start + BLOCK_SIZE:
                                      slot_start + cls.slot_size])
            slots.append(aes_cbc_decrypt(ciphertext, iv, unpad=False,
                                         in_name=in_name))
        return slots

    @classmethod
    def pack(cls, slots, in_name=None) -> bytes:
        """Encrypt every slot with an all-zero IV and lay them out in a fresh
        zero-filled buffer. All slot_count slots are required."""
        slots = list(slots)
        out_data = bytearray(cls.total_size())
        zero_iv = bytes(BLOCK_SIZE)
        for slot in range(cls.slot_count):
            plaintext = slots[slot] if slot < len(slots) else None
            if plaintext is None:
                raise MissingArtifactError(in_name, slot)
            if len(plaintext) != cls.plaintext_size:
                raise FormatError(in_name, f'Slot {slot}: expected '
                    f'{cls.plaintext_size} bytes, got {len(plaintext)}')
            slot_start = cls._slot_offset(slot)
            out_data[slot_start:slot_start + cls.slot_size] = zero_iv + \
                aes_cbc_encrypt(bytes(plaintext), zero_iv, pad=False,
                                in_name=in_name)
        return bytes(out_data)

    # File front ends ---------------------------------------------------------
    @classmethod
    def artifact_name(cls, slot: int) -> str:
        return cls.artifact_fmt.format(slot)

    @classmethod
    def unpack_to_dir(cls, save_path, out_dir) -> list[str]:
        """Decrypt the monolithic save at save_path and write one artifact
        per slot into out_dir. Nothing is written unless every slot could be
        decrypted. Returns the written paths."""
        try:
            with open(save_path, 'rb') as ins:
                buffer = ins.read()
        except OSError as e:
            deprint(f'Failed to read {save_path}', traceback=True)
            raise SaveIOError(save_path, f'Failed to read: {e}') from e
        slots = cls.unpack(buffer, in_name=save_path)
        art_names = [cls.artifact_name(slot) for slot in range(len(slots))]
        try:
            os.makedirs(out_dir, exist_ok=True)
            # Stage everything next to the destination, then move it over
            with bftemp.TempDir(temp_prefix='bonfire',
                                base_dir=out_dir) as staging:
                for art_name, plaintext in zip(art_names, slots):
                    with open(os.path.join(staging, art_name), 'wb') as out:
                        out.write(plaintext)
                written = move_staged_files(staging, out_dir, art_names)
        except OSError as e:
            deprint(f'Failed to write slots to {out_dir}', traceback=True)
            raise SaveIOError(out_dir, f'Failed to write: {e}') from e
        return written

    @classmethod
    def pack_from_dir(cls, in_dir, save_path, backup=False):
        """Read every slot artifact from in_dir and write the packed
        monolithic save to save_path via a temporary file."""
        slots = []
        for slot in range(cls.slot_count):
            art_path = os.path.join(in_dir, cls.artifact_name(slot))
            try:
                with open(art_path, 'rb') as ins:
                    slots.append(ins.read())
            except FileNotFoundError as e:
                raise MissingArtifactError(art_path, slot) from e
            except OSError as e:
                deprint(f'Failed to read {art_path}', traceback=True)
                raise SaveIOError(art_path, f'Failed to read: {e}') from e
        packed = cls.pack(slots, in_name=in_dir)
        save_path = os.fspath(save_path)
        try:
            with bftemp.TempFile(temp_prefix='bonfire', base_dir=
                    os.path.dirname(os.path.abspath(save_path))) as tmp_path:
                with open(tmp_path, 'wb') as out:
                    out.write(packed)
                if backup:
                    make_backup(save_path)
                replace_with_temp(tmp_path, save_path)
        except OSError as e:
            deprint(f'Failed to write {save_path}', traceback=True)
            raise SaveIOError(save_path, f'Failed to write: {e}') from e
