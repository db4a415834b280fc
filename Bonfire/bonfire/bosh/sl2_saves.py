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
""".sl2 saves - ties together the BND4 container, the entry cipher, the slot
directory and the character records."""
from __future__ import annotations

import os

from .. import bass, bftemp
from ..bolt import deprint, move_staged_files
from ..exception import ArgumentError, FormatError, SaveIOError, \
    StateError
from .bnd4_files import Bnd4Container
from .character_records import CharacterStats, decode_stats, encode_stats
from .entry_cipher import decrypt_entry, reencrypt_entry
from .slot_index import SLOT_COUNT, read_occupancy

__author__ = 'Bonfire Team'

class Sl2Save(object):
    """A Dark Souls Remastered save. All edits happen in memory, producing a
    new container each time, until write_save_safe is called."""
    __slots__ = ('abs_path', 'verify_checksums', '_container')

    def __init__(self, abs_path, verify_checksums=None):
        self.abs_path = os.fspath(abs_path)
        if verify_checksums is None:
            verify_checksums = bass.inisettings.get('VerifyChecksums', False)
        self.verify_checksums = verify_checksums
        self._container = None

    def load(self) -> Sl2Save:
        self._container = Bnd4Container.load(self.abs_path)
        return self

    @property
    def container(self) -> Bnd4Container:
        if self._container is None:
            raise StateError(f'{self.abs_path} has not been loaded yet')
        return self._container

    def _decrypt(self, index: int) -> bytes:
        return decrypt_entry(self.container.entry(index),
                             verify_checksum=self.verify_checksums,
                             in_name=self.abs_path)

    @staticmethod
    def _check_slot(slot: int):
        if not isinstance(slot, int) or not 0 <= slot < SLOT_COUNT:
            raise ArgumentError(f'Character slot must be between 0 and '
                                f'{SLOT_COUNT - 1}, got {slot!r}')

    def occupancy(self) -> dict[int, str]:
        """Occupied slot indices and their character names."""
        return read_occupancy(self.container,
                              verify_checksum=self.verify_checksums)

    def read_character(self, slot: int) -> CharacterStats:
        self._check_slot(slot)
        return decode_stats(self._decrypt(slot), in_name=self.abs_path)

    def write_character(self, slot: int, stats: CharacterStats):
        """Store stats in slot, keeping every byte the record does not cover.
        Only the in-memory container changes."""
        self._check_slot(slot)
        new_payload = encode_stats(stats, self._decrypt(slot),
                                   in_name=self.abs_path)
        self._container = reencrypt_entry(self.container, slot, new_payload)

    def edit_characters(self, overrides: dict,
                        slots=None) -> dict[int, CharacterStats]:
        """Apply overrides to every slot in slots, or to every occupied slot
        if slots is None. Explicit slots must all be occupied. Returns the new
        stats per edited slot."""
        occupied = self.occupancy()
        if slots is None:
            slots = sorted(occupied)
        else:
            slots = list(slots)
            for slot in slots:
                self._check_slot(slot)
                if slot not in occupied:
                    raise ArgumentError(f'Character slot {slot} is empty')
        edited = {}
        for slot in slots:
            new_stats = self.read_character(slot).updated(overrides)
            self.write_character(slot, new_stats)
            deprint(f'Edited slot {slot} ({new_stats.name})')
            edited[slot] = new_stats
        return edited

    def write_save_safe(self, out_path=None, backup=None):
        """Write the current container to out_path (or back to the path it
        was loaded from) without ever leaving a partial file behind."""
        if backup is None:
            backup = bass.inisettings.get('BackupSaves', True)
        self.container.write_safe(out_path or self.abs_path, backup=backup)

    def _entry_file_names(self) -> list[str]:
        """One unique, plain <name>.bin per entry. Names that are empty,
        contain a path or repeat an earlier name fall back to
        entry<index>.bin."""
        file_names = []
        used = set()
        for ent in self.container.iter_entries():
            ent_name = ent.name
            if (not ent_name or ent_name in ('.', '..') or '\0' in ent_name
                    or any(sep and sep in ent_name for sep in (
                        '/', '\\', os.sep, os.altsep))
                    or f'{ent_name}.bin'.lower() in used):
                ent_name = f'entry{ent.index:02d}'
            fname = f'{ent_name}.bin'
            if fname.lower() in used:
                raise FormatError(self.abs_path, f'Entry {ent.index}: file '
                                  f'name {fname!r} is already taken')
            used.add(fname.lower())
            file_names.append(fname)
        return file_names

    def extract_entries(self, out_dir) -> list[str]:
        """Write every decrypted entry payload to out_dir as <name>.bin. If
        any entry fails to decrypt, nothing is written."""
        file_names = self._entry_file_names()
        payloads = [self._decrypt(ent.index)
                    for ent in self.container.iter_entries()]
        try:
            os.makedirs(out_dir, exist_ok=True)
            with bftemp.TempDir(temp_prefix='bonfire',
                                base_dir=out_dir) as staging:
                for fname, payload in zip(file_names, payloads):
                    with open(os.path.join(staging, fname), 'wb') as out:
                        out.write(payload)
                written = move_staged_files(staging, out_dir, file_names)
        except OSError as e:
            deprint(f'Failed to extract entries to {out_dir}', traceback=True)
            raise SaveIOError(out_dir, f'Failed to write: {e}') from e
        return written

    def dump_to_log(self, log, with_stats=True, with_entries=False):
        if with_entries:
            self.container.dump_to_log(log)
        occupied = self.occupancy()
        log.setHeader(f'{os.path.basename(self.abs_path)}: '
                      f'{len(occupied)} occupied slot(s)', writeNow=True)
        for slot, char_name in occupied.items():
            log.setHeader(f'Slot {slot}: {char_name}')
            if with_stats:
                self.read_character(slot).dump_to_log(log)
            else:
                log(f'  {char_name}')
