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
"""Entry point of Bonfire. Runs a single mode and reports failures with one
message, leaving no partial output behind."""
from __future__ import annotations

import atexit
import sys

import yaml

from . import barg, bass, bftemp
from .bolt import LogFile, deprint
from .bosh.monolithic_saves import MonolithicSaveCodec
from .bosh.sl2_saves import Sl2Save
from .exception import ArgumentError, BoltError, SaveIOError
from .initialization import init_settings

# Try to use the C version (way faster), if that isn't possible fall back to
# the pure Python version
try:
    from yaml import CSafeDumper as SafeDumper
    from yaml import CSafeLoader as SafeLoader
except ImportError:
    from yaml import SafeDumper, SafeLoader

def load_changes(changes_path) -> dict:
    """Read a YAML mapping of character field names to new values."""
    try:
        with open(changes_path, 'r', encoding='utf-8') as ins:
            changes = yaml.load(ins, Loader=SafeLoader)
    except OSError as e:
        raise SaveIOError(changes_path, f'Failed to read: {e}') from e
    except yaml.YAMLError as e:
        raise BoltError(f'{changes_path}: invalid YAML ({e})') from e
    if not isinstance(changes, dict) or not changes:
        raise BoltError(f'{changes_path}: expected a non-empty mapping of '
                        f'character fields to values')
    return changes

def dump_stats(stats_by_slot, out=None):
    """Write the stats of each slot as a YAML document to out (a path) or to
    standard output."""
    yaml_data = {slot: stats.to_dict() for slot, stats in
                 stats_by_slot.items()}
    if out is None:
        yaml.dump(yaml_data, sys.stdout, Dumper=SafeDumper,
                  allow_unicode=True, sort_keys=False)
        return
    try:
        with open(out, 'w', encoding='utf-8') as outs:
            yaml.dump(yaml_data, outs, Dumper=SafeDumper,
                      allow_unicode=True, sort_keys=False)
    except OSError as e:
        raise SaveIOError(out, f'Failed to write: {e}') from e

# Modes -----------------------------------------------------------------------
def _list(opts):
    save = Sl2Save(opts.save).load()
    save.dump_to_log(LogFile(sys.stdout), with_stats=not opts.names_only,
                     with_entries=opts.entries)

def _dump(opts):
    save = Sl2Save(opts.save).load()
    slots = [opts.slot] if opts.slot is not None else sorted(
        save.occupancy())
    dump_stats({s: save.read_character(s) for s in slots}, opts.output)

def _edit(opts):
    changes = load_changes(opts.changes)
    save = Sl2Save(opts.save).load()
    slots = None if opts.slot is None else [opts.slot]
    edited = save.edit_characters(changes, slots)
    if not edited:
        raise ArgumentError(f'{opts.save}: no occupied slots to edit')
    save.write_save_safe(opts.output, backup=opts.backup)
    print(f'Edited {len(edited)} slot(s), wrote {opts.output or opts.save}')

def _extract(opts):
    save = Sl2Save(opts.save).load()
    written = save.extract_entries(opts.out_dir)
    print(f'Extracted {len(written)} entries to {opts.out_dir}')

def _unpack(opts):
    written = MonolithicSaveCodec.unpack_to_dir(opts.save, opts.out_dir)
    print(f'Unpacked {len(written)} slots to {opts.out_dir}')

def _pack(opts):
    backup = opts.backup
    if backup is None:
        backup = bass.inisettings.get('BackupSaves', True)
    MonolithicSaveCodec.pack_from_dir(opts.in_dir, opts.save, backup=backup)
    print(f'Packed {MonolithicSaveCodec.slot_count} slots into {opts.save}')

_modes = {
    'list': _list,
    'dump': _dump,
    'edit': _edit,
    'extract': _extract,
    'unpack': _unpack,
    'pack': _pack,
}

def main(argv=None) -> int:
    """Run Bonfire with the specified arguments (sys.argv if None). Returns
    the process exit code."""
    opts = barg.parse(argv)
    atexit.register(bftemp.cleanup_temp)
    try:
        init_settings(opts.ini_path)
        _modes[opts.mode](opts)
    except ArgumentError as e:
        print(f'bonfire: error: {e}', file=sys.stderr)
        return 2
    except BoltError as e:
        print(f'bonfire: error: {e}', file=sys.stderr)
        return 1
    except OSError as e:
        deprint('Unexpected I/O error', traceback=True)
        print(f'bonfire: error: {e}', file=sys.stderr)
        return 1
    return 0
