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
"""This module parses the command line that was used to start Bonfire."""

import argparse

from . import bass

def _slot(raw_value):
    try:
        slot = int(raw_value)
    except ValueError:
        raise argparse.ArgumentTypeError(
            f'invalid slot: {raw_value!r}') from None
    if not 0 <= slot <= 9:
        raise argparse.ArgumentTypeError(
            f'slot must be between 0 and 9, got {slot}')
    return slot

def make_parser():
    """Helper function to define commandline arguments"""
    parser = argparse.ArgumentParser(prog='bonfire',
        description='Read and edit Dark Souls Remastered save files.')
    parser.add_argument('--version', action='version',
                        version=f'%(prog)s {bass.AppVersion}')
    parser.add_argument('--ini', dest='ini_path', default=None,
                        help='Read settings from this ini file instead of '
                             'bonfire.ini in the working directory.')
    modes = parser.add_subparsers(dest='mode', metavar='MODE')
    modes.required = True

    def arg(mode_parser, *names, h, **kwargs):
        mode_parser.add_argument(*names, help=h, **kwargs)

    ### Inspection modes ###
    list_mode = modes.add_parser('list', help='List the occupied slots and '
                                              'their characters.')
    arg(list_mode, 'save', h='The .sl2 save to read.')
    arg(list_mode, '--names-only', dest='names_only', action='store_true',
        h='Only print slot names, not the character stats.')
    arg(list_mode, '--entries', dest='entries', action='store_true',
        h='Also print the entry table of the container.')
    dump_mode = modes.add_parser('dump', help='Write character stats as '
                                              'YAML.')
    arg(dump_mode, 'save', h='The .sl2 save to read.')
    arg(dump_mode, '--slot', type=_slot, default=None,
        h='Only dump this slot (0-9). Defaults to all occupied slots.')
    arg(dump_mode, '-o', '--output', dest='output', default=None,
        h='The YAML file to write. Defaults to standard output.')
    extract_mode = modes.add_parser('extract', help='Keep the decrypted '
        'entries of a save on disk.')
    arg(extract_mode, 'save', h='The .sl2 save to read.')
    arg(extract_mode, 'out_dir', h='The directory to write the entries to.')

    ### Editing modes ###
    edit_mode = modes.add_parser('edit', help='Apply character field '
                                              'changes from a YAML file.')
    arg(edit_mode, 'save', h='The .sl2 save to edit.')
    arg(edit_mode, 'changes', h='YAML mapping of field names to new values. '
        'health_max sets the current and both maximum health fields.')
    arg(edit_mode, '--slot', type=_slot, default=None,
        h='Only edit this slot (0-9). Defaults to all occupied slots.')
    arg(edit_mode, '-o', '--output', dest='output', default=None,
        h='Write the edited save here instead of overwriting the input.')
    arg(edit_mode, '--no-backup', dest='backup', action='store_false',
        default=None, h='Do not keep a .bak copy of the overwritten file.')

    ### Monolithic saves ###
    unpack_mode = modes.add_parser('unpack', help='Split a monolithic save '
                                                  'into decrypted slots.')
    arg(unpack_mode, 'save', h='The monolithic save to read.')
    arg(unpack_mode, 'out_dir', h='The directory to write the slots to.')
    pack_mode = modes.add_parser('pack', help='Join decrypted slots back into '
                                              'a monolithic save.')
    arg(pack_mode, 'in_dir', h='The directory holding USER_DATA000 to '
                               'USER_DATA010.')
    arg(pack_mode, 'save', h='The monolithic save to write.')
    arg(pack_mode, '--no-backup', dest='backup', action='store_false',
        default=None, h='Do not keep a .bak copy of the overwritten file.')
    return parser

def parse(argv=None):
    return make_parser().parse_args(argv)
