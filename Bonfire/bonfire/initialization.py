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
"""Functions for initializing Bonfire's settings on boot. For now reads the
optional bonfire.ini into bass.inisettings."""
from __future__ import annotations

import os
from configparser import ConfigParser, MissingSectionHeaderError

from . import bass
from .bolt import deprint
from .exception import BoltError

DEFAULT_INI = 'bonfire.ini'

def _bonfire_ini_parser(ini_path) -> ConfigParser | None:
    ini_parser = None
    if ini_path is not None and os.path.exists(ini_path):
        ini_parser = ConfigParser()
        # bonfire.ini is case-sensitive about its values, not its keys
        try:
            ini_parser.read(ini_path, encoding='utf-8')
        except MissingSectionHeaderError as e:
            raise BoltError(f'{ini_path}: not a valid ini file, missing the '
                            f'[General] section header') from e
    return ini_parser

def _parse_value(ini_key, raw_value, default):
    """Parse raw_value according to the type prefix of ini_key. Returns the
    parsed value, or the default if parsing failed."""
    match ini_key[:1]:
        case 'b':
            lowered = raw_value.strip().lower()
            if lowered in ('1', 'true', 'yes', 'on'):
                return True
            if lowered in ('0', 'false', 'no', 'off'):
                return False
        case 'i':
            try:
                return int(raw_value.strip())
            except ValueError:
                pass
        case _:
            return raw_value.strip()
    deprint(f'bonfire.ini: ignoring malformed value {raw_value!r} for '
            f'{ini_key}, using {default!r}')
    return default

def init_settings(ini_path=None) -> dict:
    """Reset bass.inisettings to the defaults and then apply the [General]
    section of the specified ini file (bonfire.ini in the working directory
    if None). A missing file simply leaves the defaults in place."""
    bass.inisettings.clear()
    bass.inisettings.update(bass.inisettings_defaults)
    ini_path = ini_path or DEFAULT_INI
    ini_parser = _bonfire_ini_parser(ini_path)
    if ini_parser is None:
        return bass.inisettings
    if not ini_parser.has_section('General'):
        deprint(f'{ini_path} has no [General] section')
        return bass.inisettings
    # ConfigParser lowercases keys - match them back to our defaults
    lower_defaults = {k.lower(): k for k in bass.inisettings_defaults}
    for ini_key, raw_value in ini_parser.items('General'):
        if len(ini_key) < 2 or ini_key[0] not in 'sbi':
            # No type prefix, keep it around as a plain string
            bass.inisettings[ini_key] = raw_value
            continue
        key = lower_defaults.get(ini_key[1:], ini_key[1:])
        default = bass.inisettings_defaults.get(key)
        value = _parse_value(ini_key, raw_value, default)
        if default is not None and type(value) is not type(default):
            deprint(f'bonfire.ini: {ini_key} has the wrong type prefix, '
                    f'using {default!r}')
            value = default
        bass.inisettings[key] = value
    return bass.inisettings
