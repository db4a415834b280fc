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
"""Character records - the player character stats stored at fixed offsets
inside a decrypted save slot entry."""
from __future__ import annotations

from dataclasses import asdict, dataclass, fields, replace
from enum import Enum

from ..binary import AFixedOffsetRecord
from ..exception import ArgumentError

__author__ = 'Bonfire Team'

NAME_SIZE = 28 # 14 UTF-16 code units
DEATHS_OFFSET = 127448

class SoulState(Enum):
    """Whether the character is human or hollow. Everything else the game may
    store there is UNKNOWN."""
    HUMAN = 0
    HOLLOW = 8
    UNKNOWN = None

    @classmethod
    def from_raw(cls, raw_value: int) -> SoulState:
        if raw_value == cls.HUMAN.value:
            return cls.HUMAN
        if raw_value == cls.HOLLOW.value:
            return cls.HOLLOW
        return cls.UNKNOWN

# Written for UNKNOWN when the kept raw value is a known state
UNKNOWN_SOUL_STATE_RAW = 4

@dataclass(slots=True, kw_only=True)
class CharacterStats:
    """A fully populated player character record."""
    health_current: int = 0
    health_max1: int = 0
    health_max2: int = 0
    stamina2: int = 0
    stamina3: int = 0
    vitality: int = 0
    attunement: int = 0
    endurance: int = 0
    strength: int = 0
    dexterity: int = 0
    intelligence: int = 0
    faith: int = 0
    humanity: int = 0
    resistance: int = 0
    level: int = 0
    souls: int = 0
    earned_souls: int = 0
    soul_state: SoulState = SoulState.HUMAN
    # the raw integer behind soul_state, used to write UNKNOWN back as is
    soul_state_raw: int = 0
    name: str = ''
    is_male: bool = False
    # the raw byte behind is_male, written back as is while is_male agrees
    is_male_raw: int = 0
    character_class: int = 0
    body_type: int = 0
    starting_gift: int = 0
    poison_resistance: int = 0
    bleeding_resistance: int = 0
    poison_resistance2: int = 0
    damnation_resistance: int = 0
    face: int = 0
    hair: int = 0
    hair_color: int = 0
    deaths: int = 0

    # Shorthands accepted by updated(), mapping to the real fields they set
    _aliases = {
        'health_max': ('health_current', 'health_max1', 'health_max2'),
    }

    def to_dict(self) -> dict:
        """Plain dict version of this record, e.g. for YAML dumps. The soul
        state is stored by name."""
        stats_dict = asdict(self)
        stats_dict['soul_state'] = self.soul_state.name.lower()
        return stats_dict

    def updated(self, overrides: dict) -> CharacterStats:
        """Return a copy of this record with the fields in overrides
        replaced. Soul states may be given by name."""
        known = {f.name for f in fields(self)}
        changes = {}
        for key, value in overrides.items():
            targets = self._aliases.get(key, (key,))
            for target in targets:
                if target not in known:
                    raise ArgumentError(f'Unknown character field: {key!r}')
                changes[target] = value
        if 'soul_state' in changes:
            soul_state = changes['soul_state']
            if isinstance(soul_state, str):
                try:
                    soul_state = SoulState[soul_state.upper()]
                except KeyError:
                    raise ArgumentError(f'Unknown soul state: '
                                        f'{soul_state!r}') from None
            elif not isinstance(soul_state, SoulState):
                raise ArgumentError(f'Unknown soul state: {soul_state!r}')
            changes['soul_state'] = soul_state
            if soul_state is not SoulState.UNKNOWN:
                changes.setdefault('soul_state_raw', soul_state.value)
        if 'is_male' in changes:
            changes['is_male'] = is_male = bool(changes['is_male'])
            changes.setdefault('is_male_raw', int(is_male))
        return replace(self, **changes)

    def dump_to_log(self, log):
        for key, value in self.to_dict().items():
            log(f'  {key:<22} {value}')

class CharacterRecord(AFixedOffsetRecord):
    """Maps CharacterStats onto a decrypted slot payload. Offsets are
    absolute, deaths lives far away from the main block."""
    processors = {
        'health_current':       ('I', 116),
        'health_max1':          ('I', 120),
        'health_max2':          ('I', 124),
        'stamina2':             ('I', 148),
        'stamina3':             ('Q', 152),
        'vitality':             ('Q', 160),
        'attunement':           ('Q', 168),
        'endurance':            ('Q', 176),
        'strength':             ('Q', 184),
        'dexterity':            ('Q', 192),
        'intelligence':         ('Q', 200),
        'faith':                ('Q', 208),
        'humanity':             ('Q', 224),
        'resistance':           ('Q', 232),
        'level':                ('I', 240),
        'souls':                ('I', 244),
        'earned_souls':         ('Q', 248),
        'soul_state_raw':       ('I', 260),
        'name':                 (f'utf16:{NAME_SIZE}', 264),
        'is_male_raw':          ('B', 301),
        'character_class':      ('B', 302),
        'body_type':            ('B', 303),
        'starting_gift':        ('B', 304),
        'poison_resistance':    ('B', 368),
        'bleeding_resistance':  ('B', 369),
        'poison_resistance2':   ('B', 370),
        'damnation_resistance': ('B', 371),
        'face':                 ('B', 372),
        'hair':                 ('B', 373),
        'hair_color':           ('B', 374),
        'deaths':               ('I', DEATHS_OFFSET),
    }

    def load_data(self, component, payload, in_name=None):
        super(CharacterRecord, self).load_data(component, payload, in_name)
        component.soul_state = SoulState.from_raw(component.soul_state_raw)
        component.is_male = component.is_male_raw == 1

    def dump_data(self, component, payload, in_name=None) -> bytes:
        # Write the enum, falling back to the kept raw value for UNKNOWN
        if component.soul_state is SoulState.UNKNOWN:
            raw_state = component.soul_state_raw
            if SoulState.from_raw(raw_state) is not SoulState.UNKNOWN:
                raw_state = UNKNOWN_SOUL_STATE_RAW
        else:
            raw_state = component.soul_state.value
        # Only a changed flag replaces the stored byte
        raw_male = component.is_male_raw
        if bool(component.is_male) != (raw_male == 1):
            raw_male = int(bool(component.is_male))
        return super(CharacterRecord, self).dump_data(
            replace(component, soul_state_raw=raw_state,
                    is_male_raw=raw_male), payload, in_name)

_character_record = CharacterRecord()

def decode_stats(payload: bytes, in_name=None) -> CharacterStats:
    """Read every character field out of a decrypted slot payload."""
    stats = CharacterStats()
    _character_record.load_data(stats, payload, in_name)
    return stats

def encode_stats(stats: CharacterStats, payload: bytes,
                 in_name=None) -> bytes:
    """Return a copy of payload with every character field set from stats.
    All other bytes are left as they were."""
    return _character_record.dump_data(stats, payload, in_name)
