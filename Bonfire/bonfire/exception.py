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
"""This module contains all custom exceptions for Bonfire."""

# NO LOCAL IMPORTS! This has to be importable from any module/package.

class BoltError(Exception):
    """Generic error with a string message."""
    def __init__(self, message):
        self.message = message
    def __str__(self):
        return self.message

# Code errors -----------------------------------------------------------------
class ArgumentError(BoltError):
    """Coding Error: Argument out of allowed range of values."""
    def __init__(self, message='Argument is out of allowed ranged of values.'):
        super(ArgumentError, self).__init__(message)

class StateError(BoltError):
    """Coding Error: Object used before it was set up."""
    def __init__(self, message='Object is not in a usable state.'):
        super(StateError, self).__init__(message)

# File exceptions -------------------------------------------------------------
class FileError(BoltError):
    """An error that occurred while handling a file."""
    def __init__(self, in_name, message):
        ## type: (Union[os.PathLike, str], str) -> None
        super(FileError, self).__init__(message)
        self._in_name = (in_name and '%s' % in_name) or 'Unknown File'

    def __str__(self):
        return f'{self._in_name}: {self.message}'

class SaveIOError(FileError):
    """A save or artifact could not be read or written."""
    pass

class SaveFileError(FileError):
    """Save File Error: File is corrupted."""
    pass

# Format errors ---------------------------------------------------------------
class FormatError(SaveFileError):
    """The bytes do not follow the expected layout."""
    pass

class BadMagicError(FormatError):
    """Format Error: The container does not start with the right tag."""
    def __init__(self, in_name, actual_magic, expected_magic):
        super(BadMagicError, self).__init__(in_name,
            f'Magic wrong: {actual_magic!r} (expected {expected_magic!r})')

class BadEntryMagicError(FormatError):
    """Format Error: An entry header does not start with the fixed prefix."""
    def __init__(self, in_name, entry_index, actual_magic):
        self.entry_index = entry_index
        super(BadEntryMagicError, self).__init__(in_name,
            f'Entry {entry_index}: bad header magic {actual_magic.hex(" ")}')

class TruncatedError(FormatError):
    """Format Error: Attempt to read outside of buffer."""
    def __init__(self, in_name, debug_str, try_pos, max_pos):
        message = f'{debug_str}: Attempted to read past ({try_pos}) end ' \
                  f'({max_pos}) of buffer.'
        super(TruncatedError, self).__init__(in_name, message)

class EntrySizeError(FormatError):
    """Format Error: Re-encrypted entry data would not fit its slot."""
    def __init__(self, in_name, entry_index, expected_size, actual_size):
        self.entry_index = entry_index
        message = f'Entry {entry_index}: Expected {expected_size} bytes of ' \
                  f'entry data, but got {actual_size}'
        super(EntrySizeError, self).__init__(in_name, message)

class MissingArtifactError(FormatError):
    """Format Error: A required slot artifact is absent."""
    def __init__(self, in_name, slot_index):
        self.slot_index = slot_index
        super(MissingArtifactError, self).__init__(in_name,
            f'Missing required artifact for slot {slot_index}')

# Crypto errors ---------------------------------------------------------------
class CryptoError(SaveFileError):
    """Decryption or encryption failed."""
    pass

class PaddingInvalidError(CryptoError):
    """Crypto Error: The decrypted data carries a malformed pad."""
    def __init__(self, in_name, message='Invalid PKCS#7 padding'):
        super(PaddingInvalidError, self).__init__(in_name, message)

class KeyIvLengthError(CryptoError):
    """Crypto Error: Key or IV has the wrong length."""
    def __init__(self, in_name, what, expected_size, actual_size):
        super(KeyIvLengthError, self).__init__(in_name,
            f'{what} must be {expected_size} bytes long, got {actual_size}')

class ChecksumMismatchError(CryptoError):
    """Crypto Error: The stored digest does not match the entry data."""
    def __init__(self, in_name, entry_index, stored, computed):
        self.entry_index = entry_index
        message = f'Entry {entry_index}: checksum mismatch (stored ' \
                  f'{stored.hex()}, computed {computed.hex()})'
        super(ChecksumMismatchError, self).__init__(in_name, message)
