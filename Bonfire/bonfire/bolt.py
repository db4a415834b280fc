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
"""Low level helpers shared by the whole package: struct wrappers, fixed
width UTF-16 string fields, debug printing, logs and file replacement."""
from __future__ import annotations

import os
import shutil
import struct
import sys
import traceback as _traceback

from . import exception

# structure alias
struct_error = struct.error

# Structure wrappers ----------------------------------------------------------
class _StructsCache(dict):
    __slots__ = ()
    def __missing__(self, key):
        return self.setdefault(key, struct.Struct(key))

structs_cache = _StructsCache()
def unpack_int_at(buf, offset: int,
        __unpack_from=structs_cache['<I'].unpack_from) -> int:
    return __unpack_from(buf, offset)[0]
def pack_int(value: int, __pack=structs_cache['<I'].pack) -> bytes:
    return __pack(value)
def unpack_many_at(buf, offset: int, fmt: str):
    return structs_cache[fmt].unpack_from(buf, offset)

def check_bounds(buf_size: int, offset: int, size: int, debug_str,
                 in_name=None):
    """Raise a TruncatedError if size bytes at offset do not fit in a
    buffer of buf_size bytes."""
    if offset + size > buf_size:
        raise exception.TruncatedError(in_name, debug_str, offset + size,
                                       buf_size)

# Fixed width UTF-16 fields ---------------------------------------------------
def decode_utf16_field(raw: bytes) -> str:
    """Decode a fixed width UTF-16LE field, stopping at the first zero code
    unit. A trailing odd byte is ignored."""
    raw = raw[:len(raw) & ~1]
    for unit_start in range(0, len(raw), 2):
        if raw[unit_start:unit_start + 2] == b'\x00\x00':
            raw = raw[:unit_start]
            break
    return raw.decode('utf-16-le', errors='surrogatepass')

def encode_utf16_field(text: str, field_size: int) -> bytes:
    """Encode text as UTF-16LE into exactly field_size bytes, silently
    truncating to the field and zero padding what is left."""
    encoded = text.encode('utf-16-le', errors='surrogatepass')
    encoded = encoded[:field_size & ~1]
    return encoded.ljust(field_size, b'\x00')

# Files -----------------------------------------------------------------------
def backup_path(file_path: str | os.PathLike) -> str:
    """Backup file path."""
    return f'{os.fspath(file_path)}.bak'

def make_backup(file_path: str | os.PathLike) -> str | None:
    """Copy file_path to its backup path if it exists. Returns the backup
    path or None if there was nothing to back up."""
    if not os.path.isfile(file_path):
        return None
    bak = backup_path(file_path)
    shutil.copy2(file_path, bak)
    return bak

def replace_with_temp(temp_path: str | os.PathLike,
                      dest_path: str | os.PathLike):
    """Replace dest_path with a temporary version created via TempFile or
    new_temp_file. Note that this *does not work for directories!* It is only
    intended for files.

    This also does not remove the temporary file from the internal caches
    so as to work with TempFile."""
    shutil.move(temp_path, dest_path)
    # Do *not* call cleanup_temp_file here! This method needs to work with
    # TempFile, which will already call cleanup_temp_file for us

def move_staged_files(staging_dir: str | os.PathLike,
                      dest_dir: str | os.PathLike,
                      file_names: list[str]) -> list[str]:
    """Move every file in file_names from staging_dir into dest_dir and
    return the destination paths. All destinations are checked before the
    first move, so a name that can't be written leaves dest_dir untouched.
    The names must be plain file names and unique."""
    seen = set()
    for fname in file_names:
        if os.path.basename(fname) != fname or fname in ('', '.', '..'):
            raise OSError(f'Not a plain file name: {fname!r}')
        if fname in seen:
            raise FileExistsError(f'Duplicate file name: {fname!r}')
        seen.add(fname)
        dest = os.path.join(dest_dir, fname)
        if os.path.isdir(dest):
            raise IsADirectoryError(f'Cannot replace directory {dest}')
    moved = []
    for fname in file_names:
        dest = os.path.join(dest_dir, fname)
        replace_with_temp(os.path.join(staging_dir, fname), dest)
        moved.append(dest)
    return moved

# Constants used for censoring the user's home directory (see below)
_USER_DIR = os.path.expanduser('~')
_CENSORED_DIR = os.path.join(os.path.split(_USER_DIR)[0], '*****')

def deprint(*args, traceback=False, trace=True, frame=1):
    """Prints message along with file and line location.
       Available keyword arguments:
       trace: (default True) - if a Truthy value, displays the module,
              line number, and function this was used from
       traceback: (default False) - if a Truthy value, prints any tracebacks
              for exceptions that have occurred.
       frame: (default 1) - With `trace`, determines the function caller's
              frame for getting the function name
    """
    if trace:
        parent_frame = sys._getframe(frame)
        code_obj = parent_frame.f_code
        msg = f'{os.path.basename(code_obj.co_filename)} ' \
              f'{parent_frame.f_lineno:4d} {code_obj.co_name}: '
    else:
        msg = ''
    msg += ' '.join([f'{x}' for x in args])
    # Print to stdout by default, but change to stderr if we have an error
    target_stream = sys.stdout
    if traceback:
        target_stream = sys.stderr
        exc_fmt = _traceback.format_exc()
        msg += f'\n{exc_fmt}'
    # Censor the user's home directory, save paths tend to contain it
    msg = msg.replace(_USER_DIR, _CENSORED_DIR)
    print(msg, flush=True, file=target_stream)

# Log -------------------------------------------------------------------------
#------------------------------------------------------------------------------
class Log(object):
    """Log Callable. This is the abstract/null version. Useful version should
    override write functions.

    Log is divided into sections with headers. Header text is assigned (through
    setHeader), but isn't written until a message is written under it. I.e.,
    if no message are written under a given header, then the header itself is
    never written."""

    def __init__(self):
        self.header = None
        self.prevHeader = None
        self.doFooter = True

    def setHeader(self, header, writeNow=False, doFooter=True):
        """Sets the header."""
        self.header = header
        if self.prevHeader:
            self.prevHeader += 'x'
        self.doFooter = doFooter
        if writeNow: self()

    def __call__(self, message=None, appendNewline=True):
        """Callable. Writes message, and if necessary, header and footer."""
        if self.header != self.prevHeader:
            if self.prevHeader and self.doFooter:
                self.writeFooter()
            if self.header:
                self.writeLogHeader(self.header)
            self.prevHeader = self.header
        if message: self.writeMessage(message, appendNewline)

    #--Abstract/null writing functions...
    def writeLogHeader(self, header):
        """Write header. Abstract/null version."""
        pass
    def writeFooter(self):
        """Write mess. Abstract/null version."""
        pass
    def writeMessage(self, message, appendNewline):
        """Write message to log. Abstract/null version."""
        pass

#------------------------------------------------------------------------------
class LogFile(Log):
    """Log that writes messages to file."""
    def __init__(self, out):
        self.out = out
        Log.__init__(self)

    def writeLogHeader(self, header):
        self.out.write(f'== {header}\n')

    def writeFooter(self):
        self.out.write('\n')

    def writeMessage(self, message, appendNewline):
        self.out.write(message)
        if appendNewline: self.out.write('\n')
