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
"""Encapsulates Bonfire's temporary dir/files handling.

Generally, you want to use TempDir or TempFile in a context handler. That way
you guarantee that the temporary files will get cleaned up, no matter how
complicated your flow of logic might get or even if an exception occurs.

If you need more control, use new_temp_dir and new_temp_file to create
temporary directories and files and clean them up manually with
cleanup_temp_dir and cleanup_temp_file.

If worst comes to worst, the atexit hook registered in main should clean up
all leftover temp files when Bonfire exits."""
from __future__ import annotations

import os
import shutil
import tempfile
from pathlib import Path as PPath

# *No other local imports!* This needs to be imported all over the place
from . import bass

# Internals -------------------------------------------------------------------
# The actual global temp folder we will be using
_bftemp_dir: PPath | None = None
# Global directories that we created via mkdtemp and hence are safe to clean
# up by us as well
_our_global_dirs: set[PPath] = set()
# Sub-directories that we created and hence are safe to clean up by us
_our_temp_dirs: set[PPath] = set()
# Sub-files that we created and hence are safe to clean up by us
_our_temp_files: set[PPath] = set()

def _get_global_dir() -> PPath:
    """Get a base directory to use for generating unique sub-directories in.
    Uses the sTempDir ini setting if set, otherwise a fresh directory in the
    standard temporary directory."""
    global _bftemp_dir
    if _bftemp_dir is not None:
        return _bftemp_dir
    if configured_path := bass.inisettings.get('TempDir'):
        configured_dir = PPath(configured_path)
        os.makedirs(configured_dir, exist_ok=True)
        _bftemp_dir = configured_dir.resolve()
    else:
        _bftemp_dir = PPath(tempfile.mkdtemp(prefix='Bonfire_'))
        _our_global_dirs.add(_bftemp_dir)
    return _bftemp_dir

# API - Temporary Directories -------------------------------------------------
def new_temp_dir(*, temp_prefix='', temp_suffix='', base_dir='') -> str:
    """Create a new, unique, temporary directory. The caller is responsible for
    cleaning it up via cleanup_temp_dir once done.

    Use only when absolutely needed, TempDir is almost always a better
    choice."""
    ntd = tempfile.mkdtemp(dir=base_dir or _get_global_dir(),
        prefix=f'{temp_prefix}_' if temp_prefix else '', suffix=temp_suffix)
    _our_temp_dirs.add(PPath(ntd))
    return ntd

def cleanup_temp_dir(temp_dir: str | os.PathLike) -> None:
    """Clean up a temporary directory created via new_temp_dir. Will raise an
    error if called on a directory that wasn't created via new_temp_dir or if
    it is called twice on the same directory."""
    fixed_path = PPath(temp_dir)
    try:
        _our_temp_dirs.remove(fixed_path)
    except KeyError:
        # 'from None' to drop the unhelpful KeyError traceback
        raise RuntimeError(
            f"Refusing to delete directory that wasn't created by this "
            f"instance's new_temp_dir or was already cleaned up (offending "
            f"path: {temp_dir})") from None
    try:
        shutil.rmtree(fixed_path)
    except FileNotFoundError:
        pass # Already cleaned up (e.g. by moving it somewhere else)

class TempDir:
    """Convenient and error-resistant way to create and clean up a unique
    temporary directory with a context handler."""
    def __init__(self, *, temp_prefix='', temp_suffix='', base_dir=''):
        self._temp_prefix = temp_prefix
        self._temp_suffix = temp_suffix
        self._base_dir = base_dir

    def __enter__(self):
        self._temp_dir = new_temp_dir(temp_prefix=self._temp_prefix,
            temp_suffix=self._temp_suffix, base_dir=self._base_dir)
        return self._temp_dir

    def __exit__(self, exc_type, exc_val, exc_tb):
        cleanup_temp_dir(self._temp_dir)

# API - Temporary Files -------------------------------------------------------
def new_temp_file(*, temp_prefix='', temp_suffix='.tmp', base_dir='') -> str:
    """Create a new, unique, temporary file. The caller is responsible for
    cleaning it up via cleanup_temp_file once done.

    Pass the directory of the final destination as base_dir if the file is
    going to be moved over it, that way the move is a plain rename on the same
    filesystem."""
    ntf_fd, ntf = tempfile.mkstemp(dir=base_dir or _get_global_dir(),
        prefix=f'{temp_prefix}_' if temp_prefix else '', suffix=temp_suffix)
    _our_temp_files.add(PPath(ntf))
    os.close(ntf_fd)
    return ntf

def cleanup_temp_file(temp_file: str | os.PathLike) -> None:
    """Clean up a temporary file created via new_temp_file. Will raise an error
    if called on a file that wasn't created via new_temp_file or if it is
    called twice on the same file."""
    fixed_path = PPath(temp_file)
    try:
        _our_temp_files.remove(fixed_path)
    except KeyError:
        # 'from None' to drop the unhelpful KeyError traceback
        raise RuntimeError(
            f"Refusing to delete file that wasn't created by this instance's "
            f"new_temp_file or was already cleaned up (offending path: "
            f"{temp_file})") from None
    try:
        os.remove(fixed_path)
    except FileNotFoundError:
        pass # Already cleaned up (e.g. by moving it somewhere else)

class TempFile:
    """Convenient and error-resistant way to create and clean up a unique
    temporary file with a context handler."""
    def __init__(self, *, temp_prefix='', temp_suffix='.tmp', base_dir=''):
        self._temp_prefix = temp_prefix
        self._temp_suffix = temp_suffix
        self._base_dir = base_dir

    def __enter__(self):
        self._temp_file = new_temp_file(temp_prefix=self._temp_prefix,
            temp_suffix=self._temp_suffix, base_dir=self._base_dir)
        return self._temp_file

    def __exit__(self, exc_type, exc_val, exc_tb):
        cleanup_temp_file(self._temp_file)

# API - Misc ------------------------------------------------------------------
def cleanup_temp():
    """Remove all temp directories and files that were created by this
    instance of Bonfire. To be called by an atexit hook."""
    global _bftemp_dir
    for otd in _our_temp_dirs:
        shutil.rmtree(otd, ignore_errors=True)
    _our_temp_dirs.clear()
    for otf in _our_temp_files:
        try:
            os.remove(otf)
        except FileNotFoundError:
            pass
    _our_temp_files.clear()
    # Be sure to do these last since the earlier ones may sit inside these
    for ogd in _our_global_dirs:
        shutil.rmtree(ogd, ignore_errors=True)
    _our_global_dirs.clear()
    _bftemp_dir = None
