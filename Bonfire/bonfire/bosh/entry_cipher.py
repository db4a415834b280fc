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
"""Encryption and decryption of single BND4 entries.

Decrypted entries start with a little endian length, followed by the payload.
When encrypting, the payload is first padded by hand so that the standard
PKCS#7 padding applied on top never adds a whole extra block. The IV of the
entry is kept across edits and the checksum is the MD5 digest of IV and
ciphertext."""
from __future__ import annotations

from collections import namedtuple

from ..bolt import check_bounds, pack_int, unpack_int_at
from ..crypto import BLOCK_SIZE, aes_cbc_decrypt, aes_cbc_encrypt, md5_digest
from ..exception import ChecksumMismatchError, KeyIvLengthError
from .bnd4_files import Bnd4Container, EntryHeader

__author__ = 'Bonfire Team'

_LEN_PREFIX_SIZE = 4

EncryptedEntry = namedtuple('EncryptedEntry', ['checksum', 'iv', 'ciphertext'])

def entry_checksum(iv: bytes, ciphertext: bytes) -> bytes:
    """The digest stored in front of an entry's IV."""
    return md5_digest(iv, ciphertext)

def decrypt_entry(entry: EntryHeader, verify_checksum=False,
                  in_name=None) -> bytes:
    """Decrypt entry and return its payload, without the length prefix and
    the padding. The stored checksum is only checked if verify_checksum is
    True."""
    iv, ciphertext = entry.iv, entry.ciphertext
    if verify_checksum:
        computed = entry_checksum(iv, ciphertext)
        if computed != entry.checksum:
            raise ChecksumMismatchError(in_name, entry.index, entry.checksum,
                                        computed)
    plaintext = aes_cbc_decrypt(ciphertext, iv, in_name=in_name)
    debug_str = f'Entry {entry.index} payload'
    check_bounds(len(plaintext), 0, _LEN_PREFIX_SIZE, debug_str, in_name)
    payload_len = unpack_int_at(plaintext, 0)
    check_bounds(len(plaintext), _LEN_PREFIX_SIZE, payload_len, debug_str,
                 in_name)
    return plaintext[_LEN_PREFIX_SIZE:_LEN_PREFIX_SIZE + payload_len]

def custom_pkcs7_padding(payload: bytes) -> bytes:
    """Prefix payload with its length and pad it by hand. If the prefixed
    payload is one block boundary short of needing a full extra block, nothing
    is added, otherwise p bytes of value p are appended."""
    pad_len = BLOCK_SIZE - (len(payload) + _LEN_PREFIX_SIZE) % BLOCK_SIZE
    padded = pack_int(len(payload)) + payload
    if pad_len != BLOCK_SIZE:
        padded += bytes([pad_len]) * pad_len
    return padded

def encrypt_payload(payload: bytes, iv: bytes,
                    in_name=None) -> EncryptedEntry:
    """Encrypt payload under iv, returning checksum, IV and ciphertext ready
    to be spliced back into a container."""
    if len(iv) != BLOCK_SIZE:
        raise KeyIvLengthError(in_name, 'IV', BLOCK_SIZE, len(iv))
    ciphertext = aes_cbc_encrypt(custom_pkcs7_padding(payload), iv,
                                 in_name=in_name)
    return EncryptedEntry(entry_checksum(iv, ciphertext), iv, ciphertext)

def reencrypt_entry(container: Bnd4Container, index: int,
                    payload: bytes) -> Bnd4Container:
    """Encrypt payload with the original IV of entry index and return a new
    container holding the result."""
    target = container.entry(index)
    enc = encrypt_payload(payload, target.iv, in_name=container.in_name)
    return container.with_entry_data(index, *enc)
