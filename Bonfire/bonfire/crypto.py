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
"""AES-128-CBC primitives and the fixed key shared by every save codec."""
from __future__ import annotations

import hashlib

from cryptography.hazmat.primitives import padding
from cryptography.hazmat.primitives.ciphers import Cipher, algorithms, modes

from .exception import CryptoError, KeyIvLengthError, PaddingInvalidError

# The key is part of the format - it is never configurable
DSR_KEY = bytes.fromhex('0123456789abcdeffedcba9876543210')
BLOCK_SIZE = 16
DIGEST_SIZE = 16

def _aes_cipher(iv: bytes, in_name) -> Cipher:
    if len(iv) != BLOCK_SIZE:
        raise KeyIvLengthError(in_name, 'IV', BLOCK_SIZE, len(iv))
    return Cipher(algorithms.AES128(DSR_KEY), modes.CBC(iv))

def aes_cbc_decrypt(data: bytes, iv: bytes, *, unpad=True,
                    in_name=None) -> bytes:
    """Decrypt data with the fixed key. If unpad is True, standard PKCS#7
    padding is removed from the result, otherwise the plaintext is returned
    as is."""
    if len(data) % BLOCK_SIZE:
        raise CryptoError(in_name, f'Ciphertext length {len(data)} is not a '
                                   f'multiple of {BLOCK_SIZE}')
    decryptor = _aes_cipher(iv, in_name).decryptor()
    plaintext = decryptor.update(data) + decryptor.finalize()
    if not unpad:
        return plaintext
    unpadder = padding.PKCS7(BLOCK_SIZE * 8).unpadder()
    try:
        return unpadder.update(plaintext) + unpadder.finalize()
    except ValueError as e:
        raise PaddingInvalidError(in_name) from e

def aes_cbc_encrypt(data: bytes, iv: bytes, *, pad=True,
                    in_name=None) -> bytes:
    """Encrypt data with the fixed key. If pad is True, standard PKCS#7
    padding is added first, otherwise data must already be block aligned."""
    if pad:
        padder = padding.PKCS7(BLOCK_SIZE * 8).padder()
        data = padder.update(data) + padder.finalize()
    elif len(data) % BLOCK_SIZE:
        raise CryptoError(in_name, f'Plaintext length {len(data)} is not a '
                                   f'multiple of {BLOCK_SIZE}')
    encryptor = _aes_cipher(iv, in_name).encryptor()
    return encryptor.update(data) + encryptor.finalize()

def md5_digest(*chunks: bytes) -> bytes:
    """Return the MD5 digest of the concatenation of chunks."""
    hasher = hashlib.md5()
    for c in chunks:
        hasher.update(c)
    return hasher.digest()
