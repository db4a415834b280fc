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
import hashlib
import struct

import pytest
from cryptography.hazmat.primitives.ciphers import Cipher, algorithms, modes

from .. import entry_iv, make_bnd4
from ...bosh.bnd4_files import Bnd4Container
from ...bosh.entry_cipher import EncryptedEntry, custom_pkcs7_padding, \
    decrypt_entry, encrypt_payload, reencrypt_entry
from ...crypto import DSR_KEY
from ...exception import ChecksumMismatchError, CryptoError, \
    EntrySizeError, KeyIvLengthError, PaddingInvalidError

def _raw_decrypt(ciphertext, iv):
    decryptor = Cipher(algorithms.AES(DSR_KEY), modes.CBC(iv)).decryptor()
    return decryptor.update(ciphertext) + decryptor.finalize()

def _raw_encrypt(plaintext, iv):
    encryptor = Cipher(algorithms.AES(DSR_KEY), modes.CBC(iv)).encryptor()
    return encryptor.update(plaintext) + encryptor.finalize()

class TestCustomPadding(object):
    @pytest.mark.parametrize('payload_len, pad_len', [
        (0, 12), (1, 11), (11, 1), (12, 0), (13, 15), (28, 0), (131072, 12)])
    def test_pad_length(self, payload_len, pad_len):
        padded = custom_pkcs7_padding(bytes(payload_len))
        assert padded[:4] == struct.pack('<I', payload_len)
        assert len(padded) == 4 + payload_len + pad_len
        assert padded[4 + payload_len:] == bytes([pad_len]) * pad_len

class TestEncrypt(object):
    def test_layout(self):
        iv = entry_iv(3)
        payload = b'Knight Solaire of Astora'
        enc = encrypt_payload(payload, iv)
        assert isinstance(enc, EncryptedEntry)
        assert enc.iv == iv
        # custom pad plus one full block of standard padding on top
        plaintext = _raw_decrypt(enc.ciphertext, iv)
        assert plaintext[:-16] == custom_pkcs7_padding(payload)
        assert plaintext[-16:] == b'\x10' * 16
        assert enc.checksum == hashlib.md5(iv + enc.ciphertext).digest()

    def test_no_custom_pad_when_aligned(self):
        # 12 byte payload + 4 byte prefix is exactly one block
        enc = encrypt_payload(b'A' * 12, entry_iv(0))
        assert len(enc.ciphertext) == 32

    def test_iv_length(self):
        with pytest.raises(KeyIvLengthError):
            encrypt_payload(b'payload', bytes(8))

class TestDecrypt(object):
    def _entry(self, payload, index=0):
        return Bnd4Container.decode(make_bnd4([payload])).entry(index)

    def test_decrypt(self):
        payload = bytes(range(200))
        assert decrypt_entry(self._entry(payload)) == payload

    def test_roundtrip_reproduces_entry(self):
        entry = self._entry(b'Lordran' * 100)
        enc = encrypt_payload(decrypt_entry(entry), entry.iv)
        assert enc.ciphertext == entry.ciphertext
        assert enc.checksum == entry.checksum

    def test_trust_on_read(self):
        buffer = bytearray(make_bnd4([b'payload']))
        entry = Bnd4Container.decode(bytes(buffer)).entry(0)
        buffer[entry.data_offset] ^= 0xFF
        entry = Bnd4Container.decode(bytes(buffer)).entry(0)
        assert decrypt_entry(entry) == b'payload'
        with pytest.raises(ChecksumMismatchError):
            decrypt_entry(entry, verify_checksum=True)

    def test_verified_checksum(self):
        assert decrypt_entry(self._entry(b'payload'),
                             verify_checksum=True) == b'payload'

    def test_invalid_padding(self):
        iv = entry_iv(0)
        # last byte 0x00 is never valid PKCS#7 padding
        ciphertext = _raw_encrypt(bytes(32), iv)
        entry_data = hashlib.md5(iv + ciphertext).digest() + iv + ciphertext
        buffer = bytearray(make_bnd4([bytes(12)]))
        entry = Bnd4Container.decode(bytes(buffer)).entry(0)
        assert entry.size == len(entry_data)
        buffer[entry.data_offset:entry.data_offset + entry.size] = entry_data
        with pytest.raises(PaddingInvalidError):
            decrypt_entry(Bnd4Container.decode(bytes(buffer)).entry(0))

    def test_unaligned_ciphertext(self):
        buffer = bytearray(make_bnd4([b'payload']))
        # shrink the declared size by one byte
        struct.pack_into('<I', buffer, 64 + 8, struct.unpack_from(
            '<I', buffer, 64 + 8)[0] - 1)
        with pytest.raises(CryptoError):
            decrypt_entry(Bnd4Container.decode(bytes(buffer)).entry(0))

class TestReencrypt(object):
    def test_edit_keeps_iv_and_size(self):
        container = Bnd4Container.decode(make_bnd4([b'a' * 100, b'b' * 50]))
        changed = reencrypt_entry(container, 0, b'c' * 100)
        assert changed.entry(0).iv == container.entry(0).iv
        assert changed.entry(0).size == container.entry(0).size
        assert decrypt_entry(changed.entry(0)) == b'c' * 100
        assert decrypt_entry(changed.entry(0), verify_checksum=True)
        assert changed.entry(1).data == container.entry(1).data

    def test_growing_payload_refused(self):
        container = Bnd4Container.decode(make_bnd4([b'a' * 100, b'b' * 50]))
        with pytest.raises(EntrySizeError):
            reencrypt_entry(container, 0, b'c' * 140)
