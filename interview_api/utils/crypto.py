"""Passphrase based AES compatible with ``CryptoJS.AES.encrypt(text, passphrase)``.

CryptoJS emits the OpenSSL "Salted__" envelope: an 8 byte salt, a key and IV
derived with EVP_BytesToKey (MD5, one round) and AES-256-CBC with PKCS#7
padding, all base64 encoded. Matching it keeps cookies written by the web
frontend readable here and vice versa.
"""

from __future__ import annotations

import base64
import binascii
import hashlib
import os
from typing import Tuple

from cryptography.hazmat.primitives import padding
from cryptography.hazmat.primitives.ciphers import Cipher, algorithms, modes

from interview_api.errors import DecryptionError

SALT_HEADER = b"Salted__"
SALT_SIZE = 8
KEY_SIZE = 32
IV_SIZE = 16
BLOCK_BITS = 128


def derive_key_and_iv(passphrase: bytes, salt: bytes) -> Tuple[bytes, bytes]:
    """OpenSSL EVP_BytesToKey with MD5 and a single iteration."""
    derived = b""
    block = b""
    while len(derived) < KEY_SIZE + IV_SIZE:
        block = hashlib.md5(block + passphrase + salt).digest()
        derived += block
    return derived[:KEY_SIZE], derived[KEY_SIZE:KEY_SIZE + IV_SIZE]


def encrypt(plaintext: str, passphrase: str) -> str:
    """Encrypt ``plaintext`` and return the base64 "Salted__" token."""
    salt = os.urandom(SALT_SIZE)
    key, iv = derive_key_and_iv(passphrase.encode("utf-8"), salt)

    padder = padding.PKCS7(BLOCK_BITS).padder()
    padded = padder.update(plaintext.encode("utf-8")) + padder.finalize()

    encryptor = Cipher(algorithms.AES(key), modes.CBC(iv)).encryptor()
    ciphertext = encryptor.update(padded) + encryptor.finalize()
    return base64.b64encode(SALT_HEADER + salt + ciphertext).decode("ascii")


def decrypt(token: str, passphrase: str) -> str:
    """Decrypt a token produced by :func:`encrypt` or by CryptoJS.

    Raises:
        DecryptionError: when the token is malformed, the key is wrong or the
            plaintext is not UTF-8.
    """
    try:
        raw = base64.b64decode(token)
    except (binascii.Error, ValueError) as exc:
        raise DecryptionError("Ciphertext is not valid base64") from exc

    if not raw.startswith(SALT_HEADER) or len(raw) <= len(SALT_HEADER) + SALT_SIZE:
        raise DecryptionError("Ciphertext is missing the salt header")

    salt = raw[len(SALT_HEADER):len(SALT_HEADER) + SALT_SIZE]
    ciphertext = raw[len(SALT_HEADER) + SALT_SIZE:]
    if len(ciphertext) % (BLOCK_BITS // 8):
        raise DecryptionError("Ciphertext length is not a multiple of the block size")

    key, iv = derive_key_and_iv(passphrase.encode("utf-8"), salt)
    decryptor = Cipher(algorithms.AES(key), modes.CBC(iv)).decryptor()
    padded = decryptor.update(ciphertext) + decryptor.finalize()

    try:
        unpadder = padding.PKCS7(BLOCK_BITS).unpadder()
        plain = unpadder.update(padded) + unpadder.finalize()
        text = plain.decode("utf-8")
    except ValueError as exc:
        raise DecryptionError("Ciphertext could not be decrypted with this key") from exc

    if not text:
        raise DecryptionError("Ciphertext decrypted to an empty string")
    return text
