"""ASPH — AES-128-CBC with PKCS#7 padding.

  Cipher: AES (key length from profiles → AES-128), CBC mode
  Padding: PKCS#7 over 128-bit blocks
  Key/IV: fixed build-time constants from profiles.py

There is no MAC.  A wrong key and a corrupted file look the same: either the
padding check fails here (DecryptionFailed) or garbage plaintext fails later
at decompression / inner-magic validation.
"""

from cryptography.hazmat.primitives import padding
from cryptography.hazmat.primitives.ciphers import Cipher, algorithms, modes

from .diagnostics import DecryptionFailed
from .profiles import ENCRYPTION_KEY, INIT_VECTOR, AES_BLOCK_BITS

BLOCK_LEN = AES_BLOCK_BITS // 8

assert len(ENCRYPTION_KEY) == 16
assert len(INIT_VECTOR) == BLOCK_LEN


def _cipher(key: bytes, iv: bytes) -> Cipher:
    if len(key) not in (16, 24, 32):
        raise ValueError(f"key must be 16, 24 or 32 bytes, got {len(key)}")
    if len(iv) != BLOCK_LEN:
        raise ValueError(f"iv must be {BLOCK_LEN} bytes, got {len(iv)}")
    return Cipher(algorithms.AES(key), modes.CBC(iv))


def encrypt(plaintext: bytes,
            key: bytes = ENCRYPTION_KEY,
            iv: bytes = INIT_VECTOR) -> bytes:
    """Pad *plaintext* to the block size and encrypt it.

    Returns ciphertext whose length is a positive multiple of 16.
    """
    padder = padding.PKCS7(AES_BLOCK_BITS).padder()
    padded = padder.update(plaintext) + padder.finalize()

    enc = _cipher(key, iv).encryptor()
    return enc.update(padded) + enc.finalize()


def decrypt(ciphertext: bytes,
            key: bytes = ENCRYPTION_KEY,
            iv: bytes = INIT_VECTOR) -> bytes:
    """Decrypt and unpad *ciphertext*.

    Raises DecryptionFailed on a ragged block length or bad padding.
    """
    if not ciphertext or len(ciphertext) % BLOCK_LEN:
        raise DecryptionFailed(
            f"ciphertext length {len(ciphertext)} is not a positive "
            f"multiple of {BLOCK_LEN}"
        )

    dec = _cipher(key, iv).decryptor()
    padded = dec.update(ciphertext) + dec.finalize()

    unpadder = padding.PKCS7(AES_BLOCK_BITS).unpadder()
    try:
        return unpadder.update(padded) + unpadder.finalize()
    except ValueError as exc:
        raise DecryptionFailed(f"bad padding ({exc})") from exc
