"""Key encryption and hash addressing for secured files."""
import base64
import hashlib
import secrets
import time

from cryptography.hazmat.primitives import padding
from cryptography.hazmat.primitives.ciphers import Cipher, algorithms, modes

HEX_CHARS = "0123456789ABCDEF"

# Cipher name -> key size in bytes (CBC mode)
KEY_SIZES = {"aes128": 16, "aes192": 24, "aes256": 32}


class KeyCodec:
    """Symmetric encryption of secret keys with a fixed key and IV.

    Output is base64 text so key-files stay printable. The same plaintext
    always encodes to the same ciphertext.
    """

    def __init__(self, private_key: str, initialization_vector: str, method: str = "aes128"):
        if method not in KEY_SIZES:
            raise ValueError(f"Unsupported cipher: {method}")
        size = KEY_SIZES[method]
        # Short keys are zero padded, long ones truncated
        self._key = private_key.encode()[:size].ljust(size, b"\0")
        self._iv = initialization_vector.encode()[:16].ljust(16, b"\0")

    def _cipher(self) -> Cipher:
        return Cipher(algorithms.AES(self._key), modes.CBC(self._iv))

    def encode(self, value: str) -> str:
        padder = padding.PKCS7(128).padder()
        data = padder.update(value.encode()) + padder.finalize()
        encryptor = self._cipher().encryptor()
        return base64.b64encode(encryptor.update(data) + encryptor.finalize()).decode("ascii")

    def decode(self, value: bytes | str) -> str | None:
        """Return the plaintext, or None when value is not a valid ciphertext."""
        try:
            if isinstance(value, bytes):
                value = value.decode("ascii")
            raw = base64.b64decode(value.strip(), validate=True)
            decryptor = self._cipher().decryptor()
            data = decryptor.update(raw) + decryptor.finalize()
            unpadder = padding.PKCS7(128).unpadder()
            return (unpadder.update(data) + unpadder.finalize()).decode()
        except ValueError:
            return None


def address_hash(relative_path: str, file_name: str, secret_key: str, method: str = "md5") -> str:
    """Digest of path + file name + key, used as the on-disk name."""
    return hashlib.new(method, f"{relative_path}{file_name}{secret_key}".encode()).hexdigest()


def unique_suffix() -> str:
    # 8 hex digits of seconds + 5 of microseconds
    now = time.time()
    return "%8x%05x" % (int(now), int((now - int(now)) * 1_000_000))


def generate_secret_key(length: int = 16) -> str:
    """Random hex characters followed by a time-derived uniqueness suffix."""
    base = "".join(secrets.choice(HEX_CHARS) for _ in range(length))
    return base + unique_suffix()
