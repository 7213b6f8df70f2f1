"""
Edit keys and the authorization check for mutating operations.

An edit key is never stored: it is the truncated HMAC-SHA256 of the paste
id under a process-wide secret, so knowing the secret and the id is
necessary and sufficient to prove edit authority.
"""

import logging
from pathlib import Path

from cryptography.hazmat.primitives import constant_time, hashes, hmac

from .errors import ConfigError, PasteNotFound, Unauthorized

DEFAULT_KEY_BYTES = 8

logger = logging.getLogger("pastel.keys")


def load_secret(key_file: Path) -> bytes:
    """Read the HMAC secret; a missing or blank key file is a fatal config error"""
    key_file = Path(key_file)
    try:
        with open(key_file, 'rb') as f:
            secret = f.read()
    except OSError as e:
        raise ConfigError(f"You must set a key in {key_file}: {e}") from e

    # a trailing newline from `echo ... > hmac_key.txt` is not part of the key
    secret = secret.rstrip(b"\r\n")
    if not secret.strip():
        raise ConfigError(f"You must set a key in {key_file}")
    return secret


class KeyDeriver:
    """Computes the edit key for a paste id"""

    def __init__(self, secret: bytes, key_bytes: int = DEFAULT_KEY_BYTES):
        if not secret:
            raise ConfigError("HMAC secret must not be empty")
        if not 1 <= key_bytes <= 32:
            raise ConfigError(f"key_bytes must be between 1 and 32, got {key_bytes}")
        self._secret = bytes(secret)
        self.key_bytes = key_bytes

    def derive(self, paste_id: str) -> str:
        """Lowercase hex of the first key_bytes bytes of HMAC-SHA256(secret, id)"""
        mac = hmac.HMAC(self._secret, hashes.SHA256())
        mac.update(paste_id.encode("utf-8"))
        return mac.finalize()[:self.key_bytes].hex()

    def verify(self, paste_id: str, supplied_key: str) -> bool:
        """Constant-time comparison of supplied_key with the derived key"""
        expected = self.derive(paste_id).encode("ascii")
        supplied = (supplied_key or "").encode("utf-8")
        return constant_time.bytes_eq(expected, supplied)


class AuthorizationGate:
    """Validates an edit key against an existing paste before it is mutated"""

    def __init__(self, store, deriver: KeyDeriver):
        self.store = store
        self.deriver = deriver

    def authorize(self, paste_id: str, supplied_key: str) -> None:
        """
        Raises:
            PasteNotFound: if the paste does not exist
            Unauthorized: if supplied_key is not the paste's edit key
        """
        if not self.store.exists(paste_id):
            raise PasteNotFound(paste_id)
        if not self.deriver.verify(paste_id, supplied_key):
            logger.warning(f"Invalid edit key for paste {paste_id}")
            raise Unauthorized(paste_id)
