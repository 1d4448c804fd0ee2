import base64
import hmac
import os
import secrets
from typing import Optional

from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.kdf.pbkdf2 import PBKDF2HMAC
import structlog

from ..config.settings import get_settings

logger = structlog.get_logger(__name__)

class PasswordHasher:
    """
    PBKDF2-HMAC-SHA256 password hashing.

    Hashes are stored as "pbkdf2_sha256$<iterations>$<salt_b64>$<hash_b64>" so the
    iteration count can be raised later without invalidating existing hashes.
    """
    ALGORITHM = "pbkdf2_sha256"
    SALT_BYTES = 16
    KEY_LENGTH = 32

    def __init__(self, iterations: Optional[int] = None):
        if iterations is None:
            iterations = get_settings().PASSWORD_HASH_ITERATIONS
        if iterations <= 0:
            raise ValueError("PBKDF2 iterations must be positive.")
        self.iterations = iterations

    def _derive(self, password: str, salt: bytes, iterations: int) -> bytes:
        kdf = PBKDF2HMAC(
            algorithm=hashes.SHA256(),
            length=self.KEY_LENGTH,
            salt=salt,
            iterations=iterations,
        )
        return kdf.derive(password.encode('utf-8'))

    def hash_password(self, password: str) -> str:
        salt = os.urandom(self.SALT_BYTES)
        derived = self._derive(password, salt, self.iterations)
        return "$".join([
            self.ALGORITHM,
            str(self.iterations),
            base64.urlsafe_b64encode(salt).decode('utf-8'),
            base64.urlsafe_b64encode(derived).decode('utf-8'),
        ])

    def verify_password(self, password: str, encoded: str) -> bool:
        try:
            algorithm, iterations_str, salt_b64, hash_b64 = encoded.split("$")
            if algorithm != self.ALGORITHM:
                logger.warn("Unsupported password hash algorithm.", algorithm=algorithm)
                return False
            salt = base64.urlsafe_b64decode(salt_b64.encode('utf-8'))
            expected = base64.urlsafe_b64decode(hash_b64.encode('utf-8'))
            derived = self._derive(password, salt, int(iterations_str))
        except (ValueError, TypeError) as e:
            logger.warn("Malformed password hash.", error=str(e))
            return False
        return hmac.compare_digest(derived, expected)


def generate_password(num_bytes: int) -> str:
    """Random password as a hex string (2 characters per byte)."""
    return secrets.token_hex(num_bytes)
