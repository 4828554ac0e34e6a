"""
Pin hashing and verification.

Only the bcrypt digest of a pin is ever stored. Verification
compares a raw pin against that digest; the digest is never
reversed.
"""

import bcrypt

from bank_service.config import get_settings
from bank_service.logging_config import get_logger

logger = get_logger(__name__)

# bcrypt ignores everything past 72 bytes
BCRYPT_MAX_BYTES = 72


class PinHasher:
    """
    Hashes pins with bcrypt.

    The cost factor is configurable so tests can run with the
    minimum of 4 rounds while production keeps the default 12.
    """

    def __init__(self, rounds: int | None = None):
        self.rounds = rounds if rounds is not None else get_settings().BCRYPT_ROUNDS

    def hash(self, pin: str) -> str:
        """Return the bcrypt digest of a pin."""
        pin_bytes = pin.encode("utf-8")[:BCRYPT_MAX_BYTES]
        salt = bcrypt.gensalt(rounds=self.rounds)
        return bcrypt.hashpw(pin_bytes, salt).decode("utf-8")

    def verify(self, pin: str | None, digest: str) -> bool:
        """
        Check a raw pin against a stored digest.

        A missing pin never verifies. A malformed digest is
        reported and treated as a mismatch.
        """
        if pin is None:
            return False
        try:
            return bcrypt.checkpw(
                pin.encode("utf-8")[:BCRYPT_MAX_BYTES],
                digest.encode("utf-8"),
            )
        except ValueError as e:
            logger.warning("pin_digest_unreadable", error=str(e))
            return False
