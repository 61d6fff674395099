"""
Block Digest

SHA-256 digest used to seal ledger blocks.

The ledger only needs an object with a ``digest(data) -> str`` method,
so tests can substitute a deterministic fake.
"""

import hashlib
from typing import Protocol


class Digest(Protocol):
    """Deterministic fingerprint of a byte string."""

    def digest(self, data: bytes) -> str:
        ...


class Sha256Digest:
    """SHA-256 digest returned as a 64-character lowercase hex string."""

    def digest(self, data: bytes) -> str:
        """
        Compute the SHA-256 hex digest of data.

        Args:
            data: Input bytes to hash

        Returns:
            64-character hexadecimal string
        """
        if not isinstance(data, (bytes, bytearray)):
            raise TypeError("Digest input must be bytes")
        return hashlib.sha256(data).hexdigest()

    def __repr__(self) -> str:
        return "Sha256Digest()"
