"""
Block Module

A single ledger entry:
- Opaque body (base64 of canonical JSON) holding the payload
- Height, timestamp and previous-hash linkage assigned by the ledger
- Hash sealed once over every other field

Security features:
- Immutable blocks (frozen dataclass)
- Deterministic body encoding, so hashing is reproducible
- Self-validation recomputes the digest instead of trusting the stored one
"""

import base64
import binascii
import json
from dataclasses import dataclass
from typing import Any, Dict, Optional

from ..core_crypto.digest import Digest, Sha256Digest
from ..exceptions import DecodeError


DEFAULT_DIGEST = Sha256Digest()


# ============================================================================
# Payload Codec
# ============================================================================

def canonical_json(data: Any) -> str:
    """
    Compact, key-sorted, ASCII-only JSON.

    Same input always gives the same string. Non-ASCII text, including
    unpaired surrogates, is written as \\u escapes.
    """
    return json.dumps(data, sort_keys=True, separators=(',', ':'))


def encode_body(payload: Dict[str, Any]) -> str:
    """
    Encode a payload into an opaque block body.

    Args:
        payload: JSON-serializable mapping

    Returns:
        Base64 string of the canonical JSON
    """
    return base64.b64encode(canonical_json(payload).encode('utf-8')).decode('ascii')


def decode_body(body: str) -> Dict[str, Any]:
    """
    Decode a block body back to its payload.

    Raises:
        DecodeError: If body is not base64 of a UTF-8 JSON object
    """
    try:
        raw = base64.b64decode(body, validate=True)
        payload = json.loads(raw.decode('utf-8'))
    except (binascii.Error, UnicodeDecodeError, ValueError, TypeError) as e:
        raise DecodeError(f"Malformed block body: {e}") from e

    if not isinstance(payload, dict):
        raise DecodeError("Block body does not decode to an object")
    return payload


# ============================================================================
# Block Structure (Immutable)
# ============================================================================

@dataclass(frozen=True)
class Block:
    """
    Immutable block structure for the ledger.

    A candidate block only carries a body; the ledger returns a sealed
    copy with height, timestamp, previous_hash and hash filled in.
    """
    body: str
    height: Optional[int] = None
    timestamp: Optional[int] = None
    previous_hash: Optional[str] = None
    hash: Optional[str] = None

    @classmethod
    def candidate(cls, payload: Dict[str, Any]) -> 'Block':
        """Create an unsealed block holding the encoded payload."""
        return cls(body=encode_body(payload))

    @property
    def is_genesis(self) -> bool:
        return self.height == 0

    @property
    def is_sealed(self) -> bool:
        return self.hash is not None

    def decode_body(self) -> Dict[str, Any]:
        """Decode the stored body. Pure; raises DecodeError if malformed."""
        return decode_body(self.body)

    def validate(self, digest: Digest = DEFAULT_DIGEST) -> bool:
        """
        Check that the stored hash matches the block content.

        Args:
            digest: Digest the block was sealed with

        Returns:
            True if the recomputed digest equals the stored hash
        """
        if self.hash is None:
            return False
        return compute_block_hash(self, digest) == self.hash

    def content_dict(self) -> Dict[str, Any]:
        """Every field except the hash."""
        return {
            'height': self.height,
            'timestamp': self.timestamp,
            'previous_hash': self.previous_hash,
            'body': self.body,
        }

    def to_dict(self) -> Dict[str, Any]:
        """Convert block to dictionary for serialization."""
        data = self.content_dict()
        data['hash'] = self.hash
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Block':
        """Create block from dictionary."""
        return cls(
            body=data['body'],
            height=data.get('height'),
            timestamp=data.get('timestamp'),
            previous_hash=data.get('previous_hash'),
            hash=data.get('hash'),
        )

    def __str__(self) -> str:
        def short(value: Optional[str]) -> str:
            return f"{value[:16]}..." if value else "None"

        return (
            f"Block #{self.height}\n"
            f"  Hash: {short(self.hash)}\n"
            f"  Prev: {short(self.previous_hash)}\n"
            f"  Time: {self.timestamp}"
        )


def compute_block_hash(block: Block, digest: Digest = DEFAULT_DIGEST) -> str:
    """Digest of the canonical serialization of a block without its hash."""
    return digest.digest(canonical_json(block.content_dict()).encode('utf-8'))
