"""
Wallet Signatures Module

Proves control of a wallet address over a challenge message with:
- ECDSA (P-256) key pairs
- Addresses derived from the SHA-256 of the public key
- Self-contained signature tokens carrying the signer's public key

Signature token format (base64-encoded):
    [key_len (2 bytes) | public key (X9.62 uncompressed) | DER signature]

Security features:
- The address is recomputed from the embedded public key, so a token
  signed by one wallet can never prove control of another address
- Sign the message bytes with ECDSA-SHA256
- Malformed input raises VerificationError instead of returning False,
  so callers can tell "bad proof" from "not a proof at all"
"""

import base64
import binascii
import hashlib
import re
import struct
from dataclasses import dataclass
from typing import Optional, Tuple

from cryptography.exceptions import InvalidSignature as _BadSignature
from cryptography.hazmat.primitives import hashes, serialization
from cryptography.hazmat.primitives.asymmetric import ec

from ..exceptions import VerificationError


# Constants
CURVE = ec.SECP256R1()   # P-256 curve
ADDRESS_HEX_LENGTH = 40  # 160-bit address, hex encoded
KEY_LEN_FORMAT = '>H'
KEY_LEN_SIZE = struct.calcsize(KEY_LEN_FORMAT)

_ADDRESS_RE = re.compile(r'[0-9a-f]{%d}' % ADDRESS_HEX_LENGTH)


def address_from_public_bytes(public_bytes: bytes) -> str:
    """
    Derive a wallet address from an encoded public key.

    Args:
        public_bytes: Public key as X9.62 uncompressed point

    Returns:
        First 40 hex characters of SHA-256(public_bytes)
    """
    return hashlib.sha256(public_bytes).hexdigest()[:ADDRESS_HEX_LENGTH]


def is_valid_address(address: str) -> bool:
    """Check that address is 40 lowercase hex characters."""
    return isinstance(address, str) and _ADDRESS_RE.fullmatch(address) is not None


@dataclass
class WalletKeyPair:
    """ECDSA key pair owning one wallet address."""
    private_key: Optional[ec.EllipticCurvePrivateKey]
    public_key: ec.EllipticCurvePublicKey

    @classmethod
    def generate(cls) -> 'WalletKeyPair':
        """Generate a new P-256 wallet key pair."""
        private_key = ec.generate_private_key(CURVE)
        return cls(private_key, private_key.public_key())

    @classmethod
    def from_public_bytes(cls, data: bytes) -> 'WalletKeyPair':
        """Create a verify-only key pair from public key bytes."""
        public_key = ec.EllipticCurvePublicKey.from_encoded_point(CURVE, data)
        return cls(None, public_key)

    def public_bytes(self) -> bytes:
        """Get public key as bytes (uncompressed point)."""
        return self.public_key.public_bytes(
            encoding=serialization.Encoding.X962,
            format=serialization.PublicFormat.UncompressedPoint
        )

    @property
    def address(self) -> str:
        """Wallet address derived from the public key."""
        return address_from_public_bytes(self.public_bytes())

    def sign_message(self, message: str) -> str:
        """
        Sign a challenge message.

        Args:
            message: Challenge string issued by the registry

        Returns:
            Base64 signature token

        Raises:
            ValueError: If this key pair has no private key or the message
                cannot be encoded as UTF-8
        """
        if self.private_key is None:
            raise ValueError("Private key required for signing")

        try:
            data = message.encode('utf-8')
        except UnicodeEncodeError as e:
            raise ValueError("Message is not valid UTF-8 text") from e

        der_signature = self.private_key.sign(data, ec.ECDSA(hashes.SHA256()))
        return encode_signature_token(self.public_bytes(), der_signature)


# ============================================================================
# Signature Tokens
# ============================================================================

def encode_signature_token(public_bytes: bytes, der_signature: bytes) -> str:
    """Pack a public key and DER signature into a base64 token."""
    raw = (
        struct.pack(KEY_LEN_FORMAT, len(public_bytes)) +
        public_bytes +
        der_signature
    )
    return base64.b64encode(raw).decode('ascii')


def decode_signature_token(token: str) -> Tuple[bytes, bytes]:
    """
    Unpack a signature token.

    Args:
        token: Base64 token from encode_signature_token

    Returns:
        Tuple of (public_bytes, der_signature)

    Raises:
        VerificationError: If the token is not valid base64 or is truncated
    """
    if not isinstance(token, str) or not token:
        raise VerificationError("Signature must be a non-empty string")

    try:
        raw = base64.b64decode(token, validate=True)
    except (binascii.Error, ValueError) as e:
        raise VerificationError(f"Signature is not valid base64: {e}") from e

    if len(raw) < KEY_LEN_SIZE:
        raise VerificationError("Signature token is truncated")

    key_len = struct.unpack(KEY_LEN_FORMAT, raw[:KEY_LEN_SIZE])[0]
    offset = KEY_LEN_SIZE
    public_bytes = raw[offset:offset + key_len]
    der_signature = raw[offset + key_len:]

    if len(public_bytes) != key_len or not der_signature:
        raise VerificationError("Signature token is truncated")

    return public_bytes, der_signature


# ============================================================================
# Verifier
# ============================================================================

class EcdsaMessageVerifier:
    """
    Verifies that a signature token proves control of an address.

    A token verifies when its embedded public key hashes to the address
    and its ECDSA signature is valid for the message under that key.
    """

    def verify(self, message: str, address: str, signature: str) -> bool:
        """
        Verify a signed challenge message.

        Args:
            message: The challenge message that was signed
            address: Wallet address claiming ownership
            signature: Base64 signature token

        Returns:
            True if signature is valid for address, False otherwise

        Raises:
            VerificationError: If address, message or signature is malformed
        """
        if not is_valid_address(address):
            raise VerificationError(f"Malformed wallet address: {address!r}")
        if not isinstance(message, str):
            raise VerificationError("Message must be a string")
        try:
            data = message.encode('utf-8')
        except UnicodeEncodeError as e:
            raise VerificationError("Message is not valid UTF-8 text") from e

        public_bytes, der_signature = decode_signature_token(signature)

        try:
            key_pair = WalletKeyPair.from_public_bytes(public_bytes)
        except ValueError as e:
            raise VerificationError(f"Invalid public key in signature: {e}") from e

        if address_from_public_bytes(public_bytes) != address:
            return False

        try:
            key_pair.public_key.verify(der_signature, data, ec.ECDSA(hashes.SHA256()))
            return True
        except _BadSignature:
            return False
