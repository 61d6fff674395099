"""
Unit tests for wallet signatures.

Tests:
- Key pair generation and addresses
- Signature tokens
- Verification results and errors
"""

import base64
import hashlib
import struct

import pytest

from starregistry.core_crypto.digest import Sha256Digest
from starregistry.core_crypto.signatures import (
    WalletKeyPair, EcdsaMessageVerifier,
    address_from_public_bytes, is_valid_address,
    encode_signature_token, decode_signature_token,
    ADDRESS_HEX_LENGTH,
)
from starregistry.exceptions import VerificationError


MESSAGE = "abc:1700000000:starRegistry"


@pytest.fixture(scope="module")
def alice():
    return WalletKeyPair.generate()


@pytest.fixture(scope="module")
def bob():
    return WalletKeyPair.generate()


class TestDigest:
    """Tests for the SHA-256 block digest."""

    def test_known_vector(self):
        assert Sha256Digest().digest(b"abc") == (
            "ba7816bf8f01cfea414140de5dae2223b00361a396177a9cb410ff61f20015ad"
        )

    def test_matches_hashlib(self):
        assert Sha256Digest().digest(b"hello") == hashlib.sha256(b"hello").hexdigest()

    def test_rejects_text(self):
        with pytest.raises(TypeError):
            Sha256Digest().digest("abc")


class TestWalletKeyPair:
    """Tests for wallet keys and addresses."""

    def test_address_format(self, alice):
        assert len(alice.address) == ADDRESS_HEX_LENGTH
        assert is_valid_address(alice.address)

    def test_address_derived_from_public_key(self, alice):
        assert alice.address == address_from_public_bytes(alice.public_bytes())

    def test_distinct_wallets(self, alice, bob):
        assert alice.address != bob.address

    def test_public_only_cannot_sign(self, alice):
        public_only = WalletKeyPair.from_public_bytes(alice.public_bytes())
        assert public_only.address == alice.address
        with pytest.raises(ValueError):
            public_only.sign_message(MESSAGE)

    def test_sign_unencodable_message(self, alice):
        with pytest.raises(ValueError, match="UTF-8"):
            alice.sign_message(MESSAGE + "\ud800")

    @pytest.mark.parametrize("address", ["", "ABCD" * 10, "zz" * 20, "ab" * 19, None])
    def test_invalid_addresses(self, address):
        assert not is_valid_address(address)


class TestSignatureToken:
    """Tests for token packing."""

    def test_round_trip(self, alice):
        token = encode_signature_token(alice.public_bytes(), b"\x30\x01\x02")
        assert decode_signature_token(token) == (alice.public_bytes(), b"\x30\x01\x02")

    def test_token_embeds_public_key(self, alice):
        public_bytes, _ = decode_signature_token(alice.sign_message(MESSAGE))
        assert public_bytes == alice.public_bytes()

    @pytest.mark.parametrize("token", [
        "",
        "***",
        base64.b64encode(b"\x00").decode(),
        base64.b64encode(struct.pack(">H", 65) + b"\x04" * 10).decode(),
        base64.b64encode(struct.pack(">H", 2) + b"\x04\x04").decode(),
    ])
    def test_malformed_tokens(self, token):
        with pytest.raises(VerificationError):
            decode_signature_token(token)


class TestEcdsaMessageVerifier:
    """Tests for signature verification."""

    def test_valid_signature(self, alice):
        verifier = EcdsaMessageVerifier()
        assert verifier.verify(MESSAGE, alice.address, alice.sign_message(MESSAGE))

    def test_wrong_message(self, alice):
        signature = alice.sign_message(MESSAGE)
        assert not EcdsaMessageVerifier().verify(MESSAGE + "x", alice.address, signature)

    def test_other_wallets_signature(self, alice, bob):
        """Bob cannot prove control of Alice's address."""
        signature = bob.sign_message(MESSAGE)
        assert not EcdsaMessageVerifier().verify(MESSAGE, alice.address, signature)

    def test_swapped_public_key(self, alice, bob):
        """Alice's key with Bob's signature bytes does not verify."""
        _, bob_sig = decode_signature_token(bob.sign_message(MESSAGE))
        token = encode_signature_token(alice.public_bytes(), bob_sig)
        assert not EcdsaMessageVerifier().verify(MESSAGE, alice.address, token)

    def test_malformed_address_raises(self, alice):
        with pytest.raises(VerificationError):
            EcdsaMessageVerifier().verify(MESSAGE, "not-an-address", alice.sign_message(MESSAGE))

    def test_invalid_curve_point_raises(self, alice):
        token = encode_signature_token(b"\x04" + b"\x01" * 64, b"\x30\x00")
        with pytest.raises(VerificationError):
            EcdsaMessageVerifier().verify(MESSAGE, alice.address, token)

    def test_non_base64_signature_raises(self, alice):
        with pytest.raises(VerificationError):
            EcdsaMessageVerifier().verify(MESSAGE, alice.address, "H9x...")

    def test_unencodable_message_raises(self, alice):
        """A lone surrogate cannot be signed or verified as UTF-8."""
        signature = alice.sign_message(MESSAGE)
        with pytest.raises(VerificationError, match="UTF-8"):
            EcdsaMessageVerifier().verify(MESSAGE + "\ud800", alice.address, signature)
