"""
Star Registry Exceptions

Error taxonomy shared by the ledger and the claim protocol.

Claim-level rejections (ClaimRejected and its subclasses) are expected,
user-facing outcomes. DecodeError and ChainIntegrityError describe the
state of stored blocks and are never raised from the append path.
"""

from typing import List, TYPE_CHECKING

if TYPE_CHECKING:
    from .blockchain.ledger import ChainFinding


class StarRegistryError(Exception):
    """Base class for all star registry errors."""
    pass


# ============================================================================
# Claim Rejections
# ============================================================================

class ClaimRejected(StarRegistryError):
    """Raised when a claim submission is refused."""
    pass


class MalformedMessage(ClaimRejected):
    """Challenge message does not carry a parseable timestamp."""
    pass


class ExpiredChallenge(ClaimRejected):
    """Challenge message is older than the validity window."""

    def __init__(self, elapsed: int, window: int):
        self.elapsed = elapsed
        self.window = window
        super().__init__(
            f"Challenge expired: {elapsed}s elapsed, window is {window}s"
        )


class InvalidSignature(ClaimRejected):
    """Signature does not prove control of the address over the message."""
    pass


class VerificationError(ClaimRejected):
    """Signature capability could not process the address or signature."""
    pass


# ============================================================================
# Stored Data
# ============================================================================

class DecodeError(StarRegistryError, ValueError):
    """Stored block body could not be decoded."""
    pass


class ChainIntegrityError(StarRegistryError):
    """Chain validation produced one or more findings."""

    def __init__(self, findings: List['ChainFinding']):
        self.findings = list(findings)
        super().__init__(
            f"Chain integrity check failed with {len(self.findings)} finding(s)"
        )
