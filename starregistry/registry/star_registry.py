"""
Star Registry Module

Gates ledger writes behind proof of wallet ownership:
1. Client requests a challenge message for its address
2. Client signs the message with its wallet
3. Client submits address, message, signature and star
4. Registry checks the challenge age and the signature, then appends

Policy order (fixed):
- Challenge older than the window -> ExpiredChallenge
- Signature does not verify       -> InvalidSignature
Both are checked after the verifier has run, so a malformed signature
raises VerificationError even when the challenge has also expired.
"""

import inspect
import logging
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Dict, Optional, Protocol, Union

from ..blockchain.block import Block
from ..blockchain.ledger import Ledger, default_clock
from ..core_crypto.signatures import EcdsaMessageVerifier
from ..exceptions import ExpiredChallenge, InvalidSignature
from .challenge import CHALLENGE_WINDOW_SECONDS, build_challenge, parse_challenge_time


logger = logging.getLogger(__name__)


class MessageVerifier(Protocol):
    """Checks that signature proves control of address over message."""

    def verify(
        self,
        message: str,
        address: str,
        signature: str
    ) -> Union[bool, Awaitable[bool]]:
        ...


@dataclass
class Claim:
    """A star ownership claim as submitted, before it becomes a block."""
    address: str
    message: str
    signature: str
    star: Any

    def to_payload(self) -> Dict[str, Any]:
        return {
            'address': self.address,
            'message': self.message,
            'signature': self.signature,
            'star': self.star,
        }


class StarRegistry:
    """
    Claim protocol in front of a ledger.

    Holds no per-challenge state between issue and submission.
    """

    def __init__(
        self,
        ledger: Optional[Ledger] = None,
        verifier: Optional[MessageVerifier] = None,
        clock: Callable[[], int] = default_clock,
        window_seconds: int = CHALLENGE_WINDOW_SECONDS
    ):
        """
        Initialize the registry.

        Args:
            ledger: Ledger to append claims to (new one if None)
            verifier: Signature capability (ECDSA wallets if None)
            clock: Returns the current time in whole seconds
            window_seconds: How long a challenge stays valid
        """
        self._ledger = ledger if ledger is not None else Ledger(clock=clock)
        self._verifier = verifier if verifier is not None else EcdsaMessageVerifier()
        self._clock = clock
        self._window_seconds = window_seconds

    @property
    def ledger(self) -> Ledger:
        return self._ledger

    @property
    def window_seconds(self) -> int:
        return self._window_seconds

    def issue_challenge(self, address: str) -> str:
        """
        Issue the message a wallet must sign to prove ownership.

        Args:
            address: Wallet address of the claimant

        Returns:
            "<address>:<now>:starRegistry"
        """
        message = build_challenge(address, self._clock())
        logger.debug("Issued challenge for %s", address)
        return message

    async def submit_claim(
        self,
        address: str,
        message: str,
        signature: str,
        star: Any
    ) -> Block:
        """
        Verify a signed challenge and record the star on the ledger.

        Args:
            address: Wallet address claiming the star
            message: Challenge message previously issued for address
            signature: Signature over message by address
            star: Star description (JSON-serializable)

        Returns:
            The sealed block holding the claim

        Raises:
            MalformedMessage: Message has no integer timestamp
            VerificationError: Verifier rejected address or signature format
            ExpiredChallenge: Challenge is window_seconds old or older
            InvalidSignature: Signature does not verify
        """
        message_time = parse_challenge_time(message)
        elapsed = int(self._clock()) - message_time

        verified = await self._verify(message, address, signature)

        if elapsed >= self._window_seconds:
            logger.warning("Rejected claim from %s: challenge %ds old", address, elapsed)
            raise ExpiredChallenge(elapsed, self._window_seconds)
        if not verified:
            logger.warning("Rejected claim from %s: signature not verified", address)
            raise InvalidSignature(f"Signature not verified for {address}")

        claim = Claim(address=address, message=message, signature=signature, star=star)
        block = await self._ledger.append(Block.candidate(claim.to_payload()))

        logger.info("Recorded star for %s at height %d", address, block.height)
        return block

    async def _verify(self, message: str, address: str, signature: str) -> bool:
        result = self._verifier.verify(message, address, signature)
        if inspect.isawaitable(result):
            result = await result
        return bool(result)


def create_registry(clock: Callable[[], int] = default_clock) -> StarRegistry:
    """Create a registry with a fresh ledger and ECDSA wallet verification."""
    return StarRegistry(ledger=Ledger(clock=clock), clock=clock)
