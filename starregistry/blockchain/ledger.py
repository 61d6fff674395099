"""
Ledger Module

Owns the in-memory chain of blocks:
- Genesis block synthesized on construction
- Single append path assigning height, linkage, timestamp and hash
- Lookups by hash and by height
- Star claims collected per wallet address, with unreadable blocks reported
- Whole-chain validation returning every finding

Concurrency:
- The append path runs under an asyncio.Lock owned by the ledger
- Blocks are sealed before they are pushed, so readers working on a
  snapshot never see a partially appended block
"""

import asyncio
import json
import logging
import time
from dataclasses import dataclass, replace
from typing import Any, Callable, Dict, List, Optional, Tuple

from ..core_crypto.digest import Digest
from ..exceptions import ChainIntegrityError, DecodeError
from .block import DEFAULT_DIGEST, Block, compute_block_hash


logger = logging.getLogger(__name__)


# ============================================================================
# Constants
# ============================================================================

GENESIS_DATA = "Genesis Block"
GENESIS_PREVIOUS_HASH = None  # genesis has no predecessor

SELF_VALIDATION_FAILED = "self-validation failed"
PREVIOUS_HASH_MISMATCH = "previous hash mismatch"
UNDECODABLE_BODY = "undecodable body"


def default_clock() -> int:
    """Current time in whole seconds since the epoch."""
    return int(time.time())


@dataclass(frozen=True)
class ChainFinding:
    """One problem found in a block of the chain."""
    block: Block
    message: str

    def to_dict(self) -> Dict[str, Any]:
        return {'height': self.block.height, 'hash': self.block.hash, 'message': self.message}


@dataclass(frozen=True)
class ClaimScan:
    """Claims found for one address, plus the blocks that could not be read."""
    claims: List[Dict[str, Any]]
    skipped: List[ChainFinding]


# ============================================================================
# Ledger
# ============================================================================

class Ledger:
    """
    Append-only chain of blocks held in memory.

    All mutation goes through append(). Reads never take the lock.
    """

    def __init__(
        self,
        digest: Digest = DEFAULT_DIGEST,
        clock: Callable[[], int] = default_clock
    ):
        """
        Initialize the ledger and create its genesis block.

        Args:
            digest: Digest used to seal blocks
            clock: Returns the current time in whole seconds
        """
        self._digest = digest
        self._clock = clock
        self._chain: List[Block] = []
        self._height = -1
        self._append_lock = asyncio.Lock()

        self.initialize()

    def initialize(self) -> Optional[Block]:
        """
        Create the genesis block if the chain is empty.

        Returns:
            The genesis block, or None if the chain already had one
        """
        if self._height != -1:
            return None
        genesis = self._seal_and_push(Block.candidate({'data': GENESIS_DATA}))
        logger.info("Ledger initialized with genesis block %s", genesis.hash[:16])
        return genesis

    # ------------------------------------------------------------------------
    # Read-only views
    # ------------------------------------------------------------------------

    @property
    def chain(self) -> List[Block]:
        """Get the chain (copy)."""
        return list(self._chain)

    @property
    def height(self) -> int:
        return self._height

    @property
    def length(self) -> int:
        return len(self._chain)

    @property
    def last_block(self) -> Block:
        """Get the last block in the chain."""
        return self._chain[-1]

    @property
    def digest(self) -> Digest:
        return self._digest

    async def current_height(self) -> int:
        """Height of the tip (chain length - 1)."""
        return self._height

    # ------------------------------------------------------------------------
    # Append path
    # ------------------------------------------------------------------------

    async def append(self, candidate: Block) -> Block:
        """
        Seal a candidate block onto the end of the chain.

        Args:
            candidate: Block whose body is already set

        Returns:
            The sealed block as stored in the chain
        """
        async with self._append_lock:
            return self._seal_and_push(candidate)

    def _seal_and_push(self, candidate: Block) -> Block:
        # Callers hold the append lock, or run before the ledger is shared.
        current_height = self._height
        previous_hash = GENESIS_PREVIOUS_HASH
        if current_height > -1:
            previous_hash = self._chain[current_height].hash

        unsealed = replace(
            candidate,
            height=current_height + 1,
            previous_hash=previous_hash,
            timestamp=int(self._clock()),
            hash=None,
        )
        block = replace(unsealed, hash=compute_block_hash(unsealed, self._digest))

        self._chain.append(block)
        self._height += 1

        logger.info("Sealed block #%d %s", block.height, block.hash[:16])
        return block

    # ------------------------------------------------------------------------
    # Lookups
    # ------------------------------------------------------------------------

    async def find_by_hash(self, block_hash: str) -> Optional[Block]:
        """Return the first block with the given hash, or None."""
        for block in self.chain:
            if block.hash == block_hash:
                return block
        return None

    async def find_by_height(self, height: int) -> Optional[Block]:
        """Return the block at exactly this height, or None."""
        for block in self.chain:
            if block.height == height:
                return block
        return None

    async def collect_claims_by_address(self, address: str) -> List[Dict[str, Any]]:
        """
        Collect every star claimed by a wallet address.

        Shorthand for scan_claims_by_address(address).claims. Undecodable
        blocks are logged and left out; use scan_claims_by_address to see
        which ones.

        Args:
            address: Wallet address to search for

        Returns:
            List of {'owner': address, 'star': star} in chain order
        """
        scan = await self.scan_claims_by_address(address)
        return scan.claims

    async def scan_claims_by_address(self, address: str) -> ClaimScan:
        """
        Collect the stars claimed by an address and report unreadable blocks.

        Bodies are all decoded first, then filtered. A body that fails to
        decode is recorded in ``skipped`` and the scan carries on.

        Args:
            address: Wallet address to search for

        Returns:
            ClaimScan with the matching claims and one finding per
            undecodable block
        """
        decoded, skipped = await self._decode_claim_bodies(self.chain)

        claims = [
            {'owner': address, 'star': body.get('star')}
            for _, body in decoded
            if body.get('address') == address
        ]
        return ClaimScan(claims=claims, skipped=skipped)

    async def _decode_claim_bodies(
        self,
        blocks: List[Block]
    ) -> Tuple[List[Tuple[Block, Dict[str, Any]]], List[ChainFinding]]:
        """Decode stage: (block, body) pairs plus a finding per bad body."""
        decoded = []
        skipped = []
        for block in blocks:
            if block.is_genesis:
                continue
            try:
                decoded.append((block, block.decode_body()))
            except DecodeError as e:
                logger.warning("Skipping block #%s: %s", block.height, e)
                skipped.append(ChainFinding(block, f"{UNDECODABLE_BODY}: {e}"))
        return decoded, skipped

    # ------------------------------------------------------------------------
    # Validation
    # ------------------------------------------------------------------------

    async def validate_chain(self) -> List[ChainFinding]:
        """
        Validate every block in the chain.

        Each block is self-validated and its previous_hash compared with
        the hash of the block before it. After a broken link the expected
        hash moves on to the current block, so one break is reported once.

        Returns:
            All findings in height order; empty if the chain is valid
        """
        findings: List[ChainFinding] = []
        expected_previous_hash = GENESIS_PREVIOUS_HASH

        for block in self.chain:
            if not block.validate(self._digest):
                findings.append(ChainFinding(block, SELF_VALIDATION_FAILED))
            if block.previous_hash != expected_previous_hash:
                findings.append(ChainFinding(block, PREVIOUS_HASH_MISMATCH))
            expected_previous_hash = block.hash

        for finding in findings:
            logger.warning("Block #%s: %s", finding.block.height, finding.message)
        return findings

    async def ensure_valid(self) -> bool:
        """
        Validate the chain and raise if anything was found.

        Raises:
            ChainIntegrityError: Carrying every finding
        """
        findings = await self.validate_chain()
        if findings:
            raise ChainIntegrityError(findings)
        return True

    # ------------------------------------------------------------------------
    # Export
    # ------------------------------------------------------------------------

    def to_json(self) -> str:
        """Serialize the chain to JSON."""
        return json.dumps({
            'height': self._height,
            'chain': [block.to_dict() for block in self._chain],
        }, indent=2)

    def print_chain(self) -> None:
        """Print the chain."""
        print(f"\nLedger (height={self.height}, length={self.length})")
        print("=" * 60)
        for block in self._chain:
            print(block)
            print("-" * 40)


# ============================================================================
# Convenience Functions
# ============================================================================

def create_ledger(
    digest: Digest = DEFAULT_DIGEST,
    clock: Callable[[], int] = default_clock
) -> Ledger:
    """Create a new ledger with its genesis block."""
    return Ledger(digest=digest, clock=clock)
