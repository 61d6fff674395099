# Registry Module
"""
Star claim protocol:
- Challenge messages with a 5 minute validity window
- Wallet signature verification before any ledger write
"""

from .challenge import (
    CHALLENGE_SUFFIX,
    CHALLENGE_WINDOW_SECONDS,
    build_challenge,
    parse_challenge_time,
)

from .star_registry import (
    Claim,
    StarRegistry,
    create_registry,
)

__all__ = [
    'CHALLENGE_SUFFIX',
    'CHALLENGE_WINDOW_SECONDS',
    'build_challenge',
    'parse_challenge_time',
    'Claim',
    'StarRegistry',
    'create_registry',
]
