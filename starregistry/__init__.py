"""
Star Registry - hash-linked ledger of star ownership claims.

Wallets prove control of their address by signing a time-stamped
challenge; accepted claims are sealed into an append-only chain.
"""

__version__ = "0.1.0"
