# Core Cryptography Module
"""
Cryptographic capabilities used by the registry:
- SHA-256 block digest
- ECDSA P-256 wallet keys, addresses and signature tokens
"""
