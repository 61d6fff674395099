# Blockchain Module
"""
In-memory ledger implementation including:
- Immutable blocks with base64 JSON bodies
- Hash chaining with SHA-256
- Genesis block on construction
- Full chain validation that reports every finding
"""

# Lazy imports to avoid RuntimeWarning when running module directly
def __getattr__(name):
    """Lazy import to avoid circular import issues."""
    import importlib
    block = importlib.import_module('.block', __name__)
    ledger = importlib.import_module('.ledger', __name__)
    # The import above binds the submodules themselves, e.g. `.block`.
    if name in globals():
        return globals()[name]
    for module in (block, ledger):
        if hasattr(module, name):
            return getattr(module, name)
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")

__all__ = [
    'Block',
    'Ledger',
    'ChainFinding',
    'ClaimScan',
    'create_ledger',
    'compute_block_hash',
    'encode_body',
    'decode_body',
    'GENESIS_DATA',
    'GENESIS_PREVIOUS_HASH',
]
