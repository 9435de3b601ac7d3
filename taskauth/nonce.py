"""
Random 256-bit nonces for screening and reward-claim requests.
"""

import os

from .errors import EntropyUnavailable

NONCE_BYTES = 32


def random_nonce() -> int:
    """Uniform uint256 from the OS CSPRNG. Never falls back to a weaker source."""
    try:
        raw = os.urandom(NONCE_BYTES)
    except (OSError, NotImplementedError) as e:
        raise EntropyUnavailable(f"OS random source failed: {e}") from e
    if len(raw) != NONCE_BYTES:
        raise EntropyUnavailable(f"short read from OS random source: {len(raw)} bytes")
    return int.from_bytes(raw, "big")
