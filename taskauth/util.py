"""
Byte, hex and hashing helpers shared by the encoder, verifier and contract model.
"""

import sys

from Crypto.Hash import keccak as _keccak_mod

UINT256_MAX = (1 << 256) - 1

# ============================================================
#  Keccak256
# ============================================================

def keccak_bytes(data: bytes) -> bytes:
    """keccak256 returning bytes."""
    h = _keccak_mod.new(digest_bits=256)
    h.update(data)
    return h.digest()

# ============================================================
#  Conversions
# ============================================================

def to_b32(val: int) -> bytes:
    return (val & UINT256_MAX).to_bytes(32, "big")


def to_hex(val, length=32):
    """Convert int (or bytes) to 0x-prefixed hex. Ints are padded to `length` bytes."""
    if isinstance(val, (bytes, bytearray)):
        return "0x" + bytes(val).hex()
    return "0x" + val.to_bytes(length, "big").hex()


def hex_to_bytes(h):
    """Accept bytes or a hex string with or without 0x prefix."""
    if isinstance(h, (bytes, bytearray)):
        return bytes(h)
    if not isinstance(h, str):
        raise TypeError(f"expected bytes or hex string, got {type(h).__name__}")
    if h.startswith(("0x", "0X")):
        h = h[2:]
    return bytes.fromhex(h)

# ============================================================
#  Logging
# ============================================================

def eprint(*args, **kwargs):
    print(*args, file=sys.stderr, **kwargs)
