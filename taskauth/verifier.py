"""
Signature recovery and verification.

Signatures are 65 bytes r || s || v. Only the canonical form is accepted:
v in {27, 28}, 0 < r < n and 0 < s <= n/2. Rejecting high-s signatures closes
the (r, s) / (r, n - s) malleability gap, so the raw signature bytes are a sound
replay key for the contract. The contract model recovers through the same
`recover_signer`, which keeps off-chain pre-checks and on-chain enforcement
in step.
"""

from eth_account import Account
from eth_account.messages import encode_typed_data
from eth_keys import keys
from eth_keys.exceptions import BadSignature, ValidationError

from .eip712 import reward_claim_typed_data, screening_typed_data
from .errors import InvalidSignature, TaskAuthError
from .util import hex_to_bytes

SECP256K1_N = 0xFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFEBAAEDCE6AF48A03BBFD25E8CD0364141
SECP256K1_HALF_N = SECP256K1_N // 2
SIGNATURE_LENGTH = 65

_RECOVERY_ERRORS = (TaskAuthError, ValueError, TypeError, BadSignature, ValidationError)

# ============================================================
#  Parsing
# ============================================================

def signature_bytes(signature) -> bytes:
    try:
        return hex_to_bytes(signature)
    except (TypeError, ValueError) as e:
        raise InvalidSignature(f"not a hex signature: {e}") from e


def split_signature(signature):
    """Return (v, r, s) of a canonical 65-byte signature, else InvalidSignature."""
    sig = signature_bytes(signature)
    if len(sig) != SIGNATURE_LENGTH:
        raise InvalidSignature(f"expected {SIGNATURE_LENGTH} bytes, got {len(sig)}")
    r = int.from_bytes(sig[0:32], "big")
    s = int.from_bytes(sig[32:64], "big")
    v = sig[64]
    if v not in (27, 28):
        raise InvalidSignature(f"bad recovery id v={v}")
    if not 0 < r < SECP256K1_N:
        raise InvalidSignature("r out of range")
    if not 0 < s <= SECP256K1_HALF_N:
        raise InvalidSignature("s not in lower half order")
    return v, r, s


def join_signature(v, r, s) -> bytes:
    if v in (0, 1):
        v += 27
    return r.to_bytes(32, "big") + s.to_bytes(32, "big") + v.to_bytes(1, "big")

# ============================================================
#  Recovery
# ============================================================

def recover_signer(digest: bytes, signature) -> str:
    """ecrecover over a 32-byte digest. Returns the checksum address."""
    if len(digest) != 32:
        raise ValueError(f"digest must be 32 bytes, got {len(digest)}")
    v, r, s = split_signature(signature)
    try:
        sig = keys.Signature(vrs=(v - 27, r, s))
        return sig.recover_public_key_from_msg_hash(digest).to_checksum_address()
    except (BadSignature, ValidationError) as e:
        raise InvalidSignature(f"recovery failed: {e}") from e


def recover_typed_data_signer(typed_data, signature) -> str:
    v, r, s = split_signature(signature)
    signable = encode_typed_data(full_message=typed_data)
    return Account.recover_message(signable, vrs=(v, r, s))


def _matches(recovered, expected_signer):
    return isinstance(expected_signer, str) and recovered.lower() == expected_signer.lower()

# ============================================================
#  Verification (never raises)
# ============================================================

def verify_typed_data(typed_data, signature, expected_signer) -> bool:
    try:
        recovered = recover_typed_data_signer(typed_data, signature)
    except _RECOVERY_ERRORS:
        return False
    return _matches(recovered, expected_signer)


def verify_screening(domain, participant, task_id, nonce, signature, expected_signer) -> bool:
    """True iff `signature` is the task master's over ScreeningRequest(participant, task_id, nonce)."""
    try:
        data = screening_typed_data(domain, participant, task_id, nonce)
    except _RECOVERY_ERRORS:
        return False
    return verify_typed_data(data, signature, expected_signer)


def verify_reward_claim(domain, participant, reward_id, nonce, signature, expected_signer) -> bool:
    """True iff `signature` is the task master's over RewardClaimRequest(participant, reward_id, nonce)."""
    try:
        data = reward_claim_typed_data(domain, participant, reward_id, nonce)
    except _RECOVERY_ERRORS:
        return False
    return verify_typed_data(data, signature, expected_signer)


def verify_digest(digest, signature, expected_signer) -> bool:
    try:
        recovered = recover_signer(digest, signature)
    except _RECOVERY_ERRORS:
        return False
    return _matches(recovered, expected_signer)
