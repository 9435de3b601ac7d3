"""
Signature packages: sign a request as the task master and self-verify it
before it is handed to the participant proxy for submission.
"""

from collections import namedtuple

from .eip712 import REWARD_CLAIM_REQUEST, SCREENING_REQUEST, normalize_address
from .errors import InvalidSignature
from .nonce import random_nonce
from .signer import sign_reward_claim, sign_screening
from .util import eprint, to_hex
from .verifier import verify_reward_claim, verify_screening


class SignaturePackage(namedtuple(
        "SignaturePackage",
        ["kind", "signature", "nonce", "is_valid", "participant", "request_id"])):
    __slots__ = ()

    def to_dict(self):
        """JSON-friendly form: hex signature, decimal-string nonce."""
        id_key = "taskId" if self.kind == SCREENING_REQUEST else "rewardId"
        return {
            "kind": self.kind,
            "signature": to_hex(self.signature),
            "isValid": self.is_valid,
            "participantProxy": self.participant,
            id_key: self.request_id,
            "nonce": str(self.nonce),
        }


def require_valid(package):
    if not package.is_valid:
        raise InvalidSignature(
            f"{package.kind} package for {package.participant} failed self-verification")
    return package


def create_screening_signature_package(signer, domain, participant, task_id, nonce=None):
    participant = normalize_address(participant)
    if nonce is None:
        nonce = random_nonce()
    signature = sign_screening(signer, domain, participant, task_id, nonce)
    is_valid = verify_screening(domain, participant, task_id, nonce, signature, signer.address)
    if not is_valid:
        eprint(f"  Screening signature for {participant} did not verify against {signer.address}")
    return SignaturePackage(SCREENING_REQUEST, signature, nonce, is_valid, participant, task_id)


def create_reward_claim_signature_package(signer, domain, participant, reward_id, nonce=None):
    participant = normalize_address(participant)
    if nonce is None:
        nonce = random_nonce()
    signature = sign_reward_claim(signer, domain, participant, reward_id, nonce)
    is_valid = verify_reward_claim(domain, participant, reward_id, nonce, signature, signer.address)
    if not is_valid:
        eprint(f"  Reward claim signature for {participant} did not verify against {signer.address}")
    return SignaturePackage(REWARD_CLAIM_REQUEST, signature, nonce, is_valid, participant, reward_id)
