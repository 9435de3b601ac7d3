"""
EIP-712 screening and reward-claim authorizations for TaskManager tasks.
"""

from .eip712 import Domain, build_domain
from .nonce import random_nonce
from .package import (
    SignaturePackage,
    create_reward_claim_signature_package,
    create_screening_signature_package,
)
from .signer import LocalKeySigner, RemoteWalletSigner, sign_reward_claim, sign_screening
from .verifier import verify_reward_claim, verify_screening

__version__ = "0.1.0"

__all__ = [
    "Domain",
    "LocalKeySigner",
    "RemoteWalletSigner",
    "SignaturePackage",
    "build_domain",
    "create_reward_claim_signature_package",
    "create_screening_signature_package",
    "random_nonce",
    "sign_reward_claim",
    "sign_screening",
    "verify_reward_claim",
    "verify_screening",
]
