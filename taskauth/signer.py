"""
Task master signing authorities and the sign_* operations.

A signing authority is any object with an `address` attribute and a
`sign_typed_data(typed_data) -> bytes` method returning a 65-byte r || s || v
signature over the EIP-712 payload. Key material never has to be local:
`RemoteWalletSigner` delegates to a custody service over JSON-RPC.
"""

import copy
import json

from eth_account import Account
from eth_account.messages import encode_typed_data

from .eip712 import normalize_address, reward_claim_typed_data, screening_typed_data
from .errors import RPCError, SigningUnavailable
from .rpc import rpc_call
from .util import hex_to_bytes
from .verifier import SIGNATURE_LENGTH, join_signature


class SigningAuthority:
    address = None

    def sign_typed_data(self, typed_data) -> bytes:
        raise NotImplementedError


class LocalKeySigner(SigningAuthority):
    """Signs with a private key held in this process."""

    def __init__(self, private_key):
        if isinstance(private_key, str):
            private_key = hex_to_bytes(private_key)
        self._account = Account.from_key(private_key)
        self.address = self._account.address

    def sign_typed_data(self, typed_data) -> bytes:
        signed = self._account.sign_message(encode_typed_data(full_message=typed_data))
        return join_signature(signed.v, signed.r, signed.s)

    def __repr__(self):
        return f"LocalKeySigner({self.address})"


def wire_typed_data(typed_data):
    """
    Copy of `typed_data` with integer fields as decimal strings.

    Custody services parse the payload in JavaScript, where a bare JSON number
    above 2**53 loses precision and the authority would sign another message.
    """
    wire = copy.deepcopy(typed_data)
    sections = (("domain", "EIP712Domain"), ("message", typed_data["primaryType"]))
    for section, type_name in sections:
        for field in typed_data["types"][type_name]:
            name = field["name"]
            if field["type"].startswith(("uint", "int")) and name in wire[section]:
                wire[section][name] = str(wire[section][name])
    return wire


class RemoteWalletSigner(SigningAuthority):
    """Signs through a custody service exposing eth_signTypedData_v4."""

    def __init__(self, rpc_url, address, session=None, wallet_id=None, timeout=30):
        self.rpc_url = rpc_url
        self.address = normalize_address(address)
        self.session = session
        self.wallet_id = wallet_id
        self.timeout = timeout

    def sign_typed_data(self, typed_data) -> bytes:
        headers = {"X-Wallet-Id": self.wallet_id} if self.wallet_id else None
        try:
            result = rpc_call(
                self.rpc_url,
                "eth_signTypedData_v4",
                [self.address, json.dumps(wire_typed_data(typed_data))],
                session=self.session,
                timeout=self.timeout,
                headers=headers,
            )
        except RPCError as e:
            raise SigningUnavailable(str(e)) from e
        if not isinstance(result, str):
            raise SigningUnavailable(f"custody service returned no signature: {result!r}")
        try:
            return hex_to_bytes(result)
        except ValueError as e:
            raise SigningUnavailable(f"custody service returned malformed signature: {e}") from e

    def __repr__(self):
        return f"RemoteWalletSigner({self.address} via {self.rpc_url})"

# ============================================================
#  Signing operations
# ============================================================

def _sign(signer, typed_data) -> bytes:
    sig = signer.sign_typed_data(typed_data)
    if len(sig) != SIGNATURE_LENGTH:
        raise SigningUnavailable(f"signer returned {len(sig)} bytes, expected {SIGNATURE_LENGTH}")
    return join_signature(
        sig[64],
        int.from_bytes(sig[0:32], "big"),
        int.from_bytes(sig[32:64], "big"),
    )


def sign_screening(signer, domain, participant, task_id, nonce) -> bytes:
    return _sign(signer, screening_typed_data(domain, participant, task_id, nonce))


def sign_reward_claim(signer, domain, participant, reward_id, nonce) -> bytes:
    return _sign(signer, reward_claim_typed_data(domain, participant, reward_id, nonce))
