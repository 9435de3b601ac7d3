"""
JSON-RPC access to a deployed TaskManager: eth_call reads and receipt/event decoding.
"""

import requests

from . import abi
from .eip712 import normalize_address
from .errors import AbiDecodingError, RPCError
from .util import to_hex

DEFAULT_TIMEOUT = 30


def rpc_call(url, method, params, session=None, timeout=DEFAULT_TIMEOUT, headers=None):
    """Make a JSON-RPC call. Errors of any kind raise RPCError."""
    payload = {
        "jsonrpc": "2.0",
        "id": 1,
        "method": method,
        "params": params,
    }
    http = session or requests
    try:
        resp = http.post(url, json=payload, timeout=timeout, headers=headers)
        resp.raise_for_status()
        result = resp.json()
    except requests.RequestException as e:
        raise RPCError(method, str(e)) from e
    except ValueError as e:
        raise RPCError(method, f"invalid JSON response: {e}") from e
    if not isinstance(result, dict):
        raise RPCError(method, f"unexpected response: {result!r}")
    if result.get("error"):
        err = result["error"]
        if isinstance(err, dict):
            raise RPCError(method, err.get("message", err), err.get("code"))
        raise RPCError(method, err)
    return result.get("result")


def eth_call(rpc_url, to, data, session=None):
    """eth_call helper."""
    return rpc_call(rpc_url, "eth_call", [{"to": to, "data": data}, "latest"], session=session)


class TaskManagerReader:
    """Read-only view of a deployed TaskManager over JSON-RPC."""

    def __init__(self, rpc_url, contract_address, session=None):
        self.rpc_url = rpc_url
        self.contract_address = normalize_address(contract_address)
        self.session = session

    def call(self, name, *args):
        fn = abi.TASK_MANAGER_FUNCTIONS[name]
        if not fn.view:
            raise ValueError(f"{name} changes state; submit it as a transaction")
        data = to_hex(abi.encode_call(name, *args))
        result = eth_call(self.rpc_url, self.contract_address, data, session=self.session)
        if result in (None, "0x"):
            raise RPCError("eth_call", f"{name} returned no data (is {self.contract_address} a TaskManager?)")
        return abi.decode_result(name, result)

    def is_screened(self, participant):
        return self.call("checkIfParticipantProxyIsScreened", participant)

    def is_rewarded(self, participant):
        return self.call("checkIfParticipantProxyIsRewarded", participant)

    def is_screening_signature_used(self, signature):
        return self.call("checkIfScreeningSignatureIsUsed", signature)

    def is_claiming_signature_used(self, signature):
        return self.call("checkIfClaimingSignatureIsUsed", signature)

    def is_paused(self):
        return self.call("checkIfContractIsPaused")

    def summary(self):
        """Counters and configuration as a dict."""
        return {
            "owner": self.call("getOwner"),
            "paused": self.is_paused(),
            "rewardToken": self.call("getRewardTokenContractAddress"),
            "rewardTokenBalance": self.call("getRewardTokenContractBalanceAmount"),
            "rewardAmountPerParticipantProxy": self.call("getRewardAmountPerParticipantProxyInWei"),
            "targetNumberOfParticipantProxies": self.call("getTargetNumberOfParticipantProxies"),
            "screened": self.call("getNumberOfScreenedParticipantProxies"),
            "rewarded": self.call("getNumberOfRewardedParticipantProxies"),
            "claimed": self.call("getNumberOfClaimedRewards"),
            "usedScreeningSignatures": self.call("getNumberOfUsedScreeningSignatures"),
            "usedClaimingSignatures": self.call("getNumberOfUsedClaimingSignatures"),
        }

    def get_events(self, tx_hash):
        """Decode the TaskManager events of a mined transaction."""
        receipt = rpc_call(self.rpc_url, "eth_getTransactionReceipt", [tx_hash], session=self.session)
        if receipt is None:
            raise RPCError("eth_getTransactionReceipt", f"no receipt for {tx_hash}")
        events = []
        for log in receipt.get("logs", []):
            if normalize_address(log["address"]) != self.contract_address:
                continue
            try:
                events.append(abi.decode_log(log["topics"], log["data"]))
            except AbiDecodingError:
                continue
        return events
