"""
In-process ledger model.

Transactions execute one at a time under a single lock (the ledger's total
order). Every transaction snapshots contract state first. A ContractRevert,
or any other failure such as calldata that does not decode, restores the
snapshot and drops the logs emitted so far, then propagates to the submitter.
Contracts are addressed by deterministic addresses and driven with raw ABI
calldata, the same bytes a relayer would submit on chain.
"""

import copy
import threading
from collections import namedtuple

from eth_utils import to_checksum_address

from . import abi
from .config import DEFAULT_CHAIN_ID
from .eip712 import normalize_address
from .util import keccak_bytes, to_b32

Log = namedtuple("Log", ["address", "topics", "data", "event", "args"])
Receipt = namedtuple("Receipt", ["status", "tx_index", "sender", "to", "logs", "return_data"])

# ============================================================
#  Contract base
# ============================================================

class Contract:
    """State lives in instance attributes; `ledger` and `address` are not state."""

    FUNCTIONS = {}
    SELECTORS = {}

    def __init__(self, ledger, address):
        self.ledger = ledger
        self.address = address

    def snapshot(self):
        state = {k: v for k, v in vars(self).items() if k not in ("ledger", "address")}
        return copy.deepcopy(state)

    def restore(self, state):
        for key in [k for k in vars(self) if k not in ("ledger", "address")]:
            delattr(self, key)
        for key, value in copy.deepcopy(state).items():
            setattr(self, key, value)

    def emit(self, name, *args):
        self.ledger.emit(self.address, name, args)

    def dispatch(self, sender, data):
        fn, args = abi.decode_call(data, self.SELECTORS)
        method = getattr(self, fn.method)
        if fn.view:
            return abi.encode_result(fn, method(*args))
        method(sender, *args)
        return b""

# ============================================================
#  Ledger
# ============================================================

class Ledger:
    def __init__(self, chain_id=DEFAULT_CHAIN_ID):
        self.chain_id = chain_id
        self.contracts = {}
        self.logs = []
        self.tx_count = 0
        self._deploy_count = 0
        self._pending = None
        self._lock = threading.RLock()

    def _next_address(self, deployer):
        seed = bytes.fromhex(deployer[2:]) + to_b32(self._deploy_count)
        self._deploy_count += 1
        return to_checksum_address(keccak_bytes(seed)[12:])

    def emit(self, address, name, args):
        topics, data = abi.encode_log(name, args)
        decoded = abi.decode_log(topics, data)
        log = Log(address, topics, data, name, decoded.args)
        if self._pending is not None:
            self._pending.append(log)
        else:
            self.logs.append(log)

    def _execute(self, sender, to, work):
        with self._lock:
            snapshot = {addr: c.snapshot() for addr, c in self.contracts.items()}
            outer = self._pending
            self._pending = []
            try:
                result = work()
            except Exception:
                for addr, state in snapshot.items():
                    self.contracts[addr].restore(state)
                self._pending = outer
                raise
            logs, self._pending = self._pending, outer
            self.logs.extend(logs)
            receipt = Receipt(1, self.tx_count, sender, to, logs, result)
            self.tx_count += 1
            return receipt

    def deploy(self, contract_cls, deployer, *args, **kwargs):
        deployer = normalize_address(deployer)
        with self._lock:
            address = self._next_address(deployer)
            created = []

            def work():
                contract = contract_cls(self, address, deployer, *args, **kwargs)
                created.append(contract)
                return b""

            self._execute(deployer, address, work)
            self.contracts[address] = created[0]
            return created[0]

    def get(self, address):
        return self.contracts.get(normalize_address(address))

    def transact(self, sender, to, calldata) -> Receipt:
        """Submit `calldata` to contract `to` from `sender`. Reverts raise ContractRevert."""
        sender = normalize_address(sender)
        contract = self._require_contract(to)
        return self._execute(sender, contract.address, lambda: contract.dispatch(sender, calldata))

    def call(self, to, calldata) -> bytes:
        """Read-only call; returns ABI-encoded return data."""
        contract = self._require_contract(to)
        fn, _ = abi.decode_call(calldata, contract.SELECTORS)
        if not fn.view:
            raise ValueError(f"{fn.name} is not a view function")
        with self._lock:
            return contract.dispatch(None, calldata)

    def _require_contract(self, to):
        contract = self.get(to)
        if contract is None:
            raise ValueError(f"No contract at {to}")
        return contract

    def events(self, address=None, name=None):
        return [
            log for log in self.logs
            if (address is None or log.address == normalize_address(address))
            and (name is None or log.event == name)
        ]
