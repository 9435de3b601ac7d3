"""
TaskManager / ERC-20 ABI surface: selectors, calldata, return data and event logs.

Function selectors and event topics are the wire contract with the deployed
TaskManager; both are derived from the canonical signature text, e.g.

    screenParticipantProxy(address,string,uint256,bytes)
    PaxAccountRewarded(address,uint256)
"""

from collections import namedtuple

from eth_abi import decode, encode
from eth_abi.exceptions import DecodingError, EncodingError

from .eip712 import normalize_address
from .errors import AbiDecodingError
from .util import hex_to_bytes, keccak_bytes, to_hex

AbiFunction = namedtuple("AbiFunction", ["name", "inputs", "outputs", "method", "view"])
AbiEvent = namedtuple("AbiEvent", ["name", "types", "names", "indexed"])
Event = namedtuple("Event", ["name", "args"])


def _fn(name, inputs, outputs, method):
    return AbiFunction(name, tuple(inputs), tuple(outputs), method, bool(outputs))


def _ev(name, fields, indexed=()):
    return AbiEvent(
        name,
        tuple(t for _, t in fields),
        tuple(n for n, _ in fields),
        tuple(n in indexed for n, _ in fields),
    )

# ============================================================
#  Functions
# ============================================================

TASK_MANAGER_FUNCTIONS = {f.name: f for f in (
    _fn("screenParticipantProxy",
        ["address", "string", "uint256", "bytes"], [],
        "screen_participant_proxy"),
    _fn("processRewardClaimByParticipantProxy",
        ["address", "address", "string", "uint256", "bytes"], [],
        "process_reward_claim_by_participant_proxy"),
    _fn("updateRewardAmountPerParticipantProxy", ["uint256"], [],
        "update_reward_amount_per_participant_proxy"),
    _fn("updateTargetNumberOfParticipantProxies", ["uint256"], [],
        "update_target_number_of_participant_proxies"),
    _fn("pausetask", [], [], "pausetask"),
    _fn("unpausetask", [], [], "unpausetask"),
    _fn("withdrawAllRewardTokenToTaskManager", [], [],
        "withdraw_all_reward_token_to_task_manager"),
    _fn("withdrawAllGivenTokenTotaskManager", ["address"], [],
        "withdraw_all_given_token_to_task_manager"),
    _fn("checkIfParticipantProxyIsScreened", ["address"], ["bool"],
        "check_if_participant_proxy_is_screened"),
    _fn("checkIfParticipantProxyIsRewarded", ["address"], ["bool"],
        "check_if_participant_proxy_is_rewarded"),
    _fn("checkIfScreeningSignatureIsUsed", ["bytes"], ["bool"],
        "check_if_screening_signature_is_used"),
    _fn("checkIfClaimingSignatureIsUsed", ["bytes"], ["bool"],
        "check_if_claiming_signature_is_used"),
    _fn("checkIfContractIsPaused", [], ["bool"], "check_if_contract_is_paused"),
    _fn("getNumberOfScreenedParticipantProxies", [], ["uint256"],
        "get_number_of_screened_participant_proxies"),
    _fn("getNumberOfRewardedParticipantProxies", [], ["uint256"],
        "get_number_of_rewarded_participant_proxies"),
    _fn("getNumberOfClaimedRewards", [], ["uint256"], "get_number_of_claimed_rewards"),
    _fn("getNumberOfUsedScreeningSignatures", [], ["uint256"],
        "get_number_of_used_screening_signatures"),
    _fn("getNumberOfUsedClaimingSignatures", [], ["uint256"],
        "get_number_of_used_claiming_signatures"),
    _fn("getOwner", [], ["address"], "get_owner"),
    _fn("getRewardAmountPerParticipantProxyInWei", [], ["uint256"],
        "get_reward_amount_per_participant_proxy_in_wei"),
    _fn("getTargetNumberOfParticipantProxies", [], ["uint256"],
        "get_target_number_of_participant_proxies"),
    _fn("getRewardTokenContractAddress", [], ["address"],
        "get_reward_token_contract_address"),
    _fn("getRewardTokenContractBalanceAmount", [], ["uint256"],
        "get_reward_token_contract_balance_amount"),
)}

ERC20_FUNCTIONS = {f.name: f for f in (
    _fn("transfer", ["address", "uint256"], [], "transfer"),
    _fn("balanceOf", ["address"], ["uint256"], "balance_of"),
    _fn("totalSupply", [], ["uint256"], "total_supply"),
)}

# ============================================================
#  Events
# ============================================================

EVENTS = {e.name: e for e in (
    _ev("TaskManagerCreated", [("taskManager", "address")], indexed=("taskManager",)),
    _ev("ParticipantProxyScreened", [("participantProxy", "address")]),
    _ev("ScreeningSignatureUsed", [("signature", "bytes"), ("participantProxy", "address")]),
    _ev("ClaimingSignatureUsed", [("signature", "bytes"), ("participantProxy", "address")]),
    _ev("ParticipantProxyMarkedAsRewarded",
        [("participantProxy", "address"), ("paxAccountContractAddress", "address")]),
    _ev("PaxAccountRewarded",
        [("paxAccountContractAddress", "address"), ("rewardAmount", "uint256")]),
    _ev("RewardAmountUpdated",
        [("oldRewardTokenRewardAmountPerParticipantProxyInWei", "uint256"),
         ("newRewardTokenRewardAmountPerParticipantProxyInWei", "uint256")]),
    _ev("TargetNumberOfParticipantProxiesUpdated",
        [("oldTargetNumberOfParticipantProxies", "uint256"),
         ("newTargetNumberOfParticipantProxies", "uint256")]),
    _ev("Paused", [("sender", "address")]),
    _ev("Unpaused", [("sender", "address")]),
    _ev("RewardTokenWithdrawn", [("taskManager", "address"), ("rewardAmount", "uint256")]),
    _ev("GivenTokenWithdrawn",
        [("taskManager", "address"), ("tokenAddress", "address"), ("rewardAmount", "uint256")]),
    _ev("Transfer", [("from", "address"), ("to", "address"), ("value", "uint256")],
        indexed=("from", "to")),
)}

# ============================================================
#  Signatures, selectors, topics
# ============================================================

def function_signature(fn: AbiFunction) -> str:
    return f"{fn.name}({','.join(fn.inputs)})"


def event_signature(ev: AbiEvent) -> str:
    return f"{ev.name}({','.join(ev.types)})"


def selector(signature_text: str) -> bytes:
    return keccak_bytes(signature_text.encode())[:4]


def event_topic(signature_text: str) -> str:
    """0x-prefixed lowercase keccak256 of an event signature."""
    return to_hex(keccak_bytes(signature_text.encode()))


def selector_table(functions):
    return {selector(function_signature(f)): f for f in functions.values()}


TASK_MANAGER_SELECTORS = selector_table(TASK_MANAGER_FUNCTIONS)
ERC20_SELECTORS = selector_table(ERC20_FUNCTIONS)
EVENT_TOPICS = {event_topic(event_signature(e)): e for e in EVENTS.values()}

# ============================================================
#  Value conversion
# ============================================================

def _to_abi(abi_type, value):
    if abi_type == "address":
        return bytes.fromhex(normalize_address(value)[2:])
    if abi_type == "bytes":
        return hex_to_bytes(value)
    return value


def _from_abi(abi_type, value):
    if abi_type == "address":
        return normalize_address(value)
    return value

# ============================================================
#  Calldata
# ============================================================

def encode_call(name, *args, functions=TASK_MANAGER_FUNCTIONS) -> bytes:
    fn = functions[name]
    if len(args) != len(fn.inputs):
        raise ValueError(f"{name} takes {len(fn.inputs)} arguments, got {len(args)}")
    values = [_to_abi(t, v) for t, v in zip(fn.inputs, args)]
    return selector(function_signature(fn)) + encode(list(fn.inputs), values)


def decode_call(data, selectors=TASK_MANAGER_SELECTORS):
    """Return (AbiFunction, args) for raw calldata."""
    data = hex_to_bytes(data)
    if len(data) < 4:
        raise AbiDecodingError("calldata shorter than a selector")
    fn = selectors.get(data[:4])
    if fn is None:
        raise AbiDecodingError(f"unknown selector 0x{data[:4].hex()}")
    try:
        raw = decode(list(fn.inputs), data[4:])
    except (DecodingError, ValueError, OverflowError) as e:
        raise AbiDecodingError(f"{fn.name}: {e}") from e
    return fn, [_from_abi(t, v) for t, v in zip(fn.inputs, raw)]


def encode_result(fn: AbiFunction, value) -> bytes:
    if not fn.outputs:
        return b""
    try:
        return encode(list(fn.outputs), [_to_abi(fn.outputs[0], value)])
    except EncodingError as e:
        raise AbiDecodingError(f"{fn.name}: cannot encode result {value!r}: {e}") from e


def decode_result(name, data, functions=TASK_MANAGER_FUNCTIONS):
    fn = functions[name]
    data = hex_to_bytes(data)
    if not fn.outputs:
        return None
    try:
        (value,) = decode(list(fn.outputs), data)
    except (DecodingError, ValueError, OverflowError) as e:
        raise AbiDecodingError(f"{name}: {e}") from e
    return _from_abi(fn.outputs[0], value)

# ============================================================
#  Event logs
# ============================================================

def encode_log(name, args):
    """Return (topics, data) for an event emitted with positional `args`."""
    ev = EVENTS[name]
    topics = [event_topic(event_signature(ev))]
    data_types, data_values = [], []
    for abi_type, indexed, value in zip(ev.types, ev.indexed, args):
        if indexed:
            topics.append(to_hex(encode([abi_type], [_to_abi(abi_type, value)])))
        else:
            data_types.append(abi_type)
            data_values.append(_to_abi(abi_type, value))
    return topics, encode(data_types, data_values)


def decode_log(topics, data) -> Event:
    if not topics:
        raise AbiDecodingError("anonymous log")
    ev = EVENT_TOPICS.get(topics[0].lower() if isinstance(topics[0], str) else to_hex(topics[0]))
    if ev is None:
        raise AbiDecodingError(f"unknown event topic {topics[0]}")
    indexed_topics = list(topics[1:])
    data_types = [t for t, i in zip(ev.types, ev.indexed) if not i]
    try:
        data_values = list(decode(data_types, hex_to_bytes(data)))
        args = {}
        for name, abi_type, indexed in zip(ev.names, ev.types, ev.indexed):
            if indexed:
                (value,) = decode([abi_type], hex_to_bytes(indexed_topics.pop(0)))
            else:
                value = data_values.pop(0)
            args[name] = _from_abi(abi_type, value)
    except (DecodingError, ValueError, OverflowError, IndexError) as e:
        raise AbiDecodingError(f"{ev.name}: {e}") from e
    return Event(ev.name, args)
