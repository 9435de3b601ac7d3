"""
EIP-712 domain and message encoding for TaskManager authorizations.

Two message kinds are signed by the task master:

    ScreeningRequest(address participant,string taskId,uint256 nonce)
    RewardClaimRequest(address participant,string rewardId,uint256 nonce)

under the domain

    EIP712Domain(string name,string version,uint256 chainId,address verifyingContract)

with name "TaskManager" and version "1". Field order and type strings are part
of the signing contract: changing either changes every digest.

`typed_data` produces the JSON form handed to wallets and eth_account.
`typed_data_digest` is an independent encoder built directly from eth_abi and
keccak, the way the contract computes it; the two must always agree.
"""

from collections import namedtuple

from eth_abi import encode
from eth_utils import is_address, to_checksum_address

from .config import DEFAULT_CHAIN_ID
from .util import UINT256_MAX, keccak_bytes

DOMAIN_NAME = "TaskManager"
DOMAIN_VERSION = "1"

SCREENING_REQUEST = "ScreeningRequest"
REWARD_CLAIM_REQUEST = "RewardClaimRequest"

EIP712_DOMAIN_FIELDS = (
    ("name", "string"),
    ("version", "string"),
    ("chainId", "uint256"),
    ("verifyingContract", "address"),
)

SCREENING_REQUEST_FIELDS = (
    ("participant", "address"),
    ("taskId", "string"),
    ("nonce", "uint256"),
)

REWARD_CLAIM_REQUEST_FIELDS = (
    ("participant", "address"),
    ("rewardId", "string"),
    ("nonce", "uint256"),
)

MESSAGE_FIELDS = {
    SCREENING_REQUEST: SCREENING_REQUEST_FIELDS,
    REWARD_CLAIM_REQUEST: REWARD_CLAIM_REQUEST_FIELDS,
}

Domain = namedtuple("Domain", ["name", "version", "chain_id", "verifying_contract"])

# ============================================================
#  Validation
# ============================================================

def normalize_address(address):
    """Return the checksum form of `address`; ValueError if it is not one."""
    if isinstance(address, (bytes, bytearray)) and len(address) == 20:
        return to_checksum_address(bytes(address))
    if not isinstance(address, str) or not is_address(address):
        raise ValueError(f"Invalid address: {address!r}")
    return to_checksum_address(address)


def _check_uint256(value, label):
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValueError(f"{label} must be an integer, got {type(value).__name__}")
    if value < 0 or value > UINT256_MAX:
        raise ValueError(f"{label} out of uint256 range: {value}")
    return value


def _check_string(value, label):
    if not isinstance(value, str):
        raise ValueError(f"{label} must be a string, got {type(value).__name__}")
    return value

# ============================================================
#  Domain & messages
# ============================================================

def build_domain(verifying_contract, chain_id=DEFAULT_CHAIN_ID) -> Domain:
    if isinstance(chain_id, bool) or not isinstance(chain_id, int) or chain_id <= 0:
        raise ValueError(f"chain_id must be a positive integer, got {chain_id!r}")
    return Domain(
        name=DOMAIN_NAME,
        version=DOMAIN_VERSION,
        chain_id=chain_id,
        verifying_contract=normalize_address(verifying_contract),
    )


def screening_request(participant, task_id, nonce) -> dict:
    return {
        "participant": normalize_address(participant),
        "taskId": _check_string(task_id, "task_id"),
        "nonce": _check_uint256(nonce, "nonce"),
    }


def reward_claim_request(participant, reward_id, nonce) -> dict:
    return {
        "participant": normalize_address(participant),
        "rewardId": _check_string(reward_id, "reward_id"),
        "nonce": _check_uint256(nonce, "nonce"),
    }


def domain_dict(domain: Domain) -> dict:
    return {
        "name": domain.name,
        "version": domain.version,
        "chainId": domain.chain_id,
        "verifyingContract": domain.verifying_contract,
    }


def typed_data(domain: Domain, primary_type, message) -> dict:
    """Full EIP-712 payload: {types, primaryType, domain, message}."""
    if primary_type not in MESSAGE_FIELDS:
        raise ValueError(f"Unknown message type: {primary_type}")
    return {
        "types": {
            "EIP712Domain": [{"name": n, "type": t} for n, t in EIP712_DOMAIN_FIELDS],
            primary_type: [{"name": n, "type": t} for n, t in MESSAGE_FIELDS[primary_type]],
        },
        "primaryType": primary_type,
        "domain": domain_dict(domain),
        "message": dict(message),
    }


def screening_typed_data(domain, participant, task_id, nonce):
    return typed_data(domain, SCREENING_REQUEST, screening_request(participant, task_id, nonce))


def reward_claim_typed_data(domain, participant, reward_id, nonce):
    return typed_data(domain, REWARD_CLAIM_REQUEST, reward_claim_request(participant, reward_id, nonce))

# ============================================================
#  Struct hashing (contract-side encoder)
# ============================================================

def encode_type(type_name, fields) -> bytes:
    """e.g. b"ScreeningRequest(address participant,string taskId,uint256 nonce)" """
    inner = ",".join(f"{t} {n}" for n, t in fields)
    return f"{type_name}({inner})".encode()


def type_hash(type_name, fields) -> bytes:
    return keccak_bytes(encode_type(type_name, fields))


EIP712_DOMAIN_TYPEHASH = type_hash("EIP712Domain", EIP712_DOMAIN_FIELDS)
SCREENING_REQUEST_TYPEHASH = type_hash(SCREENING_REQUEST, SCREENING_REQUEST_FIELDS)
REWARD_CLAIM_REQUEST_TYPEHASH = type_hash(REWARD_CLAIM_REQUEST, REWARD_CLAIM_REQUEST_FIELDS)


def _encode_value(field_type, value):
    """Map one field to its (abi type, abi value) pair per encodeData."""
    if field_type == "string":
        return "bytes32", keccak_bytes(value.encode("utf-8"))
    if field_type == "bytes":
        return "bytes32", keccak_bytes(bytes(value))
    if field_type == "address":
        return "address", bytes.fromhex(normalize_address(value)[2:])
    return field_type, value


def hash_struct(type_name, fields, values) -> bytes:
    types = ["bytes32"]
    data = [type_hash(type_name, fields)]
    for name, field_type in fields:
        abi_type, abi_value = _encode_value(field_type, values[name])
        types.append(abi_type)
        data.append(abi_value)
    return keccak_bytes(encode(types, data))


def domain_separator(domain: Domain) -> bytes:
    return hash_struct("EIP712Domain", EIP712_DOMAIN_FIELDS, domain_dict(domain))


def typed_data_digest(domain: Domain, primary_type, message) -> bytes:
    """keccak256("\\x19\\x01" || domainSeparator || structHash)"""
    struct_hash = hash_struct(primary_type, MESSAGE_FIELDS[primary_type], message)
    return keccak_bytes(b"\x19\x01" + domain_separator(domain) + struct_hash)


def screening_digest(domain, participant, task_id, nonce):
    return typed_data_digest(domain, SCREENING_REQUEST, screening_request(participant, task_id, nonce))


def reward_claim_digest(domain, participant, reward_id, nonce):
    return typed_data_digest(domain, REWARD_CLAIM_REQUEST, reward_claim_request(participant, reward_id, nonce))
