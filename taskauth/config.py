"""
Configuration from environment variables, falling back to a project .env file.

Environment:
    TASKAUTH_RPC_URL           - ledger JSON-RPC endpoint (eth_call, receipts)
    TASKAUTH_CHAIN_ID          - chain id bound into the EIP-712 domain (default 42220, Celo)
    TASKAUTH_CONTRACT_ADDRESS  - deployed TaskManager address
    TASKAUTH_SIGNER_KEY        - (optional) task master private key for local signing
    TASKAUTH_WALLET_RPC_URL    - (optional) custody service JSON-RPC endpoint
    TASKAUTH_WALLET_ADDRESS    - (optional) task master address held by the custody service
    TASKAUTH_WALLET_ID         - (optional) custody wallet identifier
"""

import os
from collections import namedtuple

DEFAULT_CHAIN_ID = 42220  # Celo mainnet
DEFAULT_RPC_URL = "https://forno.celo.org"

Settings = namedtuple("Settings", [
    "rpc_url",
    "chain_id",
    "contract_address",
    "signer_key",
    "wallet_rpc_url",
    "wallet_address",
    "wallet_id",
])


def default_env_path():
    return os.path.join(os.getcwd(), ".env")


def read_env_file(env_path):
    """Parse KEY=VALUE lines of a .env file. Missing file -> empty dict."""
    values = {}
    if not env_path or not os.path.exists(env_path):
        return values
    with open(env_path) as f:
        for line in f:
            line = line.strip()
            if not line or line.startswith("#") or "=" not in line:
                continue
            key, value = line.split("=", 1)
            values[key.strip()] = value.strip().strip('"').strip("'")
    return values


def load_env_value(name, default=None, env_path=None, _file_cache=None):
    value = os.environ.get(name)
    if value:
        return value
    file_values = _file_cache if _file_cache is not None else read_env_file(env_path or default_env_path())
    return file_values.get(name) or default


def load_settings(env_path=None):
    file_values = read_env_file(env_path or default_env_path())

    def get(name, default=None):
        return load_env_value(name, default, _file_cache=file_values)

    chain_id_raw = get("TASKAUTH_CHAIN_ID", str(DEFAULT_CHAIN_ID))
    try:
        chain_id = int(chain_id_raw, 0)
    except ValueError:
        raise ValueError(f"TASKAUTH_CHAIN_ID is not an integer: {chain_id_raw!r}")

    return Settings(
        rpc_url=get("TASKAUTH_RPC_URL", DEFAULT_RPC_URL),
        chain_id=chain_id,
        contract_address=get("TASKAUTH_CONTRACT_ADDRESS"),
        signer_key=get("TASKAUTH_SIGNER_KEY"),
        wallet_rpc_url=get("TASKAUTH_WALLET_RPC_URL"),
        wallet_address=get("TASKAUTH_WALLET_ADDRESS"),
        wallet_id=get("TASKAUTH_WALLET_ID"),
    )
