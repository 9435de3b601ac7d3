import pytest

from taskauth.erc20 import RewardToken
from taskauth.ledger import Ledger
from taskauth.signer import LocalKeySigner
from taskauth.task_manager import TaskManager

# Hardhat default accounts #0 and #1
TASK_MASTER_KEY = "0xac0974bec39a17e36ba4a6b4d238ff944bacb478cbed5efcae784d7bf4f2ff80"
TASK_MASTER_ADDRESS = "0xf39Fd6e51aad88F6F4ce6aB8827279cffFb92266"
OTHER_KEY = "0x59c6995e998f97a5a0044966f0945389dc9e86dae88c7a8412f4603b6b78690d"
OTHER_ADDRESS = "0x70997970C51812dc3A010C7d01b50e0d17dc79C8"

PARTICIPANT = "0x1111111111111111111111111111111111111111"
PARTICIPANT_2 = "0x2222222222222222222222222222222222222222"
PAX_ACCOUNT = "0x3333333333333333333333333333333333333333"
PAX_ACCOUNT_2 = "0x4444444444444444444444444444444444444444"
CONTRACT = "0x5555555555555555555555555555555555555555"

CHAIN_ID = 42220
REWARD = 2000 * 10**18
TARGET = 5
FUNDING = 10 * REWARD


@pytest.fixture(autouse=True)
def clean_env(monkeypatch, tmp_path):
    for name in (
        "TASKAUTH_RPC_URL", "TASKAUTH_CHAIN_ID", "TASKAUTH_CONTRACT_ADDRESS",
        "TASKAUTH_SIGNER_KEY", "TASKAUTH_WALLET_RPC_URL", "TASKAUTH_WALLET_ADDRESS",
        "TASKAUTH_WALLET_ID",
    ):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.chdir(tmp_path)


@pytest.fixture
def task_master():
    return LocalKeySigner(TASK_MASTER_KEY)


@pytest.fixture
def other_signer():
    return LocalKeySigner(OTHER_KEY)


@pytest.fixture
def ledger():
    return Ledger(chain_id=CHAIN_ID)


@pytest.fixture
def token(ledger, task_master):
    return ledger.deploy(RewardToken, task_master.address)


@pytest.fixture
def task_manager(ledger, token, task_master):
    tm = ledger.deploy(TaskManager, task_master.address, task_master.address, REWARD, TARGET, token.address)
    token.mint(tm.address, FUNDING)
    return tm
