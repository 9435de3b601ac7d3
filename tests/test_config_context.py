import pytest
import requests

from taskauth.config import DEFAULT_CHAIN_ID, DEFAULT_RPC_URL, load_env_value, load_settings, read_env_file
from taskauth.context import TaskContext
from taskauth.eip712 import build_domain
from taskauth.signer import LocalKeySigner, RemoteWalletSigner

from conftest import CONTRACT, TASK_MASTER_ADDRESS, TASK_MASTER_KEY


def write_env(path, text):
    path.write_text(text)
    return str(path)


def test_defaults_without_configuration():
    settings = load_settings()
    assert settings.chain_id == DEFAULT_CHAIN_ID == 42220
    assert settings.rpc_url == DEFAULT_RPC_URL
    assert settings.contract_address is None
    assert settings.signer_key is None


def test_read_env_file(tmp_path):
    env = write_env(tmp_path / "custom.env", """
# comment
TASKAUTH_CONTRACT_ADDRESS="0x5555555555555555555555555555555555555555"
TASKAUTH_CHAIN_ID = 44787
not a setting
""")
    assert read_env_file(env) == {
        "TASKAUTH_CONTRACT_ADDRESS": CONTRACT,
        "TASKAUTH_CHAIN_ID": "44787",
    }
    assert read_env_file(str(tmp_path / "missing.env")) == {}


def test_load_settings_from_default_env_file(tmp_path):
    write_env(tmp_path / ".env", f"TASKAUTH_CONTRACT_ADDRESS={CONTRACT}\nTASKAUTH_CHAIN_ID=0xaef3\n")
    settings = load_settings()
    assert settings.contract_address == CONTRACT
    assert settings.chain_id == 44787


def test_environment_overrides_env_file(tmp_path, monkeypatch):
    env = write_env(tmp_path / "other.env", "TASKAUTH_CHAIN_ID=1\nTASKAUTH_RPC_URL=http://file\n")
    monkeypatch.setenv("TASKAUTH_CHAIN_ID", "44787")

    settings = load_settings(env)
    assert settings.chain_id == 44787
    assert settings.rpc_url == "http://file"
    assert load_env_value("TASKAUTH_RPC_URL", env_path=env) == "http://file"
    assert load_env_value("TASKAUTH_WALLET_ID", "none", env_path=env) == "none"


def test_invalid_chain_id(monkeypatch):
    monkeypatch.setenv("TASKAUTH_CHAIN_ID", "celo")
    with pytest.raises(ValueError):
        load_settings()


def test_context_local_signer(monkeypatch):
    monkeypatch.setenv("TASKAUTH_SIGNER_KEY", TASK_MASTER_KEY)
    monkeypatch.setenv("TASKAUTH_WALLET_RPC_URL", "http://custody")
    monkeypatch.setenv("TASKAUTH_WALLET_ADDRESS", TASK_MASTER_ADDRESS)

    with TaskContext(load_settings()) as ctx:
        assert isinstance(ctx.signer, LocalKeySigner)
        assert ctx.signer.address == TASK_MASTER_ADDRESS
        assert ctx.signer is ctx.signer


def test_context_remote_signer(monkeypatch):
    monkeypatch.setenv("TASKAUTH_WALLET_RPC_URL", "http://custody")
    monkeypatch.setenv("TASKAUTH_WALLET_ADDRESS", TASK_MASTER_ADDRESS.lower())
    monkeypatch.setenv("TASKAUTH_WALLET_ID", "wallet-9")

    with TaskContext(load_settings()) as ctx:
        signer = ctx.signer
        assert isinstance(signer, RemoteWalletSigner)
        assert signer.address == TASK_MASTER_ADDRESS
        assert signer.wallet_id == "wallet-9"
        assert signer.session is ctx.session


def test_context_without_signer():
    with TaskContext(load_settings()) as ctx:
        with pytest.raises(ValueError):
            ctx.signer


def test_context_domain(monkeypatch):
    monkeypatch.setenv("TASKAUTH_CONTRACT_ADDRESS", CONTRACT)
    with TaskContext(load_settings()) as ctx:
        assert ctx.domain == build_domain(CONTRACT, 42220)
        assert ctx.reader.contract_address == CONTRACT


def test_context_domain_requires_contract():
    with TaskContext(load_settings()) as ctx:
        with pytest.raises(ValueError):
            ctx.domain


def test_context_closes_only_owned_session():
    closed = []

    class Session(requests.Session):
        def close(self):
            closed.append(self)
            super().close()

    shared = Session()
    with TaskContext(load_settings(), session=shared):
        pass
    assert closed == []
