"""
Explicitly constructed context owning the client handles of one request or run.

    with TaskContext(load_settings()) as ctx:
        package = create_screening_signature_package(ctx.signer, ctx.domain, proxy, task_id)
"""

import requests

from .eip712 import build_domain
from .rpc import TaskManagerReader
from .signer import LocalKeySigner, RemoteWalletSigner


class TaskContext:
    def __init__(self, settings, session=None):
        self.settings = settings
        self._owns_session = session is None
        self.session = session if session is not None else requests.Session()
        self._signer = None
        self._reader = None

    @property
    def signer(self):
        if self._signer is None:
            s = self.settings
            if s.signer_key:
                self._signer = LocalKeySigner(s.signer_key)
            elif s.wallet_rpc_url and s.wallet_address:
                self._signer = RemoteWalletSigner(
                    s.wallet_rpc_url, s.wallet_address, session=self.session, wallet_id=s.wallet_id)
            else:
                raise ValueError(
                    "No signing authority configured: set TASKAUTH_SIGNER_KEY or "
                    "TASKAUTH_WALLET_RPC_URL and TASKAUTH_WALLET_ADDRESS")
        return self._signer

    @property
    def contract_address(self):
        if not self.settings.contract_address:
            raise ValueError("No TaskManager address configured: set TASKAUTH_CONTRACT_ADDRESS")
        return self.settings.contract_address

    @property
    def domain(self):
        return build_domain(self.contract_address, self.settings.chain_id)

    @property
    def reader(self):
        if self._reader is None:
            self._reader = TaskManagerReader(
                self.settings.rpc_url, self.contract_address, session=self.session)
        return self._reader

    def close(self):
        if self._owns_session:
            self.session.close()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()
        return False
