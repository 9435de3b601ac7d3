"""
Minimal ERC-20 used as the TaskManager reward token.
"""

from . import abi
from .eip712 import normalize_address
from .errors import InsufficientBalance
from .ledger import Contract

ZERO_ADDRESS = "0x0000000000000000000000000000000000000000"


class RewardToken(Contract):
    FUNCTIONS = abi.ERC20_FUNCTIONS
    SELECTORS = abi.ERC20_SELECTORS

    def __init__(self, ledger, address, deployer, symbol="RWD", decimals=18):
        super().__init__(ledger, address)
        self.symbol = symbol
        self.decimals = decimals
        self.balances = {}
        self.supply = 0

    def mint(self, to, amount):
        """Credit `amount` to `to` (deploy-time funding)."""
        to = normalize_address(to)
        self.balances[to] = self.balances.get(to, 0) + amount
        self.supply += amount
        self.emit("Transfer", ZERO_ADDRESS, to, amount)

    def balance_of(self, account):
        return self.balances.get(normalize_address(account), 0)

    def total_supply(self):
        return self.supply

    def transfer(self, sender, to, amount):
        sender = normalize_address(sender)
        to = normalize_address(to)
        balance = self.balances.get(sender, 0)
        if balance < amount:
            raise InsufficientBalance(f"{sender} holds {balance}, needs {amount}")
        self.balances[sender] = balance - amount
        self.balances[to] = self.balances.get(to, 0) + amount
        self.emit("Transfer", sender, to, amount)
        return True
