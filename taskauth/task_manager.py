"""
TaskManager contract model: the state machine of record for screening and
reward claims.

Per participant proxy:  Unknown -> Screened -> Rewarded  (no flag is ever cleared)

Every state-changing entry point checks all of its preconditions before the
first effect, so a rejected call leaves state untouched even outside a ledger
transaction. Signatures are verified against the owner (the task master)
using the contract-side EIP-712 encoder in `eip712.typed_data_digest`.

Screening is capped at the target number of participant proxies
(TargetReached); raising the target reopens it. This follows the deployment
tooling, which treats the target as the task's participant limit.
"""

from . import abi
from .eip712 import build_domain, normalize_address, reward_claim_digest, screening_digest
from .errors import (
    AlreadyRewarded,
    AlreadyScreened,
    ConfigurationViolation,
    InsufficientBalance,
    InvalidSignature,
    NotScreened,
    OwnableUnauthorizedAccount,
    PreconditionViolation,
    SignatureReplay,
    TargetReached,
    TaskPaused,
    UnauthorizedSender,
)
from .ledger import Contract
from .verifier import recover_signer, signature_bytes


class ParticipantProxyStatus:
    __slots__ = ("screened", "rewarded")

    def __init__(self, screened=False, rewarded=False):
        self.screened = screened
        self.rewarded = rewarded

    def __repr__(self):
        return f"ParticipantProxyStatus(screened={self.screened}, rewarded={self.rewarded})"

    def __deepcopy__(self, memo):
        return ParticipantProxyStatus(self.screened, self.rewarded)


class TaskManager(Contract):
    FUNCTIONS = abi.TASK_MANAGER_FUNCTIONS
    SELECTORS = abi.TASK_MANAGER_SELECTORS

    def __init__(self, ledger, address, deployer, task_master,
                 reward_amount_per_participant_proxy, target_number_of_participant_proxies,
                 reward_token):
        super().__init__(ledger, address)
        if reward_amount_per_participant_proxy <= 0:
            raise ConfigurationViolation("reward amount must be greater than zero")
        if target_number_of_participant_proxies <= 0:
            raise ConfigurationViolation("target number of participant proxies must be greater than zero")

        self.owner = normalize_address(task_master)
        self.reward_amount_per_participant_proxy = reward_amount_per_participant_proxy
        self.target_number_of_participant_proxies = target_number_of_participant_proxies
        self.reward_token = normalize_address(reward_token)
        self.paused = False
        self.domain = build_domain(address, ledger.chain_id)

        self.participant_proxies = {}
        self.used_screening_signatures = set()
        self.used_claiming_signatures = set()

        self.number_of_screened_participant_proxies = 0
        self.number_of_rewarded_participant_proxies = 0
        self.number_of_claimed_rewards = 0
        self.number_of_used_screening_signatures = 0
        self.number_of_used_claiming_signatures = 0

        self.emit("TaskManagerCreated", address)

    # ============================================================
    #  Guards
    # ============================================================

    def _only_owner(self, sender):
        if sender is None or normalize_address(sender) != self.owner:
            raise OwnableUnauthorizedAccount(str(sender))

    def _when_not_paused(self):
        if self.paused:
            raise TaskPaused("task is paused")

    def _only_participant_proxy(self, sender, participant):
        try:
            sender = normalize_address(sender)
        except ValueError:
            raise UnauthorizedSender(f"invalid sender {sender!r}")
        if sender != participant:
            raise UnauthorizedSender(f"{sender} is not participant proxy {participant}")

    def _require_task_master_signature(self, digest, signature):
        recovered = recover_signer(digest, signature)
        if recovered != self.owner:
            raise InvalidSignature(f"signed by {recovered}, expected {self.owner}")

    def _status(self, participant):
        return self.participant_proxies.get(participant) or ParticipantProxyStatus()

    def _token(self, address):
        token = self.ledger.get(address)
        if token is None or not hasattr(token, "transfer"):
            raise PreconditionViolation(f"no token contract at {address}")
        return token

    # ============================================================
    #  Screening & claiming
    # ============================================================

    def screen_participant_proxy(self, sender, participant, task_id, nonce, signature):
        participant = normalize_address(participant)
        sig = signature_bytes(signature)

        self._when_not_paused()
        self._only_participant_proxy(sender, participant)
        if sig in self.used_screening_signatures:
            raise SignatureReplay("screening signature already used")
        self._require_task_master_signature(
            screening_digest(self.domain, participant, task_id, nonce), sig)
        status = self._status(participant)
        if status.screened:
            raise AlreadyScreened(participant)
        if self.number_of_screened_participant_proxies >= self.target_number_of_participant_proxies:
            raise TargetReached(f"{self.target_number_of_participant_proxies} already screened")

        status.screened = True
        self.participant_proxies[participant] = status
        self.used_screening_signatures.add(sig)
        self.number_of_used_screening_signatures += 1
        self.number_of_screened_participant_proxies += 1

        self.emit("ScreeningSignatureUsed", sig, participant)
        self.emit("ParticipantProxyScreened", participant)

    def process_reward_claim_by_participant_proxy(self, sender, participant, pax_account,
                                                  reward_id, nonce, signature):
        participant = normalize_address(participant)
        pax_account = normalize_address(pax_account)
        sig = signature_bytes(signature)

        self._when_not_paused()
        self._only_participant_proxy(sender, participant)
        status = self._status(participant)
        if not status.screened:
            raise NotScreened(participant)
        if status.rewarded:
            raise AlreadyRewarded(participant)
        if sig in self.used_claiming_signatures:
            raise SignatureReplay("claiming signature already used")
        self._require_task_master_signature(
            reward_claim_digest(self.domain, participant, reward_id, nonce), sig)

        amount = self.reward_amount_per_participant_proxy
        self._token(self.reward_token).transfer(self.address, pax_account, amount)

        status.rewarded = True
        self.participant_proxies[participant] = status
        self.used_claiming_signatures.add(sig)
        self.number_of_used_claiming_signatures += 1
        self.number_of_rewarded_participant_proxies += 1
        self.number_of_claimed_rewards += 1

        self.emit("ClaimingSignatureUsed", sig, participant)
        self.emit("ParticipantProxyMarkedAsRewarded", participant, pax_account)
        self.emit("PaxAccountRewarded", pax_account, amount)

    # ============================================================
    #  Management (owner only)
    # ============================================================

    def update_reward_amount_per_participant_proxy(self, sender, new_amount):
        self._only_owner(sender)
        old = self.reward_amount_per_participant_proxy
        if new_amount == 0:
            raise ConfigurationViolation("reward amount cannot be zero")
        if new_amount < old:
            raise ConfigurationViolation(f"reward amount cannot decrease ({old} -> {new_amount})")
        self.reward_amount_per_participant_proxy = new_amount
        self.emit("RewardAmountUpdated", old, new_amount)

    def update_target_number_of_participant_proxies(self, sender, new_target):
        self._only_owner(sender)
        old = self.target_number_of_participant_proxies
        if new_target == 0:
            raise ConfigurationViolation("target cannot be zero")
        if new_target < old:
            raise ConfigurationViolation(f"target cannot decrease ({old} -> {new_target})")
        self.target_number_of_participant_proxies = new_target
        self.emit("TargetNumberOfParticipantProxiesUpdated", old, new_target)

    def pausetask(self, sender):
        self._only_owner(sender)
        self._when_not_paused()
        self.paused = True
        self.emit("Paused", normalize_address(sender))

    def unpausetask(self, sender):
        self._only_owner(sender)
        if not self.paused:
            raise PreconditionViolation("task is not paused")
        self.paused = False
        self.emit("Unpaused", normalize_address(sender))

    def withdraw_all_reward_token_to_task_manager(self, sender):
        self._only_owner(sender)
        token = self._token(self.reward_token)
        amount = token.balance_of(self.address)
        if amount == 0:
            raise InsufficientBalance("no reward token to withdraw")
        token.transfer(self.address, self.owner, amount)
        self.emit("RewardTokenWithdrawn", self.owner, amount)

    def withdraw_all_given_token_to_task_manager(self, sender, token_address):
        self._only_owner(sender)
        token_address = normalize_address(token_address)
        token = self._token(token_address)
        amount = token.balance_of(self.address)
        if amount == 0:
            raise InsufficientBalance(f"no balance of {token_address} to withdraw")
        token.transfer(self.address, self.owner, amount)
        self.emit("GivenTokenWithdrawn", self.owner, token_address, amount)

    # ============================================================
    #  Views
    # ============================================================

    def check_if_participant_proxy_is_screened(self, participant):
        return self._status(normalize_address(participant)).screened

    def check_if_participant_proxy_is_rewarded(self, participant):
        return self._status(normalize_address(participant)).rewarded

    def check_if_screening_signature_is_used(self, signature):
        return signature_bytes(signature) in self.used_screening_signatures

    def check_if_claiming_signature_is_used(self, signature):
        return signature_bytes(signature) in self.used_claiming_signatures

    def check_if_contract_is_paused(self):
        return self.paused

    def get_number_of_screened_participant_proxies(self):
        return self.number_of_screened_participant_proxies

    def get_number_of_rewarded_participant_proxies(self):
        return self.number_of_rewarded_participant_proxies

    def get_number_of_claimed_rewards(self):
        return self.number_of_claimed_rewards

    def get_number_of_used_screening_signatures(self):
        return self.number_of_used_screening_signatures

    def get_number_of_used_claiming_signatures(self):
        return self.number_of_used_claiming_signatures

    def get_owner(self):
        return self.owner

    def get_reward_amount_per_participant_proxy_in_wei(self):
        return self.reward_amount_per_participant_proxy

    def get_target_number_of_participant_proxies(self):
        return self.target_number_of_participant_proxies

    def get_reward_token_contract_address(self):
        return self.reward_token

    def get_reward_token_contract_balance_amount(self):
        return self._token(self.reward_token).balance_of(self.address)
