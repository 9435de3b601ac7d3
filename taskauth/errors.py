"""
Error taxonomy.

Off-chain helpers raise the operational errors (entropy, signing, RPC).
The contract model raises ``ContractRevert`` subclasses; each carries the
revert ``reason`` so callers can tell a bad signature from a replay, an
unscreened participant or a paused task.
"""


class TaskAuthError(Exception):
    """Base class for every error raised by taskauth."""


class EntropyUnavailable(TaskAuthError):
    """The OS random source could not supply bytes."""


class SigningUnavailable(TaskAuthError):
    """The signing authority could not be reached or refused to sign."""


class RPCError(TaskAuthError):
    """A ledger JSON-RPC request failed."""

    def __init__(self, method, message, code=None):
        super().__init__(f"RPC error ({method}): {message}")
        self.method = method
        self.code = code


class AbiDecodingError(TaskAuthError):
    """Calldata or return data does not match the TaskManager ABI."""


# ============================================================
#  Contract reverts
# ============================================================

class ContractRevert(TaskAuthError):
    reason = "Revert"

    def __init__(self, detail=""):
        self.detail = detail
        super().__init__(f"{self.reason}: {detail}" if detail else self.reason)


class InvalidSignature(ContractRevert):
    reason = "InvalidSignature"


class SignatureReplay(ContractRevert):
    reason = "SignatureReplay"


class UnauthorizedSender(ContractRevert):
    reason = "UnauthorizedSender"


class OwnableUnauthorizedAccount(ContractRevert):
    reason = "OwnableUnauthorizedAccount"


class ConfigurationViolation(ContractRevert):
    reason = "ConfigurationViolation"


class PreconditionViolation(ContractRevert):
    reason = "PreconditionViolation"


class TaskPaused(PreconditionViolation):
    reason = "TaskPaused"


class NotScreened(PreconditionViolation):
    reason = "ParticipantProxyNotScreened"


class AlreadyScreened(PreconditionViolation):
    reason = "ParticipantProxyAlreadyScreened"


class AlreadyRewarded(PreconditionViolation):
    reason = "ParticipantProxyAlreadyRewarded"


class TargetReached(PreconditionViolation):
    reason = "TargetNumberOfParticipantProxiesReached"


class InsufficientBalance(PreconditionViolation):
    reason = "InsufficientBalance"
