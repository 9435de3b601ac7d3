import pytest

from taskauth import abi
from taskauth.errors import AbiDecodingError

from conftest import CONTRACT, PARTICIPANT, PAX_ACCOUNT


def test_erc20_transfer_selector():
    assert abi.selector("transfer(address,uint256)").hex() == "a9059cbb"


def test_transfer_event_topic():
    assert abi.event_topic("Transfer(address,address,uint256)") == (
        "0xddf252ad1be2c89b69c2b068fc378daa952ba7f163c4a11628f55a4df523b3ef")


def test_function_signatures():
    fns = abi.TASK_MANAGER_FUNCTIONS
    assert abi.function_signature(fns["screenParticipantProxy"]) == (
        "screenParticipantProxy(address,string,uint256,bytes)")
    assert abi.function_signature(fns["processRewardClaimByParticipantProxy"]) == (
        "processRewardClaimByParticipantProxy(address,address,string,uint256,bytes)")
    assert abi.function_signature(fns["pausetask"]) == "pausetask()"
    assert abi.function_signature(fns["checkIfScreeningSignatureIsUsed"]) == (
        "checkIfScreeningSignatureIsUsed(bytes)")


def test_event_signatures():
    assert abi.event_signature(abi.EVENTS["PaxAccountRewarded"]) == "PaxAccountRewarded(address,uint256)"
    assert abi.event_signature(abi.EVENTS["ScreeningSignatureUsed"]) == "ScreeningSignatureUsed(bytes,address)"
    assert abi.event_signature(abi.EVENTS["RewardAmountUpdated"]) == "RewardAmountUpdated(uint256,uint256)"


def test_selectors_are_unique():
    assert len(abi.TASK_MANAGER_SELECTORS) == len(abi.TASK_MANAGER_FUNCTIONS)
    assert len(abi.EVENT_TOPICS) == len(abi.EVENTS)


def test_claim_calldata_decodes():
    sig = bytes(range(65))
    data = abi.encode_call(
        "processRewardClaimByParticipantProxy", PARTICIPANT.lower(), PAX_ACCOUNT, "reward-7", 2**200, sig)

    assert data[:4] == abi.selector("processRewardClaimByParticipantProxy(address,address,string,uint256,bytes)")
    fn, args = abi.decode_call(data)
    assert fn.method == "process_reward_claim_by_participant_proxy"
    assert args == [PARTICIPANT, PAX_ACCOUNT, "reward-7", 2**200, sig]


def test_decode_call_accepts_hex():
    data = "0x" + abi.encode_call("checkIfParticipantProxyIsScreened", PARTICIPANT).hex()
    fn, args = abi.decode_call(data)
    assert fn.name == "checkIfParticipantProxyIsScreened"
    assert args == [PARTICIPANT]


def test_unknown_selector():
    with pytest.raises(AbiDecodingError):
        abi.decode_call(b"\xde\xad\xbe\xef")
    with pytest.raises(AbiDecodingError):
        abi.decode_call(b"\x01")


def test_truncated_calldata():
    data = abi.encode_call("screenParticipantProxy", PARTICIPANT, "task-42", 1, b"\x00" * 65)
    with pytest.raises(AbiDecodingError):
        abi.decode_call(data[:40])


def test_wrong_arity():
    with pytest.raises(ValueError):
        abi.encode_call("pausetask", 1)


def test_result_codec():
    fn = abi.TASK_MANAGER_FUNCTIONS["getOwner"]
    assert abi.decode_result("getOwner", abi.encode_result(fn, CONTRACT)) == CONTRACT
    fn = abi.TASK_MANAGER_FUNCTIONS["checkIfContractIsPaused"]
    assert abi.decode_result("checkIfContractIsPaused", abi.encode_result(fn, True)) is True


def test_indexed_event_log():
    topics, data = abi.encode_log("TaskManagerCreated", [CONTRACT])
    assert len(topics) == 2
    assert data == b""
    event = abi.decode_log(topics, data)
    assert event.name == "TaskManagerCreated"
    assert event.args == {"taskManager": CONTRACT}


def test_unknown_event_topic():
    with pytest.raises(AbiDecodingError):
        abi.decode_log(["0x" + "00" * 32], b"")
    with pytest.raises(AbiDecodingError):
        abi.decode_log([], b"")
