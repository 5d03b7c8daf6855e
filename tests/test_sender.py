import pytest

from sasmvm.protocol import format_registration, format_user_message
from sasmvm.sender import PairingSender


SENDER_ID = "239.255.0.1:50002"


def test_registration_uses_sender_id():
    sender = PairingSender(SENDER_ID)
    assert sender.registration() == format_registration(SENDER_ID)


def test_pair_records_receiver():
    sender = PairingSender(SENDER_ID)
    sender.pair("receiver-a")
    assert sender.paired == {SENDER_ID: "receiver-a"}


def test_prepare_for_paired_receiver():
    sender = PairingSender(SENDER_ID)
    sender.pair("receiver-a")
    receiver_id, body, message = sender.prepare("receiver-a|hello there")
    assert (receiver_id, body) == ("receiver-a", "hello there")
    assert message == format_user_message("receiver-a", SENDER_ID, "hello there")


def test_prepare_rejects_unpaired_receiver():
    sender = PairingSender(SENDER_ID)
    sender.pair("receiver-a")
    with pytest.raises(ValueError, match="not paired"):
        sender.prepare("receiver-b|hi")


def test_prepare_rejects_bad_format():
    sender = PairingSender(SENDER_ID)
    sender.pair("receiver-a")
    with pytest.raises(ValueError, match="Invalid input format"):
        sender.prepare("receiver-a hi")


def test_prepare_before_pairing_rejects_named_receiver():
    sender = PairingSender(SENDER_ID)
    with pytest.raises(ValueError):
        sender.prepare("receiver-a|hi")


def test_format_paired_lists_pair():
    sender = PairingSender(SENDER_ID)
    sender.pair("receiver-a")
    assert f"Sender ID: {SENDER_ID} | Receiver ID: receiver-a" in sender.format_paired()