import io

from sasmvm.protocol import format_pairing_reply, format_registration
from sasmvm.receiver import PairingReceiver


def make_receiver():
    out = io.StringIO()
    return PairingReceiver(out=out), out


def test_first_registration_pairs_and_replies():
    receiver, out = make_receiver()
    message = format_registration("239.255.0.1:50001")
    reply = receiver.handle_message(message)
    assert reply == format_pairing_reply("239.255.0.1:50001")
    assert receiver.paired_device.id == "239.255.0.1:50001"
    assert receiver.paired_device.last_seen == message
    assert "Paired with sender: 239.255.0.1:50001" in out.getvalue()


def test_second_registration_is_ignored():
    receiver, out = make_receiver()
    receiver.handle_message(format_registration("first"))
    reply = receiver.handle_message(format_registration("second"))
    assert reply is None
    assert receiver.paired_device.id == "first"
    assert "Already paired with sender: first" in out.getvalue()


def test_message_without_marker_does_not_pair():
    receiver, out = make_receiver()
    assert receiver.handle_message("To: x | hello") is None
    assert receiver.paired is False
    assert out.getvalue() == "Received message: To: x | hello\n"


def test_received_message_is_logged():
    receiver, out = make_receiver()
    receiver.handle_message("Register from node")
    assert out.getvalue().splitlines()[0] == "Received message: Register from node"