"""Messages exchanged by the multicast pairing sender and receiver."""

from __future__ import annotations

import random
from dataclasses import dataclass

MULTICAST_GROUP = "239.255.0.1"
MULTICAST_PORT = 4950
MAX_MSG_LEN = 1024
DYNAMIC_PORTS = range(49152, 65536)

_REGISTRATION_MARKER = "from "
_SEPARATOR = "-------------------------------------"


@dataclass
class Device:
    """A paired peer and the last message seen from it."""

    id: str
    last_seen: str = ""


def _clip(text):
    """Cut ``text`` to what fits in one message buffer, terminator included."""
    data = text.encode("utf-8")[: MAX_MSG_LEN - 1]
    return data.decode("utf-8", errors="ignore")


def generate_unique_port(rng=None):
    """A random port number from the dynamic range."""
    rng = rng if rng is not None else random.SystemRandom()
    return rng.randint(DYNAMIC_PORTS.start, DYNAMIC_PORTS.stop - 1)


def make_sender_id(port):
    """The sender's identifier: the group address and its port."""
    return f"{MULTICAST_GROUP}:{port}"


def format_registration(sender_id):
    """The registration message a sender multicasts."""
    return _clip(f"Register from {sender_id}")


def parse_registration(message):
    """The sender id after ``from `` in ``message``, or None when absent."""
    pos = message.find(_REGISTRATION_MARKER)
    if pos < 0:
        return None
    return message[pos + len(_REGISTRATION_MARKER):]


def format_pairing_reply(sender_id):
    """The acknowledgement a receiver sends after pairing."""
    return f"I'm the receiver for Node: {sender_id}"


def parse_send_input(text):
    """Split ``ReceiverID|message`` at the first ``|``.

    Raises ValueError when there is no ``|``.
    """
    receiver_id, sep, body = text.partition("|")
    if not sep:
        raise ValueError("Invalid input format. Please try again.")
    return receiver_id, body


def format_user_message(receiver_id, sender_id, body):
    """A user message addressed to a paired receiver."""
    return _clip(f"To: {receiver_id} | From: {sender_id} | Message: {body}")


def format_paired_devices(paired):
    """A listing of sender to receiver pairs."""
    lines = ["", "Paired Devices:"]
    lines.extend(
        f"Sender ID: {sender} | Receiver ID: {receiver}"
        for sender, receiver in paired.items()
    )
    lines.append(_SEPARATOR)
    return "\n".join(lines) + "\n"