"""Multicast sender that registers, pairs with a receiver and sends messages."""

from __future__ import annotations

import socket
import struct
import sys

from .protocol import (
    MAX_MSG_LEN,
    MULTICAST_GROUP,
    MULTICAST_PORT,
    format_paired_devices,
    format_registration,
    format_user_message,
    generate_unique_port,
    make_sender_id,
    parse_send_input,
)

_PROMPT = (
    "\nEnter the message body and the paired receiver ID to send a message in the format:\n"
    "ReceiverID|Your message\n"
    "Enter 'exit' to quit.\n"
)


def _decode(data):
    return data.split(b"\0", 1)[0].decode("utf-8", errors="replace")


class PairingSender:
    """A sender's identity and the receivers it is paired with."""

    def __init__(self, sender_id):
        self.sender_id = sender_id
        self.paired = {}

    def registration(self):
        """The registration message to multicast."""
        return format_registration(self.sender_id)

    def pair(self, receiver_id):
        """Record ``receiver_id`` as this sender's receiver."""
        self.paired[self.sender_id] = receiver_id

    def prepare(self, text):
        """Turn ``ReceiverID|message`` input into the message to send.

        Returns ``(receiver_id, body, message)``. Raises ValueError when the
        input is malformed or names a receiver this sender is not paired with.
        """
        receiver_id, body = parse_send_input(text)
        if self.paired.get(self.sender_id, "") != receiver_id:
            raise ValueError(
                "Error: Receiver ID not paired with this sender. Please try again."
            )
        return receiver_id, body, format_user_message(receiver_id, self.sender_id, body)

    def format_paired(self):
        """The listing of paired devices."""
        return format_paired_devices(self.paired)


def _open_socket():
    sock = socket.socket(socket.AF_INET, socket.SOCK_DGRAM)
    try:
        sock.setsockopt(socket.IPPROTO_IP, socket.IP_MULTICAST_TTL, 1)
        membership = struct.pack(
            "4s4s", socket.inet_aton(MULTICAST_GROUP), socket.inet_aton("0.0.0.0")
        )
        sock.setsockopt(socket.IPPROTO_IP, socket.IP_ADD_MEMBERSHIP, membership)
    except OSError:
        sock.close()
        raise
    return sock


def main(argv=None):
    """Register, wait for a pairing reply, then send typed messages."""
    sender = PairingSender(make_sender_id(generate_unique_port()))
    target = (MULTICAST_GROUP, MULTICAST_PORT)
    try:
        sock = _open_socket()
    except OSError as error:
        print(f"socket: {error}", file=sys.stderr)
        return 1

    with sock:
        try:
            message = sender.registration()
            sock.sendto(message.encode("utf-8"), target)
            print(f"Sent registration message: {message}")

            data, _ = sock.recvfrom(MAX_MSG_LEN - 1)
            receiver_id = _decode(data)
            sender.pair(receiver_id)
            print(f"Paired with receiver: {receiver_id}")
            print(sender.format_paired(), end="")

            while True:
                print(_PROMPT, end="")
                try:
                    line = input("Input: ")
                except EOFError:
                    break
                if line == "exit":
                    break
                try:
                    receiver_id, body, message = sender.prepare(line)
                except ValueError as error:
                    print(error, file=sys.stderr)
                    continue
                sock.sendto(message.encode("utf-8"), target)
                print(f"Sent message to {receiver_id}: {body}")
                print(sender.format_paired(), end="")
        except OSError as error:
            print(f"socket: {error}", file=sys.stderr)
            return 1
        except KeyboardInterrupt:
            return 0
    return 0


if __name__ == "__main__":
    sys.exit(main())