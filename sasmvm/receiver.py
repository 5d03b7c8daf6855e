"""Multicast receiver that pairs with the first sender to register."""

from __future__ import annotations

import socket
import struct
import sys

from .protocol import (
    MAX_MSG_LEN,
    MULTICAST_GROUP,
    MULTICAST_PORT,
    Device,
    format_pairing_reply,
    parse_registration,
)


def _decode(data):
    return data.split(b"\0", 1)[0].decode("utf-8", errors="replace")


class PairingReceiver:
    """Pairs with the first sender that registers and ignores the rest.

    Log lines go to ``out``, or to standard output when it is None.
    """

    def __init__(self, out=None):
        self._out = out
        self.paired_device = None

    def _log(self, text):
        (sys.stdout if self._out is None else self._out).write(text + "\n")

    @property
    def paired(self):
        return self.paired_device is not None

    def handle_message(self, message):
        """Process one message; return the reply to send, or None."""
        self._log(f"Received message: {message}")
        sender_id = parse_registration(message)
        if sender_id is None:
            return None
        if self.paired_device is not None:
            self._log(
                f"Already paired with sender: {self.paired_device.id}, "
                "ignoring other registrations."
            )
            return None
        self.paired_device = Device(sender_id, message)
        self._log(f"Paired with sender: {sender_id}")
        return format_pairing_reply(sender_id)


def open_multicast_socket(group=MULTICAST_GROUP, port=MULTICAST_PORT):
    """A UDP socket bound to ``port`` on all interfaces and joined to ``group``."""
    sock = socket.socket(socket.AF_INET, socket.SOCK_DGRAM)
    try:
        reuse = getattr(socket, "SO_REUSEPORT", socket.SO_REUSEADDR)
        sock.setsockopt(socket.SOL_SOCKET, reuse, 1)
        sock.bind(("", port))
        membership = struct.pack(
            "4s4s", socket.inet_aton(group), socket.inet_aton("0.0.0.0")
        )
        sock.setsockopt(socket.IPPROTO_IP, socket.IP_ADD_MEMBERSHIP, membership)
    except OSError:
        sock.close()
        raise
    return sock


def main(argv=None):
    """Listen for registrations and answer the first one; return the exit code."""
    try:
        sock = open_multicast_socket(MULTICAST_GROUP, MULTICAST_PORT)
    except OSError as error:
        print(f"socket: {error}", file=sys.stderr)
        return 1

    receiver = PairingReceiver()
    print(f"Listening for multicast messages on {MULTICAST_GROUP}:{MULTICAST_PORT}")
    with sock:
        try:
            while True:
                data, _ = sock.recvfrom(MAX_MSG_LEN - 1)
                reply = receiver.handle_message(_decode(data))
                if reply is not None:
                    sock.sendto(reply.encode("utf-8"), (MULTICAST_GROUP, MULTICAST_PORT))
        except OSError as error:
            print(f"recvfrom: {error}", file=sys.stderr)
            return 1
        except KeyboardInterrupt:
            return 0


if __name__ == "__main__":
    sys.exit(main())