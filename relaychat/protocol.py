"""Wire format shared by the chat server and its clients.

Every packet is a short text record whose fields are separated by ``|``
and whose first field is a numeric message type.  On the wire each record
is UTF-8 encoded and terminated by a single NUL byte.

Client to server::

    1|<message>            chat message
    2|<username>           join with a user name

Server to clients::

    1|<id>|<message>       chat message from client <id>
    2|<id>|<username>      client <id> is known as <username>
    3|<id>                 your own client id
    4|<id>                 client <id> has left
"""

from __future__ import annotations

import re
from enum import IntEnum

__all__ = [
    "MessageType",
    "PacketReader",
    "encode_packet",
    "message_type",
    "chat_request",
    "join_request",
    "chat_broadcast",
    "user_broadcast",
    "welcome",
    "leave_broadcast",
]

TERMINATOR = b"\0"
SEPARATOR = "|"

_LEADING_INT = re.compile(r"\s*([+-]?\d+)")


class MessageType(IntEnum):
    """Numeric tag carried in the first field of every packet."""

    CHAT = 1
    USER = 2
    WELCOME = 3
    LEAVE = 4


def encode_packet(text: str) -> bytes:
    """Encode a record for the wire, appending the NUL terminator."""
    if "\0" in text:
        raise ValueError("packet text must not contain a NUL character")
    return text.encode("utf-8") + TERMINATOR


class PacketReader:
    """Reassemble NUL-terminated packets from a byte stream."""

    def __init__(self) -> None:
        self._buffer = bytearray()

    def feed(self, data: bytes) -> list[str]:
        """Add received bytes and return every packet now complete."""
        self._buffer.extend(data)
        *complete, rest = bytes(self._buffer).split(TERMINATOR)
        self._buffer = bytearray(rest)
        return [raw.decode("utf-8", errors="replace") for raw in complete]

    @property
    def pending(self) -> bytes:
        """Bytes received that do not yet form a complete packet."""
        return bytes(self._buffer)


def message_type(text: str) -> MessageType | None:
    """Return the type of a packet, or None if the type number is unknown.

    Raises ValueError if the packet does not start with a number.
    """
    match = _LEADING_INT.match(text)
    if match is None:
        raise ValueError(f"packet has no message type: {text!r}")
    try:
        return MessageType(int(match.group(1)))
    except ValueError:
        return None


def _record(*fields: object) -> str:
    return SEPARATOR.join(str(field) for field in fields)


def chat_request(message: str) -> str:
    """A chat message sent from a client to the server."""
    return _record(int(MessageType.CHAT), message)


def join_request(username: str) -> str:
    """A client's announcement of its user name."""
    return _record(int(MessageType.USER), username)


def chat_broadcast(client_id: int, message: str) -> str:
    """A chat message relayed by the server on behalf of a client."""
    return _record(int(MessageType.CHAT), client_id, message)


def user_broadcast(client_id: int, username: str) -> str:
    """The server's notice that a client id goes by a user name."""
    return _record(int(MessageType.USER), client_id, username)


def welcome(client_id: int) -> str:
    """The server's notice to a newly connected client of its own id."""
    return _record(int(MessageType.WELCOME), client_id)


def leave_broadcast(client_id: int) -> str:
    """The server's notice that a client has disconnected."""
    return _record(int(MessageType.LEAVE), client_id)