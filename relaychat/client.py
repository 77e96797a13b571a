"""Chat client: connects to the relay server and runs the chat screen."""

from __future__ import annotations

import argparse
import asyncio
import contextlib
import curses

from relaychat.protocol import (
    MessageType,
    PacketReader,
    chat_request,
    encode_packet,
    join_request,
    message_type,
)
from relaychat.screen import ChatScreen

__all__ = ["ChatClient", "main"]

DEFAULT_HOST = "192.168.1.83"
DEFAULT_PORT = 7777
CONNECT_TIMEOUT = 1.0
EXIT_COMMAND = "/exit"

_READ_SIZE = 4096


class ChatClient:
    """One user's connection to the relay server."""

    def __init__(self, username: str, screen=None) -> None:
        self.username = username
        self.screen = screen
        self.client_id: int | None = None
        self.users: dict[int, str] = {}
        self._reader: asyncio.StreamReader | None = None
        self._writer: asyncio.StreamWriter | None = None

    def username_of(self, client_id: int) -> str:
        """Return the name announced for a client id; KeyError if unknown."""
        return self.users[client_id]

    def handle_packet(self, text: str) -> None:
        """Act on one packet received from the server."""
        try:
            kind = message_type(text)
        except ValueError:
            return
        fields = text.split("|")
        if len(fields) < 2:
            return
        try:
            sender = int(fields[1])
        except ValueError:
            return
        payload = fields[2] if len(fields) > 2 else ""

        if kind is MessageType.CHAT:
            if sender != self.client_id and payload and self.screen is not None:
                name = self.users.get(sender, str(sender))
                self.screen.post_message(name, payload)
        elif kind is MessageType.USER:
            if sender != self.client_id and payload:
                self.users[sender] = payload
        elif kind is MessageType.WELCOME:
            self.client_id = sender

    async def connect(self, host: str, port: int) -> None:
        """Open the connection, raising ConnectionError if it fails."""
        try:
            self._reader, self._writer = await asyncio.wait_for(
                asyncio.open_connection(host, port), CONNECT_TIMEOUT
            )
        except (OSError, asyncio.TimeoutError) as error:
            raise ConnectionError(f"could not connect to {host}:{port}") from error

    def send(self, text: str) -> None:
        """Queue a packet for the server."""
        if self._writer is None:
            raise RuntimeError("client is not connected")
        self._writer.write(encode_packet(text))

    async def receive_loop(self) -> None:
        """Handle packets from the server until the connection ends."""
        if self._reader is None:
            raise RuntimeError("client is not connected")
        packets = PacketReader()
        try:
            while data := await self._reader.read(_READ_SIZE):
                for text in packets.feed(data):
                    self.handle_packet(text)
        except ConnectionError:
            pass

    async def run(self, host: str, port: int) -> bool:
        """Connect, join, and chat until the user types the exit command.

        Returns False if the connection could not be made.
        """
        try:
            await self.connect(host, port)
        except ConnectionError:
            print(f"Connection to {host}:{port} failed.")
            return False
        print(f"Connection to {host}:{port} succeeded.")
        print("Client initialized successfully.")

        receiver = asyncio.create_task(self.receive_loop())
        try:
            self.send(join_request(self.username))
            await self._writer.drain()
            if self.screen is None:
                self.screen = ChatScreen(curses.initscr())
            with self.screen:
                while True:
                    message = await asyncio.to_thread(self.screen.check_box_input)
                    self.screen.post_message(self.username, message)
                    self.send(chat_request(message))
                    await self._writer.drain()
                    if message == EXIT_COMMAND:
                        break
        finally:
            receiver.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await receiver
            self._writer.close()
            with contextlib.suppress(ConnectionError):
                await self._writer.wait_closed()
        return True


def _prompt_username() -> str:
    while True:
        words = input("enter the name: ").split()
        if words:
            return words[0]


def main(argv=None) -> int:
    """Ask for a user name and chat with the server."""
    parser = argparse.ArgumentParser(prog="relaychat", description="Chat through a relay server.")
    parser.add_argument("--host", default=DEFAULT_HOST, help="server address")
    parser.add_argument("--port", type=int, default=DEFAULT_PORT, help="server port")
    args = parser.parse_args(argv)
    try:
        username = _prompt_username()
    except EOFError:
        return 1
    client = ChatClient(username, None)
    try:
        asyncio.run(client.run(args.host, args.port))
    except KeyboardInterrupt:
        return 0
    return 0


if __name__ == "__main__":
    raise SystemExit(main())