"""Chat relay server: assigns ids to clients and relays their messages."""

from __future__ import annotations

import argparse
import asyncio
import logging
from dataclasses import dataclass, field

from relaychat.protocol import (
    MessageType,
    PacketReader,
    chat_broadcast,
    encode_packet,
    leave_broadcast,
    message_type,
    user_broadcast,
    welcome,
)

__all__ = ["ClientData", "ChatServer", "main"]

DEFAULT_HOST = "0.0.0.0"
DEFAULT_PORT = 7777
DEFAULT_MAX_CLIENTS = 32

_READ_SIZE = 4096

log = logging.getLogger(__name__)


@dataclass
class ClientData:
    """A connected client: its id, its chosen name and its connection."""

    id: int
    username: str = ""
    writer: object = field(default=None, repr=False, compare=False)


class ChatServer:
    """Relay server that keeps a table of clients and broadcasts to them."""

    def __init__(
        self,
        host: str = DEFAULT_HOST,
        port: int = DEFAULT_PORT,
        max_clients: int = DEFAULT_MAX_CLIENTS,
    ) -> None:
        self.host = host
        self.port = port
        self.max_clients = max_clients
        self.clients: dict[int, ClientData] = {}
        self.listening = asyncio.Event()
        self._last_id = 0

    def handle_connect(self, writer) -> int:
        """Register a new connection and return the id given to it.

        Every known user is announced to all peers, the new one included,
        before the newcomer is told its own id.  Raises
        ConnectionRefusedError when the server is full.
        """
        if len(self.clients) >= self.max_clients:
            raise ConnectionRefusedError("server is full")
        log.info("new peer connected")
        targets = [*self._writers(), writer]
        for client in list(self.clients.values()):
            self._deliver(targets, user_broadcast(client.id, client.username))
        self._last_id += 1
        client_id = self._last_id
        self.clients[client_id] = ClientData(client_id, writer=writer)
        self._deliver([writer], welcome(client_id))
        return client_id

    def handle_receive(self, client_id: int, text: str) -> None:
        """Act on one packet received from a client."""
        log.info("PARSED : %s", text)
        try:
            kind = message_type(text)
        except ValueError:
            return
        if kind is MessageType.CHAT:
            message = text.split("|", 1)[1].split("\n", 1)[0] if "|" in text else ""
            if message:
                self.broadcast(chat_broadcast(client_id, message))
        elif kind is MessageType.USER:
            prefix = f"{int(MessageType.USER)}|"
            if not text.startswith(prefix):
                return
            username = text[len(prefix):].split("\n", 1)[0]
            if not username:
                return
            reply = user_broadcast(client_id, username)
            log.info("SEND : %s", reply)
            self.broadcast(reply)
            client = self.clients.get(client_id)
            if client is not None:
                client.username = username

    def handle_disconnect(self, client_id: int) -> None:
        """Forget a client and tell everyone else it has left."""
        log.info("client %d disconnected", client_id)
        self.clients.pop(client_id, None)
        self.broadcast(leave_broadcast(client_id))

    def broadcast(self, text: str) -> None:
        """Send a packet to every connected client."""
        self._deliver(list(self._writers()), text)

    async def serve(self) -> None:
        """Listen for connections and relay packets until cancelled."""
        server = await asyncio.start_server(self._on_connection, self.host, self.port)
        self.port = server.sockets[0].getsockname()[1]
        self.listening.set()
        async with server:
            await server.serve_forever()

    def _writers(self):
        return (client.writer for client in self.clients.values() if client.writer is not None)

    @staticmethod
    def _deliver(writers, text: str) -> None:
        data = encode_packet(text)
        for writer in writers:
            if not writer.is_closing():
                writer.write(data)

    async def _on_connection(self, reader: asyncio.StreamReader, writer: asyncio.StreamWriter) -> None:
        try:
            client_id = self.handle_connect(writer)
        except ConnectionRefusedError:
            writer.close()
            return
        packets = PacketReader()
        try:
            while data := await reader.read(_READ_SIZE):
                for text in packets.feed(data):
                    self.handle_receive(client_id, text)
                await writer.drain()
        except ConnectionError:
            pass
        finally:
            self.handle_disconnect(client_id)
            writer.close()


def main(argv=None) -> int:
    """Run the relay server until interrupted."""
    parser = argparse.ArgumentParser(prog="relaychat-server", description="Run the chat relay server.")
    parser.add_argument("--host", default=DEFAULT_HOST, help="address to listen on")
    parser.add_argument("--port", type=int, default=DEFAULT_PORT, help="port to listen on")
    parser.add_argument(
        "--max-clients", type=int, default=DEFAULT_MAX_CLIENTS, help="most clients connected at once"
    )
    args = parser.parse_args(argv)
    logging.basicConfig(level=logging.INFO, format="%(message)s")
    server = ChatServer(args.host, args.port, args.max_clients)
    try:
        asyncio.run(server.serve())
    except KeyboardInterrupt:
        return 0
    except OSError as error:
        log.error("An error occurred while trying to create the server: %s", error)
        return 1
    return 0


if __name__ == "__main__":
    raise SystemExit(main())