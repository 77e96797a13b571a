# relaychat

relaychat is a small chat system for the terminal. One process runs a relay
server. Each participant runs a client. The client shows the conversation in a
curses window and has an input box along the bottom.

## Installation

```
pip install relaychat
```

relaychat has no dependencies outside the standard library. The client draws
its window with the standard `curses` module, so it needs a POSIX terminal.

## Running the server

```
relaychat-server [--host HOST] [--port PORT] [--max-clients N]
```

By default the server listens on `0.0.0.0` port 7777 and accepts up to 32
clients at once. When the server is full, it closes any further connection
straight away. The server logs each packet it receives and each name
announcement it sends. Stop it with Ctrl-C.

## Running a client

```
relaychat-client [--host HOST] [--port PORT]
```

The client connects to `192.168.1.83` port 7777 by default. Pass `--host`
(and `--port` if needed) to reach your own server, for example
`relaychat-client --host 127.0.0.1`.

The client first asks for your name and keeps only the first word you type.
It then tries to connect. If the server does not answer within one second, it
prints `Connection to HOST:PORT failed.` and exits. Once it is connected, it
announces your name and opens the chat window. Type a line (at most 79
characters) and press Enter to send it. Your own line appears in the window
straight away. Lines from other people appear when the server relays them and
are labelled with the sender's name. If a sender has not announced a name yet,
the line is labelled with the sender's numeric id. Send `/exit` to leave. The
`/exit` line is also sent to the chat before the client quits.

## Protocol

Each packet is a UTF-8 text record ended by a single NUL byte. The fields are
separated by `|`, and the first field is a number that gives the kind of
packet:

| Packet            | Direction        | Meaning                                |
|-------------------|------------------|----------------------------------------|
| `1\|<text>`       | client → server  | a chat message                         |
| `1\|<id>\|<text>` | server → clients | a chat message from client `<id>`      |
| `2\|<name>`       | client → server  | announces the sender's user name       |
| `2\|<id>\|<name>` | server → clients | client `<id>` is called `<name>`       |
| `3\|<id>`         | server → client  | welcome; tells a new client its own id |
| `4\|<id>`         | server → clients | client `<id>` has left                 |

When a client connects, the server sends the name of every client already
present to all connected clients, the newcomer included. It then gives the
newcomer the next id, counting up from 1, in a welcome packet. Chat messages
are relayed to every client, the sender included. Clients ignore relayed
messages that carry their own id. Empty messages and empty names are dropped.
When a client disconnects, the server removes it and broadcasts a leave
packet.

## Library use

`relaychat.protocol` builds and reads these packets:

- `chat_request`, `join_request`, `chat_broadcast`, `user_broadcast`,
  `welcome` and `leave_broadcast` return the record text.
- `encode_packet` turns a record into bytes for the wire, adding the
  terminator. It raises `ValueError` if the text contains a NUL.
- `message_type` reads a record's kind as a `MessageType` (`CHAT`, `USER`,
  `WELCOME`, `LEAVE`). It returns `None` for an unknown number and raises
  `ValueError` when the record does not start with a number.
- `PacketReader.feed` takes received bytes and returns every record that is now
  complete. Incomplete bytes stay in `PacketReader.pending`.

`relaychat.server.ChatServer` and `relaychat.client.ChatClient` hold the
server's client table and the client's id-to-name map. Their `handle_*` and
`handle_packet` methods can be driven directly. `relaychat.screen.ChatScreen`
wraps a curses screen and is a context manager that sets up and tears down the
input box.

## Limitations

- Leave packets are sent by the server, but the client does not show them, and
  it keeps the departed user's name.
- Messages are shown only while the client runs. Nothing is stored, and a
  client that joins later sees no earlier messages.
- The chat window does not scroll. Messages are drawn on successive rows from
  the top of the terminal.
- There is no authentication and no encryption. Any name can be claimed, and
  traffic is sent as plain text.

## Development

```
pip install -e ".[test]"
pytest
```