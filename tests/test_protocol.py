import pytest

from relaychat.protocol import (
    MessageType,
    PacketReader,
    chat_broadcast,
    chat_request,
    encode_packet,
    join_request,
    leave_broadcast,
    message_type,
    user_broadcast,
    welcome,
)


def test_encode_packet_appends_nul():
    assert encode_packet("2|alice") == b"2|alice\x00"


def test_encode_packet_rejects_embedded_nul():
    with pytest.raises(ValueError):
        encode_packet("1|bad\0text")


def test_client_requests_match_wire_format():
    assert join_request("alice") == "2|alice"
    assert chat_request("hello there") == "1|hello there"


def test_server_records_match_wire_format():
    assert chat_broadcast(7, "hi") == "1|7|hi"
    assert user_broadcast(7, "alice") == "2|7|alice"
    assert welcome(7) == "3|7"
    assert leave_broadcast(7) == "4|7"


@pytest.mark.parametrize(
    "text, expected",
    [
        (chat_request("x"), MessageType.CHAT),
        (chat_broadcast(1, "x"), MessageType.CHAT),
        (join_request("bob"), MessageType.USER),
        (user_broadcast(2, "bob"), MessageType.USER),
        (welcome(3), MessageType.WELCOME),
        (leave_broadcast(4), MessageType.LEAVE),
    ],
)
def test_message_type_of_built_records(text, expected):
    assert message_type(text) is expected


def test_message_type_unknown_number_is_none():
    assert message_type("9|1|x") is None


def test_message_type_without_number_raises():
    with pytest.raises(ValueError):
        message_type("hello|1")


def test_reader_round_trip_many_packets():
    texts = [join_request("alice"), chat_request("a|b"), welcome(12)]
    stream = b"".join(encode_packet(t) for t in texts)
    reader = PacketReader()
    assert reader.feed(stream) == texts
    assert reader.pending == b""


def test_reader_reassembles_split_packet():
    reader = PacketReader()
    data = encode_packet(chat_broadcast(3, "split message"))
    head, tail = data[:5], data[5:]
    assert reader.feed(head) == []
    assert reader.pending == head
    assert reader.feed(tail) == [chat_broadcast(3, "split message")]


def test_reader_byte_by_byte_preserves_unicode():
    text = chat_request("héllo wörld")
    reader = PacketReader()
    received = []
    for byte in encode_packet(text):
        received.extend(reader.feed(bytes([byte])))
    assert received == [text]