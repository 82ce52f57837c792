import pytest

from mycelium.message_done import MessageDone
from mycelium.wire import MESSAGE_HEADER_SIZE, Flags, MessagePacket, blake3_digest

CHECKSUM = bytes(range(32))


def _packet_with_body(offset: int, data: bytes) -> MessagePacket:
    raw = bytearray(MESSAGE_HEADER_SIZE + offset + len(data))
    raw[MESSAGE_HEADER_SIZE + offset :] = data
    return MessagePacket(raw)


def test_done_flag_set():
    packet = MessageDone(MessagePacket()).into_inner()
    assert Flags.DONE in packet.flags()


def test_read_chunk_count():
    md = MessageDone(_packet_with_body(0, bytes([0, 0, 0, 0, 0, 0, 73, 55])))
    assert md.chunk_count() == 18_743


def test_write_chunk_count():
    packet = MessagePacket()
    md = MessageDone(packet)
    md.set_chunk_count(10_000)
    assert bytes(packet.body()[:8]) == bytes([0, 0, 0, 0, 0, 0, 39, 16])
    assert md.chunk_count() == 10_000


def test_read_checksum():
    md = MessageDone(_packet_with_body(8, CHECKSUM))
    assert md.checksum() == CHECKSUM


def test_write_checksum():
    packet = MessagePacket()
    md = MessageDone(packet)
    md.set_checksum(CHECKSUM)
    assert bytes(packet.body()[8:40]) == CHECKSUM
    assert md.checksum() == CHECKSUM


def test_checksum_of_digest_round_trip():
    md = MessageDone(MessagePacket())
    digest = blake3_digest(b"hello")
    md.set_checksum(digest)
    assert md.checksum() == digest


def test_wrong_checksum_length():
    md = MessageDone(MessagePacket())
    with pytest.raises(ValueError):
        md.set_checksum(b"\x00" * 31)


def test_used_size():
    packet = MessagePacket()
    MessageDone(packet)
    assert len(packet.to_bytes()) == MESSAGE_HEADER_SIZE + 40


def test_into_reply_sets_ack():
    packet = MessageDone(MessagePacket()).into_reply().into_inner()
    assert packet.flags() == Flags.DONE | Flags.ACK