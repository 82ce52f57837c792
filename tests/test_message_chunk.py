import pytest

from mycelium.message_chunk import InsufficientChunkSpace, MessageChunk
from mycelium.wire import MESSAGE_HEADER_SIZE, PACKET_CAPACITY, Flags, MessagePacket

CHUNK_DATA = bytes(range(1, 17))


def _packet_with_body(offset: int, data: bytes) -> MessagePacket:
    raw = bytearray(MESSAGE_HEADER_SIZE + offset + len(data))
    raw[MESSAGE_HEADER_SIZE + offset :] = data
    return MessagePacket(raw)


def test_chunk_flag_set():
    packet = MessageChunk(MessagePacket()).into_inner()
    assert Flags.CHUNK in packet.flags()


def test_read_chunk_idx():
    mc = MessageChunk(_packet_with_body(0, bytes([0, 0, 0, 0, 0, 0, 100, 73])))
    assert mc.chunk_idx() == 25_673


def test_write_chunk_idx():
    packet = MessagePacket()
    mc = MessageChunk(packet)
    mc.set_chunk_idx(723)
    assert bytes(packet.body()[:8]) == bytes([0, 0, 0, 0, 0, 0, 2, 211])
    assert mc.chunk_idx() == 723


def test_read_chunk_offset():
    mc = MessageChunk(_packet_with_body(8, bytes([0, 0, 0, 0, 0, 20, 40, 60])))
    assert mc.chunk_offset() == 1_321_020


def test_write_chunk_offset():
    packet = MessagePacket()
    mc = MessageChunk(packet)
    mc.set_chunk_offset(1_000_000)
    assert bytes(packet.body()[8:16]) == bytes([0, 0, 0, 0, 0, 15, 66, 64])
    assert mc.chunk_offset() == 1_000_000


def test_read_chunk_size():
    mc = MessageChunk(_packet_with_body(16, bytes([0, 0, 0, 0, 0, 0, 3, 232])))
    assert mc.chunk_size() == 1_000


def test_write_chunk_size():
    packet = MessagePacket()
    mc = MessageChunk(packet)
    mc.set_chunk_size(1_300)
    assert bytes(packet.body()[16:24]) == bytes([0, 0, 0, 0, 0, 0, 5, 20])
    assert mc.chunk_size() == 1_300


def test_chunk_size_capped_by_capacity():
    mc = MessageChunk(MessagePacket())
    mc.set_chunk_size(1 << 40)
    assert mc.chunk_size() == PACKET_CAPACITY - MESSAGE_HEADER_SIZE - 24


def test_read_chunk_data():
    body = len(CHUNK_DATA).to_bytes(8, "big") + CHUNK_DATA
    mc = MessageChunk(_packet_with_body(16, body))
    assert mc.chunk_size() == 16
    assert mc.data() == CHUNK_DATA


def test_write_chunk_data():
    packet = MessagePacket()
    mc = MessageChunk(packet)
    mc.set_chunk_data(CHUNK_DATA)
    assert bytes(packet.body()[16:24]) == bytes([0, 0, 0, 0, 0, 0, 0, 16])
    assert mc.chunk_size() == 16
    assert mc.data() == CHUNK_DATA
    assert len(packet.to_bytes()) == MESSAGE_HEADER_SIZE + 24 + 16


def test_write_chunk_data_oversized():
    mc = MessageChunk(MessagePacket())
    with pytest.raises(InsufficientChunkSpace) as info:
        mc.set_chunk_data(b"\xff" * 1500)
    assert info.value.needed == 1500
    assert info.value.available == PACKET_CAPACITY - MESSAGE_HEADER_SIZE - 24
    assert "needed 1500 bytes" in str(info.value)


def test_into_reply_sets_ack():
    packet = MessageChunk(MessagePacket()).into_reply().into_inner()
    assert packet.flags() == Flags.CHUNK | Flags.ACK


def test_negative_index_rejected():
    mc = MessageChunk(MessagePacket())
    with pytest.raises(ValueError):
        mc.set_chunk_idx(-1)