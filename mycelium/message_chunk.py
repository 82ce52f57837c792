"""The CHUNK message, which carries one piece of a message's data."""

from __future__ import annotations

from mycelium.wire import Flags, MessagePacket

_IDX = slice(0, 8)
_OFFSET = slice(8, 16)
_SIZE = slice(16, 24)
_DATA_START = 24


class InsufficientChunkSpace(ValueError):
    """Raised when chunk data does not fit in the packet."""

    def __init__(self, available: int, needed: int) -> None:
        super().__init__(
            f"Insufficient capacity available, needed {needed} bytes, have {available} bytes"
        )
        self.available = available
        self.needed = needed


def _u64(value: int, what: str) -> bytes:
    if not 0 <= value < 1 << 64:
        raise ValueError(f"{what} {value} does not fit in 64 bits")
    return value.to_bytes(8, "big")


class MessageChunk:
    """A chunk message in a :class:`MessagePacket`.

    Body layout: 8 bytes chunk index, 8 bytes chunk offset, 8 bytes chunk
    size, then the chunk data.
    """

    def __init__(self, packet: MessagePacket) -> None:
        packet.set_used_buffer_size(_DATA_START)
        packet.set_flag(Flags.CHUNK)
        self._packet = packet

    def chunk_idx(self) -> int:
        """Index of the chunk in the message, as written in the body."""
        return int.from_bytes(self._packet.body()[_IDX], "big")

    def set_chunk_idx(self, chunk_idx: int) -> None:
        """Write the chunk index into the body."""
        self._packet.body()[_IDX] = _u64(chunk_idx, "chunk index")

    def chunk_offset(self) -> int:
        """Offset of the chunk in the message, as written in the body."""
        return int.from_bytes(self._packet.body()[_OFFSET], "big")

    def set_chunk_offset(self, chunk_offset: int) -> None:
        """Write the chunk offset into the body."""
        self._packet.body()[_OFFSET] = _u64(chunk_offset, "chunk offset")

    def chunk_size(self) -> int:
        """Size of the chunk, capped at the space the packet can hold."""
        body = self._packet.body()
        return min(int.from_bytes(body[_SIZE], "big"), len(body) - _DATA_START)

    def set_chunk_size(self, chunk_size: int) -> None:
        """Write the chunk size field into the body."""
        self._packet.body()[_SIZE] = _u64(chunk_size, "chunk size")

    def data(self) -> bytes:
        """The chunk data carried in the body."""
        return bytes(self._packet.body()[_DATA_START : _DATA_START + self.chunk_size()])

    def set_chunk_data(self, data: bytes) -> None:
        """Write ``data`` into the body and set the size field to match.

        Raises InsufficientChunkSpace if the data does not fit.
        """
        body = self._packet.body()
        available = len(body) - _DATA_START
        if len(data) > available:
            raise InsufficientChunkSpace(available, len(data))
        body[_DATA_START : _DATA_START + len(data)] = bytes(data)
        self.set_chunk_size(len(data))
        self._packet.set_used_buffer_size(_DATA_START + len(data))

    def into_reply(self) -> MessageChunk:
        """Mark this message as an acknowledgement and return it."""
        self._packet.set_flag(Flags.ACK)
        return self

    def into_inner(self) -> MessagePacket:
        """The underlying message packet."""
        return self._packet