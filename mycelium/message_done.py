"""The DONE message, sent once every chunk of a message is acknowledged."""

from __future__ import annotations

from mycelium.wire import MESSAGE_CHECKSUM_LENGTH, Flags, MessagePacket

_COUNT = slice(0, 8)
_CHECKSUM = slice(8, 8 + MESSAGE_CHECKSUM_LENGTH)


class MessageDone:
    """A done message in a :class:`MessagePacket`.

    Body layout: 8 bytes chunk count, then the 32 byte message checksum.
    """

    def __init__(self, packet: MessagePacket) -> None:
        packet.set_used_buffer_size(8 + MESSAGE_CHECKSUM_LENGTH)
        packet.set_flag(Flags.DONE)
        self._packet = packet

    def chunk_count(self) -> int:
        """Number of chunks in the message, as written in the body."""
        return int.from_bytes(self._packet.body()[_COUNT], "big")

    def set_chunk_count(self, chunk_count: int) -> None:
        """Write the number of chunks into the body."""
        if not 0 <= chunk_count < 1 << 64:
            raise ValueError(f"chunk count {chunk_count} does not fit in 64 bits")
        self._packet.body()[_COUNT] = chunk_count.to_bytes(8, "big")

    def checksum(self) -> bytes:
        """The message checksum, as written in the body."""
        return bytes(self._packet.body()[_CHECKSUM])

    def set_checksum(self, checksum: bytes) -> None:
        """Write the 32 byte message checksum into the body."""
        if len(checksum) != MESSAGE_CHECKSUM_LENGTH:
            raise ValueError(f"checksum must be {MESSAGE_CHECKSUM_LENGTH} bytes")
        self._packet.body()[_CHECKSUM] = bytes(checksum)

    def into_reply(self) -> MessageDone:
        """Mark this message as an acknowledgement and return it."""
        self._packet.set_flag(Flags.ACK)
        return self

    def into_inner(self) -> MessagePacket:
        """The underlying message packet."""
        return self._packet