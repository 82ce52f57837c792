"""The INIT message, which announces a new message and its length."""

from __future__ import annotations

from mycelium.wire import Flags, MessagePacket

_LENGTH = slice(0, 8)
_TOPIC_LEN_OFFSET = 8
_TOPIC_OFFSET = 9
MAX_TOPIC_LENGTH = 0xFF
"""Largest topic, in bytes, an init message can carry."""


class MessageInit:
    """An init message in a :class:`MessagePacket`.

    Body layout: 8 bytes message length, 1 byte topic length, then the topic.
    """

    def __init__(self, packet: MessagePacket) -> None:
        packet.set_used_buffer_size(_TOPIC_OFFSET)
        packet.set_flag(Flags.INIT)
        self._packet = packet

    def length(self) -> int:
        """Length of the full message, as written in the body."""
        return int.from_bytes(self._packet.body()[_LENGTH], "big")

    def set_length(self, length: int) -> None:
        """Write the length of the full message into the body."""
        if not 0 <= length < 1 << 64:
            raise ValueError(f"length {length} does not fit in 64 bits")
        self._packet.body()[_LENGTH] = length.to_bytes(8, "big")

    def topic(self) -> bytes:
        """The topic of the message, as written in the body."""
        body = self._packet.body()
        topic_len = body[_TOPIC_LEN_OFFSET]
        return bytes(body[_TOPIC_OFFSET : _TOPIC_OFFSET + topic_len])

    def set_topic(self, topic: bytes) -> None:
        """Write ``topic`` into the body.

        Raises ValueError if the topic is longer than 255 bytes.
        """
        if len(topic) > MAX_TOPIC_LENGTH:
            raise ValueError("Topic can be 255 bytes long at most")
        self._packet.set_used_buffer_size(_TOPIC_OFFSET + len(topic))
        body = self._packet.body()
        body[_TOPIC_LEN_OFFSET] = len(topic)
        body[_TOPIC_OFFSET : _TOPIC_OFFSET + len(topic)] = bytes(topic)

    def into_reply(self) -> MessageInit:
        """Mark this message as an acknowledgement and return it."""
        self._packet.set_flag(Flags.ACK)
        return self

    def into_inner(self) -> MessagePacket:
        """The underlying message packet."""
        return self._packet