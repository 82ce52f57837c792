"""Message packet header layout, message identifiers and message checksums."""

from __future__ import annotations

import secrets
import struct
from dataclasses import dataclass
from enum import IntFlag

MESSAGE_HEADER_SIZE = 12
"""Size of the header that starts every message packet: id, flags, reserved."""

MESSAGE_ID_SIZE = 8
"""Size of a message id in bytes."""

MESSAGE_CHECKSUM_LENGTH = 32
"""Length of a message checksum in bytes."""

PACKET_CAPACITY = 1400
"""Total capacity of a message packet buffer, header included."""

_FLAGS_SLICE = slice(MESSAGE_ID_SIZE, MESSAGE_ID_SIZE + 2)


class Flags(IntFlag):
    """Flags carried in the header of a message packet."""

    INIT = 0b1000_0000_0000_0000
    DONE = 0b0100_0000_0000_0000
    ABORTED = 0b0010_0000_0000_0000
    CHUNK = 0b0001_0000_0000_0000
    READ = 0b0000_1000_0000_0000
    REPLY = 0b0000_0100_0000_0000
    ACK = 0b0000_0001_0000_0000


@dataclass(frozen=True, order=True)
class MessageId:
    """Identifier of a message, 8 raw bytes."""

    raw: bytes

    def __post_init__(self) -> None:
        if len(self.raw) != MESSAGE_ID_SIZE:
            raise ValueError(f"message id must be {MESSAGE_ID_SIZE} bytes")
        object.__setattr__(self, "raw", bytes(self.raw))

    @classmethod
    def random(cls) -> MessageId:
        """Generate a new random message id."""
        return cls(secrets.token_bytes(MESSAGE_ID_SIZE))

    @classmethod
    def from_hex(cls, text: str) -> MessageId:
        """Parse a message id from its 16 character hex form."""
        if len(text) != 2 * MESSAGE_ID_SIZE:
            raise ValueError("Message ID is 16 characters long")
        try:
            return cls(bytes.fromhex(text))
        except ValueError:
            raise ValueError("MessageID is not valid hex") from None

    def as_hex(self) -> str:
        """Lower case hex representation of the id."""
        return self.raw.hex()

    def __str__(self) -> str:
        return self.as_hex()


class MessagePacket:
    """A fixed capacity buffer holding a message packet header and body.

    The used size of the packet starts out as just the header.
    """

    def __init__(self, buffer: bytes | bytearray | None = None) -> None:
        self._buffer = bytearray(PACKET_CAPACITY)
        if buffer is not None:
            if len(buffer) > PACKET_CAPACITY:
                raise ValueError(
                    f"packet of {len(buffer)} bytes exceeds capacity of {PACKET_CAPACITY}"
                )
            self._buffer[: len(buffer)] = buffer
        self._size = MESSAGE_HEADER_SIZE

    def message_id(self) -> MessageId:
        """The message id stored in the header."""
        return MessageId(bytes(self._buffer[:MESSAGE_ID_SIZE]))

    def set_message_id(self, message_id: MessageId) -> None:
        """Store ``message_id`` in the header."""
        self._buffer[:MESSAGE_ID_SIZE] = message_id.raw

    def flags(self) -> Flags:
        """The flags stored in the header."""
        return Flags(int.from_bytes(self._buffer[_FLAGS_SLICE], "big"))

    def set_flag(self, flag: Flags) -> None:
        """Set ``flag`` in the header, keeping any flags already set."""
        value = int(self.flags()) | int(flag)
        self._buffer[_FLAGS_SLICE] = value.to_bytes(2, "big")

    def body(self) -> memoryview:
        """Writable view of the whole space after the header."""
        return memoryview(self._buffer)[MESSAGE_HEADER_SIZE:]

    def set_used_buffer_size(self, size: int) -> None:
        """Set how many body bytes are in use."""
        if not 0 <= size <= PACKET_CAPACITY - MESSAGE_HEADER_SIZE:
            raise ValueError(f"body size {size} does not fit in the packet")
        self._size = size + MESSAGE_HEADER_SIZE

    def to_bytes(self) -> bytes:
        """The used part of the packet, header included."""
        return bytes(self._buffer[: self._size])


# BLAKE3 hashing, used for message checksums.

_MASK = 0xFFFFFFFF
_IV = (
    0x6A09E667, 0xBB67AE85, 0x3C6EF372, 0xA54FF53A,
    0x510E527F, 0x9B05688C, 0x1F83D9AB, 0x5BE0CD19,
)
_MSG_PERMUTATION = (2, 6, 3, 10, 7, 0, 4, 13, 1, 11, 12, 5, 9, 14, 15, 8)
_CHUNK_START = 1
_CHUNK_END = 2
_PARENT = 4
_ROOT = 8
_CHUNK_LEN = 1024
_BLOCK_LEN = 64


def _rotr(x: int, n: int) -> int:
    return ((x >> n) | (x << (32 - n))) & _MASK


def _g(s: list[int], a: int, b: int, c: int, d: int, mx: int, my: int) -> None:
    s[a] = (s[a] + s[b] + mx) & _MASK
    s[d] = _rotr(s[d] ^ s[a], 16)
    s[c] = (s[c] + s[d]) & _MASK
    s[b] = _rotr(s[b] ^ s[c], 12)
    s[a] = (s[a] + s[b] + my) & _MASK
    s[d] = _rotr(s[d] ^ s[a], 8)
    s[c] = (s[c] + s[d]) & _MASK
    s[b] = _rotr(s[b] ^ s[c], 7)


def _round(s: list[int], m: list[int]) -> None:
    _g(s, 0, 4, 8, 12, m[0], m[1])
    _g(s, 1, 5, 9, 13, m[2], m[3])
    _g(s, 2, 6, 10, 14, m[4], m[5])
    _g(s, 3, 7, 11, 15, m[6], m[7])
    _g(s, 0, 5, 10, 15, m[8], m[9])
    _g(s, 1, 6, 11, 12, m[10], m[11])
    _g(s, 2, 7, 8, 13, m[12], m[13])
    _g(s, 3, 4, 9, 14, m[14], m[15])


def _compress(
    cv: tuple[int, ...], words: tuple[int, ...], counter: int, block_len: int, flags: int
) -> list[int]:
    state = [
        *cv,
        *_IV[:4],
        counter & _MASK,
        (counter >> 32) & _MASK,
        block_len,
        flags,
    ]
    m = list(words)
    for r in range(7):
        _round(state, m)
        if r < 6:
            m = [m[i] for i in _MSG_PERMUTATION]
    for i in range(8):
        state[i] ^= state[i + 8]
        state[i + 8] ^= cv[i]
    return state


def _words(block: bytes) -> tuple[int, ...]:
    return struct.unpack("<16I", block.ljust(_BLOCK_LEN, b"\0"))


@dataclass(frozen=True)
class _Output:
    cv: tuple[int, ...]
    words: tuple[int, ...]
    counter: int
    block_len: int
    flags: int

    def chaining_value(self) -> tuple[int, ...]:
        return tuple(_compress(self.cv, self.words, self.counter, self.block_len, self.flags)[:8])

    def root_bytes(self) -> bytes:
        state = _compress(self.cv, self.words, 0, self.block_len, self.flags | _ROOT)
        return struct.pack("<8I", *state[:8])


def _chunk_output(chunk: bytes, counter: int) -> _Output:
    blocks = [chunk[i : i + _BLOCK_LEN] for i in range(0, len(chunk), _BLOCK_LEN)] or [b""]
    cv: tuple[int, ...] = _IV
    start = _CHUNK_START
    for block in blocks[:-1]:
        cv = tuple(_compress(cv, _words(block), counter, _BLOCK_LEN, start)[:8])
        start = 0
    last = blocks[-1]
    return _Output(cv, _words(last), counter, len(last), start | _CHUNK_END)


def _parent_output(left: tuple[int, ...], right: tuple[int, ...]) -> _Output:
    return _Output(_IV, left + right, 0, _BLOCK_LEN, _PARENT)


def blake3_digest(data: bytes) -> bytes:
    """Compute the 32 byte BLAKE3 hash of ``data``."""
    data = bytes(data)
    chunks = [data[i : i + _CHUNK_LEN] for i in range(0, len(data), _CHUNK_LEN)] or [b""]
    stack: list[tuple[int, ...]] = []
    for counter, chunk in enumerate(chunks[:-1]):
        cv = _chunk_output(chunk, counter).chaining_value()
        total = counter + 1
        while total & 1 == 0:
            cv = _parent_output(stack.pop(), cv).chaining_value()
            total >>= 1
        stack.append(cv)
    output = _chunk_output(chunks[-1], len(chunks) - 1)
    while stack:
        output = _parent_output(stack.pop(), output.chaining_value())
    return output.root_bytes()