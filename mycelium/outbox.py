"""Sender side bookkeeping for outbound messages."""

from __future__ import annotations

import time
from dataclasses import dataclass, field
from enum import Enum
from ipaddress import IPv4Address, IPv6Address
from typing import Any, Union

from mycelium.message_chunk import MessageChunk
from mycelium.message_done import MessageDone
from mycelium.message_init import MessageInit
from mycelium.wire import Flags, MessageId, MessagePacket, blake3_digest

IpAddress = Union[IPv4Address, IPv6Address]

MESSAGE_SEND_WINDOW = 60.0 * 5
"""Seconds to try sending a message before giving up."""

RETRANSMISSION_DELAY = 1.0
"""Seconds to wait before sending an unacknowledged chunk again."""

AVERAGE_CHUNK_SIZE = 1_300
"""Size of the data chunks a message is split into."""


class TransmissionState(Enum):
    """Sender side state of an outbound message."""

    INIT = "init"
    IN_PROGRESS = "in_progress"
    RECEIVED = "received"
    READ = "read"
    ABORTED = "aborted"


class ChunkTransmitState(Enum):
    """Transmission state of a single chunk."""

    STARTED = "started"
    SENT = "sent"
    ACKED = "acked"


@dataclass
class ChunkState:
    """Description of one chunk of an outbound message."""

    chunk_idx: int
    chunk_offset: int
    chunk_size: int
    state: ChunkTransmitState = ChunkTransmitState.STARTED
    sent_at: float | None = None


@dataclass
class Message:
    """A message as it is sent over the wire."""

    id: MessageId
    src: IpAddress
    dst: IpAddress
    topic: bytes
    data: bytes

    def checksum(self) -> bytes:
        """The 32 byte BLAKE3 digest of the message data."""
        return blake3_digest(self.data)


@dataclass(frozen=True)
class TransmissionProgress:
    """Externally visible progress of an outbound message.

    ``stage`` is one of ``pending``, ``sending``, ``received``, ``read`` or
    ``aborted``; the chunk counters are only meaningful while sending.
    """

    stage: str
    pending: int = 0
    sent: int = 0
    acked: int = 0


@dataclass(frozen=True)
class MessageInfo:
    """Status report of an outbound message."""

    dst: IpAddress
    state: TransmissionProgress
    created: int
    deadline: int
    msg_len: int

    def to_dict(self) -> dict[str, Any]:
        """JSON friendly representation with camel case keys."""
        if self.state.stage == "sending":
            state: Any = {
                "sending": {
                    "pending": self.state.pending,
                    "sent": self.state.sent,
                    "acked": self.state.acked,
                }
            }
        else:
            state = self.state.stage
        return {
            "dst": str(self.dst),
            "state": state,
            "created": self.created,
            "deadline": self.deadline,
            "msgLen": self.msg_len,
        }


def _new_packet(message_id: MessageId) -> MessagePacket:
    packet = MessagePacket()
    packet.set_message_id(message_id)
    return packet


_STAGES = {
    TransmissionState.INIT: "pending",
    TransmissionState.RECEIVED: "received",
    TransmissionState.READ: "read",
    TransmissionState.ABORTED: "aborted",
}


@dataclass
class OutboundMessage:
    """A message being sent, with the state of its transmission.

    ``created`` and ``deadline`` are wall clock timestamps in seconds; the
    send times of chunks use whatever clock is passed to ``packets_due``.
    """

    msg: Message
    created: float
    deadline: float
    reply: bool = False
    state: TransmissionState = TransmissionState.INIT
    chunks: list[ChunkState] = field(default_factory=list)

    @classmethod
    def create(
        cls, msg: Message, try_duration: float, reply: bool = False
    ) -> OutboundMessage:
        """Start tracking ``msg``, giving up after ``try_duration`` seconds."""
        created = time.time()
        return cls(msg=msg, created=created, deadline=created + try_duration, reply=reply)

    @property
    def length(self) -> int:
        """Length of the message data in bytes."""
        return len(self.msg.data)

    def start_chunks(self) -> bool:
        """Handle the receiver's INIT acknowledgement by splitting the data in chunks.

        Returns False, changing nothing, if the message is not in the init state.
        """
        if self.state is not TransmissionState.INIT:
            return False
        self.state = TransmissionState.IN_PROGRESS
        self.chunks = [
            ChunkState(
                chunk_idx=idx,
                chunk_offset=offset,
                chunk_size=min(AVERAGE_CHUNK_SIZE, self.length - offset),
            )
            for idx, offset in enumerate(range(0, self.length, AVERAGE_CHUNK_SIZE))
        ]
        return True

    def ack_chunk(self, chunk_idx: int) -> bool:
        """Mark a chunk as acknowledged so it is not sent again.

        Returns False if the acknowledgement is dropped: the message is not
        being transmitted or the index is out of bounds.
        """
        if self.state is not TransmissionState.IN_PROGRESS:
            return False
        if not 0 <= chunk_idx < len(self.chunks):
            return False
        chunk = self.chunks[chunk_idx]
        chunk.state = ChunkTransmitState.ACKED
        chunk.sent_at = None
        return True

    def info(self) -> MessageInfo:
        """Status report of this message."""
        if self.state is TransmissionState.IN_PROGRESS:
            counts = {s: 0 for s in ChunkTransmitState}
            for chunk in self.chunks:
                counts[chunk.state] += 1
            progress = TransmissionProgress(
                "sending",
                pending=counts[ChunkTransmitState.STARTED],
                sent=counts[ChunkTransmitState.SENT],
                acked=counts[ChunkTransmitState.ACKED],
            )
        else:
            progress = TransmissionProgress(_STAGES[self.state])
        return MessageInfo(
            dst=self.msg.dst,
            state=progress,
            created=int(self.created),
            deadline=int(self.deadline),
            msg_len=self.length,
        )

    def packets_due(self, now: float) -> list[MessagePacket]:
        """Packets to send on a retransmission tick at time ``now``.

        In the init state this is the init packet. While in progress, it is
        every chunk never sent or sent at least a retransmission delay ago,
        and the done packet once every chunk is acknowledged.
        """
        if self.state is TransmissionState.INIT:
            return [self.init_packet()]
        if self.state is not TransmissionState.IN_PROGRESS:
            return []

        packets = []
        all_acked = True
        for chunk in self.chunks:
            if chunk.state is ChunkTransmitState.ACKED:
                continue
            all_acked = False
            if chunk.state is ChunkTransmitState.SENT and (
                chunk.sent_at is not None and now - chunk.sent_at < RETRANSMISSION_DELAY
            ):
                continue
            packets.append(self._chunk_packet(chunk))
            chunk.state = ChunkTransmitState.SENT
            chunk.sent_at = now

        if all_acked:
            done = MessageDone(_new_packet(self.msg.id))
            done.set_chunk_count(len(self.chunks))
            done.set_checksum(self.msg.checksum())
            packets.append(done.into_inner())
        return packets

    def init_packet(self) -> MessagePacket:
        """The INIT packet announcing this message."""
        packet = _new_packet(self.msg.id)
        if self.reply:
            packet.set_flag(Flags.REPLY)
        init = MessageInit(packet)
        init.set_length(self.length)
        init.set_topic(self.msg.topic)
        return init.into_inner()

    def abort_packet(self) -> MessagePacket | None:
        """Abort the message if it was not received yet.

        Returns the ABORTED packet to inform the receiver, or None if the
        message is already received, read or aborted.
        """
        if self.state not in (TransmissionState.INIT, TransmissionState.IN_PROGRESS):
            return None
        self.state = TransmissionState.ABORTED
        packet = _new_packet(self.msg.id)
        packet.set_flag(Flags.ABORTED)
        return packet

    def _chunk_packet(self, chunk: ChunkState) -> MessagePacket:
        message_chunk = MessageChunk(_new_packet(self.msg.id))
        message_chunk.set_chunk_idx(chunk.chunk_idx)
        message_chunk.set_chunk_offset(chunk.chunk_offset)
        end = chunk.chunk_offset + chunk.chunk_size
        message_chunk.set_chunk_data(self.msg.data[chunk.chunk_offset : end])
        return message_chunk.into_inner()