# mycelium

Building blocks for an encrypted IPv6 overlay network. The package is plain
Python and has no third-party runtime dependencies.

It provides:

- `mycelium.metric`: the `Metric` route cost, a 16-bit value.
  - Addition saturates just below the infinite value, and anything plus
    infinite is infinite.
  - Subtraction saturates at zero. Subtracting an infinite metric raises
    `ValueError`.
  - `delta` gives the absolute difference between two metrics.
- `mycelium.packet_data`: `DataPacket` and `DataPacketCodec`, an
  incremental stream codec for data packets. The wire form is a 4-byte
  header holding the data length and the hop limit, then the source and
  destination IPv6 addresses, then the data.
- `mycelium.wire`: the 12-byte message packet header, which holds an 8-byte
  `MessageId`, the 2-byte `Flags` bitfield and 2 reserved bytes.
  - `MessagePacket` is a fixed-capacity packet buffer.
  - `blake3_digest` is a pure Python BLAKE3 hash, used for message
    checksums.
- `mycelium.message_init`, `mycelium.message_chunk`,
  `mycelium.message_done`: views over the bodies of INIT, CHUNK and DONE
  message packets, named `MessageInit`, `MessageChunk` and `MessageDone`.
- `mycelium.outbox`: `OutboundMessage`, the sender-side state of a single
  outbound message. It covers splitting the message into chunks, chunk
  acknowledgements, retransmission, the final DONE packet and aborting.

## Installing

```
pip install .
```

To run the tests:

```
pip install .[test]
pytest
```

## Example: metrics

```python
from mycelium.metric import Metric

cost = Metric(10) + Metric(20)
assert int(cost) == 30
assert (Metric.infinite() + cost).is_infinite()
assert str(Metric.infinite()) == "Infinite"
assert Metric(5) - Metric(9) == Metric(0)
```

## Example: data packets on a stream

```python
from ipaddress import IPv6Address
from mycelium.packet_data import DataPacket, DataPacketCodec

codec = DataPacketCodec()
buffer = bytearray()
codec.encode(
    DataPacket(
        raw_data=b"hello",
        hop_limit=64,
        src_ip=IPv6Address("400::1"),
        dst_ip=IPv6Address("400::2"),
    ),
    buffer,
)
packet = codec.decode(buffer)
assert packet.raw_data == b"hello"
```

`decode` consumes bytes from the front of the buffer. While a frame is still
incomplete it returns `None`, and it keeps the fields it has already parsed
for the next call.

## Example: message headers and bodies

```python
from mycelium.message_init import MessageInit
from mycelium.wire import Flags, MessageId, MessagePacket

packet = MessagePacket()
packet.set_message_id(MessageId.from_hex("0102030405060708"))
init = MessageInit(packet)
init.set_length(3000)
init.set_topic(b"greeting")

received = MessageInit(MessagePacket(packet.to_bytes()))
assert Flags.INIT in received.into_inner().flags()
assert received.length() == 3000
assert received.topic() == b"greeting"
```

Limits on message bodies:

- `MessageInit.set_topic` raises `ValueError` for a topic longer than 255
  bytes.
- `MessageChunk.set_chunk_data` raises `InsufficientChunkSpace` when the
  data does not fit in the packet.

## Example: sending one message

`OutboundMessage` does not keep time or send anything itself. The caller
drives it with retransmission ticks and passes on the packets it returns.

```python
from ipaddress import IPv6Address
from mycelium.outbox import Message, OutboundMessage
from mycelium.wire import MessageId

msg = Message(
    id=MessageId.random(),
    src=IPv6Address("400::1"),
    dst=IPv6Address("400::2"),
    topic=b"greeting",
    data=b"x" * 3000,
)
out = OutboundMessage.create(msg, try_duration=60.0)

[init_packet] = out.packets_due(now=0.0)    # INIT until it is acknowledged
out.start_chunks()                          # receiver acknowledged INIT
chunk_packets = out.packets_due(now=1.0)    # three chunks of up to 1300 bytes
for idx in range(len(chunk_packets)):
    out.ack_chunk(idx)
[done_packet] = out.packets_due(now=2.0)    # DONE with chunk count and checksum

assert out.info().to_dict()["state"] == {"sending": {"pending": 0, "sent": 0, "acked": 3}}
```

`packets_due` sends a chunk again once `RETRANSMISSION_DELAY` (one second)
has passed without an acknowledgement. `abort_packet` marks a message that
has not been received yet as aborted and returns the ABORTED packet to send.
`MESSAGE_SEND_WINDOW` is the send window in seconds that a caller is
expected to allow before aborting.

## What the package does not do

The package holds formats and per-message state only. It does not include:

- a receiving side that reassembles chunks and checks checksums;
- an inbox of completed messages;
- a codec for control packets or for the versioned frame header that
  carries data and control packets;
- any connection or peer handling.

A program that moves messages between nodes has to supply these parts, along
with the timers and the network I/O.