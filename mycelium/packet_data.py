"""Wire codec for data packets."""

from __future__ import annotations

from dataclasses import dataclass
from ipaddress import IPv6Address

DATA_PACKET_HEADER_SIZE = 4
"""Size of the header start of a data packet, before the IP addresses."""

DATA_PACKET_LEN_MASK = (1 << 16) - 1
"""Mask extracting the data length from the shifted header."""

_IP_SIZE = 16


@dataclass
class DataPacket:
    """An (encrypted) data packet travelling between two overlay addresses."""

    raw_data: bytes
    hop_limit: int
    src_ip: IPv6Address
    dst_ip: IPv6Address


class DataPacketCodec:
    """Incremental decoder and encoder for data packets.

    Decoding consumes bytes from the front of a ``bytearray``. A partially
    received packet keeps its already decoded fields between calls.
    """

    def __init__(self) -> None:
        self._header: tuple[int, int] | None = None
        self._src_ip: IPv6Address | None = None
        self._dst_ip: IPv6Address | None = None

    def decode(self, buffer: bytearray) -> DataPacket | None:
        """Decode one packet from ``buffer``, or return None if more data is needed."""
        if self._header is None:
            if len(buffer) < DATA_PACKET_HEADER_SIZE:
                return None
            raw_header = int.from_bytes(buffer[:DATA_PACKET_HEADER_SIZE], "big")
            del buffer[:DATA_PACKET_HEADER_SIZE]
            self._header = ((raw_header >> 8) & DATA_PACKET_LEN_MASK, raw_header & 0xFF)
        data_len, hop_limit = self._header

        if self._src_ip is None:
            self._src_ip = _take_ip(buffer)
            if self._src_ip is None:
                return None

        if self._dst_ip is None:
            self._dst_ip = _take_ip(buffer)
            if self._dst_ip is None:
                return None

        if len(buffer) < data_len:
            return None
        data = bytes(buffer[:data_len])
        del buffer[:data_len]

        packet = DataPacket(
            raw_data=data,
            hop_limit=hop_limit,
            src_ip=self._src_ip,
            dst_ip=self._dst_ip,
        )
        self._header = None
        self._src_ip = None
        self._dst_ip = None
        return packet

    def encode(self, packet: DataPacket, buffer: bytearray) -> None:
        """Append the wire form of ``packet`` to ``buffer``."""
        if not 0 <= packet.hop_limit <= 0xFF:
            raise ValueError(f"hop limit {packet.hop_limit} does not fit in a byte")
        raw_header = ((len(packet.raw_data) << 8) | packet.hop_limit) & 0xFFFFFFFF
        buffer.extend(raw_header.to_bytes(DATA_PACKET_HEADER_SIZE, "big"))
        buffer.extend(IPv6Address(packet.src_ip).packed)
        buffer.extend(IPv6Address(packet.dst_ip).packed)
        buffer.extend(packet.raw_data)


def _take_ip(buffer: bytearray) -> IPv6Address | None:
    if len(buffer) < _IP_SIZE:
        return None
    address = IPv6Address(bytes(buffer[:_IP_SIZE]))
    del buffer[:_IP_SIZE]
    return address