"""Route metrics, data packet codec and message wire formats for an IPv6 overlay network."""

__version__ = "0.1.0"
__all__ = [
    "metric",
    "packet_data",
    "wire",
    "message_init",
    "message_chunk",
    "message_done",
    "outbox",
]