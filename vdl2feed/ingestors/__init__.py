"""Data ingestors for vdl2feed."""

from .udp import UdpIngestProtocol, start_udp_listener

__all__ = ["UdpIngestProtocol", "start_udp_listener"]
