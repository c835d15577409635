"""
Peer Store Package

In-process persistence for peer records, with per-address exclusive
access for concurrent message processing.
"""

from .memory_store import MemoryPeerStore, normalize_address
from .ingest import ingest_message

__all__ = [
    "MemoryPeerStore",
    "normalize_address",
    "ingest_message",
]
