"""
Peer State Package

Tracks per-correspondent Autocrypt trust state across observed messages.
"""

from .models import (
    PeerInfo,
    PeerState,
    ObservedMessage,
    REPORT_CONTENT_TYPE,
    Clock,
    as_utc,
    utc_now,
)

__all__ = [
    "PeerInfo",
    "PeerState",
    "ObservedMessage",
    "REPORT_CONTENT_TYPE",
    "Clock",
    "as_utc",
    "utc_now",
]
