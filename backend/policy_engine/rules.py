"""
Recommendation Rules

Decides, for a single recipient, how strongly outgoing mail should be
encrypted.
"""

from datetime import timedelta
from enum import Enum

from peer_state import Clock, PeerInfo, PeerState, utc_now

RESET_STALENESS_WINDOW = timedelta(weeks=4)


class Recommendation(str, Enum):
    """Encryption recommendation for outgoing mail."""
    DISABLE = "disable"
    DISCOURAGE = "discourage"
    AVAILABLE = "available"
    ENCRYPT = "encrypt"

    def __str__(self) -> str:
        return self.value


def recommendation(
    sender: PeerInfo,
    to: PeerInfo,
    clock: Clock = utc_now,
) -> Recommendation:
    """
    Recommendation for sending from ``sender`` to ``to``.

    Rules, first match wins:
    - recipient has no key: DISABLE
    - both sides MUTUAL: ENCRYPT
    - recipient key only known via gossip: DISCOURAGE
    - recipient was reset and its last header is older than the
      staleness window: DISCOURAGE
    - otherwise: AVAILABLE

    Args:
        sender: Record describing the sending account
        to: Record of the recipient
        clock: Returns the current aware datetime

    Returns:
        The Recommendation
    """
    if to.public_key is None:
        return Recommendation.DISABLE

    if sender.state is PeerState.MUTUAL and to.state is PeerState.MUTUAL:
        return Recommendation.ENCRYPT

    if to.state is PeerState.GOSSIP:
        return Recommendation.DISCOURAGE

    if (
        to.state is PeerState.RESET
        and to.last_seen_autocrypt is not None
        and to.last_seen_autocrypt < clock() - RESET_STALENESS_WINDOW
    ):
        return Recommendation.DISCOURAGE

    return Recommendation.AVAILABLE
