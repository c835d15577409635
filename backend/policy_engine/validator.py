"""
Recipient Lookup

Loads stored peer records and produces recommendations for an
outgoing message.
"""

import logging
from typing import Any, Dict, List

from peer_state import Clock, PeerInfo, utc_now
from .fallback import combine_recommendations, get_recommendation_message
from .rules import recommendation

logger = logging.getLogger(__name__)


async def load_peer_or_default(address: str, clock: Clock = utc_now) -> PeerInfo:
    """
    Load a stored peer, or a keyless record for an address never seen.

    A keyless record always yields DISABLE as a recipient.
    """
    from storage.database import get_peer
    
    peer = await get_peer(address)
    if peer is None:
        logger.debug("No record for %s, using empty record", address)
        return PeerInfo.first_seen(clock())
    return peer


async def recommend_for_recipients(
    sender: str,
    recipients: List[str],
    clock: Clock = utc_now,
) -> Dict[str, Any]:
    """
    Recommendation for sending one message from ``sender`` to ``recipients``.
    
    Args:
        sender: Address of the sending account
        recipients: Recipient addresses
        clock: Returns the current aware datetime
    
    Returns:
        Dict with:
        - recommendation: the combined Recommendation
        - recipients: per-address Recommendation
        - message: user-facing explanation
    """
    from_peer = await load_peer_or_default(sender, clock)
    
    per_recipient = {}
    for address in recipients:
        to_peer = await load_peer_or_default(address, clock)
        per_recipient[address] = recommendation(from_peer, to_peer, clock)
    
    combined = combine_recommendations(list(per_recipient.values()))
    
    logger.info(
        "Recommendation for %d recipient(s) from %s: %s",
        len(recipients), sender, combined
    )
    
    return {
        "recommendation": combined,
        "recipients": per_recipient,
        "message": get_recommendation_message(combined),
    }
