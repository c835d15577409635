"""
Multi-Recipient Combination

Combines per-recipient recommendations for a single outgoing message.
"""

import logging
from typing import Iterable, List

from peer_state import Clock, PeerInfo, utc_now
from .rules import Recommendation, recommendation

logger = logging.getLogger(__name__)


def combine_recommendations(recs: List[Recommendation]) -> Recommendation:
    """
    Combine per-recipient recommendations.

    Precedence:
    - any DISABLE: DISABLE
    - all ENCRYPT: ENCRYPT
    - any DISCOURAGE: DISCOURAGE
    - otherwise: AVAILABLE

    An empty list is vacuously all ENCRYPT.
    """
    if any(rec is Recommendation.DISABLE for rec in recs):
        return Recommendation.DISABLE

    if all(rec is Recommendation.ENCRYPT for rec in recs):
        return Recommendation.ENCRYPT

    if any(rec is Recommendation.DISCOURAGE for rec in recs):
        return Recommendation.DISCOURAGE

    return Recommendation.AVAILABLE


def recommendation_many(
    sender: PeerInfo,
    tos: Iterable[PeerInfo],
    clock: Clock = utc_now,
) -> Recommendation:
    """Recommendation for one message sent from ``sender`` to every peer in ``tos``."""
    recs = [recommendation(sender, to, clock) for to in tos]
    combined = combine_recommendations(recs)
    logger.debug("Combined %d recommendations into %s", len(recs), combined)
    return combined


def get_recommendation_message(rec: Recommendation) -> str:
    """Get a user-friendly explanation of a recommendation."""
    messages = {
        Recommendation.DISABLE: "Encryption is not possible: a recipient key is missing.",
        Recommendation.DISCOURAGE: (
            "Encryption is possible but discouraged: a recipient may no "
            "longer be able to read encrypted mail."
        ),
        Recommendation.AVAILABLE: "Encryption is available.",
        Recommendation.ENCRYPT: "All parties prefer encryption; this message will be encrypted.",
    }
    return messages[rec]
