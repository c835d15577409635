"""
Policy Engine Package

Turns stored peer state into encryption recommendations for
outgoing mail.
"""

from .rules import Recommendation, RESET_STALENESS_WINDOW, recommendation
from .fallback import combine_recommendations, recommendation_many, get_recommendation_message
from .validator import recommend_for_recipients

__all__ = [
    "Recommendation",
    "RESET_STALENESS_WINDOW",
    "recommendation",
    "combine_recommendations",
    "recommendation_many",
    "get_recommendation_message",
    "recommend_for_recipients",
]
