"""
Peer API Routes

Feeds incoming mail into peer trust state and answers encryption
recommendation queries for outgoing mail.
"""

import logging
from datetime import datetime
from typing import Dict, List, Optional

from fastapi import APIRouter, HTTPException, Response, status
from pydantic import BaseModel, Field

from api.auth import TokenDep
from autocrypt import PeerUpdateError
from config import settings
from email_service import get_sender_address, observe_message, parse_message
from peer_state import REPORT_CONTENT_TYPE, PeerInfo, PeerState
from policy_engine import Recommendation, recommend_for_recipients
from storage.database import get_peer, log_audit_event, peer_lock, store_peer

logger = logging.getLogger(__name__)
router = APIRouter()


class IncomingMessage(BaseModel):
    """Raw RFC 822 message as received."""
    raw_message: str


class PeerResponse(BaseModel):
    """Stored trust state for a peer."""
    address: str
    last_seen: datetime
    last_seen_autocrypt: Optional[datetime] = None
    public_key: Optional[str] = None
    state: PeerState
    key_type: str

    @classmethod
    def from_peer(cls, address: str, peer: PeerInfo) -> "PeerResponse":
        return cls(
            address=address,
            last_seen=peer.last_seen,
            last_seen_autocrypt=peer.last_seen_autocrypt,
            public_key=peer.public_key,
            state=peer.state,
            key_type=str(peer.typ),
        )


class RecommendationRequest(BaseModel):
    """Sender and recipients of an outgoing message."""
    from_address: str = Field(alias="from")
    to: List[str] = Field(min_length=1)


class RecommendationResponse(BaseModel):
    """Combined and per-recipient recommendations."""
    recommendation: Recommendation
    recipients: Dict[str, Recommendation]
    message: str


@router.post(
    "/messages",
    response_model=PeerResponse,
    responses={204: {"description": "Delivery report from an unknown sender, ignored"}},
)
async def process_message(token: TokenDep, request: IncomingMessage):
    """
    Fold an incoming message into its sender's trust state.

    The sender's record is created on first sight, except for delivery
    reports, which never create a record.
    """
    if len(request.raw_message.encode("utf-8")) > settings.max_message_bytes:
        raise HTTPException(
            status_code=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE,
            detail=f"Message exceeds {settings.max_message_bytes} bytes",
        )
    
    msg = parse_message(request.raw_message)
    
    try:
        address = get_sender_address(msg)
        observed = observe_message(msg)
    except PeerUpdateError as e:
        logger.warning("Could not process message: %s", e)
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail=str(e),
        )
    
    async with peer_lock(address):
        peer = await get_peer(address)
        if peer is None:
            if observed.content_type == REPORT_CONTENT_TYPE:
                logger.debug("Ignoring delivery report from unknown sender %s", address)
                return Response(status_code=status.HTTP_204_NO_CONTENT)
            peer = PeerInfo.first_seen(observed.effective_date)
        
        before = peer.state
        peer.update(observed)
        await store_peer(address, peer)
    
    if peer.state is not before:
        await log_audit_event("peer_state_changed", {
            "address": address,
            "from": before.value,
            "to": peer.state.value,
        })
    
    return PeerResponse.from_peer(address, peer)


@router.get("/{address}", response_model=PeerResponse)
async def get_peer_state(token: TokenDep, address: str):
    """Get the stored trust state for a peer."""
    peer = await get_peer(address)
    if peer is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Unknown peer",
        )
    return PeerResponse.from_peer(address.lower(), peer)


@router.post("/recommendation", response_model=RecommendationResponse)
async def get_recommendation(token: TokenDep, request: RecommendationRequest):
    """
    Recommend whether an outgoing message should be encrypted.

    Recipients without a stored record have no key and disable encryption.
    """
    result = await recommend_for_recipients(request.from_address, request.to)
    return RecommendationResponse(**result)
