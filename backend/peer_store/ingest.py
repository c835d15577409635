import logging
from email.message import Message
from typing import Optional

from email_service import get_sender_address, observe_message
from peer_state import REPORT_CONTENT_TYPE, Clock, PeerInfo, utc_now
from .memory_store import MemoryPeerStore

logger = logging.getLogger(__name__)


def ingest_message(
    store: MemoryPeerStore,
    msg: Message,
    clock: Clock = utc_now,
) -> Optional[PeerInfo]:
    """
    Fold an incoming message into the sender's stored record.

    The record is created on first sight with ``last_seen`` set to the
    message's effective date. A delivery report from an unknown sender
    creates nothing. Headers are read before the record is touched, so
    a PeerUpdateError leaves the store unchanged.

    Returns:
        A copy of the updated record, or None if nothing was stored
    """
    address = get_sender_address(msg)
    observed = observe_message(msg, clock)

    with store.locked(address):
        peer = store.get(address)
        if peer is None:
            if observed.content_type == REPORT_CONTENT_TYPE:
                logger.debug("Ignoring delivery report from unknown sender %s", address)
                return None
            logger.info("First message from %s", address)
            peer = PeerInfo.first_seen(observed.effective_date)

        peer.update(observed)
        store.store(address, peer)

    return peer
