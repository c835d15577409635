"""
Peer State Models

Per-correspondent trust record and the single transition that folds
an observed message into it.
"""

import logging
from dataclasses import dataclass, replace
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Callable, Dict, Optional

from autocrypt import EncryptPreference, Header, KeyType

logger = logging.getLogger(__name__)

REPORT_CONTENT_TYPE = "multipart/report"

Clock = Callable[[], datetime]


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def as_utc(value: datetime) -> datetime:
    """Interpret naive datetimes as UTC and convert aware ones to UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


class PeerState(str, Enum):
    """Trust state kept for a peer."""
    MUTUAL = "mutual"
    NONE = "nopreference"
    RESET = "reset"
    GOSSIP = "gossip"

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class ObservedMessage:
    """What the peer state machine needs to know about one message."""
    content_type: str
    effective_date: datetime
    advertisement: Optional[Header] = None

    def __post_init__(self):
        object.__setattr__(self, "effective_date", as_utc(self.effective_date))


@dataclass
class PeerInfo:
    """
    State kept about a single peer.

    Attributes:
        last_seen: Effective date of the newest processed message
        last_seen_autocrypt: Effective date of the newest message with a valid header
        public_key: Most recently advertised key data
        state: Current trust state
        typ: Record type, always OpenPGP at the current protocol level
    """
    last_seen: datetime
    last_seen_autocrypt: Optional[datetime] = None
    public_key: Optional[str] = None
    state: PeerState = PeerState.NONE
    typ: KeyType = KeyType.OpenPGP

    def __post_init__(self):
        self.last_seen = as_utc(self.last_seen)
        if self.last_seen_autocrypt is not None:
            self.last_seen_autocrypt = as_utc(self.last_seen_autocrypt)

    @classmethod
    def first_seen(cls, effective_date: datetime) -> "PeerInfo":
        """Record for a peer seen for the first time."""
        return cls(last_seen=effective_date)

    def copy(self) -> "PeerInfo":
        return replace(self)

    def update(self, message: ObservedMessage) -> None:
        """
        Fold one observed message into this record in place.

        Rule order matters:

        1. Delivery reports are ignored.
        2. Messages older than the newest valid header are ignored.
        3. Without a header, a newer message resets the state.
        4. With a header, the key is always taken; last_seen and state
           only move when the message is newer than last_seen.
        """
        if message.content_type == REPORT_CONTENT_TYPE:
            logger.debug("Ignoring delivery report")
            return

        eff_date = message.effective_date

        if self.last_seen_autocrypt is not None and eff_date < self.last_seen_autocrypt:
            logger.debug("Ignoring message older than last Autocrypt header")
            return

        header = message.advertisement

        if header is None:
            if eff_date > self.last_seen:
                self.last_seen = eff_date
                self.state = PeerState.RESET
            return

        self.public_key = header.keydata
        self.last_seen_autocrypt = eff_date

        if eff_date > self.last_seen:
            self.last_seen = eff_date
            if header.prefer_encrypt is EncryptPreference.MUTUAL:
                self.state = PeerState.MUTUAL
            else:
                self.state = PeerState.NONE

    def to_dict(self) -> Dict[str, Any]:
        return {
            "last_seen": self.last_seen.isoformat(),
            "last_seen_autocrypt": (
                self.last_seen_autocrypt.isoformat()
                if self.last_seen_autocrypt else None
            ),
            "public_key": self.public_key,
            "state": self.state.value,
            "type": str(self.typ),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "PeerInfo":
        seen_ac = data.get("last_seen_autocrypt")
        return cls(
            last_seen=datetime.fromisoformat(data["last_seen"]),
            last_seen_autocrypt=datetime.fromisoformat(seen_ac) if seen_ac else None,
            public_key=data.get("public_key"),
            state=PeerState(data.get("state", PeerState.NONE.value)),
            typ=KeyType.parse(data.get("type", str(KeyType.OpenPGP))),
        )
