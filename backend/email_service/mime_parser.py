"""
MIME Adapter

Extracts what the peer state machine needs from a parsed email:
the Autocrypt header, the effective date and the content type.
"""

import email
import logging
from email.header import Header as EmailHeader
from email.message import Message
from email.utils import getaddresses, parsedate_to_datetime
from typing import List, Optional, Union

from autocrypt import (
    Header,
    HeaderParseError,
    InvalidHeaderError,
    MissingHeaderError,
    PeerUpdateError,
    TooManyHeadersError,
    parse_header,
)
from peer_state import Clock, ObservedMessage, PeerInfo, as_utc, utc_now

logger = logging.getLogger(__name__)

AUTOCRYPT_HEADER = "Autocrypt"

REPLACEMENT_CHAR = "\ufffd"
SURROGATE_MIN = 0xD800
SURROGATE_MAX = 0xDFFF


def parse_message(raw: Union[bytes, str]) -> Message:
    """Parse raw RFC 822 text; only headers are consulted afterwards."""
    if isinstance(raw, bytes):
        return email.message_from_bytes(raw)
    return email.message_from_string(raw)


def _has_surrogates(value: str) -> bool:
    return any(SURROGATE_MIN <= ord(ch) <= SURROGATE_MAX for ch in value)


def _header_to_str(value) -> str:
    """
    Read a header value as a string with folding line breaks removed.

    Raw 8-bit header bytes arrive surrogate-escaped from the parser;
    they must decode as UTF-8.
    """
    if isinstance(value, EmailHeader):
        value = str(value)

    try:
        if isinstance(value, bytes):
            value = value.decode("utf-8")
        elif isinstance(value, str) and _has_surrogates(value):
            value = value.encode("ascii", "surrogateescape").decode("utf-8")
    except UnicodeError as e:
        raise InvalidHeaderError("Autocrypt header is not valid UTF-8") from e

    if not isinstance(value, str):
        raise InvalidHeaderError("Autocrypt header could not be read")

    if REPLACEMENT_CHAR in value:
        raise InvalidHeaderError("Autocrypt header contains undecodable characters")

    return value.replace("\r\n", "").replace("\n", "")


def _raw_header_values(msg: Message, name: str) -> List:
    """Header values as parsed, before compat32 wraps 8-bit values."""
    name = name.lower()
    return [value for key, value in msg.raw_items() if key.lower() == name]


def get_autocrypt_header(msg: Message) -> Optional[Header]:
    """
    Get the Autocrypt header of a message.

    Returns:
        None if the message has no header, the parsed Header otherwise

    Raises:
        TooManyHeadersError: more than one header is present
        InvalidHeaderError: the value cannot be read as a string
        HeaderParseError: the single header is invalid
    """
    values = _raw_header_values(msg, AUTOCRYPT_HEADER)

    if not values:
        return None

    if len(values) > 1:
        raise TooManyHeadersError(len(values))

    return parse_header(_header_to_str(values[0]))


def require_autocrypt_header(msg: Message) -> Header:
    header = get_autocrypt_header(msg)
    if header is None:
        raise MissingHeaderError("Message carries no Autocrypt header")
    return header


def get_effective_date(msg: Message, clock: Clock = utc_now):
    """Date header as aware UTC, or the clock's now if absent or unparseable."""
    raw_date = msg.get("Date")
    if raw_date is None:
        return clock()

    try:
        parsed = parsedate_to_datetime(str(raw_date))
    except (TypeError, ValueError, IndexError) as e:
        logger.debug("Unparseable Date header, using current time: %s", e)
        return clock()

    if parsed is None:
        return clock()

    return as_utc(parsed)


def get_content_type(msg: Message) -> str:
    try:
        return msg.get_content_type()
    except Exception as e:
        raise PeerUpdateError("Failed to read Content-Type", cause=e) from e


def get_sender_address(msg: Message) -> str:
    """Lower-cased address of the From header."""
    addresses = [addr for _, addr in getaddresses(msg.get_all("From", [])) if addr]
    if not addresses:
        raise PeerUpdateError("Message has no From address")
    return addresses[0].strip().lower()


def observe_message(msg: Message, clock: Clock = utc_now) -> ObservedMessage:
    """
    Collect everything the peer update needs from a message.

    An invalid header, or more than one header, counts as no header.

    Raises:
        PeerUpdateError: the message headers could not be read
    """
    content_type = get_content_type(msg)
    eff_date = get_effective_date(msg, clock)

    try:
        header = get_autocrypt_header(msg)
    except HeaderParseError as e:
        logger.warning("Treating message as header-less: %s", e)
        header = None

    return ObservedMessage(
        content_type=content_type,
        effective_date=eff_date,
        advertisement=header,
    )


def apply_message(peer: PeerInfo, msg: Message, clock: Clock = utc_now) -> None:
    """Update ``peer`` in place from ``msg``; unchanged on PeerUpdateError."""
    observed = observe_message(msg, clock)
    peer.update(observed)
