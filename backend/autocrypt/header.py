"""
Autocrypt Header Model

Parses and serializes the ``Autocrypt`` advertisement header.

Parsing happens in two phases: the tolerant tokenizer in ``grammar``
produces an attribute mapping, and ``parse_header`` validates it.
Serialization order is fixed: addr, type, prefer-encrypt, extension
attributes sorted by key, keydata last.
"""

import logging
from dataclasses import dataclass, field
from typing import Dict

from .exceptions import MissingCriticalAttributeError, UnknownCriticalAttributesError
from .grammar import tokenize_attributes
from .types import EncryptPreference, KeyType

logger = logging.getLogger(__name__)

ATTR_ADDR = "addr"
ATTR_TYPE = "type"
ATTR_PREFER_ENCRYPT = "prefer-encrypt"
ATTR_KEYDATA = "keydata"

KNOWN_ATTRIBUTES = frozenset({ATTR_ADDR, ATTR_TYPE, ATTR_PREFER_ENCRYPT, ATTR_KEYDATA})
EXTENSION_PREFIX = "_"


def is_extension_attribute(key: str) -> bool:
    return key.startswith(EXTENSION_PREFIX)


@dataclass
class Header:
    """A single parsed Autocrypt header."""
    addr: str
    keydata: str
    typ: KeyType = KeyType.OpenPGP
    prefer_encrypt: EncryptPreference = EncryptPreference.NONE
    attributes: Dict[str, str] = field(default_factory=dict)

    def __post_init__(self):
        bad = [k for k in self.attributes if not is_extension_attribute(k)]
        if bad:
            raise UnknownCriticalAttributesError(bad)
        self.attributes = dict(sorted(self.attributes.items()))

    def __str__(self) -> str:
        return format_header(self)


def parse_header(raw: str) -> Header:
    """
    Parse the value of an Autocrypt header.

    Args:
        raw: Header value, e.g. ``addr=a@b; keydata=...``

    Returns:
        The validated Header

    Raises:
        MissingCriticalAttributeError: addr or keydata is absent
        UnknownCriticalAttributesError: a non-extension attribute is not understood
    """
    attributes = tokenize_attributes(raw)

    addr = attributes.pop(ATTR_ADDR, None)
    if addr is None:
        raise MissingCriticalAttributeError(ATTR_ADDR)

    keydata = attributes.pop(ATTR_KEYDATA, None)
    if keydata is None:
        raise MissingCriticalAttributeError(ATTR_KEYDATA)

    type_token = attributes.pop(ATTR_TYPE, None)
    typ = KeyType.OpenPGP if type_token is None else KeyType.parse(type_token)

    prefer_encrypt = EncryptPreference.parse(attributes.pop(ATTR_PREFER_ENCRYPT, None))

    critical = [key for key in attributes if not is_extension_attribute(key)]
    if critical:
        logger.debug("Rejecting header with critical attributes %s", critical)
        raise UnknownCriticalAttributesError(critical)

    if typ.is_unknown:
        logger.info("Header for %s advertises unknown key type %r", addr, typ.token)

    return Header(
        addr=addr,
        keydata=keydata,
        typ=typ,
        prefer_encrypt=prefer_encrypt,
        attributes=attributes,
    )


def format_header(header: Header) -> str:
    """Render a Header in canonical attribute order."""
    parts = [
        f"{ATTR_ADDR}={header.addr}",
        f"{ATTR_TYPE}={header.typ}",
        f"{ATTR_PREFER_ENCRYPT}={header.prefer_encrypt}",
    ]
    parts.extend(f"{key}={value}" for key, value in sorted(header.attributes.items()))
    parts.append(f"{ATTR_KEYDATA}={header.keydata}")
    return "; ".join(parts)
