"""
Autocrypt Package

Strict parsing and canonical serialization of the Autocrypt
key-advertisement header.
"""

from .exceptions import (
    HeaderParseError,
    MissingCriticalAttributeError,
    UnknownCriticalAttributesError,
    MissingHeaderError,
    TooManyHeadersError,
    InvalidHeaderError,
    PeerUpdateError,
)
from .grammar import tokenize_attributes
from .header import Header, parse_header, format_header
from .types import KeyType, EncryptPreference

__all__ = [
    "HeaderParseError",
    "MissingCriticalAttributeError",
    "UnknownCriticalAttributesError",
    "MissingHeaderError",
    "TooManyHeadersError",
    "InvalidHeaderError",
    "PeerUpdateError",
    "tokenize_attributes",
    "Header",
    "parse_header",
    "format_header",
    "KeyType",
    "EncryptPreference",
]
