"""
Autocrypt Exceptions
"""

from typing import Iterable, Optional


class HeaderParseError(Exception):
    """Base exception for Autocrypt header failures."""
    pass


class MissingCriticalAttributeError(HeaderParseError):
    """A required attribute (addr or keydata) is absent."""

    def __init__(self, attribute: str):
        self.attribute = attribute
        super().__init__(f"Missing Critical Attribute: {attribute}")


class UnknownCriticalAttributesError(HeaderParseError):
    """Header carries attributes that are neither known nor extensions."""

    def __init__(self, attributes: Iterable[str]):
        self.attributes = tuple(sorted(attributes))
        super().__init__(
            f"Unknown Critical Attributes: {', '.join(self.attributes)}"
        )


class MissingHeaderError(HeaderParseError):
    """Message carries no Autocrypt header."""
    pass


class TooManyHeadersError(HeaderParseError):
    """Message carries more than one Autocrypt header."""

    def __init__(self, count: int):
        self.count = count
        super().__init__(f"Expected one Autocrypt header, found {count}")


class InvalidHeaderError(HeaderParseError):
    """Header value could not be read as a string."""
    pass


class PeerUpdateError(Exception):
    """Message could not be folded into a peer record."""

    def __init__(self, message: str, cause: Optional[Exception] = None):
        self.cause = cause
        super().__init__(message)
