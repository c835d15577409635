"""
Autocrypt Token Types

Closed variants for the ``type`` and ``prefer-encrypt`` attributes.
Unknown tokens never coerce to a known variant.
"""

from dataclasses import dataclass
from enum import Enum
from typing import ClassVar, Optional


OPENPGP_TOKEN = "1"


@dataclass(frozen=True)
class KeyType:
    """
    Key type advertised in a header.

    ``KeyType.OpenPGP`` is the only type this implementation understands.
    Any other token is kept verbatim as an unknown type.
    """
    token: str

    OpenPGP: ClassVar["KeyType"]

    @classmethod
    def parse(cls, token: str) -> "KeyType":
        if token == OPENPGP_TOKEN:
            return cls.OpenPGP
        return cls(token)

    @classmethod
    def unknown(cls, token: str) -> "KeyType":
        if token == OPENPGP_TOKEN:
            raise ValueError(f"Token {token!r} is not an unknown key type")
        return cls(token)

    @property
    def is_openpgp(self) -> bool:
        return self.token == OPENPGP_TOKEN

    @property
    def is_unknown(self) -> bool:
        return not self.is_openpgp

    def __str__(self) -> str:
        return self.token

    def __repr__(self) -> str:
        if self.is_openpgp:
            return "KeyType.OpenPGP"
        return f"KeyType.Unknown({self.token!r})"


KeyType.OpenPGP = KeyType(OPENPGP_TOKEN)


class EncryptPreference(str, Enum):
    """Encryption preference advertised in a header."""
    MUTUAL = "mutual"
    NONE = "nopreference"

    @classmethod
    def parse(cls, token: Optional[str]) -> "EncryptPreference":
        """Only the exact token ``mutual`` selects MUTUAL."""
        if token == cls.MUTUAL.value:
            return cls.MUTUAL
        return cls.NONE

    def __str__(self) -> str:
        return self.value
