import logging
from typing import Dict

logger = logging.getLogger(__name__)

SEGMENT_SEPARATOR = ";"
KEY_VALUE_SEPARATOR = "="


def tokenize_attributes(raw: str) -> Dict[str, str]:
    """
    Split a ``key=value; key=value`` string into an ordered mapping.

    Segments without a non-empty key and value are dropped. A later
    occurrence of a key overrides an earlier one but keeps its first
    position.

    >>> tokenize_attributes("addr=a@b; ;junk; keydata=Zm9v")
    {'addr': 'a@b', 'keydata': 'Zm9v'}
    """
    attributes: Dict[str, str] = {}

    for segment in raw.split(SEGMENT_SEPARATOR):
        segment = segment.strip()
        if not segment:
            continue

        key, sep, value = segment.partition(KEY_VALUE_SEPARATOR)
        key = key.strip()
        value = value.strip()

        if not sep or not key or not value:
            logger.debug("Dropping malformed attribute segment")
            continue

        attributes[key] = value

    return attributes
