from .mime_parser import (
    AUTOCRYPT_HEADER,
    parse_message,
    get_autocrypt_header,
    require_autocrypt_header,
    get_effective_date,
    get_content_type,
    get_sender_address,
    observe_message,
    apply_message,
)

__all__ = [
    "AUTOCRYPT_HEADER",
    "parse_message",
    "get_autocrypt_header",
    "require_autocrypt_header",
    "get_effective_date",
    "get_content_type",
    "get_sender_address",
    "observe_message",
    "apply_message",
]
