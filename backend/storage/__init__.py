from .database import (
    init_database,
    close_database,
    get_peer,
    store_peer,
    delete_peer,
    list_peers,
    log_audit_event,
    get_audit_events,
    normalize_address,
    peer_lock,
    peer_lock_count,
)

__all__ = [
    "init_database",
    "close_database",
    "get_peer",
    "store_peer",
    "delete_peer",
    "list_peers",
    "log_audit_event",
    "get_audit_events",
    "normalize_address",
    "peer_lock",
    "peer_lock_count",
]
