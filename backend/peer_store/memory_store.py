"""
In-Memory Peer Store

Thread-safe in-memory storage for peer records.
Each address gets its own lock so updates to one peer never
interleave.
"""

import threading
from contextlib import contextmanager
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Dict, Iterator, List, Optional

from peer_state import PeerInfo


def normalize_address(address: str) -> str:
    return address.strip().lower()


@dataclass
class PeerEntry:
    """Entry in the peer store."""
    address: str
    peer: PeerInfo
    stored_at: datetime
    accessed_at: Optional[datetime] = None


@dataclass
class AddressLock:
    """Lock for one address and the number of callers using it."""
    lock: threading.RLock = field(default_factory=threading.RLock)
    users: int = 0


class MemoryPeerStore:
    """
    Thread-safe in-memory peer storage.
    
    Features:
    - Records are copied on the way in and out, callers never share state
    - Per-address locks for exclusive read-modify-write
    - Oldest entries evicted past ``max_peers``
    """
    
    def __init__(self, max_peers: int = 10000):
        self._store: Dict[str, PeerEntry] = {}
        self._locks: Dict[str, AddressLock] = {}
        self._lock = threading.RLock()
        self._max_peers = max_peers
    
    def store(self, address: str, peer: PeerInfo) -> None:
        """
        Store a peer record.
        
        Args:
            address: Correspondent address
            peer: Record to store
        """
        address = normalize_address(address)
        with self._lock:
            if address not in self._store and len(self._store) >= self._max_peers:
                self._evict_oldest()
            
            self._store[address] = PeerEntry(
                address=address,
                peer=peer.copy(),
                stored_at=datetime.now(timezone.utc),
            )
    
    def get(self, address: str) -> Optional[PeerInfo]:
        """
        Retrieve a peer record.
        
        Args:
            address: Correspondent address
        
        Returns:
            A copy of the record or None if not found
        """
        with self._lock:
            entry = self._store.get(normalize_address(address))
            if entry:
                entry.accessed_at = datetime.now(timezone.utc)
                return entry.peer.copy()
            return None
    
    def remove(self, address: str) -> bool:
        """Remove a peer record. Returns True if it existed."""
        with self._lock:
            return self._store.pop(normalize_address(address), None) is not None
    
    def contains(self, address: str) -> bool:
        with self._lock:
            return normalize_address(address) in self._store
    
    def clear(self) -> None:
        with self._lock:
            self._store.clear()
    
    def count(self) -> int:
        with self._lock:
            return len(self._store)
    
    def list_addresses(self) -> List[str]:
        with self._lock:
            return sorted(self._store.keys())
    
    @contextmanager
    def locked(self, address: str) -> Iterator[None]:
        """
        Hold exclusive access to one address for a read-modify-write.
        
        A lock lives only while some caller holds or waits on it.
        """
        address = normalize_address(address)
        with self._lock:
            entry = self._locks.get(address)
            if entry is None:
                entry = self._locks[address] = AddressLock()
            entry.users += 1
        try:
            with entry.lock:
                yield
        finally:
            with self._lock:
                entry.users -= 1
                if entry.users == 0:
                    del self._locks[address]
    
    def lock_count(self) -> int:
        """Number of addresses with a live lock."""
        with self._lock:
            return len(self._locks)
    
    def _evict_oldest(self) -> None:
        if not self._store:
            return
        
        oldest = min(
            self._store.keys(),
            key=lambda k: self._store[k].stored_at
        )
        self._store.pop(oldest)
