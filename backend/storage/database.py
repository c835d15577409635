import asyncio
import json
import logging
from contextlib import asynccontextmanager
from dataclasses import dataclass, field
from typing import AsyncIterator, Dict, List, Optional

import aiosqlite

from config import settings
from peer_state import PeerInfo

logger = logging.getLogger(__name__)

_db_connection: Optional[aiosqlite.Connection] = None
_peer_locks: Dict[str, "PeerLock"] = {}


def normalize_address(address: str) -> str:
    return address.strip().lower()


async def get_db() -> aiosqlite.Connection:
    global _db_connection
    if _db_connection is None:
        _db_connection = await aiosqlite.connect(settings.db_path)
        _db_connection.row_factory = aiosqlite.Row
    return _db_connection


async def close_database() -> None:
    global _db_connection
    if _db_connection is not None:
        await _db_connection.close()
        _db_connection = None


async def init_database() -> None:
    db = await get_db()
    
    await db.execute("""
        CREATE TABLE IF NOT EXISTS peers (
            address TEXT PRIMARY KEY,
            last_seen TIMESTAMP NOT NULL,
            last_seen_autocrypt TIMESTAMP,
            public_key TEXT,
            state TEXT NOT NULL DEFAULT 'nopreference',
            key_type TEXT NOT NULL DEFAULT '1',
            updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
        )
    """)
    
    await db.execute("""
        CREATE TABLE IF NOT EXISTS audit_log (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            event_type TEXT NOT NULL,
            event_data TEXT,
            timestamp TIMESTAMP DEFAULT CURRENT_TIMESTAMP
        )
    """)
    
    await db.commit()
    logger.info("Database schema initialized")


def _row_to_peer(row: aiosqlite.Row) -> PeerInfo:
    return PeerInfo.from_dict({
        "last_seen": row["last_seen"],
        "last_seen_autocrypt": row["last_seen_autocrypt"],
        "public_key": row["public_key"],
        "state": row["state"],
        "type": row["key_type"],
    })


async def get_peer(address: str) -> Optional[PeerInfo]:
    db = await get_db()
    
    cursor = await db.execute(
        "SELECT * FROM peers WHERE address = ?",
        (normalize_address(address),)
    )
    row = await cursor.fetchone()
    
    if row:
        return _row_to_peer(row)
    return None


async def store_peer(address: str, peer: PeerInfo) -> None:
    db = await get_db()
    
    data = peer.to_dict()
    
    await db.execute("""
        INSERT INTO peers (address, last_seen, last_seen_autocrypt, public_key, state, key_type)
        VALUES (?, ?, ?, ?, ?, ?)
        ON CONFLICT(address) DO UPDATE SET
            last_seen = excluded.last_seen,
            last_seen_autocrypt = excluded.last_seen_autocrypt,
            public_key = excluded.public_key,
            state = excluded.state,
            key_type = excluded.key_type,
            updated_at = CURRENT_TIMESTAMP
    """, (
        normalize_address(address),
        data["last_seen"],
        data["last_seen_autocrypt"],
        data["public_key"],
        data["state"],
        data["type"],
    ))
    
    await db.commit()
    logger.debug("Stored peer %s (state=%s)", address, data["state"])


async def delete_peer(address: str) -> bool:
    db = await get_db()
    
    cursor = await db.execute(
        "DELETE FROM peers WHERE address = ?",
        (normalize_address(address),)
    )
    await db.commit()
    
    return cursor.rowcount > 0


async def list_peers() -> Dict[str, PeerInfo]:
    db = await get_db()
    
    cursor = await db.execute("SELECT * FROM peers ORDER BY address")
    rows = await cursor.fetchall()
    
    return {row["address"]: _row_to_peer(row) for row in rows}


async def log_audit_event(event_type: str, event_data: Dict) -> None:
    db = await get_db()
    
    await db.execute(
        "INSERT INTO audit_log (event_type, event_data) VALUES (?, ?)",
        (event_type, json.dumps(event_data))
    )
    
    await db.commit()


async def get_audit_events(event_type: Optional[str] = None) -> List[Dict]:
    db = await get_db()
    
    if event_type:
        cursor = await db.execute(
            "SELECT * FROM audit_log WHERE event_type = ? ORDER BY id",
            (event_type,)
        )
    else:
        cursor = await db.execute("SELECT * FROM audit_log ORDER BY id")
    rows = await cursor.fetchall()
    
    return [
        {
            "event_type": row["event_type"],
            "event_data": json.loads(row["event_data"]),
            "timestamp": row["timestamp"],
        }
        for row in rows
    ]


@dataclass
class PeerLock:
    """Lock for one peer and the number of tasks using it."""
    lock: asyncio.Lock = field(default_factory=asyncio.Lock)
    users: int = 0


@asynccontextmanager
async def peer_lock(address: str) -> AsyncIterator[None]:
    """
    Serialize read-modify-write cycles on one peer record.
    
    The lock is dropped once no task holds or waits on it.
    """
    key = normalize_address(address)
    entry = _peer_locks.get(key)
    if entry is None:
        entry = _peer_locks[key] = PeerLock()
    entry.users += 1
    try:
        async with entry.lock:
            yield
    finally:
        entry.users -= 1
        if entry.users == 0:
            del _peer_locks[key]


def peer_lock_count() -> int:
    return len(_peer_locks)
