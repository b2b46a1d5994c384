import json
import logging
import sqlite3
from contextlib import contextmanager
from pathlib import Path
from typing import Any, Dict, Iterable, List, Mapping, Optional

from utils.errors import StorageUnavailableError, UnreadableRecordError
from utils.storage import KeyValueStore
from .schema import SCHEMA_SQL, INDEXES_SQL, SCHEMA_VERSION

logger = logging.getLogger(__name__)

CONFIG_DIR = Path.home() / ".codereels"
DB_PATH = CONFIG_DIR / "codereels.db"

def init_db(db_path: Optional[Path] = None):
    """Initialize the database by creating tables and indexes if they don't exist."""
    path = Path(db_path or DB_PATH)
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        with get_conn(path) as conn:
            conn.executescript(SCHEMA_SQL)
            conn.executescript(INDEXES_SQL)
            ensure_schema_version(conn)
            conn.commit()
    except (sqlite3.Error, OSError) as exc:
        raise StorageUnavailableError(f"Cannot initialize database at {path}: {exc}") from exc
    logger.info("Database ready at %s", path)

def get_schema_version(conn: sqlite3.Connection) -> int:
    """Read the SQLite schema version from PRAGMA user_version."""
    cursor = conn.cursor()
    cursor.execute("PRAGMA user_version")
    row = cursor.fetchone()
    return int(row[0]) if row else 0

def set_schema_version(conn: sqlite3.Connection, version: int) -> None:
    """Set the SQLite schema version via PRAGMA user_version."""
    conn.execute(f"PRAGMA user_version = {int(version)}")

def ensure_schema_version(conn: sqlite3.Connection) -> None:
    """Ensure the current schema version is written to the database."""
    current = get_schema_version(conn)
    if current != SCHEMA_VERSION:
        set_schema_version(conn, SCHEMA_VERSION)

@contextmanager
def get_conn(db_path: Optional[Path] = None):
    """Context manager for SQLite connection, using row_factory for dict-like rows."""
    conn = sqlite3.connect(db_path or DB_PATH, check_same_thread=False)
    conn.row_factory = sqlite3.Row
    try:
        yield conn
    finally:
        conn.close()

class SQLiteKeyValueStore(KeyValueStore):
    """KeyValueStore backed by the kv_store table; values are JSON text."""

    def __init__(self, db_path: Optional[Path] = None):
        self.db_path = Path(db_path or DB_PATH)

    @contextmanager
    def _conn(self):
        try:
            with get_conn(self.db_path) as conn:
                yield conn
        except (sqlite3.Error, OSError) as exc:
            raise StorageUnavailableError(f"Review store unavailable: {exc}") from exc

    def get(self, key: str) -> Optional[Dict[str, Any]]:
        with self._conn() as conn:
            row = conn.execute("SELECT value FROM kv_store WHERE key = ?", (key,)).fetchone()
        if not row:
            return None
        try:
            return json.loads(row["value"])
        except json.JSONDecodeError as exc:
            raise UnreadableRecordError(key) from exc

    def set(self, key: str, value: Dict[str, Any]) -> None:
        self.set_many({key: value})

    def set_many(self, items: Mapping[str, Dict[str, Any]]) -> None:
        rows = [(key, json.dumps(value)) for key, value in items.items()]
        with self._conn() as conn:
            conn.executemany(
                """
                INSERT INTO kv_store (key, value, updated_at)
                VALUES (?, ?, datetime('now'))
                ON CONFLICT(key) DO UPDATE SET
                    value = excluded.value,
                    updated_at = excluded.updated_at
                """,
                rows,
            )
            conn.commit()

    def delete(self, key: str) -> None:
        self.delete_many([key])

    def delete_many(self, keys: Iterable[str]) -> None:
        rows = [(key,) for key in keys]
        with self._conn() as conn:
            conn.executemany("DELETE FROM kv_store WHERE key = ?", rows)
            conn.commit()

    def keys(self, prefix: str = "") -> List[str]:
        with self._conn() as conn:
            cursor = conn.execute(
                "SELECT key FROM kv_store WHERE substr(key, 1, ?) = ? ORDER BY rowid",
                (len(prefix), prefix),
            )
            return [row["key"] for row in cursor.fetchall()]

def get_store():
    """FastAPI dependency that yields the on-disk review store."""
    yield SQLiteKeyValueStore(DB_PATH)
