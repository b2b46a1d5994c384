from .database import get_conn, init_db, SQLiteKeyValueStore

__all__ = ['get_conn', 'init_db', 'SQLiteKeyValueStore']
