# SQL schema for the Code Reels review store

SCHEMA_VERSION = 1

SCHEMA_SQL = """
-- Scheduler records (cards and streak counters) as JSON documents
CREATE TABLE IF NOT EXISTS kv_store (
    key TEXT PRIMARY KEY,
    value TEXT NOT NULL,
    updated_at TEXT NOT NULL DEFAULT (datetime('now'))
);
"""

INDEXES_SQL = """
CREATE INDEX IF NOT EXISTS idx_kv_store_updated ON kv_store (updated_at);
"""
