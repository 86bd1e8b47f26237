# SQL schema for the Study Island state store

SCHEMA_VERSION = 1

SCHEMA_SQL = """
-- One JSON blob per independently persisted piece of state
CREATE TABLE IF NOT EXISTS state_blobs (
    key TEXT PRIMARY KEY,
    value TEXT NOT NULL,
    updated_at TEXT NOT NULL DEFAULT (datetime('now'))
);
"""
