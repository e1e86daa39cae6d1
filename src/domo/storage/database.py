"""SQLite database schema and connection management."""

from __future__ import annotations

import sqlite3
from pathlib import Path

SCHEMA_VERSION = 1

SCHEMA_SQL = """
-- Demos configured by a business user
CREATE TABLE IF NOT EXISTS demos (
    id                    TEXT PRIMARY KEY,
    name                  TEXT NOT NULL,
    cta_title             TEXT,
    cta_message           TEXT,
    cta_button_text       TEXT,
    cta_button_url        TEXT,
    tavus_conversation_id TEXT,
    created_at            TEXT DEFAULT (datetime('now'))
);

-- Videos uploaded for a demo; generated_context carries the chapter list
CREATE TABLE IF NOT EXISTS demo_videos (
    id                INTEGER PRIMARY KEY AUTOINCREMENT,
    demo_id           TEXT NOT NULL REFERENCES demos(id) ON DELETE CASCADE,
    title             TEXT NOT NULL,
    storage_url       TEXT NOT NULL,
    generated_context TEXT,
    created_at        TEXT DEFAULT (datetime('now')),
    UNIQUE(demo_id, title)
);

-- One row per agent conversation
CREATE TABLE IF NOT EXISTS conversation_details (
    id                    INTEGER PRIMARY KEY AUTOINCREMENT,
    demo_id               TEXT NOT NULL REFERENCES demos(id) ON DELETE CASCADE,
    tavus_conversation_id TEXT NOT NULL UNIQUE,
    conversation_name     TEXT,
    status                TEXT NOT NULL DEFAULT 'active',
    transcript            TEXT,
    perception_analysis   TEXT,
    started_at            TEXT,
    completed_at          TEXT
);

-- Contact details captured by the qualification objective
CREATE TABLE IF NOT EXISTS qualification_data (
    id              INTEGER PRIMARY KEY AUTOINCREMENT,
    conversation_id TEXT NOT NULL UNIQUE,
    first_name      TEXT,
    last_name       TEXT,
    email           TEXT,
    position        TEXT,
    objective_name  TEXT,
    event_type      TEXT,
    raw_payload     TEXT,
    received_at     TEXT NOT NULL
);

-- Reason for visit captured by the product interest objective
CREATE TABLE IF NOT EXISTS product_interest_data (
    id               INTEGER PRIMARY KEY AUTOINCREMENT,
    conversation_id  TEXT NOT NULL UNIQUE,
    objective_name   TEXT,
    primary_interest TEXT,
    pain_points      TEXT,
    event_type       TEXT,
    raw_payload      TEXT,
    received_at      TEXT NOT NULL
);

-- Videos shown during a conversation (accumulates, no demo_id column)
CREATE TABLE IF NOT EXISTS video_showcase_data (
    id              INTEGER PRIMARY KEY AUTOINCREMENT,
    conversation_id TEXT NOT NULL UNIQUE,
    objective_name  TEXT,
    videos_shown    TEXT,
    event_type      TEXT,
    received_at     TEXT NOT NULL
);

-- CTA shown/clicked tracking
CREATE TABLE IF NOT EXISTS cta_tracking (
    id              INTEGER PRIMARY KEY AUTOINCREMENT,
    conversation_id TEXT NOT NULL UNIQUE,
    demo_id         TEXT,
    cta_shown_at    TEXT,
    cta_clicked_at  TEXT,
    cta_url         TEXT,
    user_agent      TEXT,
    ip_address      TEXT,
    updated_at      TEXT
);

-- Tool-call deliveries already processed
CREATE TABLE IF NOT EXISTS webhook_events (
    id              INTEGER PRIMARY KEY AUTOINCREMENT,
    event_hash      TEXT NOT NULL UNIQUE,
    conversation_id TEXT,
    event_type      TEXT,
    received_at     TEXT DEFAULT (datetime('now'))
);

-- Schema version tracking
CREATE TABLE IF NOT EXISTS schema_version (
    version INTEGER NOT NULL
);

-- Indexes
CREATE INDEX IF NOT EXISTS idx_demo_videos_demo ON demo_videos(demo_id);
CREATE INDEX IF NOT EXISTS idx_demos_conversation ON demos(tavus_conversation_id);
CREATE INDEX IF NOT EXISTS idx_conversation_details_demo ON conversation_details(demo_id);
CREATE INDEX IF NOT EXISTS idx_conversation_details_started ON conversation_details(started_at);
"""


class Database:
    """SQLite database connection manager."""

    def __init__(self, db_path: Path):
        self.db_path = db_path
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        self._conn: sqlite3.Connection | None = None

    @property
    def conn(self) -> sqlite3.Connection:
        if self._conn is None:
            self._conn = sqlite3.connect(str(self.db_path))
            self._conn.execute("PRAGMA journal_mode=WAL")
            self._conn.execute("PRAGMA foreign_keys=ON")
            self._conn.row_factory = sqlite3.Row
        return self._conn

    def initialize(self):
        """Create all tables if they don't exist."""
        self.conn.executescript(SCHEMA_SQL)
        row = self.conn.execute(
            "SELECT version FROM schema_version LIMIT 1"
        ).fetchone()
        if row is None:
            self.conn.execute(
                "INSERT INTO schema_version (version) VALUES (?)",
                (SCHEMA_VERSION,),
            )
        self.conn.commit()

    def close(self):
        if self._conn:
            self._conn.close()
            self._conn = None

    def __enter__(self):
        self.initialize()
        return self

    def __exit__(self, *args):
        self.close()
