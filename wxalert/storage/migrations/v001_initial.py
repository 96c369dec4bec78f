"""Initial schema: known alert fingerprints, scan runs, config snapshots."""

import sqlite3

DDL = [
    # One row per (location, fingerprint); last_seen_at keeps it active
    """
    CREATE TABLE IF NOT EXISTS known_alerts (
        location_slug TEXT NOT NULL,
        fingerprint TEXT NOT NULL,
        event_kind TEXT NOT NULL,
        severity TEXT NOT NULL,
        window_metric REAL NOT NULL,
        description TEXT NOT NULL,
        observed_at TEXT NOT NULL,
        first_seen_at TEXT NOT NULL,
        last_seen_at TEXT NOT NULL,
        first_run_id TEXT NOT NULL,
        PRIMARY KEY (location_slug, fingerprint)
    )
    """,
    (
        "CREATE INDEX IF NOT EXISTS idx_known_alerts_last_seen "
        "ON known_alerts(location_slug, last_seen_at)"
    ),

    # Config snapshots (dedup by hash)
    """
    CREATE TABLE IF NOT EXISTS config_snapshots (
        config_hash TEXT PRIMARY KEY,
        config_json TEXT NOT NULL,
        created_at TEXT NOT NULL DEFAULT CURRENT_TIMESTAMP
    )
    """,

    # Scan run log
    """
    CREATE TABLE IF NOT EXISTS runs (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        run_id TEXT UNIQUE NOT NULL,
        config_hash TEXT,
        started_at TEXT NOT NULL DEFAULT CURRENT_TIMESTAMP,
        completed_at TEXT,
        status TEXT NOT NULL DEFAULT 'running',
        locations_scanned INTEGER NOT NULL DEFAULT 0,
        locations_failed INTEGER NOT NULL DEFAULT 0,
        alerts_derived INTEGER NOT NULL DEFAULT 0,
        alerts_new INTEGER NOT NULL DEFAULT 0,
        summary_json TEXT,
        error_message TEXT
    )
    """,
]


def up(conn: sqlite3.Connection) -> None:
    for stmt in DDL:
        conn.execute(stmt)
    conn.commit()
