"""Repository for known alert fingerprints, one history per monitored location."""

import sqlite3
from collections.abc import Iterable

from wxalert.models.alert import AlertCandidate


def get_active_fingerprints(
    conn: sqlite3.Connection, location_slug: str, since_iso: str
) -> set[str]:
    """Fingerprints for a location last seen at or after `since_iso`."""
    rows = conn.execute(
        "SELECT fingerprint FROM known_alerts "
        "WHERE location_slug = ? AND last_seen_at >= ?",
        (location_slug, since_iso),
    ).fetchall()
    return {r[0] for r in rows}


def record_alerts(
    conn: sqlite3.Connection,
    location_slug: str,
    run_id: str,
    alerts: Iterable[AlertCandidate],
    seen_at: str,
) -> int:
    """Upsert every alert of a successful derivation.

    New fingerprints get first_seen_at; existing ones only refresh
    last_seen_at. Returns the number of rows touched.
    """
    count = 0
    for a in alerts:
        conn.execute(
            "INSERT INTO known_alerts "
            "(location_slug, fingerprint, event_kind, severity, window_metric, "
            " description, observed_at, first_seen_at, last_seen_at, first_run_id) "
            "VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?) "
            "ON CONFLICT(location_slug, fingerprint) DO UPDATE SET "
            "last_seen_at = excluded.last_seen_at",
            (
                location_slug,
                a.fingerprint,
                a.event_kind.value,
                a.severity.value,
                a.window_metric,
                a.description,
                a.observed_at.isoformat(),
                seen_at,
                seen_at,
                run_id,
            ),
        )
        count += 1
    conn.commit()
    return count


def get_recent_alerts(
    conn: sqlite3.Connection, location_slug: str | None = None, limit: int = 20
) -> list[dict]:
    """Most recently seen alerts, optionally for one location."""
    if location_slug is None:
        rows = conn.execute(
            "SELECT * FROM known_alerts ORDER BY last_seen_at DESC LIMIT ?",
            (limit,),
        ).fetchall()
    else:
        rows = conn.execute(
            "SELECT * FROM known_alerts WHERE location_slug = ? "
            "ORDER BY last_seen_at DESC LIMIT ?",
            (location_slug, limit),
        ).fetchall()
    return [dict(r) for r in rows]


def clear_location(conn: sqlite3.Connection, location_slug: str | None = None) -> int:
    """Forget known fingerprints so the next scan re-emits. Returns rows deleted."""
    if location_slug is None:
        cursor = conn.execute("DELETE FROM known_alerts")
    else:
        cursor = conn.execute(
            "DELETE FROM known_alerts WHERE location_slug = ?", (location_slug,)
        )
    conn.commit()
    return cursor.rowcount
