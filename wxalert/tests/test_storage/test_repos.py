"""Tests for the alert and run repositories."""

import dataclasses

from conftest import FIXED_TIME, make_current, make_series
from wxalert.rules.classifier import classify
from wxalert.storage import alert_repo, run_repo

T0 = "2026-10-19T06:00:00+00:00"
T1 = "2026-10-19T07:00:00+00:00"


def _alerts():
    current = make_current(feels_like=37.0)
    return classify(current, make_series((4.5, 9.3, 31.2), (7.5, 15.0, 33.0)))


class TestAlertRepo:
    def test_record_and_read_back(self, tmp_db):
        alerts = _alerts()
        assert alert_repo.record_alerts(tmp_db, "colombo", "run-1", alerts, T0) == 3

        known = alert_repo.get_active_fingerprints(tmp_db, "colombo", T0)
        assert known == {a.fingerprint for a in alerts}

        row = alert_repo.get_recent_alerts(tmp_db, "colombo", limit=1)[0]
        assert row["first_run_id"] == "run-1"
        assert row["observed_at"] == FIXED_TIME.isoformat()

    def test_upsert_refreshes_last_seen_only(self, tmp_db):
        alerts = _alerts()
        alert_repo.record_alerts(tmp_db, "colombo", "run-1", alerts, T0)
        reworded = [dataclasses.replace(a, description="changed") for a in alerts]
        alert_repo.record_alerts(tmp_db, "colombo", "run-2", reworded, T1)

        rows = alert_repo.get_recent_alerts(tmp_db, "colombo")
        assert len(rows) == 3
        for r in rows:
            assert r["first_seen_at"] == T0
            assert r["last_seen_at"] == T1
            assert r["first_run_id"] == "run-1"
            assert r["description"] != "changed"

    def test_active_window(self, tmp_db):
        alert_repo.record_alerts(tmp_db, "colombo", "run-1", _alerts(), T0)
        assert alert_repo.get_active_fingerprints(tmp_db, "colombo", T1) == set()
        assert len(alert_repo.get_active_fingerprints(tmp_db, "colombo", T0)) == 3

    def test_scoped_per_location(self, tmp_db):
        alert_repo.record_alerts(tmp_db, "colombo", "run-1", _alerts(), T0)
        assert alert_repo.get_active_fingerprints(tmp_db, "galle", T0) == set()
        assert alert_repo.get_recent_alerts(tmp_db, "galle") == []
        assert len(alert_repo.get_recent_alerts(tmp_db)) == 3

    def test_clear_location(self, tmp_db):
        alert_repo.record_alerts(tmp_db, "colombo", "run-1", _alerts(), T0)
        alert_repo.record_alerts(tmp_db, "galle", "run-1", _alerts(), T0)

        assert alert_repo.clear_location(tmp_db, "colombo") == 3
        assert alert_repo.get_recent_alerts(tmp_db, "colombo") == []
        assert alert_repo.clear_location(tmp_db) == 3
        assert alert_repo.get_recent_alerts(tmp_db) == []


class TestRunRepo:
    def test_create_and_complete(self, tmp_db):
        run_repo.create_run(tmp_db, "run-1", "abc123")
        run = run_repo.get_run(tmp_db, "run-1")
        assert run["status"] == "running"
        assert run["config_hash"] == "abc123"

        run_repo.complete_run(
            tmp_db, "run-1", "partial",
            summary_json="{}", locations_scanned=5, locations_failed=1, alerts_new=2,
        )
        run = run_repo.get_run(tmp_db, "run-1")
        assert run["status"] == "partial"
        assert run["completed_at"] is not None
        assert run["locations_scanned"] == 5
        assert run["alerts_new"] == 2
        assert run["error_message"] is None

    def test_latest_run(self, tmp_db):
        assert run_repo.get_latest_run(tmp_db) is None
        run_repo.create_run(tmp_db, "run-1")
        run_repo.create_run(tmp_db, "run-2")
        assert run_repo.get_latest_run(tmp_db)["run_id"] == "run-2"

    def test_missing_run(self, tmp_db):
        assert run_repo.get_run(tmp_db, "nope") is None
