"""Scan pipeline: derive alerts for every monitored location and keep the new ones."""

import asyncio
import json
import logging
import time
import uuid
from datetime import timedelta

from wxalert.config.loader import snapshot_config
from wxalert.config.schema import AlertEngineConfig, LocationConfig
from wxalert.errors import AlertEngineError
from wxalert.models.alert import AlertSet
from wxalert.models.common import utc_now
from wxalert.models.reporting import LocationResult, ScanSummary
from wxalert.pipeline.alert_pipeline import AlertOrchestrator
from wxalert.reporting.formatters import format_alert_digest, format_scan_summary_text
from wxalert.signal.fingerprint import filter_new
from wxalert.storage import alert_repo, run_repo
from wxalert.storage.database import connect, run_migrations

logger = logging.getLogger(__name__)


class ScanPipeline:
    def __init__(
        self,
        config: AlertEngineConfig,
        db_path: str = "data/wxalert.db",
        orchestrator: AlertOrchestrator | None = None,
        force: bool = False,
    ):
        self.config = config
        self.db_path = db_path
        self.orchestrator = orchestrator
        # Forced scans report every derived alert as new, whatever is known
        self.force = force

    def run(self) -> ScanSummary:
        """Execute one scan cycle across all enabled locations."""
        start_time = time.monotonic()
        run_id = str(uuid.uuid4())
        summary = ScanSummary(run_id=run_id, forced=self.force)

        conn = connect(self.db_path)
        run_migrations(conn)
        c_hash = snapshot_config(self.config, conn)
        run_repo.create_run(conn, run_id, c_hash)

        try:
            orchestrator = self.orchestrator or AlertOrchestrator.from_config(self.config)
            locations = [loc for loc in self.config.locations if loc.enabled]
            outcomes = asyncio.run(self._derive_all(orchestrator, locations))

            now = utc_now()
            seen_at = now.isoformat()
            active_since = (
                now - timedelta(hours=self.config.ops.fingerprint_ttl_hours)
            ).isoformat()

            for loc, outcome in zip(locations, outcomes):
                summary.locations_scanned += 1
                if isinstance(outcome, AlertEngineError):
                    # Failed derivation: stored state for this location is untouched
                    summary.locations_failed += 1
                    summary.errors.append(f"{loc.slug}: {outcome}")
                    logger.warning("Derivation failed for %s: %s", loc.slug, outcome)
                    continue

                known = alert_repo.get_active_fingerprints(conn, loc.slug, active_since)
                if self.force:
                    new_alerts = list(outcome.alerts)
                else:
                    new_alerts = filter_new(outcome.alerts, known)
                alert_repo.record_alerts(conn, loc.slug, run_id, outcome.alerts, seen_at)

                summary.alerts_derived += len(outcome.alerts)
                summary.alerts_new += len(new_alerts)
                summary.results.append(
                    LocationResult(
                        location_slug=loc.slug,
                        location_name=loc.name,
                        derived=len(outcome.alerts),
                        new_alerts=new_alerts,
                    )
                )
                logger.info(
                    "%s: %d alerts, %d new", loc.slug, len(outcome.alerts), len(new_alerts)
                )

            summary.duration_seconds = time.monotonic() - start_time
            run_repo.complete_run(
                conn,
                run_id,
                _run_status(summary),
                summary_json=json.dumps({
                    "new_fingerprints": {
                        r.location_slug: [a.fingerprint for a in r.new_alerts]
                        for r in summary.results
                    },
                    "errors": summary.errors,
                    "forced": summary.forced,
                }),
                locations_scanned=summary.locations_scanned,
                locations_failed=summary.locations_failed,
                alerts_derived=summary.alerts_derived,
                alerts_new=summary.alerts_new,
            )

            logger.info("\n%s", format_scan_summary_text(summary))
            digest = format_alert_digest(summary)
            if digest:
                logger.info("\n%s", digest)
            return summary

        except Exception as e:
            logger.exception("Scan pipeline failed")
            summary.errors.append(str(e))
            summary.duration_seconds = time.monotonic() - start_time
            run_repo.complete_run(conn, run_id, "failed", error_message=str(e))
            return summary

        finally:
            conn.close()

    async def _derive_all(
        self, orchestrator: AlertOrchestrator, locations: list[LocationConfig]
    ) -> list[AlertSet | AlertEngineError]:
        """Derive concurrently, bounded. Engine errors are returned per location."""
        sem = asyncio.Semaphore(self.config.ops.max_concurrent_locations)

        async def _bounded(loc: LocationConfig) -> AlertSet:
            async with sem:
                return await orchestrator.derive_alerts(loc.coordinate)

        outcomes = await asyncio.gather(
            *(_bounded(loc) for loc in locations), return_exceptions=True
        )
        for outcome in outcomes:
            if isinstance(outcome, BaseException) and not isinstance(
                outcome, AlertEngineError
            ):
                raise outcome
        return outcomes


def _run_status(summary: ScanSummary) -> str:
    if not summary.errors:
        return "completed"
    if summary.locations_scanned and summary.locations_failed == summary.locations_scanned:
        return "failed"
    return "partial"
