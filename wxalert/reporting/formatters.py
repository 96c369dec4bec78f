"""Output formatters for alert sets and scan summaries."""

import json

from wxalert.models.alert import AlertSet
from wxalert.models.reporting import ScanSummary


def format_alert_set_text(s: AlertSet) -> str:
    """Plain text alert listing for logs and the CLI."""
    c = s.coordinate
    lines = [f"=== Alerts for ({c.latitude:.4f}, {c.longitude:.4f}) ==="]
    feels = "n/a" if s.current.feels_like is None else f"{s.current.feels_like:.1f}°C"
    lines.append(
        f"Now: {s.current.temperature:.1f}°C (feels {feels}), "
        f"wind {s.current.wind_speed:.1f} m/s | {len(s.forecast)} forecast steps"
    )
    if not s.alerts:
        lines.append("No alerts.")
    for a in s.alerts:
        lines.append(f"[{a.severity.value.upper()}] {a.title}: {a.description} ({a.fingerprint})")
    return "\n".join(lines)


def format_alert_set_json(s: AlertSet) -> str:
    """JSON alert set including the raw inputs, for audit."""
    data = {
        "coordinate": {"lat": s.coordinate.latitude, "lon": s.coordinate.longitude},
        "alerts": [
            {
                "event": a.event_kind.value,
                "title": a.title,
                "severity": a.severity.value,
                "metric": a.window_metric,
                "description": a.description,
                "observed_at": a.observed_at.isoformat(),
                "fingerprint": a.fingerprint,
            }
            for a in s.alerts
        ],
        "current": {
            "temperature": s.current.temperature,
            "feels_like": s.current.feels_like,
            "wind_speed": s.current.wind_speed,
            "fetched_at": s.current.fetched_at.isoformat(),
        },
        "forecast": [
            {
                "offset": f.offset,
                "precipitation_mm": f.precipitation_mm,
                "wind_speed": f.wind_speed,
                "temperature_max": f.temperature_max,
                "valid_at": f.valid_at.isoformat() if f.valid_at else None,
            }
            for f in s.forecast
        ],
    }
    return json.dumps(data, indent=2, ensure_ascii=False)


def format_scan_summary_text(s: ScanSummary) -> str:
    lines = [
        f"=== Scan Complete | Run {s.run_id[:8]} ===",
        f"Locations: {s.locations_scanned} scanned, {s.locations_failed} failed",
        f"Alerts: {s.alerts_derived} derived, {s.alerts_new} new",
    ]
    if s.errors:
        lines.append(f"Errors: {len(s.errors)}")
    lines.append(f"Duration: {s.duration_seconds:.1f}s")
    return "\n".join(lines)


def format_alert_digest(s: ScanSummary) -> str:
    """Notifier-ready digest of the new alerts, grouped by location."""
    sections = []
    for result in s.results:
        if not result.new_alerts:
            continue
        body = [f"{result.location_name}:"]
        for a in result.new_alerts:
            body.append(f"  - {a.title} ({a.severity.value}): {a.description}")
        sections.append("\n".join(body))
    if not sections:
        return ""
    title = "Weather alerts (forced update)" if s.forced else "Weather alerts"
    return title + "\n\n" + "\n\n".join(sections)
