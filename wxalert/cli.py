"""CLI entry point for the weather alert engine."""

import argparse
import logging

from wxalert.config.loader import get_config_value, load_config, save_config_value
from wxalert.daemon import (
    AlertDaemon,
    DaemonAlreadyRunning,
    daemon_status,
    request_forced_scan,
    stop_daemon,
)
from wxalert.errors import AlertEngineError
from wxalert.models.observation import Coordinate
from wxalert.pipeline.alert_pipeline import derive_alerts
from wxalert.pipeline.scan_pipeline import ScanPipeline
from wxalert.reporting.formatters import (
    format_alert_digest,
    format_alert_set_json,
    format_alert_set_text,
    format_scan_summary_text,
)
from wxalert.storage import alert_repo
from wxalert.storage.database import connect, run_migrations

DEFAULT_CONFIG = "ops/configs/default.yaml"
DEFAULT_DB = "data/wxalert.db"


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(
        prog="wxalert",
        description="Threshold-based weather alert engine",
    )
    parser.add_argument("--config", default=DEFAULT_CONFIG, help="Config YAML path")
    parser.add_argument("--db", default=DEFAULT_DB, help="SQLite DB path")

    sub = parser.add_subparsers(dest="command")

    # derive
    derive_p = sub.add_parser("derive", help="Derive alerts for one coordinate")
    derive_p.add_argument("--lat", type=float, required=True)
    derive_p.add_argument("--lon", type=float, required=True)
    derive_p.add_argument("--deadline", type=float, default=None, help="Seconds")
    derive_p.add_argument("--json", action="store_true", help="Emit JSON with raw inputs")

    # scan
    scan_p = sub.add_parser("scan", help="Run one scan cycle over configured locations")
    scan_p.add_argument(
        "--force", action="store_true", help="Report every derived alert as new"
    )

    # alerts / reset
    alerts_p = sub.add_parser("alerts", help="Show recently recorded alerts")
    alerts_p.add_argument("--location", default=None)
    alerts_p.add_argument("--limit", type=int, default=20)
    reset_p = sub.add_parser("reset", help="Forget known alert fingerprints")
    reset_p.add_argument("--location", default=None)

    # config show / config set
    config_p = sub.add_parser("config", help="Config operations")
    config_sub = config_p.add_subparsers(dest="config_command")
    config_sub.add_parser("show", help="Display current config")
    set_p = config_sub.add_parser("set", help="Set a config value")
    set_p.add_argument("keyvalue", help="key=value to set")

    # daemon
    daemon_p = sub.add_parser("daemon", help="Scan on boot, then on a fixed interval")
    daemon_p.add_argument("--interval", type=int, default=None, help="Seconds")
    daemon_group = daemon_p.add_mutually_exclusive_group()
    daemon_group.add_argument("--stop", action="store_true")
    daemon_group.add_argument("--status", action="store_true")
    daemon_group.add_argument(
        "--force", action="store_true", help="Ask the running daemon for a forced cycle"
    )

    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        return 1

    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    if args.command == "alerts":
        return _cmd_alerts(args)
    elif args.command == "reset":
        return _cmd_reset(args)
    elif args.command == "daemon" and args.stop:
        return stop_daemon()
    elif args.command == "daemon" and args.status:
        return daemon_status()
    elif args.command == "daemon" and args.force:
        return request_forced_scan()

    config = load_config(args.config)

    if args.command == "derive":
        return _cmd_derive(config, args)
    elif args.command == "scan":
        return _cmd_scan(config, args)
    elif args.command == "config":
        return _cmd_config(config, args)
    elif args.command == "daemon":
        try:
            AlertDaemon(config, args.db, args.interval).start()
        except DaemonAlreadyRunning as e:
            print(f"Error: {e}")
            return 1
        return 0
    else:
        parser.print_help()
        return 1


def _cmd_derive(config, args) -> int:
    try:
        coordinate = Coordinate(args.lat, args.lon)
        alert_set = derive_alerts(coordinate, config, deadline=args.deadline)
    except ValueError as e:
        print(f"Error: {e}")
        return 1
    except AlertEngineError as e:
        print(f"Error: {type(e).__name__}: {e}")
        return 1
    if args.json:
        print(format_alert_set_json(alert_set))
    else:
        print(format_alert_set_text(alert_set))
    return 0


def _cmd_scan(config, args) -> int:
    summary = ScanPipeline(config, args.db, force=args.force).run()
    print(format_scan_summary_text(summary))
    digest = format_alert_digest(summary)
    if digest:
        print()
        print(digest)
    return 0 if not summary.errors else 1


def _cmd_alerts(args) -> int:
    conn = connect(args.db)
    run_migrations(conn)
    rows = alert_repo.get_recent_alerts(conn, args.location, args.limit)
    if not rows:
        print("No alerts recorded")
    for r in rows:
        print(
            f"{r['last_seen_at'][:16]} {r['location_slug']:<12} "
            f"[{r['severity']}] {r['event_kind']}: {r['description']}"
        )
    conn.close()
    return 0


def _cmd_reset(args) -> int:
    conn = connect(args.db)
    run_migrations(conn)
    removed = alert_repo.clear_location(conn, args.location)
    scope = args.location or "all locations"
    print(f"Cleared {removed} known alerts for {scope}")
    conn.close()
    return 0


def _cmd_config(config, args) -> int:
    if args.config_command == "show":
        print(config.model_dump_json(indent=2, exclude={"provider": {"api_key"}}))
        return 0
    elif args.config_command == "set":
        kv = args.keyvalue
        if "=" not in kv:
            print("Error: use key=value format")
            return 1
        key, value = kv.split("=", 1)
        try:
            new_config = save_config_value(args.config, key.strip(), value.strip())
            print(f"Set {key} = {get_config_value(new_config, key.strip())} in {args.config}")
            return 0
        except (KeyError, IndexError, ValueError) as e:
            print(f"Error: {e}")
            return 1
    else:
        print("Use: config show | config set key=value")
        return 1
