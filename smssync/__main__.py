"""CLI entry point for SMSSync."""

import argparse
import json
import logging
import sys
import traceback
from datetime import datetime
from pathlib import Path

from .activity_log import FileLogSink
from .config import Config, ConfigError, load_config
from .models import QueuedMessageBatch
from .net import HttpxTransport
from .store import InMemoryMessageStore, StaticEndpointSource
from .sync import ResultSyncClient


class JSONFormatter(logging.Formatter):
    """JSON formatter for structured logging."""

    def format(self, record: logging.LogRecord) -> str:
        """Format log record as JSON."""
        log_data = {
            "timestamp": datetime.fromtimestamp(record.created).isoformat(),
            "level": record.levelname,
            "component": record.name,
            "message": record.getMessage(),
        }

        if record.exc_info:
            log_data["exception"] = "".join(traceback.format_exception(*record.exc_info))

        try:
            return json.dumps(log_data)
        except (TypeError, ValueError):
            log_data["message"] = str(log_data["message"])
            if "exception" in log_data:
                log_data["exception"] = str(log_data["exception"])
            return json.dumps(log_data)


def setup_logging(verbose: bool = False, log_level: str | None = None, json_output: bool = False) -> None:
    """Configure logging.

    Args:
        verbose: Enable debug logging (ignored if log_level is set).
        log_level: Explicit log level (warning, info, debug).
        json_output: Output logs as JSON lines for machine parsing.
    """
    if log_level:
        level_map = {
            "warning": logging.WARNING,
            "info": logging.INFO,
            "debug": logging.DEBUG,
        }
        level = level_map.get(log_level, logging.INFO)
    else:
        level = logging.DEBUG if verbose else logging.INFO

    handler = logging.StreamHandler()
    if json_output:
        handler.setFormatter(JSONFormatter())
    else:
        formatter = logging.Formatter(
            fmt="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )
        handler.setFormatter(formatter)

    logging.basicConfig(
        level=level,
        handlers=[handler],
    )

    # httpx logs every request at INFO
    logging.getLogger("httpx").setLevel(logging.WARNING)


def _build_client(
    config: Config,
    messages_path: str | None = None,
    load_messages: bool = True,
) -> ResultSyncClient:
    """Wire a ResultSyncClient from configuration."""
    store = InMemoryMessageStore()
    messages_path = messages_path or config.store.messages_path
    if load_messages and messages_path:
        store.load_messages(messages_path)

    return ResultSyncClient(
        transport=HttpxTransport(
            timeout=config.http.timeout_seconds,
            user_agent=config.http.user_agent,
        ),
        message_store=store,
        log_sink=FileLogSink(config.activity_log.path),
        endpoints=StaticEndpointSource(config.endpoints),
    )


def _enabled_endpoints(config: Config) -> list:
    endpoints = [e for e in config.endpoints if e.is_enabled]
    if not endpoints:
        print("No enabled endpoints configured", file=sys.stderr)
    return endpoints


def cmd_sync(args: argparse.Namespace) -> int:
    """Run one sync pass."""
    config = load_config(args.config)
    if not _enabled_endpoints(config):
        return 1

    try:
        client = _build_client(config, args.messages)
    except (OSError, ValueError) as e:
        print(f"Could not load messages: {e}", file=sys.stderr)
        return 1

    try:
        report = client.sync()
    finally:
        client.transport.close()

    print(f"Device: {config.device.name}")
    print(f"Local messages: {len(client.message_store)}")
    print(f"Endpoints processed: {report.endpoints_processed}")
    print(f"Endpoints skipped: {report.endpoints_skipped}")
    print(f"Results posted: {report.results_posted}")
    if report.uuids_unmatched:
        print(f"UUIDs not found locally: {report.uuids_unmatched}")
    for error in report.errors:
        print(f"Error: {error}", file=sys.stderr)

    return 0


def cmd_fetch(args: argparse.Namespace) -> int:
    """Print result UUIDs requested by each enabled endpoint."""
    config = load_config(args.config)
    endpoints = _enabled_endpoints(config)
    if not endpoints:
        return 1

    client = _build_client(config, load_messages=False)
    output = []
    try:
        for endpoint in endpoints:
            response = client.fetch_results(endpoint)
            output.append({
                "url": endpoint.url,
                "success": response.success,
                "status_code": response.status_code,
                "uuids": response.uuids,
            })
    finally:
        client.transport.close()

    if args.json:
        print(json.dumps(output, indent=2))
    else:
        for item in output:
            status = "ok" if item["success"] else f"failed ({item['status_code']})"
            print(f"{item['url']}: {status}")
            for uuid in item["uuids"]:
                print(f"  {uuid}")

    return 0 if all(item["success"] for item in output) else 1


def cmd_send_queued(args: argparse.Namespace) -> int:
    """Report queued message UUIDs to each enabled endpoint."""
    config = load_config(args.config)
    endpoints = _enabled_endpoints(config)
    if not endpoints:
        return 1

    batch = QueuedMessageBatch(uuids=list(args.uuids))
    client = _build_client(config, load_messages=False)
    failed = False
    try:
        for endpoint in endpoints:
            response = client.post_queued_messages(endpoint, batch)
            if response is None:
                continue
            if response.success:
                print(f"{endpoint.url}: ok, {len(response.uuids)} UUIDs acknowledged")
            else:
                failed = True
                print(f"{endpoint.url}: failed ({response.status_code})")
    finally:
        client.transport.close()

    return 1 if failed else 0


def cmd_endpoints(args: argparse.Namespace) -> int:
    """List configured endpoints with secrets masked."""
    config = load_config(args.config)
    endpoints = [e.to_dict(mask_secret=True) for e in config.endpoints]

    if args.json:
        print(json.dumps(endpoints, indent=2))
        return 0

    if not endpoints:
        print("No endpoints configured")
        return 0

    for endpoint in endpoints:
        title = f" ({endpoint['title']})" if endpoint["title"] else ""
        secret = " [secret]" if endpoint["secret"] else ""
        print(f"[{endpoint['status']}] {endpoint['url']}{title}{secret}")

    return 0


def cmd_activity(args: argparse.Namespace) -> int:
    """Show the most recent activity log lines."""
    config = load_config(args.config)
    lines = FileLogSink(config.activity_log.path).read_lines(limit=args.lines)

    if not lines:
        print("No activity recorded")
        return 0

    for line in lines:
        print(line)
    return 0


def main() -> int:
    """Main entry point."""
    parser = argparse.ArgumentParser(
        prog="smssync",
        description="Report SMS send and delivery results to SMSSync web services",
    )
    parser.add_argument(
        "-c", "--config",
        type=Path,
        default=None,
        help="Path to config file (default: none, environment only)",
    )
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Enable verbose logging",
    )
    parser.add_argument(
        "--log-level",
        type=str,
        choices=["warning", "info", "debug"],
        default=None,
        help="Set log level explicitly (overrides -v/--verbose)",
    )
    parser.add_argument(
        "--json-logs",
        action="store_true",
        help="Output logs as JSON for machine parsing",
    )

    subparsers = parser.add_subparsers(dest="command", help="Commands")

    sync_parser = subparsers.add_parser("sync", help="Run one result sync pass")
    sync_parser.add_argument(
        "-m", "--messages",
        type=str,
        default=None,
        help="YAML or JSON file of local messages (overrides store.messages_path)",
    )
    sync_parser.set_defaults(func=cmd_sync)

    fetch_parser = subparsers.add_parser("fetch", help="Show result UUIDs requested by endpoints")
    fetch_parser.add_argument(
        "--json",
        action="store_true",
        help="Output as JSON",
    )
    fetch_parser.set_defaults(func=cmd_fetch)

    queued_parser = subparsers.add_parser("send-queued", help="Report queued message UUIDs")
    queued_parser.add_argument(
        "uuids",
        nargs="+",
        help="UUIDs of queued messages",
    )
    queued_parser.set_defaults(func=cmd_send_queued)

    endpoints_parser = subparsers.add_parser("endpoints", help="List configured endpoints")
    endpoints_parser.add_argument(
        "--json",
        action="store_true",
        help="Output as JSON",
    )
    endpoints_parser.set_defaults(func=cmd_endpoints)

    activity_parser = subparsers.add_parser("activity", help="Show recent activity log lines")
    activity_parser.add_argument(
        "-n", "--lines",
        type=int,
        default=20,
        help="Number of lines to show (default: 20)",
    )
    activity_parser.set_defaults(func=cmd_activity)

    args = parser.parse_args()

    setup_logging(args.verbose, args.log_level, args.json_logs)

    if not args.command:
        parser.print_help()
        return 1

    try:
        return args.func(args)
    except ConfigError as e:
        print(f"Configuration error: {e}", file=sys.stderr)
        return 2


if __name__ == "__main__":
    sys.exit(main())
