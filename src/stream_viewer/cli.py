"""CLI entry point for stream-viewer."""

import argparse
import logging
import sys

import stream_viewer.app.settings_store
import stream_viewer.io.logging_setup
from stream_viewer.core.errors import StreamViewerError
from stream_viewer.core.model import PAGE_SIZES, StreamRef
from stream_viewer.io.api_client import StreamApiClient
from stream_viewer.tui.app import StreamViewerApp

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="stream-viewer",
        description="Terminal console for browsing AMQP stream messages by offset",
    )
    parser.add_argument(
        "--api-url",
        type=str,
        default=None,
        help="Base URL of the stream inspection API (default: http://localhost:8080). "
        "Env: STREAM_VIEWER_API_URL",
    )
    parser.add_argument(
        "--api-prefix",
        type=str,
        default=None,
        help="Path prefix of the API routes (default: /api)",
    )
    parser.add_argument(
        "--stream",
        type=str,
        default=None,
        metavar="CONNECTION/VHOST/NAME",
        help="Open this stream on startup",
    )
    parser.add_argument(
        "--page-size",
        type=int,
        default=None,
        choices=PAGE_SIZES,
        help="Messages per page (default: 100)",
    )
    parser.add_argument(
        "--interval-ms",
        type=int,
        default=None,
        help="Live refresh interval in milliseconds (default: 5000)",
    )
    parser.add_argument(
        "--no-live",
        action="store_true",
        default=False,
        help="Start with live refresh paused",
    )
    parser.add_argument(
        "--timeout",
        type=float,
        default=None,
        help="Per-request timeout in seconds (default: 10)",
    )
    parser.add_argument(
        "--list-streams",
        action="store_true",
        default=False,
        help="Print all streams as connection/vhost/name and exit",
    )
    parser.add_argument(
        "--check",
        action="store_true",
        default=False,
        help="Check that the API is reachable and exit",
    )
    parser.add_argument(
        "--save-config",
        action="store_true",
        default=False,
        help="Persist the effective settings as the new defaults",
    )
    return parser


def _cli_overrides(args: argparse.Namespace) -> dict:
    overrides = {
        "api_url": args.api_url,
        "api_prefix": args.api_prefix,
        "page_size": args.page_size,
        "poll_interval_ms": args.interval_ms,
        "request_timeout_s": args.timeout,
    }
    if args.no_live:
        overrides["live_refresh"] = False
    return overrides


def _list_streams(client: StreamApiClient) -> int:
    streams = client.list_streams()
    for ref in sorted(streams, key=lambda r: r.label):
        print(ref.label)
    logger.info("listed %d streams", len(streams))
    return 0


def _check(client: StreamApiClient) -> int:
    if client.health():
        print(f"ok: {client.base_url}")
        return 0
    print(f"unhealthy: {client.base_url}", file=sys.stderr)
    return 1


def run(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    interactive = not (args.list_streams or args.check)

    # [LAW:single-enforcer] Runtime logger configuration is centralized in io.logging_setup.
    # The TUI owns the terminal, so records go to the log file only.
    log_runtime = stream_viewer.io.logging_setup.configure(console=not interactive)
    logger.info(
        "logging configured level=%s file=%s",
        log_runtime.level_name,
        log_runtime.file_path,
    )

    settings = stream_viewer.app.settings_store.resolve(_cli_overrides(args))
    if args.save_config:
        path = stream_viewer.app.settings_store.save(settings)
        print(f"Saved settings: {path}")

    client = StreamApiClient(
        settings.api_url,
        api_prefix=settings.api_prefix,
        timeout=settings.request_timeout_s,
    )

    try:
        initial_stream = StreamRef.parse(args.stream) if args.stream else None
        if args.list_streams:
            return _list_streams(client)
        if args.check:
            return _check(client)
    except StreamViewerError as e:
        logger.debug("command failed: %s", e)
        print(f"error: {e.message}", file=sys.stderr)
        return 1

    app = StreamViewerApp(client, settings, initial_stream=initial_stream)
    try:
        app.run()
    finally:
        # The terminal is restored by now; repeat what the session swallowed.
        if app._error_log:
            print("stream-viewer: errors during session:", file=sys.stderr)
            for line in app._error_log:
                print(f"  {line}", file=sys.stderr)
    return 0


def main():
    sys.exit(run())
