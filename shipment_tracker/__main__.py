"""Command-line entry point for the shipment tracker.

Usage:
    python -m shipment_tracker serve                  # HTTP carrier + file watcher
    python -m shipment_tracker serve --no-http        # file watcher only
    python -m shipment_tracker send "created,s1,express,1700000000000"
    python -m shipment_tracker send --http s1         # use the HTTP carrier
    python -m shipment_tracker replay events.txt
"""

import argparse
import sys

from shipment_tracker.config import (
    EXCHANGE_DIR,
    HTTP_HOST,
    HTTP_PORT,
    configure_logging,
)


def _build_service():
    from shipment_tracker.core.registry import ShipmentRegistry
    from shipment_tracker.core.tracking_service import TrackingService

    return TrackingService(ShipmentRegistry())


def cmd_serve(args) -> int:
    from shipment_tracker.async_engine.file_watcher import FileExchangeWatcher

    service = _build_service()
    watcher = FileExchangeWatcher(service, args.exchange_dir)

    if args.no_http:
        watcher.serve_forever()
        return 0

    from shipment_tracker.integrations.http_api import run_server

    watcher.start()
    try:
        run_server(service, args.host, args.port)
    finally:
        watcher.stop()
    return 0


def cmd_send(args) -> int:
    if args.http:
        from shipment_tracker.integrations.http_client import HttpTrackingClient

        client = HttpTrackingClient(f"http://{args.host}:{args.port}")
        try:
            result = client.send(args.input)
        finally:
            client.close()
        label = "SUCCESS" if result.get("success") else "ERROR"
        print(f"{label}: {result.get('message', '')}")
        return 0 if result.get("success") else 1

    from shipment_tracker.integrations.file_exchange import FileExchangeClient, is_failure_reply

    client = FileExchangeClient(args.exchange_dir)
    try:
        response = client.send(args.input)
    except ValueError as e:
        print(f"ERROR: {e}")
        return 1

    if is_failure_reply(response):
        print(f"ERROR: {response}")
        return 1

    print(f"SUCCESS: {response}")
    return 0


def cmd_replay(args) -> int:
    from shipment_tracker.async_engine.simulator import replay_file

    service = _build_service()
    summary = replay_file(args.file, service, delay=args.delay)

    for line_no, line, message in summary.errors:
        print(f"line {line_no}: {line} -> {message}")
    print(f"Processed {summary.processed}, failed {summary.failed}")

    for snapshot in service.registry.snapshots():
        flag = f" [ABNORMAL: {snapshot.abnormality_reason}]" if snapshot.is_abnormal else ""
        print(f"{snapshot.id}: {snapshot.status} @ {snapshot.current_location or '-'}{flag}")
    return 0 if summary.failed == 0 else 1


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="shipment_tracker", description="Shipment tracker")
    parser.add_argument("--log-level", default=None, help="Override TRACKER_LOG_LEVEL")
    parser.add_argument("--exchange-dir", default=EXCHANGE_DIR, help="File-exchange directory")
    parser.add_argument("--host", default=HTTP_HOST)
    parser.add_argument("--port", type=int, default=HTTP_PORT)

    sub = parser.add_subparsers(dest="command", required=True)

    serve = sub.add_parser("serve", help="Run the tracking server")
    serve.add_argument("--no-http", action="store_true", help="Only run the file watcher")
    serve.set_defaults(func=cmd_serve)

    send = sub.add_parser("send", help="Send one request as a client")
    send.add_argument("input", help="Event line, CREATE:/UPDATE:/TRACK: request, or shipment id")
    send.add_argument("--http", action="store_true", help="Use the HTTP carrier")
    send.set_defaults(func=cmd_send)

    replay = sub.add_parser("replay", help="Replay an event file into a fresh registry")
    replay.add_argument("file")
    replay.add_argument("--delay", type=float, default=0.0, help="Seconds between events")
    replay.set_defaults(func=cmd_replay)

    return parser


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)
    if args.log_level:
        configure_logging(args.log_level)
    else:
        configure_logging()
    return args.func(args)


if __name__ == "__main__":
    sys.exit(main())
