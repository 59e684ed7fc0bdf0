"""
CLI Module

Architectural Intent:
- Command-line interface for alertbridge
- Entry point for operators: run the API, submit test alerts, re-drive escalations
- Delegates to application use cases via composition root
- Supports --verbose/--debug flags for log level control
"""

import argparse
import asyncio
import json
import logging
import sys
import traceback

from alertbridge.application.dtos.alert_dtos import AlertSubmission
from alertbridge.domain.errors import (
    AlertBridgeError,
    NotFoundError,
    TransientStoreError,
    ValidationError,
)
from alertbridge.infrastructure.config import load_config
from alertbridge.infrastructure.logging import configure_logging, level_from_name


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="alertbridge: turn facility alerts into routed incidents"
    )
    parser.add_argument(
        "--verbose", "-v", action="store_true", help="Enable verbose output"
    )
    parser.add_argument(
        "--debug", action="store_true", help="Enable debug output with tracebacks"
    )
    parser.add_argument(
        "--config", "-c", default=None, help="Path to JSON config (default: alertbridge.json)"
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    serve_parser = subparsers.add_parser("serve", help="Run the alert ingestion API")
    serve_parser.add_argument("--host", default=None, help="Bind address")
    serve_parser.add_argument("--port", "-p", type=int, default=None, help="Bind port")

    submit_parser = subparsers.add_parser("submit", help="Submit one alert")
    submit_parser.add_argument("--system", required=True, help="External system, e.g. HVAC")
    submit_parser.add_argument("--type", required=True, dest="event_type", help="Alert type, e.g. Temperature")
    submit_parser.add_argument("--severity", required=True, help="Critical, High, Medium or Low")
    submit_parser.add_argument("--unit", required=True, help="Unit id or sensor id")
    submit_parser.add_argument("--message", "-m", required=True, help="Alert text")

    escalate_parser = subparsers.add_parser(
        "escalate", help="Retry the escalation step for a stored alert"
    )
    escalate_parser.add_argument("alert_id", help="Alert ID")

    recover_parser = subparsers.add_parser(
        "recover", help="Repair alerts whose incident was created but not linked"
    )
    recover_parser.add_argument(
        "--redrive",
        action="store_true",
        help="Also escalate eligible alerts that never got an incident",
    )

    show_parser = subparsers.add_parser("show", help="Print an alert or incident as JSON")
    show_parser.add_argument("kind", choices=("alert", "incident"))
    show_parser.add_argument("record_id", help="Alert or incident ID")

    return parser


async def async_main():
    parser = _build_parser()
    args = parser.parse_args()

    config = load_config(args.config)

    # Configure logging based on flags, falling back to the configured level
    if args.debug:
        level = logging.DEBUG
    elif args.verbose:
        level = logging.INFO
    else:
        level = level_from_name(config.log_level)
    configure_logging(level=level, json_format=config.log_format == "json")

    verbose = args.verbose or args.debug

    if args.command is None:
        parser.print_help()
        return

    from alertbridge import composition_root

    container = composition_root.create_container(config)
    try:
        await _dispatch(args, container, verbose)
    finally:
        container.close()


async def _dispatch(args, container, verbose: bool) -> None:
    if args.command == "serve":
        from alertbridge.presentation.web.app import AlertBridgeWebApp

        host = args.host or container.config.web.host
        port = args.port if args.port is not None else container.config.web.port
        app = AlertBridgeWebApp(container)
        await app.start(host, port)
        print(f"[*] alertbridge API listening on http://{host}:{app.port}")
        print("[*] Press Ctrl+C to stop.")
        try:
            while True:
                await asyncio.sleep(1)
        except (KeyboardInterrupt, asyncio.CancelledError):
            print("\n[*] alertbridge API stopped.")
        finally:
            app.stop()
        return

    if args.command == "submit":
        payload = {
            "system_type": args.system,
            "event_type": args.event_type,
            "severity": args.severity,
            "unit_id": args.unit,
            "message": args.message,
        }
        try:
            submission = AlertSubmission.from_payload(
                payload,
                max_message_length=container.config.ingest.max_message_length,
            )
            result = await container.process_alert.submit(submission)
        except ValidationError as e:
            print(f"[-] Rejected: {e.field}: {e.reason}")
            sys.exit(1)
        except TransientStoreError as e:
            _fail(f"Store unavailable, retry later: {e}", verbose)
        print(f"[+] Alert stored: {result.alert_id}")
        if result.incident_id:
            print(f"[+] Incident {result.incident_id} ({result.outcome})")
        else:
            print("[*] No escalation for this severity.")
        return

    if args.command == "escalate":
        try:
            result = await container.process_alert.escalate(args.alert_id)
        except NotFoundError as e:
            print(f"[-] {e}")
            sys.exit(1)
        except (AlertBridgeError, ValueError) as e:
            _fail(f"Escalation Failed: {e}", verbose)
        if result.incident_id:
            print(f"[+] Alert {result.alert_id} -> incident {result.incident_id} ({result.outcome})")
        else:
            print(f"[*] Alert {result.alert_id} does not qualify for escalation.")
        return

    if args.command == "recover":
        try:
            report = await container.recover_incidents.execute(redrive=args.redrive)
        except AlertBridgeError as e:
            _fail(f"Recovery Failed: {e}", verbose)
        print(
            f"[+] Recovery complete: scanned={report.scanned} "
            f"repaired={report.repaired} redriven={report.redriven}"
        )
        return

    if args.command == "show":
        try:
            if args.kind == "alert":
                record = await container.alert_repository.get(args.record_id)
            else:
                record = await container.incident_store.get(args.record_id)
        except TransientStoreError as e:
            _fail(f"Store unavailable, retry later: {e}", verbose)
        if record is None:
            print(f"[-] {args.kind} '{args.record_id}' not found")
            sys.exit(1)
        print(json.dumps(record.to_dict(), indent=2))
        return


def _fail(message: str, verbose: bool) -> None:
    print(f"[-] {message}")
    if verbose:
        traceback.print_exc()
    sys.exit(1)


def main():
    asyncio.run(async_main())


if __name__ == "__main__":
    main()
