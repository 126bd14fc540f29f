"""Entry point for the MiniPhone sync client.

This module provides the command-line front end. It handles:
- Configuration loading
- Logging setup
- Client construction with console collaborators
- Subcommands: send, drain, export, monitor, status
"""

import argparse
import asyncio
import sys
from pathlib import Path
from typing import TYPE_CHECKING

import structlog

from miniphone_sync._version import __version__

if TYPE_CHECKING:
    from miniphone_sync.core.client import ChatClient

log = structlog.get_logger()


def setup_logging(debug: bool = False, log_format: str = "console") -> None:
    """Configure console logging before the config file has been read."""
    from miniphone_sync.utils.logging import configure_logging

    configure_logging(level="DEBUG" if debug else "INFO", log_format=log_format)


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse command line arguments.

    Returns:
        Parsed argument namespace
    """
    parser = argparse.ArgumentParser(
        prog="miniphone-sync",
        description="MiniPhone sync client - offline-first message delivery",
    )

    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )

    parser.add_argument(
        "-c",
        "--config",
        type=Path,
        default=None,
        help="Path to configuration file (default: built-in defaults)",
    )

    parser.add_argument(
        "-d",
        "--debug",
        action="store_true",
        help="Enable debug logging",
    )

    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Parse config and validate without starting the client",
    )

    parser.add_argument(
        "--format",
        choices=["json", "console"],
        default="console",
        help="Log output format (default: console)",
    )

    parser.add_argument(
        "-y",
        "--yes",
        action="store_true",
        help="Accept resync prompts without asking",
    )

    sub = parser.add_subparsers(dest="command")

    send = sub.add_parser("send", help="Send a message to a chat")
    send.add_argument("chat_id")
    send.add_argument("text")

    sub.add_parser("drain", help="Resync messages waiting in the offline queue")

    export = sub.add_parser("export", help="Export a chat's history as JSON")
    export.add_argument("chat_id")
    export.add_argument("-o", "--output", type=Path, default=None, help="Output file")

    activity = sub.add_parser("activity", help="Change background activity settings")
    toggle = activity.add_mutually_exclusive_group()
    toggle.add_argument("--enable", dest="enabled", action="store_true", default=None)
    toggle.add_argument("--disable", dest="enabled", action="store_false")
    activity.add_argument("--interval", type=int, default=None, help="Idle seconds")

    sub.add_parser("monitor", help="Run the activity monitor until interrupted")
    sub.add_parser("status", help="Show pending queue size and activity settings")

    return parser.parse_args(argv)


async def run_client(args: argparse.Namespace) -> int:
    """Run one CLI command against the client.

    Returns:
        Exit code (0 for success, non-zero for error)
    """
    log.info("starting_miniphone_sync", version=__version__, command=args.command)

    try:
        from miniphone_sync.config.loader import load_config

        config = load_config(args.config)

        from miniphone_sync.utils.logging import configure_logging

        configure_logging(
            level="DEBUG" if args.debug else config.logging.level,
            log_format=config.logging.format,
            file_path=config.logging.file.path if config.logging.file.enabled else None,
        )

        if args.dry_run:
            log.info("dry_run_mode_config_valid")
            return 0

        from miniphone_sync.adapters.console import ConsoleNotifier, ConsoleRenderer
        from miniphone_sync.core.client import create_client

        client = create_client(
            config,
            renderer=ConsoleRenderer(),
            notifier=ConsoleNotifier(assume_yes=args.yes),
        )
        # "drain" resyncs explicitly; don't ask twice
        await client.start(
            offer_resync=args.command not in ("drain", "status"),
            seed_demo=True,
        )
        try:
            return await _dispatch(client, args)
        finally:
            await client.stop()

    except FileNotFoundError as e:
        log.error("configuration_file_not_found", path=str(args.config), error=str(e))
        return 1
    except ValueError as e:
        log.error("configuration_invalid", error=str(e))
        return 1
    except Exception as e:
        log.exception("fatal_error", error=str(e))
        return 1


async def _dispatch(client: "ChatClient", args: argparse.Namespace) -> int:
    if args.command == "send":
        result = await client.send(args.text, args.chat_id)
        print(result.outcome.value)
        return 0

    if args.command == "drain":
        report = await client.drain()
        print(f"synced={report.synced} remaining={report.remaining}")
        return 0

    if args.command == "export":
        output = args.output or Path(f"{args.chat_id}_history")
        try:
            written = client.export_chat(args.chat_id, output)
        except KeyError:
            log.error("unknown_chat", chat_id=args.chat_id)
            return 1
        print(written)
        return 0

    if args.command == "activity":
        current = client.activity_settings
        enabled = current.enabled if args.enabled is None else args.enabled
        interval = current.interval if args.interval is None else args.interval
        saved = client.save_activity_settings(enabled, interval)
        print(f"activity.enabled={saved.enabled} activity.interval={saved.interval}")
        return 0

    if args.command == "monitor":
        activity = client.activity_settings
        if not activity.enabled:
            log.warning("activity_monitor_disabled")
            return 0
        log.info("monitoring_activity", interval=activity.interval)
        await asyncio.Event().wait()
        return 0

    activity = client.activity_settings
    print(f"pending={len(client.queue)}")
    print(f"activity.enabled={activity.enabled} activity.interval={activity.interval}")
    return 0


def main(argv: list[str] | None = None) -> int:
    """Main entry point."""
    args = parse_args(argv)

    setup_logging(
        debug=args.debug,
        log_format=args.format,
    )

    if args.command is None and not args.dry_run:
        args.command = "status"

    try:
        return asyncio.run(run_client(args))
    except KeyboardInterrupt:
        log.info("shutting_down_gracefully")
        return 0


if __name__ == "__main__":
    sys.exit(main())
