"""Command-line interface.

Sub-commands:
    serve    Run the HTTP API and wait for the helper.
    check    Query a running bridge and summarise what it serves.
    devices  Read the local Find My snapshot files and list devices.
"""

import argparse
import asyncio
import logging
import sys
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

import httpx

from .config import load_config
from .findmy import DeviceCacheReader
from .logging import configure_logger

DEFAULT_URL = "http://127.0.0.1:1234"


def _format_timestamp(ms: int | None) -> str:
    if not ms:
        return "-"
    return datetime.fromtimestamp(ms / 1000, tz=timezone.utc).strftime("%Y-%m-%d %H:%M:%S")


def cmd_serve(args: argparse.Namespace) -> int:
    """Run the bridge server."""
    import uvicorn

    from .api import create_app
    from .services import Services

    config = load_config(args.config)
    if args.host:
        config.http_host = args.host
    if args.port:
        config.http_port = args.port

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    configure_logger(config.log_dir)

    app = create_app(Services.from_config(config))
    uvicorn.run(app, host=config.http_host, port=config.http_port)
    return 0


def _get(client: httpx.Client, path: str) -> dict[str, Any]:
    response = client.get(path)
    response.raise_for_status()
    return response.json()


def cmd_check(args: argparse.Namespace) -> int:
    """Summarise the friends and devices a running bridge serves."""
    try:
        with httpx.Client(base_url=args.url, timeout=args.timeout) as client:
            health = _get(client, "/health")["data"]
            friends = _get(client, "/api/v1/icloud/findmy/friends")["data"]
            devices = _get(client, "/api/v1/icloud/findmy/devices")["data"]
    except httpx.HTTPStatusError as e:
        print(f"Error: {e.request.url} returned HTTP {e.response.status_code}")
        return 1
    except httpx.RequestError as e:
        print(f"Error: could not reach {args.url}: {e}")
        return 1

    print(f"Helper connected: {'yes' if health.get('helper_connected') else 'no'}")
    print(f"\nFriends: {len(friends)}")
    for loc in friends:
        coords = loc.get("coordinates") or ["-", "-"]
        print(
            f"  {loc.get('handle') or '?':<32} {loc.get('status') or '-':<8} "
            f"{coords[0]}, {coords[1]}  {_format_timestamp(loc.get('last_updated'))}"
        )

    if devices is None:
        print("\nDevices: unavailable (no readable cache files)")
    else:
        print(f"\nDevices: {len(devices)}")
    return 0


def cmd_devices(args: argparse.Namespace) -> int:
    """List devices from the local snapshot files."""
    findmy_dir = args.dir or load_config().findmy_dir
    reader = DeviceCacheReader(findmy_dir)

    devices = asyncio.run(reader.get_devices())

    if devices is None:
        print(f"No readable Find My cache files in {findmy_dir}.")
        return 1

    if not devices:
        print("No devices found.")
        return 0

    print(f"\n{'Name':<28} {'Model':<20} Kind")
    print("-" * 60)
    for device in devices:
        kind = "item" if device.get("isConsideredAccessory") else "device"
        print(f"{str(device.get('name')):<28} {str(device.get('modelDisplayName')):<20} {kind}")

    print(f"\nTotal: {len(devices)} device(s)")
    return 0


def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser."""
    parser = argparse.ArgumentParser(
        prog="findmy-bridge",
        description="Serve Find My locations and Contacts metadata over HTTP",
    )

    subparsers = parser.add_subparsers(dest="command", help="Sub-command help")

    serve_parser = subparsers.add_parser("serve", help="Run the HTTP API")
    serve_parser.add_argument("--host", help="Bind address")
    serve_parser.add_argument("--port", type=int, help="Listen port")
    serve_parser.add_argument("--config", type=Path, help="Path to config.json")
    serve_parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")

    check_parser = subparsers.add_parser("check", help="Query a running bridge")
    check_parser.add_argument("--url", default=DEFAULT_URL, help="Bridge base URL")
    check_parser.add_argument("--timeout", type=float, default=10.0, help="Request timeout")

    devices_parser = subparsers.add_parser("devices", help="List devices from local cache files")
    devices_parser.add_argument("--dir", type=Path, help="Find My cache directory")

    return parser


def run_cli(argv: list[str] | None = None) -> int:
    """Run the CLI with given arguments.

    Args:
        argv: Command-line arguments. Uses sys.argv[1:] if None.

    Returns:
        Exit code (0 for success, non-zero for error).
    """
    parser = create_parser()
    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        return 0

    commands = {
        "serve": cmd_serve,
        "check": cmd_check,
        "devices": cmd_devices,
    }

    handler = commands.get(args.command)
    if handler is None:
        parser.print_help()
        return 1

    return handler(args)


if __name__ == "__main__":
    sys.exit(run_cli())
