#!/usr/bin/env python3
"""
snmpctl - SNMP MIB Platform operational CLI

A lightweight CLI for day-2 operations:
- Health checks (snmpctl doctor)
- Server brand detection from SNMP values (snmpctl detect-brand)
- Reading collected client logs (snmpctl logs)
- Running the console server (snmpctl serve)
- Version info (snmpctl version)
"""

import argparse
import asyncio
import json
import os
import sys
from typing import Optional, Tuple

import httpx

from snmp_platform import __version__
from snmp_platform.backend.client import create_backend_client
from snmp_platform.core.config import BackendConfig, get_config
from snmp_platform.core.errors import ValidationError
from snmp_platform.core.logger import LogLevel, setup_logging
from snmp_platform.detection.brand import (
    SnmpSystemInfo,
    detect_server_brand,
    get_recommended_server_config,
)
from snmp_platform.logs.store import LogFileStore


class Colors:
    """ANSI color codes for terminal output."""

    GREEN = "\033[92m"
    YELLOW = "\033[93m"
    RED = "\033[91m"
    BLUE = "\033[94m"
    RESET = "\033[0m"
    BOLD = "\033[1m"


LEVEL_COLORS = {
    LogLevel.DEBUG: Colors.BLUE,
    LogLevel.INFO: Colors.GREEN,
    LogLevel.WARN: Colors.YELLOW,
    LogLevel.ERROR: Colors.RED,
}


def colorize(text: str, color: str) -> str:
    """Colorize text if stdout is a TTY."""
    if sys.stdout.isatty():
        return f"{color}{text}{Colors.RESET}"
    return text


async def check_backend(timeout: float = 5.0) -> Tuple[str, str]:
    """
    Check if the platform backend answers its health endpoint.

    Returns:
        (status, message) where status is "OK", "WARN", or "ERROR"
    """
    config = get_config().backend
    backend = create_backend_client(
        BackendConfig(
            url=config.url,
            api_version=config.api_version,
            timeout=timeout,
            retry_attempts=0,
            retry_delay=0,
        )
    )
    async with backend:
        if await backend.health_check():
            return "OK", "Backend is healthy"
    return "ERROR", "Backend health check failed"


async def check_console(console_url: Optional[str], timeout: float = 5.0) -> Tuple[str, str]:
    """
    Check if the console API server is reachable.

    Returns:
        (status, message) where status is "OK", "WARN", or "ERROR"
    """
    if not console_url:
        return "WARN", "Console URL not given (--console-url)"

    try:
        async with httpx.AsyncClient(timeout=timeout) as client:
            response = await client.get(f"{console_url.rstrip('/')}/health")
            if response.status_code == 200:
                return "OK", "Console API is healthy"
            return "WARN", f"Console API returned status {response.status_code}"
    except httpx.ConnectError:
        return "ERROR", "Cannot connect to console API"
    except httpx.TimeoutException:
        return "ERROR", "Console API connection timeout"
    except httpx.HTTPError as e:
        return "WARN", f"Could not reach console API: {e}"


def check_log_dir(log_dir: str) -> Tuple[str, str]:
    """Log partitions can only be written when the directory is writable."""
    if not os.path.isdir(log_dir):
        return "WARN", "Log directory does not exist yet (created on first write)"
    if not os.access(log_dir, os.W_OK):
        return "ERROR", "Log directory is not writable"
    partitions = LogFileStore(log_dir).list_partitions()
    return "OK", f"{len(partitions)} log file(s)"


def format_check_result(name: str, status: str, message: str, width: int = 40) -> str:
    """Format a check result line."""
    padding = " " * max(1, width - len(name))

    if status == "OK":
        status_str = colorize("[OK]", Colors.GREEN)
    elif status == "WARN":
        status_str = colorize("[WARN]", Colors.YELLOW)
    else:  # ERROR
        status_str = colorize("[ERROR]", Colors.RED)

    return f"{name}:{padding}{status_str} {message}"


async def cmd_doctor(args) -> int:
    """
    Run health checks and print a summary.

    Returns:
        Exit code (0 on success, non-zero on critical failure)
    """
    print(colorize("\nSNMP Platform Doctor", Colors.BOLD))
    print(colorize("=" * 60, Colors.BOLD))
    print()

    config = get_config()
    all_ok = True

    status, message = await check_backend(timeout=args.timeout)
    print(format_check_result(f"Backend ({config.backend.url})", status, message))
    if status == "ERROR":
        all_ok = False

    status, message = await check_console(args.console_url, timeout=args.timeout)
    print(format_check_result(f"Console ({args.console_url or 'not set'})", status, message))

    status, message = check_log_dir(config.logging.dir)
    print(format_check_result(f"Log directory ({config.logging.dir})", status, message))
    if status == "ERROR":
        all_ok = False

    print()

    if all_ok:
        print(colorize("✓ All critical checks passed", Colors.GREEN))
        return 0
    else:
        print(colorize("✗ One or more critical checks failed", Colors.RED))
        return 1


def cmd_detect_brand(args) -> int:
    """
    Detect a server brand from SNMP values given on the command line.

    Returns:
        Exit code (0 when a brand matched, 1 otherwise)
    """
    info = SnmpSystemInfo(
        sys_descr=args.sys_descr,
        sys_object_id=args.sys_object_id,
        vendor_oid=args.vendor_oid,
        management_ip=args.management_ip,
    )
    if info.is_empty():
        print("Give at least one of --sys-descr, --sys-object-id, --vendor-oid, --management-ip", file=sys.stderr)
        return 2

    results = detect_server_brand(info)

    if args.json:
        print(json.dumps([r.to_api() for r in results], indent=2))
        return 0 if results else 1

    if not results:
        print(colorize("No brand matched", Colors.YELLOW))
        return 1

    for result in results:
        print(
            f"{result.brand:<12} {result.confidence:>3}%  "
            f"{result.management_interface:<10} {result.recommended_template}  ({result.detection_method})"
        )

    config = get_recommended_server_config(results[0])
    print()
    print(colorize(f"Recommended template: {config['templateId']}", Colors.BOLD))
    print(f"  {config['description']}")
    for requirement in config["requirements"]:
        print(f"  - {requirement}")
    return 0


def cmd_logs(args) -> int:
    """
    Print collected client log entries.

    Returns:
        Exit code (0 on success, 2 on a bad date)
    """
    store = LogFileStore(args.dir or get_config().logging.dir)
    try:
        result = store.read(args.date, args.level, args.limit)
    except ValidationError as e:
        print(colorize(f"✗ {e.message}", Colors.RED), file=sys.stderr)
        return 2

    if not result["logs"]:
        print(result.get("message", "No logs"))
        return 0

    for entry in result["logs"]:
        try:
            level = LogLevel(int(entry.get("level")))
        except (TypeError, ValueError):
            level = None
        name = level.name if level is not None else str(entry.get("level"))
        color = LEVEL_COLORS.get(level, Colors.RESET)
        print(f"{entry.get('timestamp')} {colorize(f'{name:<5}', color)} {entry.get('message')}")
    return 0


def cmd_serve(args) -> int:
    """Run the console HTTP server."""
    if args.host:
        os.environ["API_HOST"] = args.host
    if args.port:
        os.environ["API_PORT"] = str(args.port)

    from snmp_platform.core.config import reload_config
    from snmp_platform.core.logger import reset_app_logger

    reload_config()
    reset_app_logger()

    from snmp_platform.ui.http_server import main as serve

    serve()
    return 0


def cmd_version(args) -> int:
    """
    Print version information.

    Returns:
        Exit code (always 0)
    """
    print(f"snmpctl version {__version__}")
    print("SNMP MIB Platform - monitoring console")
    return 0


def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser for snmpctl."""
    parser = argparse.ArgumentParser(
        description="SNMP MIB Platform operational CLI",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  snmpctl doctor                                   # Run health checks
  snmpctl detect-brand --sys-descr "Dell PowerEdge R740"
  snmpctl logs --level 3 --limit 20                # Recent errors
  snmpctl serve --port 8000                        # Run the console
  snmpctl version                                  # Show version information

Environment variables:
  BACKEND_URL                        # Backend URL (default: http://localhost:17880)
  LOG_DIR                            # Client log directory (default: logs)
        """
    )

    subparsers = parser.add_subparsers(dest="command", help="Command to run")

    # doctor command
    doctor_parser = subparsers.add_parser(
        "doctor",
        help="Run health checks and diagnostics"
    )
    doctor_parser.add_argument(
        "--timeout",
        type=float,
        default=10.0,
        help="Timeout for HTTP requests in seconds (default: 10.0)"
    )
    doctor_parser.add_argument(
        "--console-url",
        default=None,
        help="Console API URL to check, e.g. http://localhost:8000"
    )

    # detect-brand command
    brand_parser = subparsers.add_parser(
        "detect-brand",
        help="Detect a server brand from SNMP system values"
    )
    brand_parser.add_argument("--sys-descr", help="sysDescr value")
    brand_parser.add_argument("--sys-object-id", help="sysObjectID value")
    brand_parser.add_argument("--vendor-oid", help="Enterprise OID of the vendor")
    brand_parser.add_argument("--management-ip", help="Management interface IP")
    brand_parser.add_argument("--json", action="store_true", help="Print JSON")

    # logs command
    logs_parser = subparsers.add_parser(
        "logs",
        help="Show collected client logs"
    )
    logs_parser.add_argument("--date", help="Day to read, YYYY-MM-DD (default: today)")
    logs_parser.add_argument("--level", type=int, choices=range(0, 4), help="Minimum level 0-3")
    logs_parser.add_argument("--limit", type=int, default=100, help="Number of entries (default: 100)")
    logs_parser.add_argument("--dir", help="Log directory (default: LOG_DIR)")

    # serve command
    serve_parser = subparsers.add_parser(
        "serve",
        help="Run the console HTTP server"
    )
    serve_parser.add_argument("--host", help="Bind address (default: API_HOST)")
    serve_parser.add_argument("--port", type=int, help="Bind port (default: API_PORT)")

    # version command
    subparsers.add_parser(
        "version",
        help="Show version information"
    )

    return parser


def main(argv=None):
    """Main entry point for snmpctl CLI."""
    parser = create_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return 0

    setup_logging(os.getenv("LOG_LEVEL", "WARNING"))

    # Dispatch to command handlers
    if args.command == "doctor":
        return asyncio.run(cmd_doctor(args))
    elif args.command == "detect-brand":
        return cmd_detect_brand(args)
    elif args.command == "logs":
        return cmd_logs(args)
    elif args.command == "serve":
        return cmd_serve(args)
    elif args.command == "version":
        return cmd_version(args)
    else:
        print(f"Unknown command: {args.command}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
