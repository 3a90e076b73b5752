"""
StubServer CLI

Command-line interface for the HTTP stub server.

Examples:
    # Serve stubs on the default port
    http-stub-server --config stubs.yaml

    # Bind to all interfaces and trace every request
    http-stub-server --ip 0.0.0.0 --port 9000 --config stubs.yaml --verbose
"""

import argparse
import logging
import sys
from typing import List, Optional

from .errors import ConfigError, LogSinkError, StartupUsageError
from .logging_setup import configure_logging
from .mock import StubServer, StubConfig
from .mock.server import DEFAULT_MAX_BODY_BYTES

logger = logging.getLogger("stubserver.cli")

USAGE = (
    "http-stub-server --config <config-file> [--ip <address>] [--port <port>] "
    "[--output <log-file>] [--verbose [true|false]]"
)


def str_to_bool(value: str) -> bool:
    """Parse ``true``/``false`` style flag values."""
    lowered = value.strip().lower()
    if lowered in ('true', 't', 'yes', 'y', '1', 'on'):
        return True
    if lowered in ('false', 'f', 'no', 'n', '0', 'off'):
        return False
    raise argparse.ArgumentTypeError(f"expected true or false, got {value!r}")


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser."""
    parser = argparse.ArgumentParser(
        prog='http-stub-server',
        usage=USAGE,
        description="HTTP stub server - answers requests with canned responses keyed by method and path",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Stub definition file (YAML):
  GET|api/users:
    httpcode: 200
    delay: 0
    header: stubs/users.headers
    body: stubs/users.json

  default|default:
    httpcode: 404
    body: stubs/notfound.txt

Examples:
  %(prog)s --config stubs.yaml
  %(prog)s --ip 0.0.0.0 --port 9000 --config stubs.yaml --verbose
        """
    )

    parser.add_argument('--ip', '-ip', default='', help='Address to bind (default: localhost)')
    parser.add_argument('--port', '-port', type=int, default=8080, help='TCP port to listen on (default: 8080)')
    parser.add_argument('--config', '-config', help='Stub definition file (required)')
    parser.add_argument('--output', '-output', default='output.log', help='Log file, appended to (default: output.log)')
    parser.add_argument('--verbose', '-verbose', nargs='?', const=True, default=False, type=str_to_bool,
                        help='Trace every request and mirror the log to the console (default: false)')
    parser.add_argument('--log-level', default='info', choices=['debug', 'info', 'warning', 'error'],
                        help='Log level when not verbose (default: info)')
    parser.add_argument('--match-query-string', action='store_true',
                        help='Include the query string in route keys')
    parser.add_argument('--max-body-bytes', type=int, default=DEFAULT_MAX_BODY_BYTES,
                        help=f'Request body bytes kept in memory for tracing (default: {DEFAULT_MAX_BODY_BYTES})')
    parser.add_argument('--access-log', action='store_true', help='Enable uvicorn access log')

    return parser


def parse_config(argv: List[str]) -> StubConfig:
    """
    Parse command-line arguments into a StubConfig.

    Raises:
        StartupUsageError: If no arguments are given or --config is missing
        SystemExit: On argparse errors (bad port, unknown option)
    """
    if not argv:
        raise StartupUsageError("no arguments given")

    args = build_parser().parse_args(argv)

    if not args.config:
        raise StartupUsageError("--config is required")
    if not 0 < args.port < 65536:
        raise StartupUsageError(f"port {args.port} is outside 1-65535")
    if args.max_body_bytes < 0:
        raise StartupUsageError("--max-body-bytes must not be negative")

    return StubConfig(
        config_file=args.config,
        host=args.ip,
        port=args.port,
        output_file=args.output,
        verbose=args.verbose,
        log_level=args.log_level,
        match_query_string=args.match_query_string,
        max_body_bytes=args.max_body_bytes,
        access_log=args.access_log
    )


def main(argv: Optional[List[str]] = None) -> int:
    """Main CLI entry point."""
    argv = sys.argv[1:] if argv is None else argv

    try:
        config = parse_config(argv)
    except StartupUsageError as e:
        print(f"Error: {e}", file=sys.stderr)
        print(f"Usage:\n\t{USAGE}", file=sys.stderr)
        return 2

    try:
        configure_logging(config.output_file, verbose=config.verbose, log_level=config.log_level)
    except LogSinkError as e:
        print(f"❌ {e}", file=sys.stderr)
        return 1

    if config.verbose:
        logger.info(
            "Command arguments:\n"
            f"\tip          : {config.host}\n"
            f"\tport        : {config.port}\n"
            f"\tconfig      : {config.config_file}\n"
            f"\toutput      : {config.output_file}\n"
            f"\tverbose     : {config.verbose}\n"
            f"\tmatch query : {config.match_query_string}"
        )

    logger.info(f"Reading stub definitions from {config.config_file}")
    try:
        server = StubServer(config)
    except ConfigError as e:
        logger.error(f"Failed to load stub definitions: {e}")
        print(f"❌ Failed to load stub definitions: {e}", file=sys.stderr)
        return 1

    server.start()
    return 0


if __name__ == '__main__':
    sys.exit(main())
