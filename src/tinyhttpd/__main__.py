"""
=============================================================================
COMMAND-LINE ENTRY POINT
=============================================================================

    python -m tinyhttpd --directory /tmp/files
    tinyhttpd --directory /tmp/files --port 4221

Options not given on the command line fall back to the HTTP_* environment
variables, then to the ServerConfig defaults.

=============================================================================
"""

import argparse
import sys

from . import __version__
from .config import ServerConfig
from .middleware import LoggingMiddleware
from .server import create_app


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="tinyhttpd",
        description="Minimal HTTP/1.1 server with echo, user-agent and file routes",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python -m tinyhttpd                           # Serve ./ on 127.0.0.1:4221
  python -m tinyhttpd --directory /tmp/files    # Serve and store files there
  python -m tinyhttpd --host 0.0.0.0 -p 8080    # Listen on all interfaces
  python -m tinyhttpd -l DEBUG                  # Verbose logging
        """
    )

    parser.add_argument(
        "--directory", "-d",
        default=None,
        help="Directory for GET/POST /files/<name> (default: .)"
    )

    parser.add_argument(
        "--host", "-H",
        default=None,
        help="Host to bind to (default: 127.0.0.1)"
    )

    parser.add_argument(
        "--port", "-p",
        type=int,
        default=None,
        help="Port to listen on (default: 4221)"
    )

    parser.add_argument(
        "--buffer-size",
        type=int,
        default=None,
        help="Bytes per recv() call (default: 1024)"
    )

    parser.add_argument(
        "--log-level", "-l",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        default=None,
        help="Logging level (default: INFO)"
    )

    parser.add_argument(
        "--version", "-v",
        action="version",
        version=f"tinyhttpd {__version__}"
    )

    return parser


def config_from_args(args: argparse.Namespace) -> ServerConfig:
    """Environment-derived config with command-line overrides applied."""
    config = ServerConfig.from_env()

    if args.directory is not None:
        config.directory = args.directory
    if args.host is not None:
        config.host = args.host
    if args.port is not None:
        config.port = args.port
    if args.buffer_size is not None:
        config.buffer_size = args.buffer_size
    if args.log_level is not None:
        config.log_level = args.log_level

    return config


def main(argv=None):
    """Main CLI entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        config = config_from_args(args)
        server = create_app(config)
    except ValueError as e:
        parser.error(str(e))

    server.use(LoggingMiddleware())

    try:
        server.run()
    except OSError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
