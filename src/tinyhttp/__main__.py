"""
=============================================================================
CLI ENTRY POINT
=============================================================================

    # Run with defaults (0.0.0.0:4221, no /files routes)
    python -m tinyhttp

    # Enable GET/POST /files/<name> under a directory
    python -m tinyhttp --directory /tmp/data

    # Verbose
    python -m tinyhttp --log-level DEBUG

Environment variables (TINYHTTP_PORT, TINYHTTP_HOST, ...) are read first;
command-line flags override them.

Exit status: 0 after a clean shutdown (Ctrl+C, SIGTERM), 1 if the
configuration is invalid or the port cannot be bound.

=============================================================================
"""

import argparse
import sys

from . import __version__
from .config import ServerConfig, LOG_LEVELS
from .server import create_app


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="tinyhttp",
        description="Small HTTP/1.1 server with echo, user-agent and file endpoints",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python -m tinyhttp                          # Run with defaults
  python -m tinyhttp --directory /tmp/data    # Serve and store files
  python -m tinyhttp --log-level DEBUG        # Verbose logging
        """
    )

    parser.add_argument(
        "--directory",
        type=str,
        default=None,
        help="Directory for GET/POST /files/<name> (default: routes disabled)"
    )

    parser.add_argument(
        "--log-level", "-l",
        type=str.upper,
        choices=LOG_LEVELS,
        default=None,
        help="Logging level (default: INFO)"
    )

    parser.add_argument(
        "--version", "-v",
        action="version",
        version=f"tinyhttp {__version__}"
    )

    return parser


def main(argv=None) -> int:
    """
    Parse arguments, build the server and run it until shutdown.

    Returns:
        Process exit status.
    """
    args = build_parser().parse_args(argv)

    try:
        config = ServerConfig.from_env()
        if args.directory is not None:
            config.directory = args.directory
        if args.log_level is not None:
            config.log_level = args.log_level

        server = create_app(config)
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    try:
        server.run()
    except OSError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    return 0


if __name__ == "__main__":
    sys.exit(main())
