"""socialauth entry point.

Usage::

    socialauth                     Start the API server (default)
    socialauth serve --port 9000   Same, on another port
    socialauth --dev               Auto-reload on source changes
"""

import argparse
import logging
import sys

from socialauth import __version__
from socialauth.config import get_settings
from socialauth.integrations.errors import CorruptCredentialError
from socialauth.logging_setup import setup_logging

logger = logging.getLogger(__name__)


def main(argv: list[str] | None = None) -> int:
    """Main entry point."""
    settings = get_settings()

    parser = argparse.ArgumentParser(
        prog="socialauth",
        description="Link Twitch and Twitter accounts and act on them through a small API",
    )
    parser.add_argument(
        "command",
        nargs="?",
        default="serve",
        choices=["serve"],
        help="Command to run (default: serve)",
    )
    parser.add_argument(
        "--host", type=str, default=settings.host, help=f"Host to bind (default: {settings.host})"
    )
    parser.add_argument(
        "--port", "-p", type=int, default=settings.port, help=f"Port (default: {settings.port})"
    )
    parser.add_argument(
        "--dev", action="store_true", help="Development mode with auto-reload"
    )
    parser.add_argument(
        "--log-level", default=settings.log_level, help="Log level (default: %(default)s)"
    )
    parser.add_argument("--version", "-v", action="version", version=f"%(prog)s {__version__}")
    args = parser.parse_args(argv)

    setup_logging(level=args.log_level)

    from socialauth.api.serve import run_api_server

    try:
        run_api_server(host=args.host, port=args.port, dev=args.dev, log_level=args.log_level)
    except CorruptCredentialError as e:
        logger.error("Refusing to start: %s", e.message)
        return 1
    except KeyboardInterrupt:
        logger.info("Stopped")
    return 0


if __name__ == "__main__":
    sys.exit(main())
