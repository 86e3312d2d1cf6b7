"""Main entry point for the ashes registry CLI."""
from __future__ import annotations

import asyncio
import logging
import sys

from ashes.config import settings
from ashes.gateway import TableGateway
from ashes.services.reconciler import Reconciler
from ashes_cli import __version__
from ashes_cli.repl import Repl


def print_help():
    """Print help message."""
    print(f"""
Ashes Registry v{__version__}

Usage:
  ashes [options]

Options:
  --url URL         Gateway base URL (default: $ASHES_GATEWAY_URL)
  --key KEY         Gateway API key (default: $ASHES_GATEWAY_KEY)
  --user NAME       Login name (password is prompted)
  --log-level LVL   Logging level (default: $ASHES_LOG_LEVEL or WARNING)
  -h, --help        Show this help
  -v, --version     Show version

Environment:
  ASHES_GATEWAY_URL      Hosted backend URL
  ASHES_GATEWAY_KEY      Hosted backend API key
  ASHES_ADMIN_USER       Fallback admin login name
  ASHES_ADMIN_PASSWORD   Fallback admin password

Without a gateway the registry runs on demo data; changes stay in the session.
Type /help inside the REPL for commands.
""")


def parse_args(args: list[str]) -> dict:
    """
    Parse command line arguments.

    Returns dict with:
        url: str | None
        key: str | None
        user: str | None
        log_level: str | None
        show_help: bool
        show_version: bool
    """
    result = {
        "url": None,
        "key": None,
        "user": None,
        "log_level": None,
        "show_help": False,
        "show_version": False,
    }
    options = {"--url": "url", "--key": "key", "--user": "user", "--log-level": "log_level"}

    i = 0
    while i < len(args):
        arg = args[i]

        if arg in options:
            if i + 1 < len(args):
                result[options[arg]] = args[i + 1]
                i += 1
            else:
                print(f"Error: {arg} requires a value")
                sys.exit(1)
        elif arg in ("--help", "-h"):
            result["show_help"] = True
        elif arg in ("--version", "-v"):
            result["show_version"] = True
        elif arg.startswith("-"):
            print(f"Unknown option: {arg}")
            print("Run 'ashes --help' for usage.")
            sys.exit(1)
        else:
            print(f"Unknown command: {arg}")
            print("Run 'ashes --help' for usage.")
            sys.exit(1)

        i += 1

    return result


def main():
    """Main entry point."""
    args = parse_args(sys.argv[1:])

    if args["show_help"]:
        print_help()
        return

    if args["show_version"]:
        print(f"ashes-registry {__version__}")
        return

    logging.basicConfig(
        level=(args["log_level"] or settings.LOG_LEVEL).upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    gateway = TableGateway(base_url=args["url"], api_key=args["key"])
    if not gateway.is_configured:
        print("Gateway not configured. Running on demo data.")

    repl = Repl(Reconciler(gateway))
    try:
        asyncio.run(repl.start(username=args["user"]))
    except KeyboardInterrupt:
        print()


if __name__ == "__main__":
    main()
