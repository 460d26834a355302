#!/usr/bin/env python3
"""
Interactive Shell for memclient

A simple command-line shell for manually talking to a memcached server.

Usage:
    memclient                                  # Connect to localhost:11211
    memclient --address 10.0.0.5:11211         # Connect to a specific server
    memclient --network unix --address /tmp/memcached.sock
    python -m memclient.cli --debug            # Log protocol traffic

Commands:
    set <key> <value> [ttl]   - Store a value
    get <key>                 - Fetch a value
    delete <key>              - Delete a key
    help                      - Show this help
    status                    - Show connection status
    reconnect                 - Drop and re-open the connection
    exit                      - Exit the shell
"""

import argparse
import logging
import sys

from .client import MemcacheClient
from .config.settings import settings
from .errors import MemcacheError
from .network.transport import NETWORKS

# Enable command history with arrow keys (works on Unix systems)
try:
    import readline  # noqa: F401
except ImportError:
    pass  # readline not available on Windows by default

HELP = """
memclient Commands:
-------------------
  set <key> <value> [ttl]   Store a value (optional TTL in seconds)
  get <key>                 Fetch the value for a key
  delete <key>              Delete a key

Shell Commands:
---------------
  help                      Show this help message
  status                    Show connection status
  reconnect                 Drop the connection; the next command re-opens it
  exit                      Exit the shell

Examples:
---------
  set mykey myvalue         Store "myvalue" under "mykey"
  set tempkey tempval 60    Store with 60 second TTL
  get mykey                 Fetch the value for "mykey"
  delete mykey              Delete "mykey"
"""


class Shell:
    """Turns shell input lines into client calls and printable replies."""

    def __init__(self, client: MemcacheClient, target: str):
        self.client = client
        self.target = target

    def execute(self, line: str) -> str:
        """
        Run one shell command and return the text to print.

        Client errors are reported as "ERROR: <message>" rather than raised.
        """
        parts = line.split()
        if not parts:
            return ""

        name, args = parts[0].lower(), parts[1:]
        try:
            if name == "set" and len(args) in (2, 3):
                ttl = int(args[2]) if len(args) == 3 else 0
                self.client.store(args[0], args[1], ttl)
                return "STORED"
            if name == "get" and len(args) == 1:
                value = self.client.fetch(args[0])
                if value is None:
                    return "(nil)"
                return repr(value)
            if name == "delete" and len(args) == 1:
                self.client.remove(args[0])
                return "DELETED"
        except (MemcacheError, ValueError) as exc:
            return f"ERROR: {exc}"

        if name == "help":
            return HELP
        if name == "status":
            state = "Connected" if self.client.transport.connected else "Disconnected"
            return f"Status: {state}\nServer: {self.target}"
        if name == "reconnect":
            self.client.close()
            return "Disconnected; the next command reconnects."
        return f"ERROR: invalid command {line.strip()!r} (type 'help')"


def parse_args(argv=None) -> argparse.Namespace:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        description="Interactive shell for a memcached server",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter,
    )
    parser.add_argument(
        "--network",
        choices=NETWORKS,
        default=settings.NETWORK,
        help="Network type",
    )
    parser.add_argument(
        "--address",
        type=str,
        default=settings.ADDRESS,
        help="Server address (host:port, or a socket path for unix)",
    )
    parser.add_argument(
        "--timeout",
        type=float,
        default=settings.TIMEOUT,
        help="Socket timeout in seconds",
    )
    parser.add_argument(
        "--debug",
        action="store_true",
        default=settings.DEBUG,
        help="Enable debug logging",
    )
    return parser.parse_args(argv)


def setup_logging(debug: bool = False) -> None:
    """Configure logging based on debug flag."""
    level = logging.DEBUG if debug else getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO)

    logging.basicConfig(
        level=level,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        handlers=[
            logging.StreamHandler(sys.stderr),
        ]
    )


def main(argv=None) -> int:
    args = parse_args(argv)
    setup_logging(args.debug)

    target = f"{args.network}:{args.address}"
    print("memclient")
    print("=========")
    print(f"Server: {target}. Type 'help' for commands.\n")

    shell = Shell(MemcacheClient(args.network, args.address, timeout=args.timeout), target)
    try:
        while True:
            try:
                line = input(">>> ").strip()
            except EOFError:
                print("\nGoodbye!")
                break

            if line.lower() in ("exit", "quit"):
                print("Goodbye!")
                break

            reply = shell.execute(line)
            if reply:
                print(reply)

    except KeyboardInterrupt:
        print("\n\nInterrupted. Goodbye!")
    finally:
        shell.client.close()
    return 0


if __name__ == "__main__":
    sys.exit(main())
