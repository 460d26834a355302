#!/usr/bin/env python3
"""
Basic memclient Walkthrough

Stores a value full of protocol delimiters, reads it back, deletes it and
checks that it is gone. Needs a memcached server to talk to.

Usage:
    python scripts/basic.py                             # localhost:11211
    python scripts/basic.py --address 10.0.0.5:11211
"""

import argparse
import sys

from memclient import MemcacheClient, MemcacheError

ORIGINAL = "Hello World!\nEND\r\nBut no!\n\n"


def run(network: str, address: str) -> int:
    with MemcacheClient(network, address, timeout=5.0) as mc:
        try:
            mc.store("foo", ORIGINAL, 10)

            resp = mc.fetch("foo")
            if resp is None or resp.decode() != ORIGINAL:
                print("original != resp")
                print(f"original: {ORIGINAL!r}")
                print(f"resp:     {resp!r}")
                return 1

            mc.remove("foo")

            resp = mc.fetch("foo")
            if resp is not None:
                print(f"resp not empty: {resp!r}")
                return 1
        except MemcacheError as exc:
            print(exc)
            return 1

    print("OK")
    return 0


def main():
    parser = argparse.ArgumentParser(description="memclient store/fetch/remove walkthrough")
    parser.add_argument("--network", default="tcp", help="Network type (default: tcp)")
    parser.add_argument("--address", default="localhost:11211", help="Server address (default: localhost:11211)")
    args = parser.parse_args()

    sys.exit(run(args.network, args.address))


if __name__ == "__main__":
    main()
