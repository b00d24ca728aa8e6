#!/usr/bin/env python3
"""
Quick Start - Keep settings across restarts with a persisted store.

Usage:
    python examples/quick_start.py
"""

import logging

from cellar import NotFoundError, create_store


def main():
    logging.basicConfig(
        level=logging.DEBUG,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    with create_store("settings", path="tmp/settings") as db:
        db.write("network_name", "october17")
        db.write("network_channels", (1, 6, 11))
        print(f"Matches for 'network': {db.match('network')}")

    # A new store over the same directory loads records on demand
    with create_store("settings", path="tmp/settings") as db:
        print(f"Network name after restart: {db.read('network_name')}")

        db.reset()
        try:
            db.read("network_name")
        except NotFoundError:
            print("Reset removed every record")


if __name__ == "__main__":
    main()
