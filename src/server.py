"""Protean Engine runner for the giving ledger.

In production, events are processed asynchronously: the Engine keeps the
NonprofitDonationStats projection current and delivers checkout events to
the donation recorder.

Usage:
    python src/server.py
    python src/server.py --test-mode   # drain pending messages, then exit
"""

import argparse

from giving.domain import giving
from giving.utils.logging import configure_logging
from protean.server.engine import Engine


def main():
    parser = argparse.ArgumentParser(description="Giving ledger Engine runner")
    parser.add_argument(
        "--test-mode",
        action="store_true",
        help="Process what is pending and stop",
    )
    args = parser.parse_args()

    configure_logging()
    giving.init()

    engine = Engine(giving, test_mode=args.test_mode)
    engine.run()


if __name__ == "__main__":
    main()
