"""Giving ledger management CLI.

Usage:
    python src/manage.py setup-db     # Create all tables
    python src/manage.py drop-db      # Drop all tables
    python src/manage.py reconcile    # Audit payouts against donations
    python src/manage.py reconcile --nonprofit np-001
"""

import argparse
import sys


def _domain():
    from giving.domain import giving

    giving.init()
    return giving


def setup_database(domain):
    from giving.utils.db import setup_db

    print("Creating giving database schema...")
    setup_db(domain)
    print("Done.")


def drop_database(domain):
    from giving.utils.db import drop_db

    print("Dropping giving database schema...")
    drop_db(domain)
    print("Done.")


def reconcile(domain, nonprofit_id=None) -> int:
    """Print the reconciliation report; non-zero exit when unbalanced."""
    from giving.payout.reconciliation import audit_ledger

    with domain.domain_context():
        report = audit_ledger(nonprofit_id=nonprofit_id)

    print(f"Checked {report.checked_payouts} payout(s) and {report.checked_donations} donation(s).")
    for discrepancy in report.discrepancies:
        print(
            f"  {discrepancy.kind}: {discrepancy.reference_id} "
            f"(expected {discrepancy.expected}, actual {discrepancy.actual})"
        )
    if report.is_balanced:
        print("Ledger is balanced.")
        return 0
    print(f"{len(report.discrepancies)} discrepancy(ies) found.")
    return 1


def main():
    parser = argparse.ArgumentParser(description="Giving ledger management")
    subparsers = parser.add_subparsers(dest="command", required=True)

    subparsers.add_parser("setup-db", help="Create all database tables")
    subparsers.add_parser("drop-db", help="Drop all database tables")

    reconcile_parser = subparsers.add_parser("reconcile", help="Audit payouts against donations")
    reconcile_parser.add_argument("--nonprofit", help="Limit the audit to one nonprofit")

    args = parser.parse_args()
    domain = _domain()

    if args.command == "setup-db":
        setup_database(domain)
    elif args.command == "drop-db":
        drop_database(domain)
    elif args.command == "reconcile":
        sys.exit(reconcile(domain, args.nonprofit))
    else:
        parser.print_help()
        sys.exit(1)


if __name__ == "__main__":
    main()
