"""
scripts/retry_leads.py — Re-send leads whose sheet append failed.

Steps:
  1. Fetch FAILED leads from the local ledger
  2. Append each to its tenant's sheet again
  3. Mark the ledger row STORED or leave it FAILED with the new error

Usage:
    python scripts/retry_leads.py [--limit N] [--dry-run]
"""

import argparse
import logging
import sys
import os

sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
)

from botengine.clients.registry import get_client_registry
from botengine.db.session import get_session
from botengine.leads.sheets import SheetsLeadStore
from botengine.services.lead_service import retry_failed_leads


def main():
    parser = argparse.ArgumentParser(description="Bot Engine — Retry failed lead submissions")
    parser.add_argument(
        "--limit",
        type=int,
        default=20,
        help="Max number of leads to retry per run (default: 20)",
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        default=None,
        help="Log rows instead of writing them (overrides .env)",
    )
    args = parser.parse_args()

    store = SheetsLeadStore(dry_run=args.dry_run)

    print("\n" + "=" * 55)
    print("  🔁  Bot Engine — Lead retry")
    if store.dry_run:
        print("  ⚠️   DRY RUN MODE — no rows will be written")
    print("=" * 55 + "\n")

    with get_session() as db:
        result = retry_failed_leads(db, store, get_client_registry(), limit=args.limit)

    print("\n" + "=" * 55)
    print("  ✅  Retry complete!")
    print(f"     Attempted : {result['attempted']}")
    print(f"     Stored    : {result['stored']}")
    print(f"     Failed    : {result['failed']}")
    print("=" * 55 + "\n")


if __name__ == "__main__":
    main()
