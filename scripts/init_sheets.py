"""
scripts/init_sheets.py — Prepare every tenant's lead worksheet.

For each configured client with a sheet, opens the spreadsheet, creates the
worksheet if it is missing and writes the header row.

Usage:
    python scripts/init_sheets.py [--client CLIENT_ID]
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
logger = logging.getLogger(__name__)

# ── Imports ───────────────────────────────────────────────────────────────────

import gspread
from google.auth.exceptions import GoogleAuthError

from botengine.clients.registry import ClientRegistry, get_client_registry
from botengine.leads.sheets import SheetsLeadStore


def init_sheets(registry: ClientRegistry, store: SheetsLeadStore, only: str | None = None) -> dict:
    """
    Initialize the worksheet of each tenant (or of one tenant).

    Returns a summary dict: {initialized, skipped, failed}.
    """
    summary = {"initialized": 0, "skipped": 0, "failed": 0}

    for client in registry:
        if only and client.client_id != only:
            continue
        if client.sheet is None:
            logger.warning("Client %s has no sheet configured — skipping.", client.client_id)
            summary["skipped"] += 1
            continue

        try:
            info = store.initialize(client.sheet)
        except (GoogleAuthError, OSError, gspread.exceptions.GSpreadException) as exc:
            logger.error("Could not initialize sheet for %s: %s", client.client_id, exc)
            summary["failed"] += 1
            continue

        logger.info(
            "Sheet ready for %s — %r (id=%s, rows=%d).",
            client.client_id, info.title, info.sheet_id, info.row_count,
        )
        summary["initialized"] += 1

    return summary


def main():
    parser = argparse.ArgumentParser(description="Bot Engine — Initialize tenant lead sheets")
    parser.add_argument("--client", default=None, help="Only initialize this client id")
    args = parser.parse_args()

    result = init_sheets(get_client_registry(), SheetsLeadStore(dry_run=False), only=args.client)

    print("\n" + "=" * 55)
    print("  ✅  Sheet initialization complete!")
    print(f"     Initialized : {result['initialized']}")
    print(f"     Skipped     : {result['skipped']}")
    print(f"     Failed      : {result['failed']}")
    print("=" * 55 + "\n")


if __name__ == "__main__":
    main()
