#!/usr/bin/env python3
"""Report (and optionally repair) customers that don't have exactly one primary address.

The unique index on addresses(customer_id) WHERE is_primary prevents a second
primary on databases created by the migrations; databases created by older tooling
may still carry customers with zero or several primaries.

Repair promotes the customer's first address (by address_id) through the normal
primary swap, so each fix is its own transaction.

Usage:
    python scripts/check_primary_addresses.py          # Report only
    python scripts/check_primary_addresses.py --fix    # Repair violations
"""

import argparse
import os
import sys
from pathlib import Path

# Ensure repo root is on sys.path when running as a script
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from dotenv import load_dotenv

from app.crm.modules.customers.service import find_primary_violations, list_addresses, set_primary_address
from scripts._db_utils import script_store


def main() -> int:
    parser = argparse.ArgumentParser(description="Check the one-primary-address rule")
    parser.add_argument("--fix", action="store_true", help="Promote one address per offending customer")
    args = parser.parse_args()

    load_dotenv()
    db_url = (os.environ.get("DATABASE_URL") or "sqlite:///customers.db").strip()

    with script_store(db_url) as store:
        violations = find_primary_violations(store)
        if not violations:
            print("OK: every customer with addresses has exactly one primary.")
            return 0

        print(f"Found {len(violations)} customer(s) violating the primary-address rule:")
        for customer_id, primary_count in violations:
            print(f"  customer={customer_id} primaries={primary_count}")

        if not args.fix:
            print("Re-run with --fix to repair.")
            return 1

        for customer_id, _ in violations:
            addresses = sorted(list_addresses(store, customer_id), key=lambda a: a.address_id)
            target = addresses[0]
            set_primary_address(store, customer_id, target.address_id)
            print(f"  fixed customer={customer_id} primary={target.address_id}")

    return 0


if __name__ == "__main__":
    sys.exit(main())
