#!/usr/bin/env python3
"""
Build the SQLite catalog from the JSON seed of boards and components.

Every record is validated with the same parsers the server uses, so a
malformed seed fails here instead of at check time.

Usage:
    python scripts/build_catalog.py [--seed PATH] [--output PATH] [--force]

The server builds the catalog on first use when it is missing; run this to
rebuild after editing data/catalog.json.
"""

import argparse
import sys
import time
from pathlib import Path

# Add parent directory to path for imports when running as script
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from protobuddy_mcp.catalog.connection import build_database
from protobuddy_mcp.config import DB_PATH, SEED_FILE


def main():
    parser = argparse.ArgumentParser(description="Build compatibility catalog database")
    parser.add_argument(
        "--seed",
        type=Path,
        default=SEED_FILE,
        help=f"Seed file with boards and components (default: {SEED_FILE})",
    )
    parser.add_argument(
        "--output", "-o",
        type=Path,
        default=DB_PATH,
        help=f"Output database path (default: {DB_PATH})",
    )
    parser.add_argument(
        "--force", "-f",
        action="store_true",
        help="Replace an existing database",
    )
    args = parser.parse_args()

    if not args.seed.exists():
        print(f"Error: Seed file not found: {args.seed}")
        return 1

    if args.output.exists():
        if not args.force:
            print(f"Error: {args.output} already exists (use --force to rebuild)")
            return 1
        args.output.unlink()

    args.output.parent.mkdir(parents=True, exist_ok=True)
    start = time.time()
    try:
        build_database(args.seed, args.output)
    except ValueError as e:
        print(f"Error: Invalid catalog record: {e}")
        return 1

    print(f"Built {args.output} in {time.time() - start:.2f}s")
    return 0


if __name__ == "__main__":
    exit(main())
