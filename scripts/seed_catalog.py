#!/usr/bin/env python
"""Seed a local catalog database.

This script:
1. Creates the catalog tables in the configured database
2. Creates an owner's categories from the bundled keyword table

Usage:
    # Seed every keyword-table category for an owner
    DB_URL=sqlite+aiosqlite:///./catalog.db \
        python scripts/seed_catalog.py --owner seller-1

    # Seed only some categories
    python scripts/seed_catalog.py --owner seller-1 --only tintas,eletrica

    # Show an owner's categories and rules
    python scripts/seed_catalog.py --show seller-1
"""

import argparse
import asyncio
import sys
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from orcasmart.catalog.errors import CatalogError
from orcasmart.catalog.keyword_table import get_keyword_table
from orcasmart.catalog.services import get_catalog_services
from orcasmart.infra.database import close_db_engine, create_schema
from orcasmart.infra.logging import get_logger, setup_logging

setup_logging()
logger = get_logger(__name__)


async def seed_categories(owner_id: str, only: list[str] | None = None) -> tuple[int, int]:
    """Create the owner's categories from the keyword table.

    Args:
        owner_id: Owner to seed
        only: Category slugs to restrict seeding to

    Returns:
        Tuple of (created, reused)
    """
    services = get_catalog_services()
    created = reused = 0

    for slug, (label, prefix) in get_keyword_table().category_labels().items():
        if only and slug not in only:
            continue
        try:
            result = await services.categories.create_category(
                owner_id, label, prefix=prefix, slug=slug
            )
        except CatalogError as e:
            logger.warning("Skipping category", slug=slug, error=str(e))
            continue

        if result.reused:
            reused += 1
        else:
            created += 1

    return created, reused


async def show_owner(owner_id: str) -> None:
    """Print an owner's categories and rules."""
    services = get_catalog_services()
    categories = await services.categories.list_categories(owner_id, include_inactive=True)
    rules = await services.rules.get_rules_for_owner(owner_id)

    print(f"\nOwner: {owner_id}")
    print("-" * 60)
    if not categories:
        print("  No categories")
    for c in categories:
        flag = "" if c.active else " (inactive)"
        print(f"  {c.prefix:<6} {c.slug:<24} {c.label}{flag}")

    print(f"\nRules: {len(rules)}")
    for r in rules:
        print(f"  [{r.kind}] {r.category}: {', '.join(r.terms)} (hits={r.hits})")


def parse_args() -> argparse.Namespace:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        description="Seed a local catalog database",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )

    parser.add_argument(
        "--owner",
        type=str,
        help="Owner ID to seed categories for",
    )
    parser.add_argument(
        "--only",
        type=str,
        help="Comma-separated category slugs to seed",
    )
    parser.add_argument(
        "--show",
        type=str,
        metavar="OWNER_ID",
        help="Show categories and rules of an owner",
    )

    return parser.parse_args()


async def main() -> int:
    """Main entry point."""
    args = parse_args()

    try:
        await create_schema()

        if args.show:
            await show_owner(args.show)
            return 0

        if not args.owner:
            print("Error: --owner is required (or use --show)")
            return 1

        only = [s.strip() for s in args.only.split(",")] if args.only else None
        created, reused = await seed_categories(args.owner, only)

        print(f"\nSeeded owner {args.owner}: {created} created, {reused} reused")
        print("\nYou can now test with:")
        print(f"  python scripts/simulate_requests.py --owner {args.owner} --name 'Tinta acrilica'")
        return 0
    finally:
        await close_db_engine()


if __name__ == "__main__":
    sys.exit(asyncio.run(main()))
