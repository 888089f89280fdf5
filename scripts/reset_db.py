import argparse
import asyncio
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from sqlalchemy import text

from app.db.session import AsyncSessionLocal

# Children before parents.
TABLES = (
    "refunds",
    "porter_deliveries",
    "orders",
    "time_range_product_group_items",
    "time_range_product_groups",
    "products",
    "restaurants",
)


async def truncate_all() -> dict[str, int]:
    """Empty every table, restart identity sequences and return row counts."""
    async with AsyncSessionLocal() as session:
        async with session.begin():
            await session.execute(
                text(f"TRUNCATE TABLE {', '.join(TABLES)} RESTART IDENTITY CASCADE")
            )
        counts = {}
        for table in TABLES:
            result = await session.execute(text(f"SELECT COUNT(*) FROM {table}"))
            counts[table] = result.scalar_one()
        return counts


def confirmed(assume_yes: bool) -> bool:
    if assume_yes:
        return True
    print("This deletes ALL orders, deliveries, refunds and restaurant data.")
    answer = input("Continue? (yes/no): ").strip().lower()
    return answer in ("yes", "y")


def main() -> int:
    parser = argparse.ArgumentParser(description="Reset the development database")
    parser.add_argument(
        "--yes", action="store_true", help="Skip the confirmation prompt"
    )
    args = parser.parse_args()

    if not confirmed(args.yes):
        print("Cancelled")
        return 0

    try:
        counts = asyncio.run(truncate_all())
    except Exception as e:
        print(f"Reset failed: {e}")
        return 1

    for table, count in counts.items():
        print(f"  {table}: {count} rows")
    print("Database reset complete")
    return 0


if __name__ == "__main__":
    sys.exit(main())
