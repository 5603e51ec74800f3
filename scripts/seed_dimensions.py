import asyncio
import csv
import os
import sys

# Add the project root to the Python path
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from batchcodes.core.config import settings
from batchcodes.core.errors import DimensionConflict, InvalidCode
from batchcodes.modules.codes.types import DimensionCombination
from batchcodes.modules.dimensions.types import NewDimensionSet
from batchcodes.platform.provider_registry import providers

COLUMNS = [
    "funding_source_code", "funding_source_name",
    "medicine_type_code", "medicine_type_name",
    "active_ingredient_code", "active_ingredient_name",
    "producer_code", "producer_name",
    "package_type_code", "package_type_name",
]

def row_to_new_set(row: dict, created_by: str) -> NewDimensionSet:
    return NewDimensionSet(
        combination=DimensionCombination(
            row["funding_source_code"], row["medicine_type_code"], row["active_ingredient_code"],
            row["producer_code"], row.get("package_type_code") or "",
        ),
        funding_source_name=row["funding_source_name"],
        medicine_type_name=row["medicine_type_name"],
        active_ingredient_name=row["active_ingredient_name"],
        producer_name=row["producer_name"],
        package_type_name=row.get("package_type_name") or "",
        created_by=created_by,
    )

async def seed(rows: list[dict], created_by: str = "seed-script") -> dict:
    """
    Registers every row through the dimension service; existing sets are skipped.
    """
    if settings.STORAGE_PROVIDER == "sql":
        from batchcodes.core.db import init_models
        await init_models()

    service = providers.dimensions()
    counts = {"created": 0, "skipped": 0, "invalid": 0}
    for i, row in enumerate(rows, start=1):
        try:
            obj = await service.register(row_to_new_set(row, created_by))
        except DimensionConflict:
            print(f"  - row {i}: already registered. Skipping.")
            counts["skipped"] += 1
            continue
        except (InvalidCode, KeyError) as e:
            print(f"  - row {i}: invalid ({e}). Skipping.")
            counts["invalid"] += 1
            continue
        print(f"  - row {i}: created {obj.combination.label()} with ID: {obj.id}")
        counts["created"] += 1
    return counts

async def main(path: str):
    print(f"Seeding dimension sets from {path}...")
    with open(path, 'r', encoding='utf-8', newline='') as f:
        rows = list(csv.DictReader(f))
    counts = await seed(rows)
    print(f"Done: {counts['created']} created, {counts['skipped']} skipped, {counts['invalid']} invalid.")

if __name__ == "__main__":
    if len(sys.argv) != 2:
        print(f"usage: {sys.argv[0]} <dimensions.csv>  (columns: {', '.join(COLUMNS)})")
        sys.exit(2)
    asyncio.run(main(sys.argv[1]))
