# scripts/import_data.py
#  to run the script, run the following command:
#  python scripts/import_data.py [path/to/hospitals.xlsx]

"""
Hospital Data Import Script
Wipes the hospitals collection and reloads it from a spreadsheet
"""
import argparse
import asyncio
import logging
import logging.config
import sys
from pathlib import Path
from typing import List, Optional

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from config.appconfig import Settings, settings as default_settings
from hospital_finder.database.connection import connect_store
from hospital_finder.hospitals.hospital_store import HospitalStore, StoreOperationError
from hospital_finder.importer.bulk_import import ImportReport, import_rows
from hospital_finder.importer.normalizer import NormalizerDefaults
from hospital_finder.importer.spreadsheet import read_rows_from_path

logger = logging.getLogger("scripts.import_data")

RULE = "=" * 60


def print_banner(file_path: Path, settings: Settings) -> None:
    print(f"\n{RULE}")
    print("   🏥 HOSPITAL DATA IMPORT")
    print(f"   📁 File: {file_path.name}")
    print(f"   🗄️  MongoDB: {settings.mongodb_location}")
    print(f"{RULE}\n")


def print_summary(report: ImportReport, settings: Settings) -> None:
    print(f"\n{RULE}")
    print("📊 IMPORT SUMMARY")
    print(RULE)
    print(f"✅ Successfully imported: {report.imported}")
    print(f"❌ Failed: {report.failed}")
    print(f"📋 Total rows: {report.total}")
    print(RULE)

    if 0 < len(report.errors) <= settings.IMPORT_MAX_LISTED_ERRORS:
        print("\n❌ Error Details:")
        for failure in report.errors:
            print(f"   Row {failure.row} ({failure.name}): {failure.error}")
    elif len(report.errors) > settings.IMPORT_MAX_LISTED_ERRORS:
        print(f"\n❌ Too many errors to display ({len(report.errors)} total)")


async def run_import(file_path: Path, settings: Settings, store: Optional[HospitalStore] = None) -> int:
    """
    Reload the store from ``file_path``. Returns the process exit code.

    Only a missing file or an unreachable database is fatal; failed rows are
    reported in the summary and do not change the exit code.
    """
    logger.info(f"📊 Reading spreadsheet: {file_path}")
    if not file_path.exists():
        logger.error(f"❌ File not found: {file_path}")
        return 1

    rows = read_rows_from_path(file_path)
    logger.info(f"📋 Found {len(rows)} rows in spreadsheet")

    owns_store = store is None
    if owns_store:
        store = connect_store(settings)

    try:
        logger.info("🔌 Connecting to MongoDB...")
        await store.ping()
        logger.info("✅ MongoDB Connected")

        logger.info("🗑️  Clearing existing hospitals...")
        deleted = await store.delete_all()
        logger.info(f"✅ Deleted {deleted} existing hospitals")
    except StoreOperationError as e:
        logger.error(f"❌ Import failed: {e}")
        if owns_store:
            store.close()
        return 1

    try:
        report = await import_rows(
            store,
            rows,
            NormalizerDefaults(emergency_number=settings.IMPORT_EMERGENCY_NUMBER_DEFAULT),
            progress_every=settings.IMPORT_PROGRESS_EVERY,
            max_logged_errors=settings.IMPORT_MAX_LOGGED_ERRORS,
        )
        print_summary(report, settings)

        count = await store.count()
        print(f"\n✅ Total hospitals in database: {count}")

        sample = await store.sample()
        if sample:
            print("\n📍 Sample hospital:", {
                "name": sample.get("name"),
                "state": sample.get("state"),
                "district": sample.get("district"),
                "coordinates": sample.get("location", {}).get("coordinates"),
            })
        else:
            print("\n📍 No hospitals were imported")
    except StoreOperationError as e:
        logger.error(f"❌ Lost connection to MongoDB: {e}")
        return 1
    finally:
        if owns_store:
            store.close()

    print("\n✅ Import completed successfully!")
    return 0


def main(argv: Optional[List[str]] = None, settings: Settings = default_settings) -> int:
    parser = argparse.ArgumentParser(description="Reload the hospital directory from a spreadsheet.")
    parser.add_argument(
        "file",
        nargs="?",
        default=str(settings.resolved_import_path),
        help="Spreadsheet to import (.xlsx or .csv)",
    )
    args = parser.parse_args(argv)

    logging.config.dictConfig(settings.LOGGING_CONFIG)

    file_path = Path(args.file)
    print_banner(file_path, settings)
    return asyncio.run(run_import(file_path, settings))


if __name__ == "__main__":
    sys.exit(main())
