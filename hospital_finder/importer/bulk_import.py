# hospital_finder/importer/bulk_import.py
import logging
from dataclasses import dataclass, field
from typing import List, Optional, Sequence

from hospital_finder.hospitals.hospital_store import HospitalStore
from hospital_finder.importer.normalizer import NormalizerDefaults, RowFailure, normalize_row, to_text
from hospital_finder.importer.spreadsheet import SpreadsheetRow

logger = logging.getLogger(__name__)

# Data rows start on spreadsheet row 2, under the header
FIRST_DATA_ROW = 2


@dataclass
class ImportReport:
    total: int = 0
    imported: int = 0
    failed: int = 0
    errors: List[RowFailure] = field(default_factory=list)


async def import_rows(
    store: HospitalStore,
    rows: Sequence[SpreadsheetRow],
    defaults: NormalizerDefaults,
    progress_every: int = 100,
    max_logged_errors: Optional[int] = None,
) -> ImportReport:
    """
    Normalize and insert rows one at a time.

    A failing row is recorded and skipped; it never stops the batch.
    ``max_logged_errors`` caps how many failures get their own log line
    (None logs all of them).
    """
    report = ImportReport(total=len(rows))
    logger.info(f"📥 Importing {report.total} rows...")

    for index, row in enumerate(rows):
        row_number = index + FIRST_DATA_ROW
        try:
            hospital = normalize_row(row, defaults)
            await store.insert(hospital)
        except Exception as e:
            report.failed += 1
            report.errors.append(RowFailure(row=row_number, name=to_text(row.get("Hospital_Name")), error=str(e)))
            if max_logged_errors is None or report.failed <= max_logged_errors:
                logger.error(f"❌ Failed row {row_number}: {e}")
            continue

        report.imported += 1
        if report.imported % progress_every == 0:
            logger.info(f"✅ Imported {report.imported}/{report.total} hospitals...")

    logger.info(f"✅ Import complete: {report.imported} success, {report.failed} failed")
    return report
