# hospital_finder/importer/spreadsheet.py
"""
Spreadsheet Reader
Turns the first sheet of an uploaded or on-disk file into typed row mappings
"""
import csv
import io
import logging
from pathlib import Path
from typing import Any, Iterable, Iterator, List, Optional, Sequence, TypedDict, Union

from openpyxl import load_workbook

logger = logging.getLogger(__name__)

# Column headers of the hospital directory export
SpreadsheetRow = TypedDict(
    "SpreadsheetRow",
    {
        "Sr_No": Any,
        "Hospital_Name": Any,
        "Hospital_Category": Any,
        "Discipline_Systems_of_Medicine": Any,
        "Address_Original_First_Line": Any,
        "State": Any,
        "District": Any,
        "Pincode": Any,
        "Telephone": Any,
        "Emergency_Num": Any,
        "Bloodbank_Phone_No": Any,
        "Hospital_Primary_Email_Id": Any,
        "Website": Any,
        "Specialties": Any,
        "Facilities": Any,
        "Accreditation": Any,
        "Ayush": Any,
        "Total_Num_Beds": Any,
        "Available_Beds": Any,
        "Number_Private_Wards": Any,
        "Location_Coordinates": Any,
        "Dormentry": Any,
    },
    total=False,
)

KNOWN_COLUMNS = frozenset(SpreadsheetRow.__annotations__)
CSV_EXTENSIONS = (".csv",)


def read_rows_from_path(path: Union[str, Path]) -> List[SpreadsheetRow]:
    """Read every data row from a spreadsheet file on disk."""
    path = Path(path)
    if path.suffix.lower() in CSV_EXTENSIONS:
        with path.open("r", encoding="utf-8-sig", newline="") as fh:
            return _rows_from_csv(fh)
    return _rows_from_workbook(str(path))


def read_rows_from_bytes(content: bytes, filename: Optional[str] = None) -> List[SpreadsheetRow]:
    """Read every data row from an uploaded spreadsheet."""
    if filename and Path(filename).suffix.lower() in CSV_EXTENSIONS:
        return _rows_from_csv(io.StringIO(content.decode("utf-8-sig")))
    return _rows_from_workbook(io.BytesIO(content))


def _rows_from_workbook(source) -> List[SpreadsheetRow]:
    workbook = load_workbook(source, read_only=True, data_only=True)
    try:
        sheet = workbook.worksheets[0]
        logger.info(f"📄 Reading sheet '{sheet.title}'")
        return list(_to_rows(sheet.iter_rows(values_only=True)))
    finally:
        workbook.close()


def _rows_from_csv(fh) -> List[SpreadsheetRow]:
    reader = csv.reader(fh)
    return list(_to_rows([cell if cell != "" else None for cell in line] for line in reader))


def _to_rows(lines: Iterable[Sequence[Any]]) -> Iterator[SpreadsheetRow]:
    lines = iter(lines)
    try:
        headers = [str(v).strip() if v is not None else "" for v in next(lines)]
    except StopIteration:
        return

    unknown = [h for h in headers if h and h not in KNOWN_COLUMNS]
    if unknown:
        logger.info(f"   Ignoring unknown columns: {', '.join(unknown)}")

    for line in lines:
        if all(value is None or value == "" for value in line):
            continue
        row: SpreadsheetRow = {}
        for i, header in enumerate(headers):
            if header in KNOWN_COLUMNS and i < len(line):
                row[header] = line[i]
        yield row
