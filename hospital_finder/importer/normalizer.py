# hospital_finder/importer/normalizer.py
"""
Spreadsheet Normalizer
Coerces one raw spreadsheet row into a hospital record.

Every target field has exactly one coercion rule below. Cells that are
missing, empty or unparseable fall back to the field default, so a row
never fails here; rows only fail when MongoDB rejects the insert.
"""
import math
import re
from dataclasses import dataclass
from datetime import date, datetime
from typing import Any, List, Optional, Tuple

from hospital_finder.hospitals.hospital_model import GeoPoint, HospitalCreate
from hospital_finder.importer.spreadsheet import SpreadsheetRow

_LEADING_INT = re.compile(r"^\s*([+-]?\d+)")
_LEADING_FLOAT = re.compile(r"^\s*([+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?)")

# BSON stores integers as at most 8 bytes
INT64_MAX = 2 ** 63 - 1


@dataclass(frozen=True)
class NormalizerDefaults:
    """Per-import-path defaults. Only emergency_number differs between the two paths today."""

    emergency_number: str = ""


@dataclass
class RowFailure:
    row: int            # Spreadsheet row number; the header is row 1
    name: Optional[str]
    error: str


# ============================================================================
# COERCION RULES
# ============================================================================
# (record field, source column, default)
STRING_FIELDS: Tuple[Tuple[str, str, str], ...] = (
    ("serial_number", "Sr_No", ""),
    ("name", "Hospital_Name", "Unknown Hospital"),
    ("category", "Hospital_Category", "General"),
    ("discipline", "Discipline_Systems_of_Medicine", ""),
    ("address", "Address_Original_First_Line", ""),
    ("state", "State", ""),
    ("district", "District", ""),
    ("postal_code", "Pincode", ""),
    ("telephone", "Telephone", ""),
    ("blood_bank_phone", "Bloodbank_Phone_No", ""),
    ("email", "Hospital_Primary_Email_Id", ""),
    ("website", "Website", ""),
    ("accreditation", "Accreditation", ""),
    ("ayush_status", "Ayush", ""),
    ("raw_coordinate_string", "Location_Coordinates", ""),
    ("dormitory_entry", "Dormentry", ""),
)

# emergencyNumber is a string field whose default comes from NormalizerDefaults
EMERGENCY_NUMBER_COLUMN = "Emergency_Num"

LIST_FIELDS: Tuple[Tuple[str, str], ...] = (
    ("specialties", "Specialties"),
    ("facilities", "Facilities"),
)

INTEGER_FIELDS: Tuple[Tuple[str, str], ...] = (
    ("total_beds", "Total_Num_Beds"),
    ("available_beds", "Available_Beds"),
    ("private_wards", "Number_Private_Wards"),
)

COORDINATES_COLUMN = "Location_Coordinates"


def to_text(value: Any) -> Optional[str]:
    """Render a cell as text; None for missing or empty cells."""
    if value is None:
        return None
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float):
        if math.isnan(value):
            return None
        if value.is_integer():
            return str(int(value))
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    text = str(value)
    return text if text != "" else None


def parse_list(value: Any) -> List[str]:
    text = to_text(value)
    if text is None:
        return []
    return [item.strip() for item in text.split(",") if item.strip()]


def parse_int(value: Any) -> int:
    """Leading-integer parse. Non-numeric, missing and negative values become 0; huge values cap at INT64_MAX."""
    if isinstance(value, bool) or value is None:
        return 0
    if isinstance(value, int):
        number = value
    elif isinstance(value, float):
        if math.isnan(value) or math.isinf(value):
            return 0
        number = int(value)
    else:
        match = _LEADING_INT.match(str(value))
        if not match:
            return 0
        number = int(match.group(1))
    return min(max(number, 0), INT64_MAX)


def parse_float(value: Any) -> float:
    """Leading-float parse. Non-numeric values become 0."""
    if isinstance(value, bool) or value is None:
        return 0.0
    if isinstance(value, (int, float)):
        number = float(value)
    else:
        match = _LEADING_FLOAT.match(str(value))
        if not match:
            return 0.0
        number = float(match.group(1))
    if math.isnan(number) or math.isinf(number):
        return 0.0
    return number


def parse_location(value: Any) -> GeoPoint:
    """'lat,lng' text to a GeoJSON point; (0, 0) when it cannot be read."""
    text = to_text(value)
    if text is None:
        return GeoPoint.from_lat_lng(0.0, 0.0)
    pieces = [piece.strip() for piece in text.split(",")]
    if len(pieces) < 2:
        return GeoPoint.from_lat_lng(0.0, 0.0)
    return GeoPoint.from_lat_lng(parse_float(pieces[0]), parse_float(pieces[1]))


def normalize_row(row: SpreadsheetRow, defaults: NormalizerDefaults = NormalizerDefaults()) -> HospitalCreate:
    """Build a hospital record from one spreadsheet row."""
    data = {}

    for field, column, default in STRING_FIELDS:
        text = to_text(row.get(column))
        data[field] = text if text is not None else default

    emergency = to_text(row.get(EMERGENCY_NUMBER_COLUMN))
    data["emergency_number"] = emergency if emergency is not None else defaults.emergency_number

    for field, column in LIST_FIELDS:
        data[field] = parse_list(row.get(column))

    for field, column in INTEGER_FIELDS:
        data[field] = parse_int(row.get(column))

    data["location"] = parse_location(row.get(COORDINATES_COLUMN))

    return HospitalCreate(**data)
