# hospital_finder/hospitals/hospital_model.py
from typing import List, Literal

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel
from pymongo import ASCENDING, GEOSPHERE, TEXT, IndexModel


class GeoPoint(BaseModel):
    """GeoJSON point. Coordinates are always [longitude, latitude]."""

    type: Literal["Point"] = "Point"
    coordinates: List[float] = Field(..., min_length=2, max_length=2)

    @classmethod
    def from_lat_lng(cls, latitude: float, longitude: float) -> "GeoPoint":
        return cls(coordinates=[longitude, latitude])


class HospitalBase(BaseModel):
    """Facility record as stored in MongoDB and returned by the API (camelCase keys)."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    serial_number: str = ""
    name: str
    category: str = "General"
    discipline: str = ""
    address: str = ""
    state: str = ""
    district: str = ""
    postal_code: str = ""
    telephone: str = ""
    emergency_number: str = ""
    blood_bank_phone: str = ""
    email: str = ""
    website: str = ""
    specialties: List[str] = Field(default_factory=list)
    facilities: List[str] = Field(default_factory=list)
    accreditation: str = ""
    ayush_status: str = ""
    total_beds: int = Field(0, ge=0)
    available_beds: int = Field(0, ge=0)
    private_wards: int = Field(0, ge=0)
    location: GeoPoint
    raw_coordinate_string: str = ""
    dormitory_entry: str = ""


class HospitalCreate(HospitalBase):
    pass


# Secondary indexes are for lookup speed only; nothing here is unique.
HOSPITAL_INDEXES = [
    IndexModel([("name", ASCENDING)]),
    IndexModel([("category", ASCENDING)]),
    IndexModel([("state", ASCENDING)]),
    IndexModel([("district", ASCENDING)]),
    IndexModel([("availableBeds", ASCENDING)]),
    IndexModel([("location", GEOSPHERE)]),
    IndexModel(
        [("name", TEXT), ("address", TEXT), ("district", TEXT), ("state", TEXT)],
        name="hospital_text_search",
    ),
]
