# hospital_finder/hospitals/hospital_schemas.py
from datetime import datetime
from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from hospital_finder.hospitals.hospital_model import HospitalBase


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# hospitals
class HospitalResponse(HospitalBase):
    id: str = Field(..., alias="_id")
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class SearchFilters(BaseModel):
    """Field filters are ANDed; search_text adds an OR-group over the text fields."""

    state: Optional[str] = None
    district: Optional[str] = None
    name: Optional[str] = None
    category: Optional[str] = None
    specialty: Optional[str] = None
    min_available_beds: Optional[int] = None
    search_text: Optional[str] = None


# stats
class GroupCount(BaseModel):
    id: Optional[str] = Field(None, alias="_id")
    count: int

    model_config = ConfigDict(populate_by_name=True)


class StatsResponse(CamelModel):
    total_hospitals: int
    total_beds: int
    available_beds: int
    by_category: List[GroupCount]
    by_state: List[GroupCount]


# system
class HealthResponse(CamelModel):
    status: Literal["ok"] = "ok"
    message: str
    mongodb: Literal["connected", "disconnected"]
    total_hospitals: int
    version: str
    timestamp: str


class UploadResponse(BaseModel):
    message: str
    imported: int
    failed: int
    total: int


class DeleteResponse(BaseModel):
    message: str
    count: int


class ErrorResponse(BaseModel):
    error: str
    message: str
