import io
import uuid
from typing import Any, Dict, List

import pytest
from fastapi.testclient import TestClient
from mongomock_motor import AsyncMongoMockClient
from openpyxl import Workbook

from config.appconfig import Settings
from hospital_finder.hospitals.hospital_store import HospitalStore
from hospital_finder.main import create_app

SAMPLE_ROWS: List[Dict[str, Any]] = [
    {
        "Sr_No": 1,
        "Hospital_Name": "Apollo Hospital",
        "Hospital_Category": "Private",
        "Discipline_Systems_of_Medicine": "Allopathic",
        "Address_Original_First_Line": "Plot 13, Parsik Hill Road",
        "State": "Maharashtra",
        "District": "Mumbai",
        "Pincode": 400614,
        "Telephone": "022-33503350",
        "Emergency_Num": 1066,
        "Specialties": "Cardiology, Oncology ,",
        "Facilities": "ICU,Pharmacy",
        "Total_Num_Beds": 200,
        "Available_Beds": 50,
        "Number_Private_Wards": 20,
        "Location_Coordinates": "19.07,72.87",
    },
    {
        "Sr_No": 2,
        "Hospital_Name": "City General Hospital",
        "Hospital_Category": "Public",
        "Address_Original_First_Line": "Station Road",
        "State": "Maharashtra",
        "District": "Pune",
        "Specialties": "Orthopaedics",
        "Total_Num_Beds": 100,
        "Available_Beds": 10,
        "Location_Coordinates": "18.52,73.85",
    },
    {
        "Sr_No": 3,
        "Hospital_Name": "Rural Health Clinic",
        "Address_Original_First_Line": "12 Apollo Road",
        "State": "Tamil Nadu",
        "District": "Chennai",
        "Total_Num_Beds": "N/A",
        "Available_Beds": 0,
    },
]


def make_workbook(rows: List[Dict[str, Any]]) -> bytes:
    """An .xlsx file with one header row and one row per mapping."""
    columns: List[str] = []
    for row in rows:
        for column in row:
            if column not in columns:
                columns.append(column)

    workbook = Workbook()
    sheet = workbook.active
    sheet.title = "Hospitals"
    sheet.append(columns)
    for row in rows:
        sheet.append([row.get(column) for column in columns])

    buffer = io.BytesIO()
    workbook.save(buffer)
    return buffer.getvalue()


@pytest.fixture()
def settings():
    return Settings(_env_file=None, MONGODB_URI="mongodb://localhost:27017/hospital_finder_test")


@pytest.fixture()
def store():
    client = AsyncMongoMockClient()
    return HospitalStore(client[f"hospital_finder_{uuid.uuid4().hex}"], "hospitals")


@pytest.fixture()
def client(settings, store):
    with TestClient(create_app(settings, store=store)) as test_client:
        yield test_client


@pytest.fixture()
def sample_workbook():
    return make_workbook(SAMPLE_ROWS)


@pytest.fixture()
def seeded_client(client, sample_workbook):
    response = client.post(
        "/api/hospitals/upload",
        files={"file": ("hospitals.xlsx", sample_workbook, "application/octet-stream")},
    )
    assert response.status_code == 200
    assert response.json()["imported"] == len(SAMPLE_ROWS)
    return client
