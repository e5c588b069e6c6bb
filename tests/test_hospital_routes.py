from unittest.mock import AsyncMock

import pytest
from pymongo.errors import ServerSelectionTimeoutError

from conftest import SAMPLE_ROWS, make_workbook
from hospital_finder.hospitals.hospital_store import StoreOperationError


def upload(client, content, filename="hospitals.xlsx"):
    return client.post(
        "/api/hospitals/upload",
        files={"file": (filename, content, "application/octet-stream")},
    )


def names(hospitals):
    return sorted(hospital["name"] for hospital in hospitals)


# ============================================================
# Health
# ============================================================
def test_health_reports_connection_and_count(seeded_client, store, monkeypatch):
    monkeypatch.setattr(store, "ping", AsyncMock(return_value=None))

    response = seeded_client.get("/api/health")

    assert response.status_code == 200
    body = response.json()
    assert body["status"] == "ok"
    assert body["mongodb"] == "connected"
    assert body["totalHospitals"] == 3
    assert body["version"] == "1.0.0"
    assert body["timestamp"].endswith("Z")


def test_health_reports_disconnected_database(client, store, monkeypatch):
    monkeypatch.setattr(store, "ping", AsyncMock(side_effect=StoreOperationError("no servers")))

    body = client.get("/api/health").json()

    assert body["mongodb"] == "disconnected"


def test_health_fails_when_count_fails(client, store, monkeypatch):
    monkeypatch.setattr(store, "ping", AsyncMock(return_value=None))
    monkeypatch.setattr(store, "count", AsyncMock(side_effect=StoreOperationError("connection refused")))

    response = client.get("/api/health")

    assert response.status_code == 500
    assert response.json() == {"status": "error", "message": "Health check failed", "error": "connection refused"}


# ============================================================
# Upload and lookup
# ============================================================
def test_upload_then_fetch_by_id_returns_the_normalized_record(seeded_client):
    apollo = next(h for h in seeded_client.get("/api/hospitals").json() if h["name"] == "Apollo Hospital")

    response = seeded_client.get(f"/api/hospitals/{apollo['_id']}")

    assert response.status_code == 200
    record = response.json()
    assert record == apollo
    expected = {
        "serialNumber": "1",
        "name": "Apollo Hospital",
        "category": "Private",
        "discipline": "Allopathic",
        "address": "Plot 13, Parsik Hill Road",
        "state": "Maharashtra",
        "district": "Mumbai",
        "postalCode": "400614",
        "telephone": "022-33503350",
        "emergencyNumber": "1066",
        "bloodBankPhone": "",
        "email": "",
        "website": "",
        "specialties": ["Cardiology", "Oncology"],
        "facilities": ["ICU", "Pharmacy"],
        "accreditation": "",
        "ayushStatus": "",
        "totalBeds": 200,
        "availableBeds": 50,
        "privateWards": 20,
        "location": {"type": "Point", "coordinates": [72.87, 19.07]},
        "rawCoordinateString": "19.07,72.87",
        "dormitoryEntry": "",
    }
    assert {key: record[key] for key in expected} == expected
    assert record["createdAt"] and record["updatedAt"]


def test_upload_uses_empty_emergency_number_default(seeded_client):
    city = next(h for h in seeded_client.get("/api/hospitals").json() if h["name"] == "City General Hospital")

    assert city["emergencyNumber"] == ""


def test_upload_appends_without_wiping(seeded_client, sample_workbook):
    response = upload(seeded_client, sample_workbook)

    assert response.json() == {"message": "Import completed", "imported": 3, "failed": 0, "total": 3}
    assert len(seeded_client.get("/api/hospitals").json()) == 6


def test_upload_counts_failed_rows_and_keeps_going(client, store, monkeypatch):
    insert = store.insert
    calls = {"n": 0}

    async def flaky_insert(hospital):
        calls["n"] += 1
        if calls["n"] == 2:
            raise StoreOperationError("longitude/latitude is out of bounds")
        return await insert(hospital)

    monkeypatch.setattr(store, "insert", flaky_insert)

    response = upload(client, make_workbook(SAMPLE_ROWS))

    assert response.status_code == 200
    assert response.json() == {"message": "Import completed", "imported": 2, "failed": 1, "total": 3}


def test_upload_counts_unexpected_row_errors_as_failed(client, store, monkeypatch):
    insert = store.insert

    async def broken_for_city(hospital):
        if hospital.name == "City General Hospital":
            raise RuntimeError("document encoding failed")
        return await insert(hospital)

    monkeypatch.setattr(store, "insert", broken_for_city)

    response = upload(client, make_workbook(SAMPLE_ROWS))

    assert response.status_code == 200
    assert response.json() == {"message": "Import completed", "imported": 2, "failed": 1, "total": 3}
    assert names(client.get("/api/hospitals").json()) == ["Apollo Hospital", "Rural Health Clinic"]


def test_upload_accepts_csv(client):
    content = b"Hospital_Name,State,Location_Coordinates\nApollo,Maharashtra,\"19.07,72.87\"\n"

    response = upload(client, content, filename="hospitals.csv")

    assert response.json()["imported"] == 1
    hospital = client.get("/api/hospitals").json()[0]
    assert hospital["location"]["coordinates"] == [72.87, 19.07]


def test_upload_without_file_is_rejected(client):
    response = client.post("/api/hospitals/upload")

    assert response.status_code == 400
    assert response.json()["error"] == "No file uploaded"


def test_upload_of_unreadable_file_fails(client):
    response = upload(client, b"this is not a spreadsheet")

    assert response.status_code == 500
    assert response.json()["error"] == "Upload failed"


def test_get_unknown_id_is_404(client):
    response = client.get("/api/hospitals/0123456789abcdef01234567")

    assert response.status_code == 404
    assert response.json() == {
        "error": "Hospital not found",
        "message": "No hospital found with ID: 0123456789abcdef01234567",
    }


def test_get_malformed_id_is_500(client):
    response = client.get("/api/hospitals/not-an-id")

    assert response.status_code == 500
    assert response.json()["error"] == "Failed to fetch hospital"


# ============================================================
# Nearby
# ============================================================
def test_nearby_requires_lat_and_lng(client):
    response = client.get("/api/hospitals/nearby", params={"lng": 72.87})

    assert response.status_code == 400
    body = response.json()
    assert "lat" in body["message"] and "lng" in body["message"]


def test_nearby_rejects_non_numeric_coordinates(client):
    response = client.get("/api/hospitals/nearby", params={"lat": "north", "lng": 72.87})

    assert response.status_code == 400
    assert "lat" in response.json()["message"]


def test_nearby_converts_radius_to_meters(client, store, monkeypatch):
    find_near = AsyncMock(return_value=[])
    monkeypatch.setattr(store, "find_near", find_near)

    assert client.get("/api/hospitals/nearby", params={"lat": 19.07, "lng": 72.87, "radius": 5}).json() == []
    find_near.assert_awaited_with(longitude=72.87, latitude=19.07, radius_meters=5000)

    client.get("/api/hospitals/nearby", params={"lat": 19.07, "lng": 72.87})
    find_near.assert_awaited_with(longitude=72.87, latitude=19.07, radius_meters=50000)


def test_nearby_store_failure_is_500(client, store, monkeypatch):
    monkeypatch.setattr(store, "find_near", AsyncMock(side_effect=StoreOperationError("unable to find index for $geoNear query")))

    response = client.get("/api/hospitals/nearby", params={"lat": 19.07, "lng": 72.87})

    assert response.status_code == 500
    assert response.json() == {
        "error": "Failed to find nearby hospitals",
        "message": "unable to find index for $geoNear query",
    }


# ============================================================
# Search
# ============================================================
def test_search_by_min_available_beds(seeded_client):
    hospitals = seeded_client.get("/api/hospitals/search", params={"minAvailableBeds": 10}).json()

    assert names(hospitals) == ["Apollo Hospital", "City General Hospital"]


def test_search_text_with_field_filter(seeded_client):
    everywhere = seeded_client.get("/api/hospitals/search", params={"searchText": "apollo"}).json()
    in_state = seeded_client.get(
        "/api/hospitals/search", params={"searchText": "apollo", "state": "tamil"}
    ).json()

    assert names(everywhere) == ["Apollo Hospital", "Rural Health Clinic"]
    assert names(in_state) == ["Rural Health Clinic"]


def test_search_without_filters_returns_everything(seeded_client):
    assert len(seeded_client.get("/api/hospitals/search").json()) == 3


@pytest.mark.parametrize("value", ["many", "5beds"])
def test_search_rejects_non_integer_bed_count(client, value):
    response = client.get("/api/hospitals/search", params={"minAvailableBeds": value})

    assert response.status_code == 400
    assert "minAvailableBeds" in response.json()["message"]


# ============================================================
# Stats and delete
# ============================================================
def test_stats_route_is_not_captured_by_id_route(seeded_client):
    response = seeded_client.get("/api/hospitals/stats")

    assert response.status_code == 200
    body = response.json()
    assert body["totalHospitals"] == 3
    assert body["totalBeds"] == 300
    assert body["availableBeds"] == 60
    assert body["byState"] == [{"_id": "Maharashtra", "count": 2}, {"_id": "Tamil Nadu", "count": 1}]


def test_delete_all_then_stats_are_zero(seeded_client):
    response = seeded_client.delete("/api/hospitals/all")

    assert response.json() == {"message": "All hospitals deleted", "count": 3}
    assert seeded_client.get("/api/hospitals/stats").json() == {
        "totalHospitals": 0,
        "totalBeds": 0,
        "availableBeds": 0,
        "byCategory": [],
        "byState": [],
    }


def test_list_failure_uses_error_envelope(client, store, monkeypatch):
    monkeypatch.setattr(
        store, "list_all", AsyncMock(side_effect=StoreOperationError(str(ServerSelectionTimeoutError("timed out"))))
    )

    response = client.get("/api/hospitals")

    assert response.status_code == 500
    assert response.json() == {"error": "Failed to fetch hospitals", "message": "timed out"}


# ============================================================
# Unmatched routes
# ============================================================
def test_unknown_route_lists_available_routes(client):
    response = client.get("/api/doctors")

    assert response.status_code == 404
    body = response.json()
    assert body["error"] == "Not Found"
    assert body["message"] == "Route GET /api/doctors not found"
    assert "GET /api/hospitals/stats" in body["availableRoutes"]


def test_wrong_method_is_treated_as_unmatched(client):
    response = client.put("/api/hospitals/all")

    assert response.status_code == 404
    assert "availableRoutes" in response.json()
