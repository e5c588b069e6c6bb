# hospital_finder/hospitals/hospital_routes.py
import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, File, Query, UploadFile
from starlette.concurrency import run_in_threadpool

from config.appconfig import Settings
from hospital_finder.dependencies import api_error, get_app_settings, get_store
from hospital_finder.hospitals.hospital_schemas import (
    DeleteResponse,
    ErrorResponse,
    HospitalResponse,
    SearchFilters,
    StatsResponse,
    UploadResponse,
)
from hospital_finder.hospitals.hospital_store import HospitalStore
from hospital_finder.importer.bulk_import import import_rows
from hospital_finder.importer.normalizer import NormalizerDefaults
from hospital_finder.importer.spreadsheet import read_rows_from_bytes

logger = logging.getLogger(__name__)

router = APIRouter()

ERROR_RESPONSES = {500: {"model": ErrorResponse}}

# Fixed paths are registered before /{hospital_id} so they are not captured by it.


# ============================================================
# ✅ LIST ALL
# ============================================================
@router.get("", response_model=List[HospitalResponse], responses=ERROR_RESPONSES)
async def list_hospitals(store: HospitalStore = Depends(get_store)):
    """Every hospital in the directory. No pagination, no limit."""
    try:
        logger.info("📡 Fetching all hospitals...")
        hospitals = await store.list_all()
        logger.info(f"✅ Found {len(hospitals)} hospitals")
        return hospitals
    except Exception as e:
        logger.error(f"❌ Error fetching hospitals: {e}")
        raise api_error(500, "Failed to fetch hospitals", str(e))


# ============================================================
# ✅ NEARBY
# ============================================================
@router.get(
    "/nearby",
    response_model=List[HospitalResponse],
    responses={400: {"model": ErrorResponse}, **ERROR_RESPONSES},
)
async def nearby_hospitals(
    lat: Optional[float] = Query(None, description="Latitude of the search centre"),
    lng: Optional[float] = Query(None, description="Longitude of the search centre"),
    radius: Optional[float] = Query(None, description="Search radius in kilometres (default 50)"),
    store: HospitalStore = Depends(get_store),
    settings: Settings = Depends(get_app_settings),
):
    """
    Hospitals within ``radius`` km of a point, nearest first.

    Example: GET /api/hospitals/nearby?lat=19.07&lng=72.87&radius=10
    """
    if lat is None or lng is None:
        raise api_error(
            400,
            "Latitude and longitude are required",
            "Please provide lat and lng query parameters",
        )

    radius_km = radius if radius is not None else settings.DEFAULT_NEARBY_RADIUS_KM

    try:
        logger.info(f"🎯 Finding hospitals within {radius_km}km of [{lat}, {lng}]")
        hospitals = await store.find_near(longitude=lng, latitude=lat, radius_meters=radius_km * 1000)
        logger.info(f"✅ Found {len(hospitals)} nearby hospitals")
        return hospitals
    except Exception as e:
        logger.error(f"❌ Error finding nearby hospitals: {e}")
        raise api_error(500, "Failed to find nearby hospitals", str(e))


# ============================================================
# ✅ SEARCH
# ============================================================
@router.get("/search", response_model=List[HospitalResponse], responses=ERROR_RESPONSES)
async def search_hospitals(
    state: Optional[str] = None,
    district: Optional[str] = None,
    name: Optional[str] = None,
    category: Optional[str] = None,
    specialty: Optional[str] = None,
    min_available_beds: Optional[int] = Query(None, alias="minAvailableBeds"),
    search_text: Optional[str] = Query(None, alias="searchText"),
    store: HospitalStore = Depends(get_store),
):
    """
    Field filters are combined with AND. ``searchText`` matches name, address,
    district, state or any specialty, and is ANDed with the field filters.

    Example: GET /api/hospitals/search?state=maharashtra&searchText=apollo
    """
    filters = SearchFilters(
        state=state,
        district=district,
        name=name,
        category=category,
        specialty=specialty,
        min_available_beds=min_available_beds,
        search_text=search_text,
    )

    try:
        logger.info(f"🔍 Search parameters: {filters.model_dump(exclude_none=True)}")
        hospitals = await store.search(filters)
        logger.info(f"✅ Search returned {len(hospitals)} hospitals")
        return hospitals
    except Exception as e:
        logger.error(f"❌ Search error: {e}")
        raise api_error(500, "Search failed", str(e))


# ============================================================
# ✅ STATISTICS
# ============================================================
@router.get("/stats", response_model=StatsResponse, responses=ERROR_RESPONSES)
async def hospital_stats(store: HospitalStore = Depends(get_store)):
    """Totals plus counts grouped by category and by state (largest state first)."""
    try:
        return await store.aggregate_stats()
    except Exception as e:
        logger.error(f"❌ Error fetching stats: {e}")
        raise api_error(500, "Failed to fetch statistics", str(e))


# ============================================================
# ✅ UPLOAD SPREADSHEET
# ============================================================
@router.post(
    "/upload",
    response_model=UploadResponse,
    responses={400: {"model": ErrorResponse}, **ERROR_RESPONSES},
)
async def upload_hospitals(
    file: Optional[UploadFile] = File(None),
    store: HospitalStore = Depends(get_store),
    settings: Settings = Depends(get_app_settings),
):
    """
    Import every row of an uploaded spreadsheet (.xlsx or .csv).

    Existing records are kept; rows are appended. Rows that fail are
    counted in ``failed`` and skipped.
    """
    if file is None:
        raise api_error(400, "No file uploaded", "Send the spreadsheet in the 'file' form field")

    try:
        logger.info(f"📤 Processing spreadsheet {file.filename}...")
        content = await file.read()
        rows = await run_in_threadpool(read_rows_from_bytes, content, file.filename)
        logger.info(f"📊 Found {len(rows)} rows in spreadsheet")

        report = await import_rows(
            store,
            rows,
            NormalizerDefaults(emergency_number=settings.UPLOAD_EMERGENCY_NUMBER_DEFAULT),
            progress_every=settings.IMPORT_PROGRESS_EVERY,
        )
    except Exception as e:
        logger.error(f"❌ Upload error: {e}")
        raise api_error(500, "Upload failed", str(e))

    return UploadResponse(
        message="Import completed",
        imported=report.imported,
        failed=report.failed,
        total=report.total,
    )


# ============================================================
# ✅ DELETE ALL
# ============================================================
@router.delete("/all", response_model=DeleteResponse, responses=ERROR_RESPONSES)
async def delete_all_hospitals(store: HospitalStore = Depends(get_store)):
    """Remove every hospital. Used before a full reload."""
    try:
        deleted = await store.delete_all()
        logger.info(f"🗑️ Deleted {deleted} hospitals")
        return DeleteResponse(message="All hospitals deleted", count=deleted)
    except Exception as e:
        logger.error(f"❌ Delete error: {e}")
        raise api_error(500, "Delete failed", str(e))


# ============================================================
# ✅ GET BY ID
# ============================================================
@router.get(
    "/{hospital_id}",
    response_model=HospitalResponse,
    responses={404: {"model": ErrorResponse}, **ERROR_RESPONSES},
)
async def get_hospital(hospital_id: str, store: HospitalStore = Depends(get_store)):
    try:
        hospital = await store.get_by_id(hospital_id)
    except Exception as e:
        logger.error(f"❌ Error fetching hospital: {e}")
        raise api_error(500, "Failed to fetch hospital", str(e))

    if hospital is None:
        raise api_error(404, "Hospital not found", f"No hospital found with ID: {hospital_id}")
    return hospital
