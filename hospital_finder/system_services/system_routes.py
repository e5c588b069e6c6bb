# hospital_finder/system_services/system_routes.py
import logging

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from config.appconfig import Settings
from hospital_finder.dependencies import get_app_settings, get_store
from hospital_finder.helpers.time import utcnow
from hospital_finder.hospitals.hospital_schemas import HealthResponse
from hospital_finder.hospitals.hospital_store import HospitalStore

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/health", response_model=HealthResponse)
async def health_check(
    store: HospitalStore = Depends(get_store),
    settings: Settings = Depends(get_app_settings),
):
    """Service status, MongoDB connectivity and the current hospital count."""
    try:
        connected = await store.is_connected()
        total = await store.count()
    except Exception as e:
        logger.error(f"❌ Health check failed: {e}")
        return JSONResponse(
            status_code=500,
            content={"status": "error", "message": "Health check failed", "error": str(e)},
        )

    return HealthResponse(
        message=f"{settings.APP_NAME} is running",
        mongodb="connected" if connected else "disconnected",
        total_hospitals=total,
        version=settings.APP_VERSION,
        timestamp=utcnow().isoformat(timespec="milliseconds").replace("+00:00", "Z"),
    )
