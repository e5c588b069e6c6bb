# hospital_finder/dependencies.py
from fastapi import HTTPException, Request

from config.appconfig import Settings
from hospital_finder.hospitals.hospital_store import HospitalStore


def get_store(request: Request) -> HospitalStore:
    """The store created at startup (or handed to create_app)."""
    return request.app.state.store


def get_app_settings(request: Request) -> Settings:
    return request.app.state.settings


def api_error(status_code: int, error: str, message: str) -> HTTPException:
    """HTTPException rendered as the {error, message} envelope."""
    return HTTPException(status_code=status_code, detail={"error": error, "message": message})
