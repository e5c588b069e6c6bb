# config/appconfig.py
"""
Application Configuration
Connection string, server binding, import defaults and logging for the Hospital Finder API
"""
from pathlib import Path
from typing import Any, Dict, List

from pydantic import Field
from pydantic_settings import BaseSettings

# Calculate the project root
BASE_DIR = Path(__file__).resolve().parent.parent


class Settings(BaseSettings):
    """Configuration for the Hospital Finder API and the bulk import script"""

    # ============================================================================
    # APPLICATION
    # ============================================================================
    APP_NAME: str = "Hospital Finder API"
    APP_VERSION: str = "1.0.0"
    HOST: str = "0.0.0.0"
    PORT: int = 3000
    CORS_ORIGINS: List[str] = ["*"]

    # ============================================================================
    # MONGODB
    # ============================================================================
    MONGODB_URI: str = Field(default="mongodb://localhost:27017/hospital_finder")
    MONGODB_DATABASE: str = "hospital_finder"  # Used when the URI names no database
    MONGODB_COLLECTION: str = "hospitals"
    MONGODB_TIMEOUT_MS: int = 5000

    # ============================================================================
    # QUERIES
    # ============================================================================
    DEFAULT_NEARBY_RADIUS_KM: float = 50.0

    # ============================================================================
    # IMPORT
    # ============================================================================
    # The two import paths have always disagreed on this default.
    # Kept separate until product decides which one is right.
    UPLOAD_EMERGENCY_NUMBER_DEFAULT: str = ""
    IMPORT_EMERGENCY_NUMBER_DEFAULT: str = "0"

    IMPORT_PROGRESS_EVERY: int = 100      # Log progress every N inserted rows
    IMPORT_MAX_LOGGED_ERRORS: int = 10    # CLI: detailed log lines for the first N failures
    IMPORT_MAX_LISTED_ERRORS: int = 20    # CLI: error list printed in the summary up to N
    DEFAULT_IMPORT_PATH: str = str(BASE_DIR / "data" / "hospitals.xlsx")

    # ============================================================================
    # LOGGING
    # ============================================================================
    LOG_LEVEL: str = "INFO"

    class Config:
        env_file = ".env"
        extra = "ignore"

    # ========================================================================
    # COMPUTED PROPERTIES
    # ========================================================================
    @property
    def resolved_import_path(self) -> Path:
        """Get absolute path to the default spreadsheet."""
        path = Path(self.DEFAULT_IMPORT_PATH)
        return path if path.is_absolute() else BASE_DIR / path

    @property
    def mongodb_location(self) -> str:
        """Short label for banners; never echoes credentials."""
        return "Local" if "localhost" in self.MONGODB_URI or "127.0.0.1" in self.MONGODB_URI else "Remote"

    @property
    def LOGGING_CONFIG(self) -> Dict[str, Any]:
        return {
            "version": 1,
            "disable_existing_loggers": False,
            "formatters": {
                "default": {
                    "format": "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
                },
            },
            "handlers": {
                "console": {
                    "class": "logging.StreamHandler",
                    "formatter": "default",
                    "stream": "ext://sys.stdout",
                },
            },
            "root": {
                "level": self.LOG_LEVEL,
                "handlers": ["console"],
            },
            "loggers": {
                "pymongo": {"level": "WARNING"},
                "uvicorn.access": {"level": "WARNING"},
            },
        }


settings = Settings()
