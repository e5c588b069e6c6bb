# hospital_finder/database/connection.py
import logging

from motor.motor_asyncio import AsyncIOMotorClient

from config.appconfig import Settings
from hospital_finder.hospitals.hospital_store import HospitalStore

logger = logging.getLogger(__name__)


def connect_store(settings: Settings) -> HospitalStore:
    """
    Build the hospital store from the configured connection string.

    Motor connects lazily; call ``store.ping()`` to find out whether the
    server is actually reachable.
    """
    client = AsyncIOMotorClient(
        settings.MONGODB_URI,
        serverSelectionTimeoutMS=settings.MONGODB_TIMEOUT_MS,
        tz_aware=True,
    )
    database = client.get_default_database(default=settings.MONGODB_DATABASE)
    logger.info(f"🔌 MongoDB client created ({settings.mongodb_location}, database '{database.name}')")
    return HospitalStore(database, settings.MONGODB_COLLECTION, client=client)
