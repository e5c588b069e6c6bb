# hospital_finder/hospitals/hospital_store.py
"""
Hospital Record Store
Every query the API and the import script run against the hospitals collection
"""
import functools
import logging
import re
from typing import Any, Dict, List, Optional

from bson import ObjectId
from bson.errors import InvalidId
from pymongo import DESCENDING, ASCENDING
from pymongo.errors import PyMongoError

from hospital_finder.helpers.time import utcnow
from hospital_finder.hospitals.hospital_model import HOSPITAL_INDEXES, HospitalCreate
from hospital_finder.hospitals.hospital_schemas import SearchFilters

logger = logging.getLogger(__name__)

# Fields the free-text filter looks at
TEXT_SEARCH_FIELDS = ("name", "address", "district", "state", "specialties")


class StoreOperationError(Exception):
    """A MongoDB operation failed. The message is the driver's own error text."""


def _store_operation(func):
    @functools.wraps(func)
    async def wrapper(*args, **kwargs):
        try:
            return await func(*args, **kwargs)
        except (PyMongoError, InvalidId) as e:
            raise StoreOperationError(str(e)) from e

    return wrapper


def _contains(value: str) -> "re.Pattern[str]":
    """Case-insensitive substring match; the value is matched literally."""
    return re.compile(re.escape(value), re.IGNORECASE)


def _serialize(document: Dict[str, Any]) -> Dict[str, Any]:
    document["_id"] = str(document["_id"])
    return document


# ============================================================================
# QUERY BUILDERS
# ============================================================================
def build_near_query(longitude: float, latitude: float, radius_meters: float) -> Dict[str, Any]:
    return {
        "location": {
            "$near": {
                "$geometry": {"type": "Point", "coordinates": [longitude, latitude]},
                "$maxDistance": radius_meters,
            }
        }
    }


def build_search_query(filters: SearchFilters) -> Dict[str, Any]:
    """
    Translate search filters into a MongoDB filter document.

    {state: X, district: Y} AND (name~text OR address~text OR ...)
    """
    query: Dict[str, Any] = {}

    field_filters = (
        ("state", filters.state),
        ("district", filters.district),
        ("name", filters.name),
        ("category", filters.category),
        ("specialties", filters.specialty),
    )
    for field, value in field_filters:
        if value:
            query[field] = _contains(value)

    if filters.min_available_beds is not None:
        query["availableBeds"] = {"$gte": filters.min_available_beds}

    if filters.search_text:
        query["$or"] = [{field: _contains(filters.search_text)} for field in TEXT_SEARCH_FIELDS]

    return query


def build_stats_pipelines() -> Dict[str, List[Dict[str, Any]]]:
    return {
        "total_beds": [{"$group": {"_id": None, "total": {"$sum": "$totalBeds"}}}],
        "available_beds": [{"$group": {"_id": None, "total": {"$sum": "$availableBeds"}}}],
        "by_category": [{"$group": {"_id": "$category", "count": {"$sum": 1}}}],
        "by_state": [
            {"$group": {"_id": "$state", "count": {"$sum": 1}}},
            {"$sort": {"count": DESCENDING, "_id": ASCENDING}},
        ],
    }


# ============================================================================
# STORE
# ============================================================================
class HospitalStore:
    """Async access to the hospitals collection (Motor)."""

    def __init__(self, database, collection_name: str = "hospitals", client=None):
        self._database = database
        self._collection = database[collection_name]
        self._client = client

    @_store_operation
    async def ensure_indexes(self) -> List[str]:
        names = await self._collection.create_indexes(HOSPITAL_INDEXES)
        logger.info(f"🗂️  Hospital indexes ready: {', '.join(names)}")
        return names

    @_store_operation
    async def ping(self) -> None:
        await self._database.command("ping")

    async def is_connected(self) -> bool:
        try:
            await self.ping()
        except StoreOperationError as e:
            logger.warning(f"⚠️  MongoDB ping failed: {e}")
            return False
        return True

    @_store_operation
    async def list_all(self) -> List[Dict[str, Any]]:
        documents = await self._collection.find({}).to_list(length=None)
        return [_serialize(document) for document in documents]

    @_store_operation
    async def find_near(self, longitude: float, latitude: float, radius_meters: float) -> List[Dict[str, Any]]:
        query = build_near_query(longitude, latitude, radius_meters)
        documents = await self._collection.find(query).to_list(length=None)
        return [_serialize(document) for document in documents]

    @_store_operation
    async def search(self, filters: SearchFilters) -> List[Dict[str, Any]]:
        query = build_search_query(filters)
        documents = await self._collection.find(query).to_list(length=None)
        return [_serialize(document) for document in documents]

    @_store_operation
    async def get_by_id(self, hospital_id: str) -> Optional[Dict[str, Any]]:
        document = await self._collection.find_one({"_id": ObjectId(hospital_id)})
        return _serialize(document) if document else None

    @_store_operation
    async def insert(self, hospital: HospitalCreate) -> str:
        document = hospital.model_dump(by_alias=True)
        now = utcnow()
        document["createdAt"] = now
        document["updatedAt"] = now
        result = await self._collection.insert_one(document)
        return str(result.inserted_id)

    @_store_operation
    async def delete_all(self) -> int:
        result = await self._collection.delete_many({})
        return result.deleted_count

    @_store_operation
    async def count(self) -> int:
        return await self._collection.count_documents({})

    @_store_operation
    async def sample(self) -> Optional[Dict[str, Any]]:
        document = await self._collection.find_one({})
        return _serialize(document) if document else None

    @_store_operation
    async def aggregate_stats(self) -> Dict[str, Any]:
        pipelines = build_stats_pipelines()
        total_beds = await self._aggregate(pipelines["total_beds"])
        available_beds = await self._aggregate(pipelines["available_beds"])

        return {
            "total_hospitals": await self._collection.count_documents({}),
            "total_beds": total_beds[0]["total"] if total_beds else 0,
            "available_beds": available_beds[0]["total"] if available_beds else 0,
            "by_category": await self._aggregate(pipelines["by_category"]),
            "by_state": await self._aggregate(pipelines["by_state"]),
        }

    async def _aggregate(self, pipeline: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
        return await self._collection.aggregate(pipeline).to_list(length=None)

    def close(self) -> None:
        if self._client is not None:
            self._client.close()
