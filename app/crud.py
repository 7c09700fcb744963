import datetime
import logging
import re
from typing import Optional, List, Dict, Any

from bson import ObjectId
from motor.motor_asyncio import AsyncIOMotorDatabase
from pymongo import ASCENDING, DESCENDING
from pymongo.errors import DuplicateKeyError, PyMongoError
from pymongo.results import InsertOneResult, UpdateResult, DeleteResult

from .database import JOBS, BIDS, to_object_id
from .errors import DuplicateBidError
from .schemas import as_utc

logger = logging.getLogger(__name__)

SORT_ORDERS = {"asc": ASCENDING, "desc": DESCENDING}


def serialize_doc(doc: Optional[Dict[str, Any]]) -> Optional[Dict[str, Any]]:
    if doc is None:
        return None
    doc = dict(doc)
    if isinstance(doc.get("_id"), ObjectId):
        doc["_id"] = str(doc["_id"])
    for key, value in doc.items():
        if isinstance(value, datetime.datetime):
            doc[key] = as_utc(value)
    return doc


def insert_result(result: InsertOneResult) -> Dict[str, Any]:
    return {"acknowledged": result.acknowledged, "insertedId": str(result.inserted_id)}


def update_result(result: UpdateResult) -> Dict[str, Any]:
    upserted_id = result.upserted_id
    return {
        "acknowledged": result.acknowledged,
        "matchedCount": result.matched_count,
        "modifiedCount": result.modified_count,
        "upsertedCount": 1 if upserted_id is not None else 0,
        "upsertedId": str(upserted_id) if upserted_id is not None else None,
    }


def delete_result(result: DeleteResult) -> Dict[str, Any]:
    return {"acknowledged": result.acknowledged, "deletedCount": result.deleted_count}


async def _find_all(cursor) -> List[Dict[str, Any]]:
    return [serialize_doc(doc) for doc in await cursor.to_list(length=None)]


# Jobs

async def list_jobs(db: AsyncIOMotorDatabase) -> List[Dict[str, Any]]:
    return await _find_all(db[JOBS].find())


async def list_jobs_by_buyer(db: AsyncIOMotorDatabase, email: str) -> List[Dict[str, Any]]:
    return await _find_all(db[JOBS].find({"buyer.email": email}))


async def get_job(db: AsyncIOMotorDatabase, job_id: str) -> Optional[Dict[str, Any]]:
    return serialize_doc(await db[JOBS].find_one({"_id": to_object_id(job_id)}))


async def create_job(db: AsyncIOMotorDatabase, job_data: Dict[str, Any]) -> Dict[str, Any]:
    job_data = dict(job_data)
    job_data["bid_count"] = 0
    result = await db[JOBS].insert_one(job_data)
    logger.info(f"Created job {result.inserted_id}")
    return insert_result(result)


async def update_job(db: AsyncIOMotorDatabase, job_id: str, job_data: Dict[str, Any]) -> Dict[str, Any]:
    """Merge the given fields into a job, creating it under job_id if missing."""
    update = {"$setOnInsert": {"bid_count": 0}}
    if job_data:
        update["$set"] = job_data
    result = await db[JOBS].update_one({"_id": to_object_id(job_id)}, update, upsert=True)
    return update_result(result)


async def delete_job(db: AsyncIOMotorDatabase, job_id: str) -> Dict[str, Any]:
    result = await db[JOBS].delete_one({"_id": to_object_id(job_id)})
    return delete_result(result)


def build_job_feed_query(category: Optional[str] = None, search: Optional[str] = None) -> Dict[str, Any]:
    # An absent search still filters with an empty pattern so jobs without a
    # title stay excluded, same as an explicit empty search.
    query = {"title": {"$regex": re.escape(search or ""), "$options": "i"}}
    if category:
        query["category"] = category
    return query


async def search_jobs(
    db: AsyncIOMotorDatabase,
    category: Optional[str] = None,
    search: Optional[str] = None,
    sort: Optional[str] = None,
    page: Optional[int] = None,
    size: Optional[int] = None,
) -> List[Dict[str, Any]]:
    options = {}
    if sort:
        options["sort"] = [("deadline", SORT_ORDERS[sort])]
    if size:
        options["skip"] = (page or 0) * size
        options["limit"] = size
    return await _find_all(db[JOBS].find(build_job_feed_query(category, search), **options))


async def count_jobs(db: AsyncIOMotorDatabase, category: Optional[str] = None, search: Optional[str] = None) -> int:
    return await db[JOBS].count_documents(build_job_feed_query(category, search))


# Bids

async def create_bid(db: AsyncIOMotorDatabase, bid_data: Dict[str, Any]) -> Dict[str, Any]:
    """Insert a bid and bump the job's bid_count.

    Only one bid per (email, jobId) is allowed. The unique index on bids catches
    a concurrent duplicate that gets past the lookup. If the counter update
    fails the bid is removed again so the count and the bids stay in step.
    """
    email, job_id = bid_data["email"], bid_data["jobId"]
    job_oid = to_object_id(job_id)

    existing = await db[BIDS].find_one({"email": email, "jobId": job_id})
    if existing:
        logger.info(f"Rejected duplicate bid from {email} on job {job_id}")
        raise DuplicateBidError(email, job_id)

    bid_data = dict(bid_data)
    try:
        result = await db[BIDS].insert_one(bid_data)
    except DuplicateKeyError:
        logger.info(f"Rejected concurrent duplicate bid from {email} on job {job_id}")
        raise DuplicateBidError(email, job_id)

    try:
        await db[JOBS].update_one({"_id": job_oid}, {"$inc": {"bid_count": 1}})
    except PyMongoError:
        logger.error(f"Failed to increment bid_count for job {job_id}, removing bid {result.inserted_id}")
        await db[BIDS].delete_one({"_id": result.inserted_id})
        raise

    return insert_result(result)


async def list_bids(db: AsyncIOMotorDatabase, email: str, is_buyer: bool = False) -> List[Dict[str, Any]]:
    query = {"buyer": email} if is_buyer else {"email": email}
    return await _find_all(db[BIDS].find(query))


async def update_bid_status(db: AsyncIOMotorDatabase, bid_id: str, new_status: str) -> Dict[str, Any]:
    result = await db[BIDS].update_one({"_id": to_object_id(bid_id)}, {"$set": {"status": new_status}})
    return update_result(result)
