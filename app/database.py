import logging
from contextlib import asynccontextmanager

from bson import ObjectId
from bson.errors import InvalidId
from fastapi import FastAPI, HTTPException, Request, status
from motor.motor_asyncio import AsyncIOMotorClient, AsyncIOMotorDatabase
from pymongo import ASCENDING
from pymongo.errors import ConnectionFailure

from app.config import settings

logger = logging.getLogger(__name__)

JOBS = "jobs"
BIDS = "bids"


async def ensure_indexes(db: AsyncIOMotorDatabase):
    """Create the indexes the store relies on.

    The compound (email, jobId) index is what makes a second bid from the same
    bidder on the same job fail at insert time, even when two submissions race
    past the existence check.
    """
    await db[BIDS].create_index(
        [("email", ASCENDING), ("jobId", ASCENDING)], unique=True, name="one_bid_per_job"
    )
    await db[BIDS].create_index([("buyer", ASCENDING)])
    await db[JOBS].create_index([("buyer.email", ASCENDING)])
    await db[JOBS].create_index([("deadline", ASCENDING)])


@asynccontextmanager
async def lifespan(app: FastAPI):
    client = AsyncIOMotorClient(settings.MONGO_URI, tz_aware=True)
    try:
        await client.admin.command("ping")
        logger.info("Pinged your deployment. Connected to MongoDB")
        db = client[settings.MONGO_DB]
        await ensure_indexes(db)
    except ConnectionFailure as e:
        logger.error(f"Failed to connect to MongoDB: {e}")
        client.close()
        raise
    except Exception:
        logger.exception("MongoDB startup failed")
        client.close()
        raise

    app.state.mongo_client = client
    app.state.mongo_db = db
    try:
        yield
    finally:
        client.close()
        logger.info("MongoDB connection closed")


async def get_mongo_db(request: Request) -> AsyncIOMotorDatabase:
    return request.app.state.mongo_db


def to_object_id(value: str) -> ObjectId:
    try:
        return ObjectId(value)
    except (InvalidId, TypeError):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Invalid identifier: {value}"
        )
