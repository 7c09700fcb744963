from fastapi import APIRouter, Depends, Query
from typing import Any, Dict, List
from motor.motor_asyncio import AsyncIOMotorDatabase

from app import crud
from app.database import get_mongo_db
from app.routers.auth import verify_token, require_same_email
from app.schemas import BidCreate, BidStatusUpdate, InsertResult, UpdateResult

router = APIRouter(tags=["Bids"])

@router.post("/add-bids", response_model=InsertResult)
async def add_bid(bid: BidCreate, db: AsyncIOMotorDatabase = Depends(get_mongo_db)):
    return await crud.create_bid(db, bid.model_dump())

@router.get("/bids/{email}", response_model=List[Dict[str, Any]])
async def get_bids(
    email: str,
    buyer: bool = Query(False, description="List bids received as buyer instead of bids placed"),
    claims: dict = Depends(verify_token),
    db: AsyncIOMotorDatabase = Depends(get_mongo_db)
):
    email = require_same_email(email, claims)
    return await crud.list_bids(db, email, is_buyer=buyer)

@router.patch("/bid-state-update/{id}", response_model=UpdateResult)
async def update_bid_state(id: str, update: BidStatusUpdate, db: AsyncIOMotorDatabase = Depends(get_mongo_db)):
    return await crud.update_bid_status(db, id, update.status)
