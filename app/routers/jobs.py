from fastapi import APIRouter, Depends, HTTPException, Query, status
from typing import Any, Dict, List, Optional
from motor.motor_asyncio import AsyncIOMotorDatabase

from app import crud
from app.database import get_mongo_db
from app.routers.auth import verify_token, require_same_email
from app.schemas import JobCreate, JobUpdate, InsertResult, UpdateResult, DeleteResult, CountResult

router = APIRouter(tags=["Jobs"])

@router.get("/jobs", response_model=List[Dict[str, Any]])
async def get_jobs(db: AsyncIOMotorDatabase = Depends(get_mongo_db)):
    return await crud.list_jobs(db)

@router.get("/jobs-count", response_model=CountResult)
async def get_jobs_count(
    filter: Optional[str] = Query(None, description="Category filter"),
    search: Optional[str] = Query(None, description="Title search"),
    db: AsyncIOMotorDatabase = Depends(get_mongo_db)
):
    return {"count": await crud.count_jobs(db, filter, search)}

@router.get("/jobs/{email}", response_model=List[Dict[str, Any]])
async def get_jobs_by_buyer(
    email: str,
    claims: dict = Depends(verify_token),
    db: AsyncIOMotorDatabase = Depends(get_mongo_db)
):
    email = require_same_email(email, claims)
    return await crud.list_jobs_by_buyer(db, email)

@router.get("/job/{id}", response_model=Optional[Dict[str, Any]])
async def get_job(id: str, db: AsyncIOMotorDatabase = Depends(get_mongo_db)):
    return await crud.get_job(db, id)

@router.post("/add-job", response_model=InsertResult)
async def add_job(job: JobCreate, db: AsyncIOMotorDatabase = Depends(get_mongo_db)):
    return await crud.create_job(db, job.model_dump())

@router.put("/update-job/{id}", response_model=UpdateResult)
async def update_job(id: str, job: JobUpdate, db: AsyncIOMotorDatabase = Depends(get_mongo_db)):
    return await crud.update_job(db, id, job.model_dump(exclude_unset=True))

@router.delete("/job/{id}", response_model=DeleteResult)
async def delete_job(id: str, db: AsyncIOMotorDatabase = Depends(get_mongo_db)):
    return await crud.delete_job(db, id)

@router.get("/all-jobs", response_model=List[Dict[str, Any]])
async def get_all_jobs(
    filter: Optional[str] = Query(None, description="Category filter"),
    search: Optional[str] = Query(None, description="Case-insensitive title search"),
    sort: Optional[str] = Query(None, description="Sort by deadline: asc or desc"),
    page: Optional[int] = Query(None, ge=0, description="Zero-based page number"),
    size: Optional[int] = Query(None, ge=1, description="Page size"),
    db: AsyncIOMotorDatabase = Depends(get_mongo_db)
):
    sort = sort or None
    if sort is not None and sort not in crud.SORT_ORDERS:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="sort must be asc or desc"
        )
    return await crud.search_jobs(db, filter, search, sort, page, size)
