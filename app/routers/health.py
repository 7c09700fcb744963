from fastapi import APIRouter
from fastapi.responses import PlainTextResponse
import datetime

router = APIRouter()

@router.get("/", response_class=PlainTextResponse)
async def root():
    return "Hello from SoloSphere Server...."

@router.get("/health")
async def health():
    return {"status": "ok", "time": datetime.datetime.now(datetime.timezone.utc).isoformat()}
