from fastapi import APIRouter, HTTPException, Request, Response, status
from typing import Dict, Any
import datetime
import logging
import jwt
from pydantic.networks import validate_email

from app.config import settings
from app.schemas import TokenPayload, SuccessResponse

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Authentication"])


def cookie_options() -> Dict[str, Any]:
    return {
        "httponly": True,
        "secure": settings.production,
        "samesite": "none" if settings.production else "strict",
    }


def create_access_token(data: dict) -> str:
    to_encode = data.copy()
    to_encode.update({"exp": datetime.datetime.now(datetime.timezone.utc) + settings.TOKEN_LIFETIME})
    return jwt.encode(to_encode, settings.ACCESS_TOKEN_SECRET, algorithm=settings.ALGORITHM)


async def verify_token(request: Request) -> Dict[str, Any]:
    """Decode the auth cookie, failing closed with 401 when it is missing or bad."""
    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="unauthorized access"
    )
    token = request.cookies.get(settings.TOKEN_COOKIE_NAME)
    if not token:
        raise credentials_exception
    try:
        claims = jwt.decode(token, settings.ACCESS_TOKEN_SECRET, algorithms=[settings.ALGORITHM])
    except jwt.PyJWTError as e:
        logger.warning(f"Rejected token on {request.url.path}: {e}")
        raise credentials_exception
    if not claims.get("email"):
        raise credentials_exception
    return claims


def require_same_email(email: str, claims: Dict[str, Any]) -> str:
    """Check the path email against the token claim and return it normalized.

    Stored emails and claims went through EmailStr, so the path value gets the
    same normalization before it is compared or queried.
    """
    unauthorized = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="unauthorized access"
    )
    try:
        _, normalized = validate_email(email)
    except ValueError:
        raise unauthorized
    if claims.get("email") != normalized:
        raise unauthorized
    return normalized


# Routes
@router.post("/jwt", response_model=SuccessResponse)
async def issue_token(payload: TokenPayload, response: Response):
    token = create_access_token(payload.model_dump(mode="json"))
    response.set_cookie(settings.TOKEN_COOKIE_NAME, token, **cookie_options())
    return {"success": True}

@router.get("/jwt-logout", response_model=SuccessResponse)
async def logout(response: Response):
    response.set_cookie(settings.TOKEN_COOKIE_NAME, "", max_age=0, **cookie_options())
    return {"success": True}
