import logging

from bson.errors import InvalidId
from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pymongo.errors import ConnectionFailure
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.schemas import ErrorResponse

logger = logging.getLogger(__name__)


class DuplicateBidError(Exception):
    def __init__(self, email: str, job_id: str):
        self.email = email
        self.job_id = job_id
        super().__init__(f"{email} has already placed a bid on job {job_id}")


def error_response(status_code: int, message: str, headers=None) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=ErrorResponse(status=status_code, message=message).model_dump(),
        headers=headers,
    )


async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    return error_response(exc.status_code, str(exc.detail), getattr(exc, "headers", None))


async def validation_exception_handler(request: Request, exc: RequestValidationError):
    errors = exc.errors()
    if errors:
        first = errors[0]
        location = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
        message = f"{location}: {first.get('msg')}" if location else first.get("msg")
    else:
        message = "Invalid request"
    return error_response(status.HTTP_400_BAD_REQUEST, message)


async def duplicate_bid_handler(request: Request, exc: DuplicateBidError):
    return error_response(status.HTTP_400_BAD_REQUEST, "You have already placed a bid on this job!")


async def invalid_id_handler(request: Request, exc: InvalidId):
    return error_response(status.HTTP_400_BAD_REQUEST, f"Invalid identifier: {exc}")


async def database_unavailable_handler(request: Request, exc: ConnectionFailure):
    logger.error(f"Database unavailable on {request.method} {request.url.path}: {exc}")
    return error_response(status.HTTP_503_SERVICE_UNAVAILABLE, "Database unavailable")


async def unhandled_exception_handler(request: Request, exc: Exception):
    logger.exception(f"Unhandled error on {request.method} {request.url.path}")
    return error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, "Internal server error")


def register_exception_handlers(app: FastAPI):
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(DuplicateBidError, duplicate_bid_handler)
    app.add_exception_handler(InvalidId, invalid_id_handler)
    # ServerSelectionTimeoutError and AutoReconnect are ConnectionFailure subclasses
    app.add_exception_handler(ConnectionFailure, database_unavailable_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)
