import datetime
from typing import Annotated, Optional
from pydantic import AfterValidator, BaseModel, ConfigDict, EmailStr, Field, field_validator, model_validator


def as_utc(value: Optional[datetime.datetime]) -> Optional[datetime.datetime]:
    """Deadlines are kept in UTC; a naive value is taken to already be UTC."""
    if value is None:
        return value
    if value.tzinfo is None:
        return value.replace(tzinfo=datetime.timezone.utc)
    return value.astimezone(datetime.timezone.utc)

UtcDatetime = Annotated[datetime.datetime, AfterValidator(as_utc)]


class Buyer(BaseModel):
    email: EmailStr
    name: Optional[str] = None
    photo: Optional[str] = None

class JobBase(BaseModel):
    title: str = Field(min_length=1)
    category: str = Field(min_length=1)
    deadline: UtcDatetime
    min_price: float = Field(ge=0)
    max_price: float = Field(ge=0)
    description: Optional[str] = None
    buyer: Buyer

class JobCreate(JobBase):
    @model_validator(mode="after")
    def check_budget(self):
        if self.max_price < self.min_price:
            raise ValueError("max_price must not be lower than min_price")
        return self

class JobUpdate(BaseModel):
    title: Optional[str] = Field(default=None, min_length=1)
    category: Optional[str] = Field(default=None, min_length=1)
    deadline: Optional[UtcDatetime] = None
    min_price: Optional[float] = Field(default=None, ge=0)
    max_price: Optional[float] = Field(default=None, ge=0)
    description: Optional[str] = None
    buyer: Optional[Buyer] = None

    @field_validator("title", "category", "deadline", "min_price", "max_price", "buyer", mode="before")
    @classmethod
    def reject_null(cls, value):
        # Absent means untouched; an explicit null would erase a required field
        if value is None:
            raise ValueError("may not be null")
        return value

    @model_validator(mode="after")
    def check_budget(self):
        if self.min_price is not None and self.max_price is not None and self.max_price < self.min_price:
            raise ValueError("max_price must not be lower than min_price")
        return self

class BidCreate(BaseModel):
    jobId: str
    email: EmailStr
    buyer: EmailStr
    price: float = Field(ge=0)
    deadline: UtcDatetime
    status: str = "Pending"
    title: Optional[str] = None
    category: Optional[str] = None
    comment: Optional[str] = None

class BidStatusUpdate(BaseModel):
    status: str = Field(min_length=1)

class TokenPayload(BaseModel):
    """Claims signed into the auth cookie. Anything beyond email is carried through."""
    model_config = ConfigDict(extra="allow")

    email: EmailStr

class InsertResult(BaseModel):
    acknowledged: bool
    insertedId: str

class UpdateResult(BaseModel):
    acknowledged: bool
    matchedCount: int
    modifiedCount: int
    upsertedCount: int
    upsertedId: Optional[str] = None

class DeleteResult(BaseModel):
    acknowledged: bool
    deletedCount: int

class CountResult(BaseModel):
    count: int

class SuccessResponse(BaseModel):
    success: bool = True

class ErrorResponse(BaseModel):
    success: bool = False
    status: int
    message: str
