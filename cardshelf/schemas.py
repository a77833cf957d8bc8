from datetime import datetime, timezone
from pydantic import BaseModel, Field, field_validator
from pydantic.alias_generators import to_camel
from typing import List, Optional


MAX_YEAR = 9999
# INT is 32-bit on MySQL
MAX_QUANTITY = 2**31 - 1


def split_tags(value):
    if isinstance(value, str):
        return [tag.strip() for tag in value.split(",") if tag.strip()]
    return value


class CardFields(BaseModel):
    year: Optional[int] = Field(None, gt=0, le=MAX_YEAR)
    player: Optional[str] = None
    added_date: Optional[datetime] = None
    manufacturer: Optional[str] = None
    card_set: Optional[str] = None
    subset: Optional[str] = None
    type: Optional[str] = None
    on_card_code: Optional[str] = None
    sport: Optional[str] = None
    tags: Optional[List[str]] = None
    notes: Optional[str] = None
    grade: Optional[str] = None
    price_paid: Optional[float] = Field(None, ge=0)
    market_price: Optional[float] = Field(None, ge=0)
    quantity: Optional[int] = Field(None, ge=0, le=MAX_QUANTITY)

    class Config:
        alias_generator = to_camel
        populate_by_name = True

    @field_validator("added_date")
    @classmethod
    def naive_utc(cls, value):
        # timestamps are stored naive, in UTC
        if value is not None and value.tzinfo is not None:
            value = value.astimezone(timezone.utc).replace(tzinfo=None)
        return value

    @field_validator("tags", mode="before")
    @classmethod
    def coerce_tags(cls, value):
        return split_tags(value)


class CardCreate(CardFields):
    year: int = Field(..., gt=0, le=MAX_YEAR)
    player: str
    manufacturer: str
    type: str
    on_card_code: str
    sport: str


class CardUpdate(CardFields):
    pass


class CardOut(BaseModel):
    id: int
    year: int
    player: str
    added_date: datetime
    manufacturer: str
    card_set: Optional[str] = None
    subset: Optional[str] = None
    type: str
    on_card_code: str
    sport: str
    tags: Optional[List[str]] = None
    notes: Optional[str] = None
    grade: Optional[str] = None
    price_paid: Optional[float] = None
    market_price: Optional[float] = None
    quantity: int
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True
        alias_generator = to_camel
        populate_by_name = True


class PageResp(BaseModel):
    data: List[CardOut]
    total: int
    page: int
    limit: int


class ErrorResp(BaseModel):
    error: str
    fields: Optional[dict] = None
    stack: Optional[str] = None
