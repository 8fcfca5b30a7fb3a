from __future__ import annotations

from datetime import datetime
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from app.config import settings
from app.models.listing import UNIT_NUMBER_MAX, UNIT_NUMBER_MIN

# Wire names are camelCase; both spellings are accepted on input.
_camel = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class ListingCreate(BaseModel):
    model_config = _camel

    project_name: str = Field(min_length=1)
    unit_name: str = Field(min_length=1)
    unit_number: int = Field(ge=UNIT_NUMBER_MIN, le=UNIT_NUMBER_MAX)
    description: str
    address: str
    sell: bool = False
    rent: bool = False
    parking_spot: bool = False
    furnished: bool = False
    offer: bool = False
    beds: int = Field(ge=0)
    baths: int = Field(ge=0)
    regular_price: float = Field(ge=0)
    user_id: str | None = None


class ListingUpdate(BaseModel):
    """Partial update. Only the fields present in the payload are written."""

    model_config = _camel

    project_name: str | None = Field(default=None, min_length=1)
    unit_name: str | None = Field(default=None, min_length=1)
    unit_number: int | None = Field(default=None, ge=UNIT_NUMBER_MIN, le=UNIT_NUMBER_MAX)
    description: str | None = None
    address: str | None = None
    sell: bool | None = None
    rent: bool | None = None
    parking_spot: bool | None = None
    furnished: bool | None = None
    offer: bool | None = None
    beds: int | None = Field(default=None, ge=0)
    baths: int | None = Field(default=None, ge=0)
    regular_price: float | None = Field(default=None, ge=0)


class ListingUpdateRequest(BaseModel):
    model_config = _camel

    listing_id: str
    form_data: ListingUpdate


class ListingDeleteRequest(BaseModel):
    model_config = _camel

    listing_id: str


class ListingQuery(BaseModel):
    """Filter, pagination and sort options for listing enumeration.

    Keys the search page sends but the query does not use (sell, rent, ...)
    are ignored. Missing, null or empty pagination values fall back to their
    defaults.
    """

    model_config = _camel

    user_id: str | None = None
    listing_id: str | None = None
    search_term: str | None = None
    start_index: int = Field(default=0, ge=0)
    limit: int = Field(
        default_factory=lambda: settings.default_page_size,
        ge=1,
        le=settings.max_page_size,
    )
    order: Literal["asc", "desc"] = "desc"

    @field_validator("search_term", mode="before")
    @classmethod
    def _strip_search_term(cls, value: Any) -> Any:
        if isinstance(value, str):
            return value.strip() or None
        return value

    @field_validator("user_id", "listing_id", mode="before")
    @classmethod
    def _blank_to_none(cls, value: Any) -> Any:
        if value == "":
            return None
        return value

    @field_validator("start_index", mode="before")
    @classmethod
    def _default_start_index(cls, value: Any) -> Any:
        if value is None or value == "":
            return 0
        return value

    @field_validator("limit", mode="before")
    @classmethod
    def _default_limit(cls, value: Any) -> Any:
        if value is None or value == "":
            return settings.default_page_size
        return value

    @field_validator("order", mode="before")
    @classmethod
    def _default_order(cls, value: Any) -> Any:
        if value is None or value == "":
            return "desc"
        return value


class ListingResponse(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel, populate_by_name=True, from_attributes=True
    )

    id: str
    user_id: str | None = None
    project_name: str
    unit_name: str
    unit_number: int
    description: str
    address: str
    sell: bool
    rent: bool
    parking_spot: bool
    furnished: bool
    offer: bool
    beds: int
    baths: int
    regular_price: float
    created_at: datetime | None = None
    updated_at: datetime | None = None


class ListingMutationResponse(BaseModel):
    id: str
    success: bool = True


class MessageResponse(BaseModel):
    success: bool
    message: str
