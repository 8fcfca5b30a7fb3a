from __future__ import annotations

from typing import Literal

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from app.config import settings
from app.database import get_db
from app.schemas.listing import (
    ListingCreate,
    ListingDeleteRequest,
    ListingMutationResponse,
    ListingQuery,
    ListingResponse,
    ListingUpdateRequest,
    MessageResponse,
)
from app.services import listing_service
from app.utils.exceptions import ListingNotFoundError, ValidationConflictError

router = APIRouter(prefix="/listing")


@router.post("/create", response_model=ListingMutationResponse)
def create_listing(
    body: ListingCreate, db: Session = Depends(get_db)
) -> ListingMutationResponse:
    try:
        listing = listing_service.create_listing(db, body)
    except ValidationConflictError as e:
        raise HTTPException(status_code=400, detail=e.message) from e
    return ListingMutationResponse(id=listing.id)


@router.post("/update", response_model=ListingMutationResponse)
def update_listing(
    body: ListingUpdateRequest, db: Session = Depends(get_db)
) -> ListingMutationResponse:
    try:
        listing = listing_service.update_listing(db, body.listing_id, body.form_data)
    except ListingNotFoundError as e:
        raise HTTPException(status_code=404, detail="Listing not found") from e
    except ValidationConflictError as e:
        raise HTTPException(status_code=409, detail=e.message) from e
    return ListingMutationResponse(id=listing.id)


@router.delete("/delete", response_model=MessageResponse)
def delete_listing(
    body: ListingDeleteRequest, db: Session = Depends(get_db)
) -> MessageResponse:
    try:
        listing_service.delete_listing(db, body.listing_id)
    except ListingNotFoundError as e:
        raise HTTPException(status_code=404, detail="Property not found.") from e
    return MessageResponse(success=True, message="Property deleted successfully.")


@router.post("/get", response_model=list[ListingResponse])
def get_listings(
    body: ListingQuery, db: Session = Depends(get_db)
) -> list[ListingResponse]:
    listings = listing_service.query_listings(db, body)
    return [ListingResponse.model_validate(l) for l in listings]


@router.get("/get", response_model=list[ListingResponse])
def get_listings_by_params(
    user_id: str | None = Query(None, alias="userId"),
    listing_id: str | None = Query(None, alias="listingId"),
    search_term: str | None = Query(None, alias="searchTerm"),
    start_index: int = Query(0, alias="startIndex", ge=0),
    limit: int = Query(
        settings.default_page_size, ge=1, le=settings.max_page_size
    ),
    order: Literal["asc", "desc"] = "desc",
    db: Session = Depends(get_db),
) -> list[ListingResponse]:
    """Query-string form of POST /listing/get, used by "show more" links."""
    query = ListingQuery(
        user_id=user_id,
        listing_id=listing_id,
        search_term=search_term,
        start_index=start_index,
        limit=limit,
        order=order,
    )
    listings = listing_service.query_listings(db, query)
    return [ListingResponse.model_validate(l) for l in listings]


@router.get("/{listing_id}", response_model=ListingResponse)
def get_listing(listing_id: str, db: Session = Depends(get_db)) -> ListingResponse:
    try:
        listing = listing_service.get_listing(db, listing_id)
    except ListingNotFoundError as e:
        raise HTTPException(status_code=404, detail="Listing not found") from e
    return ListingResponse.model_validate(listing)
