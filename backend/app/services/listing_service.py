"""Listing store and query service.

Every function takes an explicit SQLAlchemy session. Mutations touch a single
row and either commit or roll back; database failures are re-raised as
``InternalError`` after the rollback.
"""

from __future__ import annotations

import logging
import re
from datetime import datetime, timezone
from typing import TYPE_CHECKING, Any

from sqlalchemy import ColumnElement, false, func, or_, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from app.models.listing import UNIT_NUMBER_MAX, UNIT_NUMBER_MIN, Listing
from app.utils.exceptions import (
    DuplicateUnitNameError,
    DuplicateUnitNumberError,
    InternalError,
    ListingNotFoundError,
    ValidationConflictError,
)

if TYPE_CHECKING:
    from sqlalchemy.orm import Session

    from app.schemas.listing import ListingCreate, ListingQuery, ListingUpdate

logger = logging.getLogger(__name__)

_NUMERIC_TERM = re.compile(r"[+-]?(\d+\.?\d*|\.\d+)([eE][+-]?\d+)?")


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


# ── Store ──────────────────────────────────────────────────────────────────


def find_by_id(db: Session, listing_id: str) -> Listing | None:
    try:
        return db.get(Listing, listing_id)
    except SQLAlchemyError as e:
        db.rollback()
        logger.exception("Failed to load listing %s", listing_id)
        raise InternalError() from e


def get_listing(db: Session, listing_id: str) -> Listing:
    listing = find_by_id(db, listing_id)
    if listing is None:
        raise ListingNotFoundError(f"Listing {listing_id} not found")
    return listing


def _unit_name_taken(db: Session, unit_name: str, exclude_id: str | None = None) -> bool:
    stmt = select(Listing.id).where(Listing.unit_name == unit_name)
    if exclude_id is not None:
        stmt = stmt.where(Listing.id != exclude_id)
    return db.scalar(stmt.limit(1)) is not None


def _unit_number_taken(db: Session, unit_number: int, exclude_id: str | None = None) -> bool:
    stmt = select(Listing.id).where(Listing.unit_number == unit_number)
    if exclude_id is not None:
        stmt = stmt.where(Listing.id != exclude_id)
    return db.scalar(stmt.limit(1)) is not None


def _check_unique(
    db: Session,
    unit_name: str | None,
    unit_number: int | None,
    exclude_id: str | None = None,
) -> None:
    """Raise the duplicate error for the first taken field, unit name first."""
    if unit_name is not None and _unit_name_taken(db, unit_name, exclude_id):
        raise DuplicateUnitNameError()
    if unit_number is not None and _unit_number_taken(db, unit_number, exclude_id):
        raise DuplicateUnitNumberError()


def _commit(
    db: Session,
    action: str,
    unit_name: str | None,
    unit_number: int | None,
    exclude_id: str | None = None,
) -> None:
    """Commit, translating a unique-constraint violation into a duplicate error.

    The pre-insert probes cannot see a concurrent writer, so the constraint on
    the table is the final arbiter. After rollback the probes run again to
    report which field collided.
    """
    try:
        db.commit()
    except IntegrityError as e:
        db.rollback()
        logger.warning("Integrity error during listing %s: %s", action, e.orig)
        try:
            _check_unique(db, unit_name, unit_number, exclude_id)
        except SQLAlchemyError as probe_error:
            raise InternalError() from probe_error
        raise InternalError() from e
    except SQLAlchemyError as e:
        db.rollback()
        logger.exception("Failed to %s listing", action)
        raise InternalError() from e


def create_listing(db: Session, data: ListingCreate) -> Listing:
    """Persist a new listing after the unit name and unit number checks pass."""
    try:
        _check_unique(db, data.unit_name, data.unit_number)
    except ValidationConflictError as e:
        logger.warning(
            "Rejected listing create (unit_name=%r, unit_number=%d): %s",
            data.unit_name,
            data.unit_number,
            type(e).__name__,
        )
        raise
    except SQLAlchemyError as e:
        db.rollback()
        logger.exception("Uniqueness probe failed")
        raise InternalError() from e

    now = _utcnow()
    listing = Listing(**data.model_dump(), created_at=now, updated_at=now)
    db.add(listing)
    _commit(db, "create", data.unit_name, data.unit_number)
    db.refresh(listing)

    logger.info(
        "Created listing %s (unit_name=%r, unit_number=%d)",
        listing.id,
        listing.unit_name,
        listing.unit_number,
    )
    return listing


def update_listing(db: Session, listing_id: str, data: ListingUpdate) -> Listing:
    """Overwrite the supplied fields of a listing and refresh ``updated_at``.

    Fields omitted from ``data`` or sent as null keep their stored value.
    Changing the unit name or unit number to one held by another listing
    fails with the matching duplicate error.
    """
    listing = get_listing(db, listing_id)
    fields: dict[str, Any] = {
        k: v for k, v in data.model_dump(exclude_unset=True).items() if v is not None
    }

    new_name = fields.get("unit_name")
    new_number = fields.get("unit_number")
    if new_name == listing.unit_name:
        new_name = None
    if new_number == listing.unit_number:
        new_number = None
    try:
        _check_unique(db, new_name, new_number, exclude_id=listing_id)
    except SQLAlchemyError as e:
        db.rollback()
        logger.exception("Uniqueness probe failed for listing %s", listing_id)
        raise InternalError() from e

    for key, value in fields.items():
        setattr(listing, key, value)
    listing.updated_at = _utcnow()
    _commit(db, "update", new_name, new_number, exclude_id=listing_id)
    db.refresh(listing)

    logger.info("Updated listing %s (%s)", listing_id, ", ".join(sorted(fields)) or "no fields")
    return listing


def delete_listing(db: Session, listing_id: str) -> None:
    listing = get_listing(db, listing_id)
    db.delete(listing)
    _commit(db, "delete", None, None)
    logger.info("Deleted listing %s", listing_id)


# ── Query ──────────────────────────────────────────────────────────────────


def parse_numeric_term(term: str) -> int | float | None:
    """Return the term's numeric value if the whole term is a decimal number."""
    if _NUMERIC_TERM.fullmatch(term) is None:
        return None
    try:
        return int(term)
    except ValueError:
        return float(term)


def build_search_predicate(term: str | None) -> ColumnElement[bool] | None:
    """Predicate for the free-text search box, or None when there is no term.

    A numeric term matches ``unit_number`` exactly. Any other term is a
    case-insensitive substring match on the project name or unit name.
    """
    if term is None:
        return None
    term = term.strip()
    if not term:
        return None

    number = parse_numeric_term(term)
    if number is not None:
        if isinstance(number, float):
            if not number.is_integer():
                return false()
            number = int(number)
        if not UNIT_NUMBER_MIN <= number <= UNIT_NUMBER_MAX:
            return false()
        return Listing.unit_number == number

    needle = term.lower()
    return or_(
        func.lower(Listing.project_name).contains(needle, autoescape=True),
        func.lower(Listing.unit_name).contains(needle, autoescape=True),
    )


def build_filters(query: ListingQuery) -> list[ColumnElement[bool]]:
    filters: list[ColumnElement[bool]] = []
    if query.user_id:
        filters.append(Listing.user_id == query.user_id)
    if query.listing_id:
        filters.append(Listing.id == query.listing_id)
    search = build_search_predicate(query.search_term)
    if search is not None:
        filters.append(search)
    return filters


def query_listings(db: Session, query: ListingQuery) -> list[Listing]:
    """Return one page of listings ordered by ``updated_at``.

    No total is returned. A page shorter than ``query.limit`` means the
    caller has reached the end.
    """
    if query.order == "asc":
        ordering = (Listing.updated_at.asc(), Listing.id.asc())
    else:
        ordering = (Listing.updated_at.desc(), Listing.id.desc())

    stmt = (
        select(Listing)
        .where(*build_filters(query))
        .order_by(*ordering)
        .offset(query.start_index)
        .limit(query.limit)
    )
    try:
        listings = list(db.scalars(stmt).all())
    except SQLAlchemyError as e:
        db.rollback()
        logger.exception("Listing query failed")
        raise InternalError() from e

    logger.debug(
        "Listing query (search=%r, start=%d, limit=%d, order=%s) returned %d rows",
        query.search_term,
        query.start_index,
        query.limit,
        query.order,
        len(listings),
    )
    return listings
