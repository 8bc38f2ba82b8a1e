"""
Venues API endpoints.
"""
from typing import List

from fastapi import APIRouter, Depends, HTTPException, Query, Response, status
from sqlalchemy.orm import Session

from eventhub.api.events import display_value, validation_error
from eventhub.db import schemas
from eventhub.db.database import get_db
from eventhub.db.repositories import venues as repo_venues
from eventhub.db.validation import RecordValidationError

router = APIRouter(prefix="/venues", tags=["venues"])


def _get_venue_or_404(db: Session, venue_id: int):
    db_venue = repo_venues.get_venue(db, venue_id)
    if not db_venue:
        raise HTTPException(status_code=404, detail="Venue not found")
    return db_venue


@router.get("/", response_model=List[schemas.Venue])
def list_venues_endpoint(
    skip: int = 0,
    limit: int = 100,
    include_duplicates: bool = False,
    db: Session = Depends(get_db),
):
    return repo_venues.get_venues(db, skip=skip, limit=limit, include_duplicates=include_duplicates)


@router.get("/search", response_model=List[schemas.Venue])
def search_venues_endpoint(
    q: str = "",
    limit: int = Query(default=50, ge=1, le=500),
    db: Session = Depends(get_db),
):
    return repo_venues.search_venues(db, q, limit=limit)


@router.get("/duplicates", response_model=List[schemas.VenueDuplicateGroup])
def find_duplicate_venues_endpoint(
    fields: str = "title",
    db: Session = Depends(get_db),
):
    try:
        groups = repo_venues.find_duplicates_by(db, fields, grouped=True, exclude_squashed=True)
    except ValueError as e:
        raise HTTPException(status_code=422, detail=str(e))
    return [
        {"values": [display_value(v) for v in key], "venues": records}
        for key, records in groups.items()
    ]


@router.post("/duplicates/squash", response_model=List[schemas.Venue])
def squash_duplicate_venues_endpoint(
    payload: schemas.SquashRequest,
    db: Session = Depends(get_db),
):
    master = _get_venue_or_404(db, payload.master_id)
    duplicates = [_get_venue_or_404(db, duplicate_id) for duplicate_id in payload.duplicate_ids]
    try:
        return repo_venues.squash_duplicates(db, master, duplicates)
    except ValueError as e:
        raise HTTPException(status_code=422, detail=str(e))


@router.post("/", response_model=schemas.Venue, status_code=status.HTTP_201_CREATED)
def create_venue_endpoint(venue: schemas.VenueCreate, db: Session = Depends(get_db)):
    try:
        return repo_venues.create_venue(db, venue)
    except RecordValidationError as e:
        raise validation_error(e)


@router.get("/{venue_id}", response_model=schemas.Venue)
def get_venue_endpoint(venue_id: int, db: Session = Depends(get_db)):
    return _get_venue_or_404(db, venue_id)


@router.put("/{venue_id}", response_model=schemas.Venue)
def update_venue_endpoint(
    venue_id: int,
    venue: schemas.VenueUpdate,
    db: Session = Depends(get_db),
):
    _get_venue_or_404(db, venue_id)
    try:
        return repo_venues.update_venue(db, venue_id, venue)
    except RecordValidationError as e:
        raise validation_error(e)


@router.delete("/{venue_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_venue_endpoint(venue_id: int, db: Session = Depends(get_db)):
    if not repo_venues.delete_venue(db, venue_id):
        raise HTTPException(status_code=404, detail="Venue not found")
    return Response(status_code=status.HTTP_204_NO_CONTENT)
