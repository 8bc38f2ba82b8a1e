"""
Events API endpoints.

CRUD plus the overview, date-range listing, search, duplicate management
and calendar exports.
"""
from datetime import date, datetime, timedelta
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Response, status
from sqlalchemy.orm import Session

from eventhub.db import schemas
from eventhub.db.database import get_db
from eventhub.db.repositories import events as repo_events
from eventhub.db.validation import RecordValidationError
from eventhub.search import get_search_engine_kind, search_grouped_by_currentness
from eventhub.services.calendar_export import to_hcal, to_ical
from eventhub.utils.dates import today as start_of_today

router = APIRouter(prefix="/events", tags=["events"])

ICAL_MEDIA_TYPE = "text/calendar; charset=utf-8"


def validation_error(e: RecordValidationError) -> HTTPException:
    return HTTPException(status_code=422, detail={"errors": e.errors})


def display_value(value) -> Optional[str]:
    if value is None:
        return None
    if isinstance(value, datetime):
        return value.isoformat()
    return str(value)


def _get_event_or_404(db: Session, event_id: int):
    db_event = repo_events.get_event(db, event_id)
    if not db_event:
        raise HTTPException(status_code=404, detail="Event not found")
    return db_event


@router.get("/", response_model=List[schemas.Event])
def list_events_endpoint(
    start: Optional[date] = None,
    end: Optional[date] = None,
    order: Optional[str] = None,
    skip: int = 0,
    limit: int = 100,
    db: Session = Depends(get_db),
):
    try:
        if start is None and end is None:
            return repo_events.get_events(db, skip=skip, limit=limit, order=order)
        start = start or start_of_today().date()
        end = end or start
        if end < start:
            raise HTTPException(status_code=422, detail="end must not be before start")
        # The end day is inclusive
        return repo_events.find_by_dates(db, start, end + timedelta(days=1), order=order)
    except ValueError as e:
        raise HTTPException(status_code=422, detail=str(e))


@router.get("/overview", response_model=schemas.EventOverview)
def overview_endpoint(db: Session = Depends(get_db)):
    return repo_events.select_for_overview(db)


@router.get("/search", response_model=schemas.GroupedEventSearchResults)
def search_events_endpoint(
    response: Response,
    q: str = "",
    order: Optional[str] = None,
    current: bool = False,
    limit: Optional[int] = Query(default=None, ge=1, le=500),
    db: Session = Depends(get_db),
):
    try:
        grouped = search_grouped_by_currentness(db, q, order=order, skip_old=current, limit=limit)
    except ValueError as e:
        raise HTTPException(status_code=422, detail=str(e))
    response.headers["X-Search-Engine"] = get_search_engine_kind()
    return {
        bucket: [{"event": r.event, "score": r.score} for r in results]
        for bucket, results in grouped.items()
    }


@router.get("/duplicates", response_model=List[schemas.EventDuplicateGroup])
def find_duplicate_events_endpoint(
    fields: str = "title",
    db: Session = Depends(get_db),
):
    """Groups of events sharing every field in ``fields`` (comma separated, or ``all``)."""
    try:
        groups = repo_events.find_duplicates_by(db, fields, grouped=True, exclude_squashed=True)
    except ValueError as e:
        raise HTTPException(status_code=422, detail=str(e))
    return [
        {"values": [display_value(v) for v in key], "events": records}
        for key, records in groups.items()
    ]


@router.post("/duplicates/squash", response_model=List[schemas.Event])
def squash_duplicate_events_endpoint(
    payload: schemas.SquashRequest,
    db: Session = Depends(get_db),
):
    master = _get_event_or_404(db, payload.master_id)
    duplicates = [_get_event_or_404(db, duplicate_id) for duplicate_id in payload.duplicate_ids]
    try:
        return repo_events.squash_duplicates(db, master, duplicates)
    except ValueError as e:
        raise HTTPException(status_code=422, detail=str(e))


@router.get("/export.ics")
def export_events_endpoint(db: Session = Depends(get_db)):
    events = repo_events.find_future_events(db)
    return Response(
        content=to_ical(events),
        media_type=ICAL_MEDIA_TYPE,
        headers={"Content-Disposition": 'attachment; filename="events.ics"'},
    )


@router.post("/", response_model=schemas.Event, status_code=status.HTTP_201_CREATED)
def create_event_endpoint(
    event: schemas.EventCreate,
    db: Session = Depends(get_db),
):
    try:
        return repo_events.create_event(db, event)
    except RecordValidationError as e:
        raise validation_error(e)
    except LookupError as e:
        raise HTTPException(status_code=422, detail=str(e))


@router.get("/{event_id}", response_model=schemas.Event)
def get_event_endpoint(event_id: int, db: Session = Depends(get_db)):
    return _get_event_or_404(db, event_id)


@router.put("/{event_id}", response_model=schemas.Event)
def update_event_endpoint(
    event_id: int,
    event: schemas.EventUpdate,
    db: Session = Depends(get_db),
):
    _get_event_or_404(db, event_id)
    try:
        return repo_events.update_event(db, event_id, event)
    except RecordValidationError as e:
        raise validation_error(e)
    except LookupError as e:
        raise HTTPException(status_code=422, detail=str(e))


@router.delete("/{event_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_event_endpoint(event_id: int, db: Session = Depends(get_db)):
    if not repo_events.delete_event(db, event_id):
        raise HTTPException(status_code=404, detail="Event not found")
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/{event_id}/ical")
def event_ical_endpoint(event_id: int, db: Session = Depends(get_db)):
    db_event = _get_event_or_404(db, event_id)
    return Response(
        content=to_ical([db_event]),
        media_type=ICAL_MEDIA_TYPE,
        headers={"Content-Disposition": f'attachment; filename="event-{event_id}.ics"'},
    )


@router.get("/{event_id}/hcal")
def event_hcal_endpoint(event_id: int, db: Session = Depends(get_db)):
    db_event = _get_event_or_404(db, event_id)
    return Response(content=to_hcal([db_event]), media_type="text/html")
