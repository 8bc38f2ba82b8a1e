"""
Sources API endpoints, including import of a calendar URL.
"""
from typing import List

from fastapi import APIRouter, Depends, HTTPException, Response, status
from sqlalchemy.orm import Session

from eventhub.db import schemas
from eventhub.db.database import get_db
from eventhub.db.repositories import sources as repo_sources
from eventhub.services.importer import import_source

router = APIRouter(prefix="/sources", tags=["sources"])


def _get_source_or_404(db: Session, source_id: int):
    db_source = repo_sources.get_source(db, source_id)
    if not db_source:
        raise HTTPException(status_code=404, detail="Source not found")
    return db_source


@router.get("/", response_model=List[schemas.Source])
def list_sources_endpoint(skip: int = 0, limit: int = 100, db: Session = Depends(get_db)):
    return repo_sources.get_sources(db, skip=skip, limit=limit)


@router.post("/", response_model=schemas.Source, status_code=status.HTTP_201_CREATED)
def create_source_endpoint(source: schemas.SourceCreate, db: Session = Depends(get_db)):
    if repo_sources.get_source_by_url(db, source.url):
        raise HTTPException(status_code=400, detail="Source with this url already exists")
    return repo_sources.create_source(db, source)


@router.post("/import", response_model=schemas.SourceImportResult)
def import_source_endpoint(payload: schemas.SourceImportRequest, db: Session = Depends(get_db)):
    """Fetch, parse and store the events at ``url``; failures come back as a message."""
    result = import_source(db, payload.url)
    return schemas.SourceImportResult(
        status=result.status,
        message=result.message,
        source_id=result.source.id if result.source is not None else None,
        events=[schemas.ImportedEvent(id=e.id, title=e.title) for e in result.events],
    )


@router.get("/{source_id}", response_model=schemas.Source)
def get_source_endpoint(source_id: int, db: Session = Depends(get_db)):
    return _get_source_or_404(db, source_id)


@router.put("/{source_id}", response_model=schemas.Source)
def update_source_endpoint(
    source_id: int,
    source: schemas.SourceUpdate,
    db: Session = Depends(get_db),
):
    _get_source_or_404(db, source_id)
    if source.url:
        existing = repo_sources.get_source_by_url(db, source.url)
        if existing and existing.id != source_id:
            raise HTTPException(status_code=400, detail="Source with this url already exists")
    return repo_sources.update_source(db, source_id, source)


@router.delete("/{source_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_source_endpoint(source_id: int, db: Session = Depends(get_db)):
    if not repo_sources.delete_source(db, source_id):
        raise HTTPException(status_code=404, detail="Source not found")
    return Response(status_code=status.HTTP_204_NO_CONTENT)
