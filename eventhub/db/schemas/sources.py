from datetime import datetime
from typing import List
from pydantic import BaseModel, ConfigDict, Field, field_validator

from eventhub.utils.urls import normalize_url


class SourceBase(BaseModel):
    title: str | None = None
    url: str = Field(min_length=1, max_length=2048)

    @field_validator('url')
    @classmethod
    def normalize_url_field(cls, v):
        normalized = normalize_url(v)
        if normalized is None:
            raise ValueError("can't be blank")
        return normalized


class SourceCreate(SourceBase):
    pass


class SourceUpdate(BaseModel):
    title: str | None = None
    url: str | None = None

    @field_validator('url')
    @classmethod
    def normalize_url_field(cls, v):
        return normalize_url(v)


class Source(SourceBase):
    id: int
    imported_at: datetime | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None
    model_config = ConfigDict(from_attributes=True)


class SourceImportRequest(BaseModel):
    url: str = Field(min_length=1, max_length=2048)


class ImportedEvent(BaseModel):
    id: int
    title: str
    model_config = ConfigDict(from_attributes=True)


class SourceImportResult(BaseModel):
    status: str
    message: str
    source_id: int | None = None
    events: List[ImportedEvent] = []
