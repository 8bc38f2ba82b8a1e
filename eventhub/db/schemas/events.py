from datetime import datetime
from typing import List, Optional
from pydantic import BaseModel, ConfigDict, Field, ValidationInfo, field_validator

from eventhub.utils.dates import to_naive_local
from eventhub.utils.urls import normalize_url
from .venues import VenueSummary

END_BEFORE_START = "must not be earlier than start time"


class EventBase(BaseModel):
    title: str = Field(min_length=1, max_length=255)
    description: str | None = None
    url: str | None = None
    start_time: datetime
    end_time: datetime | None = None
    venue_id: int | None = None

    @field_validator('url')
    @classmethod
    def normalize_url_field(cls, v):
        return normalize_url(v)

    @field_validator('start_time', 'end_time')
    @classmethod
    def local_times(cls, v):
        return to_naive_local(v)

    @field_validator('end_time')
    @classmethod
    def end_not_before_start(cls, v, info: ValidationInfo):
        start = info.data.get('start_time')
        if v is not None and start is not None and v < start:
            raise ValueError(END_BEFORE_START)
        return v


class EventCreate(EventBase):
    venue_title: str | None = None
    tag_list: str | None = None


class EventUpdate(BaseModel):
    title: str | None = Field(default=None, min_length=1, max_length=255)
    description: str | None = None
    url: str | None = None
    start_time: datetime | None = None
    end_time: datetime | None = None
    venue_id: int | None = None
    venue_title: str | None = None
    tag_list: str | None = None

    @field_validator('url')
    @classmethod
    def normalize_url_field(cls, v):
        return normalize_url(v)

    @field_validator('start_time', 'end_time')
    @classmethod
    def local_times(cls, v):
        return to_naive_local(v)


class Event(EventBase):
    id: int
    source_id: int | None = None
    duplicate_of_id: int | None = None
    venue: VenueSummary | None = None
    tag_list: str = ""
    created_at: datetime | None = None
    updated_at: datetime | None = None
    model_config = ConfigDict(from_attributes=True)

    # Stored rows are trusted; don't re-run the create-time range check
    @field_validator('end_time')
    @classmethod
    def end_not_before_start(cls, v, info: ValidationInfo):
        return v


class EventOverview(BaseModel):
    today: List[Event]
    tomorrow: List[Event]
    later: List[Event]
    more: Optional[Event] = None


class EventSearchResult(BaseModel):
    event: Event
    score: float | None = None


class GroupedEventSearchResults(BaseModel):
    current: List[EventSearchResult]
    past: List[EventSearchResult]


class EventDuplicateGroup(BaseModel):
    values: List[Optional[str]]
    events: List[Event]
