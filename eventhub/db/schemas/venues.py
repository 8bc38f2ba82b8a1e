from datetime import datetime
from typing import List, Optional
from pydantic import BaseModel, ConfigDict, Field, field_validator

from eventhub.utils.urls import normalize_url


class VenueBase(BaseModel):
    title: str = Field(min_length=1, max_length=255)
    description: str | None = None
    address: str | None = None
    street_address: str | None = None
    locality: str | None = None
    region: str | None = None
    postal_code: str | None = None
    country: str | None = None
    latitude: float | None = Field(default=None, ge=-90, le=90)
    longitude: float | None = Field(default=None, ge=-180, le=180)
    email: str | None = None
    telephone: str | None = None
    url: str | None = None

    @field_validator('url')
    @classmethod
    def normalize_url_field(cls, v):
        return normalize_url(v)


class VenueCreate(VenueBase):
    pass


class VenueUpdate(BaseModel):
    title: str | None = Field(default=None, min_length=1, max_length=255)
    description: str | None = None
    address: str | None = None
    street_address: str | None = None
    locality: str | None = None
    region: str | None = None
    postal_code: str | None = None
    country: str | None = None
    latitude: float | None = Field(default=None, ge=-90, le=90)
    longitude: float | None = Field(default=None, ge=-180, le=180)
    email: str | None = None
    telephone: str | None = None
    url: str | None = None

    @field_validator('url')
    @classmethod
    def normalize_url_field(cls, v):
        return normalize_url(v)


class VenueSummary(BaseModel):
    id: int
    title: str
    model_config = ConfigDict(from_attributes=True)


class Venue(VenueBase):
    id: int
    source_id: int | None = None
    duplicate_of_id: int | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None
    model_config = ConfigDict(from_attributes=True)


class VenueDuplicateGroup(BaseModel):
    values: List[Optional[str]]
    venues: List[Venue]
