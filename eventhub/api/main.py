"""
FastAPI app assembly: logging, middleware and router wiring.
"""
import logging
import os

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

# Configure logging
LOG_LEVEL_NAME = os.getenv("LOG_LEVEL", "INFO").upper()
LOG_LEVEL = getattr(logging, LOG_LEVEL_NAME, logging.INFO)
logging.basicConfig(level=LOG_LEVEL)
logger = logging.getLogger(__name__)
logger.setLevel(LOG_LEVEL)
logger.info("app_startup: log_level=%s", LOG_LEVEL_NAME)

from eventhub.api.events import router as events_router
from eventhub.api.venues import router as venues_router
from eventhub.api.sources import router as sources_router
from eventhub.search import get_search_engine_kind
from eventhub.utils.urls import get_app_base_url

# Database schema is managed by Alembic migrations.

app = FastAPI(
    title="Community Event Calendar Service",
    description="API for tracking community events, venues and the calendar sources they are imported from.",
    version="1.0.0",
)

origins = [
    "http://localhost",
    "http://localhost:3000",
    "http://localhost:8000",
]
extra_origin = os.getenv("APP_BASE_URL")
if extra_origin and extra_origin.strip():
    origins.append(get_app_base_url())

app.add_middleware(
    CORSMiddleware,
    allow_origins=origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(events_router)
app.include_router(venues_router)
app.include_router(sources_router)


@app.get("/health")
def health_check():
    return {"status": "ok", "service": "eventhub-service", "search_engine": get_search_engine_kind()}
