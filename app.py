"""
App assembly entry point.

Re-exports the FastAPI `app` from `eventhub.api.main` so servers can be
started with ``uvicorn app:app``.
"""

from eventhub.api.main import app  # noqa: F401
