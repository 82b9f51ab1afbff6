"""
FastAPI router module for the results-view hand-off.

Endpoints:
- POST /session/results: resolve the stored ``{rawData, insight}`` payload;
  an empty or missing payload yields ``redirect_to: "/upload"``
"""

from typing import Any, Optional

from fastapi import APIRouter, Body

from rank_compass.models import SessionResolution
from rank_compass.services.session import resolve_session

# Create router with prefix and tags for OpenAPI documentation
router = APIRouter(prefix="/session", tags=["session"])


@router.post("/results", response_model=SessionResolution)
async def session_results(
    payload: Optional[Any] = Body(default=None),
) -> SessionResolution:
    """Resolve the results view or send the user back to the upload page."""
    return resolve_session(payload)
