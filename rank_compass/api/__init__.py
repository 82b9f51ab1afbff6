"""
API package initialization.

This package contains FastAPI router modules for the Rank Compass backend:
- uploads: spreadsheet decoding
- analysis: narrative and rank-schedule AI analysis
- charts: hourly rank chart payloads
- reports: tabular report, xlsx/CSV downloads, per-record metrics
- session: results-view hand-off guard
"""

from fastapi import APIRouter

# Import router modules
from rank_compass.api.uploads import router as uploads_router
from rank_compass.api.analysis import router as analysis_router
from rank_compass.api.charts import router as charts_router
from rank_compass.api.reports import router as reports_router
from rank_compass.api.session import router as session_router

# Create main API router
api_router = APIRouter()

# Each router carries its own prefix
api_router.include_router(uploads_router)
api_router.include_router(analysis_router)
api_router.include_router(charts_router)
api_router.include_router(reports_router)
api_router.include_router(session_router)

# Export all routers for selective imports
__all__ = [
    "api_router",
    "uploads_router",
    "analysis_router",
    "charts_router",
    "reports_router",
    "session_router",
]
