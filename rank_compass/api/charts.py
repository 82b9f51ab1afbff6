"""
FastAPI router module for chart payloads.

Endpoints:
- POST /charts/rank: hourly rank chart for one device tab
"""

import logging

from fastapi import APIRouter, Body, HTTPException

from rank_compass.models import ChartRequest, RankChart
from rank_compass.services.schedule_overlay import build_rank_chart
from rank_compass.services.selection import filter_records

# Configure logging
logger = logging.getLogger(__name__)

# Create router with prefix and tags for OpenAPI documentation
router = APIRouter(prefix="/charts", tags=["charts"])


@router.post("/rank", response_model=RankChart)
async def rank_chart(
    body: ChartRequest = Body(...),
) -> RankChart:
    """
    Build the rank chart for the selected keywords on one device.

    The optional target_ranks draw the recommended-schedule overlay. A
    selected_index is honoured only when dataset_signature matches the
    records being charted.

    Raises:
        HTTPException 422: If target_ranks does not hold 24 values
    """
    records = filter_records(body.records, keywords=body.keywords)

    try:
        return build_rank_chart(
            records,
            body.device_class,
            container_width=body.container_width,
            target_ranks=body.target_ranks,
            selected_index=body.selected_index,
            client_signature=body.dataset_signature,
        )
    except ValueError as e:
        logger.warning(f"Invalid chart request: {e}")
        raise HTTPException(status_code=422, detail=str(e))
