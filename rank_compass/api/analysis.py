"""
FastAPI router module for AI analysis endpoints.

Endpoints:
- POST /analyze: narrative competitor analysis
- POST /analyze/rank-schedule: hour-by-hour target rank recommendation

Both accept ``{data: RankRecord[]}``. The language-model call is blocking and
runs in the threadpool. Failures are reported as ``{"error": message}``:
400 for an empty dataset, 500 for a missing API key, 502 for transport and
response-format failures.
"""

import logging

from fastapi import APIRouter, Body
from fastapi.concurrency import run_in_threadpool

from rank_compass.core import SettingsDep
from rank_compass.models import (
    AnalyzeRequest,
    NarrativeAnalysisResponse,
    RankScheduleResponse,
)
from rank_compass.services.insight_normalizer import normalize_insight, parse_rank_schedule
from rank_compass.services.llm_client import generate_narrative_insight, generate_rank_schedule

# Configure logging
logger = logging.getLogger(__name__)

# Create router with prefix and tags for OpenAPI documentation
router = APIRouter(prefix="/analyze", tags=["analysis"])


@router.post("", response_model=NarrativeAnalysisResponse)
async def analyze_narrative(
    settings: SettingsDep,
    body: AnalyzeRequest = Body(...),
) -> NarrativeAnalysisResponse:
    """
    Generate the narrative analysis for a set of rank records.

    Returns:
        The model's raw insight together with its normalized form
    """
    logger.info(f"Narrative analysis requested for {len(body.data)} records")

    insight = await run_in_threadpool(generate_narrative_insight, body.data, settings)

    return NarrativeAnalysisResponse(
        insight=insight,
        normalized=normalize_insight(insight),
    )


@router.post("/rank-schedule", response_model=RankScheduleResponse)
async def analyze_rank_schedule(
    settings: SettingsDep,
    body: AnalyzeRequest = Body(...),
) -> RankScheduleResponse:
    """
    Recommend a target rank for each hour of the day.

    Returns:
        The model's raw insight and the parsed 24-hour schedule
    """
    logger.info(f"Rank schedule requested for {len(body.data)} records")

    insight = await run_in_threadpool(generate_rank_schedule, body.data, settings)

    return RankScheduleResponse(
        insight=insight,
        schedule=parse_rank_schedule(insight),
    )
