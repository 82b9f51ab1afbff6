"""
FastAPI router module for reports and downloads.

Endpoints:
- POST /reports: the tabular report as JSON
- POST /reports/xlsx: the report as an xlsx download (3 sheets)
- POST /reports/csv: filtered records as a CSV download
- POST /reports/metrics: per-record analysis table (worst/best hour, variance)
"""

import logging
from typing import List
from urllib.parse import quote

from fastapi import APIRouter, Body, Response

from rank_compass.models import (
    RecordAnalysis,
    ReportRequest,
    SelectionRequest,
    TabularReport,
)
from rank_compass.services.export import (
    CSV_MEDIA_TYPE,
    XLSX_MEDIA_TYPE,
    csv_filename,
    render_records_csv,
    render_workbook,
    workbook_filename,
)
from rank_compass.services.insight_normalizer import normalize_insight
from rank_compass.services.metrics import analyze_records
from rank_compass.services.report import assemble_report
from rank_compass.services.selection import filter_records

# Configure logging
logger = logging.getLogger(__name__)

# Create router with prefix and tags for OpenAPI documentation
router = APIRouter(prefix="/reports", tags=["reports"])


def _attachment(filename: str) -> str:
    """Content-Disposition value for a non-ASCII download name."""
    return f"attachment; filename*=UTF-8''{quote(filename)}"


@router.post("", response_model=TabularReport)
async def build_report(
    body: ReportRequest = Body(...),
) -> TabularReport:
    """Assemble the tabular report from records and a raw insight."""
    return assemble_report(body.records, normalize_insight(body.insight))


@router.post("/xlsx")
async def download_workbook(
    body: ReportRequest = Body(...),
) -> Response:
    """
    Render the report as an xlsx workbook.

    Returns:
        The workbook as an attachment named 경쟁사_순위_분석_<date>.xlsx
    """
    report = assemble_report(body.records, normalize_insight(body.insight))
    content = render_workbook(report)
    filename = workbook_filename()

    logger.info(f"Serving workbook {filename}")

    return Response(
        content=content,
        media_type=XLSX_MEDIA_TYPE,
        headers={"Content-Disposition": _attachment(filename)},
    )


@router.post("/csv")
async def download_csv(
    body: SelectionRequest = Body(...),
) -> Response:
    """Render the keyword/device selection as the dashboard CSV."""
    records = filter_records(
        body.records,
        keywords=body.keywords,
        include_pc=body.include_pc,
        include_mobile=body.include_mobile,
    )
    filename = csv_filename()

    logger.info(f"Serving CSV {filename} with {len(records)} records")

    return Response(
        content=render_records_csv(records),
        media_type=CSV_MEDIA_TYPE,
        headers={"Content-Disposition": _attachment(filename)},
    )


@router.post("/metrics", response_model=List[RecordAnalysis])
async def record_metrics(
    body: ReportRequest = Body(...),
) -> List[RecordAnalysis]:
    """Per-record analysis rows, in input order."""
    return analyze_records(body.records)
