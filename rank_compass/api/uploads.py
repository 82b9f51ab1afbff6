"""
FastAPI router module for spreadsheet uploads.

Endpoints:
- POST /uploads: decode an uploaded rank sheet into RankRecord objects

Decoding happens in full before anything else; a file that cannot be decoded
returns ``{"error": ...}`` with status 400 and no partial records.
"""

import logging

from fastapi import APIRouter, File, UploadFile

from rank_compass.core import SettingsDep
from rank_compass.models import UploadResponse
from rank_compass.services.ingestion import decode_spreadsheet
from rank_compass.services.selection import distinct_keywords

# Configure logging
logger = logging.getLogger(__name__)

# Create router with prefix and tags for OpenAPI documentation
router = APIRouter(prefix="/uploads", tags=["uploads"])


@router.post("", response_model=UploadResponse)
async def upload_spreadsheet(
    settings: SettingsDep,
    file: UploadFile = File(...),
) -> UploadResponse:
    """
    Decode an uploaded competitor rank spreadsheet.

    Args:
        settings: Application settings (row limit)
        file: The .xlsx/.xls/.csv file

    Returns:
        UploadResponse with the records, row count and distinct keywords

    Raises:
        SpreadsheetDecodeError: If the file cannot be decoded (400)
    """
    content = await file.read()
    filename = file.filename or "upload.xlsx"

    logger.info(f"Received upload {filename} ({len(content)} bytes)")

    records = decode_spreadsheet(content, filename, max_rows=settings.upload_max_rows)

    return UploadResponse(
        records=records,
        row_count=len(records),
        keywords=distinct_keywords(records),
    )
