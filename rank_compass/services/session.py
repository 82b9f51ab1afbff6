"""
Results-view session hand-off.

The upload page stores ``{rawData: RankRecord[], insight?: object}`` for the
results view. A missing, unreadable or empty hand-off is not an error: the
guard sends the user back to the upload page.
"""

import json
import logging
from typing import Any, List

from pydantic import ValidationError

from rank_compass.models import DeviceClass, RankRecord, SessionResolution
from rank_compass.services.insight_normalizer import normalize_insight
from rank_compass.services.metrics import summarize_device
from rank_compass.services.selection import distinct_keywords

# Configure module logger
logger = logging.getLogger(__name__)

UPLOAD_PAGE: str = "/upload"


def _redirect(reason: str) -> SessionResolution:
    logger.info(f"Redirecting results view to {UPLOAD_PAGE}: {reason}")
    return SessionResolution(redirect_to=UPLOAD_PAGE)


def resolve_session(payload: Any) -> SessionResolution:
    """
    Resolve the results view from the stored hand-off payload.

    Args:
        payload: The stored object, or its JSON text, or None

    Returns:
        SessionResolution with the records, the normalized insight, distinct
        keywords and per-device summaries; or one carrying only redirect_to
    """
    if payload is None:
        return _redirect("no session payload")

    if isinstance(payload, (str, bytes)):
        try:
            payload = json.loads(payload)
        except ValueError:
            return _redirect("session payload is not valid JSON")

    if not isinstance(payload, dict):
        return _redirect("session payload is not an object")

    raw_data = payload.get("rawData")
    if not isinstance(raw_data, list) or not raw_data:
        return _redirect("session payload has no records")

    try:
        records: List[RankRecord] = [RankRecord.model_validate(item) for item in raw_data]
    except ValidationError as e:
        logger.warning(f"Session records failed validation: {e.error_count()} error(s)")
        return _redirect("session records are invalid")

    return SessionResolution(
        records=records,
        insight=normalize_insight(payload.get("insight")),
        keywords=distinct_keywords(records),
        summaries=[summarize_device(records, device) for device in DeviceClass],
    )
