"""
Insight Normalizer

Converts the loosely-typed JSON the language model returns into the stable
shapes used by rendering and export. The model's output is not schema
enforced, so any field may arrive as a string, a list, a keyed object, or not
at all. Normalization never raises: shapes it does not recognize become empty
sequences.

Every source value is first classified into an InsightShape and then handled
per shape:

    ABSENT       None / missing key
    SCALAR       str, int, float
    SEQUENCE     list / tuple
    MAPPING      dict (key order preserved)
    UNSUPPORTED  anything else (bool, nested oddities, objects)

Source keys of the narrative insight:
    overall_health, media_asymmetry, competitor_dynamics, golden_time,
    action_items

Source keys of the rank-schedule insight:
    optimalRankSchedule (hour00..hour23), optimalRankScheduleReason
"""

import logging
import re
from enum import Enum
from typing import Any, List, Mapping, Optional

from rank_compass.models import (
    CompetitorGroup,
    GoldenWindow,
    HOURS_PER_DAY,
    NormalizedInsight,
    RankScheduleRecommendation,
)

# Configure module logger
logger = logging.getLogger(__name__)

# =============================================================================
# CONSTANTS
# =============================================================================

# Label of the synthetic group a flat competitor list is wrapped into
DEFAULT_COMPETITOR_GROUP_LABEL: str = "경쟁 그룹"

# Label of a golden window given as a bare string
DEFAULT_GOLDEN_WINDOW_LABEL: str = "구간"

# Shown for a golden window whose value is empty
EMPTY_WINDOW_VALUE: str = "-"

# Target rank used when the model's value is missing, non-numeric or <= 0
DEFAULT_TARGET_RANK: int = 1

SCHEDULE_KEYS: List[str] = [f"hour{h:02d}" for h in range(HOURS_PER_DAY)]

# Leading integer, the way a lenient integer parse reads "3", " 4위", "2.7"
_LEADING_INT = re.compile(r"^\s*([+-]?\d+)")


class InsightShape(str, Enum):
    """JSON shape of one insight field."""
    ABSENT = "absent"
    SCALAR = "scalar"
    SEQUENCE = "sequence"
    MAPPING = "mapping"
    UNSUPPORTED = "unsupported"


def classify_shape(value: Any) -> InsightShape:
    """
    Classify a raw JSON value.

    bool is checked before the numeric types because it subclasses int and a
    bare true/false carries no narrative.
    """
    if value is None:
        return InsightShape.ABSENT
    if isinstance(value, bool):
        return InsightShape.UNSUPPORTED
    if isinstance(value, (str, int, float)):
        return InsightShape.SCALAR
    if isinstance(value, (list, tuple)):
        return InsightShape.SEQUENCE
    if isinstance(value, Mapping):
        return InsightShape.MAPPING
    return InsightShape.UNSUPPORTED


def _text_items(values: Any) -> List[str]:
    """Scalar entries of a sequence as strings; empty and non-scalar entries dropped."""
    items: List[str] = []
    for value in values:
        if classify_shape(value) != InsightShape.SCALAR:
            continue
        text = str(value).strip()
        if text:
            items.append(text)
    return items


# =============================================================================
# Field Normalizers
# =============================================================================


def normalize_flat_list(raw: Any) -> List[str]:
    """
    Normalize a flat-list field (overall health, media asymmetry, action items).

    - absent -> []
    - a single string -> [string]
    - an array -> its non-empty entries
    - anything else -> []
    """
    shape = classify_shape(raw)
    if shape == InsightShape.SCALAR:
        return _text_items([raw])
    if shape == InsightShape.SEQUENCE:
        return _text_items(raw)
    return []


def normalize_competitor_groups(raw: Any) -> List[CompetitorGroup]:
    """
    Normalize competitor dynamics into labelled groups.

    - absent -> []
    - a flat array -> one synthetic group holding its entries
    - a mapping -> one group per key in key order; an array value keeps its
      non-empty entries, a string value becomes a one-item group, any other
      value an empty group
    - anything else -> []
    """
    shape = classify_shape(raw)

    if shape == InsightShape.SEQUENCE:
        return [CompetitorGroup(
            label=DEFAULT_COMPETITOR_GROUP_LABEL,
            items=_text_items(raw),
        )]

    if shape == InsightShape.MAPPING:
        return [
            CompetitorGroup(label=str(label), items=normalize_flat_list(value))
            for label, value in raw.items()
        ]

    return []


def _window_value(value: Any) -> str:
    shape = classify_shape(value)
    if shape == InsightShape.SEQUENCE:
        return "\n".join(_text_items(value))
    if shape == InsightShape.SCALAR:
        return str(value).strip()
    return ""


def normalize_golden_windows(raw: Any) -> List[GoldenWindow]:
    """
    Normalize golden-time windows into label/value pairs.

    - absent -> []
    - an array -> one window per entry, labelled '구간 1', '구간 2', ...
    - a mapping -> one window per key in key order
    - a bare string -> one window labelled '구간'
    - anything else -> []

    Multi-item values are joined with newlines. Array entries keep their text
    as-is, empty included (the report renders an empty window as '-'); keyed
    and bare-string windows show an empty value as '-'.
    """
    shape = classify_shape(raw)

    if shape == InsightShape.SEQUENCE:
        return [
            GoldenWindow(
                label=f"{DEFAULT_GOLDEN_WINDOW_LABEL} {idx + 1}",
                value=_window_value(value),
            )
            for idx, value in enumerate(raw)
        ]

    if shape == InsightShape.MAPPING:
        return [
            GoldenWindow(
                label=str(label),
                value=_window_value(value) or EMPTY_WINDOW_VALUE,
            )
            for label, value in raw.items()
        ]

    if shape == InsightShape.SCALAR:
        return [GoldenWindow(
            label=DEFAULT_GOLDEN_WINDOW_LABEL,
            value=_window_value(raw) or EMPTY_WINDOW_VALUE,
        )]

    return []


# =============================================================================
# Insight Normalizers
# =============================================================================


def normalize_insight(raw: Any) -> NormalizedInsight:
    """
    Normalize a narrative insight of any shape.

    Args:
        raw: The ``insight`` object from the model, or None

    Returns:
        NormalizedInsight whose fields are always well-formed; a root that is
        not an object yields an empty insight
    """
    if classify_shape(raw) != InsightShape.MAPPING:
        if raw is not None:
            logger.warning(f"Insight root is {type(raw).__name__}, not an object; using empty insight")
        return NormalizedInsight()

    return NormalizedInsight(
        overall=normalize_flat_list(raw.get("overall_health")),
        media_asymmetry=normalize_flat_list(raw.get("media_asymmetry")),
        competitor_groups=normalize_competitor_groups(raw.get("competitor_dynamics")),
        golden_windows=normalize_golden_windows(raw.get("golden_time")),
        action_items=normalize_flat_list(raw.get("action_items")),
    )


def parse_target_rank(value: Any) -> int:
    """
    Parse one hour of the recommended schedule.

    Reads a leading integer ("3", "4위", "2.7" -> 2); missing, non-numeric and
    non-positive values fall back to 1.
    """
    shape = classify_shape(value)
    if shape != InsightShape.SCALAR:
        return DEFAULT_TARGET_RANK

    rank: Optional[int] = None
    if isinstance(value, (int, float)):
        try:
            rank = int(value)
        except (OverflowError, ValueError):
            rank = None
    else:
        match = _LEADING_INT.match(value)
        if match:
            rank = int(match.group(1))

    if rank is None or rank <= 0:
        return DEFAULT_TARGET_RANK
    return rank


def parse_rank_schedule(raw: Any) -> RankScheduleRecommendation:
    """
    Parse the rank-schedule insight into 24 positive target ranks.

    Args:
        raw: The ``insight`` object with optimalRankSchedule and
            optimalRankScheduleReason, or None

    Returns:
        RankScheduleRecommendation; hours the model left out default to 1
    """
    if classify_shape(raw) != InsightShape.MAPPING:
        return RankScheduleRecommendation()

    schedule = raw.get("optimalRankSchedule")
    if classify_shape(schedule) != InsightShape.MAPPING:
        schedule = {}

    missing = [key for key in SCHEDULE_KEYS if key not in schedule]
    if missing:
        logger.warning(f"Rank schedule is missing {len(missing)} hour(s); defaulting them to {DEFAULT_TARGET_RANK}")

    ranks = tuple(parse_target_rank(schedule.get(key)) for key in SCHEDULE_KEYS)

    return RankScheduleRecommendation(
        target_rank_by_hour=ranks,
        rationale=normalize_flat_list(raw.get("optimalRankScheduleReason")),
    )
