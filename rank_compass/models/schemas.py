"""
Pydantic request/response models for the Rank Compass backend.

This module provides type-safe data validation and serialization for the rank
record itself, the derived statistics, the normalized AI insight, chart
payloads, the tabular report, and every API contract.

RankRecord is the canonical entity: one advertiser's 24-slot hourly rank
series for one keyword/device combination. Its JSON form is the dashboard's
flat wire form (``keyword, ad_area, advertiser, url, average, hour_00 ..
hour_23``), which is also what the language model receives in prompts.

All models use Pydantic v2 syntax.
"""

import math
from typing import Annotated, Any, Dict, List, Optional, Tuple, Union

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    field_validator,
    model_serializer,
    model_validator,
)

from rank_compass.models.enums import DeviceClass, ReportBlockKind, ReportSheet


# =============================================================================
# Hour Layout
# =============================================================================

HOURS_PER_DAY: int = 24

# Labels used by the upload sheet columns, hour statistics, and exports
HOUR_LABELS: List[str] = [f"{h:02d}시" for h in range(HOURS_PER_DAY)]

# Keys of the flat wire form
HOUR_WIRE_KEYS: List[str] = [f"hour_{h:02d}" for h in range(HOURS_PER_DAY)]

# Sentinel label for an hour statistic over a series with no observations
NO_HOUR_LABEL: str = "-"


def coerce_rank(value: Any) -> float:
    """
    Coerce one rank cell to a non-negative float.

    Missing, non-numeric, non-finite, and negative values all become the
    0 sentinel ("no observation").

    Args:
        value: Raw cell value (number, numeric string, None, ...)

    Returns:
        The rank as a float, or 0.0
    """
    if value is None or isinstance(value, bool):
        return 0.0
    if isinstance(value, str):
        value = value.strip()
        if not value:
            return 0.0
    try:
        number = float(value)
    except (TypeError, ValueError):
        return 0.0
    if not math.isfinite(number) or number < 0:
        return 0.0
    return number


def coerce_text(value: Any) -> str:
    """Coerce one text cell to a string; missing and NaN become ''."""
    if value is None:
        return ""
    if isinstance(value, float) and math.isnan(value):
        return ""
    return str(value)


def coerce_device_class(value: Any) -> DeviceClass:
    """
    Map a raw 광고영역 value onto a DeviceClass.

    'Mobile' (any case) and '모바일' select Mobile; anything else, including a
    missing value, falls back to PC.
    """
    if isinstance(value, DeviceClass):
        return value
    text = coerce_text(value).strip().lower()
    if text in ("mobile", "모바일"):
        return DeviceClass.MOBILE
    return DeviceClass.PC


# =============================================================================
# Core Domain Model
# =============================================================================


class RankRecord(BaseModel):
    """
    One advertiser's hourly rank series for one keyword/device combination.

    Invariants:
    - hourly_rank always has exactly 24 slots, indexed 0-23
    - a slot is either a positive rank (lower is better) or 0 meaning
      "no observation that hour"; negatives and non-numerics coerce to 0
    - the record is immutable once constructed

    Accepts either the field names below or the dashboard wire form
    (``ad_area``, ``advertiser``, ``url``, ``average``, ``hour_00``..``hour_23``).
    Serializes to the wire form.
    """
    model_config = ConfigDict(
        frozen=True,
        populate_by_name=True,
        json_schema_extra={
            "example": {
                "keyword": "운동화",
                "ad_area": "PC",
                "advertiser": "브랜드A",
                "url": "https://brand-a.example.com",
                "average": 3.2,
                "hour_00": 0,
                "hour_01": 3,
                "hour_02": 4,
            }
        }
    )

    keyword: str = Field(
        default="",
        description="Search keyword the rank was observed for"
    )
    device_class: DeviceClass = Field(
        default=DeviceClass.PC,
        alias="ad_area",
        description="Ad placement area (PC or Mobile)"
    )
    entity_name: str = Field(
        default="",
        alias="advertiser",
        description="Advertiser whose rank is tracked"
    )
    reference_url: str = Field(
        default="",
        alias="url",
        description="Advertiser landing URL"
    )
    average_rank: float = Field(
        default=0.0,
        ge=0.0,
        alias="average",
        description="Average rank computed upstream (0 = unknown)"
    )
    hourly_rank: Tuple[float, ...] = Field(
        default=(0.0,) * HOURS_PER_DAY,
        description="Rank per hour 00-23; 0 means no observation"
    )

    @model_validator(mode="before")
    @classmethod
    def _fold_wire_hours(cls, data: Any) -> Any:
        """Collect hour_00..hour_23 keys into hourly_rank."""
        if not isinstance(data, dict):
            return data
        if "hourly_rank" in data:
            return data
        if not any(key in data for key in HOUR_WIRE_KEYS):
            return data
        folded = {k: v for k, v in data.items() if k not in HOUR_WIRE_KEYS}
        folded["hourly_rank"] = [data.get(key) for key in HOUR_WIRE_KEYS]
        return folded

    @field_validator("hourly_rank", mode="before")
    @classmethod
    def _coerce_hours(cls, value: Any) -> Tuple[float, ...]:
        if value is None:
            return (0.0,) * HOURS_PER_DAY
        slots = list(value)
        if len(slots) > HOURS_PER_DAY:
            raise ValueError(
                f"hourly_rank has {len(slots)} slots; expected {HOURS_PER_DAY}"
            )
        slots.extend([0.0] * (HOURS_PER_DAY - len(slots)))
        return tuple(coerce_rank(v) for v in slots)

    @field_validator("average_rank", mode="before")
    @classmethod
    def _coerce_average(cls, value: Any) -> float:
        return coerce_rank(value)

    @field_validator("device_class", mode="before")
    @classmethod
    def _coerce_device(cls, value: Any) -> DeviceClass:
        return coerce_device_class(value)

    @field_validator("keyword", "entity_name", "reference_url", mode="before")
    @classmethod
    def _coerce_strings(cls, value: Any) -> str:
        return coerce_text(value)

    @model_serializer(mode="plain")
    def _serialize(self) -> Dict[str, Any]:
        return self.to_wire()

    def to_wire(self) -> Dict[str, Any]:
        """Return the flat dashboard form of this record."""
        wire: Dict[str, Any] = {
            "keyword": self.keyword,
            "ad_area": self.device_class.value,
            "advertiser": self.entity_name,
            "url": self.reference_url,
            "average": self.average_rank,
        }
        for key, value in zip(HOUR_WIRE_KEYS, self.hourly_rank):
            wire[key] = value
        return wire

    def observed_hours(self) -> List[Tuple[int, float]]:
        """(hour, rank) pairs for hours with an observation, ascending by hour."""
        return [(h, v) for h, v in enumerate(self.hourly_rank) if v > 0]


# =============================================================================
# Derived Statistics
# =============================================================================


class HourStat(BaseModel):
    """An hour label paired with the rank observed at that hour."""
    label: str = Field(
        ...,
        description="Hour label ('00시'..'23시') or '-' when nothing was observed"
    )
    value: float = Field(
        ...,
        ge=0.0,
        description="Rank at that hour (0 when nothing was observed)"
    )


class AggregatedMetrics(BaseModel):
    """
    Statistics over one record's observed (non-zero) hours.

    worst_hour is the numerically highest rank (worst position), best_hour the
    numerically lowest. Recomputed on demand, never stored.
    """
    worst_hour: HourStat = Field(
        ...,
        description="Hour with the highest non-zero rank; first hour wins ties"
    )
    best_hour: HourStat = Field(
        ...,
        description="Hour with the lowest non-zero rank; first hour wins ties"
    )
    variance: float = Field(
        ...,
        ge=0.0,
        description="Population variance over non-zero hourly ranks"
    )
    non_zero_average: float = Field(
        ...,
        ge=0.0,
        description="Mean over non-zero hourly ranks"
    )
    sample_count: int = Field(
        ...,
        ge=0,
        le=HOURS_PER_DAY,
        description="Number of observed hours"
    )


class RecordAnalysis(BaseModel):
    """One row of the per-record analysis table."""
    keyword: str
    device_class: DeviceClass
    entity_name: str
    reference_url: str
    average_rank: float
    worst_hour: str = Field(..., description="Label of the worst-rank hour")
    best_hour: str = Field(..., description="Label of the best-rank hour")
    variance: float = Field(..., ge=0.0, description="Variance rounded to 2 places")


class DeviceSummary(BaseModel):
    """Device-wide summary used by the device comparison block."""
    device_class: DeviceClass
    advertiser_count: int = Field(..., ge=0)
    average_rank: float = Field(
        ...,
        ge=0.0,
        description="Flattened mean over every non-zero hourly rank of the device"
    )
    competition_intensity: int = Field(..., ge=1, le=5)


# =============================================================================
# AI Insight Models
# =============================================================================


class CompetitorGroup(BaseModel):
    """A labelled group of competitor-dynamics observations."""
    label: str
    items: List[str] = Field(default_factory=list)


class GoldenWindow(BaseModel):
    """A favorable bidding window; multi-line values are joined with newlines."""
    label: str
    value: str


class NormalizedInsight(BaseModel):
    """
    Stable internal shape of the narrative AI insight.

    Every field is always a well-formed sequence, whatever the model returned.
    """
    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "overall": ["PC 경쟁 강도가 모바일보다 높습니다."],
                "media_asymmetry": [],
                "competitor_groups": [{"label": "상위권", "items": ["브랜드A"]}],
                "golden_windows": [{"label": "새벽", "value": "02시-05시"}],
                "action_items": ["새벽 시간대 입찰가 상향"],
            }
        }
    )

    overall: List[str] = Field(default_factory=list)
    media_asymmetry: List[str] = Field(default_factory=list)
    competitor_groups: List[CompetitorGroup] = Field(default_factory=list)
    golden_windows: List[GoldenWindow] = Field(default_factory=list)
    action_items: List[str] = Field(default_factory=list)


class RankScheduleRecommendation(BaseModel):
    """Recommended target rank for each hour, with the model's rationale."""
    target_rank_by_hour: Tuple[int, ...] = Field(
        default=(1,) * HOURS_PER_DAY,
        description="Positive target rank for hours 00-23"
    )
    rationale: List[str] = Field(default_factory=list)

    @field_validator("target_rank_by_hour")
    @classmethod
    def _check_slots(cls, value: Tuple[int, ...]) -> Tuple[int, ...]:
        if len(value) != HOURS_PER_DAY:
            raise ValueError(
                f"target_rank_by_hour has {len(value)} slots; expected {HOURS_PER_DAY}"
            )
        if any(rank < 1 for rank in value):
            raise ValueError("target ranks must be positive")
        return value


# =============================================================================
# Chart Models
# =============================================================================


class PlotPoint(BaseModel):
    """A (hour, rank) observation and its plot coordinates."""
    hour: int = Field(..., ge=0, le=HOURS_PER_DAY - 1)
    rank: float
    x: float
    y: float


class AxisTick(BaseModel):
    """Axis tick: the label value and its position along the axis."""
    value: int
    position: float


class ChartSeries(BaseModel):
    """One line of the rank chart."""
    label: str
    color: str
    points: List[PlotPoint] = Field(default_factory=list)
    path: Optional[str] = Field(
        default=None,
        description="SVG path data; omitted when fewer than 2 points exist"
    )
    stroke_dasharray: Optional[str] = None
    stroke_width: float = 2.0
    opacity: float = Field(default=1.0, ge=0.0, le=1.0)
    legend_opacity: float = Field(default=1.0, ge=0.0, le=1.0)
    is_overlay: bool = False


class RankChart(BaseModel):
    """Everything a renderer needs to draw the hourly rank chart for one device."""
    device_class: DeviceClass
    width: float
    height: float
    domain_max: int
    x_ticks: List[AxisTick] = Field(default_factory=list)
    x_grid: List[AxisTick] = Field(default_factory=list)
    y_ticks: List[AxisTick] = Field(default_factory=list)
    series: List[ChartSeries] = Field(default_factory=list)
    overlay: Optional[ChartSeries] = None
    selected_index: Optional[int] = None
    dataset_signature: str = Field(
        default="",
        description="Fingerprint of the charted records; send it back with a selection"
    )


# =============================================================================
# Report Models
# =============================================================================

ReportCell = Union[str, int, float]


class ReportBlock(BaseModel):
    """
    One titled table of the tabular report.

    The header is None for narrative blocks, whose rows are single-cell lines.
    """
    kind: ReportBlockKind
    sheet: ReportSheet
    title: str
    header: Optional[List[str]] = None
    rows: List[List[ReportCell]] = Field(default_factory=list)


class TabularReport(BaseModel):
    """Deterministic in-memory report; serialization is done by services.export."""
    blocks: List[ReportBlock] = Field(default_factory=list)

    def blocks_for(self, sheet: ReportSheet) -> List[ReportBlock]:
        """Blocks belonging to one sheet, in report order."""
        return [block for block in self.blocks if block.sheet == sheet]

    def blocks_of(self, kind: ReportBlockKind) -> List[ReportBlock]:
        """Blocks of one kind, in report order."""
        return [block for block in self.blocks if block.kind == kind]


# =============================================================================
# API Contracts
# =============================================================================


class AnalyzeRequest(BaseModel):
    """Request body of both analysis endpoints: ``{data: RankRecord[]}``."""
    data: List[RankRecord] = Field(default_factory=list)


class NarrativeAnalysisResponse(BaseModel):
    """Narrative analysis: the model's raw insight plus its normalized form."""
    insight: Dict[str, Any]
    normalized: NormalizedInsight


class RankScheduleResponse(BaseModel):
    """Hour-by-hour target rank analysis."""
    insight: Dict[str, Any]
    schedule: RankScheduleRecommendation


class UploadResponse(BaseModel):
    """Decoded spreadsheet."""
    records: List[RankRecord]
    row_count: int = Field(..., ge=0)
    keywords: List[str] = Field(default_factory=list)


class ChartRequest(BaseModel):
    """Request body of the chart endpoint."""
    records: List[RankRecord] = Field(default_factory=list)
    device_class: DeviceClass = DeviceClass.PC
    container_width: float = Field(default=800.0, gt=0)
    keywords: List[str] = Field(default_factory=list)
    target_ranks: Optional[List[Annotated[int, Field(ge=1)]]] = Field(
        default=None,
        description="Recommended target rank per hour (24 values, each >= 1) for the overlay"
    )
    selected_index: Optional[int] = Field(default=None, ge=0)
    dataset_signature: Optional[str] = Field(
        default=None,
        description="Signature of the chart the selection was made on"
    )


class ReportRequest(BaseModel):
    """Request body of the report endpoints."""
    records: List[RankRecord] = Field(default_factory=list)
    insight: Optional[Any] = Field(
        default=None,
        description="Raw insight as returned by the model; normalized on use"
    )


class SelectionRequest(BaseModel):
    """Keyword/device filter applied before CSV export."""
    records: List[RankRecord] = Field(default_factory=list)
    keywords: List[str] = Field(default_factory=list)
    include_pc: bool = True
    include_mobile: bool = True


class SessionResolution(BaseModel):
    """
    Result of the results-view guard.

    redirect_to is set (and the other fields empty) when the hand-off payload
    is missing or carries no records.
    """
    redirect_to: Optional[str] = None
    records: List[RankRecord] = Field(default_factory=list)
    insight: NormalizedInsight = Field(default_factory=NormalizedInsight)
    keywords: List[str] = Field(default_factory=list)
    summaries: List[DeviceSummary] = Field(default_factory=list)
