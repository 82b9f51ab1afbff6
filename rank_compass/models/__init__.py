"""
Package initialization file for backend models.

Exports all Pydantic schemas and enumerations from schemas.py and enums.py so
other modules can import them from rank_compass.models directly.

Usage:
    from rank_compass.models import DeviceClass, RankRecord, NormalizedInsight
"""

# =============================================================================
# Enums
# =============================================================================

from rank_compass.models.enums import (
    DeviceClass,
    ReportSheet,
    ReportBlockKind,
)

# =============================================================================
# Schemas
# =============================================================================

from rank_compass.models.schemas import (
    # Hour layout and coercion helpers
    HOURS_PER_DAY,
    HOUR_LABELS,
    HOUR_WIRE_KEYS,
    NO_HOUR_LABEL,
    coerce_rank,
    coerce_text,
    coerce_device_class,
    # Core domain model
    RankRecord,
    # Derived statistics
    HourStat,
    AggregatedMetrics,
    RecordAnalysis,
    DeviceSummary,
    # AI insight models
    CompetitorGroup,
    GoldenWindow,
    NormalizedInsight,
    RankScheduleRecommendation,
    # Chart models
    PlotPoint,
    AxisTick,
    ChartSeries,
    RankChart,
    # Report models
    ReportCell,
    ReportBlock,
    TabularReport,
    # API contracts
    AnalyzeRequest,
    NarrativeAnalysisResponse,
    RankScheduleResponse,
    UploadResponse,
    ChartRequest,
    ReportRequest,
    SelectionRequest,
    SessionResolution,
)


__all__ = [
    "DeviceClass",
    "ReportSheet",
    "ReportBlockKind",
    "HOURS_PER_DAY",
    "HOUR_LABELS",
    "HOUR_WIRE_KEYS",
    "NO_HOUR_LABEL",
    "coerce_rank",
    "coerce_text",
    "coerce_device_class",
    "RankRecord",
    "HourStat",
    "AggregatedMetrics",
    "RecordAnalysis",
    "DeviceSummary",
    "CompetitorGroup",
    "GoldenWindow",
    "NormalizedInsight",
    "RankScheduleRecommendation",
    "PlotPoint",
    "AxisTick",
    "ChartSeries",
    "RankChart",
    "ReportCell",
    "ReportBlock",
    "TabularReport",
    "AnalyzeRequest",
    "NarrativeAnalysisResponse",
    "RankScheduleResponse",
    "UploadResponse",
    "ChartRequest",
    "ReportRequest",
    "SelectionRequest",
    "SessionResolution",
]
