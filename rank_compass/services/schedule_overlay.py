"""
Schedule Overlay Mapper

Maps hourly ranks onto plot coordinates for the dashboard's rank chart.

Coordinate system (inner plot area, origin top-left):
- x = hour / 23 * width, hour 0 on the left edge and hour 23 on the right
- y = (min(rank, domain_max) - 1) / (domain_max - 1) * height, rank 1 on the
  top edge and domain_max on the bottom edge

The rank domain is fixed per device: 1-10 on PC, 1-5 on Mobile. Ranks past
the domain are drawn on the bottom edge, never off-canvas.

Series:
- one line per observed record, connecting only observed hours; a record with
  fewer than 2 observed hours has markers but no path
- an optional overlay line for the recommended schedule, defined on all 24
  hours and drawn dashed

Highlighting dims every other line without touching the data. The selection
only survives while the dataset signature the client sends matches the data
being charted.
"""

import hashlib
import json
import logging
from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence

from rank_compass.models import (
    AxisTick,
    ChartSeries,
    DeviceClass,
    HOURS_PER_DAY,
    PlotPoint,
    RankChart,
    RankRecord,
)
from rank_compass.services.metrics import records_for_device

# Configure module logger
logger = logging.getLogger(__name__)

# =============================================================================
# CONSTANTS - Chart Geometry
# =============================================================================

LAST_HOUR: int = HOURS_PER_DAY - 1

DOMAIN_MAX: Dict[DeviceClass, int] = {
    DeviceClass.PC: 10,
    DeviceClass.MOBILE: 5,
}

SVG_HEIGHT: float = 340.0
MARGIN_TOP: float = 20.0
MARGIN_RIGHT: float = 24.0
MARGIN_BOTTOM: float = 44.0
MARGIN_LEFT: float = 48.0
MIN_PLOT_WIDTH: float = 100.0

# Hours with a vertical grid line
GRID_HOURS: List[int] = [0, 6, 12, 18, 23]

# =============================================================================
# CONSTANTS - Series Styling
# =============================================================================

CHART_COLORS: List[str] = [
    '#3b82f6', '#f59e0b', '#10b981', '#ef4444', '#8b5cf6',
    '#f97316', '#06b6d4', '#84cc16', '#ec4899', '#64748b',
]

OVERLAY_LABEL: str = "AI 추천 순위"
OVERLAY_COLOR: str = '#18181b'
OVERLAY_DASHARRAY: str = "8 4"
OVERLAY_STROKE_WIDTH: float = 2.5

STROKE_WIDTH: float = 2.0
HIGHLIGHT_STROKE_WIDTH: float = 3.0
DIMMED_OPACITY: float = 0.2
DIMMED_LEGEND_OPACITY: float = 0.35


@dataclass(frozen=True)
class PlotArea:
    """
    Inner drawing area of the chart in pixels.

    Attributes:
        width: Width available to the hour axis
        height: Height available to the rank axis
    """
    width: float
    height: float

    @classmethod
    def for_container(cls, container_width: float) -> "PlotArea":
        """Plot area inside a container of the given width, using the dashboard margins."""
        width = max(container_width - MARGIN_LEFT - MARGIN_RIGHT, MIN_PLOT_WIDTH)
        height = SVG_HEIGHT - MARGIN_TOP - MARGIN_BOTTOM
        return cls(width=width, height=height)


# =============================================================================
# Coordinate Mapping
# =============================================================================


def domain_max(device_class: DeviceClass) -> int:
    """Largest rank drawn on the chart for a device."""
    return DOMAIN_MAX[device_class]


def hour_to_x(hour: int, plot: PlotArea) -> float:
    """
    Horizontal position of an hour.

    Raises:
        ValueError: If hour is outside 0-23
    """
    if not 0 <= hour <= LAST_HOUR:
        raise ValueError(f"hour must be within 0-{LAST_HOUR}, got {hour}")
    return (hour / LAST_HOUR) * plot.width


def rank_to_y(rank: float, device_class: DeviceClass, plot: PlotArea) -> float:
    """Vertical position of a rank, clamped to 1..domain_max so y stays within the plot."""
    max_rank = domain_max(device_class)
    clamped = min(max(rank, 1), max_rank)
    return ((clamped - 1) / (max_rank - 1)) * plot.height


def map_to_plot(
    hour: int,
    rank: float,
    device_class: DeviceClass,
    plot: PlotArea
) -> PlotPoint:
    """
    Map one (hour, rank) pair onto the plot.

    Args:
        hour: Hour of day, 0-23
        rank: Observed or recommended rank
        device_class: Selects the rank domain (PC 1-10, Mobile 1-5)
        plot: Inner plot area

    Returns:
        PlotPoint carrying the original rank and its x/y coordinates
    """
    return PlotPoint(
        hour=hour,
        rank=rank,
        x=hour_to_x(hour, plot),
        y=rank_to_y(rank, device_class, plot),
    )


def _fmt(value: float) -> str:
    text = f"{value:.2f}".rstrip("0").rstrip(".")
    return text if text != "-0" else "0"


def build_path(points: Sequence[PlotPoint]) -> Optional[str]:
    """
    SVG path data through the points in order.

    Returns:
        "M x y L x y ..." or None when fewer than 2 points are given
    """
    if len(points) < 2:
        return None
    commands = [
        f"{'M' if idx == 0 else 'L'} {_fmt(p.x)} {_fmt(p.y)}"
        for idx, p in enumerate(points)
    ]
    return " ".join(commands)


# =============================================================================
# Series Construction
# =============================================================================


def build_entity_series(
    records: Sequence[RankRecord],
    device_class: DeviceClass,
    plot: PlotArea
) -> List[ChartSeries]:
    """
    One series per record observed on the device.

    Points cover observed hours only, ascending by hour. Colors cycle through
    the chart palette by series index.
    """
    series: List[ChartSeries] = []
    for idx, record in enumerate(records_for_device(records, device_class)):
        points = [
            map_to_plot(hour, rank, device_class, plot)
            for hour, rank in record.observed_hours()
        ]
        series.append(ChartSeries(
            label=record.entity_name,
            color=CHART_COLORS[idx % len(CHART_COLORS)],
            points=points,
            path=build_path(points),
            stroke_width=STROKE_WIDTH,
        ))
    return series


def build_overlay_series(
    target_ranks: Sequence[int],
    device_class: DeviceClass,
    plot: PlotArea
) -> ChartSeries:
    """
    The recommended-schedule line, defined on every hour.

    Raises:
        ValueError: If target_ranks does not hold exactly 24 values
    """
    if len(target_ranks) != HOURS_PER_DAY:
        raise ValueError(
            f"target_ranks must hold {HOURS_PER_DAY} values, got {len(target_ranks)}"
        )
    points = [
        map_to_plot(hour, rank, device_class, plot)
        for hour, rank in enumerate(target_ranks)
    ]
    return ChartSeries(
        label=OVERLAY_LABEL,
        color=OVERLAY_COLOR,
        points=points,
        path=build_path(points),
        stroke_dasharray=OVERLAY_DASHARRAY,
        stroke_width=OVERLAY_STROKE_WIDTH,
        is_overlay=True,
    )


# =============================================================================
# Highlight Semantics
# =============================================================================


def apply_highlight(
    series: Sequence[ChartSeries],
    selected_index: Optional[int]
) -> List[ChartSeries]:
    """
    Apply a selection to the observed series.

    The selected series is drawn thicker; every other series is dimmed. With
    no selection all series are drawn normally. Points and paths are left
    untouched.
    """
    highlighted: List[ChartSeries] = []
    for idx, item in enumerate(series):
        is_selected = selected_index == idx
        is_dimmed = selected_index is not None and not is_selected
        highlighted.append(item.model_copy(update={
            "opacity": DIMMED_OPACITY if is_dimmed else 1.0,
            "legend_opacity": DIMMED_LEGEND_OPACITY if is_dimmed else 1.0,
            "stroke_width": HIGHLIGHT_STROKE_WIDTH if is_selected else STROKE_WIDTH,
        }))
    return highlighted


def dataset_signature(records: Sequence[RankRecord]) -> str:
    """Stable fingerprint of a chart dataset; changes whenever the data does."""
    payload = json.dumps(
        [record.to_wire() for record in records],
        ensure_ascii=False,
        sort_keys=True,
    )
    return hashlib.sha1(payload.encode("utf-8")).hexdigest()


@dataclass
class HighlightState:
    """
    Selection of one observed series, bound to the dataset it was made on.

    Attributes:
        signature: dataset_signature of the charted records
        selected_index: Highlighted series, or None
    """
    signature: str = ""
    selected_index: Optional[int] = None

    def sync(self, signature: str) -> None:
        """Drop the selection when the dataset has changed."""
        if signature != self.signature:
            self.signature = signature
            self.selected_index = None

    def toggle(self, index: int) -> Optional[int]:
        """Legend click: clicking the selected series again clears the selection."""
        self.selected_index = None if self.selected_index == index else index
        return self.selected_index


# =============================================================================
# Chart Assembly
# =============================================================================


def build_rank_chart(
    records: Sequence[RankRecord],
    device_class: DeviceClass,
    container_width: float = 800.0,
    target_ranks: Optional[Sequence[int]] = None,
    selected_index: Optional[int] = None,
    client_signature: Optional[str] = None,
) -> RankChart:
    """
    Build the complete rank chart payload for one device.

    Args:
        records: Records to chart; only those on device_class are drawn
        device_class: Device tab being viewed
        container_width: Width of the chart container in pixels
        target_ranks: Optional 24 recommended ranks for the overlay line
        selected_index: Series the user highlighted, if any
        client_signature: Dataset signature the selection was made on

    Returns:
        RankChart with ticks, series, overlay and the effective selection
    """
    plot = PlotArea.for_container(container_width)
    device_records = records_for_device(records, device_class)
    signature = dataset_signature(device_records)

    series = build_entity_series(device_records, device_class, plot)
    state = HighlightState(signature=client_signature or "", selected_index=selected_index)
    state.sync(signature)
    if state.selected_index is not None and state.selected_index >= len(series):
        state.selected_index = None
    selection = state.selected_index
    if selected_index is not None and selection is None:
        logger.info("Chart selection reset: dataset changed or index out of range")

    overlay = None
    if target_ranks is not None:
        overlay = build_overlay_series(target_ranks, device_class, plot)

    max_rank = domain_max(device_class)

    return RankChart(
        device_class=device_class,
        width=plot.width,
        height=plot.height,
        domain_max=max_rank,
        x_ticks=[AxisTick(value=h, position=hour_to_x(h, plot)) for h in range(HOURS_PER_DAY)],
        x_grid=[AxisTick(value=h, position=hour_to_x(h, plot)) for h in GRID_HOURS],
        y_ticks=[
            AxisTick(value=r, position=rank_to_y(r, device_class, plot))
            for r in range(1, max_rank + 1)
        ],
        series=apply_highlight(series, selection),
        overlay=overlay,
        selected_index=selection,
        dataset_signature=signature,
    )
