"""
Report Assembler

Builds the deterministic in-memory TabularReport the xlsx export is written
from. Layout of the report:

Sheet 01_Dashboard_&_Insight
    매체 비교        device comparison (advertiser count, average rank,
                     competition intensity per device and the absolute diff)
    광고주 비교      entity comparison (one row per advertiser, PC and
                     Mobile two-stage averages, absolute diff)
    전체 분석 / 매체 비대칭 / 순위 변동 / 최적 입찰시간대 / 입찰 전략
                     one narrative block per insight section

Sheet 02_PC_Detail_Log, 03_Mobile_Detail_Log
    원본 데이터      raw hourly ranks per record, sorted by the record's own
                     non-zero average

Averages are rounded to 1 decimal place here, at the presentation boundary.
"""

import logging
from collections import OrderedDict
from typing import Dict, List, Optional, Sequence, Tuple

from rank_compass.models import (
    DeviceClass,
    HOUR_LABELS,
    NormalizedInsight,
    RankRecord,
    ReportBlock,
    ReportBlockKind,
    ReportCell,
    ReportSheet,
    TabularReport,
)
from rank_compass.services.metrics import (
    compute_entity_average,
    records_for_device,
    summarize_device,
)

# Configure module logger
logger = logging.getLogger(__name__)

# =============================================================================
# CONSTANTS - Labels
# =============================================================================

DEVICE_COMPARISON_TITLE: str = "매체 비교"
DEVICE_COMPARISON_HEADER: List[str] = ["구분", "PC", "Mobile", "차이(절댓값)"]
ADVERTISER_COUNT_LABEL: str = "전체 광고주 수"
AVERAGE_RANK_LABEL: str = "평균 순위"
INTENSITY_LABEL: str = "경쟁 강도(1~5)"

ENTITY_COMPARISON_TITLE: str = "광고주 비교"
ENTITY_COMPARISON_HEADER: List[str] = [
    "광고주", "URL", "PC 평균 순위", "Mobile 평균 순위", "차이(절댓값)",
]

OVERALL_TITLE: str = "전체 분석"
MEDIA_ASYMMETRY_TITLE: str = "매체 비대칭"
COMPETITOR_TITLE: str = "순위 변동"
GOLDEN_TIME_TITLE: str = "최적 입찰시간대"
ACTION_ITEMS_TITLE: str = "입찰 전략"

DETAIL_TITLE: str = "원본 데이터"
DETAIL_HEADER: List[str] = ["순위", "광고주", "URL", "평균 순위"] + HOUR_LABELS

EMPTY_GROUP_MARKER: str = "-"

DETAIL_SHEETS: Dict[DeviceClass, ReportSheet] = {
    DeviceClass.PC: ReportSheet.PC_DETAIL,
    DeviceClass.MOBILE: ReportSheet.MOBILE_DETAIL,
}


def _round1(value: float) -> float:
    return round(value, 1)


# =============================================================================
# Dashboard Blocks
# =============================================================================


def build_device_comparison(records: Sequence[RankRecord]) -> ReportBlock:
    """
    Device comparison block.

    Average rank is the single-stage (flattened) device average; the diff
    column is the absolute difference between the PC and Mobile values.
    """
    pc = summarize_device(records, DeviceClass.PC)
    mobile = summarize_device(records, DeviceClass.MOBILE)

    rows: List[List[ReportCell]] = [
        [
            ADVERTISER_COUNT_LABEL,
            pc.advertiser_count,
            mobile.advertiser_count,
            abs(pc.advertiser_count - mobile.advertiser_count),
        ],
        [
            AVERAGE_RANK_LABEL,
            _round1(pc.average_rank),
            _round1(mobile.average_rank),
            _round1(abs(pc.average_rank - mobile.average_rank)),
        ],
        [
            INTENSITY_LABEL,
            pc.competition_intensity,
            mobile.competition_intensity,
            abs(pc.competition_intensity - mobile.competition_intensity),
        ],
    ]

    return ReportBlock(
        kind=ReportBlockKind.DEVICE_COMPARISON,
        sheet=ReportSheet.DASHBOARD,
        title=DEVICE_COMPARISON_TITLE,
        header=list(DEVICE_COMPARISON_HEADER),
        rows=rows,
    )


def build_entity_comparison(records: Sequence[RankRecord]) -> ReportBlock:
    """
    Entity comparison block.

    Records are grouped by advertiser name in first-seen order. Each side is
    the two-stage average of the advertiser's records on that device, 0 when
    the advertiser has none there. The URL comes from the first PC record,
    else the first Mobile record. Rows are sorted ascending by the absolute
    difference; equal differences keep first-seen order.

    Args:
        records: All records

    Returns:
        ReportBlock with one row per distinct advertiser
    """
    grouped: "OrderedDict[str, Dict[DeviceClass, List[RankRecord]]]" = OrderedDict()
    for record in records:
        entry = grouped.setdefault(
            record.entity_name,
            {DeviceClass.PC: [], DeviceClass.MOBILE: []},
        )
        entry[record.device_class].append(record)

    keyed_rows: List[Tuple[float, List[ReportCell]]] = []
    for entity_name, by_device in grouped.items():
        pc_records = by_device[DeviceClass.PC]
        mobile_records = by_device[DeviceClass.MOBILE]

        pc_avg = compute_entity_average(pc_records) if pc_records else 0.0
        mobile_avg = compute_entity_average(mobile_records) if mobile_records else 0.0

        if pc_records:
            url = pc_records[0].reference_url
        elif mobile_records:
            url = mobile_records[0].reference_url
        else:
            url = ""

        diff = abs(pc_avg - mobile_avg)
        keyed_rows.append((diff, [
            entity_name,
            url,
            _round1(pc_avg),
            _round1(mobile_avg),
            _round1(diff),
        ]))

    # Sort on the unrounded difference
    keyed_rows.sort(key=lambda pair: pair[0])
    rows = [row for _, row in keyed_rows]

    return ReportBlock(
        kind=ReportBlockKind.ENTITY_COMPARISON,
        sheet=ReportSheet.DASHBOARD,
        title=ENTITY_COMPARISON_TITLE,
        header=list(ENTITY_COMPARISON_HEADER),
        rows=rows,
    )


def _narrative_block(title: str, lines: Sequence[str]) -> ReportBlock:
    return ReportBlock(
        kind=ReportBlockKind.NARRATIVE,
        sheet=ReportSheet.DASHBOARD,
        title=title,
        rows=[[line] for line in lines],
    )


def build_narrative_blocks(insight: NormalizedInsight) -> List[ReportBlock]:
    """
    One narrative block per insight section, in dashboard order.

    Competitor groups are written as the group label followed by ``- item``
    lines, or a single ``-`` for an empty group. Golden windows are written
    as ``label: value``.
    """
    competitor_lines: List[str] = []
    for group in insight.competitor_groups:
        competitor_lines.append(group.label)
        if group.items:
            competitor_lines.extend(f"- {item}" for item in group.items)
        else:
            competitor_lines.append(EMPTY_GROUP_MARKER)

    golden_lines = [
        f"{window.label}: {window.value or EMPTY_GROUP_MARKER}"
        for window in insight.golden_windows
    ]

    return [
        _narrative_block(OVERALL_TITLE, insight.overall),
        _narrative_block(MEDIA_ASYMMETRY_TITLE, insight.media_asymmetry),
        _narrative_block(COMPETITOR_TITLE, competitor_lines),
        _narrative_block(GOLDEN_TIME_TITLE, golden_lines),
        _narrative_block(ACTION_ITEMS_TITLE, insight.action_items),
    ]


# =============================================================================
# Detail Blocks
# =============================================================================


def build_detail_block(
    records: Sequence[RankRecord],
    device_class: DeviceClass
) -> ReportBlock:
    """
    Raw hourly ranks of one device.

    Rows are sorted ascending by each record's own non-zero average (records
    without observations average 0 and come first); the sort is stable. The
    first column is the 1-based position after sorting.
    """
    device_records = records_for_device(records, device_class)
    ranked = sorted(
        ((compute_entity_average([record]), record) for record in device_records),
        key=lambda pair: pair[0],
    )

    rows: List[List[ReportCell]] = []
    for position, (avg, record) in enumerate(ranked, start=1):
        row: List[ReportCell] = [
            position,
            record.entity_name,
            record.reference_url,
            _round1(avg),
        ]
        row.extend(_round1(value) for value in record.hourly_rank)
        rows.append(row)

    return ReportBlock(
        kind=ReportBlockKind.DETAIL,
        sheet=DETAIL_SHEETS[device_class],
        title=DETAIL_TITLE,
        header=list(DETAIL_HEADER),
        rows=rows,
    )


# =============================================================================
# Report Assembly
# =============================================================================


def assemble_report(
    records: Sequence[RankRecord],
    insight: Optional[NormalizedInsight] = None
) -> TabularReport:
    """
    Assemble the full tabular report.

    Args:
        records: All uploaded records
        insight: Normalized narrative insight; None writes empty sections

    Returns:
        TabularReport with dashboard, PC detail and Mobile detail blocks
    """
    if insight is None:
        insight = NormalizedInsight()

    blocks: List[ReportBlock] = [
        build_device_comparison(records),
        build_entity_comparison(records),
    ]
    blocks.extend(build_narrative_blocks(insight))
    blocks.append(build_detail_block(records, DeviceClass.PC))
    blocks.append(build_detail_block(records, DeviceClass.MOBILE))

    logger.info(f"Assembled report: {len(records)} records, {len(blocks)} blocks")

    return TabularReport(blocks=blocks)
