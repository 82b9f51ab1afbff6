"""
Rank Metrics Engine

Pure functions computing statistics over hourly rank series. Every function
only looks at observed hours (rank > 0); the 0 sentinel never enters an
average, a variance, or an hour statistic.

Two group averages are provided and must not be conflated:
- compute_group_average: single-stage, flattens every non-zero hourly rank of
  the group and takes one mean (device-wide summaries)
- compute_entity_average: two-stage, averages each record's own non-zero mean
  (per-advertiser comparison)

For hours [2, 4] in one record and [10] in another the first gives
(2 + 4 + 10) / 3 = 5.33 and the second (3 + 10) / 2 = 6.5.

Rounding is left to presentation code (report, analysis table).
"""

from typing import Iterable, List, Sequence, Tuple

import numpy as np

from rank_compass.models import (
    AggregatedMetrics,
    DeviceClass,
    DeviceSummary,
    HOUR_LABELS,
    HourStat,
    NO_HOUR_LABEL,
    RankRecord,
    RecordAnalysis,
)


# =============================================================================
# CONSTANTS - Competition Intensity Heuristic
# =============================================================================

INTENSITY_MIN: int = 1
INTENSITY_MAX: int = 5

# Distinct advertiser counts that each add one intensity point
INTENSITY_ADVERTISER_STEPS: Tuple[int, ...] = (10, 20)

# Average ranks at or below which each add one intensity point
INTENSITY_RANK_STEPS: Tuple[float, ...] = (5.0, 3.0)


# =============================================================================
# Statistical Helpers
# =============================================================================


def mean(values: Sequence[float]) -> float:
    """
    Arithmetic mean.

    Returns:
        Mean of the values, or 0 for an empty sequence
    """
    if not values:
        return 0.0
    return float(np.mean(values))


def population_variance(values: Sequence[float]) -> float:
    """
    Population variance (mean of squared deviations, denominator n).

    A single sample yields 0; an empty sequence yields 0.
    """
    if not values:
        return 0.0
    return float(np.var(values))


def non_zero_values(records: Iterable[RankRecord]) -> List[float]:
    """Every observed hourly rank across the records, in record then hour order."""
    values: List[float] = []
    for record in records:
        values.extend(v for v in record.hourly_rank if v > 0)
    return values


def _empty_hour() -> HourStat:
    return HourStat(label=NO_HOUR_LABEL, value=0.0)


# =============================================================================
# Per-Record Metrics
# =============================================================================


def compute_record_metrics(record: RankRecord) -> AggregatedMetrics:
    """
    Compute worst/best hour, variance and non-zero average for one record.

    Hours are scanned 0 -> 23 and a later hour only replaces the current
    worst (best) when strictly greater (smaller), so the earliest hour wins
    ties. A record with no observations yields ``{"-", 0}`` for both hours
    and 0 for variance and average.

    Args:
        record: The rank record

    Returns:
        AggregatedMetrics for the record
    """
    observed = [(HOUR_LABELS[h], v) for h, v in record.observed_hours()]

    if not observed:
        return AggregatedMetrics(
            worst_hour=_empty_hour(),
            best_hour=_empty_hour(),
            variance=0.0,
            non_zero_average=0.0,
            sample_count=0,
        )

    worst = observed[0]
    best = observed[0]
    for entry in observed[1:]:
        if entry[1] > worst[1]:
            worst = entry
        if entry[1] < best[1]:
            best = entry

    values = [v for _, v in observed]

    return AggregatedMetrics(
        worst_hour=HourStat(label=worst[0], value=worst[1]),
        best_hour=HourStat(label=best[0], value=best[1]),
        variance=population_variance(values),
        non_zero_average=mean(values),
        sample_count=len(values),
    )


def analyze_records(records: Sequence[RankRecord]) -> List[RecordAnalysis]:
    """
    Build the per-record analysis table.

    One row per record, in input order, with the worst/best hour labels and
    the variance rounded to 2 decimal places.
    """
    rows: List[RecordAnalysis] = []
    for record in records:
        metrics = compute_record_metrics(record)
        rows.append(RecordAnalysis(
            keyword=record.keyword,
            device_class=record.device_class,
            entity_name=record.entity_name,
            reference_url=record.reference_url,
            average_rank=record.average_rank,
            worst_hour=metrics.worst_hour.label,
            best_hour=metrics.best_hour.label,
            variance=round(metrics.variance, 2),
        ))
    return rows


# =============================================================================
# Group Metrics
# =============================================================================


def compute_group_average(records: Sequence[RankRecord]) -> float:
    """
    Single-stage average: mean over every non-zero hourly rank in the group.

    Records with more observed hours weigh more. Returns 0 when the group has
    no observations.
    """
    return mean(non_zero_values(records))


def compute_entity_average(records: Sequence[RankRecord]) -> float:
    """
    Two-stage average: mean of each record's own non-zero average.

    Records without any observation have no average and are skipped. Returns 0
    when no record has an observation.
    """
    per_record = [
        mean([v for v in record.hourly_rank if v > 0])
        for record in records
        if any(v > 0 for v in record.hourly_rank)
    ]
    return mean(per_record)


def count_advertisers(records: Iterable[RankRecord]) -> int:
    """
    Number of distinct advertiser names with at least one observed hour.

    An advertiser whose rows are all 0 never appeared in the placement and is
    not counted.
    """
    return len({
        record.entity_name for record in records
        if any(v > 0 for v in record.hourly_rank)
    })


def compute_competition_intensity(records: Sequence[RankRecord]) -> int:
    """
    Competition intensity score in [1, 5].

    Starts at 1; +1 for >= 10 distinct advertisers, +1 more for >= 20;
    +1 when the group average rank is <= 5, +1 more when <= 3. The group
    average is the single-stage one.
    """
    advertiser_count = count_advertisers(records)
    avg_rank = compute_group_average(records)

    intensity = INTENSITY_MIN
    for step in INTENSITY_ADVERTISER_STEPS:
        if advertiser_count >= step:
            intensity += 1
    for step in INTENSITY_RANK_STEPS:
        if avg_rank <= step:
            intensity += 1

    return min(intensity, INTENSITY_MAX)


def records_for_device(
    records: Iterable[RankRecord],
    device_class: DeviceClass
) -> List[RankRecord]:
    """Records observed on one device, in input order."""
    return [record for record in records if record.device_class == device_class]


def summarize_device(
    records: Sequence[RankRecord],
    device_class: DeviceClass
) -> DeviceSummary:
    """
    Device-wide summary: advertiser count, flattened average, intensity.

    Args:
        records: All records; only those on device_class are considered
        device_class: Device to summarize

    Returns:
        DeviceSummary for the device
    """
    device_records = records_for_device(records, device_class)
    return DeviceSummary(
        device_class=device_class,
        advertiser_count=count_advertisers(device_records),
        average_rank=compute_group_average(device_records),
        competition_intensity=compute_competition_intensity(device_records),
    )
