"""
Pytest tests for the rank metrics engine.

Test Categories:
- TestStatisticalHelpers: mean, population variance
- TestRecordMetrics: worst/best hour, tie-breaks, all-zero records
- TestGroupAverages: flattened vs two-stage averages
- TestCompetitionIntensity: the 1-5 heuristic
- TestDeviceSummary: advertiser count, average, intensity per device
- TestAnalyzeRecords: per-record analysis rows
"""

import pytest

from rank_compass.models import DeviceClass, NO_HOUR_LABEL
from rank_compass.services.metrics import (
    analyze_records,
    compute_competition_intensity,
    compute_entity_average,
    compute_group_average,
    compute_record_metrics,
    count_advertisers,
    mean,
    population_variance,
    summarize_device,
)


class TestStatisticalHelpers:
    """Tests for the basic statistics."""

    def test_mean_empty(self) -> None:
        assert mean([]) == 0.0

    def test_mean_normal(self) -> None:
        assert mean([2, 4, 6]) == 4.0

    def test_population_variance_uses_n(self) -> None:
        # Sample variance would be 2.0
        assert population_variance([2, 4]) == 1.0

    def test_single_sample_variance_is_zero(self) -> None:
        assert population_variance([7]) == 0.0

    def test_empty_variance_is_zero(self) -> None:
        assert population_variance([]) == 0.0


class TestRecordMetrics:
    """Tests for compute_record_metrics."""

    def test_all_zero_record(self, make_record) -> None:
        metrics = compute_record_metrics(make_record(hours=None))

        assert metrics.worst_hour.label == NO_HOUR_LABEL
        assert metrics.worst_hour.value == 0
        assert metrics.best_hour.label == NO_HOUR_LABEL
        assert metrics.best_hour.value == 0
        assert metrics.variance == 0
        assert metrics.non_zero_average == 0
        assert metrics.sample_count == 0

    def test_worst_is_highest_rank_best_is_lowest(self, make_record) -> None:
        metrics = compute_record_metrics(make_record(hours={2: 3, 7: 8, 15: 1}))

        assert metrics.worst_hour.label == "07시"
        assert metrics.worst_hour.value == 8
        assert metrics.best_hour.label == "15시"
        assert metrics.best_hour.value == 1
        assert metrics.worst_hour.value >= metrics.best_hour.value

    def test_zero_hours_are_ignored(self, make_record) -> None:
        metrics = compute_record_metrics(make_record(hours={10: 4}))

        assert metrics.best_hour.label == "10시"
        assert metrics.best_hour.value == 4
        assert metrics.worst_hour.label == "10시"
        assert metrics.sample_count == 1
        assert metrics.variance == 0.0

    def test_worst_tie_goes_to_earlier_hour(self, make_record) -> None:
        metrics = compute_record_metrics(make_record(hours={1: 6, 5: 6, 9: 2}))
        assert metrics.worst_hour.label == "01시"

    def test_best_tie_goes_to_earlier_hour(self, make_record) -> None:
        metrics = compute_record_metrics(make_record(hours={4: 1, 12: 1, 20: 3}))
        assert metrics.best_hour.label == "04시"

    def test_variance_and_average(self, make_record) -> None:
        metrics = compute_record_metrics(make_record(hours=[2, 4]))

        assert metrics.non_zero_average == 3.0
        assert metrics.variance == 1.0


class TestGroupAverages:
    """Flattened and two-stage averages must stay distinct."""

    def test_flattened_vs_two_stage(self, make_record) -> None:
        records = [
            make_record("A", hours=[2, 4]),
            make_record("B", hours=[10]),
        ]

        assert compute_group_average(records) == pytest.approx(16 / 3)
        assert round(compute_group_average(records), 2) == 5.33
        assert compute_entity_average(records) == pytest.approx(6.5)

    def test_empty_group(self) -> None:
        assert compute_group_average([]) == 0.0
        assert compute_entity_average([]) == 0.0

    def test_two_stage_skips_records_without_observations(self, make_record) -> None:
        records = [make_record(hours=[4]), make_record(hours=None)]
        assert compute_entity_average(records) == 4.0


class TestCompetitionIntensity:
    """Tests for the competition intensity heuristic."""

    def test_empty_group_scores_three(self) -> None:
        # Average 0 passes both rank steps
        assert compute_competition_intensity([]) == 3

    def test_few_advertisers_low_ranks(self, make_record) -> None:
        records = [make_record("A", hours=[8, 8])]
        assert compute_competition_intensity(records) == 1

    def test_ten_advertisers_mid_ranks(self, make_record) -> None:
        records = [make_record(f"A{i}", hours=[4]) for i in range(10)]
        assert compute_competition_intensity(records) == 3

    def test_clamped_to_five(self, make_record) -> None:
        records = [make_record(f"A{i}", hours=[2]) for i in range(25)]
        assert compute_competition_intensity(records) == 5

    def test_duplicate_names_count_once(self, make_record) -> None:
        records = [make_record("A", hours=[8]) for _ in range(12)]
        assert count_advertisers(records) == 1

    def test_unobserved_advertiser_not_counted(self, make_record) -> None:
        records = [make_record("A", hours=[3]), make_record("B", hours=None)]
        assert count_advertisers(records) == 1


class TestDeviceSummary:
    """Tests for summarize_device."""

    def test_summaries_are_per_device(self, sample_records) -> None:
        pc = summarize_device(sample_records, DeviceClass.PC)
        mobile = summarize_device(sample_records, DeviceClass.MOBILE)

        assert pc.advertiser_count == 2
        # 24 hours of rank 2 and 12 hours of rank 5
        assert pc.average_rank == pytest.approx((24 * 2 + 12 * 5) / 36)
        assert mobile.advertiser_count == 2
        assert mobile.average_rank == pytest.approx((12 * 1 + 3 + 4) / 14)

    def test_two_row_upload(self, two_row_upload) -> None:
        pc = summarize_device(two_row_upload, DeviceClass.PC)
        mobile = summarize_device(two_row_upload, DeviceClass.MOBILE)

        assert pc.advertiser_count == 1
        assert pc.average_rank == 4.0
        assert mobile.advertiser_count == 0
        assert mobile.average_rank == 0.0


class TestAnalyzeRecords:
    """Tests for the per-record analysis table."""

    def test_rows_follow_input_order(self, sample_records) -> None:
        rows = analyze_records(sample_records)
        assert [row.entity_name for row in rows] == ["브랜드A", "브랜드B", "브랜드A", "브랜드C"]

    def test_variance_rounded_to_two_places(self, make_record) -> None:
        rows = analyze_records([make_record(hours=[1, 2, 2])])

        assert rows[0].variance == 0.22
        assert rows[0].worst_hour == "01시"
        assert rows[0].best_hour == "00시"

    def test_empty_record_row(self, make_record) -> None:
        rows = analyze_records([make_record(hours=None)])

        assert rows[0].worst_hour == NO_HOUR_LABEL
        assert rows[0].best_hour == NO_HOUR_LABEL
        assert rows[0].variance == 0.0
