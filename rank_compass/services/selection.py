"""
Record selection for the results view.

Keyword/device filtering, keyword search, the advertiser list of a chart tab,
and the record subset sent for a rank-schedule recommendation.
"""

from typing import Iterable, List, Optional, Sequence

from rank_compass.models import DeviceClass, RankRecord
from rank_compass.services.metrics import records_for_device

# Advertiser choice meaning "exclude nobody" in the recommendation dialog
NO_EXCLUSION: str = "없음"


def _unique(values: Iterable[str]) -> List[str]:
    return list(dict.fromkeys(values))


def distinct_keywords(records: Sequence[RankRecord]) -> List[str]:
    """Distinct keywords in first-seen order."""
    return _unique(record.keyword for record in records)


def search_keywords(keywords: Sequence[str], query: str) -> List[str]:
    """Keywords containing the query, case-insensitively; a blank query matches all."""
    needle = query.strip().lower()
    if not needle:
        return list(keywords)
    return [keyword for keyword in keywords if needle in keyword.lower()]


def filter_records(
    records: Sequence[RankRecord],
    keywords: Optional[Sequence[str]] = None,
    include_pc: bool = True,
    include_mobile: bool = True
) -> List[RankRecord]:
    """
    Records matching the keyword and device selection, in input order.

    Args:
        records: All records
        keywords: Keywords to keep; empty or None keeps every keyword
        include_pc: Keep PC records
        include_mobile: Keep Mobile records

    Returns:
        Matching records; empty when neither device is selected
    """
    devices = set()
    if include_pc:
        devices.add(DeviceClass.PC)
    if include_mobile:
        devices.add(DeviceClass.MOBILE)
    if not devices:
        return []

    wanted = set(keywords or [])
    return [
        record for record in records
        if record.device_class in devices
        and (not wanted or record.keyword in wanted)
    ]


def advertisers_for(
    records: Sequence[RankRecord],
    device_class: DeviceClass
) -> List[str]:
    """Distinct advertisers charted on one device tab, in first-seen order."""
    return _unique(record.entity_name for record in records_for_device(records, device_class))


def build_schedule_payload(
    records: Sequence[RankRecord],
    device_class: DeviceClass,
    exclude_advertiser: Optional[str] = None
) -> List[RankRecord]:
    """
    Records sent for a rank-schedule recommendation.

    Keeps the records of the viewed device and drops the excluded advertiser,
    typically the user's own brand. None or '없음' excludes nobody.
    """
    excluded = None if exclude_advertiser in (None, NO_EXCLUSION) else exclude_advertiser
    return [
        record for record in records_for_device(records, device_class)
        if excluded is None or record.entity_name != excluded
    ]
