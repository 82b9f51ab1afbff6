"""
Pytest Configuration and Shared Fixtures for Rank Compass Tests.

This module provides fixtures for all backend tests, supporting:
- Async test execution with pytest-asyncio
- RankRecord factories and representative record sets
- Settings with a test API key (no .env lookup)
- Fake Anthropic Messages API responses for the language-model client
- In-memory spreadsheet generation (xlsx via openpyxl, xls via xlwt, csv via pandas)

Dependencies:
- pytest
- pytest-asyncio
- pandas / openpyxl / xlwt
"""

from io import BytesIO
from typing import Any, Callable, Dict, List, Optional, Sequence, Union
from unittest.mock import Mock

import pandas as pd
import pytest
import requests
import xlwt

from rank_compass.core.config import Settings
from rank_compass.models import HOUR_LABELS, HOURS_PER_DAY, RankRecord


HourSpec = Union[Sequence[float], Dict[int, float], None]


def build_hours(hours: HourSpec) -> List[float]:
    """
    Expand hour ranks into 24 slots.

    Accepts a list (padded with 0) or a {hour: rank} mapping.
    """
    if hours is None:
        return [0.0] * HOURS_PER_DAY
    if isinstance(hours, dict):
        slots = [0.0] * HOURS_PER_DAY
        for hour, rank in hours.items():
            slots[hour] = rank
        return slots
    slots = list(hours)
    return slots + [0.0] * (HOURS_PER_DAY - len(slots))


# ============================================================
# RECORD FIXTURES
# ============================================================

@pytest.fixture
def make_record() -> Callable[..., RankRecord]:
    """
    Factory for RankRecord objects.

    Usage:
        def test_x(make_record):
            record = make_record("브랜드A", "PC", {2: 3, 3: 5})
    """
    def _make(
        entity_name: str = "브랜드A",
        device_class: str = "PC",
        hours: HourSpec = None,
        keyword: str = "운동화",
        reference_url: Optional[str] = None,
        average_rank: float = 0.0,
    ) -> RankRecord:
        return RankRecord(
            keyword=keyword,
            device_class=device_class,
            entity_name=entity_name,
            reference_url=reference_url if reference_url is not None else f"https://{entity_name}.example.com",
            average_rank=average_rank,
            hourly_rank=build_hours(hours),
        )

    return _make


@pytest.fixture
def sample_records(make_record: Callable[..., RankRecord]) -> List[RankRecord]:
    """
    Mixed PC/Mobile records over two keywords.

    - 브랜드A: PC and Mobile, steady top ranks
    - 브랜드B: PC only, drops out at night
    - 브랜드C: Mobile only, second keyword
    """
    return [
        make_record("브랜드A", "PC", {h: 2 for h in range(24)}, average_rank=2.0),
        make_record("브랜드B", "PC", {h: 5 for h in range(8, 20)}, average_rank=5.0),
        make_record("브랜드A", "Mobile", {h: 1 for h in range(12)}, average_rank=1.0),
        make_record("브랜드C", "Mobile", {0: 3, 1: 4}, keyword="러닝화", average_rank=3.5),
    ]


@pytest.fixture
def two_row_upload(make_record: Callable[..., RankRecord]) -> List[RankRecord]:
    """One advertiser: PC ranks [0,0,3,5,0,...] and an all-zero Mobile row."""
    return [
        make_record("브랜드A", "PC", [0, 0, 3, 5]),
        make_record("브랜드A", "Mobile", None),
    ]


# ============================================================
# SETTINGS FIXTURES
# ============================================================

@pytest.fixture
def mock_settings() -> Settings:
    """
    Settings with a usable test API key and no .env lookup.

    Usage:
        def test_call(mock_settings):
            mock_settings.llm_timeout_seconds = 5
    """
    return Settings(
        _env_file=None,
        anthropic_api_key="test-anthropic-key",
        anthropic_model="claude-test-model",
        anthropic_api_url="https://api.anthropic.test/v1/messages",
        anthropic_version="2023-06-01",
        llm_max_tokens=4096,
        llm_timeout_seconds=None,
        upload_max_rows=100,
    )


@pytest.fixture
def unconfigured_settings() -> Settings:
    """Settings carrying the example placeholder key."""
    return Settings(_env_file=None, anthropic_api_key="your_api_key_here")


# ============================================================
# LANGUAGE MODEL RESPONSE FIXTURES
# ============================================================

def messages_body(text: str) -> Dict[str, Any]:
    """Messages API success body with a single text block."""
    return {
        "id": "msg_test",
        "type": "message",
        "role": "assistant",
        "content": [{"type": "text", "text": text}],
    }


@pytest.fixture
def fake_response() -> Callable[..., Mock]:
    """
    Factory for fake requests.Response objects.

    Usage:
        response = fake_response(200, messages_body('{"a": 1}'))
        response = fake_response(529, {"error": {"message": "Overloaded"}})
    """
    def _make(status_code: int = 200, body: Any = None) -> Mock:
        response = Mock(spec=requests.Response)
        response.status_code = status_code
        response.ok = 200 <= status_code < 300
        if isinstance(body, Exception):
            response.json.side_effect = body
        else:
            response.json.return_value = body
        return response

    return _make


# ============================================================
# SPREADSHEET FIXTURES
# ============================================================

def rank_sheet_frame(rows: List[Dict[str, Any]]) -> pd.DataFrame:
    """DataFrame in the upload layout (키워드, 광고영역, 광고주, URL, 평균, 00시..23시)."""
    columns = ["키워드", "광고영역", "광고주", "URL", "평균"] + HOUR_LABELS
    return pd.DataFrame(rows, columns=columns)


def create_xlsx_bytes(df: pd.DataFrame) -> bytes:
    """Write a DataFrame to xlsx bytes with openpyxl."""
    output = BytesIO()
    df.to_excel(output, index=False, engine="openpyxl")
    return output.getvalue()


def create_xls_bytes(df: pd.DataFrame) -> bytes:
    """Write a DataFrame to legacy .xls bytes with xlwt; NaN cells stay blank."""
    wb = xlwt.Workbook()
    ws = wb.add_sheet("Sheet1")
    for col_idx, column in enumerate(df.columns):
        ws.write(0, col_idx, column)
    for row_idx, row in enumerate(df.itertuples(index=False), start=1):
        for col_idx, value in enumerate(row):
            if pd.isna(value):
                continue
            # xlwt only accepts builtin scalars
            ws.write(row_idx, col_idx, value.item() if hasattr(value, "item") else value)

    output = BytesIO()
    wb.save(output)
    return output.getvalue()


@pytest.fixture
def sample_sheet_rows() -> List[Dict[str, Any]]:
    """Two sheet rows with a blank, a text and a negative cell to coerce."""
    pc_row: Dict[str, Any] = {
        "키워드": "운동화",
        "광고영역": "PC",
        "광고주": "브랜드A",
        "URL": "https://brand-a.example.com",
        "평균": 3.5,
    }
    pc_row.update({label: 0 for label in HOUR_LABELS})
    pc_row.update({"02시": 3, "03시": 4, "04시": "n/a", "05시": -2})

    mobile_row: Dict[str, Any] = {
        "키워드": "운동화",
        "광고영역": "Mobile",
        "광고주": "브랜드B",
        "URL": None,
        "평균": None,
    }
    mobile_row.update({label: 1 for label in HOUR_LABELS})

    return [pc_row, mobile_row]


@pytest.fixture
def sample_xlsx_bytes(sample_sheet_rows: List[Dict[str, Any]]) -> bytes:
    """The sample rows as an xlsx upload."""
    return create_xlsx_bytes(rank_sheet_frame(sample_sheet_rows))
