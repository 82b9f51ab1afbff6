"""
Pytest tests for spreadsheet ingestion.

Test Categories:
- TestDecodeXlsx: first-sheet decoding and cell coercion
- TestDecodeXls: legacy .xls uploads
- TestDecodeCsv: CSV uploads
- TestDecodeErrors: empty, unreadable and oversized uploads
"""

import pandas as pd
import pytest

from rank_compass.core import SpreadsheetDecodeError
from rank_compass.models import DeviceClass, HOURS_PER_DAY
from rank_compass.services.ingestion import decode_spreadsheet
from rank_compass.tests.conftest import create_xls_bytes, create_xlsx_bytes, rank_sheet_frame


class TestDecodeXlsx:
    """Tests for decode_spreadsheet with xlsx content."""

    def test_rows_in_sheet_order(self, sample_xlsx_bytes) -> None:
        records = decode_spreadsheet(sample_xlsx_bytes, "ranks.xlsx", max_rows=100)

        assert [r.entity_name for r in records] == ["브랜드A", "브랜드B"]
        assert records[0].device_class == DeviceClass.PC
        assert records[1].device_class == DeviceClass.MOBILE

    def test_cells_are_coerced(self, sample_xlsx_bytes) -> None:
        pc, mobile = decode_spreadsheet(sample_xlsx_bytes, "ranks.xlsx", max_rows=100)

        assert pc.hourly_rank[2] == 3.0
        assert pc.hourly_rank[3] == 4.0
        # 'n/a' and a negative number mean no observation
        assert pc.hourly_rank[4] == 0.0
        assert pc.hourly_rank[5] == 0.0
        assert pc.average_rank == 3.5
        assert pc.reference_url == "https://brand-a.example.com"

        assert mobile.reference_url == ""
        assert mobile.average_rank == 0.0
        assert mobile.hourly_rank == (1.0,) * HOURS_PER_DAY

    def test_blank_rows_are_skipped(self, sample_sheet_rows) -> None:
        rows = [sample_sheet_rows[0], {}, sample_sheet_rows[1]]
        content = create_xlsx_bytes(rank_sheet_frame(rows))

        records = decode_spreadsheet(content, "ranks.xlsx", max_rows=100)
        assert len(records) == 2

    def test_missing_columns_use_defaults(self) -> None:
        df = pd.DataFrame([{"광고주": "브랜드A", "00시": 2}])
        records = decode_spreadsheet(create_xlsx_bytes(df), "partial.xlsx", max_rows=100)

        assert records[0].entity_name == "브랜드A"
        assert records[0].keyword == ""
        assert records[0].device_class == DeviceClass.PC
        assert records[0].hourly_rank[0] == 2.0
        assert records[0].hourly_rank[1] == 0.0

    def test_unknown_device_is_pc(self, sample_sheet_rows) -> None:
        sample_sheet_rows[1]["광고영역"] = "Tablet"
        content = create_xlsx_bytes(rank_sheet_frame(sample_sheet_rows))

        records = decode_spreadsheet(content, "ranks.xlsx", max_rows=100)
        assert records[1].device_class == DeviceClass.PC


class TestDecodeXls:
    """Tests for decode_spreadsheet with legacy .xls content."""

    def test_xls_upload(self, sample_sheet_rows) -> None:
        content = create_xls_bytes(rank_sheet_frame(sample_sheet_rows))

        records = decode_spreadsheet(content, "rank.xls", max_rows=100)

        assert [r.entity_name for r in records] == ["브랜드A", "브랜드B"]
        assert records[0].hourly_rank[2] == 3.0
        assert records[0].hourly_rank[4] == 0.0
        assert records[0].hourly_rank[5] == 0.0
        assert records[1].device_class == DeviceClass.MOBILE
        assert records[1].reference_url == ""


class TestDecodeCsv:
    """Tests for decode_spreadsheet with CSV content."""

    def test_csv_upload(self, sample_sheet_rows) -> None:
        content = rank_sheet_frame(sample_sheet_rows).to_csv(index=False).encode("utf-8-sig")

        records = decode_spreadsheet(content, "ranks.CSV", max_rows=100)

        assert len(records) == 2
        assert records[0].entity_name == "브랜드A"
        assert records[0].hourly_rank[2] == 3.0
        assert records[0].hourly_rank[4] == 0.0
        assert records[1].device_class == DeviceClass.MOBILE


class TestDecodeErrors:
    """Upload failures raise SpreadsheetDecodeError with no partial result."""

    def test_empty_content(self) -> None:
        with pytest.raises(SpreadsheetDecodeError) as exc_info:
            decode_spreadsheet(b"", "ranks.xlsx", max_rows=100)
        assert exc_info.value.status_code == 400

    def test_unreadable_content(self) -> None:
        with pytest.raises(SpreadsheetDecodeError):
            decode_spreadsheet(b"this is not a spreadsheet", "ranks.xlsx", max_rows=100)

    def test_too_many_rows(self, sample_xlsx_bytes) -> None:
        with pytest.raises(SpreadsheetDecodeError) as exc_info:
            decode_spreadsheet(sample_xlsx_bytes, "ranks.xlsx", max_rows=1)
        assert "at most 1" in exc_info.value.message
