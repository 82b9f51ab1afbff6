"""
Pytest tests for the xlsx and CSV exports.

Test Categories:
- TestWorkbook: sheets, block layout, bold titles, hidden gridlines
- TestRecordsCsv: BOM, quoting, number formatting
- TestFilenames: dated download names
"""

from datetime import date
from io import BytesIO

import openpyxl

from rank_compass.models import HOUR_LABELS, NormalizedInsight, ReportSheet
from rank_compass.services.export import (
    CSV_EMPTY_CELL,
    csv_filename,
    render_records_csv,
    render_workbook,
    workbook_filename,
)
from rank_compass.services.report import assemble_report


def _load(content: bytes) -> openpyxl.Workbook:
    return openpyxl.load_workbook(BytesIO(content))


class TestWorkbook:
    """Tests for render_workbook."""

    def test_sheets_in_order(self, sample_records) -> None:
        wb = _load(render_workbook(assemble_report(sample_records)))
        assert wb.sheetnames == [sheet.value for sheet in ReportSheet]

    def test_gridlines_hidden(self, sample_records) -> None:
        wb = _load(render_workbook(assemble_report(sample_records)))
        assert all(not ws.sheet_view.showGridLines for ws in wb.worksheets)

    def test_dashboard_layout(self, sample_records) -> None:
        wb = _load(render_workbook(assemble_report(sample_records, NormalizedInsight())))
        ws = wb[ReportSheet.DASHBOARD.value]

        # 매체 비교: title, header, three rows
        assert ws.cell(row=1, column=1).value == "매체 비교"
        assert ws.cell(row=1, column=1).font.bold
        assert ws.cell(row=2, column=2).value == "PC"
        assert ws.cell(row=3, column=1).value == "전체 광고주 수"
        assert ws.cell(row=5, column=1).value == "경쟁 강도(1~5)"

        # One blank row, then 광고주 비교
        assert ws.cell(row=6, column=1).value is None
        assert ws.cell(row=7, column=1).value == "광고주 비교"
        assert ws.cell(row=7, column=1).font.bold
        assert ws.cell(row=8, column=1).value == "광고주"
        assert [ws.cell(row=r, column=1).value for r in (9, 10, 11)] == [
            "브랜드A", "브랜드C", "브랜드B",
        ]
        assert ws.cell(row=11, column=5).value == 5.0

        assert ws.cell(row=13, column=1).value == "전체 분석"

    def test_detail_sheet(self, sample_records) -> None:
        wb = _load(render_workbook(assemble_report(sample_records)))
        ws = wb[ReportSheet.MOBILE_DETAIL.value]

        assert ws.cell(row=1, column=1).value == "원본 데이터"
        assert ws.cell(row=2, column=5).value == HOUR_LABELS[0]
        assert ws.cell(row=2, column=28).value == HOUR_LABELS[-1]
        assert ws.cell(row=3, column=2).value == "브랜드A"
        assert ws.cell(row=4, column=2).value == "브랜드C"
        assert ws.cell(row=4, column=1).value == 2

    def test_narrative_lines(self, sample_records) -> None:
        insight = NormalizedInsight(overall=["첫째", "둘째"])
        wb = _load(render_workbook(assemble_report(sample_records, insight)))
        ws = wb[ReportSheet.DASHBOARD.value]

        titles = [ws.cell(row=r, column=1).value for r in range(1, ws.max_row + 1)]
        start = titles.index("전체 분석")
        assert titles[start + 1:start + 3] == ["첫째", "둘째"]


class TestRecordsCsv:
    """Tests for render_records_csv."""

    def test_bom_and_quoted_header(self, sample_records) -> None:
        text = render_records_csv(sample_records)

        assert text.startswith("\ufeff")
        header = text[1:].split("\n")[0]
        assert header.startswith('"키워드","광고 영역","광고주","평균","00시"')
        assert header.endswith('"23시"')

    def test_row_formatting(self, make_record) -> None:
        record = make_record("브랜드A", "Mobile", [0, 2, 3.26], average_rank=3.456)
        lines = render_records_csv([record])[1:].strip().split("\n")

        assert len(lines) == 2
        cells = lines[1].split(",")
        assert cells[:4] == ['"운동화"', '"Mobile"', '"브랜드A"', '"3.46"']
        assert cells[4] == f'"{CSV_EMPTY_CELL}"'
        assert cells[5] == '"2.0"'
        assert cells[6] == '"3.3"'
        assert len(cells) == 4 + 24

    def test_unknown_average_is_dash(self, make_record) -> None:
        lines = render_records_csv([make_record(hours=[1])])[1:].strip().split("\n")
        assert lines[1].split(",")[3] == '"-"'

    def test_no_records_writes_header_only(self) -> None:
        lines = render_records_csv([])[1:].strip().split("\n")
        assert len(lines) == 1


class TestFilenames:
    """Tests for the download names."""

    def test_workbook_filename(self) -> None:
        assert workbook_filename(date(2025, 1, 31)) == "경쟁사_순위_분석_2025-01-31.xlsx"

    def test_csv_filename(self) -> None:
        assert csv_filename(date(2025, 1, 31)) == "rank_data_2025-01-31.csv"

    def test_defaults_to_today(self) -> None:
        assert workbook_filename().endswith(f"{date.today().isoformat()}.xlsx")
