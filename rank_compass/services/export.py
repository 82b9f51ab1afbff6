"""
Report export.

Serializes a TabularReport into an xlsx workbook (openpyxl) and rank records
into the dashboard's CSV download (pandas).
"""

import csv
import logging
from datetime import date
from io import BytesIO
from typing import List, Optional, Sequence

import openpyxl
import pandas as pd
from openpyxl.styles import Font

from rank_compass.models import (
    HOUR_LABELS,
    RankRecord,
    ReportSheet,
    TabularReport,
)

# Configure module logger
logger = logging.getLogger(__name__)

XLSX_MEDIA_TYPE: str = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"
CSV_MEDIA_TYPE: str = "text/csv; charset=utf-8"

CSV_HEADER: List[str] = ["키워드", "광고 영역", "광고주", "평균"] + HOUR_LABELS
CSV_EMPTY_CELL: str = "-"
UTF8_BOM: str = "\ufeff"


def workbook_filename(day: Optional[date] = None) -> str:
    """Download name of the xlsx report, e.g. 경쟁사_순위_분석_2025-01-31.xlsx"""
    day = day or date.today()
    return f"경쟁사_순위_분석_{day.isoformat()}.xlsx"


def csv_filename(day: Optional[date] = None) -> str:
    """Download name of the CSV export, e.g. rank_data_2025-01-31.csv"""
    day = day or date.today()
    return f"rank_data_{day.isoformat()}.csv"


def render_workbook(report: TabularReport) -> bytes:
    """
    Write the report as an xlsx workbook.

    One worksheet per ReportSheet, in sheet order. Each block is written as a
    bold title row, its header row (if any) and its rows, with one blank row
    between consecutive blocks. Gridlines are hidden on every sheet.

    Args:
        report: Assembled report

    Returns:
        The workbook file content
    """
    wb = openpyxl.Workbook()
    wb.remove(wb.active)

    for sheet in ReportSheet:
        ws = wb.create_sheet(sheet.value)
        ws.sheet_view.showGridLines = False

        for idx, block in enumerate(report.blocks_for(sheet)):
            if idx > 0:
                ws.append([])
            ws.append([block.title])
            ws.cell(row=ws.max_row, column=1).font = Font(bold=True)
            if block.header:
                ws.append(block.header)
            for row in block.rows:
                ws.append(row)

    output = BytesIO()
    wb.save(output)
    content = output.getvalue()

    logger.info(f"Rendered workbook: {len(report.blocks)} blocks, {len(content)} bytes")
    return content


def _format_rank(value: float, decimals: int) -> str:
    if value > 0:
        return f"{value:.{decimals}f}"
    return CSV_EMPTY_CELL


def render_records_csv(records: Sequence[RankRecord]) -> str:
    """
    Render records as the dashboard CSV.

    The text starts with a UTF-8 BOM so spreadsheet apps detect the encoding,
    and every cell is quoted. Averages use 2 decimals, hourly ranks 1; a 0
    (unknown / not observed) is written as '-'.
    """
    rows = []
    for record in records:
        row = [
            record.keyword,
            record.device_class.value,
            record.entity_name,
            _format_rank(record.average_rank, 2),
        ]
        row.extend(_format_rank(value, 1) for value in record.hourly_rank)
        rows.append(row)

    df = pd.DataFrame(rows, columns=CSV_HEADER, dtype=str)
    text = df.to_csv(index=False, quoting=csv.QUOTE_ALL, lineterminator="\n")

    return UTF8_BOM + text
