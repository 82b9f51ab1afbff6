"""
Spreadsheet Ingestion Service

Decodes an uploaded competitor-rank spreadsheet into RankRecord objects.

Input layout (first worksheet of an .xlsx/.xls file, or a .csv file):

    키워드 | 광고영역 | 광고주 | URL | 평균 | 00시 | 01시 | ... | 23시

Coercion rules:
- missing / non-numeric / negative numbers -> 0 (no observation)
- missing strings -> ''
- missing or unrecognized 광고영역 -> PC
- fully blank rows are skipped

Content that cannot be decoded at all raises SpreadsheetDecodeError and no
partial result is returned.
"""

import io
import logging
from typing import Dict, List, Optional

import numpy as np
import pandas as pd

from rank_compass.core import SpreadsheetDecodeError, get_settings
from rank_compass.models import HOUR_LABELS, RankRecord

# Configure module logger
logger = logging.getLogger(__name__)

# =============================================================================
# CONSTANTS - Column Mapping
# =============================================================================

KEYWORD_COLUMN: str = "키워드"
DEVICE_COLUMN: str = "광고영역"
ADVERTISER_COLUMN: str = "광고주"
URL_COLUMN: str = "URL"
AVERAGE_COLUMN: str = "평균"

TEXT_COLUMNS: List[str] = [KEYWORD_COLUMN, DEVICE_COLUMN, ADVERTISER_COLUMN, URL_COLUMN]
NUMERIC_COLUMNS: List[str] = [AVERAGE_COLUMN] + HOUR_LABELS

# Sheet column -> RankRecord wire key
WIRE_KEYS: Dict[str, str] = {
    KEYWORD_COLUMN: "keyword",
    DEVICE_COLUMN: "ad_area",
    ADVERTISER_COLUMN: "advertiser",
    URL_COLUMN: "url",
    AVERAGE_COLUMN: "average",
}
WIRE_KEYS.update({label: f"hour_{h:02d}" for h, label in enumerate(HOUR_LABELS)})

CSV_EXTENSIONS = (".csv",)


def _read_frame(content: bytes, filename: str) -> pd.DataFrame:
    """Read the first worksheet (or the CSV body) with every cell as-is."""
    buffer = io.BytesIO(content)
    if filename.lower().endswith(CSV_EXTENSIONS):
        return pd.read_csv(buffer, encoding="utf-8-sig")
    return pd.read_excel(buffer, sheet_name=0)


def _normalize_dataframe(df: pd.DataFrame) -> pd.DataFrame:
    """
    Normalize column names and coerce cell values.

    Args:
        df: Raw sheet DataFrame

    Returns:
        DataFrame holding every known column, numeric columns as non-negative
        floats and text columns as strings
    """
    df_normalized = df.copy()
    df_normalized.columns = [str(col).strip() for col in df_normalized.columns]
    df_normalized = df_normalized.dropna(how="all")

    for col in NUMERIC_COLUMNS:
        if col in df_normalized.columns:
            numeric = pd.to_numeric(df_normalized[col], errors='coerce').fillna(0)
            df_normalized[col] = np.clip(numeric.astype(float), 0, None)
        else:
            df_normalized[col] = 0.0

    for col in TEXT_COLUMNS:
        if col in df_normalized.columns:
            df_normalized[col] = df_normalized[col].fillna("").astype(str).str.strip()
        else:
            df_normalized[col] = ""

    return df_normalized[TEXT_COLUMNS + NUMERIC_COLUMNS]


def decode_spreadsheet(
    content: bytes,
    filename: str = "upload.xlsx",
    max_rows: Optional[int] = None
) -> List[RankRecord]:
    """
    Decode an uploaded spreadsheet into rank records.

    Args:
        content: Raw file bytes
        filename: Original file name; a .csv suffix selects the CSV reader
        max_rows: Row limit; defaults to the upload_max_rows setting

    Returns:
        One RankRecord per non-blank row, in sheet order

    Raises:
        SpreadsheetDecodeError: If the file is empty, unreadable, or too large
    """
    if not content:
        raise SpreadsheetDecodeError("Uploaded file is empty")

    if max_rows is None:
        max_rows = get_settings().upload_max_rows

    try:
        df = _read_frame(content, filename)
    except Exception as e:
        logger.warning(f"Failed to read spreadsheet {filename}: {e}")
        raise SpreadsheetDecodeError(f"Failed to read spreadsheet: {str(e)}") from e

    logger.info(f"Parsed {filename} with {len(df)} rows and {len(df.columns)} columns")

    if len(df) > max_rows:
        raise SpreadsheetDecodeError(
            f"Spreadsheet has {len(df)} rows; at most {max_rows} are accepted"
        )

    present = {str(col).strip() for col in df.columns}
    missing = [col for col in TEXT_COLUMNS + NUMERIC_COLUMNS if col not in present]
    if missing:
        logger.warning(f"Spreadsheet is missing {len(missing)} column(s) {missing}; using defaults")

    df = _normalize_dataframe(df)

    records = [
        RankRecord.model_validate({WIRE_KEYS[col]: value for col, value in row.items()})
        for row in df.to_dict(orient="records")
    ]

    logger.info(f"Decoded {len(records)} rank records from {filename}")
    return records
