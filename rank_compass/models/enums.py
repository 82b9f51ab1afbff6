"""
Enumeration definitions for the Rank Compass backend.

All enums inherit from both `str` and `Enum` so they serialize as plain strings
in Pydantic models and API responses.
"""

from enum import Enum


class DeviceClass(str, Enum):
    """
    Ad placement area a rank was observed on.

    Values match the spreadsheet's 광고영역 column: 'PC' | 'Mobile'.
    The chart rank domain differs per device: PC shows ranks 1-10,
    Mobile shows ranks 1-5.
    """
    PC = "PC"
    MOBILE = "Mobile"


class ReportSheet(str, Enum):
    """
    Worksheet a report block is written to when exported.

    The dashboard block (device + advertiser comparison and the narrative)
    goes on the first sheet, the raw per-device logs on the next two.
    """
    DASHBOARD = "01_Dashboard_&_Insight"
    PC_DETAIL = "02_PC_Detail_Log"
    MOBILE_DETAIL = "03_Mobile_Detail_Log"


class ReportBlockKind(str, Enum):
    """
    Logical block of a TabularReport.

    - device_comparison: advertiser counts, average ranks, intensity per device
    - entity_comparison: one row per advertiser with per-device averages
    - narrative: one titled section of the AI insight
    - detail: raw hourly ranks for one device
    """
    DEVICE_COMPARISON = "device_comparison"
    ENTITY_COMPARISON = "entity_comparison"
    NARRATIVE = "narrative"
    DETAIL = "detail"
