"""
Domain exceptions for the Rank Compass backend.

Services raise these; the application registers handlers in ``main.py`` that
turn them into ``{"error": message}`` responses. Each class carries the HTTP
status it maps to so the handler stays generic.

Taxonomy:
- SpreadsheetDecodeError: the uploaded file could not be read as a rank sheet
- EmptyDatasetError: an analysis was requested without any records
- LLMConfigurationError: the language-model credential is missing or invalid
- LLMTransportError: the language model answered non-2xx or was unreachable
- LLMResponseError: the answer contained no parseable JSON object

Insight shape irregularities have no exception here; the
insight normalizer absorbs them.
"""

from typing import Optional


class RankCompassError(Exception):
    """Base class for errors reported to the dashboard as ``{"error": ...}``."""

    status_code: int = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class SpreadsheetDecodeError(RankCompassError):
    """Raised when an uploaded spreadsheet cannot be decoded."""

    status_code = 400


class EmptyDatasetError(RankCompassError):
    """Raised when an analysis request carries no records."""

    status_code = 400


class LLMConfigurationError(RankCompassError):
    """Raised when the language-model API key is missing or a placeholder."""

    status_code = 500


class LLMTransportError(RankCompassError):
    """
    Raised when the language-model request fails in transit.

    Attributes:
        upstream_status: HTTP status returned by the collaborator, or None
            when the request never got an answer (DNS, connection reset, ...).
    """

    status_code = 502

    def __init__(self, message: str, upstream_status: Optional[int] = None):
        super().__init__(message)
        self.upstream_status = upstream_status


class LLMResponseError(RankCompassError):
    """Raised when no JSON object can be extracted from the model's answer."""

    status_code = 502
