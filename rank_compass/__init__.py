"""
Rank Compass Backend Package.

FastAPI service layer for the competitor ad-rank dashboard. Decodes uploaded
hourly rank spreadsheets, computes rank statistics, talks to the language
model for narrative analysis, and assembles chart and report payloads.

Subpackages:
    - api: FastAPI route handlers
    - core: Configuration, exceptions, and dependencies
    - models: Pydantic schemas and enums
    - services: Business logic services

The dashboard frontend keeps its own view state; every derived number it
renders comes from this package.
"""

__version__ = "1.0.0"
