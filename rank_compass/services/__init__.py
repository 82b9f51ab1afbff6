"""
Rank Compass Services Module

Business logic of the competitor rank dashboard. Every service is a set of
stateless functions consumed by the API layer (rank_compass/api/).

Services:
- ingestion: spreadsheet upload decoding
- metrics: per-record and per-group rank statistics
- insight_normalizer: tolerant normalization of the model's JSON output
- schedule_overlay: rank/hour to plot coordinates, overlay and highlight
- report: tabular report assembly
- export: xlsx workbook and CSV rendering
- selection: keyword/device filtering for the results view
- llm_client: Anthropic Messages API round trip
- session: results-view hand-off guard
"""

# =============================================================================
# Ingestion Service Exports
# =============================================================================

from rank_compass.services.ingestion import decode_spreadsheet

# =============================================================================
# Metrics Engine Exports
# Worst/best hour, variance, flattened vs two-stage averages, intensity
# =============================================================================

from rank_compass.services.metrics import (
    analyze_records,
    compute_record_metrics,
    compute_group_average,
    compute_entity_average,
    compute_competition_intensity,
    count_advertisers,
    records_for_device,
    summarize_device,
)

# =============================================================================
# Insight Normalizer Exports
# =============================================================================

from rank_compass.services.insight_normalizer import (
    InsightShape,
    classify_shape,
    normalize_insight,
    normalize_competitor_groups,
    normalize_golden_windows,
    normalize_flat_list,
    parse_rank_schedule,
    parse_target_rank,
)

# =============================================================================
# Schedule Overlay Mapper Exports
# =============================================================================

from rank_compass.services.schedule_overlay import (
    PlotArea,
    HighlightState,
    domain_max,
    map_to_plot,
    build_entity_series,
    build_overlay_series,
    apply_highlight,
    dataset_signature,
    build_rank_chart,
)

# =============================================================================
# Report Assembler / Export Exports
# =============================================================================

from rank_compass.services.report import assemble_report
from rank_compass.services.export import (
    render_workbook,
    render_records_csv,
    workbook_filename,
    csv_filename,
)

# =============================================================================
# Results View Exports
# =============================================================================

from rank_compass.services.selection import (
    filter_records,
    distinct_keywords,
    search_keywords,
    advertisers_for,
    build_schedule_payload,
)
from rank_compass.services.session import resolve_session

# =============================================================================
# Language-Model Client Exports
# =============================================================================

from rank_compass.services.llm_client import (
    extract_json_object,
    request_completion,
    generate_narrative_insight,
    generate_rank_schedule,
)

__all__ = [
    # Ingestion
    'decode_spreadsheet',
    # Metrics
    'analyze_records',
    'compute_record_metrics',
    'compute_group_average',
    'compute_entity_average',
    'compute_competition_intensity',
    'count_advertisers',
    'records_for_device',
    'summarize_device',
    # Insight normalizer
    'InsightShape',
    'classify_shape',
    'normalize_insight',
    'normalize_competitor_groups',
    'normalize_golden_windows',
    'normalize_flat_list',
    'parse_rank_schedule',
    'parse_target_rank',
    # Schedule overlay
    'PlotArea',
    'HighlightState',
    'domain_max',
    'map_to_plot',
    'build_entity_series',
    'build_overlay_series',
    'apply_highlight',
    'dataset_signature',
    'build_rank_chart',
    # Report / export
    'assemble_report',
    'render_workbook',
    'render_records_csv',
    'workbook_filename',
    'csv_filename',
    # Results view
    'filter_records',
    'distinct_keywords',
    'search_keywords',
    'advertisers_for',
    'build_schedule_payload',
    'resolve_session',
    # Language-model client
    'extract_json_object',
    'request_completion',
    'generate_narrative_insight',
    'generate_rank_schedule',
]
