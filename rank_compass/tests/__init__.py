'''
Rank Compass Test Suite

Test Modules:
-------------
- test_models.py: RankRecord coercion, wire form, schedule validation
- test_metrics.py: worst/best hour, variance, flattened vs two-stage averages,
  competition intensity
- test_insight_normalizer.py: shape tolerance of the AI insight, rank schedule
  parsing
- test_schedule_overlay.py: coordinate mapping, series, overlay, highlight
- test_report.py: report blocks, sorting, missing device sides
- test_export.py: xlsx workbook and CSV rendering
- test_ingestion.py: spreadsheet decoding and coercion
- test_selection.py: keyword/device filtering
- test_session.py: results-view hand-off guard
- test_llm_client.py: Messages API round trip and error mapping
- test_api.py: endpoint contracts and the {"error": ...} handler

Running Tests:
--------------
    pip install -e ".[test]"
    pytest rank_compass/tests -v
'''

__all__ = []
