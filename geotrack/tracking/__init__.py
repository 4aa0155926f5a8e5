"""Tracking Jobs.

Runs a batch of queries against the configured platforms for one business:
  - Query de-duplication and truncation
  - Per-query parallel platform fan-out, sequential queries
  - Immediate parsing of every answer, failures skipped and counted
  - Cooperative cancellation (event or deadline)
  - Aggregation into a job summary and daily VisibilityMetrics
"""
