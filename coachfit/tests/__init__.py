'''
CoachFit Insights Backend Test Suite

Test Modules:
-------------
- test_attention.py: Attention scoring
  - Reference client scenarios (inactive, low engagement, healthy)
  - Signal thresholds, reasons and suggested actions
  - Load/coverage weights capped below red
  - Monotonicity and settings clamping

- test_attention_queue.py: Tier partitioning and stable ordering

- test_anomalies.py / test_opportunities.py: Insight catalogues
  - Red/amber thresholds
  - Skipped checks on missing or degenerate data

- test_trends.py: Bucketing, gap filling and directions

- test_insight_cache.py: TTL and single-flight recomputation

- test_insight_bundle.py: Snapshot reads and partial failures

- test_metrics_repository.py / test_platform_metrics.py: Data access and counters

- test_api.py: Endpoint contracts through the ASGI app

Running Tests:
--------------
    pip install -e ".[test]"
    pytest coachfit/tests -v

Configuration:
--------------
See conftest.py for shared fixtures and test configuration.
'''

__all__ = []
