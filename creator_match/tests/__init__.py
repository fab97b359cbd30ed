'''
Creator Match Test Suite

Test Modules:
-------------
- test_aggregation.py: sales history -> AggregatedProfile, creator stats
- test_prompts.py: prompt rendering for insight and both match directions
- test_result_cache.py: TTL expiry and invalidation
- test_reasoning_gateway.py: retry schedule, error classification, parsing
- test_fallback_scoring.py: heuristic sub-scores and eligibility
- test_matching.py: orchestration thresholds, caching, fallback, sharing
- test_catalog.py: catalog store lookups, filters, pagination
- test_api.py: HTTP envelopes and error bodies

Running Tests:
--------------
    pip install -e ".[test]"
    pytest -v

Configuration:
--------------
See conftest.py for shared fixtures and test configuration.
'''

__all__ = []
