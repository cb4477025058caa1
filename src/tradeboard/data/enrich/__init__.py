"""Enrichment of candidate rows.

This package is **read-only** with respect to the report artifacts:
- It reads the per-universe ranking files the rankings job published
- It never rewrites candidates; enrich() returns new records

Current modules:
- rankings: (universe, symbol) -> stats index, concurrent loading with partial failure
"""
