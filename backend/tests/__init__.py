"""
Placement Analytics backend test suite.

Service-level tests for every aggregation stage plus end-to-end pipeline
and HTTP tests. Shared fixtures live in conftest.py.
"""
