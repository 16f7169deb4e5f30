"""
Placement Analytics Backend Package.

FastAPI service layer for the student-placement reporting dashboards.
Provides the placement-analytics aggregation engine and its HTTP surface.

Subpackages:
    - api: FastAPI route handlers
    - core: Configuration and dependencies
    - models: Pydantic schemas and enums
    - services: Pure aggregation services and the analytics pipeline
"""

__version__ = "1.0.0"
