"""
CoachFit Insights Backend Package.

FastAPI service behind the CoachFit admin dashboard. Scores clients, coaches
and cohorts for attention, detects platform anomalies, surfaces
opportunities and computes trends, serving insights through a short-lived
single-flight cache.

Subpackages:
    - api: FastAPI route handlers
    - core: Configuration, database, dependencies and error taxonomy
    - models: Pydantic schemas and enums
    - services: Scoring, detection, trends and caching
    - sql: Parameterized SQL queries
"""

__version__ = "1.0.0"
