"""
Core infrastructure package for the CoachFit insights backend.

Provides:
- Configuration management via pydantic-settings
- Async PostgreSQL database connectivity via asyncpg
- The insight engine's error taxonomy

This module re-exports key components from submodules for convenient importing:

    from coachfit.core import get_settings, get_db_pool, UnknownMetric

FastAPI dependencies live in coachfit.core.dependencies and are imported
from there directly; they depend on the service layer, which itself imports
this package.

Components Re-exported:
    Settings: Pydantic settings class with all configuration parameters
    get_settings: Function returning the cached Settings singleton
    init_db / close_db / get_db_pool: Connection pool lifecycle
    InsightEngineError and subclasses: Error taxonomy
"""

# =============================================================================
# Re-exports from coachfit.core.config
# =============================================================================
from coachfit.core.config import Settings, get_settings

# =============================================================================
# Re-exports from coachfit.core.database
# =============================================================================
from coachfit.core.database import init_db, close_db, get_db_pool

# =============================================================================
# Re-exports from coachfit.core.exceptions
# =============================================================================
from coachfit.core.exceptions import (
    InsightEngineError,
    DataUnavailable,
    InvalidTrendRequest,
    UnknownMetric,
    UnknownWindow,
    ComputeTimeout,
    InsightComputeError,
)

__all__ = [
    # Configuration management (from config.py)
    'Settings',
    'get_settings',
    # Database pool lifecycle (from database.py)
    'init_db',
    'close_db',
    'get_db_pool',
    # Error taxonomy (from exceptions.py)
    'InsightEngineError',
    'DataUnavailable',
    'InvalidTrendRequest',
    'UnknownMetric',
    'UnknownWindow',
    'ComputeTimeout',
    'InsightComputeError',
]
