"""
FastAPI router for trend series.

Endpoint:
- GET /admin/trends?metric=user_growth&window=30d: gap-free series for one
  metric over one window

Unsupported metrics or windows are client errors (HTTP 400) and list the
supported values in the detail message.
"""

import logging
from typing import List

from fastapi import APIRouter, HTTPException, Query

from coachfit.core.dependencies import MetricsRepositoryDep
from coachfit.core.exceptions import InvalidTrendRequest
from coachfit.models import TrendPoint
from coachfit.services.attention import sanitize_settings
from coachfit.services.trends import TrendGenerator

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/admin", tags=["trends"])


@router.get(
    "/trends",
    response_model=List[TrendPoint],
    summary="Get Trend Series",
    description="""
    Generate a trend series. Daily buckets for 7d/14d/30d, weekly buckets for
    90d. The first point carries the direction of the whole window.
    """,
)
async def get_trend_series(
    repository: MetricsRepositoryDep,
    metric: str = Query(
        default="user_growth",
        description="user_growth or entry_completion",
    ),
    window: str = Query(
        default="30d",
        description="7d, 14d, 30d or 90d",
    ),
) -> List[TrendPoint]:
    """
    Generate one trend series.

    Raises:
        HTTPException 400: If the metric or window is not supported.
        HTTPException 500: If the series could not be read.
    """
    try:
        settings = sanitize_settings(await repository.get_system_settings())
        generator = TrendGenerator(repository, settings)
        return await generator.generate_trends(metric, window)

    except InvalidTrendRequest as e:
        logger.warning(f"Rejected trend request: {e}")
        raise HTTPException(status_code=400, detail=str(e))

    except Exception as e:
        logger.error(f"Error generating trend {metric}/{window}: {str(e)}", exc_info=True)
        raise HTTPException(
            status_code=500,
            detail=f"Failed to generate trend series: {str(e)}",
        )
