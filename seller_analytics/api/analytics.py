"""Analytics API endpoints."""

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Path, Query
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from seller_analytics.database import get_session_factory
from seller_analytics.repositories.sql import SqlAlchemyDataSource
from seller_analytics.schemas import AnalyticsQuery
from seller_analytics.services.analytics import AnalyticsService
from seller_analytics.services.errors import (
    CollaboratorUnavailable, InvalidDateFormat, UnknownMetricType,
)

router = APIRouter(tags=["analytics"])


def get_analytics_service(
    session_factory: async_sessionmaker[AsyncSession] = Depends(get_session_factory),
) -> AnalyticsService:
    return AnalyticsService(SqlAlchemyDataSource(session_factory))


async def _run(service: AnalyticsService, query: AnalyticsQuery) -> dict:
    try:
        return await service.compute(query)
    except (InvalidDateFormat, UnknownMetricType) as e:
        raise HTTPException(400, str(e))
    except CollaboratorUnavailable:
        raise HTTPException(503, "Analytics data source unavailable")


@router.get("/admin/analytics")
async def admin_analytics(
    type: str = Query(..., description="Analytics type, e.g. totalRevenue"),
    start_month_year: Optional[str] = Query(None, alias="startMonthYear", description="YYYY-MM"),
    end_month_year: Optional[str] = Query(None, alias="endMonthYear", description="YYYY-MM"),
    service: AnalyticsService = Depends(get_analytics_service),
):
    """Store-wide analytics."""
    query = AnalyticsQuery(type=type, start_month_year=start_month_year, end_month_year=end_month_year)
    return await _run(service, query)


@router.get("/sellers/{seller_id}/analytics")
async def seller_analytics(
    seller_id: int = Path(..., gt=0),
    type: str = Query(..., description="Analytics type, e.g. totalRevenue"),
    start_month_year: Optional[str] = Query(None, alias="startMonthYear", description="YYYY-MM"),
    end_month_year: Optional[str] = Query(None, alias="endMonthYear", description="YYYY-MM"),
    service: AnalyticsService = Depends(get_analytics_service),
):
    """Analytics restricted to one seller's items and products."""
    query = AnalyticsQuery(
        type=type,
        start_month_year=start_month_year,
        end_month_year=end_month_year,
        seller_id=seller_id,
    )
    return await _run(service, query)
