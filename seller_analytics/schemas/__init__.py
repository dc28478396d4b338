"""Pydantic schemas for the analytics API."""

from typing import Optional

from pydantic import BaseModel, Field


class AnalyticsQuery(BaseModel):
    """Which metric to compute and over which months.

    ``type`` stays a plain string so unsupported values reach the engine and
    are reported as unknown metric types.
    """
    type: str
    start_month_year: Optional[str] = Field(None, alias="startMonthYear")
    end_month_year: Optional[str] = Field(None, alias="endMonthYear")
    seller_id: Optional[int] = Field(None, alias="sellerId", gt=0)

    model_config = {"populate_by_name": True}
