"""Seller-Analytics: FastAPI application entry point."""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI

from seller_analytics.api import analytics
from seller_analytics.config import get_settings
from seller_analytics.database import Base, engine

settings = get_settings()

logging.basicConfig(
    level=logging.DEBUG if settings.debug else settings.log_level.upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Create tables on startup (use migrations in production)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield
    await engine.dispose()


app = FastAPI(
    title=settings.app_name,
    version="1.0.0",
    description="Seller and admin sales analytics: revenue, buyers, "
                "fulfillment, period-over-period change and top products",
    lifespan=lifespan,
)

app.include_router(analytics.router, prefix="/api/v1")


@app.get("/health")
async def health():
    return {"status": "ok", "service": settings.app_name, "version": "1.0.0"}
