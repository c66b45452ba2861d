"""
Health check — public, used by load balancers and container probes.
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends
from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from timekeeper.api.v1.deps import get_db
from timekeeper.schemas.common import HealthResponse

router = APIRouter(tags=["system"])
logger = logging.getLogger(__name__)


@router.get("/health", response_model=HealthResponse)
async def health(db: AsyncSession = Depends(get_db)) -> HealthResponse:
    try:
        await db.execute(select(1))
    except SQLAlchemyError as e:
        logger.error("Health check DB failure: %s", e)
        return HealthResponse(status="degraded", db=False)
    return HealthResponse(status="ok", db=True)
