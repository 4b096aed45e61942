from typing import Dict, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from core.babh import build_logbook_context
from db.database import (
    get_async_session,
    Activity as ActivityModel,
    Field as FieldModel,
    Season as SeasonModel,
)
from routers.organizations import get_organization_or_404

router = APIRouter()


@router.get("/logbook", response_model=Dict)
async def get_logbook(
    organization_id: UUID,
    season_id: Optional[UUID] = None,
    db: AsyncSession = Depends(get_async_session),
):
    """Values for the organization's BABH logbook template."""
    org = await get_organization_or_404(db, organization_id)

    season = None
    if season_id:
        res = await db.execute(select(SeasonModel).where(SeasonModel.id == season_id))
        season = res.scalar_one_or_none()
        if not season or season.organization_id != organization_id:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Season not found")

    fres = await db.execute(select(FieldModel).where(FieldModel.organization_id == organization_id))
    stmt = select(ActivityModel).where(ActivityModel.organization_id == organization_id)
    if season:
        stmt = stmt.where(ActivityModel.date >= season.start_date, ActivityModel.date <= season.end_date)
    ares = await db.execute(stmt)

    return build_logbook_context(org, fres.scalars().all(), ares.scalars().all(), season=season)
