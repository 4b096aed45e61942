from datetime import date
from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from typing import List
from uuid import UUID

from db.database import get_async_session, Season as SeasonModel
from routers.organizations import get_organization_or_404
from schemas.seasons import SeasonCreate, SeasonRead, SeasonUpdate

router = APIRouter()


def season_year_label(year: int) -> str:
    """Agricultural year identifier, e.g. 2024 -> "2024 / 2025"."""
    return f"{year} / {year + 1}"


@router.get("/", response_model=List[SeasonRead])
async def list_seasons(
    organization_id: UUID,
    db: AsyncSession = Depends(get_async_session),
):
    res = await db.execute(
        select(SeasonModel)
        .where(SeasonModel.organization_id == organization_id)
        .order_by(SeasonModel.start_date.desc())
    )
    return [SeasonRead(**s.to_schema) for s in res.scalars().all()]


@router.get("/active", response_model=List[SeasonRead])
async def list_active_seasons(
    organization_id: UUID,
    db: AsyncSession = Depends(get_async_session),
):
    res = await db.execute(
        select(SeasonModel)
        .where(SeasonModel.organization_id == organization_id)
        .where(SeasonModel.is_active == True)  # noqa: E712
    )
    return [SeasonRead(**s.to_schema) for s in res.scalars().all()]


@router.get("/by-year", response_model=SeasonRead)
async def get_season_by_year(
    organization_id: UUID,
    year: str = Query(..., description='Season identifier, e.g. "2024 / 2025"'),
    db: AsyncSession = Depends(get_async_session),
):
    res = await db.execute(
        select(SeasonModel)
        .where(SeasonModel.organization_id == organization_id)
        .where(SeasonModel.year == year)
    )
    s = res.scalars().first()
    if not s:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Season not found")
    return SeasonRead(**s.to_schema)


@router.get("/{season_id}", response_model=SeasonRead)
async def get_season(season_id: UUID, db: AsyncSession = Depends(get_async_session)):
    res = await db.execute(select(SeasonModel).where(SeasonModel.id == season_id))
    s = res.scalar_one_or_none()
    if not s:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Season not found")
    return SeasonRead(**s.to_schema)


@router.post("/", response_model=SeasonRead, status_code=status.HTTP_201_CREATED)
async def create_season(
    payload: SeasonCreate,
    db: AsyncSession = Depends(get_async_session),
):
    """Create the season for a calendar year (Jan 1 - Dec 31), named "YYYY / YYYY+1"."""
    await get_organization_or_404(db, payload.organization_id)

    label = season_year_label(payload.year)
    existing = await db.execute(
        select(SeasonModel)
        .where(SeasonModel.organization_id == payload.organization_id)
        .where(SeasonModel.year == label)
    )
    if existing.scalars().first():
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=f"Season for year {label} already exists",
        )

    s = SeasonModel(
        organization_id=payload.organization_id,
        name=label,
        year=label,
        start_date=date(payload.year, 1, 1),
        end_date=date(payload.year, 12, 31),
        is_active=payload.is_active,
    )
    db.add(s)
    await db.commit()
    await db.refresh(s)
    return SeasonRead(**s.to_schema)


@router.patch("/{season_id}", response_model=SeasonRead)
async def update_season(
    season_id: UUID,
    payload: SeasonUpdate,
    db: AsyncSession = Depends(get_async_session),
):
    res = await db.execute(select(SeasonModel).where(SeasonModel.id == season_id))
    s = res.scalar_one_or_none()
    if not s:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Season not found")

    data = payload.model_dump(exclude_unset=True, exclude_none=True)
    if "name" in data:
        data["name"] = data["name"].strip() or s.name
    for key, value in data.items():
        setattr(s, key, value)
    if s.end_date < s.start_date:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="end_date cannot be before start_date")

    await db.commit()
    await db.refresh(s)
    return SeasonRead(**s.to_schema)
