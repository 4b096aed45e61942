from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession
from typing import Dict, List
from uuid import UUID

from db.database import get_async_session, Field as FieldModel, Season as SeasonModel
from routers.organizations import get_organization_or_404
from schemas.fields import FieldCreate, FieldRead, FieldUpdate

router = APIRouter()


async def get_field_or_404(db: AsyncSession, field_id: UUID) -> FieldModel:
    res = await db.execute(select(FieldModel).where(FieldModel.id == field_id))
    f = res.scalar_one_or_none()
    if not f:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Field not found")
    return f


async def _check_season(db: AsyncSession, season_id: UUID, organization_id: UUID) -> None:
    res = await db.execute(select(SeasonModel).where(SeasonModel.id == season_id))
    s = res.scalar_one_or_none()
    if not s or s.organization_id != organization_id:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Season not found")


@router.get("/", response_model=List[FieldRead])
async def list_fields(
    organization_id: UUID,
    db: AsyncSession = Depends(get_async_session),
):
    res = await db.execute(
        select(FieldModel)
        .where(FieldModel.organization_id == organization_id)
        .order_by(func.lower(FieldModel.name).asc())
    )
    return [FieldRead(**f.to_schema) for f in res.scalars().all()]


@router.get("/{field_id}", response_model=FieldRead)
async def get_field(field_id: UUID, db: AsyncSession = Depends(get_async_session)):
    f = await get_field_or_404(db, field_id)
    return FieldRead(**f.to_schema)


@router.post("/", response_model=FieldRead, status_code=status.HTTP_201_CREATED)
async def create_field(
    payload: FieldCreate,
    db: AsyncSession = Depends(get_async_session),
):
    await get_organization_or_404(db, payload.organization_id)
    if payload.season_id:
        await _check_season(db, payload.season_id, payload.organization_id)

    data = payload.model_dump(exclude={"location"})
    if payload.location:
        data["latitude"] = payload.location.latitude
        data["longitude"] = payload.location.longitude

    f = FieldModel(**data)
    db.add(f)
    await db.commit()
    await db.refresh(f)
    return FieldRead(**f.to_schema)


@router.patch("/{field_id}", response_model=FieldRead)
async def update_field(
    field_id: UUID,
    payload: FieldUpdate,
    db: AsyncSession = Depends(get_async_session),
):
    f = await get_field_or_404(db, field_id)

    data = payload.model_dump(exclude_unset=True, exclude={"location"})
    if data.get("season_id"):
        await _check_season(db, data["season_id"], f.organization_id)
    if "location" in payload.model_fields_set:
        f.latitude = payload.location.latitude if payload.location else None
        f.longitude = payload.location.longitude if payload.location else None
    for key, value in data.items():
        if value is None and key in ("name", "area", "bzs_number", "populated_place", "land_area", "locality"):
            continue
        setattr(f, key, value)

    await db.commit()
    await db.refresh(f)
    return FieldRead(**f.to_schema)


@router.delete("/{field_id}", response_model=Dict)
async def delete_field(field_id: UUID, db: AsyncSession = Depends(get_async_session)):
    f = await get_field_or_404(db, field_id)
    await db.delete(f)
    await db.commit()
    return {"ok": True}
