from datetime import date, timedelta
from typing import Dict, List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from core.converters import activity_to_dict, inventory_item_to_dict
from db.database import (
    get_async_session,
    Activity as ActivityModel,
    Field as FieldModel,
    InventoryItem as InventoryItemModel,
    Season as SeasonModel,
)

router = APIRouter()

RECENT_ACTIVITY_DAYS = 7
EXPIRY_WARNING_DAYS = 30


async def _active_season(db: AsyncSession, organization_id: UUID) -> Optional[SeasonModel]:
    res = await db.execute(
        select(SeasonModel)
        .where(SeasonModel.organization_id == organization_id)
        .where(SeasonModel.is_active == True)  # noqa: E712
        .order_by(SeasonModel.start_date.desc())
    )
    return res.scalars().first()


@router.get("/stats", response_model=Dict)
async def get_dashboard_stats(
    organization_id: UUID,
    db: AsyncSession = Depends(get_async_session),
):
    inv = await db.execute(
        select(func.count(InventoryItemModel.id), func.coalesce(func.sum(InventoryItemModel.quantity), 0))
        .where(InventoryItemModel.organization_id == organization_id)
    )
    total_products, total_quantity = inv.one()

    flds = await db.execute(
        select(func.count(FieldModel.id), func.coalesce(func.sum(FieldModel.area), 0))
        .where(FieldModel.organization_id == organization_id)
    )
    active_fields, total_area = flds.one()

    since = date.today() - timedelta(days=RECENT_ACTIVITY_DAYS)
    recent = await db.execute(
        select(func.count(ActivityModel.id))
        .where(ActivityModel.organization_id == organization_id)
        .where(ActivityModel.date >= since)
    )

    return {
        "total_products": int(total_products or 0),
        "total_product_quantity": float(total_quantity or 0),
        "active_fields": int(active_fields or 0),
        "total_area": float(total_area or 0),
        "recent_activities_count": int(recent.scalar_one() or 0),
    }


@router.get("/fields-by-season", response_model=Dict)
async def get_fields_by_season(
    organization_id: UUID,
    db: AsyncSession = Depends(get_async_session),
):
    """Field count and area per season, with a crop type breakdown."""
    fres = await db.execute(select(FieldModel).where(FieldModel.organization_id == organization_id))
    fields = fres.scalars().all()
    sres = await db.execute(select(SeasonModel).where(SeasonModel.organization_id == organization_id))
    seasons = {s.id: s for s in sres.scalars().all()}

    by_season: Dict[str, dict] = {}
    by_crop: Dict[str, dict] = {}
    for f in fields:
        season = seasons.get(f.season_id) if f.season_id else None
        key = str(season.id) if season else "no-season"
        crop = f.crop_type or "Unknown"
        area = float(f.area or 0)

        group = by_season.setdefault(
            key,
            {
                "season_id": key,
                "season_name": season.name if season else "No Season",
                "year": season.start_date.year if season else date.today().year,
                "count": 0,
                "total_area": 0.0,
                "crop_types": {},
            },
        )
        group["count"] += 1
        group["total_area"] += area
        crop_stats = group["crop_types"].setdefault(crop, {"crop_type": crop, "count": 0, "area": 0.0})
        crop_stats["count"] += 1
        crop_stats["area"] += area

        overall = by_crop.setdefault(crop, {"crop_type": crop, "count": 0, "area": 0.0})
        overall["count"] += 1
        overall["area"] += area

    for group in by_season.values():
        group["crop_types"] = list(group["crop_types"].values())

    return {
        "by_season": list(by_season.values()),
        "by_crop_type": list(by_crop.values()),
        "total_fields": len(fields),
        "total_area": sum(float(f.area or 0) for f in fields),
    }


@router.get("/recent-activities", response_model=List[Dict])
async def get_recent_activities(
    organization_id: UUID,
    limit: int = Query(10, ge=1, le=100),
    db: AsyncSession = Depends(get_async_session),
):
    res = await db.execute(
        select(ActivityModel, FieldModel.name)
        .outerjoin(FieldModel, ActivityModel.field_id == FieldModel.id)
        .where(ActivityModel.organization_id == organization_id)
        .order_by(ActivityModel.date.desc(), ActivityModel.created_at.desc())
        .limit(limit)
    )
    out = []
    for activity, field_name in res.all():
        row = activity_to_dict(activity)
        row["field_name"] = field_name
        out.append(row)
    return out


@router.get("/low-stock", response_model=List[Dict])
async def get_low_stock_inventory(
    organization_id: UUID,
    quantity_threshold: float = Query(10, ge=0),
    db: AsyncSession = Depends(get_async_session),
):
    """Items below ``quantity_threshold`` or expiring within 30 days."""
    expiry_cutoff = date.today() + timedelta(days=EXPIRY_WARNING_DAYS)
    res = await db.execute(
        select(InventoryItemModel)
        .where(InventoryItemModel.organization_id == organization_id)
        .order_by(func.lower(InventoryItemModel.name).asc())
    )

    out = []
    for it in res.scalars().all():
        low = float(it.quantity or 0) < quantity_threshold
        expiring = it.expiry_date is not None and it.expiry_date < expiry_cutoff
        if not (low or expiring):
            continue
        row = inventory_item_to_dict(it)
        row["alert_type"] = "both" if low and expiring else ("low_stock" if low else "near_expiry")
        out.append(row)
    return out


@router.get("/member-activity", response_model=Dict)
async def get_member_activity_counts(
    organization_id: UUID,
    db: AsyncSession = Depends(get_async_session),
):
    """Activities logged per user since the active season started (or since Jan 1)."""
    season = await _active_season(db, organization_id)
    start = season.start_date if season else date(date.today().year, 1, 1)

    res = await db.execute(
        select(ActivityModel.user_id, func.count(ActivityModel.id))
        .where(ActivityModel.organization_id == organization_id)
        .where(ActivityModel.date >= start)
        .group_by(ActivityModel.user_id)
    )
    counts = {user_id: int(n) for user_id, n in res.all()}
    return {
        "activity_count_by_user": counts,
        "total_activities": sum(counts.values()),
        "since": start,
    }
