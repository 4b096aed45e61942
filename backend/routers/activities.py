import uuid
from typing import Dict, List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from core import ledger
from core.converters import activity_to_dict
from core.exceptions import LedgerError
from core.logging_config import get_logger
from db.database import get_async_session, Activity as ActivityModel, Field as FieldModel
from routers.organizations import get_organization_or_404
from schemas.activities import ActivityCategory, ActivityCreate, ActivityUpdate

router = APIRouter()
logger = get_logger("activities")


async def _get_activity_or_404(db: AsyncSession, activity_id: UUID) -> ActivityModel:
    res = await db.execute(select(ActivityModel).where(ActivityModel.id == activity_id))
    activity = res.scalar_one_or_none()
    if not activity:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Activity not found")
    return activity


async def _check_field(db: AsyncSession, field_id: UUID, organization_id: UUID) -> None:
    res = await db.execute(select(FieldModel).where(FieldModel.id == field_id))
    f = res.scalar_one_or_none()
    if not f or f.organization_id != organization_id:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Field not found")


@router.get("/", response_model=List[Dict])
async def list_activities(
    organization_id: UUID,
    category: Optional[ActivityCategory] = None,
    db: AsyncSession = Depends(get_async_session),
):
    stmt = select(ActivityModel).where(ActivityModel.organization_id == organization_id)
    if category:
        stmt = stmt.where(ActivityModel.category == category)
    res = await db.execute(stmt.order_by(ActivityModel.date.desc(), ActivityModel.created_at.desc()))
    return [activity_to_dict(a) for a in res.scalars().all()]


@router.get("/by-field/{field_id}", response_model=Dict[str, List[Dict]])
async def list_activities_by_field(field_id: UUID, db: AsyncSession = Depends(get_async_session)):
    """Activities logged on one field, grouped by category."""
    res = await db.execute(
        select(ActivityModel)
        .where(ActivityModel.field_id == field_id)
        .order_by(ActivityModel.date.desc(), ActivityModel.created_at.desc())
    )
    grouped: Dict[str, List[Dict]] = {}
    for a in res.scalars().all():
        grouped.setdefault(a.category, []).append(activity_to_dict(a))
    return grouped


@router.get("/{activity_id}", response_model=Dict)
async def get_activity(activity_id: UUID, db: AsyncSession = Depends(get_async_session)):
    activity = await _get_activity_or_404(db, activity_id)
    return activity_to_dict(activity)


@router.post("/", response_model=Dict, status_code=status.HTTP_201_CREATED)
async def create_activity(
    payload: ActivityCreate,
    db: AsyncSession = Depends(get_async_session),
):
    """
    Log an activity.

    Chemical treatments and fertilizer applications that reference an
    inventory item debit ``dose * area`` from it first; if the stock is short
    nothing is saved.
    """
    activity_id = uuid.uuid4()

    try:
        await get_organization_or_404(db, payload.organization_id)
        if payload.field_id:
            await _check_field(db, payload.field_id, payload.organization_id)

        consumption = await ledger.reconcile_on_activity_create(db, payload, activity_id)

        model = ActivityModel(
            id=activity_id,
            **payload.model_dump(),
            inventory_item_id=consumption.inventory_item_id,
            consumed_quantity=consumption.quantity,
        )
        db.add(model)
        await db.commit()
        await db.refresh(model)
        logger.info(
            "activity created id=%s category=%s item=%s consumed=%s",
            activity_id, model.category, model.inventory_item_id, model.consumed_quantity,
        )
        return activity_to_dict(model)
    except (HTTPException, LedgerError):
        await db.rollback()
        raise
    except Exception as e:
        await db.rollback()
        logger.exception("create_activity failed")
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=f"Failed to create activity: {e}")


@router.patch("/{activity_id}", response_model=Dict)
async def update_activity(
    activity_id: UUID,
    payload: ActivityUpdate,
    db: AsyncSession = Depends(get_async_session),
):
    """
    Edit an activity. Stock consumed by the old version is returned and the
    new version's consumption is debited in the same transaction.
    """
    try:
        activity = await _get_activity_or_404(db, activity_id)

        # Only what the client sent; nulls do not clear stored values
        updates = payload.model_dump(exclude_unset=True, exclude_none=True)
        if updates.get("field_id"):
            await _check_field(db, updates["field_id"], activity.organization_id)

        consumption = await ledger.reconcile_on_activity_update(db, activity, updates)

        for key, value in updates.items():
            setattr(activity, key, value)
        activity.inventory_item_id = consumption.inventory_item_id
        activity.consumed_quantity = consumption.quantity

        if activity.end_date and activity.end_date < activity.date:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="end_date cannot be before date")

        await db.commit()
        await db.refresh(activity)
        return activity_to_dict(activity)
    except (HTTPException, LedgerError):
        await db.rollback()
        raise
    except Exception as e:
        await db.rollback()
        logger.exception("update_activity failed id=%s", activity_id)
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=f"Failed to update activity: {e}")


@router.delete("/{activity_id}", response_model=Dict)
async def delete_activity(activity_id: UUID, db: AsyncSession = Depends(get_async_session)):
    try:
        activity = await _get_activity_or_404(db, activity_id)
        await ledger.reconcile_on_activity_delete(db, activity)
        await db.delete(activity)
        await db.commit()
        logger.info("activity deleted id=%s", activity_id)
        return {"ok": True}
    except (HTTPException, LedgerError):
        await db.rollback()
        raise
    except Exception as e:
        await db.rollback()
        logger.exception("delete_activity failed id=%s", activity_id)
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=f"Failed to delete activity: {e}")
