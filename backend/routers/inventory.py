import uuid
from typing import Dict, List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from core import ledger
from core.converters import inventory_item_to_dict
from core.exceptions import LedgerError
from core.logging_config import get_logger
from db.database import (
    get_async_session,
    InventoryItem as InventoryItemModel,
    InventoryMovement as InventoryMovementModel,
)
from routers.organizations import get_organization_or_404
from schemas.inventory import (
    CHEMICAL_CATEGORIES,
    FERTILIZER_CATEGORIES,
    InventoryItemCreate,
    InventoryItemUpdate,
    InventoryMovementOut,
)

router = APIRouter()
logger = get_logger("inventory")


async def get_item_or_404(db: AsyncSession, item_id: UUID) -> InventoryItemModel:
    res = await db.execute(select(InventoryItemModel).where(InventoryItemModel.id == item_id))
    it = res.scalar_one_or_none()
    if not it:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Inventory item not found")
    return it


async def _available_items(
    db: AsyncSession,
    organization_id: UUID,
    categories: tuple,
    crop_type: Optional[str],
) -> List[Dict]:
    """In-stock items of the given categories usable on ``crop_type``."""
    res = await db.execute(
        select(InventoryItemModel)
        .where(InventoryItemModel.organization_id == organization_id)
        .where(InventoryItemModel.category.in_(categories))
        .where(InventoryItemModel.quantity > 0)
        .order_by(func.lower(InventoryItemModel.name).asc())
    )
    items = res.scalars().all()
    if crop_type:
        items = [it for it in items if it.applies_to_crop(crop_type)]
    return [inventory_item_to_dict(it) for it in items]


@router.get("/items", response_model=List[Dict])
async def list_inventory_items(
    organization_id: UUID,
    category: Optional[str] = None,
    q: Optional[str] = None,
    db: AsyncSession = Depends(get_async_session),
):
    stmt = select(InventoryItemModel).where(InventoryItemModel.organization_id == organization_id)
    if category:
        stmt = stmt.where(InventoryItemModel.category == category.strip().lower())
    if q:
        qq = f"%{q.strip().lower()}%"
        stmt = stmt.where(func.lower(InventoryItemModel.name).like(qq))

    res = await db.execute(stmt.order_by(func.lower(InventoryItemModel.name).asc()))
    return [inventory_item_to_dict(it) for it in res.scalars().all()]


@router.get("/available-chemicals", response_model=List[Dict])
async def list_available_chemicals(
    organization_id: UUID,
    crop_type: Optional[str] = None,
    db: AsyncSession = Depends(get_async_session),
):
    return await _available_items(db, organization_id, CHEMICAL_CATEGORIES, crop_type)


@router.get("/available-fertilizers", response_model=List[Dict])
async def list_available_fertilizers(
    organization_id: UUID,
    crop_type: Optional[str] = None,
    db: AsyncSession = Depends(get_async_session),
):
    return await _available_items(db, organization_id, FERTILIZER_CATEGORIES, crop_type)


@router.get("/items/{item_id}", response_model=Dict)
async def get_inventory_item(item_id: UUID, db: AsyncSession = Depends(get_async_session)):
    it = await get_item_or_404(db, item_id)
    return inventory_item_to_dict(it)


@router.post("/items", response_model=Dict, status_code=status.HTTP_201_CREATED)
async def create_inventory_item(
    payload: InventoryItemCreate,
    db: AsyncSession = Depends(get_async_session),
):
    await get_organization_or_404(db, payload.organization_id)

    model = InventoryItemModel(id=uuid.uuid4(), **payload.model_dump())
    db.add(model)
    ledger.record_opening_balance(db, model)
    await db.commit()
    await db.refresh(model)
    logger.info("inventory item created id=%s name=%s quantity=%s %s", model.id, model.name, model.quantity, model.unit)
    return inventory_item_to_dict(model)


@router.patch("/items/{item_id}", response_model=Dict)
async def update_inventory_item(
    item_id: UUID,
    payload: InventoryItemUpdate,
    db: AsyncSession = Depends(get_async_session),
):
    try:
        model = await get_item_or_404(db, item_id)

        data = payload.model_dump(exclude_unset=True)
        new_quantity = data.pop("quantity", None)
        reason = data.pop("adjustment_reason", None)

        # Stock goes through the ledger so the change is journaled
        if new_quantity is not None:
            model = await ledger.adjust(db, item_id, new_quantity, reason=reason)

        for key, value in data.items():
            if value is None and key in ("name", "unit", "category"):
                continue
            if key == "category":
                value = value.lower()
            setattr(model, key, value)

        await db.commit()
        await db.refresh(model)
        return inventory_item_to_dict(model)
    except (HTTPException, LedgerError):
        await db.rollback()
        raise
    except Exception as e:
        await db.rollback()
        logger.exception("update_inventory_item failed item=%s", item_id)
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=f"Failed to update inventory item: {e}")


@router.delete("/items/{item_id}", response_model=Dict)
async def delete_inventory_item(item_id: UUID, db: AsyncSession = Depends(get_async_session)):
    model = await get_item_or_404(db, item_id)
    await db.delete(model)
    await db.commit()
    logger.info("inventory item deleted id=%s", item_id)
    return {"ok": True}


@router.get("/items/{item_id}/movements", response_model=List[InventoryMovementOut])
async def list_item_movements(item_id: UUID, db: AsyncSession = Depends(get_async_session)):
    await get_item_or_404(db, item_id)
    res = await db.execute(
        select(InventoryMovementModel)
        .where(InventoryMovementModel.inventory_item_id == item_id)
        .order_by(InventoryMovementModel.created_at.desc())
    )
    return [InventoryMovementOut.model_validate(m) for m in res.scalars().all()]
