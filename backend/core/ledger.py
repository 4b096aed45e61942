"""
Inventory consumption ledger.

Activities that apply a chemical or fertilizer consume ``dose * area`` of the
referenced inventory item. This module is the only writer of
``InventoryItem.quantity``:

- ``debit`` / ``credit`` change one item's stock and journal the change as an
  InventoryMovement row.
- ``reconcile_on_activity_*`` translate an activity create/update/delete into
  debits and credits.

Nothing here commits. Callers run these inside the request transaction and
roll it back when any of them raises, so a failed debit never leaves a
half-applied activity behind.
"""

from dataclasses import dataclass
from typing import Any, Mapping, Optional
from uuid import UUID

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.sql import func

from core.exceptions import InsufficientQuantityError, ItemCategoryError, NotFoundError
from core.logging_config import get_logger
from db.database import (
    Activity as ActivityModel,
    InventoryItem as InventoryItemModel,
    InventoryMovement as InventoryMovementModel,
)
from schemas.inventory import CHEMICAL_CATEGORIES, FERTILIZER_CATEGORIES

logger = get_logger("ledger")

# category -> (item reference column, area column)
CONSUMING_CATEGORIES = {
    "chemical_treatment": ("chemical_id", "treated_area"),
    "fertilizer": ("fertilizer_id", "fertilized_area"),
}

# inventory item categories each consuming activity may draw from
ITEM_CATEGORIES = {
    "chemical_treatment": CHEMICAL_CATEGORIES,
    "fertilizer": FERTILIZER_CATEGORIES,
}


@dataclass
class Consumption:
    """What an activity consumes after reconciliation."""

    inventory_item_id: Optional[UUID] = None
    quantity: float = 0.0


def compute_required_quantity(dose: Optional[float], area: Optional[float]) -> float:
    """Stock consumed by applying ``dose`` per unit area over ``area``. No unit conversion."""
    if not dose or not area:
        return 0.0
    return dose * area


async def get_item(db: AsyncSession, item_id: UUID) -> Optional[InventoryItemModel]:
    # populate_existing: quantity is changed with bulk UPDATEs that bypass the identity map
    res = await db.execute(
        select(InventoryItemModel)
        .where(InventoryItemModel.id == item_id)
        .execution_options(populate_existing=True)
    )
    return res.scalar_one_or_none()


def _record_movement(
    db: AsyncSession,
    item: InventoryItemModel,
    change: float,
    *,
    reason: Optional[str],
    source_type: Optional[str],
    source_activity_id: Optional[UUID],
    is_reversal: bool = False,
) -> None:
    db.add(
        InventoryMovementModel(
            inventory_item_id=item.id,
            change=change,
            quantity_after=float(item.quantity),
            reason=reason,
            source_type=source_type,
            source_activity_id=source_activity_id,
            is_reversal=is_reversal,
        )
    )


async def debit(
    db: AsyncSession,
    item_id: UUID,
    required_quantity: float,
    *,
    reason: Optional[str] = None,
    source_type: Optional[str] = "activity",
    source_activity_id: Optional[UUID] = None,
) -> InventoryItemModel:
    """
    Take ``required_quantity`` out of stock, or fail without touching it.

    The availability check and the decrement are one conditional UPDATE, so
    concurrent debits of the same item cannot both pass on a stale read.
    """
    if required_quantity < 0:
        raise ValueError("required_quantity must be >= 0")

    res = await db.execute(
        update(InventoryItemModel)
        .where(
            InventoryItemModel.id == item_id,
            InventoryItemModel.quantity >= required_quantity,
        )
        .values(
            quantity=InventoryItemModel.quantity - required_quantity,
            updated_at=func.now(),
        )
        .execution_options(synchronize_session=False)
    )
    item = await get_item(db, item_id)
    if res.rowcount != 1:
        if item is None:
            raise NotFoundError("Inventory item", item_id)
        logger.warning(
            "debit rejected item=%s required=%s available=%s %s",
            item_id, required_quantity, item.quantity, item.unit,
        )
        raise InsufficientQuantityError(float(item.quantity), float(required_quantity), item.unit)

    _record_movement(
        db,
        item,
        -float(required_quantity),
        reason=reason,
        source_type=source_type,
        source_activity_id=source_activity_id,
    )
    logger.info("debit item=%s amount=%s quantity=%s", item_id, required_quantity, item.quantity)
    return item


async def credit(
    db: AsyncSession,
    item_id: UUID,
    quantity: float,
    *,
    reason: Optional[str] = None,
    source_type: Optional[str] = "activity",
    source_activity_id: Optional[UUID] = None,
    is_reversal: bool = False,
) -> InventoryItemModel:
    """Put ``quantity`` back into stock (reversal of an earlier debit or a correction)."""
    if quantity < 0:
        raise ValueError("quantity must be >= 0")

    res = await db.execute(
        update(InventoryItemModel)
        .where(InventoryItemModel.id == item_id)
        .values(
            quantity=InventoryItemModel.quantity + quantity,
            updated_at=func.now(),
        )
        .execution_options(synchronize_session=False)
    )
    if res.rowcount != 1:
        raise NotFoundError("Inventory item", item_id)

    item = await get_item(db, item_id)
    _record_movement(
        db,
        item,
        float(quantity),
        reason=reason,
        source_type=source_type,
        source_activity_id=source_activity_id,
        is_reversal=is_reversal,
    )
    logger.info("credit item=%s amount=%s quantity=%s", item_id, quantity, item.quantity)
    return item


async def adjust(
    db: AsyncSession,
    item_id: UUID,
    new_quantity: float,
    *,
    reason: Optional[str] = None,
) -> InventoryItemModel:
    """Set stock to ``new_quantity`` (stocktake, purchase) through a credit or debit."""
    if new_quantity < 0:
        raise ValueError("new_quantity must be >= 0")

    item = await get_item(db, item_id)
    if item is None:
        raise NotFoundError("Inventory item", item_id)

    delta = float(new_quantity) - float(item.quantity)
    reason = reason or "Stock adjustment"
    if delta > 0:
        return await credit(db, item_id, delta, reason=reason, source_type="adjustment")
    if delta < 0:
        return await debit(db, item_id, -delta, reason=reason, source_type="adjustment")
    return item


def record_opening_balance(db: AsyncSession, item: InventoryItemModel) -> None:
    """Journal the quantity a new item was created with."""
    _record_movement(
        db,
        item,
        float(item.quantity or 0),
        reason="Opening balance",
        source_type="opening",
        source_activity_id=None,
    )


def _activity_label(category: str, name: Optional[str]) -> str:
    label = category.replace("_", " ")
    return f"{label}: {name}" if name else label


async def _require_item(
    db: AsyncSession,
    item_id: UUID,
    organization_id: UUID,
    activity_category: str,
) -> InventoryItemModel:
    item = await get_item(db, item_id)
    # Items of other organizations are invisible, not forbidden
    if item is None or item.organization_id != organization_id:
        raise NotFoundError("Inventory item", item_id)
    expected = ITEM_CATEGORIES[activity_category]
    if item.category not in expected:
        logger.warning(
            "item category rejected item=%s category=%s activity=%s",
            item_id, item.category, activity_category,
        )
        raise ItemCategoryError(item_id, item.category, expected)
    return item


async def reconcile_on_activity_create(
    db: AsyncSession,
    draft: Any,
    activity_id: UUID,
) -> Consumption:
    """
    Debit the stock a new activity consumes. Call before inserting the activity.

    Only chemical treatments (via ``chemical_id``) and fertilizer applications
    (via ``fertilizer_id``) consume inventory, and only when both dose and
    the category's area are positive. The referenced item must be of a kind
    the activity can use (see ``ITEM_CATEGORIES``).
    """
    spec = CONSUMING_CATEGORIES.get(draft.category)
    if spec is None:
        return Consumption()
    item_attr, area_attr = spec

    item_id = getattr(draft, item_attr, None)
    if item_id is None:
        return Consumption()
    await _require_item(db, item_id, draft.organization_id, draft.category)

    required = compute_required_quantity(draft.dose, getattr(draft, area_attr, None))
    if required > 0:
        await debit(
            db,
            item_id,
            required,
            reason=_activity_label(draft.category, getattr(draft, "chemical_name", None) or getattr(draft, "fertilizer_name", None)),
            source_activity_id=activity_id,
        )
    return Consumption(inventory_item_id=item_id, quantity=required)


def stored_consumption(activity: ActivityModel) -> float:
    """Quantity the ledger debited for ``activity`` when it was last written."""
    if activity.consumed_quantity is not None:
        return float(activity.consumed_quantity)
    # rows written before consumed_quantity existed
    return compute_required_quantity(activity.dose, activity.consumed_area)


async def _reverse(db: AsyncSession, activity: ActivityModel, reason: str) -> None:
    amount = stored_consumption(activity)
    if not activity.inventory_item_id or amount <= 0:
        return
    try:
        await credit(
            db,
            activity.inventory_item_id,
            amount,
            reason=reason,
            source_activity_id=activity.id,
            is_reversal=True,
        )
    except NotFoundError:
        # Item deleted from the warehouse after the activity was logged
        logger.warning(
            "reversal skipped, item=%s no longer exists (activity=%s amount=%s)",
            activity.inventory_item_id, activity.id, amount,
        )


def resolve_item_id(activity: ActivityModel, updates: Mapping[str, Any]) -> Optional[UUID]:
    """Inventory item an updated activity should consume from, or None."""
    new_category = updates.get("category") or activity.category
    if new_category not in CONSUMING_CATEGORIES:
        return None

    candidates = [
        updates.get("chemical_id"),
        updates.get("fertilizer_id"),
        activity.chemical_id if updates.get("category") == "chemical_treatment" else None,
        activity.fertilizer_id if updates.get("category") == "fertilizer" else None,
    ]
    if new_category == activity.category:
        candidates.append(activity.chemical_id if activity.category == "chemical_treatment" else None)
        candidates.append(activity.fertilizer_id if activity.category == "fertilizer" else None)
    return next((c for c in candidates if c is not None), None)


def resolve_dose_and_area(activity: ActivityModel, updates: Mapping[str, Any]) -> tuple[float, float]:
    dose = updates.get("dose")
    if dose is None:
        dose = activity.dose or 0.0
    area = (
        updates.get("treated_area")
        or updates.get("fertilized_area")
        or activity.treated_area
        or activity.fertilized_area
        or 0.0
    )
    return float(dose), float(area)


async def reconcile_on_activity_update(
    db: AsyncSession,
    activity: ActivityModel,
    updates: Mapping[str, Any],
) -> Consumption:
    """
    Re-apply an edited activity's consumption: credit back everything the
    stored activity consumed, then debit what the edited one consumes.

    ``updates`` holds only the fields the client sent. The credit is always
    fully applied before the new debit is checked, since both may hit the
    same item. If the debit fails the caller's rollback undoes the credit.
    """
    await _reverse(db, activity, reason=f"Activity updated ({activity.id})")

    item_id = resolve_item_id(activity, updates)
    new_category = updates.get("category") or activity.category
    if item_id is None:
        # nothing new referenced, a still-consuming activity keeps its reference
        keep = new_category == activity.category and new_category in CONSUMING_CATEGORIES
        return Consumption(inventory_item_id=activity.inventory_item_id if keep else None)

    # also re-checked when unchanged: the category may have switched
    await _require_item(db, item_id, activity.organization_id, new_category)

    dose, area = resolve_dose_and_area(activity, updates)
    required = compute_required_quantity(dose, area)
    if required > 0:
        name = updates.get("chemical_name") or updates.get("fertilizer_name") or activity.chemical_name or activity.fertilizer_name
        await debit(
            db,
            item_id,
            required,
            reason=_activity_label(new_category, name),
            source_activity_id=activity.id,
        )
    return Consumption(inventory_item_id=item_id, quantity=required)


async def reconcile_on_activity_delete(db: AsyncSession, activity: ActivityModel) -> None:
    """Credit back what ``activity`` consumed. Call before deleting the row."""
    await _reverse(db, activity, reason=f"Activity deleted ({activity.id})")
