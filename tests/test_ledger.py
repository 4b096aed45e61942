import asyncio
from datetime import date
import uuid

import pytest
from sqlalchemy import select

from core import ledger
from core.exceptions import InsufficientQuantityError, NotFoundError
from db.database import (
    async_session_maker,
    Activity,
    InventoryItem,
    InventoryMovement,
    Organization,
)


async def _setup(quantity=100.0, unit="l"):
    async with async_session_maker() as db:
        org = Organization(clerk_org_id=f"org_{uuid.uuid4().hex}", name="Farm", slug=uuid.uuid4().hex)
        db.add(org)
        await db.flush()
        item = InventoryItem(
            id=uuid.uuid4(),
            organization_id=org.id,
            name="Herbicide",
            category="chemical",
            quantity=quantity,
            unit=unit,
        )
        db.add(item)
        await db.commit()
        return org.id, item.id


async def _quantity(item_id):
    async with async_session_maker() as db:
        item = await ledger.get_item(db, item_id)
        return item.quantity


async def _movements(item_id):
    async with async_session_maker() as db:
        res = await db.execute(
            select(InventoryMovement).where(InventoryMovement.inventory_item_id == item_id)
        )
        return res.scalars().all()


@pytest.mark.parametrize(
    "dose,area,expected",
    [(2, 10, 20), (0.5, 3, 1.5), (0, 10, 0), (2, 0, 0), (None, 10, 0), (2, None, 0)],
)
def test_compute_required_quantity(dose, area, expected):
    assert ledger.compute_required_quantity(dose, area) == expected


def test_debit_then_credit_restores_quantity():
    async def scenario():
        _, item_id = await _setup(100.0)
        async with async_session_maker() as db:
            item = await ledger.debit(db, item_id, 20.0)
            assert item.quantity == 80.0
            item = await ledger.credit(db, item_id, 20.0, is_reversal=True)
            assert item.quantity == 100.0
            await db.commit()
        return item_id

    item_id = asyncio.run(scenario())
    assert asyncio.run(_quantity(item_id)) == 100.0
    movements = asyncio.run(_movements(item_id))
    assert sorted(m.change for m in movements) == [-20.0, 20.0]
    assert any(m.is_reversal for m in movements)


def test_debit_insufficient_leaves_quantity_unchanged():
    async def scenario():
        _, item_id = await _setup(80.0)
        async with async_session_maker() as db:
            with pytest.raises(InsufficientQuantityError) as exc:
                await ledger.debit(db, item_id, 100.0)
            await db.rollback()
        return item_id, exc.value

    item_id, err = asyncio.run(scenario())
    assert err.available == 80.0
    assert err.required == 100.0
    assert err.unit == "l"
    assert str(err) == "Insufficient quantity. Available: 80 l, Required: 100 l"
    assert asyncio.run(_quantity(item_id)) == 80.0
    assert asyncio.run(_movements(item_id)) == []


def test_debit_exact_quantity_reaches_zero():
    async def scenario():
        _, item_id = await _setup(20.0)
        async with async_session_maker() as db:
            await ledger.debit(db, item_id, 20.0)
            await db.commit()
        return item_id

    item_id = asyncio.run(scenario())
    assert asyncio.run(_quantity(item_id)) == 0.0


def test_debit_unknown_item_raises_not_found():
    async def scenario():
        async with async_session_maker() as db:
            await ledger.debit(db, uuid.uuid4(), 1.0)

    with pytest.raises(NotFoundError):
        asyncio.run(scenario())


def test_negative_amounts_are_rejected():
    async def scenario():
        _, item_id = await _setup(10.0)
        async with async_session_maker() as db:
            with pytest.raises(ValueError):
                await ledger.debit(db, item_id, -1.0)
            with pytest.raises(ValueError):
                await ledger.credit(db, item_id, -1.0)

    asyncio.run(scenario())


def test_adjust_journals_the_delta():
    async def scenario():
        _, item_id = await _setup(10.0)
        async with async_session_maker() as db:
            await ledger.adjust(db, item_id, 25.0, reason="Delivery")
            await ledger.adjust(db, item_id, 5.0)
            await db.commit()
        return item_id

    item_id = asyncio.run(scenario())
    assert asyncio.run(_quantity(item_id)) == 5.0
    movements = asyncio.run(_movements(item_id))
    assert sorted(m.change for m in movements) == [-20.0, 15.0]
    assert {m.source_type for m in movements} == {"adjustment"}


def test_update_reversal_is_undone_when_new_debit_fails():
    async def scenario():
        org_id, item_id = await _setup(100.0)
        async with async_session_maker() as db:
            activity_id = uuid.uuid4()
            await ledger.debit(db, item_id, 80.0, source_activity_id=activity_id)
            db.add(
                Activity(
                    id=activity_id,
                    organization_id=org_id,
                    category="chemical_treatment",
                    type="",
                    date=date(2024, 5, 1),
                    user_id="u1",
                    chemical_id=item_id,
                    dose=8.0,
                    treated_area=10.0,
                    inventory_item_id=item_id,
                    consumed_quantity=80.0,
                )
            )
            await db.commit()

        async with async_session_maker() as db:
            activity = (await db.execute(select(Activity).where(Activity.id == activity_id))).scalar_one()
            with pytest.raises(InsufficientQuantityError) as exc:
                await ledger.reconcile_on_activity_update(db, activity, {"dose": 20.0})
            await db.rollback()
        return item_id, exc.value

    item_id, err = asyncio.run(scenario())
    # the credit of 80 was applied before the check, then rolled back
    assert err.available == 100.0
    assert err.required == 200.0
    assert asyncio.run(_quantity(item_id)) == 20.0


def test_stored_consumption_falls_back_to_dose_times_area():
    activity = Activity(dose=2.0, treated_area=5.0, consumed_quantity=None)
    assert ledger.stored_consumption(activity) == 10.0
    activity.consumed_quantity = 7.5
    assert ledger.stored_consumption(activity) == 7.5


def test_resolve_item_id_category_change():
    old_item = uuid.uuid4()
    new_item = uuid.uuid4()
    activity = Activity(category="chemical_treatment", chemical_id=old_item, fertilizer_id=None)

    assert ledger.resolve_item_id(activity, {}) == old_item
    assert ledger.resolve_item_id(activity, {"chemical_id": new_item}) == new_item
    assert ledger.resolve_item_id(activity, {"category": "farm_activity"}) is None
    # switching to fertilizer does not carry the chemical over
    assert ledger.resolve_item_id(activity, {"category": "fertilizer"}) is None
    assert ledger.resolve_item_id(activity, {"category": "fertilizer", "fertilizer_id": new_item}) == new_item


def test_resolve_dose_and_area_prefers_new_values():
    activity = Activity(dose=2.0, treated_area=10.0, fertilized_area=None)
    assert ledger.resolve_dose_and_area(activity, {}) == (2.0, 10.0)
    assert ledger.resolve_dose_and_area(activity, {"dose": 1.0}) == (1.0, 10.0)
    assert ledger.resolve_dose_and_area(activity, {"treated_area": 4.0}) == (2.0, 4.0)
