import asyncio
import sys
import uuid
from datetime import date
from pathlib import Path

"""
Seed a demo farm (organization, season, fields, warehouse, activities).

Activities go through the inventory ledger, so the seeded stock reflects
what the seeded treatments consumed.

This script can be run from either:
- backend/: `python scripts/seed_demo_farm.py`
- repo root: `python backend/scripts/seed_demo_farm.py`
"""

# Allow running from repo root by ensuring `backend/` is on sys.path
BACKEND_DIR = Path(__file__).resolve().parents[1]
if str(BACKEND_DIR) not in sys.path:
    sys.path.insert(0, str(BACKEND_DIR))

from sqlalchemy import func, select

from core import ledger
from core.logging_config import configure_logging, get_logger
from db.database import (
    async_session_maker,
    create_db_and_tables,
    Activity,
    Field,
    InventoryItem,
    Organization,
    Season,
)
from schemas.activities import ActivityCreate

logger = get_logger("scripts.seed")

DEMO_USER = "demo-agronomist"


async def get_or_create_organization(session, clerk_org_id: str, name: str, slug: str) -> Organization:
    result = await session.execute(select(Organization).where(Organization.clerk_org_id == clerk_org_id))
    org = result.scalar_one_or_none()
    if org:
        return org

    org = Organization(
        clerk_org_id=clerk_org_id,
        name=name,
        slug=slug,
        municipality="Пловдив",
        settlement="Труд",
        address="ул. Първа 1",
        agriculture_directorate='ОД "Земеделие" Пловдив',
        regional_food_safety_directorate="ОДБХ Пловдив",
        ekatte_registration="73242",
        is_onboarded=True,
    )
    session.add(org)
    await session.flush()
    return org


async def get_or_create_season(session, org_id, year: int) -> Season:
    label = f"{year} / {year + 1}"
    result = await session.execute(
        select(Season).where(Season.organization_id == org_id, Season.year == label)
    )
    season = result.scalar_one_or_none()
    if season:
        return season

    season = Season(
        organization_id=org_id,
        name=label,
        year=label,
        start_date=date(year, 1, 1),
        end_date=date(year, 12, 31),
        is_active=True,
    )
    session.add(season)
    await session.flush()
    return season


async def get_or_create_field(session, org_id, season_id, name: str, **kwargs) -> Field:
    result = await session.execute(
        select(Field).where(Field.organization_id == org_id, func.lower(Field.name) == name.lower())
    )
    f = result.scalar_one_or_none()
    if f:
        return f

    f = Field(organization_id=org_id, season_id=season_id, name=name, **kwargs)
    session.add(f)
    await session.flush()
    return f


async def get_or_create_item(session, org_id, name: str, category: str, quantity: float, unit: str, **kwargs) -> InventoryItem:
    result = await session.execute(
        select(InventoryItem).where(
            InventoryItem.organization_id == org_id,
            func.lower(InventoryItem.name) == name.lower(),
        )
    )
    item = result.scalar_one_or_none()
    if item:
        return item

    item = InventoryItem(
        id=uuid.uuid4(),
        organization_id=org_id,
        name=name,
        category=category,
        quantity=quantity,
        unit=unit,
        **kwargs,
    )
    session.add(item)
    ledger.record_opening_balance(session, item)
    await session.flush()
    return item


async def log_activity(session, **data) -> Activity:
    """Create an activity the way the API does: ledger first, then the row."""
    draft = ActivityCreate(user_id=DEMO_USER, **data)
    activity_id = uuid.uuid4()
    consumption = await ledger.reconcile_on_activity_create(session, draft, activity_id)
    activity = Activity(
        id=activity_id,
        **draft.model_dump(),
        inventory_item_id=consumption.inventory_item_id,
        consumed_quantity=consumption.quantity,
    )
    session.add(activity)
    await session.flush()
    return activity


async def seed():
    await create_db_and_tables()

    async with async_session_maker() as session:
        async with session.begin():
            org = await get_or_create_organization(session, "org_demo", "Демо Агро ЕООД", "demo-agro")

            existing = await session.execute(
                select(func.count(Activity.id)).where(Activity.organization_id == org.id)
            )
            if existing.scalar_one():
                logger.info("demo farm already seeded, nothing to do")
                return

            year = date.today().year
            season = await get_or_create_season(session, org.id, year)

            wheat = await get_or_create_field(
                session, org.id, season.id, "Нива Север",
                bzs_number="73242-101", populated_place="Труд", land_area="Труд",
                locality="Баира", area=120.0, crop_type="wheat", sowing_date=date(year - 1, 10, 15),
            )
            sunflower = await get_or_create_field(
                session, org.id, season.id, "Нива Юг",
                bzs_number="73242-102", populated_place="Труд", land_area="Труд",
                locality="Кории", area=85.5, crop_type="sunflower", sowing_date=date(year, 4, 10),
            )

            herbicide = await get_or_create_item(
                session, org.id, "Гранстар 75 ДФ", "pesticide", 50.0, "л",
                crop_types=["wheat"], applicable_for=["weeds"], expiry_date=date(year + 1, 6, 30),
            )
            fungicide = await get_or_create_item(
                session, org.id, "Амистар Екстра", "chemical", 40.0, "л",
                crop_types=["wheat", "sunflower"], applicable_for=["fungal diseases"],
            )
            ammonium = await get_or_create_item(
                session, org.id, "Амониева селитра", "fertilizer", 5000.0, "кг",
                contents="NH4NO3", nitrogen_content=34.4, fertilizer_type="гранулиран",
            )

            await log_activity(
                session,
                organization_id=org.id, field_id=wheat.id, category="chemical_treatment",
                type="Хербицидно третиране", date=date(year, 3, 20),
                chemical_id=herbicide.id, chemical_name=herbicide.name, infestation_type="широколистни плевели",
                dose=0.1, treated_area=120.0, quarantine_period=30, equipment="Amazone UX 4200",
            )
            await log_activity(
                session,
                organization_id=org.id, field_id=wheat.id, category="fertilizer",
                type="Подхранване", date=date(year, 3, 5),
                fertilizer_id=ammonium.id, fertilizer_name=ammonium.name,
                dose=20.0, fertilized_area=120.0, fertilizer_type="гранулиран",
            )
            await log_activity(
                session,
                organization_id=org.id, field_id=sunflower.id, category="field_inspection",
                type="Обследване", date=date(year, 5, 12), start_date=date(year, 5, 12),
                surveyed_area=85.5, attacked_area=4.0, damage="мана", damage_type="гъбично",
                attack_density="слабо", phenological_phase="4-6 лист",
            )
            await log_activity(
                session,
                organization_id=org.id, field_id=sunflower.id, category="chemical_treatment",
                type="Фунгицидно третиране", date=date(year, 5, 20),
                chemical_id=fungicide.id, chemical_name=fungicide.name, infestation_type="мана",
                dose=0.1, treated_area=85.5, quarantine_period=35,
            )
            await log_activity(
                session,
                organization_id=org.id, field_id=sunflower.id, category="farm_activity",
                type="Култивиране", date=date(year, 4, 2), end_date=date(year, 4, 3),
                activity_type="cultivation", material_type="", quantity="",
            )

        logger.info("demo farm seeded org=%s", org.id)


if __name__ == "__main__":
    configure_logging("INFO")
    asyncio.run(seed())
