from typing import Dict

from db.database import Activity as ActivityModel, InventoryItem as InventoryItemModel

ACTIVITY_COLUMNS = (
    "id",
    "organization_id",
    "field_id",
    "type",
    "category",
    "description",
    "date",
    "user_id",
    "chemical_id",
    "chemical_name",
    "infestation_type",
    "dose",
    "quarantine_period",
    "treated_area",
    "equipment",
    "start_date",
    "surveyed_area",
    "attacked_area",
    "damage",
    "damage_type",
    "attack_density",
    "phenological_phase",
    "fertilizer_id",
    "fertilizer_name",
    "fertilized_area",
    "fertilizer_type",
    "end_date",
    "activity_type",
    "material_type",
    "quantity",
    "inventory_item_id",
    "consumed_quantity",
)


def activity_to_dict(activity: ActivityModel) -> Dict:
    """Convert SQLAlchemy activity to a JSON-ready dict"""
    return {col: getattr(activity, col) for col in ACTIVITY_COLUMNS}


def inventory_item_to_dict(item: InventoryItemModel) -> Dict:
    return {
        "id": item.id,
        "organization_id": item.organization_id,
        "name": item.name,
        "category": item.category,
        "quantity": float(item.quantity or 0),
        "unit": item.unit,
        "location": item.location,
        "expiry_date": item.expiry_date,
        "crop_types": item.crop_types,
        "applicable_for": item.applicable_for,
        "contents": item.contents,
        "nitrogen_content": item.nitrogen_content,
        "fertilizer_type": item.fertilizer_type,
    }
