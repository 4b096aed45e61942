"""
Data context for the BABH plant protection logbook.

The logbook is a Word template filled in per organization: page 1 carries the
farm's registration details, then every field gets a section with numbered
tables of chemical treatments, inspections and fertilizer applications.
``build_logbook_context`` returns the values a template engine substitutes;
columns the platform does not track are present as empty strings so the
template renders blank cells instead of failing on missing keys.
"""

from datetime import date, timedelta
from typing import Dict, Iterable, List, Optional

from db.database import (
    Activity as ActivityModel,
    Field as FieldModel,
    Organization as OrganizationModel,
    Season as SeasonModel,
)

DATE_FORMAT = "%d.%m.%Y"
DEFAULT_DOSE_UNIT = "л/дка"

# Page-level placeholders with no backing data
GLOBAL_PLACEHOLDERS = {
    "pesticide_name": "",
    "dose_unit": DEFAULT_DOSE_UNIT,
    "applicator_name": "",
    "agronomist_name": "",
    "signature": "",
}


def format_date(value: Optional[date]) -> str:
    return value.strftime(DATE_FORMAT) if value else ""


def _text(value) -> str:
    if value is None:
        return ""
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def earliest_harvest_date(treated_on: Optional[date], quarantine_days: Optional[int]) -> str:
    """Treatment date plus the product's quarantine period, formatted for the logbook."""
    if not treated_on:
        return ""
    return format_date(treated_on + timedelta(days=quarantine_days or 0))


def _chemical_row(n: int, a: ActivityModel) -> Dict:
    return {
        "serial_number": n,
        "date": format_date(a.date),
        "pest": a.infestation_type or "",
        "product_name": a.chemical_name or "",
        "dose": _text(a.dose),
        "dose_unit": DEFAULT_DOSE_UNIT,
        "treated_area": _text(a.treated_area),
        "equipment": a.equipment or "",
        "quarantine_period": _text(a.quarantine_period if a.quarantine_period is not None else 0),
        "earliest_harvest_date": earliest_harvest_date(a.date, a.quarantine_period),
        "applicator_name": "",
        "agronomist_name": "",
    }


def _inspection_row(n: int, a: ActivityModel) -> Dict:
    return {
        "serial_number": n,
        "date": format_date(a.start_date or a.date),
        "phenological_phase": a.phenological_phase or "",
        "bbch_code": "",
        "disease": a.damage_type or "",
        "surveyed_area": _text(a.surveyed_area),
        "attacked_area": _text(a.attacked_area),
        "attack_degree": a.attack_density or "",
        "pest": a.damage or "",
        "development_stages": "",
        "density": a.attack_density or "",
    }


def _fertilizer_row(n: int, a: ActivityModel) -> Dict:
    return {
        "serial_number": n,
        "date": format_date(a.date),
        "product_name": a.fertilizer_name or "",
        "composition": "",
        "quantity": _text(a.dose),
        "fertilized_area": _text(a.fertilized_area),
    }


def _in_season(a: ActivityModel, season: Optional[SeasonModel]) -> bool:
    if season is None:
        return True
    return season.start_date <= a.date <= season.end_date


def _field_section(f: FieldModel, activities: List[ActivityModel]) -> Dict:
    by_category: Dict[str, List[ActivityModel]] = {}
    for a in sorted(activities, key=lambda x: x.date):
        by_category.setdefault(a.category, []).append(a)

    return {
        "name": f.name,
        "bzs_number": f.bzs_number or "",
        "populated_place": f.populated_place or "",
        "land_area": f.land_area or "",
        "locality": f.locality or "",
        "area": _text(f.area) if f.area else "0",
        "sowing_date": format_date(f.sowing_date),
        "crop_type": f.crop_type or "",
        "variety": "",
        "predecessor": "",
        "warehouse": "",
        "cadastral_number": f.bzs_number or "",
        "field_number": f.bzs_number or f.name or "",
        "chemical_treatments": [
            _chemical_row(i, a) for i, a in enumerate(by_category.get("chemical_treatment", []), start=1)
        ],
        "inspections": [
            _inspection_row(i, a) for i, a in enumerate(by_category.get("field_inspection", []), start=1)
        ],
        "fertilizers": [
            _fertilizer_row(i, a) for i, a in enumerate(by_category.get("fertilizer", []), start=1)
        ],
    }


def build_logbook_context(
    org: OrganizationModel,
    fields: Iterable[FieldModel],
    activities: Iterable[ActivityModel],
    season: Optional[SeasonModel] = None,
    today: Optional[date] = None,
) -> Dict:
    """
    Assemble the logbook for ``org``.

    Activities without a field are left out. With ``season`` only activities
    dated inside the season are included.
    """
    per_field: Dict = {}
    for a in activities:
        if a.field_id is None or not _in_season(a, season):
            continue
        per_field.setdefault(a.field_id, []).append(a)

    ctx = {
        "municipality": org.municipality or "",
        "settlement": org.settlement or "",
        "farm_name": org.name or "",
        "address": org.address or "",
        "agriculture_directorate": org.agriculture_directorate or "",
        "ekatte": org.ekatte_registration or "",
        "odbh": org.regional_food_safety_directorate or "",
        "current_date": format_date(today or date.today()),
        "season": season.year if season else "",
        "fields": [
            _field_section(f, per_field.get(f.id, []))
            for f in sorted(fields, key=lambda x: (x.name or "").lower())
        ],
    }
    ctx.update(GLOBAL_PLACEHOLDERS)
    return ctx
