from datetime import date

from core.babh import build_logbook_context, earliest_harvest_date
from db.database import Activity, Field, Organization, Season

from conftest import create_field, create_item


def test_earliest_harvest_date():
    assert earliest_harvest_date(date(2024, 5, 1), 30) == "31.05.2024"
    assert earliest_harvest_date(date(2024, 5, 1), None) == "01.05.2024"
    assert earliest_harvest_date(None, 14) == ""


def test_build_logbook_context():
    org = Organization(
        name="Agro Farm",
        municipality="Plovdiv",
        settlement="Trud",
        address="1 Main St",
        agriculture_directorate="ODZ Plovdiv",
        regional_food_safety_directorate="ODBH Plovdiv",
        ekatte_registration="73242",
    )
    field = Field(
        id="f1", name="North", bzs_number="73242-101", populated_place="Trud",
        land_area="Trud", locality="Bair", area=120.0, crop_type="wheat",
        sowing_date=date(2023, 10, 15),
    )
    activities = [
        Activity(
            field_id="f1", category="chemical_treatment", date=date(2024, 5, 20),
            chemical_name="Amistar", infestation_type="rust", dose=0.1,
            treated_area=120.0, quarantine_period=35, equipment="sprayer",
        ),
        Activity(
            field_id="f1", category="chemical_treatment", date=date(2024, 3, 20),
            chemical_name="Granstar", dose=0.1, treated_area=120.0,
        ),
        Activity(
            field_id="f1", category="field_inspection", date=date(2024, 4, 2),
            phenological_phase="tillering", damage_type="fungal", surveyed_area=120.0,
            attacked_area=4.0, attack_density="low", damage="rust",
        ),
        Activity(
            field_id="f1", category="fertilizer", date=date(2024, 3, 5),
            fertilizer_name="Ammonium nitrate", dose=20.0, fertilized_area=120.0,
        ),
        Activity(field_id=None, category="farm_activity", date=date(2024, 3, 5)),
        Activity(field_id="f1", category="chemical_treatment", date=date(2023, 6, 1), chemical_name="Old"),
    ]
    season = Season(year="2024 / 2025", start_date=date(2024, 1, 1), end_date=date(2024, 12, 31))

    ctx = build_logbook_context(org, [field], activities, season=season, today=date(2024, 6, 1))

    assert ctx["farm_name"] == "Agro Farm"
    assert ctx["ekatte"] == "73242"
    assert ctx["odbh"] == "ODBH Plovdiv"
    assert ctx["current_date"] == "01.06.2024"
    assert ctx["dose_unit"] == "л/дка"
    assert ctx["season"] == "2024 / 2025"

    (section,) = ctx["fields"]
    assert section["cadastral_number"] == "73242-101"
    assert section["sowing_date"] == "15.10.2023"
    assert section["area"] == "120"
    assert section["variety"] == ""
    assert section["field_number"] == "73242-101"

    treatments = section["chemical_treatments"]
    assert [t["product_name"] for t in treatments] == ["Granstar", "Amistar"]
    assert [t["serial_number"] for t in treatments] == [1, 2]
    assert treatments[0]["quarantine_period"] == "0"
    assert treatments[0]["earliest_harvest_date"] == "20.03.2024"
    assert treatments[1]["earliest_harvest_date"] == "24.06.2024"
    assert treatments[1]["pest"] == "rust"
    assert treatments[1]["dose"] == "0.1"

    (inspection,) = section["inspections"]
    assert inspection["disease"] == "fungal"
    assert inspection["attack_degree"] == "low"
    assert inspection["pest"] == "rust"
    assert inspection["bbch_code"] == ""

    (fert,) = section["fertilizers"]
    assert fert["product_name"] == "Ammonium nitrate"
    assert fert["quantity"] == "20"
    assert fert["composition"] == ""


def test_field_without_area_or_bzs_number():
    org = Organization(name="Agro Farm")
    field = Field(id="f2", name="Orchard", bzs_number="", area=0.0)

    (section,) = build_logbook_context(org, [field], [], today=date(2024, 6, 1))["fields"]
    assert section["area"] == "0"
    assert section["field_number"] == "Orchard"
    assert section["cadastral_number"] == ""


def test_logbook_endpoint(client, org):
    client.patch(f"/organizations/{org['id']}/onboarding", json={"municipality": "Plovdiv"})
    season = client.post("/seasons/", json={"organization_id": org["id"], "year": 2024}).json()
    field = create_field(client, org["id"], name="North")
    item = create_item(client, org["id"])
    for on in ("2024-05-01", "2023-05-01"):
        resp = client.post(
            "/activities/",
            json={
                "organization_id": org["id"],
                "field_id": field["id"],
                "category": "chemical_treatment",
                "date": on,
                "user_id": "user_1",
                "chemical_id": item["id"],
                "chemical_name": "Herbicide X",
                "dose": 1,
                "treated_area": 2,
                "quarantine_period": 7,
            },
        )
        assert resp.status_code == 201, resp.text

    ctx = client.get("/babh/logbook", params={"organization_id": org["id"]}).json()
    assert ctx["municipality"] == "Plovdiv"
    assert len(ctx["fields"][0]["chemical_treatments"]) == 2

    ctx = client.get(
        "/babh/logbook",
        params={"organization_id": org["id"], "season_id": season["id"]},
    ).json()
    (row,) = ctx["fields"][0]["chemical_treatments"]
    assert row["date"] == "01.05.2024"
    assert row["earliest_harvest_date"] == "08.05.2024"


def test_logbook_unknown_organization(client):
    resp = client.get("/babh/logbook", params={"organization_id": "00000000-0000-0000-0000-000000000000"})
    assert resp.status_code == 404
