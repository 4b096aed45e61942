from datetime import date, timedelta

from conftest import create_field, create_item


def _log(client, org_id, user_id="user_1", on=None, **extra):
    payload = {
        "organization_id": org_id,
        "category": "farm_activity",
        "date": (on or date.today()).isoformat(),
        "user_id": user_id,
    }
    payload.update(extra)
    resp = client.post("/activities/", json=payload)
    assert resp.status_code == 201, resp.text
    return resp.json()


def test_stats(client, org):
    create_item(client, org["id"], quantity=30)
    create_item(client, org["id"], name="Urea", category="fertilizer", quantity=20, unit="kg")
    create_field(client, org["id"], area=10)
    create_field(client, org["id"], name="South", area=2.5)
    _log(client, org["id"])
    _log(client, org["id"], on=date.today() - timedelta(days=30))

    stats = client.get("/dashboard/stats", params={"organization_id": org["id"]}).json()
    assert stats == {
        "total_products": 2,
        "total_product_quantity": 50,
        "active_fields": 2,
        "total_area": 12.5,
        "recent_activities_count": 1,
    }


def test_stats_for_empty_organization(client, org):
    stats = client.get("/dashboard/stats", params={"organization_id": org["id"]}).json()
    assert stats["total_products"] == 0
    assert stats["total_area"] == 0


def test_fields_by_season(client, org):
    season = client.post("/seasons/", json={"organization_id": org["id"], "year": 2024}).json()
    create_field(client, org["id"], name="A", area=10, crop_type="wheat", season_id=season["id"])
    create_field(client, org["id"], name="B", area=5, crop_type="wheat", season_id=season["id"])
    create_field(client, org["id"], name="C", area=3)

    data = client.get("/dashboard/fields-by-season", params={"organization_id": org["id"]}).json()
    assert data["total_fields"] == 3
    assert data["total_area"] == 18

    groups = {g["season_id"]: g for g in data["by_season"]}
    assert groups[season["id"]]["count"] == 2
    assert groups[season["id"]]["total_area"] == 15
    assert groups[season["id"]]["year"] == 2024
    assert groups[season["id"]]["crop_types"] == [{"crop_type": "wheat", "count": 2, "area": 15}]
    assert groups["no-season"]["season_name"] == "No Season"

    crops = {c["crop_type"]: c for c in data["by_crop_type"]}
    assert crops["Unknown"]["count"] == 1


def test_recent_activities_carry_field_name(client, org):
    field = create_field(client, org["id"], name="Riverside")
    _log(client, org["id"], on=date.today() - timedelta(days=2), field_id=field["id"])
    _log(client, org["id"])

    rows = client.get("/dashboard/recent-activities", params={"organization_id": org["id"], "limit": 1}).json()
    assert len(rows) == 1
    assert rows[0]["field_name"] is None

    rows = client.get("/dashboard/recent-activities", params={"organization_id": org["id"]}).json()
    assert [r["field_name"] for r in rows] == [None, "Riverside"]


def test_low_stock_alerts(client, org):
    soon = (date.today() + timedelta(days=10)).isoformat()
    create_item(client, org["id"], name="Low", quantity=5)
    create_item(client, org["id"], name="Expiring", quantity=100, expiry_date=soon)
    create_item(client, org["id"], name="Both", quantity=1, expiry_date=soon)
    create_item(client, org["id"], name="Fine", quantity=100)

    rows = client.get("/dashboard/low-stock", params={"organization_id": org["id"]}).json()
    alerts = {r["name"]: r["alert_type"] for r in rows}
    assert alerts == {"Low": "low_stock", "Expiring": "near_expiry", "Both": "both"}

    rows = client.get(
        "/dashboard/low-stock",
        params={"organization_id": org["id"], "quantity_threshold": 200},
    ).json()
    assert len(rows) == 4


def test_member_activity_counts(client, org):
    _log(client, org["id"], user_id="alice")
    _log(client, org["id"], user_id="alice")
    _log(client, org["id"], user_id="bob")
    _log(client, org["id"], user_id="carol", on=date(date.today().year - 1, 6, 1))

    data = client.get("/dashboard/member-activity", params={"organization_id": org["id"]}).json()
    assert data["activity_count_by_user"] == {"alice": 2, "bob": 1}
    assert data["total_activities"] == 3
    assert data["since"] == date(date.today().year, 1, 1).isoformat()
