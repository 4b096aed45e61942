import asyncio
import os
import tempfile
import uuid

_TMP_DIR = tempfile.mkdtemp(prefix="agroops-tests-")
os.environ["DATABASE_URL"] = f"sqlite+aiosqlite:///{os.path.join(_TMP_DIR, 'test.db')}"
os.environ.setdefault("LOG_LEVEL", "DEBUG")

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402

from db.database import create_db_and_tables, drop_db_and_tables  # noqa: E402
from main import app  # noqa: E402


@pytest.fixture(autouse=True)
def fresh_db():
    asyncio.run(drop_db_and_tables())
    asyncio.run(create_db_and_tables())
    yield


@pytest.fixture
def client():
    with TestClient(app) as c:
        yield c


def create_org(client, **overrides):
    suffix = uuid.uuid4().hex[:8]
    payload = {"clerk_org_id": f"org_{suffix}", "name": f"Farm {suffix}", "slug": f"farm-{suffix}"}
    payload.update(overrides)
    resp = client.post("/organizations/", json=payload)
    assert resp.status_code == 200, resp.text
    return resp.json()


def create_item(client, org_id, **overrides):
    payload = {
        "organization_id": org_id,
        "name": "Herbicide X",
        "category": "chemical",
        "quantity": 100,
        "unit": "l",
    }
    payload.update(overrides)
    resp = client.post("/inventory/items", json=payload)
    assert resp.status_code == 201, resp.text
    return resp.json()


def create_field(client, org_id, **overrides):
    payload = {"organization_id": org_id, "name": "North", "area": 10, "bzs_number": "12345-001"}
    payload.update(overrides)
    resp = client.post("/fields/", json=payload)
    assert resp.status_code == 201, resp.text
    return resp.json()


def item_quantity(client, item_id):
    resp = client.get(f"/inventory/items/{item_id}")
    assert resp.status_code == 200, resp.text
    return resp.json()["quantity"]


@pytest.fixture
def org(client):
    return create_org(client)


@pytest.fixture
def item(client, org):
    return create_item(client, org["id"])
