import asyncio
import os
import sys
import tempfile

import pytest

# The app reads its configuration at import time and writes uploads relative
# to the working directory, so both are pointed at a scratch directory first.
WORKDIR = tempfile.mkdtemp(prefix="smartmenu-tests-")
os.environ["DATABASE_URL"] = f"sqlite+aiosqlite:///{WORKDIR}/test.db"
os.environ["SECRET_KEY"] = "test-secret"
os.environ.pop("FRONTEND_URL", None)
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))
os.chdir(WORKDIR)

from fastapi.testclient import TestClient  # noqa: E402

from main import app  # noqa: E402
from models import create_db_tables, drop_db_tables  # noqa: E402


@pytest.fixture
def client():
    asyncio.run(drop_db_tables())
    asyncio.run(create_db_tables())
    with TestClient(app) as c:
        yield c


def register(client, username="mama_lishe", email=None, password="secret123", **extra):
    payload = {"username": username, "email": email or f"{username}@example.com", "password": password}
    payload.update(extra)
    return client.post("/api/auth/register", json=payload)


def login(client, username="mama_lishe", password="secret123") -> dict:
    res = client.post("/api/auth/login", json={"username": username, "password": password})
    assert res.status_code == 200, res.text
    return {"Authorization": f"Bearer {res.json()['token']}"}


@pytest.fixture
def owner(client):
    """Headers of a freshly registered restaurant owner."""
    register(client, restaurant_name="Mama Lishe Kitchen")
    return login(client)


@pytest.fixture
def other_owner(client):
    register(client, username="baba_chips")
    return login(client, "baba_chips")


def create_item(client, headers, name="Chips Mayai", price=5000, category="Mains", **extra):
    payload = {"name": name, "price": price, "category": category}
    payload.update(extra)
    res = client.post("/api/menu-items", json=payload, headers=headers)
    assert res.status_code == 201, res.text
    return res.json()


def create_table(client, headers, table_number="T1", **extra):
    payload = {"table_number": table_number}
    payload.update(extra)
    res = client.post("/api/tables", json=payload, headers=headers)
    assert res.status_code == 201, res.text
    return res.json()


def place_order(client, table_id, items, **extra):
    payload = {"table_id": table_id, "items": items}
    payload.update(extra)
    return client.post("/api/public/order", json=payload)
