from datetime import date, timedelta

from conftest import create_item


def test_add_entry_with_special_price(client, owner):
    item = create_item(client, owner, price=5000)
    res = client.post("/api/daily-menu", json={"menu_item_id": item["id"], "special_price": 4000}, headers=owner)
    assert res.status_code == 201
    entry = res.json()
    assert entry["menu_date"] == date.today().isoformat()
    assert entry["original_price"] == 5000.0
    assert entry["effective_price"] == 4000.0
    assert entry["item_name"] == "Chips Mayai"

    today = client.get("/api/daily-menu", headers=owner).json()
    assert [e["id"] for e in today] == [entry["id"]]


def test_entries_are_per_date(client, owner):
    item = create_item(client, owner)
    tomorrow = (date.today() + timedelta(days=1)).isoformat()
    client.post("/api/daily-menu", json={"menu_item_id": item["id"], "menu_date": tomorrow}, headers=owner)
    assert client.get("/api/daily-menu", headers=owner).json() == []
    assert len(client.get("/api/daily-menu", params={"date": tomorrow}, headers=owner).json()) == 1


def test_duplicate_entry_conflicts(client, owner):
    item = create_item(client, owner)
    client.post("/api/daily-menu", json={"menu_item_id": item["id"]}, headers=owner)
    res = client.post("/api/daily-menu", json={"menu_item_id": item["id"]}, headers=owner)
    assert res.status_code == 409


def test_entry_validation(client, owner):
    item = create_item(client, owner)
    res = client.post("/api/daily-menu", json={"menu_item_id": item["id"], "special_price": -1}, headers=owner)
    assert res.status_code == 400
    assert res.json()["errors"] == ["Special price must be 0 or greater"]

    res = client.post("/api/daily-menu", json={}, headers=owner)
    assert res.json()["errors"] == ["Menu item is required"]

    res = client.get("/api/daily-menu", params={"date": "19/10/2026"}, headers=owner)
    assert res.status_code == 400


def test_other_owners_item_cannot_be_scheduled(client, owner, other_owner):
    item = create_item(client, owner)
    res = client.post("/api/daily-menu", json={"menu_item_id": item["id"]}, headers=other_owner)
    assert res.status_code == 400


def test_update_toggle_and_delete_entry(client, owner):
    item = create_item(client, owner, price=5000)
    entry = client.post("/api/daily-menu", json={"menu_item_id": item["id"], "special_price": 4000},
                        headers=owner).json()

    res = client.put(f"/api/daily-menu/{entry['id']}", json={"special_price": None}, headers=owner)
    assert res.json()["special_price"] is None
    assert res.json()["effective_price"] == 5000.0

    res = client.patch(f"/api/daily-menu/{entry['id']}/toggle", headers=owner)
    assert res.json()["is_available"] is False

    assert client.delete(f"/api/daily-menu/{entry['id']}", headers=owner).status_code == 204
    assert client.get("/api/daily-menu", headers=owner).json() == []


def test_update_availability_keeps_special_price(client, owner):
    item = create_item(client, owner, price=5000)
    entry = client.post("/api/daily-menu", json={"menu_item_id": item["id"], "special_price": 4000},
                        headers=owner).json()

    res = client.put(f"/api/daily-menu/{entry['id']}", json={"is_available": False}, headers=owner)
    assert res.status_code == 200
    assert res.json()["is_available"] is False
    assert res.json()["special_price"] == 4000.0
    assert res.json()["effective_price"] == 4000.0

    res = client.put(f"/api/daily-menu/{entry['id']}", json={"special_price": "3500"}, headers=owner)
    assert res.json()["special_price"] == 3500.0
    assert res.json()["is_available"] is False


def test_daily_menu_page(client, owner):
    item = create_item(client, owner, name="Ugali Samaki")
    client.cookies.set("access_token", owner["Authorization"].split()[1])
    res = client.post("/admin/daily-menu/add", data={"menu_item_id": item["id"], "special_price": "3500"},
                      follow_redirects=False)
    assert res.status_code == 303

    page = client.get("/admin/daily-menu")
    assert page.status_code == 200
    assert "Ugali Samaki" in page.text
    assert 'value="3500.00"' in page.text
