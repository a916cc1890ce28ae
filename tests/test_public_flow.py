import re

import order_service
import public_api
from conftest import create_item, create_table, place_order


def test_public_table_and_menu(client, owner):
    table = create_table(client, owner, "T4")
    create_item(client, owner, name="Chai", price=500, category="Drinks")
    hidden = create_item(client, owner, name="Soup", price=3000, category="Starters")
    client.patch(f"/api/menu-items/{hidden['id']}/toggle", headers=owner)

    info = client.get(f"/api/public/table/{table['id']}").json()
    assert info["table_number"] == "T4"
    assert info["restaurant_name"] == "Mama Lishe Kitchen"

    menu = client.get(f"/api/public/menu/{table['id']}").json()
    assert [i["name"] for i in menu["menu_items"]] == ["Chai"]
    assert menu["currency"] == "TSH"
    assert client.get("/api/public/menu/9999").status_code == 404


def test_menu_uses_todays_special_prices(client, owner):
    table = create_table(client, owner)
    item = create_item(client, owner, price=5000)
    off = create_item(client, owner, name="Mishkaki", price=6000)
    client.post("/api/daily-menu", json={"menu_item_id": item["id"], "special_price": 4500}, headers=owner)
    client.post("/api/daily-menu", json={"menu_item_id": off["id"], "is_available": False}, headers=owner)

    menu = client.get(f"/api/public/menu/{table['id']}").json()["menu_items"]
    assert [(i["name"], i["effective_price"], i["is_special"]) for i in menu] == [("Chips Mayai", 4500.0, True)]


def test_session_tracking(client, owner):
    table = create_table(client, owner)
    res = client.get("/api/public/session/device-1-abc").json()
    assert res["is_returning_customer"] is False

    first = client.post("/api/public/session", json={"device_id": "device-1-abc", "table_id": table["id"]}).json()
    assert first["visit_count"] == 1
    assert first["is_returning_customer"] is False

    client.get(f"/api/public/menu/{table['id']}", params={"device_id": "device-1-abc"})
    again = client.get("/api/public/session/device-1-abc").json()
    assert again["visit_count"] == 2
    assert again["is_returning_customer"] is True


def test_concurrent_first_visit_counts_on_existing_session(client, owner, monkeypatch):
    table = create_table(client, owner, "T7")
    client.post("/api/public/session", json={"device_id": "device-2-race", "table_id": table["id"]})

    real = public_api.get_session_by_device
    lookups = []

    async def miss_first_lookup(session, device_id):
        # another request inserted the row after this one looked for it
        lookups.append(device_id)
        return None if len(lookups) == 1 else await real(session, device_id)

    monkeypatch.setattr(public_api, "get_session_by_device", miss_first_lookup)
    res = client.post("/api/public/session", json={"device_id": "device-2-race", "table_id": table["id"],
                                                    "customer_name": "Neema"})
    assert res.status_code == 200
    assert res.json()["visit_count"] == 2
    assert res.json()["customer_name"] == "Neema"

    lookups.clear()
    menu = client.get(f"/api/public/menu/{table['id']}", params={"device_id": "device-2-race"})
    assert menu.status_code == 200
    assert menu.json()["table_number"] == "T7"
    monkeypatch.undo()
    assert client.get("/api/public/session/device-2-race").json()["visit_count"] == 3


def test_order_is_priced_from_the_database(client, owner):
    table = create_table(client, owner, "T2")
    item = create_item(client, owner, price=5000)
    client.post("/api/daily-menu", json={"menu_item_id": item["id"], "special_price": 4000}, headers=owner)

    res = place_order(client, table["id"], [
        {"menu_item_id": item["id"], "quantity": 2, "price": 1},
        {"menu_item_id": item["id"], "quantity": 1, "special_instructions": "no salt"},
    ], customer_name="Asha", device_id="device-1-abc")
    assert res.status_code == 200
    data = res.json()
    assert data["success"] is True
    assert data["status"] == "PENDING"
    assert data["total"] == 12000.0
    assert re.fullmatch(r"ORD\d{14}\d{3}", data["order_number"])

    tracked = client.get(f"/api/public/order/{data['order_number']}").json()
    assert tracked["table_number"] == "T2"
    assert tracked["customer_name"] == "Asha"
    assert [i["quantity"] for i in tracked["items"]] == [2, 1]
    assert tracked["items"][1]["special_instructions"] == "no salt"


def test_order_validation(client, owner, other_owner):
    table = create_table(client, owner)
    item = create_item(client, owner)
    foreign = create_item(client, other_owner, name="Foreign")

    res = place_order(client, table["id"], [])
    assert res.status_code == 400

    res = place_order(client, table["id"], [{"menu_item_id": item["id"], "quantity": 0}])
    assert res.status_code == 400
    assert res.json()["errors"] == ["Quantity must be at least 1"]

    res = place_order(client, table["id"], [{"menu_item_id": foreign["id"], "quantity": 1}])
    assert res.status_code == 400

    assert place_order(client, 9999, [{"menu_item_id": item["id"]}]).status_code == 404
    assert client.get("/api/public/order/ORD000").status_code == 404


def test_order_quantity_and_total_limits(client, owner):
    table = create_table(client, owner)
    item = create_item(client, owner, price=5000)

    res = place_order(client, table["id"], [{"menu_item_id": item["id"], "quantity": 10**20}])
    assert res.status_code == 400
    assert res.json()["errors"] == ["Quantity must be at most 999"]

    res = place_order(client, table["id"], [{"menu_item_id": item["id"], "quantity": 1000}])
    assert res.status_code == 400

    assert place_order(client, table["id"], [{"menu_item_id": item["id"], "quantity": 999}]).status_code == 200

    pricey = create_item(client, owner, name="Banquet", price="99999999.99")
    res = place_order(client, table["id"], [{"menu_item_id": pricey["id"], "quantity": 2}])
    assert res.status_code == 400
    assert res.json()["errors"] == ["Order total is too large"]


def test_order_number_collision_is_retried(client, owner, monkeypatch):
    table = create_table(client, owner)
    item = create_item(client, owner)
    taken = place_order(client, table["id"], [{"menu_item_id": item["id"]}]).json()["order_number"]

    real = order_service.unique_order_number
    handed_out = []

    async def stale_then_real(session):
        # the first number passed its check before another order claimed it
        number = taken if not handed_out else await real(session)
        handed_out.append(number)
        return number

    monkeypatch.setattr(order_service, "unique_order_number", stale_then_real)
    res = place_order(client, table["id"], [{"menu_item_id": item["id"], "quantity": 2}])
    assert res.status_code == 200
    assert handed_out[0] == taken
    assert res.json()["order_number"] == handed_out[1] != taken
    assert res.json()["total"] == 10000.0
    assert len(client.get("/api/orders", headers=owner).json()["orders"]) == 2


def test_ordering_settings(client, owner):
    table = create_table(client, owner)
    item = create_item(client, owner)

    client.put("/api/settings/restaurant", json={"auto_accept_orders": True}, headers=owner)
    res = place_order(client, table["id"], [{"menu_item_id": item["id"]}])
    assert res.json()["status"] == "CONFIRMED"

    client.put("/api/settings/restaurant", json={"allow_online_orders": False}, headers=owner)
    res = place_order(client, table["id"], [{"menu_item_id": item["id"]}])
    assert res.status_code == 403


def test_inactive_table_cannot_order(client, owner):
    table = create_table(client, owner)
    item = create_item(client, owner)
    client.put(f"/api/tables/{table['id']}", json={"table_number": "T1", "active": False}, headers=owner)
    assert place_order(client, table["id"], [{"menu_item_id": item["id"]}]).status_code == 404


def test_feedback_submission(client, owner):
    table = create_table(client, owner)
    item = create_item(client, owner)
    number = place_order(client, table["id"], [{"menu_item_id": item["id"]}]).json()["order_number"]

    res = client.post("/api/public/feedback", json={"order_number": number, "rating": 6})
    assert res.status_code == 400
    assert res.json()["errors"] == ["Rating must be between 1 and 5"]

    res = client.post("/api/public/feedback", json={"order_number": "ORD-missing", "rating": 4})
    assert res.status_code == 404

    res = client.post("/api/public/feedback", json={"order_number": number, "rating": 5, "comments": "Tamu sana"})
    assert res.status_code == 200

    entries = client.get("/api/feedback", headers=owner).json()["entries"]
    assert entries[0]["rating"] == 5
    assert entries[0]["table_number"] == "T1"
    assert entries[0]["total_amount"] == 5000.0
