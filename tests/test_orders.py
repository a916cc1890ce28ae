from conftest import create_item, create_table, place_order


def make_orders(client, headers, count=1, table_number="T1"):
    table = create_table(client, headers, table_number)
    item = create_item(client, headers, name=f"Item {table_number}")
    numbers = [
        place_order(client, table["id"], [{"menu_item_id": item["id"], "quantity": 1}]).json()["order_number"]
        for _ in range(count)
    ]
    return table, item, numbers


def test_list_orders_paginated(client, owner):
    make_orders(client, owner, count=12)
    page1 = client.get("/api/orders", headers=owner).json()
    assert page1["total_items"] == 12
    assert page1["total_pages"] == 2
    assert page1["current_page"] == 1
    assert len(page1["orders"]) == 10

    page2 = client.get("/api/orders", params={"page": 2}, headers=owner).json()
    assert len(page2["orders"]) == 2
    ids = [o["id"] for o in page1["orders"] + page2["orders"]]
    assert ids == sorted(ids, reverse=True)


def test_filter_orders(client, owner):
    _, _, numbers = make_orders(client, owner, count=2, table_number="Patio 3")
    order_id = client.get("/api/orders", headers=owner).json()["orders"][0]["id"]
    client.put(f"/api/orders/{order_id}", json={"status": "preparing"}, headers=owner)

    res = client.get("/api/orders", params={"status": "PREPARING"}, headers=owner).json()
    assert [o["id"] for o in res["orders"]] == [order_id]

    res = client.get("/api/orders", params={"q": "patio"}, headers=owner).json()
    assert res["total_items"] == 2
    res = client.get("/api/orders", params={"q": numbers[0]}, headers=owner).json()
    assert res["orders"][0]["order_number"] == numbers[0]

    assert client.get("/api/orders", params={"status": "EATEN"}, headers=owner).status_code == 400


def test_update_status_and_payment(client, owner):
    make_orders(client, owner)
    order = client.get("/api/orders", headers=owner).json()["orders"][0]
    assert client.get("/api/orders/pending/count", headers=owner).json() == {"count": 1}

    res = client.put(f"/api/orders/{order['id']}", json={"status": "COMPLETED", "payment_status": "completed"},
                     headers=owner)
    assert res.status_code == 200
    data = res.json()
    assert data["status"] == "COMPLETED"
    assert data["payment_status"] == "completed"
    assert data["completed_at"] is not None
    assert client.get("/api/orders/pending/count", headers=owner).json() == {"count": 0}

    res = client.put(f"/api/orders/{order['id']}", json={"payment_status": "refunded"}, headers=owner)
    assert res.status_code == 400
    assert client.put(f"/api/orders/{order['id']}", json={}, headers=owner).status_code == 400


def test_orders_are_scoped_to_their_owner(client, owner, other_owner):
    make_orders(client, owner)
    order = client.get("/api/orders", headers=owner).json()["orders"][0]
    assert client.get(f"/api/orders/{order['id']}", headers=other_owner).status_code == 404
    assert client.get("/api/orders", headers=other_owner).json()["total_items"] == 0


def test_delete_order(client, owner):
    make_orders(client, owner)
    order = client.get("/api/orders", headers=owner).json()["orders"][0]
    assert client.delete(f"/api/orders/{order['id']}", headers=owner).status_code == 204
    assert client.get(f"/api/orders/{order['id']}", headers=owner).status_code == 404


def test_staff_socket_receives_new_orders(client, owner):
    table = create_table(client, owner)
    item = create_item(client, owner)
    token = owner["Authorization"].split()[1]
    with client.websocket_connect(f"/ws/staff?token={token}") as ws:
        number = place_order(client, table["id"], [{"menu_item_id": item["id"]}]).json()["order_number"]
        message = ws.receive_json()
    assert message["type"] == "new_order"
    assert message["order_number"] == number


def test_table_socket_receives_status_changes(client, owner):
    table, _, numbers = make_orders(client, owner)
    order = client.get("/api/orders", headers=owner).json()["orders"][0]
    with client.websocket_connect(f"/ws/table/{table['id']}") as ws:
        client.put(f"/api/orders/{order['id']}", json={"status": "READY"}, headers=owner)
        message = ws.receive_json()
    assert message == {"type": "order_status", "order_number": numbers[0], "status": "READY"}


def test_orders_pages(client, owner):
    make_orders(client, owner)
    order = client.get("/api/orders", headers=owner).json()["orders"][0]
    client.cookies.set("access_token", owner["Authorization"].split()[1])

    page = client.get("/admin/orders")
    assert page.status_code == 200
    assert order["order_number"] in page.text

    res = client.post(f"/admin/orders/{order['id']}/status", data={"status": "CONFIRMED"}, follow_redirects=False)
    assert res.status_code == 303
    res = client.post(f"/admin/orders/{order['id']}/payment", follow_redirects=False)
    assert res.status_code == 303

    updated = client.get(f"/api/orders/{order['id']}", headers=owner).json()
    assert updated["status"] == "CONFIRMED"
    assert updated["payment_status"] == "completed"

    detail = client.get(f"/admin/orders/{order['id']}")
    assert detail.status_code == 200
    assert "Item T1" in detail.text


def test_orders_page_reports_invalid_status(client, owner):
    make_orders(client, owner)
    order = client.get("/api/orders", headers=owner).json()["orders"][0]
    client.cookies.set("access_token", owner["Authorization"].split()[1])

    res = client.post(f"/admin/orders/{order['id']}/status", data={"status": "LOST"}, follow_redirects=False)
    assert res.status_code == 303
    assert res.headers["location"].startswith("/admin/orders?error=")

    page = client.get(res.headers["location"])
    assert page.status_code == 200
    assert "Invalid status: LOST" in page.text
    assert client.get(f"/api/orders/{order['id']}", headers=owner).json()["status"] == "PENDING"
