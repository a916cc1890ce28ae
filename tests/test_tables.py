from conftest import create_table


def test_create_table_builds_qr_url(client, owner):
    table = create_table(client, owner, " T1 ", location="Terrace", is_room=False)
    assert table["table_number"] == "T1"
    assert table["location"] == "Terrace"
    assert table["qr_code_url"] == f"http://testserver/customer-menu?table={table['id']}"
    assert len(table["qr_code_id"]) == 36


def test_frontend_url_overrides_request_base(client, owner, monkeypatch):
    monkeypatch.setenv("FRONTEND_URL", "https://menu.example.com/")
    table = create_table(client, owner, "Room 12", is_room=True)
    assert table["qr_code_url"] == f"https://menu.example.com/customer-menu?table={table['id']}"
    assert table["is_room"] is True


def test_table_validation(client, owner):
    res = client.post("/api/tables", json={"table_number": ""}, headers=owner)
    assert res.status_code == 400
    assert res.json()["errors"] == ["Table number is required"]

    res = client.post("/api/tables", json={"table_number": "X" * 51, "location": "L" * 101}, headers=owner)
    assert len(res.json()["errors"]) == 2


def test_duplicate_table_number(client, owner, other_owner):
    create_table(client, owner, "T1")
    assert client.post("/api/tables", json={"table_number": "T1"}, headers=owner).status_code == 409
    # numbers are unique per restaurant only
    create_table(client, other_owner, "T1")


def test_update_and_delete(client, owner, other_owner):
    table = create_table(client, owner, "T1")
    create_table(client, owner, "T2")

    res = client.put(f"/api/tables/{table['id']}", json={"table_number": "T2"}, headers=owner)
    assert res.status_code == 409
    res = client.put(f"/api/tables/{table['id']}", json={"table_number": "T7", "location": "Garden"}, headers=owner)
    assert res.json()["table_number"] == "T7"

    assert client.delete(f"/api/tables/{table['id']}", headers=other_owner).status_code == 403
    assert client.delete("/api/tables/9999", headers=owner).status_code == 404
    assert client.delete(f"/api/tables/{table['id']}", headers=owner).status_code == 204
    assert [t["table_number"] for t in client.get("/api/tables", headers=owner).json()] == ["T2"]


def test_qr_code_png(client, owner):
    table = create_table(client, owner)
    res = client.get(f"/qr/{table['qr_code_id']}.png")
    assert res.status_code == 200
    assert res.headers["content-type"] == "image/png"
    assert res.content.startswith(b"\x89PNG")
    assert client.get("/qr/unknown.png").status_code == 404


def test_tables_page(client, owner):
    client.cookies.set("access_token", owner["Authorization"].split()[1])
    res = client.post("/admin/tables/add", data={"table_number": "Bar 1", "location": "Bar"}, follow_redirects=False)
    assert res.status_code == 303
    page = client.get("/admin/tables")
    assert "Bar 1" in page.text
    assert "/qr/" in page.text

    res = client.post("/admin/tables/add", data={"table_number": "Bar 1"})
    assert res.status_code == 400
    assert "already exists" in res.text
