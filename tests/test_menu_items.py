import io
import os

from PIL import Image

from conftest import create_item


def png_bytes(size=(1200, 900)) -> bytes:
    buf = io.BytesIO()
    Image.new("RGB", size, (200, 80, 40)).save(buf, "PNG")
    return buf.getvalue()


def test_create_and_list_menu_items(client, owner):
    item = create_item(client, owner, description="Fries omelette", allergens="eggs, gluten", prep_time_minutes=10)
    assert item["price"] == 5000.0
    assert item["allergens"] == ["eggs", "gluten"]
    assert item["available"] is True

    create_item(client, owner, name="Chai", price=500, category="Drinks")
    res = client.get("/api/menu-items", headers=owner)
    assert [i["name"] for i in res.json()] == ["Chai", "Chips Mayai"]

    res = client.get("/api/menu-items", params={"category": "Drinks"}, headers=owner)
    assert [i["name"] for i in res.json()] == ["Chai"]

    assert client.get("/api/menu-items/categories", headers=owner).json() == ["Drinks", "Mains"]


def test_menu_item_validation(client, owner):
    res = client.post("/api/menu-items", json={"name": " ", "price": 0, "category": ""}, headers=owner)
    assert res.status_code == 400
    assert res.json()["errors"] == ["Name is required", "Price must be greater than 0", "Category is required"]

    res = client.post("/api/menu-items", json={"name": "Feast", "price": 10**9, "category": "Mains"}, headers=owner)
    assert res.status_code == 400
    assert res.json()["errors"] == ["Price must be at most 99999999.99"]


def test_update_and_toggle(client, owner):
    item = create_item(client, owner)
    res = client.put(f"/api/menu-items/{item['id']}", headers=owner,
                     json={"name": "Chips Kuku", "price": "7500.50", "category": "Mains"})
    assert res.status_code == 200
    assert res.json()["name"] == "Chips Kuku"
    assert res.json()["price"] == 7500.5

    res = client.patch(f"/api/menu-items/{item['id']}/toggle", headers=owner)
    assert res.json()["available"] is False
    res = client.get("/api/menu-items", params={"available": "true"}, headers=owner)
    assert res.json() == []


def test_items_are_scoped_to_their_owner(client, owner, other_owner):
    item = create_item(client, owner)
    assert client.get(f"/api/menu-items/{item['id']}", headers=other_owner).status_code == 404
    assert client.delete(f"/api/menu-items/{item['id']}", headers=other_owner).status_code == 404
    assert client.get("/api/menu-items", headers=other_owner).json() == []


def test_delete_menu_item_removes_daily_entries(client, owner):
    item = create_item(client, owner)
    client.post("/api/daily-menu", json={"menu_item_id": item["id"]}, headers=owner)
    assert client.delete(f"/api/menu-items/{item['id']}", headers=owner).status_code == 204
    assert client.get(f"/api/menu-items/{item['id']}", headers=owner).status_code == 404
    assert client.get("/api/daily-menu", headers=owner).json() == []


def test_image_upload_is_converted_to_webp(client, owner):
    item = create_item(client, owner)
    res = client.post(f"/api/menu-items/{item['id']}/image", headers=owner,
                      files={"file": ("photo.png", png_bytes(), "image/png")})
    assert res.status_code == 200
    url = res.json()["image_url"]
    assert url.endswith(".webp")
    path = url.lstrip("/")
    assert os.path.exists(path)
    with Image.open(path) as img:
        assert max(img.size) <= 800


def test_image_upload_rejects_other_types(client, owner):
    item = create_item(client, owner)
    res = client.post(f"/api/menu-items/{item['id']}/image", headers=owner,
                      files={"file": ("notes.txt", b"hello", "text/plain")})
    assert res.status_code == 400
    assert res.json()["errors"] == ["Please upload an image file (JPEG, PNG)"]

    big = b"\x89PNG" + b"0" * (2 * 1024 * 1024 + 1)
    res = client.post(f"/api/menu-items/{item['id']}/image", headers=owner,
                      files={"file": ("big.png", big, "image/png")})
    assert "File size must be less than 2MB" in res.json()["errors"]


def test_image_upload_rejects_decompression_bomb(client, owner):
    item = create_item(client, owner)
    buf = io.BytesIO()
    Image.new("1", (15000, 15000)).save(buf, "PNG")
    assert len(buf.getvalue()) < 2 * 1024 * 1024
    before = set(os.listdir("static/images")) if os.path.isdir("static/images") else set()

    res = client.post(f"/api/menu-items/{item['id']}/image", headers=owner,
                      files={"file": ("huge.png", buf.getvalue(), "image/png")})
    assert res.status_code == 400
    assert res.json()["errors"] == ["Please upload an image file (JPEG, PNG)"]
    assert set(os.listdir("static/images")) == before
    assert client.get(f"/api/menu-items/{item['id']}", headers=owner).json()["image_url"] is None


def test_admin_menu_items_pages(client, owner):
    client.cookies.set("access_token", owner["Authorization"].split()[1])
    res = client.post("/admin/menu-items/add", data={
        "name": "Pilau", "price": "8000", "category": "Mains", "available": "true"
    }, follow_redirects=False)
    assert res.status_code == 303

    page = client.get("/admin/menu-items")
    assert page.status_code == 200
    assert "Pilau" in page.text

    res = client.post("/admin/menu-items/add", data={"name": "", "price": "", "category": ""})
    assert res.status_code == 400
    assert "Name is required" in res.text

    item_id = client.get("/api/menu-items", headers=owner).json()[0]["id"]
    res = client.get(f"/admin/menu-items/{item_id}/copy", follow_redirects=False)
    assert res.status_code == 303
    names = [i["name"] for i in client.get("/api/menu-items", headers=owner).json()]
    assert "Pilau (copy)" in names


def test_admin_form_rejects_negative_prep_time(client, owner):
    item = create_item(client, owner, prep_time_minutes=10)
    client.cookies.set("access_token", owner["Authorization"].split()[1])

    res = client.post("/admin/menu-items/add", data={
        "name": "Pilau", "price": "8000", "category": "Mains", "prep_time_minutes": "-5"
    })
    assert res.status_code == 400
    assert "Preparation time must be 0 or greater" in res.text
    assert [i["name"] for i in client.get("/api/menu-items", headers=owner).json()] == ["Chips Mayai"]

    res = client.post(f"/admin/menu-items/{item['id']}/edit", data={
        "name": "Chips Mayai", "price": "5000", "category": "Mains", "prep_time_minutes": "-1"
    })
    assert res.status_code == 400
    assert "Preparation time must be 0 or greater" in res.text
    assert client.get(f"/api/menu-items/{item['id']}", headers=owner).json()["prep_time_minutes"] == 10
