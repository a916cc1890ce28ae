import asyncio
import csv
import io
from datetime import date, datetime, timedelta

from sqlalchemy import update

from conftest import create_item, create_table, place_order
from models import Order, async_session_maker


def move_order(order_id: int, days: int):
    async def run():
        async with async_session_maker() as session:
            await session.execute(
                update(Order).where(Order.id == order_id)
                .values(created_at=datetime.now() - timedelta(days=days))
            )
            await session.commit()
    asyncio.run(run())


def seed_orders(client, headers):
    table = create_table(client, headers)
    chips = create_item(client, headers, name="Chips Mayai", price=5000)
    chai = create_item(client, headers, name="Chai", price=500, category="Drinks")
    place_order(client, table["id"], [{"menu_item_id": chips["id"], "quantity": 2}])
    place_order(client, table["id"], [{"menu_item_id": chai["id"], "quantity": 3}])
    cancelled = place_order(client, table["id"], [{"menu_item_id": chips["id"], "quantity": 5}]).json()
    client.put(f"/api/orders/{cancelled['order_id']}", json={"status": "CANCELLED"}, headers=headers)
    return table, chips, chai


def test_dashboard_stats(client, owner):
    seed_orders(client, owner)
    stats = client.get("/api/dashboard/stats", headers=owner).json()
    assert stats == {
        "total_orders": 3,
        "total_sales": 11500.0,
        "pending_orders": 2,
        "active_items": 2,
        "tables_count": 1,
    }


def test_dashboard_lists(client, owner):
    seed_orders(client, owner)
    top = client.get("/api/dashboard/top-items", headers=owner).json()
    assert top == [
        {"name": "Chai", "quantity": 3, "revenue": 1500.0},
        {"name": "Chips Mayai", "quantity": 2, "revenue": 10000.0},
    ]
    recent = client.get("/api/dashboard/recent-orders", headers=owner).json()
    assert len(recent) == 3
    assert recent[0]["status"] == "CANCELLED"
    assert client.get("/api/dashboard/recent-feedback", headers=owner).json() == []


def test_dashboard_requires_login(client):
    assert client.get("/api/dashboard/stats").status_code == 401
    res = client.get("/admin", follow_redirects=False)
    assert res.status_code == 303
    assert res.headers["location"] == "/login"


def test_dashboard_page(client, owner):
    seed_orders(client, owner)
    client.cookies.set("access_token", owner["Authorization"].split()[1])
    page = client.get("/admin")
    assert page.status_code == 200
    assert "11500.00" in page.text


def test_report_zero_fills_statuses(client, owner):
    report = client.get("/api/reports", headers=owner).json()
    assert report["total_orders"] == 0
    assert report["total_revenue"] == 0.0
    assert set(report["orders_by_status"].values()) == {0}
    assert "PENDING" in report["orders_by_status"]
    assert report["top_items"] == []


def test_report_period(client, owner):
    seed_orders(client, owner)
    old = client.get("/api/orders", params={"status": "PENDING"}, headers=owner).json()["orders"][-1]
    move_order(old["id"], 30)

    report = client.get("/api/reports", headers=owner).json()
    assert report["total_orders"] == 3
    assert report["total_revenue"] == 11500.0
    assert report["orders_by_status"]["CANCELLED"] == 1

    since = (date.today() - timedelta(days=7)).isoformat()
    report = client.get("/api/reports", params={"date_from": since}, headers=owner).json()
    assert report["date_from"] == since
    assert report["total_orders"] == 2
    assert report["total_revenue"] == 1500.0


def test_report_rejects_reversed_period(client, owner):
    res = client.get("/api/reports", params={"date_from": "2026-05-02", "date_to": "2026-05-01"}, headers=owner)
    assert res.status_code == 400
    assert res.json()["errors"] == ["Start date must be before end date"]
    res = client.get("/api/reports", params={"date_from": "May 1"}, headers=owner)
    assert res.status_code == 400


def test_reports_page_falls_back_to_all_time(client, owner):
    seed_orders(client, owner)
    client.cookies.set("access_token", owner["Authorization"].split()[1])
    page = client.get("/admin/reports", params={"date_from": "2026-05-02", "date_to": "2026-05-01"})
    assert page.status_code == 200
    assert "Start date must be before end date" in page.text
    assert "Chips Mayai" in page.text


def test_csv_export(client, owner):
    seed_orders(client, owner)
    client.cookies.set("access_token", owner["Authorization"].split()[1])
    res = client.get("/admin/reports/export.csv")
    assert res.status_code == 200
    assert res.headers["content-type"].startswith("text/csv")
    assert "attachment" in res.headers["content-disposition"]

    rows = list(csv.reader(io.StringIO(res.text)))
    assert rows[0][0] == "Order number"
    assert len(rows) == 4
    assert rows[1][4] == "Chips Mayai x 2"
