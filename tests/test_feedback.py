import asyncio
from datetime import datetime, timedelta

from sqlalchemy import update

from conftest import create_item, create_table, place_order
from models import Feedback, async_session_maker


def seed_feedback(client, headers, ratings):
    table = create_table(client, headers, "T9")
    item = create_item(client, headers)
    numbers = []
    for rating in ratings:
        number = place_order(client, table["id"], [{"menu_item_id": item["id"]}]).json()["order_number"]
        client.post("/api/public/feedback", json={"order_number": number, "rating": rating, "comments": f"r{rating}"})
        numbers.append(number)
    return numbers


def backdate(feedback_id: int, days: int):
    async def run():
        async with async_session_maker() as session:
            await session.execute(
                update(Feedback).where(Feedback.id == feedback_id)
                .values(created_at=datetime.now() - timedelta(days=days))
            )
            await session.commit()
    asyncio.run(run())


def test_stats(client, owner):
    seed_feedback(client, owner, [5, 4, 4, 2])
    stats = client.get("/api/feedback/stats", headers=owner).json()
    assert stats["total_feedback"] == 4
    assert stats["average_rating"] == 3.8
    assert stats["rating_distribution"] == {"1": 0, "2": 1, "3": 0, "4": 2, "5": 1}


def test_stats_without_feedback(client, owner):
    stats = client.get("/api/feedback/stats", headers=owner).json()
    assert stats == {"total_feedback": 0, "average_rating": 0.0,
                     "rating_distribution": {"1": 0, "2": 0, "3": 0, "4": 0, "5": 0}}


def test_filters_combine(client, owner):
    numbers = seed_feedback(client, owner, [5, 4, 5, 1])
    res = client.get("/api/feedback", params={"rating": 5}, headers=owner).json()
    assert res["total_items"] == 2

    res = client.get("/api/feedback", params={"rating": 5, "order_number": numbers[2][3:]}, headers=owner).json()
    assert [e["order_number"] for e in res["entries"]] == [numbers[2]]

    res = client.get("/api/feedback", params={"rating": 1, "order_number": numbers[0]}, headers=owner).json()
    assert res["entries"] == []


def test_date_filters_and_sorting(client, owner):
    seed_feedback(client, owner, [3, 5, 1])
    entries = client.get("/api/feedback", params={"sort_by": "date_asc"}, headers=owner).json()["entries"]
    oldest = entries[0]
    backdate(oldest["id"], 10)

    week_ago = (datetime.now() - timedelta(days=7)).date().isoformat()
    res = client.get("/api/feedback", params={"start_date": week_ago}, headers=owner).json()
    assert oldest["id"] not in [e["id"] for e in res["entries"]]
    assert res["total_items"] == 2

    res = client.get("/api/feedback", params={"end_date": week_ago}, headers=owner).json()
    assert [e["id"] for e in res["entries"]] == [oldest["id"]]

    ratings = [e["rating"] for e in client.get("/api/feedback", params={"sort_by": "rating_desc"},
                                                headers=owner).json()["entries"]]
    assert ratings == [5, 3, 1]
    ratings = [e["rating"] for e in client.get("/api/feedback", params={"sort_by": "rating_asc"},
                                                headers=owner).json()["entries"]]
    assert ratings == [1, 3, 5]

    assert client.get("/api/feedback", params={"start_date": "yesterday"}, headers=owner).status_code == 400


def test_pagination(client, owner):
    seed_feedback(client, owner, [4] * 12)
    res = client.get("/api/feedback", params={"page": 2, "size": 5}, headers=owner).json()
    assert res["current_page"] == 2
    assert res["total_pages"] == 3
    assert len(res["entries"]) == 5


def test_delete_and_scoping(client, owner, other_owner):
    seed_feedback(client, owner, [2])
    entry = client.get("/api/feedback", headers=owner).json()["entries"][0]
    assert client.get(f"/api/feedback/{entry['id']}", headers=other_owner).status_code == 404
    assert client.delete(f"/api/feedback/{entry['id']}", headers=other_owner).status_code == 404
    assert client.delete(f"/api/feedback/{entry['id']}", headers=owner).status_code == 204
    assert client.get("/api/feedback/stats", headers=owner).json()["total_feedback"] == 0


def test_feedback_page(client, owner):
    seed_feedback(client, owner, [5])
    client.cookies.set("access_token", owner["Authorization"].split()[1])
    page = client.get("/admin/feedback", params={"rating": "5"})
    assert page.status_code == 200
    assert "r5" in page.text
