# menu_service.py

import logging
from datetime import date
from decimal import Decimal
from typing import List, Dict, Optional, Tuple

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from models import MenuItem, DailyMenuEntry

logger = logging.getLogger(__name__)


def money(value: Optional[Decimal]) -> Optional[float]:
    return float(value) if value is not None else None


def menu_item_to_dict(item: MenuItem) -> dict:
    return {
        "id": item.id,
        "name": item.name,
        "description": item.description,
        "price": money(item.price),
        "category": item.category,
        "image_url": item.image_url,
        "available": item.available,
        "allergens": item.allergens or [],
        "prep_time_minutes": item.prep_time_minutes,
        "featured": item.featured,
        "created_at": item.created_at.isoformat() if item.created_at else None,
        "updated_at": item.updated_at.isoformat() if item.updated_at else None,
    }


def daily_entry_to_dict(entry: DailyMenuEntry) -> dict:
    return {
        "id": entry.id,
        "menu_item_id": entry.menu_item_id,
        "menu_date": entry.menu_date.isoformat(),
        "item_name": entry.menu_item.name,
        "category": entry.menu_item.category,
        "original_price": money(entry.menu_item.price),
        "special_price": money(entry.special_price),
        "effective_price": money(entry.effective_price),
        "is_available": entry.is_available,
    }


async def get_daily_entries(session: AsyncSession, user_id: int, menu_date: date) -> List[DailyMenuEntry]:
    res = await session.execute(
        select(DailyMenuEntry)
        .join(MenuItem, DailyMenuEntry.menu_item_id == MenuItem.id)
        .where(DailyMenuEntry.user_id == user_id, DailyMenuEntry.menu_date == menu_date)
        .order_by(MenuItem.category, MenuItem.name)
    )
    return list(res.scalars().unique().all())


async def get_customer_menu(
    session: AsyncSession, user_id: int, on_date: Optional[date] = None
) -> List[Tuple[MenuItem, Decimal, bool]]:
    """
    Items a customer can order on `on_date` as (item, price, is_special).

    An available daily entry with a special price overrides the item price;
    an entry marked unavailable hides the item for that day.
    """
    on_date = on_date or date.today()
    items_res = await session.execute(
        select(MenuItem)
        .where(MenuItem.user_id == user_id, MenuItem.available == True)
        .order_by(MenuItem.category, MenuItem.name)
    )
    entries: Dict[int, DailyMenuEntry] = {
        e.menu_item_id: e for e in await get_daily_entries(session, user_id, on_date)
    }

    menu = []
    for item in items_res.scalars().all():
        entry = entries.get(item.id)
        if entry is not None and not entry.is_available:
            continue
        if entry is not None and entry.special_price is not None:
            menu.append((item, entry.special_price, True))
        else:
            menu.append((item, item.price, entry is not None))
    return menu


def group_by_category(menu: List[Tuple[MenuItem, Decimal, bool]]) -> Dict[str, list]:
    grouped: Dict[str, list] = {}
    for row in menu:
        grouped.setdefault(row[0].category, []).append(row)
    return grouped
