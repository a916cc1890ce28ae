# admin_daily_menu.py

import html
import logging
from datetime import date, datetime
from decimal import Decimal
from typing import Optional
from urllib.parse import quote_plus as url_quote_plus

from fastapi import APIRouter, Depends, Form, HTTPException, Request, Query
from fastapi.responses import HTMLResponse, RedirectResponse, Response
from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession

from models import DailyMenuEntry, MenuItem, User
from dependencies import get_db_session
from auth_utils import get_current_user
from menu_service import get_daily_entries, daily_entry_to_dict
from schemas import DailyMenuRequest, DailyMenuUpdate
from templates import render_admin_page, error_banner, ADMIN_DAILY_MENU_BODY
from translations import t, get_language
from validation import ValidationError, raise_if_errors, validate_special_price, to_decimal

router = APIRouter()
logger = logging.getLogger(__name__)


def parse_menu_date(value: Optional[str]) -> date:
    if not value:
        return date.today()
    try:
        return datetime.strptime(value, "%Y-%m-%d").date()
    except ValueError:
        raise ValidationError(["Date must use the YYYY-MM-DD format"])


async def get_owned_entry(session: AsyncSession, user: User, entry_id: int) -> DailyMenuEntry:
    entry = await session.get(DailyMenuEntry, entry_id)
    if not entry or entry.user_id != user.id:
        raise HTTPException(status_code=404, detail="Daily menu entry not found")
    return entry


async def add_entry(session: AsyncSession, user: User, menu_item_id: Optional[int], menu_date: date,
                    special_price=None, is_available: bool = True) -> DailyMenuEntry:
    errors = []
    item = await session.get(MenuItem, menu_item_id) if menu_item_id else None
    if not item or item.user_id != user.id:
        errors.append("Menu item is required")
    errors += validate_special_price(special_price)
    raise_if_errors(errors)

    exists = await session.execute(
        select(func.count(DailyMenuEntry.id)).where(
            DailyMenuEntry.menu_item_id == item.id, DailyMenuEntry.menu_date == menu_date
        )
    )
    if exists.scalar_one():
        raise HTTPException(status_code=409, detail=f"{item.name} is already on the menu for {menu_date.isoformat()}")

    price = to_decimal(special_price)
    entry = DailyMenuEntry(
        user_id=user.id,
        menu_item=item,
        menu_date=menu_date,
        special_price=price.quantize(Decimal("0.01")) if price is not None else None,
        is_available=is_available,
    )
    session.add(entry)
    await session.commit()
    logger.info(f"Added '{item.name}' to the menu of {menu_date.isoformat()}")
    return entry


# --- JSON API ---

@router.get("/api/daily-menu")
async def api_daily_menu(date_str: Optional[str] = Query(None, alias="date"), session: AsyncSession = Depends(get_db_session),
                         user: User = Depends(get_current_user)):
    menu_date = parse_menu_date(date_str)
    return [daily_entry_to_dict(e) for e in await get_daily_entries(session, user.id, menu_date)]


@router.post("/api/daily-menu", status_code=201)
async def api_add_daily_entry(payload: DailyMenuRequest, session: AsyncSession = Depends(get_db_session),
                              user: User = Depends(get_current_user)):
    entry = await add_entry(session, user, payload.menu_item_id, payload.menu_date or date.today(),
                            payload.special_price, payload.is_available)
    return daily_entry_to_dict(entry)


@router.put("/api/daily-menu/{entry_id}")
async def api_update_daily_entry(entry_id: int, payload: DailyMenuUpdate,
                                 session: AsyncSession = Depends(get_db_session),
                                 user: User = Depends(get_current_user)):
    entry = await get_owned_entry(session, user, entry_id)
    # an explicit null clears the special price, an absent key keeps it
    if "special_price" in payload.model_fields_set:
        raise_if_errors(validate_special_price(payload.special_price))
        price = to_decimal(payload.special_price)
        entry.special_price = price.quantize(Decimal("0.01")) if price is not None else None
    if payload.is_available is not None:
        entry.is_available = payload.is_available
    await session.commit()
    return daily_entry_to_dict(entry)


@router.patch("/api/daily-menu/{entry_id}/toggle")
async def api_toggle_daily_entry(entry_id: int, session: AsyncSession = Depends(get_db_session),
                                 user: User = Depends(get_current_user)):
    entry = await get_owned_entry(session, user, entry_id)
    entry.is_available = not entry.is_available
    await session.commit()
    return daily_entry_to_dict(entry)


@router.delete("/api/daily-menu/{entry_id}", status_code=204)
async def api_delete_daily_entry(entry_id: int, session: AsyncSession = Depends(get_db_session),
                                 user: User = Depends(get_current_user)):
    entry = await get_owned_entry(session, user, entry_id)
    await session.delete(entry)
    await session.commit()
    return Response(status_code=204)


# --- HTML pages ---

@router.get("/admin/daily-menu", response_class=HTMLResponse)
async def admin_daily_menu(
    request: Request,
    date_str: Optional[str] = Query(None, alias="date"),
    error: Optional[str] = Query(None),
    session: AsyncSession = Depends(get_db_session),
    user: User = Depends(get_current_user)
):
    lang = get_language(request)
    errors = [error] if error else []
    try:
        menu_date = parse_menu_date(date_str)
    except ValidationError as e:
        errors += e.errors
        menu_date = date.today()

    entries = await get_daily_entries(session, user.id, menu_date)
    on_menu = {e.menu_item_id for e in entries}

    items_res = await session.execute(
        select(MenuItem).where(MenuItem.user_id == user.id).order_by(MenuItem.category, MenuItem.name)
    )
    item_options = "".join(
        f'<option value="{i.id}">{html.escape(i.name)} ({i.price:.2f})</option>'
        for i in items_res.scalars().all() if i.id not in on_menu
    )

    rows = []
    for e in entries:
        status_html = (f'<span class="status READY">{t("available", lang)}</span>' if e.is_available
                       else f'<span class="status CANCELLED">{t("unavailable", lang)}</span>')
        special_value = f"{e.special_price:.2f}" if e.special_price is not None else ""
        rows.append(f"""
        <tr>
            <td><b>{html.escape(e.menu_item.name)}</b></td>
            <td>{html.escape(e.menu_item.category)}</td>
            <td>{e.menu_item.price:.2f}</td>
            <td>
                <form action="/admin/daily-menu/{e.id}/price" method="post" class="inline-form" style="margin: 0;">
                    <input type="number" name="special_price" step="0.01" min="0" value="{special_value}" style="width: 110px;">
                    <button type="submit" class="button-sm"><i class="fa-solid fa-check"></i></button>
                </form>
            </td>
            <td>{status_html}</td>
            <td class="actions">
                <a href="/admin/daily-menu/{e.id}/toggle" class="button-sm" title="Toggle availability"><i class="fa-solid fa-power-off"></i></a>
                <a href="/admin/daily-menu/{e.id}/delete" onclick="return confirm('Remove from this day?');" class="button-sm danger"><i class="fa-solid fa-trash"></i></a>
            </td>
        </tr>""")

    body = ADMIN_DAILY_MENU_BODY.format(
        menu_date=menu_date.isoformat(),
        errors=error_banner(errors),
        item_options=item_options,
        rows="".join(rows) or f"<tr><td colspan='6'>{t('no_data', lang)}</td></tr>",
        date_label=t("date", lang),
        name_label=t("name", lang),
        category_label=t("category", lang),
        price_label=t("price", lang),
        status_label=t("status", lang),
        actions_label=t("actions", lang),
    )
    return render_admin_page(t("daily_menu", lang), body, "daily_menu", user, lang, str(request.url.path))


def back_to(menu_date: date, error: str = "") -> RedirectResponse:
    url = f"/admin/daily-menu?date={menu_date.isoformat()}"
    if error:
        url += f"&error={url_quote_plus(error)}"
    return RedirectResponse(url=url, status_code=303)


@router.post("/admin/daily-menu/add")
async def admin_add_daily_entry(
    menu_date: str = Form(""),
    menu_item_id: Optional[int] = Form(None),
    special_price: str = Form(""),
    session: AsyncSession = Depends(get_db_session),
    user: User = Depends(get_current_user)
):
    try:
        day = parse_menu_date(menu_date)
    except ValidationError as e:
        return back_to(date.today(), e.errors[0])
    try:
        await add_entry(session, user, menu_item_id, day, special_price or None)
    except ValidationError as e:
        return back_to(day, "; ".join(e.errors))
    except HTTPException as e:
        return back_to(day, e.detail)
    return back_to(day)


@router.post("/admin/daily-menu/{entry_id}/price")
async def admin_set_special_price(
    entry_id: int,
    special_price: str = Form(""),
    session: AsyncSession = Depends(get_db_session),
    user: User = Depends(get_current_user)
):
    entry = await get_owned_entry(session, user, entry_id)
    errors = validate_special_price(special_price)
    if errors:
        return back_to(entry.menu_date, errors[0])
    price = to_decimal(special_price)
    entry.special_price = price.quantize(Decimal("0.01")) if price is not None else None
    await session.commit()
    return back_to(entry.menu_date)


@router.get("/admin/daily-menu/{entry_id}/toggle")
async def admin_toggle_daily_entry(entry_id: int, session: AsyncSession = Depends(get_db_session),
                                   user: User = Depends(get_current_user)):
    entry = await get_owned_entry(session, user, entry_id)
    entry.is_available = not entry.is_available
    await session.commit()
    return back_to(entry.menu_date)


@router.get("/admin/daily-menu/{entry_id}/delete")
async def admin_delete_daily_entry(entry_id: int, session: AsyncSession = Depends(get_db_session),
                                   user: User = Depends(get_current_user)):
    entry = await get_owned_entry(session, user, entry_id)
    menu_date = entry.menu_date
    await session.delete(entry)
    await session.commit()
    return back_to(menu_date)
