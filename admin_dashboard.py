# admin_dashboard.py

import html
from datetime import date, datetime, time
from decimal import Decimal

from fastapi import APIRouter, Depends, Request
from fastapi.responses import HTMLResponse
from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession

from models import Order, OrderStatus, MenuItem, Table, Feedback, User
from dependencies import get_db_session
from auth_utils import get_current_user
from admin_reports import top_selling_items
from menu_service import money
from order_service import order_to_dict, feedback_to_dict
from templates import render_admin_page, stars, ADMIN_DASHBOARD_BODY
from translations import t, get_language

router = APIRouter()


async def dashboard_stats(session: AsyncSession, user: User) -> dict:
    today_start = datetime.combine(date.today(), time.min)

    async def scalar(query):
        return (await session.execute(query)).scalar_one()

    total_sales = await scalar(
        select(func.coalesce(func.sum(Order.total), 0)).where(
            Order.user_id == user.id,
            Order.created_at >= today_start,
            Order.status != OrderStatus.CANCELLED.value,
        )
    )
    return {
        "total_orders": await scalar(select(func.count(Order.id)).where(Order.user_id == user.id)),
        "total_sales": money(Decimal(str(total_sales or 0))),
        "pending_orders": await scalar(
            select(func.count(Order.id)).where(Order.user_id == user.id, Order.status == OrderStatus.PENDING.value)
        ),
        "active_items": await scalar(
            select(func.count(MenuItem.id)).where(MenuItem.user_id == user.id, MenuItem.available == True)
        ),
        "tables_count": await scalar(select(func.count(Table.id)).where(Table.user_id == user.id)),
    }


async def recent_orders(session: AsyncSession, user: User, limit: int = 10):
    res = await session.execute(
        select(Order).where(Order.user_id == user.id)
        .order_by(Order.created_at.desc(), Order.id.desc()).limit(limit)
    )
    return res.scalars().all()


async def recent_feedback(session: AsyncSession, user: User, limit: int = 5):
    res = await session.execute(
        select(Feedback).where(Feedback.user_id == user.id)
        .order_by(Feedback.created_at.desc(), Feedback.id.desc()).limit(limit)
    )
    return res.scalars().all()


# --- JSON API ---

@router.get("/api/dashboard/stats")
async def api_dashboard_stats(session: AsyncSession = Depends(get_db_session), user: User = Depends(get_current_user)):
    return await dashboard_stats(session, user)


@router.get("/api/dashboard/recent-orders")
async def api_recent_orders(session: AsyncSession = Depends(get_db_session), user: User = Depends(get_current_user)):
    return [order_to_dict(o) for o in await recent_orders(session, user)]


@router.get("/api/dashboard/top-items")
async def api_top_items(session: AsyncSession = Depends(get_db_session), user: User = Depends(get_current_user)):
    return await top_selling_items(session, user, 5)


@router.get("/api/dashboard/recent-feedback")
async def api_recent_feedback(session: AsyncSession = Depends(get_db_session), user: User = Depends(get_current_user)):
    return [feedback_to_dict(f) for f in await recent_feedback(session, user)]


# --- HTML page ---

@router.get("/admin", response_class=HTMLResponse)
async def admin_dashboard(request: Request, session: AsyncSession = Depends(get_db_session),
                          user: User = Depends(get_current_user)):
    lang = get_language(request)
    stats = await dashboard_stats(session, user)

    order_rows = "".join(
        f"""<tr>
            <td><a href="/admin/orders/{o.id}">{html.escape(o.order_number)}</a></td>
            <td>{html.escape(o.table_number or '-')}</td>
            <td>{o.total:.2f}</td>
            <td><span class="status {o.status}">{o.status}</span></td>
            <td>{o.created_at.strftime('%d.%m.%Y %H:%M')}</td>
        </tr>"""
        for o in await recent_orders(session, user)
    ) or f"<tr><td colspan='5'>{t('no_data', lang)}</td></tr>"

    top_item_rows = "".join(
        f"<tr><td>{html.escape(i['name'])}</td><td>{i['quantity']}</td><td>{i['revenue']:.2f}</td></tr>"
        for i in await top_selling_items(session, user, 5)
    ) or f"<tr><td>{t('no_data', lang)}</td></tr>"

    feedback_rows = "".join(
        f"<tr><td>{stars(f.rating)}</td><td>{html.escape(f.order_number or '-')}</td>"
        f"<td>{html.escape((f.comments or '')[:80])}</td></tr>"
        for f in await recent_feedback(session, user)
    ) or f"<tr><td>{t('no_data', lang)}</td></tr>"

    body = ADMIN_DASHBOARD_BODY.format(
        total_orders_label=t("total_orders", lang),
        total_sales_label=t("total_sales", lang),
        pending_orders_label=t("pending_orders", lang),
        active_items_label=t("active_items", lang),
        tables_label=t("tables", lang),
        recent_orders_label=t("recent_orders", lang),
        table_label=t("table", lang),
        total_label=t("total", lang),
        status_label=t("status", lang),
        date_label=t("date", lang),
        top_items_label=t("top_items", lang),
        recent_feedback_label=t("recent_feedback", lang),
        total_orders=stats["total_orders"],
        total_sales=f"{stats['total_sales']:.2f}",
        pending_orders=stats["pending_orders"],
        active_items=stats["active_items"],
        tables_count=stats["tables_count"],
        order_rows=order_rows,
        top_item_rows=top_item_rows,
        feedback_rows=feedback_rows,
    )
    return render_admin_page(t("dashboard", lang), body, "main", user, lang, str(request.url.path))
