# admin_reports.py

import csv
import html
import io
from datetime import date, datetime, time
from decimal import Decimal
from typing import Optional

from fastapi import APIRouter, Depends, Query, Request
from fastapi.responses import HTMLResponse, Response
from sqlalchemy import select, func, desc
from sqlalchemy.ext.asyncio import AsyncSession

from models import Order, OrderItem, OrderStatus, User
from dependencies import get_db_session
from auth_utils import get_current_user
from menu_service import money
from templates import render_admin_page, error_banner, ADMIN_REPORTS_BODY
from translations import t, get_language
from validation import ValidationError

router = APIRouter()


def get_date_range(date_from_str: Optional[str], date_to_str: Optional[str]):
    """
    Parses the report period. Either end may be open; both given and
    reversed is an error.
    """
    try:
        d_from = datetime.strptime(date_from_str, "%Y-%m-%d").date() if date_from_str else None
        d_to = datetime.strptime(date_to_str, "%Y-%m-%d").date() if date_to_str else None
    except ValueError:
        raise ValidationError(["Dates must use the YYYY-MM-DD format"])
    if d_from and d_to and d_from > d_to:
        raise ValidationError(["Start date must be before end date"])

    dt_from = datetime.combine(d_from, time.min) if d_from else None
    dt_to = datetime.combine(d_to, time.max) if d_to else None
    return d_from, d_to, dt_from, dt_to


def in_period(query, user: User, dt_from: Optional[datetime], dt_to: Optional[datetime]):
    query = query.where(Order.user_id == user.id)
    if dt_from:
        query = query.where(Order.created_at >= dt_from)
    if dt_to:
        query = query.where(Order.created_at <= dt_to)
    return query


async def top_selling_items(session: AsyncSession, user: User, limit: int,
                            dt_from: Optional[datetime] = None, dt_to: Optional[datetime] = None) -> list:
    """Best sellers by quantity among non-cancelled orders."""
    qty = func.sum(OrderItem.quantity).label("quantity")
    revenue = func.sum(OrderItem.price * OrderItem.quantity).label("revenue")
    query = (
        select(OrderItem.menu_item_name, qty, revenue)
        .join(Order, OrderItem.order_id == Order.id)
        .where(Order.status != OrderStatus.CANCELLED.value)
        .group_by(OrderItem.menu_item_name)
        .order_by(desc("quantity"), OrderItem.menu_item_name)
        .limit(limit)
    )
    res = await session.execute(in_period(query, user, dt_from, dt_to))
    return [
        {"name": name, "quantity": int(quantity or 0), "revenue": money(Decimal(str(rev or 0)))}
        for name, quantity, rev in res.all()
    ]


async def build_report(session: AsyncSession, user: User, date_from: Optional[str], date_to: Optional[str]) -> dict:
    d_from, d_to, dt_from, dt_to = get_date_range(date_from, date_to)

    revenue_res = await session.execute(in_period(
        select(func.coalesce(func.sum(Order.total), 0)).where(Order.status != OrderStatus.CANCELLED.value),
        user, dt_from, dt_to
    ))
    count_res = await session.execute(in_period(select(func.count(Order.id)), user, dt_from, dt_to))
    status_res = await session.execute(in_period(
        select(Order.status, func.count(Order.id)).group_by(Order.status), user, dt_from, dt_to
    ))

    by_status = {s.value: 0 for s in OrderStatus}
    for status, count in status_res.all():
        by_status[status] = count

    return {
        "date_from": d_from.isoformat() if d_from else None,
        "date_to": d_to.isoformat() if d_to else None,
        "total_revenue": money(Decimal(str(revenue_res.scalar_one() or 0))),
        "total_orders": count_res.scalar_one(),
        "orders_by_status": by_status,
        "top_items": await top_selling_items(session, user, 10, dt_from, dt_to),
    }


@router.get("/api/reports")
async def api_reports(
    date_from: Optional[str] = Query(None),
    date_to: Optional[str] = Query(None),
    session: AsyncSession = Depends(get_db_session),
    user: User = Depends(get_current_user)
):
    return await build_report(session, user, date_from, date_to)


@router.get("/admin/reports", response_class=HTMLResponse)
async def admin_reports(
    request: Request,
    date_from: Optional[str] = Query(None),
    date_to: Optional[str] = Query(None),
    session: AsyncSession = Depends(get_db_session),
    user: User = Depends(get_current_user)
):
    lang = get_language(request)
    errors = []
    try:
        report = await build_report(session, user, date_from, date_to)
    except ValidationError as e:
        errors = e.errors
        date_from = date_to = None
        report = await build_report(session, user, None, None)

    status_rows = "".join(
        f'<tr><td><span class="status {s}">{s}</span></td><td>{c}</td></tr>'
        for s, c in report["orders_by_status"].items()
    )
    top_item_rows = "".join(
        f"<tr><td>{html.escape(i['name'])}</td><td>{i['quantity']}</td><td>{i['revenue']:.2f}</td></tr>"
        for i in report["top_items"]
    ) or f"<tr><td colspan='3'>{t('no_data', lang)}</td></tr>"

    body = ADMIN_REPORTS_BODY.format(
        date_from=html.escape(date_from or ""),
        date_to=html.escape(date_to or ""),
        errors=error_banner(errors),
        total_revenue=f"{report['total_revenue']:.2f}",
        total_orders_label=t("total_orders", lang),
        total_orders=report["total_orders"],
        status_rows=status_rows,
        top_items_label=t("top_items", lang),
        name_label=t("name", lang),
        top_item_rows=top_item_rows,
    )
    return render_admin_page(t("reports", lang), body, "reports", user, lang, str(request.url.path))


@router.get("/admin/reports/export.csv")
async def export_orders_csv(
    date_from: Optional[str] = Query(None),
    date_to: Optional[str] = Query(None),
    session: AsyncSession = Depends(get_db_session),
    user: User = Depends(get_current_user)
):
    _, _, dt_from, dt_to = get_date_range(date_from, date_to)
    res = await session.execute(in_period(select(Order), user, dt_from, dt_to).order_by(Order.created_at, Order.id))

    output = io.StringIO()
    writer = csv.writer(output)
    writer.writerow(["Order number", "Date", "Table", "Customer", "Items", "Status", "Payment", "Total"])
    for o in res.scalars().all():
        writer.writerow([
            o.order_number,
            o.created_at.strftime('%Y-%m-%d %H:%M'),
            o.table_number or "",
            o.customer_name or "",
            "; ".join(f"{i.menu_item_name} x {i.quantity}" for i in o.items),
            o.status,
            o.payment_status,
            f"{o.total:.2f}",
        ])

    filename = f"orders_{date_from or 'all'}_{date_to or date.today().isoformat()}.csv"
    return Response(
        content=output.getvalue(),
        media_type="text/csv",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'}
    )
