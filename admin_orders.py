# admin_orders.py

import html
import logging
from typing import Optional
from urllib.parse import quote_plus as url_quote_plus

from fastapi import APIRouter, Depends, Form, HTTPException, Request, Query
from fastapi.responses import HTMLResponse, RedirectResponse, Response
from sqlalchemy import select, func, or_
from sqlalchemy.ext.asyncio import AsyncSession

from models import Order, OrderStatus, User
from dependencies import get_db_session
from auth_utils import get_current_user
from order_service import order_to_dict, change_order
from pagination import DEFAULT_PAGE_SIZE, page_count, clamp_page, clamp_size, render_pagination
from schemas import OrderUpdate
from templates import render_admin_page, error_banner, ADMIN_ORDERS_BODY, ADMIN_ORDER_DETAIL_BODY
from translations import t, get_language
from validation import ValidationError

router = APIRouter()
logger = logging.getLogger(__name__)


async def get_owned_order(session: AsyncSession, user: User, order_id: int) -> Order:
    order = await session.get(Order, order_id)
    if not order or order.user_id != user.id:
        raise HTTPException(status_code=404, detail="Order not found")
    return order


def filtered_orders(user: User, status: Optional[str], q: Optional[str]):
    query = select(Order).where(Order.user_id == user.id)
    if status:
        parsed = OrderStatus.parse(status)
        if parsed is None:
            raise ValidationError([f"Invalid status: {status}"])
        query = query.where(Order.status == parsed.value)
    if q and q.strip():
        pattern = f"%{q.strip()}%"
        query = query.where(or_(Order.order_number.ilike(pattern), Order.table_number.ilike(pattern)))
    return query


async def pending_count(session: AsyncSession, user: User) -> int:
    res = await session.execute(
        select(func.count(Order.id)).where(Order.user_id == user.id, Order.status == OrderStatus.PENDING.value)
    )
    return res.scalar_one()


def status_options(selected: Optional[str]) -> str:
    return "".join(
        f'<option value="{s.value}" {"selected" if s.value == selected else ""}>{s.value}</option>'
        for s in OrderStatus
    )


# --- JSON API ---

@router.get("/api/orders")
async def api_list_orders(
    status: Optional[str] = Query(None),
    q: Optional[str] = Query(None),
    page: int = Query(1),
    size: int = Query(DEFAULT_PAGE_SIZE),
    session: AsyncSession = Depends(get_db_session),
    user: User = Depends(get_current_user)
):
    query = filtered_orders(user, status, q)
    size = clamp_size(size)
    total = (await session.execute(select(func.count()).select_from(query.subquery()))).scalar_one()
    page = clamp_page(page, total, size)
    res = await session.execute(
        query.order_by(Order.created_at.desc(), Order.id.desc()).offset((page - 1) * size).limit(size)
    )
    return {
        "orders": [order_to_dict(o) for o in res.scalars().all()],
        "current_page": page,
        "total_pages": page_count(total, size),
        "total_items": total,
    }


@router.get("/api/orders/pending/count")
async def api_pending_count(session: AsyncSession = Depends(get_db_session), user: User = Depends(get_current_user)):
    return {"count": await pending_count(session, user)}


@router.get("/api/orders/{order_id}")
async def api_get_order(order_id: int, session: AsyncSession = Depends(get_db_session),
                        user: User = Depends(get_current_user)):
    return order_to_dict(await get_owned_order(session, user, order_id))


@router.put("/api/orders/{order_id}")
async def api_update_order(order_id: int, payload: OrderUpdate, session: AsyncSession = Depends(get_db_session),
                           user: User = Depends(get_current_user)):
    order = await get_owned_order(session, user, order_id)
    if payload.status is None and payload.payment_status is None:
        raise ValidationError(["Nothing to update"])
    await change_order(session, order, payload.status, payload.payment_status)
    logger.info(f"Order {order.order_number} updated: status={order.status}, payment={order.payment_status}")
    return order_to_dict(order)


@router.delete("/api/orders/{order_id}", status_code=204)
async def api_delete_order(order_id: int, session: AsyncSession = Depends(get_db_session),
                           user: User = Depends(get_current_user)):
    order = await get_owned_order(session, user, order_id)
    await session.delete(order)
    await session.commit()
    return Response(status_code=204)


# --- HTML pages ---

@router.get("/admin/orders", response_class=HTMLResponse)
async def admin_orders(
    request: Request,
    status: Optional[str] = Query(None),
    q: Optional[str] = Query(None),
    page: int = Query(1),
    error: Optional[str] = Query(None),
    session: AsyncSession = Depends(get_db_session),
    user: User = Depends(get_current_user)
):
    lang = get_language(request)
    if status and OrderStatus.parse(status) is None:
        status = None
    query = filtered_orders(user, status, q)
    total = (await session.execute(select(func.count()).select_from(query.subquery()))).scalar_one()
    page = clamp_page(page, total, DEFAULT_PAGE_SIZE)
    res = await session.execute(
        query.order_by(Order.created_at.desc(), Order.id.desc())
        .offset((page - 1) * DEFAULT_PAGE_SIZE).limit(DEFAULT_PAGE_SIZE)
    )

    rows = []
    for o in res.scalars().all():
        items_text = ", ".join(f"{html.escape(i.menu_item_name)} x {i.quantity}" for i in o.items)
        paid = o.payment_status == "completed"
        payment_html = (f'<span class="status READY">{t("paid", lang)}</span>' if paid
                        else f'<span class="status PENDING">{t("unpaid", lang)}</span>')
        rows.append(f"""
        <tr>
            <td><a href="/admin/orders/{o.id}"><b>{html.escape(o.order_number)}</b></a></td>
            <td>{html.escape(o.table_number or '-')}</td>
            <td style="max-width: 260px;">{items_text}</td>
            <td>{o.total:.2f}</td>
            <td>
                <form action="/admin/orders/{o.id}/status" method="post" class="inline-form" style="margin: 0;">
                    <select name="status" onchange="this.form.submit()" style="width: auto;">{status_options(o.status)}</select>
                </form>
            </td>
            <td><form action="/admin/orders/{o.id}/payment" method="post" style="margin: 0;"><button type="submit" class="button-sm" style="background: none; padding: 0;">{payment_html}</button></form></td>
            <td>{o.created_at.strftime('%d.%m.%Y %H:%M')}</td>
            <td class="actions">
                <a href="/admin/orders/{o.id}" class="button-sm"><i class="fa-solid fa-eye"></i></a>
                <a href="/admin/orders/{o.id}/delete" onclick="return confirm('Delete this order?');" class="button-sm danger"><i class="fa-solid fa-trash"></i></a>
            </td>
        </tr>""")

    base_url = f"/admin/orders?status={status or ''}&q={url_quote_plus(q or '')}&"
    body = ADMIN_ORDERS_BODY.format(
        errors=error_banner([error] if error else []),
        q=html.escape(q or ""),
        status_options=status_options(status.upper() if status else None),
        rows="".join(rows) or f"<tr><td colspan='8'>{t('no_data', lang)}</td></tr>",
        pagination=render_pagination(page, page_count(total, DEFAULT_PAGE_SIZE), base_url),
        order_number_label=t("order_number", lang),
        table_label=t("table", lang),
        total_label=t("total", lang),
        status_label=t("status", lang),
        payment_label=t("payment", lang),
        date_label=t("date", lang),
        actions_label=t("actions", lang),
    )
    return render_admin_page(t("orders", lang), body, "orders", user, lang, str(request.url.path))


@router.get("/admin/orders/{order_id}", response_class=HTMLResponse)
async def admin_order_detail(order_id: int, request: Request, session: AsyncSession = Depends(get_db_session),
                             user: User = Depends(get_current_user)):
    lang = get_language(request)
    order = await get_owned_order(session, user, order_id)
    item_rows = "".join(
        f"<tr><td>{html.escape(i.menu_item_name)}</td><td>{i.price:.2f}</td><td>{i.quantity}</td>"
        f"<td>{html.escape(i.special_instructions or '')}</td><td>{i.line_total:.2f}</td></tr>"
        for i in order.items
    )
    body = ADMIN_ORDER_DETAIL_BODY.format(
        order_id=order.id,
        order_number=html.escape(order.order_number),
        status=order.status,
        table_number=html.escape(order.table_number or "-"),
        customer_name=html.escape(order.customer_name or "-"),
        customer_notes=html.escape(order.customer_notes or "-"),
        created_at=order.created_at.strftime('%d.%m.%Y %H:%M'),
        item_rows=item_rows,
        total=f"{order.total:.2f}",
        status_options=status_options(order.status),
        payment_status=t("paid", lang) if order.payment_status == "completed" else t("unpaid", lang),
        table_label=t("table", lang),
        date_label=t("date", lang),
        price_label=t("price", lang),
        total_label=t("total", lang),
        payment_label=t("payment", lang),
        delete_label=t("delete", lang),
    )
    return render_admin_page(order.order_number, body, "orders", user, lang, str(request.url.path))


@router.post("/admin/orders/{order_id}/status")
async def admin_set_order_status(order_id: int, request: Request, status: str = Form(...),
                                 session: AsyncSession = Depends(get_db_session),
                                 user: User = Depends(get_current_user)):
    order = await get_owned_order(session, user, order_id)
    try:
        await change_order(session, order, status=status)
    except ValidationError as e:
        return RedirectResponse(url=f"/admin/orders?error={url_quote_plus(e.errors[0])}", status_code=303)
    back = request.headers.get("referer") or "/admin/orders"
    return RedirectResponse(url=back, status_code=303)


@router.post("/admin/orders/{order_id}/payment")
async def admin_toggle_payment(order_id: int, request: Request, session: AsyncSession = Depends(get_db_session),
                               user: User = Depends(get_current_user)):
    order = await get_owned_order(session, user, order_id)
    new_value = "pending" if order.payment_status == "completed" else "completed"
    await change_order(session, order, payment_status=new_value)
    back = request.headers.get("referer") or "/admin/orders"
    return RedirectResponse(url=back, status_code=303)


@router.get("/admin/orders/{order_id}/delete")
async def admin_delete_order(order_id: int, session: AsyncSession = Depends(get_db_session),
                             user: User = Depends(get_current_user)):
    order = await get_owned_order(session, user, order_id)
    await session.delete(order)
    await session.commit()
    return RedirectResponse(url="/admin/orders", status_code=303)
