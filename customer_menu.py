# customer_menu.py

import html
import logging
from decimal import Decimal
from typing import Optional
from urllib.parse import quote, unquote, quote_plus as url_quote_plus

from fastapi import APIRouter, Depends, Form, HTTPException, Request, Query
from fastapi.responses import HTMLResponse, RedirectResponse
from sqlalchemy.ext.asyncio import AsyncSession

from models import OrderStatus, Table, User
from dependencies import get_db_session, get_restaurant_settings
from cart import Cart, cart_cookie_name, generate_device_id, DEVICE_COOKIE_NAME, COOKIE_MAX_AGE
from menu_service import get_customer_menu, group_by_category
from order_service import place_order, TableNotFoundError, OrderingClosedError
from public_api import track_session, get_order_by_number, submit_feedback
from templates import stars
from tpl_client_qr import (
    CUSTOMER_HTML_TEMPLATE, CUSTOMER_MENU_BODY, CHECKOUT_FORM, ORDER_TRACKING_BODY, CUSTOMER_FEEDBACK_BODY
)
from tpl_404 import HTML_404_TEMPLATE
from translations import t, get_language, language_switcher
from validation import ValidationError, validate_quantity

router = APIRouter()
logger = logging.getLogger(__name__)

TRACKING_STEPS = [OrderStatus.PENDING, OrderStatus.CONFIRMED, OrderStatus.PREPARING,
                  OrderStatus.READY, OrderStatus.COMPLETED]


def not_found_page(message: str, back_url: str = "/") -> HTMLResponse:
    return HTMLResponse(HTML_404_TEMPLATE.format(message=html.escape(message), back_url=back_url), status_code=404)


def read_cart(request: Request, table_id: int) -> Cart:
    raw = request.cookies.get(cart_cookie_name(table_id))
    return Cart.loads(unquote(raw) if raw else None)


def write_cart(response, table_id: int, cart: Cart):
    if cart.is_empty():
        response.delete_cookie(cart_cookie_name(table_id))
    else:
        response.set_cookie(cart_cookie_name(table_id), quote(cart.dumps()), max_age=COOKIE_MAX_AGE, samesite="lax")
    return response


def back_to_menu(table_id: int, notice: str = "", error: str = "") -> RedirectResponse:
    url = f"/customer-menu?table={table_id}"
    if error:
        url += f"&error={url_quote_plus(error)}"
    elif notice:
        url += f"&notice={url_quote_plus(notice)}"
    return RedirectResponse(url=url + "#cart", status_code=303)


def format_money(amount, currency: str) -> str:
    return f"{Decimal(str(amount)):,.2f} {html.escape(currency)}"


def current_url(request: Request) -> str:
    query = request.url.query
    return request.url.path + (f"?{query}" if query else "")


def render_customer_page(request: Request, lang: str, title: str, site_title: str, body: str,
                         header_extra: str = "", head_extra: str = "") -> HTMLResponse:
    return HTMLResponse(CUSTOMER_HTML_TEMPLATE.format(
        lang=lang,
        title=html.escape(title),
        site_title=html.escape(site_title),
        head_extra=head_extra,
        header_extra=header_extra,
        language_links=language_switcher(lang, current_url(request)),
        body=body,
    ))


async def load_table(session: AsyncSession, table_id: Optional[str]) -> Optional[Table]:
    if not table_id or not str(table_id).isdigit():
        return None
    table = await session.get(Table, int(table_id))
    if not table or not table.active:
        return None
    return table


@router.get("/customer-menu", response_class=HTMLResponse)
async def customer_menu(
    request: Request,
    table: Optional[str] = Query(None),
    notice: Optional[str] = Query(None),
    error: Optional[str] = Query(None),
    session: AsyncSession = Depends(get_db_session)
):
    lang = get_language(request)
    tbl = await load_table(session, table)
    if not tbl:
        return not_found_page("Table not found")

    device_id = request.cookies.get(DEVICE_COOKIE_NAME)
    new_device = not device_id
    if new_device:
        device_id = generate_device_id()

    # one tracked visit per browser session
    visit_cookie = f"visit-{tbl.id}"
    visit = None
    if not request.cookies.get(visit_cookie):
        visit = await track_session(session, device_id, tbl)

    owner = await session.get(User, tbl.user_id)
    settings = await get_restaurant_settings(session, owner)
    currency = settings.currency or ""

    menu = await get_customer_menu(session, tbl.user_id)
    cart = read_cart(request, tbl.id)
    cart.reprice({item.id: price for item, price, _ in menu})

    notices = []
    if visit is not None and visit.visit_count > 1:
        name = f", {html.escape(visit.customer_name)}" if visit.customer_name else ""
        notices.append(f'<div class="notice">{t("welcome_back", lang)}{name}!</div>')
    if notice:
        notices.append(f'<div class="notice">{html.escape(notice)}</div>')
    if error:
        notices.append(f'<div class="notice error">{html.escape(error)}</div>')
    if not settings.allow_online_orders:
        notices.append('<div class="notice error">Online ordering is currently disabled. Please ask a member of staff.</div>')

    specials = [(item, price) for item, price, is_special in menu if is_special and price != item.price]
    specials_html = ""
    if specials:
        lines = "".join(
            f'<li><b>{html.escape(item.name)}</b> <span class="price"><s>{format_money(item.price, currency)}</s>'
            f'{format_money(price, currency)}</span></li>'
            for item, price in specials
        )
        specials_html = f'<div class="cart" style="margin-top: 0;"><h2>{t("todays_specials", lang)}</h2><ul>{lines}</ul></div>'

    categories = []
    for category, rows in group_by_category(menu).items():
        cards = []
        for item, price, is_special in rows:
            image = f'<img src="{html.escape(item.image_url)}" alt="{html.escape(item.name)}" loading="lazy">' if item.image_url else ""
            price_html = format_money(price, currency)
            if price != item.price:
                price_html = f"<s>{format_money(item.price, currency)}</s>{price_html}"
            tag = f' <span class="special-tag">{t("todays_specials", lang)}</span>' if is_special and price != item.price else ""
            meta = []
            if item.prep_time_minutes:
                meta.append(f"{item.prep_time_minutes} min")
            if item.allergens:
                meta.append(html.escape(", ".join(item.allergens)))
            cards.append(f"""
            <div class="product-card">
                {image}
                <div class="product-info">
                    <div class="product-name">{html.escape(item.name)}{tag}</div>
                    <div class="product-desc">{html.escape(item.description or '')}</div>
                    <div class="product-meta">{' · '.join(meta)}</div>
                    <div class="price">{price_html}</div>
                    <form action="/customer-menu/cart/add" method="post" class="add-form">
                        <input type="hidden" name="table" value="{tbl.id}">
                        <input type="hidden" name="menu_item_id" value="{item.id}">
                        <input type="number" name="quantity" value="1" min="1">
                        <input type="text" name="special_instructions" placeholder="{t('special_instructions', lang)}">
                        <button type="submit" class="btn">{t('add_to_cart', lang)}</button>
                    </form>
                </div>
            </div>""")
        categories.append(
            f'<h2 class="category-title">{html.escape(category)}</h2><div class="products-grid">{"".join(cards)}</div>'
        )

    cart_lines = []
    for index, line in enumerate(cart.lines):
        note = f"<br><small>{html.escape(line.special_instructions)}</small>" if line.special_instructions else ""
        cart_lines.append(f"""
        <div class="cart-line">
            <div><b>{html.escape(line.name)}</b>{note}<br><small>{format_money(line.line_total, currency)}</small></div>
            <form action="/customer-menu/cart/update" method="post">
                <input type="hidden" name="table" value="{tbl.id}">
                <input type="hidden" name="index" value="{index}">
                <input type="number" name="quantity" value="{line.quantity}" min="0">
                <button type="submit" class="btn light"><i class="fa-solid fa-rotate"></i></button>
            </form>
        </div>""")

    checkout = ""
    if not cart.is_empty():
        checkout = CHECKOUT_FORM.format(
            table_id=tbl.id,
            name_label=t("your_name", lang),
            customer_name=html.escape(visit.customer_name or "") if visit is not None else "",
            notes_label=t("special_instructions", lang),
            place_order_label=t("place_order", lang),
        ) + (f'<form action="/customer-menu/cart/clear" method="post"><input type="hidden" name="table" value="{tbl.id}">'
             f'<button type="submit" class="btn light" style="width: 100%;">{t("cancel", lang)}</button></form>')

    body = CUSTOMER_MENU_BODY.format(
        notice="".join(notices),
        specials=specials_html,
        categories="".join(categories) or f"<p>{t('no_data', lang)}</p>",
        cart_label=t("your_cart", lang),
        cart_lines="".join(cart_lines) or f"<p>{t('cart_empty', lang)}</p>",
        total_label=t("total", lang),
        cart_total=format_money(cart.total, currency),
        checkout_form=checkout,
        table_id=tbl.id,
    )
    badge = f'<div class="table-badge">{"Room" if tbl.is_room else t("table", lang)} {html.escape(tbl.table_number)}</div>'
    response = render_customer_page(request, lang, t("our_menu", lang), owner.restaurant_name or "SmartMenu",
                                    body, header_extra=badge)
    if new_device:
        response.set_cookie(DEVICE_COOKIE_NAME, device_id, max_age=COOKIE_MAX_AGE, samesite="lax")
    if visit is not None:
        response.set_cookie(visit_cookie, "1", samesite="lax")
    return write_cart(response, tbl.id, cart)


@router.post("/customer-menu/cart/add")
async def cart_add(
    request: Request,
    table: int = Form(...),
    menu_item_id: int = Form(...),
    quantity: int = Form(1),
    special_instructions: str = Form(""),
    session: AsyncSession = Depends(get_db_session)
):
    tbl = await load_table(session, str(table))
    if not tbl:
        return not_found_page("Table not found")
    menu = {item.id: (item, price) for item, price, _ in await get_customer_menu(session, tbl.user_id)}
    if menu_item_id not in menu:
        return back_to_menu(tbl.id, error="This item is not available right now")

    item, price = menu[menu_item_id]
    quantity_errors = validate_quantity(quantity)
    if quantity_errors:
        return back_to_menu(tbl.id, error=quantity_errors[0])
    cart = read_cart(request, tbl.id)
    cart.add(item.id, item.name, price, quantity, special_instructions)
    return write_cart(back_to_menu(tbl.id, notice=f"{item.name} added"), tbl.id, cart)


@router.post("/customer-menu/cart/update")
async def cart_update(request: Request, table: int = Form(...), index: int = Form(...), quantity: int = Form(0)):
    cart = read_cart(request, table)
    cart.update(index, quantity)
    return write_cart(back_to_menu(table), table, cart)


@router.post("/customer-menu/cart/clear")
async def cart_clear(table: int = Form(...)):
    return write_cart(back_to_menu(table), table, Cart())


@router.post("/customer-menu/order")
async def cart_checkout(
    request: Request,
    table: int = Form(...),
    customer_name: str = Form(""),
    customer_notes: str = Form(""),
    session: AsyncSession = Depends(get_db_session)
):
    cart = read_cart(request, table)
    lines = [
        {"menu_item_id": l.menu_item_id, "quantity": l.quantity, "special_instructions": l.special_instructions}
        for l in cart.lines
    ]
    try:
        order = await place_order(
            session, table, lines,
            device_id=request.cookies.get(DEVICE_COOKIE_NAME),
            customer_name=customer_name,
            customer_notes=customer_notes,
        )
    except TableNotFoundError:
        return not_found_page("Table not found")
    except (OrderingClosedError, ValidationError) as e:
        message = "; ".join(e.errors) if isinstance(e, ValidationError) else str(e)
        return back_to_menu(table, error=message)

    response = RedirectResponse(url=f"/order-tracking?order={order.order_number}", status_code=303)
    return write_cart(response, table, Cart())


@router.get("/order-tracking", response_class=HTMLResponse)
async def order_tracking(request: Request, order: Optional[str] = Query(None),
                         session: AsyncSession = Depends(get_db_session)):
    lang = get_language(request)
    found = await get_order_by_number(session, order) if order else None
    if not found:
        return not_found_page("Order not found")

    owner = await session.get(User, found.user_id)
    settings = await get_restaurant_settings(session, owner)
    currency = settings.currency or ""

    reached = -1
    if found.status in [s.value for s in TRACKING_STEPS]:
        reached = [s.value for s in TRACKING_STEPS].index(found.status)
    steps = "".join(
        f'<span class="{"done" if i <= reached else ""}">{s.value.title()}</span>' for i, s in enumerate(TRACKING_STEPS)
    )
    item_lines = "".join(
        f'<div class="cart-line"><span>{html.escape(i.menu_item_name)} x {i.quantity}</span>'
        f'<span>{format_money(i.line_total, currency)}</span></div>'
        for i in found.items
    )
    feedback_link = ""
    if found.status == OrderStatus.COMPLETED.value:
        feedback_link = (f'<a class="btn" href="/customer-feedback?order={found.order_number}">'
                         f'{t("leave_feedback", lang)}</a>')

    body = ORDER_TRACKING_BODY.format(
        order_number_label=t("order_number", lang),
        order_number=html.escape(found.order_number),
        status=found.status,
        steps=steps,
        item_lines=item_lines,
        total_label=t("total", lang),
        total=format_money(found.total, currency),
        table_id=found.table_id or "",
        feedback_link=feedback_link,
    )
    return render_customer_page(
        request, lang, t("track_order", lang), owner.restaurant_name or "SmartMenu", body,
        head_extra='<meta http-equiv="refresh" content="10">'
    )


def feedback_page(request: Request, lang: str, site_title: str, order_number: str, notice: str = "") -> HTMLResponse:
    body = CUSTOMER_FEEDBACK_BODY.format(
        notice=notice,
        title=t("leave_feedback", lang),
        order_number=html.escape(order_number),
        comments_label=t("comments", lang),
        submit_label=t("submit", lang),
    )
    return render_customer_page(request, lang, t("leave_feedback", lang), site_title, body)


@router.get("/customer-feedback", response_class=HTMLResponse)
async def customer_feedback_form(request: Request, order: Optional[str] = Query(None),
                                 session: AsyncSession = Depends(get_db_session)):
    found = await get_order_by_number(session, order) if order else None
    if not found:
        return not_found_page("Order not found")
    owner = await session.get(User, found.user_id)
    return feedback_page(request, get_language(request), owner.restaurant_name or "SmartMenu", found.order_number)


@router.post("/customer-feedback", response_class=HTMLResponse)
async def customer_feedback_submit(
    request: Request,
    order: str = Form(...),
    rating: Optional[int] = Form(None),
    comments: str = Form(""),
    session: AsyncSession = Depends(get_db_session)
):
    lang = get_language(request)
    try:
        feedback = await submit_feedback(session, order, rating, comments)
    except HTTPException:
        return not_found_page("Order not found")
    except ValidationError as e:
        notice = f'<div class="notice error">{html.escape("; ".join(e.errors))}</div>'
        response = feedback_page(request, lang, "SmartMenu", order, notice)
        response.status_code = 400
        return response

    body = (f'<div class="cart" style="margin-top: 0; text-align: center;"><h2>{t("thank_you", lang)}</h2>'
            f'<p style="margin-top: 12px;">{stars(feedback.rating)}</p></div>')
    return render_customer_page(request, lang, t("thank_you", lang), "SmartMenu", body)
