# admin_menu_items.py

import asyncio
import html
import logging
import os
import secrets
from decimal import Decimal
from typing import Optional
from urllib.parse import quote_plus as url_quote_plus

import aiofiles
from PIL import Image
from fastapi import APIRouter, Depends, Form, File, HTTPException, Request, UploadFile, Query
from fastapi.responses import HTMLResponse, RedirectResponse, Response
from sqlalchemy import select, func, delete
from sqlalchemy.ext.asyncio import AsyncSession

from models import MenuItem, DailyMenuEntry, User
from dependencies import get_db_session
from auth_utils import get_current_user
from menu_service import menu_item_to_dict
from optimize_images import optimize_image
from pagination import DEFAULT_PAGE_SIZE, page_count, clamp_page, render_pagination
from schemas import MenuItemRequest
from templates import render_admin_page, error_banner, ADMIN_MENU_ITEMS_BODY, ADMIN_MENU_ITEM_FORM_BODY
from translations import t, get_language
from validation import (
    ValidationError, raise_if_errors, validate_menu_item, validate_image_upload,
    parse_allergens, to_decimal
)

router = APIRouter()
logger = logging.getLogger(__name__)

UPLOAD_DIR = os.environ.get("UPLOAD_DIR", "static/images")


async def get_owned_item(session: AsyncSession, user: User, item_id: int) -> MenuItem:
    item = await session.get(MenuItem, item_id)
    if not item or item.user_id != user.id:
        raise HTTPException(status_code=404, detail="Menu item not found")
    return item


async def get_categories(session: AsyncSession, user: User) -> list:
    res = await session.execute(
        select(MenuItem.category).where(MenuItem.user_id == user.id).distinct().order_by(MenuItem.category)
    )
    return [c for c in res.scalars().all() if c]


def apply_fields(item: MenuItem, name, description, price, category, available, allergens,
                 prep_time_minutes, featured) -> None:
    raise_if_errors(validate_menu_item(name, price, category, prep_time_minutes))
    item.name = name.strip()
    item.description = (description or "").strip() or None
    item.price = to_decimal(price).quantize(Decimal("0.01"))
    item.category = category.strip()
    item.available = bool(available)
    item.allergens = parse_allergens(allergens)
    item.prep_time_minutes = prep_time_minutes
    item.featured = bool(featured)


async def save_image(upload: UploadFile) -> str:
    """Validates, stores and optimises an uploaded photo. Returns its public URL."""
    content = await upload.read()
    raise_if_errors(validate_image_upload(upload.filename, upload.content_type, len(content)))

    os.makedirs(UPLOAD_DIR, exist_ok=True)
    ext = upload.filename.rsplit('.', 1)[-1].lower()
    path = f"{UPLOAD_DIR}/{secrets.token_hex(8)}.{ext}"
    async with aiofiles.open(path, 'wb') as f:
        await f.write(content)

    try:
        path = await asyncio.to_thread(optimize_image, path)
    except (OSError, Image.DecompressionBombError) as e:
        logger.warning(f"Rejected unreadable image '{upload.filename}': {e}")
        if os.path.exists(path):
            os.remove(path)
        raise ValidationError(["Please upload an image file (JPEG, PNG)"])
    return "/" + path


async def delete_menu_item(session: AsyncSession, item: MenuItem) -> None:
    image_url = item.image_url
    await session.execute(delete(DailyMenuEntry).where(DailyMenuEntry.menu_item_id == item.id))
    await session.delete(item)
    await session.commit()
    remove_image_file(image_url)
    logger.info(f"Menu item #{item.id} deleted")


def remove_image_file(image_url: Optional[str]) -> None:
    if not image_url:
        return
    path = image_url.lstrip("/")
    if os.path.exists(path):
        try:
            os.remove(path)
        except OSError as e:
            logger.warning(f"Could not delete image {path}: {e}")


# --- JSON API ---

@router.get("/api/menu-items")
async def api_list_menu_items(
    available: Optional[bool] = Query(None),
    category: Optional[str] = Query(None),
    session: AsyncSession = Depends(get_db_session),
    user: User = Depends(get_current_user)
):
    query = select(MenuItem).where(MenuItem.user_id == user.id)
    if available is not None:
        query = query.where(MenuItem.available == available)
    if category:
        query = query.where(MenuItem.category == category)
    res = await session.execute(query.order_by(MenuItem.category, MenuItem.name))
    return [menu_item_to_dict(i) for i in res.scalars().all()]


@router.get("/api/menu-items/categories")
async def api_menu_categories(session: AsyncSession = Depends(get_db_session), user: User = Depends(get_current_user)):
    return await get_categories(session, user)


@router.get("/api/menu-items/{item_id}")
async def api_get_menu_item(item_id: int, session: AsyncSession = Depends(get_db_session),
                            user: User = Depends(get_current_user)):
    return menu_item_to_dict(await get_owned_item(session, user, item_id))


@router.post("/api/menu-items", status_code=201)
async def api_create_menu_item(payload: MenuItemRequest, session: AsyncSession = Depends(get_db_session),
                               user: User = Depends(get_current_user)):
    item = MenuItem(user_id=user.id)
    apply_fields(item, payload.name, payload.description, payload.price, payload.category,
                 payload.available, payload.allergens, payload.prep_time_minutes, payload.featured)
    session.add(item)
    await session.commit()
    await session.refresh(item)
    logger.info(f"Menu item '{item.name}' created by user #{user.id}")
    return menu_item_to_dict(item)


@router.put("/api/menu-items/{item_id}")
async def api_update_menu_item(item_id: int, payload: MenuItemRequest,
                               session: AsyncSession = Depends(get_db_session),
                               user: User = Depends(get_current_user)):
    item = await get_owned_item(session, user, item_id)
    apply_fields(item, payload.name, payload.description, payload.price, payload.category,
                 payload.available, payload.allergens, payload.prep_time_minutes, payload.featured)
    await session.commit()
    await session.refresh(item)
    return menu_item_to_dict(item)


@router.patch("/api/menu-items/{item_id}/toggle")
async def api_toggle_menu_item(item_id: int, session: AsyncSession = Depends(get_db_session),
                               user: User = Depends(get_current_user)):
    item = await get_owned_item(session, user, item_id)
    item.available = not item.available
    await session.commit()
    await session.refresh(item)
    return menu_item_to_dict(item)


@router.delete("/api/menu-items/{item_id}", status_code=204)
async def api_delete_menu_item(item_id: int, session: AsyncSession = Depends(get_db_session),
                               user: User = Depends(get_current_user)):
    item = await get_owned_item(session, user, item_id)
    await delete_menu_item(session, item)
    return Response(status_code=204)


@router.post("/api/menu-items/{item_id}/image")
async def api_upload_menu_item_image(item_id: int, file: UploadFile = File(...),
                                     session: AsyncSession = Depends(get_db_session),
                                     user: User = Depends(get_current_user)):
    item = await get_owned_item(session, user, item_id)
    old_url = item.image_url
    item.image_url = await save_image(file)
    await session.commit()
    await session.refresh(item)
    if old_url and old_url != item.image_url:
        remove_image_file(old_url)
    return menu_item_to_dict(item)


# --- HTML pages ---

@router.get("/admin/menu-items", response_class=HTMLResponse)
async def admin_menu_items(
    request: Request,
    q: Optional[str] = Query(None),
    category: Optional[str] = Query(None),
    page: int = Query(1),
    session: AsyncSession = Depends(get_db_session),
    user: User = Depends(get_current_user)
):
    lang = get_language(request)
    query = select(MenuItem).where(MenuItem.user_id == user.id)
    if q:
        query = query.where(MenuItem.name.ilike(f"%{q.strip()}%"))
    if category:
        query = query.where(MenuItem.category == category)

    total = (await session.execute(select(func.count()).select_from(query.subquery()))).scalar_one()
    page = clamp_page(page, total, DEFAULT_PAGE_SIZE)
    res = await session.execute(
        query.order_by(MenuItem.category, MenuItem.name)
        .offset((page - 1) * DEFAULT_PAGE_SIZE).limit(DEFAULT_PAGE_SIZE)
    )
    items = res.scalars().all()

    rows = []
    for item in items:
        img = f'<img src="{html.escape(item.image_url)}" class="table-img" alt="">' if item.image_url else ''
        status_html = (f'<span class="status READY">{t("available", lang)}</span>' if item.available
                       else f'<span class="status CANCELLED">{t("unavailable", lang)}</span>')
        featured = ' <i class="fa-solid fa-star" style="color:#f59e0b;" title="Featured"></i>' if item.featured else ''
        rows.append(f"""
        <tr>
            <td>{img}</td>
            <td><b>{html.escape(item.name)}</b>{featured}</td>
            <td>{html.escape(item.category)}</td>
            <td>{item.price:.2f}</td>
            <td>{status_html}</td>
            <td class="actions">
                <a href="/admin/menu-items/{item.id}/toggle" class="button-sm" title="Toggle availability"><i class="fa-solid fa-power-off"></i></a>
                <a href="/admin/menu-items/{item.id}/edit" class="button-sm" title="Edit"><i class="fa-solid fa-pen"></i></a>
                <a href="/admin/menu-items/{item.id}/copy" class="button-sm" title="Copy"><i class="fa-solid fa-copy"></i></a>
                <a href="/admin/menu-items/{item.id}/delete" onclick="return confirm('Delete this item?');" class="button-sm danger"><i class="fa-solid fa-trash"></i></a>
            </td>
        </tr>""")

    categories = await get_categories(session, user)
    category_options = "".join(
        f'<option value="{html.escape(c)}" {"selected" if c == category else ""}>{html.escape(c)}</option>'
        for c in categories
    )
    base_url = f"/admin/menu-items?q={url_quote_plus(q or '')}&category={url_quote_plus(category or '')}&"
    body = ADMIN_MENU_ITEMS_BODY.format(
        q=html.escape(q or ""),
        category_options=category_options,
        rows="".join(rows) or f"<tr><td colspan='6'>{t('no_data', lang)}</td></tr>",
        pagination=render_pagination(page, page_count(total, DEFAULT_PAGE_SIZE), base_url),
        search_label=t("search", lang),
        all_categories_label=t("all_categories", lang),
        add_item_label=t("add_item", lang),
        name_label=t("name", lang),
        category_label=t("category", lang),
        price_label=t("price", lang),
        status_label=t("status", lang),
        actions_label=t("actions", lang),
    )
    return render_admin_page(t("menu_items", lang), body, "menu_items", user, lang, str(request.url.path))


async def render_item_form(request: Request, session: AsyncSession, user: User, action: str, values: dict,
                           errors=None, title_key: str = "add_item", status_code: int = 200) -> HTMLResponse:
    lang = get_language(request)
    categories = await get_categories(session, user)
    current_image = ""
    if values.get("image_url"):
        current_image = f'<p><img src="{html.escape(values["image_url"])}" class="table-img" alt=""></p>'
    body = ADMIN_MENU_ITEM_FORM_BODY.format(
        action=action,
        errors=error_banner(errors),
        name=html.escape(values.get("name") or ""),
        description=html.escape(values.get("description") or ""),
        price=html.escape(str(values.get("price") or "")),
        category=html.escape(values.get("category") or ""),
        category_options="".join(f'<option value="{html.escape(c)}">' for c in categories),
        allergens=html.escape(values.get("allergens") or ""),
        prep_time_minutes=values.get("prep_time_minutes") or "",
        current_image=current_image,
        available_checked="checked" if values.get("available", True) else "",
        featured_checked="checked" if values.get("featured") else "",
        name_label=t("name", lang),
        description_label=t("description", lang),
        price_label=t("price", lang),
        category_label=t("category", lang),
        available_label=t("available", lang),
        save_label=t("save", lang),
        cancel_label=t("cancel", lang),
    )
    response = render_admin_page(t(title_key, lang), body, "menu_items", user, lang, str(request.url.path))
    response.status_code = status_code
    return response


def form_values(name, description, price, category, allergens, prep_time_minutes, available, featured) -> dict:
    return {
        "name": name, "description": description, "price": price, "category": category,
        "allergens": allergens, "prep_time_minutes": prep_time_minutes,
        "available": bool(available), "featured": bool(featured),
    }


@router.get("/admin/menu-items/add", response_class=HTMLResponse)
async def admin_add_item_form(request: Request, session: AsyncSession = Depends(get_db_session),
                              user: User = Depends(get_current_user)):
    return await render_item_form(request, session, user, "/admin/menu-items/add", {"available": True})


@router.post("/admin/menu-items/add")
async def admin_add_item(
    request: Request,
    name: str = Form(""),
    description: str = Form(""),
    price: str = Form(""),
    category: str = Form(""),
    allergens: str = Form(""),
    prep_time_minutes: Optional[int] = Form(None),
    available: Optional[str] = Form(None),
    featured: Optional[str] = Form(None),
    image: UploadFile = File(None),
    session: AsyncSession = Depends(get_db_session),
    user: User = Depends(get_current_user)
):
    values = form_values(name, description, price, category, allergens, prep_time_minutes, available, featured)
    item = MenuItem(user_id=user.id)
    try:
        apply_fields(item, name, description, price, category, available, allergens, prep_time_minutes, featured)
        if image and image.filename:
            item.image_url = await save_image(image)
    except ValidationError as e:
        return await render_item_form(request, session, user, "/admin/menu-items/add", values, e.errors,
                                      status_code=400)
    session.add(item)
    await session.commit()
    return RedirectResponse(url="/admin/menu-items", status_code=303)


@router.get("/admin/menu-items/{item_id}/edit", response_class=HTMLResponse)
async def admin_edit_item_form(item_id: int, request: Request, session: AsyncSession = Depends(get_db_session),
                               user: User = Depends(get_current_user)):
    item = await get_owned_item(session, user, item_id)
    values = form_values(item.name, item.description, f"{item.price:.2f}", item.category,
                         ", ".join(item.allergens or []), item.prep_time_minutes, item.available, item.featured)
    values["image_url"] = item.image_url
    return await render_item_form(request, session, user, f"/admin/menu-items/{item.id}/edit", values,
                                  title_key="edit_item")


@router.post("/admin/menu-items/{item_id}/edit")
async def admin_edit_item(
    item_id: int,
    request: Request,
    name: str = Form(""),
    description: str = Form(""),
    price: str = Form(""),
    category: str = Form(""),
    allergens: str = Form(""),
    prep_time_minutes: Optional[int] = Form(None),
    available: Optional[str] = Form(None),
    featured: Optional[str] = Form(None),
    image: UploadFile = File(None),
    session: AsyncSession = Depends(get_db_session),
    user: User = Depends(get_current_user)
):
    item = await get_owned_item(session, user, item_id)
    values = form_values(name, description, price, category, allergens, prep_time_minutes, available, featured)
    values["image_url"] = item.image_url
    old_url = item.image_url
    try:
        raise_if_errors(validate_menu_item(name, price, category, prep_time_minutes))
        new_url = await save_image(image) if image and image.filename else None
    except ValidationError as e:
        return await render_item_form(request, session, user, f"/admin/menu-items/{item.id}/edit", values,
                                      e.errors, title_key="edit_item", status_code=400)
    apply_fields(item, name, description, price, category, available, allergens, prep_time_minutes, featured)
    if new_url:
        item.image_url = new_url
    await session.commit()
    if new_url and old_url:
        remove_image_file(old_url)
    return RedirectResponse(url="/admin/menu-items", status_code=303)


@router.get("/admin/menu-items/{item_id}/toggle")
async def admin_toggle_item(item_id: int, session: AsyncSession = Depends(get_db_session),
                            user: User = Depends(get_current_user)):
    item = await get_owned_item(session, user, item_id)
    item.available = not item.available
    await session.commit()
    return RedirectResponse(url="/admin/menu-items", status_code=303)


@router.get("/admin/menu-items/{item_id}/copy")
async def admin_copy_item(item_id: int, session: AsyncSession = Depends(get_db_session),
                          user: User = Depends(get_current_user)):
    """Duplicates an item as an unavailable draft, without its photo."""
    item = await get_owned_item(session, user, item_id)
    copy = MenuItem(
        user_id=user.id,
        name=f"{item.name} (copy)"[:100],
        description=item.description,
        price=item.price,
        category=item.category,
        allergens=list(item.allergens or []),
        prep_time_minutes=item.prep_time_minutes,
        available=False,
        featured=False,
    )
    session.add(copy)
    await session.commit()
    await session.refresh(copy)
    return RedirectResponse(url=f"/admin/menu-items/{copy.id}/edit", status_code=303)


@router.get("/admin/menu-items/{item_id}/delete")
async def admin_delete_item(item_id: int, session: AsyncSession = Depends(get_db_session),
                            user: User = Depends(get_current_user)):
    item = await get_owned_item(session, user, item_id)
    await delete_menu_item(session, item)
    return RedirectResponse(url="/admin/menu-items", status_code=303)
