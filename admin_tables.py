# admin_tables.py

import html
import io
import logging
import os
from typing import Optional

import qrcode
from fastapi import APIRouter, Depends, Form, HTTPException, Request
from fastapi.responses import HTMLResponse, RedirectResponse, StreamingResponse, Response
from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession

from models import Table, User
from dependencies import get_db_session
from auth_utils import get_current_user
from schemas import TableRequest
from templates import render_admin_page, error_banner, ADMIN_TABLES_BODY
from translations import t, get_language
from validation import raise_if_errors, validate_table, ValidationError

router = APIRouter()
logger = logging.getLogger(__name__)


def customer_menu_url(request: Request, table_id: int) -> str:
    base_url = (os.environ.get("FRONTEND_URL") or str(request.base_url)).rstrip('/')
    return f"{base_url}/customer-menu?table={table_id}"


def table_to_dict(table: Table) -> dict:
    return {
        "id": table.id,
        "table_number": table.table_number,
        "is_room": table.is_room,
        "location": table.location,
        "qr_code_id": table.qr_code_id,
        "qr_code_url": table.qr_code_url,
        "qr_image_url": f"/qr/{table.qr_code_id}.png",
        "active": table.active,
        "created_at": table.created_at.isoformat() if table.created_at else None,
    }


async def get_owned_table(session: AsyncSession, user: User, table_id: int) -> Table:
    table = await session.get(Table, table_id)
    if not table:
        raise HTTPException(status_code=404, detail="Table not found")
    if table.user_id != user.id:
        raise HTTPException(status_code=403, detail="You do not have access to this table")
    return table


async def ensure_unique_number(session: AsyncSession, user: User, table_number: str, exclude_id: Optional[int] = None):
    query = select(func.count(Table.id)).where(Table.user_id == user.id, Table.table_number == table_number)
    if exclude_id:
        query = query.where(Table.id != exclude_id)
    if (await session.execute(query)).scalar_one():
        raise HTTPException(status_code=409, detail=f"Table {table_number} already exists")


async def create_table(session: AsyncSession, request: Request, user: User, table_number: Optional[str],
                       is_room: bool = False, location: Optional[str] = None) -> Table:
    raise_if_errors(validate_table(table_number, location))
    number = table_number.strip()
    await ensure_unique_number(session, user, number)

    table = Table(user_id=user.id, table_number=number, is_room=is_room, location=(location or "").strip() or None)
    session.add(table)
    await session.flush()
    table.qr_code_url = customer_menu_url(request, table.id)
    await session.commit()
    logger.info(f"Created {'room' if is_room else 'table'} {number} for user {user.id}")
    return table


# --- JSON API ---

@router.get("/api/tables")
async def api_list_tables(session: AsyncSession = Depends(get_db_session), user: User = Depends(get_current_user)):
    res = await session.execute(select(Table).where(Table.user_id == user.id).order_by(Table.table_number))
    return [table_to_dict(tb) for tb in res.scalars().all()]


@router.post("/api/tables", status_code=201)
async def api_create_table(payload: TableRequest, request: Request, session: AsyncSession = Depends(get_db_session),
                           user: User = Depends(get_current_user)):
    table = await create_table(session, request, user, payload.table_number, payload.is_room, payload.location)
    return table_to_dict(table)


@router.get("/api/tables/{table_id}")
async def api_get_table(table_id: int, session: AsyncSession = Depends(get_db_session),
                        user: User = Depends(get_current_user)):
    return table_to_dict(await get_owned_table(session, user, table_id))


@router.put("/api/tables/{table_id}")
async def api_update_table(table_id: int, payload: TableRequest, request: Request,
                           session: AsyncSession = Depends(get_db_session),
                           user: User = Depends(get_current_user)):
    table = await get_owned_table(session, user, table_id)
    raise_if_errors(validate_table(payload.table_number, payload.location))
    number = payload.table_number.strip()
    await ensure_unique_number(session, user, number, exclude_id=table.id)
    table.table_number = number
    table.is_room = payload.is_room
    table.location = (payload.location or "").strip() or None
    if payload.active is not None:
        table.active = payload.active
    table.qr_code_url = customer_menu_url(request, table.id)
    await session.commit()
    return table_to_dict(table)


@router.delete("/api/tables/{table_id}", status_code=204)
async def api_delete_table(table_id: int, session: AsyncSession = Depends(get_db_session),
                           user: User = Depends(get_current_user)):
    table = await get_owned_table(session, user, table_id)
    await session.delete(table)
    await session.commit()
    logger.info(f"Deleted table {table.table_number} of user {user.id}")
    return Response(status_code=204)


@router.get("/qr/{qr_code_id}.png")
async def get_qr_code(request: Request, qr_code_id: str, session: AsyncSession = Depends(get_db_session)):
    """Renders the table's customer-menu link as a PNG QR code."""
    res = await session.execute(select(Table).where(Table.qr_code_id == qr_code_id))
    table = res.scalar_one_or_none()
    if not table:
        raise HTTPException(status_code=404, detail="QR code not found")

    img = qrcode.make(table.qr_code_url or customer_menu_url(request, table.id))
    buf = io.BytesIO()
    img.save(buf, 'PNG')
    buf.seek(0)

    headers = {"Content-Disposition": f'inline; filename="table-{table.id}.png"'}
    return StreamingResponse(buf, media_type="image/png", headers=headers)


# --- HTML pages ---

async def render_tables_page(request: Request, session: AsyncSession, user: User, errors=None) -> HTMLResponse:
    lang = get_language(request)
    res = await session.execute(select(Table).where(Table.user_id == user.id).order_by(Table.table_number))

    rows = []
    for table in res.scalars().all():
        link = table.qr_code_url or customer_menu_url(request, table.id)
        rows.append(f"""
        <tr>
            <td><b>{html.escape(table.table_number)}</b></td>
            <td>{'Room' if table.is_room else 'Table'}</td>
            <td>{html.escape(table.location or '-')}</td>
            <td><img src="/qr/{table.qr_code_id}.png" alt="QR Code" class="qr-code-img"></td>
            <td><a href="{html.escape(link)}" target="_blank">{html.escape(link)}</a></td>
            <td class="actions">
                <a href="/qr/{table.qr_code_id}.png" download="table-{html.escape(table.table_number)}.png" class="button-sm"><i class="fa-solid fa-download"></i></a>
                <a href="/admin/tables/{table.id}/delete" onclick="return confirm('Delete this table? Its QR code will stop working.');" class="button-sm danger"><i class="fa-solid fa-trash"></i></a>
            </td>
        </tr>""")

    body = ADMIN_TABLES_BODY.format(
        errors=error_banner(errors),
        rows="".join(rows) or f"<tr><td colspan='6'>{t('no_data', lang)}</td></tr>",
        qr_codes_label=t("qr_codes", lang),
        table_label=t("table", lang),
        actions_label=t("actions", lang),
    )
    response = render_admin_page(t("qr_codes", lang), body, "tables", user, lang, str(request.url.path))
    if errors:
        response.status_code = 400
    return response


@router.get("/admin/tables", response_class=HTMLResponse)
async def admin_tables_list(request: Request, session: AsyncSession = Depends(get_db_session),
                            user: User = Depends(get_current_user)):
    return await render_tables_page(request, session, user)


@router.post("/admin/tables/add")
async def admin_add_table(
    request: Request,
    table_number: str = Form(""),
    location: str = Form(""),
    is_room: bool = Form(False),
    session: AsyncSession = Depends(get_db_session),
    user: User = Depends(get_current_user)
):
    try:
        await create_table(session, request, user, table_number, is_room, location)
    except ValidationError as e:
        return await render_tables_page(request, session, user, e.errors)
    except HTTPException as e:
        return await render_tables_page(request, session, user, [e.detail])
    return RedirectResponse(url="/admin/tables", status_code=303)


@router.get("/admin/tables/{table_id}/delete")
async def admin_delete_table(table_id: int, session: AsyncSession = Depends(get_db_session),
                             user: User = Depends(get_current_user)):
    table = await get_owned_table(session, user, table_id)
    await session.delete(table)
    await session.commit()
    return RedirectResponse(url="/admin/tables", status_code=303)
