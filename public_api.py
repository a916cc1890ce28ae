# public_api.py
"""
Endpoints used by customers' phones after scanning a table QR code.
None of them require authentication.
"""

import logging
from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from models import CustomerSession, Feedback, Order, Table, User
from dependencies import get_db_session, get_restaurant_settings
from menu_service import get_customer_menu, menu_item_to_dict, money
from order_service import (
    place_order, order_to_dict, get_active_table, TableNotFoundError, OrderingClosedError
)
from schemas import PublicOrderRequest, SessionRequest, FeedbackRequest
from validation import raise_if_errors, validate_rating

router = APIRouter(prefix="/api/public")
logger = logging.getLogger(__name__)


async def find_table(session: AsyncSession, table_id: int) -> Table:
    try:
        return await get_active_table(session, table_id)
    except TableNotFoundError:
        raise HTTPException(status_code=404, detail="Table not found")


async def track_session(session: AsyncSession, device_id: str, table: Table,
                        customer_name: Optional[str] = None, customer_phone: Optional[str] = None) -> CustomerSession:
    """
    Records a visit of `device_id`; every call after the first counts as a return visit.

    Two first visits of the same device can race on the unique device id; the
    loser rolls back and counts its visit on the row the winner created.
    """
    table_id, user_id = table.id, table.user_id
    for _ in range(2):
        visit = await get_session_by_device(session, device_id)
        if visit is None:
            visit = CustomerSession(device_id=device_id, table_id=table_id, user_id=user_id, visit_count=1)
            session.add(visit)
        else:
            visit.visit_count = (visit.visit_count or 0) + 1
            visit.last_visit = datetime.now()
            visit.table_id = table_id
            visit.user_id = user_id
        if customer_name:
            visit.customer_name = customer_name.strip()
        if customer_phone:
            visit.customer_phone = customer_phone.strip()
        try:
            await session.commit()
        except IntegrityError:
            await session.rollback()
            # the rollback expired the caller's table
            await session.refresh(table)
            logger.warning(f"Concurrent first visit of device {device_id}, counting it on the existing session")
            continue
        return visit
    raise RuntimeError(f"Could not record the visit of device {device_id}")


async def get_session_by_device(session: AsyncSession, device_id: str) -> Optional[CustomerSession]:
    res = await session.execute(select(CustomerSession).where(CustomerSession.device_id == device_id))
    return res.scalar_one_or_none()


def session_to_dict(visit: CustomerSession) -> dict:
    return {
        "session_id": visit.id,
        "device_id": visit.device_id,
        "visit_count": visit.visit_count,
        "is_returning_customer": visit.visit_count > 1,
        "customer_name": visit.customer_name,
        "last_visit": visit.last_visit.isoformat() if visit.last_visit else None,
    }


async def get_order_by_number(session: AsyncSession, order_number: str) -> Optional[Order]:
    res = await session.execute(select(Order).where(Order.order_number == (order_number or "").strip()))
    return res.scalar_one_or_none()


async def submit_feedback(session: AsyncSession, order_number: str, rating, comments: Optional[str]) -> Feedback:
    raise_if_errors(validate_rating(rating))
    order = await get_order_by_number(session, order_number)
    if not order:
        raise HTTPException(status_code=404, detail="Order not found")

    feedback = Feedback(
        user_id=order.user_id,
        order_id=order.id,
        order_number=order.order_number,
        table_number=order.table_number,
        total_amount=order.total,
        rating=int(rating),
        comments=(comments or "").strip() or None,
    )
    session.add(feedback)
    await session.commit()
    logger.info(f"Feedback {feedback.rating}/5 for order {order.order_number}")
    return feedback


@router.get("/table/{table_id}")
async def public_table(table_id: int, session: AsyncSession = Depends(get_db_session)):
    table = await find_table(session, table_id)
    owner = await session.get(User, table.user_id)
    return {
        "id": table.id,
        "table_number": table.table_number,
        "is_room": table.is_room,
        "user_id": table.user_id,
        "restaurant_name": owner.restaurant_name if owner else None,
        "qr_code_id": table.qr_code_id,
        "qr_code_url": table.qr_code_url,
    }


@router.get("/menu/{table_id}")
async def public_menu(table_id: int, device_id: Optional[str] = Query(None),
                      session: AsyncSession = Depends(get_db_session)):
    table = await find_table(session, table_id)
    if device_id:
        await track_session(session, device_id, table)

    owner = await session.get(User, table.user_id)
    settings = await get_restaurant_settings(session, owner)
    menu_items = []
    for item, price, is_special in await get_customer_menu(session, table.user_id):
        data = menu_item_to_dict(item)
        data["effective_price"] = money(price)
        data["is_special"] = is_special
        menu_items.append(data)

    return {
        "table_id": table.id,
        "table_number": table.table_number,
        "restaurant_name": owner.restaurant_name,
        "currency": settings.currency,
        "accepting_orders": settings.allow_online_orders,
        "menu_items": menu_items,
        "total_items": len(menu_items),
    }


@router.post("/session")
async def public_track_session(payload: SessionRequest, session: AsyncSession = Depends(get_db_session)):
    if payload.table_id is None:
        raise HTTPException(status_code=400, detail="device_id and table_id are required")
    table = await find_table(session, payload.table_id)
    visit = await track_session(session, payload.device_id, table, payload.customer_name, payload.customer_phone)
    return session_to_dict(visit)


@router.get("/session/{device_id}")
async def public_get_session(device_id: str, session: AsyncSession = Depends(get_db_session)):
    visit = await get_session_by_device(session, device_id)
    if visit is None:
        return {"message": "No session found", "is_returning_customer": False}
    return session_to_dict(visit)


@router.post("/order")
async def public_place_order(payload: PublicOrderRequest, session: AsyncSession = Depends(get_db_session)):
    try:
        order = await place_order(
            session,
            payload.table_id,
            [line.model_dump() for line in payload.items],
            device_id=payload.device_id,
            customer_name=payload.customer_name,
            customer_notes=payload.customer_notes,
        )
    except TableNotFoundError:
        raise HTTPException(status_code=404, detail="Table not found")
    except OrderingClosedError as e:
        raise HTTPException(status_code=403, detail=str(e))

    if payload.device_id and payload.customer_name:
        visit = await get_session_by_device(session, payload.device_id)
        if visit is not None:
            visit.customer_name = payload.customer_name.strip()
            await session.commit()

    return {
        "success": True,
        "order_number": order.order_number,
        "order_id": order.id,
        "status": order.status,
        "total": money(order.total),
        "message": "Order placed successfully!",
    }


@router.get("/order/{order_number}")
async def public_order_status(order_number: str, session: AsyncSession = Depends(get_db_session)):
    order = await get_order_by_number(session, order_number)
    if not order:
        raise HTTPException(status_code=404, detail="Order not found")
    return order_to_dict(order)


@router.post("/feedback")
async def public_feedback(payload: FeedbackRequest, session: AsyncSession = Depends(get_db_session)):
    await submit_feedback(session, payload.order_number, payload.rating, payload.comments)
    return {"success": True, "message": "Thank you for your feedback!"}
