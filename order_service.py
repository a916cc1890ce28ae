# order_service.py

import logging
import random
from datetime import datetime
from decimal import Decimal
from typing import List, Optional

from sqlalchemy import select, func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from models import Order, OrderItem, OrderStatus, Table, Feedback, User, PAYMENT_STATUSES
from menu_service import get_customer_menu, money
from dependencies import get_restaurant_settings
from validation import ValidationError, validate_quantity, MAX_AMOUNT
from websocket_manager import manager

logger = logging.getLogger(__name__)

ORDER_NUMBER_ATTEMPTS = 5


class TableNotFoundError(ValueError):
    pass


class OrderingClosedError(ValueError):
    pass


def generate_order_number(now: Optional[datetime] = None) -> str:
    """"ORD" + yyyyMMddHHmmss + 3 random digits"""
    now = now or datetime.now()
    return f"ORD{now.strftime('%Y%m%d%H%M%S')}{random.randint(0, 999):03d}"


def order_to_dict(order: Order) -> dict:
    return {
        "id": order.id,
        "order_number": order.order_number,
        "table_id": order.table_id,
        "table_number": order.table_number,
        "device_id": order.device_id,
        "customer_name": order.customer_name,
        "status": order.status,
        "payment_status": order.payment_status,
        "items": [
            {
                "menu_item_id": i.menu_item_id,
                "menu_item_name": i.menu_item_name,
                "price": money(i.price),
                "quantity": i.quantity,
                "special_instructions": i.special_instructions,
                "line_total": money(i.line_total),
            }
            for i in order.items
        ],
        "subtotal": money(order.subtotal),
        "tax": money(order.tax),
        "total": money(order.total),
        "customer_notes": order.customer_notes,
        "created_at": order.created_at.isoformat() if order.created_at else None,
        "updated_at": order.updated_at.isoformat() if order.updated_at else None,
        "completed_at": order.completed_at.isoformat() if order.completed_at else None,
    }


def feedback_to_dict(fb: Feedback) -> dict:
    return {
        "id": fb.id,
        "order_id": fb.order_id,
        "order_number": fb.order_number,
        "table_number": fb.table_number,
        "total_amount": money(fb.total_amount),
        "rating": fb.rating,
        "comments": fb.comments,
        "created_at": fb.created_at.isoformat() if fb.created_at else None,
    }


async def get_active_table(session: AsyncSession, table_id: int) -> Table:
    table = await session.get(Table, table_id)
    if not table or not table.active:
        raise TableNotFoundError("Table not found")
    return table


async def unique_order_number(session: AsyncSession) -> str:
    for _ in range(ORDER_NUMBER_ATTEMPTS):
        number = generate_order_number()
        exists = await session.execute(select(func.count(Order.id)).where(Order.order_number == number))
        if not exists.scalar_one():
            return number
    raise RuntimeError("Could not allocate a unique order number")


async def place_order(
    session: AsyncSession,
    table_id: int,
    lines: List[dict],
    device_id: Optional[str] = None,
    customer_name: Optional[str] = None,
    customer_notes: Optional[str] = None,
) -> Order:
    """
    Creates an order for a table from `lines` of
    {menu_item_id, quantity, special_instructions}.

    Prices come from today's menu, never from the client.
    """
    table = await get_active_table(session, table_id)

    if not lines:
        raise ValidationError(["Order must contain at least one item"])

    owner = await session.get(User, table.user_id)
    settings = await get_restaurant_settings(session, owner)
    if not settings.allow_online_orders:
        raise OrderingClosedError("Online ordering is currently disabled")

    prices = {item.id: (item, price) for item, price, _ in await get_customer_menu(session, table.user_id)}

    errors = []
    item_rows = []
    subtotal = Decimal("0.00")
    for line in lines:
        menu_item_id = line.get("menu_item_id")
        qty = line.get("quantity", 1)
        if menu_item_id not in prices:
            errors.append(f"Menu item {menu_item_id} is not available")
            continue
        qty_errors = validate_quantity(qty)
        if qty_errors:
            errors.extend(qty_errors)
            continue
        item, price = prices[menu_item_id]
        subtotal += price * qty
        item_rows.append({
            "menu_item_id": item.id,
            "menu_item_name": item.name,
            "price": price,
            "quantity": qty,
            "special_instructions": (line.get("special_instructions") or "").strip() or None,
        })
    if not errors and subtotal > MAX_AMOUNT:
        errors.append("Order total is too large")
    if errors:
        raise ValidationError(errors)

    # a rollback expires loaded rows, so the retry loop works from plain values
    status = OrderStatus.CONFIRMED if settings.auto_accept_orders else OrderStatus.PENDING
    fields = dict(
        user_id=table.user_id,
        table_id=table.id,
        table_number=table.table_number,
        device_id=device_id,
        customer_name=(customer_name or "").strip() or None,
        customer_notes=(customer_notes or "").strip() or None,
        status=status.value,
        subtotal=subtotal,
        tax=Decimal("0.00"),
        total=subtotal,
    )

    for _ in range(ORDER_NUMBER_ATTEMPTS):
        number = await unique_order_number(session)
        order = Order(order_number=number, items=[OrderItem(**row) for row in item_rows], **fields)
        session.add(order)
        try:
            await session.commit()
        except IntegrityError:
            # another request took the same number between the check and the insert
            await session.rollback()
            logger.warning(f"Order number {number} was taken, retrying")
            continue
        break
    else:
        raise RuntimeError("Could not allocate a unique order number")
    await session.refresh(order, ['items'])

    logger.info(f"New order {order.order_number} for table {order.table_number}, total {order.total}")
    await manager.broadcast_staff({
        "type": "new_order",
        "user_id": order.user_id,
        "order_id": order.id,
        "order_number": order.order_number,
        "table_number": order.table_number,
        "total": money(order.total),
    })
    return order


async def change_order(session: AsyncSession, order: Order, status: Optional[str] = None,
                       payment_status: Optional[str] = None) -> Order:
    """Applies a status and/or payment change. Unknown values raise ValidationError."""
    new_status = None
    if status is not None:
        new_status = OrderStatus.parse(status)
        if new_status is None:
            raise ValidationError([f"Invalid status: {status}"])
    if payment_status is not None and payment_status not in PAYMENT_STATUSES:
        raise ValidationError([f"Invalid payment status: {payment_status}"])

    status_changed = new_status is not None and new_status.value != order.status
    if new_status is not None:
        order.status = new_status.value
        if new_status == OrderStatus.COMPLETED and order.completed_at is None:
            order.completed_at = datetime.now()
    if payment_status is not None:
        order.payment_status = payment_status

    await session.commit()

    if status_changed and order.table_id:
        await manager.broadcast_table(order.table_id, {
            "type": "order_status",
            "order_number": order.order_number,
            "status": order.status,
        })
    return order
