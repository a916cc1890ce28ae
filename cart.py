# cart.py
"""
Customer cart and device identity.

Both live in the customer's browser as cookies: `device_id` for the device and
`cart-{table_id}` for the cart of one table. The server only reads and rewrites
them, it never stores carts.
"""

import json
import logging
import random
import string
import time
from decimal import Decimal
from typing import List, Optional

logger = logging.getLogger(__name__)

DEVICE_COOKIE_NAME = "device_id"
COOKIE_MAX_AGE = 60 * 60 * 24 * 365


def cart_cookie_name(table_id: int) -> str:
    return f"cart-{table_id}"


def generate_device_id() -> str:
    """`device-{epoch ms}-{9 random chars}`"""
    suffix = ''.join(random.choices(string.ascii_lowercase + string.digits, k=9))
    return f"device-{int(time.time() * 1000)}-{suffix}"


class CartLine:
    def __init__(self, menu_item_id: int, name: str, price: Decimal, quantity: int = 1,
                 special_instructions: str = ""):
        self.menu_item_id = int(menu_item_id)
        self.name = name
        self.price = Decimal(str(price))
        self.quantity = int(quantity)
        self.special_instructions = (special_instructions or "").strip()

    @property
    def key(self):
        return (self.menu_item_id, self.special_instructions)

    @property
    def line_total(self) -> Decimal:
        return self.price * self.quantity

    def to_dict(self) -> dict:
        return {
            "menu_item_id": self.menu_item_id,
            "name": self.name,
            "price": str(self.price),
            "quantity": self.quantity,
            "special_instructions": self.special_instructions,
        }


class Cart:
    def __init__(self, lines: Optional[List[CartLine]] = None):
        self.lines: List[CartLine] = lines or []

    def add(self, menu_item_id: int, name: str, price: Decimal, quantity: int = 1,
            special_instructions: str = "") -> None:
        """Adds an item, merging with a line of the same item and instructions."""
        if quantity <= 0:
            return
        line = CartLine(menu_item_id, name, price, quantity, special_instructions)
        for existing in self.lines:
            if existing.key == line.key:
                existing.quantity += line.quantity
                return
        self.lines.append(line)

    def update(self, index: int, quantity: int) -> None:
        """Sets a line's quantity; zero or less removes the line."""
        if not 0 <= index < len(self.lines):
            return
        if quantity <= 0:
            self.lines.pop(index)
        else:
            self.lines[index].quantity = quantity

    def remove(self, index: int) -> None:
        self.update(index, 0)

    def clear(self) -> None:
        self.lines = []

    def reprice(self, prices: dict) -> None:
        """Refreshes prices from `{menu_item_id: price}` and drops items no longer on sale."""
        self.lines = [l for l in self.lines if l.menu_item_id in prices]
        for line in self.lines:
            line.price = Decimal(str(prices[line.menu_item_id]))

    @property
    def total(self) -> Decimal:
        return sum((line.line_total for line in self.lines), Decimal("0.00"))

    @property
    def item_count(self) -> int:
        return sum(line.quantity for line in self.lines)

    def is_empty(self) -> bool:
        return not self.lines

    def dumps(self) -> str:
        return json.dumps([line.to_dict() for line in self.lines])

    @classmethod
    def loads(cls, raw: Optional[str]) -> "Cart":
        """Parses a cookie value; anything unreadable yields an empty cart."""
        if not raw:
            return cls()
        try:
            data = json.loads(raw)
            lines = [
                CartLine(d["menu_item_id"], d.get("name", ""), d["price"], d.get("quantity", 1),
                         d.get("special_instructions", ""))
                for d in data
            ]
        except (ValueError, TypeError, KeyError, ArithmeticError) as e:
            logger.warning(f"Discarding unreadable cart cookie: {e}")
            return cls()
        return cls([l for l in lines if l.quantity > 0])
