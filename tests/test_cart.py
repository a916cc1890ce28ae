import re
from decimal import Decimal

from cart import Cart, cart_cookie_name, generate_device_id


def test_device_id_format():
    assert re.fullmatch(r"device-\d{13}-[a-z0-9]{9}", generate_device_id())
    assert generate_device_id() != generate_device_id()


def test_cookie_name_is_per_table():
    assert cart_cookie_name(4) == "cart-4"


def test_add_merges_same_item_and_instructions():
    cart = Cart()
    cart.add(1, "Chai", Decimal("500"), 2)
    cart.add(1, "Chai", Decimal("500"), 1)
    cart.add(1, "Chai", Decimal("500"), 1, "no sugar")
    cart.add(2, "Mandazi", Decimal("300"), 0)

    assert [(l.menu_item_id, l.quantity, l.special_instructions) for l in cart.lines] == [
        (1, 3, ""), (1, 1, "no sugar"),
    ]
    assert cart.item_count == 4
    assert cart.total == Decimal("2000")


def test_update_and_remove():
    cart = Cart()
    cart.add(1, "Chai", "500", 1)
    cart.add(2, "Mandazi", "300", 1)
    cart.update(0, 4)
    cart.update(7, 1)
    assert cart.lines[0].quantity == 4

    cart.remove(1)
    assert len(cart.lines) == 1
    cart.clear()
    assert cart.is_empty()


def test_reprice_drops_items_off_the_menu():
    cart = Cart()
    cart.add(1, "Chai", "500", 2)
    cart.add(2, "Mandazi", "300", 1)
    cart.reprice({1: Decimal("450.00")})
    assert [l.menu_item_id for l in cart.lines] == [1]
    assert cart.total == Decimal("900.00")


def test_cookie_round_trip_keeps_lines():
    cart = Cart()
    cart.add(1, "Chai", "500.00", 2, "hot")
    restored = Cart.loads(cart.dumps())
    assert restored.lines[0].to_dict() == {
        "menu_item_id": 1, "name": "Chai", "price": "500.00", "quantity": 2, "special_instructions": "hot",
    }


def test_unreadable_cookie_gives_empty_cart():
    assert Cart.loads(None).is_empty()
    assert Cart.loads("not json").is_empty()
    assert Cart.loads('[{"name": "no id"}]').is_empty()
    assert Cart.loads('[{"menu_item_id": 1, "price": "x"}]').is_empty()
    assert Cart.loads('[{"menu_item_id": 1, "price": "5", "quantity": 0}]').is_empty()
