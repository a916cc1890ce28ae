from decimal import Decimal

import pytest

from validation import (
    ValidationError, raise_if_errors, to_decimal, validate_image_upload, validate_menu_item,
    validate_password_change, validate_rating, validate_registration, validate_restaurant_settings,
    validate_quantity, validate_special_price, validate_table, parse_allergens,
)


def test_to_decimal():
    assert to_decimal("12.50") == Decimal("12.50")
    assert to_decimal(3) == Decimal("3")
    assert to_decimal(" ") is None
    assert to_decimal("abc") is None
    assert to_decimal("nan") is None


def test_menu_item_collects_every_error():
    assert validate_menu_item("Chai", "500", "Drinks") == []
    assert validate_menu_item(" ", 0, "") == [
        "Name is required", "Price must be greater than 0", "Category is required",
    ]
    assert validate_menu_item("x" * 101, "1", "Mains") == ["Name must be at most 100 characters"]
    assert validate_menu_item("Feast", "100000000", "Mains") == ["Price must be at most 99999999.99"]
    assert validate_menu_item("Chai", "500", "Drinks", prep_time_minutes=0) == []
    assert validate_menu_item("Chai", "500", "Drinks", prep_time_minutes=-1) == ["Preparation time must be 0 or greater"]


def test_image_upload():
    assert validate_image_upload("dish.PNG", "image/png", 1024) == []
    assert validate_image_upload("dish.gif", "image/gif", 1024) == ["Please upload an image file (JPEG, PNG)"]
    assert validate_image_upload("dish.jpg", "image/jpeg", 3 * 1024 * 1024) == ["File size must be less than 2MB"]


def test_registration():
    assert validate_registration("mama", "mama@example.com", "secret1") == []
    assert len(validate_registration("ab", "nope", "123")) == 3


def test_password_change():
    assert validate_password_change("abcdef", "abcdef") == []
    assert validate_password_change("abc", "abd") == [
        "New password must be at least 6 characters", "New passwords do not match",
    ]


def test_table_and_special_price():
    assert validate_table("T1", None) == []
    assert validate_table("  ", None) == ["Table number is required"]
    assert validate_special_price(None) == []
    assert validate_special_price("") == []
    assert validate_special_price("0") == []
    assert validate_special_price("-2") == ["Special price must be 0 or greater"]
    assert validate_special_price("1e9") == ["Special price must be at most 99999999.99"]


@pytest.mark.parametrize("quantity, ok", [(1, True), (999, True), (0, False), (1000, False), (10**20, False),
                                           (True, False), ("2", False), (None, False)])
def test_quantity(quantity, ok):
    assert (validate_quantity(quantity) == []) is ok


@pytest.mark.parametrize("rating, ok", [(1, True), (5, True), ("3", True), (0, False), (6, False), (None, False)])
def test_rating(rating, ok):
    assert (validate_rating(rating) == []) is ok


def test_restaurant_settings():
    assert validate_restaurant_settings(None, None, None, None) == []
    assert validate_restaurant_settings("18", "0", "08:00", "23:59") == []
    assert validate_restaurant_settings("-1", "-5", "8am", None) == [
        "VAT rate must be between 0 and 100",
        "Service charge must be 0 or greater",
        "Opening time must use the HH:MM format",
    ]


def test_parse_allergens():
    assert parse_allergens("nuts, milk,,") == ["nuts", "milk"]
    assert parse_allergens([" gluten ", ""]) == ["gluten"]
    assert parse_allergens(None) == []


def test_raise_if_errors():
    raise_if_errors([])
    with pytest.raises(ValidationError) as exc_info:
        raise_if_errors(["a", "b"])
    assert exc_info.value.errors == ["a", "b"]
    assert str(exc_info.value) == "a; b"
