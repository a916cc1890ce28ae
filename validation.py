# validation.py

import re
from decimal import Decimal, InvalidOperation
from typing import Optional, List, Any

MAX_IMAGE_SIZE = 2 * 1024 * 1024
ALLOWED_IMAGE_TYPES = ("image/jpeg", "image/jpg", "image/png")
ALLOWED_IMAGE_EXTENSIONS = ("jpg", "jpeg", "png")

# largest value a Numeric(10, 2) money column holds
MAX_AMOUNT = Decimal("99999999.99")
MAX_QUANTITY = 999

EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")
TIME_RE = re.compile(r"^([01]\d|2[0-3]):[0-5]\d$")


class ValidationError(Exception):
    """Carries every message collected while checking one submission."""

    def __init__(self, errors: List[str]):
        self.errors = list(errors)
        super().__init__("; ".join(self.errors))


def raise_if_errors(errors: List[str]) -> None:
    if errors:
        raise ValidationError(errors)


def to_decimal(value: Any) -> Optional[Decimal]:
    """Parses user input into a Decimal, returning None for blanks and garbage."""
    if value is None:
        return None
    if isinstance(value, Decimal):
        return value
    text = str(value).strip()
    if not text:
        return None
    try:
        result = Decimal(text)
    except InvalidOperation:
        return None
    if not result.is_finite():
        return None
    return result


def validate_menu_item(name: Optional[str], price: Any, category: Optional[str],
                       prep_time_minutes: Optional[int] = None) -> List[str]:
    errors = []
    if not name or not name.strip():
        errors.append("Name is required")
    elif len(name.strip()) > 100:
        errors.append("Name must be at most 100 characters")
    parsed = to_decimal(price)
    if parsed is None or parsed <= 0:
        errors.append("Price must be greater than 0")
    elif parsed > MAX_AMOUNT:
        errors.append(f"Price must be at most {MAX_AMOUNT}")
    if not category or not category.strip():
        errors.append("Category is required")
    if prep_time_minutes is not None and prep_time_minutes < 0:
        errors.append("Preparation time must be 0 or greater")
    return errors


def validate_image_upload(filename: Optional[str], content_type: Optional[str], size: int) -> List[str]:
    errors = []
    if size > MAX_IMAGE_SIZE:
        errors.append("File size must be less than 2MB")
    ext = filename.rsplit('.', 1)[-1].lower() if filename and '.' in filename else ''
    if (content_type or '').lower() not in ALLOWED_IMAGE_TYPES or ext not in ALLOWED_IMAGE_EXTENSIONS:
        errors.append("Please upload an image file (JPEG, PNG)")
    return errors


def validate_registration(username: Optional[str], email: Optional[str], password: Optional[str]) -> List[str]:
    errors = []
    username = (username or '').strip()
    if not 3 <= len(username) <= 20:
        errors.append("Username must be between 3 and 20 characters")
    if not email or not EMAIL_RE.match(email.strip()) or len(email.strip()) > 100:
        errors.append("A valid email is required")
    if not password or not 6 <= len(password) <= 40:
        errors.append("Password must be between 6 and 40 characters")
    return errors


def validate_password_change(new_password: Optional[str], confirm_password: Optional[str]) -> List[str]:
    errors = []
    if not new_password or len(new_password) < 6:
        errors.append("New password must be at least 6 characters")
    if (new_password or '') != (confirm_password or ''):
        errors.append("New passwords do not match")
    return errors


def validate_table(table_number: Optional[str], location: Optional[str]) -> List[str]:
    errors = []
    number = (table_number or '').strip()
    if not number:
        errors.append("Table number is required")
    elif len(number) > 50:
        errors.append("Table number must be at most 50 characters")
    if location and len(location.strip()) > 100:
        errors.append("Location must be at most 100 characters")
    return errors


def validate_special_price(special_price: Any) -> List[str]:
    if special_price is None or str(special_price).strip() == '':
        return []
    parsed = to_decimal(special_price)
    if parsed is None or parsed < 0:
        return ["Special price must be 0 or greater"]
    if parsed > MAX_AMOUNT:
        return [f"Special price must be at most {MAX_AMOUNT}"]
    return []


def validate_quantity(quantity: Any) -> List[str]:
    if not isinstance(quantity, int) or isinstance(quantity, bool) or quantity < 1:
        return ["Quantity must be at least 1"]
    if quantity > MAX_QUANTITY:
        return [f"Quantity must be at most {MAX_QUANTITY}"]
    return []


def validate_rating(rating: Any) -> List[str]:
    try:
        value = int(rating)
    except (TypeError, ValueError):
        return ["Rating must be between 1 and 5"]
    if not 1 <= value <= 5:
        return ["Rating must be between 1 and 5"]
    return []


def validate_restaurant_settings(vat_rate: Any, service_charge: Any, opening_time: Optional[str], closing_time: Optional[str]) -> List[str]:
    errors = []
    if vat_rate is not None:
        vat = to_decimal(vat_rate)
        if vat is None or not 0 <= vat <= 100:
            errors.append("VAT rate must be between 0 and 100")
    if service_charge is not None:
        charge = to_decimal(service_charge)
        if charge is None or charge < 0:
            errors.append("Service charge must be 0 or greater")
    for label, value in (("Opening time", opening_time), ("Closing time", closing_time)):
        if value is not None and not TIME_RE.match(value):
            errors.append(f"{label} must use the HH:MM format")
    return errors


def parse_allergens(raw: Any) -> List[str]:
    """Accepts a list or a comma separated string."""
    if raw is None:
        return []
    if isinstance(raw, str):
        parts = raw.split(',')
    else:
        parts = [str(p) for p in raw]
    return [p.strip() for p in parts if p and p.strip()]
