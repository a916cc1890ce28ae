# schemas.py
"""
Request bodies of the JSON API.

Fields are deliberately loose (mostly optional strings and numbers) so that
the messages of validation.py are the ones a client sees.
"""

from datetime import date
from typing import Optional, List, Union
from pydantic import BaseModel, Field


Number = Union[float, int, str]


class LoginRequest(BaseModel):
    username: str
    password: str


class RegisterRequest(BaseModel):
    username: Optional[str] = None
    email: Optional[str] = None
    password: Optional[str] = None
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    restaurant_name: Optional[str] = None
    phone: Optional[str] = None


class MenuItemRequest(BaseModel):
    name: Optional[str] = None
    description: Optional[str] = None
    price: Optional[Number] = None
    category: Optional[str] = None
    available: bool = True
    allergens: Union[List[str], str, None] = None
    prep_time_minutes: Optional[int] = Field(None, ge=0)
    featured: bool = False


class DailyMenuRequest(BaseModel):
    menu_item_id: Optional[int] = None
    menu_date: Optional[date] = None
    special_price: Optional[Number] = None
    is_available: bool = True


class DailyMenuUpdate(BaseModel):
    special_price: Optional[Number] = None
    is_available: Optional[bool] = None


class TableRequest(BaseModel):
    table_number: Optional[str] = None
    is_room: bool = False
    location: Optional[str] = None
    active: Optional[bool] = None


class OrderUpdate(BaseModel):
    status: Optional[str] = None
    payment_status: Optional[str] = None


class PublicOrderItem(BaseModel):
    menu_item_id: int
    quantity: int = 1
    special_instructions: Optional[str] = None


class PublicOrderRequest(BaseModel):
    table_id: int
    device_id: Optional[str] = None
    customer_name: Optional[str] = None
    customer_notes: Optional[str] = None
    items: List[PublicOrderItem] = []


class SessionRequest(BaseModel):
    device_id: str
    table_id: Optional[int] = None
    customer_name: Optional[str] = None
    customer_phone: Optional[str] = None


class FeedbackRequest(BaseModel):
    order_number: str
    rating: Optional[int] = None
    comments: Optional[str] = None


class ProfileUpdate(BaseModel):
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    restaurant_name: Optional[str] = None
    address: Optional[str] = None


class PasswordChange(BaseModel):
    current_password: str
    new_password: str
    confirm_password: str


class RestaurantSettingsUpdate(BaseModel):
    currency: Optional[str] = None
    timezone: Optional[str] = None
    opening_time: Optional[str] = None
    closing_time: Optional[str] = None
    service_charge: Optional[Number] = None
    vat_rate: Optional[Number] = None
    receipt_footer: Optional[str] = None
    allow_online_orders: Optional[bool] = None
    auto_accept_orders: Optional[bool] = None


class PreferencesUpdate(BaseModel):
    language: Optional[str] = None
    date_format: Optional[str] = None
    time_format: Optional[str] = None
    email_notifications: Optional[bool] = None
    sms_notifications: Optional[bool] = None
    order_notifications: Optional[bool] = None
    feedback_notifications: Optional[bool] = None
