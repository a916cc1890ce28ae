# admin_settings.py

import html
import logging
from decimal import Decimal
from typing import Optional
from urllib.parse import quote_plus as url_quote_plus

from fastapi import APIRouter, Depends, Form, Request, Query
from fastapi.responses import HTMLResponse, RedirectResponse
from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession

from models import RestaurantSettings, User
from dependencies import get_db_session, get_restaurant_settings
from auth_utils import get_current_user, verify_password, get_password_hash
from auth_handlers import user_to_dict
from menu_service import money
from schemas import ProfileUpdate, PasswordChange, RestaurantSettingsUpdate, PreferencesUpdate
from templates import render_admin_page, ADMIN_SETTINGS_BODY
from translations import t, get_language, LANGUAGES, LANGUAGE_COOKIE_NAME
from validation import (
    ValidationError, raise_if_errors, to_decimal, validate_password_change,
    validate_restaurant_settings, EMAIL_RE
)

router = APIRouter()
logger = logging.getLogger(__name__)

DATE_FORMATS = ("DD/MM/YYYY", "MM/DD/YYYY", "YYYY-MM-DD")
TIME_FORMATS = ("24h", "12h")
PROFILE_FIELDS = ("first_name", "last_name", "phone", "restaurant_name", "address")
NOTIFICATION_FIELDS = ("email_notifications", "sms_notifications", "order_notifications", "feedback_notifications")


def restaurant_to_dict(s: RestaurantSettings) -> dict:
    return {
        "currency": s.currency,
        "timezone": s.timezone,
        "opening_time": s.opening_time,
        "closing_time": s.closing_time,
        "service_charge": money(s.service_charge),
        "vat_rate": money(s.vat_rate),
        "receipt_footer": s.receipt_footer,
        "allow_online_orders": s.allow_online_orders,
        "auto_accept_orders": s.auto_accept_orders,
    }


def preferences_to_dict(s: RestaurantSettings) -> dict:
    data = {"language": s.language, "date_format": s.date_format, "time_format": s.time_format}
    data.update({field: getattr(s, field) for field in NOTIFICATION_FIELDS})
    return data


async def update_profile(session: AsyncSession, user: User, payload: ProfileUpdate) -> User:
    if payload.email is not None:
        email = payload.email.strip().lower()
        if not EMAIL_RE.match(email):
            raise ValidationError(["Please enter a valid email"])
        in_use = await session.execute(
            select(func.count(User.id)).where(func.lower(User.email) == email, User.id != user.id)
        )
        if in_use.scalar_one():
            raise ValidationError(["Error: Email is already in use!"])
        user.email = email
    for field in PROFILE_FIELDS:
        value = getattr(payload, field)
        if value is not None:
            setattr(user, field, value.strip() or None)
    await session.commit()
    return user


async def change_password(session: AsyncSession, user: User, payload: PasswordChange) -> None:
    if not verify_password(payload.current_password, user.password_hash):
        raise ValidationError(["Current password is incorrect"])
    raise_if_errors(validate_password_change(payload.new_password, payload.confirm_password))
    user.password_hash = get_password_hash(payload.new_password)
    await session.commit()
    logger.info(f"Password changed for user #{user.id}")


async def update_restaurant(session: AsyncSession, user: User, payload: RestaurantSettingsUpdate) -> RestaurantSettings:
    raise_if_errors(validate_restaurant_settings(
        payload.vat_rate, payload.service_charge, payload.opening_time, payload.closing_time
    ))
    settings = await get_restaurant_settings(session, user)
    for field in ("currency", "timezone", "opening_time", "closing_time", "receipt_footer"):
        value = getattr(payload, field)
        if value is not None:
            setattr(settings, field, value.strip())
    if payload.vat_rate is not None:
        settings.vat_rate = to_decimal(payload.vat_rate).quantize(Decimal("0.01"))
    if payload.service_charge is not None:
        settings.service_charge = to_decimal(payload.service_charge).quantize(Decimal("0.01"))
    if payload.allow_online_orders is not None:
        settings.allow_online_orders = payload.allow_online_orders
    if payload.auto_accept_orders is not None:
        settings.auto_accept_orders = payload.auto_accept_orders
    await session.commit()
    logger.info(f"Restaurant settings updated for user #{user.id}")
    return settings


async def update_preferences(session: AsyncSession, user: User, payload: PreferencesUpdate) -> RestaurantSettings:
    errors = []
    if payload.language is not None and payload.language not in LANGUAGES:
        errors.append(f"Unsupported language: {payload.language}")
    if payload.date_format is not None and payload.date_format not in DATE_FORMATS:
        errors.append(f"Unsupported date format: {payload.date_format}")
    if payload.time_format is not None and payload.time_format not in TIME_FORMATS:
        errors.append(f"Unsupported time format: {payload.time_format}")
    raise_if_errors(errors)

    settings = await get_restaurant_settings(session, user)
    for field in ("language", "date_format", "time_format") + NOTIFICATION_FIELDS:
        value = getattr(payload, field)
        if value is not None:
            setattr(settings, field, value)
    await session.commit()
    return settings


# --- JSON API ---

@router.get("/api/settings")
async def api_get_settings(session: AsyncSession = Depends(get_db_session), user: User = Depends(get_current_user)):
    settings = await get_restaurant_settings(session, user)
    return {
        "profile": user_to_dict(user),
        "restaurant": restaurant_to_dict(settings),
        "preferences": preferences_to_dict(settings),
    }


@router.put("/api/settings/profile")
async def api_update_profile(payload: ProfileUpdate, session: AsyncSession = Depends(get_db_session),
                             user: User = Depends(get_current_user)):
    return user_to_dict(await update_profile(session, user, payload))


@router.put("/api/settings/password")
async def api_change_password(payload: PasswordChange, session: AsyncSession = Depends(get_db_session),
                              user: User = Depends(get_current_user)):
    await change_password(session, user, payload)
    return {"message": "Password changed successfully"}


@router.put("/api/settings/restaurant")
async def api_update_restaurant(payload: RestaurantSettingsUpdate, session: AsyncSession = Depends(get_db_session),
                                user: User = Depends(get_current_user)):
    return restaurant_to_dict(await update_restaurant(session, user, payload))


@router.put("/api/settings/preferences")
async def api_update_preferences(payload: PreferencesUpdate, session: AsyncSession = Depends(get_db_session),
                                 user: User = Depends(get_current_user)):
    return preferences_to_dict(await update_preferences(session, user, payload))


# --- HTML pages ---

def options(values, selected: str, labels: Optional[dict] = None) -> str:
    return "".join(
        f'<option value="{v}" {"selected" if v == selected else ""}>{html.escape((labels or {}).get(v, v))}</option>'
        for v in values
    )


def checked(flag: bool) -> str:
    return "checked" if flag else ""


def back_to_settings(saved: str = "", error: str = "") -> RedirectResponse:
    url = "/admin/settings"
    if error:
        url += f"?error={url_quote_plus(error)}"
    elif saved:
        url += f"?saved={url_quote_plus(saved)}"
    return RedirectResponse(url=url, status_code=303)


@router.get("/admin/settings", response_class=HTMLResponse)
async def admin_settings(
    request: Request,
    saved: Optional[str] = Query(None),
    error: Optional[str] = Query(None),
    session: AsyncSession = Depends(get_db_session),
    user: User = Depends(get_current_user)
):
    lang = get_language(request)
    settings = await get_restaurant_settings(session, user)

    messages = ""
    if error:
        messages = f'<div class="alert error">{html.escape(error)}</div>'
    elif saved:
        messages = f'<div class="alert success">{html.escape(saved)}</div>'

    body = ADMIN_SETTINGS_BODY.format(
        messages=messages,
        first_name=html.escape(user.first_name or ""),
        last_name=html.escape(user.last_name or ""),
        email=html.escape(user.email),
        phone=html.escape(user.phone or ""),
        restaurant_name=html.escape(user.restaurant_name or ""),
        address=html.escape(user.address or ""),
        currency=html.escape(settings.currency or ""),
        timezone=html.escape(settings.timezone or ""),
        opening_time=html.escape(settings.opening_time or ""),
        closing_time=html.escape(settings.closing_time or ""),
        service_charge=f"{settings.service_charge:.2f}",
        vat_rate=f"{settings.vat_rate:.2f}",
        receipt_footer=html.escape(settings.receipt_footer or ""),
        allow_online_orders_checked=checked(settings.allow_online_orders),
        auto_accept_orders_checked=checked(settings.auto_accept_orders),
        email_notifications_checked=checked(settings.email_notifications),
        sms_notifications_checked=checked(settings.sms_notifications),
        order_notifications_checked=checked(settings.order_notifications),
        feedback_notifications_checked=checked(settings.feedback_notifications),
        language_options=options(LANGUAGES.keys(), settings.language, LANGUAGES),
        date_format_options=options(DATE_FORMATS, settings.date_format),
        time_format_options=options(TIME_FORMATS, settings.time_format),
        email_label=t("email", lang),
        restaurant_label=t("restaurant_name", lang),
        save_label=t("save", lang),
        language_label=t("language", lang),
    )
    return render_admin_page(t("settings", lang), body, "settings", user, lang, str(request.url.path))


@router.post("/admin/settings/profile")
async def admin_save_profile(
    first_name: str = Form(""),
    last_name: str = Form(""),
    email: str = Form(""),
    phone: str = Form(""),
    restaurant_name: str = Form(""),
    address: str = Form(""),
    session: AsyncSession = Depends(get_db_session),
    user: User = Depends(get_current_user)
):
    payload = ProfileUpdate(first_name=first_name, last_name=last_name, email=email, phone=phone,
                            restaurant_name=restaurant_name, address=address)
    try:
        await update_profile(session, user, payload)
    except ValidationError as e:
        return back_to_settings(error="; ".join(e.errors))
    return back_to_settings(saved="Profile saved")


@router.post("/admin/settings/password")
async def admin_change_password(
    current_password: str = Form(""),
    new_password: str = Form(""),
    confirm_password: str = Form(""),
    session: AsyncSession = Depends(get_db_session),
    user: User = Depends(get_current_user)
):
    payload = PasswordChange(current_password=current_password, new_password=new_password,
                             confirm_password=confirm_password)
    try:
        await change_password(session, user, payload)
    except ValidationError as e:
        return back_to_settings(error="; ".join(e.errors))
    return back_to_settings(saved="Password changed")


@router.post("/admin/settings/restaurant")
async def admin_save_restaurant(
    currency: str = Form(""),
    timezone: str = Form(""),
    opening_time: str = Form(""),
    closing_time: str = Form(""),
    service_charge: str = Form("0"),
    vat_rate: str = Form("0"),
    receipt_footer: str = Form(""),
    allow_online_orders: bool = Form(False),
    auto_accept_orders: bool = Form(False),
    session: AsyncSession = Depends(get_db_session),
    user: User = Depends(get_current_user)
):
    payload = RestaurantSettingsUpdate(
        currency=currency or None, timezone=timezone or None,
        opening_time=opening_time or None, closing_time=closing_time or None,
        service_charge=service_charge or "0", vat_rate=vat_rate or "0", receipt_footer=receipt_footer,
        allow_online_orders=allow_online_orders, auto_accept_orders=auto_accept_orders,
    )
    try:
        await update_restaurant(session, user, payload)
    except ValidationError as e:
        return back_to_settings(error="; ".join(e.errors))
    return back_to_settings(saved="Restaurant settings saved")


@router.post("/admin/settings/preferences")
async def admin_save_preferences(
    language: str = Form("en"),
    date_format: str = Form(DATE_FORMATS[0]),
    time_format: str = Form(TIME_FORMATS[0]),
    email_notifications: bool = Form(False),
    sms_notifications: bool = Form(False),
    order_notifications: bool = Form(False),
    feedback_notifications: bool = Form(False),
    session: AsyncSession = Depends(get_db_session),
    user: User = Depends(get_current_user)
):
    payload = PreferencesUpdate(
        language=language, date_format=date_format, time_format=time_format,
        email_notifications=email_notifications, sms_notifications=sms_notifications,
        order_notifications=order_notifications, feedback_notifications=feedback_notifications,
    )
    try:
        settings = await update_preferences(session, user, payload)
    except ValidationError as e:
        return back_to_settings(error="; ".join(e.errors))
    response = back_to_settings(saved="Preferences saved")
    response.set_cookie(key=LANGUAGE_COOKIE_NAME, value=settings.language, max_age=60 * 60 * 24 * 365, samesite="lax")
    return response
