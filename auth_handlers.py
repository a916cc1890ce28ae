# auth_handlers.py

import html
import logging
from datetime import timedelta
from typing import Optional

from fastapi import APIRouter, Depends, Form, Request, HTTPException, status
from fastapi.responses import HTMLResponse, RedirectResponse
from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession

from models import User, RestaurantSettings, UserRole
from dependencies import get_db_session
from auth_utils import (
    get_password_hash, verify_password, create_access_token, get_current_user,
    token_from_request, decode_user_id, ACCESS_TOKEN_EXPIRE_MINUTES, TOKEN_COOKIE_NAME
)
from schemas import LoginRequest, RegisterRequest
from templates import render_auth_page, LOGIN_BODY, REGISTER_BODY
from translations import t, get_language
from validation import ValidationError, validate_registration, raise_if_errors

router = APIRouter()
logger = logging.getLogger(__name__)


def user_to_dict(user: User) -> dict:
    return {
        "id": user.id,
        "username": user.username,
        "email": user.email,
        "first_name": user.first_name,
        "last_name": user.last_name,
        "restaurant_name": user.restaurant_name,
        "phone": user.phone,
        "address": user.address,
        "role": user.role,
        "active": user.active,
    }


async def register_user(session: AsyncSession, username: Optional[str], email: Optional[str],
                        password: Optional[str], **profile) -> User:
    """Creates an owner account with default restaurant settings."""
    raise_if_errors(validate_registration(username, email, password))
    username = username.strip()
    email = email.strip().lower()

    taken = await session.execute(select(func.count(User.id)).where(User.username == username))
    if taken.scalar_one():
        raise ValidationError(["Error: Username is already taken!"])
    in_use = await session.execute(select(func.count(User.id)).where(func.lower(User.email) == email))
    if in_use.scalar_one():
        raise ValidationError(["Error: Email is already in use!"])

    user = User(
        username=username,
        email=email,
        password_hash=get_password_hash(password),
        role=UserRole.RESTAURANT_OWNER.value,
        **{k: (v.strip() or None) for k, v in profile.items() if isinstance(v, str)}
    )
    session.add(user)
    await session.flush()
    session.add(RestaurantSettings(user_id=user.id))
    await session.commit()
    await session.refresh(user)
    logger.info(f"Registered restaurant owner '{user.username}' (#{user.id})")
    return user


async def authenticate(session: AsyncSession, username: str, password: str) -> Optional[User]:
    res = await session.execute(select(User).where(User.username == (username or "").strip()))
    user = res.scalar_one_or_none()
    if not user or not user.active or not verify_password(password or "", user.password_hash):
        return None
    return user


def issue_token(user: User) -> str:
    return create_access_token(
        data={"sub": str(user.id), "username": user.username, "role": user.role},
        expires_delta=timedelta(minutes=ACCESS_TOKEN_EXPIRE_MINUTES)
    )


# --- JSON API ---

@router.post("/api/auth/register")
async def api_register(payload: RegisterRequest, session: AsyncSession = Depends(get_db_session)):
    await register_user(
        session, payload.username, payload.email, payload.password,
        first_name=payload.first_name, last_name=payload.last_name,
        restaurant_name=payload.restaurant_name, phone=payload.phone,
    )
    return {"message": "User registered successfully!"}


@router.post("/api/auth/login")
async def api_login(payload: LoginRequest, session: AsyncSession = Depends(get_db_session)):
    user = await authenticate(session, payload.username, payload.password)
    if not user:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid username or password")
    return {
        "token": issue_token(user),
        "type": "Bearer",
        "id": user.id,
        "username": user.username,
        "email": user.email,
        "role": user.role,
    }


@router.get("/api/auth/me")
async def api_me(user: User = Depends(get_current_user)):
    return user_to_dict(user)


# --- HTML pages ---

def login_page(lang: str, username: str = "", error: str = "", success: str = "", status_code: int = 200) -> HTMLResponse:
    body = LOGIN_BODY.format(
        username=html.escape(username),
        username_label=t("username", lang),
        password_label=t("password", lang),
        login_label=t("login", lang),
        register_label=t("register", lang),
    )
    return render_auth_page(t("login", lang), body, lang, error=html.escape(error), success=success,
                            current_url="/login", status_code=status_code)


@router.get("/", include_in_schema=False)
async def root():
    return RedirectResponse(url="/admin", status_code=303)


@router.get("/login", response_class=HTMLResponse)
async def login_form(request: Request):
    token = token_from_request(request)
    if token and decode_user_id(token) is not None:
        return RedirectResponse(url="/admin", status_code=303)
    registered = request.query_params.get("registered")
    return login_page(get_language(request), success="Account created, please sign in." if registered else "")


@router.post("/login")
async def login_submit(
    request: Request,
    username: str = Form(...),
    password: str = Form(...),
    session: AsyncSession = Depends(get_db_session)
):
    user = await authenticate(session, username, password)
    if not user:
        return login_page(get_language(request), username=username,
                          error="Invalid username or password", status_code=401)

    response = RedirectResponse(url="/admin", status_code=303)
    response.set_cookie(
        key=TOKEN_COOKIE_NAME,
        value=issue_token(user),
        httponly=True,
        max_age=ACCESS_TOKEN_EXPIRE_MINUTES * 60,
        samesite="lax"
    )
    return response


def register_page(lang: str, values: dict, errors=None, status_code: int = 200) -> HTMLResponse:
    body = REGISTER_BODY.format(
        username=html.escape(values.get("username", "")),
        email=html.escape(values.get("email", "")),
        restaurant_name=html.escape(values.get("restaurant_name", "")),
        username_label=t("username", lang),
        email_label=t("email", lang),
        restaurant_label=t("restaurant_name", lang),
        password_label=t("password", lang),
        register_label=t("register", lang),
        login_label=t("login", lang),
    )
    error = "<br>".join(html.escape(e) for e in (errors or []))
    return render_auth_page(t("register", lang), body, lang, error=error,
                            current_url="/register", status_code=status_code)


@router.get("/register", response_class=HTMLResponse)
async def register_form(request: Request):
    return register_page(get_language(request), {})


@router.post("/register")
async def register_submit(
    request: Request,
    username: str = Form(""),
    email: str = Form(""),
    password: str = Form(""),
    restaurant_name: str = Form(""),
    session: AsyncSession = Depends(get_db_session)
):
    try:
        await register_user(session, username, email, password, restaurant_name=restaurant_name)
    except ValidationError as e:
        values = {"username": username, "email": email, "restaurant_name": restaurant_name}
        return register_page(get_language(request), values, e.errors, status_code=400)
    return RedirectResponse(url="/login?registered=1", status_code=303)


@router.get("/logout")
async def logout():
    response = RedirectResponse(url="/login", status_code=303)
    response.delete_cookie(TOKEN_COOKIE_NAME)
    return response
