# auth_utils.py

import os
from datetime import datetime, timedelta, timezone
from typing import Optional
from fastapi import Depends, HTTPException, status, Request
from fastapi.security import OAuth2PasswordBearer
from passlib.context import CryptContext
from jose import JWTError, jwt
from sqlalchemy.ext.asyncio import AsyncSession
from models import User
from dependencies import get_db_session

# --- CONFIGURATION ---
# Generate a production key with `openssl rand -hex 32`
SECRET_KEY = os.environ.get("SECRET_KEY", "smartmenu_dev_secret_change_me")
ALGORITHM = "HS256"
ACCESS_TOKEN_EXPIRE_MINUTES = int(os.environ.get("ACCESS_TOKEN_EXPIRE_MINUTES", 60 * 12))
TOKEN_COOKIE_NAME = "access_token"

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")

# Only used by the OpenAPI docs; the cookie and the header are read by hand below
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="api/auth/login", auto_error=False)

# --- PASSWORD HASHING ---

def verify_password(plain_password: str, hashed_password: str) -> bool:
    return pwd_context.verify(plain_password, hashed_password)

def get_password_hash(password: str) -> str:
    return pwd_context.hash(password)

# --- JWT ---

def create_access_token(data: dict, expires_delta: Optional[timedelta] = None) -> str:
    """Builds a signed JWT carrying `data` plus an expiry claim."""
    to_encode = data.copy()
    if expires_delta:
        expire = datetime.now(timezone.utc) + expires_delta
    else:
        expire = datetime.now(timezone.utc) + timedelta(minutes=ACCESS_TOKEN_EXPIRE_MINUTES)

    to_encode.update({"exp": expire})
    return jwt.encode(to_encode, SECRET_KEY, algorithm=ALGORITHM)

def decode_user_id(token: str) -> Optional[int]:
    """Returns the user id stored in `sub`, or None for a bad or expired token."""
    try:
        payload = jwt.decode(token, SECRET_KEY, algorithms=[ALGORITHM])
    except JWTError:
        return None
    sub = payload.get("sub")
    if sub is None:
        return None
    try:
        return int(sub)
    except (TypeError, ValueError):
        return None

def token_from_request(request: Request) -> Optional[str]:
    """The bearer header wins over the cookie."""
    header = request.headers.get("Authorization", "")
    scheme, _, value = header.partition(" ")
    if scheme.lower() == "bearer" and value.strip():
        return value.strip()
    return request.cookies.get(TOKEN_COOKIE_NAME)

# --- DEPENDENCIES ---

async def get_current_user(
    request: Request,
    session: AsyncSession = Depends(get_db_session),
    _bearer: Optional[str] = Depends(oauth2_scheme)
) -> User:
    """
    Resolves the signed-in restaurant owner from the `Authorization: Bearer`
    header or the `access_token` cookie. Used as Depends(get_current_user)
    on every admin page and private API route.
    """
    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Authentication required",
        headers={"WWW-Authenticate": "Bearer"},
    )

    token = token_from_request(request)
    if not token:
        raise credentials_exception

    user_id = decode_user_id(token)
    if user_id is None:
        raise credentials_exception

    user = await session.get(User, user_id)
    if not user or not user.active:
        raise credentials_exception

    return user
