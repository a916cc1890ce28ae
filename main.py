# main.py

import logging
import os
import sys
from contextlib import asynccontextmanager

from dotenv import load_dotenv

load_dotenv()

# --- FastAPI & Uvicorn ---
from fastapi import FastAPI, Request, Query, WebSocket, WebSocketDisconnect, status
from fastapi.exceptions import RequestValidationError
from fastapi.exception_handlers import http_exception_handler
from fastapi.responses import JSONResponse, RedirectResponse
from fastapi.staticfiles import StaticFiles
from starlette.exceptions import HTTPException as StarletteHTTPException
import uvicorn

# --- Local imports ---
from models import create_db_tables, async_session_maker, User, Table
from auth_utils import decode_user_id, TOKEN_COOKIE_NAME
from translations import LANGUAGES, LANGUAGE_COOKIE_NAME
from validation import ValidationError
from websocket_manager import manager

from auth_handlers import router as auth_router
from admin_dashboard import router as dashboard_router
from admin_menu_items import router as menu_items_router, UPLOAD_DIR
from admin_daily_menu import router as daily_menu_router
from admin_orders import router as orders_router
from admin_feedback import router as feedback_router
from admin_tables import router as tables_router
from admin_reports import router as reports_router
from admin_settings import router as settings_router
from public_api import router as public_router
from customer_menu import router as customer_router

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("Starting SmartMenu...")
    os.makedirs(UPLOAD_DIR, exist_ok=True)
    await create_db_tables()
    yield
    logger.info("Stopping SmartMenu...")


app = FastAPI(title="SmartMenu", lifespan=lifespan)
os.makedirs("static", exist_ok=True)
app.mount("/static", StaticFiles(directory="static"), name="static")

app.include_router(auth_router)
app.include_router(dashboard_router)
app.include_router(menu_items_router)
app.include_router(daily_menu_router)
app.include_router(orders_router)
app.include_router(feedback_router)
app.include_router(tables_router)
app.include_router(reports_router)
app.include_router(settings_router)
app.include_router(public_router)
app.include_router(customer_router)


# --- Error handling ---

@app.exception_handler(ValidationError)
async def validation_error_handler(request: Request, exc: ValidationError):
    return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content={"errors": exc.errors})


@app.exception_handler(RequestValidationError)
async def request_validation_error_handler(request: Request, exc: RequestValidationError):
    errors = []
    for err in exc.errors():
        field = ".".join(str(p) for p in err.get("loc", ()) if p not in ("body", "query", "path", "form"))
        errors.append(f"{field}: {err.get('msg')}" if field else err.get("msg"))
    return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content={"errors": errors})


@app.exception_handler(StarletteHTTPException)
async def auth_redirect_handler(request: Request, exc: StarletteHTTPException):
    """Admin pages send anonymous visitors to the login form instead of a JSON 401."""
    if exc.status_code == status.HTTP_401_UNAUTHORIZED and request.url.path.startswith("/admin"):
        response = RedirectResponse(url="/login", status_code=303)
        response.delete_cookie(TOKEN_COOKIE_NAME)
        return response
    return await http_exception_handler(request, exc)


# --- Service endpoints ---

@app.get("/api/health")
async def health():
    return {"status": "UP", "service": "SmartMenu"}


@app.get("/language/{code}")
async def switch_language(code: str, next: str = Query("/admin")):
    # only local paths, never another host
    target = next if next.startswith("/") and not next.startswith("//") else "/admin"
    response = RedirectResponse(url=target, status_code=303)
    if code in LANGUAGES:
        response.set_cookie(LANGUAGE_COOKIE_NAME, code, max_age=60 * 60 * 24 * 365, samesite="lax")
    return response


# --- WebSockets ---

@app.websocket("/ws/staff")
async def staff_websocket(websocket: WebSocket):
    token = websocket.cookies.get(TOKEN_COOKIE_NAME) or websocket.query_params.get("token")
    user_id = decode_user_id(token) if token else None
    if user_id is not None:
        async with async_session_maker() as session:
            user = await session.get(User, user_id)
        if not user or not user.active:
            user_id = None
    if user_id is None:
        await websocket.close(code=status.WS_1008_POLICY_VIOLATION)
        return

    await manager.connect_staff(websocket, user_id)
    try:
        while True:
            await websocket.receive_text()
    except WebSocketDisconnect:
        manager.disconnect_staff(websocket, user_id)


@app.websocket("/ws/table/{table_id}")
async def table_websocket(websocket: WebSocket, table_id: int):
    async with async_session_maker() as session:
        table = await session.get(Table, table_id)
    if not table or not table.active:
        await websocket.close(code=status.WS_1008_POLICY_VIOLATION)
        return

    await manager.connect_table(websocket, table_id)
    try:
        while True:
            await websocket.receive_text()
    except WebSocketDisconnect:
        manager.disconnect_table(websocket, table_id)


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO, stream=sys.stdout)
    uvicorn.run("main:app", host="0.0.0.0", port=int(os.environ.get("PORT", 8000)), reload=True)
