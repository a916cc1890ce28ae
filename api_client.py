# api_client.py
"""
Small synchronous client for the SmartMenu REST API.

The JWT and the signed-in user's details are cached in a JSON file so a
script can log in once and keep calling the API until the token expires.
Any 401 wipes the cache and raises SessionExpiredError.
"""

import json
import logging
import os
from datetime import date
from typing import Any, Dict, List, Optional

import httpx

logger = logging.getLogger(__name__)

SESSION_KEYS = ("jwt_token", "user_id", "username", "email", "role")


class ApiError(Exception):
    def __init__(self, message: str, status_code: int, errors: Optional[List[str]] = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.errors = errors or []


class SessionExpiredError(ApiError):
    def __init__(self, message: str = "Session expired, please sign in again"):
        super().__init__(message, 401)


class TokenStore:
    """Persists the session values in a JSON file."""

    def __init__(self, path: str):
        self.path = path

    def load(self) -> Dict[str, Any]:
        if not os.path.exists(self.path):
            return {}
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, ValueError) as e:
            logger.warning(f"Ignoring unreadable token store {self.path}: {e}")
            return {}
        return data if isinstance(data, dict) else {}

    def save(self, **values) -> None:
        data = self.load()
        data.update({k: v for k, v in values.items() if k in SESSION_KEYS})
        with open(self.path, "w", encoding="utf-8") as f:
            json.dump(data, f)

    def get(self, key: str) -> Any:
        return self.load().get(key)

    @property
    def token(self) -> Optional[str]:
        return self.get("jwt_token")

    def clear(self) -> None:
        if os.path.exists(self.path):
            os.remove(self.path)


class SmartMenuClient:
    def __init__(self, base_url: str, store: TokenStore, http_client: Optional[httpx.Client] = None):
        self.base_url = base_url.rstrip("/")
        self.store = store
        self._client = http_client or httpx.Client(timeout=30.0)
        self._owns_client = http_client is None

    def close(self) -> None:
        if self._owns_client:
            self._client.close()

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        self.close()

    # --- transport ---

    def _request(self, method: str, path: str, auth: bool = True, **kwargs) -> Any:
        headers = kwargs.pop("headers", {})
        token = self.store.token if auth else None
        if token:
            headers["Authorization"] = f"Bearer {token}"
        if "params" in kwargs:
            kwargs["params"] = {k: v for k, v in kwargs["params"].items() if v is not None}

        response = self._client.request(method, f"{self.base_url}{path}", headers=headers, **kwargs)

        if response.status_code == 401:
            self.store.clear()
            if auth:
                raise SessionExpiredError()
        if response.status_code >= 400:
            raise self._error(response)
        if response.status_code == 204 or not response.content:
            return None
        if response.headers.get("content-type", "").startswith("application/json"):
            return response.json()
        return response.content

    @staticmethod
    def _error(response: httpx.Response) -> ApiError:
        try:
            body = response.json()
        except ValueError:
            return ApiError(response.text or response.reason_phrase, response.status_code)
        errors = body.get("errors") or []
        message = body.get("detail") or body.get("message") or "; ".join(errors) or response.reason_phrase
        return ApiError(str(message), response.status_code, errors)

    # --- auth ---

    def login(self, username: str, password: str) -> dict:
        data = self._request("POST", "/api/auth/login", auth=False,
                             json={"username": username, "password": password})
        self.store.save(jwt_token=data["token"], user_id=data["id"], username=data["username"],
                        email=data["email"], role=data["role"])
        logger.info(f"Signed in as {data['username']}")
        return data

    def register(self, username: str, email: str, password: str, **profile) -> dict:
        return self._request("POST", "/api/auth/register", auth=False,
                             json={"username": username, "email": email, "password": password, **profile})

    def logout(self) -> None:
        self.store.clear()

    def is_authenticated(self) -> bool:
        return bool(self.store.token)

    def me(self) -> dict:
        return self._request("GET", "/api/auth/me")

    # --- menu items ---

    def list_menu_items(self, available: Optional[bool] = None, category: Optional[str] = None) -> list:
        params = {"available": None if available is None else str(available).lower(), "category": category}
        return self._request("GET", "/api/menu-items", params=params)

    def get_menu_item(self, item_id: int) -> dict:
        return self._request("GET", f"/api/menu-items/{item_id}")

    def create_menu_item(self, **fields) -> dict:
        return self._request("POST", "/api/menu-items", json=fields)

    def update_menu_item(self, item_id: int, **fields) -> dict:
        return self._request("PUT", f"/api/menu-items/{item_id}", json=fields)

    def toggle_menu_item(self, item_id: int) -> dict:
        return self._request("PATCH", f"/api/menu-items/{item_id}/toggle")

    def delete_menu_item(self, item_id: int) -> None:
        self._request("DELETE", f"/api/menu-items/{item_id}")

    def upload_menu_item_image(self, item_id: int, filename: str, content: bytes, content_type: str) -> dict:
        return self._request("POST", f"/api/menu-items/{item_id}/image",
                             files={"file": (filename, content, content_type)})

    def categories(self) -> list:
        return self._request("GET", "/api/menu-items/categories")

    # --- daily menu ---

    def daily_menu(self, menu_date: Optional[date] = None) -> list:
        return self._request("GET", "/api/daily-menu",
                             params={"date": menu_date.isoformat() if menu_date else None})

    def add_daily_entry(self, menu_item_id: int, menu_date: Optional[date] = None,
                        special_price=None, is_available: bool = True) -> dict:
        payload = {"menu_item_id": menu_item_id, "special_price": special_price, "is_available": is_available}
        if menu_date:
            payload["menu_date"] = menu_date.isoformat()
        return self._request("POST", "/api/daily-menu", json=payload)

    def update_daily_entry(self, entry_id: int, **fields) -> dict:
        """Sends only the given fields; `special_price=None` clears the special price."""
        return self._request("PUT", f"/api/daily-menu/{entry_id}", json=fields)

    def delete_daily_entry(self, entry_id: int) -> None:
        self._request("DELETE", f"/api/daily-menu/{entry_id}")

    # --- orders ---

    def list_orders(self, status: Optional[str] = None, q: Optional[str] = None, page: int = 1, size: int = 10) -> dict:
        return self._request("GET", "/api/orders", params={"status": status, "q": q, "page": page, "size": size})

    def get_order(self, order_id: int) -> dict:
        return self._request("GET", f"/api/orders/{order_id}")

    def update_order(self, order_id: int, status: Optional[str] = None, payment_status: Optional[str] = None) -> dict:
        return self._request("PUT", f"/api/orders/{order_id}",
                             json={"status": status, "payment_status": payment_status})

    def delete_order(self, order_id: int) -> None:
        self._request("DELETE", f"/api/orders/{order_id}")

    def pending_orders_count(self) -> int:
        return self._request("GET", "/api/orders/pending/count")["count"]

    # --- feedback ---

    def list_feedback(self, page: int = 1, size: int = 10, rating: Optional[int] = None,
                      order_number: Optional[str] = None, start_date: Optional[date] = None,
                      end_date: Optional[date] = None, sort_by: str = "date_desc") -> dict:
        params = {
            "page": page, "size": size, "rating": rating, "order_number": order_number,
            "start_date": start_date.isoformat() if start_date else None,
            "end_date": end_date.isoformat() if end_date else None,
            "sort_by": sort_by,
        }
        return self._request("GET", "/api/feedback", params=params)

    def feedback_stats(self) -> dict:
        return self._request("GET", "/api/feedback/stats")

    def delete_feedback(self, feedback_id: int) -> None:
        self._request("DELETE", f"/api/feedback/{feedback_id}")

    # --- tables ---

    def list_tables(self) -> list:
        return self._request("GET", "/api/tables")

    def create_table(self, table_number: str, is_room: bool = False, location: Optional[str] = None) -> dict:
        return self._request("POST", "/api/tables",
                             json={"table_number": table_number, "is_room": is_room, "location": location})

    def update_table(self, table_id: int, **fields) -> dict:
        return self._request("PUT", f"/api/tables/{table_id}", json=fields)

    def delete_table(self, table_id: int) -> None:
        self._request("DELETE", f"/api/tables/{table_id}")

    def qr_code_png(self, qr_code_id: str) -> bytes:
        return self._request("GET", f"/qr/{qr_code_id}.png", auth=False)

    # --- dashboard and reports ---

    def dashboard_stats(self) -> dict:
        return self._request("GET", "/api/dashboard/stats")

    def recent_orders(self) -> list:
        return self._request("GET", "/api/dashboard/recent-orders")

    def top_items(self) -> list:
        return self._request("GET", "/api/dashboard/top-items")

    def recent_feedback(self) -> list:
        return self._request("GET", "/api/dashboard/recent-feedback")

    def report(self, date_from: Optional[date] = None, date_to: Optional[date] = None) -> dict:
        return self._request("GET", "/api/reports", params={
            "date_from": date_from.isoformat() if date_from else None,
            "date_to": date_to.isoformat() if date_to else None,
        })

    # --- settings ---

    def settings(self) -> dict:
        return self._request("GET", "/api/settings")

    def update_profile(self, **fields) -> dict:
        return self._request("PUT", "/api/settings/profile", json=fields)

    def update_restaurant_settings(self, **fields) -> dict:
        return self._request("PUT", "/api/settings/restaurant", json=fields)

    def update_preferences(self, **fields) -> dict:
        return self._request("PUT", "/api/settings/preferences", json=fields)

    def change_password(self, current_password: str, new_password: str, confirm_password: str) -> dict:
        return self._request("PUT", "/api/settings/password", json={
            "current_password": current_password,
            "new_password": new_password,
            "confirm_password": confirm_password,
        })

    # --- public customer endpoints ---

    def public_table(self, table_id: int) -> dict:
        return self._request("GET", f"/api/public/table/{table_id}", auth=False)

    def public_menu(self, table_id: int, device_id: Optional[str] = None) -> dict:
        return self._request("GET", f"/api/public/menu/{table_id}", auth=False, params={"device_id": device_id})

    def track_session(self, device_id: str, table_id: int, customer_name: Optional[str] = None,
                      customer_phone: Optional[str] = None) -> dict:
        return self._request("POST", "/api/public/session", auth=False, json={
            "device_id": device_id, "table_id": table_id,
            "customer_name": customer_name, "customer_phone": customer_phone,
        })

    def get_session(self, device_id: str) -> dict:
        return self._request("GET", f"/api/public/session/{device_id}", auth=False)

    def place_order(self, table_id: int, items: List[dict], device_id: Optional[str] = None,
                    customer_name: Optional[str] = None, customer_notes: Optional[str] = None) -> dict:
        return self._request("POST", "/api/public/order", auth=False, json={
            "table_id": table_id, "items": items, "device_id": device_id,
            "customer_name": customer_name, "customer_notes": customer_notes,
        })

    def order_status(self, order_number: str) -> dict:
        return self._request("GET", f"/api/public/order/{order_number}", auth=False)

    def submit_feedback(self, order_number: str, rating: int, comments: Optional[str] = None) -> dict:
        return self._request("POST", "/api/public/feedback", auth=False,
                             json={"order_number": order_number, "rating": rating, "comments": comments})
