"""Tests for SmartMenuClient against a mocked API."""

import httpx
import pytest
import respx

from api_client import ApiError, SessionExpiredError, SmartMenuClient, TokenStore

BASE_URL = "https://smartmenu.test"


@pytest.fixture
def store(tmp_path) -> TokenStore:
    return TokenStore(str(tmp_path / "session.json"))


@pytest.fixture
def api(store) -> SmartMenuClient:
    with SmartMenuClient(BASE_URL + "/", store) as c:
        yield c


@respx.mock
def test_login_saves_session(api, store):
    route = respx.post(f"{BASE_URL}/api/auth/login").mock(return_value=httpx.Response(200, json={
        "token": "jwt-abc", "type": "Bearer", "id": 7, "username": "mama_lishe",
        "email": "mama@example.com", "role": "ROLE_ADMIN",
    }))

    api.login("mama_lishe", "secret123")

    assert route.called
    assert "Authorization" not in route.calls.last.request.headers
    assert store.token == "jwt-abc"
    assert store.get("user_id") == 7
    assert api.is_authenticated()


@respx.mock
def test_bearer_token_is_sent(api, store):
    store.save(jwt_token="jwt-abc")
    route = respx.get(f"{BASE_URL}/api/dashboard/stats").mock(
        return_value=httpx.Response(200, json={"total_orders": 3})
    )

    assert api.dashboard_stats() == {"total_orders": 3}
    assert route.calls.last.request.headers["Authorization"] == "Bearer jwt-abc"


@respx.mock
def test_unauthorized_clears_session(api, store):
    store.save(jwt_token="expired")
    respx.get(f"{BASE_URL}/api/orders").mock(return_value=httpx.Response(401, json={"detail": "Not authenticated"}))

    with pytest.raises(SessionExpiredError) as exc_info:
        api.list_orders()

    assert exc_info.value.status_code == 401
    assert store.token is None


@respx.mock
def test_failed_login_is_a_plain_api_error(api):
    respx.post(f"{BASE_URL}/api/auth/login").mock(
        return_value=httpx.Response(401, json={"detail": "Invalid username or password"})
    )

    with pytest.raises(ApiError) as exc_info:
        api.login("mama_lishe", "wrong")

    assert not isinstance(exc_info.value, SessionExpiredError)
    assert exc_info.value.message == "Invalid username or password"


@respx.mock
def test_validation_errors_are_exposed(api, store):
    store.save(jwt_token="jwt-abc")
    respx.post(f"{BASE_URL}/api/menu-items").mock(return_value=httpx.Response(400, json={
        "errors": ["Name is required", "Price must be greater than 0"],
    }))

    with pytest.raises(ApiError) as exc_info:
        api.create_menu_item(name="", price=0, category="Mains")

    assert exc_info.value.status_code == 400
    assert exc_info.value.errors == ["Name is required", "Price must be greater than 0"]
    assert exc_info.value.message == "Name is required; Price must be greater than 0"


@respx.mock
def test_params_skip_missing_values(api, store):
    store.save(jwt_token="jwt-abc")
    route = respx.get(f"{BASE_URL}/api/feedback").mock(return_value=httpx.Response(200, json={"entries": []}))

    api.list_feedback(rating=5)

    params = dict(route.calls.last.request.url.params)
    assert params == {"page": "1", "size": "10", "rating": "5", "sort_by": "date_desc"}


@respx.mock
def test_no_content_and_binary_responses(api, store):
    store.save(jwt_token="jwt-abc")
    respx.delete(f"{BASE_URL}/api/tables/3").mock(return_value=httpx.Response(204))
    respx.get(f"{BASE_URL}/qr/abc.png").mock(
        return_value=httpx.Response(200, content=b"\x89PNG...", headers={"content-type": "image/png"})
    )

    assert api.delete_table(3) is None
    assert api.qr_code_png("abc") == b"\x89PNG..."


def test_token_store_survives_corrupt_file(store):
    with open(store.path, "w", encoding="utf-8") as f:
        f.write("{not json")
    assert store.load() == {}

    store.save(jwt_token="t", unexpected="ignored")
    assert store.load() == {"jwt_token": "t"}
    store.clear()
    assert store.token is None
