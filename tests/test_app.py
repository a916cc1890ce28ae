from starlette.requests import Request

from translations import get_language, language_switcher, t


def make_request(cookie: str = "") -> Request:
    headers = [(b"cookie", cookie.encode())] if cookie else []
    return Request({"type": "http", "method": "GET", "path": "/", "headers": headers, "query_string": b""})


def test_translation_fallbacks():
    assert t("orders", "sw") != t("orders", "en")
    assert t("orders", "de") == t("orders", "en")
    assert t("no_such_key", "sw") == "no_such_key"


def test_language_from_cookie():
    assert get_language(make_request()) == "en"
    assert get_language(make_request("language=fr")) == "fr"
    assert get_language(make_request("language=xx")) == "en"


def test_language_switcher_marks_current():
    links = language_switcher("sw", "/customer-menu?table=1")
    assert 'href="/language/sw?next=%2Fcustomer-menu%3Ftable%3D1" class="active"' in links


def test_health(client):
    assert client.get("/api/health").json() == {"status": "UP", "service": "SmartMenu"}


def test_switch_language(client):
    res = client.get("/language/sw", params={"next": "/customer-menu?table=1"}, follow_redirects=False)
    assert res.status_code == 303
    assert res.headers["location"] == "/customer-menu?table=1"
    assert res.cookies.get("language") == "sw"

    res = client.get("/language/fr", params={"next": "//evil.example.com"}, follow_redirects=False)
    assert res.headers["location"] == "/admin"

    res = client.get("/language/xx", follow_redirects=False)
    assert "language" not in res.cookies


def test_unknown_api_route_is_json_404(client):
    res = client.get("/api/nothing-here")
    assert res.status_code == 404
    assert res.json() == {"detail": "Not Found"}
