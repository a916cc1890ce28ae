from conftest import login, register


def test_get_settings_has_defaults(client, owner):
    data = client.get("/api/settings", headers=owner).json()
    assert data["profile"]["username"] == "mama_lishe"
    assert data["profile"]["restaurant_name"] == "Mama Lishe Kitchen"
    assert data["restaurant"]["currency"] == "TSH"
    assert data["restaurant"]["vat_rate"] == 18.0
    assert data["restaurant"]["allow_online_orders"] is True
    assert data["preferences"]["language"] == "en"
    assert data["preferences"]["date_format"] == "DD/MM/YYYY"


def test_update_profile(client, owner):
    res = client.put("/api/settings/profile", json={"first_name": " Asha ", "email": "ASHA@Example.com"},
                     headers=owner)
    assert res.status_code == 200
    assert res.json()["first_name"] == "Asha"
    assert res.json()["email"] == "asha@example.com"

    res = client.put("/api/settings/profile", json={"email": "not-an-email"}, headers=owner)
    assert res.status_code == 400


def test_profile_email_must_be_unique(client, owner, other_owner):
    res = client.put("/api/settings/profile", json={"email": "baba_chips@example.com"}, headers=owner)
    assert res.status_code == 400
    assert res.json()["errors"] == ["Error: Email is already in use!"]


def test_change_password(client, owner):
    res = client.put("/api/settings/password", json={
        "current_password": "wrong", "new_password": "newsecret", "confirm_password": "newsecret"}, headers=owner)
    assert res.json()["errors"] == ["Current password is incorrect"]

    res = client.put("/api/settings/password", json={
        "current_password": "secret123", "new_password": "newsecret", "confirm_password": "other"}, headers=owner)
    assert res.json()["errors"] == ["New passwords do not match"]

    res = client.put("/api/settings/password", json={
        "current_password": "secret123", "new_password": "newsecret", "confirm_password": "newsecret"}, headers=owner)
    assert res.status_code == 200
    assert res.json() == {"message": "Password changed successfully"}

    assert client.post("/api/auth/login", json={"username": "mama_lishe", "password": "secret123"}).status_code == 401
    login(client, password="newsecret")


def test_update_restaurant(client, owner):
    res = client.put("/api/settings/restaurant", json={
        "currency": "KES", "vat_rate": "16", "service_charge": 5, "opening_time": "07:30"}, headers=owner)
    assert res.status_code == 200
    data = res.json()
    assert data["currency"] == "KES"
    assert data["vat_rate"] == 16.0
    assert data["service_charge"] == 5.0
    assert data["opening_time"] == "07:30"
    assert data["closing_time"] == "22:00"


def test_restaurant_validation(client, owner):
    res = client.put("/api/settings/restaurant", json={"vat_rate": 101, "closing_time": "25:00"}, headers=owner)
    assert res.status_code == 400
    assert res.json()["errors"] == [
        "VAT rate must be between 0 and 100",
        "Closing time must use the HH:MM format",
    ]


def test_update_preferences(client, owner):
    res = client.put("/api/settings/preferences", json={"language": "sw", "time_format": "12h",
                                                         "sms_notifications": True}, headers=owner)
    assert res.status_code == 200
    assert res.json()["language"] == "sw"
    assert res.json()["time_format"] == "12h"
    assert res.json()["sms_notifications"] is True

    res = client.put("/api/settings/preferences", json={"language": "de", "date_format": "DD.MM.YY"}, headers=owner)
    assert len(res.json()["errors"]) == 2


def test_settings_are_per_owner(client, owner):
    register(client, username="baba_chips")
    other = login(client, "baba_chips")
    client.put("/api/settings/restaurant", json={"currency": "USD"}, headers=owner)
    assert client.get("/api/settings", headers=other).json()["restaurant"]["currency"] == "TSH"


def test_settings_pages(client, owner):
    client.cookies.set("access_token", owner["Authorization"].split()[1])
    page = client.post("/admin/settings/restaurant", data={"currency": "UGX", "vat_rate": "18",
                                                           "allow_online_orders": "true"})
    assert page.status_code == 200
    assert "Restaurant settings saved" in page.text
    assert 'value="UGX"' in page.text

    page = client.post("/admin/settings/password", data={"current_password": "nope", "new_password": "abcdef",
                                                         "confirm_password": "abcdef"})
    assert "Current password is incorrect" in page.text


def test_preferences_form_sets_language_cookie(client, owner):
    client.cookies.set("access_token", owner["Authorization"].split()[1])
    res = client.post("/admin/settings/preferences", data={"language": "sw", "date_format": "YYYY-MM-DD",
                                                           "time_format": "24h"}, follow_redirects=False)
    assert res.status_code == 303
    assert res.cookies.get("language") == "sw"
