"""
End-to-end tests through the FastAPI app on the in-memory backend.
"""

from conftest import sign_in

SIGNUP = {"email": "jane@example.com", "password": "securePass123", "display_name": "Jane Doe"}
CONTACT = {"name": "Alice Smith", "email": "alice@example.com", "phone": "98765 43210", "company": "Acme Inc"}


def _png(name="me.png"):
    return {"file": (name, b"\x89PNG\r\n\x1a\n", "image/png")}


def test_health(client):
    assert client.get("/health").json() == {"status": "healthy"}
    assert client.get("/").json()["endpoints"]["contacts"] == "/api/v1/contacts"


# -----------------------------------------------------------------------------
# Auth
# -----------------------------------------------------------------------------


def test_signup_with_otp(client, store):
    response = client.post("/api/v1/auth/signup", json=SIGNUP)
    assert response.status_code == 202
    assert response.json()["step"] == "awaiting_otp"
    code = store.last_otp(SIGNUP["email"])

    verify = {**SIGNUP, "code": code}
    response = client.post("/api/v1/auth/verify-otp", json=verify)
    assert response.status_code == 200, response.text
    body = response.json()
    assert body["user"]["email"] == SIGNUP["email"]
    assert body["user"]["display_name"] == "Jane Doe"
    assert body["message"] == "Your email has been verified and account is ready."

    response = client.post(
        "/api/v1/auth/signin",
        json={"email": SIGNUP["email"], "password": SIGNUP["password"]},
    )
    assert response.status_code == 200


def test_verify_with_wrong_code(client, store):
    client.post("/api/v1/auth/signup", json=SIGNUP)
    code = store.last_otp(SIGNUP["email"])
    wrong = str((int(code[0]) + 1) % 10) + code[1:]
    response = client.post("/api/v1/auth/verify-otp", json={**SIGNUP, "code": wrong})
    assert response.status_code == 400
    assert response.json()["detail"] == "Token has expired or is invalid"


def test_resend_otp(client, store):
    client.post("/api/v1/auth/signup", json=SIGNUP)
    response = client.post("/api/v1/auth/resend-otp", json={"email": SIGNUP["email"]})
    assert response.status_code == 200
    assert len(store.outbox) == 2


def test_signup_rejects_short_password(client):
    response = client.post("/api/v1/auth/signup", json={**SIGNUP, "password": "123"})
    assert response.status_code == 422


def test_signin_with_wrong_password(client, store):
    store.create_user("owner@example.com", "secret123", "Owner")
    response = client.post("/api/v1/auth/signin", json={"email": "owner@example.com", "password": "nope"})
    assert response.status_code == 401
    assert response.json()["detail"] == "Invalid email or password. Please try again."


def test_me_and_state(client, store):
    assert client.get("/api/v1/auth/me").status_code == 401
    assert client.get("/api/v1/auth/state").json()["status"] == "anonymous"

    headers = sign_in(client, store)
    me = client.get("/api/v1/auth/me", headers=headers).json()
    assert me["email"] == "owner@example.com"
    assert me["display_name"] == "Owner"
    state = client.get("/api/v1/auth/state", headers=headers).json()
    assert state["status"] == "authenticated"
    assert state["user"]["id"] == me["id"]


def test_route_decisions(client, store):
    assert client.get("/api/v1/auth/route", params={"page": "home"}).json()["decision"] == "redirect_to_auth"
    assert client.get("/api/v1/auth/route", params={"page": "privacy"}).json()["decision"] == "allow"
    headers = sign_in(client, store)
    response = client.get("/api/v1/auth/route", params={"page": "auth"}, headers=headers)
    assert response.json()["decision"] == "redirect_home"


def test_invalid_token_is_unauthenticated(client):
    response = client.get("/api/v1/contacts", headers={"Authorization": "Bearer garbage"})
    assert response.status_code == 401


def test_refresh_token_header_restores_session(client, store):
    record = store.create_user("owner@example.com", "secret123", "Owner")
    issued = store.issue_session(record)
    response = client.get(
        "/api/v1/auth/me",
        headers={"Authorization": "Bearer expired", "X-Refresh-Token": issued.refresh_token},
    )
    assert response.status_code == 200
    assert response.json()["id"] == record.id


def test_signout(client, store):
    headers = sign_in(client, store)
    response = client.post("/api/v1/auth/signout", headers=headers)
    assert response.status_code == 200
    assert response.json()["message"] == "You have been signed out successfully."
    assert client.get("/api/v1/contacts", headers=headers).status_code == 401
    assert client.get("/api/v1/auth/state", headers=headers).json()["status"] == "anonymous"
    assert client.post("/api/v1/auth/signout").status_code == 401


# -----------------------------------------------------------------------------
# Contacts
# -----------------------------------------------------------------------------


def test_contacts_require_auth(client):
    response = client.get("/api/v1/contacts")
    assert response.status_code == 401
    assert response.json()["detail"] == "Not authenticated"


def test_contact_lifecycle(client, store):
    headers = sign_in(client, store)

    response = client.post("/api/v1/contacts", json=CONTACT, headers=headers)
    assert response.status_code == 201, response.text
    created = response.json()
    assert created["country_code"] == "+91"
    assert created["address"] is None
    assert "user_id" not in created

    response = client.patch(f"/api/v1/contacts/{created['id']}", json={"company": "Globex"}, headers=headers)
    assert response.status_code == 200
    assert response.json()["company"] == "Globex"
    assert response.json()["name"] == "Alice Smith"

    listed = client.get("/api/v1/contacts", headers=headers).json()
    assert [c["company"] for c in listed["contacts"]] == ["Globex"]

    response = client.delete(f"/api/v1/contacts/{created['id']}", headers=headers)
    assert response.status_code == 200
    assert response.json()["message"] == "The contact has been removed."
    assert client.get("/api/v1/contacts", headers=headers).json()["total"] == 0

    response = client.delete(f"/api/v1/contacts/{created['id']}", headers=headers)
    assert response.status_code == 404


def test_create_reports_all_field_errors(client, store):
    headers = sign_in(client, store)
    response = client.post("/api/v1/contacts", json={"name": "", "email": "bad", "phone": "12"}, headers=headers)
    assert response.status_code == 422
    assert set(response.json()["errors"]) == {"name", "email", "phone"}
    assert client.get("/api/v1/contacts", headers=headers).json()["total"] == 0


def test_validate_endpoint(client):
    response = client.post("/api/v1/contacts/validate", json={**CONTACT, "message": "x" * 1001})
    assert response.json() == {
        "errors": {"message": "Message must be less than 1000 characters"},
        "submittable": False,
    }


def test_list_search_and_sort(client, store):
    headers = sign_in(client, store)
    for name in ("Charlie", "alice", "Bob"):
        client.post("/api/v1/contacts", json={**CONTACT, "name": name}, headers=headers)

    body = client.get("/api/v1/contacts", params={"sort": "name-desc"}, headers=headers).json()
    assert [c["name"] for c in body["contacts"]] == ["Charlie", "Bob", "alice"]
    assert body["sort_label"] == "Z → A"
    assert body["next_sort"] == "date-desc"

    body = client.get("/api/v1/contacts", params={"search": "BOB"}, headers=headers).json()
    assert [c["name"] for c in body["contacts"]] == ["Bob"]
    assert body["total"] == 3

    assert client.get("/api/v1/contacts", params={"sort": "size"}, headers=headers).status_code == 422


def test_contacts_are_private(client, store):
    owner = sign_in(client, store)
    created = client.post("/api/v1/contacts", json=CONTACT, headers=owner).json()

    other = sign_in(client, store, email="other@example.com", password="other123")
    assert client.get("/api/v1/contacts", headers=other).json()["contacts"] == []
    response = client.patch(f"/api/v1/contacts/{created['id']}", json={"name": "Mine now"}, headers=other)
    assert response.status_code == 404


def test_contact_photo(client, store):
    headers = sign_in(client, store)
    response = client.post("/api/v1/contacts/photo", files=_png(), headers=headers)
    assert response.status_code == 201
    url = response.json()["url"]

    created = client.post("/api/v1/contacts", json={**CONTACT, "photo_url": url}, headers=headers).json()
    assert created["photo_url"] == url

    response = client.delete(f"/api/v1/contacts/{created['id']}/photo", headers=headers)
    assert response.json()["photo_url"] is None


def test_contact_photo_must_be_an_image(client, store):
    headers = sign_in(client, store)
    files = {"file": ("notes.txt", b"hello", "text/plain")}
    response = client.post("/api/v1/contacts/photo", files=files, headers=headers)
    assert response.status_code == 400
    assert response.json()["detail"] == "Please select an image file."


# -----------------------------------------------------------------------------
# Profile, countries, settings
# -----------------------------------------------------------------------------


def test_profile(client, store):
    headers = sign_in(client, store)
    assert client.get("/api/v1/profile", headers=headers).json()["display_name"] == "Owner"

    response = client.patch("/api/v1/profile", json={"display_name": "  Jane  "}, headers=headers)
    assert response.json()["display_name"] == "Jane"

    response = client.post("/api/v1/profile/avatar", files=_png(), headers=headers)
    assert response.status_code == 201
    assert response.json()["avatar_url"].endswith(".png")

    response = client.delete("/api/v1/profile/avatar", headers=headers)
    assert response.json()["avatar_url"] is None


def test_countries(client):
    countries = client.get("/api/v1/countries").json()
    assert len(countries) == 59
    assert client.get("/api/v1/countries/default").json()["code"] == "IN"
    assert client.get("/api/v1/countries/lookup", params={"dial_code": "+44"}).json()["code"] == "GB"
    assert client.get("/api/v1/countries/lookup", params={"code": "jp"}).json()["dial_code"] == "+81"
    assert client.get("/api/v1/countries/lookup").status_code == 400
    assert client.get("/api/v1/countries/lookup", params={"code": "XX"}).status_code == 404


def test_theme_preference(client):
    assert client.put("/api/v1/settings/theme", json={"theme": "dark"}).json() == {"theme": "dark"}
    assert client.get("/api/v1/settings/theme").json() == {"theme": "dark"}
    assert client.put("/api/v1/settings/theme", json={"theme": "sepia"}).status_code == 422
